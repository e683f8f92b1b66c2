# Routes package init
"""
ScanPlant Backend — API Routes Package
========================================

What:  HTTP route handlers.

Route Inventory:
    - plants.py:         /api/plants         catalog, search, proximity, CRUD with photo
    - comments.py:       /api/comments       comment threads
    - reminders.py:      /api/reminders      reminders, views, statistics
    - notifications.py:  /api/notifications  inbox, dispatch, read state
    - files.py:          GET /files/{name}   stored plant photos
    - health.py:         GET /health         service health check

Routes stay thin: they read the request, resolve the Caller, call a service
and turn a None/False result into NotFoundError (404).
"""
