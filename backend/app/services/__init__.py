# Services package init
"""
ScanPlant Backend — Services Layer
====================================

What:  Business logic between the routes (HTTP) and the database.
How:   Services take an AsyncSession plus the Caller, apply ownership and
       validation rules, flush their changes and return response schemas.
       Absent and not-permitted both come back as None/False; routes turn
       that into a 404.

Service Inventory:
    - ownership:            can_access() and the Caller value object
    - geo:                  haversine distance_km()
    - StorageService:       blob store for plant photos (validate, store, delete)
    - NotificationSender:   delivery channel interface + in-app implementation
    - UserService:          provisions users rows from caller identity
    - PlantService:         plant catalog, name and proximity search
    - CommentService:       comment threads on plants
    - ReminderService:      user-owned reminders, views and statistics
    - NotificationService:  notification inbox, dispatch and read state
"""
