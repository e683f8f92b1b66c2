"""
ScanPlant Backend — Plant Catalog Route Handlers
==================================================

What:  /api/plants endpoints: catalog listing, name and proximity search,
       single plant detail, and create / update / delete with photo upload.
How:   Create and update are multipart forms (photo + fields). Form fields
       are collected by `plant_form` into PlantData and handed to
       PlantService. A None/False result from the service becomes a 404.
Who:   Called by the mobile and web clients.

Read endpoints are public; /mine and every write require X-User-Id.
"""

import logging
import uuid
from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, Query, Response, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db_session
from app.dependencies import get_caller
from app.exceptions import NotFoundError
from app.schemas.common import ErrorResponse
from app.schemas.plant import PlantData, PlantResponse
from app.services.ownership import Caller
from app.services.plant_service import plant_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/plants", tags=["Plants"])


def plant_form(
    scientific_name: Optional[str] = Form(default=None, max_length=255),
    common_name: Optional[str] = Form(default=None, max_length=255),
    wiki_description: Optional[str] = Form(default=None),
    wiki_url: Optional[str] = Form(default=None, max_length=512),
    family: Optional[str] = Form(default=None, max_length=255),
    genus: Optional[str] = Form(default=None, max_length=255),
    care_instructions: Optional[str] = Form(default=None),
    enhanced_description: Optional[str] = Form(default=None),
    latitude: float = Form(default=0.0),
    longitude: float = Form(default=0.0),
    location_name: Optional[str] = Form(default=None, max_length=255),
    city_name: Optional[str] = Form(default=None, max_length=255),
) -> PlantData:
    return PlantData(
        scientific_name=scientific_name,
        common_name=common_name,
        wiki_description=wiki_description,
        wiki_url=wiki_url,
        family=family,
        genus=genus,
        care_instructions=care_instructions,
        enhanced_description=enhanced_description,
        latitude=latitude,
        longitude=longitude,
        location_name=location_name,
        city_name=city_name,
    )


# ── Reads ─────────────────────────────────────────────────────────────────


@router.get("", response_model=List[PlantResponse], summary="List all plants, newest first")
async def list_plants(db: AsyncSession = Depends(get_db_session)) -> List[PlantResponse]:
    return await plant_service.list_plants(db)


@router.get("/mine", response_model=List[PlantResponse], summary="List the caller's plants")
async def list_my_plants(
    caller: Caller = Depends(get_caller),
    db: AsyncSession = Depends(get_db_session),
) -> List[PlantResponse]:
    return await plant_service.list_by_owner(db, caller.user_id)


@router.get(
    "/nearby",
    response_model=List[PlantResponse],
    responses={400: {"description": "Negative radius", "model": ErrorResponse}},
    summary="Plants within a radius of a point",
)
async def list_nearby_plants(
    latitude: float = Query(..., description="Latitude of the search centre (degrees)"),
    longitude: float = Query(..., description="Longitude of the search centre (degrees)"),
    radius_km: Optional[float] = Query(default=None, description="Search radius in km (default 5)"),
    db: AsyncSession = Depends(get_db_session),
) -> List[PlantResponse]:
    return await plant_service.list_near(db, latitude, longitude, radius_km)


@router.get("/search", response_model=List[PlantResponse], summary="Search plants by name")
async def search_plants(
    term: Optional[str] = Query(default=None, description="Substring of the scientific or common name"),
    db: AsyncSession = Depends(get_db_session),
) -> List[PlantResponse]:
    return await plant_service.search_by_name(db, term)


@router.get(
    "/{plant_id}",
    response_model=PlantResponse,
    responses={404: {"description": "Plant not found", "model": ErrorResponse}},
    summary="Get a single plant",
)
async def get_plant(plant_id: uuid.UUID, db: AsyncSession = Depends(get_db_session)) -> PlantResponse:
    plant = await plant_service.get_plant(db, plant_id)
    if plant is None:
        raise NotFoundError(resource="plant", resource_id=str(plant_id))
    return plant


# ── Writes ────────────────────────────────────────────────────────────────


@router.post(
    "",
    status_code=201,
    response_model=PlantResponse,
    responses={400: {"description": "Missing name or invalid image", "model": ErrorResponse}},
    summary="Register a plant with its photo",
)
async def create_plant(
    image: Optional[UploadFile] = File(default=None, description="Plant photo (JPEG, PNG or WEBP)"),
    data: PlantData = Depends(plant_form),
    caller: Caller = Depends(get_caller),
    db: AsyncSession = Depends(get_db_session),
) -> PlantResponse:
    content = await image.read() if image is not None else None
    try:
        return await plant_service.create_plant(
            db, caller, data,
            image_name=image.filename if image is not None else None,
            image_content=content,
        )
    finally:
        if image is not None:
            await image.close()


@router.put(
    "/{plant_id}",
    response_model=PlantResponse,
    responses={404: {"description": "Plant not found", "model": ErrorResponse}},
    summary="Update a plant, optionally replacing its photo",
)
async def update_plant(
    plant_id: uuid.UUID,
    image: Optional[UploadFile] = File(default=None, description="New photo (optional)"),
    data: PlantData = Depends(plant_form),
    caller: Caller = Depends(get_caller),
    db: AsyncSession = Depends(get_db_session),
) -> PlantResponse:
    content = await image.read() if image is not None else None
    try:
        plant = await plant_service.update_plant(
            db, caller, plant_id, data,
            image_name=image.filename if image is not None else None,
            image_content=content,
        )
    finally:
        if image is not None:
            await image.close()
    if plant is None:
        raise NotFoundError(resource="plant", resource_id=str(plant_id))
    return plant


@router.delete(
    "/{plant_id}",
    status_code=204,
    responses={404: {"description": "Plant not found", "model": ErrorResponse}},
    summary="Delete a plant with its photo and comments",
)
async def delete_plant(
    plant_id: uuid.UUID,
    caller: Caller = Depends(get_caller),
    db: AsyncSession = Depends(get_db_session),
) -> Response:
    if not await plant_service.delete_plant(db, caller, plant_id):
        raise NotFoundError(resource="plant", resource_id=str(plant_id))
    return Response(status_code=204)
