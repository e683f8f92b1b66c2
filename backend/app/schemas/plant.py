"""
ScanPlant Backend — Plant Request/Response Schemas
====================================================

What:  Pydantic models for the plant catalog API contract.
How:   Plant create/update arrive as multipart forms (the photo travels with
       the fields), so PlantData is assembled by the route from form fields
       and handed to PlantService. scientific_name is optional at the schema
       level on purpose: PlantService rejects a blank name with a
       ValidationError (400) before touching the blob store.
"""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class PlantData(BaseModel):
    """Editable plant fields, shared by create and update."""
    scientific_name: Optional[str] = Field(default=None, max_length=255)
    common_name: Optional[str] = Field(default=None, max_length=255)
    wiki_description: Optional[str] = None
    wiki_url: Optional[str] = Field(default=None, max_length=512)
    family: Optional[str] = Field(default=None, max_length=255)
    genus: Optional[str] = Field(default=None, max_length=255)
    care_instructions: Optional[str] = None
    enhanced_description: Optional[str] = None
    latitude: float = Field(default=0.0, description="WGS-84 latitude in degrees")
    longitude: float = Field(default=0.0, description="WGS-84 longitude in degrees")
    location_name: Optional[str] = Field(default=None, max_length=255)
    city_name: Optional[str] = Field(default=None, max_length=255)


class PlantResponse(BaseModel):
    """
    What:  Full representation of a plant record.
    Who:   Returned by every catalog endpoint (single item or list items).
    """
    id: uuid.UUID = Field(description="Unique plant identifier (UUID)")
    image_url: str = Field(description="Blob store reference of the photo")
    scientific_name: str
    common_name: Optional[str] = None
    wiki_description: Optional[str] = None
    wiki_url: Optional[str] = None
    family: Optional[str] = None
    genus: Optional[str] = None
    care_instructions: Optional[str] = None
    enhanced_description: Optional[str] = None
    latitude: float
    longitude: float
    location_name: Optional[str] = None
    city_name: Optional[str] = None
    created_at: datetime = Field(description="When the plant was registered (UTC ISO 8601)")
    user_id: str = Field(description="Owner id")

    model_config = {"from_attributes": True}
