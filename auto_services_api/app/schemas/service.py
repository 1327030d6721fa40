"""
Pydantic models for marketplace services.

A service is a tagged union: the base record below plus one bundle of
category-specific fields selected by ``category``.  The request schema
accepts every bundle's fields as optional so one endpoint can receive
any category; ``services.catalog`` then validates the payload against
the bundle model of the chosen category.
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field

from .common import RequestModel


class ServiceCategory(str, Enum):
    REMORQUAGE = "REMORQUAGE"
    MECANIQUE = "MECANIQUE"
    PIECE_AUTO = "PIECE_AUTO"
    LOCATION_VOITURE = "LOCATION_VOITURE"


class ServiceBase(RequestModel):
    title: str = Field(..., min_length=1, examples=["24/7 towing"])
    description: str = Field(..., min_length=1, examples=["Flatbed towing anywhere in the city"])
    location: str = Field(..., min_length=1, examples=["Oran"])
    price: float = Field(..., ge=0, examples=[3500])
    image: str = Field("no-photo.jpg", examples=["towing.jpg"])
    available: bool = Field(True, examples=[True])


# -- category bundles -------------------------------------------------------

class RemorquageFields(BaseModel):
    vehicle_type: str = Field(..., min_length=1, description="Please provide vehicle type")
    distance: Optional[float] = None
    urgency: Optional[str] = None


class PieceAutoFields(BaseModel):
    brand: str = Field(..., min_length=1, description="Please provide brand")
    model: str = Field(..., min_length=1, description="Please provide model")
    year: Optional[int] = None
    part_number: Optional[str] = None


class MecaniqueFields(BaseModel):
    repair_type: str = Field(..., min_length=1, description="Please provide repair type")
    estimated_time: Optional[str] = None
    tools_required: Optional[str] = None


class LocationVoitureFields(BaseModel):
    car_brand: str = Field(..., min_length=1, description="Please provide car brand")
    car_model: str = Field(..., min_length=1, description="Please provide car model")
    year: Optional[int] = None
    fuel_type: Optional[str] = None
    transmission: Optional[str] = None
    rental_duration: Optional[str] = None


class CategoryFieldsInput(RequestModel):
    """Union of every bundle's fields, all optional on the wire."""

    vehicle_type: Optional[str] = None
    distance: Optional[float] = None
    urgency: Optional[str] = None
    brand: Optional[str] = None
    model: Optional[str] = None
    year: Optional[int] = None
    part_number: Optional[str] = None
    repair_type: Optional[str] = None
    estimated_time: Optional[str] = None
    tools_required: Optional[str] = None
    car_brand: Optional[str] = None
    car_model: Optional[str] = None
    fuel_type: Optional[str] = None
    transmission: Optional[str] = None
    rental_duration: Optional[str] = None


class ServiceCreate(ServiceBase, CategoryFieldsInput):
    """Schema for creating a service.

    ``category`` is a free string: unknown categories are accepted and
    stored with the base fields only.
    """

    category: str = Field(..., min_length=1, examples=["REMORQUAGE"])


class ServiceUpdate(CategoryFieldsInput):
    """Schema for updating a service.

    All fields are optional; only provided fields are changed.  The
    category and owner of a service cannot be changed.
    """

    title: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = Field(None, min_length=1)
    location: Optional[str] = Field(None, min_length=1)
    price: Optional[float] = Field(None, ge=0)
    image: Optional[str] = None
    available: Optional[bool] = None
