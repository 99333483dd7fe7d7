from datetime import date, datetime
from pydantic import Field, field_validator
from typing import Optional
from uuid import UUID
from app.schemas.common import CamelModel, sanitize_input


class VehicleCreate(CamelModel):
    make: str = Field(..., min_length=1, max_length=50)
    model: str = Field(..., min_length=1, max_length=100)
    year: int = Field(..., ge=1900)
    color: Optional[str] = Field(None, max_length=30)
    license_plate: Optional[str] = Field(None, max_length=20)
    vin: Optional[str] = Field(None, pattern=r"^[A-HJ-NPR-Za-hj-npr-z0-9]{17}$")
    notes: Optional[str] = Field(None, max_length=1000)

    @field_validator("make", "model", "color", "license_plate", "notes", mode="before")
    @classmethod
    def clean_text(cls, v):
        return sanitize_input(v)

    @field_validator("year")
    @classmethod
    def year_not_in_future(cls, v):
        if v > date.today().year + 1:
            raise ValueError("Year cannot be in the future")
        return v


class VehicleResponse(VehicleCreate):
    id: UUID
    user_id: Optional[UUID] = None
    created_at: Optional[datetime] = None
