from pydantic import Field, field_validator
from typing import List, Optional
from uuid import UUID
from datetime import datetime
from app.schemas.common import CamelModel, sanitize_input


class ServiceModuleBase(CamelModel):
    name: str = Field(..., min_length=1, max_length=100, examples=["Ceramic Coating"])
    description: Optional[str] = Field(None, examples=["Professional ceramic coating application"])
    price: float = Field(..., gt=0, examples=[1250.00])
    duration_hours: Optional[int] = Field(None, ge=0, examples=[6])
    category: str = Field(..., min_length=1, max_length=50, examples=["protection"])

    @field_validator("name", "description", "category", mode="before")
    @classmethod
    def clean_text(cls, v):
        return sanitize_input(v)


class ServiceModuleCreate(ServiceModuleBase):
    pass


class ServiceModuleResponse(ServiceModuleBase):
    id: UUID
    is_active: bool
    created_at: Optional[datetime] = None


class ServicePackageBase(CamelModel):
    name: str = Field(..., min_length=1, max_length=100, examples=["Premium Detail"])
    description: Optional[str] = Field(None, examples=["Full interior and exterior detail with wax"])
    base_price: float = Field(..., gt=0, examples=[350.00])
    duration_hours: Optional[int] = Field(None, ge=0, examples=[4])
    category: str = Field(..., min_length=1, max_length=50, examples=["premium"])

    @field_validator("name", "description", "category", mode="before")
    @classmethod
    def clean_text(cls, v):
        return sanitize_input(v)


class ServicePackageCreate(ServicePackageBase):
    module_ids: List[UUID] = Field(default_factory=list)


class ServicePackageResponse(ServicePackageBase):
    id: UUID
    is_active: bool
    created_at: Optional[datetime] = None
    modules: List[ServiceModuleResponse] = Field(default_factory=list)
