import datetime as dt
import re
from pydantic import Field, field_validator
from typing import List, Optional
from uuid import UUID
from enum import Enum
from app.schemas.common import CamelModel, sanitize_input
from app.utils.booking_calendar import parse_time_label

DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")
MAX_TOTAL_PRICE = 999999.99


class BookingStatus(str, Enum):
    pending = "pending"
    confirmed = "confirmed"
    in_progress = "in_progress"
    completed = "completed"
    cancelled = "cancelled"


class BookingSortField(str, Enum):
    created_at = "created_at"
    updated_at = "updated_at"
    date = "date"
    status = "status"


class SortOrder(str, Enum):
    asc = "ASC"
    desc = "DESC"


def parse_booking_date(value):
    if isinstance(value, dt.date):
        return value
    if not isinstance(value, str) or not DATE_PATTERN.match(value):
        raise ValueError("Invalid date format, expected YYYY-MM-DD")
    try:
        parsed = dt.date.fromisoformat(value)
    except ValueError:
        raise ValueError("Invalid date format, expected YYYY-MM-DD")
    if parsed < dt.date.today():
        raise ValueError("Booking date cannot be in the past")
    return parsed


def parse_booking_time(value):
    if isinstance(value, dt.time):
        return value
    if not isinstance(value, str):
        raise ValueError("Invalid time format. Use HH:MM (24-hour) or hh:mm AM/PM")
    return parse_time_label(value)


class BookingRequest(CamelModel):
    """Payload posted by the booking page once a date and slot are picked"""
    date: dt.date
    time: dt.time
    car_model: str = Field(..., min_length=1, max_length=100)
    package_name: Optional[str] = Field(None, max_length=100)
    total_price: float = Field(..., gt=0, le=MAX_TOTAL_PRICE)

    @field_validator("date", mode="before")
    @classmethod
    def validate_date(cls, v):
        return parse_booking_date(v)

    @field_validator("time", mode="before")
    @classmethod
    def validate_time(cls, v):
        return parse_booking_time(v)

    @field_validator("car_model", "package_name", mode="before")
    @classmethod
    def clean_text(cls, v):
        return sanitize_input(v)


class BookingCreate(BookingRequest):
    vehicle_id: Optional[UUID] = None
    package_id: Optional[UUID] = None
    selected_modules: List[UUID] = Field(default_factory=list, max_length=10)
    notes: Optional[str] = Field(None, max_length=1000)

    @field_validator("notes", mode="before")
    @classmethod
    def clean_notes(cls, v):
        return sanitize_input(v)


class BookingUpdate(CamelModel):
    date: Optional[dt.date] = None
    time: Optional[dt.time] = None
    car_model: Optional[str] = Field(None, min_length=1, max_length=100)
    package_id: Optional[UUID] = None
    package_name: Optional[str] = Field(None, max_length=100)
    selected_modules: Optional[List[UUID]] = Field(None, max_length=10)
    total_price: Optional[float] = Field(None, gt=0, le=MAX_TOTAL_PRICE)
    notes: Optional[str] = Field(None, max_length=1000)
    status: Optional[BookingStatus] = None

    @field_validator("date", mode="before")
    @classmethod
    def validate_date(cls, v):
        return None if v is None else parse_booking_date(v)

    @field_validator("time", mode="before")
    @classmethod
    def validate_time(cls, v):
        return None if v is None else parse_booking_time(v)

    @field_validator("car_model", "package_name", "notes", mode="before")
    @classmethod
    def clean_text(cls, v):
        return sanitize_input(v)


class BookingResponse(CamelModel):
    id: UUID
    user_id: Optional[UUID] = None
    vehicle_id: Optional[UUID] = None
    date: dt.date
    time: dt.time
    car_model: str
    package_id: Optional[UUID] = None
    package_name: Optional[str] = None
    selected_modules: List[UUID] = Field(default_factory=list)
    total_price: float
    status: BookingStatus = BookingStatus.pending
    notes: Optional[str] = None
    created_at: Optional[dt.datetime] = None
    updated_at: Optional[dt.datetime] = None
    completed_at: Optional[dt.datetime] = None

    @field_validator("selected_modules", mode="before")
    @classmethod
    def default_modules(cls, v):
        return v or []


class BookingListResponse(CamelModel):
    data: List[BookingResponse]
    total: int
    limit: int
    offset: int


class BookingSummary(CamelModel):
    id: UUID
    created_at: Optional[dt.datetime] = None


class BookingCreatedResponse(CamelModel):
    message: str
    booking: BookingSummary


class BookingUpdatedResponse(CamelModel):
    message: str
    booking: BookingResponse
