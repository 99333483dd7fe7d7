from pydantic import Field
from typing import Dict, List, Optional
from app.schemas.common import CamelModel
from app.utils.booking_utils import CONDITION_LEVELS, VEHICLE_TYPES


class TimeSlot(CamelModel):
    time: str
    label: str
    avail: bool


class MonthGridResponse(CamelModel):
    year: int
    month: int
    month_label: str
    empty_days: List[Optional[int]]
    days: List[int]
    slots: List[TimeSlot]
    previous: Dict[str, int]
    next: Dict[str, int]


class QuoteRequest(CamelModel):
    vehicle: str = Field(..., examples=list(VEHICLE_TYPES))
    condition: str = Field("new", examples=list(CONDITION_LEVELS))
    modules: Dict[str, bool] = Field(default_factory=dict)


class QuoteResponse(CamelModel):
    package_name: str
    total_price: int
