from datetime import date
from fastapi import APIRouter, HTTPException, Path, status
from typing import List
from app.schemas.calendar_schema import MonthGridResponse, QuoteRequest, QuoteResponse, TimeSlot
from app.utils.booking_calendar import month_grid, shift_month, time_slots
from app.utils.booking_utils import calculate_total_price, get_package_name

calendar_router = APIRouter()


@calendar_router.get("/slots", response_model=List[TimeSlot], status_code=status.HTTP_200_OK)
def get_time_slots():
    """The fixed daily time slots offered on the booking page"""
    return time_slots()


@calendar_router.get("/{year}/{month}", response_model=MonthGridResponse, status_code=status.HTTP_200_OK)
def get_month(
    year: int = Path(..., ge=1, le=9999),
    month: int = Path(..., ge=1, le=12),
):
    """Day grid for a month with leading blanks for the first weekday"""
    grid = month_grid(year, month)
    previous_year, previous_month = shift_month(year, month, -1)
    next_year, next_month = shift_month(year, month, 1)
    return MonthGridResponse(
        **grid,
        month_label=date(year, month, 1).strftime("%B %Y"),
        slots=time_slots(),
        previous={"year": previous_year, "month": previous_month},
        next={"year": next_year, "month": next_month},
    )


@calendar_router.post("/quote", response_model=QuoteResponse, status_code=status.HTTP_200_OK)
def get_quote(quote: QuoteRequest):
    """Package name and price for a vehicle, paint condition and module selection"""
    try:
        total_price = calculate_total_price(quote.vehicle, quote.condition, quote.modules)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    return QuoteResponse(package_name=get_package_name(quote.modules), total_price=total_price)
