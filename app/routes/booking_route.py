from fastapi import APIRouter, Depends, HTTPException, status, Query
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session
from uuid import UUID
from typing import Optional
from app import config
from app.services.booking_crud import booking_crud
from app.schemas.booking_schema import (
    BookingRequest,
    BookingCreate,
    BookingUpdate,
    BookingResponse,
    BookingListResponse,
    BookingCreatedResponse,
    BookingUpdatedResponse,
    BookingSummary,
    BookingStatus,
    BookingSortField,
    SortOrder,
)
from app.schemas.common import MessageResponse
from app.database import get_db
from app.security.auth import get_current_user, get_current_staff_user
from app.models.user_model import User
from app.utils.rate_limit import booking_limiter
from app.logger import get_logger

public_booking_router = APIRouter()
booking_router = APIRouter()
logger = get_logger(__name__)


# PUBLIC BOOKING PAGE ENDPOINT


@public_booking_router.post(
    "/booking",
    response_model=MessageResponse,
    status_code=status.HTTP_200_OK,
    dependencies=[Depends(booking_limiter)],
)
def save_booking(booking: BookingRequest, db: Session = Depends(get_db)):
    """Save a booking picked on the calendar page (date, slot, car, package, price)"""
    try:
        booking_crud.create_public_booking(db, booking)
        return MessageResponse(message="Booking saved successfully")
    except Exception as e:
        logger.error(f"Database error while saving booking: {str(e)}")
        content = {"error": "Failed to save booking"}
        if not config.IS_PRODUCTION:
            content["details"] = str(e)
        return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content=content)


@public_booking_router.api_route(
    "/booking", methods=["GET", "PUT", "PATCH", "DELETE"], include_in_schema=False
)
def booking_method_not_allowed():
    return JSONResponse(
        status_code=status.HTTP_405_METHOD_NOT_ALLOWED,
        content={"error": "Method Not Allowed"},
        headers={"Allow": "POST"},
    )


# CUSTOMER ENDPOINTS - customers manage their own bookings


@booking_router.get("/bookings", response_model=BookingListResponse, status_code=status.HTTP_200_OK)
def get_user_bookings(
    limit: int = Query(10, ge=1, le=100, description="Number of bookings to retrieve"),
    offset: int = Query(0, ge=0, description="Number of bookings to skip"),
    booking_status: Optional[BookingStatus] = Query(None, alias="status", description="Filter by status"),
    sort_by: BookingSortField = Query(BookingSortField.created_at, description="Column to sort on"),
    sort_order: SortOrder = Query(SortOrder.desc, description="ASC or DESC"),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Page through the caller's bookings"""
    try:
        bookings, total = booking_crud.get_bookings(
            db,
            user_id=current_user.id,
            status=booking_status.value if booking_status else None,
            sort_by=sort_by.value,
            sort_order=sort_order.value,
            limit=limit,
            offset=offset,
        )
        return BookingListResponse(
            data=[BookingResponse.model_validate(booking) for booking in bookings],
            total=total,
            limit=limit,
            offset=offset,
        )

    except Exception as e:
        logger.error(f"Error fetching bookings: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to fetch bookings",
        )


@booking_router.get("/bookings/{booking_id}", response_model=BookingResponse, status_code=status.HTTP_200_OK)
def get_booking(
    booking_id: UUID,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Get booking by ID (owner, admin or staff)"""
    booking = booking_crud.get_booking_for_user(db, booking_id, current_user)
    if not booking:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Booking not found")
    return BookingResponse.model_validate(booking)


@booking_router.post(
    "/bookings",
    response_model=BookingCreatedResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(booking_limiter)],
)
def create_booking(
    booking: BookingCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    logger.info(f"User {current_user.email} creating booking for {booking.date}")
    db_booking = booking_crud.create_booking(db, booking, current_user.id)
    return BookingCreatedResponse(
        message="Booking created successfully",
        booking=BookingSummary(id=db_booking.id, created_at=db_booking.created_at),
    )


@booking_router.put("/bookings/{booking_id}", response_model=BookingUpdatedResponse, status_code=status.HTTP_200_OK)
def update_booking(
    booking_id: UUID,
    booking_update: BookingUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Partially update a booking (owner or admin)"""
    logger.info(f"User {current_user.email} updating booking: {booking_id}")
    updated_booking = booking_crud.update_booking(db, booking_id, booking_update, current_user)
    return BookingUpdatedResponse(
        message="Booking updated successfully",
        booking=BookingResponse.model_validate(updated_booking),
    )


@booking_router.delete("/bookings/{booking_id}", response_model=MessageResponse, status_code=status.HTTP_200_OK)
def delete_booking(
    booking_id: UUID,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Delete a pending booking (owner or admin)"""
    logger.info(f"User {current_user.email} deleting booking: {booking_id}")
    booking_crud.delete_booking(db, booking_id, current_user)
    return MessageResponse(message="Booking deleted successfully")


# STAFF ENDPOINTS - admin and staff see every booking


@booking_router.get("/admin/bookings", response_model=BookingListResponse, status_code=status.HTTP_200_OK)
def get_all_bookings(
    limit: int = Query(10, ge=1, le=100),
    offset: int = Query(0, ge=0),
    booking_status: Optional[BookingStatus] = Query(None, alias="status"),
    sort_by: BookingSortField = Query(BookingSortField.created_at),
    sort_order: SortOrder = Query(SortOrder.desc),
    current_user: User = Depends(get_current_staff_user),
    db: Session = Depends(get_db),
):
    logger.info(f"Staff {current_user.email} fetching all bookings")
    bookings, total = booking_crud.get_bookings(
        db,
        status=booking_status.value if booking_status else None,
        sort_by=sort_by.value,
        sort_order=sort_order.value,
        limit=limit,
        offset=offset,
    )
    return BookingListResponse(
        data=[BookingResponse.model_validate(booking) for booking in bookings],
        total=total,
        limit=limit,
        offset=offset,
    )
