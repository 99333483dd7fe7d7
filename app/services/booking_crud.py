from fastapi import HTTPException, status
from sqlalchemy.orm import Session
from typing import List, Optional, Tuple
from uuid import UUID
from datetime import datetime, timezone
from app.models.booking_model import Booking, BookingStatusHistory
from app.models.user_model import User
from app.models.vehicle_model import Vehicle
from app.schemas.booking_schema import BookingCreate, BookingRequest, BookingUpdate
from app.utils.cache import invalidate_related_caches
from app.logger import get_logger

logger = get_logger(__name__)

SORTABLE_COLUMNS = {
    "created_at": Booking.created_at,
    "updated_at": Booking.updated_at,
    "date": Booking.date,
    "status": Booking.status,
}


def _is_staff(user: User) -> bool:
    return user.role in ("admin", "staff")


class BookingCRUD:
    @staticmethod
    def create_public_booking(db: Session, booking: BookingRequest) -> Booking:
        """Anonymous booking straight from the booking page; slots are not checked for conflicts"""
        try:
            db_booking = Booking(
                date=booking.date,
                time=booking.time,
                car_model=booking.car_model,
                package_name=booking.package_name,
                total_price=booking.total_price,
                selected_modules=[],
                status="pending",
            )
            db.add(db_booking)
            db.commit()
            db.refresh(db_booking)
            invalidate_related_caches("booking")
            logger.info(f"Booking saved: {db_booking.id} for {booking.date} {booking.time}")
            return db_booking

        except Exception:
            db.rollback()
            raise

    @staticmethod
    def create_booking(db: Session, booking: BookingCreate, user_id: UUID) -> Booking:
        if booking.vehicle_id:
            vehicle = db.query(Vehicle).filter(
                Vehicle.id == booking.vehicle_id, Vehicle.user_id == user_id
            ).first()
            if not vehicle:
                raise HTTPException(
                    status_code=status.HTTP_404_NOT_FOUND,
                    detail="Vehicle not found",
                )

        try:
            db_booking = Booking(
                user_id=user_id,
                vehicle_id=booking.vehicle_id,
                date=booking.date,
                time=booking.time,
                car_model=booking.car_model,
                package_id=booking.package_id,
                package_name=booking.package_name,
                selected_modules=[str(module_id) for module_id in booking.selected_modules],
                total_price=booking.total_price,
                notes=booking.notes,
                status="pending",
            )
            db.add(db_booking)
            db.commit()
            db.refresh(db_booking)
            invalidate_related_caches("booking")
            logger.info(f"New booking created: {db_booking.id} by user {user_id}")
            return db_booking

        except Exception as e:
            db.rollback()
            logger.error(f"Error creating booking: {str(e)}")
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Failed to create booking",
            )

    @staticmethod
    def get_booking_by_id(db: Session, booking_id: UUID) -> Optional[Booking]:
        return db.query(Booking).filter(Booking.id == booking_id).first()

    @staticmethod
    def get_booking_for_user(db: Session, booking_id: UUID, user: User) -> Optional[Booking]:
        """Booking visible to the user: their own, or any booking for admin and staff"""
        booking = BookingCRUD.get_booking_by_id(db, booking_id)
        if booking is None:
            return None
        if booking.user_id != user.id and not _is_staff(user):
            return None
        return booking

    @staticmethod
    def get_bookings(
            db: Session,
            user_id: Optional[UUID] = None,
            status: Optional[str] = None,
            sort_by: str = "created_at",
            sort_order: str = "DESC",
            limit: int = 10,
            offset: int = 0,
    ) -> Tuple[List[Booking], int]:
        """Page of bookings plus the total matching count"""
        query = db.query(Booking)

        if user_id:
            query = query.filter(Booking.user_id == user_id)
        if status:
            query = query.filter(Booking.status == status)

        total = query.count()

        column = SORTABLE_COLUMNS.get(sort_by, Booking.created_at)
        ordering = column.asc() if sort_order.upper() == "ASC" else column.desc()
        bookings = query.order_by(ordering).offset(offset).limit(limit).all()
        return bookings, total

    @staticmethod
    def update_booking(db: Session, booking_id: UUID, booking_update: BookingUpdate, user: User) -> Booking:
        db_booking = BookingCRUD.get_booking_by_id(db, booking_id)
        if not db_booking:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND, detail="Booking not found"
            )

        if db_booking.user_id != user.id and user.role != "admin":
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Not authorized to modify this booking",
            )

        update_data = booking_update.model_dump(exclude_unset=True, exclude_none=True)
        if not update_data:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="No valid fields provided for update",
            )

        try:
            if "selected_modules" in update_data:
                update_data["selected_modules"] = [str(module_id) for module_id in update_data["selected_modules"]]

            new_status = update_data.get("status")
            if new_status is not None:
                new_status = getattr(new_status, "value", new_status)
                update_data["status"] = new_status

            for key, value in update_data.items():
                setattr(db_booking, key, value)

            if new_status is not None:
                db_booking.status_history.append(
                    BookingStatusHistory(status=new_status, updated_by=user.id)
                )
                if new_status == "completed":
                    db_booking.completed_at = datetime.now(timezone.utc)

            db.commit()
            db.refresh(db_booking)
            invalidate_related_caches("booking")
            logger.info(f"Booking updated: {booking_id}")
            return db_booking

        except Exception as e:
            db.rollback()
            logger.error(f"Error updating booking {booking_id}: {str(e)}")
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Failed to update booking",
            )

    @staticmethod
    def delete_booking(db: Session, booking_id: UUID, user: User) -> None:
        """Only pending bookings may be deleted, by their owner or an admin"""
        db_booking = BookingCRUD.get_booking_by_id(db, booking_id)
        if not db_booking:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND, detail="Booking not found"
            )

        if db_booking.user_id != user.id and user.role != "admin":
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Not authorized to delete this booking",
            )

        if db_booking.status != "pending":
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Only pending bookings can be deleted",
            )

        try:
            db.delete(db_booking)
            db.commit()
            invalidate_related_caches("booking")
            logger.info(f"Booking deleted: {booking_id}")

        except Exception as e:
            db.rollback()
            logger.error(f"Error deleting booking {booking_id}: {str(e)}")
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Failed to delete booking",
            )


booking_crud = BookingCRUD()
