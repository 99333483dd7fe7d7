from datetime import datetime, timezone
from sqlalchemy import (
    Column, String, Date, Time, DateTime, Text, Numeric, ForeignKey, Uuid, JSON, CheckConstraint
)
from sqlalchemy.dialects.postgresql import JSONB
import uuid
from app.database import Base
from sqlalchemy.orm import relationship


class Booking(Base):
    __tablename__ = "bookings"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4, index=True)
    user_id = Column(Uuid, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)
    vehicle_id = Column(Uuid, ForeignKey("vehicles.id", ondelete="SET NULL"), nullable=True)
    date = Column(Date, nullable=False, index=True)
    time = Column(Time, nullable=False)
    car_model = Column(String(100), nullable=False)
    package_id = Column(Uuid, ForeignKey("service_packages.id", ondelete="SET NULL"), nullable=True)
    package_name = Column(String(100), nullable=True)
    selected_modules = Column(JSON().with_variant(JSONB, "postgresql"), default=list)
    total_price = Column(Numeric(10, 2), nullable=False)
    status = Column(String(20), default="pending", index=True)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    updated_at = Column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )
    completed_at = Column(DateTime(timezone=True), nullable=True)

    # Relationships
    user = relationship("User", back_populates="bookings")
    vehicle = relationship("Vehicle", back_populates="bookings")
    package = relationship("ServicePackage")
    status_history = relationship(
        "BookingStatusHistory",
        back_populates="booking",
        cascade="all, delete-orphan",
        order_by="BookingStatusHistory.created_at",
    )

    __table_args__ = (
        CheckConstraint("total_price > 0", name="check_total_price_positive"),
        CheckConstraint(
            "status IN ('pending', 'confirmed', 'in_progress', 'completed', 'cancelled')",
            name="check_booking_status",
        ),
    )


class BookingStatusHistory(Base):
    __tablename__ = "booking_status_history"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    booking_id = Column(Uuid, ForeignKey("bookings.id", ondelete="CASCADE"), nullable=False)
    status = Column(String(20), nullable=False)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    updated_by = Column(Uuid, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)

    booking = relationship("Booking", back_populates="status_history")
