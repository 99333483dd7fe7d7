from datetime import datetime, timezone
from sqlalchemy import Column, String, Boolean, Numeric, Integer, Text, DateTime, ForeignKey, Table, Uuid
import uuid
from app.database import Base
from sqlalchemy.orm import relationship


package_modules = Table(
    "package_modules",
    Base.metadata,
    Column("package_id", Uuid, ForeignKey("service_packages.id", ondelete="CASCADE"), primary_key=True),
    Column("module_id", Uuid, ForeignKey("service_modules.id", ondelete="CASCADE"), primary_key=True),
)


class ServicePackage(Base):
    __tablename__ = "service_packages"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4, index=True)
    name = Column(String(100), nullable=False)
    description = Column(Text, nullable=True)
    base_price = Column(Numeric(10, 2), nullable=False)
    duration_hours = Column(Integer, nullable=True)
    category = Column(String(50), nullable=False)
    is_active = Column(Boolean, default=True)
    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    updated_at = Column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    # Relationships
    modules = relationship("ServiceModule", secondary=package_modules, back_populates="packages")


class ServiceModule(Base):
    __tablename__ = "service_modules"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4, index=True)
    name = Column(String(100), nullable=False)
    description = Column(Text, nullable=True)
    price = Column(Numeric(10, 2), nullable=False)
    duration_hours = Column(Integer, nullable=True)
    category = Column(String(50), nullable=False)
    is_active = Column(Boolean, default=True)
    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    updated_at = Column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    # Relationships
    packages = relationship("ServicePackage", secondary=package_modules, back_populates="modules")
