from fastapi import HTTPException, status
from sqlalchemy.orm import Session
from typing import List
from uuid import UUID
from app.models.vehicle_model import Vehicle
from app.schemas.vehicle_schema import VehicleCreate
from app.utils.cache import invalidate_related_caches
from app.logger import get_logger

logger = get_logger(__name__)


class VehicleCRUD:
    @staticmethod
    def get_user_vehicles(db: Session, user_id: UUID) -> List[Vehicle]:
        return (
            db.query(Vehicle)
            .filter(Vehicle.user_id == user_id)
            .order_by(Vehicle.created_at.desc())
            .all()
        )

    @staticmethod
    def create_vehicle(db: Session, vehicle: VehicleCreate, user_id: UUID) -> Vehicle:
        try:
            db_vehicle = Vehicle(user_id=user_id, **vehicle.model_dump())
            db.add(db_vehicle)
            db.commit()
            db.refresh(db_vehicle)
            invalidate_related_caches("vehicle")
            logger.info(f"Vehicle created: {db_vehicle.id} for user {user_id}")
            return db_vehicle

        except Exception as e:
            db.rollback()
            logger.error(f"Error creating vehicle: {str(e)}")
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Failed to create vehicle"
            )


vehicle_crud = VehicleCRUD()
