from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from typing import List
from app.services.vehicle_crud import vehicle_crud
from app.schemas.vehicle_schema import VehicleCreate, VehicleResponse
from app.database import get_db
from app.security.auth import get_current_user
from app.models.user_model import User

vehicle_router = APIRouter()


@vehicle_router.get("", response_model=List[VehicleResponse], status_code=status.HTTP_200_OK)
def get_vehicles(current_user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    """The caller's vehicles, newest first"""
    return [VehicleResponse.model_validate(v) for v in vehicle_crud.get_user_vehicles(db, current_user.id)]


@vehicle_router.post("", response_model=VehicleResponse, status_code=status.HTTP_201_CREATED)
def create_vehicle(
    vehicle: VehicleCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return VehicleResponse.model_validate(vehicle_crud.create_vehicle(db, vehicle, current_user.id))
