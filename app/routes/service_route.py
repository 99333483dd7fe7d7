from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from typing import List
from app.services.service_crud import service_crud
from app.schemas.service_schema import (
    ServiceModuleCreate,
    ServiceModuleResponse,
    ServicePackageCreate,
    ServicePackageResponse,
)
from app.database import get_db
from app.security.auth import get_current_admin_user
from app.models.user_model import User
from app.logger import get_logger

service_router = APIRouter()
logger = get_logger(__name__)


# PUBLIC ENDPOINTS - the service catalog


@service_router.get("/packages", response_model=List[ServicePackageResponse], status_code=status.HTTP_200_OK)
def get_service_packages(db: Session = Depends(get_db)):
    """Active service packages with their modules"""
    return service_crud.get_active_packages(db)


@service_router.get("/modules", response_model=List[ServiceModuleResponse], status_code=status.HTTP_200_OK)
def get_service_modules(db: Session = Depends(get_db)):
    """Active add-on service modules"""
    return service_crud.get_active_modules(db)


# ADMIN ENDPOINTS


@service_router.post("/packages", response_model=ServicePackageResponse, status_code=status.HTTP_201_CREATED)
def create_service_package(
    package: ServicePackageCreate,
    current_user: User = Depends(get_current_admin_user),
    db: Session = Depends(get_db),
):
    logger.info(f"Admin {current_user.email} creating package {package.name}")
    return ServicePackageResponse.model_validate(service_crud.create_package(db, package))


@service_router.post("/modules", response_model=ServiceModuleResponse, status_code=status.HTTP_201_CREATED)
def create_service_module(
    module: ServiceModuleCreate,
    current_user: User = Depends(get_current_admin_user),
    db: Session = Depends(get_db),
):
    logger.info(f"Admin {current_user.email} creating module {module.name}")
    return ServiceModuleResponse.model_validate(service_crud.create_module(db, module))
