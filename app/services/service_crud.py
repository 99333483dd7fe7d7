from fastapi import HTTPException, status
from sqlalchemy.orm import Session
from typing import List
from app.models.service_model import ServicePackage, ServiceModule
from app.schemas.service_schema import (
    ServiceModuleCreate,
    ServiceModuleResponse,
    ServicePackageCreate,
    ServicePackageResponse,
)
from app.utils.cache import cached_query, caches, invalidate_related_caches
from app.logger import get_logger

logger = get_logger(__name__)

CATALOG_TTL = 30 * 60
PACKAGES_CACHE_KEY = "service_packages:active"
MODULES_CACHE_KEY = "service_modules:active"


class ServiceCRUD:
    @staticmethod
    def get_active_packages(db: Session) -> List[dict]:
        """Active packages ordered by category and name, memoized in the services cache"""
        def query():
            packages = (
                db.query(ServicePackage)
                .filter(ServicePackage.is_active == True)
                .order_by(ServicePackage.category, ServicePackage.name)
                .all()
            )
            return [ServicePackageResponse.model_validate(package).model_dump(by_alias=True, mode="json")
                    for package in packages]

        return cached_query(query, PACKAGES_CACHE_KEY, CATALOG_TTL, caches["services"])

    @staticmethod
    def get_active_modules(db: Session) -> List[dict]:
        def query():
            modules = (
                db.query(ServiceModule)
                .filter(ServiceModule.is_active == True)
                .order_by(ServiceModule.category, ServiceModule.name)
                .all()
            )
            return [ServiceModuleResponse.model_validate(module).model_dump(by_alias=True, mode="json")
                    for module in modules]

        return cached_query(query, MODULES_CACHE_KEY, CATALOG_TTL, caches["services"])

    @staticmethod
    def create_module(db: Session, module: ServiceModuleCreate) -> ServiceModule:
        try:
            db_module = ServiceModule(**module.model_dump())
            db.add(db_module)
            db.commit()
            db.refresh(db_module)
            invalidate_related_caches("service")
            logger.info(f"Service module created: {db_module.name}")
            return db_module

        except Exception as e:
            db.rollback()
            logger.error(f"Error creating service module: {str(e)}")
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Failed to create service module"
            )

    @staticmethod
    def create_package(db: Session, package: ServicePackageCreate) -> ServicePackage:
        modules = []
        if package.module_ids:
            modules = db.query(ServiceModule).filter(ServiceModule.id.in_(package.module_ids)).all()
            if len(modules) != len(set(package.module_ids)):
                raise HTTPException(
                    status_code=status.HTTP_404_NOT_FOUND,
                    detail="Service module not found"
                )

        try:
            db_package = ServicePackage(**package.model_dump(exclude={"module_ids"}))
            db_package.modules = modules
            db.add(db_package)
            db.commit()
            db.refresh(db_package)
            invalidate_related_caches("service")
            logger.info(f"Service package created: {db_package.name}")
            return db_package

        except Exception as e:
            db.rollback()
            logger.error(f"Error creating service package: {str(e)}")
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Failed to create service package"
            )


service_crud = ServiceCRUD()
