from sqlalchemy.orm import Session
from app.models.service_model import ServicePackage, ServiceModule
from app.utils.cache import invalidate_related_caches
from app.logger import get_logger

logger = get_logger(__name__)

SERVICE_PACKAGES = [
    {"name": "Basic Detail", "description": "Complete exterior wash and interior vacuum",
     "base_price": 150.00, "duration_hours": 2, "category": "basic"},
    {"name": "Premium Detail", "description": "Full interior and exterior detail with wax",
     "base_price": 350.00, "duration_hours": 4, "category": "premium"},
    {"name": "Concierge Detail", "description": "Complete restoration with paint correction",
     "base_price": 850.00, "duration_hours": 8, "category": "concierge"},
]

SERVICE_MODULES = [
    {"name": "Ceramic Coating", "description": "Professional ceramic coating application",
     "price": 1250.00, "duration_hours": 6, "category": "protection"},
    {"name": "Paint Correction", "description": "Multi-stage paint defect removal",
     "price": 850.00, "duration_hours": 8, "category": "correction"},
    {"name": "Interior Detail", "description": "Complete interior cleaning and conditioning",
     "price": 450.00, "duration_hours": 4, "category": "interior"},
    {"name": "Engine Bay Clean", "description": "Professional engine compartment cleaning",
     "price": 150.00, "duration_hours": 2, "category": "engine"},
    {"name": "Headlight Restoration", "description": "Headlight lens polishing and sealing",
     "price": 200.00, "duration_hours": 2, "category": "restoration"},
]

PACKAGE_MODULES = {
    "Premium Detail": ["Interior Detail"],
    "Concierge Detail": ["Paint Correction", "Ceramic Coating"],
}


def seed_database(db: Session) -> dict:
    """Insert the sample service catalog; skipped when packages already exist"""
    if db.query(ServicePackage).first():
        logger.info("Service catalog already present, skipping seed")
        return {"packages": 0, "modules": 0}

    try:
        modules = {data["name"]: ServiceModule(**data) for data in SERVICE_MODULES}
        packages = {data["name"]: ServicePackage(**data) for data in SERVICE_PACKAGES}
        for package_name, module_names in PACKAGE_MODULES.items():
            packages[package_name].modules = [modules[name] for name in module_names]

        db.add_all(list(modules.values()) + list(packages.values()))
        db.commit()
    except Exception as e:
        db.rollback()
        logger.error(f"Database seeding failed: {str(e)}")
        raise

    invalidate_related_caches("service")
    logger.info(f"Seeded {len(packages)} packages and {len(modules)} modules")
    return {"packages": len(packages), "modules": len(modules)}


if __name__ == "__main__":
    from app.database import SessionLocal, init_db

    init_db()
    session = SessionLocal()
    try:
        print(seed_database(session))
    finally:
        session.close()
