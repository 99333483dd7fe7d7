from contextlib import asynccontextmanager
from datetime import datetime, timezone
from fastapi import Depends, FastAPI, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from app import config
from app.database import SessionLocal, check_connection, init_db
from app.errors import register_error_handlers
from app.middleware import add_request_id_and_process_time, add_security_headers
from app.routes.auth_route import auth_router
from app.routes.booking_route import booking_router, public_booking_router
from app.routes.calendar_route import calendar_router
from app.routes.service_route import service_router
from app.routes.vehicle_route import vehicle_router
from app.utils.rate_limit import api_limiter
from app.utils.session_store import session_store
from app.logger import get_logger

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    if config.AUTO_MIGRATE:
        logger.info("Initializing database...")
        init_db()
    db = SessionLocal()
    try:
        session_store.cleanup_expired_sessions(db)
    except Exception as e:
        logger.warning(f"Skipping session cleanup: {str(e)}")
    finally:
        db.close()
    yield


app = FastAPI(
    title="Detailing Salon API",
    version="1.0.0",
    description="Bookings, accounts and service catalog for a car-detailing salon.",
    lifespan=lifespan,
)
app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.middleware("http")(add_security_headers)
app.middleware("http")(add_request_id_and_process_time)
register_error_handlers(app)


@app.get("/", status_code=200)
async def home():
    return {"message": "Welcome to the Detailing Salon API"}


@app.get("/api/v1/health", tags=["Health"])
def health_check():
    healthy = check_connection()
    return JSONResponse(
        status_code=status.HTTP_200_OK if healthy else status.HTTP_503_SERVICE_UNAVAILABLE,
        content={
            "status": "healthy" if healthy else "unhealthy",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "database": "connected" if healthy else "disconnected",
        },
    )


api_dependencies = [Depends(api_limiter)]
app.include_router(public_booking_router, prefix="/api", tags=["Booking"], dependencies=api_dependencies)
app.include_router(auth_router, prefix="/api/v1/auth", tags=["Auth"], dependencies=api_dependencies)
app.include_router(booking_router, prefix="/api/v1", tags=["Bookings"], dependencies=api_dependencies)
app.include_router(service_router, prefix="/api/v1/services", tags=["Services"], dependencies=api_dependencies)
app.include_router(vehicle_router, prefix="/api/v1/vehicles", tags=["Vehicles"], dependencies=api_dependencies)
app.include_router(calendar_router, prefix="/api/v1/calendar", tags=["Calendar"], dependencies=api_dependencies)


def run() -> None:
    import uvicorn

    uvicorn.run("app.main:app", host="0.0.0.0", port=config.PORT, reload=not config.IS_PRODUCTION)


if __name__ == "__main__":
    run()
