from sqlalchemy import create_engine, text
from sqlalchemy.orm import sessionmaker, declarative_base
from sqlalchemy.pool import StaticPool
from app import config
from app.logger import get_logger

logger = get_logger(__name__)


def _engine_options(url: str) -> dict:
    if url.startswith("sqlite"):
        options = {"connect_args": {"check_same_thread": False}}
        # In-memory databases only live as long as their single connection
        if url in ("sqlite://", "sqlite:///:memory:"):
            options["poolclass"] = StaticPool
        return options

    return {
        "pool_size": config.DB_POOL_MIN,
        "max_overflow": max(config.DB_POOL_MAX - config.DB_POOL_MIN, 0),
        "pool_timeout": config.DB_POOL_TIMEOUT,
        "pool_pre_ping": True,
        "connect_args": {
            "options": f"-c statement_timeout={config.DB_STATEMENT_TIMEOUT_MS}",
        },
    }


engine = create_engine(config.DATABASE_URL, **_engine_options(config.DATABASE_URL))
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base = declarative_base()


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def check_connection() -> bool:
    """Run a trivial query to confirm the database is reachable"""
    try:
        with engine.connect() as connection:
            connection.execute(text("SELECT 1"))
        return True
    except Exception as e:
        logger.error(f"Database connection failed: {str(e)}")
        return False


def init_db() -> None:
    """Bring the schema up to date: migrations on PostgreSQL, create_all elsewhere"""
    if engine.dialect.name == "postgresql":
        from app.migrations import SqlAlchemyMigrationExecutor, run_migrations

        executor = SqlAlchemyMigrationExecutor(engine)
        result = run_migrations(executor.query, transaction=executor.transaction)
        logger.info(
            f"Database at version {result.current_version} ({result.migrations_run} migrations applied)"
        )
    else:
        from app.models import booking_model, service_model, session_model, user_model, vehicle_model  # noqa: F401

        Base.metadata.create_all(bind=engine)
        logger.info("Database tables created from model metadata")
