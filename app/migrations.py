"""Versioned SQL migrations for the PostgreSQL schema.

Each migration is replayed in order against the ``schema_migrations`` marker
table, which records every applied version. A query function has the shape
``query(sql, params=None) -> list[dict]``; passing a ``transaction`` factory
makes each migration and its marker write commit or fail together.
"""
import argparse
from contextlib import contextmanager
from typing import Callable, ContextManager, Dict, List, NamedTuple, Optional
from sqlalchemy import text
from app.logger import get_logger

logger = get_logger(__name__)

QueryFunction = Callable[..., List[Dict]]
TransactionFactory = Callable[[], ContextManager[QueryFunction]]


class Migration(NamedTuple):
    version: int
    name: str
    up: str
    down: str


class MigrationResult(NamedTuple):
    current_version: int
    migrations_run: int


class MigrationError(Exception):
    def __init__(self, version: int, message: str):
        super().__init__(f"Migration {version} failed: {message}")
        self.version = version


MIGRATIONS = [
    Migration(
        version=1,
        name="Initial schema setup",
        up="""
            CREATE EXTENSION IF NOT EXISTS "uuid-ossp";

            CREATE TABLE IF NOT EXISTS users (
                id UUID PRIMARY KEY DEFAULT uuid_generate_v4(),
                email VARCHAR(255) UNIQUE NOT NULL,
                password_hash VARCHAR(255) NOT NULL,
                first_name VARCHAR(100),
                last_name VARCHAR(100),
                phone VARCHAR(20),
                created_at TIMESTAMP WITH TIME ZONE DEFAULT CURRENT_TIMESTAMP,
                updated_at TIMESTAMP WITH TIME ZONE DEFAULT CURRENT_TIMESTAMP,
                last_login TIMESTAMP WITH TIME ZONE,
                is_active BOOLEAN DEFAULT TRUE,
                role VARCHAR(20) DEFAULT 'customer' CHECK (role IN ('admin', 'staff', 'customer'))
            );

            CREATE TABLE IF NOT EXISTS vehicles (
                id UUID PRIMARY KEY DEFAULT uuid_generate_v4(),
                user_id UUID REFERENCES users(id) ON DELETE CASCADE,
                make VARCHAR(50) NOT NULL,
                model VARCHAR(100) NOT NULL,
                year INTEGER NOT NULL,
                color VARCHAR(30),
                license_plate VARCHAR(20),
                vin VARCHAR(17),
                notes TEXT,
                created_at TIMESTAMP WITH TIME ZONE DEFAULT CURRENT_TIMESTAMP,
                updated_at TIMESTAMP WITH TIME ZONE DEFAULT CURRENT_TIMESTAMP
            );
        """,
        down="""
            DROP TABLE IF EXISTS vehicles;
            DROP TABLE IF EXISTS users;
        """,
    ),
    Migration(
        version=2,
        name="Add service packages and modules",
        up="""
            CREATE TABLE IF NOT EXISTS service_packages (
                id UUID PRIMARY KEY DEFAULT uuid_generate_v4(),
                name VARCHAR(100) NOT NULL,
                description TEXT,
                base_price DECIMAL(10,2) NOT NULL,
                duration_hours INTEGER,
                category VARCHAR(50) NOT NULL,
                is_active BOOLEAN DEFAULT TRUE,
                created_at TIMESTAMP WITH TIME ZONE DEFAULT CURRENT_TIMESTAMP,
                updated_at TIMESTAMP WITH TIME ZONE DEFAULT CURRENT_TIMESTAMP
            );

            CREATE TABLE IF NOT EXISTS service_modules (
                id UUID PRIMARY KEY DEFAULT uuid_generate_v4(),
                name VARCHAR(100) NOT NULL,
                description TEXT,
                price DECIMAL(10,2) NOT NULL,
                duration_hours INTEGER,
                category VARCHAR(50) NOT NULL,
                is_active BOOLEAN DEFAULT TRUE,
                created_at TIMESTAMP WITH TIME ZONE DEFAULT CURRENT_TIMESTAMP,
                updated_at TIMESTAMP WITH TIME ZONE DEFAULT CURRENT_TIMESTAMP
            );

            CREATE TABLE IF NOT EXISTS package_modules (
                package_id UUID REFERENCES service_packages(id) ON DELETE CASCADE,
                module_id UUID REFERENCES service_modules(id) ON DELETE CASCADE,
                PRIMARY KEY (package_id, module_id)
            );
        """,
        down="""
            DROP TABLE IF EXISTS package_modules;
            DROP TABLE IF EXISTS service_modules;
            DROP TABLE IF EXISTS service_packages;
        """,
    ),
    Migration(
        version=3,
        name="Add bookings and related tables",
        up="""
            CREATE TABLE IF NOT EXISTS bookings (
                id UUID PRIMARY KEY DEFAULT uuid_generate_v4(),
                user_id UUID REFERENCES users(id) ON DELETE SET NULL,
                vehicle_id UUID REFERENCES vehicles(id) ON DELETE SET NULL,
                date DATE NOT NULL,
                time TIME NOT NULL,
                car_model VARCHAR(100) NOT NULL,
                package_id UUID REFERENCES service_packages(id) ON DELETE SET NULL,
                selected_modules JSONB DEFAULT '[]'::jsonb,
                total_price DECIMAL(10,2) NOT NULL CHECK (total_price > 0),
                status VARCHAR(20) DEFAULT 'pending'
                    CHECK (status IN ('pending', 'confirmed', 'in_progress', 'completed', 'cancelled')),
                notes TEXT,
                created_at TIMESTAMP WITH TIME ZONE DEFAULT CURRENT_TIMESTAMP,
                updated_at TIMESTAMP WITH TIME ZONE DEFAULT CURRENT_TIMESTAMP,
                completed_at TIMESTAMP WITH TIME ZONE
            );

            CREATE TABLE IF NOT EXISTS booking_status_history (
                id UUID PRIMARY KEY DEFAULT uuid_generate_v4(),
                booking_id UUID REFERENCES bookings(id) ON DELETE CASCADE,
                status VARCHAR(20) NOT NULL,
                notes TEXT,
                created_at TIMESTAMP WITH TIME ZONE DEFAULT CURRENT_TIMESTAMP,
                updated_by UUID REFERENCES users(id) ON DELETE SET NULL
            );

            CREATE TABLE IF NOT EXISTS payments (
                id UUID PRIMARY KEY DEFAULT uuid_generate_v4(),
                booking_id UUID REFERENCES bookings(id) ON DELETE CASCADE,
                amount DECIMAL(10,2) NOT NULL,
                payment_method VARCHAR(20)
                    CHECK (payment_method IN ('credit_card', 'debit_card', 'cash', 'paypal')),
                transaction_id VARCHAR(100),
                status VARCHAR(20) DEFAULT 'pending'
                    CHECK (status IN ('pending', 'completed', 'failed', 'refunded')),
                notes TEXT,
                created_at TIMESTAMP WITH TIME ZONE DEFAULT CURRENT_TIMESTAMP,
                updated_at TIMESTAMP WITH TIME ZONE DEFAULT CURRENT_TIMESTAMP
            );
        """,
        down="""
            DROP TABLE IF EXISTS payments;
            DROP TABLE IF EXISTS booking_status_history;
            DROP TABLE IF EXISTS bookings;
        """,
    ),
    Migration(
        version=4,
        name="Add authentication sessions",
        up="""
            CREATE TABLE IF NOT EXISTS sessions (
                id UUID PRIMARY KEY DEFAULT uuid_generate_v4(),
                user_id UUID REFERENCES users(id) ON DELETE CASCADE,
                token VARCHAR(512) UNIQUE NOT NULL,
                expires_at TIMESTAMP WITH TIME ZONE NOT NULL,
                created_at TIMESTAMP WITH TIME ZONE DEFAULT CURRENT_TIMESTAMP,
                last_accessed TIMESTAMP WITH TIME ZONE DEFAULT CURRENT_TIMESTAMP
            );

            CREATE INDEX IF NOT EXISTS idx_bookings_date ON bookings(date);
            CREATE INDEX IF NOT EXISTS idx_bookings_status ON bookings(status);
            CREATE INDEX IF NOT EXISTS idx_bookings_user_id ON bookings(user_id);
            CREATE INDEX IF NOT EXISTS idx_sessions_token ON sessions(token);
            CREATE INDEX IF NOT EXISTS idx_sessions_expires_at ON sessions(expires_at);
            CREATE INDEX IF NOT EXISTS idx_users_email ON users(email);
            CREATE INDEX IF NOT EXISTS idx_vehicles_user_id ON vehicles(user_id);
        """,
        down="""
            DROP INDEX IF EXISTS idx_bookings_date;
            DROP INDEX IF EXISTS idx_bookings_status;
            DROP INDEX IF EXISTS idx_bookings_user_id;
            DROP INDEX IF EXISTS idx_sessions_token;
            DROP INDEX IF EXISTS idx_sessions_expires_at;
            DROP INDEX IF EXISTS idx_users_email;
            DROP INDEX IF EXISTS idx_vehicles_user_id;
            DROP TABLE IF EXISTS sessions;
        """,
    ),
    Migration(
        version=5,
        name="Add package name to bookings",
        up="""
            ALTER TABLE bookings ADD COLUMN IF NOT EXISTS package_name VARCHAR(100);
        """,
        down="""
            ALTER TABLE bookings DROP COLUMN IF EXISTS package_name;
        """,
    ),
]


def ensure_migrations_table(query: QueryFunction) -> None:
    query(
        """
        CREATE TABLE IF NOT EXISTS schema_migrations (
            version INTEGER PRIMARY KEY,
            name VARCHAR(255),
            applied_at TIMESTAMP WITH TIME ZONE DEFAULT CURRENT_TIMESTAMP
        )
        """
    )


def get_current_version(query: QueryFunction) -> int:
    ensure_migrations_table(query)
    rows = query("SELECT MAX(version) AS version FROM schema_migrations")
    if not rows or rows[0].get("version") is None:
        return 0
    return int(rows[0]["version"])


@contextmanager
def _no_transaction(query: QueryFunction):
    yield query


def _check_target(target_version: int, migrations: List[Migration]) -> None:
    versions = [migration.version for migration in migrations]
    if versions != list(range(1, len(migrations) + 1)):
        raise ValueError(f"Migration versions must run 1..{len(migrations)} without gaps: {versions}")
    if target_version < 0 or target_version > len(migrations):
        raise ValueError(
            f"Target version {target_version} is outside 0..{len(migrations)}"
        )


def run_migrations(
    query: QueryFunction,
    target_version: Optional[int] = None,
    transaction: Optional[TransactionFactory] = None,
    migrations: Optional[List[Migration]] = None,
) -> MigrationResult:
    """Apply every migration above the current version up to target_version"""
    migrations = MIGRATIONS if migrations is None else migrations
    target = len(migrations) if target_version is None else target_version
    _check_target(target, migrations)

    current_version = get_current_version(query)
    if current_version >= target:
        logger.info(f"Database is already at version {current_version}")
        return MigrationResult(current_version, 0)

    logger.info(f"Running migrations from version {current_version} to {target}")
    migrations_run = 0
    for migration in migrations[current_version:target]:
        logger.info(f"Running migration {migration.version}: {migration.name}")
        try:
            with (transaction() if transaction else _no_transaction(query)) as run:
                run(migration.up)
                run(
                    "INSERT INTO schema_migrations (version, name) VALUES (:version, :name)",
                    {"version": migration.version, "name": migration.name},
                )
        except Exception as e:
            logger.error(f"Migration {migration.version} failed: {str(e)}")
            raise MigrationError(migration.version, str(e)) from e

        current_version = migration.version
        migrations_run += 1
        logger.info(f"Migration {migration.version} completed successfully")

    return MigrationResult(current_version, migrations_run)


def rollback_migrations(
    query: QueryFunction,
    target_version: int = 0,
    transaction: Optional[TransactionFactory] = None,
    migrations: Optional[List[Migration]] = None,
) -> MigrationResult:
    """Revert applied migrations, newest first, down to target_version"""
    migrations = MIGRATIONS if migrations is None else migrations
    _check_target(target_version, migrations)

    current_version = get_current_version(query)
    if current_version <= target_version:
        logger.info(f"Database is already at version {current_version}")
        return MigrationResult(current_version, 0)

    logger.info(f"Rolling back migrations from version {current_version} to {target_version}")
    migrations_run = 0
    for migration in reversed(migrations[target_version:current_version]):
        logger.info(f"Rolling back migration {migration.version}: {migration.name}")
        try:
            with (transaction() if transaction else _no_transaction(query)) as run:
                run(migration.down)
                run(
                    "DELETE FROM schema_migrations WHERE version = :version",
                    {"version": migration.version},
                )
        except Exception as e:
            logger.error(f"Rollback of migration {migration.version} failed: {str(e)}")
            raise MigrationError(migration.version, str(e)) from e

        current_version = migration.version - 1
        migrations_run += 1
        logger.info(f"Rollback of migration {migration.version} completed successfully")

    return MigrationResult(current_version, migrations_run)


def _execute(connection, sql: str, params: Optional[dict] = None) -> List[Dict]:
    if params is None:
        # Multi-statement DDL blocks go straight to the driver
        result = connection.exec_driver_sql(sql)
    else:
        result = connection.execute(text(sql), params)
    if not result.returns_rows:
        return []
    return [dict(row) for row in result.mappings()]


class SqlAlchemyMigrationExecutor:
    """Query and transaction callables for the migration runner, backed by an engine"""

    def __init__(self, engine):
        self.engine = engine

    def query(self, sql: str, params: Optional[dict] = None) -> List[Dict]:
        with self.engine.begin() as connection:
            return _execute(connection, sql, params)

    @contextmanager
    def transaction(self):
        with self.engine.begin() as connection:
            yield lambda sql, params=None: _execute(connection, sql, params)


def main(argv=None) -> None:
    parser = argparse.ArgumentParser(description="Manage database schema migrations")
    parser.add_argument("command", choices=["migrate", "rollback", "status"])
    parser.add_argument("--target", type=int, default=None, help="Version to migrate or roll back to")
    args = parser.parse_args(argv)

    from app.database import engine

    executor = SqlAlchemyMigrationExecutor(engine)
    if args.command == "migrate":
        result = run_migrations(executor.query, args.target, transaction=executor.transaction)
        print(f"Database at version {result.current_version} ({result.migrations_run} applied)")
    elif args.command == "rollback":
        target = 0 if args.target is None else args.target
        result = rollback_migrations(executor.query, target, transaction=executor.transaction)
        print(f"Database at version {result.current_version} ({result.migrations_run} rolled back)")
    else:
        print(f"Database at version {get_current_version(executor.query)} of {len(MIGRATIONS)}")


if __name__ == "__main__":
    main()
