from contextlib import contextmanager

import pytest

from sqlalchemy import create_engine, inspect
from sqlalchemy.pool import StaticPool

from app import database as app_database
from app import migrations as migrations_module
from app.migrations import (
    MIGRATIONS,
    Migration,
    MigrationError,
    SqlAlchemyMigrationExecutor,
    get_current_version,
    rollback_migrations,
    run_migrations,
)


class FakeDatabase:
    """Records executed SQL and keeps the schema_migrations rows in memory"""

    def __init__(self, fail_on=None):
        self.applied = {}
        self.statements = []
        self.transactions = 0
        self.fail_on = fail_on

    def query(self, sql, params=None):
        statement = " ".join(sql.split())
        if statement.startswith("CREATE TABLE IF NOT EXISTS schema_migrations"):
            return []
        if statement.startswith("SELECT MAX(version)"):
            return [{"version": max(self.applied) if self.applied else None}]
        if statement.startswith("INSERT INTO schema_migrations"):
            self.applied[params["version"]] = params["name"]
            return []
        if statement.startswith("DELETE FROM schema_migrations"):
            self.applied.pop(params["version"], None)
            return []
        if self.fail_on and self.fail_on in statement:
            raise RuntimeError("syntax error")
        self.statements.append(statement)
        return []

    @contextmanager
    def transaction(self):
        self.transactions += 1
        yield self.query


def _migrations(count):
    return [
        Migration(version, f"step {version}", f"CREATE TABLE t{version} (id INT)", f"DROP TABLE t{version}")
        for version in range(1, count + 1)
    ]


def test_fresh_database_is_version_zero():
    assert get_current_version(FakeDatabase().query) == 0


def test_run_applies_every_migration():
    database = FakeDatabase()
    result = run_migrations(database.query)

    assert result.current_version == len(MIGRATIONS)
    assert result.migrations_run == len(MIGRATIONS)
    assert sorted(database.applied) == [m.version for m in MIGRATIONS]


def test_second_run_is_a_no_op():
    database = FakeDatabase()
    run_migrations(database.query)
    executed = len(database.statements)

    result = run_migrations(database.query)
    assert result.migrations_run == 0
    assert result.current_version == len(MIGRATIONS)
    assert len(database.statements) == executed


def test_run_to_target_then_continue():
    database = FakeDatabase()
    migrations = _migrations(4)

    first = run_migrations(database.query, 2, migrations=migrations)
    assert first == (2, 2)

    second = run_migrations(database.query, migrations=migrations)
    assert second == (4, 2)
    assert database.statements == [f"CREATE TABLE t{v} (id INT)" for v in range(1, 5)]


def test_rollback_runs_down_newest_first():
    database = FakeDatabase()
    migrations = _migrations(3)
    run_migrations(database.query, migrations=migrations)

    result = rollback_migrations(database.query, 1, migrations=migrations)
    assert result == (1, 2)
    assert database.statements[-2:] == ["DROP TABLE t3", "DROP TABLE t2"]
    assert list(database.applied) == [1]


def test_rollback_below_current_is_a_no_op():
    database = FakeDatabase()
    result = rollback_migrations(database.query, 0, migrations=_migrations(2))
    assert result == (0, 0)


def test_each_migration_runs_in_its_own_transaction():
    database = FakeDatabase()
    run_migrations(database.query, transaction=database.transaction, migrations=_migrations(3))
    assert database.transactions == 3


def test_failure_stops_and_keeps_earlier_versions():
    database = FakeDatabase(fail_on="t2")

    with pytest.raises(MigrationError) as exc_info:
        run_migrations(database.query, migrations=_migrations(3))

    assert exc_info.value.version == 2
    assert "Migration 2 failed" in str(exc_info.value)
    assert list(database.applied) == [1]


@pytest.mark.parametrize("target", [-1, 4])
def test_target_out_of_range_is_rejected(target):
    with pytest.raises(ValueError):
        run_migrations(FakeDatabase().query, target, migrations=_migrations(3))


def test_versions_with_gaps_are_rejected():
    migrations = [_migrations(1)[0], Migration(3, "skip", "SELECT 1", "SELECT 1")]
    with pytest.raises(ValueError):
        run_migrations(FakeDatabase().query, migrations=migrations)


@pytest.fixture
def sqlite_engine():
    engine = create_engine("sqlite://", poolclass=StaticPool)
    yield engine
    engine.dispose()


def _sqlite_migrations():
    return [
        Migration(1, "create vehicles", "CREATE TABLE vehicles (id INTEGER PRIMARY KEY, make TEXT)",
                  "DROP TABLE vehicles"),
        Migration(2, "create bookings", "CREATE TABLE bookings (id INTEGER PRIMARY KEY, car_model TEXT)",
                  "DROP TABLE bookings"),
    ]


def _tables(engine):
    return sorted(inspect(engine).get_table_names())


def test_executor_migrates_and_rolls_back(sqlite_engine):
    executor = SqlAlchemyMigrationExecutor(sqlite_engine)
    migrations = _sqlite_migrations()

    assert run_migrations(executor.query, transaction=executor.transaction, migrations=migrations) == (2, 2)
    assert _tables(sqlite_engine) == ["bookings", "schema_migrations", "vehicles"]
    assert executor.query("SELECT version, name FROM schema_migrations ORDER BY version") == [
        {"version": 1, "name": "create vehicles"},
        {"version": 2, "name": "create bookings"},
    ]

    assert run_migrations(executor.query, transaction=executor.transaction, migrations=migrations) == (2, 0)

    result = rollback_migrations(executor.query, 0, transaction=executor.transaction, migrations=migrations)
    assert result == (0, 2)
    assert _tables(sqlite_engine) == ["schema_migrations"]
    assert get_current_version(executor.query) == 0


def test_executor_failed_migration_leaves_nothing_behind(sqlite_engine):
    executor = SqlAlchemyMigrationExecutor(sqlite_engine)
    # The marker write for "broken" violates this check after the data insert has run
    executor.query(
        "CREATE TABLE schema_migrations (version INTEGER PRIMARY KEY, name VARCHAR(255) "
        "CHECK (name <> 'broken'), applied_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP)"
    )
    migrations = [
        _sqlite_migrations()[0],
        Migration(2, "broken", "INSERT INTO vehicles (make) VALUES ('Audi')", "DELETE FROM vehicles"),
    ]

    with pytest.raises(MigrationError) as exc_info:
        run_migrations(executor.query, transaction=executor.transaction, migrations=migrations)

    assert exc_info.value.version == 2
    assert get_current_version(executor.query) == 1
    assert executor.query("SELECT COUNT(*) AS total FROM vehicles") == [{"total": 0}]


def test_executor_invalid_sql_is_reported(sqlite_engine):
    executor = SqlAlchemyMigrationExecutor(sqlite_engine)
    migrations = [Migration(1, "typo", "CREATE TABEL vehicles (id INTEGER)", "SELECT 1")]

    with pytest.raises(MigrationError):
        run_migrations(executor.query, transaction=executor.transaction, migrations=migrations)
    assert get_current_version(executor.query) == 0


def test_cli_commands(sqlite_engine, monkeypatch, capsys):
    monkeypatch.setattr(app_database, "engine", sqlite_engine)
    monkeypatch.setattr(migrations_module, "MIGRATIONS", _sqlite_migrations())

    migrations_module.main(["migrate", "--target", "1"])
    assert "Database at version 1 (1 applied)" in capsys.readouterr().out
    assert "vehicles" in _tables(sqlite_engine)
    assert "bookings" not in _tables(sqlite_engine)

    migrations_module.main(["status"])
    assert "Database at version 1 of 2" in capsys.readouterr().out

    migrations_module.main(["migrate"])
    assert "Database at version 2 (1 applied)" in capsys.readouterr().out

    migrations_module.main(["rollback"])
    assert "Database at version 0 (2 rolled back)" in capsys.readouterr().out
