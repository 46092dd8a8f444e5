import os
import tempfile
from datetime import date, timedelta

# Set environment variables BEFORE any imports that might use settings
# Use a temporary directory for test database to avoid permission issues
_test_db_dir = tempfile.mkdtemp()
_test_db_path = os.path.join(_test_db_dir, "test_reservations.db")
os.environ["DATABASE_URL"] = f"sqlite:///{_test_db_path}"
os.environ["RESERVATION_LOCK_TIMEOUT_SECONDS"] = "5"

import pytest
from alembic import command
from alembic.config import Config
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker, Session

from app.main import app


@pytest.fixture(scope="function")
def session_factory():
    """Create a fresh database for each test, run migrations and return a session factory."""
    # Use a temporary file for SQLite database
    temp_db_dir = tempfile.mkdtemp()
    test_db_path = os.path.join(temp_db_dir, "test.db")
    test_db_url = f"sqlite:///{test_db_path}"

    # Create test engine and session with proper SQLite settings
    test_engine = create_engine(
        test_db_url,
        connect_args={"check_same_thread": False},
    )

    # Enable WAL mode to reduce locking issues
    @event.listens_for(test_engine, "connect")
    def set_sqlite_pragma(dbapi_conn, connection_record):
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA journal_mode=WAL")
        cursor.execute("PRAGMA busy_timeout=5000")
        cursor.close()

    TestingSessionLocal = sessionmaker(
        autocommit=False, autoflush=False, bind=test_engine
    )

    # Run Alembic migrations to set up the database schema
    alembic_cfg = Config("alembic.ini")
    alembic_cfg.set_main_option("sqlalchemy.url", test_db_url)
    command.upgrade(alembic_cfg, "head")

    yield TestingSessionLocal

    # Dispose the engine to close all connections
    test_engine.dispose()

    # Clean up - remove test database file and directory
    for suffix in ["", "-wal", "-shm"]:
        path = f"{test_db_path}{suffix}"
        if os.path.exists(path):
            os.remove(path)
    if os.path.exists(temp_db_dir):
        os.rmdir(temp_db_dir)


@pytest.fixture(scope="function")
def db_session(session_factory):
    db = session_factory()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture(scope="function")
def client(db_session):
    """Create a test client with database dependency override."""

    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    from app.api.deps import get_db

    app.dependency_overrides[get_db] = override_get_db

    yield TestClient(app)

    app.dependency_overrides.clear()


@pytest.fixture(scope="function")
def db(db_session):
    """Alias for db_session to match test naming conventions."""
    return db_session


@pytest.fixture(scope="function")
def vehicle(db: Session):
    """An operational vehicle renting at 5000 per day."""
    from app.repositories.vehicle import create_vehicle

    return create_vehicle(db, name="Renault Clio 5", daily_rate=5000)


@pytest.fixture(scope="function")
def other_vehicle(db: Session):
    from app.repositories.vehicle import create_vehicle

    return create_vehicle(db, name="Peugeot 208", daily_rate=4000)


@pytest.fixture(scope="function")
def retired_vehicle(db: Session):
    """A vehicle in maintenance (not operational)."""
    from app.repositories.vehicle import create_vehicle

    return create_vehicle(db, name="Dacia Logan", daily_rate=3000, is_operational=False)


@pytest.fixture(scope="function")
def rental_client(db: Session):
    from app.repositories.client import create_client

    return create_client(db, full_name="Amina Benali", email="amina@example.com")


@pytest.fixture(scope="function")
def future():
    """Build dates relative to today so bookings are never in the past."""

    def _future(days: int) -> date:
        return date.today() + timedelta(days=days)

    return _future


@pytest.fixture(scope="function")
def existing_contract(db: Session):
    """Insert a contract directly (bypassing booking rules) to set up a calendar."""
    from app.repositories.contract import create_contract

    def _existing_contract(
        vehicle_id: int,
        client_id: int,
        start_date: date,
        end_date: date,
        status: str = "CONFIRMED",
        payment_status: str = "PENDING",
    ):
        return create_contract(
            db,
            vehicle_id=vehicle_id,
            client_id=client_id,
            start_date=start_date,
            end_date=end_date,
            daily_rate=5000,
            total_price=10000,
            deposit=3000,
            status=status,
            payment_status=payment_status,
        )

    return _existing_contract
