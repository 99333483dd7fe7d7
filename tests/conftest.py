import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["AUTO_MIGRATE"] = "false"
os.environ["LOG_FILE"] = ""
os.environ["LOG_LEVEL"] = "WARNING"
os.environ["JWT_SECRET"] = "test-secret"
os.environ["BCRYPT_ROUNDS"] = "4"

from datetime import date, timedelta

import pytest
from fastapi.testclient import TestClient

from app.database import Base, SessionLocal, engine
from app.main import app
from app.models import booking_model, service_model, session_model, user_model, vehicle_model  # noqa: F401
from app.models.user_model import User
from app.utils.cache import caches

PASSWORD = "Sup3rSecret!"


@pytest.fixture(autouse=True)
def database():
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture(autouse=True)
def reset_caches():
    for cache in caches.values():
        cache.clear()
    yield
    for cache in caches.values():
        cache.clear()


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def future_date():
    return (date.today() + timedelta(days=7)).isoformat()


def register(client, email, password=PASSWORD, first_name="Dana", last_name="Reyes"):
    response = client.post(
        "/api/v1/auth/register",
        json={"email": email, "password": password, "firstName": first_name, "lastName": last_name},
    )
    assert response.status_code == 201, response.text
    return response.json()


def auth_headers(tokens):
    return {"Authorization": f"Bearer {tokens['accessToken']}"}


def set_role(email, role):
    session = SessionLocal()
    try:
        user = session.query(User).filter(User.email == email).first()
        user.role = role
        session.commit()
    finally:
        session.close()


@pytest.fixture
def customer(client):
    return register(client, "dana@detailingsalonlux.com")


@pytest.fixture
def admin(client):
    tokens = register(client, "admin@detailingsalonlux.com", first_name="Alex", last_name="Morgan")
    set_role("admin@detailingsalonlux.com", "admin")
    return tokens
