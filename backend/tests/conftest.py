import os

# Settings are read at import time, so the environment must be ready first
os.environ.setdefault("DB_HOST", "localhost")
os.environ.setdefault("DB_PORT", "5432")
os.environ.setdefault("DB_USERNAME", "postgres")
os.environ.setdefault("DB_PASSWORD", "postgres")
os.environ.setdefault("DB_NAME", "restaurants_test")
os.environ.setdefault("JWT_SECRET", "test-secret")
os.environ.setdefault("GEOGRAPHY_API_KEY", "test-api-key")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.core.database import Base, get_db
from app.core.security import TokenService
from app.core.config import settings
from app.main import app
from app.api.dependencies import get_place_lookup_client
from app.services.auth_service import AuthService
from app.services.place_lookup import Coordinates

# One in-memory SQLite connection shared by every session in a test
test_engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)


@event.listens_for(test_engine, "connect")
def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    # SQLite ignores ON DELETE CASCADE unless foreign keys are switched on
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=test_engine)

PASSWORD = "Secret123"


class FakePlaceClient:
    """Stands in for the Geoapify client and records every call"""

    def __init__(self):
        self.geocode_results = [Coordinates(lat=4.6097, lon=-74.0817)]
        self.places = [
            {"id": "place-1", "name": "La Puerta Falsa", "distance": 120},
            {"id": "place-2", "name": "Andres DC", "distance": 480},
        ]
        self.error = None
        self.calls = []

    def geocode(self, text):
        self.calls.append(("geocode", text))
        if self.error:
            raise self.error
        return list(self.geocode_results)

    def search_places(self, lat, lon, radius, category="restaurant", limit=20):
        self.calls.append(("search_places", lat, lon, radius))
        if self.error:
            raise self.error
        return list(self.places)


@pytest.fixture
def db():
    Base.metadata.create_all(bind=test_engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=test_engine)


@pytest.fixture
def token_service():
    return TokenService(settings)


@pytest.fixture
def auth_service(token_service):
    return AuthService(token_service)


@pytest.fixture
def place_client():
    return FakePlaceClient()


@pytest.fixture
def client(db, place_client):
    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_place_lookup_client] = lambda: place_client
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def registered(client):
    """A user registered through the API, with its token"""
    response = client.post(
        "/api/auth/register",
        json={"name": "Ana Maria", "email": "ana@example.com", "password": PASSWORD},
    )
    assert response.status_code == 201
    return response.json()


@pytest.fixture
def auth_headers(registered):
    return {"Authorization": f"Bearer {registered['token']}"}

