import os

# Must be set before the app modules build their engine and settings
os.environ["DATABASE_URL"] = "sqlite://"
os.environ.setdefault("JWT_SECRET_KEY", "test-secret")

import pytest
from fastapi.testclient import TestClient

from app.auth.jwt_manager import jwt_manager
from app.auth.password import password_manager
from app.core.database import Base, SessionLocal, engine
from app.main import app
from app.models import Category, User

CATEGORY_ROWS = [
    ("restaurant", "Food", "🍽️"),
    ("museum", "Culture", "🏛️"),
    ("park", "Nature", "🌳"),
]


@pytest.fixture(autouse=True)
def reset_database():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def categories(db):
    rows = [Category(slug=slug, name=name, icon=icon) for slug, name, icon in CATEGORY_ROWS]
    db.add_all(rows)
    db.commit()
    return {c.slug: c for c in rows}


def _make_user(db, email, role, password="secret123", is_active=True):
    user = User(
        email=email,
        hashed_password=password_manager.hash_password(password),
        full_name=email.split("@")[0].title(),
        role=role,
        is_active=is_active,
    )
    db.add(user)
    db.commit()
    return user


@pytest.fixture
def admin_user(db):
    return _make_user(db, "admin@example.com", "admin")


@pytest.fixture
def regular_user(db):
    return _make_user(db, "user@example.com", "user")


def _auth_header(user):
    token, _ = jwt_manager.create_access_token(user.id, user.email, user.role)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def admin_headers(admin_user):
    return _auth_header(admin_user)


@pytest.fixture
def user_headers(regular_user):
    return _auth_header(regular_user)


@pytest.fixture
def client(categories):
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def create_spot(client, admin_headers):
    """POST a spot as admin and return its id."""
    def _create(**overrides):
        body = {
            "name": "Test Cafe",
            "description": "Great coffee near the river",
            "category": "restaurant",
            "lat": 48.85,
            "lng": 2.35,
            "price": 10,
            "rating": 4.2,
        }
        body.update(overrides)
        response = client.post("/api/spots", json=body, headers=admin_headers)
        assert response.status_code == 201, response.text
        return response.json()["spotId"]
    return _create
