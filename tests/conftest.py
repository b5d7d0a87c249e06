import os

# must be set before the app (and its engine) is imported
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["RESTAURANT_TIMEZONE"] = "UTC"
os.environ.setdefault("SECRET_KEY", "test-secret")

from decimal import Decimal

import pytest
from fastapi.testclient import TestClient

from app.db.session import Base, SessionLocal, engine, import_models
from app.main import app
from app.models.dish import Dish
from app.models.table import Table
from app.models.user import User, RoleEnum
from app.services.auth import get_password_hash, token_for_user

import_models()

PASSWORD = "secret-pass"


@pytest.fixture(autouse=True)
def schema():
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


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
def users(db):
    hashed = get_password_hash(PASSWORD)
    out = {}
    for role in RoleEnum:
        user = User(
            email=f"{role.value}@example.com",
            password_hash=hashed,
            first_name=role.value.title(),
            last_name="Test",
            role=role,
        )
        db.add(user)
        out[role.value] = user
    inactive = User(
        email="gone@example.com",
        password_hash=hashed,
        first_name="Gone",
        last_name="Test",
        role=RoleEnum.admin,
        is_active=False,
    )
    db.add(inactive)
    out["inactive"] = inactive
    db.commit()
    return out


@pytest.fixture
def headers(users):
    def _headers(role="admin"):
        return {"Authorization": f"Bearer {token_for_user(users[role])}"}
    return _headers


@pytest.fixture
def tables(db):
    small = Table(name="T1", capacity=4)
    large = Table(name="T2", capacity=8)
    db.add_all([small, large])
    db.commit()
    return {"small": small, "large": large}


@pytest.fixture
def dishes(db):
    soup = Dish(name="Soup", price=Decimal("5.50"))
    steak = Dish(name="Steak", price=Decimal("19.90"))
    db.add_all([soup, steak])
    db.commit()
    return {"soup": soup, "steak": steak}
