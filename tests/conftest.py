import itertools
import os
from datetime import datetime
from decimal import Decimal

os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key")
os.environ["DATABASE_URL"] = "sqlite://"
os.environ.setdefault("LOG_LEVEL", "WARNING")

import pytest
from fastapi.testclient import TestClient

from app.core.database import Base, SessionLocal, engine
from app.core.security import create_access_token, hash_password
from app.models.event_db.event_db import Event
from app.models.material_db.material_log_db import MaterialLog
from app.models.user_db.user_db import User, UserRole
from main import app

PASSWORD = "correct-horse-battery"
PASSWORD_HASH = hash_password(PASSWORD)


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
def make_user(db):
    counter = itertools.count(1)

    def _make(verified=True, role=UserRole.recycler):
        n = next(counter)
        user = User(
            email=f"recycler{n}@example.com",
            username=f"recycler{n}",
            name=f"Recycler {n}",
            hashed_password=PASSWORD_HASH,
            role=role.value,
            is_verified=verified,
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    return _make


@pytest.fixture
def make_event(db):
    def _make(capacity=100, start_time=datetime(2024, 1, 10, 9, 0), address="12 Green Street"):
        event = Event(address=address, start_time=start_time, weight_capacity=Decimal(str(capacity)))
        db.add(event)
        db.commit()
        db.refresh(event)
        return event

    return _make


@pytest.fixture
def make_log(db):
    """Insert a material log with a fixed timestamp, bypassing the store checks."""

    def _make(user, created_at, earnings, weight=1, event=None, material="mixed"):
        log = MaterialLog(
            user_id=user.id,
            event_id=event.id if event else None,
            material=material,
            weight=Decimal(str(weight)),
            rate_per_kg=Decimal("0.10"),
            earnings=Decimal(str(earnings)),
            created_at=created_at,
        )
        db.add(log)
        db.commit()
        db.refresh(log)
        return log

    return _make


@pytest.fixture
def auth_headers():
    def _headers(user):
        token = create_access_token({"sub": user.email})
        return {"Authorization": f"Bearer {token}"}

    return _headers


@pytest.fixture
def password():
    """Plain-text password of every user built by ``make_user``."""
    return PASSWORD
