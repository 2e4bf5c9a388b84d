"""Shared fixtures: an isolated in-memory database per test and seeded accounts."""
import os

os.environ.setdefault("WRITE_DATABASE_URL", "sqlite://")
os.environ.setdefault("SEED_DEMO_DATA", "0")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from core.auth import create_access_token
from database import get_db_read, get_db_write
from database.models import Base, User
from main import app
from services.authorization import Principal, Role


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client(session_factory):
    """TestClient whose routes use the per-test database."""
    def _get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db_read] = _get_db
    app.dependency_overrides[get_db_write] = _get_db
    try:
        yield TestClient(app, raise_server_exceptions=False)
    finally:
        app.dependency_overrides.clear()


def _add_user(db, email, role="user", nutritionist_id=None):
    # Password hashing is covered in test_admin_tools; a placeholder hash keeps fixtures fast.
    user = User(
        email=email,
        password_hash="!",
        username=email.split("@")[0],
        role=role,
        nutritionist_id=nutritionist_id,
        favorites=[],
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


@pytest.fixture
def users(db):
    """Owner, another plain user, a nutritionist and an admin."""
    return {
        "owner": _add_user(db, "owner@example.com"),
        "other": _add_user(db, "other@example.com"),
        "nutritionist": _add_user(db, "nutri@example.com", role="nutritionist", nutritionist_id="NUTR001"),
        "admin": _add_user(db, "admin@example.com", role="admin"),
    }


def principal_for(user) -> Principal:
    return Principal(id=user.id, email=user.email, role=Role(user.role))


def auth_headers(user) -> dict:
    token = create_access_token(user.id, user.email, user.role)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def principals(users):
    return {name: principal_for(user) for name, user in users.items()}
