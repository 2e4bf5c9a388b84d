"""Database helpers: engines, session factories and DB initialization.

Provides read/write session factories and a simple `init_db` helper that
creates tables and seeds the demo recipes when the DB is empty.
"""

import os
import secrets
from datetime import datetime
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from .models import Base, Recipe, User
from core.logger import get_logger
from data.recipes_dataset import RECIPES_DATA

logger = get_logger("database")

# Read/Write partitioning pattern
# In production, set WRITE_DATABASE_URL and READ_DATABASE_URL to different DB instances.
# For SQLite/demo this defaults to the same file but the interfaces are separated.
WRITE_DATABASE_URL = os.getenv("WRITE_DATABASE_URL", "sqlite:///recipes.db")
READ_DATABASE_URL = os.getenv("READ_DATABASE_URL", WRITE_DATABASE_URL)
SEED_DEMO_DATA = os.getenv("SEED_DEMO_DATA", "1") not in ("0", "false", "False", "")
SEED_ADMIN_EMAIL = os.getenv("SEED_ADMIN_EMAIL", "admin@recipes.local")


def make_engine(url: str):
    """Create an engine, keeping a single shared connection for in-memory SQLite."""
    if url.startswith("sqlite"):
        kwargs = {"connect_args": {"check_same_thread": False}}
        if url in ("sqlite://", "sqlite:///:memory:"):
            kwargs["poolclass"] = StaticPool
        return create_engine(url, **kwargs)
    return create_engine(url, pool_pre_ping=True)


# Engines
write_engine = make_engine(WRITE_DATABASE_URL)
read_engine = write_engine if READ_DATABASE_URL == WRITE_DATABASE_URL else make_engine(READ_DATABASE_URL)

# Session factories
WriteSessionLocal = sessionmaker(bind=write_engine)
ReadSessionLocal = sessionmaker(bind=read_engine)


def seed_demo_recipes(session) -> int:
    """Insert the demo recipes owned by a seeded admin account.

    The admin gets a random password hash nobody knows; use
    `data/admin_tools.py create-user` to set up real accounts.
    """
    from core.auth import hash_password

    owner = session.query(User).filter(User.email == SEED_ADMIN_EMAIL).first()
    if owner is None:
        owner = User(
            email=SEED_ADMIN_EMAIL,
            password_hash=hash_password(secrets.token_urlsafe(32)),
            username=SEED_ADMIN_EMAIL.split("@")[0],
            role="admin",
            favorites=[],
        )
        session.add(owner)
        session.flush()

    for item in RECIPES_DATA:
        session.add(Recipe(
            title=item["title"],
            ingredients=list(item["ingredients"]),
            instructions=item["instructions"],
            category=item["category"],
            created_by=owner.id,
            status="validated",
            validated_by=owner.id,
            validated_at=datetime.utcnow(),
            comments=[],
        ))
    session.commit()
    logger.info("Seeded %s demo recipes", len(RECIPES_DATA))
    return len(RECIPES_DATA)


def init_db():
    """Initialize database schema and seed recipes.

    Creates all tables using SQLAlchemy models and populates the recipes
    table with demo data if the table is empty and seeding is enabled.
    """
    Base.metadata.create_all(bind=write_engine)
    if not SEED_DEMO_DATA:
        return
    session = WriteSessionLocal()
    try:
        count = session.query(Recipe).count()
        if count == 0:
            seed_demo_recipes(session)
    finally:
        session.close()


# Convenience generators for dependency injection
def get_write_session():
    """Yield a write-enabled SQLAlchemy session for the request scope.

    Use this generator as a FastAPI dependency to ensure the session is
    properly closed after the request completes.
    """
    db = WriteSessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_read_session():
    """Yield a read-only SQLAlchemy session for the request scope.

    Used for read endpoints where routing reads to a replica may be desired.
    """
    db = ReadSessionLocal()
    try:
        yield db
    finally:
        db.close()


# FastAPI dependency names used by the routers. Tests override these two.
def get_db_write():
    """Yield a write-capable DB session for FastAPI dependency injection."""
    yield from get_write_session()


def get_db_read():
    """Yield a read-only DB session for FastAPI dependency injection."""
    yield from get_read_session()
