"""SQLAlchemy ORM models for the recipe sharing service.

This module defines the two persisted collections: User and Recipe. Comments
(and the reports attached to them) are embedded JSON sub-documents of a
recipe rather than rows of their own, so a comment id is only meaningful
within its parent recipe. Models stay behavior-free; moderation, comment and
favorite rules live in the `services` package.
"""

from sqlalchemy import Column, Integer, String, Float, DateTime, ForeignKey, Text, Boolean, JSON
from sqlalchemy.orm import declarative_base
from datetime import datetime

Base = declarative_base()


class User(Base):
    """ORM model representing an application user.

    `favorites` is an ordered list of recipe ids owned by the user. It may
    contain ids of recipes that have since been deleted.
    """

    __tablename__ = "users"
    id = Column(Integer, primary_key=True, index=True)
    email = Column(String, nullable=False, unique=True, index=True)
    password_hash = Column(String, nullable=False)
    username = Column(String, nullable=False)
    role = Column(String, nullable=False, default="user", index=True)
    nutritionist_id = Column(String, nullable=True, unique=True)
    favorites = Column(JSON, nullable=False, default=list)
    profile_image = Column(String, nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)
    last_login = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)


class Recipe(Base):
    """ORM model representing a submitted recipe and its moderation state.

    `ratings_avg` and `ratings_count` are derived from `comments` and are
    only written together with it. `version` is bumped by SQLAlchemy on
    every UPDATE and checked in the WHERE clause, so a write based on a
    stale read fails with `StaleDataError`.
    """

    __tablename__ = "recipes"
    id = Column(Integer, primary_key=True, index=True)
    title = Column(String, nullable=False)
    ingredients = Column(JSON, nullable=False)
    instructions = Column(Text, nullable=False)
    category = Column(String, nullable=False, index=True)
    cover_image = Column(String, nullable=True)
    created_by = Column(Integer, ForeignKey('users.id'), nullable=False, index=True)
    status = Column(String, nullable=False, default="pending", index=True)
    validated_by = Column(Integer, ForeignKey('users.id'), nullable=True)
    validated_at = Column(DateTime, nullable=True)
    rejection_reason = Column(Text, nullable=True)
    comments = Column(JSON, nullable=False, default=list)
    ratings_avg = Column(Float, nullable=False, default=0.0)
    ratings_count = Column(Integer, nullable=False, default=0)
    version = Column(Integer, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    __mapper_args__ = {"version_id_col": version}
