"""Account records: admin tooling, profile edits and account listings.

Accounts are normally provisioned by the identity service; these helpers
enforce the same rules on the local `users` table: unique lower-cased email,
and a unique nutritionist id required exactly for the nutritionist role.
"""

from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from core.auth import hash_password
from core.exceptions import ConflictError, NotFoundError, ValidationError
from core.logger import get_logger
from core.repository import BaseRepository, save
from database.models import User
from services.authorization import Role

logger = get_logger("services.accounts")

MIN_PASSWORD_LENGTH = 6


def normalize_email(email: Optional[str]) -> str:
    if not email or "@" not in email:
        raise ValidationError("A valid email address is required", field="email")
    return email.strip().lower()


def _check_nutritionist_id(db: Session, role: Role, nutritionist_id: Optional[str], user_id: Optional[int] = None) -> Optional[str]:
    if role != Role.NUTRITIONIST:
        return None
    if not nutritionist_id or not nutritionist_id.strip():
        raise ValidationError("Nutritionist ID is required for nutritionist role", field="nutritionist_id")
    nutritionist_id = nutritionist_id.strip()
    taken = db.query(User).filter(User.nutritionist_id == nutritionist_id).first()
    if taken is not None and taken.id != user_id:
        raise ConflictError("This nutritionist ID is already registered", resource="User")
    return nutritionist_id


def create_user(
    db: Session,
    email: str,
    password: str,
    role: str = "user",
    username: Optional[str] = None,
    nutritionist_id: Optional[str] = None,
) -> User:
    """Create an account with a bcrypt password hash."""
    email = normalize_email(email)
    if not password or len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters long", field="password")
    parsed_role = Role.parse(role)
    if db.query(User).filter(User.email == email).first() is not None:
        raise ConflictError("User with this email already exists", resource="User")

    user = User(
        email=email,
        password_hash=hash_password(password),
        username=(username or email.split("@")[0]).strip(),
        role=parsed_role.value,
        nutritionist_id=_check_nutritionist_id(db, parsed_role, nutritionist_id),
        favorites=[],
        is_active=True,
    )
    user = save(db, user)
    logger.info("Created %s account %s (id=%s)", user.role, user.email, user.id)
    return user


def set_role(db: Session, email: str, role: str, nutritionist_id: Optional[str] = None) -> User:
    """Change an account's role, keeping the nutritionist id consistent with it."""
    email = normalize_email(email)
    user = db.query(User).filter(User.email == email).first()
    if user is None:
        raise NotFoundError("User", email)
    parsed_role = Role.parse(role)
    user.nutritionist_id = _check_nutritionist_id(
        db, parsed_role, nutritionist_id or user.nutritionist_id, user_id=user.id
    )
    user.role = parsed_role.value
    user = save(db, user)
    logger.info("User %s is now %s", user.email, user.role)
    return user


def update_profile(db: Session, user_id: int, changes: Dict[str, Any]) -> User:
    """Update the editable profile fields (`username`, `profile_image`) of a user.

    Absent keys are left unchanged. `profile_image` may be set to None to
    clear it; `username` must not be blank.
    """
    user = BaseRepository(User, db).get_or_404(user_id)
    if "username" in changes:
        username = (changes["username"] or "").strip()
        if not username:
            raise ValidationError("Username cannot be empty", field="username")
        user.username = username
    if "profile_image" in changes:
        user.profile_image = changes["profile_image"]
    user = save(db, user)
    logger.info("Profile of user %s updated (%s)", user.id, ", ".join(sorted(changes)) or "no changes")
    return user


def list_users(db: Session) -> List[User]:
    return db.query(User).order_by(User.created_at.desc(), User.id.desc()).all()


def list_nutritionists(db: Session) -> List[User]:
    """Active nutritionist accounts, newest first."""
    return (
        db.query(User)
        .filter(User.role == Role.NUTRITIONIST.value, User.is_active.is_(True))
        .order_by(User.created_at.desc(), User.id.desc())
        .all()
    )
