"""Principal extraction and password hashing.

Tokens are issued by the identity service; this module only verifies them
and turns the `id`, `email` and `role` claims into a `Principal`.
`create_access_token` exists for tooling and tests.
"""

import os
from datetime import datetime, timedelta
from typing import Optional

import bcrypt
from fastapi import Request
from jose import ExpiredSignatureError, JWTError, jwt

from core.exceptions import UnauthenticatedError, ValidationError
from core.logger import get_logger
from services.authorization import Principal, Role

logger = get_logger("core.auth")

SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-change-me")
ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
ACCESS_TOKEN_EXPIRE_DAYS = int(os.getenv("ACCESS_TOKEN_EXPIRE_DAYS", "7"))


def hash_password(password: str) -> str:
    """Hash password using bcrypt"""
    return bcrypt.hashpw(password.encode('utf-8'), bcrypt.gensalt()).decode('utf-8')


def verify_password(password: str, hashed: str) -> bool:
    return bcrypt.checkpw(password.encode('utf-8'), hashed.encode('utf-8'))


def create_access_token(user_id: int, email: str, role: str, expires_days: int = ACCESS_TOKEN_EXPIRE_DAYS) -> str:
    expire = datetime.utcnow() + timedelta(days=expires_days)
    payload = {
        "id": user_id,
        "email": email,
        "role": role,
        "exp": expire,
    }
    return jwt.encode(payload, SECRET_KEY, algorithm=ALGORITHM)


def decode_token(token: str) -> Principal:
    """Verify `token` and return the principal it carries.

    Raises:
        UnauthenticatedError: If the token is expired, malformed, badly
            signed or lacks the expected claims.
    """
    try:
        payload = jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
    except ExpiredSignatureError:
        raise UnauthenticatedError("Token expired")
    except JWTError:
        raise UnauthenticatedError("Invalid token")

    raw_id = payload.get("id")
    email = payload.get("email")
    if raw_id is None or not email:
        raise UnauthenticatedError("Token is missing identity claims")
    try:
        user_id = int(raw_id)
        role = Role.parse(payload.get("role"))
    except (TypeError, ValueError, ValidationError):
        raise UnauthenticatedError("Token carries invalid identity claims")
    return Principal(id=user_id, email=email, role=role)


def _bearer_token(request: Request) -> Optional[str]:
    auth_header = request.headers.get("Authorization")
    if not auth_header or not auth_header.startswith("Bearer "):
        return None
    token = auth_header.split(" ", 1)[1].strip()
    return token or None


def get_current_principal(request: Request) -> Principal:
    """FastAPI dependency: the verified principal, or 401."""
    token = _bearer_token(request)
    if token is None:
        raise UnauthenticatedError("Missing bearer token")
    principal = decode_token(token)
    logger.debug("Authenticated %s (id=%s, role=%s)", principal.email, principal.id, principal.role.value)
    return principal
