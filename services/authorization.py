"""Role-based capability checks for recipe, comment and account operations.

Every call site evaluates one of the predicates below after the target
resource has been loaded, so a missing resource is reported as
`NotFoundError` before any `ForbiddenError`.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from core.exceptions import ForbiddenError, ValidationError


class Role(str, Enum):
    """Closed set of account roles."""

    USER = "user"
    NUTRITIONIST = "nutritionist"
    ADMIN = "admin"

    @classmethod
    def parse(cls, value: Optional[str]) -> "Role":
        """Return the role for `value`, raising `ValidationError` for unknown names."""
        try:
            return cls((value or cls.USER.value).strip().lower())
        except ValueError:
            raise ValidationError(f"Invalid role '{value}'. Must be user, nutritionist, or admin", field="role")


REVIEWER_ROLES = frozenset({Role.NUTRITIONIST, Role.ADMIN})


@dataclass(frozen=True)
class Principal:
    """Verified identity attached to an authenticated request."""

    id: int
    email: str
    role: Role


def is_owner(principal: Principal, recipe) -> bool:
    return recipe.created_by == principal.id


def is_reviewer(principal: Principal) -> bool:
    return principal.role in REVIEWER_ROLES


def is_admin(principal: Principal) -> bool:
    return principal.role == Role.ADMIN


def can_moderate(principal: Principal) -> bool:
    return is_reviewer(principal)


def can_edit_or_delete(principal: Principal, recipe) -> bool:
    return is_owner(principal, recipe) or is_reviewer(principal)


def can_delete_comment(principal: Principal, comment: dict) -> bool:
    return comment.get("author") == principal.id or is_admin(principal)


def can_view_user(principal: Principal, user_id: int) -> bool:
    return principal.id == user_id or is_reviewer(principal)


def require_admin(principal: Principal) -> None:
    if not is_admin(principal):
        raise ForbiddenError("Admin role required", capability="admin")


def require_view_user(principal: Principal, user_id: int) -> None:
    """Raise `ForbiddenError` unless the principal is that user or a reviewer."""
    if not can_view_user(principal, user_id):
        raise ForbiddenError("Not authorized to view this user", capability="view_user")


def require_reviewer(principal: Principal) -> None:
    """Raise `ForbiddenError` unless the principal may moderate recipes."""
    if not can_moderate(principal):
        raise ForbiddenError("Reviewer role (nutritionist or admin) required", capability="moderate")


def require_edit_or_delete(principal: Principal, recipe) -> None:
    """Raise `ForbiddenError` unless the principal owns the recipe or is a reviewer."""
    if not can_edit_or_delete(principal, recipe):
        raise ForbiddenError("Not authorized to modify this recipe", capability="edit_or_delete")


def require_comment_delete(principal: Principal, comment: dict) -> None:
    if not can_delete_comment(principal, comment):
        raise ForbiddenError("Not authorized to delete this comment", capability="delete_comment")
