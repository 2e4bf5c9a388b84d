"""Recipe lifecycle and moderation.

A recipe is submitted as ``pending`` and moves to ``validated`` or
``rejected`` only through a reviewer. An administrative reset back to
``pending`` exists for the admin CLI and is not routed over HTTP.

Editing keeps the current status: a validated recipe stays public after its
owner edits it.
"""

import json
from datetime import datetime
from typing import Any, Dict, List, Optional, Union

from sqlalchemy.orm import Session

from core.exceptions import ConflictError, ValidationError
from core.logger import get_logger
from core.repository import BaseRepository
from database.models import Recipe
from services.authorization import Principal, require_edit_or_delete, require_reviewer
from services.categories import category_synonyms, parse_category

logger = get_logger("services.moderation")

PENDING = "pending"
VALIDATED = "validated"
REJECTED = "rejected"
# Older documents were approved under this name; it reads as validated.
LEGACY_APPROVED = "approved"
PUBLIC_STATUSES = (VALIDATED, LEGACY_APPROVED)

EDITABLE_FIELDS = ("title", "ingredients", "instructions", "category", "cover_image")


def normalize_status(status: str) -> str:
    return VALIDATED if status == LEGACY_APPROVED else status


def parse_ingredients(value: Union[str, List[Any], None]) -> List[str]:
    """Turn submitted ingredients into a non-empty list of trimmed strings.

    Accepts a list, a JSON array string, or a comma separated string.
    """
    if isinstance(value, str):
        try:
            decoded = json.loads(value)
        except ValueError:
            decoded = value.split(",")
        value = decoded if isinstance(decoded, list) else [str(decoded)]
    if not isinstance(value, list):
        raise ValidationError("Ingredients must be a non-empty array", field="ingredients")
    items = [str(item).strip() for item in value if item is not None and str(item).strip()]
    if not items:
        raise ValidationError("Ingredients must be a non-empty array", field="ingredients")
    return items


def _required_text(value: Optional[str], field: str) -> str:
    if value is None or not value.strip():
        raise ValidationError(f"{field.capitalize()} is required", field=field)
    return value.strip()


class RecipeModeration:
    """Submission, editing, moderation transitions and moderation listings."""

    def submit(
        self,
        db: Session,
        principal: Principal,
        title: Optional[str],
        ingredients: Union[str, List[Any], None],
        instructions: Optional[str],
        category: Optional[str],
        cover_image: Optional[str] = None,
    ) -> Recipe:
        """Create a recipe owned by `principal` in the pending state."""
        recipe = Recipe(
            title=_required_text(title, "title"),
            ingredients=parse_ingredients(ingredients),
            instructions=_required_text(instructions, "instructions"),
            category=parse_category(category),
            cover_image=cover_image,
            created_by=principal.id,
            status=PENDING,
            comments=[],
            ratings_avg=0.0,
            ratings_count=0,
        )
        recipe = BaseRepository(Recipe, db).create(recipe)
        logger.info("Recipe %s submitted by user %s", recipe.id, principal.id)
        return recipe

    def get(self, db: Session, recipe_id: int) -> Recipe:
        return BaseRepository(Recipe, db).get_or_404(recipe_id)

    def approve(self, db: Session, recipe_id: int, reviewer: Principal) -> Recipe:
        """Mark the recipe validated by `reviewer`. Re-approving overwrites reviewer and time."""
        repo = BaseRepository(Recipe, db)
        recipe = repo.get_or_404(recipe_id)
        require_reviewer(reviewer)

        recipe.status = VALIDATED
        recipe.validated_by = reviewer.id
        recipe.validated_at = datetime.utcnow()
        recipe.rejection_reason = None
        recipe = repo.update(recipe)
        logger.info("Recipe %s approved by %s", recipe_id, reviewer.id)
        return recipe

    def reject(self, db: Session, recipe_id: int, reviewer: Principal, reason: Optional[str]) -> Recipe:
        """Mark the recipe rejected with a mandatory, non-blank reason."""
        repo = BaseRepository(Recipe, db)
        recipe = repo.get_or_404(recipe_id)
        require_reviewer(reviewer)
        if reason is None or not reason.strip():
            raise ValidationError("Rejection reason is required", field="reason")

        recipe.status = REJECTED
        recipe.validated_by = reviewer.id
        recipe.validated_at = datetime.utcnow()
        recipe.rejection_reason = reason.strip()
        recipe = repo.update(recipe)
        logger.info("Recipe %s rejected by %s", recipe_id, reviewer.id)
        return recipe

    def reset_status(self, db: Session, recipe_id: int) -> Recipe:
        """Administrative reset to pending, clearing every moderation field."""
        repo = BaseRepository(Recipe, db)
        recipe = repo.get_or_404(recipe_id)
        recipe.status = PENDING
        recipe.validated_by = None
        recipe.validated_at = None
        recipe.rejection_reason = None
        recipe = repo.update(recipe)
        logger.info("Recipe %s reset to pending", recipe_id)
        return recipe

    def edit(
        self,
        db: Session,
        recipe_id: int,
        principal: Principal,
        changes: Dict[str, Any],
        expected_version: Optional[int] = None,
    ) -> Recipe:
        """Apply the supplied fields to a recipe owned by `principal` (or any recipe for a reviewer).

        Fields that are absent or None are left as they are. When
        `expected_version` is given it must match the stored revision.
        """
        repo = BaseRepository(Recipe, db)
        recipe = repo.get_or_404(recipe_id)
        require_edit_or_delete(principal, recipe)
        if expected_version is not None and expected_version != recipe.version:
            raise ConflictError(
                f"Recipe {recipe_id} is at version {recipe.version}, not {expected_version}",
                resource="Recipe",
            )

        unknown = set(changes) - set(EDITABLE_FIELDS)
        if unknown:
            raise ValidationError(f"Fields cannot be edited: {', '.join(sorted(unknown))}")

        if changes.get("title") is not None:
            recipe.title = _required_text(changes["title"], "title")
        if changes.get("ingredients") is not None:
            recipe.ingredients = parse_ingredients(changes["ingredients"])
        if changes.get("instructions") is not None:
            recipe.instructions = _required_text(changes["instructions"], "instructions")
        if changes.get("category") is not None:
            recipe.category = parse_category(changes["category"])
        if changes.get("cover_image") is not None:
            recipe.cover_image = changes["cover_image"]

        recipe = repo.update(recipe)
        logger.info("Recipe %s updated by %s", recipe_id, principal.id)
        return recipe

    def delete(self, db: Session, recipe_id: int, principal: Principal) -> None:
        repo = BaseRepository(Recipe, db)
        recipe = repo.get_or_404(recipe_id)
        require_edit_or_delete(principal, recipe)
        repo.delete(recipe)
        logger.info("Recipe %s deleted by %s", recipe_id, principal.id)

    # Listings

    def list_public(self, db: Session, category: Optional[str] = None, skip: int = 0, limit: int = 100) -> List[Recipe]:
        """Validated recipes, newest first, optionally filtered by canonical category."""
        query = db.query(Recipe).filter(Recipe.status.in_(PUBLIC_STATUSES))
        if category:
            query = query.filter(Recipe.category.in_(category_synonyms(category)))
        return query.order_by(Recipe.created_at.desc(), Recipe.id.desc()).offset(skip).limit(limit).all()

    def list_owned(self, db: Session, principal: Principal) -> List[Recipe]:
        return (
            db.query(Recipe)
            .filter(Recipe.created_by == principal.id)
            .order_by(Recipe.created_at.desc(), Recipe.id.desc())
            .all()
        )

    def list_pending(self, db: Session, reviewer: Principal) -> List[Recipe]:
        require_reviewer(reviewer)
        return (
            db.query(Recipe)
            .filter(Recipe.status == PENDING)
            .order_by(Recipe.created_at.desc(), Recipe.id.desc())
            .all()
        )

    def list_validated(self, db: Session, reviewer: Principal, mine: bool = False) -> List[Recipe]:
        """Validated recipes; with `mine`, only those validated by `reviewer`."""
        require_reviewer(reviewer)
        query = db.query(Recipe).filter(Recipe.status.in_(PUBLIC_STATUSES))
        if mine:
            query = query.filter(Recipe.validated_by == reviewer.id)
        return query.order_by(Recipe.validated_at.desc(), Recipe.id.desc()).all()

    def list_rejected_by(self, db: Session, reviewer: Principal) -> List[Recipe]:
        require_reviewer(reviewer)
        return (
            db.query(Recipe)
            .filter(Recipe.status == REJECTED, Recipe.validated_by == reviewer.id)
            .order_by(Recipe.updated_at.desc(), Recipe.id.desc())
            .all()
        )

    def stats(self, db: Session, reviewer: Principal) -> Dict[str, int]:
        """Dashboard counters for a reviewer."""
        require_reviewer(reviewer)
        repo = BaseRepository(Recipe, db)
        return {
            "pending": repo.count(Recipe.status == PENDING),
            "validated": repo.count(Recipe.status.in_(PUBLIC_STATUSES), Recipe.validated_by == reviewer.id),
            "rejected": repo.count(Recipe.status == REJECTED, Recipe.validated_by == reviewer.id),
            "total": repo.count(),
            "total_validated": repo.count(Recipe.status.in_(PUBLIC_STATUSES)),
        }


recipe_moderation = RecipeModeration()
