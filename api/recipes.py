"""Recipe API router.

Exposes submission, editing, moderation, listings and comments. Routes stay
thin: they resolve the principal and session, delegate to the services and
serialize the result. Fixed paths (``/mine``, ``/pending``...) are declared
before ``/{recipe_id}`` so they are not captured by it.
"""

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session
from typing import List, Optional

from core.auth import get_current_principal
from core.logger import get_logger
from database import get_db_read, get_db_write
from database.models import Recipe
from schemas import (
    CommentRequest,
    CommentsResponse,
    RecipeCreateRequest,
    RecipeDetail,
    RecipeMutationResponse,
    RecipeStatsResponse,
    RecipeSummary,
    RecipeUpdateRequest,
    RejectRequest,
    ReportRequest,
    ReportResponse,
)
from services.authorization import Principal
from services.categories import normalize_category
from services.comments import comment_service
from services.moderation import normalize_status, recipe_moderation

logger = get_logger("api.recipes")
router = APIRouter(prefix="/recipes", tags=["recipes"])

MAX_PAGE_SIZE = 100


def _iso(value) -> Optional[str]:
    return value.isoformat() if value is not None else None


def recipe_to_summary(recipe: Recipe) -> RecipeSummary:
    """Convert a Recipe row to the public list representation."""
    return RecipeSummary(
        id=recipe.id,
        title=recipe.title,
        category=normalize_category(recipe.category),
        cover_image=recipe.cover_image,
        created_by=recipe.created_by,
        created_at=_iso(recipe.created_at),
        status=normalize_status(recipe.status),
        ratings_avg=recipe.ratings_avg or 0.0,
        ratings_count=recipe.ratings_count or 0,
        comments_count=len(recipe.comments or []),
    )


def recipe_to_detail(recipe: Recipe) -> RecipeDetail:
    """Convert a Recipe row to its full representation, comments included."""
    return RecipeDetail(
        id=recipe.id,
        title=recipe.title,
        ingredients=list(recipe.ingredients or []),
        instructions=recipe.instructions,
        category=normalize_category(recipe.category),
        cover_image=recipe.cover_image,
        created_by=recipe.created_by,
        status=normalize_status(recipe.status),
        validated_by=recipe.validated_by,
        validated_at=_iso(recipe.validated_at),
        rejection_reason=recipe.rejection_reason,
        comments=list(recipe.comments or []),
        ratings_avg=recipe.ratings_avg or 0.0,
        ratings_count=recipe.ratings_count or 0,
        version=recipe.version,
        created_at=_iso(recipe.created_at),
        updated_at=_iso(recipe.updated_at),
    )


def _comments_response(recipe: Recipe) -> CommentsResponse:
    return CommentsResponse(
        comments=list(recipe.comments or []),
        ratings_avg=recipe.ratings_avg,
        ratings_count=recipe.ratings_count,
    )


@router.get("", response_model=List[RecipeSummary])
def list_recipes(
    category: Optional[str] = None,
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=MAX_PAGE_SIZE),
    db: Session = Depends(get_db_read),
):
    """Return validated recipes, newest first, with comment counts only.

    Args:
        category: Optional canonical category; legacy synonyms are matched too.
        skip: Number of recipes to skip (pagination), at least 0.
        limit: Maximum number of recipes to return, 1 to 100.
    """
    recipes = recipe_moderation.list_public(db, category=category, skip=skip, limit=limit)
    logger.info("Public listing returned %s recipes", len(recipes))
    return [recipe_to_summary(r) for r in recipes]


@router.post("", response_model=RecipeMutationResponse, status_code=201)
def create_recipe(
    payload: RecipeCreateRequest,
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db_write),
):
    """Submit a recipe. It stays pending until a reviewer approves it.

    Raises:
        ValidationError: If a required field is missing or malformed.
    """
    recipe = recipe_moderation.submit(
        db,
        principal,
        title=payload.title,
        ingredients=payload.ingredients,
        instructions=payload.instructions,
        category=payload.category,
        cover_image=payload.cover_image,
    )
    return RecipeMutationResponse(message="Recipe created", recipe=recipe_to_detail(recipe))


@router.get("/mine", response_model=List[RecipeDetail])
def list_my_recipes(principal: Principal = Depends(get_current_principal), db: Session = Depends(get_db_read)):
    """Return every recipe owned by the caller, whatever its status."""
    return [recipe_to_detail(r) for r in recipe_moderation.list_owned(db, principal)]


@router.get("/pending", response_model=List[RecipeDetail])
def list_pending_recipes(principal: Principal = Depends(get_current_principal), db: Session = Depends(get_db_read)):
    """Return all recipes awaiting moderation (reviewers only)."""
    return [recipe_to_detail(r) for r in recipe_moderation.list_pending(db, principal)]


@router.get("/stats", response_model=RecipeStatsResponse)
def recipe_stats(principal: Principal = Depends(get_current_principal), db: Session = Depends(get_db_read)):
    """Return moderation counters for the reviewer dashboard."""
    counters = recipe_moderation.stats(db, principal)
    return RecipeStatsResponse(reviewer_id=principal.id, **counters)


@router.get("/validated/mine", response_model=List[RecipeDetail])
def list_validated_by_me(principal: Principal = Depends(get_current_principal), db: Session = Depends(get_db_read)):
    return [recipe_to_detail(r) for r in recipe_moderation.list_validated(db, principal, mine=True)]


@router.get("/validated/all", response_model=List[RecipeDetail])
def list_all_validated(principal: Principal = Depends(get_current_principal), db: Session = Depends(get_db_read)):
    return [recipe_to_detail(r) for r in recipe_moderation.list_validated(db, principal)]


@router.get("/rejected/mine", response_model=List[RecipeDetail])
def list_rejected_by_me(principal: Principal = Depends(get_current_principal), db: Session = Depends(get_db_read)):
    return [recipe_to_detail(r) for r in recipe_moderation.list_rejected_by(db, principal)]


@router.get("/{recipe_id}", response_model=RecipeDetail)
def get_recipe(recipe_id: int, db: Session = Depends(get_db_read)):
    """Return a recipe with its comments.

    Raises:
        NotFoundError: If the recipe does not exist.
    """
    return recipe_to_detail(recipe_moderation.get(db, recipe_id))


@router.put("/{recipe_id}", response_model=RecipeMutationResponse)
def update_recipe(
    recipe_id: int,
    payload: RecipeUpdateRequest,
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db_write),
):
    """Edit a recipe (owner or reviewer). The moderation status is kept.

    Raises:
        NotFoundError: If the recipe does not exist.
        ForbiddenError: If the caller is neither owner nor reviewer.
        ConflictError: If `version` is given and stale.
    """
    changes = payload.model_dump(exclude_unset=True, exclude={"version"})
    recipe = recipe_moderation.edit(db, recipe_id, principal, changes, expected_version=payload.version)
    return RecipeMutationResponse(message="Recipe updated", recipe=recipe_to_detail(recipe))


@router.delete("/{recipe_id}")
def delete_recipe(
    recipe_id: int,
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db_write),
):
    """Delete a recipe (owner or reviewer)."""
    recipe_moderation.delete(db, recipe_id, principal)
    return {"message": "Recipe deleted", "id": recipe_id}


@router.put("/{recipe_id}/approve", response_model=RecipeMutationResponse)
def approve_recipe(
    recipe_id: int,
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db_write),
):
    """Validate a recipe, making it publicly listed (reviewers only)."""
    recipe = recipe_moderation.approve(db, recipe_id, principal)
    return RecipeMutationResponse(message="Recipe approved", recipe=recipe_to_detail(recipe))


@router.put("/{recipe_id}/reject", response_model=RecipeMutationResponse)
def reject_recipe(
    recipe_id: int,
    payload: RejectRequest,
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db_write),
):
    """Reject a recipe with a mandatory reason (reviewers only).

    Raises:
        ValidationError: If the reason is missing or blank.
    """
    recipe = recipe_moderation.reject(db, recipe_id, principal, payload.reason)
    return RecipeMutationResponse(message="Recipe rejected", recipe=recipe_to_detail(recipe))


@router.post("/{recipe_id}/comment", response_model=CommentsResponse, status_code=201)
def add_comment(
    recipe_id: int,
    payload: CommentRequest,
    response: Response,
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db_write),
):
    """Post the caller's comment, replacing their earlier one if any.

    Answers 201 when a comment is created and 200 when one is replaced.
    """
    recipe, created = comment_service.add_or_update(db, recipe_id, principal, payload.text, payload.rating)
    if not created:
        response.status_code = status.HTTP_200_OK
    return _comments_response(recipe)


@router.delete("/{recipe_id}/comment/{comment_id}", response_model=CommentsResponse)
def delete_comment(
    recipe_id: int,
    comment_id: str,
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db_write),
):
    """Delete a comment (its author or an admin)."""
    recipe = comment_service.delete(db, recipe_id, comment_id, principal)
    return _comments_response(recipe)


@router.post("/{recipe_id}/comment/{comment_id}/report", response_model=ReportResponse)
def report_comment(
    recipe_id: int,
    comment_id: str,
    payload: Optional[ReportRequest] = None,
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db_write),
):
    """Flag a comment for manual review. Any authenticated user may report."""
    reason = payload.reason if payload else None
    reports = comment_service.report(db, recipe_id, comment_id, principal, reason)
    return ReportResponse(message="Comment reported", reports=reports)
