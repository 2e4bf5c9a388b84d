"""User API router.

Favorites, the caller's profile and account listings for reviewers. Account
registration and sign-in belong to the identity service and are not served
here. Fixed paths are declared before ``/{user_id}``.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import Optional

from api.recipes import recipe_to_detail
from core.auth import get_current_principal
from core.logger import get_logger
from core.repository import BaseRepository
from database import get_db_read, get_db_write
from database import models
from schemas import (
    FavoriteToggleResponse,
    FavoritesResponse,
    NutritionistSummary,
    NutritionistsResponse,
    ProfileUpdateRequest,
    ProfileUpdateResponse,
    UserProfile,
    UsersResponse,
)
from services.accounts import list_nutritionists, list_users, update_profile
from services.authorization import Principal, require_admin, require_reviewer, require_view_user
from services.favorites import favorites_service

logger = get_logger("api.users")
router = APIRouter(prefix="/user", tags=["users"])


def _iso(value) -> Optional[str]:
    return value.isoformat() if value is not None else None


def user_to_profile(user: models.User) -> UserProfile:
    """Convert a User row to its public profile, without credentials."""
    favorites = list(user.favorites or [])
    return UserProfile(
        id=user.id,
        email=user.email,
        username=user.username,
        role=user.role,
        nutritionist_id=user.nutritionist_id,
        profile_image=user.profile_image,
        favorites=favorites,
        favorites_count=len(favorites),
        is_active=user.is_active,
        created_at=_iso(user.created_at),
        last_login=_iso(user.last_login),
    )


@router.put("/favorite/{recipe_id}", response_model=FavoriteToggleResponse)
def toggle_favorite(
    recipe_id: int,
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db_write),
):
    """Add the recipe to the caller's favorites, or remove it if already present.

    Raises:
        NotFoundError: If the caller's account or the recipe does not exist.
    """
    is_favorite, favorites = favorites_service.toggle(db, principal.id, recipe_id)
    return FavoriteToggleResponse(
        message="Recipe added to favorites" if is_favorite else "Recipe removed from favorites",
        is_favorite=is_favorite,
        favorites=favorites,
    )


@router.get("/favorites", response_model=FavoritesResponse)
def list_favorites(principal: Principal = Depends(get_current_principal), db: Session = Depends(get_db_read)):
    """Return the caller's favorite recipes; deleted recipes are left out."""
    recipes = favorites_service.list_favorites(db, principal.id)
    return FavoritesResponse(favorites=[recipe_to_detail(r) for r in recipes], count=len(recipes))


@router.get("/profile", response_model=UserProfile)
def get_profile(principal: Principal = Depends(get_current_principal), db: Session = Depends(get_db_read)):
    """Return the caller's public profile."""
    return user_to_profile(BaseRepository(models.User, db).get_or_404(principal.id))


@router.put("/profile", response_model=ProfileUpdateResponse)
def edit_profile(
    payload: ProfileUpdateRequest,
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db_write),
):
    """Update the caller's username and/or profile image.

    Raises:
        ValidationError: If `username` is given but blank.
    """
    user = update_profile(db, principal.id, payload.model_dump(exclude_unset=True))
    return ProfileUpdateResponse(message="Profile updated", user=user_to_profile(user))


@router.get("/users", response_model=UsersResponse)
def get_users(principal: Principal = Depends(get_current_principal), db: Session = Depends(get_db_read)):
    """Return every account, newest first (reviewers only)."""
    require_reviewer(principal)
    users = list_users(db)
    return UsersResponse(users=[user_to_profile(u) for u in users], count=len(users))


@router.get("/nutritionists/all", response_model=NutritionistsResponse)
def get_nutritionists(principal: Principal = Depends(get_current_principal), db: Session = Depends(get_db_read)):
    """Return the active nutritionist accounts (admins only)."""
    require_admin(principal)
    nutritionists = [
        NutritionistSummary(
            id=u.id,
            email=u.email,
            username=u.username,
            nutritionist_id=u.nutritionist_id,
            created_at=_iso(u.created_at),
            last_login=_iso(u.last_login),
        )
        for u in list_nutritionists(db)
    ]
    return NutritionistsResponse(nutritionists=nutritionists, count=len(nutritionists))


@router.get("/{user_id}", response_model=UserProfile)
def get_user(user_id: int, principal: Principal = Depends(get_current_principal), db: Session = Depends(get_db_read)):
    """Return a user's public profile (the user themself or a reviewer).

    Raises:
        NotFoundError: If the account does not exist.
        ForbiddenError: If the caller is another plain user.
    """
    user = BaseRepository(models.User, db).get_or_404(user_id)
    require_view_user(principal, user.id)
    return user_to_profile(user)
