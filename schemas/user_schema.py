"""Schemas for user-related requests and responses."""

from pydantic import BaseModel, Field
from typing import List, Optional

from .recipe_schema import RecipeDetail


class FavoriteToggleResponse(BaseModel):
    """Result of toggling a recipe in the caller's favorites."""

    message: str
    is_favorite: bool
    favorites: List[int]


class FavoritesResponse(BaseModel):
    favorites: List[RecipeDetail]
    count: int


class UserProfile(BaseModel):
    """Public profile of a user, without credentials."""

    id: int
    email: str
    username: str
    role: str
    nutritionist_id: Optional[str] = None
    profile_image: Optional[str] = None
    favorites: List[int]
    favorites_count: int
    is_active: bool
    created_at: Optional[str] = None
    last_login: Optional[str] = None


class ProfileUpdateRequest(BaseModel):
    """Editable profile fields; omitted fields are left unchanged."""

    username: Optional[str] = Field(None, examples=["chef_anna"])
    profile_image: Optional[str] = Field(None, description="Reference to an already uploaded image; null clears it")


class ProfileUpdateResponse(BaseModel):
    message: str
    user: UserProfile


class UsersResponse(BaseModel):
    users: List[UserProfile]
    count: int


class NutritionistSummary(BaseModel):
    id: int
    email: str
    username: str
    nutritionist_id: Optional[str] = None
    created_at: Optional[str] = None
    last_login: Optional[str] = None


class NutritionistsResponse(BaseModel):
    nutritionists: List[NutritionistSummary]
    count: int
