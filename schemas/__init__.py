"""Pydantic schema package for request and response models."""

from .recipe_schema import (
    RecipeCreateRequest,
    RecipeUpdateRequest,
    RejectRequest,
    RecipeSummary,
    RecipeDetail,
    RecipeMutationResponse,
    RecipeStatsResponse,
)
from .comment_schema import CommentRequest, ReportRequest, CommentsResponse, ReportResponse
from .user_schema import (
    FavoriteToggleResponse,
    FavoritesResponse,
    UserProfile,
    ProfileUpdateRequest,
    ProfileUpdateResponse,
    UsersResponse,
    NutritionistSummary,
    NutritionistsResponse,
)

__all__ = [
    "RecipeCreateRequest",
    "RecipeUpdateRequest",
    "RejectRequest",
    "RecipeSummary",
    "RecipeDetail",
    "RecipeMutationResponse",
    "RecipeStatsResponse",
    "CommentRequest",
    "ReportRequest",
    "CommentsResponse",
    "ReportResponse",
    "FavoriteToggleResponse",
    "FavoritesResponse",
    "UserProfile",
    "ProfileUpdateRequest",
    "ProfileUpdateResponse",
    "UsersResponse",
    "NutritionistSummary",
    "NutritionistsResponse",
]
