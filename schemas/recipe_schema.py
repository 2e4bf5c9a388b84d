"""Schemas for recipe requests and responses."""

from pydantic import BaseModel, Field
from typing import Any, Dict, List, Optional, Union


class RecipeCreateRequest(BaseModel):
    """Payload for submitting a new recipe.

    Presence and emptiness are checked by the moderation service so that a
    missing field is reported as a 400 `validation_error`.
    """

    title: Optional[str] = Field(None, examples=["Mushroom risotto"])
    ingredients: Optional[Union[List[str], str]] = Field(
        None,
        examples=[["300g arborio rice", "200g mushrooms"]],
        description="List of ingredients, a JSON array string or a comma separated string",
    )
    instructions: Optional[str] = Field(None, examples=["Sweat the onion, add the rice..."])
    category: Optional[str] = Field(None, examples=["plats"], description="plats or dessert (legacy sweet/sour/salty/spicy accepted)")
    cover_image: Optional[str] = Field(None, description="Reference to an already uploaded image")


class RecipeUpdateRequest(BaseModel):
    """Partial update of a recipe; omitted fields are left unchanged."""

    title: Optional[str] = None
    ingredients: Optional[Union[List[str], str]] = None
    instructions: Optional[str] = None
    category: Optional[str] = None
    cover_image: Optional[str] = None
    version: Optional[int] = Field(None, description="Expected revision; the update fails with 409 if it is stale")


class RejectRequest(BaseModel):
    reason: Optional[str] = Field(None, examples=["Contains gluten"])


class RecipeSummary(BaseModel):
    """Public list entry: no comment bodies, only their count."""

    id: int
    title: str
    category: str
    cover_image: Optional[str] = None
    created_by: int
    created_at: Optional[str] = None
    status: str
    ratings_avg: float
    ratings_count: int
    comments_count: int


class RecipeDetail(BaseModel):
    """Full recipe representation, including embedded comments."""

    id: int
    title: str
    ingredients: List[str]
    instructions: str
    category: str
    cover_image: Optional[str] = None
    created_by: int
    status: str
    validated_by: Optional[int] = None
    validated_at: Optional[str] = None
    rejection_reason: Optional[str] = None
    comments: List[Dict[str, Any]] = []
    ratings_avg: float
    ratings_count: int
    version: int
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


class RecipeMutationResponse(BaseModel):
    message: str
    recipe: RecipeDetail


class RecipeStatsResponse(BaseModel):
    """Reviewer dashboard counters."""

    pending: int
    validated: int
    rejected: int
    total: int
    total_validated: int
    reviewer_id: int
