"""Schemas for comment submission, deletion and reporting."""

from pydantic import BaseModel, Field
from typing import Any, Dict, List, Optional


class CommentRequest(BaseModel):
    """Payload for posting (or replacing) the caller's comment on a recipe."""

    text: Optional[str] = Field(None, examples=["Great with a green salad"])
    rating: Optional[int] = Field(None, examples=[4], description="Integer rating from 0 to 5")


class ReportRequest(BaseModel):
    reason: Optional[str] = Field(None, examples=["Spam"])


class CommentsResponse(BaseModel):
    """Comment list of a recipe together with its recomputed rating aggregate."""

    comments: List[Dict[str, Any]]
    ratings_avg: float
    ratings_count: int


class ReportResponse(BaseModel):
    message: str
    reports: List[Dict[str, Any]]
