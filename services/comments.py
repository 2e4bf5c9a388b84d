"""Comments, ratings and comment reports embedded in a recipe.

Each author has at most one comment per recipe: posting again rewrites the
existing comment in place. Every change to the comment list goes through
`_store_comments`, which also recomputes `ratings_avg` and `ratings_count`
from the list it stores.
"""

import copy
import uuid
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy.orm import Session
from sqlalchemy.orm.attributes import flag_modified

from core.exceptions import NotFoundError, ValidationError
from core.logger import get_logger
from core.repository import BaseRepository
from database.models import Recipe
from services.authorization import Principal, require_comment_delete

logger = get_logger("services.comments")

MIN_RATING = 0
MAX_RATING = 5


def compute_rating_aggregate(comments: List[Dict[str, Any]]) -> Tuple[float, int]:
    """Return ``(average, count)`` of the comment ratings, average rounded to 2 places."""
    ratings = [int(c.get("rating") or 0) for c in comments]
    if not ratings:
        return 0.0, 0
    return round(sum(ratings) / len(ratings), 2), len(ratings)


def validate_rating(rating: Any) -> int:
    """Return `rating` as an int in [0, 5]; a missing rating counts as 0."""
    if rating is None:
        return 0
    if isinstance(rating, bool):
        raise ValidationError("Rating must be an integer between 0 and 5", field="rating")
    if isinstance(rating, float) and rating.is_integer():
        rating = int(rating)
    if not isinstance(rating, int) or not MIN_RATING <= rating <= MAX_RATING:
        raise ValidationError("Rating must be an integer between 0 and 5", field="rating")
    return rating


def _now() -> str:
    return datetime.utcnow().isoformat()


def _store_comments(recipe: Recipe, comments: List[Dict[str, Any]]) -> None:
    recipe.comments = comments
    recipe.ratings_avg, recipe.ratings_count = compute_rating_aggregate(comments)
    flag_modified(recipe, "comments")


def _find_comment(comments: List[Dict[str, Any]], comment_id: str) -> Optional[Dict[str, Any]]:
    for comment in comments:
        if comment.get("id") == comment_id:
            return comment
    return None


class CommentService:
    """Upsert, delete and report comments on a recipe."""

    def add_or_update(
        self,
        db: Session,
        recipe_id: int,
        author: Principal,
        text: Optional[str],
        rating: Any = None,
    ) -> Tuple[Recipe, bool]:
        """Create the author's comment or overwrite the existing one.

        Returns:
            The refreshed recipe and True when a new comment was appended.
        """
        if text is None or not text.strip():
            raise ValidationError("Comment text is required", field="text")
        rating = validate_rating(rating)

        repo = BaseRepository(Recipe, db)
        recipe = repo.get_or_404(recipe_id)

        comments = copy.deepcopy(recipe.comments or [])
        existing = next((c for c in comments if c.get("author") == author.id), None)
        if existing is not None:
            existing["text"] = text.strip()
            existing["rating"] = rating
            existing["created_at"] = _now()
        else:
            comments.append({
                "id": uuid.uuid4().hex,
                "text": text.strip(),
                "rating": rating,
                "author": author.id,
                "author_email": author.email,
                "created_at": _now(),
                "reports": [],
            })

        _store_comments(recipe, comments)
        recipe = repo.update(recipe)
        logger.info(
            "Comment %s on recipe %s by user %s (avg=%s, count=%s)",
            "updated" if existing is not None else "added",
            recipe_id,
            author.id,
            recipe.ratings_avg,
            recipe.ratings_count,
        )
        return recipe, existing is None

    def delete(self, db: Session, recipe_id: int, comment_id: str, requester: Principal) -> Recipe:
        """Remove a comment; only its author or an admin may do so."""
        repo = BaseRepository(Recipe, db)
        recipe = repo.get_or_404(recipe_id)

        comments = copy.deepcopy(recipe.comments or [])
        comment = _find_comment(comments, comment_id)
        if comment is None:
            raise NotFoundError("Comment", comment_id)
        require_comment_delete(requester, comment)

        _store_comments(recipe, [c for c in comments if c.get("id") != comment_id])
        recipe = repo.update(recipe)
        logger.info("Comment %s on recipe %s deleted by user %s", comment_id, recipe_id, requester.id)
        return recipe

    def report(
        self,
        db: Session,
        recipe_id: int,
        comment_id: str,
        reporter: Principal,
        reason: Optional[str] = None,
    ) -> List[Dict[str, Any]]:
        """Append a report to a comment and return the comment's reports.

        Reports are kept for manual follow-up; they never change ratings or
        moderation state, and repeat reports are not deduplicated.
        """
        repo = BaseRepository(Recipe, db)
        recipe = repo.get_or_404(recipe_id)

        comments = copy.deepcopy(recipe.comments or [])
        comment = _find_comment(comments, comment_id)
        if comment is None:
            raise NotFoundError("Comment", comment_id)

        reason = reason.strip() if reason and reason.strip() else None
        comment.setdefault("reports", []).append({
            "reporter": reporter.id,
            "reason": reason,
            "reported_at": _now(),
        })

        _store_comments(recipe, comments)
        repo.update(recipe)
        logger.info("Comment %s on recipe %s reported by user %s", comment_id, recipe_id, reporter.id)
        return comment["reports"]


comment_service = CommentService()
