"""Per-user favorite recipes.

Favorites are stored on the user as an ordered list of recipe ids. Any
recipe may be favorited whatever its moderation status, and ids of deleted
recipes are tolerated and skipped when listing.
"""

from typing import List, Tuple

from sqlalchemy.orm import Session
from sqlalchemy.orm.attributes import flag_modified

from core.logger import get_logger
from core.repository import BaseRepository
from database.models import Recipe, User

logger = get_logger("services.favorites")


class FavoritesService:
    """Toggle and list a user's favorite recipes."""

    def toggle(self, db: Session, user_id: int, recipe_id: int) -> Tuple[bool, List[int]]:
        """Add the recipe to the user's favorites, or remove it if already there.

        Returns:
            ``(is_favorite, favorites)`` after the change.

        Raises:
            NotFoundError: If the user or the recipe does not exist.
        """
        users = BaseRepository(User, db)
        user = users.get_or_404(user_id)
        BaseRepository(Recipe, db).get_or_404(recipe_id)

        favorites = list(user.favorites or [])
        if recipe_id in favorites:
            favorites = [fid for fid in favorites if fid != recipe_id]
            is_favorite = False
        else:
            favorites.append(recipe_id)
            is_favorite = True

        user.favorites = favorites
        flag_modified(user, "favorites")
        user = users.update(user)
        logger.info(
            "Recipe %s %s favorites of user %s",
            recipe_id,
            "added to" if is_favorite else "removed from",
            user_id,
        )
        return is_favorite, list(user.favorites)

    def list_favorites(self, db: Session, user_id: int) -> List[Recipe]:
        """Favorite recipes in the order they were added, skipping deleted ones."""
        user = BaseRepository(User, db).get_or_404(user_id)
        ids = list(user.favorites or [])
        by_id = {r.id: r for r in BaseRepository(Recipe, db).get_many(ids)}
        dangling = [fid for fid in ids if fid not in by_id]
        if dangling:
            logger.debug("Skipping deleted favorites %s of user %s", dangling, user_id)
        return [by_id[fid] for fid in ids if fid in by_id]


favorites_service = FavoritesService()
