"""Repository pattern base class for database operations.

Provides common CRUD operations and transaction management utilities
to reduce boilerplate in API endpoints and service layers. Commits go through
`_commit`, which turns lost updates and unique-key violations into
`ConflictError` after rolling the session back.
"""

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError
from typing import TypeVar, Generic, Type, Optional, List, Any
from database.models import Base
from core.exceptions import ConflictError, NotFoundError
from core.logger import get_logger

logger = get_logger("core.repository")

T = TypeVar('T', bound=Base)


def _commit(session: Session, resource: str) -> None:
    """Commit the session, mapping expected storage conflicts to `ConflictError`."""
    try:
        session.commit()
    except StaleDataError:
        session.rollback()
        logger.warning("Lost update detected on %s", resource)
        raise ConflictError(
            f"{resource} was modified by another request, reload and retry",
            resource=resource,
        )
    except IntegrityError as exc:
        session.rollback()
        logger.warning("Integrity error on %s: %s", resource, exc.orig)
        raise ConflictError(f"{resource} conflicts with existing data", resource=resource)


class BaseRepository(Generic[T]):
    """Generic repository for common database operations.

    Attributes:
        model: SQLAlchemy model class to operate on.
        session: Database session for executing queries.
    """

    def __init__(self, model: Type[T], session: Session):
        """Initialize repository with model and session.

        Args:
            model: SQLAlchemy model class.
            session: Database session.
        """
        self.model = model
        self.session = session

    @property
    def resource(self) -> str:
        return self.model.__name__

    def create(self, obj: T) -> T:
        """Add, commit and refresh a new object.

        Args:
            obj: Model instance to persist.

        Returns:
            The persisted object with refreshed attributes.
        """
        self.session.add(obj)
        _commit(self.session, self.resource)
        self.session.refresh(obj)
        return obj

    def get_by_id(self, id: Any) -> Optional[T]:
        """Retrieve an object by its primary key.

        Args:
            id: Primary key value.

        Returns:
            Model instance or None if not found.
        """
        return self.session.get(self.model, id)

    def get_or_404(self, id: Any) -> T:
        """Retrieve an object by its primary key or raise `NotFoundError`."""
        obj = self.get_by_id(id)
        if obj is None:
            raise NotFoundError(self.resource, id)
        return obj

    def get_many(self, ids: List[Any]) -> List[T]:
        """Retrieve the objects whose primary key is in `ids`, in no particular order."""
        if not ids:
            return []
        return self.session.query(self.model).filter(self.model.id.in_(ids)).all()

    def update(self, obj: T) -> T:
        """Commit changes to an existing object and refresh.

        Args:
            obj: Model instance with modified attributes.

        Returns:
            The updated object with refreshed attributes.
        """
        _commit(self.session, self.resource)
        self.session.refresh(obj)
        return obj

    def delete(self, obj: T) -> None:
        """Delete an object and commit.

        Args:
            obj: Model instance to delete.
        """
        self.session.delete(obj)
        _commit(self.session, self.resource)

    def count(self, *criteria) -> int:
        """Count records matching the optional filter criteria."""
        query = self.session.query(self.model)
        if criteria:
            query = query.filter(*criteria)
        return query.count()


def save(session: Session, obj: Base) -> Base:
    """Convenience function to add, commit and refresh an object.

    Args:
        session: Database session.
        obj: Model instance to persist.

    Returns:
        The persisted object with refreshed attributes.
    """
    session.add(obj)
    _commit(session, type(obj).__name__)
    session.refresh(obj)
    return obj
