# backend/app/repositories/base_repository.py
"""
Generic data access for TutorConnect models.

Repositories flush but never commit; the service layer decides when a unit of
work is complete. Driver errors surface as RepositoryException so services
only deal with domain exceptions.
"""

import logging
from typing import Any, Generic, List, Optional, Type, TypeVar

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Query, Session

from ..core.exceptions import RepositoryException

T = TypeVar("T")

logger = logging.getLogger(__name__)


class BaseRepository(Generic[T]):
    """
    CRUD helpers shared by every repository.

    Attributes:
        db: SQLAlchemy session owned by the calling service
        model: SQLAlchemy model class
    """

    def __init__(self, db: Session, model: Type[T]):
        self.db = db
        self.model = model
        self.logger = logging.getLogger(f"{__name__}.{model.__name__}")

    def _fail(self, action: str, exc: SQLAlchemyError) -> RepositoryException:
        self.logger.error("Failed to %s %s: %s", action, self.model.__name__, exc)
        return RepositoryException(f"Failed to {action} {self.model.__name__}: {exc}")

    def get_by_id(self, id: str, load_relationships: bool = True) -> Optional[T]:
        """Fetch by primary key, eager loading relationships when asked."""
        try:
            query = self.db.query(self.model).filter(self.model.id == id)
            if load_relationships:
                query = self._apply_eager_loading(query)
            return query.first()
        except SQLAlchemyError as e:
            raise self._fail("retrieve", e) from e

    def create(self, **kwargs: Any) -> T:
        """Add a new row and flush so its id and defaults are populated."""
        try:
            entity = self.model(**kwargs)
            self.db.add(entity)
            self.db.flush()
            return entity
        except IntegrityError as e:
            self.db.rollback()
            self.logger.error("Integrity error creating %s: %s", self.model.__name__, e)
            raise RepositoryException(f"Integrity constraint violated: {e}") from e
        except SQLAlchemyError as e:
            self.db.rollback()
            raise self._fail("create", e) from e

    def update(self, id: str, **kwargs: Any) -> Optional[T]:
        """Set the given attributes on an existing row; unknown names are ignored."""
        entity = self.get_by_id(id, load_relationships=False)
        if entity is None:
            return None
        try:
            for key, value in kwargs.items():
                if hasattr(entity, key):
                    setattr(entity, key, value)
            self.db.flush()
            return entity
        except SQLAlchemyError as e:
            self.db.rollback()
            raise self._fail("update", e) from e

    def find_by(self, **kwargs: Any) -> List[T]:
        return self._execute_query(self.db.query(self.model).filter_by(**kwargs))

    def find_one_by(self, **kwargs: Any) -> Optional[T]:
        try:
            return self.db.query(self.model).filter_by(**kwargs).first()
        except SQLAlchemyError as e:
            raise self._fail("find", e) from e

    def count(self, **kwargs: Any) -> int:
        try:
            return self.db.query(self.model).filter_by(**kwargs).count()
        except SQLAlchemyError as e:
            raise self._fail("count", e) from e

    def _apply_eager_loading(self, query: Query) -> Query:
        """Override to add joinedload/selectinload options for get_by_id."""
        return query

    def _execute_query(self, query: Query) -> List[T]:
        try:
            return query.all()
        except SQLAlchemyError as e:
            raise self._fail("query", e) from e
