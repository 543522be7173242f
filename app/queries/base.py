"""Base query builder class.

Provides common query operations that all query builders inherit.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, ClassVar, Generic, Self, TypeVar

from sqlalchemy import and_, asc, desc
from sqlalchemy.orm import Query

if TYPE_CHECKING:
    from sqlalchemy.orm import Session

T = TypeVar("T")


class BaseQuery(Generic[T]):
    """Base class for composable query builders.

    Provides fluent interface for building SQLAlchemy queries with:
    - Chainable filter methods
    - Ordering support
    - Pagination
    - Count operations

    Subclasses (or callers passing ``model_class``/``ordering_fields``) should:
    1. Set `model_class` to the SQLAlchemy model
    2. Define `ordering_fields` mapping sort names to model attributes
    """

    model_class: type[T]
    ordering_fields: ClassVar[dict[str, Any]] = {}

    def __init__(
        self,
        db: Session,
        model_class: type[T] | None = None,
        ordering_fields: dict[str, Any] | None = None,
    ):
        self.db = db
        if model_class is not None:
            self.model_class = model_class
        if ordering_fields is not None:
            self.ordering_fields = ordering_fields
        self._query: Query = db.query(self.model_class)

    def _clone(self) -> Self:
        """Create a copy of this query builder with current state."""
        new = self.__class__.__new__(self.__class__)
        new.db = self.db
        new.model_class = self.model_class
        new.ordering_fields = self.ordering_fields
        new._query = self._query
        return new

    # -------------------------------------------------------------------------
    # Common filters
    # -------------------------------------------------------------------------

    def where(self, *predicates) -> Self:
        """AND the given predicates onto the query; no predicates is a no-op."""
        clone = self._clone()
        if predicates:
            clone._query = clone._query.filter(and_(*predicates))
        return clone

    # -------------------------------------------------------------------------
    # Ordering
    # -------------------------------------------------------------------------

    def order_by(self, field: str, direction: str = "asc") -> Self:
        """Apply ordering to the query, with the primary key as tie-breaker.

        Args:
            field: Field name (must be in ordering_fields)
            direction: 'asc' or 'desc'
        """
        clone = self._clone()
        column = self.ordering_fields.get(field)
        if column is None:
            raise ValueError(f"Field '{field}' is not sortable.")
        clone._query = clone._query.order_by(desc(column) if direction.lower() == "desc" else asc(column))
        id_column = self.model_class.id
        if column is not id_column:
            clone._query = clone._query.order_by(asc(id_column))
        return clone

    # -------------------------------------------------------------------------
    # Pagination
    # -------------------------------------------------------------------------

    def paginate(self, limit: int = 50, offset: int = 0) -> Self:
        """Apply pagination to the query."""
        clone = self._clone()
        if limit > 0:
            clone._query = clone._query.limit(limit)
        if offset > 0:
            clone._query = clone._query.offset(offset)
        return clone

    # -------------------------------------------------------------------------
    # Execution
    # -------------------------------------------------------------------------

    def all(self) -> list[T]:
        """Execute query and return all results."""
        return self._query.all()

    def count(self) -> int:
        """Return count of matching records, ignoring any ordering."""
        return self._query.order_by(None).count()
