from __future__ import annotations

from typing import Any

from sqlalchemy import and_, func, or_
from sqlalchemy.orm import Session

from app.logging import get_logger
from app.queries.base import BaseQuery
from app.services.normalization_provider import STORAGE_FUNCTION_NAME, NormalizationMode
from app.services.response import paged_response
from app.services.search_contract import TEXT_TYPES, EntitySchema, FieldSpec, FilterSpec, Range

logger = get_logger(__name__)

LIKE_ESCAPE = "/"


def escape_like(value: str) -> str:
    """Make LIKE metacharacters in user input match literally."""
    return value.replace(LIKE_ESCAPE, LIKE_ESCAPE * 2).replace("%", f"{LIKE_ESCAPE}%").replace("_", f"{LIKE_ESCAPE}_")


def text_contains(column, value: str, mode: NormalizationMode):
    """``column`` contains ``value`` under the active normalization mode.

    With a provisioned ``normalize_text`` both sides are normalized in SQL;
    otherwise matching falls back to ``lower()`` on both sides.
    """
    pattern = escape_like(value)
    if mode is NormalizationMode.unavailable:
        return func.lower(column).contains(func.lower(pattern), escape=LIKE_ESCAPE)
    normalize_text = getattr(func, STORAGE_FUNCTION_NAME)
    return normalize_text(column).contains(normalize_text(pattern), escape=LIKE_ESCAPE)


def _range_predicate(column, bounds: Range):
    parts = []
    if bounds.lower is not None:
        parts.append(column >= bounds.lower)
    if bounds.upper is not None:
        parts.append(column <= bounds.upper)
    return and_(*parts)


class QueryComposer:
    """Turns a validated ``FilterSpec`` into a paged storage query.

    ``matches = (no general term OR any searchable field contains it)
               AND every present filter matches``
    """

    def __init__(self, db: Session, schema: EntitySchema, mode: NormalizationMode = NormalizationMode.native):
        self.db = db
        self.schema = schema
        self.mode = mode

    def _field_predicate(self, name: str, spec: FieldSpec, value: Any):
        if spec.predicate is not None:
            return spec.predicate(value)
        column = self.schema.column_for(name)
        if spec.range:
            return _range_predicate(column, value)
        if spec.type in TEXT_TYPES:
            return text_contains(column, value, self.mode)
        return column == value

    def general_predicate(self, term: str):
        return or_(
            *[text_contains(self.schema.column_for(name), term, self.mode) for name in self.schema.searchable_fields]
        )

    def predicates(self, spec: FilterSpec) -> list:
        if spec.schema is not self.schema:
            raise ValueError(
                f"Search spec targets '{spec.schema.name}' but composer is bound to '{self.schema.name}'."
            )
        predicates = []
        if spec.general_term.is_present():
            predicates.append(self.general_predicate(spec.general_term.value))
        for name, value in spec.present_filters().items():
            predicates.append(self._field_predicate(name, self.schema.fields[name], value))
        return predicates

    def query(self, spec: FilterSpec) -> BaseQuery:
        ordering = {name: self.schema.column_for(name) for name in self.schema.sortable_fields}
        return BaseQuery(self.db, self.schema.model, ordering).where(*self.predicates(spec))

    def search(self, spec: FilterSpec) -> dict:
        logger.debug(
            "Searching %s: general_term=%s filters=%s page=%s size=%s sort=%s %s",
            self.schema.name,
            spec.general_term.is_present(),
            sorted(spec.present_filters()),
            spec.page,
            spec.size,
            spec.sort_by,
            spec.sort_direction.value,
        )
        base = self.query(spec)
        total = base.count()
        items = base.order_by(spec.sort_by, spec.sort_direction.value).paginate(spec.size, spec.offset).all()
        return paged_response(items, spec, total)


def search(db: Session, spec: FilterSpec, mode: NormalizationMode = NormalizationMode.native) -> dict:
    return QueryComposer(db, spec.schema, mode).search(spec)
