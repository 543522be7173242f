from __future__ import annotations

import enum
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from datetime import UTC, date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Generic, Literal, TypeVar

from app.config import settings

T = TypeVar("T")

FieldType = Literal["string", "select", "boolean", "number", "date", "datetime", "id"]

RESERVED_PARAMS = frozenset({"q", "page", "size", "sort_by", "sort_direction"})
RANGE_SUFFIXES = ("_min", "_max")
TEXT_TYPES = frozenset({"string"})
RANGE_TYPES = frozenset({"number", "date", "datetime"})

# Largest OFFSET a signed 64-bit storage integer can hold.
MAX_OFFSET = 2**63 - 1
# Primary keys are 32-bit INTEGER columns.
MAX_ID = 2**31 - 1


class SearchValidationError(ValueError):
    """A search request was rejected before any query was issued."""

    def __init__(self, field: str, message: str):
        super().__init__(f"{field}: {message}")
        self.field = field
        self.message = message


# -----------------------------------------------------------------------------
# Optional filter values
# -----------------------------------------------------------------------------


class Absent:
    """Marker for a filter the caller did not supply; it never restricts results."""

    _instance: Absent | None = None

    def __new__(cls) -> Absent:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def is_present(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "ABSENT"


ABSENT = Absent()


@dataclass(frozen=True)
class Present(Generic[T]):
    value: T

    def is_present(self) -> bool:
        return True


FilterValue = Present[Any] | Absent


@dataclass(frozen=True)
class Range:
    """Inclusive interval; a missing bound leaves that side open."""

    lower: Any = None
    upper: Any = None

    def is_unbounded(self) -> bool:
        return self.lower is None and self.upper is None


class SortDirection(enum.Enum):
    asc = "asc"
    desc = "desc"

    @classmethod
    def parse(cls, value: str | SortDirection | None) -> SortDirection:
        if value is None:
            return cls.asc
        if isinstance(value, SortDirection):
            return value
        normalized = value.strip().lower()
        if not normalized:
            return cls.asc
        try:
            return cls(normalized)
        except ValueError as exc:
            raise SearchValidationError("sort_direction", f"Invalid sort direction '{value}'.") from exc


# -----------------------------------------------------------------------------
# Entity field schema
# -----------------------------------------------------------------------------


@dataclass(frozen=True)
class FieldSpec:
    """How one named filter maps onto an entity.

    ``column`` names the mapped attribute (defaults to the filter name).
    ``predicate`` replaces the column comparison for filters that are not a
    plain column, e.g. relationship membership or derived categories.
    """

    type: FieldType
    column: str | None = None
    searchable: bool = False
    sortable: bool = False
    range: bool = False
    options: frozenset[str] | None = None
    predicate: Callable[[Any], Any] | None = None


@dataclass(frozen=True)
class EntitySchema:
    name: str
    model: type
    fields: Mapping[str, FieldSpec]
    default_sort: str = "id"

    @property
    def searchable_fields(self) -> list[str]:
        return [name for name, spec in self.fields.items() if spec.searchable and spec.type in TEXT_TYPES]

    @property
    def sortable_fields(self) -> list[str]:
        return [name for name, spec in self.fields.items() if spec.sortable]

    def column_for(self, name: str):
        spec = self.fields[name]
        return getattr(self.model, spec.column or name)

    def accepted_params(self) -> set[str]:
        accepted: set[str] = set()
        for name, spec in self.fields.items():
            if spec.range:
                accepted.update(f"{name}{suffix}" for suffix in RANGE_SUFFIXES)
            else:
                accepted.add(name)
        return accepted


# -----------------------------------------------------------------------------
# Value parsing
# -----------------------------------------------------------------------------


def _to_utc(value: datetime) -> datetime:
    return value if value.tzinfo is None else value.astimezone(UTC)


def _parse_datetime_like(name: str, value: Any, kind: str) -> date | datetime:
    if isinstance(value, datetime):
        try:
            return _to_utc(value)
        except OverflowError as exc:
            raise SearchValidationError(name, "Datetime value is out of range.") from exc
    if isinstance(value, date):
        return value if kind == "date" else datetime(value.year, value.month, value.day)
    if not isinstance(value, str):
        raise SearchValidationError(name, "Date/datetime value must be a valid ISO-8601 string.")
    raw = value.strip()
    try:
        if kind == "date":
            return date.fromisoformat(raw)
        if len(raw) <= 10:
            parsed = date.fromisoformat(raw)
            return datetime(parsed.year, parsed.month, parsed.day)
        return _to_utc(datetime.fromisoformat(raw.replace("Z", "+00:00")))
    except (ValueError, OverflowError) as exc:
        raise SearchValidationError(name, "Date/datetime value must be a valid ISO-8601 string.") from exc


def _parse_number(name: str, value: Any) -> Decimal:
    if isinstance(value, bool):
        raise SearchValidationError(name, "Number field requires a numeric value.")
    if isinstance(value, (int, Decimal)):
        return Decimal(value)
    if isinstance(value, float):
        return Decimal(str(value))
    if isinstance(value, str):
        try:
            parsed = Decimal(value.strip())
        except InvalidOperation as exc:
            raise SearchValidationError(name, f"'{value}' is not a number.") from exc
        if not parsed.is_finite():
            raise SearchValidationError(name, f"'{value}' is not a finite number.")
        return parsed
    raise SearchValidationError(name, "Number field requires a numeric value.")


def _parse_boolean(name: str, value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in {"true", "1", "yes"}:
            return True
        if lowered in {"false", "0", "no"}:
            return False
    raise SearchValidationError(name, f"'{value}' is not a boolean.")


def _parse_id(name: str, value: Any) -> int:
    if isinstance(value, bool):
        raise SearchValidationError(name, "Identifier must be an integer.")
    if isinstance(value, str) and value.strip().isdecimal():
        value = int(value.strip())
    if not isinstance(value, int):
        raise SearchValidationError(name, f"'{value}' is not a valid identifier.")
    if value < 0 or value > MAX_ID:
        raise SearchValidationError(name, f"Identifier must be between 0 and {MAX_ID}.")
    return value


def _parse_select(name: str, spec: FieldSpec, value: Any) -> str:
    if isinstance(value, enum.Enum):
        value = value.value
    if not isinstance(value, str):
        raise SearchValidationError(name, "Select field value must be a string.")
    if spec.options is None:
        return value
    by_folded = {option.lower(): option for option in spec.options}
    option = by_folded.get(value.strip().lower())
    if option is None:
        allowed = ", ".join(sorted(spec.options))
        raise SearchValidationError(name, f"Invalid option '{value}'. Expected one of: {allowed}.")
    return option


def _parse_scalar(name: str, spec: FieldSpec, value: Any) -> Any:
    if spec.type == "string":
        if not isinstance(value, str):
            raise SearchValidationError(name, "Text filter requires a string value.")
        if len(value) > settings.search_term_max_length:
            raise SearchValidationError(
                name, f"Text filters are limited to {settings.search_term_max_length} characters."
            )
        return value.strip()
    if spec.type == "select":
        return _parse_select(name, spec, value)
    if spec.type == "boolean":
        return _parse_boolean(name, value)
    if spec.type == "number":
        return _parse_number(name, value)
    if spec.type in {"date", "datetime"}:
        return _parse_datetime_like(name, value, spec.type)
    if spec.type == "id":
        return _parse_id(name, value)
    raise SearchValidationError(name, f"Unsupported field type '{spec.type}'.")


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def parse_filter_value(name: str, spec: FieldSpec, value: Any) -> FilterValue:
    """Validate a raw filter value against its field spec.

    ``None`` and blank strings are absent; anything else must parse cleanly.
    """
    if isinstance(value, (Present, Absent)):
        if not value.is_present():
            return ABSENT
        value = value.value
    if spec.range:
        if isinstance(value, tuple) and len(value) == 2:
            value = Range(*value)
        if not isinstance(value, Range):
            raise SearchValidationError(name, "Range filter requires a lower and/or upper bound.")
        lower = None if _is_blank(value.lower) else _parse_scalar(name, spec, value.lower)
        upper = None if _is_blank(value.upper) else _parse_scalar(name, spec, value.upper)
        if lower is not None and upper is not None:
            try:
                inverted = lower > upper
            except TypeError as exc:
                raise SearchValidationError(name, "Range bounds are not comparable.") from exc
            if inverted:
                raise SearchValidationError(name, "Lower bound must not be greater than upper bound.")
        parsed = Range(lower, upper)
        return ABSENT if parsed.is_unbounded() else Present(parsed)
    if _is_blank(value):
        return ABSENT
    parsed_value = _parse_scalar(name, spec, value)
    if spec.type == "string" and not parsed_value:
        return ABSENT
    return Present(parsed_value)


# -----------------------------------------------------------------------------
# Search request
# -----------------------------------------------------------------------------


@dataclass(frozen=True)
class FilterSpec:
    """One validated search request against a single entity schema."""

    schema: EntitySchema
    general_term: FilterValue = ABSENT
    fields: Mapping[str, FilterValue] = field(default_factory=dict)
    page: int = 0
    size: int = 20
    sort_by: str = "id"
    sort_direction: SortDirection = SortDirection.asc

    def filter(self, name: str) -> FilterValue:
        return self.fields.get(name, ABSENT)

    def present_filters(self) -> dict[str, Any]:
        return {name: value.value for name, value in self.fields.items() if value.is_present()}

    @property
    def offset(self) -> int:
        return self.page * self.size

    def without(self, name: str) -> FilterSpec:
        fields = {key: value for key, value in self.fields.items() if key != name}
        return FilterSpec(
            schema=self.schema,
            general_term=self.general_term,
            fields=fields,
            page=self.page,
            size=self.size,
            sort_by=self.sort_by,
            sort_direction=self.sort_direction,
        )

    @classmethod
    def build(
        cls,
        schema: EntitySchema,
        general_term: str | None = None,
        filters: Mapping[str, Any] | None = None,
        page: int = 0,
        size: int | None = None,
        sort_by: str | None = None,
        sort_direction: str | SortDirection | None = None,
        max_page_size: int | None = None,
    ) -> FilterSpec:
        max_size = max_page_size or settings.search_max_page_size
        resolved_size = settings.search_default_page_size if size is None else size
        if isinstance(page, bool) or not isinstance(page, int) or page < 0:
            raise SearchValidationError("page", "Page index must be a non-negative integer.")
        if isinstance(resolved_size, bool) or not isinstance(resolved_size, int):
            raise SearchValidationError("size", "Page size must be an integer.")
        if resolved_size < 1 or resolved_size > max_size:
            raise SearchValidationError("size", f"Page size must be between 1 and {max_size}.")
        if page * resolved_size > MAX_OFFSET:
            raise SearchValidationError("page", f"Page index {page} is too large for page size {resolved_size}.")

        resolved_sort = schema.default_sort if sort_by is None or not sort_by.strip() else sort_by.strip()
        if resolved_sort not in schema.sortable_fields:
            raise SearchValidationError("sort_by", f"Cannot sort {schema.name} by '{resolved_sort}'.")
        direction = SortDirection.parse(sort_direction)

        term: FilterValue = ABSENT
        if general_term is not None and general_term.strip():
            if len(general_term) > settings.search_term_max_length:
                raise SearchValidationError(
                    "q", f"Search term is limited to {settings.search_term_max_length} characters."
                )
            term = Present(general_term.strip())

        parsed: dict[str, FilterValue] = {}
        for name, raw in (filters or {}).items():
            spec = schema.fields.get(name)
            if spec is None:
                raise SearchValidationError(name, f"Unknown filter '{name}' for {schema.name}.")
            parsed[name] = parse_filter_value(name, spec, raw)

        return cls(
            schema=schema,
            general_term=term,
            fields=parsed,
            page=page,
            size=resolved_size,
            sort_by=resolved_sort,
            sort_direction=direction,
        )

    @classmethod
    def from_query_params(
        cls,
        schema: EntitySchema,
        params: Mapping[str, str],
        max_page_size: int | None = None,
    ) -> FilterSpec:
        """Build a spec from raw query parameters.

        Range fields are addressed as ``<field>_min`` / ``<field>_max``. Any
        parameter that is neither reserved nor a known filter is rejected.
        """
        filters: dict[str, Any] = {}
        bounds: dict[str, dict[str, str]] = {}
        accepted = schema.accepted_params()
        items = params.multi_items() if hasattr(params, "multi_items") else params.items()
        seen: set[str] = set()
        for key, raw in items:
            if key in seen:
                raise SearchValidationError(key, "Parameter given more than once.")
            seen.add(key)
            if key in RESERVED_PARAMS:
                continue
            if key not in accepted:
                raise SearchValidationError(key, f"Unknown filter '{key}' for {schema.name}.")
            if key in schema.fields and not schema.fields[key].range:
                filters[key] = raw
                continue
            base, suffix = key[:-4], key[-4:]
            bounds.setdefault(base, {})[suffix] = raw
        for base, pair in bounds.items():
            filters[base] = Range(pair.get("_min"), pair.get("_max"))

        return cls.build(
            schema,
            general_term=params.get("q"),
            filters=filters,
            page=_parse_int_param(params, "page", 0),
            size=_parse_int_param(params, "size", None),
            sort_by=params.get("sort_by"),
            sort_direction=params.get("sort_direction"),
            max_page_size=max_page_size,
        )


def _parse_int_param(params: Mapping[str, str], name: str, default: int | None) -> int | None:
    raw = params.get(name)
    if raw is None or not str(raw).strip():
        return default
    try:
        return int(str(raw).strip())
    except ValueError as exc:
        raise SearchValidationError(name, f"'{raw}' is not an integer.") from exc
