"""Filter kinds, text operators and per-field normalisation."""

from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any

from gridfilter.core.filters.errors import UnknownFilterKindError, UnknownTextOperatorError

# Key in the filters mapping holding per-field input_text operators; not a kind.
INPUT_TEXT_OPTIONS_KEY = "input_text_options"


class FilterKind(str, Enum):
    """The six filter kinds a grid can emit."""

    DATE_PICKER = "date_picker"
    MULTI_SELECT = "multi_select"
    SELECT = "select"
    BOOLEAN = "boolean"
    INPUT_TEXT = "input_text"
    NUMBER = "number"

    @classmethod
    def parse(cls, key: str) -> "FilterKind":
        """Convert a filters key, raising UnknownFilterKindError if unsupported."""
        try:
            return cls(key)
        except ValueError as e:
            raise UnknownFilterKindError(f"Unknown filter kind '{key}'") from e


class TextOperator(str, Enum):
    """Comparison operators available to input_text filters."""

    IS = "is"
    IS_NOT = "is_not"
    STARTS_WITH = "starts_with"
    ENDS_WITH = "ends_with"
    CONTAINS = "contains"
    CONTAINS_NOT = "contains_not"
    IS_EMPTY = "is_empty"
    IS_NOT_EMPTY = "is_not_empty"
    IS_NULL = "is_null"
    IS_NOT_NULL = "is_not_null"
    IS_BLANK = "is_blank"
    IS_NOT_BLANK = "is_not_blank"

    @classmethod
    def parse(cls, name: str) -> "TextOperator":
        """Convert an operator name (any case), raising UnknownTextOperatorError if unsupported."""
        try:
            return cls(str(name).lower())
        except ValueError as e:
            raise UnknownTextOperatorError(f"Unknown text operator '{name}'") from e


@dataclass(frozen=True)
class FieldFilter:
    """A single field's filter after dotted-field normalisation."""

    kind: FilterKind
    field: str
    value: Any


def _unwrap_single(field: str, value: Any) -> tuple[str, Any]:
    """Turn ``{"sub": actual}`` into ``("field.sub", actual)``; scalars pass through."""
    if isinstance(value, Mapping) and value:
        key = next(iter(value))
        return f"{field}.{key}", value[key]
    return field, value


def _unwrap_multi_select(field: str, value: Any) -> tuple[str, Any]:
    """Unwrap one nesting level unless the value already carries ``id == field``."""
    if not isinstance(value, Mapping):
        return field, value
    if value.get("id") == field:
        return field, value
    if not value:
        return field, value

    key = next(iter(value))
    nested_field = f"{field}.{key}"
    nested = value[key]
    if isinstance(nested, Mapping):
        nested = {**nested, "id": nested_field}
    return nested_field, nested


def normalize(kind: FilterKind, field: str, value: Any) -> FieldFilter:
    """Resolve the dotted field name and inner value for one filter entry.

    Select, boolean and input_text accept ``{subfield: value}`` and filter on
    ``field.subfield``. Multi-select values may be nested one level deeper
    than ``{"id": field, "values": [...]}``. Date and number values are
    never unwrapped.
    """
    if kind is FilterKind.MULTI_SELECT:
        field, value = _unwrap_multi_select(field, value)
    elif kind in (FilterKind.SELECT, FilterKind.BOOLEAN, FilterKind.INPUT_TEXT):
        field, value = _unwrap_single(field, value)
    return FieldFilter(kind=kind, field=field, value=value)
