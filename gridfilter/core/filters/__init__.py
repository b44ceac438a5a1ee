"""Grid filter and free-text search composition for SQLAlchemy selects."""

from gridfilter.core.filters.engine import FilterEngine
from gridfilter.core.filters.errors import (
    FilterError,
    FilterValueError,
    UnknownFilterKindError,
    UnknownTextOperatorError,
)
from gridfilter.core.filters.kinds import FieldFilter, FilterKind, TextOperator, normalize
from gridfilter.core.filters.resolver import QueryContext
from gridfilter.core.filters.schema import DatabaseSchema, MetadataSchema, SchemaInspector

__all__ = [
    "FilterEngine",
    "FilterError",
    "FilterValueError",
    "UnknownFilterKindError",
    "UnknownTextOperatorError",
    "FieldFilter",
    "FilterKind",
    "TextOperator",
    "normalize",
    "QueryContext",
    "DatabaseSchema",
    "MetadataSchema",
    "SchemaInspector",
]
