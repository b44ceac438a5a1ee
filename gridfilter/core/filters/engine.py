"""Filter engine composing grid filters and free-text search onto SQLAlchemy selects."""

import logging
from collections.abc import Iterable, Mapping
from typing import Any

from sqlalchemy import ColumnElement, Select, and_, or_
from sqlalchemy.orm import RelationshipProperty

from gridfilter.core.config import get_settings
from gridfilter.core.filters.kinds import (
    INPUT_TEXT_OPTIONS_KEY,
    FieldFilter,
    FilterKind,
    TextOperator,
    normalize,
)
from gridfilter.core.filters.resolver import PredicateBuilder, QueryContext
from gridfilter.core.filters.schema import MetadataSchema, SchemaInspector
from gridfilter.core.filters.values import (
    is_blank,
    is_missing,
    normalize_number,
    parse_datetime,
    parse_number,
)
from gridfilter.core.logging import log_predicate_skipped, log_relation_search_aborted
from gridfilter.schemas.grid import ColumnSpec, GridState, NumberRange

logger = logging.getLogger(__name__)


def _is_column_or_column_list(columns: Any) -> bool:
    if isinstance(columns, str):
        return True
    if isinstance(columns, (list, tuple)):
        return all(isinstance(column, str) for column in columns)
    return False


class FilterEngine:
    """Applies grid filters and free-text search to a SQLAlchemy select.

    Each filter kind in the filters mapping becomes one AND group; the search term
    becomes one OR group over searchable columns and related tables. The
    engine never executes the query.

    Example:
        engine = (
            FilterEngine(select(User))
            .with_filters({"select": {"status": "active"}})
            .with_search("ann")
            .with_columns([ColumnSpec(field="name", searchable=True)])
        )
        engine.filter()
        stmt = engine.filter_contains().query
    """

    def __init__(
        self,
        query: Select,
        schema: SchemaInspector | None = None,
        *,
        case_insensitive: bool | None = None,
        coerce_number_range: bool | None = None,
    ):
        """Initialize engine for a query.

        Args:
            query: SQLAlchemy Select to compose predicates onto
            schema: Column existence checks for search (default: base table metadata)
            case_insensitive: Use ILIKE semantics (default: from settings)
            coerce_number_range: Coerce BETWEEN bounds to float (default: from settings)
        """
        settings = get_settings()

        self.query = query
        self.context = QueryContext(query)
        if schema is None and self.context.metadata is not None:
            schema = MetadataSchema(self.context.metadata)
        self.schema = schema

        self.case_insensitive = (
            settings.SEARCH_CASE_INSENSITIVE if case_insensitive is None else case_insensitive
        )
        self.coerce_number_range = (
            settings.NUMBER_RANGE_COERCE_BOUNDS
            if coerce_number_range is None
            else coerce_number_range
        )
        self.default_text_operator = settings.DEFAULT_TEXT_OPERATOR

        self.columns: Iterable[ColumnSpec | Mapping[str, Any]] = []
        self.search = ""
        self.filters: Mapping[str, Mapping[str, Any]] = {}
        self.relation_search: Mapping[str, Any] = {}

    @classmethod
    def query_for(cls, query: Select, schema: SchemaInspector | None = None) -> "FilterEngine":
        """Create an engine for ``query``."""
        return cls(query, schema)

    @classmethod
    def from_state(
        cls, query: Select, state: GridState, schema: SchemaInspector | None = None
    ) -> "FilterEngine":
        """Create an engine configured from a grid's state."""
        return (
            cls(query, schema)
            .with_columns(state.columns)
            .with_search(state.search)
            .with_filters(state.filters)
            .with_relation_search(state.relation_search)
        )

    def with_columns(self, columns: Iterable[ColumnSpec | Mapping[str, Any]]) -> "FilterEngine":
        """Set the grid columns searched by filter_contains()."""
        self.columns = columns
        return self

    def with_search(self, search: str) -> "FilterEngine":
        """Set the free-text search term."""
        self.search = search
        return self

    def with_filters(self, filters: Mapping[str, Mapping[str, Any]]) -> "FilterEngine":
        """Set the filters mapping (kind -> field -> value) used by filter()."""
        self.filters = filters
        return self

    def with_relation_search(self, relations: Mapping[str, Any]) -> "FilterEngine":
        """Set the related tables and columns included in free-text search."""
        self.relation_search = relations
        return self

    # ------------------------------------------------------------------
    # Filters
    # ------------------------------------------------------------------

    def filter(self) -> Select:
        """Apply every configured filter kind as one AND group.

        Returns:
            The composed select (also stored on ``self.query``)

        Raises:
            UnknownFilterKindError: If a filters key is not a known kind
            UnknownTextOperatorError: If an input_text option is not a known operator
            FilterValueError: If a date or number bound cannot be parsed
        """
        for key, fields in self.filters.items():
            if key == INPUT_TEXT_OPTIONS_KEY:
                continue
            kind = FilterKind.parse(key)

            group = []
            for field, value in fields.items():
                predicate = self.apply(normalize(kind, field, value))
                if predicate is not None:
                    group.append(predicate)

            if group:
                self.query = self.query.where(and_(*group))

        return self.query

    def apply(self, entry: FieldFilter) -> ColumnElement | None:
        """Build the predicate for one normalised field filter."""
        if entry.kind is FilterKind.DATE_PICKER:
            return self.filter_date_picker(entry.field, entry.value)
        if entry.kind is FilterKind.MULTI_SELECT:
            return self.filter_multi_select(entry.field, entry.value)
        if entry.kind is FilterKind.SELECT:
            return self.filter_select(entry.field, entry.value)
        if entry.kind is FilterKind.BOOLEAN:
            return self.filter_boolean(entry.field, entry.value)
        if entry.kind is FilterKind.INPUT_TEXT:
            return self.filter_input_text(entry.field, entry.value)
        return self.filter_number(entry.field, entry.value)

    def _resolve(self, field: str, build: PredicateBuilder) -> ColumnElement | None:
        predicate = self.context.predicate(field, build)
        if predicate is None:
            log_predicate_skipped(logger, field, "column_not_found", level=logging.WARNING)
        return predicate

    def filter_date_picker(self, field: str, value: Any) -> ColumnElement | None:
        """``field BETWEEN start AND end`` when both bounds are present."""
        bounds = list(value) if isinstance(value, (list, tuple)) else []
        if len(bounds) < 2 or is_missing(bounds[0]) or is_missing(bounds[1]):
            log_predicate_skipped(logger, field, "incomplete_date_range")
            return None

        start, end = parse_datetime(bounds[0]), parse_datetime(bounds[1])
        return self._resolve(field, lambda column: column.between(start, end))

    def filter_multi_select(self, field: str, value: Any) -> ColumnElement | None:
        """``field IN (values)`` unless values are empty or contain the blank sentinel."""
        values = value.get("values") if isinstance(value, Mapping) else None
        if not values:
            log_predicate_skipped(logger, field, "no_values")
            return None
        if not isinstance(values, (list, tuple)):
            log_predicate_skipped(
                logger, field, "values_not_a_list", {"type": type(values).__name__}, logging.WARNING
            )
            return None
        if any(item == "" for item in values):
            log_predicate_skipped(logger, field, "blank_sentinel")
            return None

        selected = list(values)
        return self._resolve(field, lambda column: column.in_(selected))

    def filter_select(self, field: str, value: Any) -> ColumnElement | None:
        """``field = value`` for a filled value."""
        if is_blank(value):
            log_predicate_skipped(logger, field, "blank_value")
            return None
        return self._resolve(field, lambda column: column == value)

    def filter_boolean(self, field: str, value: Any) -> ColumnElement | None:
        """``field = true/false``; ``"all"`` means no constraint."""
        if value == "all":
            log_predicate_skipped(logger, field, "all_sentinel")
            return None

        flag = value if isinstance(value, bool) else value == "true"
        return self._resolve(field, lambda column: column == flag)

    def text_operator(self, field: str) -> TextOperator:
        """Operator configured for ``field`` in ``input_text_options``, or the default."""
        options = self.filters.get(INPUT_TEXT_OPTIONS_KEY) or {}
        name = options.get(field) or self.default_text_operator
        return TextOperator.parse(name)

    def _like(self, column: ColumnElement, pattern: str) -> ColumnElement:
        return column.ilike(pattern) if self.case_insensitive else column.like(pattern)

    def _not_like(self, column: ColumnElement, pattern: str) -> ColumnElement:
        return column.not_ilike(pattern) if self.case_insensitive else column.not_like(pattern)

    def filter_input_text(self, field: str, value: Any) -> ColumnElement | None:
        """Text comparison using the field's configured operator (default: contains)."""
        operator = self.text_operator(field)

        def build(column: ColumnElement) -> ColumnElement:
            if operator is TextOperator.IS:
                return column == value
            if operator is TextOperator.IS_NOT:
                return column != value
            if operator is TextOperator.STARTS_WITH:
                return self._like(column, f"{value}%")
            if operator is TextOperator.ENDS_WITH:
                return self._like(column, f"%{value}")
            if operator is TextOperator.CONTAINS:
                return self._like(column, f"%{value}%")
            if operator is TextOperator.CONTAINS_NOT:
                return self._not_like(column, f"%{value}%")
            if operator is TextOperator.IS_EMPTY:
                return or_(column == "", column.is_(None)).self_group()
            if operator is TextOperator.IS_NOT_EMPTY:
                return and_(column != "", column.is_not(None)).self_group()
            if operator is TextOperator.IS_NULL:
                return column.is_(None)
            if operator is TextOperator.IS_NOT_NULL:
                return column.is_not(None)
            if operator is TextOperator.IS_BLANK:
                return column == ""
            # IS_NOT_BLANK
            return or_(column != "", column.is_(None)).self_group()

        return self._resolve(field, build)

    def filter_number(self, field: str, value: Any) -> ColumnElement | None:
        """``>=``, ``<=`` or ``BETWEEN`` depending on which bounds are present."""
        bounds = NumberRange.model_validate(value if isinstance(value, Mapping) else {})
        has_start, has_end = not is_missing(bounds.start), not is_missing(bounds.end)
        separators = {"thousands": bounds.thousands, "decimal": bounds.decimal}

        if has_start and not has_end:
            start = parse_number(bounds.start, **separators)
            return self._resolve(field, lambda column: column >= start)
        if has_end and not has_start:
            end = parse_number(bounds.end, **separators)
            return self._resolve(field, lambda column: column <= end)
        if has_start and has_end:
            if self.coerce_number_range:
                low = parse_number(bounds.start, **separators)
                high = parse_number(bounds.end, **separators)
            else:
                low = normalize_number(bounds.start, **separators)
                high = normalize_number(bounds.end, **separators)
            return self._resolve(field, lambda column: column.between(low, high))

        log_predicate_skipped(logger, field, "no_bounds")
        return None

    # ------------------------------------------------------------------
    # Free-text search
    # ------------------------------------------------------------------

    def filter_contains(self) -> "FilterEngine":
        """Apply the search term as one OR group over searchable columns and relations.

        Returns:
            The engine, with the composed select on ``self.query``
        """
        if not self.search:
            return self

        pattern = f"%{self.search}%"
        group = self._column_search(pattern)
        if self.relation_search:
            group.extend(self._relation_search(pattern))

        if group:
            self.query = self.query.where(or_(*group))
        return self

    def _column_search(self, pattern: str) -> list[ColumnElement]:
        predicates: list[ColumnElement] = []

        for raw in self.columns:
            column = raw if isinstance(raw, ColumnSpec) else ColumnSpec.model_validate(raw)
            field = column.search_field
            if not column.searchable or not field:
                continue

            if "." in field:
                table, name = field.split(".")[:2]
            else:
                table, name = self.context.base_table_name, field

            if self.schema is None or not self.schema.has_column(table, name):
                log_predicate_skipped(logger, field, "column_not_in_schema", {"table": table})
                continue

            predicates.append(self._like(self.context.qualified_column(table, name), pattern))

        return predicates

    def _relation_search(self, pattern: str) -> list[ColumnElement]:
        predicates: list[ColumnElement] = []

        def like(column: ColumnElement) -> ColumnElement:
            return self._like(column, pattern)

        def add(path: list[RelationshipProperty], column_name: str, field: str) -> None:
            predicate = self.context.exists(path, column_name, like)
            if predicate is None:
                log_predicate_skipped(logger, field, "column_not_found")
            else:
                predicates.append(predicate)

        for relation_name, entry in self.relation_search.items():
            if isinstance(entry, Mapping):
                items = list(entry.items())
            elif isinstance(entry, (list, tuple)):
                items = [(None, column_name) for column_name in entry]
            else:
                log_relation_search_aborted(logger, relation_name, entry)
                break

            # Column names must be strings, nested relations lists of strings.
            if not all(_is_column_or_column_list(columns) for _, columns in items):
                log_relation_search_aborted(logger, relation_name, entry)
                break

            relation = self.context.relation(relation_name)
            if relation is None:
                log_predicate_skipped(logger, relation_name, "relation_not_found")
                continue

            for nested_name, columns in items:
                if isinstance(columns, (list, tuple)):
                    nested = self.context.relation(nested_name, relation.mapper)
                    if nested is None:
                        log_predicate_skipped(
                            logger, f"{relation_name}.{nested_name}", "relation_not_found"
                        )
                        continue
                    for column_name in columns:
                        add(
                            [relation, nested],
                            column_name,
                            f"{relation_name}.{nested_name}.{column_name}",
                        )
                else:
                    add([relation], columns, f"{relation_name}.{columns}")

        return predicates
