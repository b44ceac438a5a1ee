"""Resolve grid field names against the tables and relations of a query."""

from collections.abc import Callable, Iterator

from sqlalchemy import ColumnElement, Select, Table, inspect, literal_column
from sqlalchemy.orm import Mapper, RelationshipProperty
from sqlalchemy.sql.selectable import FromClause, Join

PredicateBuilder = Callable[[ColumnElement], ColumnElement]


def _iter_from_clauses(from_clause: FromClause) -> Iterator[FromClause]:
    """Yield the named FROM elements of a (possibly joined) FROM clause."""
    if isinstance(from_clause, Join):
        yield from _iter_from_clauses(from_clause.left)
        yield from _iter_from_clauses(from_clause.right)
    elif getattr(from_clause, "name", None):
        yield from_clause


def _base_mapper(query: Select) -> Mapper | None:
    descriptions = query.column_descriptions
    entity = descriptions[0].get("entity") if descriptions else None
    if entity is None:
        return None
    return inspect(entity).mapper


class QueryContext:
    """Table, column and relationship lookups for one query.

    Plain field names resolve to the base table. ``table.column`` resolves to
    a table already in the query's FROM list; anything else dotted is followed
    as ORM relationships from the base entity and wrapped in EXISTS.
    """

    def __init__(self, query: Select):
        """Initialize context for a query.

        Args:
            query: SQLAlchemy Select whose first column/entity is the base

        Raises:
            ValueError: If no base table can be determined
        """
        self.query = query
        self.mapper = _base_mapper(query)
        self.from_clauses = [
            clause for final in query.get_final_froms() for clause in _iter_from_clauses(final)
        ]

        if self.mapper is not None:
            self.base_table: FromClause = self.mapper.local_table
        elif self.from_clauses:
            self.base_table = self.from_clauses[0]
        else:
            raise ValueError("Query has no base table to filter on")

    @property
    def base_table_name(self) -> str:
        """Name of the primary table for unqualified fields."""
        return self.base_table.name

    @property
    def metadata(self):
        """MetaData of the base table, or None for non-Table FROM clauses."""
        return self.base_table.metadata if isinstance(self.base_table, Table) else None

    def table(self, name: str) -> FromClause | None:
        """Find a table (or alias) by name among the query's FROM clauses."""
        for clause in self.from_clauses:
            if clause.name == name:
                return clause
        return None

    def relation(self, name: str, mapper: Mapper | None = None) -> RelationshipProperty | None:
        """Return relationship ``name`` on ``mapper`` (default: base entity), or None."""
        mapper = mapper if mapper is not None else self.mapper
        if mapper is None:
            return None
        return mapper.relationships.get(name)

    def qualified_column(self, table_name: str, column: str) -> ColumnElement:
        """Column reference ``table_name.column`` for search predicates.

        Uses the table object when it is part of the query; otherwise renders a
        literal qualified name so no implicit FROM entry is added.
        """
        table = self.table(table_name)
        if table is not None and column in table.c:
            return table.c[column]
        return literal_column(f"{table_name}.{column}")

    def _local_column(self, name: str) -> ColumnElement | None:
        if not isinstance(name, str):
            return None
        if name in self.base_table.c:
            return self.base_table.c[name]
        if self.mapper is not None and name in self.mapper.column_attrs:
            return self.mapper.column_attrs[name].class_attribute
        return None

    @staticmethod
    def _mapper_column(mapper: Mapper, name: str) -> ColumnElement | None:
        if not isinstance(name, str):
            return None
        if name in mapper.column_attrs:
            return mapper.column_attrs[name].class_attribute
        if name in mapper.local_table.c:
            return mapper.local_table.c[name]
        return None

    def relation_path(self, names: list[str]) -> list[RelationshipProperty] | None:
        """Follow relationship names from the base entity; None if any hop is missing."""
        path: list[RelationshipProperty] = []
        mapper = self.mapper
        for name in names:
            relation = self.relation(name, mapper)
            if relation is None:
                return None
            path.append(relation)
            mapper = relation.mapper
        return path

    def exists(
        self, path: list[RelationshipProperty], column: str, build: PredicateBuilder
    ) -> ColumnElement | None:
        """Build ``EXISTS`` through ``path`` with ``build(column)`` on the last hop."""
        target = self._mapper_column(path[-1].mapper, column)
        if target is None:
            return None

        clause = build(target)
        for relation in reversed(path):
            attribute = relation.class_attribute
            clause = attribute.any(clause) if relation.uselist else attribute.has(clause)
        return clause

    def predicate(self, field: str, build: PredicateBuilder) -> ColumnElement | None:
        """Resolve ``field`` and apply ``build`` to it.

        Args:
            field: Column name, ``table.column`` or ``relation[.relation].column``
            build: Callable turning the resolved column into a predicate

        Returns:
            The predicate, or None if the field cannot be resolved
        """
        parts = field.split(".")
        if len(parts) == 1:
            column = self._local_column(field)
            return build(column) if column is not None else None

        *owners, column_name = parts
        if len(owners) == 1:
            table = self.table(owners[0])
            if table is not None and column_name in table.c:
                return build(table.c[column_name])

        path = self.relation_path(owners)
        if path is None:
            return None
        return self.exists(path, column_name, build)
