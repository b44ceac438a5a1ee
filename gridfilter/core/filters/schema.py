"""Column existence checks used by free-text search."""

import logging
from typing import Protocol

from sqlalchemy import MetaData, inspect
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.exc import NoSuchTableError

logger = logging.getLogger(__name__)


class SchemaInspector(Protocol):
    """Answers whether a table has a column."""

    def has_column(self, table: str, column: str) -> bool: ...


class MetadataSchema:
    """Schema lookups against declared SQLAlchemy metadata (no database access)."""

    def __init__(self, metadata: MetaData):
        """Initialize with the metadata holding the mapped tables.

        Args:
            metadata: SQLAlchemy MetaData (e.g., ``Base.metadata``)
        """
        self.metadata = metadata

    def has_column(self, table: str, column: str) -> bool:
        """Return True if ``table`` is declared and has ``column``."""
        declared = self.metadata.tables.get(table)
        if declared is None:
            return False
        return column in declared.c


class DatabaseSchema:
    """Schema lookups against the live database via SQLAlchemy inspection.

    Column names are cached per table for the lifetime of the instance.
    """

    def __init__(self, bind: Engine | Connection, schema: str | None = None):
        """Initialize with a bind to inspect.

        Args:
            bind: SQLAlchemy Engine or Connection
            schema: Database schema name (optional)
        """
        self.bind = bind
        self.schema = schema
        self._columns: dict[str, frozenset[str]] = {}

    def _table_columns(self, table: str) -> frozenset[str]:
        if table not in self._columns:
            try:
                columns = inspect(self.bind).get_columns(table, schema=self.schema)
            except NoSuchTableError:
                logger.debug(f"Table '{table}' not found during column lookup")
                columns = []
            self._columns[table] = frozenset(col["name"] for col in columns)
        return self._columns[table]

    def has_column(self, table: str, column: str) -> bool:
        """Return True if the database table has ``column``."""
        return column in self._table_columns(table)

    def clear_cache(self) -> None:
        """Forget cached column names."""
        self._columns.clear()
