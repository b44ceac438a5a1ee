"""Pydantic schemas for grid columns, number ranges and grid state."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator


class ColumnSpec(BaseModel):
    """A grid column as seen by free-text search."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore", frozen=True)

    field: str = Field(..., description="Column field name, optionally 'table.column'")
    data_field: str | None = Field(
        default=None, alias="dataField", description="Field override used for querying"
    )
    searchable: bool = Field(default=False, description="Include in free-text search")
    title: str | None = Field(default=None, description="Display title")

    @property
    def search_field(self) -> str:
        """Field used for search: the data field override, else the field."""
        return self.data_field or self.field


class NumberRange(BaseModel):
    """Value of a number filter: optional bounds plus locale separators."""

    model_config = ConfigDict(extra="ignore")

    start: str | int | float | None = None
    end: str | int | float | None = None
    thousands: str = ""
    decimal: str = "."

    @field_validator("thousands", "decimal", mode="before")
    @classmethod
    def default_separator(cls, v: Any, info: ValidationInfo) -> str:
        """Treat a null separator as the default for its field."""
        if v is None:
            return "" if info.field_name == "thousands" else "."
        return str(v)


class GridState(BaseModel):
    """Search, filter and column state held by a grid component."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    search: str = ""
    filters: dict[str, dict[str, Any]] = Field(default_factory=dict)
    columns: list[ColumnSpec] = Field(default_factory=list)
    relation_search: dict[str, Any] = Field(default_factory=dict, alias="relationSearch")
