"""Pydantic schemas for grid state."""

from gridfilter.schemas.grid import ColumnSpec, GridState, NumberRange

__all__ = ["ColumnSpec", "GridState", "NumberRange"]
