"""Data-grid filter and search composition for SQLAlchemy queries."""

from gridfilter.core.filters import FilterEngine

__all__ = ["FilterEngine"]
