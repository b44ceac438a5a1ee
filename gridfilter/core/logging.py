"""Logging configuration for filter and search composition."""

import logging
import sys
from typing import Any

from gridfilter.core.config import get_settings

settings = get_settings()

# Create logger for the package
filter_logger = logging.getLogger("gridfilter")
filter_logger.setLevel(settings.LOG_LEVEL)

# Create console handler with structured format
console_handler = logging.StreamHandler(sys.stdout)
console_handler.setLevel(settings.LOG_LEVEL)

# Create formatter
formatter = logging.Formatter(
    "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
console_handler.setFormatter(formatter)

# Add handler to logger if not already added
if not filter_logger.handlers:
    filter_logger.addHandler(console_handler)


def log_predicate_skipped(
    logger: logging.Logger,
    field: str,
    reason: str,
    details: dict[str, Any] | None = None,
    level: int = logging.DEBUG,
) -> None:
    """
    Log that a field produced no predicate.

    Args:
        logger: Module logger to emit on.
        field: Field (possibly dotted) that was skipped.
        reason: Short reason (e.g., 'blank_value', 'column_not_found').
        details: Additional details (optional).
        level: Logging level (default: DEBUG).
    """
    message = f"Predicate skipped - field={field}, reason={reason}"
    if details:
        message += f", details={details}"

    logger.log(level, message)


def log_relation_search_aborted(logger: logging.Logger, relation: str, value: Any) -> None:
    """
    Log that relation search stopped at a malformed entry.

    Args:
        logger: Module logger to emit on.
        relation: Relation name of the malformed entry.
        value: The offending value.
    """
    logger.warning(
        f"Relation search aborted - relation={relation}, "
        f"value_type={type(value).__name__}"
    )
