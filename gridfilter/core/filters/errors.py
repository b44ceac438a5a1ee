"""Custom exceptions for filter composition."""


class FilterError(Exception):
    """Base exception for filter errors."""

    pass


class UnknownFilterKindError(FilterError):
    """Raised when a filters key is not one of the supported kinds."""

    pass


class UnknownTextOperatorError(FilterError):
    """Raised when an input_text option names an unsupported operator."""

    pass


class FilterValueError(FilterError, ValueError):
    """Raised when a filter value cannot be parsed (bad date, bad number)."""

    pass
