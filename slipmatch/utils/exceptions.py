"""
Custom Exceptions Module.

This module defines the exceptions raised by the slip/label matching
system. Extraction misses and failed matches are NOT errors: they are
represented as ``None`` fields and UNMATCHED groups. Only the failures
below are raised.

Exception Hierarchy:
    SlipMatchError (base)
    ├── ConfigurationError
    ├── InputError
    │   └── SourceReadError
    ├── MatchingError
    │   └── GroupingInvariantError
    ├── ResolutionError
    │   ├── InvalidSelectionError
    │   │   └── LabelAlreadyAssignedError
    │   └── ResolutionCompleteError
    └── OutputError
        └── ReportExportError
"""


class SlipMatchError(Exception):
    """
    Base exception for all slip matching errors.

    Attributes:
        message: Human-readable error message.
        details: Optional dictionary with additional error details.
    """

    def __init__(self, message: str, details: dict = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)

    def __str__(self) -> str:
        """Return string representation of the error."""
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class ConfigurationError(SlipMatchError):
    """Raised when a configuration value is missing or invalid."""

    def __init__(self, key: str, value=None, reason: str = None):
        message = f"Invalid configuration for '{key}'"
        details = {"key": key, "value": value, "reason": reason}
        super().__init__(message, details)


# =============================================================================
# INPUT ERRORS
# =============================================================================

class InputError(SlipMatchError):
    """Base exception for page source errors."""
    pass


class SourceReadError(InputError):
    """
    Raised when the page text source cannot be read at all.

    This is terminal for the whole run: no partial groups are produced
    from a document that cannot be read.

    Example:
        >>> raise SourceReadError("orders.pdf", "file is not a PDF")
    """

    def __init__(self, source: str, reason: str = None, page_number: int = None):
        message = f"Could not read page text from: {source}"
        details = {"source": source, "reason": reason}
        if page_number is not None:
            details["page_number"] = page_number
        super().__init__(message, details)


# =============================================================================
# MATCHING ERRORS
# =============================================================================

class MatchingError(SlipMatchError):
    """Base exception for matching and grouping errors."""
    pass


class GroupingInvariantError(MatchingError):
    """Raised when produced groups violate an order group invariant."""

    def __init__(self, invariant: str, reason: str = None):
        message = f"Order group invariant violated: {invariant}"
        details = {"invariant": invariant, "reason": reason}
        super().__init__(message, details)


# =============================================================================
# RESOLUTION ERRORS
# =============================================================================

class ResolutionError(SlipMatchError):
    """Base exception for manual resolution errors."""
    pass


class InvalidSelectionError(ResolutionError):
    """
    Raised when the operator's selection cannot be applied.

    The typical case is confirming a group that has no label candidates;
    the caller must skip such a group instead.
    """

    def __init__(self, order_number: str, reason: str = None):
        message = f"Invalid selection for order '{order_number}'"
        details = {"order_number": order_number, "reason": reason}
        super().__init__(message, details)


class LabelAlreadyAssignedError(InvalidSelectionError):
    """Raised when the chosen label already belongs to another group."""

    def __init__(self, order_number: str, label_page: int, owner_order: str):
        super().__init__(
            order_number,
            f"label page {label_page} is assigned to order '{owner_order}'"
        )
        self.details["label_page"] = label_page
        self.details["owner_order"] = owner_order


class ResolutionCompleteError(ResolutionError):
    """Raised when confirm/skip is called after the session completed."""

    def __init__(self, total: int):
        message = "Resolution session is already complete"
        details = {"total": total}
        super().__init__(message, details)


# =============================================================================
# OUTPUT ERRORS
# =============================================================================

class OutputError(SlipMatchError):
    """Base exception for output handling errors."""
    pass


class ReportExportError(OutputError):
    """Raised when the Excel report cannot be written."""

    def __init__(self, filepath: str, reason: str = None):
        message = f"Failed to export report: {filepath}"
        details = {"filepath": filepath, "reason": reason}
        super().__init__(message, details)


__all__ = [
    'SlipMatchError',
    'ConfigurationError',
    'InputError',
    'SourceReadError',
    'MatchingError',
    'GroupingInvariantError',
    'ResolutionError',
    'InvalidSelectionError',
    'LabelAlreadyAssignedError',
    'ResolutionCompleteError',
    'OutputError',
    'ReportExportError',
]
