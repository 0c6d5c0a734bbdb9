"""Error types and classification for completion actions."""

from enum import Enum

from pydantic import BaseModel


class ErrorCategory(Enum):
    """Categories of failures a completion action can report."""

    CONFIGURATION = "configuration"
    RESOURCE_NOT_FOUND = "resource_not_found"
    PARTIAL_FAILURE = "partial_failure"
    UNEXPECTED = "unexpected"


class ErrorSeverity(Enum):
    """Severity levels for errors."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class CompletionError(Exception):
    """Base class for errors raised inside the completion engine."""


class PathValidationError(CompletionError):
    """Raised when a document path escapes the library root or is malformed."""


class DocumentNotFoundError(CompletionError):
    """Raised when a document does not exist in the store."""

    def __init__(self, path: str) -> None:
        super().__init__(f"File not found: {path}")
        self.path = path


class DocumentCreateError(CompletionError):
    """Raised when the store cannot create a document or folder."""

    def __init__(self, path: str, reason: str = "") -> None:
        detail = f": {reason}" if reason else ""
        super().__init__(f"Failed to create {path}{detail}")
        self.path = path


class TaskLocationError(CompletionError):
    """Raised when a task's text cannot be found in its source document."""


class BoardNotFoundError(CompletionError):
    """Raised when a board document does not exist."""

    def __init__(self, path: str) -> None:
        super().__init__(f"Canvas file not found: {path}")
        self.path = path


class BoardFormatError(CompletionError):
    """Raised when a board document is not valid board JSON."""


class TextNodeNotFoundError(CompletionError):
    """Raised when an explicitly requested board node does not exist."""


class ErrorResponse(BaseModel):
    """Structured classification of an action failure."""

    category: ErrorCategory
    message: str
    severity: ErrorSeverity


_PARTIAL_MARKERS = ("successfully", "but failed to")
_CONFIGURATION_MARKERS = (
    "invalid",
    "unrecognized",
    "parse error",
    "no executor found",
    "empty or invalid",
)
_NOT_FOUND_MARKERS = ("not found", "failed to create", "not available")


def classify_result_error(error: str | None) -> ErrorResponse:
    """Classify a failed result's error string into the engine's error taxonomy.

    Args:
        error: The ``error`` field of a failed ExecutionResult

    Returns:
        ErrorResponse with category, original message, and severity
    """
    message = error or ""
    lowered = message.lower()

    if all(marker in lowered for marker in _PARTIAL_MARKERS):
        return ErrorResponse(category=ErrorCategory.PARTIAL_FAILURE, message=message, severity=ErrorSeverity.HIGH)

    if lowered.startswith("execution failed"):
        return ErrorResponse(category=ErrorCategory.UNEXPECTED, message=message, severity=ErrorSeverity.HIGH)

    if any(marker in lowered for marker in _CONFIGURATION_MARKERS):
        return ErrorResponse(category=ErrorCategory.CONFIGURATION, message=message, severity=ErrorSeverity.LOW)

    if any(marker in lowered for marker in _NOT_FOUND_MARKERS):
        return ErrorResponse(
            category=ErrorCategory.RESOURCE_NOT_FOUND, message=message, severity=ErrorSeverity.MEDIUM
        )

    return ErrorResponse(category=ErrorCategory.UNEXPECTED, message=message, severity=ErrorSeverity.MEDIUM)
