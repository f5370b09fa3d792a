"""Error kinds and tagged failure results for registry operations.

Domain failures are never raised. Every operation returns a dict with
``success`` set, and failures carry a machine-readable ``error`` kind so
callers can surface it verbatim.

Usage:
    from src.registry.errors import ErrorKind, registry_error

    return registry_error(
        ErrorKind.TOKEN_NOT_FOUND,
        f"Token {token_id} does not exist",
        token_id=token_id,
    )
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any


class ErrorCategory(str, Enum):
    """Categories for error classification.

    - VALIDATION: Caller provided bad input
    - PERMISSION: Caller not authorized, or authorization already fixed
    - RESOURCE: Token missing, supply exhausted, royalty absent
    """

    VALIDATION = "validation"
    PERMISSION = "permission"
    RESOURCE = "resource"


class ErrorKind(str, Enum):
    """Specific error kinds for programmatic handling."""

    # Permission errors
    NOT_AUTHORIZED = "not_authorized"
    ALREADY_AUTHORIZED = "already_authorized"

    # Validation errors
    INVALID_STORY_HASH = "invalid_story_hash"
    INVALID_ART_URI = "invalid_art_uri"
    INVALID_METADATA = "invalid_metadata"
    INVALID_RECOVERY_GOAL = "invalid_recovery_goal"
    INVALID_MILESTONE_COUNT = "invalid_milestone_count"
    INVALID_CURRENCY = "invalid_currency"
    INVALID_LOCATION = "invalid_location"
    INVALID_UPDATE_PARAM = "invalid_update_param"
    INVALID_ROYALTY_RATE = "invalid_royalty_rate"
    # Recovery-milestone index outside [0, milestone_count), negative included.
    # Added beyond the core taxonomy so a bad index is not a bare failure.
    INVALID_MILESTONE = "invalid_milestone"

    # Resource errors
    MAX_TOKENS_EXCEEDED = "max_tokens_exceeded"
    TOKEN_NOT_FOUND = "token_not_found"
    ROYALTY_NOT_SET = "royalty_not_set"


_CATEGORIES: dict[ErrorKind, ErrorCategory] = {
    ErrorKind.NOT_AUTHORIZED: ErrorCategory.PERMISSION,
    ErrorKind.ALREADY_AUTHORIZED: ErrorCategory.PERMISSION,
    ErrorKind.MAX_TOKENS_EXCEEDED: ErrorCategory.RESOURCE,
    ErrorKind.TOKEN_NOT_FOUND: ErrorCategory.RESOURCE,
    ErrorKind.ROYALTY_NOT_SET: ErrorCategory.RESOURCE,
}


def category_of(kind: ErrorKind) -> ErrorCategory:
    """Category for an error kind. Anything not listed is a validation error."""
    return _CATEGORIES.get(kind, ErrorCategory.VALIDATION)


@dataclass
class ErrorResponse:
    """Standardized error response.

    All error responses include:
    - success: Always False
    - error: The ErrorKind
    - message: Human-readable message
    - category: Error category (validation, permission, resource)
    - retriable: Always False; registry failures are terminal for the call
    - details: Optional additional context
    """

    error: ErrorKind
    message: str = ""
    success: bool = False
    retriable: bool = False
    details: dict[str, Any] | None = None

    @property
    def category(self) -> ErrorCategory:
        return category_of(self.error)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        result: dict[str, Any] = {
            "success": self.success,
            "error": self.error,
            "message": self.message,
            "category": self.category.value,
            "retriable": self.retriable,
        }
        if self.details:
            result["details"] = self.details
        return result


def registry_error(kind: ErrorKind, message: str = "", **details: Any) -> dict[str, Any]:
    """Create a failure result for a registry operation.

    Args:
        kind: The error kind callers switch on
        message: Human-readable error message (defaults to the kind's value)
        **details: Additional context (e.g., token_id=3)

    Returns:
        Error response dict with success=False
    """
    return ErrorResponse(
        error=kind,
        message=message or kind.value.replace("_", " "),
        details=dict(details) if details else None,
    ).to_dict()


def ok(value: Any) -> dict[str, Any]:
    """Create a success result carrying ``value``."""
    return {"success": True, "value": value}
