"""Error taxonomy shared by the core and the HTTP layer.

Every failure the core reports carries a classification. The HTTP layer maps
classifications to status codes in one place (see ``time_ledger.api.errors``).
"""

from typing import Any, Optional


class TimeLedgerError(Exception):
    """Base class for all classified core errors."""

    classification = "internal"

    def __init__(self, message: str, errors: Optional[dict[str, list[str]]] = None):
        super().__init__(message)
        self.message = message
        self.errors = errors or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-friendly payload."""
        payload: dict[str, Any] = {"message": self.message}
        if self.errors:
            payload["errors"] = self.errors
        return payload


class ValidationFailed(TimeLedgerError):
    """Malformed or missing input."""

    classification = "validation_failed"

    @classmethod
    def for_field(cls, field: str, message: str) -> "ValidationFailed":
        """Build an error carrying a single field-level message."""
        return cls(message, errors={field: [message]})


class NotFound(TimeLedgerError):
    """Entity absent or not owned by the caller.

    Both cases produce the same signal so callers cannot discover ids owned
    by other users.
    """

    classification = "not_found"


class Conflict(TimeLedgerError):
    """State-machine violation: ongoing timer, overlap, non-empty client."""

    classification = "conflict"


class Unauthorized(TimeLedgerError):
    """Bad credentials or revoked token."""

    classification = "unauthorized"


class InternalError(TimeLedgerError):
    """Storage failure during a multi-step operation."""

    classification = "internal"
