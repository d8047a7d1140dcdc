"""KYC error taxonomy.

Domain services raise these internally and convert them to result values at
their public boundary, so callers never need exception handling to render a
message.
"""

from enum import Enum
from typing import Dict, Optional


class KYCError(Exception):
    """Base class for KYC domain errors."""
    pass


class KYCValidationError(KYCError):
    """Field-scoped validation failure. Blocks a wizard transition."""

    def __init__(self, errors: Dict[str, str]):
        self.errors = dict(errors)
        super().__init__(
            "Validation failed: " + ", ".join(f"{k}: {v}" for k, v in self.errors.items())
        )


class SessionExpiredError(KYCError):
    """The caller's session could not be confirmed before an upload."""

    def __init__(self, message: str = "Your session has expired, please log in again."):
        super().__init__(message)


class UploadError(KYCError):
    """A single storage upload attempt failed (retryable)."""
    pass


class NotAuthenticatedError(KYCError):
    """No seller identity could be resolved."""

    def __init__(self, message: str = "Not authenticated, please log in again."):
        super().__init__(message)


class PersistenceError(KYCError):
    """Record store failure. The message is the store's raw error text."""

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.cause = cause


class StateTransitionError(KYCError):
    """Raised when an invalid KYC status transition is attempted."""
    pass


class ErrorCode(str, Enum):
    """Machine-readable failure category carried on result values."""
    VALIDATION = "validation"
    NOT_AUTHENTICATED = "not_authenticated"
    SESSION_EXPIRED = "session_expired"
    STORAGE = "storage"
    PERSISTENCE = "persistence"
    NOT_FOUND = "not_found"
    INVALID_TRANSITION = "invalid_transition"
