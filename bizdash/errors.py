"""
Error types and user-facing error classification for backend calls.
"""
from dataclasses import dataclass
from typing import Optional


class RequestTimeoutError(Exception):
    """A backend call did not answer within the configured timeout."""

    code = "REQUEST_TIMEOUT"

    def __init__(self, timeout_seconds: float):
        self.timeout_seconds = timeout_seconds
        super().__init__(f"Request timed out after {timeout_seconds:g}s")


class FallbackTooLargeError(Exception):
    """The client-side pagination fallback would load more rows than allowed."""

    code = "FALLBACK_TOO_LARGE"

    def __init__(self, max_rows: int):
        self.max_rows = max_rows
        super().__init__(
            f"Dataset too large for fallback pagination (more than {max_rows} rows). "
            "Install the optimized pagination view or narrow the date range."
        )


class BackendConfigError(RuntimeError):
    """The configured data backend cannot be used (missing URL, key, ...)."""


ERROR_NETWORK = "network"
ERROR_TIMEOUT = "timeout"
ERROR_AUTH = "auth"
ERROR_VALIDATION = "validation"
ERROR_SERVER = "server"
ERROR_UNKNOWN = "unknown"


@dataclass(frozen=True)
class AppError:
    type: str
    message: str
    details: Optional[str] = None
    code: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "type": self.type,
            "message": self.message,
            "details": self.details,
            "code": self.code,
        }


def _status_of(exc) -> Optional[int]:
    for attr in ("status", "status_code"):
        value = getattr(exc, attr, None)
        if isinstance(value, int):
            return value
    return None


def _code_of(exc) -> Optional[str]:
    code = getattr(exc, "code", None)
    return str(code) if code is not None else None


def classify_error(exc: Optional[BaseException]) -> AppError:
    """
    Map a backend exception to an AppError for presentation.
    Order matters: timeout, auth, network, server, validation, unknown.
    """
    if exc is None:
        return AppError(ERROR_UNKNOWN, "An unknown error occurred")

    message = str(exc)
    lowered = message.lower()
    status = _status_of(exc)
    code = _code_of(exc)

    if isinstance(exc, RequestTimeoutError) or isinstance(exc, TimeoutError):
        return AppError(
            ERROR_TIMEOUT, "Request timed out",
            "The server took too long to respond. Please try again.",
            RequestTimeoutError.code,
        )

    if status == 401 or "jwt" in lowered or "auth" in lowered:
        return AppError(
            ERROR_AUTH, "Authentication error",
            "Your session may have expired. Please sign in again.", code,
        )

    if isinstance(exc, ConnectionError) or "fetch" in lowered or "network" in lowered \
            or "connection" in lowered:
        return AppError(
            ERROR_NETWORK, "Connection error",
            "Please check your connection and try again.", code,
        )

    if status is not None and status >= 500:
        return AppError(
            ERROR_SERVER, "Server error",
            "Something went wrong on the server. Please try again later.", code,
        )

    if status in (400, 422) or isinstance(exc, ValueError):
        return AppError(
            ERROR_VALIDATION, "Invalid request",
            message or "Please check your input and try again.", code,
        )

    return AppError(ERROR_UNKNOWN, message or "An error occurred", None, code)


def is_session_expired_error(exc: Optional[BaseException]) -> bool:
    """Check if an error means the user's session is no longer valid."""
    if exc is None:
        return False
    lowered = str(exc).lower()
    return (
        _status_of(exc) == 401
        or "jwt" in lowered
        or "expired" in lowered
        or "unauthorized" in lowered
    )
