"""
Club Management Errors

Service-layer exception taxonomy. The HTTP boundary maps each kind to a
status code in app/server.py.
"""

from typing import Any, Dict, Optional


class ClubError(Exception):
    """Base class for club domain errors"""

    kind = "error"
    status_code = 500

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.field = field

    def to_dict(self) -> Dict[str, Any]:
        return {
            "error": self.kind,
            "message": self.message,
            "field": self.field,
        }


class ValidationError(ClubError, ValueError):
    """Rejected before any write (missing field, bad enum, roster size, ...)

    Also a ValueError so pydantic validators report it as a field error.
    """

    kind = "validation_error"
    status_code = 400

    def __init__(self, field: Optional[str], reason: str):
        super().__init__(reason, field=field)
        self.reason = reason


class NotFoundError(ClubError):
    """Lookup by id or document missed"""

    kind = "not_found"
    status_code = 404

    def __init__(self, entity: str, key: Any, field: str = "id"):
        super().__init__(f"{entity} not found: {key}", field=field)
        self.entity = entity
        self.key = key


class ConflictError(ClubError):
    """Unique business key already taken"""

    kind = "conflict"
    status_code = 409

    def __init__(self, field: str, value: Any):
        super().__init__(f"{field} already exists: {value}", field=field)
        self.value = value


class TransportError(ClubError):
    """Entity store unavailable or failed; never retried by the core"""

    kind = "store_unavailable"
    status_code = 503

    def __init__(self, operation: str, cause: Optional[BaseException] = None):
        message = f"store operation failed: {operation}"
        if cause is not None:
            message = f"{message} ({cause})"
        super().__init__(message)
        self.operation = operation
        self.cause = cause
