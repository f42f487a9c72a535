"""Error kinds raised by the reservation engine.

Every failure surfaced by a service is exactly one of these four kinds. The
HTTP boundary maps them to status codes; nothing inside the engine retries them.
"""
from typing import Any, Dict, List, Optional


class ReservationEngineError(Exception):
    """Base class for all engine failures."""

    status_code: int = 500
    kind: str = "Error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> Dict[str, Any]:
        return {
            "title": self.message,
            "status": self.status_code,
            "type": self.kind,
        }


class NotFoundError(ReservationEngineError):
    """Raised when a referenced entity does not exist."""

    status_code = 404
    kind = "NotFound"

    def __init__(self, resource: str, key: Any):
        super().__init__(f"{resource} with ID {key} not found.")
        self.resource = resource
        self.key = key


class BadRequestError(ReservationEngineError):
    """Raised for structurally invalid input."""

    status_code = 400
    kind = "BadRequest"

    def __init__(self, reason: str, errors: Optional[Dict[str, List[str]]] = None):
        super().__init__(reason)
        self.errors = errors or {}

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data["errors"] = self.errors
        return data


class ConflictError(ReservationEngineError):
    """Raised when a business rule rejects the operation."""

    status_code = 409
    kind = "Conflict"


class UnauthorizedError(ReservationEngineError):
    """Raised on identity or permission violations."""

    status_code = 401
    kind = "Unauthorized"
