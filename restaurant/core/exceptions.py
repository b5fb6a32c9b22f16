"""
Domain Exceptions

Services signal failure by raising one of these; the API layer maps
every RestaurantError to a single JSON error envelope.
"""

from typing import Optional


class RestaurantError(Exception):
    """Base class for recoverable, request-level failures."""

    status_code: int = 500
    error: str = "Internal Server Error"

    def __init__(self, detail: str, *, error: Optional[str] = None):
        super().__init__(detail)
        self.detail = detail
        if error is not None:
            self.error = error

    def to_dict(self) -> dict:
        """Convert to the error envelope returned to clients."""
        return {
            "success": False,
            "error": self.error,
            "detail": self.detail,
        }


class NotFoundError(RestaurantError):
    """Menu item or order does not exist."""
    status_code = 404
    error = "Not Found"


class BadRequestError(RestaurantError):
    """Malformed input, empty selection or illegal status transition."""
    status_code = 400
    error = "Bad Request"


class ConflictError(RestaurantError):
    """Operation clashes with existing state (e.g. menu already seeded)."""
    status_code = 409
    error = "Conflict"
