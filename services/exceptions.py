from typing import Dict, List, Optional


class BookingError(Exception):
    """Base class for errors that carry a caller-visible status and message."""
    status_code = 500
    message = "Something went wrong. Please try again later."

    def __init__(self, message: Optional[str] = None, errors: Optional[List[Dict[str, str]]] = None):
        self.message = message or self.message
        self.errors = errors or []
        super().__init__(self.message)

    def to_dict(self) -> dict:
        body = {"message": self.message}
        if self.errors:
            body["errors"] = self.errors
        return body


class ValidationFailed(BookingError):
    status_code = 400
    message = "Invalid request data"

    @classmethod
    def for_field(cls, field: str, message: str, summary: Optional[str] = None) -> "ValidationFailed":
        return cls(summary, errors=[{"field": field, "message": message}])


class AuthorizationDenied(BookingError):
    status_code = 403
    message = "Access denied"


class NotFound(BookingError):
    status_code = 404
    message = "Not found"


class ProviderNotFound(NotFound):
    message = "Service provider not found"


class AdmissionFailed(BookingError):
    status_code = 503
    message = "Failed to create booking. Please try again in a moment."


class RatingAggregationFailed(BookingError):
    message = "Failed to update provider rating"


class NotificationFailed(Exception):
    """A notification could not be delivered. Never surfaced by booking creation."""


class RepositoryError(Exception):
    """Raised by repository implementations when the storage layer fails."""
