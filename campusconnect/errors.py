"""
Error taxonomy for the CampusConnect API.

Services raise these; the handlers registered in create_app() turn them
into JSON responses.  Anything that is not an ApiError is reported as a
generic 500 so storage details never reach the caller.
"""


class ApiError(Exception):
    """Base class for errors that map directly onto an HTTP status."""
    status_code = 500
    default_message = "Internal Server Error"

    def __init__(self, message: str = None):
        super().__init__(message or self.default_message)
        self.message = message or self.default_message

    def to_dict(self) -> dict:
        return {"message": self.message}


class ValidationError(ApiError):
    """Malformed or missing input; reports the first offending field."""
    status_code = 400
    default_message = "Invalid input"

    def __init__(self, message: str = None, field: str = None):
        super().__init__(message)
        self.field = field

    def to_dict(self) -> dict:
        d = super().to_dict()
        if self.field:
            d["field"] = self.field
        return d


class UnauthenticatedError(ApiError):
    status_code = 401
    default_message = "Unauthorized"


class ForbiddenError(ApiError):
    status_code = 403
    default_message = "Forbidden"


class NotFoundError(ApiError):
    status_code = 404
    default_message = "Not found"


class InternalError(ApiError):
    status_code = 500


class CounterUnderflowError(InternalError):
    """A denormalized counter was asked to go below zero.

    Only raised when STRICT_COUNTERS is on; otherwise the decrement is
    clamped and logged.
    """
