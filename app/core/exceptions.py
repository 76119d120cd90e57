"""Application exceptions mapped to HTTP responses by the error handlers."""


class AppException(Exception):
    """Base application exception; subclasses pick the status code."""

    status_code: int = 500
    default_message: str = "Internal error"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationException(AppException):
    """Request is well-formed but breaks a booking or account rule."""

    status_code = 400
    default_message = "Validation error"


class ConflictException(AppException):
    """Requested slot overlaps an active appointment of the same doctor."""

    status_code = 400
    default_message = "Appointment time conflict detected"


class InvalidTransitionException(AppException):
    """Status change not allowed from the current status."""

    status_code = 400
    default_message = "Invalid status transition"


class UnauthorizedException(AppException):
    status_code = 401
    default_message = "Unauthorized"


class ForbiddenException(AppException):
    """Caller's role or ownership does not cover the resource."""

    status_code = 403
    default_message = "Forbidden"


class NotFoundException(AppException):
    status_code = 404
    default_message = "Resource not found"


class DuplicateResourceException(AppException):
    """Username or email already taken."""

    status_code = 409
    default_message = "Resource already exists"
