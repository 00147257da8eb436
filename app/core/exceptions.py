"""Error taxonomy shared by the OTP issuer and the appliance ledger.

Services raise these; ``app.main`` renders any ``AppError`` as
``{"detail": message}`` with the error's status code.
"""

from fastapi import status


class AppError(Exception):
    """Base class for errors that map onto an HTTP response."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    message = "Internal server error"

    def __init__(self, message=None):
        self.message = message or self.message
        super().__init__(self.message)


class ValidationError(AppError):
    """Malformed or out-of-range input the user can correct."""

    status_code = status.HTTP_400_BAD_REQUEST
    message = "Invalid input"


class Unauthorized(AppError):
    """Missing, malformed or expired credential."""

    status_code = status.HTTP_401_UNAUTHORIZED
    message = "Unauthorized"


class Forbidden(AppError):
    """Authenticated user does not own the target record."""

    status_code = status.HTTP_403_FORBIDDEN
    message = "Forbidden"


class NotFound(AppError):
    """Unknown identity or record."""

    status_code = status.HTTP_404_NOT_FOUND
    message = "Not found"


class InvalidOtp(AppError):
    """Wrong, consumed or expired one-time passcode."""

    status_code = status.HTTP_400_BAD_REQUEST
    message = "Invalid or expired OTP"


class RateLimitExceeded(AppError):
    status_code = status.HTTP_429_TOO_MANY_REQUESTS
    message = "Too many requests, please try again later."


class InternalError(AppError):
    """Store failure or any other unexpected condition."""


class NotifierError(InternalError):
    """The email notifier could not dispatch a message."""

    message = "Failed to send OTP"
