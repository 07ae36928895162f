from rest_framework import exceptions, status

from accounts.exceptions import LoginRequired, Unauthorized

__all__ = [
    "FatalError",
    "InvalidState",
    "LoginRequired",
    "NotFound",
    "Unauthorized",
]


class NotFound(exceptions.NotFound):
    default_code = "not_found"


class InvalidState(exceptions.APIException):
    """Raised when a transition precondition does not hold."""

    status_code = status.HTTP_409_CONFLICT
    default_detail = "The recurring contribution is not in a valid state for this operation."
    default_code = "invalid_state"


class FatalError(exceptions.APIException):
    """Integrity failure the caller cannot recover from."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail = "An unrecoverable error occurred."
    default_code = "fatal"
