from fastapi import status
from .base import build_response
from exceptions.rental_request_exceptions import RentalRequestError, RentalRequestErrorCode


def conflict_error(error: str = "Credentials already exists"):
    return build_response(
        status.HTTP_409_CONFLICT,
        "failure",
        error="conflict",
        message=error,
    )


def not_found_error(error: str = "Resource not found", code: str = "not_found"):
    return build_response(
        status.HTTP_404_NOT_FOUND,
        "failure",
        error=code,
        message=error,
    )


def unauthorized_error(error: str = "Invalid credentials"):
    return build_response(
        status.HTTP_401_UNAUTHORIZED,
        "failure",
        error="unauthorized",
        message=error,
    )


def internal_server_error(error: str = "Internal server error"):
    return build_response(
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "failure",
        error="internal_server_error",
        message=error,
    )


def forbidden_error(error: str = "Access denied", code: str = "forbidden"):
    return build_response(
        status.HTTP_403_FORBIDDEN,
        "failure",
        error=code,
        message=error,
    )


def guard_violation_error(exc: RentalRequestError):
    """Business-rule refusal. ``error`` carries the stable code the client branches on."""
    if exc.code == RentalRequestErrorCode.NOT_REQUEST_OWNER:
        return forbidden_error(exc.message, code=exc.code.value)
    return build_response(
        status.HTTP_409_CONFLICT,
        "failure",
        error=exc.code.value,
        message=exc.message,
    )


def resource_not_found_error(exc: RentalRequestError):
    return not_found_error(exc.message, code=exc.code.value)
