"""Domain error taxonomy.

Services raise these instead of ``HTTPException`` so the kind of failure
survives up to the API layer; ``register_exception_handlers`` maps each one to
a status code and a JSON body.
"""
import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from sqlalchemy.exc import InterfaceError, OperationalError, SQLAlchemyError

logger = logging.getLogger(__name__)


class AppError(Exception):
    status_code: int = status.HTTP_400_BAD_REQUEST
    code: str = "AppError"
    default_detail: str = "Request could not be processed"

    def __init__(self, detail: str | None = None):
        self.detail = detail or self.default_detail
        super().__init__(self.detail)


# Session/Token manager
class TokenInvalid(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    code = "TokenInvalid"
    default_detail = "Token is invalid"


class TokenExpired(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    code = "TokenExpired"
    default_detail = "Token has expired"


class TokenRevoked(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    code = "TokenRevoked"
    default_detail = "Refresh token has been revoked"


class InvalidCredentials(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    code = "InvalidCredentials"
    default_detail = "Invalid credentials"


class IncorrectPassword(InvalidCredentials):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Old password is incorrect"


class InvalidResetCode(AppError):
    code = "InvalidResetCode"
    default_detail = "Reset code is invalid or has expired"


# Participation workflow
class AlreadyRequested(AppError):
    code = "AlreadyRequested"
    default_detail = "You already requested to join this event"


class NotFound(AppError):
    status_code = status.HTTP_404_NOT_FOUND
    code = "NotFound"
    default_detail = "Resource not found"


class Forbidden(AppError):
    status_code = status.HTTP_403_FORBIDDEN
    code = "Forbidden"
    default_detail = "Not authorized to access this resource"


class SeatsFull(AppError):
    status_code = status.HTTP_409_CONFLICT
    code = "SeatsFull"
    default_detail = "No seats left for this event"


class InvalidState(AppError):
    code = "InvalidState"
    default_detail = "Operation is not allowed in the current state"


# Generic
class Conflict(AppError):
    status_code = status.HTTP_409_CONFLICT
    code = "Conflict"
    default_detail = "Resource already exists"


class ValidationFailed(AppError):
    status_code = 422
    code = "ValidationFailed"
    default_detail = "Validation failed"


class PersistenceUnavailable(AppError):
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    code = "PersistenceUnavailable"
    default_detail = "Database is unavailable, please retry"


class InternalError(AppError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    code = "InternalError"
    default_detail = "Internal server error"


def _error_response(error: AppError) -> JSONResponse:
    return JSONResponse(
        status_code=error.status_code,
        content={"success": False, "code": error.code, "detail": error.detail},
    )


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    return _error_response(exc)


async def sqlalchemy_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    # only lost or refused connections are worth a retry
    if isinstance(exc, (OperationalError, InterfaceError)):
        logger.error(f"Database unavailable on {request.method} {request.url.path}: {exc}")
        return _error_response(PersistenceUnavailable())
    logger.exception(f"Unhandled database error on {request.method} {request.url.path}")
    return _error_response(InternalError())


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppError, app_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(SQLAlchemyError, sqlalchemy_error_handler)  # type: ignore[arg-type]
