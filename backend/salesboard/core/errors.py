"""Domain error taxonomy and the handlers that turn it into HTTP responses.

Validation and authorization problems abort the operation with a specific
message, integrity problems block one transition and say why, and transient
store failures surface as a generic retry notice.
"""

from __future__ import annotations

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from loguru import logger
from sqlalchemy.exc import DBAPIError, OperationalError

TRANSIENT_FAILURE_DETAIL = "The data store is temporarily unavailable. Please retry."


class DomainError(Exception):
    """Base class for errors raised by business rules."""

    status_code: int = status.HTTP_400_BAD_REQUEST
    code: str = "domain_error"

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail


class ValidationError(DomainError):
    status_code = status.HTTP_400_BAD_REQUEST
    code = "validation_error"


class NoOpTransitionError(ValidationError):
    code = "no_op_transition"


class AuthorizationError(DomainError):
    status_code = status.HTTP_403_FORBIDDEN
    code = "authorization_error"


class NotFoundError(DomainError):
    status_code = status.HTTP_404_NOT_FOUND
    code = "not_found"


class IntegrityViolation(DomainError):
    status_code = status.HTTP_409_CONFLICT
    code = "integrity_error"


class ImmutableAccountError(IntegrityViolation):
    code = "immutable_account"


class AccountUnavailableError(IntegrityViolation):
    code = "account_unavailable"


class DuplicateRelationshipError(IntegrityViolation):
    code = "duplicate_relationship"


class RequestAlreadyDecidedError(IntegrityViolation):
    code = "request_already_decided"


class RequestAlreadyPendingError(IntegrityViolation):
    code = "request_already_pending"


def install_error_handlers(app: FastAPI) -> None:
    """Attach the domain and transient-failure exception handlers to the app."""

    async def domain_error_handler(request: Request, exc: DomainError):
        logger.bind(
            path=str(request.url.path),
            error=exc.code,
            detail=exc.detail,
        ).info("request_rejected")
        return JSONResponse(
            status_code=exc.status_code,
            content={"detail": exc.detail, "code": exc.code},
        )

    async def transient_error_handler(request: Request, exc: Exception):
        logger.bind(path=str(request.url.path), error=str(exc)).warning("store_unavailable")
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"detail": TRANSIENT_FAILURE_DETAIL, "code": "transient_failure"},
        )

    app.add_exception_handler(DomainError, domain_error_handler)
    app.add_exception_handler(OperationalError, transient_error_handler)
    app.add_exception_handler(DBAPIError, transient_error_handler)
    app.add_exception_handler(TimeoutError, transient_error_handler)
