"""Global exception handlers for FastAPI."""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from starlette.responses import JSONResponse

from api.base import error_response, ErrorCodes
from auth.exceptions import (
    AuthError,
    BadRequestError,
    ConflictError,
    ForbiddenError,
    InvalidAccessTokenError,
    InvalidVerificationTokenError,
    NotFoundError,
    RateLimitedError,
    UnauthorizedError,
)

logger = logging.getLogger(__name__)

# Most specific first; the first isinstance match wins.
_AUTH_ERROR_MAP: list[tuple[type[AuthError], int, str]] = [
    (ConflictError, 409, ErrorCodes.ALREADY_EXISTS),
    (InvalidAccessTokenError, 401, ErrorCodes.INVALID_TOKEN),
    (UnauthorizedError, 401, ErrorCodes.INVALID_CREDENTIALS),
    (ForbiddenError, 403, ErrorCodes.EMAIL_NOT_VERIFIED),
    (InvalidVerificationTokenError, 400, ErrorCodes.INVALID_TOKEN),
    (BadRequestError, 400, ErrorCodes.INVALID_REQUEST),
    (NotFoundError, 404, ErrorCodes.NOT_FOUND),
]


def _request_id(request: Request) -> str | None:
    return getattr(request.state, "request_id", None)


def register_error_handlers(app: FastAPI) -> None:
    """Register global exception handlers on the app."""

    @app.exception_handler(RateLimitedError)
    async def rate_limited_handler(request: Request, exc: RateLimitedError):
        return JSONResponse(
            status_code=429,
            headers={"Retry-After": str(exc.retry_after_seconds)},
            content=error_response(
                ErrorCodes.RATE_LIMITED,
                f"Too many requests. Please wait {exc.retry_after_seconds} seconds.",
                _request_id(request),
            ).model_dump(mode="json"),
        )

    @app.exception_handler(AuthError)
    async def auth_error_handler(request: Request, exc: AuthError):
        for error_type, status_code, code in _AUTH_ERROR_MAP:
            if isinstance(exc, error_type):
                break
        else:
            logger.error("Unmapped auth error %s: %s", type(exc).__name__, exc.message)
            status_code, code = 500, ErrorCodes.INTERNAL_ERROR

        return JSONResponse(
            status_code=status_code,
            content=error_response(code, exc.message, _request_id(request)).model_dump(mode="json"),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        messages = "; ".join(
            f"{'.'.join(str(part) for part in error['loc'][1:])}: {error['msg']}"
            for error in exc.errors()
        )
        return JSONResponse(
            status_code=422,
            content=error_response(
                ErrorCodes.VALIDATION_ERROR,
                messages,
                _request_id(request),
            ).model_dump(mode="json"),
        )

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.exception("Unhandled exception")
        return JSONResponse(
            status_code=500,
            content=error_response(
                ErrorCodes.INTERNAL_ERROR,
                "An internal error occurred",
                _request_id(request),
            ).model_dump(mode="json"),
        )
