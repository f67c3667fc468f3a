"""Global exception handlers — translate domain errors to HTTP responses.

Every domain exception is answered with the ``{"status": "error",
"message": "..."}`` envelope.  The status code is taken from the closest
class in the exception's MRO listed in :data:`_EXCEPTION_STATUS`.
"""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from rulesync_fetch.domain.exceptions import (
    ContentFetchError,
    ConversionError,
    InvalidOptionsError,
    LocatorError,
    PathTraversalError,
    RateLimitError,
    RecursionDepthExceededError,
    RemoteNotFoundError,
    RepositoryAccessDeniedError,
    RepositoryClientError,
    RulesyncFetchError,
    SizeLimitExceededError,
    UnsupportedProviderError,
)

logger = logging.getLogger(__name__)

_EXCEPTION_STATUS: dict[type[RulesyncFetchError], int] = {
    LocatorError: 422,
    InvalidOptionsError: 422,
    UnsupportedProviderError: 422,
    RecursionDepthExceededError: 422,
    PathTraversalError: 400,
    SizeLimitExceededError: 413,
    RemoteNotFoundError: 404,
    RepositoryAccessDeniedError: 403,
    RateLimitError: 429,
    ContentFetchError: 502,
    RepositoryClientError: 502,
    ConversionError: 500,
}


def status_for(exc: RulesyncFetchError) -> int:
    for cls in type(exc).__mro__:
        if cls in _EXCEPTION_STATUS:
            return _EXCEPTION_STATUS[cls]
    return 500


def _error_json(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"status": "error", "message": message},
    )


def register_error_handlers(app: FastAPI) -> None:
    """Attach exception handlers to the FastAPI application."""

    @app.exception_handler(RulesyncFetchError)
    async def domain_handler(request: Request, exc: RulesyncFetchError) -> JSONResponse:
        code = status_for(exc)
        level = logging.ERROR if code >= 500 else logging.WARNING
        logger.log(level, "%s %s failed (%d): %s", request.method, request.url.path, code, exc)
        return _error_json(code, str(exc))

    @app.exception_handler(RequestValidationError)
    async def validation_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        messages = [
            f"{'.'.join(str(p) for p in err.get('loc', ()))}: {err.get('msg', 'invalid value')}"
            for err in exc.errors()
        ]
        return _error_json(422, "; ".join(messages))

    @app.exception_handler(Exception)
    async def generic_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled exception")
        return _error_json(500, "An unexpected error occurred. Please try again later.")
