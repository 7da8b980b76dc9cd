"""FastAPI exception handlers.

Every exception that escapes a route ends up here and leaves the service as
an ErrorResponse. Classification and message parsing live in translator.py;
this module only adapts them to Starlette's handler signature, logs, and
renders the JSONResponse.
"""

from collections.abc import Mapping

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.responses import Response

from error_translator.config import Settings
from error_translator.config import settings as default_settings
from error_translator.exceptions import DomainError
from error_translator.logging import get_logger
from error_translator.middleware import REQUEST_ID_HEADER
from error_translator.schemas.error import ErrorResponse
from error_translator.translator import translate, translate_http_exception

logger = get_logger(__name__)

# Exception classes routed through translate(). Starlette picks the handler
# by walking the raised exception's MRO, so subclasses are covered too.
TRANSLATED_EXCEPTIONS: tuple[type[Exception], ...] = (
    RequestValidationError,
    ValidationError,
    DomainError,
    PermissionError,
    Exception,
)

# Statuses that must not carry a body.
BODYLESS_STATUSES = frozenset({204, 304})


def _headers(extra: Mapping[str, str] | None = None) -> dict[str, str]:
    """Response headers, including the request ID bound by RequestIDMiddleware.

    Unhandled exceptions are answered by ServerErrorMiddleware, outside the
    request-ID middleware, so the header is set here as well.
    """
    headers = dict(extra) if extra else {}
    request_id = structlog.contextvars.get_contextvars().get("request_id")
    if request_id:
        headers.setdefault(REQUEST_ID_HEADER, str(request_id))
    return headers


def _render(body: ErrorResponse, headers: Mapping[str, str] | None = None) -> JSONResponse:
    return JSONResponse(
        status_code=body.status,
        content=body.model_dump(mode="json"),
        headers=_headers(headers),
    )


def _log_request_error(body: ErrorResponse) -> None:
    log = logger.error if body.status >= 500 else logger.warning
    log(
        "request_error",
        status=body.status,
        path=body.path,
        error=body.error,
        message=body.message,
    )


def register_exception_handlers(app: FastAPI, settings: Settings | None = None) -> None:
    """Install the error translator on ``app``.

    Replaces FastAPI's default handlers for HTTPException and
    RequestValidationError so that every error body has the same shape.
    """
    settings = settings or default_settings

    async def handle_error(request: Request, exc: Exception) -> JSONResponse:
        body = translate(
            exc,
            request.url.path,
            expose_internal=settings.expose_internal_errors,
            internal_message=settings.internal_error_message,
        )
        if body.status >= 500:
            logger.exception(
                "unhandled_exception",
                status=body.status,
                path=body.path,
                exc_type=type(exc).__name__,
                exc_info=exc,
            )
        else:
            _log_request_error(body)
        return _render(body)

    for exc_class in TRANSLATED_EXCEPTIONS:
        app.add_exception_handler(exc_class, handle_error)

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(request: Request, exc: StarletteHTTPException) -> Response:
        """Keep the framework's status code (404 unknown route, 405, ...) in the standard body."""
        if exc.status_code in BODYLESS_STATUSES:
            return Response(status_code=exc.status_code, headers=_headers(exc.headers))
        body = translate_http_exception(exc, request.url.path)
        _log_request_error(body)
        return _render(body, exc.headers)
