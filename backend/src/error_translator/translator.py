"""Exception classification and message extraction.

Pure functions with no framework I/O: given an exception and the request
path, decide which of the five buckets it belongs to and build the
ErrorResponse. handlers.py wires these into FastAPI.

    bucket       status  error label
    validation   400     Invalid Parameter / Invalid Payload / Invalid Data
    forbidden    403     Forbidden
    not_found    404     Not Found
    conflict     409     Conflict
    internal     500     Internal Server Error
"""

import re
from collections.abc import Mapping
from datetime import UTC, datetime
from enum import StrEnum
from http import HTTPStatus
from typing import Any

from fastapi.exceptions import RequestValidationError
from pydantic import ValidationError
from starlette.exceptions import HTTPException

from error_translator.exceptions import ConflictError, DomainError, ForbiddenError, NotFoundError
from error_translator.schemas.error import ErrorResponse

DEFAULT_INTERNAL_MESSAGE = "Internal server error"

# Request locations FastAPI reports as the first element of an error's ``loc``.
PARAMETER_LOCATIONS = frozenset({"query", "path", "header", "cookie"})
BODY_LOCATION = "body"

LABEL_INVALID_PARAMETER = "Invalid Parameter"
LABEL_INVALID_PAYLOAD = "Invalid Payload"
LABEL_INVALID_DATA = "Invalid Data"

_REASON_PREFIXES = ("Value error, ", "Assertion failed, ")
_ERRNO_PREFIX = re.compile(r"^\[Errno \d+\]\s*")
_FIELD_VALIDATION_ERRORS = (RequestValidationError, ValidationError)


class ErrorCategory(StrEnum):
    VALIDATION = "validation"
    FORBIDDEN = "forbidden"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    INTERNAL = "internal"


CATEGORY_STATUS: dict[ErrorCategory, HTTPStatus] = {
    ErrorCategory.VALIDATION: HTTPStatus.BAD_REQUEST,
    ErrorCategory.FORBIDDEN: HTTPStatus.FORBIDDEN,
    ErrorCategory.NOT_FOUND: HTTPStatus.NOT_FOUND,
    ErrorCategory.CONFLICT: HTTPStatus.CONFLICT,
    ErrorCategory.INTERNAL: HTTPStatus.INTERNAL_SERVER_ERROR,
}

# Used when nothing readable can be pulled out of the exception.
DEFAULT_MESSAGES: dict[ErrorCategory, str] = {
    ErrorCategory.VALIDATION: "Invalid request data",
    ErrorCategory.FORBIDDEN: "Access denied",
    ErrorCategory.NOT_FOUND: "Resource not found",
    ErrorCategory.CONFLICT: "Resource already exists",
    ErrorCategory.INTERNAL: DEFAULT_INTERNAL_MESSAGE,
}

# Checked in order: subclasses of DomainError must come before DomainError itself.
_CLASSIFICATION: tuple[tuple[tuple[type[BaseException], ...], ErrorCategory], ...] = (
    (_FIELD_VALIDATION_ERRORS, ErrorCategory.VALIDATION),
    ((ForbiddenError, PermissionError), ErrorCategory.FORBIDDEN),
    ((NotFoundError,), ErrorCategory.NOT_FOUND),
    ((ConflictError,), ErrorCategory.CONFLICT),
    ((DomainError,), ErrorCategory.VALIDATION),
)


def classify(exc: BaseException) -> ErrorCategory:
    """Return the bucket for an exception. Anything unrecognised is internal."""
    for types, category in _CLASSIFICATION:
        if isinstance(exc, types):
            return category
    return ErrorCategory.INTERNAL


def error_label(exc: BaseException, category: ErrorCategory) -> str:
    """Short label for the ``error`` field.

    Validation errors are labelled by where the first failing field lives;
    every other bucket uses the HTTP reason phrase.
    """
    if category is not ErrorCategory.VALIDATION:
        return CATEGORY_STATUS[category].phrase

    error = _first_error(exc)
    if error is not None:
        location, _ = _split_loc(exc, error)
        if location in PARAMETER_LOCATIONS:
            return LABEL_INVALID_PARAMETER
        if location == BODY_LOCATION:
            return LABEL_INVALID_PAYLOAD
    return LABEL_INVALID_DATA


def extract_message(
    exc: BaseException,
    category: ErrorCategory,
    *,
    expose_internal: bool = False,
    internal_message: str = DEFAULT_INTERNAL_MESSAGE,
) -> str:
    """Human-readable ``message`` for the response. Never raises.

    Falls back to the bucket's default message when the exception carries
    nothing usable.
    """
    if category is ErrorCategory.INTERNAL:
        text = _first_line(str(exc)) if expose_internal else ""
        return text or internal_message or DEFAULT_MESSAGES[category]

    if isinstance(exc, _FIELD_VALIDATION_ERRORS):
        error = _first_error(exc)
        message = _field_error_message(exc, error) if error is not None else ""
    elif isinstance(exc, DomainError):
        message = exc.message.strip() if isinstance(exc.message, str) else ""
    elif isinstance(exc, PermissionError):
        message = _permission_message(exc)
    else:
        message = _first_line(str(exc))
    return message or DEFAULT_MESSAGES[category]


def translate(
    exc: BaseException,
    path: str,
    *,
    now: datetime | None = None,
    expose_internal: bool = False,
    internal_message: str = DEFAULT_INTERNAL_MESSAGE,
) -> ErrorResponse:
    """Build the ErrorResponse for an exception raised while serving ``path``."""
    category = classify(exc)
    return ErrorResponse(
        timestamp=now or datetime.now(UTC),
        status=CATEGORY_STATUS[category].value,
        path=path,
        error=error_label(exc, category),
        message=extract_message(
            exc,
            category,
            expose_internal=expose_internal,
            internal_message=internal_message,
        ),
    )


def translate_http_exception(
    exc: HTTPException,
    path: str,
    *,
    now: datetime | None = None,
) -> ErrorResponse:
    """Build the ErrorResponse for a framework HTTPException, keeping its status code."""
    try:
        phrase = HTTPStatus(exc.status_code).phrase
    except ValueError:
        phrase = "Error"
    detail = exc.detail.strip() if isinstance(exc.detail, str) else ""
    return ErrorResponse(
        timestamp=now or datetime.now(UTC),
        status=exc.status_code,
        path=path,
        error=phrase,
        message=detail or phrase,
    )


def _first_error(exc: BaseException) -> Mapping[str, Any] | None:
    if not isinstance(exc, _FIELD_VALIDATION_ERRORS):
        return None
    errors = exc.errors()
    if not errors or not isinstance(errors[0], Mapping):
        return None
    return errors[0]


def _split_loc(exc: BaseException, error: Mapping[str, Any]) -> tuple[str | None, list[str]]:
    """Split an error's ``loc`` into (request location, field path).

    Only RequestValidationError prefixes ``loc`` with a location; errors from
    models validated in application code start straight at the field.
    """
    loc = error.get("loc")
    if not isinstance(loc, (list, tuple)):
        return None, []
    parts = [str(part) for part in loc]
    if isinstance(exc, RequestValidationError) and parts:
        return parts[0], parts[1:]
    return None, parts


def _field_error_message(exc: BaseException, error: Mapping[str, Any]) -> str:
    location, field = _split_loc(exc, error)
    error_type = error.get("type")
    if error_type == "missing" and location in PARAMETER_LOCATIONS and field:
        return f"Required {location} parameter '{'.'.join(field)}' is not present"

    # json_invalid reports the character offset as the field; it means nothing to clients.
    name = "" if error_type == "json_invalid" else ".".join(field)
    reason = _clean_reason(error.get("msg"))
    if not reason:
        return ""
    return f"{name}: {reason}" if name else reason


def _clean_reason(raw: object) -> str:
    if not isinstance(raw, str):
        return ""
    reason = raw.strip()
    for prefix in _REASON_PREFIXES:
        if reason.startswith(prefix):
            return reason.removeprefix(prefix).strip()
    return reason


def _permission_message(exc: PermissionError) -> str:
    if exc.strerror:
        return f"{exc.strerror}: {exc.filename}" if exc.filename else exc.strerror
    return _ERRNO_PREFIX.sub("", _first_line(str(exc)))


def _first_line(text: str) -> str:
    lines = text.strip().splitlines()
    return lines[0].strip() if lines else ""
