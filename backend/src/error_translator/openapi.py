"""Documented error responses for the OpenAPI schema.

Pass the result of error_responses() as ``responses=`` to FastAPI, an
APIRouter or a single route so /docs shows the ErrorResponse model with a
realistic example for each status.
"""

from typing import Any

from error_translator.schemas.error import ErrorResponse

ERROR_EXAMPLES: dict[int, dict[str, Any]] = {
    400: {
        "description": "Bad request",
        "summary": "Handle exception when data is invalid (body, query or path parameters)",
        "example": {
            "timestamp": "2024-04-07T11:38:56.368+00:00",
            "status": 400,
            "path": "/api/v1/...",
            "error": "Invalid Payload",
            "message": "{data} must be not blank",
        },
    },
    403: {
        "description": "Access denied",
        "summary": "Handle exception when access is forbidden",
        "example": {
            "timestamp": "2023-10-19T06:07:35.321+00:00",
            "status": 403,
            "path": "/api/v1/...",
            "error": "Forbidden",
            "message": "Access denied",
        },
    },
    404: {
        "description": "Not found",
        "summary": "Handle exception when resource not found",
        "example": {
            "timestamp": "2023-10-19T06:07:35.321+00:00",
            "status": 404,
            "path": "/api/v1/...",
            "error": "Not Found",
            "message": "{data} not found",
        },
    },
    409: {
        "description": "Conflict",
        "summary": "Handle exception when input data is conflicted",
        "example": {
            "timestamp": "2023-10-19T06:07:35.321+00:00",
            "status": 409,
            "path": "/api/v1/...",
            "error": "Conflict",
            "message": "{data} exists, Please try again!",
        },
    },
    500: {
        "description": "Internal Server Error",
        "summary": "Handle exception when internal server error",
        "example": {
            "timestamp": "2023-10-19T06:35:52.333+00:00",
            "status": 500,
            "path": "/api/v1/...",
            "error": "Internal Server Error",
            "message": "Internal server error",
        },
    },
}


def error_responses(*status_codes: int) -> dict[int | str, dict[str, Any]]:
    """Build a FastAPI ``responses`` mapping for the given status codes.

    With no arguments every documented status is included. Unknown codes
    raise KeyError so a typo fails at import time rather than in /docs.
    """
    codes = status_codes or tuple(ERROR_EXAMPLES)
    responses: dict[int | str, dict[str, Any]] = {}
    for code in codes:
        example = ERROR_EXAMPLES[code]
        responses[code] = {
            "model": ErrorResponse,
            "description": example["description"],
            "content": {
                "application/json": {
                    "examples": {
                        f"{code} Response": {
                            "summary": example["summary"],
                            "value": example["example"],
                        },
                    },
                },
            },
        }
    return responses
