"""Error response schema.

Every error leaves the service in the same flat shape:
{"timestamp": "...", "status": 404, "path": "/...", "error": "Not Found", "message": "..."}.
The exception handlers in handlers.py build these through translator.py.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, field_serializer


class ErrorResponse(BaseModel):
    """Uniform error payload. Built once per failed request and never mutated."""

    model_config = ConfigDict(frozen=True)

    timestamp: datetime
    status: int
    path: str
    error: str
    message: str

    @field_serializer("timestamp", when_used="json")
    def _serialize_timestamp(self, value: datetime) -> str:
        # 2024-04-07T11:38:56.368+00:00
        return value.isoformat(timespec="milliseconds")
