"""Domain exceptions raised by services and caught by the exception handlers.

Services raise these to signal business-rule violations.
The translator in translator.py maps each class to a status code and label,
and handlers.py renders the flat ErrorResponse body:
{"timestamp": ..., "status": ..., "path": ..., "error": ..., "message": ...}.
"""


class DomainError(Exception):
    """Base class for all domain exceptions. Rendered as 400 Invalid Data."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class ForbiddenError(DomainError):
    """Raised when the caller may not access or modify a resource."""

    def __init__(self, message: str = "Access denied") -> None:
        super().__init__(message)


class NotFoundError(DomainError):
    """Raised when a requested entity does not exist."""

    def __init__(self, entity: str, identifier: object) -> None:
        self.entity = entity
        self.identifier = identifier
        super().__init__(f"{entity} with id {identifier} not found")


class ConflictError(DomainError):
    """Raised when an operation conflicts with existing state (e.g. duplicate)."""
