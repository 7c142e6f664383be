"""Error hierarchy for the chat room.

Every error carries a code and the HTTP status it maps to. Domain errors are
raised before any store mutation; StoreError wraps database failures.
"""

from typing import Any


class ChatError(Exception):
    """Base exception for all chat room errors."""

    def __init__(self, message: str, code: str, http_status: int = 500):
        super().__init__(message)
        self.message = message
        self.code = code
        self.http_status = http_status

    def to_response(self) -> dict:
        return {"error": {"code": self.code, "message": self.message}}


class ValidationError(ChatError):
    """Malformed or missing input."""

    def __init__(self, message: str, details: list[dict[str, Any]] | None = None):
        super().__init__(message, "VALIDATION_ERROR", 422)
        self.details = details or []

    def to_response(self) -> dict:
        response = super().to_response()
        if self.details:
            response["error"]["details"] = self.details
        return response


class ConflictError(ChatError):
    """A participant with the same name is already in the room."""

    def __init__(self, name: str):
        super().__init__(f"Participant '{name}' is already in the room", "CONFLICT", 409)
        self.name = name


class NotFoundError(ChatError):
    def __init__(self, resource_type: str, resource_id: str | None):
        super().__init__(
            f"{resource_type} '{resource_id}' not found", "RESOURCE_NOT_FOUND", 404,
        )
        self.resource_type = resource_type
        self.resource_id = resource_id


class StoreError(ChatError):
    """Database operation failed."""

    def __init__(self, operation: str, message: str):
        super().__init__(f"Store {operation} failed: {message}", "STORE_ERROR", 500)
        self.operation = operation
