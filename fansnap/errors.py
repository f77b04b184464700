from typing import Optional


class PlatformError(Exception):
    code = "platform_error"

    def __init__(self, message: str, details: Optional[dict] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> dict:
        return {"error": self.code, "message": self.message, "details": self.details}


class NotFoundError(PlatformError):
    code = "not_found"


class ConflictError(PlatformError):
    code = "conflict"


class InvalidInputError(PlatformError):
    code = "invalid_input"


class UnauthenticatedError(PlatformError):
    code = "unauthenticated"


class ForbiddenError(PlatformError):
    """Raised by the authorization gate, never by the ledgers themselves."""
    code = "forbidden"
