"""Error kinds raised by the application services.

Each error carries the HTTP status the boundary should answer with and a
human-readable message that is safe to show to clients.
"""

from __future__ import annotations

from typing import Optional


class ApiError(Exception):
    status_code = 500
    default_message = "Something went wrong"

    def __init__(self, message: Optional[str] = None, status_code: Optional[int] = None) -> None:
        self.message = message or self.default_message
        if status_code is not None:
            self.status_code = status_code
        super().__init__(self.message)

    def __repr__(self) -> str:
        return f"<{type(self).__name__} status={self.status_code} message={self.message!r}>"


class ValidationError(ApiError):
    status_code = 400
    default_message = "Invalid request"


class AuthError(ApiError):
    status_code = 401
    default_message = "Unauthorized request"


class NotFoundError(ApiError):
    status_code = 404
    default_message = "Resource not found"


class ConflictError(ApiError):
    status_code = 409
    default_message = "Resource already exists"


class UploadError(ApiError):
    status_code = 500
    default_message = "Media upload failed"


class InternalError(ApiError):
    status_code = 500
    default_message = "Internal server error"


class InvalidTokenError(Exception):
    """Raised by the token issuer when a token is expired, tampered or malformed."""
