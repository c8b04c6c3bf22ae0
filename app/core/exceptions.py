"""Error taxonomy shared by services and endpoints.

Every failure that reaches a client is rendered as ``{"error": ..., "details"?: ...}``
by the handlers registered in ``app.main``.
"""
from fastapi import status


class AppError(Exception):
    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str, details: str | None = None):
        self.message = message
        self.details = details
        super().__init__(message)

    def to_dict(self) -> dict:
        body = {"error": self.message}
        if self.details:
            body["details"] = self.details
        return body


class ValidationError(AppError):
    """Missing or malformed required fields."""
    status_code = status.HTTP_400_BAD_REQUEST


class AuthenticationError(AppError):
    """No session, or the session token is invalid/expired."""
    status_code = status.HTTP_401_UNAUTHORIZED

    def __init__(self, message: str = "Unauthorized", details: str | None = None):
        super().__init__(message, details)


class AuthorizationError(AppError):
    """Valid session, but the caller has no rights over the resource."""
    status_code = status.HTTP_403_FORBIDDEN


class NotFoundError(AppError):
    status_code = status.HTTP_404_NOT_FOUND


class ConflictError(AppError):
    """Duplicate like/membership or a membership guard refusing the change."""
    status_code = status.HTTP_400_BAD_REQUEST


class UpstreamError(AppError):
    """Backend or third-party call failure. Message shown to clients stays generic."""
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
