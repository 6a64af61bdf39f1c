"""
Error taxonomy shared by the services and the HTTP layer.

Every error a client can act on is an ``HTTPException`` carrying a stable
``error_code`` so that, for example, a 401 (log in again) can be told apart
from a 403 (not allowed) without parsing messages.
"""
from typing import Any, Dict, Optional

from fastapi import HTTPException, status


class AppError(HTTPException):
    status_code: int = status.HTTP_400_BAD_REQUEST
    error_code: str = "BAD_REQUEST"
    default_detail: str = "Bad request"

    def __init__(
        self,
        detail: Optional[str] = None,
        error_code: Optional[str] = None,
        headers: Optional[Dict[str, str]] = None,
        status_code: Optional[int] = None,
    ):
        super().__init__(
            status_code=status_code or self.status_code,
            detail=detail or self.default_detail,
            headers=headers,
        )
        if error_code:
            self.error_code = error_code

    def to_dict(self) -> Dict[str, Any]:
        return {"detail": self.detail, "error": self.error_code}


class AuthenticationError(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    error_code = "INVALID_TOKEN"
    default_detail = "Could not validate credentials"

    def __init__(self, detail: Optional[str] = None, error_code: Optional[str] = None):
        super().__init__(
            detail=detail,
            error_code=error_code,
            headers={"WWW-Authenticate": "Bearer"},
        )


class AuthorizationError(AppError):
    status_code = status.HTTP_403_FORBIDDEN
    error_code = "ACCESS_DENIED"
    default_detail = "Not enough permissions"


class NotFoundError(AppError):
    status_code = status.HTTP_404_NOT_FOUND
    error_code = "NOT_FOUND"
    default_detail = "Resource not found"


class ValidationError(AppError):
    error_code = "VALIDATION_ERROR"
    default_detail = "Validation error"


class InvalidTransitionError(AppError):
    error_code = "INVALID_TRANSITION"
    default_detail = "Invalid status transition"


class ConflictError(AppError):
    error_code = "CONFLICT"
    default_detail = "Resource already exists"


class UpstreamUnavailableError(AppError):
    status_code = status.HTTP_502_BAD_GATEWAY
    error_code = "UPSTREAM_UNAVAILABLE"
    default_detail = "Upstream service unavailable"


# Token errors are raised by the token service and translated by the guard.
class TokenError(Exception):
    pass


class TokenExpired(TokenError):
    pass


class TokenMalformed(TokenError):
    pass


class ConfigurationError(RuntimeError):
    """Fatal misconfiguration detected at startup."""
