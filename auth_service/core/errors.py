"""
core/errors.py
--------------
Service exception taxonomy.

Services raise these; the handlers registered in main.create_application
turn them into HTTP responses with a uniform JSON body:

    {"errors": [{"type": "...", "msg": "...", "path": "", "location": ""}]}

500-class errors never expose their message to the client.
"""

from typing import Any, Dict, List, Optional

from fastapi import status


class ServiceError(Exception):
    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message: str = "Internal server error"

    def __init__(self, message: Optional[str] = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)

    @property
    def is_internal(self) -> bool:
        return self.status_code >= status.HTTP_500_INTERNAL_SERVER_ERROR

    def to_errors(self) -> List[Dict[str, Any]]:
        msg = ServiceError.default_message if self.is_internal else self.message
        return [{"type": type(self).__name__, "msg": msg, "path": "", "location": ""}]


class ValidationError(ServiceError):
    """Malformed input. Carries every violation found, not just the first."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid request"

    def __init__(
        self,
        message: Optional[str] = None,
        violations: Optional[List[Dict[str, Any]]] = None,
    ) -> None:
        super().__init__(message)
        self.violations = violations or []

    def to_errors(self) -> List[Dict[str, Any]]:
        if self.violations:
            return self.violations
        return super().to_errors()


class ConflictError(ServiceError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Resource already exists"


class AuthenticationError(ServiceError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Could not validate credentials"


class AuthorizationError(ServiceError):
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "You don't have enough permissions"


class NotFoundError(ServiceError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Resource not found"


class ConfigurationError(ServiceError):
    default_message = "Service is misconfigured"


class InternalError(ServiceError):
    pass


class InvalidTokenError(Exception):
    """Raised by the token layer on bad signature, expiry or malformed claims."""
