from typing import List, Optional

from fastapi import status


class EcoFindsError(Exception):
    """Base class for errors that map onto an HTTP response."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str, details: Optional[List[str]] = None):
        super().__init__(message)
        self.message = message
        self.details = details


class ValidationError(EcoFindsError):
    status_code = status.HTTP_400_BAD_REQUEST


class AuthenticationError(EcoFindsError):
    status_code = status.HTTP_401_UNAUTHORIZED


class PermissionDenied(EcoFindsError):
    status_code = status.HTTP_403_FORBIDDEN


class NotFound(EcoFindsError):
    status_code = status.HTTP_404_NOT_FOUND


class DomainError(EcoFindsError):
    """Business rule violation: duplicate email, empty cart, unavailable product."""

    status_code = status.HTTP_400_BAD_REQUEST
