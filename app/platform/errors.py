"""
Error taxonomy shared by the scan and fix features.

Every error that can reach an HTTP caller subclasses ``AppError`` and carries
the status code the exception handlers render it with.
"""
from typing import Any, Dict, Optional

from fastapi import status


class AppError(Exception):
    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message: str = "Internal server error"

    def __init__(self, message: Optional[str] = None, *, details: Optional[Dict[str, Any]] = None):
        self.message = message or self.default_message
        self.details = details or {}
        super().__init__(self.message)


class InvalidInput(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid input"


class NavigationTimeout(AppError):
    status_code = status.HTTP_504_GATEWAY_TIMEOUT
    default_message = "Page took too long to load"


class NavigationError(AppError):
    status_code = status.HTTP_502_BAD_GATEWAY
    default_message = "Page could not be loaded"


class EngineFailure(AppError):
    status_code = status.HTTP_502_BAD_GATEWAY
    default_message = "Accessibility engine failed"


class ScanFailed(AppError):
    default_message = "Scan failed"


class ScanDeadlineExceeded(AppError):
    status_code = status.HTTP_504_GATEWAY_TIMEOUT
    default_message = "Scan exceeded the request deadline"


class ScanNotFound(AppError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Scan not found"


class AccessDenied(AppError):
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Access denied"


class FixSuggestionFailed(AppError):
    default_message = "Failed to generate fix suggestion."
