"""
Custom exceptions for DealScout.
Provides consistent error handling across services, API and CLI.
"""
from fastapi import Request, status
from fastapi.responses import JSONResponse


class DealScoutException(Exception):
    """Base exception for DealScout"""
    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str = "An error occurred"):
        self.message = message
        super().__init__(self.message)


class NotFoundError(DealScoutException):
    """Resource not found"""
    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, resource: str = "Resource", resource_id: str = None):
        message = f"{resource} not found"
        if resource_id:
            message = f"{resource} with id '{resource_id}' not found"
        super().__init__(message)


class ValidationError(DealScoutException):
    """Validation failed"""
    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY

    def __init__(self, message: str = "Validation failed", field: str = None):
        if field:
            message = f"Validation failed for field '{field}': {message}"
        super().__init__(message)


class NoActivePersonaError(DealScoutException):
    """No persona is active"""
    status_code = status.HTTP_409_CONFLICT

    def __init__(self, message: str = "No persona loaded. Activate a persona first."):
        super().__init__(message)


class ConfigurationError(DealScoutException):
    """Deployment settings the service cannot work with"""
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR


async def dealscout_exception_handler(request: Request, exc: DealScoutException) -> JSONResponse:
    """Translate domain exceptions into HTTP error responses."""
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})
