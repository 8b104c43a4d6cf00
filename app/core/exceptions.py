"""
Domain errors raised by the service layer.
The HTTP layer maps each one to a status code in app/main.py.
"""
from fastapi import status


class RentEaseError(Exception):
    """Base class for every error a lifecycle operation may raise."""

    status_code: int = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class UnauthorizedError(RentEaseError):
    status_code = status.HTTP_401_UNAUTHORIZED


class ForbiddenError(RentEaseError):
    status_code = status.HTTP_403_FORBIDDEN


class NotFoundError(RentEaseError):
    status_code = status.HTTP_404_NOT_FOUND


class ValidationFailedError(RentEaseError):
    status_code = status.HTTP_400_BAD_REQUEST


class ConflictError(RentEaseError):
    """A state-machine guard was violated."""

    status_code = status.HTTP_409_CONFLICT
