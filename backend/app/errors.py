# backend/app/errors.py
from fastapi import status


class AuthServiceError(Exception):
    """Base error translated to a JSON response at the handler boundary"""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Server error"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(AuthServiceError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "All fields are required!"


class ConflictError(AuthServiceError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "User already exists!"


class AuthError(AuthServiceError):
    """Bad credentials. Same message whether the account exists or not."""

    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Invalid email or password"


class InternalError(AuthServiceError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Server error"
