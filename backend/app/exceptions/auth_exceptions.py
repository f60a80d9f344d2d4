from fastapi import status

from .base import AppError


class InvalidCredentialsError(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    headers = {"WWW-Authenticate": "Bearer"}

    def __init__(self):
        detail = "Could not validate credentials."
        super().__init__(detail)
