from fastapi import status


class AppError(Exception):
    """
    Base class for errors that map onto an HTTP response.

    Services raise subclasses; `register_exception_handlers` turns them into
    `{"detail": ...}` JSON bodies with the class's status code and headers.
    """

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    detail: str = "An unexpected error occurred while handling the relationship."
    headers: dict[str, str] | None = None

    def __init__(self, detail: str | None = None):
        if detail:
            self.detail = detail
        super().__init__(self.detail)
