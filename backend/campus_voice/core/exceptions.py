from fastapi import HTTPException, status


class AppError(HTTPException):
    """Base class for errors raised by services; FastAPI renders them as ``{"detail": ...}``."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, detail: str, headers: dict[str, str] | None = None):
        super().__init__(status_code=self.status_code, detail=detail, headers=headers)


class BadRequestError(AppError):
    status_code = status.HTTP_400_BAD_REQUEST


class FileTypeError(BadRequestError):
    pass


class FileTooLargeError(BadRequestError):
    pass


class UnauthorizedError(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED

    def __init__(self, detail: str):
        super().__init__(detail, headers={"WWW-Authenticate": "Bearer"})


class ForbiddenError(AppError):
    status_code = status.HTTP_403_FORBIDDEN


class NotFoundError(AppError):
    status_code = status.HTTP_404_NOT_FOUND
