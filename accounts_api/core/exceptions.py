"""Application errors and their HTTP mapping."""

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse


class AppError(Exception):
    """Base error carrying an HTTP status and a machine-readable code."""

    def __init__(self, message: str, status_code: int = 500, code: str = "INTERNAL_ERROR"):
        self.message = message
        self.status_code = status_code
        self.code = code
        super().__init__(message)


class ValidationError(AppError):
    """Malformed or disallowed request shape. Raised before any store access."""

    def __init__(self, message: str, key: str | None = None):
        self.key = key
        super().__init__(message, status_code=400, code="VALIDATION_ERROR")


class NotFoundError(AppError):
    def __init__(self, message: str = "nothing was found"):
        super().__init__(message, status_code=404, code="NOT_FOUND")


class UnauthorizedError(AppError):
    def __init__(self, message: str = "authorization needed"):
        super().__init__(message, status_code=401, code="UNAUTHORIZED")


class ForbiddenError(AppError):
    def __init__(self, message: str = "insufficient access level"):
        super().__init__(message, status_code=403, code="FORBIDDEN")


class ConflictError(AppError):
    def __init__(self, message: str):
        super().__init__(message, status_code=409, code="CONFLICT")


def error_body(code: str, message: str) -> dict:
    return {"error": {"code": code, "message": message}}


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(AppError)
    async def _app_error_handler(request: Request, exc: AppError) -> JSONResponse:
        return JSONResponse(status_code=exc.status_code, content=error_body(exc.code, exc.message))
