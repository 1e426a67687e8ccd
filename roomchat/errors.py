"""Error taxonomy and its translation to HTTP responses."""
import logging
from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

logger = logging.getLogger(__name__)


class ChatServiceError(Exception):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    detail = "Internal server error"

    def __init__(self, detail: Optional[str] = None):
        if detail is not None:
            self.detail = detail
        super().__init__(self.detail)


class ValidationError(ChatServiceError):
    status_code = status.HTTP_400_BAD_REQUEST
    detail = "Invalid request"


class WrongPasswordError(ValidationError):
    detail = "Password does not match"


class SamePasswordError(ValidationError):
    detail = "New password must differ from the old one"


class NotFoundError(ChatServiceError):
    status_code = status.HTTP_400_BAD_REQUEST
    detail = "Not found"


class UserNotFoundError(NotFoundError):
    detail = "User not found"


class TokenNotFoundError(NotFoundError):
    detail = "Token not found"


class NotMemberError(NotFoundError):
    detail = "User is not a member of this room"


class ConflictError(ChatServiceError):
    status_code = status.HTTP_400_BAD_REQUEST
    detail = "Conflict"


class UsernameTakenError(ConflictError):
    detail = "Username already taken"


class AuthError(ChatServiceError):
    status_code = status.HTTP_401_UNAUTHORIZED
    detail = "Not authorized"


class MalformedTokenError(AuthError):
    detail = "Malformed token"


class UnauthorizedError(AuthError):
    detail = "Invalid or expired token"


class RoomAccessDeniedError(AuthError):
    detail = "Not a member of this room"


class StorageError(ChatServiceError):
    pass


class TokenIssueError(StorageError):
    pass


def to_response(exc: ChatServiceError) -> JSONResponse:
    headers = None
    if isinstance(exc, AuthError):
        headers = {"WWW-Authenticate": "Bearer"}
    detail = exc.detail
    if isinstance(exc, StorageError):
        detail = StorageError.detail
    return JSONResponse(status_code=exc.status_code, content={"detail": detail}, headers=headers)


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(ChatServiceError)
    async def chat_service_error_handler(request: Request, exc: ChatServiceError):
        if isinstance(exc, StorageError):
            logger.error("Storage failure on %s %s: %s", request.method, request.url.path, exc)
        return to_response(exc)

    @app.exception_handler(RequestValidationError)
    async def request_validation_error_handler(request: Request, exc: RequestValidationError):
        errors = [
            {"loc": list(error.get("loc", ())), "msg": error.get("msg", "")}
            for error in exc.errors()
        ]
        return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"detail": errors})

    @app.exception_handler(SQLAlchemyError)
    async def storage_error_handler(request: Request, exc: SQLAlchemyError):
        logger.exception("Database error on %s %s", request.method, request.url.path, exc_info=exc)
        return to_response(StorageError())
