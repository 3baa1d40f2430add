import logging
from contextlib import contextmanager

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.responses import JSONResponse


logger = logging.getLogger(__name__)


class FriendshipError(Exception):
    """Business rule violation. Rendered as ``{"detail": message}``."""

    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class InvalidIdError(FriendshipError):

    status_code = status.HTTP_400_BAD_REQUEST


class NotFoundError(FriendshipError):

    status_code = status.HTTP_404_NOT_FOUND


class AuthError(FriendshipError):

    status_code = status.HTTP_401_UNAUTHORIZED


class OperationError(Exception):
    """Unexpected failure inside an endpoint; always a 500 with a fixed message."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


@contextmanager
def operation_errors(message: str):
    """Turn anything that is not a business error into ``OperationError(message)``."""
    try:
        yield
    except (FriendshipError, HTTPException):
        raise
    except Exception as exc:
        raise OperationError(message) from exc


async def friendship_error_handler(request: Request, exc: FriendshipError) -> JSONResponse:
    headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, AuthError) else None
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message}, headers=headers)


async def operation_error_handler(request: Request, exc: OperationError) -> JSONResponse:
    cause = exc.__cause__
    logger.error(
        "%s on %s (500): %s",
        type(cause).__name__ if cause else type(exc).__name__,
        request.url.path,
        cause or exc,
        exc_info=(type(cause), cause, cause.__traceback__) if cause else None,
    )
    return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content={"detail": exc.message})


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(FriendshipError, friendship_error_handler)
    app.add_exception_handler(OperationError, operation_error_handler)
