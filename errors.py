"""
Error types returned by the API.

Each error is an HTTPException carrying a human readable message. The app
renders every one of them as ``{"message": ...}``.
"""

from contextlib import contextmanager
from typing import Iterator, Optional

from bson.errors import BSONError
from fastapi import HTTPException
from loguru import logger
from pymongo.errors import PyMongoError


class MissingField(HTTPException):
    def __init__(self, detail: str = "All fields are required"):
        super().__init__(status_code=400, detail=detail)


class InvalidField(HTTPException):
    """A field is present but its value is not accepted."""

    def __init__(self, detail: str = "Invalid field value"):
        super().__init__(status_code=400, detail=detail)


class Conflict(HTTPException):
    def __init__(self, detail: str = "User already exists"):
        super().__init__(status_code=400, detail=detail)


class InvalidCredentials(HTTPException):
    def __init__(self, detail: str = "Invalid credentials"):
        super().__init__(status_code=400, detail=detail)


class Unauthorized(HTTPException):
    """Missing, malformed or expired bearer credential."""

    def __init__(self, detail: str = "Unauthorized access"):
        super().__init__(status_code=401, detail=detail, headers={"WWW-Authenticate": "Bearer"})


class Forbidden(HTTPException):
    def __init__(self, detail: str = "Forbidden access"):
        super().__init__(status_code=403, detail=detail)


class NotFound(HTTPException):
    def __init__(self, detail: str = "Not found", status_code: int = 404):
        super().__init__(status_code=status_code, detail=detail)


class InternalStoreError(HTTPException):
    def __init__(self, detail: str = "Internal Server Error"):
        super().__init__(status_code=500, detail=detail)


@contextmanager
def store_errors(action: str, detail: Optional[str] = None) -> Iterator[None]:
    """Log any driver failure inside the block and re-raise it as a 500."""
    try:
        yield
    except (PyMongoError, BSONError) as e:
        logger.error("Error {}: {}", action, e)
        raise InternalStoreError(detail or "Internal Server Error") from e
