"""Service-layer error taxonomy. Routes map each error to its HTTP status."""

import logging
from collections.abc import Iterator
from contextlib import contextmanager

from sqlalchemy.exc import SQLAlchemyError


class ServiceError(Exception):
    """Base class: a stable, caller-safe message plus the HTTP status it maps to."""

    status_code = 500

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class ValidationError(ServiceError):
    """Missing or malformed input."""

    status_code = 400


class Unauthorized(ServiceError):
    """Missing, invalid or expired token, or bad credentials."""

    status_code = 401


class Forbidden(ServiceError):
    """Authenticated identity lacks the required role."""

    status_code = 403


class NotFound(ServiceError):
    status_code = 404


class Conflict(ServiceError):
    """Duplicate value for a unique field."""

    status_code = 400


class InternalError(ServiceError):
    """Unexpected store or transport failure; message is generic."""

    status_code = 500


@contextmanager
def database_errors(logger: logging.Logger, message: str) -> Iterator[None]:
    """Map SQLAlchemyError raised inside the block to InternalError(message)."""
    try:
        yield
    except SQLAlchemyError as e:
        logger.exception("Database error: %s", message)
        raise InternalError(message) from e
