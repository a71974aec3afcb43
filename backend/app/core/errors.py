"""Service-level error taxonomy.

Services raise these inline; ``app.core.error_handlers`` turns them into
JSON responses with the matching status code.
"""
import logging
from contextlib import contextmanager

from sqlalchemy.exc import SQLAlchemyError

logger = logging.getLogger(__name__)


class ServiceError(Exception):
    """Base class for errors that map directly onto an HTTP status."""

    status_code = 500
    code = "service_error"

    def __init__(self, message: str = "Internal server error"):
        super().__init__(message)
        self.message = message


class Unauthenticated(ServiceError):
    """No verified caller identity."""

    status_code = 401
    code = "unauthenticated"

    def __init__(self, message: str = "Unauthorized"):
        super().__init__(message)


class Forbidden(ServiceError):
    """Caller is known but lacks rights over the resource."""

    status_code = 403
    code = "forbidden"

    def __init__(self, message: str = "Forbidden"):
        super().__init__(message)


class NotFound(ServiceError):
    status_code = 404
    code = "not_found"

    def __init__(self, message: str = "Not found"):
        super().__init__(message)


class InvalidInput(ServiceError):
    status_code = 400
    code = "invalid_input"


class DependencyFailure(ServiceError):
    """Storage or blob provider error. The message is safe to show to callers."""

    status_code = 500
    code = "dependency_failure"


@contextmanager
def storage_errors(session, message: str):
    """Roll back and convert document store errors into ``DependencyFailure``."""
    try:
        yield
    except SQLAlchemyError as exc:
        logger.exception(message, extra={"error": str(exc)})
        session.rollback()
        raise DependencyFailure(message) from exc
