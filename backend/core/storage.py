"""
Storage failure translation.

Statement and lock timeouts are configured on the connection (see
DATABASES in core.settings). When one fires, or the database reports a
deadlock or lost connection, the enclosing transaction.atomic() rolls back and
the OperationalError is surfaced to callers as a retryable StorageError.
"""

import functools
import logging
from contextlib import contextmanager

from django.db import InterfaceError, OperationalError

from core.exceptions import StorageError

logger = logging.getLogger(__name__)


@contextmanager
def storage_guard(operation):
    """Translate database availability errors raised inside the block."""
    try:
        yield
    except (OperationalError, InterfaceError) as exc:
        logger.warning(
            "storage_failure",
            extra={"operation": operation, "error": str(exc)},
        )
        raise StorageError(
            "The operation could not be completed. Please try again.",
            {"operation": operation},
        ) from exc


def guarded(operation):
    """Decorator form of storage_guard."""

    def decorator(func):
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            with storage_guard(operation):
                return func(*args, **kwargs)

        return wrapper

    return decorator
