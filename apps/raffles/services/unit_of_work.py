"""
Scoped transaction for bookkeeping operations.

Every mutating operation, undo included, runs inside exactly one unit of
work. The entity write and its history write commit together or not at
all; database failures surface as StorageError with the original error
chained.
"""

import logging
from contextlib import contextmanager

from django.db import DatabaseError, transaction

from apps.raffles.exceptions import StorageError

logger = logging.getLogger(__name__)


@contextmanager
def unit_of_work(operation: str):
    """
    Run the enclosed block atomically.

    Args:
        operation: Operation name, used in log messages

    Raises:
        StorageError: If the database rejects any statement or the commit
    """
    try:
        with transaction.atomic():
            yield
    except DatabaseError as exc:
        logger.error("Storage failure during %s", operation, exc_info=True)
        raise StorageError() from exc
