"""
Schema bootstrap: wait for the database, then create tables and indexes
"""

import logging
import time
from typing import Callable

from database.connection import Storage
from database.models import Base
from objections.errors import StorageUnavailable

logger = logging.getLogger(__name__)


def wait_for_database(storage: Storage, retries: int = 5, delay: float = 5.0,
                      sleep: Callable[[float], None] = time.sleep) -> None:
    """
    Ping the database until it answers.

    Args:
        storage: Storage to ping
        retries: Number of attempts before giving up
        delay: Seconds between attempts
        sleep: Sleep function (injectable for tests)

    Raises:
        StorageUnavailable: If every attempt fails
    """
    for attempt in range(1, retries + 1):
        if storage.ping():
            logger.info("Connected to database")
            return
        remaining = retries - attempt
        logger.error(f"Database connection failed ({remaining} retries left)")
        if remaining:
            sleep(delay)
    raise StorageUnavailable(f"Database not reachable after {retries} attempts")


def create_schema(storage: Storage) -> None:
    """Create all tables and indexes that do not exist yet."""
    Base.metadata.create_all(bind=storage.engine)
    logger.info("Schema ready: " + ", ".join(sorted(Base.metadata.tables)))


def init_database(storage: Storage, retries: int = 5, delay: float = 5.0) -> None:
    """Wait for the database and bootstrap the schema."""
    wait_for_database(storage, retries=retries, delay=delay)
    create_schema(storage)
