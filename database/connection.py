"""
Database connection utilities
"""

import logging
from contextlib import contextmanager
from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.exc import DBAPIError, IntegrityError, TimeoutError as PoolTimeoutError
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from objections.errors import StorageUnavailable

logger = logging.getLogger(__name__)

# Failures that mean the database could not serve the request.
# IntegrityError is excluded: callers map constraint violations themselves.
_UNAVAILABLE_ERRORS = (DBAPIError, PoolTimeoutError)


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def create_db_engine(database_url: str, echo: bool = False) -> Engine:
    """
    Build an engine for the given URL.

    PostgreSQL (production) gets a sized connection pool; SQLite (local runs
    and tests) gets thread-shareable connections, and a single static
    connection when the database lives in memory.
    """
    url = make_url(database_url)

    if url.get_backend_name() == "sqlite":
        options = {"connect_args": {"check_same_thread": False, "timeout": 30}}
        if url.database in (None, "", ":memory:"):
            options["poolclass"] = StaticPool
        engine = create_engine(url, echo=echo, **options)
        event.listen(engine, "connect", _enable_sqlite_foreign_keys)
        return engine

    return create_engine(
        url,
        echo=echo,
        pool_pre_ping=True,  # Test connections before using them
        pool_recycle=3600,   # Recycle connections after 1 hour
        pool_size=5,         # Connection pool size
        max_overflow=10      # Max overflow connections
    )


class Storage:
    """
    Storage collaborator shared by the core components.

    Owns the engine and session factory; every core operation runs inside
    one session() unit of work.
    """

    def __init__(self, database_url: str, echo: bool = False):
        self.database_url = database_url
        self.engine = create_db_engine(database_url, echo=echo)
        self.session_factory = sessionmaker(bind=self.engine, expire_on_commit=False)

    @contextmanager
    def session(self):
        """Get database session with automatic commit/rollback."""
        db: Session = self.session_factory()
        try:
            yield db
            db.commit()
        except IntegrityError:
            db.rollback()
            raise
        except _UNAVAILABLE_ERRORS as e:
            db.rollback()
            logger.error(f"Database unavailable: {e}", exc_info=True)
            raise StorageUnavailable("Database unavailable, retry later") from e
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()

    def ping(self) -> bool:
        """Run SELECT 1; False if the database cannot be reached."""
        try:
            with self.engine.connect() as conn:
                conn.execute(text("SELECT 1"))
            return True
        except DBAPIError as e:
            logger.error(f"Database ping failed: {e}")
            return False

    def dispose(self) -> None:
        self.engine.dispose()
