"""Engine and session handling for the debounce scratch database.

The scratch database is shared by two writers: the lightweight capture
trigger, which only records a pending flag, and the app process that
consumes it. File databases are therefore opened in WAL mode with a busy
timeout so a trigger never fails on a lock held by the reader.
"""

import logging
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Iterator, Optional

from sqlalchemy import create_engine, event
from sqlalchemy.engine import make_url
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool

from ..config import Config
from ..models import Base
from ..exceptions import StoreIOError

__all__ = ["DatabaseManager"]

logger = logging.getLogger(__name__)

BUSY_TIMEOUT_MS = 5000


class DatabaseManager:
    """Owns the scratch engine and hands out transactional sessions.

    Attributes:
        database_url: SQLAlchemy database URL of the scratch store
        in_memory: Whether the URL names a private in-memory database
    """

    def __init__(self, database_url: str = Config.DATABASE_URL) -> None:
        self.database_url: str = database_url
        url = make_url(database_url)
        self._sqlite: bool = url.get_backend_name() == "sqlite"
        self._database: Optional[str] = url.database if self._sqlite else None
        self.in_memory: bool = self._sqlite and self._database in (None, "", ":memory:")
        self._engine: Optional[Any] = None
        self._session_factory: Optional[Any] = None

    @property
    def engine(self) -> Any:
        """Create the engine and the scratch table on first use.

        Raises:
            StoreIOError: If the database cannot be opened or initialized
        """
        if self._engine is None:
            try:
                self._engine = self._create_engine()
                Base.metadata.create_all(self._engine)
            except Exception as e:
                self._engine = None
                raise StoreIOError(f"Scratch database initialization error: {str(e)}") from e
            logger.debug("Opened scratch database %s", self.database_url)
        return self._engine

    def create_session(self) -> Session:
        if self._session_factory is None:
            self._session_factory = sessionmaker(bind=self.engine, expire_on_commit=False)
        return self._session_factory()

    @contextmanager
    def transaction(self, action: str) -> Iterator[Session]:
        """Yield a session that commits on success and rolls back on error.

        Args:
            action: Short label used in the error message, e.g. ``"read"``

        Raises:
            StoreIOError: If any database operation inside the block fails
        """
        session = self.create_session()
        try:
            yield session
            session.commit()
        except SQLAlchemyError as e:
            session.rollback()
            raise StoreIOError(f"Scratch {action} error: {str(e)}") from e
        finally:
            session.close()

    def dispose(self) -> None:
        """Release pooled connections held by the engine."""
        if self._engine is not None:
            self._engine.dispose()
            self._engine = None
            self._session_factory = None

    def _create_engine(self) -> Any:
        if self.in_memory:
            # One shared connection, or every session would see an empty database.
            return create_engine(
                self.database_url,
                connect_args={"check_same_thread": False},
                poolclass=StaticPool,
                echo=False
            )

        if not self._sqlite:
            return create_engine(self.database_url, pool_pre_ping=True, echo=False)

        Path(self._database).expanduser().parent.mkdir(parents=True, exist_ok=True)
        engine = create_engine(
            self.database_url,
            connect_args={"check_same_thread": False, "timeout": BUSY_TIMEOUT_MS / 1000},
            echo=False
        )
        event.listen(engine, "connect", _configure_sqlite)
        return engine


def _configure_sqlite(dbapi_connection: Any, connection_record: Any) -> None:
    cursor = dbapi_connection.cursor()
    try:
        cursor.execute("PRAGMA journal_mode=WAL")
        cursor.execute(f"PRAGMA busy_timeout={BUSY_TIMEOUT_MS}")
        cursor.execute("PRAGMA synchronous=NORMAL")
    finally:
        cursor.close()
