"""Database connection and session management."""

import logging
import os
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

logger = logging.getLogger(__name__)

DEFAULT_DATABASE_NAME = "whatsapp_reminders"

# The scheduler holds one session per store call, the API one per request
DEFAULT_POOL_SIZE = 5
DEFAULT_POOL_RECYCLE_SECONDS = 1800


def get_database_url() -> str:
    """Build the PostgreSQL database URL from environment variables.

    DATABASE_URL, when set, is used verbatim. Otherwise the URL is assembled
    from DATABASE_HOST, DATABASE_PORT, DATABASE_NAME, DATABASE_USER and
    APP_DB_PASSWORD.

    :returns: The database connection URL.
    :raises KeyError: If required environment variables are not set.
    """
    url = os.environ.get("DATABASE_URL")
    if url:
        return url

    host = os.environ["DATABASE_HOST"]
    port = os.environ.get("DATABASE_PORT", "5432")
    name = os.environ.get("DATABASE_NAME", DEFAULT_DATABASE_NAME)
    user = os.environ.get("DATABASE_USER", "app")
    password = os.environ["APP_DB_PASSWORD"]

    return f"postgresql://{user}:{password}@{host}:{port}/{name}"


def create_db_engine() -> Engine:
    """Create a SQLAlchemy engine for the database.

    Pool size and SQL echo come from DATABASE_POOL_SIZE and DATABASE_ECHO.

    :returns: A configured SQLAlchemy engine.
    """
    url = get_database_url()
    if url.startswith("sqlite"):
        return create_engine(url, echo=_echo_enabled())

    return create_engine(
        url,
        echo=_echo_enabled(),
        pool_pre_ping=True,
        pool_size=int(os.environ.get("DATABASE_POOL_SIZE", DEFAULT_POOL_SIZE)),
        pool_recycle=DEFAULT_POOL_RECYCLE_SECONDS,
    )


def _echo_enabled() -> bool:
    return os.environ.get("DATABASE_ECHO", "").lower() in ("1", "true", "yes")


@dataclass
class _DatabaseState:
    """Lazily created engine and session factory shared by the process."""

    engine: Engine | None = field(default=None)
    session_factory: sessionmaker[Session] | None = field(default=None)


_state = _DatabaseState()


def get_engine() -> Engine:
    """Get or create the database engine singleton.

    :returns: The database engine.
    """
    if _state.engine is None:
        _state.engine = create_db_engine()
    return _state.engine


def get_session_factory() -> sessionmaker[Session]:
    """Get or create the session factory singleton.

    :returns: A sessionmaker bound to the database engine.
    """
    if _state.session_factory is None:
        _state.session_factory = sessionmaker(bind=get_engine(), expire_on_commit=False)
    return _state.session_factory


def dispose_engine() -> None:
    """Close pooled connections and forget the engine.

    The next get_session() call builds a fresh engine from the environment.
    """
    if _state.engine is None:
        return
    _state.engine.dispose()
    logger.info("Database connection pool closed")
    _state.engine = None
    _state.session_factory = None


@contextmanager
def get_session() -> Iterator[Session]:
    """Open a session that commits on success and rolls back on error.

    :yields: A database session.
    """
    session = get_session_factory()()
    try:
        yield session
        session.commit()

    except Exception:
        session.rollback()
        raise

    finally:
        session.close()
