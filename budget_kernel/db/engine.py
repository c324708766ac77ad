"""
Module: budget_kernel.db.engine
Responsibility: Owns the process-wide SQLAlchemy engine that backs the
    entry store, hands out sessions, and defines the unit-of-work boundary
    (``session_scope``).  Services never commit; this module does.
Architecture position: Kernel > DB.  Depends on db/base.py only, apart
    from create_tables, which imports budget_kernel.models to populate
    Base.metadata.

Invariants enforced:
    - Every SQLite URL, in-memory included, is served by a single shared
      connection (StaticPool), so all sessions see one database.
    - Server backends get a pre-pinging QueuePool.
    - A unit of work either commits as a whole or is rolled back, and the
      original exception reaches the caller.

Failure modes:
    - RuntimeError when a session or the engine is requested before
      init_engine_from_url().
"""

import atexit
from contextlib import contextmanager
from typing import Any, Generator

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import QueuePool, StaticPool

from budget_kernel.logging_config import configure_logging, get_logger

logger = get_logger("db.engine")

DEFAULT_DATABASE_URL = "sqlite+pysqlite:///:memory:"

_engine: Engine | None = None
_SessionFactory: sessionmaker[Session] | None = None


def _pool_options(
    dialect: str,
    *,
    pool_size: int,
    max_overflow: int,
    pool_pre_ping: bool,
) -> dict[str, Any]:
    if dialect == "sqlite":
        return {
            "poolclass": StaticPool,
            "connect_args": {"check_same_thread": False},
        }
    return {
        "poolclass": QueuePool,
        "pool_size": pool_size,
        "max_overflow": max_overflow,
        "pool_pre_ping": pool_pre_ping,
    }


def init_engine_from_url(
    database_url: str = DEFAULT_DATABASE_URL,
    echo: bool = False,
    pool_size: int = 5,
    max_overflow: int = 10,
    pool_pre_ping: bool = True,
) -> Engine:
    """
    Create the engine and session factory for ``database_url``.

    Calling again disposes the previous engine first.  Pool arguments are
    ignored for SQLite.  Also switches on structured logging.
    """
    global _engine, _SessionFactory

    reset_engine()

    dialect = make_url(database_url).get_backend_name()
    options = _pool_options(
        dialect,
        pool_size=pool_size,
        max_overflow=max_overflow,
        pool_pre_ping=pool_pre_ping,
    )
    _engine = create_engine(database_url, echo=echo, **options)
    _SessionFactory = sessionmaker(bind=_engine, expire_on_commit=False)

    configure_logging()
    logger.info(
        "engine_initialized",
        extra={
            "dialect": dialect,
            "pool": options["poolclass"].__name__,
            "echo": echo,
        },
    )
    return _engine


def _not_initialized() -> RuntimeError:
    return RuntimeError("Engine not initialized. Call init_engine_from_url() first.")


def get_engine() -> Engine:
    if _engine is None:
        raise _not_initialized()
    return _engine


def get_session() -> Session:
    """New session bound to the current engine; the caller closes it."""
    if _SessionFactory is None:
        raise _not_initialized()
    return _SessionFactory()


@contextmanager
def session_scope() -> Generator[Session, None, None]:
    """
    One unit of work.

    Usage:
        with session_scope() as session:
            BudgetStore(session).record_entry(entry)

    Commits when the block exits normally.  Any exception rolls the whole
    block back and is re-raised; the session is closed either way.
    """
    session = get_session()
    logger.debug("transaction_started")
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        logger.warning("transaction_rolled_back", exc_info=True)
        raise
    else:
        logger.debug("transaction_committed")
    finally:
        session.close()


def create_tables() -> None:
    """Create every table registered by budget_kernel.models."""
    from budget_kernel.db.base import Base
    import budget_kernel.models  # noqa: F401

    Base.metadata.create_all(get_engine())
    logger.info("tables_created", extra={"tables": sorted(Base.metadata.tables)})


def drop_tables() -> None:
    """Drop every registered table. Test teardown."""
    from budget_kernel.db.base import Base

    Base.metadata.drop_all(get_engine())


def reset_engine() -> None:
    """Dispose the engine and forget the session factory."""
    global _engine, _SessionFactory

    if _engine is not None:
        _engine.dispose()
    _engine = None
    _SessionFactory = None


atexit.register(reset_engine)
