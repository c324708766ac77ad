"""Database layer - engine, base classes and column types."""

from budget_kernel.db.base import UUID, Base, DecimalString, TrackedBase, UTCDateTime, UUIDString
from budget_kernel.db.engine import (
    create_tables,
    drop_tables,
    get_engine,
    get_session,
    init_engine_from_url,
    reset_engine,
    session_scope,
)

__all__ = [
    "get_engine",
    "get_session",
    "init_engine_from_url",
    "session_scope",
    "create_tables",
    "drop_tables",
    "reset_engine",
    "Base",
    "TrackedBase",
    "DecimalString",
    "UTCDateTime",
    "UUIDString",
    "UUID",
]
