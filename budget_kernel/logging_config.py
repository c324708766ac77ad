"""
Structured JSON logging for the budget packages.

Every logger handed out by ``get_logger`` lives under the ``budget_kernel``
namespace and, once ``configure_logging`` has run, writes one JSON object per
record::

    {"ts": "...", "level": "INFO", "logger": "budget_kernel.engines.ytd",
     "message": "ytd_calculated", "fiscal_year": "2025",
     "last_month_with_actuals": 4, "ytd_actual": "1250.00"}

Request-scoped fields (correlation id, actor, fiscal year, trace id) are
carried by ``LogContext`` in context variables, so they follow the call
through engines and services without being passed around.  Decimal amounts
are rendered as strings so no precision is lost in the log stream.
"""

__all__ = [
    "StructuredFormatter",
    "LogContext",
    "get_logger",
    "configure_logging",
    "reset_logging",
]

import json
import logging
import sys
import threading
from contextvars import ContextVar, Token
from datetime import UTC, date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any
from uuid import UUID

_LOGGER_PREFIX = "budget_kernel"

# ---------------------------------------------------------------------------
# Context propagation
# ---------------------------------------------------------------------------

_CONTEXT_FIELDS = ("correlation_id", "actor_id", "fiscal_year", "trace_id")

_context_vars: dict[str, ContextVar[str | None]] = {
    name: ContextVar(f"budget_log_{name}", default=None) for name in _CONTEXT_FIELDS
}


class LogContext:
    """Context-variable holder for the fields stamped on every record."""

    FIELDS = _CONTEXT_FIELDS

    @classmethod
    def set(
        cls,
        *,
        correlation_id: str | None = None,
        actor_id: str | None = None,
        fiscal_year: str | None = None,
        trace_id: str | None = None,
    ) -> None:
        """Set the given fields; None leaves a field unchanged."""
        values = {
            "correlation_id": correlation_id,
            "actor_id": actor_id,
            "fiscal_year": fiscal_year,
            "trace_id": trace_id,
        }
        for name, value in values.items():
            if value is not None:
                _context_vars[name].set(str(value))

    @classmethod
    def get_all(cls) -> dict[str, str]:
        """Fields currently set, omitting empty ones."""
        return {
            name: value
            for name, var in _context_vars.items()
            if (value := var.get()) is not None
        }

    @classmethod
    def clear(cls) -> None:
        for var in _context_vars.values():
            var.set(None)

    @classmethod
    def bind(cls, **fields: Any) -> "_BoundContext":
        """
        Set fields for the duration of a ``with`` block.

        Values are stringified (``bind(fiscal_year=2025)`` stores "2025");
        unknown field names are ignored.
        """
        return _BoundContext(fields)


class _BoundContext:
    """Restores every field it touched on exit, including back to unset."""

    def __init__(self, fields: dict[str, Any]):
        self._fields = {
            name: str(value)
            for name, value in fields.items()
            if value is not None and name in _context_vars
        }
        self._tokens: list[tuple[ContextVar[str | None], Token]] = []

    def __enter__(self) -> type[LogContext]:
        for name, value in self._fields.items():
            var = _context_vars[name]
            self._tokens.append((var, var.set(value)))
        return LogContext

    def __exit__(self, *exc_info: Any) -> None:
        while self._tokens:
            var, token = self._tokens.pop()
            var.reset(token)


# ---------------------------------------------------------------------------
# JSON Formatter
# ---------------------------------------------------------------------------

# Attributes every LogRecord carries; anything else came from ``extra``
_RECORD_ATTRS: frozenset[str] = frozenset(
    vars(logging.LogRecord("", 0, "", 0, "", (), None))
) | {"message", "taskName"}


def _to_json(value: Any) -> Any:
    """``json.dumps`` default hook for the value types the engines log."""
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (set, frozenset)):
        return sorted(value, key=str)
    if isinstance(value, UUID):
        return str(value)
    return str(value)


def _exception_fields(exc: BaseException) -> dict[str, Any]:
    fields: dict[str, Any] = {
        "exc_type": type(exc).__name__,
        "exc_message": str(exc),
    }
    code = getattr(exc, "code", None)
    if code is not None:
        fields["exc_code"] = code
    # Structured attributes set by BudgetKernelError subclasses
    for name, value in vars(exc).items():
        if not name.startswith("_") and name not in ("args", "code"):
            fields[f"exc_{name}"] = value
    return fields


class StructuredFormatter(logging.Formatter):
    """One JSON object per record; context and extra fields at top level."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            **LogContext.get_all(),
        }

        for name, value in vars(record).items():
            if name not in _RECORD_ATTRS and name not in payload:
                payload[name] = value

        if record.exc_info and record.exc_info[1] is not None:
            payload.update(_exception_fields(record.exc_info[1]))
            payload["traceback"] = self.formatException(record.exc_info)

        return json.dumps(payload, default=_to_json)


# ---------------------------------------------------------------------------
# Logger factory and setup
# ---------------------------------------------------------------------------


def get_logger(name: str) -> logging.Logger:
    """Logger ``budget_kernel.<name>``."""
    return logging.getLogger(f"{_LOGGER_PREFIX}.{name}")


_configured = False
_lock = threading.Lock()


def configure_logging(
    *,
    level: int = logging.INFO,
    stream: Any = None,
    handler: logging.Handler | None = None,
) -> None:
    """
    Attach a JSON handler to the ``budget_kernel`` logger.

    Only the first call has any effect until ``reset_logging`` runs.  The
    namespace stops propagating so records are not duplicated by a root
    handler the host application may have installed.
    """
    global _configured
    with _lock:
        if _configured:
            return
        _configured = True

    target = handler or logging.StreamHandler(stream or sys.stderr)
    target.setFormatter(StructuredFormatter())

    namespace = logging.getLogger(_LOGGER_PREFIX)
    namespace.setLevel(level)
    namespace.propagate = False
    namespace.addHandler(target)


def reset_logging() -> None:
    """Undo ``configure_logging``. FOR TESTING ONLY."""
    global _configured
    with _lock:
        _configured = False
    namespace = logging.getLogger(_LOGGER_PREFIX)
    namespace.handlers.clear()
    namespace.setLevel(logging.WARNING)
    namespace.propagate = True
