"""
budget_engines.tracer -- ``@traced_engine`` and BUDGET_ENGINE_TRACE records.

Responsibility:
    Wrap each public engine entry point so that every call leaves one
    structured log record naming the engine, its version, how long the
    call took, and a short fingerprint of the inputs that determine the
    result.  Two calls with the same fingerprint over the same snapshot
    must produce the same figures, which is what makes the trace useful
    when a dashboard number is questioned.

Architecture position:
    Engines -- support code for the pure calculation layer.  Reads the
    bound arguments and writes a log record; nothing else.

Invariants enforced:
    - The fingerprint is the first 16 hex chars of a SHA-256 over a JSON
      document with sorted keys.  Sets are sorted after normalisation so
      ``ForecastModes.of`` built in any order hashes identically.
    - Identity and audit columns (id, created_at, updated_at) never take
      part in the fingerprint.
    - Arguments are never mutated.  A fingerprinted argument passed as a
      one-shot iterator (a generator of months, say) is materialized into
      a tuple first, and the engine receives that tuple.

Failure modes:
    - A fingerprint field the caller did not pass hashes as null.
    - An engine that raises still emits its trace, with outcome "error",
      and the exception propagates unchanged.
"""

from __future__ import annotations

import dataclasses
import functools
import hashlib
import inspect
import json
import time
from collections.abc import Callable, Iterable, Iterator, Mapping
from decimal import Decimal
from enum import Enum
from typing import Any

from budget_kernel.logging_config import get_logger

_logger = get_logger("engines.tracer")

TRACE_MESSAGE = "BUDGET_ENGINE_TRACE"
FINGERPRINT_LENGTH = 16

_UNHASHED_FIELDS = frozenset({"id", "created_at", "updated_at"})


def _normalize(value: Any) -> Any:
    """Reduce a value to plain JSON types with a stable ordering."""
    if value is None or isinstance(value, (bool, int, str)):
        return value
    if isinstance(value, Decimal):
        # Decimal("1.0") and Decimal("1.00") are the same amount
        return str(value.normalize()) if value.is_finite() else str(value)
    if isinstance(value, Enum):
        return _normalize(value.value)
    if isinstance(value, Mapping):
        return {str(k): _normalize(v) for k, v in value.items()}
    if isinstance(value, (set, frozenset)):
        members = [_normalize(v) for v in value]
        return sorted(members, key=lambda m: json.dumps(m, sort_keys=True))
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return {
            "__type__": type(value).__name__,
            **{
                f.name: _normalize(getattr(value, f.name))
                for f in dataclasses.fields(value)
                if f.name not in _UNHASHED_FIELDS
            },
        }
    if isinstance(value, Iterable) and not isinstance(value, (bytes, bytearray)):
        return [_normalize(v) for v in value]
    return str(value)


def compute_input_fingerprint(
    fingerprint_fields: tuple[str, ...],
    arguments: Mapping[str, Any],
) -> str:
    """Hex fingerprint of ``arguments`` restricted to ``fingerprint_fields``."""
    document = {name: _normalize(arguments.get(name)) for name in fingerprint_fields}
    encoded = json.dumps(document, sort_keys=True, separators=(",", ":"))
    return hashlib.sha256(encoded.encode("utf-8")).hexdigest()[:FINGERPRINT_LENGTH]


def traced_engine(
    engine_name: str,
    engine_version: str,
    fingerprint_fields: tuple[str, ...] = (),
) -> Callable:
    """
    Decorate an engine function so each call emits BUDGET_ENGINE_TRACE.

    ``fingerprint_fields`` names parameters of the wrapped function; they are
    matched whether the caller passed them positionally or by keyword.
    """

    def decorator(func: Callable) -> Callable:
        signature = inspect.signature(func)

        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            fingerprint = ""
            if fingerprint_fields:
                bound = signature.bind_partial(*args, **kwargs)
                for name in fingerprint_fields:
                    # A one-shot iterator is hashed and then handed on as a tuple
                    if isinstance(bound.arguments.get(name), Iterator):
                        bound.arguments[name] = tuple(bound.arguments[name])
                args, kwargs = bound.args, bound.kwargs
                fingerprint = compute_input_fingerprint(fingerprint_fields, bound.arguments)

            outcome = "error"
            started = time.perf_counter()
            try:
                result = func(*args, **kwargs)
                outcome = "ok"
                return result
            finally:
                _logger.info(
                    TRACE_MESSAGE,
                    extra={
                        "trace_type": TRACE_MESSAGE,
                        "engine_name": engine_name,
                        "engine_version": engine_version,
                        "function": func.__qualname__,
                        "input_fingerprint": fingerprint,
                        "duration_ms": round((time.perf_counter() - started) * 1000, 2),
                        "outcome": outcome,
                    },
                )

        return wrapper

    return decorator
