"""
budget_config -- budget category tree and engine tunables.

Responsibility:
    Provides the configuration that engines and services consume: the
    category tree (parent groups, subgroups, categories), alert and trend
    thresholds, and compensation runway assumptions.  ``get_default_configuration()``
    returns the packaged default set; ``load_configuration(path)`` loads any
    other YAML file with the same shape.

Architecture position:
    Configuration -- YAML-driven, validated at load time.
    This package sits above ``budget_kernel`` and ``budget_engines`` and
    below ``budget_services``.  The kernel and engines MUST NEVER import
    from ``budget_config``; bridges in this package translate configuration
    into kernel and engine inputs.

Invariants enforced:
    - Deterministic loading: the same YAML always produces the same
      ``BudgetConfiguration`` and checksum.
    - The category tree is consistent (unique ids, known subgroups, matching
      parent groups) or loading fails.

Failure modes:
    - ``FileNotFoundError`` -- configuration file missing.
    - ``ConfigurationError`` -- missing keys, bad values, inconsistent tree.

Tracing:
    Every ``get_default_configuration()`` call emits a
    ``BUDGET_CONFIG_TRACE`` log entry with the config id, version, checksum
    and category count.
"""

from __future__ import annotations

from pathlib import Path

from budget_config.loader import load_configuration
from budget_config.schema import BudgetConfiguration
from budget_kernel.logging_config import get_logger

_logger = get_logger("config")

# Packaged default configuration
DEFAULT_CONFIG_PATH = Path(__file__).parent / "defaults" / "budget.yaml"


def get_default_configuration(path: Path | None = None) -> BudgetConfiguration:
    """
    Load the packaged default configuration (or ``path`` when given).

    Raises:
        FileNotFoundError: If the file does not exist.
        ConfigurationError: If the content is invalid.
    """
    configuration = load_configuration(path or DEFAULT_CONFIG_PATH)

    _logger.info(
        "BUDGET_CONFIG_TRACE",
        extra={
            "trace_type": "BUDGET_CONFIG_TRACE",
            "config_id": configuration.config_id,
            "config_version": configuration.version,
            "checksum": configuration.checksum,
            "category_count": len(configuration.categories),
            "subgroup_count": len(configuration.subgroups),
        },
    )
    return configuration


__all__ = [
    "BudgetConfiguration",
    "DEFAULT_CONFIG_PATH",
    "get_default_configuration",
    "load_configuration",
]
