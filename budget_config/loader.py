"""
Configuration Loader (``budget_config.loader``).

Responsibility
--------------
Loads a YAML budget configuration file and parses it into the typed
``budget_config.schema`` dataclasses.

Architecture position
---------------------
**Config layer** -- infrastructure tooling.  Depends on the kernel only for
``ConfigurationError`` and logging; it never imports engines or services.

Invariants enforced
-------------------
* Every parsed object is a frozen dataclass from ``schema.py``.
* Amounts are parsed to ``Decimal`` through their string form, so YAML
  floats such as ``0.75`` become ``Decimal("0.75")`` exactly.
* Category ids are unique; a category's subgroup exists and shares its
  parent group.
* ``compute_checksum`` produces a deterministic SHA-256 hash for
  configuration identity and change detection.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Missing required keys or bad values  -> ``ConfigurationError``.
"""

from __future__ import annotations

import hashlib
import json
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any

import yaml

from budget_config.schema import (
    BudgetConfiguration,
    CategoryDef,
    RunwayDef,
    SubgroupDef,
    ThresholdsDef,
)
from budget_kernel.exceptions import ConfigurationError
from budget_kernel.logging_config import get_logger

logger = get_logger("config.loader")

PARENT_GROUPS = ("cost-of-sales", "opex")


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
    """
    with open(path) as f:
        return yaml.safe_load(f) or {}


def _require(data: dict[str, Any], key: str, where: str) -> Any:
    if not isinstance(data, dict):
        raise ConfigurationError(f"{where} must be a mapping, got {type(data).__name__}")
    if key not in data or data[key] is None:
        raise ConfigurationError(f"Missing required key '{key}'", source=where)
    return data[key]


def parse_decimal(value: Any, where: str) -> Decimal:
    """Parse an amount from YAML (quoted string, int, or float)."""
    if isinstance(value, bool):
        raise ConfigurationError(f"Expected a number, got {value!r}", source=where)
    if isinstance(value, Decimal):
        return value
    try:
        parsed = Decimal(str(value))
    except InvalidOperation as exc:
        raise ConfigurationError(f"Expected a number, got {value!r}", source=where) from exc
    if not parsed.is_finite():
        raise ConfigurationError(f"Expected a finite number, got {value!r}", source=where)
    return parsed


def _parse_parent(value: Any, where: str) -> str:
    if value not in PARENT_GROUPS:
        raise ConfigurationError(
            f"parent must be one of {', '.join(PARENT_GROUPS)}; got {value!r}",
            source=where,
        )
    return value


def parse_subgroup(data: dict[str, Any]) -> SubgroupDef:
    """Parse a SubgroupDef from a dict."""
    subgroup_id = str(_require(data, "id", "subgroups[]"))
    where = f"subgroups[{subgroup_id}]"
    return SubgroupDef(
        id=subgroup_id,
        name=str(_require(data, "name", where)),
        parent=_parse_parent(_require(data, "parent", where), where),
    )


def parse_category(data: dict[str, Any]) -> CategoryDef:
    """
    Parse a CategoryDef from a dict.

    Preconditions:
        - ``data`` must contain ``id``, ``name`` and ``parent``.
    Raises:
        ConfigurationError: if required keys are missing or the parent is
            not a known group.
    """
    category_id = str(_require(data, "id", "categories[]"))
    where = f"categories[{category_id}]"
    is_negative = data.get("is_negative", False)
    if not isinstance(is_negative, bool):
        raise ConfigurationError(f"is_negative must be a boolean, got {is_negative!r}", source=where)
    return CategoryDef(
        id=category_id,
        name=str(_require(data, "name", where)),
        parent=_parse_parent(_require(data, "parent", where), where),
        subgroup=data.get("subgroup"),
        is_negative=is_negative,
        description=data.get("description"),
    )


def parse_thresholds(data: dict[str, Any] | None) -> ThresholdsDef:
    """Parse ThresholdsDef; absent keys keep their defaults."""
    if not data:
        return ThresholdsDef.with_defaults()

    defaults = ThresholdsDef()
    alerts = data.get("alerts") or {}
    trend = data.get("trend") or {}

    def pick(section: dict[str, Any], key: str, default: Decimal, where: str) -> Decimal:
        if key not in section:
            return default
        return parse_decimal(section[key], f"thresholds.{where}.{key}")

    return ThresholdsDef(
        alert_variance_percent=pick(alerts, "variance_percent", defaults.alert_variance_percent, "alerts"),
        alert_variance_amount=pick(alerts, "variance_amount", defaults.alert_variance_amount, "alerts"),
        alert_danger_percent=pick(alerts, "danger_percent", defaults.alert_danger_percent, "alerts"),
        trend_stable_band=pick(trend, "stable_band", defaults.trend_stable_band, "trend"),
        trend_change_threshold=pick(trend, "change_threshold", defaults.trend_change_threshold, "trend"),
        trend_stable_current=pick(trend, "stable_current", defaults.trend_stable_current, "trend"),
    )


def parse_runway(data: dict[str, Any] | None) -> RunwayDef:
    """Parse RunwayDef; absent keys keep their defaults."""
    if not data:
        return RunwayDef.with_defaults()

    defaults = RunwayDef()
    try:
        return RunwayDef(
            compensation_subgroup=str(
                data.get("compensation_subgroup", defaults.compensation_subgroup)
            ),
            hiring_share=parse_decimal(
                data.get("hiring_share", defaults.hiring_share), "runway.hiring_share"
            ),
            average_hire_cost=parse_decimal(
                data.get("average_hire_cost", defaults.average_hire_cost),
                "runway.average_hire_cost",
            ),
            runway_cap=parse_decimal(
                data.get("runway_cap", defaults.runway_cap), "runway.runway_cap"
            ),
        )
    except ValueError as exc:
        raise ConfigurationError(str(exc), source="runway") from exc


def _validate_tree(
    categories: tuple[CategoryDef, ...],
    subgroups: tuple[SubgroupDef, ...],
) -> None:
    seen_subgroups: dict[str, SubgroupDef] = {}
    for subgroup in subgroups:
        if subgroup.id in seen_subgroups:
            raise ConfigurationError(f"Duplicate subgroup id '{subgroup.id}'")
        seen_subgroups[subgroup.id] = subgroup

    seen_categories: set[str] = set()
    for category in categories:
        if category.id in seen_categories:
            raise ConfigurationError(f"Duplicate category id '{category.id}'")
        seen_categories.add(category.id)

        if category.subgroup is None:
            continue
        subgroup = seen_subgroups.get(category.subgroup)
        if subgroup is None:
            raise ConfigurationError(
                f"Unknown subgroup '{category.subgroup}'",
                source=f"categories[{category.id}]",
            )
        if subgroup.parent != category.parent:
            raise ConfigurationError(
                f"Subgroup '{subgroup.id}' belongs to {subgroup.parent}, "
                f"not {category.parent}",
                source=f"categories[{category.id}]",
            )


def parse_configuration(data: dict[str, Any]) -> BudgetConfiguration:
    """
    Parse a complete BudgetConfiguration from a dict.

    Postconditions:
        - The returned configuration carries the checksum of ``data``.
    Raises:
        ConfigurationError: on any missing key, bad value, or inconsistent
            category tree.
    """
    raw_categories = _require(data, "categories", "configuration")
    if not isinstance(raw_categories, list) or not raw_categories:
        raise ConfigurationError("categories must be a non-empty list")

    subgroups = tuple(parse_subgroup(s) for s in data.get("subgroups") or [])
    categories = tuple(parse_category(c) for c in raw_categories)
    _validate_tree(categories, subgroups)

    version = data.get("version", 1)
    if isinstance(version, bool) or not isinstance(version, int):
        raise ConfigurationError(f"version must be an integer, got {version!r}")

    return BudgetConfiguration(
        config_id=str(_require(data, "config_id", "configuration")),
        version=version,
        categories=categories,
        subgroups=subgroups,
        thresholds=parse_thresholds(data.get("thresholds")),
        runway=parse_runway(data.get("runway")),
        description=str(data.get("description", "")),
        checksum=compute_checksum(data),
    )


def load_configuration(path: Path) -> BudgetConfiguration:
    """Load and parse a configuration file."""
    data = load_yaml_file(Path(path))
    configuration = parse_configuration(data)
    logger.info(
        "configuration_loaded",
        extra={
            "path": str(path),
            "config_id": configuration.config_id,
            "category_count": len(configuration.categories),
            "checksum": configuration.checksum,
        },
    )
    return configuration


def compute_checksum(data: dict[str, Any]) -> str:
    """
    Compute SHA-256 checksum of canonical JSON serialization.

    Postconditions:
        - Returns a hex-encoded SHA-256 hash string.
        - Identical ``data`` always produces identical checksums.
    """
    canonical = json.dumps(data, sort_keys=True, default=str)
    return hashlib.sha256(canonical.encode()).hexdigest()
