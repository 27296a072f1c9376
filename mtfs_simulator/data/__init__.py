"""
Configuration ingestion layer.
Validates imported scenario payloads (parsed JSON) and turns them into a
``Scenario``. Validation is structural only: the payload must be a
mapping, and its ``assumptions`` / ``inputs`` members, when present, must
be mappings too. Values are not range-checked.
"""

import json
import logging
import pathlib
from collections.abc import Mapping
from dataclasses import dataclass, replace
from typing import Any, Dict, Optional, Union

from mtfs_simulator.config import (
    Assumptions,
    DebtBlock,
    FundingShock,
    SavingsItem,
    Scenario,
    StressParams,
    YearInputs,
    YearOverride,
)

logger = logging.getLogger(__name__)

IMPORTED_SCENARIO_NAME = "Custom"


class ConfigError(ValueError):
    """Raised when an imported configuration is structurally invalid."""


@dataclass
class ValidationResult:
    valid: bool
    reason: str = ""

    def __bool__(self) -> bool:
        return self.valid


def validate_config(data: Any) -> ValidationResult:
    """Structural check of an imported configuration payload."""
    if data is None or not isinstance(data, Mapping):
        return ValidationResult(False, "configuration must be an object")
    for key in ("assumptions", "inputs"):
        value = data.get(key)
        if value is not None and not isinstance(value, Mapping):
            return ValidationResult(False, f"'{key}' must be an object")
    return ValidationResult(True)


def _convert_members(data: Mapping[str, Any]) -> Dict[str, Any]:
    changes: Dict[str, Any] = {"name": IMPORTED_SCENARIO_NAME}
    if data.get("assumptions") is not None:
        assumptions = Assumptions.from_dict(data["assumptions"])
        changes["assumptions"] = assumptions
        if data.get("inputs") is None and data["assumptions"].get("baseline"):
            changes["inputs"] = replace(assumptions.baseline)
    if data.get("inputs") is not None:
        changes["inputs"] = YearInputs.from_dict(data["inputs"])
    if data.get("overrides") is not None:
        changes["overrides"] = [YearOverride.from_dict(o) for o in data["overrides"]]
    if data.get("fundingShock") is not None:
        changes["funding_shock"] = FundingShock.from_dict(data["fundingShock"])
    if data.get("debt") is not None:
        changes["debt"] = DebtBlock.from_dict(data["debt"])
    if data.get("pipeline") is not None:
        changes["pipeline"] = [SavingsItem.from_dict(item) for item in data["pipeline"]]
    if data.get("stress") is not None:
        changes["stress"] = StressParams.from_dict(data["stress"])
    return changes


def load_config(data: Any, base: Optional[Scenario] = None) -> Scenario:
    """
    Apply an imported configuration on top of ``base`` (defaults if omitted).

    Present members replace the corresponding part of the scenario. When
    assumptions arrive without inputs, the assumptions' baseline drivers
    become the current inputs.
    """
    result = validate_config(data)
    if not result.valid:
        logger.warning("Rejected configuration: %s", result.reason)
        raise ConfigError(result.reason)

    scenario = base or Scenario()
    try:
        changes = _convert_members(data)
    except (AttributeError, TypeError, ValueError) as exc:
        logger.warning("Rejected configuration: %s", exc)
        raise ConfigError(f"Malformed configuration member: {exc}") from exc

    logger.debug("Loaded configuration members: %s", sorted(data))
    return replace(scenario, **changes)


def load_config_file(path: Union[str, pathlib.Path], base: Optional[Scenario] = None) -> Scenario:
    """Read a JSON configuration file and load it."""
    path = pathlib.Path(path)
    text = path.read_text(encoding="utf-8")
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise ConfigError(f"Invalid JSON config in {path}: {exc}") from exc
    return load_config(data, base)


def dump_config(scenario: Scenario) -> str:
    """Serialise a scenario in the import format."""
    return json.dumps(scenario.to_dict(), indent=2)
