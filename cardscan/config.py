from __future__ import annotations

import dataclasses
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict

import yaml

from cardscan.primitives.card_number import ReconstructConfig

CONFIG_ENV = "CARDSCAN_CONFIG"
THRESHOLD_ENV = "CARDSCAN_CONFIDENCE_THRESHOLD"
ALLOW_TEST_CARDS_ENV = "CARDSCAN_ALLOW_TEST_CARDS"

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


@dataclass
class ScanConfig:
    confidence_threshold: float = 0.8
    security_validation_enabled: bool = True
    allow_test_cards: bool = False
    purge_on_success: bool = True
    flag_repeated_digits: bool = False
    reconstruct: ReconstructConfig = field(default_factory=ReconstructConfig)

    def __post_init__(self) -> None:
        if not 0.0 <= self.confidence_threshold <= 1.0:
            raise ValueError(f"confidence_threshold must be within [0, 1], got {self.confidence_threshold}")
        rc = self.reconstruct
        if rc.row_tolerance <= 0:
            raise ValueError("reconstruct.row_tolerance must be positive")
        if rc.max_combination_fragments < 0:
            raise ValueError("reconstruct.max_combination_fragments must not be negative")
        if rc.min_group_digits < 1 or rc.vertical_group_size < 1:
            raise ValueError("reconstruct group sizes must be at least 1")


def _load_yaml(path: Path) -> Dict[str, Any]:
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")
    with path.open("r", encoding="utf-8") as handle:
        data = yaml.safe_load(handle)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(f"Config file must contain a mapping: {path}")
    return data


def _check_keys(section: str, data: Dict[str, Any], allowed: set[str]) -> None:
    unknown = sorted(set(data) - allowed)
    if unknown:
        raise ValueError(f"Unknown {section} keys: {', '.join(unknown)}")


_NUMBER = (int, float)
_SCAN_TYPES = {
    "confidence_threshold": _NUMBER,
    "security_validation_enabled": bool,
    "allow_test_cards": bool,
    "purge_on_success": bool,
    "flag_repeated_digits": bool,
}
_RECONSTRUCT_TYPES = {
    "row_tolerance": _NUMBER,
    "max_combination_fragments": int,
    "min_group_digits": int,
    "vertical_group_size": int,
}


def _check_types(section: str, data: Dict[str, Any], types: Dict[str, Any]) -> None:
    for key, value in data.items():
        expected = types[key]
        # bool is an int subclass; only bool fields accept it.
        if isinstance(value, bool) and expected is not bool:
            raise ValueError(f"{section}.{key} must be a number, got {value!r}")
        if not isinstance(value, expected):
            raise ValueError(f"{section}.{key} has the wrong type: {value!r}")


def _parse_bool(name: str, raw: str) -> bool:
    value = raw.strip().lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    raise ValueError(f"{name} must be a boolean, got {raw!r}")


def _env_overrides() -> Dict[str, Any]:
    overrides: Dict[str, Any] = {}
    threshold = os.getenv(THRESHOLD_ENV)
    if threshold:
        try:
            overrides["confidence_threshold"] = float(threshold)
        except ValueError as exc:
            raise ValueError(f"{THRESHOLD_ENV} must be a number, got {threshold!r}") from exc
    allow_test_cards = os.getenv(ALLOW_TEST_CARDS_ENV)
    if allow_test_cards:
        overrides["allow_test_cards"] = _parse_bool(ALLOW_TEST_CARDS_ENV, allow_test_cards)
    return overrides


def load_scan_config(path: str | Path | None = None) -> ScanConfig:
    """Build a ``ScanConfig`` from defaults, an optional YAML file and the environment.

    The file comes from ``path`` or ``$CARDSCAN_CONFIG``. Environment overrides
    win over file values, which win over defaults.
    """
    config_path = path or os.getenv(CONFIG_ENV)
    data = _load_yaml(Path(config_path)) if config_path else {}

    scan_fields = {f.name for f in dataclasses.fields(ScanConfig)}
    _check_keys("config", data, scan_fields)
    reconstruct_data = data.pop("reconstruct", None) or {}
    if not isinstance(reconstruct_data, dict):
        raise ValueError("reconstruct section must be a mapping")
    _check_keys("reconstruct", reconstruct_data, {f.name for f in dataclasses.fields(ReconstructConfig)})
    _check_types("config", data, _SCAN_TYPES)
    _check_types("reconstruct", reconstruct_data, _RECONSTRUCT_TYPES)

    data.update(_env_overrides())
    return ScanConfig(reconstruct=ReconstructConfig(**reconstruct_data), **data)


__all__ = ["ScanConfig", "load_scan_config", "CONFIG_ENV", "THRESHOLD_ENV", "ALLOW_TEST_CARDS_ENV"]
