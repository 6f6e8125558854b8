from __future__ import annotations

import json
import math
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict

CONFIG_DIR = Path.home() / ".roundline"
CONFIG_FILE = CONFIG_DIR / "roundline.cfg"
DEFAULT_CONFIG = {
    "_comment": "Valid units: millimeters (default), meters, inches. Value is case-insensitive.",
    "units": "millimeters",
    "pipe_diameter": 10.0,
    "label_offset": 1.5,
    "label_height": 2.5,
    "attribute_name": "ROUNDLINE_PIPE",
}
_UNIT_INFO: Dict[str, Dict[str, Any]] = {
    "millimeters": {"label": "mm", "scale_to_mm": 1.0},
    "meters": {"label": "m", "scale_to_mm": 1000.0},
    "inches": {"label": "in", "scale_to_mm": 25.4},
}
_UNIT_ALIASES = {
    "millimeter": "millimeters",
    "millimeters": "millimeters",
    "mm": "millimeters",
    "meter": "meters",
    "meters": "meters",
    "m": "meters",
    "inch": "inches",
    "inches": "inches",
    "in": "inches",
}


@dataclass(frozen=True)
class UnitSettings:
    """Resolved units from roundline.cfg."""

    name: str
    label: str
    scale_to_mm: float


@dataclass(frozen=True)
class PipeSettings:
    """Defaults for pipe decoration, resolved from roundline.cfg."""

    diameter: float
    label_offset: float
    label_height: float
    attribute_name: str
    units: UnitSettings


def ensure_user_config() -> None:
    """Ensure ~/.roundline/roundline.cfg exists with sane defaults."""

    try:
        CONFIG_DIR.mkdir(parents=True, exist_ok=True)
    except OSError:
        return

    if CONFIG_FILE.exists():
        return

    try:
        CONFIG_FILE.write_text(json.dumps(DEFAULT_CONFIG, indent=2) + "\n")
    except OSError:
        return


def _load_user_config() -> Dict[str, Any]:
    ensure_user_config()
    try:
        loaded = json.loads(CONFIG_FILE.read_text())
    except (OSError, json.JSONDecodeError):
        return DEFAULT_CONFIG.copy()
    if not isinstance(loaded, dict):
        return DEFAULT_CONFIG.copy()
    return loaded


def _normalize_units(value: str) -> str | None:
    key = value.strip().lower()
    if key in _UNIT_INFO:
        return key
    return _UNIT_ALIASES.get(key)


def _positive(raw: Dict[str, Any], name: str) -> float:
    try:
        value = float(raw.get(name, DEFAULT_CONFIG[name]))
    except (TypeError, ValueError):
        return float(DEFAULT_CONFIG[name])
    if not math.isfinite(value) or value <= 0:
        return float(DEFAULT_CONFIG[name])
    return value


def _resolve_units(raw_config: Dict[str, Any]) -> UnitSettings:
    raw_units = str(raw_config.get("units", DEFAULT_CONFIG["units"]))
    normalized = _normalize_units(raw_units)
    if normalized is None:
        normalized = DEFAULT_CONFIG["units"]

    info = _UNIT_INFO[normalized]
    return UnitSettings(name=normalized, label=info["label"], scale_to_mm=info["scale_to_mm"])


def _settings_from(raw_config: Dict[str, Any]) -> PipeSettings:
    attribute = str(raw_config.get("attribute_name") or DEFAULT_CONFIG["attribute_name"]).strip()
    return PipeSettings(
        diameter=_positive(raw_config, "pipe_diameter"),
        label_offset=_positive(raw_config, "label_offset"),
        label_height=_positive(raw_config, "label_height"),
        attribute_name=attribute or str(DEFAULT_CONFIG["attribute_name"]),
        units=_resolve_units(raw_config),
    )


def default_settings() -> PipeSettings:
    """Built-in pipe defaults; never reads or writes roundline.cfg."""

    return _settings_from(DEFAULT_CONFIG)


def get_unit_settings() -> UnitSettings:
    """Return the configured units and the conversion to millimeters."""

    return _resolve_units(_load_user_config())


def get_settings() -> PipeSettings:
    """Return pipe decoration defaults, falling back per key on invalid values."""

    return _settings_from(_load_user_config())
