"""Load controller configuration from flat CSV or grouped JSON files.

Two on-disk formats are supported and selected by file extension:

* **CSV** -- one ``key,value`` pair per line.  Blank lines and lines
  starting with ``#`` are ignored.
* **JSON** -- an object with the groups ``voltage_settings``,
  ``pi_controller`` and ``power_limits``, each holding its fields.

Unknown keys are logged and skipped.  A missing required field, a
non-numeric value, or a value violating the configuration invariants
raises :class:`ConfigError`.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Callable

from pydantic import ValidationError

from .config import ControllerConfig
from .exceptions import ConfigError

logger = logging.getLogger(__name__)

# ======================================================================
# Known keys
# ======================================================================

JSON_GROUPS: dict[str, tuple[str, ...]] = {
    "voltage_settings": (
        "V_ref_upper",
        "V_ref_lower",
        "Deadband_upper",
        "Deadband_lower",
        "V_enter_lower",
    ),
    "pi_controller": ("Kp_upper", "Ki_upper", "Kp_lower", "Ki_lower"),
    "power_limits": (
        "P_step_max",
        "P_charge_max",
        "P_discharge_max",
        "SOC_max",
        "SOC_min",
    ),
}

# Optional keys and the JSON group they live in.
OPTIONAL_KEYS: dict[str, str] = {"SOC_transition_width": "power_limits"}

REQUIRED_KEYS: tuple[str, ...] = tuple(
    key for keys in JSON_GROUPS.values() for key in keys
)
KNOWN_KEYS: frozenset[str] = frozenset(REQUIRED_KEYS) | frozenset(OPTIONAL_KEYS)


# ======================================================================
# Helpers
# ======================================================================

def _to_float(key: str, value: Any, where: str) -> float:
    """Convert a raw configuration value to float or raise ConfigError."""
    if isinstance(value, bool):
        raise ConfigError(f"{key} must be numeric, got {value!r} ({where})")
    try:
        return float(value)
    except (TypeError, ValueError):
        raise ConfigError(f"{key} must be numeric, got {value!r} ({where})") from None


def _format_validation_error(exc: ValidationError) -> str:
    parts = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err["loc"]) or "config"
        parts.append(f"{loc}: {err['msg']}")
    return "Invalid configuration: " + "; ".join(parts)


def build_config(values: dict[str, float]) -> ControllerConfig:
    """Validate a flat ``{key: value}`` mapping into a ControllerConfig."""
    missing = [key for key in REQUIRED_KEYS if key not in values]
    if missing:
        raise ConfigError(
            f"Missing required configuration field(s): {', '.join(missing)}"
        )
    try:
        return ControllerConfig.model_validate(values)
    except ValidationError as exc:
        raise ConfigError(_format_validation_error(exc)) from exc


# ======================================================================
# Format strategies
# ======================================================================

def parse_csv_config(text: str) -> dict[str, float]:
    """Parse flat ``key,value`` lines into a mapping of known keys.

    The format is strictly line based: comment and blank lines are dropped
    before a line is split, and no quoting is recognised.  Columns after
    the second are ignored.  Duplicate keys keep the last value and are
    logged.
    """
    values: dict[str, float] = {}
    seen_on: dict[str, int] = {}
    for line_num, line in enumerate(text.splitlines(), start=1):
        stripped = line.strip()
        if not stripped or stripped.startswith("#"):
            continue

        cells = [cell.strip() for cell in stripped.split(",")]
        if len(cells) < 2 or not cells[0] or not cells[1]:
            logger.warning("Line %d: malformed entry %r, skipped", line_num, stripped)
            continue

        key, raw_value = cells[0], cells[1]
        if key not in KNOWN_KEYS:
            logger.warning("Line %d: unknown configuration key %r, skipped", line_num, key)
            continue
        if key in seen_on:
            logger.warning(
                "Line %d: duplicate configuration key %r (first set on line %d), "
                "using the later value",
                line_num, key, seen_on[key],
            )
        values[key] = _to_float(key, raw_value, f"line {line_num}")
        seen_on[key] = line_num
    return values


def parse_json_config(text: str) -> dict[str, float]:
    """Parse the grouped JSON layout into a flat mapping of known keys."""
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise ConfigError(f"Invalid JSON configuration: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError("JSON configuration must be an object")

    for group in data:
        if group not in JSON_GROUPS:
            logger.warning("Unknown configuration group %r, skipped", group)

    values: dict[str, float] = {}
    for group, keys in JSON_GROUPS.items():
        section = data.get(group)
        if section is None:
            raise ConfigError(f"Missing configuration group '{group}'")
        if not isinstance(section, dict):
            raise ConfigError(f"Configuration group '{group}' must be an object")

        for key in keys:
            if key not in section:
                raise ConfigError(f"Missing required configuration field '{group}.{key}'")

        for key, raw_value in section.items():
            if key not in keys and OPTIONAL_KEYS.get(key) != group:
                logger.warning("Unknown configuration key '%s.%s', skipped", group, key)
                continue
            values[key] = _to_float(key, raw_value, f"{group}.{key}")
    return values


FORMATS: dict[str, Callable[[str], dict[str, float]]] = {
    ".csv": parse_csv_config,
    ".json": parse_json_config,
}


# ======================================================================
# Entry point
# ======================================================================

def load_config(path: str | Path) -> ControllerConfig:
    """Load and validate a controller configuration file.

    Args:
        path: Path to a ``.csv`` or ``.json`` configuration file.

    Returns:
        Validated, immutable ControllerConfig.

    Raises:
        ConfigError: unsupported extension, unreadable file, missing or
            invalid field.
    """
    path = Path(path)
    parser = FORMATS.get(path.suffix.lower())
    if parser is None:
        available = ", ".join(sorted(FORMATS))
        raise ConfigError(
            f"Unsupported configuration format '{path.suffix or path.name}'. "
            f"Supported: {available}"
        )

    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise ConfigError(f"Cannot read configuration file {path}: {exc}") from exc

    config = build_config(parser(text))
    logger.info("Loaded controller configuration from %s", path)
    for key, value in config.model_dump(by_alias=True).items():
        logger.info("  %s=%g", key, value)
    return config
