"""Shared test fixtures for the voltage control engine and runtime tests."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from engine.control.config import ControllerConfig
from engine.control.snapshot import Measurement


# ======================================================================
# Configuration fixtures
# ======================================================================

@pytest.fixture
def config_values() -> dict[str, float]:
    """Flat configuration using the on-disk key names (241/198 V feeder, 125 kW PCS)."""
    return {
        "V_ref_upper": 241.0,
        "V_ref_lower": 198.0,
        "Deadband_upper": 2.0,
        "Deadband_lower": 2.0,
        "V_enter_lower": 160.0,
        "Kp_upper": 1.0,
        "Ki_upper": 0.1,
        "Kp_lower": 1.0,
        "Ki_lower": 0.1,
        "P_step_max": 10.0,
        "P_charge_max": 125.0,
        "P_discharge_max": 125.0,
        "SOC_max": 0.95,
        "SOC_min": 0.15,
    }


@pytest.fixture
def controller_config(config_values) -> ControllerConfig:
    return ControllerConfig.model_validate(config_values)


@pytest.fixture
def grouped_config(config_values) -> dict[str, dict[str, float]]:
    """The same values in the grouped JSON layout."""
    groups = {
        "voltage_settings": ("V_ref_upper", "V_ref_lower", "Deadband_upper",
                             "Deadband_lower", "V_enter_lower"),
        "pi_controller": ("Kp_upper", "Ki_upper", "Kp_lower", "Ki_lower"),
        "power_limits": ("P_step_max", "P_charge_max", "P_discharge_max",
                         "SOC_max", "SOC_min"),
    }
    return {
        group: {key: config_values[key] for key in keys}
        for group, keys in groups.items()
    }


@pytest.fixture
def json_config_file(tmp_path: Path, grouped_config) -> Path:
    path = tmp_path / "config.json"
    path.write_text(json.dumps(grouped_config), encoding="utf-8")
    return path


@pytest.fixture
def csv_config_file(tmp_path: Path, config_values) -> Path:
    lines = ["# feeder voltage control", ""]
    lines += [f"{key},{value}" for key, value in config_values.items()]
    path = tmp_path / "config.csv"
    path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return path


# ======================================================================
# Telemetry fixtures
# ======================================================================

@pytest.fixture
def nominal_measurement() -> Measurement:
    """In-band voltage, mid-range SOC, converter idle."""
    return Measurement(v_meas=220.0, soc=0.5, p_meas=0.0)


class ScriptedTelemetry:
    """Replays a fixed list of measurements; exceptions in the list are raised."""

    def __init__(self, items) -> None:
        self._items = list(items)
        self.reads = 0

    def read(self) -> Measurement:
        item = self._items[min(self.reads, len(self._items) - 1)]
        self.reads += 1
        if isinstance(item, Exception):
            raise item
        return item


@pytest.fixture
def scripted_telemetry():
    return ScriptedTelemetry
