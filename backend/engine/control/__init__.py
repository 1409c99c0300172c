"""Feeder voltage control engine -- SOC envelope, mode classification, PI regulators."""

from .config import ControllerConfig
from .config_loader import load_config
from .controller import ControlDecision, ControllerState, VoltageController
from .exceptions import ConfigError, ControlError, TelemetryError
from .modes import ControlMode, determine_mode
from .regulators import RegulatorOutput, overvoltage_step, undervoltage_step
from .snapshot import Measurement, MeasurementSnapshot, build_snapshot
from .soc_limiter import soc_power_limits

__all__ = [
    "ControllerConfig",
    "load_config",
    "ControlDecision",
    "ControllerState",
    "VoltageController",
    "ConfigError",
    "ControlError",
    "TelemetryError",
    "ControlMode",
    "determine_mode",
    "RegulatorOutput",
    "overvoltage_step",
    "undervoltage_step",
    "Measurement",
    "MeasurementSnapshot",
    "build_snapshot",
    "soc_power_limits",
]
