"""Control mode classification from measured feeder voltage."""

from __future__ import annotations

from enum import Enum

from .config import ControllerConfig


class ControlMode(str, Enum):
    NORMAL = "normal"
    OVERVOLTAGE = "overvoltage"
    UNDERVOLTAGE = "undervoltage"


def determine_mode(v_meas: float, config: ControllerConfig) -> ControlMode:
    """Classify *v_meas* against the deadband thresholds.

    Both comparisons are strict, so a voltage exactly on a threshold is
    Normal.  Undervoltage additionally requires ``v_meas > v_enter_lower``;
    a collapsed feeder (outage) must not trigger discharge.  No dwell time
    is applied: the result depends only on this tick's voltage.
    """
    if v_meas > config.overvoltage_threshold:
        return ControlMode.OVERVOLTAGE
    if v_meas < config.undervoltage_threshold and v_meas > config.v_enter_lower:
        return ControlMode.UNDERVOLTAGE
    return ControlMode.NORMAL
