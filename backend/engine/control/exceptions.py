"""Error types raised at the boundaries of the voltage control engine."""

from __future__ import annotations


class ControlError(Exception):
    """Base class for voltage control errors."""


class ConfigError(ControlError):
    """Controller configuration is missing, unreadable, or invalid.

    Fatal at startup: the control loop must not be entered.
    """


class TelemetryError(ControlError):
    """A telemetry snapshot is missing, stale, or not numerically usable."""
