"""Telemetry sources and command sinks around the control engine."""

from .base import CommandSink, LoggingCommandSink, RecordingCommandSink, TelemetrySource
from .synthetic import SyntheticTelemetry

__all__ = [
    "CommandSink",
    "LoggingCommandSink",
    "RecordingCommandSink",
    "TelemetrySource",
    "SyntheticTelemetry",
]
