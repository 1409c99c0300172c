"""Telemetry source and command sink interfaces, plus simple sinks."""

from __future__ import annotations

import logging
from typing import Protocol

from engine.control.snapshot import Measurement

logger = logging.getLogger(__name__)


class TelemetrySource(Protocol):
    """Delivers one consistent (V_meas, SOC, P_meas) sample per call.

    Implementations raise ``TelemetryError`` when no usable sample exists.
    """

    def read(self) -> Measurement: ...


class CommandSink(Protocol):
    """Receives the signed active-power command (kW) once per tick."""

    def send(self, p_cmd_kw: float) -> None: ...


class LoggingCommandSink:
    """Dry-run sink: logs each command instead of writing to a converter."""

    def send(self, p_cmd_kw: float) -> None:
        logger.info("PCS command: %.2f kW", p_cmd_kw, extra={"p_cmd_kw": p_cmd_kw})


class RecordingCommandSink:
    """Keeps every command in :attr:`commands`."""

    def __init__(self) -> None:
        self.commands: list[float] = []

    def send(self, p_cmd_kw: float) -> None:
        self.commands.append(p_cmd_kw)

    @property
    def last(self) -> float | None:
        return self.commands[-1] if self.commands else None
