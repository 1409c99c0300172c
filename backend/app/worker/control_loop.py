"""Periodic control loop: telemetry -> controller -> command sink, once per tick."""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Callable

from app.core.logging import tick_id_var
from engine.control.controller import VoltageController
from engine.control.exceptions import TelemetryError
from engine.telemetry.base import CommandSink, TelemetrySource

logger = logging.getLogger(__name__)

# "zero": drop to Normal, clear integrators, command 0 kW.
# "hold": repeat the last command, controller state untouched.
FAILURE_POLICIES = ("zero", "hold")


def _run_tick(
    controller: VoltageController,
    source: TelemetrySource,
    sink: CommandSink,
    failure_policy: str,
    last_cmd: float,
    max_age_s: float | None,
    clock: Callable[[], float],
) -> float:
    """Run one complete cycle and return the command that was sent."""
    try:
        measurement = source.read()
        measurement.validate(max_age_s=max_age_s, now=clock())
    except TelemetryError as exc:
        if failure_policy == "hold":
            p_cmd = last_cmd
            logger.warning("Telemetry unavailable (%s); holding %.2f kW", exc, p_cmd)
        else:
            p_cmd = controller.fail_safe().p_cmd_kw
            logger.warning("Telemetry unavailable (%s); commanding 0 kW", exc)
    else:
        p_cmd = controller.tick(measurement).p_cmd_kw

    sink.send(p_cmd)
    return p_cmd


async def run_control_loop(
    controller: VoltageController,
    source: TelemetrySource,
    sink: CommandSink,
    *,
    interval_s: float = 1.0,
    stop_event: asyncio.Event | None = None,
    max_ticks: int | None = None,
    failure_policy: str = "zero",
    max_age_s: float | None = None,
    clock: Callable[[], float] = time.time,
) -> int:
    """
    Drive *controller* at a fixed nominal interval until stopped.

    Each tick runs to completion without suspending; the only await is the
    inter-tick wait on *stop_event*, so setting it ends the loop before the
    next tick.  Stops after *max_ticks* ticks when given.

    Returns the number of ticks executed.
    """
    if interval_s < 0:
        raise ValueError(f"interval_s must be >= 0, got {interval_s}")
    if failure_policy not in FAILURE_POLICIES:
        raise ValueError(
            f"Unknown telemetry failure policy '{failure_policy}'. "
            f"Choose from: {list(FAILURE_POLICIES)}"
        )
    if stop_event is None:
        stop_event = asyncio.Event()

    ticks = 0
    last_cmd = 0.0
    logger.info("Control loop started (interval %.3fs)", interval_s)

    while not stop_event.is_set() and (max_ticks is None or ticks < max_ticks):
        ticks += 1
        token = tick_id_var.set(str(ticks))
        try:
            last_cmd = _run_tick(
                controller, source, sink, failure_policy, last_cmd, max_age_s, clock
            )
        finally:
            tick_id_var.reset(token)

        if max_ticks is not None and ticks >= max_ticks:
            break
        try:
            await asyncio.wait_for(stop_event.wait(), timeout=interval_s)
        except asyncio.TimeoutError:
            continue

    logger.info("Control loop stopped after %d ticks", ticks)
    return ticks
