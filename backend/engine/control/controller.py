"""
Per-tick voltage control orchestrator.

``VoltageController`` owns the configuration and the cross-tick controller
state (mode and the two integrators).  Each call to :meth:`tick` runs the
full decision pipeline for one measurement:

1. attach SOC power limits to the measurement,
2. classify the control mode from the measured voltage,
3. run the matching regulator, or reset both integrators in Normal mode,
4. return the power command for the converter.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from .config import ControllerConfig
from .modes import ControlMode, determine_mode
from .regulators import overvoltage_step, undervoltage_step
from .snapshot import Measurement, MeasurementSnapshot, build_snapshot

logger = logging.getLogger(__name__)


@dataclass
class ControllerState:
    """State carried between ticks."""

    mode: ControlMode = ControlMode.NORMAL
    integral_upper: float = 0.0  # owned by the overvoltage regulator
    integral_lower: float = 0.0  # owned by the undervoltage regulator

    def reset_integrators(self) -> None:
        self.integral_upper = 0.0
        self.integral_lower = 0.0


@dataclass(frozen=True)
class ControlDecision:
    """Outcome of one tick: active mode and signed power command (kW)."""

    mode: ControlMode
    p_cmd_kw: float
    snapshot: MeasurementSnapshot | None = None


class VoltageController:
    """Bidirectional PI voltage regulator for one storage converter.

    Parameters
    ----------
    config : ControllerConfig
        Validated configuration; never mutated by the controller.
    """

    def __init__(self, config: ControllerConfig) -> None:
        self.config: ControllerConfig = config
        self.state: ControllerState = ControllerState()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def tick(self, measurement: Measurement) -> ControlDecision:
        """Run one control cycle and return the resulting power command.

        Raises TelemetryError for a non-finite measurement; controller
        state is left untouched in that case.
        """
        measurement.validate()
        snapshot = build_snapshot(measurement, self.config)
        logger.debug(
            "Snapshot: V_meas=%.2fV, SOC=%.1f%%, P_meas=%.2fkW, "
            "P_soc_charge_limit=%.2fkW, P_soc_discharge_limit=%.2fkW",
            snapshot.v_meas,
            snapshot.soc * 100.0,
            snapshot.p_meas,
            snapshot.p_soc_charge_limit,
            snapshot.p_soc_discharge_limit,
        )

        mode = determine_mode(snapshot.v_meas, self.config)
        if mode != self.state.mode:
            logger.info("Control mode %s -> %s", self.state.mode.value, mode.value)
        self.state.mode = mode

        p_cmd = self._dispatch(mode, snapshot)

        logger.info(
            "mode=%s P_cmd=%.2fkW",
            mode.value,
            p_cmd,
            extra={
                "mode": mode.value,
                "v_meas": snapshot.v_meas,
                "soc": snapshot.soc,
                "p_meas": snapshot.p_meas,
                "p_soc_charge_limit": snapshot.p_soc_charge_limit,
                "p_soc_discharge_limit": snapshot.p_soc_discharge_limit,
                "p_cmd_kw": p_cmd,
            },
        )
        return ControlDecision(mode=mode, p_cmd_kw=p_cmd, snapshot=snapshot)

    def fail_safe(self) -> ControlDecision:
        """Drop to Normal with cleared integrators and a zero command."""
        if self.state.mode != ControlMode.NORMAL:
            logger.info(
                "Control mode %s -> %s (fail-safe)",
                self.state.mode.value,
                ControlMode.NORMAL.value,
            )
        self.reset()
        return ControlDecision(mode=ControlMode.NORMAL, p_cmd_kw=0.0)

    def reset(self) -> None:
        """Return to the startup state: Normal mode, both integrators zero."""
        self.state = ControllerState()

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _dispatch(self, mode: ControlMode, snapshot: MeasurementSnapshot) -> float:
        if mode == ControlMode.NORMAL:
            # Reset on every Normal tick so a later excursion starts clean.
            self.state.reset_integrators()
            return 0.0

        if mode == ControlMode.OVERVOLTAGE:
            out = overvoltage_step(snapshot, self.config, self.state.integral_upper)
            self.state.integral_upper = out.integral
            return out.p_cmd_kw

        if mode == ControlMode.UNDERVOLTAGE:
            out = undervoltage_step(snapshot, self.config, self.state.integral_lower)
            self.state.integral_lower = out.integral
            return out.p_cmd_kw

        return 0.0

    # ------------------------------------------------------------------
    # Dunder
    # ------------------------------------------------------------------

    def __repr__(self) -> str:
        return (
            f"VoltageController(mode={self.state.mode.value}, "
            f"integral_upper={self.state.integral_upper:.3f}, "
            f"integral_lower={self.state.integral_lower:.3f})"
        )
