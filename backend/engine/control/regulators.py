"""
Directional PI regulators.

Each regulator is one-sided: the overvoltage regulator only ever commands
charging (>= 0 kW) and the undervoltage regulator only ever commands
discharging (<= 0 kW).  The integrator value is passed in and the updated
value returned; the caller owns it between ticks.

The integral is not clamped on its own.  Only the output passes through
the step / SOC / rating clamps, and that clamping does not feed back into
the integrator, so a long excursion can wind the integral far beyond the
usable range.
"""

from __future__ import annotations

from typing import NamedTuple

from .config import ControllerConfig
from .snapshot import MeasurementSnapshot


class RegulatorOutput(NamedTuple):
    p_cmd_kw: float
    integral: float


def overvoltage_step(
    snapshot: MeasurementSnapshot,
    config: ControllerConfig,
    integral: float,
) -> RegulatorOutput:
    """One overvoltage PI update: request extra charging on top of ``p_meas``.

    Returns the charge command, clamped to
    ``[0, min(p_soc_charge_limit, p_charge_max)]``, and the new integral.
    """
    error = max(0.0, snapshot.v_meas - config.overvoltage_threshold)

    integral += error * config.ki_upper
    p_calc = min(error * config.kp_upper + integral, config.p_step_max)

    # p_calc is the increase in charging relative to the present power.
    p_cmd = p_calc + snapshot.p_meas
    p_cmd = min(p_cmd, snapshot.p_soc_charge_limit, config.p_charge_max)
    return RegulatorOutput(max(p_cmd, 0.0), integral)


def undervoltage_step(
    snapshot: MeasurementSnapshot,
    config: ControllerConfig,
    integral: float,
) -> RegulatorOutput:
    """One undervoltage PI update: request extra discharging below ``p_meas``.

    Returns the discharge command, clamped to
    ``[-min(p_discharge_max, p_soc_discharge_limit), 0]``, and the new
    integral.
    """
    error = max(0.0, config.undervoltage_threshold - snapshot.v_meas)

    integral += error * config.ki_lower
    p_calc = min(error * config.kp_lower + integral, config.p_step_max)

    # Discharge lowers the signed power.
    p_target = snapshot.p_meas - p_calc

    capacity = min(config.p_discharge_max, snapshot.p_soc_discharge_limit)
    lower_limit = -capacity

    if p_target > 0.0:
        p_cmd = 0.0
    elif p_target < lower_limit:
        p_cmd = lower_limit
    else:
        p_cmd = p_target
    return RegulatorOutput(p_cmd, integral)
