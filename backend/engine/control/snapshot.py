"""Per-tick measurement values handed to the controller."""

from __future__ import annotations

import math
import time
from dataclasses import dataclass

from .config import ControllerConfig
from .exceptions import TelemetryError
from .soc_limiter import soc_power_limits


@dataclass(frozen=True)
class Measurement:
    """Raw telemetry for one tick.

    ``p_meas`` follows the converter sign convention: positive = charging,
    negative = discharging.  ``timestamp`` is epoch seconds of acquisition
    and may be omitted by sources that cannot provide it.
    """

    v_meas: float  # Feeder voltage from the meter (V)
    soc: float  # Battery state of charge from the BMS (0-1)
    p_meas: float  # Present PCS active power (kW)
    timestamp: float | None = None

    def validate(self, max_age_s: float | None = None, now: float | None = None) -> None:
        """Raise TelemetryError if any value is non-finite or the sample is stale."""
        for name in ("v_meas", "soc", "p_meas"):
            value = getattr(self, name)
            if value is None or not math.isfinite(value):
                raise TelemetryError(f"{name} is not a finite number: {value!r}")

        if max_age_s is None or self.timestamp is None:
            return
        now = time.time() if now is None else now
        age = now - self.timestamp
        if age > max_age_s:
            raise TelemetryError(
                f"telemetry is stale: {age:.1f}s old (limit {max_age_s:.1f}s)"
            )


@dataclass(frozen=True)
class MeasurementSnapshot:
    """Measurement plus the SOC power limits derived from the same SOC."""

    v_meas: float
    soc: float
    p_meas: float
    p_soc_charge_limit: float
    p_soc_discharge_limit: float


def build_snapshot(measurement: Measurement, config: ControllerConfig) -> MeasurementSnapshot:
    """Attach SOC power limits to *measurement*."""
    charge_limit, discharge_limit = soc_power_limits(measurement.soc, config)
    return MeasurementSnapshot(
        v_meas=measurement.v_meas,
        soc=measurement.soc,
        p_meas=measurement.p_meas,
        p_soc_charge_limit=charge_limit,
        p_soc_discharge_limit=discharge_limit,
    )
