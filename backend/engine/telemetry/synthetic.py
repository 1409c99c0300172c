"""
Synthetic feeder telemetry for demonstrations and dry runs.

Voltage swings sinusoidally around 220 V (+/- 30 V, 30-step period) so
every control mode is exercised within one period.  SOC drifts with the
voltage (charging while high, discharging while low) plus a uniform random
perturbation, and the converter power follows the voltage deviation.

Not a battery model: replace with a real metering/BMS/PCS source in
production.
"""

from __future__ import annotations

import time
from typing import Callable

import numpy as np

from engine.control.snapshot import Measurement


class SyntheticTelemetry:
    """Deterministic-when-seeded telemetry generator.

    Parameters
    ----------
    base_voltage : float
        Centre of the voltage swing in volts.  Default 220.
    amplitude : float
        Peak deviation from ``base_voltage`` in volts.  Default 30.
    period_steps : int
        Samples per voltage period.  Default 30.
    initial_soc : float
        Starting SOC.  Default 0.70.
    seed : int or None
        Seed for the SOC perturbation generator.
    clock : callable
        Returns the sample timestamp (epoch seconds).
    """

    HIGH_VOLTAGE_V = 235.0
    LOW_VOLTAGE_V = 205.0
    SOC_STEP_ACTIVE = 0.02
    SOC_STEP_IDLE = 0.005
    SOC_NOISE = 0.05
    SOC_FLOOR = 0.15
    SOC_CEILING = 0.95
    POWER_PER_VOLT_KW = 2.0

    def __init__(
        self,
        base_voltage: float = 220.0,
        amplitude: float = 30.0,
        period_steps: int = 30,
        initial_soc: float = 0.70,
        seed: int | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        if period_steps <= 0:
            raise ValueError(f"period_steps must be positive, got {period_steps}")

        self.base_voltage = base_voltage
        self.amplitude = amplitude
        self.period_steps = period_steps
        self._clock = clock
        self._rng = np.random.default_rng(seed)
        self._step = 0
        self._soc = float(initial_soc)

    def read(self) -> Measurement:
        self._step += 1

        v_meas = self.base_voltage + self.amplitude * float(
            np.sin(2.0 * np.pi * self._step / self.period_steps)
        )

        if v_meas > self.HIGH_VOLTAGE_V:
            self._soc += self.SOC_STEP_ACTIVE
        elif v_meas < self.LOW_VOLTAGE_V:
            self._soc -= self.SOC_STEP_ACTIVE
        else:
            self._soc -= self.SOC_STEP_IDLE
        self._soc += float(self._rng.uniform(-self.SOC_NOISE, self.SOC_NOISE))
        self._soc = float(np.clip(self._soc, self.SOC_FLOOR, self.SOC_CEILING))

        p_meas = (v_meas - self.base_voltage) * self.POWER_PER_VOLT_KW
        return Measurement(
            v_meas=v_meas,
            soc=self._soc,
            p_meas=p_meas,
            timestamp=self._clock(),
        )

    @property
    def step(self) -> int:
        """Number of samples produced so far."""
        return self._step
