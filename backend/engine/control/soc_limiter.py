"""
State-of-charge power envelope.

Maps the battery SOC to the charge and discharge power the converter may
currently use.  Near ``soc_max`` the charge ceiling and near ``soc_min``
the discharge ceiling fall to zero along a raised-cosine curve, so the
commanded power never steps as SOC crosses a limit:

    charge factor    = 0.5 * (1 + cos(pi * x)),  x = (soc - (soc_max - w)) / w
    discharge factor = 0.5 * (1 - cos(pi * x)),  x = (soc - soc_min) / w

Both curves are C1-continuous at the band edges.
"""

from __future__ import annotations

import numpy as np

from .config import DEFAULT_SOC_TRANSITION_WIDTH, ControllerConfig


def charge_factor(
    soc: float, soc_max: float, width: float = DEFAULT_SOC_TRANSITION_WIDTH
) -> float:
    """Fraction of rated charge power allowed at *soc* (1 -> 0 towards soc_max)."""
    if soc >= soc_max:
        return 0.0
    if soc <= soc_max - width:
        return 1.0
    x = (soc - (soc_max - width)) / width
    return float(0.5 * (1.0 + np.cos(np.pi * x)))


def discharge_factor(
    soc: float, soc_min: float, width: float = DEFAULT_SOC_TRANSITION_WIDTH
) -> float:
    """Fraction of rated discharge power allowed at *soc* (0 -> 1 above soc_min)."""
    if soc <= soc_min:
        return 0.0
    if soc >= soc_min + width:
        return 1.0
    x = (soc - soc_min) / width
    return float(0.5 * (1.0 - np.cos(np.pi * x)))


def soc_power_limits(soc: float, config: ControllerConfig) -> tuple[float, float]:
    """Dynamic power ceilings for the given SOC.

    Parameters
    ----------
    soc : float
        State of charge as a fraction.  Values outside [0, 1] fall into
        the boundary branches and are not rejected.
    config : ControllerConfig
        Supplies ``p_charge_max``, ``p_discharge_max``, ``soc_max``,
        ``soc_min`` and ``soc_transition_width``.

    Returns
    -------
    tuple[float, float]
        ``(charge_limit_kw, discharge_limit_kw)``, both >= 0.
    """
    width = config.soc_transition_width
    charge_limit = config.p_charge_max * charge_factor(soc, config.soc_max, width)
    discharge_limit = config.p_discharge_max * discharge_factor(soc, config.soc_min, width)
    return max(charge_limit, 0.0), max(discharge_limit, 0.0)
