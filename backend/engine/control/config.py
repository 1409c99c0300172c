"""
Controller configuration: voltage band, PI gains, and power/SOC envelope.

The model is immutable for the duration of a run.  Python attribute names
are snake_case; the keys used in configuration files (``V_ref_upper``,
``Kp_lower``, ...) are accepted as field aliases.
"""

from __future__ import annotations

from pydantic import BaseModel, Field, model_validator

DEFAULT_SOC_TRANSITION_WIDTH = 0.05


class ControllerConfig(BaseModel):
    """Per-run tunables for the bidirectional voltage regulator.

    Attributes:
        v_ref_upper: Upper voltage reference in volts (e.g. 241.0).
        v_ref_lower: Lower voltage reference in volts (e.g. 198.0).
        deadband_upper: Margin above ``v_ref_upper`` before charging engages.
        deadband_lower: Margin below ``v_ref_lower`` before discharging engages.
        v_enter_lower: Undervoltage entry floor; at or below it the feeder
            is treated as in outage and no discharge is requested.
        kp_upper, ki_upper: Overvoltage PI gains.
        kp_lower, ki_lower: Undervoltage PI gains.
        p_step_max: Maximum PI power step per tick (kW).
        p_charge_max: PCS charge rating (kW).
        p_discharge_max: PCS discharge rating (kW).
        soc_max: SOC ceiling as a fraction (e.g. 0.95).
        soc_min: SOC floor as a fraction (e.g. 0.15).
        soc_transition_width: Width of the raised-cosine taper next to
            ``soc_max`` / ``soc_min``.
    """

    model_config = {"frozen": True, "populate_by_name": True, "allow_inf_nan": False}

    # Voltage settings
    v_ref_upper: float = Field(alias="V_ref_upper")
    v_ref_lower: float = Field(alias="V_ref_lower")
    deadband_upper: float = Field(alias="Deadband_upper", ge=0)
    deadband_lower: float = Field(alias="Deadband_lower", ge=0)
    v_enter_lower: float = Field(alias="V_enter_lower")

    # PI controller
    kp_upper: float = Field(alias="Kp_upper")
    ki_upper: float = Field(alias="Ki_upper")
    kp_lower: float = Field(alias="Kp_lower")
    ki_lower: float = Field(alias="Ki_lower")

    # Power limits
    p_step_max: float = Field(alias="P_step_max", ge=0)
    p_charge_max: float = Field(alias="P_charge_max", ge=0)
    p_discharge_max: float = Field(alias="P_discharge_max", ge=0)
    soc_max: float = Field(alias="SOC_max", ge=0, le=1)
    soc_min: float = Field(alias="SOC_min", ge=0, le=1)
    soc_transition_width: float = Field(
        default=DEFAULT_SOC_TRANSITION_WIDTH,
        alias="SOC_transition_width",
        gt=0,
        le=0.5,
    )

    @model_validator(mode="after")
    def _check_ordering(self) -> "ControllerConfig":
        if not self.v_ref_lower < self.v_ref_upper:
            raise ValueError(
                f"V_ref_lower ({self.v_ref_lower}) must be below "
                f"V_ref_upper ({self.v_ref_upper})"
            )
        if not self.soc_min < self.soc_max:
            raise ValueError(
                f"SOC_min ({self.soc_min}) must be below SOC_max ({self.soc_max})"
            )
        return self

    @property
    def overvoltage_threshold(self) -> float:
        """Voltage above which the overvoltage regulator engages."""
        return self.v_ref_upper + self.deadband_upper

    @property
    def undervoltage_threshold(self) -> float:
        """Voltage below which the undervoltage regulator engages."""
        return self.v_ref_lower - self.deadband_lower
