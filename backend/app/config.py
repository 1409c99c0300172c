from typing import Literal

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    model_config = {"env_prefix": "VOLTCTL_", "case_sensitive": False}

    # App
    app_name: str = "Feeder Voltage Control"
    log_level: str = "INFO"
    log_json: bool = False

    # Controller configuration file (.csv or .json)
    config_path: str = "config.json"

    # Loop cadence
    tick_interval_s: float = 1.0
    max_ticks: int | None = None  # None = run until stopped

    # Telemetry
    telemetry_seed: int | None = None
    telemetry_max_age_s: float | None = 5.0
    telemetry_failure_policy: Literal["zero", "hold"] = "zero"


settings = Settings()
