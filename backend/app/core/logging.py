"""Structured JSON logging with per-tick correlation IDs."""

from __future__ import annotations

import logging
from contextvars import ContextVar
from typing import Any

tick_id_var: ContextVar[str] = ContextVar("tick_id", default="")

# Control fields passed through ``extra=`` by the engine.
_EXTRA_FIELDS = (
    "mode",
    "v_meas",
    "soc",
    "p_meas",
    "p_soc_charge_limit",
    "p_soc_discharge_limit",
    "p_cmd_kw",
)


class JSONFormatter(logging.Formatter):
    """Structured JSON log formatter with tick ID injection."""

    def format(self, record: logging.LogRecord) -> str:
        import json

        log_entry: dict[str, Any] = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        tid = tick_id_var.get("")
        if tid:
            log_entry["tick"] = tid

        if record.exc_info and record.exc_info[1]:
            log_entry["exception"] = self.formatException(record.exc_info)

        for key in _EXTRA_FIELDS:
            val = getattr(record, key, None)
            if val is not None:
                log_entry[key] = val

        return json.dumps(log_entry)


def setup_logging(json_format: bool = False, level: str | int = logging.INFO) -> None:
    """Configure root logger. Use json_format=True for production."""
    root = logging.getLogger()
    root.setLevel(level.upper() if isinstance(level, str) else level)

    handler = logging.StreamHandler()
    if json_format:
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(
            logging.Formatter(
                "%(asctime)s %(levelname)-8s [%(name)s] %(message)s",
                datefmt="%Y-%m-%d %H:%M:%S",
            )
        )

    # Remove existing handlers to avoid duplicates
    root.handlers.clear()
    root.addHandler(handler)

    # Quiet noisy libraries
    logging.getLogger("asyncio").setLevel(logging.WARNING)
