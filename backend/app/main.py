"""Command-line entry point: load configuration and run the voltage control loop."""

from __future__ import annotations

import argparse
import asyncio
import logging
import signal
import sys

from app.config import Settings, settings
from app.core.logging import setup_logging
from app.worker.control_loop import run_control_loop
from engine.control.config_loader import load_config
from engine.control.controller import VoltageController
from engine.control.exceptions import ConfigError
from engine.telemetry.base import CommandSink, LoggingCommandSink, TelemetrySource
from engine.telemetry.synthetic import SyntheticTelemetry

logger = logging.getLogger("app.main")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="voltctl",
        description="Bidirectional PI feeder-voltage control for an energy-storage converter.",
    )
    parser.add_argument(
        "config_path",
        nargs="?",
        default=None,
        help="controller configuration file (.csv or .json)",
    )
    parser.add_argument("--interval", dest="tick_interval_s", type=float, default=None,
                        help="seconds between control ticks")
    parser.add_argument("--ticks", dest="max_ticks", type=int, default=None,
                        help="stop after this many ticks")
    parser.add_argument("--seed", dest="telemetry_seed", type=int, default=None,
                        help="seed for the synthetic telemetry generator")
    parser.add_argument("--json-logs", dest="log_json", action="store_true", default=None,
                        help="emit structured JSON log lines")
    return parser


def resolve_settings(args: argparse.Namespace, base: Settings = settings) -> Settings:
    """Overlay explicit command-line options on the environment settings."""
    overrides = {key: value for key, value in vars(args).items() if value is not None}
    return base.model_copy(update=overrides)


async def _serve(
    controller: VoltageController,
    source: TelemetrySource,
    sink: CommandSink,
    cfg: Settings,
) -> int:
    stop_event = asyncio.Event()
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, stop_event.set)
        except (NotImplementedError, RuntimeError):
            logger.debug("Signal handler for %s not supported here", sig)

    return await run_control_loop(
        controller,
        source,
        sink,
        interval_s=cfg.tick_interval_s,
        stop_event=stop_event,
        max_ticks=cfg.max_ticks,
        failure_policy=cfg.telemetry_failure_policy,
        max_age_s=cfg.telemetry_max_age_s,
    )


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    cfg = resolve_settings(args)
    setup_logging(json_format=cfg.log_json, level=cfg.log_level)

    try:
        config = load_config(cfg.config_path)
    except ConfigError as exc:
        logger.error("Startup aborted, configuration error: %s", exc)
        return 1

    logger.info("=== %s ===", cfg.app_name)
    controller = VoltageController(config)
    source = SyntheticTelemetry(seed=cfg.telemetry_seed)
    sink = LoggingCommandSink()

    asyncio.run(_serve(controller, source, sink, cfg))
    return 0


if __name__ == "__main__":
    sys.exit(main())
