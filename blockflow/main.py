"""
Command line entry point.

Loads configuration, configures logging, and prints the analysis of a
snapshot file as JSON.
"""

from __future__ import annotations

import argparse
import logging
import sys

import structlog
import yaml

from .config import EngineConfig, get_settings, load_config
from .engine import analyze, load_snapshot
from .metrics import MetricsCollector


def level_number(level: str) -> int:
    """Map a level name such as ``"info"`` to its numeric value."""
    value = logging.getLevelName(level.upper())
    if not isinstance(value, int):
        raise ValueError(f"Unknown log level: {level}")
    return value


def configure_logging(level: str = "info", fmt: str = "json") -> None:
    """Configure structlog with the specified level and format.

    Log lines go to stderr so stdout stays valid JSON.
    """
    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
    ]
    if fmt == "json":
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer())

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(
            level_number(level)
        ),
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="blockflow", description="Block/task flow analysis")
    sub = parser.add_subparsers(dest="command", required=True)

    p_analyze = sub.add_parser("analyze", help="Analyze a workspace snapshot (JSON or YAML)")
    p_analyze.add_argument("snapshot", help="Path to the snapshot file")
    p_analyze.add_argument(
        "-c", "--config",
        default=None,
        help="Path to configuration file (default: $BLOCKFLOW_CONFIG_PATH)",
    )
    p_analyze.add_argument("--indent", type=int, default=None, help="Pretty-print JSON output")
    p_analyze.add_argument(
        "--metrics",
        action="store_true",
        help="Write Prometheus metrics to stderr after the run",
    )
    return parser


def run(argv: list[str] | None = None) -> None:
    """CLI entry point."""
    args = build_parser().parse_args(argv)
    settings = get_settings()

    config_path = args.config or settings.config_path
    try:
        config = load_config(config_path) if config_path else EngineConfig()
    except FileNotFoundError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        sys.exit(1)
    except Exception as exc:
        print(f"Configuration error: {exc}", file=sys.stderr)
        sys.exit(1)

    try:
        configure_logging(
            settings.log_level or config.logging.level,
            settings.log_format or config.logging.format,
        )
    except ValueError as exc:
        print(f"Configuration error: {exc}", file=sys.stderr)
        sys.exit(1)
    log = structlog.get_logger()
    log.info("cli.config_loaded", config_path=config_path)

    try:
        snapshot = load_snapshot(args.snapshot)
    except FileNotFoundError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        sys.exit(1)
    except (ValueError, yaml.YAMLError) as exc:
        print(f"Snapshot error: {exc}", file=sys.stderr)
        sys.exit(1)

    metrics = MetricsCollector() if args.metrics else None
    result = analyze(snapshot, config, metrics)
    print(result.model_dump_json(indent=args.indent))

    if metrics is not None:
        sys.stderr.write(metrics.to_prometheus())


if __name__ == "__main__":
    run()
