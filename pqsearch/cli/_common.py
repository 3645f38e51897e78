"""Utilities shared by CLI entrypoints."""

from __future__ import annotations

import argparse
import logging
from collections.abc import Callable, Sequence
from pathlib import Path
from typing import TYPE_CHECKING, cast

from pqsearch.config import ConfigError, load_config
from pqsearch.db.client import ExecutionError, build_connection_settings, get_connection
from pqsearch.errors import ValidationError
from pqsearch.logging import configure_logging
from pqsearch.percolate.builder import Percolate

if TYPE_CHECKING:
    from pqsearch.config import AppConfig


_LOG_LEVEL_CHOICES = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG", "NOTSET")
_LOG_FORMAT_CHOICES = ("text", "json")
_LOG_DESTINATION_CHOICES = ("auto", "stdout", "stderr")

EXIT_OK = 0
EXIT_EXECUTION_FAILED = 1
EXIT_INVALID_INPUT = 2


CliRunner = Callable[[argparse.Namespace], int]
BuilderConfigurer = Callable[[Percolate, argparse.Namespace], None]


class CLIArgs(argparse.Namespace):
    log_level: str
    log_format: str
    log_destination: str
    config: Path | None
    env_file: Path | None
    index: str | None
    dry_run: bool
    app_config: AppConfig


def build_parser(*, prog: str, description: str) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog=prog,
        description=description,
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    parser.add_argument(
        "--config",
        type=Path,
        help="Path to a TOML configuration file overriding defaults.",
    )
    parser.add_argument(
        "--env-file",
        type=Path,
        help="Optional .env file with connection settings.",
    )
    parser.add_argument(
        "--log-level",
        type=_choice_type("log level", _LOG_LEVEL_CHOICES, str.upper),
        choices=_LOG_LEVEL_CHOICES,
        default="INFO",
        help="Logging verbosity (case-insensitive).",
    )
    parser.add_argument(
        "--log-format",
        type=_choice_type("log format", _LOG_FORMAT_CHOICES, str.lower),
        choices=_LOG_FORMAT_CHOICES,
        default="text",
        help="Structured JSON or human-readable text logs.",
    )
    parser.add_argument(
        "--log-destination",
        type=_choice_type("log destination", _LOG_DESTINATION_CHOICES, str.lower),
        choices=_LOG_DESTINATION_CHOICES,
        default="auto",
        help="Write logs to stdout, stderr, or split automatically by level.",
    )
    parser.add_argument(
        "--index",
        help="Percolate index name (defaults to PQSEARCH_DEFAULT_INDEX).",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Print the compiled statement instead of sending it.",
    )
    return parser


def run_cli(
    parser: argparse.ArgumentParser,
    argv: Sequence[str] | None,
    *,
    cli_name: str,
    display_name: str,
    runner: CliRunner,
) -> int:
    args = cast(CLIArgs, parser.parse_args(argv))
    configure_logging(
        level=args.log_level,
        fmt=args.log_format,
        destination=args.log_destination,
    )
    logger = logging.getLogger(f"pqsearch.cli.{cli_name}")
    try:
        config = load_config(env_file=args.env_file, config_file=args.config)
    except ConfigError as exc:
        logger.error(
            "Configuration invalid",
            extra={"cli": cli_name, "error": str(exc)},
        )
        return EXIT_INVALID_INPUT

    args.app_config = config
    logger.info("%s CLI ready", display_name, extra={"cli": cli_name})
    return runner(args)


def run_statement(args: argparse.Namespace, *, cli_name: str, configure: BuilderConfigurer) -> int:
    """Configure a builder from parsed arguments, then print or execute its statement."""

    cli_args = cast(CLIArgs, args)
    logger = logging.getLogger(f"pqsearch.cli.{cli_name}")
    index = cli_args.index or cli_args.app_config.percolate.index
    try:
        if cli_args.dry_run:
            builder = Percolate()
            configure(builder, args)
            builder.into(index or "")
            print(builder.prepare().compile())
            return EXIT_OK

        settings = build_connection_settings(cli_args.app_config)
        with get_connection(settings) as connection:
            builder = Percolate(connection)
            configure(builder, args)
            builder.into(index or "")
            result = builder.execute()
    except ValidationError as exc:
        logger.error(
            "Invalid percolate request",
            extra={"cli": cli_name, "error": str(exc), "kind": exc.kind.value},
        )
        return EXIT_INVALID_INPUT
    except ExecutionError as exc:
        logger.error(
            "Statement failed",
            extra={"cli": cli_name, "error": str(exc), "operation": exc.operation},
        )
        return EXIT_EXECUTION_FAILED

    logger.info(
        "Statement executed",
        extra={"cli": cli_name, "rows": len(result), "affected_rows": result.affected_rows},
    )
    for row in result:
        print(row)
    return EXIT_OK


def _choice_type(label: str, choices: Sequence[str], normalize: Callable[[str], str]):
    def _convert(value: str) -> str:
        normalized = normalize(value)
        if normalized not in choices:
            raise argparse.ArgumentTypeError(
                f"Invalid {label} '{value}'. Expected one of: {', '.join(choices)}"
            )
        return normalized

    return _convert


__all__ = [
    "BuilderConfigurer",
    "CliRunner",
    "EXIT_EXECUTION_FAILED",
    "EXIT_INVALID_INPUT",
    "EXIT_OK",
    "build_parser",
    "run_cli",
    "run_statement",
]
