"""`pq-insert` CLI entrypoint."""

from __future__ import annotations

import argparse
from collections.abc import Sequence

from pqsearch.cli import _common
from pqsearch.percolate.builder import Percolate

PROG_NAME = "pq-insert"
DESCRIPTION = "Register a stored percolate query in a Manticore index."


def build_parser() -> argparse.ArgumentParser:
    parser = _common.build_parser(prog=PROG_NAME, description=DESCRIPTION)
    parser.add_argument("query", help="Full-text query to store.")
    parser.add_argument(
        "--tag",
        dest="tags",
        action="append",
        default=[],
        help="Tag attached to the stored query (repeatable).",
    )
    parser.add_argument("--filter", help="Attribute filter expression, e.g. 'price>3'.")
    parser.add_argument(
        "--no-escape",
        action="store_true",
        help="Store the query text as-is instead of escaping special characters.",
    )
    return parser


def configure(builder: Percolate, args: argparse.Namespace) -> None:
    builder.insert(args.query, no_escape=args.no_escape)
    if args.tags:
        builder.tags(args.tags)
    if args.filter:
        builder.filter(args.filter)


def run(args: argparse.Namespace) -> int:
    return _common.run_statement(args, cli_name="insert", configure=configure)


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    return _common.run_cli(parser, argv, cli_name="insert", display_name="Insert", runner=run)


if __name__ == "__main__":  # pragma: no cover - manual execution guard
    raise SystemExit(main())


__all__ = ["build_parser", "configure", "main", "run"]
