"""`pq-call` CLI entrypoint."""

from __future__ import annotations

import argparse
import json
from collections.abc import Sequence
from typing import Any

from pqsearch.cli import _common
from pqsearch.percolate.builder import Percolate

PROG_NAME = "pq-call"
DESCRIPTION = "Match documents against the stored queries of a percolate index."


def build_parser() -> argparse.ArgumentParser:
    parser = _common.build_parser(prog=PROG_NAME, description=DESCRIPTION)
    documents = parser.add_mutually_exclusive_group(required=True)
    documents.add_argument(
        "--document",
        dest="documents",
        action="append",
        help="Plain-text document (repeatable); combine with --option docs_json=0.",
    )
    documents.add_argument(
        "--json",
        dest="json_documents",
        type=_json_type,
        help="JSON object or array of objects to match.",
    )
    parser.add_argument(
        "--option",
        dest="options",
        action="append",
        type=_option_type,
        default=[],
        metavar="KEY=VALUE",
        help="CALL PQ option such as verbose=1 or docs_json=0 (repeatable).",
    )
    return parser


def configure(builder: Percolate, args: argparse.Namespace) -> None:
    builder.call_pq()
    for key, value in args.options:
        builder.set_option(key, value)
    if args.json_documents is not None:
        builder.documents(args.json_documents)
    elif len(args.documents) == 1:
        builder.documents(args.documents[0])
    else:
        builder.documents(args.documents)


def run(args: argparse.Namespace) -> int:
    return _common.run_statement(args, cli_name="call", configure=configure)


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    return _common.run_cli(parser, argv, cli_name="call", display_name="Call", runner=run)


def _json_type(value: str) -> Any:
    try:
        return json.loads(value)
    except json.JSONDecodeError as exc:
        raise argparse.ArgumentTypeError(f"Invalid JSON documents: {exc}") from exc


def _option_type(value: str) -> tuple[str, str]:
    key, sep, raw = value.partition("=")
    if not sep or not key.strip():
        raise argparse.ArgumentTypeError(f"Expected KEY=VALUE, got '{value}'")
    return key.strip(), raw.strip()


if __name__ == "__main__":  # pragma: no cover - manual execution guard
    raise SystemExit(main())


__all__ = ["build_parser", "configure", "main", "run"]
