from __future__ import annotations

import argparse
import logging
import re
from collections.abc import Sequence

from pqsearch.db.client import ConnectionInterface, ExecutionError, get_connection

logger = logging.getLogger(__name__)

_IDENTIFIER_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")
DEFAULT_FIELDS = ("title text", "body text", "price float")


def main(argv: Sequence[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Create a percolate index for local use.")
    subparsers = parser.add_subparsers(dest="command", required=True)

    create_parser = subparsers.add_parser("create", help="Create the index if it is missing.")
    create_parser.add_argument("--index", required=True, help="Percolate index name.")
    create_parser.add_argument(
        "--field",
        dest="fields",
        action="append",
        help="Column definition such as 'title text' (repeatable).",
    )
    create_parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Print the statement without executing it.",
    )

    drop_parser = subparsers.add_parser("drop", help="Drop the index if it exists.")
    drop_parser.add_argument("--index", required=True, help="Percolate index name.")

    args = parser.parse_args(argv)
    logging.basicConfig(level=logging.INFO, format="%(message)s")

    if not _IDENTIFIER_RE.match(args.index):
        logger.error("Invalid index name: %s", args.index)
        return 2

    if args.command == "create":
        statement = create_statement(args.index, args.fields or DEFAULT_FIELDS)
        if args.dry_run:
            print(statement)
            return 0
        return _run(statement)
    return _run(f"DROP TABLE IF EXISTS {args.index}")


def create_statement(index: str, fields: Sequence[str]) -> str:
    columns = ", ".join(fields)
    return f"CREATE TABLE IF NOT EXISTS {index} ({columns}) type='pq'"


def _run(statement: str) -> int:
    try:
        with get_connection() as connection:
            _execute(connection, statement)
    except ExecutionError:
        logger.exception("Statement failed: %s", statement)
        return 1
    logger.info("Done: %s", statement)
    return 0


def _execute(connection: ConnectionInterface, statement: str) -> None:
    logger.info("Executing %s", statement)
    connection.query(statement)


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
