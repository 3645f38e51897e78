from __future__ import annotations

import argparse
import logging
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any, Protocol

from pqsearch.config import AppConfig, get_config
from pqsearch.errors import PercolateError

try:  # pragma: no cover - exercised in tests via monkeypatching
    import pymysql
    from pymysql.cursors import DictCursor
except ImportError as exc:  # pragma: no cover - dependency missing at runtime
    raise RuntimeError("PyMySQL is required. Install it with `pip install PyMySQL`.") from exc

logger = logging.getLogger(__name__)


class ExecutionError(PercolateError):
    """Raised when Manticore rejects a statement or the connection fails."""

    def __init__(self, operation: str, message: str) -> None:
        super().__init__(f"{operation} failed: {message}")
        self.operation = operation


@dataclass(slots=True)
class ResultSet:
    rows: list[dict[str, Any]] = field(default_factory=list)
    columns: tuple[str, ...] = ()
    affected_rows: int = 0

    def __len__(self) -> int:
        return len(self.rows)

    def __iter__(self) -> Iterator[dict[str, Any]]:
        return iter(self.rows)


class ConnectionInterface(Protocol):
    def query(self, statement: str) -> ResultSet: ...


@dataclass(frozen=True, slots=True)
class ConnectionSettings:
    host: str
    port: int
    user: str
    password: str
    connect_timeout: int = 10
    read_timeout: int = 30


class ManticoreConnection:
    """Thin wrapper over a PyMySQL connection speaking to Manticore's SQL listener."""

    def __init__(self, raw: Any) -> None:
        self._raw = raw

    @property
    def raw(self) -> Any:
        return self._raw

    def query(self, statement: str) -> ResultSet:
        try:
            with self._raw.cursor() as cursor:
                affected = cursor.execute(statement)
                columns: tuple[str, ...] = ()
                rows: list[dict[str, Any]] = []
                if cursor.description:
                    columns = tuple(column[0] for column in cursor.description)
                    rows = list(cursor.fetchall())
        except pymysql.MySQLError as exc:
            logger.exception(
                "Statement execution failed",
                extra={"statement": statement},
            )
            raise ExecutionError("query", str(exc)) from exc
        return ResultSet(rows=rows, columns=columns, affected_rows=int(affected or 0))

    def close(self) -> None:
        self._raw.close()


def build_connection_settings(config: AppConfig) -> ConnectionSettings:
    manticore = config.manticore
    return ConnectionSettings(
        host=manticore.host,
        port=manticore.port,
        user=manticore.user,
        password=manticore.password,
    )


def connect(settings: ConnectionSettings | None = None) -> ManticoreConnection:
    """Open a new connection using explicit settings or the loaded configuration."""

    resolved = settings or build_connection_settings(get_config())
    try:
        raw = pymysql.connect(
            host=resolved.host,
            port=resolved.port,
            user=resolved.user,
            password=resolved.password,
            connect_timeout=resolved.connect_timeout,
            read_timeout=resolved.read_timeout,
            autocommit=True,
            cursorclass=DictCursor,
        )
    except pymysql.MySQLError as exc:
        logger.exception(
            "Manticore connection failed",
            extra={"host": resolved.host, "port": resolved.port},
        )
        raise ExecutionError("connect", str(exc)) from exc
    logger.info(
        "Connected to Manticore",
        extra={"host": resolved.host, "port": resolved.port, "user": _mask_user(resolved.user)},
    )
    return ManticoreConnection(raw)


@contextmanager
def get_connection(settings: ConnectionSettings | None = None) -> Iterator[ManticoreConnection]:
    """Yield a connection that is closed when the block exits."""

    connection = connect(settings)
    try:
        yield connection
    finally:
        connection.close()


def doctor(settings: ConnectionSettings | None = None) -> bool:
    """Run `SHOW STATUS` to verify the Manticore connection."""

    try:
        with get_connection(settings) as connection:
            connection.query("SHOW STATUS")
    except Exception as exc:
        print(f"Manticore connection failed: {exc}", file=sys.stderr)
        return False

    print("Manticore connection OK.", file=sys.stdout)
    return True


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Manticore connection utilities.")
    subparsers = parser.add_subparsers(dest="command")
    subparsers.add_parser("doctor", help="Validate the Manticore connection.")

    args = parser.parse_args(argv)
    if args.command == "doctor":
        return 0 if doctor() else 1

    parser.print_help()
    return 1


def _mask_user(value: str) -> str:
    if not value:
        return "<anonymous>"
    if len(value) <= 4:
        return "***"
    return f"{value[:2]}...{value[-1:]}"


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
