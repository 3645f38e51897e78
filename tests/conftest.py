from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from typing import Any
from uuid import uuid4

import pqsearch.config as app_config
import pytest
from pqsearch.db.client import ExecutionError, ResultSet, connect


class RecordingConnection:
    """Stands in for a Manticore connection and remembers every statement."""

    def __init__(self, responses: Iterable[ResultSet] | None = None) -> None:
        self._responses = list(responses or [])
        self.statements: list[str] = []

    def query(self, statement: str) -> ResultSet:
        self.statements.append(statement)
        if self._responses:
            return self._responses.pop(0)
        return ResultSet()


class FailingConnection(RecordingConnection):
    def query(self, statement: str) -> ResultSet:
        super().query(statement)
        raise ExecutionError("query", "boom")


@pytest.fixture()
def recording_connection() -> RecordingConnection:
    return RecordingConnection()


@pytest.fixture()
def failing_connection() -> FailingConnection:
    return FailingConnection()


@dataclass(slots=True)
class ManticoreTestContext:
    connection: Any
    index: str
    _created: list[str] = field(default_factory=list)

    def cleanup(self) -> None:
        for index in self._created:
            self.connection.query(f"DROP TABLE IF EXISTS {index}")


@pytest.fixture()
def manticore_index() -> Iterator[ManticoreTestContext]:
    from scripts import bootstrap_index

    try:
        config = app_config.load_config()
    except app_config.ConfigError as exc:  # pragma: no cover - depends on local settings
        pytest.skip(f"Manticore tests skipped: {exc}")
    app_config._CONFIG_CACHE = config

    try:
        connection = connect()
    except ExecutionError as exc:
        pytest.skip(f"Manticore tests skipped: server unreachable ({exc}).")

    index = f"pqsearch_test_{uuid4().hex[:8]}"
    context = ManticoreTestContext(connection=connection, index=index)
    try:
        connection.query(bootstrap_index.create_statement(index, ("title text",)))
        context._created.append(index)
        yield context
    finally:
        context.cleanup()
        connection.close()
        app_config._CONFIG_CACHE = None
