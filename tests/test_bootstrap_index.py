from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager

import pytest
from scripts import bootstrap_index
from tests.conftest import FailingConnection, RecordingConnection


def install_connection(monkeypatch: pytest.MonkeyPatch, connection: RecordingConnection) -> None:
    @contextmanager
    def fake_get_connection(settings: object = None) -> Iterator[RecordingConnection]:
        yield connection

    monkeypatch.setattr(bootstrap_index, "get_connection", fake_get_connection)


def test_create_statement_declares_percolate_type() -> None:
    statement = bootstrap_index.create_statement("pq", ("title text", "price float"))
    assert statement == "CREATE TABLE IF NOT EXISTS pq (title text, price float) type='pq'"


def test_create_dry_run_prints_statement(capsys: pytest.CaptureFixture[str]) -> None:
    exit_code = bootstrap_index.main(["create", "--index", "pq", "--dry-run"])

    assert exit_code == 0
    assert capsys.readouterr().out.strip() == (
        "CREATE TABLE IF NOT EXISTS pq (title text, body text, price float) type='pq'"
    )


def test_create_executes_statement(monkeypatch: pytest.MonkeyPatch) -> None:
    connection = RecordingConnection()
    install_connection(monkeypatch, connection)

    exit_code = bootstrap_index.main(["create", "--index", "pq", "--field", "title text"])

    assert exit_code == 0
    assert connection.statements == ["CREATE TABLE IF NOT EXISTS pq (title text) type='pq'"]


def test_drop_executes_statement(monkeypatch: pytest.MonkeyPatch) -> None:
    connection = RecordingConnection()
    install_connection(monkeypatch, connection)

    assert bootstrap_index.main(["drop", "--index", "pq"]) == 0
    assert connection.statements == ["DROP TABLE IF EXISTS pq"]


def test_failures_return_non_zero(monkeypatch: pytest.MonkeyPatch) -> None:
    install_connection(monkeypatch, FailingConnection())
    assert bootstrap_index.main(["drop", "--index", "pq"]) == 1


def test_invalid_index_name_is_rejected() -> None:
    assert bootstrap_index.main(["create", "--index", "pq; drop", "--dry-run"]) == 2
