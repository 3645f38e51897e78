from __future__ import annotations

import json
import logging

import pytest


def test_configure_logging_emits_json_to_stdout(capsys: pytest.CaptureFixture[str]) -> None:
    import pqsearch.logging as pq_logging

    pq_logging.configure_logging(level="INFO", fmt="json", destination="stdout")
    logging.getLogger("test.logger").info("structured message", extra={"index": "pq"})

    captured = capsys.readouterr()
    payload = json.loads(captured.out.strip())
    assert payload["message"] == "structured message"
    assert payload["index"] == "pq"
    assert payload["level"] == "INFO"
    assert payload["logger"] == "test.logger"
    assert "timestamp" in payload


def test_configure_logging_sends_warnings_to_stderr(capsys: pytest.CaptureFixture[str]) -> None:
    import pqsearch.logging as pq_logging

    pq_logging.configure_logging(level="INFO", fmt="text", destination="auto")
    logger = logging.getLogger("split.logger")
    logger.info("info-line")
    logger.warning("warn-line")

    captured = capsys.readouterr()
    assert "info-line" in captured.out
    assert "warn-line" not in captured.out
    assert "warn-line" in captured.err


def test_long_statements_are_truncated(capsys: pytest.CaptureFixture[str]) -> None:
    import pqsearch.logging as pq_logging

    pq_logging.configure_logging(level="DEBUG", fmt="json", destination="stdout")
    statement = "CALL PQ ('pq', '" + "x" * 5_000 + "', 1 as docs_json)"
    logging.getLogger("pqsearch.db.statement").debug("Executing", extra={"statement": statement})

    payload = json.loads(capsys.readouterr().out.strip())
    assert payload["statement_truncated"] is True
    assert len(payload["statement"]) == pq_logging.MAX_STATEMENT_CHARS + 3


def test_level_falls_back_to_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    import pqsearch.logging as pq_logging

    monkeypatch.setenv("PQSEARCH_LOG_LEVEL", "warning")
    root = pq_logging.configure_logging(destination="stdout")

    assert root.level == logging.WARNING


def test_unknown_level_is_rejected() -> None:
    import pqsearch.logging as pq_logging

    with pytest.raises(ValueError):
        pq_logging.resolve_level("chatty")
