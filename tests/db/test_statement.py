from __future__ import annotations

from typing import Any

import pytest
from pqsearch.db.client import ResultSet
from pqsearch.db.statement import Expression, SphinxQL, StatementError, quote_value
from tests.conftest import RecordingConnection


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        (None, "NULL"),
        (True, "1"),
        (False, "0"),
        (3, "3"),
        (1.5, "1.5"),
        ("plain", "'plain'"),
        ("it's", "'it\\'s'"),
        ("line\nbreak", "'line\\nbreak'"),
        (Expression("NOW()"), "NOW()"),
        (["a", 1], "('a', 1)"),
    ],
)
def test_quote_value(value: Any, expected: str) -> None:
    assert quote_value(value) == expected


def test_quote_value_rejects_unknown_types() -> None:
    with pytest.raises(StatementError):
        quote_value(object())


def test_expression_is_transparent() -> None:
    expression = Expression("price>3")
    assert str(expression) == "price>3"
    assert expression == Expression("price>3")
    assert expression != Expression("price>4")


def test_insert_compiles_columns_in_order() -> None:
    statement = SphinxQL().insert().into("pq").set({"query": "hello", "tags": "a,b", "id": 7})
    assert statement.compile() == "INSERT INTO pq (query, tags, id) VALUES ('hello', 'a,b', 7)"


def test_insert_keeps_expressions_unquoted() -> None:
    statement = SphinxQL().insert().into("pq").set({"query": Expression("'raw'")})
    assert statement.compile() == "INSERT INTO pq (query) VALUES ('raw')"


def test_raw_query_is_passed_through() -> None:
    assert SphinxQL().query("SHOW TABLES").compile() == "SHOW TABLES"


@pytest.mark.parametrize(
    "statement",
    [
        SphinxQL(),
        SphinxQL().insert().set({"query": "x"}),
        SphinxQL().insert().into("pq"),
        SphinxQL().query(""),
    ],
)
def test_incomplete_statements_do_not_compile(statement: SphinxQL) -> None:
    with pytest.raises(StatementError):
        statement.compile()


def test_execute_requires_connection() -> None:
    with pytest.raises(StatementError):
        SphinxQL().query("SHOW TABLES").execute()


def test_execute_delegates_to_connection() -> None:
    expected = ResultSet(rows=[{"id": 1}], columns=("id",))
    connection = RecordingConnection(responses=[expected])

    result = SphinxQL(connection).query("CALL PQ ('pq', 'x', 0 as docs_json)").execute()

    assert result is expected
    assert connection.statements == ["CALL PQ ('pq', 'x', 0 as docs_json)"]
