"""A small statement builder for the Manticore SQL dialect."""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from enum import Enum
from typing import Any

from pymysql.converters import escape_string

from pqsearch.db.client import ConnectionInterface, ResultSet
from pqsearch.errors import PercolateError

logger = logging.getLogger(__name__)


class StatementError(PercolateError):
    """Raised when a statement is compiled or executed in an incomplete state."""


class Expression:
    """Text inserted into a compiled statement verbatim, without quoting."""

    __slots__ = ("_text",)

    def __init__(self, text: str = "") -> None:
        self._text = text

    def value(self) -> str:
        return str(self._text)

    def __str__(self) -> str:
        return self.value()

    def __repr__(self) -> str:
        return f"Expression({self._text!r})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Expression):
            return NotImplemented
        return self.value() == other.value()

    def __hash__(self) -> int:
        return hash(self.value())


class StatementType(str, Enum):
    INSERT = "insert"
    QUERY = "query"


def quote_value(value: Any) -> str:
    """Render a Python value as a SQL literal."""

    if isinstance(value, Expression):
        return value.value()
    if value is None:
        return "NULL"
    if isinstance(value, bool):
        return "1" if value else "0"
    if isinstance(value, (int, float)):
        return repr(value)
    if isinstance(value, str):
        return f"'{escape_string(value)}'"
    if isinstance(value, Sequence) and not isinstance(value, (bytes, bytearray)):
        return "(" + ", ".join(quote_value(item) for item in value) + ")"
    raise StatementError(f"Unsupported value type for SQL literal: {type(value).__name__}")


class SphinxQL:
    """Fluent builder for the statements the percolate builder needs.

    Only two statement kinds are supported: ``INSERT INTO ... VALUES`` built
    from a column map, and raw query text passed through unchanged.
    """

    def __init__(self, connection: ConnectionInterface | None = None) -> None:
        self._connection = connection
        self._type: StatementType | None = None
        self._index: str | None = None
        self._fields: dict[str, Any] = {}
        self._raw: str | None = None

    @property
    def statement_type(self) -> StatementType | None:
        return self._type

    def insert(self) -> SphinxQL:
        self._type = StatementType.INSERT
        return self

    def into(self, index: str) -> SphinxQL:
        self._index = index
        return self

    def set(self, fields: Mapping[str, Any]) -> SphinxQL:
        self._fields = dict(fields)
        return self

    def query(self, text: str) -> SphinxQL:
        self._type = StatementType.QUERY
        self._raw = text
        return self

    def compile(self) -> str:
        if self._type is StatementType.QUERY:
            if not self._raw:
                raise StatementError("Raw query text is empty")
            return self._raw
        if self._type is StatementType.INSERT:
            return self._compile_insert()
        raise StatementError("Statement type not set; call insert() or query() first")

    def execute(self) -> ResultSet:
        if self._connection is None:
            raise StatementError("No connection configured for statement execution")
        statement = self.compile()
        logger.debug("Executing statement", extra={"statement": statement})
        return self._connection.query(statement)

    def _compile_insert(self) -> str:
        if not self._index:
            raise StatementError("INSERT requires a target index")
        if not self._fields:
            raise StatementError("INSERT requires at least one column")
        columns = ", ".join(self._fields)
        values = ", ".join(quote_value(value) for value in self._fields.values())
        return f"INSERT INTO {self._index} ({columns}) VALUES ({values})"


__all__ = ["Expression", "SphinxQL", "StatementError", "StatementType", "quote_value"]
