"""Builder for percolate query statements.

Two statement kinds are supported. Registering a stored query::

    (
        Percolate(connection)
        .insert("full text query terms")
        .into("pq")
        .tags(["tag1", "tag2"])
        .filter("price>3")
        .execute()
    )

and matching documents against the stored queries of an index::

    (
        Percolate(connection)
        .call_pq()
        .from_("pq")
        .documents([{"title": "catch me"}, {"title": "catch me if you can"}])
        .options({PercolateOption.VERBOSE: 1})
        .execute()
    )

A builder is reset after every `execute()` so it can be reused for an
unrelated request. It is not safe to share between threads.
"""

from __future__ import annotations

import copy
import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any

from pqsearch.db.client import ConnectionInterface, ResultSet
from pqsearch.db.statement import SphinxQL
from pqsearch.errors import ValidationError, ValidationErrorKind
from pqsearch.percolate.documents import render_documents
from pqsearch.percolate.escaping import escape
from pqsearch.percolate.options import (
    PercolateOption,
    default_options,
    render_options,
    validate_option,
)

logger = logging.getLogger(__name__)


class StatementMode(str, Enum):
    INSERT = "insert"
    CALL = "call"


@dataclass(frozen=True, slots=True)
class PercolateRequest:
    """Immutable snapshot of builder state."""

    mode: StatementMode = StatementMode.CALL
    index: str | None = None
    query: str | None = None
    tags: str = ""
    filter: str | None = None
    documents: Any = None
    options: Mapping[PercolateOption, int] = field(
        default_factory=lambda: MappingProxyType(default_options())
    )

    @property
    def docs_json(self) -> bool:
        return bool(self.options.get(PercolateOption.DOCS_JSON, 0))


def normalize_index(index: str | None) -> str:
    if index is None or not str(index).strip():
        raise ValidationError(ValidationErrorKind.EMPTY_INDEX, "Index can't be empty")
    return str(index).strip()


def join_tags(tags: str | Sequence[str]) -> str:
    """Escape tags; a sequence is escaped element-wise and joined with commas.

    A single string is escaped as one unit, so commas inside it are kept as
    separators without being split first.
    """

    if isinstance(tags, str):
        return escape(tags)
    return ",".join(escape(str(tag)) for tag in tags)


def check_filter(expression: str) -> str:
    segments = [segment for segment in expression.split(",") if segment]
    if len(segments) > 1:
        raise ValidationError(
            ValidationErrorKind.MULTIPLE_FILTERS,
            "Allow only one filter. If there is a comma in the text, it must be shielded",
        )
    return expression


def build_insert_fields(request: PercolateRequest) -> dict[str, Any]:
    """Return the ordered column map for `INSERT INTO <index>`."""

    fields: dict[str, Any] = {"query": request.query}
    if request.tags:
        fields["tags"] = request.tags
    if request.filter:
        fields["filters"] = request.filter
    return fields


def render_call_command(request: PercolateRequest) -> str:
    """Render `CALL PQ ('<index>', <documents>[, <value> <option>]*)`."""

    index = normalize_index(request.index)
    documents = render_documents(request.documents, docs_json=request.docs_json)
    return f"CALL PQ ('{index}', {documents}{render_options(request.options)})"


class Percolate:
    def __init__(self, connection: ConnectionInterface | None = None) -> None:
        self._connection = connection
        self.reset()

    def reset(self) -> Percolate:
        """Restore the default state: call mode, `docs_json=1`, everything else empty."""

        self._mode = StatementMode.CALL
        self._index: str | None = None
        self._query: str | None = None
        self._tags = ""
        self._filter: str | None = None
        self._documents: Any = None
        self._options: dict[PercolateOption, int] = default_options()
        return self

    @property
    def mode(self) -> StatementMode:
        return self._mode

    def snapshot(self) -> PercolateRequest:
        return PercolateRequest(
            mode=self._mode,
            index=self._index,
            query=self._query,
            tags=self._tags,
            filter=self._filter,
            documents=self._documents,
            options=MappingProxyType(dict(self._options)),
        )

    def into(self, index: str) -> Percolate:
        self._index = normalize_index(index)
        return self

    def from_(self, index: str) -> Percolate:
        return self.into(index)

    def insert(self, query: str, no_escape: bool = False) -> Percolate:
        self._query = query if no_escape else escape(query)
        self._mode = StatementMode.INSERT
        return self

    def call_pq(self) -> Percolate:
        self._mode = StatementMode.CALL
        return self

    def tags(self, tags: str | Sequence[str]) -> Percolate:
        self._tags = join_tags(tags)
        return self

    def filter(self, expression: str) -> Percolate:
        self._filter = check_filter(expression)
        return self

    def documents(self, documents: Any) -> Percolate:
        self._documents = copy.deepcopy(documents)
        return self

    def set_option(self, key: PercolateOption | str, value: Any) -> Percolate:
        option, coerced = validate_option(key, value)
        self._options[option] = coerced
        return self

    def options(self, options: Mapping[PercolateOption | str, Any]) -> Percolate:
        # Entries applied before a failing one stay applied.
        for key, value in options.items():
            self.set_option(key, value)
        return self

    def render_documents(self) -> str:
        return render_documents(self._documents, docs_json=self.snapshot().docs_json)

    def prepare(self) -> SphinxQL:
        """Assemble the statement for the current state without executing or resetting."""

        request = self.snapshot()
        statement = SphinxQL(self._connection)
        if request.mode is StatementMode.INSERT:
            statement.insert().into(normalize_index(request.index)).set(
                build_insert_fields(request)
            )
        else:
            statement.query(render_call_command(request))
        logger.debug(
            "Prepared percolate statement",
            extra={"mode": request.mode.value, "index": request.index},
        )
        return statement

    def execute(self) -> ResultSet:
        statement = self.prepare()
        # Reset happens before the server answers, so a failed call still clears state.
        self.reset()
        return statement.execute()


__all__ = [
    "Percolate",
    "PercolateRequest",
    "StatementMode",
    "build_insert_fields",
    "check_filter",
    "join_tags",
    "normalize_index",
    "render_call_command",
]
