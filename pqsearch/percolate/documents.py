"""Document shape inference and literal rendering for `CALL PQ`."""

from __future__ import annotations

import json
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from enum import Enum
from typing import Any

from pqsearch.errors import ValidationError, ValidationErrorKind


class DocumentShape(str, Enum):
    SCALAR = "scalar"
    LIST = "list"
    RECORD = "record"
    RECORD_LIST = "record_list"


@dataclass(frozen=True, slots=True)
class Document:
    """A document payload tagged with its inferred shape."""

    shape: DocumentShape
    value: Any

    @classmethod
    def from_value(cls, value: Any) -> Document:
        return cls(shape=infer_shape(value), value=value)


def is_empty(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, (str, Mapping, Sequence)):
        return len(value) == 0
    return False


def infer_shape(value: Any) -> DocumentShape:
    """Classify a document payload without validating it against an encoding mode.

    A mapping keyed exactly ``0..n-1`` in order is treated as the sequence of
    its values; any other mapping is a record. Sequences whose first element
    is itself a collection are record lists, other sequences are plain lists.
    Everything else is a scalar.
    """

    if isinstance(value, Mapping) and not _is_list_like(value):
        return DocumentShape.RECORD
    if _is_collection(value):
        items = _items(value)
        if items and _is_collection(items[0]):
            return DocumentShape.RECORD_LIST
        return DocumentShape.LIST
    return DocumentShape.SCALAR


def render_documents(value: Any, *, docs_json: bool) -> str:
    """Render documents as the literal expected by `CALL PQ`."""

    if is_empty(value):
        raise ValidationError(ValidationErrorKind.EMPTY_DOCUMENTS, "Documents can't be empty")

    document = Document.from_value(value)
    if docs_json:
        return _render_json(document)
    return _render_plain(document)


def _render_json(document: Document) -> str:
    if document.shape is DocumentShape.SCALAR:
        raise ValidationError(
            ValidationErrorKind.DOCUMENTS_SHAPE_MISMATCH,
            "Option docs_json is set but documents is a string (associative array expected)",
        )
    if document.shape is DocumentShape.LIST:
        raise ValidationError(
            ValidationErrorKind.NON_ASSOCIATIVE_DOCUMENTS,
            "Documents array must be associative",
        )
    encoded = json.dumps(_to_jsonable(document.value), separators=(",", ":"))
    return f"'{encoded}'"


def _render_plain(document: Document) -> str:
    if document.shape is DocumentShape.SCALAR:
        return f"'{document.value}'"
    if document.shape is DocumentShape.LIST:
        joined = "', '".join(str(item) for item in _items(document.value))
        return f"('{joined}')"
    raise ValidationError(
        ValidationErrorKind.DOCUMENTS_SHAPE_MISMATCH,
        "Option docs_json is disabled but documents are records (strings expected)",
    )


def _is_collection(value: Any) -> bool:
    if isinstance(value, (str, bytes, bytearray)):
        return False
    return isinstance(value, (Mapping, Sequence))


def _is_list_like(mapping: Mapping[Any, Any]) -> bool:
    keys = list(mapping)
    if any(isinstance(key, bool) or not isinstance(key, int) for key in keys):
        return False
    return keys == list(range(len(keys)))


def _items(value: Any) -> list[Any]:
    if isinstance(value, Mapping):
        return list(value.values())
    return list(value)


def _to_jsonable(value: Any) -> Any:
    if isinstance(value, Mapping) and not _is_list_like(value):
        return {str(key): _to_jsonable(item) for key, item in value.items()}
    if _is_collection(value):
        return [_to_jsonable(item) for item in _items(value)]
    return value


__all__ = ["Document", "DocumentShape", "infer_shape", "is_empty", "render_documents"]
