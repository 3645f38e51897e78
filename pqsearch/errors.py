"""Exceptions shared across pqsearch."""

from __future__ import annotations

from enum import Enum


class PercolateError(RuntimeError):
    """Base class for errors raised by pqsearch."""


class ValidationErrorKind(str, Enum):
    EMPTY_INDEX = "empty_index"
    MULTIPLE_FILTERS = "multiple_filters"
    UNKNOWN_OPTION = "unknown_option"
    INVALID_OPTION_VALUE = "invalid_option_value"
    EMPTY_DOCUMENTS = "empty_documents"
    DOCUMENTS_SHAPE_MISMATCH = "documents_shape_mismatch"
    NON_ASSOCIATIVE_DOCUMENTS = "non_associative_documents"


class ValidationError(PercolateError):
    """Raised when caller input violates a percolate statement constraint."""

    def __init__(self, kind: ValidationErrorKind, message: str) -> None:
        super().__init__(message)
        self.kind = kind


__all__ = ["PercolateError", "ValidationError", "ValidationErrorKind"]
