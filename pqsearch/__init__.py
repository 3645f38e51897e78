"""Percolate query builders for Manticore Search."""

from __future__ import annotations

from pqsearch.errors import PercolateError, ValidationError, ValidationErrorKind
from pqsearch.percolate import Percolate, PercolateOption

__all__ = [
    "Percolate",
    "PercolateError",
    "PercolateOption",
    "ValidationError",
    "ValidationErrorKind",
]
