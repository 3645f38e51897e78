"""Percolate query statement building."""

from __future__ import annotations

from pqsearch.percolate.builder import Percolate, PercolateRequest, StatementMode
from pqsearch.percolate.documents import Document, DocumentShape, infer_shape, render_documents
from pqsearch.percolate.escaping import escape
from pqsearch.percolate.options import PercolateOption

__all__ = [
    "Document",
    "DocumentShape",
    "Percolate",
    "PercolateOption",
    "PercolateRequest",
    "StatementMode",
    "escape",
    "infer_shape",
    "render_documents",
]
