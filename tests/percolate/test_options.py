from __future__ import annotations

from typing import Any

import pytest
from pqsearch.errors import ValidationError, ValidationErrorKind
from pqsearch.percolate.options import (
    PercolateOption,
    coerce_option_value,
    default_options,
    render_options,
    validate_option,
)


@pytest.mark.parametrize(
    ("key", "expected"),
    [
        (PercolateOption.VERBOSE, PercolateOption.VERBOSE),
        ("as verbose", PercolateOption.VERBOSE),
        ("verbose", PercolateOption.VERBOSE),
        ("  AS   Docs_Json ", PercolateOption.DOCS_JSON),
        ("docs", PercolateOption.DOCS),
        ("as query", PercolateOption.QUERY),
    ],
)
def test_option_keys_are_normalized(key: Any, expected: PercolateOption) -> None:
    assert PercolateOption.coerce(key) is expected


@pytest.mark.parametrize(
    ("value", "expected"),
    [(0, 0), (1, 1), (True, 1), (False, 0), ("1", 1), (" 0 ", 0), (1.0, 1)],
)
def test_option_values_are_coerced(value: Any, expected: int) -> None:
    assert coerce_option_value(value) == expected


@pytest.mark.parametrize("value", [2, -1, "2", "yes", None, 3.5])
def test_invalid_option_values(value: Any) -> None:
    with pytest.raises(ValidationError) as excinfo:
        coerce_option_value(value)
    assert excinfo.value.kind is ValidationErrorKind.INVALID_OPTION_VALUE


def test_validate_option_rejects_out_of_range_value() -> None:
    with pytest.raises(ValidationError) as excinfo:
        validate_option("as verbose", 2)
    assert excinfo.value.kind is ValidationErrorKind.INVALID_OPTION_VALUE


def test_validate_option_rejects_unknown_key_before_value() -> None:
    with pytest.raises(ValidationError) as excinfo:
        validate_option("bogus", "not-a-number")
    assert excinfo.value.kind is ValidationErrorKind.UNKNOWN_OPTION


def test_default_options_enable_json_documents() -> None:
    assert default_options() == {PercolateOption.DOCS_JSON: 1}


def test_render_options_in_insertion_order() -> None:
    options = {PercolateOption.DOCS_JSON: 1, PercolateOption.VERBOSE: 0, PercolateOption.QUERY: 1}
    assert render_options(options) == ", 1 as docs_json, 0 as verbose, 1 as query"


def test_render_options_empty() -> None:
    assert render_options({}) == ""
