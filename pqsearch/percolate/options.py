"""Options accepted by `CALL PQ`."""

from __future__ import annotations

from collections.abc import Mapping
from enum import Enum
from typing import Any

from pqsearch.errors import ValidationError, ValidationErrorKind


class PercolateOption(str, Enum):
    DOCS_JSON = "as docs_json"
    DOCS = "as docs"
    VERBOSE = "as verbose"
    QUERY = "as query"

    @property
    def short_name(self) -> str:
        return self.value.removeprefix("as ")

    @classmethod
    def coerce(cls, value: PercolateOption | str) -> PercolateOption:
        """Resolve a member from itself, its keyword (`as verbose`) or its short name."""

        if isinstance(value, cls):
            return value
        normalized = " ".join(str(value).strip().lower().split())
        for member in cls:
            if normalized in (member.value, member.short_name):
                return member
        raise ValidationError(ValidationErrorKind.UNKNOWN_OPTION, f"Unknown option: {value!r}")


def default_options() -> dict[PercolateOption, int]:
    return {PercolateOption.DOCS_JSON: 1}


def coerce_option_value(value: Any) -> int:
    try:
        if isinstance(value, str):
            coerced = int(value.strip())
        else:
            coerced = int(value)
    except (TypeError, ValueError) as exc:
        raise ValidationError(
            ValidationErrorKind.INVALID_OPTION_VALUE,
            f"Option value can be only 1 or 0, got {value!r}",
        ) from exc
    if coerced not in (0, 1):
        raise ValidationError(
            ValidationErrorKind.INVALID_OPTION_VALUE,
            f"Option value can be only 1 or 0, got {value!r}",
        )
    return coerced


def validate_option(key: PercolateOption | str, value: Any) -> tuple[PercolateOption, int]:
    """Return the normalized `(option, value)` pair or raise `ValidationError`."""

    return PercolateOption.coerce(key), coerce_option_value(value)


def render_options(options: Mapping[PercolateOption, int]) -> str:
    """Render the trailing `, <value> <keyword>` segments in insertion order."""

    return "".join(f", {value} {option.value}" for option, value in options.items())


__all__ = [
    "PercolateOption",
    "coerce_option_value",
    "default_options",
    "render_options",
    "validate_option",
]
