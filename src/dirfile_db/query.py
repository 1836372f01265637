"""Flat equality-conjunction matching of documents against a query.

Every key in the query must be present in the document with a strictly equal
value. Primitives compare by JSON value (booleans never equal numbers, 1 equals
1.0). Lists and dicts only match the very same object, so a structurally equal
list parsed from another file does not match.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

_MISSING = object()


def strict_equal(a: Any, b: Any) -> bool:
    if isinstance(a, (list, dict)) or isinstance(b, (list, dict)):
        return a is b
    if isinstance(a, bool) or isinstance(b, bool):
        return type(a) is type(b) and a == b
    if isinstance(a, (int, float)) and isinstance(b, (int, float)):
        return a == b
    return type(a) is type(b) and a == b


def matches(document: Mapping[str, Any], query: Mapping[str, Any] | None) -> bool:
    """True when document satisfies every key of query. None or {} matches everything."""
    if not query:
        return True
    return all(
        strict_equal(document.get(key, _MISSING), expected)
        for key, expected in query.items()
    )
