"""URL building: path substitution and query strings."""

from __future__ import annotations

import datetime
import decimal
import enum
import uuid
from collections.abc import Iterable, Mapping
from typing import Any
from urllib.parse import quote

from .analyzer import PLACEHOLDER_PATTERN
from .errors import InvalidParameterValueError, InvalidPathValueError

SCALAR_TYPES = (str, int, float, decimal.Decimal, uuid.UUID)
TEMPORAL_TYPES = (datetime.date, datetime.time)


def to_text(value: Any, parameter: str | None = None, error=InvalidParameterValueError) -> str:
    """Render a scalar value in its textual form.

    Booleans render lowercase, enums by their value and dates in ISO form.

    >>> to_text(True)
    'true'
    >>> to_text(5)
    '5'

    Raises:
        InvalidParameterValueError: For structured values and ``None``
    """
    if value is None:
        raise error(f"parameter '{parameter}' has no value", parameter, value)
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, enum.Enum):
        return to_text(value.value, parameter, error)
    if isinstance(value, SCALAR_TYPES):
        return str(value)
    if isinstance(value, TEMPORAL_TYPES):
        return value.isoformat()
    if isinstance(value, (bytes, bytearray)):
        try:
            return bytes(value).decode("utf-8")
        except UnicodeDecodeError as e:
            raise error(f"parameter '{parameter}' is not valid UTF-8", parameter, value) from e
    raise error(
        f"parameter '{parameter}' of type {type(value).__name__} has no textual form",
        parameter,
        value,
    )


def encode(text: str) -> str:
    """Percent-encode text, leaving only unreserved characters as is."""
    return quote(text, safe="")


def substitute_path(template: str, path_values: Mapping[str, Any]) -> str:
    """Replace every ``{name}`` in ``template`` with its encoded value.

    Raises:
        InvalidPathValueError: If a value is missing or structured
    """

    def replace(match):
        name = match.group(1)
        if name not in path_values:
            raise InvalidPathValueError(f"no value for path parameter '{name}'", name)
        return encode(to_text(path_values[name], name, InvalidPathValueError))

    return PLACEHOLDER_PATTERN.sub(replace, template)


def build_query(query_items: Iterable[tuple[str, Any]]) -> str:
    """Build a query string from ``(name, value)`` pairs, keeping their order.

    ``None`` values are omitted. Lists and tuples repeat the name once per
    element, skipping ``None`` elements.
    """
    parts = []
    for name, value in query_items:
        if value is None:
            continue
        if isinstance(value, (list, tuple)):
            values = [item for item in value if item is not None]
        else:
            values = [value]
        for item in values:
            parts.append(f"{encode(name)}={encode(to_text(item, name))}")
    return "&".join(parts)


def build_url(
    template: str,
    path_values: Mapping[str, Any],
    query_items: Iterable[tuple[str, Any]] = (),
) -> str:
    """Build the final request URL.

    Args:
        template: The URL template with ``{placeholders}``
        path_values: Values for the placeholders, by effective name
        query_items: Query parameters as ``(name, value)`` in declaration order

    Returns:
        The resolved URL; no ``?`` is added when there is no query

    Example:
        >>> build_url(
        ...     "https://api.github.com/repos/{owner}/{repo}",
        ...     {"owner": "dxx", "repo": "feignhttp"},
        ...     [("page", 1), ("per_page", 5)],
        ... )
        'https://api.github.com/repos/dxx/feignhttp?page=1&per_page=5'
    """
    url = substitute_path(template, path_values)
    query = build_query(query_items)
    if not query:
        return url
    base, sep, fragment = url.partition("#")
    joiner = "&" if "?" in base else "?"
    if base.endswith(("?", "&")):
        joiner = ""
    return f"{base}{joiner}{query}{sep}{fragment}"
