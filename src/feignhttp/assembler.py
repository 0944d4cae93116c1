"""Header and body assembly for request plans."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from .codec import Codec, default_codec, encode_form
from .metadata import merge_headers
from .types import BodyKind, ParameterSpec
from .url import to_text

CONTENT_TYPE = "Content-Type"

DEFAULT_CONTENT_TYPES = {
    BodyKind.TEXT: "text/plain; charset=utf-8",
    BodyKind.BINARY: "application/octet-stream",
    BodyKind.FORM: "application/x-www-form-urlencoded",
}


def build_headers(
    static_headers: tuple[tuple[str, str], ...],
    header_items: Iterable[tuple[str, Any]],
) -> tuple[tuple[str, str], ...]:
    """Build request headers from static declarations and header parameters.

    Parameter values replace static headers with the same name, compared
    case-insensitively. ``None`` values are omitted.

    Raises:
        InvalidParameterValueError: If a value has no textual form
    """
    dynamic = tuple(
        (name, to_text(value, name)) for name, value in header_items if value is not None
    )
    return merge_headers(static_headers, dynamic)


def build_body(
    spec: ParameterSpec, value: Any, codec: Codec = default_codec
) -> tuple[bytes | None, str | None]:
    """Build the request body for a body parameter.

    Args:
        spec: The classified body parameter
        value: The argument value
        codec: Codec for structured bodies

    Returns:
        The body bytes and the default ``Content-Type`` for them, or
        ``(None, None)`` when the value is ``None``

    Raises:
        SerializationError: If a structured value cannot be serialized
    """
    if value is None:
        return None, None

    kind = spec.body_kind
    if kind is BodyKind.TEXT:
        return str(value).encode("utf-8"), DEFAULT_CONTENT_TYPES[kind]
    if kind is BodyKind.BINARY:
        return bytes(value), DEFAULT_CONTENT_TYPES[kind]
    if kind is BodyKind.FORM:
        return encode_form(value), DEFAULT_CONTENT_TYPES[kind]
    return codec.serialize(value, spec.declared_type), codec.content_type


def assemble(
    static_headers: tuple[tuple[str, str], ...],
    header_items: Iterable[tuple[str, Any]],
    body_spec: ParameterSpec | None,
    body_value: Any,
    codec: Codec = default_codec,
) -> tuple[tuple[tuple[str, str], ...], bytes | None]:
    """Build headers and body together.

    The body's default ``Content-Type`` is only added when no static or
    parameter header has set one already.
    """
    headers = build_headers(static_headers, header_items)
    if body_spec is None:
        return headers, None

    body, content_type = build_body(body_spec, body_value, codec)
    if content_type and not any(name.lower() == CONTENT_TYPE.lower() for name, _ in headers):
        headers = (*headers, (CONTENT_TYPE, content_type))
    return headers, body
