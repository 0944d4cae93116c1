"""Serialization of request bodies and deserialization of responses.

JSON handling is delegated to pydantic's ``TypeAdapter``, which covers
models, dataclasses, typed dicts, containers and plain JSON values with one
code path. Adapters are built once per type and cached.
"""

from __future__ import annotations

import dataclasses
import functools
from collections.abc import Mapping
from typing import Any, Protocol, runtime_checkable
from urllib.parse import urlencode

from pydantic import BaseModel, TypeAdapter, ValidationError
from pydantic_core import PydanticSerializationError

from .errors import DeserializationError, InvalidParameterValueError, SerializationError
from .url import to_text


@runtime_checkable
class Codec(Protocol):
    """Protocol for structured payload codecs."""

    content_type: str

    def serialize(self, value: Any, declared_type: Any = Any) -> bytes:
        """Encode a value into bytes."""
        ...

    def deserialize(self, data: bytes, target_type: Any) -> Any:
        """Decode bytes into an instance of ``target_type``."""
        ...


@functools.lru_cache(maxsize=256)
def _cached_adapter(target_type: Any) -> TypeAdapter:
    return TypeAdapter(target_type)


def get_adapter(target_type: Any) -> TypeAdapter:
    """Get a TypeAdapter for a type, cached when the type is hashable."""
    try:
        return _cached_adapter(target_type)
    except TypeError:
        # Unhashable type hint
        return TypeAdapter(target_type)


class JsonCodec:
    """JSON codec backed by pydantic.

    Example:
        >>> codec = JsonCodec()
        >>> codec.serialize({"id": 1, "name": "jack"})
        b'{"id":1,"name":"jack"}'
        >>> codec.deserialize(b'{"id":1,"name":"jack"}', dict[str, Any])
        {'id': 1, 'name': 'jack'}
    """

    content_type = "application/json"

    def serialize(self, value: Any, declared_type: Any = Any) -> bytes:
        """Serialize a value to JSON bytes.

        Args:
            value: The value to serialize
            declared_type: The declared parameter type; ``Any`` infers from the value

        Raises:
            SerializationError: If the value cannot be represented as JSON
        """
        try:
            return get_adapter(declared_type).dump_json(value)
        except (PydanticSerializationError, ValidationError, ValueError, TypeError) as e:
            raise SerializationError(
                f"cannot serialize {type(value).__name__} as JSON: {e}", cause=e
            ) from e

    def deserialize(self, data: bytes, target_type: Any) -> Any:
        """Deserialize JSON bytes into ``target_type``.

        Raises:
            DeserializationError: If the body is not valid JSON for the type
        """
        try:
            return get_adapter(target_type).validate_json(data)
        except (ValidationError, ValueError, TypeError) as e:
            type_name = getattr(target_type, "__name__", str(target_type))
            raise DeserializationError(
                f"cannot decode response as {type_name}: {e}",
                target_type=target_type,
                body=data,
                cause=e,
            ) from e


def form_items(value: Any) -> list[tuple[str, Any]]:
    """Flatten a mapping, model or dataclass into form fields."""
    if isinstance(value, BaseModel):
        value = value.model_dump(mode="json", by_alias=True, exclude_none=True)
    elif dataclasses.is_dataclass(value) and not isinstance(value, type):
        value = dataclasses.asdict(value)
    if not isinstance(value, Mapping):
        raise SerializationError(f"cannot encode {type(value).__name__} as a form")
    return list(value.items())


def encode_form(value: Any) -> bytes:
    """Encode a form body as ``application/x-www-form-urlencoded``.

    ``None`` fields are dropped and sequences repeat their key.

    Raises:
        SerializationError: If the value or one of its fields cannot be encoded
    """
    pairs = []
    for name, field_value in form_items(value):
        if field_value is None:
            continue
        values = field_value if isinstance(field_value, (list, tuple)) else [field_value]
        for item in values:
            try:
                pairs.append((str(name), to_text(item, str(name))))
            except InvalidParameterValueError as e:
                raise SerializationError(f"cannot encode form field '{name}': {e}", cause=e) from e
    return urlencode(pairs).encode("ascii")


default_codec = JsonCodec()
