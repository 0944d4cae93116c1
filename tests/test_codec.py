"""Tests for the JSON codec and form encoding."""

from dataclasses import dataclass
from typing import Optional

import pytest
from pydantic import BaseModel

from feignhttp.codec import Codec, JsonCodec, encode_form, get_adapter
from feignhttp.errors import DeserializationError, SerializationError


class User(BaseModel):
    id: int
    name: str
    email: Optional[str] = None


@dataclass
class Point:
    x: int
    y: int


@pytest.fixture
def codec():
    return JsonCodec()


def test_codec_satisfies_protocol(codec):
    assert isinstance(codec, Codec)
    assert codec.content_type == "application/json"


def test_serialize_dict(codec):
    assert codec.serialize({"id": 1, "name": "jack"}) == b'{"id":1,"name":"jack"}'


def test_serialize_model(codec):
    assert codec.serialize(User(id=1, name="jack"), User) == b'{"id":1,"name":"jack","email":null}'


def test_serialize_list_of_dataclasses(codec):
    assert codec.serialize([Point(1, 2)], list[Point]) == b'[{"x":1,"y":2}]'


def test_serialize_failure(codec):
    with pytest.raises(SerializationError) as exc_info:
        codec.serialize({"when": object()})
    assert exc_info.value.cause is not None


def test_deserialize_model(codec):
    user = codec.deserialize(b'{"id": 1, "name": "jack"}', User)
    assert user == User(id=1, name="jack")


def test_deserialize_container(codec):
    assert codec.deserialize(b'[{"x": 1, "y": 2}]', list[Point]) == [Point(1, 2)]


def test_deserialize_invalid_json(codec):
    with pytest.raises(DeserializationError) as exc_info:
        codec.deserialize(b"<html>oops</html>", User)
    assert exc_info.value.body == b"<html>oops</html>"
    assert exc_info.value.target_type is User


def test_deserialize_wrong_shape(codec):
    with pytest.raises(DeserializationError):
        codec.deserialize(b'{"id": "not a number", "name": "jack"}', User)


def test_adapters_are_cached():
    assert get_adapter(User) is get_adapter(User)


def test_encode_form_mapping():
    assert encode_form({"a": 1, "b": None, "c": ["x", "y"]}) == b"a=1&c=x&c=y"


def test_encode_form_model():
    assert encode_form(User(id=3, name="jill")) == b"id=3&name=jill"


def test_encode_form_rejects_scalars():
    with pytest.raises(SerializationError):
        encode_form("a=1")


def test_encode_form_rejects_nested_values():
    with pytest.raises(SerializationError):
        encode_form({"nested": {"a": 1}})
