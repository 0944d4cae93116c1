"""Tests for header and body assembly."""

from dataclasses import dataclass
from typing import Any

import pytest
from pydantic import BaseModel

from feignhttp.assembler import assemble, build_body, build_headers
from feignhttp.codec import JsonCodec
from feignhttp.errors import InvalidParameterValueError, SerializationError
from feignhttp.types import BodyKind, ParameterSpec, Role


class User(BaseModel):
    id: int
    name: str


@dataclass
class Note:
    title: str
    tags: list[str]


def body_spec(kind: BodyKind, declared_type: Any = Any) -> ParameterSpec:
    return ParameterSpec("body", Role.BODY, declared_type, body_kind=kind)


class TestHeaders:
    """Test header assembly."""

    def test_header_parameters(self):
        headers = build_headers((), [("Accept", "application/vnd.github.v3+json")])
        assert headers == (("Accept", "application/vnd.github.v3+json"),)

    def test_values_are_rendered_as_text(self):
        assert build_headers((), [("X-Page", 3), ("X-Debug", True)]) == (
            ("X-Page", "3"),
            ("X-Debug", "true"),
        )

    def test_none_is_omitted(self):
        assert build_headers((), [("Authorization", None)]) == ()

    def test_parameter_overrides_static_header(self):
        headers = build_headers((("Accept", "*/*"), ("X-Client", "feign")), [("accept", "text/plain")])
        assert headers == (("X-Client", "feign"), ("accept", "text/plain"))

    def test_structured_value_is_rejected(self):
        with pytest.raises(InvalidParameterValueError):
            build_headers((), [("X-Filter", {"a": 1})])


class TestBody:
    """Test body construction."""

    def test_text_is_verbatim(self):
        text = "hello, wörld {not json}"
        body, content_type = build_body(body_spec(BodyKind.TEXT, str), text)
        assert body == text.encode("utf-8")
        assert content_type == "text/plain; charset=utf-8"

    def test_binary_is_verbatim(self):
        body, content_type = build_body(body_spec(BodyKind.BINARY, bytes), b"\x00\x01")
        assert body == b"\x00\x01"
        assert content_type == "application/octet-stream"

    def test_structured_uses_codec(self):
        value = {"id": 1, "name": "jack"}
        body, content_type = build_body(body_spec(BodyKind.JSON), value)
        assert body == JsonCodec().serialize(value)
        assert body == b'{"id":1,"name":"jack"}'
        assert content_type == "application/json"

    def test_model(self):
        body, _ = build_body(body_spec(BodyKind.JSON, User), User(id=1, name="jack"))
        assert body == b'{"id":1,"name":"jack"}'

    def test_dataclass(self):
        body, _ = build_body(body_spec(BodyKind.JSON, Note), Note("todo", ["a"]))
        assert body == b'{"title":"todo","tags":["a"]}'

    def test_form(self):
        body, content_type = build_body(body_spec(BodyKind.FORM), {"user": "jack", "q": "a b"})
        assert body == b"user=jack&q=a+b"
        assert content_type == "application/x-www-form-urlencoded"

    def test_none_means_no_body(self):
        assert build_body(body_spec(BodyKind.JSON), None) == (None, None)

    def test_unserializable(self):
        with pytest.raises(SerializationError):
            build_body(body_spec(BodyKind.JSON), object())


class TestAssemble:
    """Test headers and body together."""

    def test_default_content_type_is_added(self):
        headers, body = assemble((), [], body_spec(BodyKind.TEXT, str), "hi")
        assert headers == (("Content-Type", "text/plain; charset=utf-8"),)
        assert body == b"hi"

    def test_explicit_content_type_wins(self):
        headers, body = assemble(
            (), [("Content-Type", "text/markdown")], body_spec(BodyKind.TEXT, str), "# hi"
        )
        assert headers == (("Content-Type", "text/markdown"),)
        assert body == b"# hi"

    def test_static_content_type_wins(self):
        headers, _ = assemble(
            (("content-type", "application/merge-patch+json"),),
            [],
            body_spec(BodyKind.JSON),
            {"a": 1},
        )
        assert [name.lower() for name, _ in headers] == ["content-type"]

    def test_no_body_parameter(self):
        headers, body = assemble((("Accept", "*/*"),), [], None, None)
        assert headers == (("Accept", "*/*"),)
        assert body is None

    def test_none_body_has_no_content_type(self):
        headers, body = assemble((), [], body_spec(BodyKind.JSON), None)
        assert headers == ()
        assert body is None
