"""Tests for response decoding."""

import inspect
from typing import Optional
from unittest.mock import Mock

import pytest
from pydantic import BaseModel

from feignhttp.decoder import decode, raise_for_status, response_spec
from feignhttp.errors import DeserializationError, HttpStatusError
from feignhttp.types import RawResponse, ResponseShape


class User(BaseModel):
    id: int
    name: str


class TestResponseSpec:
    """Test decoding strategy selection."""

    def test_str(self):
        assert response_spec(str).shape is ResponseShape.TEXT

    def test_missing_annotation_is_text(self):
        assert response_spec(inspect.Signature.empty).shape is ResponseShape.TEXT

    def test_none(self):
        assert response_spec(None).shape is ResponseShape.NONE
        assert response_spec(type(None)).shape is ResponseShape.NONE

    def test_bytes(self):
        assert response_spec(bytes).shape is ResponseShape.BYTES

    def test_raw(self):
        assert response_spec(RawResponse).shape is ResponseShape.RAW

    def test_model(self):
        spec = response_spec(User)
        assert spec.shape is ResponseShape.JSON
        assert spec.target_type is User

    def test_container(self):
        spec = response_spec(list[User])
        assert spec.shape is ResponseShape.JSON
        assert spec.target_type == list[User]

    def test_optional_text(self):
        assert response_spec(Optional[str]).shape is ResponseShape.TEXT


class TestDecode:
    """Test decoding successful and failed responses."""

    def test_text_is_unchanged(self):
        raw = RawResponse(200, (), b'{"looks": "like json"}')
        assert decode(response_spec(str), raw) == '{"looks": "like json"}'

    def test_text_uses_declared_charset(self):
        raw = RawResponse(200, (("Content-Type", "text/plain; charset=latin-1"),), "café".encode("latin-1"))
        assert decode(response_spec(str), raw) == "café"

    def test_bytes(self):
        assert decode(response_spec(bytes), RawResponse(200, (), b"\x89PNG")) == b"\x89PNG"

    def test_none(self):
        assert decode(response_spec(None), RawResponse(204)) is None

    def test_raw(self):
        raw = RawResponse(201, (("Location", "/users/1"),), b"")
        assert decode(response_spec(RawResponse), raw) is raw

    def test_structured(self):
        raw = RawResponse(200, (), b'{"id": 1, "name": "jack"}')
        assert decode(response_spec(User), raw) == User(id=1, name="jack")

    def test_structured_failure_does_not_fall_back_to_text(self):
        raw = RawResponse(200, (), b"not json")
        with pytest.raises(DeserializationError):
            decode(response_spec(User), raw)

    def test_error_status_never_reaches_codec(self):
        codec = Mock()
        raw = RawResponse(500, (), b"internal error", url="https://x.io/users")
        with pytest.raises(HttpStatusError) as exc_info:
            decode(response_spec(User), raw, codec)
        assert exc_info.value.status == 500
        assert exc_info.value.body == b"internal error"
        codec.deserialize.assert_not_called()

    def test_error_status_for_text(self):
        with pytest.raises(HttpStatusError):
            decode(response_spec(str), RawResponse(404, (), b"Not Found"))

    @pytest.mark.parametrize("status", [200, 201, 204, 299])
    def test_success_statuses(self, status):
        raise_for_status(RawResponse(status))

    @pytest.mark.parametrize("status", [101, 301, 400, 404, 503])
    def test_non_success_statuses(self, status):
        with pytest.raises(HttpStatusError):
            raise_for_status(RawResponse(status))
