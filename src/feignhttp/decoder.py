"""Response decoding driven by an endpoint's return annotation."""

from __future__ import annotations

import inspect
import logging
from typing import Any

from .analyzer import get_optional_inner, split_annotation
from .codec import Codec, default_codec
from .errors import HttpStatusError
from .types import RawResponse, ResponseShape, ResponseSpec

logger = logging.getLogger(__name__)


def response_spec(return_annotation: Any) -> ResponseSpec:
    """Derive the decoding strategy from a return annotation.

    ``str`` or a missing annotation returns the text unchanged, ``bytes``
    the raw content, ``None`` nothing, ``RawResponse`` the response itself.
    Every other type is decoded from JSON.
    """
    if return_annotation is inspect.Signature.empty:
        return ResponseSpec(ResponseShape.TEXT, str)
    if return_annotation is None or return_annotation is type(None):
        return ResponseSpec(ResponseShape.NONE)

    target, _ = split_annotation(return_annotation, "return", "return")
    bare = get_optional_inner(target)
    if bare is str:
        return ResponseSpec(ResponseShape.TEXT, str)
    if bare is bytes:
        return ResponseSpec(ResponseShape.BYTES, bytes)
    if bare is RawResponse:
        return ResponseSpec(ResponseShape.RAW, RawResponse)
    return ResponseSpec(ResponseShape.JSON, target)


def raise_for_status(response: RawResponse) -> None:
    """Raise ``HttpStatusError`` unless the response status is 2xx."""
    if not response.is_success:
        logger.warning(f"HTTP {response.status_code} from {response.url or '<unknown url>'}")
        raise HttpStatusError(response.status_code, response.content, response.url)


def decode(spec: ResponseSpec, response: RawResponse, codec: Codec = default_codec) -> Any:
    """Decode a response according to ``spec``.

    Non-success statuses never reach the codec.

    Raises:
        HttpStatusError: If the status is outside 2xx
        DeserializationError: If a JSON body does not match the target type
    """
    raise_for_status(response)

    if spec.shape is ResponseShape.TEXT:
        return response.text
    if spec.shape is ResponseShape.BYTES:
        return response.content
    if spec.shape is ResponseShape.NONE:
        return None
    if spec.shape is ResponseShape.RAW:
        return response
    return codec.deserialize(response.content, spec.target_type)
