"""feignhttp - Declarative HTTP endpoints for async Python.

feignhttp turns an annotated ``async def`` into a working HTTP call. The
decorator names the method and URL, ``Annotated`` markers say where each
argument goes, and the return annotation says how the response is decoded.
Declarations are compiled when they are defined, so a misplaced placeholder
or a second body parameter fails at import time instead of on a live
request.

Key Features:
    - ``@get``/``@post``/``@put``/``@patch``/``@delete``/``@head`` endpoint decorators
    - ``@feign`` classes sharing a base URL, headers and timeouts
    - Path, query, header and body parameters via ``Annotated``
    - Plain-text, binary, form and JSON bodies chosen from the declared type
    - Response decoding into pydantic models, dataclasses or any JSON type
    - Pluggable transports, with an httpx-based default

Quick Start:
    >>> from typing import Annotated
    >>> from pydantic import BaseModel
    >>> from feignhttp import Header, Path, feign, get
    >>>
    >>> class Repository(BaseModel):
    ...     name: str
    ...     stargazers_count: int
    >>>
    >>> @feign("https://api.github.com")
    ... class GitHub:
    ...     @get("/repos/{owner}/{repo}")
    ...     async def repository(
    ...         self,
    ...         owner: Annotated[str, Path()],
    ...         repo: Annotated[str, Path()],
    ...         accept: Annotated[str, Header()] = "application/vnd.github.v3+json",
    ...     ) -> Repository: ...
    >>>
    >>> repo = await GitHub().repository("dxx", "feignhttp")

See Also:
    - feignhttp.decorators: The declaration surface
    - feignhttp.compiler: How declarations become requests
    - feignhttp.errors: Everything that can go wrong
"""

__version__ = "0.1.0"

from feignhttp.codec import JsonCodec
from feignhttp.compiler import CompiledEndpoint, Stage, compile_endpoint
from feignhttp.config import ClientConfig
from feignhttp.decorators import (
    BoundEndpoint,
    Endpoint,
    delete,
    feign,
    get,
    head,
    patch,
    post,
    put,
    request,
)
from feignhttp.errors import (
    AmbiguousUrlError,
    DeclarationError,
    DeserializationError,
    DuplicateHeaderError,
    FeignError,
    HttpStatusError,
    InvalidParameterValueError,
    InvalidPathValueError,
    InvalidTimeoutError,
    MissingUrlError,
    MultipleBodyParamsError,
    SerializationError,
    TransportError,
    UnmatchedPathParamError,
    UnresolvedPlaceholderError,
)
from feignhttp.transport import HttpxTransport, get_default_transport, set_default_transport
from feignhttp.types import (
    Body,
    EndpointDescriptor,
    Form,
    Header,
    Method,
    Param,
    ParameterSpec,
    Path,
    Query,
    RawResponse,
    RequestPlan,
    ResponseSpec,
    Role,
    Transport,
)

__all__ = [
    "AmbiguousUrlError",
    "Body",
    "BoundEndpoint",
    "ClientConfig",
    "CompiledEndpoint",
    "DeclarationError",
    "DeserializationError",
    "DuplicateHeaderError",
    "Endpoint",
    "EndpointDescriptor",
    "FeignError",
    "Form",
    "Header",
    "HttpStatusError",
    "HttpxTransport",
    "InvalidParameterValueError",
    "InvalidPathValueError",
    "InvalidTimeoutError",
    "JsonCodec",
    "Method",
    "MissingUrlError",
    "MultipleBodyParamsError",
    "Param",
    "ParameterSpec",
    "Path",
    "Query",
    "RawResponse",
    "RequestPlan",
    "ResponseSpec",
    "Role",
    "SerializationError",
    "Stage",
    "Transport",
    "TransportError",
    "UnmatchedPathParamError",
    "UnresolvedPlaceholderError",
    "compile_endpoint",
    "delete",
    "feign",
    "get",
    "get_default_transport",
    "head",
    "patch",
    "post",
    "put",
    "request",
    "set_default_transport",
]
