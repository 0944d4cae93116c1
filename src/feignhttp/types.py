"""Type definitions for feignhttp.

This module defines the values that flow through the request compiler,
the role markers used to annotate endpoint parameters, and the protocol a
transport must implement.

Every stage of the compiler produces a new frozen value; nothing here is
mutated after construction.

Classes:
    Method: HTTP methods an endpoint may declare
    Role: Where a parameter ends up in the request
    BodyKind: How a body parameter is serialized
    ResponseShape: How a response is decoded
    EndpointDescriptor: Parsed endpoint metadata
    ParameterSpec: One classified parameter
    RequestPlan: A fully resolved request, ready for a transport
    ResponseSpec: Decoding strategy derived from the return annotation
    RawResponse: What a transport hands back
    Transport: Protocol for transport implementations

Markers:
    Path, Param (alias Query), Header, Body, Form

Example:
    Declaring parameter roles with ``Annotated``::

        from typing import Annotated
        from feignhttp import Header, Path, get

        @get("https://api.github.com/repos/{owner}/{repo}")
        async def repository(
            owner: Annotated[str, Path()],
            repo: Annotated[str, Path()],
            accept: Annotated[str, Header()] = "application/vnd.github.v3+json",
        ) -> dict: ...
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Protocol, runtime_checkable


class Method(str, Enum):
    """HTTP methods an endpoint may declare."""

    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    PATCH = "PATCH"
    DELETE = "DELETE"
    HEAD = "HEAD"
    OPTIONS = "OPTIONS"


class Role(Enum):
    """Where a parameter's value ends up in the request."""

    PATH = "path"
    QUERY = "query"
    HEADER = "header"
    BODY = "body"


class BodyKind(Enum):
    """Serialization strategy for a body parameter."""

    TEXT = "text"  # str, sent verbatim
    BINARY = "binary"  # bytes, sent verbatim
    FORM = "form"  # urlencoded key/value pairs
    JSON = "json"  # anything else, via the codec


class ResponseShape(Enum):
    """Decoding strategy for a response body."""

    TEXT = "text"
    BYTES = "bytes"
    JSON = "json"
    NONE = "none"
    RAW = "raw"


# Role markers


class RoleMarker:
    """Base class for parameter role markers placed in ``Annotated``."""

    role: Role

    def __init__(self, name: str | None = None):
        self.name = name

    def __repr__(self) -> str:
        if self.name:
            return f"{self.__class__.__name__}({self.name!r})"
        return f"{self.__class__.__name__}()"

    def __eq__(self, other: object) -> bool:
        return type(self) is type(other) and self.name == other.name

    def __hash__(self) -> int:
        return hash((type(self), self.name))


class Path(RoleMarker):
    """Substitute the value into a ``{placeholder}`` of the URL template.

    The placeholder is the parameter name unless ``name`` overrides it.
    """

    role = Role.PATH


class Param(RoleMarker):
    """Append the value to the query string.

    Unmarked parameters are query parameters already; the marker is only
    needed to rename one.
    """

    role = Role.QUERY


Query = Param


class Header(RoleMarker):
    """Send the value as a request header.

    Without ``name`` the parameter name is canonicalised, so
    ``content_type`` is sent as ``Content-Type``. An explicit ``name`` is
    sent verbatim.
    """

    role = Role.HEADER


class Body(RoleMarker):
    """Send the value as the request body.

    ``str`` values are sent as plain text, ``bytes`` as binary, anything
    else is serialized as JSON.
    """

    role = Role.BODY

    def __init__(self) -> None:
        super().__init__(None)


class Form(Body):
    """Send a mapping or model as an urlencoded form body."""

    pass


# Compiler values


@dataclass(frozen=True)
class EndpointDescriptor:
    """Parsed metadata for one endpoint.

    Attributes:
        method: The HTTP method
        url_template: Absolute URL, possibly containing ``{placeholders}``
        connect_timeout_ms: Connect timeout in milliseconds, if declared
        read_timeout_ms: Read timeout in milliseconds, if declared
        headers: Static headers declared on the endpoint or its client
    """

    method: Method
    url_template: str
    connect_timeout_ms: int | None = None
    read_timeout_ms: int | None = None
    headers: tuple[tuple[str, str], ...] = ()


@dataclass(frozen=True)
class ParameterSpec:
    """One classified endpoint parameter.

    Attributes:
        name: The parameter name in the function signature
        role: Where the value goes in the request
        declared_type: The annotation with ``Annotated`` and ``Optional`` removed
        override_name: Explicit name given to the role marker
        body_kind: Serialization strategy, body parameters only
    """

    name: str
    role: Role
    declared_type: Any = Any
    override_name: str | None = None
    body_kind: BodyKind | None = None

    @property
    def effective_name(self) -> str:
        """The name used in the URL, query string or header."""
        if self.override_name:
            return self.override_name
        if self.role is Role.HEADER:
            return canonical_header_name(self.name)
        return self.name


@dataclass(frozen=True)
class RequestPlan:
    """A fully resolved request.

    Header names are unique, compared case-insensitively.
    """

    method: Method
    url: str
    headers: tuple[tuple[str, str], ...] = ()
    body: bytes | None = None
    connect_timeout_ms: int | None = None
    read_timeout_ms: int | None = None

    def header(self, name: str) -> str | None:
        """Look up a header value case-insensitively."""
        lowered = name.lower()
        for key, value in self.headers:
            if key.lower() == lowered:
                return value
        return None


@dataclass(frozen=True)
class ResponseSpec:
    """How to decode a response, derived from the return annotation."""

    shape: ResponseShape
    target_type: Any = None


@dataclass(frozen=True)
class RawResponse:
    """A response as handed back by a transport."""

    status_code: int
    headers: tuple[tuple[str, str], ...] = ()
    content: bytes = b""
    url: str | None = field(default=None, compare=False)

    @property
    def is_success(self) -> bool:
        """True for 2xx statuses."""
        return 200 <= self.status_code < 300

    @property
    def text(self) -> str:
        """The body decoded using the charset from ``Content-Type``, default UTF-8."""
        charset = "utf-8"
        content_type = self.header("content-type") or ""
        for part in content_type.split(";")[1:]:
            key, _, value = part.strip().partition("=")
            if key.lower() == "charset" and value:
                charset = value.strip('"')
        try:
            return self.content.decode(charset, errors="replace")
        except LookupError:
            return self.content.decode("utf-8", errors="replace")

    def header(self, name: str) -> str | None:
        """Look up a response header case-insensitively."""
        lowered = name.lower()
        for key, value in self.headers:
            if key.lower() == lowered:
                return value
        return None


@runtime_checkable
class Transport(Protocol):
    """Protocol for transport implementations.

    A transport sends one resolved request and returns the response. It
    must not retry, and must raise ``TransportError`` when no response is
    received. Non-success statuses are returned, not raised.

    Example:
        A transport that answers every request with a fixed body::

            class CannedTransport:
                async def execute(self, method, url, headers, body,
                                  connect_timeout_ms, read_timeout_ms):
                    return RawResponse(200, content=b"ok")
    """

    async def execute(
        self,
        method: str,
        url: str,
        headers: tuple[tuple[str, str], ...],
        body: bytes | None,
        connect_timeout_ms: int | None,
        read_timeout_ms: int | None,
    ) -> RawResponse:
        """Send one request and return its response."""
        ...


def canonical_header_name(name: str) -> str:
    """Convert a parameter name to canonical header form.

    >>> canonical_header_name("content_type")
    'Content-Type'
    >>> canonical_header_name("x_request_id")
    'X-Request-Id'
    """
    parts = name.replace("_", "-").split("-")
    return "-".join(part[:1].upper() + part[1:].lower() for part in parts)
