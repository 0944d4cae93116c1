"""Parse endpoint decorator arguments into an EndpointDescriptor."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from typing import Any
from urllib.parse import urlsplit

from .errors import (
    AmbiguousUrlError,
    DeclarationError,
    DuplicateHeaderError,
    InvalidTimeoutError,
    MissingUrlError,
)
from .types import EndpointDescriptor, Method

logger = logging.getLogger(__name__)

ENDPOINT_OPTIONS = frozenset({"url", "path", "connect_timeout", "timeout", "headers"})

HeadersSpec = Mapping[str, Any] | str | Iterable[str] | None


def is_absolute(url: str) -> bool:
    """Check whether a URL has both a scheme and a host."""
    parts = urlsplit(url)
    return bool(parts.scheme and parts.netloc)


def join_url(base: str, path: str) -> str:
    """Join a base URL and a path suffix.

    Concatenation is literal, except that a base ending in ``/`` joined to
    a path starting with ``/`` keeps a single slash.

    >>> join_url("https://api.github.com", "/repos")
    'https://api.github.com/repos'
    >>> join_url("https://api.github.com/", "/repos")
    'https://api.github.com/repos'
    """
    if base.endswith("/") and path.startswith("/"):
        return base + path[1:]
    return base + path


def parse_timeout(value: Any, option: str = "timeout", endpoint: str | None = None) -> int | None:
    """Parse a millisecond timeout.

    Accepts non-negative integers and strings of decimal digits.

    Raises:
        InvalidTimeoutError: For anything else, including booleans and floats
    """
    if value is None:
        return None
    if isinstance(value, bool):
        raise InvalidTimeoutError(
            f"{option} must be a non-negative integer, got {value!r}", value, endpoint
        )
    if isinstance(value, int):
        if value < 0:
            raise InvalidTimeoutError(
                f"{option} must be a non-negative integer, got {value!r}", value, endpoint
            )
        return value
    if isinstance(value, str):
        digits = value.strip()
        if digits.isascii() and digits.isdigit():
            return int(digits)
    raise InvalidTimeoutError(
        f"{option} must be a non-negative integer, got {value!r}", value, endpoint
    )


def parse_headers(headers: HeadersSpec, endpoint: str | None = None) -> tuple[tuple[str, str], ...]:
    """Parse a static header declaration.

    Headers may be given as a mapping, as a ``"Name: value; Other: value"``
    string, or as an iterable of ``"Name: value"`` strings.

    Raises:
        DeclarationError: If an entry has no ``:`` separator or an empty name
        DuplicateHeaderError: If a name appears twice, compared case-insensitively
    """
    if headers is None:
        return ()

    if isinstance(headers, Mapping):
        pairs = [(str(name).strip(), str(value)) for name, value in headers.items()]
    else:
        entries = headers.split(";") if isinstance(headers, str) else list(headers)
        pairs = []
        for entry in entries:
            if not entry.strip():
                continue
            name, sep, value = entry.partition(":")
            if not sep:
                raise DeclarationError(
                    f"header entry {entry.strip()!r} must look like 'Name: value'", endpoint
                )
            pairs.append((name.strip(), value.strip()))

    seen: set[str] = set()
    for name, _value in pairs:
        if not name:
            raise DeclarationError("header name must not be empty", endpoint)
        if name.lower() in seen:
            raise DuplicateHeaderError(name, endpoint)
        seen.add(name.lower())

    return tuple(pairs)


def merge_headers(
    base: tuple[tuple[str, str], ...], override: tuple[tuple[str, str], ...]
) -> tuple[tuple[str, str], ...]:
    """Merge two header tuples, letting ``override`` win case-insensitively."""
    overridden = {name.lower() for name, _ in override}
    return tuple((n, v) for n, v in base if n.lower() not in overridden) + override


def resolve_url_template(
    url: str | None,
    path: str | None,
    base_url: str | None,
    endpoint: str | None = None,
) -> str:
    """Resolve the final URL template from the declared pieces.

    An absolute ``url`` is used as is. A relative ``url`` is a path suffix of
    ``base_url``. ``path`` is then appended to whichever URL was resolved.
    With neither, the endpoint targets ``base_url`` itself.

    Raises:
        MissingUrlError: If no absolute URL can be resolved
    """
    if url:
        if is_absolute(url):
            resolved = url
        elif base_url:
            resolved = join_url(base_url, url)
        else:
            raise MissingUrlError(
                f"relative url {url!r} needs a base url from an enclosing @feign", endpoint
            )
    elif base_url:
        resolved = base_url
    elif path:
        raise MissingUrlError(
            f"path {path!r} needs a base url from an enclosing @feign", endpoint
        )
    else:
        raise MissingUrlError("no url or path declared", endpoint)

    if path:
        resolved = join_url(resolved, path)

    if not is_absolute(resolved):
        raise MissingUrlError(f"resolved url {resolved!r} is not absolute", endpoint)
    return resolved


def check_options(
    args: tuple[Any, ...], options: Mapping[str, Any], endpoint: str | None = None
) -> tuple[str | None, str | None]:
    """Validate endpoint options that do not depend on an enclosing declaration.

    Returns:
        The declared url and path, either of which may be ``None``

    Raises:
        AmbiguousUrlError: If a positional URL and ``url=`` are both given
        InvalidTimeoutError: If a timeout is not a non-negative integer
        DeclarationError: If url, path or headers are malformed
        TypeError: If an unknown option is given
    """
    unknown = set(options) - ENDPOINT_OPTIONS
    if unknown:
        raise TypeError(f"unexpected endpoint option(s): {', '.join(sorted(unknown))}")

    if len(args) > 1:
        raise AmbiguousUrlError(f"expected one positional url, got {len(args)}", endpoint)
    if args and options.get("url") is not None:
        raise AmbiguousUrlError("url given both positionally and as url=", endpoint)

    url = args[0] if args else options.get("url")
    if url is not None and not isinstance(url, str):
        raise DeclarationError(f"url must be a string, got {type(url).__name__}", endpoint)
    path = options.get("path")
    if path is not None and not isinstance(path, str):
        raise DeclarationError(f"path must be a string, got {type(path).__name__}", endpoint)

    parse_timeout(options.get("connect_timeout"), "connect_timeout", endpoint)
    parse_timeout(options.get("timeout"), "timeout", endpoint)
    parse_headers(options.get("headers"), endpoint)
    return url, path


def parse_endpoint(
    method: Method | str,
    *args: Any,
    base_url: str | None = None,
    base_headers: tuple[tuple[str, str], ...] = (),
    base_connect_timeout: int | None = None,
    base_timeout: int | None = None,
    endpoint: str | None = None,
    **options: Any,
) -> EndpointDescriptor:
    """Parse endpoint decorator arguments into an EndpointDescriptor.

    Args:
        method: HTTP method of the endpoint
        *args: At most one positional URL
        base_url: Base URL declared by an enclosing ``@feign``
        base_headers: Static headers declared by an enclosing ``@feign``
        base_connect_timeout: Connect timeout of the enclosing declaration
        base_timeout: Read timeout of the enclosing declaration
        endpoint: Qualified endpoint name for error messages
        **options: ``url``, ``path``, ``connect_timeout``, ``timeout``, ``headers``

    Returns:
        The parsed descriptor

    Raises:
        AmbiguousUrlError: If a positional URL and ``url=`` are both given
        MissingUrlError: If no absolute URL can be resolved
        InvalidTimeoutError: If a timeout is not a non-negative integer
        TypeError: If an unknown option is given
    """
    url, path = check_options(args, options, endpoint)
    template = resolve_url_template(url, path, base_url, endpoint)

    connect_timeout = parse_timeout(options.get("connect_timeout"), "connect_timeout", endpoint)
    read_timeout = parse_timeout(options.get("timeout"), "timeout", endpoint)
    headers = merge_headers(base_headers, parse_headers(options.get("headers"), endpoint))

    descriptor = EndpointDescriptor(
        method=Method(method.upper()) if isinstance(method, str) else method,
        url_template=template,
        connect_timeout_ms=connect_timeout if connect_timeout is not None else base_connect_timeout,
        read_timeout_ms=read_timeout if read_timeout is not None else base_timeout,
        headers=headers,
    )
    logger.debug(f"Parsed endpoint {endpoint or '<anonymous>'}: {descriptor.method.value} {template}")
    return descriptor
