"""Declaration surface: endpoint decorators and the @feign class decorator.

Endpoints are declared as ``async def`` functions whose bodies are never
run. The decorator's arguments describe the request, the parameters'
``Annotated`` markers describe where each argument goes, and the return
annotation describes how the response is decoded.

Example:
    Standalone endpoints are compiled as soon as they are decorated::

        @get("https://api.github.com/repos/{owner}/{repo}")
        async def repository(
            owner: Annotated[str, Path()], repo: Annotated[str, Path()]
        ) -> Repository: ...

        repo = await repository("dxx", "feignhttp")

    Endpoints sharing a base URL are grouped in a class::

        @feign("https://api.github.com", headers={"Accept": "application/vnd.github.v3+json"})
        class GitHub:
            def __init__(self, transport=None):
                self.transport = transport

            @get(path="/users/{user}/repos")
            async def repos(
                self, user: Annotated[str, Path()], page: int = 1, per_page: int = 30
            ) -> list[Repository]: ...

        repos = await GitHub().repos("dxx", per_page=5)
"""

from __future__ import annotations

import functools
import logging
from dataclasses import dataclass
from typing import Any, Callable, TypeVar

from .compiler import CompiledEndpoint, compile_endpoint
from .errors import MissingUrlError
from .metadata import HeadersSpec, check_options, parse_endpoint, parse_headers, parse_timeout
from .transport import get_default_transport
from .types import Method, RequestPlan, Transport

logger = logging.getLogger(__name__)

T = TypeVar("T")

FEIGN_ATTRIBUTE = "__feign__"


@dataclass(frozen=True)
class FeignDeclaration:
    """Settings shared by every endpoint of a ``@feign`` class."""

    url: str | None = None
    headers: tuple[tuple[str, str], ...] = ()
    connect_timeout_ms: int | None = None
    read_timeout_ms: int | None = None
    transport: Transport | None = None


def is_method(func: Callable) -> bool:
    """Check whether a function is being defined inside a class body."""
    parts = getattr(func, "__qualname__", "").split(".")
    return len(parts) >= 2 and parts[-2] != "<locals>"


def class_namespace(owner: type) -> dict[str, Any]:
    """Names used to resolve string annotations of an owner's methods."""
    return {**vars(owner), owner.__name__: owner}


def declaration_for(owner: type) -> FeignDeclaration:
    """Get the shared declaration of a class.

    Classes decorated with ``@feign`` carry one; otherwise it is read from
    the class attributes ``url``, ``headers``, ``connect_timeout`` and
    ``timeout``.
    """
    declaration = owner.__dict__.get(FEIGN_ATTRIBUTE)
    if declaration is not None:
        return declaration
    name = owner.__qualname__
    return FeignDeclaration(
        url=getattr(owner, "url", None),
        headers=parse_headers(getattr(owner, "headers", None), name),
        connect_timeout_ms=parse_timeout(getattr(owner, "connect_timeout", None), "connect_timeout", name),
        read_timeout_ms=parse_timeout(getattr(owner, "timeout", None), "timeout", name),
    )


class Endpoint:
    """A declared endpoint.

    Standalone functions are compiled on construction. Methods are compiled
    when their class is created, using its ``url``, ``headers`` and timeout
    attributes. A method whose URL only resolves against an enclosing
    ``@feign`` is compiled by that decorator, or on first access.
    """

    def __init__(
        self,
        func: Callable,
        method: Method,
        args: tuple[Any, ...],
        options: dict[str, Any],
        transport: Transport | None = None,
    ):
        functools.update_wrapper(self, func)
        self.func = func
        self.method = method
        self.transport = transport
        self._args = args
        self._options = options
        self._compiled: CompiledEndpoint | None = None
        self.owner: type | None = None

        check_options(args, options, func.__qualname__)
        if not is_method(func):
            self.compile()

    def __set_name__(self, owner: type, name: str) -> None:
        self.owner = owner
        try:
            self.compile(declaration_for(owner))
        except MissingUrlError as e:
            # An enclosing @feign may still supply the base URL
            logger.debug(f"Deferring compilation of {self.func.__qualname__}: {e}")
            self._compiled = None

    def compile(self, declaration: FeignDeclaration | None = None) -> CompiledEndpoint:
        """Compile the endpoint against an optional shared declaration.

        Raises:
            DeclarationError: If the declaration is malformed
        """
        declaration = declaration or FeignDeclaration()
        descriptor = parse_endpoint(
            self.method,
            *self._args,
            base_url=declaration.url,
            base_headers=declaration.headers,
            base_connect_timeout=declaration.connect_timeout_ms,
            base_timeout=declaration.read_timeout_ms,
            endpoint=self.func.__qualname__,
            **self._options,
        )
        bound = self.owner is not None
        localns = class_namespace(self.owner) if bound else None
        self._compiled = compile_endpoint(self.func, descriptor, bound=bound, localns=localns)
        return self._compiled

    @property
    def compiled(self) -> CompiledEndpoint:
        """The compiled endpoint, compiling it first if needed."""
        if self._compiled is None:
            if self.owner is not None:
                self.compile(declaration_for(self.owner))
            else:
                self.compile()
        return self._compiled

    def __get__(self, instance: Any, owner: type | None = None):
        if instance is None:
            return self
        return BoundEndpoint(self, instance)

    def build_plan(self, *args: Any, **kwargs: Any) -> RequestPlan:
        """Build the request plan a call with these arguments would send."""
        return self.compiled.build_plan(*args, **kwargs)

    async def __call__(self, *args: Any, **kwargs: Any) -> Any:
        transport = self.transport or get_default_transport()
        return await self.compiled.invoke(transport, *args, **kwargs)

    def __repr__(self) -> str:
        return f"<Endpoint {self.method.value} {self.func.__qualname__}>"


class BoundEndpoint:
    """An endpoint bound to an instance of its declaring class.

    The request goes through the instance's ``transport`` attribute when it
    is set, then the class's ``@feign(transport=...)``, then the default
    transport.
    """

    def __init__(self, endpoint: Endpoint, instance: Any):
        self.endpoint = endpoint
        self.instance = instance
        functools.update_wrapper(self, endpoint.func)

    @property
    def transport(self) -> Transport:
        """The transport this call will use."""
        transport = getattr(self.instance, "transport", None)
        if transport is None and self.endpoint.owner is not None:
            transport = declaration_for(self.endpoint.owner).transport
        return transport or self.endpoint.transport or get_default_transport()

    def build_plan(self, *args: Any, **kwargs: Any) -> RequestPlan:
        """Build the request plan a call with these arguments would send."""
        return self.endpoint.compiled.build_plan(*args, **kwargs)

    async def __call__(self, *args: Any, **kwargs: Any) -> Any:
        return await self.endpoint.compiled.invoke(self.transport, *args, **kwargs)

    def __repr__(self) -> str:
        return f"<BoundEndpoint {self.endpoint.func.__qualname__} of {self.instance!r}>"


def request(method: Method | str, *args: Any, transport: Transport | None = None, **options: Any):
    """Declare an endpoint with the given HTTP method.

    Usable bare (``@request("GET")`` on a method of a ``@feign`` class) or
    with a URL and options.

    Args:
        method: The HTTP method
        *args: At most one positional URL
        transport: Transport for a standalone endpoint
        **options: ``url``, ``path``, ``connect_timeout``, ``timeout``, ``headers``
    """
    method = Method(method.upper()) if isinstance(method, str) else method

    def decorator(func: Callable) -> Endpoint:
        return Endpoint(func, method, args, options, transport=transport)

    return decorator


def _make_method_decorator(method: Method) -> Callable:
    """Factory for HTTP method decorators (@get, @post, etc.)."""

    def method_decorator(*args: Any, transport: Transport | None = None, **options: Any):
        # Bare usage: @get
        if len(args) == 1 and callable(args[0]) and not options and transport is None:
            return Endpoint(args[0], method, (), {})
        return request(method, *args, transport=transport, **options)

    method_decorator.__name__ = method.value.lower()
    method_decorator.__qualname__ = method.value.lower()
    method_decorator.__doc__ = f"Declare a {method.value} endpoint."
    return method_decorator


get = _make_method_decorator(Method.GET)
post = _make_method_decorator(Method.POST)
put = _make_method_decorator(Method.PUT)
patch = _make_method_decorator(Method.PATCH)
delete = _make_method_decorator(Method.DELETE)
head = _make_method_decorator(Method.HEAD)


def feign(
    url: str | None = None,
    *,
    connect_timeout: int | str | None = None,
    timeout: int | str | None = None,
    headers: HeadersSpec = None,
    transport: Transport | None = None,
) -> Callable[[type[T]], type[T]]:
    """Declare a class whose endpoints share a base URL and settings.

    Every endpoint of the class is compiled when the decorator runs, so
    declaration errors surface at class definition. Endpoint paths are
    appended to ``url``; endpoint timeouts and headers override the
    shared ones.

    Class attributes ``url``, ``headers``, ``connect_timeout`` and
    ``timeout`` are used when the corresponding argument is not given.

    Args:
        url: Base URL of every endpoint
        connect_timeout: Connect timeout in milliseconds
        timeout: Read timeout in milliseconds
        headers: Static headers sent by every endpoint
        transport: Transport used when an instance has none

    Example:
        @feign("https://api.github.com", timeout=5000)
        class GitHub:
            @get("/repos/{owner}/{repo}")
            async def repository(self, owner: Annotated[str, Path()], repo: Annotated[str, Path()]) -> str: ...
    """

    def decorator(cls: type[T]) -> type[T]:
        name = cls.__qualname__
        declaration = FeignDeclaration(
            url=url or getattr(cls, "url", None),
            headers=parse_headers(headers if headers is not None else getattr(cls, "headers", None), name),
            connect_timeout_ms=parse_timeout(
                connect_timeout if connect_timeout is not None else getattr(cls, "connect_timeout", None),
                "connect_timeout",
                name,
            ),
            read_timeout_ms=parse_timeout(
                timeout if timeout is not None else getattr(cls, "timeout", None), "timeout", name
            ),
            transport=transport,
        )
        setattr(cls, FEIGN_ATTRIBUTE, declaration)

        endpoints = [attr for attr in vars(cls).values() if isinstance(attr, Endpoint)]
        for endpoint in endpoints:
            endpoint.owner = cls
            endpoint.compile(declaration)

        logger.debug(f"Declared {name} with {len(endpoints)} endpoint(s) at {declaration.url}")
        return cls

    return decorator
