"""Exception hierarchy for declaring and calling HTTP endpoints.

Every failure raised by feignhttp derives from ``FeignError``. Errors fall
into two groups: declaration errors, which are raised eagerly while an
endpoint is being decorated so misuse fails before any request is sent, and
call errors, which can only happen once real argument values and a real
response exist.

Exception Hierarchy:
    FeignError: Base exception for all feignhttp errors
    ├── DeclarationError: Malformed endpoint declaration
    │   ├── AmbiguousUrlError: URL given both positionally and as url=
    │   ├── MissingUrlError: No absolute URL could be resolved
    │   ├── InvalidTimeoutError: Timeout is not a non-negative integer
    │   ├── MultipleBodyParamsError: More than one body parameter
    │   ├── UnmatchedPathParamError: Path parameter without placeholder
    │   ├── UnresolvedPlaceholderError: Placeholder without path parameter
    │   └── DuplicateHeaderError: Same header declared twice
    ├── InvalidParameterValueError: Argument cannot be rendered as text
    │   └── InvalidPathValueError: Path argument cannot be substituted
    ├── SerializationError: Request body could not be encoded
    ├── DeserializationError: Response body could not be decoded
    └── TransportError: Request failed in transit
        └── HttpStatusError: Server answered with a non-success status

Example:
    >>> try:
    ...     repo = await github.repository("dxx", "feignhttp")
    ... except HttpStatusError as e:
    ...     print(f"GitHub answered {e.status}: {e.body}")
    ... except TransportError as e:
    ...     print(f"Request never completed: {e.cause}")
"""

from __future__ import annotations

from typing import Any


class FeignError(Exception):
    """Base exception for all feignhttp errors.

    ``stage`` is the last compiler stage completed before the failure. It
    is set when the error passes through endpoint compilation or a call.
    """

    stage: Any = None


class DeclarationError(FeignError):
    """Raised when an endpoint declaration is malformed.

    Declaration errors are detected while the decorator runs (or while the
    owning class is created), never on a live request.
    """

    def __init__(self, message: str, endpoint: str | None = None):
        if endpoint:
            message = f"{endpoint}: {message}"
        super().__init__(message)
        self.endpoint = endpoint


class AmbiguousUrlError(DeclarationError):
    """Raised when a URL is supplied both positionally and as ``url=``."""

    pass


class MissingUrlError(DeclarationError):
    """Raised when no absolute URL can be resolved for an endpoint.

    This occurs when:
    - Neither a URL nor a path is given and no base URL is declared
    - Only a ``path`` is given outside a shared ``@feign`` declaration
    - A relative URL is given without a base URL to resolve it against
    """

    pass


class InvalidTimeoutError(DeclarationError):
    """Raised when ``connect_timeout`` or ``timeout`` is not a valid value.

    Timeouts are milliseconds and must be non-negative integers.
    """

    def __init__(self, message: str, value: Any = None, endpoint: str | None = None):
        super().__init__(message, endpoint=endpoint)
        self.value = value


class MultipleBodyParamsError(DeclarationError):
    """Raised when an endpoint declares more than one body parameter."""

    def __init__(self, parameters: list[str], endpoint: str | None = None):
        self.parameters = parameters
        super().__init__(
            f"at most one body parameter is allowed, found {', '.join(parameters)}",
            endpoint=endpoint,
        )


class UnmatchedPathParamError(DeclarationError):
    """Raised when a path parameter has no ``{placeholder}`` in the URL."""

    def __init__(self, parameter: str, template: str, endpoint: str | None = None):
        self.parameter = parameter
        self.template = template
        super().__init__(
            f"path parameter '{parameter}' has no matching placeholder in '{template}'",
            endpoint=endpoint,
        )


class UnresolvedPlaceholderError(DeclarationError):
    """Raised when a URL placeholder is not bound to exactly one path parameter."""

    def __init__(self, placeholder: str, template: str, endpoint: str | None = None):
        self.placeholder = placeholder
        self.template = template
        super().__init__(
            f"placeholder '{{{placeholder}}}' in '{template}' must be bound to "
            f"exactly one path parameter",
            endpoint=endpoint,
        )


class DuplicateHeaderError(DeclarationError):
    """Raised when two header parameters resolve to the same header name."""

    def __init__(self, header: str, endpoint: str | None = None):
        self.header = header
        super().__init__(f"header '{header}' is declared more than once", endpoint=endpoint)


class InvalidParameterValueError(FeignError):
    """Raised when an argument cannot be rendered as URL or header text.

    Only scalars (strings, numbers, booleans, enums and similar) have a
    textual form. Mappings, models and other structured values do not.
    """

    def __init__(self, message: str, parameter: str | None = None, value: Any = None):
        super().__init__(message)
        self.parameter = parameter
        self.value = value


class InvalidPathValueError(InvalidParameterValueError):
    """Raised when a path argument cannot be substituted into the URL."""

    pass


class SerializationError(FeignError):
    """Raised when a request body cannot be serialized."""

    def __init__(self, message: str, cause: Exception | None = None):
        super().__init__(message)
        self.cause = cause


class DeserializationError(FeignError):
    """Raised when a response body cannot be decoded into the return type.

    The raw body is kept for diagnostics. A decoding failure is never
    downgraded to returning the raw text.
    """

    def __init__(
        self,
        message: str,
        target_type: Any = None,
        body: bytes | None = None,
        cause: Exception | None = None,
    ):
        super().__init__(message)
        self.target_type = target_type
        self.body = body
        self.cause = cause


class TransportError(FeignError):
    """Raised when a request fails in transit.

    ``status`` and ``body`` are ``None`` when no response was received,
    for example on connection failures or timeouts.
    """

    def __init__(
        self,
        message: str,
        status: int | None = None,
        body: bytes | None = None,
        cause: Exception | None = None,
    ):
        super().__init__(message)
        self.status = status
        self.body = body
        self.cause = cause


class HttpStatusError(TransportError):
    """Raised when the server answers with a status outside 2xx.

    The error body is carried verbatim and never interpreted.
    """

    def __init__(self, status: int, body: bytes, url: str | None = None):
        self.url = url
        target = f" for {url}" if url else ""
        super().__init__(f"HTTP {status}{target}", status=status, body=body)

    @property
    def text(self) -> str:
        """The error body decoded as UTF-8, with undecodable bytes replaced."""
        return (self.body or b"").decode("utf-8", errors="replace")
