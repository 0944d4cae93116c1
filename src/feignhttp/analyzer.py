"""Parameter classification for declared endpoints.

This module examines an endpoint function's signature and type hints and
assigns every parameter a role: path substitution, query parameter,
header, or body. The classification runs once per declaration and is
validated against the URL template so that mistakes fail at definition
time.

Classification Rules:
    1. ``Annotated[T, Path()]`` substitutes into ``{name}`` in the URL
    2. ``Annotated[T, Param()]`` (or ``Query()``) appends to the query string
    3. ``Annotated[T, Header()]`` sends a header, name canonicalised
    4. ``Annotated[T, Body()]`` / ``Form()`` becomes the request body
    5. Parameters without a marker are query parameters
    6. The receiver of a class-bound endpoint (``self``) is never classified
    7. ``*args`` and ``**kwargs`` are rejected

Validation:
    - At most one body parameter
    - Every path parameter names a placeholder in the template
    - Every placeholder is bound to exactly one path parameter
    - Header parameters resolve to distinct header names

Functions:
    classify_parameters: Classify and validate all parameters of a function
    get_type_hints_safe: Extract type hints, resolving what can be resolved
    placeholders: List ``{name}`` placeholders in a template
    body_kind_for: Choose the body serialization for a declared type
    is_optional: Check if a type is Optional[T]
    get_optional_inner: Extract T from Optional[T]

Example:
    >>> from typing import Annotated
    >>> async def repository(owner: Annotated[str, Path()], page: int = 1): ...
    >>> descriptor = EndpointDescriptor(Method.GET, "https://x.io/{owner}")
    >>> [(p.name, p.role.value) for p in classify_parameters(repository, descriptor)]
    [('owner', 'path'), ('page', 'query')]
"""

from __future__ import annotations

import builtins
import inspect
import re
import types
from typing import Annotated, Any, Callable, Union, get_args, get_origin, get_type_hints

from .errors import (
    DeclarationError,
    DuplicateHeaderError,
    MultipleBodyParamsError,
    UnmatchedPathParamError,
    UnresolvedPlaceholderError,
)
from .types import (
    BodyKind,
    EndpointDescriptor,
    Form,
    Param,
    ParameterSpec,
    Role,
    RoleMarker,
)

PLACEHOLDER_PATTERN = re.compile(r"\{([^{}/?#]+)\}")

TEXT_TYPES = (str,)
BINARY_TYPES = (bytes, bytearray)


def placeholders(template: str) -> list[str]:
    """List the ``{name}`` placeholders in a URL template, in order."""
    return PLACEHOLDER_PATTERN.findall(template)


def get_type_hints_safe(func: Callable, localns: dict[str, Any] | None = None) -> dict[str, Any]:
    """Get type hints with ``Annotated`` extras preserved.

    When the whole set cannot be resolved at once, each string annotation
    is looked up by name in ``localns``, the function's globals and the
    builtins, so one unresolvable forward reference does not hide the
    markers of every other parameter.

    Args:
        func: The callable to get type hints for
        localns: Extra names to resolve against, such as the owning class

    Returns:
        Dict of type hints; annotations that cannot be resolved stay strings
    """
    globalns = getattr(func, "__globals__", {})
    localns = dict(localns or {})
    try:
        return get_type_hints(func, globalns=globalns, localns=localns, include_extras=True)
    except (NameError, AttributeError, TypeError):
        annotations = getattr(func, "__annotations__", {})
        resolved = {}
        for name, annotation in annotations.items():
            if not isinstance(annotation, str):
                resolved[name] = annotation
            elif annotation in localns:
                resolved[name] = localns[annotation]
            elif annotation in globalns:
                resolved[name] = globalns[annotation]
            else:
                resolved[name] = getattr(builtins, annotation, annotation)
        return resolved


def is_optional(type_hint: Any) -> bool:
    """Check if a type hint is Optional[T]."""
    origin = get_origin(type_hint)
    if origin is Union or origin is types.UnionType:
        return type(None) in get_args(type_hint)
    return False


def get_optional_inner(type_hint: Any) -> Any:
    """Get the inner type from Optional[T].

    ``Optional[A | B]`` keeps the union of the remaining members.
    """
    if not is_optional(type_hint):
        return type_hint
    remaining = tuple(arg for arg in get_args(type_hint) if arg is not type(None))
    if len(remaining) == 1:
        return remaining[0]
    return Union[remaining]


def split_annotation(type_hint: Any, qualname: str, parameter: str) -> tuple[Any, RoleMarker | None]:
    """Separate a type hint into its bare type and its role marker, if any."""
    marker = None
    if get_origin(type_hint) is Annotated:
        base, *metadata = get_args(type_hint)
        markers = []
        for meta in metadata:
            if isinstance(meta, type) and issubclass(meta, RoleMarker):
                meta = meta()
            if isinstance(meta, RoleMarker):
                markers.append(meta)
        if len(markers) > 1:
            raise DeclarationError(
                f"parameter '{parameter}' has more than one role marker: {markers}", qualname
            )
        marker = markers[0] if markers else None
        type_hint = base
    return type_hint, marker


def body_kind_for(declared_type: Any, marker: RoleMarker | None = None) -> BodyKind:
    """Choose how a body parameter of ``declared_type`` is serialized."""
    if isinstance(marker, Form):
        return BodyKind.FORM
    if isinstance(declared_type, type):
        if issubclass(declared_type, TEXT_TYPES):
            return BodyKind.TEXT
        if issubclass(declared_type, BINARY_TYPES):
            return BodyKind.BINARY
    return BodyKind.JSON


def classify_parameter(
    param: inspect.Parameter, type_hint: Any, qualname: str
) -> ParameterSpec:
    """Classify a single parameter from its annotation."""
    if param.kind in (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD):
        raise DeclarationError(
            f"variadic parameter '{param.name}' cannot be mapped to a request", qualname
        )
    if isinstance(type_hint, str):
        raise DeclarationError(
            f"cannot resolve annotation {type_hint!r} of parameter '{param.name}'", qualname
        )

    # Optional[Annotated[T, ...]] and Annotated[Optional[T], ...] are both accepted
    declared_type, marker = split_annotation(get_optional_inner(type_hint), qualname, param.name)
    declared_type = get_optional_inner(declared_type)

    if marker is None:
        marker = Param()

    return ParameterSpec(
        name=param.name,
        role=marker.role,
        declared_type=declared_type,
        override_name=marker.name,
        body_kind=body_kind_for(declared_type, marker) if marker.role is Role.BODY else None,
    )


def classify_parameters(
    func: Callable,
    descriptor: EndpointDescriptor,
    bound: bool = False,
    localns: dict[str, Any] | None = None,
) -> tuple[ParameterSpec, ...]:
    """Classify every parameter of an endpoint function and validate the result.

    Args:
        func: The declared endpoint function
        descriptor: The parsed endpoint metadata
        bound: Whether the first parameter is a receiver to exclude
        localns: Extra names for resolving string annotations

    Returns:
        Parameter specs in declaration order

    Raises:
        DeclarationError: For variadic parameters or unresolvable annotations
        MultipleBodyParamsError: If more than one body parameter is declared
        UnmatchedPathParamError: If a path parameter has no placeholder
        UnresolvedPlaceholderError: If a placeholder is not bound exactly once
        DuplicateHeaderError: If two header parameters share a name
    """
    qualname = getattr(func, "__qualname__", repr(func))
    signature = inspect.signature(func)
    hints = get_type_hints_safe(func, localns)

    parameters = list(signature.parameters.values())
    if bound:
        if not parameters or parameters[0].kind not in (
            inspect.Parameter.POSITIONAL_ONLY,
            inspect.Parameter.POSITIONAL_OR_KEYWORD,
        ):
            raise DeclarationError("class-bound endpoint needs a receiver parameter", qualname)
        parameters = parameters[1:]

    specs = tuple(
        classify_parameter(param, hints.get(param.name, Any), qualname) for param in parameters
    )
    validate_parameters(specs, descriptor, qualname)
    return specs


def validate_parameters(
    specs: tuple[ParameterSpec, ...], descriptor: EndpointDescriptor, qualname: str
) -> None:
    """Check classified parameters against each other and the URL template."""
    bodies = [spec.name for spec in specs if spec.role is Role.BODY]
    if len(bodies) > 1:
        raise MultipleBodyParamsError(bodies, qualname)

    template = descriptor.url_template
    declared = placeholders(template)
    path_names = [spec.effective_name for spec in specs if spec.role is Role.PATH]

    for name in path_names:
        if name not in declared:
            raise UnmatchedPathParamError(name, template, qualname)
    for name in dict.fromkeys(declared):
        if path_names.count(name) != 1:
            raise UnresolvedPlaceholderError(name, template, qualname)

    seen: set[str] = set()
    for spec in specs:
        if spec.role is not Role.HEADER:
            continue
        key = spec.effective_name.lower()
        if key in seen:
            raise DuplicateHeaderError(spec.effective_name, qualname)
        seen.add(key)
