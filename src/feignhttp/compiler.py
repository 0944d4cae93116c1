"""Endpoint compilation and invocation.

``compile_endpoint`` turns a declared function and its parsed descriptor
into a ``CompiledEndpoint``: the classified parameters, the response
decoding strategy and the signature used to bind call arguments. All of
this happens once, at declaration time.

Each call then walks the same stages in order::

    PARSED -> CLASSIFIED -> PLANNED -> SENT -> DECODED
                                                  \\-> FAILED (from any stage)

Only the transport call suspends. Nothing is retried and no state is
shared between calls; a failure aborts the remaining stages and propagates
to the caller unchanged.
"""

from __future__ import annotations

import inspect
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable

from .analyzer import classify_parameters, get_type_hints_safe
from .assembler import assemble
from .codec import Codec, default_codec
from .decoder import decode, response_spec
from .errors import DeclarationError, FeignError
from .types import (
    EndpointDescriptor,
    ParameterSpec,
    RequestPlan,
    ResponseSpec,
    Role,
    Transport,
)
from .url import build_url

logger = logging.getLogger(__name__)


class Stage(Enum):
    """Stages a call passes through."""

    PARSED = "parsed"
    CLASSIFIED = "classified"
    PLANNED = "planned"
    SENT = "sent"
    DECODED = "decoded"
    FAILED = "failed"


@dataclass(frozen=True)
class CompiledEndpoint:
    """An endpoint ready to build request plans and be invoked.

    Attributes:
        name: Qualified name of the declared function
        descriptor: Parsed endpoint metadata
        parameters: Classified parameters in declaration order
        response: Decoding strategy for the response
        signature: Signature for binding call arguments, receiver excluded
        codec: Codec for structured bodies and responses
    """

    name: str
    descriptor: EndpointDescriptor
    parameters: tuple[ParameterSpec, ...]
    response: ResponseSpec
    signature: inspect.Signature
    codec: Codec = default_codec

    def parameters_with_role(self, role: Role) -> tuple[ParameterSpec, ...]:
        """Return the parameters with the given role, in declaration order."""
        return tuple(spec for spec in self.parameters if spec.role is role)

    def build_plan(self, *args: Any, **kwargs: Any) -> RequestPlan:
        """Build the request plan for one call.

        Raises:
            TypeError: If the arguments do not match the signature
            InvalidPathValueError: If a path argument cannot be substituted
            InvalidParameterValueError: If a query or header argument has no textual form
            SerializationError: If the body cannot be serialized
        """
        bound = self.signature.bind(*args, **kwargs)
        bound.apply_defaults()
        values = bound.arguments

        path_values = {
            spec.effective_name: values[spec.name] for spec in self.parameters_with_role(Role.PATH)
        }
        query_items = [
            (spec.effective_name, values[spec.name])
            for spec in self.parameters_with_role(Role.QUERY)
        ]
        header_items = [
            (spec.effective_name, values[spec.name])
            for spec in self.parameters_with_role(Role.HEADER)
        ]
        bodies = self.parameters_with_role(Role.BODY)
        body_spec = bodies[0] if bodies else None
        body_value = values[body_spec.name] if body_spec else None

        url = build_url(self.descriptor.url_template, path_values, query_items)
        headers, body = assemble(
            self.descriptor.headers, header_items, body_spec, body_value, self.codec
        )
        return RequestPlan(
            method=self.descriptor.method,
            url=url,
            headers=headers,
            body=body,
            connect_timeout_ms=self.descriptor.connect_timeout_ms,
            read_timeout_ms=self.descriptor.read_timeout_ms,
        )

    async def invoke(self, transport: Transport, *args: Any, **kwargs: Any) -> Any:
        """Build, send and decode one call.

        Raises:
            TypeError: If the arguments do not match the signature
            FeignError: Whatever stage failed, unchanged, with ``stage`` set
        """
        stage = Stage.CLASSIFIED
        try:
            plan = self.build_plan(*args, **kwargs)
            stage = Stage.PLANNED
            response = await transport.execute(
                plan.method.value,
                plan.url,
                plan.headers,
                plan.body,
                plan.connect_timeout_ms,
                plan.read_timeout_ms,
            )
            stage = Stage.SENT
            result = decode(self.response, response, self.codec)
            stage = Stage.DECODED
        except FeignError as e:
            e.stage = stage
            logger.debug(f"{self.name} {Stage.FAILED.value} after stage {stage.value}: {e}")
            raise
        logger.debug(f"{self.name} {stage.value}: {plan.method.value} {plan.url} -> {response.status_code}")
        return result


def compile_endpoint(
    func: Callable,
    descriptor: EndpointDescriptor,
    bound: bool = False,
    localns: dict[str, Any] | None = None,
    codec: Codec = default_codec,
) -> CompiledEndpoint:
    """Compile a declared function into a CompiledEndpoint.

    Args:
        func: The declared ``async def``
        descriptor: The parsed endpoint metadata
        bound: Whether the function is a method whose receiver is excluded
        localns: Extra names for resolving string annotations
        codec: Codec for structured bodies and responses

    Raises:
        DeclarationError: If the function is not async or its parameters are invalid
    """
    name = getattr(func, "__qualname__", repr(func))
    stage = Stage.PARSED
    try:
        if not inspect.iscoroutinefunction(func):
            raise DeclarationError("endpoint must be declared with 'async def'", name)

        parameters = classify_parameters(func, descriptor, bound=bound, localns=localns)

        hints = get_type_hints_safe(func, localns)
        signature = inspect.signature(func)
        return_annotation = hints.get("return", signature.return_annotation)
        if isinstance(return_annotation, str):
            raise DeclarationError(f"cannot resolve return annotation {return_annotation!r}", name)
        response = response_spec(return_annotation)
        stage = Stage.CLASSIFIED
    except DeclarationError as e:
        e.stage = stage
        raise

    arguments = list(signature.parameters.values())
    if bound:
        arguments = arguments[1:]

    compiled = CompiledEndpoint(
        name=name,
        descriptor=descriptor,
        parameters=parameters,
        response=response,
        signature=signature.replace(parameters=arguments),
        codec=codec,
    )
    logger.debug(
        f"Compiled {name} ({stage.value}): {descriptor.method.value} {descriptor.url_template} "
        f"({len(parameters)} parameters, {compiled.response.shape.value} response)"
    )
    return compiled
