"""Transport configuration.

``ClientConfig`` holds the defaults a transport applies to every request
that does not declare its own values. It can be created directly or read
from environment variables.

Example:
    Configure from the environment::

        # FEIGNHTTP_CONNECT_TIMEOUT_MS=2000
        # FEIGNHTTP_VERIFY_SSL=false
        config = ClientConfig.from_env()
        transport = HttpxTransport(config)
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, Field, field_validator

DEFAULT_USER_AGENT = "feignhttp/0.1.0"


class ClientConfig(BaseModel):
    """Defaults for an HTTP transport.

    Attributes:
        connect_timeout_ms: Connect timeout when an endpoint declares none (default: 10000)
        read_timeout_ms: Read timeout when an endpoint declares none (default: 30000)
        headers: Headers sent with every request, below declared headers
        verify_ssl: Whether to verify SSL certificates (default: True)
        follow_redirects: Whether to follow redirects (default: True)
        user_agent: ``User-Agent`` header value
    """

    connect_timeout_ms: int = Field(default=10_000, ge=0)
    read_timeout_ms: int = Field(default=30_000, ge=0)
    headers: dict[str, str] = Field(default_factory=dict)
    verify_ssl: bool = True
    follow_redirects: bool = True
    user_agent: str = DEFAULT_USER_AGENT

    @field_validator("headers", mode="before")
    @classmethod
    def _parse_headers(cls, value: Any) -> Any:
        # "Name: value; Other: value" as given in an environment variable
        if isinstance(value, str):
            pairs = (entry.partition(":") for entry in value.split(";") if entry.strip())
            return {name.strip(): item.strip() for name, _, item in pairs}
        return value

    @classmethod
    def from_env(
        cls, prefix: str = "FEIGNHTTP_", environ: Mapping[str, str] | None = None
    ) -> ClientConfig:
        """Create a configuration from environment variables.

        Args:
            prefix: Prefix of the variables to read, e.g. ``FEIGNHTTP_READ_TIMEOUT_MS``
            environ: Mapping to read instead of ``os.environ``

        Returns:
            Configuration with environment values over the defaults
        """
        environ = os.environ if environ is None else environ
        prefix = prefix.upper()
        values = {}
        for key, value in environ.items():
            if not key.upper().startswith(prefix):
                continue
            name = key[len(prefix):].lower()
            if name in cls.model_fields:
                values[name] = _convert_value(value)
        return cls(**values)


def _convert_value(value: str) -> Any:
    """Convert an environment string to a boolean or integer where it looks like one."""
    if not value:
        return value
    if value.lower() in ("true", "false", "yes", "no", "on", "off"):
        return value.lower() in ("true", "yes", "on")
    try:
        return int(value)
    except ValueError:
        return value
