"""Shared test fixtures and utilities."""

from dataclasses import dataclass

import pytest

from feignhttp import RawResponse, set_default_transport


@dataclass
class SentRequest:
    """A request as received by RecordingTransport."""

    method: str
    url: str
    headers: tuple
    body: bytes | None
    connect_timeout_ms: int | None
    read_timeout_ms: int | None

    def header(self, name: str) -> str | None:
        values = [value for key, value in self.headers if key.lower() == name.lower()]
        return values[0] if values else None


class RecordingTransport:
    """Transport that records requests and answers with queued responses."""

    def __init__(self):
        self.calls: list[SentRequest] = []
        self.responses: list[RawResponse] = []

    def respond(self, status: int = 200, content: bytes = b"", headers: tuple = ()) -> None:
        self.responses.append(RawResponse(status, headers, content))

    @property
    def last(self) -> SentRequest:
        return self.calls[-1]

    async def execute(self, method, url, headers, body, connect_timeout_ms, read_timeout_ms):
        self.calls.append(
            SentRequest(method, url, headers, body, connect_timeout_ms, read_timeout_ms)
        )
        if self.responses:
            return self.responses.pop(0)
        return RawResponse(200, (), b"")


@pytest.fixture
def transport():
    """Create a fresh recording transport."""
    return RecordingTransport()


@pytest.fixture(autouse=True)
def reset_default_transport():
    """Make sure no test leaks its default transport into another."""
    yield
    set_default_transport(None)


@pytest.fixture
def make_transport():
    """Factory for additional recording transports."""
    return RecordingTransport
