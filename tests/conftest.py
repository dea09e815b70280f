"""Shared pytest fixtures for the addevents-sink test suite."""

from __future__ import annotations

import json

import httpx
import pytest

from addevents_sink.models import Event

API_KEY = "abc123"
LOGFILE = "/var/log/syslog"
SERVER = "server1"
PARSER = "systemLogPST"

SUCCESS_BODY = {"status": "success", "message": "success"}
SERVER_BUSY_BODY = {
    "status": "error/server/busy",
    "message": "Requests are throttled.  Try again later",
}


def make_event(offset: int = 0, **overrides) -> Event:
    """Build an Event with sensible defaults for tests."""
    values = {
        "stream_id": "t",
        "partition": 0,
        "sequence_offset": offset,
        "timestamp_nanos": 100 + offset,
        "message": f"m{offset + 1}",
        "logfile": LOGFILE,
        "server_host": SERVER,
    }
    values.update(overrides)
    return Event(**values)


class RecordingHandler:
    """httpx.MockTransport handler that records requests and replies with a fixed response."""

    def __init__(self, status_code: int = 200, body=None, content: bytes | None = None):
        self.status_code = status_code
        self.body = SUCCESS_BODY if body is None else body
        self.content = content
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.content is not None:
            return httpx.Response(self.status_code, content=self.content)
        return httpx.Response(self.status_code, json=self.body)

    @property
    def last_payload(self) -> dict:
        return json.loads(self.requests[-1].content)


@pytest.fixture()
def handler() -> RecordingHandler:
    return RecordingHandler()


@pytest.fixture()
def sample_events() -> list[Event]:
    """Two events sharing one set of server level fields."""
    return [make_event(0), make_event(1)]
