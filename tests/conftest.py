"""Pytest configuration and shared fixtures."""

import gzip
import threading
from typing import List

import pytest
import requests

from direct_ingestion import DirectClient

SERVER = "https://wf.example.com"
TOKEN = "secret-token"


class FakeServer:
    """Stands in for Session.send and records every prepared request."""

    def __init__(self):
        self.requests: List[requests.PreparedRequest] = []
        self._responses = []
        self._lock = threading.Lock()

    def respond_with(self, *responses) -> None:
        """Queue status codes or exceptions for the next requests; 202 afterwards."""
        with self._lock:
            self._responses.extend(responses)

    def send(self, request, **kwargs):
        with self._lock:
            self.requests.append(request)
            reply = self._responses.pop(0) if self._responses else 202

        if isinstance(reply, Exception):
            raise reply

        response = requests.Response()
        response.status_code = reply
        response.reason = "Accepted" if reply in (200, 202) else "Error"
        response.request = request
        response.url = request.url
        response._content = b""
        return response

    def bodies(self) -> List[str]:
        with self._lock:
            return [gzip.decompress(r.body).decode("utf-8") for r in self.requests]

    def formats(self) -> List[str]:
        with self._lock:
            return [r.headers["f"] for r in self.requests]

    def lines(self, data_format: str = None) -> List[str]:
        """All points received, in arrival order, optionally for one format."""
        with self._lock:
            requests_ = [r for r in self.requests if data_format is None or r.headers["f"] == data_format]
            bodies = [gzip.decompress(r.body).decode("utf-8") for r in requests_]
        return [line for body in bodies for line in body.splitlines()]


@pytest.fixture
def fake_server(monkeypatch) -> FakeServer:
    """Intercept every HTTP request made through requests.Session."""
    server = FakeServer()
    monkeypatch.setattr(requests.Session, "send", server.send)
    return server


@pytest.fixture
def client(fake_server):
    """Direct client whose scheduler never ticks during a test."""
    direct_client = DirectClient(
        SERVER,
        TOKEN,
        max_queue_size=100,
        batch_size=10,
        flush_interval=3600,
        retry_delay=0
    )
    yield direct_client
    if not direct_client.closed:
        direct_client.close()
