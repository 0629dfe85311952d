"""Pytest configuration and fixtures for stashctl tests."""

from __future__ import annotations

import json
import tempfile
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Generator, Union

import httpx
import pytest

from stashctl.core.client import StashClient

API_URL = "https://stash.test/api/v1"

Reply = Union[httpx.Response, Callable[[httpx.Request], httpx.Response]]


@dataclass
class RecordedRequest:
    """One request seen by the fake server."""

    method: str
    url: str
    headers: httpx.Headers
    body: bytes

    def json(self) -> Any:
        return json.loads(self.body)


class FakeStashServer:
    """Routes requests for the API and storage hosts to canned replies.

    Replies for a route are served in order; the last one repeats.
    """

    def __init__(self) -> None:
        self.routes: dict[tuple[str, str], list[Reply]] = {}
        self.requests: list[RecordedRequest] = []

    def add(self, method: str, url: str, reply: Reply) -> None:
        if url.startswith("/"):
            url = f"{API_URL}{url}"
        self.routes.setdefault((method, url), []).append(reply)

    def add_json(self, method: str, url: str, data: Any, status_code: int = 200) -> None:
        self.add(method, url, httpx.Response(status_code, json=data))

    def calls(self, method: str | None = None) -> list[RecordedRequest]:
        return [r for r in self.requests if method is None or r.method == method]

    def __call__(self, request: httpx.Request) -> httpx.Response:
        url = str(request.url).split("?", 1)[0]
        self.requests.append(
            RecordedRequest(
                method=request.method,
                url=str(request.url),
                headers=request.headers,
                body=request.read(),
            )
        )

        replies = self.routes.get((request.method, url))
        if not replies:
            return httpx.Response(404, text=f"no route for {request.method} {url}")
        reply = replies.pop(0) if len(replies) > 1 else replies[0]
        if callable(reply):
            return reply(request)
        return httpx.Response(reply.status_code, headers=reply.headers, content=reply.content)


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def make_file(temp_dir: Path) -> Callable[..., Path]:
    """Factory writing a file of patterned bytes."""

    def _make(name: str = "build.apk", size: int = 3, data: bytes | None = None) -> Path:
        path = temp_dir / name
        if data is None:
            data = (bytes(range(251)) * (size // 251 + 1))[:size]
        path.write_bytes(data)
        return path

    return _make


@pytest.fixture
def stash_server() -> FakeStashServer:
    """Fake artifact-service API and storage host."""
    return FakeStashServer()


@pytest.fixture
def stash_client(stash_server: FakeStashServer) -> Generator[StashClient, None, None]:
    """Client wired to the fake server."""
    client = StashClient(
        base_url=API_URL,
        api_key="abc",
        transport=httpx.MockTransport(stash_server),
    )
    yield client
    client.close()


@pytest.fixture
def sample_config_yaml() -> str:
    """Sample config YAML content."""
    return """
default_profile: test
output_format: table

profiles:
  test:
    url: https://stash-test.example.org/api/v1
    api_key: test-key
    verify_ssl: false
    timeout: 30

  production:
    url: https://app.buildstash.com/api/v1
    verify_ssl: true
    timeout: 60
    transfer_timeout: 1200
"""
