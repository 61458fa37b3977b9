"""Pytest configuration and shared fixtures"""

import json
import os
import tempfile

import httpx
import pytest

# Keep tests away from the user's real config and secrets
os.environ["SNAKE_CONFIG_DIR"] = tempfile.mkdtemp()


class MockHTTP:
    """Canned HTTP responses for providers, recording every request"""

    def __init__(self):
        self.requests: list[httpx.Request] = []
        self.status = 200
        self.body = None
        self.content = None
        self.error: Exception | None = None

    def respond(self, status: int = 200, json=None, content: bytes | None = None) -> "MockHTTP":
        self.status = status
        self.body = json
        self.content = content
        return self

    def fail(self, error: Exception) -> "MockHTTP":
        self.error = error
        return self

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        if self.content is not None:
            return httpx.Response(self.status, content=self.content)
        return httpx.Response(self.status, json=self.body)

    @property
    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self.handler))

    @property
    def last_request(self) -> httpx.Request:
        return self.requests[-1]

    @property
    def last_json(self) -> dict:
        return json.loads(self.last_request.content)


@pytest.fixture
def mock_http():
    return MockHTTP()


@pytest.fixture
def config():
    """Config with test secrets and no process environment"""
    from snake.config import Config

    return Config(
        env={},
        secrets={
            "ANTHROPIC_API_KEY": "sk-ant-test",
            "OPENAI_API_KEY": "sk-openai-test",
            "GOOGLE_API_KEY": "google-test-key",
            "OPENROUTER_API_KEY": "sk-or-test",
            "GROQ_API_KEY": "gsk-test",
        },
    )


@pytest.fixture
def empty_config():
    from snake.config import Config

    return Config(env={}, secrets={})
