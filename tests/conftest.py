from unittest.mock import MagicMock

import aiohttp
import pytest

VALID_TOKEN = "figd_" + "x" * 40
NODE_URL = "https://design.example/design/ABC123/My-File?node-id=1-2"


class FakeContent:
    def __init__(self, body: bytes):
        self._body = body

    async def iter_chunked(self, size):
        for start in range(0, len(self._body), size):
            yield self._body[start : start + size]


class FakeResponse:
    """Stands in for aiohttp.ClientResponse inside ``async with session.get()``."""

    def __init__(self, status=200, json_body=None, body=b"", reason="OK"):
        self.status = status
        self.reason = reason
        self._json_body = json_body
        self.content = FakeContent(body)

    async def json(self, content_type="application/json"):
        if isinstance(self._json_body, Exception):
            raise self._json_body
        return self._json_body

    def raise_for_status(self):
        if self.status >= 400:
            raise aiohttp.ClientResponseError(
                MagicMock(), (), status=self.status, message=self.reason
            )


class _RequestContext:
    def __init__(self, outcome):
        self._outcome = outcome

    async def __aenter__(self):
        if isinstance(self._outcome, BaseException):
            raise self._outcome
        return self._outcome

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        return False


class FakeSession:
    """
    Minimal aiohttp.ClientSession replacement.

    ``outcomes`` is consumed in order; each item is a FakeResponse or an
    exception raised when the request is entered.
    """

    def __init__(self, *outcomes):
        self._outcomes = list(outcomes)
        self.calls = []
        self.closed = False

    def get(self, url, **kwargs):
        self.calls.append((url, kwargs))
        return _RequestContext(self._outcomes.pop(0))

    async def close(self):
        self.closed = True


@pytest.fixture
def token_env(monkeypatch):
    monkeypatch.setenv("FIGMA_PERSONAL_ACCESS_TOKEN", VALID_TOKEN)
    return VALID_TOKEN
