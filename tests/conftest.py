import pytest
import requests


class FakeResponse:
    def __init__(self, status_code=200, text="", encoding="utf-8"):
        self.status_code = status_code
        self.text = text
        self.encoding = encoding

    @property
    def ok(self):
        return 200 <= self.status_code < 400


class FakeSession:
    """Replays canned responses keyed by URL and records every request."""

    def __init__(self, responses=None):
        self.responses = responses or {}
        self.calls = []

    def get(self, url, **kwargs):
        self.calls.append(url)
        result = self.responses.get(url)
        if result is None:
            raise requests.ConnectionError(f"no route to {url}")
        if isinstance(result, Exception):
            raise result
        return result


@pytest.fixture
def fake_session():
    return FakeSession()
