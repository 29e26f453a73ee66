import pytest
import requests

from services.remote_client import RemoteClient
from services.session_service import InMemoryUploadStore

BASE_URL = "https://backend.test"


class FakeResponse:
    def __init__(self, status_code=200, json_body=None, content=b"", headers=None, reason="OK"):
        self.status_code = status_code
        self._json = json_body
        self.content = content
        self.reason = reason
        self.headers = dict(headers or {})
        if json_body is not None:
            self.headers.setdefault("Content-Type", "application/json")

    @property
    def ok(self):
        return self.status_code < 400

    @property
    def text(self):
        return self.content.decode("utf-8", errors="replace")

    def json(self):
        if self._json is None:
            raise ValueError("No JSON body")
        return self._json


class FakeHttp:
    """Stands in for requests.Session; answers by (method, path)."""

    def __init__(self):
        self.routes = {}
        self.calls = []

    def add(self, method, path, *responses):
        self.routes[(method, path)] = list(responses)

    def request(self, method, url, **kwargs):
        path = url[len(BASE_URL):] if url.startswith(BASE_URL) else url
        self.calls.append({"method": method, "path": path, **kwargs})
        queue = self.routes.get((method, path))
        if not queue:
            raise AssertionError(f"Unexpected request {method} {path}")
        result = queue.pop(0) if len(queue) > 1 else queue[0]
        if isinstance(result, Exception):
            raise result
        return result

    def paths(self):
        return [c["path"] for c in self.calls]


@pytest.fixture
def http():
    return FakeHttp()


@pytest.fixture
def remote(http):
    return RemoteClient(http=http, settings=("alice", "secret", BASE_URL))


@pytest.fixture
def store():
    return InMemoryUploadStore()


@pytest.fixture
def connection_error():
    return requests.ConnectionError("connection refused")
