import pytest

from api._shared import Settings
from api.index import create_app

API_KEY = "test-key-123"
GUEST_CODE = "DemoVault_73Z!PR"
SECRET_CODE = "TheCollection_25!"


class FakeResponse:
    def __init__(self, status_code=200, payload=None, text=""):
        self.status_code = status_code
        self._payload = payload
        self.text = text

    def json(self):
        if self._payload is None:
            raise ValueError("no JSON body")
        return self._payload


class FakeUpstream:
    """Stands in for requests.get and records every outbound URL."""

    def __init__(self, response=None, error=None):
        self.response = response or FakeResponse(200, {"results": []})
        self.error = error
        self.calls = []

    def __call__(self, url, **kwargs):
        self.calls.append((url, kwargs))
        if self.error is not None:
            raise self.error
        return self.response


@pytest.fixture
def settings():
    return Settings(
        tmdb_api_key=API_KEY,
        guest_access_code=GUEST_CODE,
        secret_code=SECRET_CODE,
    )


@pytest.fixture
def upstream():
    return FakeUpstream()


@pytest.fixture
def client(settings, upstream):
    app = create_app(settings, http_get=upstream)
    app.config["TESTING"] = True
    return app.test_client()
