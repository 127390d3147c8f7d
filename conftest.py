import json
import os
import tempfile

# Keep test diagnostics out of the project folder
os.environ.setdefault("MCP_LOG_FILE", os.path.join(tempfile.gettempdir(), "netsuite_test_debug.log"))

import pytest

from netsuite_config import NetSuiteSettings

_REASONS = {
    200: "OK",
    204: "No Content",
    400: "Bad Request",
    401: "Unauthorized",
    404: "Not Found",
    500: "Internal Server Error",
}


class _FakeResponse:
    def __init__(self, status_code: int = 200, json_data=None, text: str | None = None, reason: str | None = None):
        self.status_code = status_code
        self._json = json_data
        if text is None:
            text = json.dumps(json_data) if json_data is not None else ""
        self.text = text
        self.content = text.encode("utf-8")
        self.reason = reason if reason is not None else _REASONS.get(status_code, "")
        self.url = ""

    def json(self):
        if self._json is not None:
            return self._json
        return json.loads(self.text)


class FakeSession:
    """
    Stand-in for requests.Session: answers calls in order from a queue.
    Exceptions in the queue are raised instead of returned.
    """

    def __init__(self, responses=None):
        self.responses = list(responses or [])
        self.calls = []
        self.closed = False

    def queue(self, *responses):
        self.responses.extend(responses)

    def request(self, method, url, headers=None, timeout=None, data=None, json=None, **kwargs):
        self.calls.append(
            {
                "method": method,
                "url": url,
                "headers": dict(headers or {}),
                "data": data,
                "json": json,
                "timeout": timeout,
            }
        )
        assert self.responses, f"unexpected call: {method} {url}"
        answer = self.responses.pop(0)
        if isinstance(answer, Exception):
            raise answer
        answer.url = url
        return answer

    def post(self, url, **kwargs):
        return self.request("POST", url, **kwargs)

    def close(self):
        self.closed = True

    def calls_to(self, fragment: str):
        return [c for c in self.calls if fragment in c["url"]]


def ok(json_data=None, status_code: int = 200, **kwargs) -> _FakeResponse:
    return _FakeResponse(status_code, json_data, **kwargs)


def token_pair(access: str = "A", refresh: str = "R") -> _FakeResponse:
    return _FakeResponse(
        200,
        {
            "access_token": access,
            "refresh_token": refresh,
            "expires_in": 3600,
            "token_type": "Bearer",
        },
    )


def unauthorized() -> _FakeResponse:
    return _FakeResponse(401, {"type": "https://www.rfc-editor.org/rfc/rfc9110.html#section-15.5.2", "title": "Unauthorized"})


@pytest.fixture
def settings() -> NetSuiteSettings:
    return NetSuiteSettings(
        account_id="1234567_SB1",
        client_id="test-client-id",
        client_secret="test-client-secret",
    )


@pytest.fixture
def session() -> FakeSession:
    return FakeSession()
