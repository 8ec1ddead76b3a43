"""
Tests for the retry-wrapped fetch primitive.
"""
import pytest
import requests

from app.errors import UpstreamError
from app.http import fetch_with_retry


class FakeResponse:
    def __init__(self, status_code=200, body=None):
        self.status_code = status_code
        self._body = body or {}

    def json(self):
        return self._body


class FakeSession:
    """Returns (or raises) the queued outcomes in order."""

    def __init__(self, outcomes):
        self.outcomes = list(outcomes)
        self.calls = []

    def get(self, url, params=None, timeout=None):
        self.calls.append((url, params, timeout))
        outcome = self.outcomes.pop(0) if len(self.outcomes) > 1 else self.outcomes[0]
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


@pytest.fixture
def delays():
    return []


def test_retries_then_succeeds(delays):
    session = FakeSession([
        requests.ConnectionError("fail-1"),
        requests.ConnectionError("fail-2"),
        FakeResponse(200, {"ok": True}),
    ])

    response = fetch_with_retry(
        "http://example.com", retries=3, backoff_ms=10, session=session, sleep=delays.append
    )

    assert response.status_code == 200
    assert len(session.calls) == 3


def test_fails_after_retries_exhausted(delays):
    session = FakeSession([requests.ConnectionError("fail")])

    with pytest.raises(UpstreamError, match="fail"):
        fetch_with_retry(
            "http://example.com", retries=2, backoff_ms=5, session=session, sleep=delays.append
        )

    assert len(session.calls) == 3


def test_backoff_doubles_each_attempt(delays):
    session = FakeSession([FakeResponse(500)])

    with pytest.raises(UpstreamError):
        fetch_with_retry(
            "http://example.com", retries=2, backoff_ms=300, session=session, sleep=delays.append
        )

    assert delays == [0.3, 0.6]


def test_non_2xx_is_an_error_carrying_status(delays):
    session = FakeSession([FakeResponse(404)])

    with pytest.raises(UpstreamError) as exc_info:
        fetch_with_retry("http://example.com", retries=0, session=session, sleep=delays.append)

    assert exc_info.value.upstream_status == 404
    assert delays == []


def test_params_and_timeout_are_passed_through(delays):
    session = FakeSession([FakeResponse(200)])

    fetch_with_retry(
        "http://example.com/api",
        params={"key": "abc"},
        session=session,
        timeout=3.0,
        sleep=delays.append,
    )

    assert session.calls == [("http://example.com/api", {"key": "abc"}, 3.0)]
