import os

import pytest


class FakeClock:
    """Monotonic clock that only moves when sleep() is called."""

    def __init__(self):
        self.now = 0.0
        self.sleeps = []

    def __call__(self) -> float:
        return self.now

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


class ScriptedClient:
    """RevealClient double that replays queued responses (or raises queued exceptions)."""

    def __init__(self, start=None, polls=None):
        self.start_responses = list(start or [])
        self.poll_responses = list(polls or [])
        self.submitted = []
        self.polled = []

    @staticmethod
    def _next(queue):
        value = queue.pop(0)
        if isinstance(value, Exception):
            raise value
        return value

    def start_reveal(self, payload):
        self.submitted.append(payload)
        return self._next(self.start_responses)

    def get_reveal(self, reveal_id):
        self.polled.append(reveal_id)
        if not self.poll_responses:
            return {"data": {"id": reveal_id, "status": "processing", "is_complete": False}}
        return self._next(self.poll_responses)

    def get_credits(self):
        return {"credits": {"api_credits": 42}}


@pytest.fixture(autouse=True)
def force_mock_provider(monkeypatch):
    monkeypatch.setenv("ENRICHMENT_PROVIDER", "mock")
    monkeypatch.setenv("WIZA_API_KEY", os.getenv("WIZA_API_KEY") or "test-key")
    monkeypatch.delenv("ENRICHMENT_TIMEOUT_SECONDS", raising=False)
    monkeypatch.delenv("ENRICHMENT_POLL_SCHEDULE", raising=False)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def scripted_client():
    return ScriptedClient
