"""Shared fixtures: fake clock, test settings, and mocked HTTP services."""

import httpx
import pytest

from webtools_mcp.config import Settings
from webtools_mcp.services import ServiceContainer


class FakeClock:
    """Manually advanced monotonic clock for cache expiry tests."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class RecordingHandler:
    """httpx MockTransport handler that records requests and replays responses.

    ``responses`` items are either ``httpx.Response`` objects or callables
    taking the request (which may raise httpx errors).  The last item is
    reused once the list is exhausted.
    """

    def __init__(self, *responses):
        self.responses = list(responses)
        self.requests = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        index = min(len(self.requests), len(self.responses)) - 1
        item = self.responses[index]
        if callable(item):
            return item(request)
        return item


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def settings(tmp_path):
    return Settings(
        tavily_api_key="tvly-test",
        proxy="",
        retry_delay_seconds=0,
        approval_mode="default",
        log_dir=str(tmp_path / "logs"),
    )


@pytest.fixture
def make_services(settings):
    """Build a ServiceContainer whose HTTP calls go to a RecordingHandler."""
    created = []

    def _make(handler, summarizer=None, **overrides):
        cfg = settings
        for key, value in overrides.items():
            setattr(cfg, key, value)
        services = ServiceContainer(
            cfg, summarizer=summarizer, transport=httpx.MockTransport(handler)
        )
        created.append(services)
        return services

    yield _make
    for services in created:
        services.close()
