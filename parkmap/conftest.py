"""Shared fakes for pipeline tests. No test touches the network."""

import json
from typing import Any, Callable, Dict, List, Optional

import pytest
import requests

from parkmap.errors import FetchExhausted
from parkmap.ingest.fetch import FetchConfig, Relay, ResilientFetcher


class FakeResponse:
    """Minimal stand-in for requests.Response."""

    def __init__(self, body: Any = None, status_code: int = 200, text: Optional[str] = None):
        self.status_code = status_code
        self.text = text if text is not None else json.dumps(body)

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300

    def json(self) -> Any:
        return json.loads(self.text)


class FakeSession:
    """
    Session whose responses are scripted per URL.

    Each URL maps to a list of outcomes consumed in order (the last one
    repeats). An outcome is a FakeResponse or an exception instance to raise.
    Unscripted URLs raise ConnectionError.
    """

    def __init__(self, script: Optional[Dict[str, List[Any]]] = None):
        self.script = script or {}
        self.calls: List[tuple] = []

    def get(self, url: str, timeout: float = None):
        self.calls.append((url, timeout))
        outcomes = self.script.get(url)
        if not outcomes:
            raise requests.exceptions.ConnectionError(f"no route to {url}")
        outcome = outcomes.pop(0) if len(outcomes) > 1 else outcomes[0]
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    def urls(self) -> List[str]:
        return [url for url, _ in self.calls]


class StubFetcher:
    """
    Fetcher returning canned JSON per URL.

    `responses` maps a URL to a value or an exception. `resolver` may be
    given instead to compute the outcome from the URL.
    """

    def __init__(self, responses: Optional[Dict[str, Any]] = None,
                 resolver: Optional[Callable[[str], Any]] = None):
        self.responses = responses or {}
        self.resolver = resolver
        self.urls: List[str] = []

    def fetch(self, url: str) -> Any:
        self.urls.append(url)
        if self.resolver is not None:
            outcome = self.resolver(url)
        elif url in self.responses:
            outcome = self.responses[url]
        else:
            outcome = FetchExhausted(url)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


TEST_RELAYS = (
    Relay('relay-a', 'https://relay-a.test/?{url}'),
    Relay('relay-b', 'https://relay-b.test/raw?url={url}'),
)


@pytest.fixture
def sleeps():
    return []


@pytest.fixture
def make_fetcher(sleeps):
    """Build a ResilientFetcher over a FakeSession with recorded sleeps."""
    def _make(script: Dict[str, List[Any]], retries: int = 2) -> ResilientFetcher:
        return ResilientFetcher(
            session=FakeSession(script),
            relays=TEST_RELAYS,
            config=FetchConfig(retries=retries),
            sleep=sleeps.append
        )
    return _make
