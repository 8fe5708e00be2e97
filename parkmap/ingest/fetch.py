"""
Resilient JSON fetching with relay fallback.

Public open data endpoints are often blocked or flaky from some networks.
Each logical GET tries the URL directly once, then rewrites it through an
ordered list of third-party relays, retrying network failures with a
linear backoff.
"""

import logging
import threading
import time
from dataclasses import dataclass
from typing import Any, Callable, Optional, Sequence
from urllib.parse import quote

import requests

from ..constants import (
    BACKOFF_STEP,
    DIRECT_TIMEOUT,
    RELAY_RETRIES,
    RELAY_TIMEOUT,
    USER_AGENT,
)
from ..errors import FetchExhausted, MalformedResponse, NetworkFailure

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Relay:
    """A URL rewrite that proxies a request through a relay service."""
    name: str
    template: str  # must contain '{url}'

    def rewrite(self, url: str) -> str:
        return self.template.format(url=quote(url, safe=''))


# Ordered fallback list, read-only
DEFAULT_RELAYS = (
    Relay('corsproxy', 'https://corsproxy.io/?{url}'),
    Relay('allorigins', 'https://api.allorigins.win/raw?url={url}'),
)


@dataclass(frozen=True)
class FetchConfig:
    """Timeouts and retry budget for one logical fetch."""
    direct_timeout: float = DIRECT_TIMEOUT  # seconds, single attempt
    relay_timeout: float = RELAY_TIMEOUT  # seconds, per relay attempt
    retries: int = RELAY_RETRIES  # extra attempts per relay after the first
    backoff_step: float = BACKOFF_STEP  # sleep = attempt_index * backoff_step

    def __post_init__(self):
        if self.retries < 0:
            raise ValueError(f"retries must be >= 0, got {self.retries}")


def create_session() -> requests.Session:
    session = requests.Session()
    session.headers.update({
        'Accept': 'application/json',
        'User-Agent': USER_AGENT
    })
    return session


class ResilientFetcher:
    """
    Fetch JSON: direct first, then each relay with bounded retries.

    Without an explicit session, every thread that calls fetch() gets its
    own session from create_session(); requests.Session is not thread-safe.
    """

    def __init__(
        self,
        session: Optional[requests.Session] = None,
        relays: Sequence[Relay] = DEFAULT_RELAYS,
        config: Optional[FetchConfig] = None,
        sleep: Callable[[float], None] = time.sleep
    ):
        self._session = session
        self._local = threading.local()
        self.relays = tuple(relays)
        self.config = config or FetchConfig()
        self.sleep = sleep

    @property
    def session(self) -> requests.Session:
        if self._session is not None:
            return self._session
        session = getattr(self._local, 'session', None)
        if session is None:
            session = self._local.session = create_session()
        return session

    def _get_json(self, url: str, timeout: float) -> Any:
        """
        GET a URL and parse its body as JSON.

        Raises:
            NetworkFailure: timeout or connection error
            MalformedResponse: non-2xx status or non-JSON body
        """
        try:
            response = self.session.get(url, timeout=timeout)
        except requests.exceptions.RequestException as e:
            raise NetworkFailure(f"{url}: {e}") from e

        if not response.ok:
            raise MalformedResponse(f"{url}: HTTP {response.status_code}")

        try:
            return response.json()
        except ValueError as e:
            raise MalformedResponse(f"{url}: response is not JSON") from e

    def fetch(self, url: str) -> Any:
        """
        Fetch a URL and return its parsed JSON.

        Raises:
            FetchExhausted: the direct attempt and all relays failed
        """
        try:
            return self._get_json(url, self.config.direct_timeout)
        except (NetworkFailure, MalformedResponse) as e:
            logger.debug(f"Direct fetch failed, trying relays: {e}")

        for relay in self.relays:
            relay_url = relay.rewrite(url)
            for attempt in range(self.config.retries + 1):
                try:
                    return self._get_json(relay_url, self.config.relay_timeout)
                except MalformedResponse as e:
                    # Retrying the same relay will not fix a bad payload
                    logger.warning(f"Relay {relay.name} returned a bad response: {e}")
                    break
                except NetworkFailure as e:
                    if attempt == self.config.retries:
                        logger.warning(
                            f"Relay {relay.name} failed after {self.config.retries} retries: {e}"
                        )
                    else:
                        self.sleep(self.config.backoff_step * (attempt + 1))

        raise FetchExhausted(url)
