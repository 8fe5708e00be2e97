"""Tests for ResilientFetcher relay fallback and retry behavior."""

import threading

import pytest
import requests

from parkmap.conftest import TEST_RELAYS, FakeResponse, FakeSession
from parkmap.constants import USER_AGENT
from parkmap.errors import FetchExhausted
from parkmap.ingest.fetch import DEFAULT_RELAYS, FetchConfig, Relay, ResilientFetcher

URL = 'https://example.test/data.json?x=1'
RELAY_A = TEST_RELAYS[0].rewrite(URL)
RELAY_B = TEST_RELAYS[1].rewrite(URL)


def test_relay_rewrite_encodes_url():
    """The wrapped URL is fully percent-encoded."""
    relay = Relay('r', 'https://relay.test/?{url}')
    assert relay.rewrite(URL) == 'https://relay.test/?https%3A%2F%2Fexample.test%2Fdata.json%3Fx%3D1'


def test_default_relays_are_ordered_and_distinct():
    assert [r.name for r in DEFAULT_RELAYS] == ['corsproxy', 'allorigins']
    assert isinstance(DEFAULT_RELAYS, tuple)


def test_direct_success_skips_relays(make_fetcher):
    fetcher = make_fetcher({URL: [FakeResponse({'ok': True})]})

    assert fetcher.fetch(URL) == {'ok': True}
    assert fetcher.session.urls() == [URL]
    assert fetcher.session.calls[0][1] == FetchConfig().direct_timeout


def test_direct_failure_falls_through_without_retry(make_fetcher, sleeps):
    """A direct timeout is tried once, then the first relay answers."""
    fetcher = make_fetcher({
        URL: [requests.exceptions.Timeout('slow')],
        RELAY_A: [FakeResponse([1, 2])],
    })

    assert fetcher.fetch(URL) == [1, 2]
    assert fetcher.session.urls() == [URL, RELAY_A]
    assert fetcher.session.calls[1][1] == FetchConfig().relay_timeout
    assert sleeps == []


def test_direct_non_json_falls_through(make_fetcher):
    fetcher = make_fetcher({
        URL: [FakeResponse(text='<html>blocked</html>')],
        RELAY_A: [FakeResponse({'via': 'relay'})],
    })
    assert fetcher.fetch(URL) == {'via': 'relay'}


def test_network_failures_retry_with_linear_backoff(make_fetcher, sleeps):
    """retries=2 means three attempts on a relay, sleeping 0.5s then 1.0s."""
    error = requests.exceptions.ConnectionError('reset')
    fetcher = make_fetcher({
        RELAY_A: [error, error, FakeResponse({'n': 3})],
    })

    assert fetcher.fetch(URL) == {'n': 3}
    assert fetcher.session.urls() == [URL, RELAY_A, RELAY_A, RELAY_A]
    assert sleeps == [0.5, 1.0]


def test_exhausted_retries_move_to_next_relay(make_fetcher, sleeps):
    fetcher = make_fetcher({
        RELAY_A: [requests.exceptions.Timeout('slow')],
        RELAY_B: [FakeResponse({'from': 'b'})],
    })

    assert fetcher.fetch(URL) == {'from': 'b'}
    assert fetcher.session.urls() == [URL, RELAY_A, RELAY_A, RELAY_A, RELAY_B]
    # No sleep after the final attempt on a relay
    assert sleeps == [0.5, 1.0]


def test_malformed_json_skips_relay_without_retry(make_fetcher, sleeps):
    fetcher = make_fetcher({
        RELAY_A: [FakeResponse(text='not json')],
        RELAY_B: [FakeResponse({'from': 'b'})],
    })

    assert fetcher.fetch(URL) == {'from': 'b'}
    assert fetcher.session.urls() == [URL, RELAY_A, RELAY_B]
    assert sleeps == []


def test_non_2xx_skips_relay_without_retry(make_fetcher, sleeps):
    fetcher = make_fetcher({
        RELAY_A: [FakeResponse({'error': 'denied'}, status_code=403)],
        RELAY_B: [FakeResponse({'from': 'b'})],
    })

    assert fetcher.fetch(URL) == {'from': 'b'}
    assert fetcher.session.urls().count(RELAY_A) == 1


def test_all_relays_exhausted_raises(make_fetcher):
    fetcher = make_fetcher({}, retries=1)

    with pytest.raises(FetchExhausted) as excinfo:
        fetcher.fetch(URL)

    assert excinfo.value.url == URL
    # direct + 2 attempts per relay
    assert len(fetcher.session.calls) == 1 + 2 * len(TEST_RELAYS)


def test_no_relays_means_direct_only(make_fetcher):
    fetcher = make_fetcher({})
    fetcher.relays = ()

    with pytest.raises(FetchExhausted):
        fetcher.fetch(URL)
    assert fetcher.session.urls() == [URL]


def test_negative_retries_rejected():
    with pytest.raises(ValueError):
        FetchConfig(retries=-1)


def test_each_thread_gets_its_own_session():
    """Without an injected session, sessions are never shared across threads."""
    fetcher = ResilientFetcher(relays=TEST_RELAYS)
    sessions = {}

    def grab(name):
        sessions[name] = fetcher.session

    workers = [threading.Thread(target=grab, args=(name,)) for name in ('a', 'b')]
    for worker in workers:
        worker.start()
    for worker in workers:
        worker.join()

    assert sessions['a'] is not sessions['b']
    assert fetcher.session is fetcher.session
    assert sessions['a'].headers['User-Agent'] == USER_AGENT


def test_injected_session_is_used_as_is():
    session = FakeSession()
    assert ResilientFetcher(session=session).session is session
