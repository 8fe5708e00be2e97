"""Tests for the Taipei City (TPC) normalizer."""

from parkmap.conftest import StubFetcher
from parkmap.constants import TPC_AVAIL_URL, TPC_DESC_URL
from parkmap.errors import FetchExhausted
from parkmap.ingest.base import RawFeed
from parkmap.normalize.normalize_tpc import Normalizer


def park_payload(parks):
    return {'data': {'park': parks}}


def desc(lot_id, x='300000', y='2770000', **fields):
    record = {'id': lot_id, 'name': f'Lot {lot_id}', 'address': 'Somewhere',
              'payex': '40/hr', 'totalcar': 100, 'tw97x': x, 'tw97y': y}
    record.update(fields)
    return record


def test_end_to_end_single_lot():
    """One description with a matching availability record yields one lot."""
    fetcher = StubFetcher({
        TPC_DESC_URL: park_payload([desc('P1', totalcar=100)]),
        TPC_AVAIL_URL: park_payload([{'id': 'P1', 'availablecar': 42}]),
    })

    lots = Normalizer(fetcher).run()

    assert len(lots) == 1
    lot = lots[0]
    assert lot.id == 'P1'
    assert lot.totalcar == 100
    assert lot.availablecar == 42
    assert lot.lat != 0 and lot.lng != 0
    assert lot.source == 'TPC'


def test_unmatched_description_gets_unknown_availability():
    feed = RawFeed(descriptions=[desc('P1'), desc('P2')],
                   availability=[{'id': 'P1', 'availablecar': 3}])

    lots = Normalizer(StubFetcher()).normalize(feed)

    assert [(lot.id, lot.availablecar) for lot in lots] == [('P1', 3), ('P2', -9)]


def test_sentinels_preserved_and_garbage_normalized():
    feed = RawFeed(
        descriptions=[desc('A'), desc('B'), desc('C')],
        availability=[
            {'id': 'A', 'availablecar': -11},
            {'id': 'B', 'availablecar': -4},
            {'id': 'C', 'availablecar': 'n/a'},
        ]
    )

    lots = Normalizer(StubFetcher()).normalize(feed)

    assert [lot.availablecar for lot in lots] == [-11, -9, -9]


def test_lots_without_coordinates_are_dropped():
    feed = RawFeed(
        descriptions=[desc('ok'), desc('zero', x='0', y='0'), desc('blank', x='', y='2770000')],
        availability=[]
    )

    normalizer = Normalizer(StubFetcher())
    lots = normalizer.normalize(feed)

    assert [lot.id for lot in lots] == ['ok']
    assert normalizer.skipped['no_location'] == 2


def test_extra_fields_pass_through():
    feed = RawFeed(descriptions=[desc('P1', area='Xinyi', tel='02-2720', serviceTime='24h')],
                   availability=[])

    lot = Normalizer(StubFetcher()).normalize(feed)[0]

    assert lot.extra == {'area': 'Xinyi', 'tel': '02-2720', 'serviceTime': '24h'}


def test_capacity_parsing():
    feed = RawFeed(descriptions=[desc('A', totalcar='80'), desc('B', totalcar=None)],
                   availability=[])

    lots = Normalizer(StubFetcher()).normalize(feed)

    assert [lot.totalcar for lot in lots] == [80, 0]


def test_one_timestamp_per_run():
    feed = RawFeed(descriptions=[desc('A'), desc('B')], availability=[])
    lots = Normalizer(StubFetcher()).normalize(feed)
    assert lots[0].last_updated == lots[1].last_updated


def test_fetch_failure_returns_empty():
    fetcher = StubFetcher({
        TPC_DESC_URL: FetchExhausted(TPC_DESC_URL),
        TPC_AVAIL_URL: park_payload([]),
    })
    assert Normalizer(fetcher).run() == []


def test_malformed_payload_returns_empty():
    fetcher = StubFetcher({
        TPC_DESC_URL: {'unexpected': True},
        TPC_AVAIL_URL: park_payload([]),
    })
    assert Normalizer(fetcher).run() == []


def test_description_and_availability_both_requested():
    fetcher = StubFetcher({
        TPC_DESC_URL: park_payload([]),
        TPC_AVAIL_URL: park_payload([]),
    })
    Normalizer(fetcher).run()
    assert sorted(fetcher.urls) == sorted([TPC_DESC_URL, TPC_AVAIL_URL])
