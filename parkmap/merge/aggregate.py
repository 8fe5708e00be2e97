"""
Combine parking lots from every source.

Sources run concurrently, each with its own fetcher and HTTP sessions.
They share only the immutable relay tuple and fetch config. Output keeps
source order (TPC first, then NTPC). Lots that appear in both feeds under
different ids are not deduplicated.
"""

import asyncio
import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, Dict, List, Optional, Sequence, Type

from ..constants import SOURCE_NTPC, SOURCE_TPC
from ..errors import NoDataAvailable
from ..ingest.fetch import DEFAULT_RELAYS, FetchConfig, Relay, ResilientFetcher
from ..models import ParkingLot
from ..normalize import normalize_ntpc, normalize_tpc
from ..normalize.base import BaseNormalizer

logger = logging.getLogger(__name__)

# Source id -> normalizer class, in merge order
NORMALIZERS: Dict[str, Type[BaseNormalizer]] = {
    SOURCE_TPC: normalize_tpc.Normalizer,
    SOURCE_NTPC: normalize_ntpc.Normalizer,
}


def build_normalizers(
    sources: Optional[Sequence[str]] = None,
    relays: Sequence[Relay] = DEFAULT_RELAYS,
    config: Optional[FetchConfig] = None,
    fetcher_factory: Optional[Callable[[], ResilientFetcher]] = None
) -> List[BaseNormalizer]:
    """
    Create normalizers for the given source ids (None = all).

    Source ids are case-insensitive; merge order follows NORMALIZERS, not
    the order given. Each normalizer gets its own fetcher; only the relay
    tuple and the config are common to all of them.
    """
    if fetcher_factory is None:
        def fetcher_factory():
            return ResilientFetcher(relays=relays, config=config)

    if sources is None:
        wanted = set(NORMALIZERS)
    else:
        wanted = {s.upper() for s in sources}
        unknown = wanted - set(NORMALIZERS)
        if unknown:
            raise ValueError(f"Unknown sources: {', '.join(sorted(unknown))}")

    return [cls(fetcher_factory()) for source_id, cls in NORMALIZERS.items() if source_id in wanted]


class Aggregator:
    """Run all source normalizers concurrently and merge their lots."""

    def __init__(self, normalizers: Optional[Sequence[BaseNormalizer]] = None):
        self.normalizers = list(normalizers) if normalizers is not None else build_normalizers()

    def aggregate(self) -> List[ParkingLot]:
        """
        Fetch every source and return the combined lots.

        Raises:
            NoDataAvailable: no source produced a usable lot
        """
        results: List[List[ParkingLot]] = []

        if self.normalizers:
            with ThreadPoolExecutor(max_workers=len(self.normalizers)) as executor:
                futures = [executor.submit(n.run) for n in self.normalizers]

                # Collect in source order
                for normalizer, future in zip(self.normalizers, futures):
                    try:
                        results.append(future.result())
                    except Exception as e:
                        logger.error(f"Error normalizing {normalizer.source_id}: {e}")
                        results.append([])

        combined = [lot for lots in results for lot in lots if lot.has_location]

        if not combined:
            raise NoDataAvailable()

        logger.info(f"Aggregated {len(combined)} lots from {len(self.normalizers)} sources")
        return combined

    async def aggregate_async(self) -> List[ParkingLot]:
        """Coroutine form of aggregate(), run in the default executor."""
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, self.aggregate)

