#!/usr/bin/env python3
"""
Main pipeline orchestrator.

Runs the full data pipeline once:
1. Ingest - Fetch raw feeds for each source (direct, then relays)
2. Normalize - Convert to ParkingLot records
3. Merge - Combine sources
4. Export - Write JSON/GeoJSON output and print statistics
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from .errors import NoDataAvailable
from .export.export_geojson import export_geojson, export_json, summarize
from .ingest import ntpc, tpc
from .ingest.fetch import DEFAULT_RELAYS, FetchConfig
from .merge.aggregate import NORMALIZERS, Aggregator, build_normalizers
from .models import ParkingLot


def run_export(lots: List[ParkingLot], output_path: Path, fmt: Optional[str] = None) -> bool:
    """Write lots to output_path; format defaults from the file suffix."""
    if fmt is None:
        fmt = 'geojson' if output_path.suffix.lower() == '.geojson' else 'json'

    print(f"\nExporting {len(lots)} lots as {fmt} to {output_path}...")
    if fmt == 'geojson':
        return export_geojson(lots, output_path)
    return export_json(lots, output_path)


def list_sources() -> None:
    """List configured sources and their endpoints."""
    endpoints = {
        'TPC': [tpc.Ingestor.DESC_URL, tpc.Ingestor.AVAIL_URL],
        'NTPC': [ntpc.Ingestor.DESC_BASE_URL, ntpc.Ingestor.AVAIL_BASE_URL],
    }

    print("\nAvailable sources:")
    print("-" * 60)
    for source_id in NORMALIZERS:
        print(f"  {source_id}:")
        for url in endpoints.get(source_id, []):
            print(f"    {url}")

    print("\nRelays (in fallback order):")
    for relay in DEFAULT_RELAYS:
        print(f"  {relay.name}: {relay.template}")


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(
        description='Fetch live parking availability for Taipei and New Taipei',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m parkmap.pipeline                          # Fetch all sources, print statistics
  python -m parkmap.pipeline -s tpc                   # Taipei City only
  python -m parkmap.pipeline -o data/parking.geojson  # Write GeoJSON
  python -m parkmap.pipeline -o data/parking.json     # Write flat JSON records
  python -m parkmap.pipeline --no-relays              # Direct requests only
  python -m parkmap.pipeline --list                   # List sources and relays
"""
    )

    parser.add_argument('--sources', '-s', type=str, nargs='+',
                        help='Source IDs to process: tpc, ntpc (default: all)')
    parser.add_argument('--output', '-o', type=Path,
                        help='Write results to this file')
    parser.add_argument('--format', '-f', type=str, choices=['json', 'geojson'],
                        help='Output format (default: from file suffix)')
    parser.add_argument('--retries', type=int, default=FetchConfig.retries,
                        help='Retries per relay after the first attempt')
    parser.add_argument('--direct-timeout', type=float, default=FetchConfig.direct_timeout,
                        help='Timeout in seconds for the direct request')
    parser.add_argument('--relay-timeout', type=float, default=FetchConfig.relay_timeout,
                        help='Timeout in seconds for each relay attempt')
    parser.add_argument('--no-relays', action='store_true',
                        help='Do not fall back to relay services')
    parser.add_argument('--no-stats', action='store_true',
                        help='Skip the statistics report')
    parser.add_argument('--list', '-l', action='store_true',
                        help='List available sources and exit')
    parser.add_argument('--verbose', '-v', action='store_true',
                        help='Enable debug logging')

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format='%(asctime)s %(levelname)s %(name)s: %(message)s'
    )

    if args.list:
        list_sources()
        return 0

    if args.retries < 0:
        parser.error(f"--retries must be >= 0, got {args.retries}")

    config = FetchConfig(
        direct_timeout=args.direct_timeout,
        relay_timeout=args.relay_timeout,
        retries=args.retries
    )

    try:
        normalizers = build_normalizers(
            args.sources,
            relays=() if args.no_relays else DEFAULT_RELAYS,
            config=config
        )
    except ValueError as e:
        parser.error(str(e))

    try:
        lots = Aggregator(normalizers).aggregate()
    except NoDataAvailable as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if not args.no_stats:
        summarize(lots)

    if args.output and not run_export(lots, args.output, args.format):
        return 1

    return 0


if __name__ == '__main__':
    sys.exit(main())
