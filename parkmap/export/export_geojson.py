"""
Export aggregated parking lots to frontend-ready JSON or GeoJSON.

JSON output is a list of flat per-lot records (ParkingLot.to_record()).
GeoJSON output is a FeatureCollection of Points with the same properties
plus an availability status code.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Sequence

from ..constants import AVAILABILITY_SENTINELS
from ..models import AvailabilityStatus, ParkingLot, describe_availability

logger = logging.getLogger(__name__)


def lot_to_feature(lot: ParkingLot) -> Dict:
    """
    Transform a lot to a GeoJSON Point feature.

    Args:
        lot: Normalized parking lot

    Returns:
        GeoJSON feature with [lng, lat] coordinates
    """
    props = lot.to_record()
    props['status'] = lot.status.value
    return {
        'type': 'Feature',
        'properties': props,
        'geometry': {
            'type': 'Point',
            'coordinates': [lot.lng, lot.lat]
        }
    }


def _write_json(data: Any, output_path: Path) -> bool:
    output_path = Path(output_path)
    try:
        output_path.parent.mkdir(parents=True, exist_ok=True)
        with open(output_path, 'w', encoding='utf-8') as f:
            json.dump(data, f, ensure_ascii=False)
    except OSError as e:
        logger.error(f"Could not write {output_path}: {e}")
        return False
    logger.info(f"Wrote {output_path}")
    return True


def export_json(lots: Sequence[ParkingLot], output_path: Path) -> bool:
    """Write lots as a JSON list of flat records."""
    return _write_json([lot.to_record() for lot in lots], output_path)


def export_geojson(lots: Sequence[ParkingLot], output_path: Path) -> bool:
    """Write lots as a GeoJSON FeatureCollection."""
    collection = {
        'type': 'FeatureCollection',
        'features': [lot_to_feature(lot) for lot in lots]
    }
    return _write_json(collection, output_path)


def compute_stats(lots: Sequence[ParkingLot]) -> Dict:
    """
    Summarize lots by source and availability status.

    Returns:
        Dict with total, by_source, by_status, total_capacity and
        available_spaces (sum of literal counts only)
    """
    by_source: Dict[str, int] = {}
    by_status: Dict[str, int] = {status.value: 0 for status in AvailabilityStatus}

    for lot in lots:
        by_source[lot.source] = by_source.get(lot.source, 0) + 1
        by_status[lot.status.value] += 1

    return {
        'total': len(lots),
        'by_source': by_source,
        'by_status': by_status,
        'total_capacity': sum(lot.totalcar for lot in lots),
        'available_spaces': sum(
            lot.availablecar for lot in lots if lot.status is AvailabilityStatus.COUNT
        ),
    }


def print_stats(stats: Dict) -> None:
    """Print the statistics report."""
    total = stats['total']

    print("\n" + "="*60)
    print("PARKING STATISTICS")
    print("="*60)

    print(f"\nTotal lots: {total}")
    print("\nBy source:")
    for src in sorted(stats['by_source']):
        count = stats['by_source'][src]
        pct = (count / total * 100) if total else 0
        print(f"  {src:10s}: {count:6d} ({pct:5.1f}%)")

    print("\nBy availability:")
    for status, count in stats['by_status'].items():
        pct = (count / total * 100) if total else 0
        print(f"  {status:10s}: {count:6d} ({pct:5.1f}%)")

    print("\nSentinel codes:")
    for value in sorted(AVAILABILITY_SENTINELS, reverse=True):
        print(f"  {value:4d}  {describe_availability(value)}")

    print(f"\nCar capacity:     {stats['total_capacity']:8d}")
    print(f"Reported free:    {stats['available_spaces']:8d}")


def summarize(lots: List[ParkingLot]) -> Dict:
    """Compute and print statistics; returns the stats dict."""
    stats = compute_stats(lots)
    print_stats(stats)
    return stats
