"""
TWD97 (TM2 zone 121, EPSG:3826) to WGS84 coordinate conversion.

Both municipal feeds publish lot positions as TWD97 projected metres
(tw97x / tw97y). Web maps need latitude/longitude.
"""

import logging
import math
from typing import Optional, Tuple

from pyproj import Transformer

from ..constants import TWD97_PROJ, WGS84_CRS

logger = logging.getLogger(__name__)

_transformer: Optional[Transformer] = None


def get_transformer() -> Transformer:
    """Create the TWD97 -> WGS84 transformer once and reuse it."""
    global _transformer
    if _transformer is None:
        _transformer = Transformer.from_crs(
            TWD97_PROJ,  # TM2 zone 121, GRS80, no datum shift
            WGS84_CRS,   # WGS84 (lat/lon)
            always_xy=True
        )
    return _transformer


def _usable(value) -> bool:
    if value is None or isinstance(value, bool):
        return False
    try:
        number = float(value)
    except (TypeError, ValueError):
        return False
    return number != 0 and math.isfinite(number)


def convert_twd97_to_wgs84(x: Optional[float], y: Optional[float]) -> Tuple[float, float]:
    """
    Convert TWD97 coordinates (X, Y) to WGS84 (latitude, longitude).

    Args:
        x: TWD97 X coordinate (easting, metres)
        y: TWD97 Y coordinate (northing, metres)

    Returns:
        (lat, lng), or (0.0, 0.0) if either input is zero/missing or the
        conversion fails. Never raises.
    """
    if not _usable(x) or not _usable(y):
        return (0.0, 0.0)

    try:
        # Transform (x, y) -> (lon, lat)
        lng, lat = get_transformer().transform(float(x), float(y))
    except Exception as e:
        logger.warning(f"Coordinate conversion error for ({x}, {y}): {e}")
        return (0.0, 0.0)

    if not (math.isfinite(lat) and math.isfinite(lng)):
        logger.warning(f"Coordinate conversion produced no result for ({x}, {y})")
        return (0.0, 0.0)

    return (lat, lng)
