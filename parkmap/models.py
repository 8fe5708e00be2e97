"""
Canonical parking lot record shared by every source.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, Mapping

from .constants import (
    AVAILABILITY_SENTINELS,
    AVAILABLE_LIMITED,
    AVAILABLE_SCARCE,
    AVAILABLE_SUFFICIENT,
    AVAILABLE_UNKNOWN,
)


class AvailabilityStatus(str, Enum):
    """What an availablecar value means."""
    COUNT = "count"
    UNKNOWN = "unknown"
    SUFFICIENT = "sufficient"
    LIMITED = "limited"
    SCARCE = "scarce"


_SENTINEL_STATUS = {
    AVAILABLE_UNKNOWN: AvailabilityStatus.UNKNOWN,
    AVAILABLE_SUFFICIENT: AvailabilityStatus.SUFFICIENT,
    AVAILABLE_LIMITED: AvailabilityStatus.LIMITED,
    AVAILABLE_SCARCE: AvailabilityStatus.SCARCE,
}

_STATUS_TEXT = {
    AvailabilityStatus.UNKNOWN: "not provided",
    AvailabilityStatus.SUFFICIENT: "spaces sufficient",
    AvailabilityStatus.LIMITED: "fewer than half of spaces left",
    AvailabilityStatus.SCARCE: "spaces almost gone",
}


def is_valid_availability(value: int) -> bool:
    """True for a literal count (>= 0) or one of the four sentinels."""
    return value >= 0 or value in AVAILABILITY_SENTINELS


def classify_availability(value: int) -> AvailabilityStatus:
    """
    Classify an availablecar value.

    Raises:
        ValueError: if the value is neither a count nor a known sentinel
    """
    if value >= 0:
        return AvailabilityStatus.COUNT
    try:
        return _SENTINEL_STATUS[value]
    except KeyError:
        raise ValueError(f"Invalid availability value: {value}") from None


def describe_availability(value: int) -> str:
    """Human-readable description of an availablecar value."""
    status = classify_availability(value)
    if status is AvailabilityStatus.COUNT:
        return f"{value} spaces available"
    return _STATUS_TEXT[status]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class ParkingLot:
    """
    One physical parking lot after normalization.

    lat/lng of (0, 0) is the unset sentinel; such lots are never emitted.
    availablecar is a count (>= 0) or one of the sentinels -9/-11/-12/-13.
    """
    id: str
    name: str
    address: str
    payex: str
    totalcar: int
    availablecar: int
    lat: float
    lng: float
    source: str
    last_updated: datetime = field(default_factory=_utcnow)
    extra: Mapping[str, Any] = field(default_factory=dict, compare=False)

    def __post_init__(self):
        if not is_valid_availability(self.availablecar):
            raise ValueError(f"Invalid availability value: {self.availablecar}")
        if self.totalcar < 0:
            raise ValueError(f"Invalid capacity: {self.totalcar}")
        object.__setattr__(self, 'extra', MappingProxyType(dict(self.extra)))

    @property
    def has_location(self) -> bool:
        # Zero is never a legitimate latitude or longitude in this region
        return self.lat != 0 and self.lng != 0

    @property
    def status(self) -> AvailabilityStatus:
        return classify_availability(self.availablecar)

    def to_record(self) -> Dict[str, Any]:
        """Serialize to the flat per-lot record consumed by map frontends."""
        record = dict(self.extra)
        record.update({
            'id': self.id,
            'name': self.name,
            'address': self.address,
            'payex': self.payex,
            'totalcar': self.totalcar,
            'availablecar': self.availablecar,
            'lat': self.lat,
            'lng': self.lng,
            'lastUpdated': int(self.last_updated.timestamp() * 1000),
            'source': self.source,
        })
        return record
