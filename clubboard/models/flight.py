"""
FlightRecord - a single scored flight as delivered by WeGlide.

WeGlide returns deeply nested JSON. Only a handful of fields matter
for aggregation, so they are lifted into typed attributes while the
original payload is kept untouched for API responses.

Design notes:
- Distance is Optional[float]; None means "not scored", not zero
- The zero-default used for sums and sorting lives in `score_distance`
- Records without an id, a usable scoring_date or a pilot are rejected
"""

import logging
import math
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)


def _nested(payload: Dict[str, Any], section: str, key: str) -> Any:
    """Read payload[section][key], tolerating a missing or null section."""
    value = payload.get(section)
    if not isinstance(value, dict):
        return None
    return value.get(key)


def _parse_distance(value: Any) -> Optional[float]:
    """Finite contest distance in km, or None for missing and junk values."""
    if value is None or isinstance(value, bool):
        return None
    try:
        distance = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(distance):
        return None
    return distance


@dataclass(frozen=True)
class FlightRecord:
    """
    Parsed WeGlide flight.

    `raw` holds the payload exactly as received so the frontend gets
    every field the API offers (pilot names, takeoff site, etc).
    """
    id: Any
    scoring_date: str
    pilot_id: Any
    distance: Optional[float] = None
    aircraft_name: Optional[str] = None
    raw: Dict[str, Any] = field(default_factory=dict, compare=False, repr=False)

    @classmethod
    def from_dict(cls, payload: Any) -> Optional['FlightRecord']:
        """
        Parse a WeGlide flight object into a FlightRecord.

        Returns None if the payload is malformed or missing required fields.
        """
        if not isinstance(payload, dict):
            return None

        flight_id = payload.get('id')
        if flight_id is None:
            return None

        scoring_date = payload.get('scoring_date')
        if not isinstance(scoring_date, str) or len(scoring_date) < 4:
            return None

        pilot_id = _nested(payload, 'user', 'id')
        if pilot_id is None:
            return None

        distance = _parse_distance(_nested(payload, 'contest', 'distance'))

        aircraft_name = _nested(payload, 'aircraft', 'name')
        if not isinstance(aircraft_name, str):
            aircraft_name = None

        return cls(
            id=flight_id,
            scoring_date=scoring_date,
            pilot_id=pilot_id,
            distance=distance,
            aircraft_name=aircraft_name,
            raw=payload,
        )

    @property
    def year(self) -> str:
        """Four-digit year prefix of the scoring date."""
        return self.scoring_date[:4]

    @property
    def has_score(self) -> bool:
        return self.distance is not None

    @property
    def score_distance(self) -> float:
        """Contest distance in km, with unscored flights counting as 0."""
        return self.distance if self.distance is not None else 0.0

    def to_dict(self) -> dict:
        """Convert to JSON-serializable dict for API responses."""
        if self.raw:
            return self.raw
        return {
            'id': self.id,
            'scoring_date': self.scoring_date,
            'user': {'id': self.pilot_id},
            'contest': {'distance': self.distance},
            'aircraft': {'name': self.aircraft_name},
        }
