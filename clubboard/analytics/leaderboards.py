"""
Leaderboards and distance statistics over cached flights.

Pipeline for one request:
1. Merge: club flights, plus airport flights when guests are included,
   deduplicated by flight id (the airport copy wins a collision)
2. Filter: scoring year, then club fleet
3. Aggregate: total distance and flight counts
4. Rank: best flights overall and best flight per pilot

Distance policy:
An unscored flight (no contest distance) counts as 0 km for sums and
ranking. It still counts as a flight in `totalFlights`, but not in
`scoredFlights`. The policy is applied through
FlightRecord.score_distance and nowhere else.

Everything here is a pure function of (snapshot, criteria).
"""

import logging
import math
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Sequence

from clubboard.cache import CacheSnapshot
from clubboard.config import config
from clubboard.models import AircraftScope, FilterCriteria, FlightRecord

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DistanceStats:
    """Aggregate numbers for the filtered flights."""
    total_distance: int
    total_flights: int
    scored_flights: int

    def to_dict(self) -> dict:
        return {
            'totalDistance': self.total_distance,
            'totalFlights': self.total_flights,
            'scoredFlights': self.scored_flights,
        }


@dataclass(frozen=True)
class QueryResult:
    """Statistics plus both leaderboards for one set of criteria."""
    stats: DistanceStats
    top_flights: List[FlightRecord]
    top_per_pilot: List[FlightRecord]

    def to_dict(self) -> dict:
        """Convert to JSON-serializable dict for API responses."""
        return {
            'stats': self.stats.to_dict(),
            'topFlights': [f.to_dict() for f in self.top_flights],
            'topPerPilot': [f.to_dict() for f in self.top_per_pilot],
        }


def round_km(total: float) -> int:
    """Round half up, so 0.5 km totals go to 1 rather than to the even integer."""
    return int(math.floor(total + 0.5))


def merge_flights(
    club_flights: Iterable[FlightRecord],
    airport_flights: Iterable[FlightRecord],
    include_guests: bool,
) -> List[FlightRecord]:
    """
    Combine the club and airport datasets without duplicates.

    Club flights go in first; with guests included, airport flights are
    inserted after them and replace any club flight with the same id.
    Order follows first insertion of each id.
    """
    merged: Dict[object, FlightRecord] = {}
    for flight in club_flights:
        merged[flight.id] = flight
    if include_guests:
        for flight in airport_flights:
            merged[flight.id] = flight
    return list(merged.values())


def filter_by_year(flights: Iterable[FlightRecord], year: str) -> List[FlightRecord]:
    return [f for f in flights if f.year == year]


def filter_by_aircraft(
    flights: Iterable[FlightRecord],
    allowed_names: Iterable[str],
) -> List[FlightRecord]:
    """Keep flights whose aircraft name is on the allow-list (exact match)."""
    allowed = frozenset(allowed_names)
    return [f for f in flights if f.aircraft_name is not None and f.aircraft_name in allowed]


def compute_stats(flights: Sequence[FlightRecord]) -> DistanceStats:
    """
    Sum distances and count flights.

    The total is rounded once, after summing.
    """
    total = sum(f.score_distance for f in flights)
    return DistanceStats(
        total_distance=round_km(total),
        total_flights=len(flights),
        scored_flights=sum(1 for f in flights if f.has_score),
    )


def top_flights(flights: Iterable[FlightRecord], limit: int) -> List[FlightRecord]:
    """Longest flights first; ties keep their input order."""
    ranked = sorted(flights, key=lambda f: f.score_distance, reverse=True)
    return ranked[:limit]


def top_per_pilot(flights: Iterable[FlightRecord], limit: int) -> List[FlightRecord]:
    """
    Each pilot's best flight, longest first.

    Within a pilot the earliest of equally long flights is kept.
    """
    best: Dict[object, FlightRecord] = {}
    for flight in flights:
        current = best.get(flight.pilot_id)
        if current is None or flight.score_distance > current.score_distance:
            best[flight.pilot_id] = flight
    return top_flights(best.values(), limit)


def process(
    snapshot: CacheSnapshot,
    criteria: FilterCriteria,
    club_aircraft: Optional[Iterable[str]] = None,
    limit: Optional[int] = None,
) -> QueryResult:
    """
    Run the full merge/filter/rank pipeline for one request.

    Args:
        snapshot: Cached datasets to read from
        criteria: Parsed request filters
        club_aircraft: Fleet allow-list (defaults to configuration)
        limit: Leaderboard length (defaults to configuration)
    """
    if club_aircraft is None:
        club_aircraft = config.leaderboard.club_aircraft
    if limit is None:
        limit = config.leaderboard.size

    flights = merge_flights(
        snapshot.club_flights,
        snapshot.airport_flights,
        criteria.include_guests,
    )
    if not criteria.all_years:
        flights = filter_by_year(flights, criteria.year)
    if criteria.aircraft_scope == AircraftScope.CLUB:
        flights = filter_by_aircraft(flights, club_aircraft)

    logger.debug(f'{len(flights)} flights match {criteria}')

    return QueryResult(
        stats=compute_stats(flights),
        top_flights=top_flights(flights, limit),
        top_per_pilot=top_per_pilot(flights, limit),
    )


def club_summary(flights: Sequence[FlightRecord], current_year: str) -> dict:
    """All-time and current-year distance totals for a dataset."""
    all_time = sum(f.score_distance for f in flights)
    this_year = sum(f.score_distance for f in flights if f.year == current_year)
    return {
        'allTime': round_km(all_time),
        'currentYear': round_km(this_year),
        'totalFlights': len(flights),
    }
