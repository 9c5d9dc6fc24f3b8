"""
In-memory cache of club and airport flights.

Holds the most recent WeGlide datasets plus the list of years that
appear in them, enabling:
- Fast reads for API endpoints (no remote call per request)
- Lazy refresh once the data is older than the TTL (1 hour)
- At most one refresh in flight, however many requests arrive

Design rationale:
All cached state lives in one immutable CacheSnapshot. A refresh builds
a complete new snapshot and swaps it in with a single assignment, so a
reader holding a snapshot never sees club data from one refresh next to
airport data from another. If a refresh blows up, the old snapshot and
its timestamp stay in place and callers keep getting stale data.
"""

import logging
import threading
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Callable, Iterable, List, Optional, Sequence, Tuple

from clubboard.config import config
from clubboard.ingestion import FlightScope, WeGlideClient
from clubboard.models import FlightRecord

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CacheSnapshot:
    """
    One complete, consistent view of the cached data.

    `last_fetched_at` is None until the first successful refresh.
    """
    club_flights: Tuple[FlightRecord, ...] = ()
    airport_flights: Tuple[FlightRecord, ...] = ()
    available_years: Tuple[str, ...] = ()
    last_fetched_at: Optional[float] = None

    def age_seconds(self, now: float) -> Optional[float]:
        if self.last_fetched_at is None:
            return None
        return now - self.last_fetched_at


def collect_years(*datasets: Iterable[FlightRecord]) -> List[str]:
    """Distinct scoring years across all datasets, newest first."""
    years = {flight.year for dataset in datasets for flight in dataset}
    return sorted(years, reverse=True)


class FlightCache:
    """
    Thread-safe cache of WeGlide flights.

    Readers call get_fresh() and get back a snapshot. The refresh lock
    serializes refreshes; requests that arrive while one is running wait
    for it and reuse its result instead of starting another.
    """

    def __init__(
        self,
        client: Optional[WeGlideClient] = None,
        club_scope: Optional[FlightScope] = None,
        airport_scope: Optional[FlightScope] = None,
        ttl_seconds: Optional[int] = None,
        clock: Callable[[], float] = time.time,
    ):
        self.client = client or WeGlideClient.from_config()
        self.club_scope = club_scope or FlightScope.club(config.weglide.club_id)
        self.airport_scope = airport_scope or FlightScope.airport(config.weglide.airport_id)
        self.ttl_seconds = ttl_seconds if ttl_seconds is not None else config.cache.ttl_seconds
        self._clock = clock

        self._snapshot = CacheSnapshot()
        self._refresh_lock = threading.Lock()

        # Statistics
        self._refresh_attempts = 0
        self._refresh_generation = 0  # completed refreshes, failed or not
        self._failed_refreshes = 0
        self._last_refresh_duration: Optional[float] = None

    @property
    def snapshot(self) -> CacheSnapshot:
        """Current snapshot, without triggering a refresh."""
        return self._snapshot

    def is_stale(self, snapshot: Optional[CacheSnapshot] = None) -> bool:
        """True if the snapshot was never filled or is older than the TTL."""
        if snapshot is None:
            snapshot = self._snapshot
        age = snapshot.age_seconds(self._clock())
        return age is None or age > self.ttl_seconds

    def get_fresh(self) -> CacheSnapshot:
        """
        Get a snapshot no older than the TTL.

        Refreshes synchronously when the data is stale. If a refresh is
        already running, waits for it and returns whatever it produced.
        """
        snapshot = self._snapshot
        if not self.is_stale(snapshot):
            return snapshot

        generation_seen = self._refresh_generation
        with self._refresh_lock:
            # A refresh finished while we waited for the lock; reuse its outcome
            if self._refresh_generation != generation_seen:
                return self._snapshot
            if self.is_stale():
                self._refresh_locked()
            return self._snapshot

    def refresh(self) -> bool:
        """
        Refresh unconditionally.

        Returns True if a new snapshot was swapped in.
        """
        with self._refresh_lock:
            return self._refresh_locked()

    def _refresh_locked(self) -> bool:
        try:
            return self._run_refresh()
        finally:
            self._refresh_generation += 1

    def _run_refresh(self) -> bool:
        self._refresh_attempts += 1
        logger.info('Refreshing flight cache...')
        start = time.perf_counter()

        try:
            club_flights, airport_flights = self._fetch_scopes()
        except Exception as e:
            self._failed_refreshes += 1
            logger.error(f'Cache refresh failed, keeping previous data: {e}')
            return False

        new_snapshot = CacheSnapshot(
            club_flights=tuple(club_flights),
            airport_flights=tuple(airport_flights),
            available_years=tuple(collect_years(club_flights, airport_flights)),
            last_fetched_at=self._clock(),
        )
        self._snapshot = new_snapshot
        self._last_refresh_duration = time.perf_counter() - start

        logger.info(
            f'Cache refreshed: {len(club_flights)} club flights, '
            f'{len(airport_flights)} airport flights, '
            f'{len(new_snapshot.available_years)} years '
            f'in {self._last_refresh_duration:.1f}s'
        )
        return True

    def _fetch_scopes(self) -> Tuple[Sequence[FlightRecord], Sequence[FlightRecord]]:
        """
        Fetch both scopes concurrently and wait for both.

        Leaving the executor block joins the workers, so a failure in one
        scope never abandons the other mid-flight.
        """
        with ThreadPoolExecutor(max_workers=2, thread_name_prefix='weglide') as executor:
            club_future = executor.submit(self.client.fetch_all, self.club_scope)
            airport_future = executor.submit(self.client.fetch_all, self.airport_scope)
            return club_future.result(), airport_future.result()

    @property
    def stats(self) -> dict:
        """Get cache statistics."""
        snapshot = self._snapshot
        age = snapshot.age_seconds(self._clock())
        return {
            'club_flights': len(snapshot.club_flights),
            'airport_flights': len(snapshot.airport_flights),
            'available_years': list(snapshot.available_years),
            'last_fetched_at': snapshot.last_fetched_at,
            'age_seconds': round(age, 1) if age is not None else None,
            'ttl_seconds': self.ttl_seconds,
            'stale': self.is_stale(snapshot),
            'refresh_attempts': self._refresh_attempts,
            'failed_refreshes': self._failed_refreshes,
            'last_refresh_duration': self._last_refresh_duration,
            'refreshing': self._refresh_lock.locked(),
        }


# Singleton instance
flight_cache = FlightCache()
