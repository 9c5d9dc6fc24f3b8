"""
WeGlide API client.

Handles communication with the WeGlide REST API, including:
- Club and airport scoped flight queries
- Offset pagination over the flight list endpoint
- Best-effort error handling (partial results over no results)

The flight list endpoint takes `limit` and `skip` and returns a JSON
array. An empty array is the only reliable end-of-data signal: a
dataset whose size is a multiple of the page size ends on a full
page, so short pages are not treated as the last one.
"""

import logging
import threading
from dataclasses import dataclass
from enum import Enum
from typing import Any, List, Optional

import requests

from clubboard.config import config
from clubboard.models import FlightRecord

logger = logging.getLogger(__name__)


class ScopeKind(str, Enum):
    """Query dimension used to select flights on WeGlide."""
    CLUB = 'club'
    AIRPORT = 'airport'


@dataclass(frozen=True)
class FlightScope:
    """
    Scope filter for flight list queries.

    WeGlide expects: club_id_in=<id> or airport_id_in=<id>
    """
    kind: ScopeKind
    ident: str

    @classmethod
    def club(cls, club_id: str) -> 'FlightScope':
        return cls(ScopeKind.CLUB, str(club_id))

    @classmethod
    def airport(cls, airport_id: str) -> 'FlightScope':
        return cls(ScopeKind.AIRPORT, str(airport_id))

    def to_params(self) -> dict:
        """Convert to WeGlide API query parameters."""
        return {f'{self.kind.value}_id_in': self.ident}

    def __str__(self) -> str:
        return f'{self.kind.value}={self.ident}'


class WeGlideClient:
    """
    Client for the WeGlide flight list API.

    Handles:
    - GET requests to /v1/flight
    - Scope filtering (club or airport)
    - Pagination with a fixed page size
    """

    def __init__(
        self,
        base_url: str = 'https://api.weglide.org',
        page_size: int = 100,
        timeout: Optional[float] = 30,
        session: Optional[requests.Session] = None,
    ):
        self.base_url = base_url.rstrip('/')
        self.page_size = page_size
        self.timeout = timeout
        self.session = session or requests.Session()

        # Statistics, updated from both scope workers
        self._stats_lock = threading.Lock()
        self._pages_fetched = 0
        self._page_errors = 0
        self._last_error: Optional[str] = None

    @classmethod
    def from_config(cls) -> 'WeGlideClient':
        """Create client from application configuration."""
        return cls(
            base_url=config.weglide.base_url,
            page_size=config.weglide.page_size,
            timeout=config.weglide.timeout_seconds,
        )

    def get_flights_page(
        self,
        scope: FlightScope,
        skip: int,
        limit: Optional[int] = None,
    ) -> List[Any]:
        """
        Fetch one page of raw flight objects.

        Args:
            scope: Club or airport filter
            skip: Offset of the first flight on the page
            limit: Page size (defaults to the client's page size)

        Returns:
            The decoded JSON array (possibly empty)

        Raises:
            requests.RequestException on network/API errors
            ValueError if the body is not a JSON array
        """
        url = f'{self.base_url}/v1/flight'
        params = scope.to_params()
        params['limit'] = limit or self.page_size
        params['skip'] = skip

        logger.debug(f'Fetching flights: {url} params={params}')

        response = self.session.get(url, params=params, timeout=self.timeout)
        response.raise_for_status()
        page = response.json()
        with self._stats_lock:
            self._pages_fetched += 1

        if not isinstance(page, list):
            raise ValueError(f'Expected a JSON array, got {type(page).__name__}')

        return page

    def fetch_all(self, scope: FlightScope) -> List[FlightRecord]:
        """
        Fetch every flight for a scope, page by page.

        Stops on the first empty page. Any failure ends pagination early
        and the flights collected so far are returned; nothing is retried.
        """
        logger.info(f'Fetching all flights for {scope}')

        flights: List[FlightRecord] = []
        skipped = 0
        skip = 0

        while True:
            try:
                page = self.get_flights_page(scope, skip)
            except requests.exceptions.Timeout:
                self._record_error(f'WeGlide API timeout at skip={skip}')
                break
            except requests.exceptions.HTTPError as e:
                status = e.response.status_code if e.response is not None else '?'
                self._record_error(f'WeGlide API error {status} at skip={skip}')
                break
            except requests.exceptions.RequestException as e:
                self._record_error(f'WeGlide request failed at skip={skip}: {e}')
                break
            except ValueError as e:
                # requests' JSONDecodeError is also a ValueError
                self._record_error(f'Invalid WeGlide response at skip={skip}: {e}')
                break

            if not page:
                break

            for payload in page:
                record = FlightRecord.from_dict(payload)
                if record is None:
                    skipped += 1
                    logger.warning(f'Skipping malformed flight record: {_describe(payload)}')
                    continue
                flights.append(record)

            skip += self.page_size
            logger.debug(f'  ... {len(flights)} flights loaded for {scope}')

        if skipped:
            logger.warning(f'Skipped {skipped} malformed flights for {scope}')
        logger.info(f'Fetch finished for {scope}: {len(flights)} flights')

        return flights

    def _record_error(self, message: str) -> None:
        with self._stats_lock:
            self._page_errors += 1
            self._last_error = message
        logger.error(message)

    @property
    def stats(self) -> dict:
        """Get client statistics."""
        with self._stats_lock:
            return {
                'pages_fetched': self._pages_fetched,
                'page_errors': self._page_errors,
                'last_error': self._last_error,
            }


def _describe(payload: Any) -> str:
    if isinstance(payload, dict):
        return f'id={payload.get("id")!r}'
    return type(payload).__name__
