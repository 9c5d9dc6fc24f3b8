"""
FilterCriteria - typed form of the /api/data query string.

Query parameters arrive as strings. They are parsed once here, at the
API boundary, so the query processor never compares raw strings.
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import Mapping, Optional

ALL_YEARS = 'all'

_YEAR_PATTERN = re.compile(r'^\d{4}$')


class InvalidCriteriaError(ValueError):
    """Raised when a query parameter cannot be turned into FilterCriteria."""


class AircraftScope(str, Enum):
    """
    Which aircraft count towards a leaderboard.

    - CLUB: only types on the club fleet allow-list
    - ANY: no restriction
    """
    CLUB = 'club'
    ANY = 'any'


@dataclass(frozen=True)
class FilterCriteria:
    """Request-scoped filter for the query processor."""
    year: str = ALL_YEARS
    include_guests: bool = False
    aircraft_scope: AircraftScope = AircraftScope.ANY

    @property
    def all_years(self) -> bool:
        return self.year == ALL_YEARS

    @classmethod
    def from_query_args(cls, args: Mapping[str, str]) -> 'FilterCriteria':
        """
        Build criteria from request query arguments.

        - guests: only the literal "true" enables guest flights
        - aircraft: only the literal "club" restricts to the club fleet
        - year: absent, empty or "all" means every year; otherwise it
          must be a 4-digit year

        Raises:
            InvalidCriteriaError if year is neither "all" nor 4 digits
        """
        return cls(
            year=_parse_year(args.get('year')),
            include_guests=args.get('guests') == 'true',
            aircraft_scope=(
                AircraftScope.CLUB if args.get('aircraft') == 'club'
                else AircraftScope.ANY
            ),
        )


def _parse_year(value: Optional[str]) -> str:
    if value is None:
        return ALL_YEARS
    value = value.strip()
    if not value or value.lower() == ALL_YEARS:
        return ALL_YEARS
    if not _YEAR_PATTERN.match(value):
        raise InvalidCriteriaError(f'Invalid year: {value!r}')
    return value
