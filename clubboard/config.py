"""
Configuration management for ClubBoard.

Loads settings from environment variables with sensible defaults.
A deployment serves exactly one club and one home airfield, so all
of the identifiers live here rather than in request parameters.
"""

import os
from dataclasses import dataclass, field
from typing import Tuple

from dotenv import load_dotenv

load_dotenv()


# Aircraft types owned by the club, as WeGlide spells them in aircraft.name
DEFAULT_CLUB_AIRCRAFT: Tuple[str, ...] = (
    'ASK 21',
    'ASK 23',
    'LS 4',
    'LS 8',
    'Discus 2b',
    'DG-1000S',
    'Duo Discus',
)


def _parse_name_list(value: str) -> Tuple[str, ...]:
    """Parse 'A, B, C' into a tuple of stripped names, or the defaults if empty."""
    if not value:
        return DEFAULT_CLUB_AIRCRAFT
    names = tuple(name.strip() for name in value.split(',') if name.strip())
    return names or DEFAULT_CLUB_AIRCRAFT


@dataclass(frozen=True)
class WeGlideConfig:
    """WeGlide API configuration."""
    base_url: str = os.getenv('WEGLIDE_BASE_URL', 'https://api.weglide.org')
    club_id: str = os.getenv('CLUB_ID', '526')
    airport_id: str = os.getenv('AIRPORT_ID', '154611')

    # The flight list endpoint refuses limits above 100
    page_size: int = 100
    timeout_seconds: float = float(os.getenv('WEGLIDE_TIMEOUT_SECONDS', '30'))


@dataclass(frozen=True)
class CacheConfig:
    """In-memory cache settings."""
    ttl_seconds: int = int(os.getenv('CACHE_TTL_SECONDS', '3600'))


@dataclass(frozen=True)
class LeaderboardConfig:
    """Leaderboard sizing and the club fleet allow-list."""
    size: int = 20
    club_aircraft: Tuple[str, ...] = field(
        default_factory=lambda: _parse_name_list(os.getenv('CLUB_AIRCRAFT', ''))
    )


@dataclass(frozen=True)
class AppConfig:
    """Main application configuration."""
    weglide: WeGlideConfig
    cache: CacheConfig
    leaderboard: LeaderboardConfig

    # Flask settings
    debug: bool
    port: int


def load_config() -> AppConfig:
    """Load and validate all configuration."""
    return AppConfig(
        weglide=WeGlideConfig(),
        cache=CacheConfig(),
        leaderboard=LeaderboardConfig(),
        debug=os.getenv('FLASK_DEBUG', '0') == '1',
        port=int(os.getenv('PORT', '3000')),
    )


# Singleton instance
config = load_config()
