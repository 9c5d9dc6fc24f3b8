"""
Analytics module for ClubBoard.

Turns cached flight datasets into statistics and leaderboards.
"""

from clubboard.analytics.leaderboards import (
    DistanceStats,
    QueryResult,
    club_summary,
    compute_stats,
    filter_by_aircraft,
    filter_by_year,
    merge_flights,
    process,
    top_flights,
    top_per_pilot,
)

__all__ = [
    'DistanceStats',
    'QueryResult',
    'club_summary',
    'compute_stats',
    'filter_by_aircraft',
    'filter_by_year',
    'merge_flights',
    'process',
    'top_flights',
    'top_per_pilot',
]
