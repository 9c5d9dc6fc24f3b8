"""
ClubBoard Backend Package.

Gliding club leaderboards built on WeGlide flight data, served with Flask.

Modules:
    api/         REST endpoints for leaderboards, statistics and status
    models/      FlightRecord and FilterCriteria dataclasses
    ingestion/   WeGlide client with best-effort pagination
    analytics/   Merge, filter and ranking of cached flights
    cache.py     Thread-safe snapshot cache with hourly refresh
    config.py    Centralized configuration from environment variables
"""

__version__ = '1.0.0'
