"""
Data models for ClubBoard.

Plain dataclasses, no persistence: flights live only in the in-memory
cache and are rebuilt from WeGlide on every refresh.
"""

from clubboard.models.flight import FlightRecord
from clubboard.models.criteria import (
    ALL_YEARS,
    AircraftScope,
    FilterCriteria,
    InvalidCriteriaError,
)

__all__ = [
    'FlightRecord',
    'ALL_YEARS',
    'AircraftScope',
    'FilterCriteria',
    'InvalidCriteriaError',
]
