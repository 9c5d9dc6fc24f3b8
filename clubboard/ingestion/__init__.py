"""
Data ingestion module for ClubBoard.

Handles paging through the WeGlide flight list for the club and
airport scopes.
"""

from clubboard.ingestion.weglide_client import FlightScope, ScopeKind, WeGlideClient

__all__ = ['FlightScope', 'ScopeKind', 'WeGlideClient']
