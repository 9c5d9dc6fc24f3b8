"""
API module for ClubBoard.

Provides REST endpoints for:
- Filtered statistics and leaderboards
- Cache and fetcher status
"""

from clubboard.api.data import data_bp
from clubboard.api.metrics import metrics_bp

__all__ = ['data_bp', 'metrics_bp']
