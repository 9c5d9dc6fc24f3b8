"""
Metrics API endpoints.

Provides endpoints for:
- GET /api/metrics/status - Cache and fetcher status
"""

import logging
from datetime import datetime, timezone

from flask import Blueprint, current_app, jsonify

from clubboard.config import config

logger = logging.getLogger(__name__)

metrics_bp = Blueprint('metrics', __name__, url_prefix='/api/metrics')


@metrics_bp.route('/status', methods=['GET'])
def get_system_status():
    """
    Get system health and status information.

    Never triggers a refresh. Reports:
    - Cache contents, age and refresh counters
    - WeGlide page counters
    - Configuration info
    """
    cache = current_app.config['FLIGHT_CACHE']
    cache_stats = cache.stats
    has_data = cache_stats['last_fetched_at'] is not None

    return jsonify({
        'status': 'healthy' if (has_data and not cache_stats['stale']) else 'degraded',
        'cache': cache_stats,
        'weglide': cache.client.stats,
        'config': {
            'club_id': config.weglide.club_id,
            'airport_id': config.weglide.airport_id,
            'page_size': config.weglide.page_size,
            'leaderboard_size': config.leaderboard.size,
            'club_aircraft': list(config.leaderboard.club_aircraft),
        },
        'timestamp': datetime.now(timezone.utc).isoformat(),
    })
