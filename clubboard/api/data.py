"""
Flight data API endpoints.

Provides endpoints for:
- GET /api/data - Statistics and leaderboards for a year/fleet/guest filter
- GET /api/leaderboard - Top club flights across all years
- GET /api/stats - All-time and current-year club distance totals
"""

import logging
import time
from datetime import datetime

from flask import Blueprint, current_app, jsonify, request

from clubboard.analytics import club_summary, process
from clubboard.models import FilterCriteria, InvalidCriteriaError

logger = logging.getLogger(__name__)

data_bp = Blueprint('data', __name__, url_prefix='/api')


@data_bp.route('/data', methods=['GET'])
def get_data():
    """
    Get statistics and leaderboards for the requested filter.

    Query params:
    - year: 4-digit year or "all" (default: all)
    - aircraft: "club" for the club fleet only, anything else for all types
    - guests: "true" to include guest flights at the home airfield

    Returns:
    - data.stats: totalDistance, totalFlights, scoredFlights
    - data.topFlights: longest flights
    - data.topPerPilot: best flight of each pilot
    - availableYears: years present in the cached data, newest first
    """
    start_time = time.perf_counter()

    try:
        criteria = FilterCriteria.from_query_args(request.args)
    except InvalidCriteriaError as e:
        return jsonify({'error': str(e)}), 400

    snapshot = current_app.config['FLIGHT_CACHE'].get_fresh()
    result = process(snapshot, criteria)

    query_time_ms = (time.perf_counter() - start_time) * 1000
    logger.debug(f'/api/data {criteria} answered in {query_time_ms:.1f}ms')

    return jsonify({
        'data': result.to_dict(),
        'availableYears': list(snapshot.available_years),
    })


@data_bp.route('/leaderboard', methods=['GET'])
def get_leaderboard():
    """Top club flights over all years and all aircraft."""
    snapshot = current_app.config['FLIGHT_CACHE'].get_fresh()
    result = process(snapshot, FilterCriteria())
    return jsonify([f.to_dict() for f in result.top_flights])


@data_bp.route('/stats', methods=['GET'])
def get_stats():
    """All-time and current-year distance totals for club flights."""
    snapshot = current_app.config['FLIGHT_CACHE'].get_fresh()
    current_year = str(datetime.now().year)
    return jsonify(club_summary(snapshot.club_flights, current_year))
