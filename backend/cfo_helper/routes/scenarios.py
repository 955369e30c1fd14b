import logging

from flask import Blueprint, current_app, jsonify

from ..api.routes import json_body, usage_tracker
from ..errors import StoreUnavailableError
from ..services.kv_store import KVStore
from ..services.scenarios import ScenarioHistory

logger = logging.getLogger(__name__)

scenarios_bp = Blueprint('scenarios', __name__)


def scenario_history():
    config = current_app.config
    return ScenarioHistory(
        KVStore(),
        usage_tracker(),
        prefix=config['SCENARIO_KEY_PREFIX'],
        limit=config['SCENARIO_HISTORY_LIMIT'],
    )


@scenarios_bp.route('/scenario', methods=['POST'])
def save_scenario():
    """Store a snapshot of the posted scenario and count it."""
    data = json_body()
    if not isinstance(data, dict):
        return jsonify({'error': 'Scenario must be a JSON object'}), 400

    try:
        scenario_id = scenario_history().save(data)
    except StoreUnavailableError:
        logger.exception("Error saving scenario")
        return jsonify({'error': 'Failed to save scenario'}), 500
    return jsonify({'success': True, 'scenarioId': scenario_id})


@scenarios_bp.route('/scenarios', methods=['GET'])
def get_scenarios():
    """Return the most recent scenario snapshots, newest first."""
    try:
        scenarios = scenario_history().recent()
    except StoreUnavailableError:
        logger.exception("Error loading scenarios")
        return jsonify({'scenarios': []}), 500
    return jsonify({'scenarios': scenarios})
