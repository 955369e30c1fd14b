import logging

from flask import Blueprint, current_app, jsonify, request
from marshmallow import ValidationError

from ..errors import StoreUnavailableError
from ..schemas import scenario_parameters_schema, usage_schema
from ..services.insights import get_recommendations
from ..services.kv_store import KVStore
from ..services.market_data import MarketDataFeed
from ..services.metrics import compute_metrics, project_scenario, runway_progress, runway_status
from ..services.usage import UsageCounters, UsageTracker

logger = logging.getLogger(__name__)

api_bp = Blueprint('api', __name__)
market_feed = MarketDataFeed()


def usage_tracker():
    """Usage tracker bound to the configured counter record."""
    return UsageTracker(KVStore(), key=current_app.config['USAGE_KEY'])


def json_body():
    """Return the request's JSON body or raise a ValidationError."""
    data = request.get_json(silent=True)
    if data is None:
        raise ValidationError('Request body must be valid JSON.')
    return data


def load_parameters():
    """Parse ScenarioParameters from the request body (an empty body means defaults)."""
    data = request.get_json(silent=True)
    return scenario_parameters_schema.load(data or {})


@api_bp.route('/health', methods=['GET'])
def health():
    return jsonify({'status': 'ok'})


@api_bp.route('/usage', methods=['GET'])
def get_usage():
    """Return the usage counters (zeros when nothing was recorded yet)."""
    try:
        usage = usage_tracker().load()
    except StoreUnavailableError:
        logger.exception("Error loading usage data")
        return jsonify(UsageCounters().to_dict()), 500
    return jsonify(usage.to_dict())


@api_bp.route('/usage', methods=['POST'])
def save_usage():
    """Overwrite the usage counters with the posted values."""
    data = usage_schema.load(json_body())
    try:
        usage = usage_tracker().save(data['scenarios'], data['reports'])
    except StoreUnavailableError:
        logger.exception("Error saving usage data")
        return jsonify({'error': 'Failed to save usage data'}), 500
    return jsonify({
        'success': True,
        'scenarios': usage.scenarios,
        'reports': usage.reports,
        'lastUpdated': usage.last_updated,
    })


@api_bp.route('/usage/billing', methods=['GET'])
def get_billing():
    try:
        usage = usage_tracker().load()
    except StoreUnavailableError:
        logger.exception("Error loading usage data")
        return jsonify(UsageCounters().billing()), 500
    return jsonify(usage.billing())


@api_bp.route('/metrics', methods=['POST'])
def calculate_metrics():
    """Compute derived metrics, projection and recommendations for a parameter set."""
    params = load_parameters()
    metrics = compute_metrics(params)
    return jsonify({
        'parameters': params.to_dict(),
        'metrics': metrics.to_dict(),
        'runwayStatus': runway_status(metrics.runway_months).to_dict(),
        'runwayProgress': runway_progress(metrics.runway_months),
        'projections': [p.to_dict() for p in project_scenario(params, metrics)],
        'recommendations': [r.to_dict() for r in get_recommendations(params, metrics)],
    })


@api_bp.route('/market-data', methods=['POST'])
def update_market_data():
    """Refresh the simulated market figures; counts as an analysed scenario."""
    update = market_feed.refresh(load_parameters())
    try:
        usage_tracker().increment('scenarios')
    except StoreUnavailableError:
        logger.exception("Could not count market data update")
    return jsonify(update.to_dict())
