import logging
import time

from flask import Blueprint, Response, current_app, jsonify

from ..api.routes import json_body, load_parameters, usage_tracker
from ..errors import StoreUnavailableError
from ..schemas import report_input_schema
from ..services.kv_store import KVStore
from ..services.reports import ReportGenerator, projection_csv, scenario_report_text

logger = logging.getLogger(__name__)

reports_bp = Blueprint('reports', __name__)


def _attachment(content, mimetype, filename):
    return Response(
        content,
        mimetype=mimetype,
        headers={'Content-Disposition': f'attachment; filename="{filename}"'},
    )


@reports_bp.route('/generate-report', methods=['POST'])
def generate_report():
    """Persist an enriched report for the posted scenario and count it."""
    report_input = report_input_schema.load(json_body())
    generator = ReportGenerator(KVStore(), usage_tracker(), prefix=current_app.config['REPORT_KEY_PREFIX'])
    try:
        report = generator.generate(report_input)
    except StoreUnavailableError:
        logger.exception("Error generating report")
        return jsonify({'error': 'Failed to generate report'}), 500
    return jsonify({'success': True, 'reportId': report['id'], 'report': report})


@reports_bp.route('/report.txt', methods=['POST'])
def download_report():
    """Plain-text report for the posted parameters (not persisted)."""
    text = scenario_report_text(load_parameters())
    return _attachment(text, 'text/plain', f"cfo-helper-report-{int(time.time() * 1000)}.txt")


@reports_bp.route('/projection.csv', methods=['POST'])
def download_projection():
    return _attachment(projection_csv(load_parameters()), 'text/csv', 'cfo-helper-projection.csv')
