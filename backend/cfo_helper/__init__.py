import logging

from flask import Flask, jsonify, render_template, request
from flask_cors import CORS
from marshmallow import ValidationError

from .config import Config
from .database import init_db
from .errors import InvalidScenarioError
from .api.routes import api_bp
from .routes.scenarios import scenarios_bp
from .routes.reports import reports_bp
from .services.metrics import ScenarioParameters

logger = logging.getLogger(__name__)

# Slider bounds used by the calculator page: (min, max, step)
SLIDER_RANGES = {
    'employees': (1, 50, 1),
    'marketingBudget': (0, 200_000, 5_000),
    'productPrice': (10, 1_000, 10),
    'currentCash': (100_000, 10_000_000, 50_000),
}


def configure_logging(app):
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter('%(asctime)s %(levelname)s %(name)s: %(message)s'))
        logger.addHandler(handler)
    logger.setLevel(app.config['LOG_LEVEL'])

    @app.after_request
    def log_request(response):
        logger.info("%s %s -> %s", request.method, request.path, response.status_code)
        return response


def register_error_handlers(app):
    @app.errorhandler(ValidationError)
    def handle_validation_error(error):
        return jsonify({'error': 'Invalid request', 'details': error.messages}), 400

    @app.errorhandler(InvalidScenarioError)
    def handle_invalid_scenario(error):
        return jsonify({'error': 'Invalid scenario parameters', 'details': error.errors}), 400


def create_app(config=None):
    """Create and configure the Flask application.

    Args:
        config: a config class (see :mod:`.config`) or a mapping of overrides.
    """
    app = Flask(__name__,
                static_folder='../../frontend/static',
                template_folder='../../frontend/templates')
    app.config.from_object(Config)
    if isinstance(config, dict):
        app.config.from_mapping(config)
    elif config is not None:
        app.config.from_object(config)

    CORS(app)
    configure_logging(app)
    register_error_handlers(app)

    # Initialize database
    init_db(app)

    # Register blueprints
    prefix = app.config['API_PREFIX']
    app.register_blueprint(api_bp, url_prefix=prefix)
    app.register_blueprint(scenarios_bp, url_prefix=prefix)
    app.register_blueprint(reports_bp, url_prefix=prefix)

    @app.route('/')
    def index():
        return render_template('index.html',
                               api_prefix=prefix,
                               defaults=ScenarioParameters().to_dict(),
                               sliders=SLIDER_RANGES)

    return app
