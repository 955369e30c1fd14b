import os
from pathlib import Path

# backend/cfo_helper -> backend -> project root
PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent


def _default_database_uri():
    # Absolute path so the app works regardless of the current working directory.
    instance_dir = PROJECT_ROOT / 'instance'
    return f"sqlite:///{(instance_dir / 'cfo_helper.db').as_posix()}"


class Config:
    """Base configuration, overridable through ``CFO_HELPER_*`` environment variables."""

    SQLALCHEMY_DATABASE_URI = os.environ.get('CFO_HELPER_DATABASE_URI', _default_database_uri())
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    API_PREFIX = os.environ.get('CFO_HELPER_API_PREFIX', '/api')
    LOG_LEVEL = os.environ.get('CFO_HELPER_LOG_LEVEL', 'INFO')

    # Name of the single usage-counter record in the key-value store
    USAGE_KEY = 'cfo-helper-usage'
    SCENARIO_KEY_PREFIX = 'scenario-'
    REPORT_KEY_PREFIX = 'report-'
    SCENARIO_HISTORY_LIMIT = 10

    TESTING = False


class TestingConfig(Config):
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    TESTING = True
