from flask_sqlalchemy import SQLAlchemy
from flask_marshmallow import Marshmallow
from pathlib import Path

db = SQLAlchemy()
ma = Marshmallow()


def init_db(app):
    """Initialize the database with the Flask app."""
    uri = app.config['SQLALCHEMY_DATABASE_URI']

    # SQLite cannot create the file when its directory is missing
    if uri.startswith('sqlite:///'):
        Path(uri[len('sqlite:///'):]).parent.mkdir(parents=True, exist_ok=True)

    db.init_app(app)
    ma.init_app(app)

    with app.app_context():
        # Models must be imported so their tables are in the metadata before create_all().
        from .models import kv_entry  # noqa: F401 – imported for side-effect

        db.create_all()
