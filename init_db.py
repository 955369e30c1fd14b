from backend.cfo_helper import create_app
from backend.cfo_helper.database import db
from backend.cfo_helper.services.kv_store import KVStore
from backend.cfo_helper.services.usage import UsageTracker


def init_database():
    app = create_app()
    with app.app_context():
        # Create the key-value table and an empty usage record
        db.create_all()
        usage = UsageTracker(KVStore(), key=app.config['USAGE_KEY'])
        if usage.store.get(usage.key) is None:
            usage.save(0, 0)
        print("Database initialized successfully!")

if __name__ == "__main__":
    init_database()
