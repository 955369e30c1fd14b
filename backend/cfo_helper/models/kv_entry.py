from datetime import datetime
from ..database import db


class KVEntry(db.Model):
    """One record of the key-value store: a string key mapped to a JSON document."""
    __tablename__ = 'kv_store'

    key = db.Column(db.String(255), primary_key=True)
    value = db.Column(db.JSON, nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def __init__(self, key, value):
        self.key = key
        self.value = value

    def to_dict(self):
        """Convert entry to dictionary."""
        return {
            'key': self.key,
            'value': self.value,
            'created_at': self.created_at.isoformat() if self.created_at else None,
            'updated_at': self.updated_at.isoformat() if self.updated_at else None
        }
