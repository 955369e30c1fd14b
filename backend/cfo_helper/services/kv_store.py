"""Key-value persistence façade over the ``kv_store`` table.

Mirrors the small key-value API the rest of the backend is written against:
``get``/``set``/``delete``/``mget`` and a prefix scan.  Every database error is
re-raised as :class:`StoreUnavailableError` after rolling the session back so
that callers only need to handle one exception type.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Optional

from sqlalchemy.exc import SQLAlchemyError

from ..database import db
from ..errors import StoreUnavailableError
from ..models.kv_entry import KVEntry

logger = logging.getLogger(__name__)


def _escape_like(prefix: str) -> str:
    return prefix.replace('\\', '\\\\').replace('%', '\\%').replace('_', '\\_')


class KVStore:
    """Service wrapping the ``kv_store`` table with a plain key-value interface."""

    def __init__(self, session=None):
        """
        Args:
            session: SQLAlchemy session to use; defaults to ``db.session``.
        """
        self._session = session

    @property
    def session(self):
        return self._session if self._session is not None else db.session

    def _fail(self, operation: str, key: str, exc: Exception):
        self.session.rollback()
        logger.error("kv_store %s failed for %r: %s", operation, key, exc)
        raise StoreUnavailableError(operation, key, exc) from exc

    def get(self, key: str) -> Optional[Any]:
        """Return the value stored under *key*, or ``None`` when absent."""
        try:
            entry = self.session.get(KVEntry, key)
        except SQLAlchemyError as exc:
            self._fail('get', key, exc)
        return entry.value if entry is not None else None

    def set(self, key: str, value: Any) -> None:
        """Insert or overwrite *key* (last write wins)."""
        try:
            entry = self.session.get(KVEntry, key)
            if entry is None:
                self.session.add(KVEntry(key=key, value=value))
            else:
                entry.value = value
            self.session.commit()
        except SQLAlchemyError as exc:
            self._fail('set', key, exc)

    def delete(self, key: str) -> None:
        try:
            self.session.query(KVEntry).filter(KVEntry.key == key).delete(synchronize_session=False)
            self.session.commit()
        except SQLAlchemyError as exc:
            self._fail('delete', key, exc)

    def mget(self, keys: Iterable[str]) -> List[Optional[Any]]:
        """Return the values for *keys* in the same order, ``None`` for missing keys."""
        keys = list(keys)
        if not keys:
            return []
        try:
            rows = self.session.query(KVEntry).filter(KVEntry.key.in_(keys)).all()
        except SQLAlchemyError as exc:
            self._fail('mget', ','.join(keys), exc)
        by_key: Dict[str, Any] = {row.key: row.value for row in rows}
        return [by_key.get(k) for k in keys]

    def get_by_prefix(self, prefix: str) -> List[Any]:
        """Return every value whose key starts with *prefix*.

        The order of the result is unspecified; callers sort what they need.
        """
        try:
            rows = (
                self.session.query(KVEntry)
                .filter(KVEntry.key.like(_escape_like(prefix) + '%', escape='\\'))
                .all()
            )
        except SQLAlchemyError as exc:
            self._fail('get_by_prefix', prefix, exc)
        return [row.value for row in rows]
