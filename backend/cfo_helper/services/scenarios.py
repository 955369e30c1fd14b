from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from .kv_store import KVStore
from .usage import UsageTracker, key_factory, utc_timestamp

SCENARIO_KEY_PREFIX = 'scenario-'
SCENARIO_HISTORY_LIMIT = 10

_OLDEST = datetime.min.replace(tzinfo=timezone.utc)


def parse_timestamp(value) -> Optional[datetime]:
    """Parse an ISO-8601 timestamp (``Z`` suffix allowed); ``None`` when unparseable."""
    if not isinstance(value, str):
        return None
    try:
        parsed = datetime.fromisoformat(value.replace('Z', '+00:00'))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def key_millis(key) -> int:
    """Millisecond suffix of a generated key such as ``scenario-1700000000000``; -1 if absent."""
    if not isinstance(key, str):
        return -1
    suffix = key.rsplit('-', 1)[-1]
    return int(suffix) if suffix.isdigit() else -1


def newest_first(records: List[Dict[str, Any]], limit: int = SCENARIO_HISTORY_LIMIT) -> List[Dict[str, Any]]:
    """Sort *records* by ``timestamp`` descending and keep the first *limit*.

    Equal timestamps are ordered by the key stored under ``id``, newest first.
    Records without a usable timestamp sort last.
    """
    ordered = sorted(
        records,
        key=lambda r: (parse_timestamp(r.get('timestamp')) or _OLDEST, key_millis(r.get('id'))),
        reverse=True,
    )
    return ordered[:limit]


class ScenarioHistory:
    """Append-only scenario snapshots kept in the key-value store."""

    def __init__(self, store: KVStore, usage: UsageTracker,
                 prefix: str = SCENARIO_KEY_PREFIX, limit: int = SCENARIO_HISTORY_LIMIT):
        self.store = store
        self.usage = usage
        self.prefix = prefix
        self.limit = limit

    def save(self, scenario: Dict[str, Any], now: Optional[datetime] = None) -> str:
        """Persist a snapshot of *scenario* and count it; returns the new scenario id."""
        scenario_id = key_factory.new_key(self.prefix)
        self.store.set(scenario_id, {**scenario, 'id': scenario_id, 'timestamp': utc_timestamp(now)})
        self.usage.increment('scenarios')
        return scenario_id

    def recent(self) -> List[Dict[str, Any]]:
        return newest_first(self.store.get_by_prefix(self.prefix), self.limit)
