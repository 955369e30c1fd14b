"""Usage counters and billing for the calculator.

The counters live in a single key-value record.  ``increment_usage`` is a
plain read-increment-write: two concurrent increments can lose one update
(last write wins).  That is accepted for usage tracking.
"""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

from .kv_store import KVStore

logger = logging.getLogger(__name__)

DEFAULT_USAGE_KEY = 'cfo-helper-usage'
USAGE_FIELDS = ('scenarios', 'reports')

SCENARIO_PRICE = 10
REPORT_PRICE = 25
CREDIT_LIMIT = 10


def utc_timestamp(now: Optional[datetime] = None) -> str:
    """ISO-8601 UTC timestamp with millisecond precision and a ``Z`` suffix."""
    now = now or datetime.now(timezone.utc)
    return now.astimezone(timezone.utc).isoformat(timespec='milliseconds').replace('+00:00', 'Z')


class TimeKeyFactory:
    """Issue ``<prefix><epoch-ms>`` keys that never repeat within the process.

    When the clock has not moved past the last issued millisecond the next
    millisecond is used instead.
    """

    def __init__(self, clock=None):
        self._clock = clock or (lambda: int(time.time() * 1000))
        self._last = 0
        self._lock = threading.Lock()

    def next_millis(self) -> int:
        with self._lock:
            millis = max(self._clock(), self._last + 1)
            self._last = millis
            return millis

    def new_key(self, prefix: str) -> str:
        return f"{prefix}{self.next_millis()}"


key_factory = TimeKeyFactory()


@dataclass
class UsageCounters:
    scenarios: int = 0
    reports: int = 0
    last_updated: Optional[str] = None

    @classmethod
    def from_record(cls, record) -> 'UsageCounters':
        if not record:
            return cls()
        return cls(
            scenarios=int(record.get('scenarios') or 0),
            reports=int(record.get('reports') or 0),
            last_updated=record.get('lastUpdated'),
        )

    def to_dict(self):
        data = {'scenarios': self.scenarios, 'reports': self.reports}
        if self.last_updated is not None:
            data['lastUpdated'] = self.last_updated
        return data

    @property
    def credits_used(self) -> int:
        return self.scenarios + self.reports

    def billing(self):
        """Charges for the counted usage (₹10 per scenario, ₹25 per report)."""
        scenario_cost = self.scenarios * SCENARIO_PRICE
        report_cost = self.reports * REPORT_PRICE
        return {
            'scenarios': self.scenarios,
            'reports': self.reports,
            'scenarioCost': scenario_cost,
            'reportCost': report_cost,
            'sessionTotal': scenario_cost + report_cost,
            'creditsUsed': self.credits_used,
            'overCreditLimit': self.credits_used > CREDIT_LIMIT,
        }


class UsageTracker:
    """Load, overwrite and increment the usage-counter record."""

    def __init__(self, store: KVStore, key: str = DEFAULT_USAGE_KEY):
        self.store = store
        self.key = key

    def load(self) -> UsageCounters:
        return UsageCounters.from_record(self.store.get(self.key))

    def save(self, scenarios: int, reports: int) -> UsageCounters:
        counters = UsageCounters(scenarios=scenarios, reports=reports, last_updated=utc_timestamp())
        self.store.set(self.key, {
            'scenarios': counters.scenarios,
            'reports': counters.reports,
            'lastUpdated': counters.last_updated,
        })
        return counters

    def increment(self, field: str, by: int = 1) -> UsageCounters:
        if field not in USAGE_FIELDS:
            raise ValueError(f"Unknown usage counter: {field}")
        counters = self.load()
        setattr(counters, field, getattr(counters, field) + by)
        logger.debug("usage %s -> %d", field, getattr(counters, field))
        return self.save(counters.scenarios, counters.reports)
