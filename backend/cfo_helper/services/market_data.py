from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

import numpy as np

from .metrics import ScenarioParameters

# Simulated market ranges, upper bound exclusive
CUSTOMER_RANGE = (80, 120)
FIXED_COST_RANGE = (15_000, 25_000)


@dataclass(frozen=True)
class MarketUpdate:
    parameters: ScenarioParameters
    updated_at: datetime

    def to_dict(self):
        return {
            'parameters': self.parameters.to_dict(),
            'updatedAt': self.updated_at.isoformat(),
        }


class MarketDataFeed:
    """Simulated market feed that moves the customer base and fixed costs."""

    def __init__(self, seed: Optional[int] = None):
        self.rng = np.random.default_rng(seed)

    def refresh(self, params: ScenarioParameters, now: Optional[datetime] = None) -> MarketUpdate:
        customers = int(self.rng.integers(*CUSTOMER_RANGE))
        fixed_costs = int(self.rng.integers(*FIXED_COST_RANGE))
        return MarketUpdate(
            parameters=params.with_market(customers, fixed_costs),
            updated_at=now or datetime.now(timezone.utc),
        )
