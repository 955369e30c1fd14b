"""Rule-based advisories shown next to a scenario.

Two static rule lists are kept here: the recommendations displayed on the
calculator page and the insights attached to a generated report.  Each rule
is evaluated independently and contributes at most one entry; the list order
is the display order.
"""

from dataclasses import asdict, dataclass
from typing import Callable, List, Mapping

from .metrics import RUNWAY_UNBOUNDED


@dataclass(frozen=True)
class Recommendation:
    type: str
    title: str
    message: str

    def to_dict(self):
        return asdict(self)


@dataclass(frozen=True)
class Insight:
    category: str
    type: str
    message: str

    def to_dict(self):
        return asdict(self)


@dataclass(frozen=True)
class ReportFacts:
    """The figures report insights are evaluated against."""
    monthly_burn: float
    monthly_revenue: float
    runway_months: float
    employees: int
    product_price: float


# ---------------------------------------------------------------------------
#  Calculator recommendations
# ---------------------------------------------------------------------------

# (predicate over (params, metrics), recommendation)
RECOMMENDATION_RULES: List[tuple] = [
    (
        lambda p, m: m.runway_months < 3,
        Recommendation(
            type='critical',
            title='Critical Cash Situation',
            message='Immediate action required. Consider reducing costs or raising funds within 60 days.',
        ),
    ),
    (
        lambda p, m: m.net_cash_flow >= 0,
        Recommendation(
            type='positive',
            title='Profitable Operations',
            message='Great! Consider reinvesting profits into growth or building reserves.',
        ),
    ),
    (
        lambda p, m: p.employees > 10 and m.runway_months < 6,
        Recommendation(
            type='warning',
            title='High Burn from Team Size',
            message='Consider optimizing team size or increasing revenue to sustain current headcount.',
        ),
    ),
    (
        lambda p, m: p.product_price < 100 and m.break_even_customers > 500,
        Recommendation(
            type='opportunity',
            title='Pricing Opportunity',
            message='Consider raising prices. Even a 20% increase could significantly improve unit economics.',
        ),
    ),
]


def get_recommendations(params, metrics) -> List[Recommendation]:
    """Return the recommendations whose rule holds for *params* / *metrics*, in rule order."""
    return [rec for predicate, rec in RECOMMENDATION_RULES if predicate(params, metrics)]


# ---------------------------------------------------------------------------
#  Report insights
# ---------------------------------------------------------------------------

def _cash_flow_insight(facts: ReportFacts):
    if facts.monthly_revenue > facts.monthly_burn:
        return Insight('Cash Flow', 'positive',
                       'Strong positive cash flow indicates healthy business operations.')
    return Insight('Cash Flow', 'warning',
                   'Negative cash flow requires immediate attention to extend runway.')


def _runway_insight(facts: ReportFacts):
    if facts.runway_months < 6:
        return Insight('Runway', 'critical',
                       'Critical runway situation. Focus on revenue growth or cost reduction.')
    if facts.runway_months > 18:
        return Insight('Runway', 'opportunity',
                       'Healthy runway provides opportunity for strategic investments.')
    return None


def _pricing_insight(facts: ReportFacts):
    if facts.product_price < 200:
        return Insight('Pricing', 'opportunity',
                       'Consider price optimization to improve unit economics.')
    return None


INSIGHT_RULES: List[Callable[[ReportFacts], Insight]] = [
    _cash_flow_insight,
    _runway_insight,
    _pricing_insight,
]


def generate_insights(facts: ReportFacts) -> List[Insight]:
    insights = []
    for rule in INSIGHT_RULES:
        insight = rule(facts)
        if insight is not None:
            insights.append(insight)
    return insights


def facts_from_metrics(metrics: Mapping) -> ReportFacts:
    """Build :class:`ReportFacts` from a validated report ``metrics`` mapping."""
    runway = metrics.get('runwayMonths')
    return ReportFacts(
        monthly_burn=metrics['totalMonthlyBurn'],
        monthly_revenue=metrics['monthlyRevenue'],
        runway_months=RUNWAY_UNBOUNDED if runway is None else runway,
        employees=metrics['employees'],
        product_price=metrics['productPrice'],
    )
