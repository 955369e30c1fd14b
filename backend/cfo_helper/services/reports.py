"""Scenario reports: the persisted JSON record, the text download and the CSV export."""

from __future__ import annotations

import logging
import math
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import pandas as pd

from .insights import facts_from_metrics, generate_insights, get_recommendations
from .kv_store import KVStore
from .metrics import ProjectionPoint, compute_metrics, project_cash, project_scenario, runway_status
from .usage import UsageTracker, key_factory, utc_timestamp

logger = logging.getLogger(__name__)

REPORT_KEY_PREFIX = 'report-'


def _group_indian(digits: str) -> str:
    """Group an unsigned digit string the Indian way: 12,34,56,789."""
    if len(digits) <= 3:
        return digits
    head, tail = digits[:-3], digits[-3:]
    groups = []
    while len(head) > 2:
        groups.insert(0, head[-2:])
        head = head[:-2]
    if head:
        groups.insert(0, head)
    return ','.join(groups) + ',' + tail


def format_inr(amount: float) -> str:
    """Format *amount* as whole rupees, e.g. ``₹8,00,000``."""
    # same as Math.round in the browser: halves round up
    rounded = math.floor(amount + 0.5)
    sign = '-' if rounded < 0 else ''
    return f"₹{sign}{_group_indian(str(abs(rounded)))}"


def format_runway(runway_months: float) -> str:
    if math.isinf(runway_months):
        return 'Unlimited'
    return f"{runway_months:.1f} months"


def format_report_text(params, metrics, recommendations, generated_at: datetime) -> str:
    """Render the plain-text scenario report offered as a download."""
    status = runway_status(metrics.runway_months)
    lines = [
        'CFO Helper - Financial Scenario Report',
        f"Generated: {generated_at.strftime('%d/%m/%Y, %H:%M:%S')}",
        '',
        'BUSINESS PARAMETERS:',
        f"• Employees: {params.employees}",
        f"• Monthly Marketing Budget: {format_inr(params.marketing_budget)}",
        f"• Product Price: {format_inr(params.product_price)}",
        f"• Current Cash: {format_inr(params.current_cash)}",
        '',
        'FINANCIAL ANALYSIS:',
        f"• Monthly Burn Rate: {format_inr(metrics.monthly_burn)}",
        f"• Monthly Revenue: {format_inr(metrics.monthly_revenue)}",
        f"• Net Cash Flow: {format_inr(metrics.net_cash_flow)}",
        f"• Runway: {format_runway(metrics.runway_months)}",
        f"• Break-even Customers: {metrics.break_even_customers}",
        '',
        f"STATUS: {'PROFITABLE' if metrics.is_profitable else 'BURNING CASH'}",
        f"RUNWAY STATUS: {status.text.upper()}",
        '',
        'AI RECOMMENDATIONS:',
    ]
    lines.extend(f"• {rec.title}: {rec.message}" for rec in recommendations)
    return '\n'.join(lines) + '\n'


def scenario_report_text(params, generated_at: Optional[datetime] = None) -> str:
    """Compute metrics and recommendations for *params* and render the text report."""
    metrics = compute_metrics(params)
    recommendations = get_recommendations(params, metrics)
    return format_report_text(params, metrics, recommendations, generated_at or datetime.now())


def projection_frame(points: List[ProjectionPoint]) -> pd.DataFrame:
    frame = pd.DataFrame([p.to_dict() for p in points],
                         columns=['month', 'cashBalance', 'revenue', 'expenses', 'netFlow'])
    return frame.set_index('month')


def projection_csv(params) -> str:
    return projection_frame(project_scenario(params)).to_csv()


def build_report(report_input: Dict[str, Any], report_id: str, timestamp: str) -> Dict[str, Any]:
    """Enrich *report_input* with insights and a 12-month projection.

    Pure: identical input, id and timestamp give an identical record.
    """
    metrics = report_input['metrics']
    projections = project_cash(metrics['currentCash'], metrics['monthlyRevenue'], metrics['totalMonthlyBurn'])
    return {
        **report_input,
        'id': report_id,
        'timestamp': timestamp,
        'aiInsights': [i.to_dict() for i in generate_insights(facts_from_metrics(metrics))],
        'projections': [p.to_dict() for p in projections],
    }


class ReportGenerator:
    """Build, persist and count generated reports."""

    def __init__(self, store: KVStore, usage: UsageTracker, prefix: str = REPORT_KEY_PREFIX):
        self.store = store
        self.usage = usage
        self.prefix = prefix

    def generate(self, report_input: Dict[str, Any], now: Optional[datetime] = None) -> Dict[str, Any]:
        now = now or datetime.now(timezone.utc)
        report_id = key_factory.new_key(self.prefix)
        report = build_report(report_input, report_id, utc_timestamp(now))
        self.store.set(report_id, report)
        self.usage.increment('reports')
        logger.info("Generated report %s", report_id)
        return report
