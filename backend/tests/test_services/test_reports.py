from datetime import datetime, timezone

import pytest

from backend.cfo_helper.services.metrics import ScenarioParameters
from backend.cfo_helper.services.reports import (
    ReportGenerator,
    build_report,
    format_inr,
    projection_csv,
    scenario_report_text,
)

REPORT_INPUT = {
    'parameters': {'employees': 5, 'marketingBudget': 30000, 'productPrice': 150, 'currentCash': 800000},
    'metrics': {
        'totalMonthlyBurn': 350000.0,
        'monthlyRevenue': 15000.0,
        'runwayMonths': 800000 / 350000,
        'employees': 5,
        'productPrice': 150.0,
        'currentCash': 800000.0,
    },
}


@pytest.mark.parametrize('amount, expected', [
    (0, '₹0'),
    (999, '₹999'),
    (15_000, '₹15,000'),
    (800_000, '₹8,00,000'),
    (10_000_000, '₹1,00,00,000'),
    (1_234_567.6, '₹12,34,568'),
    (-335_000, '₹-3,35,000'),
    (2.5, '₹3'),
    (-2.5, '₹-2'),
    (-0.4, '₹0'),
])
def test_format_inr(amount, expected):
    assert format_inr(amount) == expected


def test_build_report_is_deterministic():
    first = build_report(REPORT_INPUT, 'report-1', '2026-10-01T12:00:00.000Z')
    second = build_report(REPORT_INPUT, 'report-1', '2026-10-01T12:00:00.000Z')

    assert first == second
    assert first['parameters'] == REPORT_INPUT['parameters']
    assert len(first['projections']) == 12
    assert first['projections'][0] == {
        'month': 1,
        'cashBalance': 465000.0,
        'revenue': 15000.0,
        'expenses': 350000.0,
        'netFlow': -335000.0,
    }
    assert [i['category'] for i in first['aiInsights']] == ['Cash Flow', 'Runway', 'Pricing']


def test_generator_persists_and_counts(store, usage):
    generator = ReportGenerator(store, usage)
    now = datetime(2026, 10, 1, 12, 0, tzinfo=timezone.utc)

    first = generator.generate(REPORT_INPUT, now=now)
    second = generator.generate(REPORT_INPUT, now=now)

    assert first['id'] != second['id']
    assert store.get(first['id']) == first
    assert usage.load().reports == 2


def test_text_report_content():
    text = scenario_report_text(ScenarioParameters(), datetime(2026, 10, 1, 9, 30))

    assert text.startswith('CFO Helper - Financial Scenario Report\nGenerated: 01/10/2026, 09:30:00\n')
    assert '• Current Cash: ₹8,00,000' in text
    assert '• Monthly Burn Rate: ₹3,50,000' in text
    assert '• Runway: 2.3 months' in text
    assert '• Break-even Customers: 2334' in text
    assert 'STATUS: BURNING CASH' in text
    assert 'RUNWAY STATUS: CRITICAL' in text
    assert '• Critical Cash Situation: Immediate action required.' in text


def test_text_report_unbounded_runway():
    params = ScenarioParameters(employees=0, marketing_budget=0, fixed_monthly_costs=0)
    text = scenario_report_text(params)

    assert '• Runway: Unlimited' in text
    assert 'STATUS: PROFITABLE' in text
    assert 'RUNWAY STATUS: HEALTHY' in text


def test_projection_csv():
    lines = projection_csv(ScenarioParameters()).splitlines()

    assert lines[0] == 'month,cashBalance,revenue,expenses,netFlow'
    assert len(lines) == 13
    assert lines[1].startswith('1,465000')
