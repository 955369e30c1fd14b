import math

import pytest

from backend.cfo_helper.errors import InvalidScenarioError
from backend.cfo_helper.services.metrics import (
    ScenarioParameters,
    compute_metrics,
    project_scenario,
    runway_progress,
    runway_status,
)


def test_default_scenario_metrics():
    metrics = compute_metrics(ScenarioParameters())

    assert metrics.monthly_salary_cost == 300_000
    assert metrics.monthly_burn == 350_000
    assert metrics.monthly_revenue == 15_000
    assert metrics.net_cash_flow == -335_000
    assert metrics.runway_months == pytest.approx(2.2857, abs=1e-4)
    assert metrics.break_even_customers == 2334
    assert not metrics.is_profitable


def test_burn_and_revenue_formulas():
    params = ScenarioParameters(employees=12, marketing_budget=45_000, product_price=320,
                                current_cash=2_000_000, base_customer_count=410, fixed_monthly_costs=18_000)
    metrics = compute_metrics(params)

    assert metrics.monthly_burn == 12 * 60_000 + 45_000 + 18_000
    assert metrics.monthly_revenue == 410 * 320
    assert metrics.runway_months == 2_000_000 / metrics.monthly_burn
    assert metrics.break_even_customers == math.ceil(metrics.monthly_burn / 320)


def test_zero_burn_has_unbounded_runway():
    params = ScenarioParameters(employees=0, marketing_budget=0, fixed_monthly_costs=0)
    metrics = compute_metrics(params)

    assert metrics.monthly_burn == 0
    assert metrics.runway_unbounded
    assert metrics.break_even_customers == 0
    assert metrics.is_profitable
    # JSON has no infinity, the unbounded runway is sent as null
    assert metrics.to_dict()['runwayMonths'] is None


def test_projection_is_flat_and_floored_at_zero():
    params = ScenarioParameters()
    projection = project_scenario(params)

    assert [p.month for p in projection] == list(range(1, 13))
    assert projection[0].cash_balance == 465_000
    assert projection[1].cash_balance == 130_000
    # 800000 - 3 * 335000 is negative
    assert all(p.cash_balance == 0 for p in projection[2:])
    assert {p.revenue for p in projection} == {15_000}
    assert {p.expenses for p in projection} == {350_000}
    assert {p.net_flow for p in projection} == {-335_000}


def test_projection_grows_when_profitable():
    params = ScenarioParameters(employees=1, marketing_budget=0, fixed_monthly_costs=0,
                                base_customer_count=1000, product_price=100, current_cash=100_000)
    projection = project_scenario(params)

    for point in projection:
        assert point.cash_balance == 100_000 + point.month * 40_000


@pytest.mark.parametrize('field, value', [
    ('employees', -1),
    ('marketing_budget', -5),
    ('product_price', 0),
    ('current_cash', -1),
    ('base_customer_count', -10),
    ('fixed_monthly_costs', -0.5),
    ('marketing_budget', 1e308),
    ('product_price', 2e15),
])
def test_invalid_parameters_are_rejected(field, value):
    with pytest.raises(InvalidScenarioError) as excinfo:
        ScenarioParameters(**{field: value})
    assert field in excinfo.value.errors


def test_tiny_price_cannot_cover_burn():
    params = ScenarioParameters(product_price=1e-320)

    with pytest.raises(InvalidScenarioError) as excinfo:
        compute_metrics(params)
    assert 'product_price' in excinfo.value.errors


def test_runway_status_thresholds():
    assert runway_status(24).text == 'Healthy'
    assert runway_status(12.1).level == 'safe'
    assert runway_status(12).text == 'Cautious'
    assert runway_status(6).text == 'Cautious'
    assert runway_status(5.9).level == 'danger'
    assert runway_status(math.inf).text == 'Healthy'


def test_runway_progress_is_capped():
    assert runway_progress(12) == 50
    assert runway_progress(48) == 100
    assert runway_progress(math.inf) == 100


def test_with_market_keeps_other_parameters():
    params = ScenarioParameters(employees=7).with_market(95, 17_500)

    assert params.employees == 7
    assert params.base_customer_count == 95
    assert params.fixed_monthly_costs == 17_500
