import math
from dataclasses import asdict, dataclass, field, replace
from typing import Dict, List, Optional

import numpy as np

from ..errors import InvalidScenarioError

SALARY_PER_EMPLOYEE = 60_000  # monthly cost of one employee
PROJECTION_MONTHS = 12
RUNWAY_PROGRESS_HORIZON = 24  # months shown as a full progress bar
MAX_AMOUNT = 1e15  # upper bound for every input, counts included

# Returned when the business does not burn cash at all
RUNWAY_UNBOUNDED = math.inf


@dataclass(frozen=True)
class ScenarioParameters:
    """Inputs of the scenario calculator.

    Money amounts are monthly figures in rupees except ``current_cash``.
    """
    employees: int = 5
    marketing_budget: float = 30_000
    product_price: float = 150
    current_cash: float = 800_000
    base_customer_count: int = 100
    fixed_monthly_costs: float = 20_000

    def __post_init__(self):
        errors: Dict[str, List[str]] = {}
        non_negative = ('employees', 'marketing_budget', 'current_cash',
                        'base_customer_count', 'fixed_monthly_costs')
        for name in non_negative:
            if getattr(self, name) < 0:
                errors[name] = ['Must be greater than or equal to 0.']
        if self.product_price <= 0:
            errors['product_price'] = ['Must be greater than 0.']
        for name in non_negative + ('product_price',):
            if getattr(self, name) > MAX_AMOUNT:
                errors.setdefault(name, []).append(f'Must be less than or equal to {MAX_AMOUNT:g}.')
        if errors:
            raise InvalidScenarioError(errors)

    def with_market(self, base_customer_count: int, fixed_monthly_costs: float) -> 'ScenarioParameters':
        return replace(self, base_customer_count=base_customer_count,
                       fixed_monthly_costs=fixed_monthly_costs)

    def to_dict(self):
        return {
            'employees': self.employees,
            'marketingBudget': self.marketing_budget,
            'productPrice': self.product_price,
            'currentCash': self.current_cash,
            'baseCustomerCount': self.base_customer_count,
            'fixedMonthlyCosts': self.fixed_monthly_costs,
        }


@dataclass(frozen=True)
class DerivedMetrics:
    monthly_salary_cost: float
    monthly_burn: float
    monthly_revenue: float
    net_cash_flow: float
    runway_months: float
    break_even_customers: int

    @property
    def runway_unbounded(self) -> bool:
        return math.isinf(self.runway_months)

    @property
    def is_profitable(self) -> bool:
        return self.net_cash_flow >= 0

    def to_dict(self):
        """JSON-friendly representation; an unbounded runway is rendered as ``None``."""
        return {
            'monthlySalaryCost': self.monthly_salary_cost,
            'monthlyBurn': self.monthly_burn,
            'monthlyRevenue': self.monthly_revenue,
            'netCashFlow': self.net_cash_flow,
            'runwayMonths': None if self.runway_unbounded else self.runway_months,
            'breakEvenCustomers': self.break_even_customers,
        }


@dataclass(frozen=True)
class ProjectionPoint:
    month: int
    cash_balance: float
    revenue: float
    expenses: float
    net_flow: float

    def to_dict(self):
        return {
            'month': self.month,
            'cashBalance': self.cash_balance,
            'revenue': self.revenue,
            'expenses': self.expenses,
            'netFlow': self.net_flow,
        }


@dataclass(frozen=True)
class RunwayStatus:
    text: str
    level: str
    color: str = field(default='', compare=False)

    def to_dict(self):
        return asdict(self)


def compute_metrics(params: ScenarioParameters) -> DerivedMetrics:
    """Derive burn, revenue, runway and break-even from *params*."""
    salary = params.employees * SALARY_PER_EMPLOYEE
    burn = salary + params.marketing_budget + params.fixed_monthly_costs
    revenue = params.base_customer_count * params.product_price
    runway = params.current_cash / burn if burn > 0 else RUNWAY_UNBOUNDED
    customers_needed = burn / params.product_price
    if not math.isfinite(customers_needed):
        # tiny prices overflow the division
        raise InvalidScenarioError({'product_price': ['Too small to cover the monthly burn.']})
    break_even = max(0, math.ceil(customers_needed))

    return DerivedMetrics(
        monthly_salary_cost=salary,
        monthly_burn=burn,
        monthly_revenue=revenue,
        net_cash_flow=revenue - burn,
        runway_months=runway,
        break_even_customers=break_even,
    )


def project_cash(current_cash: float, monthly_revenue: float, monthly_burn: float,
                 months: int = PROJECTION_MONTHS) -> List[ProjectionPoint]:
    """Project the cash balance month by month with constant revenue and expenses.

    The reported balance is floored at zero; the running balance is not.
    """
    net_flow = monthly_revenue - monthly_burn
    month_index = np.arange(1, months + 1)
    balances = np.maximum(0, current_cash + month_index * net_flow)

    return [
        ProjectionPoint(
            month=int(m),
            cash_balance=float(balance),
            revenue=monthly_revenue,
            expenses=monthly_burn,
            net_flow=net_flow,
        )
        for m, balance in zip(month_index, balances)
    ]


def project_scenario(params: ScenarioParameters, metrics: Optional[DerivedMetrics] = None,
                     months: int = PROJECTION_MONTHS) -> List[ProjectionPoint]:
    metrics = metrics or compute_metrics(params)
    return project_cash(params.current_cash, metrics.monthly_revenue, metrics.monthly_burn, months)


def runway_status(runway_months: float) -> RunwayStatus:
    if runway_months > 12:
        return RunwayStatus(text='Healthy', level='safe', color='green')
    if runway_months >= 6:
        return RunwayStatus(text='Cautious', level='warning', color='yellow')
    return RunwayStatus(text='Critical', level='danger', color='red')


def runway_progress(runway_months: float) -> float:
    """Percentage of the progress bar filled for *runway_months* (capped at 100)."""
    return min(100.0, runway_months / RUNWAY_PROGRESS_HORIZON * 100)
