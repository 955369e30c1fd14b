from marshmallow import INCLUDE, fields, post_load, pre_load, validate

from .database import ma
from .services.metrics import MAX_AMOUNT, ScenarioParameters

_non_negative = validate.Range(min=0)
_amount = validate.Range(min=0, max=MAX_AMOUNT)


class ScenarioParametersSchema(ma.Schema):
    """Calculator inputs; missing fields fall back to the calculator defaults."""
    employees = fields.Integer(load_default=5, validate=_amount)
    marketing_budget = fields.Float(data_key='marketingBudget', load_default=30_000, validate=_amount)
    product_price = fields.Float(data_key='productPrice', load_default=150,
                                 validate=validate.Range(min=0, max=MAX_AMOUNT, min_inclusive=False))
    current_cash = fields.Float(data_key='currentCash', load_default=800_000, validate=_amount)
    base_customer_count = fields.Integer(data_key='baseCustomerCount', load_default=100, validate=_amount)
    fixed_monthly_costs = fields.Float(data_key='fixedMonthlyCosts', load_default=20_000, validate=_amount)

    @post_load
    def make_parameters(self, data, **kwargs):
        return ScenarioParameters(**data)


class UsageSchema(ma.Schema):
    scenarios = fields.Integer(required=True, validate=_non_negative)
    reports = fields.Integer(required=True, validate=_non_negative)


class ReportMetricsSchema(ma.Schema):
    class Meta:
        unknown = INCLUDE

    totalMonthlyBurn = fields.Float(required=True)
    monthlyRevenue = fields.Float(required=True)
    runwayMonths = fields.Float(required=True, allow_none=True)
    employees = fields.Integer(required=True, validate=_non_negative)
    productPrice = fields.Float(required=True, validate=validate.Range(min=0, min_inclusive=False))
    currentCash = fields.Float(required=True, validate=_non_negative)


# Alternative metric names sent by the calculator page
METRIC_ALIASES = {
    'monthlyBurn': 'totalMonthlyBurn',
    'runway': 'runwayMonths',
}
# Metric fields that may be taken from the ``parameters`` object instead
PARAMETER_FALLBACKS = ('employees', 'productPrice', 'currentCash')


class ReportInputSchema(ma.Schema):
    """Report request: a ``metrics`` object plus any extra fields, kept verbatim."""

    class Meta:
        unknown = INCLUDE

    metrics = fields.Nested(ReportMetricsSchema, required=True)

    @pre_load
    def normalize_metrics(self, data, **kwargs):
        if not isinstance(data, dict) or not isinstance(data.get('metrics'), dict):
            return data
        metrics = dict(data['metrics'])
        for alias, name in METRIC_ALIASES.items():
            if name not in metrics and alias in metrics:
                metrics[name] = metrics[alias]
        parameters = data.get('parameters')
        if isinstance(parameters, dict):
            for name in PARAMETER_FALLBACKS:
                if name not in metrics and name in parameters:
                    metrics[name] = parameters[name]
        return {**data, 'metrics': metrics}


scenario_parameters_schema = ScenarioParametersSchema()
usage_schema = UsageSchema()
report_input_schema = ReportInputSchema()
