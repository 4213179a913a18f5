"""
Valuation methods.

Each method estimates the value of the business independently and returns
either a ValuationMethodResult (point estimate, applied multiple, reliability
weight and the adjustments it applied) or a SkippedMethod with a reason.

To add a new method:
1. Create a class inheriting from ValuationMethod (or MarketMultipleMethod)
2. Implement compute() (or figure() and base_multiple())
3. Register in methods/registry.py

Example:
  class EmployeeMultiple(ValuationMethod):
    name = 'employee_multiple'

    def compute(self, inputs, profile, buckets):
      if not inputs.employee_count:
        return self.skip('no_employees')
      ...
"""

from sme_valuation.methods.assets import AssetBased
from sme_valuation.methods.base import market_adjustments
from sme_valuation.methods.base import MarketMultipleMethod
from sme_valuation.methods.base import MethodOutcome
from sme_valuation.methods.base import ValuationMethod
from sme_valuation.methods.earnings import EarningsMultiple
from sme_valuation.methods.revenue import RevenueMultiple
from sme_valuation.methods.weights import method_weights
from sme_valuation.methods.weights import WEIGHT_RULES

__all__ = [
    'ValuationMethod', 'MarketMultipleMethod', 'MethodOutcome',
    'market_adjustments',
    'RevenueMultiple', 'EarningsMultiple', 'AssetBased',
    'method_weights', 'WEIGHT_RULES',
]
