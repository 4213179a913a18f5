'''
Revenue-multiple method.

estimate = revenue × sector revenue multiple × size × growth × profitability
'''

from typing import Union

from sme_valuation.domain.types import BusinessInputs
from sme_valuation.domain.types import SectorProfile
from sme_valuation.domain.types import SkippedMethod
from sme_valuation.methods.base import MarketMultipleMethod


class RevenueMultiple(MarketMultipleMethod):
  '''
  Value as a multiple of annual revenue.

  Skipped when revenue is absent or zero.
  '''

  name = 'revenue_multiple'

  def figure(self, inputs: BusinessInputs) -> Union[float, SkippedMethod]:
    if inputs.annual_revenue is None:
      return self.skip('no_revenue', 'annual revenue not provided')
    if inputs.annual_revenue <= 0:
      return self.skip('no_revenue', 'annual revenue is zero')
    return inputs.annual_revenue

  def base_multiple(self, profile: SectorProfile) -> float:
    return profile.base_multiple.revenue
