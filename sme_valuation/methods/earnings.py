'''
Earnings-multiple method.

estimate = EBITDA × sector EBITDA multiple × size × growth × profitability

Loss-making businesses are a valid state, but an earnings multiple is not
meaningful for them; the method is skipped with a reason rather than raising.
'''

from typing import Union

from sme_valuation.domain.types import BusinessInputs
from sme_valuation.domain.types import SectorProfile
from sme_valuation.domain.types import SkippedMethod
from sme_valuation.methods.base import MarketMultipleMethod


class EarningsMultiple(MarketMultipleMethod):
  '''
  Value as a multiple of EBITDA (or its equivalent from reported profit).
  '''

  name = 'earnings_multiple'

  def figure(self, inputs: BusinessInputs) -> Union[float, SkippedMethod]:
    ebitda = inputs.ebitda
    if ebitda is None:
      return self.skip('no_profit', 'neither profit nor margin provided')
    if ebitda == 0:
      return self.skip('zero_profit', 'profit is zero')
    if ebitda < 0:
      return self.skip('negative_profit',
                       f'earnings multiple not meaningful for loss {ebitda}')
    return ebitda

  def base_multiple(self, profile: SectorProfile) -> float:
    return profile.base_multiple.ebitda
