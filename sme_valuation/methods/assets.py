'''
Asset-based method.

A rough tangible/intangible asset value: a fixed share of revenue, lifted by
a premium for each declared key asset and scaled by operating history. It
only runs when the seller declares key assets; otherwise it has nothing to
add beyond the revenue multiple.
'''

from typing import Dict, List

from sme_valuation.domain.types import AdjustmentFactor
from sme_valuation.domain.types import BusinessInputs
from sme_valuation.domain.types import FactorBuckets
from sme_valuation.domain.types import SectorProfile
from sme_valuation.domain.types import ValuationMethodResult
from sme_valuation.methods.base import MethodOutcome
from sme_valuation.methods.base import product
from sme_valuation.methods.base import ValuationMethod
from sme_valuation.methods.quality import banded_multiplier

ASSET_PREMIUMS: Dict[str, float] = {
    'intellectual_property': 0.30,
    'real_estate': 0.40,
    'patents': 0.35,
    'brand': 0.25,
    'customer_database': 0.20,
    'software': 0.25,
    'contracts': 0.15,
    'equipment': 0.10,
    'inventory': 0.05,
    'licenses': 0.10,
}

ASSET_MATURITY_BANDS = ((20.0, 1.30), (10.0, 1.15))
ASSET_MATURITY_FLOOR = (3.0, 0.70)


class AssetBased(ValuationMethod):
  '''
  revenue × asset ratio × (1 + Σ asset premiums) × maturity factor.
  '''

  name = 'asset_based'

  def __init__(self,
               base_weight: float = 0.5,
               missing_data_penalty: float = 0.5,
               asset_ratio: float = 0.3):
    '''
    Initialize asset-based method.

    Args:
      base_weight: Reliability before missing-data penalties (default: 0.5,
        the method is a coarse heuristic)
      missing_data_penalty: Reliability multiplier per defaulted bucket
      asset_ratio: Share of revenue taken as the base asset value
    '''
    super().__init__(base_weight, missing_data_penalty)
    self.asset_ratio = asset_ratio

  def compute(
      self,
      inputs: BusinessInputs,
      profile: SectorProfile,
      buckets: FactorBuckets,
  ) -> MethodOutcome:
    '''Estimate asset value from revenue and declared assets.'''
    revenue = inputs.annual_revenue
    if revenue is None or revenue <= 0:
      return self.skip('no_revenue', 'asset value is estimated from revenue')
    if not inputs.key_assets:
      return self.skip('no_key_assets', 'no key assets declared')

    recognised = [a for a in inputs.key_assets if a in ASSET_PREMIUMS]
    unrecognised = [a for a in inputs.key_assets if a not in ASSET_PREMIUMS]
    premium = sum(ASSET_PREMIUMS[a] for a in dict.fromkeys(recognised))

    adjustments: List[AdjustmentFactor] = [
        AdjustmentFactor('asset_premium', 1.0 + premium)
    ]
    years = inputs.years_in_operation
    if years is not None:
      adjustments.append(
          AdjustmentFactor(
              'maturity',
              banded_multiplier(years, ASSET_MATURITY_BANDS,
                                ASSET_MATURITY_FLOOR)))

    multiplier = self.asset_ratio * product(tuple(adjustments))
    return ValuationMethodResult(
        method=self.name,
        estimate=revenue * multiplier,
        multiplier=multiplier,
        reliability=self.reliability(buckets),
        adjustments=tuple(adjustments),
        diag={
            'figure': revenue,
            'asset_ratio': self.asset_ratio,
            'recognised_assets': sorted(set(recognised)),
            'unrecognised_assets': sorted(set(unrecognised)),
            'sector': profile.key,
        },
    )
