'''
Base classes for valuation methods.

A method turns (BusinessInputs, SectorProfile, FactorBuckets) into either a
ValuationMethodResult or a SkippedMethod. Methods are pure: no state is
kept between calls, so one instance can serve concurrent calculations.
'''

from abc import ABC, abstractmethod
import math
from typing import List, Tuple, Union

from sme_valuation.domain.types import AdjustmentFactor
from sme_valuation.domain.types import BusinessInputs
from sme_valuation.domain.types import FactorBuckets
from sme_valuation.domain.types import SectorProfile
from sme_valuation.domain.types import SkippedMethod
from sme_valuation.domain.types import ValuationMethodResult
from sme_valuation.methods.quality import quality_adjustments

MethodOutcome = Union[ValuationMethodResult, SkippedMethod]


def market_adjustments(profile: SectorProfile,
                       buckets: FactorBuckets) -> Tuple[AdjustmentFactor, ...]:
  '''
  The three bucket multipliers shared by every market-multiple method.

  Returns:
    Size, growth and profitability AdjustmentFactors, in that order
  '''
  factors = profile.adjustment_factors
  return (
      AdjustmentFactor(f'size:{buckets.size}', factors.size[buckets.size]),
      AdjustmentFactor(f'growth:{buckets.growth}',
                       factors.growth[buckets.growth]),
      AdjustmentFactor(f'profitability:{buckets.profitability}',
                       factors.profitability[buckets.profitability]),
  )


def product(adjustments: Tuple[AdjustmentFactor, ...]) -> float:
  return math.prod(a.magnitude for a in adjustments)


class ValuationMethod(ABC):
  '''
  Base class for valuation methods.

  Subclasses set `name` and implement compute().
  '''

  name: str = ''

  def __init__(self, base_weight: float = 1.0,
               missing_data_penalty: float = 0.5):
    '''
    Initialize method.

    Args:
      base_weight: Reliability before missing-data penalties
      missing_data_penalty: Reliability multiplier per defaulted bucket
    '''
    self.base_weight = base_weight
    self.missing_data_penalty = missing_data_penalty

  def reliability(self, buckets: FactorBuckets) -> float:
    '''Base weight reduced once per bucket filled by a default.'''
    return self.base_weight * self.missing_data_penalty**buckets.penalty_count

  def skip(self, reason: str, detail: str = '') -> SkippedMethod:
    return SkippedMethod(method=self.name, reason=reason, detail=detail)

  @abstractmethod
  def compute(
      self,
      inputs: BusinessInputs,
      profile: SectorProfile,
      buckets: FactorBuckets,
  ) -> MethodOutcome:
    '''
    Estimate the value of the business.

    Args:
      inputs: Business inputs
      profile: Resolved sector profile
      buckets: Factor classification for these inputs

    Returns:
      ValuationMethodResult, or SkippedMethod when the method does not
      apply to the inputs
    '''


class MarketMultipleMethod(ValuationMethod):
  '''
  figure × sector base multiple × shared bucket adjustments.

  Subclasses provide the financial figure and pick the base multiple.
  '''

  def __init__(self,
               base_weight: float = 1.0,
               missing_data_penalty: float = 0.5,
               quality: bool = False):
    '''
    Initialize market-multiple method.

    Args:
      base_weight: Reliability before missing-data penalties
      missing_data_penalty: Reliability multiplier per defaulted bucket
      quality: Also apply qualitative adjustments (recurring revenue,
        customer concentration, maturity, owner involvement)
    '''
    super().__init__(base_weight, missing_data_penalty)
    self.quality = quality

  @abstractmethod
  def figure(self, inputs: BusinessInputs) -> Union[float, SkippedMethod]:
    '''Financial figure the multiple applies to, or a skip record.'''

  @abstractmethod
  def base_multiple(self, profile: SectorProfile) -> float:
    '''Sector base multiple for this method.'''

  def compute(
      self,
      inputs: BusinessInputs,
      profile: SectorProfile,
      buckets: FactorBuckets,
  ) -> MethodOutcome:
    '''Apply the adjusted sector multiple to the method's figure.'''
    value = self.figure(inputs)
    if isinstance(value, SkippedMethod):
      return value

    adjustments: List[AdjustmentFactor] = list(
        market_adjustments(profile, buckets))
    if self.quality:
      adjustments.extend(quality_adjustments(inputs))

    base = self.base_multiple(profile)
    multiplier = base * product(tuple(adjustments))
    estimate = value * multiplier

    return ValuationMethodResult(
        method=self.name,
        estimate=estimate,
        multiplier=multiplier,
        reliability=self.reliability(buckets),
        adjustments=tuple(adjustments),
        diag={
            'figure': value,
            'base_multiple': base,
            'sector': profile.key,
            'defaulted_buckets': sorted(buckets.defaulted),
            'quality_adjusted': self.quality,
        },
    )
