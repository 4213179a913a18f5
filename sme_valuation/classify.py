'''
Factor classification.

Maps raw business metrics (revenue, growth rate, profit margin) to the
discrete buckets used to look up adjustment multipliers. Growth and
profitability are judged relative to the sector's benchmarks, size against
revenue breakpoints. A missing metric falls into the middle bucket and is
recorded as defaulted so methods can reduce their reliability.

Profitability is classified from a supplied profit margin only, never from
one derived from a profit value, so only the size bucket moves with revenue.
A profit value without a margin leaves profitability defaulted.
'''

import logging
from typing import Optional, Tuple

from sme_valuation.domain.types import BusinessInputs
from sme_valuation.domain.types import FactorBuckets
from sme_valuation.domain.types import SectorProfile

logger = logging.getLogger(__name__)


def band(value: float, benchmark: float, tolerance: float,
         labels: Tuple[str, str, str]) -> str:
  '''
  Place a value in a low / middle / high band around a benchmark.

  Values strictly below benchmark - tolerance are low, strictly above
  benchmark + tolerance are high, anything else is the middle label.
  '''
  low, middle, high = labels
  if value < benchmark - tolerance:
    return low
  if value > benchmark + tolerance:
    return high
  return middle


class FactorClassifier:
  '''
  Classify a business into size, growth and profitability buckets.
  '''

  def __init__(
      self,
      size_thresholds: Tuple[float, float] = (1_000_000.0, 5_000_000.0),
      growth_tolerance: float = 5.0,
      margin_tolerance: float = 3.0,
  ):
    '''
    Initialize classifier.

    Args:
      size_thresholds: Global (small_below, large_from) revenue breakpoints,
        used when the sector defines none
      growth_tolerance: Percentage points around the growth benchmark that
        still count as 'moderate'
      margin_tolerance: Percentage points around the margin benchmark that
        still count as 'average'
    '''
    self.size_thresholds = size_thresholds
    self.growth_tolerance = growth_tolerance
    self.margin_tolerance = margin_tolerance

  def size_bucket(self, revenue: Optional[float],
                  profile: SectorProfile) -> Optional[str]:
    if revenue is None:
      return None
    small_below, large_from = profile.size_thresholds or self.size_thresholds
    if revenue < small_below:
      return 'small'
    if revenue >= large_from:
      return 'large'
    return 'medium'

  def growth_bucket(self, growth_rate: Optional[float],
                    profile: SectorProfile) -> Optional[str]:
    if growth_rate is None:
      return None
    return band(growth_rate, profile.benchmarks.avg_growth_rate,
                self.growth_tolerance, ('low', 'moderate', 'high'))

  def profitability_bucket(self, margin: Optional[float],
                           profile: SectorProfile) -> Optional[str]:
    if margin is None:
      return None
    return band(margin, profile.benchmarks.avg_profit_margin,
                self.margin_tolerance, ('low', 'average', 'high'))

  def classify(self, inputs: BusinessInputs,
               profile: SectorProfile) -> FactorBuckets:
    '''
    Classify inputs against a sector profile.

    Args:
      inputs: Business inputs
      profile: Resolved sector profile

    Returns:
      FactorBuckets with missing dimensions set to the middle bucket and
      listed in `defaulted`
    '''
    size = self.size_bucket(inputs.annual_revenue, profile)
    growth = self.growth_bucket(inputs.growth_rate, profile)
    profitability = self.profitability_bucket(inputs.profit_margin, profile)

    defaulted = set()
    if size is None:
      size = 'medium'
      defaulted.add('size')
    if growth is None:
      growth = 'moderate'
      defaulted.add('growth')
    if profitability is None:
      profitability = 'average'
      defaulted.add('profitability')

    buckets = FactorBuckets(
        size=size,
        growth=growth,
        profitability=profitability,
        defaulted=frozenset(defaulted),
    )
    logger.debug('Buckets for sector %s: %s (defaulted: %s)', profile.key,
                 buckets.as_dict(), sorted(defaulted))
    return buckets
