'''
Qualitative multiple adjustments.

Banded multipliers for characteristics buyers pay for (or discount) beyond
the three factor buckets: recurring revenue, customer concentration,
operating history and owner involvement. Fields that are absent contribute
nothing. Applied identically to every market method when enabled, so the
methods stay comparable.
'''

from typing import List, Optional, Sequence, Tuple

from sme_valuation.domain.types import AdjustmentFactor
from sme_valuation.domain.types import BusinessInputs

# (exclusive lower bound, multiplier), highest band first.
RECURRING_REVENUE_BANDS = ((80.0, 1.25), (60.0, 1.15), (40.0, 1.08))
RECURRING_REVENUE_FLOOR = (20.0, 0.90)

CONCENTRATION_BANDS = ((50.0, 0.75), (30.0, 0.85), (20.0, 0.95))

MATURITY_BANDS = ((20.0, 1.10), (10.0, 1.05))
MATURITY_FLOOR = (3.0, 0.85)

OWNER_INVOLVEMENT_MULTIPLIERS = {
    'full_time': 0.90,
    'part_time': 1.00,
    'passive': 1.10,
}


def banded_multiplier(
    value: float,
    bands: Sequence[Tuple[float, float]],
    floor: Optional[Tuple[float, float]] = None,
) -> float:
  '''
  Multiplier for the first band whose bound the value exceeds.

  Args:
    value: Metric value
    bands: (exclusive lower bound, multiplier) pairs, highest first
    floor: Optional (exclusive upper bound, multiplier) for low values

  Returns:
    Matching multiplier, or 1.0 when no band applies
  '''
  for bound, multiplier in bands:
    if value > bound:
      return multiplier
  if floor is not None and value < floor[0]:
    return floor[1]
  return 1.0


def quality_adjustments(inputs: BusinessInputs) -> List[AdjustmentFactor]:
  '''Qualitative adjustments for the fields present on the inputs.'''
  adjustments = []
  if inputs.recurring_revenue_pct is not None:
    adjustments.append(
        AdjustmentFactor(
            'recurring_revenue',
            banded_multiplier(inputs.recurring_revenue_pct,
                              RECURRING_REVENUE_BANDS,
                              RECURRING_REVENUE_FLOOR)))
  if inputs.customer_concentration is not None:
    adjustments.append(
        AdjustmentFactor(
            'customer_concentration',
            banded_multiplier(inputs.customer_concentration,
                              CONCENTRATION_BANDS)))
  years = inputs.years_in_operation
  if years is not None:
    adjustments.append(
        AdjustmentFactor(
            'maturity',
            banded_multiplier(years, MATURITY_BANDS, MATURITY_FLOOR)))
  if inputs.owner_involvement in OWNER_INVOLVEMENT_MULTIPLIERS:
    adjustments.append(
        AdjustmentFactor(
            'owner_involvement',
            OWNER_INVOLVEMENT_MULTIPLIERS[inputs.owner_involvement]))
  return adjustments
