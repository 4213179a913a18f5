"""
Pure aggregation math.

Blends method estimates into a single range and confidence score. No I/O,
no clock, no randomness: identical inputs always give identical output.

Key functions:
  aggregate: Main entry point, builds the ValuationRange
  weighted_typical: Reliability-weighted central estimate
  dispersion: Coefficient of variation between method estimates
  compute_spread: Range half-width as a fraction of typical
  compute_confidence: 0-100 trust score
"""

from collections.abc import Sequence
import math

from sme_valuation.domain.errors import InsufficientDataError
from sme_valuation.domain.types import ValuationMethodResult
from sme_valuation.domain.types import ValuationRange


def clamp(value: float, lower: float, upper: float) -> float:
  return max(lower, min(upper, value))


def weighted_typical(results: Sequence[ValuationMethodResult]) -> float:
  """
  Reliability-weighted mean of the method estimates.

  Falls back to the plain mean when every weight is zero.

  Raises:
    InsufficientDataError: If results is empty
  """
  if not results:
    raise InsufficientDataError('No valuation method produced an estimate')

  total_weight = sum(r.reliability for r in results)
  if total_weight <= 0:
    return sum(r.estimate for r in results) / len(results)
  return sum(r.estimate * r.reliability for r in results) / total_weight


def dispersion(estimates: Sequence[float]) -> float:
  """
  Coefficient of variation (population stdev / mean) of the estimates.

  Returns 0.0 when there are fewer than two estimates or the mean is not
  positive, so a single method never divides by zero.
  """
  if len(estimates) < 2:
    return 0.0
  mean = sum(estimates) / len(estimates)
  if mean <= 0:
    return 0.0
  variance = sum((e - mean)**2 for e in estimates) / len(estimates)
  return math.sqrt(variance) / mean


def compute_spread(
    cv: float,
    base_spread: float = 0.15,
    cv_weight: float = 0.25,
    min_spread: float = 0.10,
    max_spread: float = 0.40,
) -> float:
  """
  Range half-width as a fraction of typical.

  spread = base_spread + cv_weight * cv, clamped to [min_spread, max_spread].
  More disagreement between methods gives a wider range.
  """
  return clamp(base_spread + cv_weight * cv, min_spread, max_spread)


def compute_confidence(
    real_bucket_fraction: float,
    method_count: int,
    optional_fraction: float,
    cv: float,
    used_default_sector: bool,
    base: float = 45.0,
    completeness_weight: float = 30.0,
    method_weight: float = 7.5,
    optional_weight: float = 10.0,
    dispersion_weight: float = 15.0,
    default_sector_penalty: float = 20.0,
) -> float:
  """
  Overall confidence in the range, 0-100.

  Increases with data-backed buckets, supplied optional fields and the
  number of methods (up to three); decreases with dispersion (capped at a
  coefficient of variation of 1.0) and when the fallback sector is used.

  Args:
    real_bucket_fraction: Share of factor buckets backed by real input
    method_count: Number of methods that produced an estimate
    optional_fraction: Share of optional fields supplied
    cv: Coefficient of variation between method estimates
    used_default_sector: Whether the fallback sector profile was used

  Returns:
    Confidence rounded to one decimal place
  """
  extra_methods = clamp(method_count - 1, 0, 2)
  score = (base + completeness_weight * real_bucket_fraction +
           method_weight * extra_methods + optional_weight * optional_fraction -
           dispersion_weight * min(cv, 1.0))
  if used_default_sector:
    score -= default_sector_penalty
  return round(clamp(score, 0.0, 100.0), 1)


def aggregate(
    results: Sequence[ValuationMethodResult],
    real_bucket_fraction: float,
    optional_fraction: float,
    used_default_sector: bool,
    base_spread: float = 0.15,
    cv_weight: float = 0.25,
    min_spread: float = 0.10,
    max_spread: float = 0.40,
    **confidence_params: float,
) -> ValuationRange:
  """
  Blend method results into a valuation range.

  Args:
    results: Non-skipped method results
    real_bucket_fraction: Share of factor buckets backed by real input
    optional_fraction: Share of optional fields supplied
    used_default_sector: Whether the fallback sector profile was used
    base_spread: Spread when methods agree
    cv_weight: Extra spread per unit of coefficient of variation
    min_spread: Lower clamp for the spread
    max_spread: Upper clamp for the spread
    **confidence_params: Coefficients forwarded to compute_confidence

  Returns:
    ValuationRange with minimum <= typical <= maximum

  Raises:
    InsufficientDataError: If results is empty
  """
  typical = weighted_typical(results)
  cv = dispersion([r.estimate for r in results])
  spread = compute_spread(cv, base_spread, cv_weight, min_spread, max_spread)
  confidence = compute_confidence(
      real_bucket_fraction=real_bucket_fraction,
      method_count=len(results),
      optional_fraction=optional_fraction,
      cv=cv,
      used_default_sector=used_default_sector,
      **confidence_params,
  )
  return ValuationRange(
      minimum=typical * (1.0 - spread),
      typical=typical,
      maximum=typical * (1.0 + spread),
      confidence=confidence,
  )


def primary_method(results: Sequence[ValuationMethodResult]) -> str:
  """Name of the method with the largest reliability (first on ties)."""
  if not results:
    return ''
  best = results[0]
  for r in results[1:]:
    if r.reliability > best.reliability:
      best = r
  return best.method
