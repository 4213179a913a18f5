'''
Rule-based narrative generation.

Turns inputs, the resolved sector profile and the factor buckets into
strengths, weaknesses, opportunities and recommendations by interpreting the
tables in narrative/rules.py. Nothing is generated free-form: every message
comes from a table entry.
'''

from dataclasses import dataclass
import logging
from typing import Dict, List, Optional, Sequence, Tuple

from sme_valuation.domain.types import BusinessInputs
from sme_valuation.domain.types import FactorBuckets
from sme_valuation.domain.types import NarrativeFactor
from sme_valuation.domain.types import SectorProfile
from sme_valuation.narrative.rules import BENCHMARK_RULES
from sme_valuation.narrative.rules import BenchmarkRule
from sme_valuation.narrative.rules import OPPORTUNITY_RULES
from sme_valuation.narrative.rules import RECOMMENDATION_RULES
from sme_valuation.narrative.rules import SIGNAL_FACTOR_RULES
from sme_valuation.narrative.rules import SignalFactorRule
from sme_valuation.narrative.rules import SignalRule
from sme_valuation.narrative.rules import STRENGTH
from sme_valuation.narrative.rules import THRESHOLD_RULES
from sme_valuation.narrative.rules import ThresholdRule

logger = logging.getLogger(__name__)

UNKNOWN = 'unknown'
IP_ASSETS = ('intellectual_property', 'patents')


@dataclass(frozen=True)
class Narrative:
  '''
  Generated narrative.

  Attributes:
    strengths: Areas where the business outperforms
    weaknesses: Areas where it underperforms
    opportunities: Value-creation opportunities
    recommendations: Pre-sale recommendations
  '''
  strengths: Tuple[NarrativeFactor, ...] = ()
  weaknesses: Tuple[NarrativeFactor, ...] = ()
  opportunities: Tuple[str, ...] = ()
  recommendations: Tuple[str, ...] = ()


def _level(value: Optional[float], low_below: float, high_above: float,
           labels: Tuple[str, str, str]) -> str:
  if value is None:
    return UNKNOWN
  low, middle, high = labels
  if value < low_below:
    return low
  if value > high_above:
    return high
  return middle


def derive_signals(inputs: BusinessInputs, profile: SectorProfile,
                   buckets: FactorBuckets) -> Dict[str, str]:
  '''
  Discrete signals the signal rules are keyed on.

  Factor buckets filled by a missing-data default read 'unknown' so that
  rules never fire on data the seller did not provide.
  '''
  signals = {
      dim: UNKNOWN if dim in buckets.defaulted else bucket
      for dim, bucket in buckets.as_dict().items()
  }

  if inputs.growth_rate is None:
    signals['growth_direction'] = UNKNOWN
  elif inputs.growth_rate < 0:
    signals['growth_direction'] = 'declining'
  else:
    signals['growth_direction'] = 'growing'

  signals['recurring'] = _level(inputs.recurring_revenue_pct, 40.0, 60.0,
                                ('low', 'medium', 'high'))
  signals['concentration'] = _level(inputs.customer_concentration, 15.0, 30.0,
                                    ('low', 'moderate', 'high'))
  years = inputs.years_in_operation
  signals['maturity'] = _level(
      float(years) if years is not None else None, 3.0, 15.0,
      ('young', 'established', 'mature'))
  signals['owner'] = inputs.owner_involvement or UNKNOWN
  signals['exit_reason'] = (inputs.exit_reason or UNKNOWN).lower()
  signals['category'] = profile.category.lower()
  signals['sector'] = profile.key
  signals['ip'] = 'yes' if any(a in IP_ASSETS
                               for a in inputs.key_assets) else 'no'
  return signals


def matches(conditions, signals: Dict[str, str]) -> bool:
  '''True when every condition's allowed values include the signal.'''
  return all(
      signals.get(name, UNKNOWN) in allowed
      for name, allowed in conditions.items())


def _dedupe(messages: Sequence[str]) -> Tuple[str, ...]:
  return tuple(dict.fromkeys(messages))


class NarrativeGenerator:
  '''
  Interpret narrative rule tables for one business.
  '''

  def __init__(
      self,
      margin: float = 3.0,
      benchmark_rules: Sequence[BenchmarkRule] = BENCHMARK_RULES,
      threshold_rules: Sequence[ThresholdRule] = THRESHOLD_RULES,
      factor_rules: Sequence[SignalFactorRule] = SIGNAL_FACTOR_RULES,
      opportunity_rules: Sequence[SignalRule] = OPPORTUNITY_RULES,
      recommendation_rules: Sequence[SignalRule] = RECOMMENDATION_RULES,
  ):
    '''
    Initialize generator.

    Args:
      margin: Default percentage points a metric must beat or trail its
        benchmark by to be reported (rules may override)
      benchmark_rules: Metric vs sector benchmark rules
      threshold_rules: Metric vs fixed threshold rules
      factor_rules: Signal-keyed strengths and weaknesses
      opportunity_rules: Signal-keyed opportunities
      recommendation_rules: Signal-keyed recommendations
    '''
    self.margin = margin
    self.benchmark_rules = tuple(benchmark_rules)
    self.threshold_rules = tuple(threshold_rules)
    self.factor_rules = tuple(factor_rules)
    self.opportunity_rules = tuple(opportunity_rules)
    self.recommendation_rules = tuple(recommendation_rules)

  def compare_benchmark(
      self,
      rule: BenchmarkRule,
      inputs: BusinessInputs,
      profile: SectorProfile,
  ) -> Optional[Tuple[str, NarrativeFactor]]:
    '''
    Apply one benchmark rule.

    Returns:
      (kind, factor) when the metric is outside the margin, else None
    '''
    value = getattr(inputs, rule.metric)
    if value is None:
      return None
    benchmark = getattr(profile.benchmarks, rule.benchmark)
    margin = self.margin if rule.margin is None else rule.margin
    diff = value - benchmark
    if diff > margin:
      detail = rule.strength_detail.format(value=value,
                                           benchmark=benchmark,
                                           diff=abs(diff))
      return STRENGTH, NarrativeFactor(rule.strength_label, detail)
    if diff < -margin:
      detail = rule.weakness_detail.format(value=value,
                                           benchmark=benchmark,
                                           diff=abs(diff))
      return 'weakness', NarrativeFactor(rule.weakness_label, detail)
    return None

  @staticmethod
  def compare_threshold(rule: ThresholdRule,
                        inputs: BusinessInputs) -> Optional[NarrativeFactor]:
    value = getattr(inputs, rule.metric)
    if value is None:
      return None
    if rule.comparison == 'above':
      hit = value > rule.threshold
    elif rule.comparison == 'below':
      hit = value < rule.threshold
    else:
      raise ValueError(f'Unknown comparison: {rule.comparison!r}')
    if not hit:
      return None
    return NarrativeFactor(rule.label, rule.detail.format(value=value))

  def generate(self, inputs: BusinessInputs, profile: SectorProfile,
               buckets: FactorBuckets) -> Narrative:
    '''
    Build the narrative for one business.

    Args:
      inputs: Business inputs
      profile: Resolved sector profile
      buckets: Factor classification

    Returns:
      Narrative with rule-table messages in table order
    '''
    strengths: List[NarrativeFactor] = []
    weaknesses: List[NarrativeFactor] = []

    for rule in self.benchmark_rules:
      outcome = self.compare_benchmark(rule, inputs, profile)
      if outcome is not None:
        kind, factor = outcome
        (strengths if kind == STRENGTH else weaknesses).append(factor)

    for rule in self.threshold_rules:
      factor = self.compare_threshold(rule, inputs)
      if factor is not None:
        (strengths if rule.kind == STRENGTH else weaknesses).append(factor)

    signals = derive_signals(inputs, profile, buckets)
    for rule in self.factor_rules:
      if matches(rule.conditions, signals):
        factor = NarrativeFactor(rule.label, rule.detail)
        (strengths if rule.kind == STRENGTH else weaknesses).append(factor)

    opportunities = _dedupe([
        r.message
        for r in self.opportunity_rules
        if matches(r.conditions, signals)
    ])
    recommendations = _dedupe([
        r.message
        for r in self.recommendation_rules
        if matches(r.conditions, signals)
    ])

    logger.debug('Narrative signals: %s', signals)
    return Narrative(
        strengths=tuple(strengths),
        weaknesses=tuple(weaknesses),
        opportunities=opportunities,
        recommendations=recommendations,
    )
