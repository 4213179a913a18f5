'''
Profile-driven method weights.

How far each method can be trusted depends on the business being valued. An
earnings multiple is the better guide for a high-margin business. Revenue and
asset values matter more when margins are thin. Subscription businesses are
priced on revenue and asset-heavy sectors on their assets.

The rules are data. They are applied in order, and a later matching rule
replaces the weights set by an earlier one. The resulting raw weights are
normalized to sum to 1 over the three built-in methods and used as each
method's base weight, before missing-data penalties.

Only inputs that do not move with revenue drive the rules (the supplied
profit margin, never one derived from a profit value), so the weights stay
fixed while revenue changes.
'''

from dataclasses import dataclass
import logging
from typing import Dict, Mapping, Optional, Tuple

from sme_valuation.domain.types import BusinessInputs
from sme_valuation.domain.types import SectorProfile

logger = logging.getLogger(__name__)

DEFAULT_WEIGHTS: Mapping[str, float] = {
    'revenue_multiple': 0.25,
    'earnings_multiple': 0.5,
    'asset_based': 0.25,
}


@dataclass(frozen=True)
class WeightRule:
  '''
  Raw method weights used when any of the rule's conditions holds.

  A rule without conditions never applies.

  Attributes:
    name: Rule identifier, reported in logs
    weights: Raw weight per method name
    margin_above: Supplied profit margin (percent) strictly above this
    margin_below: Supplied profit margin (percent) strictly below this
    recurring_above: Recurring revenue (percent) strictly above this
    sectors: Resolved sector keys
  '''
  name: str
  weights: Mapping[str, float]
  margin_above: Optional[float] = None
  margin_below: Optional[float] = None
  recurring_above: Optional[float] = None
  sectors: Tuple[str, ...] = ()

  def applies(self, inputs: BusinessInputs, profile: SectorProfile) -> bool:
    margin = inputs.profit_margin
    recurring = inputs.recurring_revenue_pct
    return any((
        self.margin_above is not None and margin is not None and
        margin > self.margin_above,
        self.margin_below is not None and margin is not None and
        margin < self.margin_below,
        self.recurring_above is not None and recurring is not None and
        recurring > self.recurring_above,
        profile.key in self.sectors,
    ))


WEIGHT_RULES = (
    WeightRule(
        name='high_margin',
        margin_above=20.0,
        weights={
            'revenue_multiple': 0.2,
            'earnings_multiple': 0.6,
            'asset_based': 0.2,
        },
    ),
    WeightRule(
        name='low_margin',
        margin_below=5.0,
        weights={
            'revenue_multiple': 0.4,
            'earnings_multiple': 0.2,
            'asset_based': 0.4,
        },
    ),
    WeightRule(
        name='recurring_revenue',
        sectors=('saas',),
        recurring_above=70.0,
        weights={
            'revenue_multiple': 0.4,
            'earnings_multiple': 0.5,
            'asset_based': 0.1,
        },
    ),
    WeightRule(
        name='asset_heavy',
        sectors=('manufacturing', 'construction'),
        weights={
            'revenue_multiple': 0.2,
            'earnings_multiple': 0.4,
            'asset_based': 0.4,
        },
    ),
)


def method_weights(
    inputs: BusinessInputs,
    profile: SectorProfile,
    rules: Tuple[WeightRule, ...] = WEIGHT_RULES,
    defaults: Mapping[str, float] = DEFAULT_WEIGHTS,
) -> Dict[str, float]:
  '''
  Base weight per method for this business.

  Args:
    inputs: Business inputs
    profile: Resolved sector profile
    rules: Weight rules, applied in order
    defaults: Raw weights when no rule applies

  Returns:
    Method name -> weight in [0, 1], summing to 1
  '''
  raw = dict(defaults)
  applied = []
  for rule in rules:
    if rule.applies(inputs, profile):
      raw = dict(rule.weights)
      applied.append(rule.name)

  total = sum(raw.values())
  if total <= 0:
    raise ValueError(f'Method weights must have a positive total: {raw}')
  weights = {name: w / total for name, w in raw.items()}
  logger.debug('Method weights for sector %s: %s (rules: %s)', profile.key,
               weights, applied)
  return weights
