"""
Engine configuration.

EngineConfig is a serializable (JSON-friendly) record of every tunable
coefficient in the engine: which methods run, the classification breakpoints,
the missing-data penalty, the spread and confidence coefficients and the
narrative margins. Nothing here is read from the environment; callers pass a
config explicitly or get EngineConfig.default().
"""

from dataclasses import asdict
from dataclasses import dataclass
from dataclasses import field
import json
from typing import Any


@dataclass(frozen=True)
class EngineConfig:
  """
  Tunable parameters for a valuation run.

  Attributes:
    name: Human-readable configuration name
    methods: Method names (see methods/registry.py), evaluated in order
    size_small_below: Revenue below which a business is 'small'
    size_large_from: Revenue from which a business is 'large'
    growth_tolerance: Band (percentage points) around the growth benchmark
      classified as 'moderate'
    margin_tolerance: Band (percentage points) around the margin benchmark
      classified as 'average'
    missing_data_penalty: Reliability multiplier per defaulted bucket
    quality_adjustments: Apply recurring-revenue, concentration, maturity and
      owner-involvement multipliers to the market methods
    method_weighting: Weight methods by business profile (margin, recurring
      revenue, asset-heavy sector) instead of the flat base weights
    base_spread: Range spread when methods agree perfectly
    dispersion_spread_weight: Extra spread per unit of coefficient of
      variation between method estimates
    min_spread: Lower clamp for the spread
    max_spread: Upper clamp for the spread
    base_confidence: Confidence before data, method and dispersion terms
    completeness_weight: Points for fully data-backed buckets
    method_agreement_weight: Points per additional method (up to two)
    optional_fields_weight: Points for fully populated optional fields
    dispersion_penalty_weight: Points removed per unit of coefficient of
      variation (capped at 1.0)
    default_sector_penalty: Points removed when the fallback sector is used
    narrative_margin: Percentage points by which a KPI must beat or trail its
      benchmark to be reported as a strength or weakness
  """
  name: str = 'default'
  methods: tuple = ('revenue_multiple', 'earnings_multiple', 'asset_based')
  size_small_below: float = 1_000_000.0
  size_large_from: float = 5_000_000.0
  growth_tolerance: float = 5.0
  margin_tolerance: float = 3.0
  missing_data_penalty: float = 0.5
  quality_adjustments: bool = False
  method_weighting: bool = False
  base_spread: float = 0.15
  dispersion_spread_weight: float = 0.25
  min_spread: float = 0.10
  max_spread: float = 0.40
  base_confidence: float = 45.0
  completeness_weight: float = 30.0
  method_agreement_weight: float = 7.5
  optional_fields_weight: float = 10.0
  dispersion_penalty_weight: float = 15.0
  default_sector_penalty: float = 20.0
  narrative_margin: float = 3.0
  policy_params: dict = field(default_factory=dict)

  def __post_init__(self):
    object.__setattr__(self, 'methods', tuple(self.methods))
    if not self.methods:
      raise ValueError('At least one valuation method must be configured')
    if not 0 < self.size_small_below <= self.size_large_from:
      raise ValueError('Size thresholds must satisfy '
                       '0 < size_small_below <= size_large_from')
    if not 0 <= self.missing_data_penalty <= 1:
      raise ValueError('missing_data_penalty must be within [0, 1]')
    if not 0 <= self.min_spread <= self.max_spread < 1:
      raise ValueError('Spread bounds must satisfy '
                       '0 <= min_spread <= max_spread < 1')
    # The default-sector penalty must outweigh the largest dispersion
    # penalty so a fallback never scores above a known sector.
    if self.default_sector_penalty <= self.dispersion_penalty_weight:
      raise ValueError(
          'default_sector_penalty must exceed dispersion_penalty_weight')

  @property
  def size_thresholds(self) -> tuple:
    return (self.size_small_below, self.size_large_from)

  @classmethod
  def default(cls) -> 'EngineConfig':
    """
    Create default configuration.

    Uses:
      - Revenue, earnings and asset-based methods
      - Size breakpoints at 1M and 5M
      - +/-5pt growth band, +/-3pt margin band
      - Halved reliability per defaulted bucket
      - 15% base spread clamped to [10%, 40%]
    """
    return cls()

  @classmethod
  def quality_adjusted(cls) -> 'EngineConfig':
    """Default configuration plus qualitative multiple adjustments."""
    return cls(name='quality_adjusted', quality_adjustments=True)

  @classmethod
  def profile_weighted(cls) -> 'EngineConfig':
    """Default configuration with profile-driven method weights."""
    return cls(name='profile_weighted', method_weighting=True)

  @classmethod
  def conservative(cls) -> 'EngineConfig':
    """Wider ranges and stricter confidence."""
    return cls(
        name='conservative',
        base_spread=0.20,
        dispersion_spread_weight=0.35,
        min_spread=0.15,
        max_spread=0.45,
        base_confidence=40.0,
    )

  @classmethod
  def market_only(cls) -> 'EngineConfig':
    """Only the revenue and earnings multiple methods."""
    return cls(name='market_only',
               methods=('revenue_multiple', 'earnings_multiple'))

  def to_dict(self) -> dict[str, Any]:
    """Convert to dictionary."""
    result = asdict(self)
    result['methods'] = list(self.methods)
    return result

  def to_json(self) -> str:
    """Serialize to JSON string."""
    return json.dumps(self.to_dict(), indent=2)

  @classmethod
  def from_dict(cls, data: dict[str, Any]) -> 'EngineConfig':
    """Create from dictionary."""
    return cls(**data)

  @classmethod
  def from_json(cls, json_str: str) -> 'EngineConfig':
    """Create from JSON string."""
    return cls.from_dict(json.loads(json_str))


PRESETS = {
    'default': EngineConfig.default,
    'quality_adjusted': EngineConfig.quality_adjusted,
    'profile_weighted': EngineConfig.profile_weighted,
    'conservative': EngineConfig.conservative,
    'market_only': EngineConfig.market_only,
}
