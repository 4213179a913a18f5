'''
Domain types for the SME valuation engine.

These dataclasses are the typed interfaces between components: the catalog,
the classifier, the methods, the aggregator and the narrative generator only
exchange these types, never loosely-shaped records. Everything here is
frozen so a report handed back to the caller cannot be mutated afterwards.
'''

from dataclasses import dataclass, field
import json
import math
from types import MappingProxyType
from typing import Any, Dict, FrozenSet, Mapping, Optional, Tuple

SIZE_BUCKETS = ('small', 'medium', 'large')
GROWTH_BUCKETS = ('low', 'moderate', 'high')
PROFITABILITY_BUCKETS = ('low', 'average', 'high')

BUCKETS_BY_DIMENSION: Dict[str, Tuple[str, ...]] = {
    'size': SIZE_BUCKETS,
    'growth': GROWTH_BUCKETS,
    'profitability': PROFITABILITY_BUCKETS,
}

PROFIT_TYPES = ('ebitda', 'net_profit', 'gross_profit')
OWNER_INVOLVEMENT = ('full_time', 'part_time', 'passive')

# Rough conversion of reported profit to an EBITDA-equivalent figure.
EBITDA_CONVERSION = {
    'ebitda': 1.0,
    'net_profit': 1.3,
    'gross_profit': 0.5,
}

# Record keys accepted by BusinessInputs.from_dict (camelCase -> field).
_RECORD_ALIASES = {
    'sector': 'sector',
    'annualRevenue': 'annual_revenue',
    'profitValue': 'profit_value',
    'profitMargin': 'profit_margin',
    'profitType': 'profit_type',
    'yearEstablished': 'year_established',
    'asOfYear': 'as_of_year',
    'employeeCount': 'employee_count',
    'growthRate': 'growth_rate',
    'topCustomerPercentage': 'customer_concentration',
    'customerConcentration': 'customer_concentration',
    'recurringRevenuePercentage': 'recurring_revenue_pct',
    'customerRetention': 'customer_retention',
    'keyAssets': 'key_assets',
    'exitReason': 'exit_reason',
    'ownerInvolvement': 'owner_involvement',
}

_FLOAT_FIELDS = ('annual_revenue', 'profit_value', 'profit_margin',
                 'growth_rate', 'customer_concentration',
                 'recurring_revenue_pct', 'customer_retention')
_INT_FIELDS = ('year_established', 'as_of_year', 'employee_count')
_STR_FIELDS = ('sector', 'profit_type', 'exit_reason', 'owner_involvement')


def _is_missing(value: Any) -> bool:
  if value is None:
    return True
  if isinstance(value, str) and not value.strip():
    return True
  return isinstance(value, float) and math.isnan(value)


def _split_assets(value: Any) -> Tuple[str, ...]:
  if _is_missing(value):
    return ()
  if isinstance(value, str):
    parts = value.replace(';', ',').split(',')
  else:
    parts = list(value)
  return tuple(str(p).strip() for p in parts if str(p).strip())


@dataclass(frozen=True)
class BusinessInputs:
  '''
  Validated, self-reported inputs for a single business.

  Only the sector is expected on every record; every other figure may be
  absent and each consumer has a named policy for that case. Percentages are
  expressed in percent (20.0 means 20%), money in the seller's currency.

  Attributes:
    sector: Sector key used to resolve benchmark data
    annual_revenue: Last twelve months revenue
    profit_value: Reported profit figure of type profit_type
    profit_margin: Profit margin in percent
    profit_type: One of 'ebitda', 'net_profit', 'gross_profit'
    year_established: Year the business started trading
    as_of_year: Reference year for operating history, set by the caller
    employee_count: Headcount
    growth_rate: Year-over-year revenue growth in percent (may be negative)
    customer_concentration: Share of revenue from the top customer in percent
    recurring_revenue_pct: Share of revenue that recurs, in percent
    customer_retention: Annual customer retention in percent
    key_assets: Declared asset types (e.g. 'brand', 'real_estate')
    exit_reason: Why the owner is selling
    owner_involvement: One of 'full_time', 'part_time', 'passive'
  '''
  sector: Optional[str] = None
  annual_revenue: Optional[float] = None
  profit_value: Optional[float] = None
  profit_margin: Optional[float] = None
  profit_type: str = 'ebitda'
  year_established: Optional[int] = None
  as_of_year: Optional[int] = None
  employee_count: Optional[int] = None
  growth_rate: Optional[float] = None
  customer_concentration: Optional[float] = None
  recurring_revenue_pct: Optional[float] = None
  customer_retention: Optional[float] = None
  key_assets: Tuple[str, ...] = ()
  exit_reason: Optional[str] = None
  owner_involvement: Optional[str] = None

  def __post_init__(self):
    # Lists are accepted for convenience but stored as a tuple.
    if not isinstance(self.key_assets, tuple):
      object.__setattr__(self, 'key_assets', _split_assets(self.key_assets))

  @property
  def ebitda(self) -> Optional[float]:
    '''
    Profit figure usable by earnings-based methods.

    An explicit profit value wins; otherwise it is estimated from revenue and
    margin. Either way it is converted to an EBITDA-equivalent using the
    profit type. Returns None when no profit figure can be derived.
    '''
    factor = EBITDA_CONVERSION.get(self.profit_type, 1.0)
    if self.profit_value is not None:
      return self.profit_value * factor
    if self.profit_margin is not None and self.annual_revenue:
      return self.annual_revenue * self.profit_margin / 100.0 * factor
    return None

  @property
  def effective_margin(self) -> Optional[float]:
    '''Profit margin in percent, derived from profit and revenue if needed.'''
    if self.profit_margin is not None:
      return self.profit_margin
    if self.profit_value is not None and self.annual_revenue:
      return self.profit_value / self.annual_revenue * 100.0
    return None

  @property
  def years_in_operation(self) -> Optional[int]:
    if self.year_established is None or self.as_of_year is None:
      return None
    return max(0, self.as_of_year - self.year_established)

  def optional_completeness(self) -> float:
    '''Fraction of the optional descriptive fields that were supplied.'''
    present = [
        self.profit_value is not None or self.profit_margin is not None,
        self.year_established is not None,
        self.employee_count is not None,
        self.growth_rate is not None,
        self.customer_concentration is not None,
        self.recurring_revenue_pct is not None,
        self.customer_retention is not None,
        bool(self.key_assets),
        self.exit_reason is not None,
        self.owner_involvement is not None,
    ]
    return sum(present) / len(present)

  @classmethod
  def from_dict(cls, record: Mapping[str, Any]) -> 'BusinessInputs':
    '''
    Build inputs from a transport record.

    Accepts the camelCase keys of the valuation API as well as the field
    names themselves. Unknown keys are ignored; None, empty strings and NaN
    are treated as absent.

    Args:
      record: Mapping of field name to value

    Returns:
      BusinessInputs with numeric fields coerced to float/int
    '''
    values: Dict[str, Any] = {}
    for key, value in record.items():
      name = _RECORD_ALIASES.get(key, key)
      if name not in cls.__dataclass_fields__:
        continue
      values[name] = value

    kwargs: Dict[str, Any] = {}
    for name in _FLOAT_FIELDS:
      if not _is_missing(values.get(name)):
        kwargs[name] = float(values[name])
    for name in _INT_FIELDS:
      if not _is_missing(values.get(name)):
        kwargs[name] = int(float(values[name]))
    for name in _STR_FIELDS:
      if not _is_missing(values.get(name)):
        kwargs[name] = str(values[name]).strip()
    kwargs['key_assets'] = _split_assets(values.get('key_assets'))
    return cls(**kwargs)

  def to_dict(self) -> Dict[str, Any]:
    '''Convert to a plain dictionary keyed by field name.'''
    result = {name: getattr(self, name) for name in self.__dataclass_fields__}
    result['key_assets'] = list(self.key_assets)
    return result


@dataclass(frozen=True)
class BaseMultiple:
  '''
  Sector base multiples.

  Attributes:
    revenue: Enterprise value / revenue
    ebitda: Enterprise value / EBITDA
  '''
  revenue: float
  ebitda: float


@dataclass(frozen=True)
class AdjustmentFactors:
  '''
  Bucket -> multiplier lookup tables, one per classification dimension.

  Attributes:
    size: Multipliers keyed by size bucket
    growth: Multipliers keyed by growth bucket
    profitability: Multipliers keyed by profitability bucket
  '''
  size: Mapping[str, float]
  growth: Mapping[str, float]
  profitability: Mapping[str, float]

  def __post_init__(self):
    for dimension in BUCKETS_BY_DIMENSION:
      table = dict(getattr(self, dimension))
      object.__setattr__(self, dimension, MappingProxyType(table))

  def table(self, dimension: str) -> Mapping[str, float]:
    return getattr(self, dimension)

  @classmethod
  def neutral(cls) -> 'AdjustmentFactors':
    '''All multipliers set to 1.0.'''
    return cls(
        size={b: 1.0 for b in SIZE_BUCKETS},
        growth={b: 1.0 for b in GROWTH_BUCKETS},
        profitability={b: 1.0 for b in PROFITABILITY_BUCKETS},
    )


@dataclass(frozen=True)
class Benchmarks:
  '''
  Sector KPI benchmarks, all in percent.

  Attributes:
    avg_profit_margin: Typical profit margin
    avg_growth_rate: Typical annual revenue growth
    avg_customer_retention: Typical annual customer retention
  '''
  avg_profit_margin: float
  avg_growth_rate: float
  avg_customer_retention: float


@dataclass(frozen=True)
class SectorProfile:
  '''
  Benchmark data for one sector.

  Construction checks the closed-table invariant: every adjustment table
  defines exactly the buckets the classifier can produce.

  Attributes:
    key: Catalog key (e.g. 'technology')
    code: UK SIC code or range
    name: Display name
    category: Broad category (e.g. 'Technology')
    base_multiple: Revenue and EBITDA base multiples
    adjustment_factors: Per-dimension bucket multipliers
    benchmarks: KPI benchmarks used for classification and narrative
    size_thresholds: Optional (small_below, large_from) revenue breakpoints
    is_default: True only for the fallback profile
  '''
  key: str
  code: str
  name: str
  category: str
  base_multiple: BaseMultiple
  adjustment_factors: AdjustmentFactors
  benchmarks: Benchmarks
  size_thresholds: Optional[Tuple[float, float]] = None
  is_default: bool = False

  def __post_init__(self):
    if self.base_multiple.revenue <= 0 or self.base_multiple.ebitda <= 0:
      raise ValueError(f'Sector {self.key}: base multiples must be positive')

    for dimension, buckets in BUCKETS_BY_DIMENSION.items():
      table = self.adjustment_factors.table(dimension)
      if set(table) != set(buckets):
        raise ValueError(
            f'Sector {self.key}: {dimension} table must define exactly '
            f'{list(buckets)}, got {sorted(table)}')
      bad = [b for b, m in table.items() if not m > 0]
      if bad:
        raise ValueError(
            f'Sector {self.key}: non-positive {dimension} multipliers {bad}')

    # Larger businesses must never be penalised for their size, otherwise
    # value could fall as revenue grows across a size threshold.
    size = self.adjustment_factors.size
    if not size['small'] <= size['medium'] <= size['large']:
      raise ValueError(
          f'Sector {self.key}: size multipliers must be non-decreasing '
          f'from small to large, got {dict(size)}')

    if self.size_thresholds is not None:
      small_below, large_from = self.size_thresholds
      if not 0 < small_below <= large_from:
        raise ValueError(
            f'Sector {self.key}: size thresholds must satisfy '
            f'0 < small_below <= large_from, got {self.size_thresholds}')
      object.__setattr__(self, 'size_thresholds',
                         (float(small_below), float(large_from)))

  def to_dict(self) -> Dict[str, Any]:
    '''Convert to the record format understood by the catalog loader.'''
    return {
        'key': self.key,
        'code': self.code,
        'name': self.name,
        'category': self.category,
        'baseMultiple': {
            'revenue': self.base_multiple.revenue,
            'ebitda': self.base_multiple.ebitda,
        },
        'adjustmentFactors': {
            d: dict(self.adjustment_factors.table(d))
            for d in BUCKETS_BY_DIMENSION
        },
        'benchmarks': {
            'avgProfitMargin': self.benchmarks.avg_profit_margin,
            'avgGrowthRate': self.benchmarks.avg_growth_rate,
            'avgCustomerRetention': self.benchmarks.avg_customer_retention,
        },
        'sizeThresholds':
            list(self.size_thresholds) if self.size_thresholds else None,
    }


@dataclass(frozen=True)
class FactorBuckets:
  '''
  Discrete classification of a business along the three factor dimensions.

  Attributes:
    size: 'small', 'medium' or 'large'
    growth: 'low', 'moderate' or 'high'
    profitability: 'low', 'average' or 'high'
    defaulted: Dimensions filled by a missing-data default
  '''
  size: str
  growth: str
  profitability: str
  defaulted: FrozenSet[str] = frozenset()

  @property
  def penalty_count(self) -> int:
    '''Number of buckets that were not backed by real input.'''
    return len(self.defaulted)

  def as_dict(self) -> Dict[str, str]:
    return {
        'size': self.size,
        'growth': self.growth,
        'profitability': self.profitability,
    }


@dataclass(frozen=True)
class AdjustmentFactor:
  '''A named multiplier applied by a method, kept for traceability.'''
  name: str
  magnitude: float


@dataclass(frozen=True)
class ValuationMethodResult:
  '''
  Point estimate produced by one valuation method.

  Attributes:
    method: Method identifier (e.g. 'revenue_multiple')
    estimate: Point estimate in currency
    multiplier: Multiple applied after all adjustments
    reliability: Weight in [0, 1] reflecting how much real data backed it
    adjustments: Multipliers applied, in order
    diag: Diagnostic information explaining the computation
  '''
  method: str
  estimate: float
  multiplier: float
  reliability: float
  adjustments: Tuple[AdjustmentFactor, ...] = ()
  diag: Mapping[str, Any] = field(default_factory=dict)

  def __post_init__(self):
    object.__setattr__(self, 'adjustments', tuple(self.adjustments))
    object.__setattr__(self, 'diag', MappingProxyType(dict(self.diag)))

  def to_dict(self) -> Dict[str, Any]:
    return {
        'method': self.method,
        'estimate': self.estimate,
        'multiplier': self.multiplier,
        'reliability': self.reliability,
        'adjustments': [{
            'name': a.name,
            'magnitude': a.magnitude
        } for a in self.adjustments],
        'diag': dict(self.diag),
    }


@dataclass(frozen=True)
class SkippedMethod:
  '''
  Reason a method did not produce an estimate.

  Attributes:
    method: Method identifier
    reason: Machine-readable code (e.g. 'negative_profit')
    detail: Human-readable explanation
  '''
  method: str
  reason: str
  detail: str = ''


@dataclass(frozen=True)
class ValuationRange:
  '''
  Blended valuation range.

  Attributes:
    minimum: Low end of the range
    typical: Central estimate
    maximum: High end of the range
    confidence: Overall trust in the range, 0-100
  '''
  minimum: float
  typical: float
  maximum: float
  confidence: float

  def __post_init__(self):
    if not self.minimum <= self.typical <= self.maximum:
      raise ValueError(
          f'Invalid range: minimum={self.minimum}, typical={self.typical}, '
          f'maximum={self.maximum}')
    if not 0.0 <= self.confidence <= 100.0:
      raise ValueError(f'Confidence out of bounds: {self.confidence}')

  @property
  def spread(self) -> float:
    '''Fractional distance from typical to the bounds.'''
    if self.typical <= 0:
      return 0.0
    return (self.maximum - self.typical) / self.typical


@dataclass(frozen=True)
class NarrativeFactor:
  '''A strength or weakness: short label plus explanatory detail.'''
  label: str
  detail: str


@dataclass(frozen=True)
class ValuationReport:
  '''
  Complete, immutable result of one calculation.

  Attributes:
    valuation_range: Blended range and confidence
    method_breakdown: Non-skipped method results, in evaluation order
    skipped_methods: Methods that could not run and why
    strength_factors: Areas where the business beats its benchmarks
    weakness_factors: Areas where it trails them
    opportunities: Value-creation opportunities
    recommendations: Pre-sale recommendations
    sector_key: Key of the resolved sector profile
    sector_name: Display name of the resolved sector profile
    used_default_sector: True when the fallback profile was used
    buckets: Factor classification used by the methods
    primary_method: Method carrying the largest blend weight
  '''
  valuation_range: ValuationRange
  method_breakdown: Tuple[ValuationMethodResult, ...]
  skipped_methods: Tuple[SkippedMethod, ...] = ()
  strength_factors: Tuple[NarrativeFactor, ...] = ()
  weakness_factors: Tuple[NarrativeFactor, ...] = ()
  opportunities: Tuple[str, ...] = ()
  recommendations: Tuple[str, ...] = ()
  sector_key: str = ''
  sector_name: str = ''
  used_default_sector: bool = False
  buckets: Optional[FactorBuckets] = None
  primary_method: str = ''

  def __post_init__(self):
    for name in ('method_breakdown', 'skipped_methods', 'strength_factors',
                 'weakness_factors', 'opportunities', 'recommendations'):
      object.__setattr__(self, name, tuple(getattr(self, name)))

  def method(self, name: str) -> Optional[ValuationMethodResult]:
    '''Return the result of the named method, or None if it was skipped.'''
    for result in self.method_breakdown:
      if result.method == name:
        return result
    return None

  def to_dict(self) -> Dict[str, Any]:
    '''Convert to a plain key-value document for transport or storage.'''
    rng = self.valuation_range
    return {
        'valuationRange': {
            'minimum': rng.minimum,
            'typical': rng.typical,
            'maximum': rng.maximum,
            'confidence': rng.confidence,
        },
        'methodBreakdown': [r.to_dict() for r in self.method_breakdown],
        'skippedMethods': [{
            'method': s.method,
            'reason': s.reason,
            'detail': s.detail
        } for s in self.skipped_methods],
        'primaryMethod': self.primary_method,
        'sector': {
            'key': self.sector_key,
            'name': self.sector_name,
            'usedDefault': self.used_default_sector,
        },
        'buckets': self.buckets.as_dict() if self.buckets else None,
        'defaultedBuckets':
            sorted(self.buckets.defaulted) if self.buckets else [],
        'strengthFactors': [{
            'label': f.label,
            'detail': f.detail
        } for f in self.strength_factors],
        'weaknessFactors': [{
            'label': f.label,
            'detail': f.detail
        } for f in self.weakness_factors],
        'opportunities': list(self.opportunities),
        'recommendations': list(self.recommendations),
    }

  def to_json(self) -> str:
    '''Serialize to a JSON string.'''
    return json.dumps(self.to_dict(), indent=2, default=str)
