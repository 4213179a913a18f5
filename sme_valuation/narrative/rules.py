'''
Narrative rule tables.

Pure data: every strength, weakness, opportunity and recommendation the
engine can emit is listed here, so the tables can be enumerated and tested
without running a valuation. The generator only interprets them.

Rule kinds:
  BenchmarkRule: compare an input metric with a sector benchmark; strength
    when it beats the benchmark by more than the margin, weakness when it
    trails by more than the margin, nothing in between.
  ThresholdRule: compare an input metric with a fixed threshold.
  SignalFactorRule: strength/weakness keyed by a combination of signals.
  SignalRule: opportunity/recommendation keyed by a combination of signals.
    A rule fires when every condition matches; no conditions = always.

Signals are discrete values derived from the inputs (see
generator.derive_signals): size, growth, profitability, growth_direction,
recurring, concentration, maturity, owner, exit_reason, category, sector
and ip.
'''

from dataclasses import dataclass, field
from typing import Mapping, Optional, Tuple

STRENGTH = 'strength'
WEAKNESS = 'weakness'


@dataclass(frozen=True)
class BenchmarkRule:
  '''
  Input metric vs sector benchmark.

  Detail templates may use {value}, {benchmark} and {diff} (absolute gap).
  '''
  metric: str
  benchmark: str
  strength_label: str
  strength_detail: str
  weakness_label: str
  weakness_detail: str
  margin: Optional[float] = None


@dataclass(frozen=True)
class ThresholdRule:
  '''
  Input metric vs a fixed threshold.

  comparison is 'above' (value > threshold) or 'below' (value < threshold).
  The detail template may use {value}.
  '''
  metric: str
  comparison: str
  threshold: float
  kind: str
  label: str
  detail: str


@dataclass(frozen=True)
class SignalFactorRule:
  '''Strength or weakness keyed by signal values.'''
  conditions: Mapping[str, Tuple[str, ...]]
  kind: str
  label: str
  detail: str


@dataclass(frozen=True)
class SignalRule:
  '''Message keyed by signal values.'''
  message: str
  conditions: Mapping[str, Tuple[str, ...]] = field(default_factory=dict)


BENCHMARK_RULES = (
    BenchmarkRule(
        metric='effective_margin',
        benchmark='avg_profit_margin',
        strength_label='High Profit Margins',
        strength_detail=('{value:.1f}% profit margin is {diff:.1f} points '
                         'above the {benchmark:.0f}% sector benchmark'),
        weakness_label='Below-Benchmark Margins',
        weakness_detail=('{value:.1f}% profit margin is {diff:.1f} points '
                         'below the {benchmark:.0f}% sector benchmark'),
    ),
    BenchmarkRule(
        metric='growth_rate',
        benchmark='avg_growth_rate',
        strength_label='Strong Growth Rate',
        strength_detail=('{value:.1f}% annual growth outpaces the '
                         '{benchmark:.0f}% sector benchmark'),
        weakness_label='Below-Benchmark Growth',
        weakness_detail=('{value:.1f}% annual growth trails the '
                         '{benchmark:.0f}% sector benchmark'),
    ),
    BenchmarkRule(
        metric='customer_retention',
        benchmark='avg_customer_retention',
        strength_label='Loyal Customer Base',
        strength_detail=('{value:.0f}% customer retention beats the '
                         '{benchmark:.0f}% sector benchmark'),
        weakness_label='Weak Customer Retention',
        weakness_detail=('{value:.0f}% customer retention is below the '
                         '{benchmark:.0f}% sector benchmark'),
    ),
)

THRESHOLD_RULES = (
    ThresholdRule(
        metric='recurring_revenue_pct',
        comparison='above',
        threshold=60.0,
        kind=STRENGTH,
        label='High Recurring Revenue',
        detail='{value:.0f}% recurring revenue provides predictable cash flow',
    ),
    ThresholdRule(
        metric='customer_concentration',
        comparison='below',
        threshold=15.0,
        kind=STRENGTH,
        label='Diversified Customer Base',
        detail='Low customer concentration reduces business risk',
    ),
    ThresholdRule(
        metric='years_in_operation',
        comparison='above',
        threshold=15.0,
        kind=STRENGTH,
        label='Established Business',
        detail='{value:.0f} years of operation shows proven stability',
    ),
    ThresholdRule(
        metric='customer_concentration',
        comparison='above',
        threshold=40.0,
        kind=WEAKNESS,
        label='Customer Concentration Risk',
        detail=('{value:.0f}% of revenue from the top customer creates '
                'dependency risk'),
    ),
    ThresholdRule(
        metric='growth_rate',
        comparison='below',
        threshold=0.0,
        kind=WEAKNESS,
        label='Declining Revenue',
        detail='Negative growth trend reduces buyer interest',
    ),
    ThresholdRule(
        metric='recurring_revenue_pct',
        comparison='below',
        threshold=30.0,
        kind=WEAKNESS,
        label='Low Recurring Revenue',
        detail='Limited recurring revenue increases cash flow uncertainty',
    ),
    ThresholdRule(
        metric='years_in_operation',
        comparison='below',
        threshold=3.0,
        kind=WEAKNESS,
        label='Limited Operating History',
        detail='Short track record increases buyer perceived risk',
    ),
)

SIGNAL_FACTOR_RULES = (
    SignalFactorRule(
        conditions={'owner': ('full_time',)},
        kind=WEAKNESS,
        label='Owner Dependency',
        detail='Business heavily dependent on owner involvement',
    ),
    SignalFactorRule(
        conditions={'owner': ('passive',)},
        kind=STRENGTH,
        label='Management Independence',
        detail='Business runs without day-to-day owner involvement',
    ),
)

OPPORTUNITY_RULES = (
    SignalRule(
        'Increase recurring revenue through subscription models or service '
        'contracts',
        {'recurring': ('low', 'medium')},
    ),
    SignalRule(
        'Diversify customer base to reduce concentration risk',
        {'concentration': ('high',)},
    ),
    SignalRule(
        'Explore international expansion opportunities',
        {'category': ('technology',)},
    ),
    SignalRule(
        'Develop additional product lines or features',
        {'category': ('technology',)},
    ),
    SignalRule(
        'Improve operational efficiency to increase profit margins',
        {'profitability': ('low',)},
    ),
    SignalRule(
        'Convert growth into margin by tightening pricing and cost control',
        {'growth': ('high',), 'profitability': ('low', 'average')},
    ),
    SignalRule(
        'Scale operations to reach the next size bracket, where buyers pay '
        'higher multiples',
        {'growth': ('high',), 'size': ('small', 'medium')},
    ),
    SignalRule(
        'Develop and protect intellectual property to increase value',
        {'ip': ('no',)},
    ),
)

RECOMMENDATION_RULES = (
    SignalRule(
        'Consider waiting 6-12 months to maximize growth trajectory value',
        {'growth': ('high',)},
    ),
    SignalRule(
        'Address declining revenue before going to market',
        {'growth_direction': ('declining',)},
    ),
    SignalRule('Prepare 3 years of audited financial statements'),
    SignalRule('Document all standard operating procedures'),
    SignalRule(
        'Develop management team to reduce owner dependency',
        {'owner': ('full_time',)},
    ),
    SignalRule(
        'Formalise recurring contracts with existing customers to lock in '
        'growth before sale',
        {'growth': ('high',), 'recurring': ('low',)},
    ),
    SignalRule(
        'Focus on increasing recurring revenue to improve multiples',
        {'recurring': ('low',)},
    ),
    SignalRule(
        'Implement customer diversification strategy over next 6 months',
        {'concentration': ('high',)},
    ),
    SignalRule(
        'Provide detailed financial projections and market analysis to '
        'offset a short track record',
        {'maturity': ('young',)},
    ),
    SignalRule(
        'Consider seller financing to achieve higher sale price',
        {'exit_reason': ('retirement',)},
    ),
)
