from concurrent.futures import ThreadPoolExecutor
import dataclasses
import json
import logging
import sys

import pytest

from sme_valuation.config import EngineConfig
from sme_valuation.domain.errors import InsufficientDataError
from sme_valuation.domain.types import BusinessInputs
from sme_valuation.run import calculate
from sme_valuation.run import load_config
from sme_valuation.run import load_inputs
from sme_valuation.run import main
from sme_valuation.sectors.catalog import SectorCatalog
from sme_valuation.sectors.table import SECTOR_RECORDS

SECTORS = [r['key'] for r in SECTOR_RECORDS] + ['not_a_sector']

VARIED_INPUTS = [
    BusinessInputs(sector='technology', annual_revenue=1e6,
                   profit_value=2e5),
    BusinessInputs(sector='saas', annual_revenue=3e6, profit_margin=-10.0,
                   growth_rate=45.0),
    BusinessInputs(sector='hospitality', profit_value=80_000.0),
    BusinessInputs(sector=None, annual_revenue=250_000.0),
    BusinessInputs(sector='manufacturing', annual_revenue=12e6,
                   profit_value=1.5e6, growth_rate=-8.0,
                   key_assets=('equipment', 'real_estate'),
                   year_established=1985, as_of_year=2025),
    BusinessInputs(sector='ecommerce', annual_revenue=400_000.0,
                   profit_value=400_000.0, growth_rate=200.0,
                   key_assets=('brand',)),
]


class TestCalculateProperties:
  """Invariants that hold for every calculation."""

  @pytest.mark.parametrize('inputs', VARIED_INPUTS)
  def test_bounds(self, inputs):
    """minimum <= typical <= maximum and 0 <= confidence <= 100."""
    rng = calculate(inputs).valuation_range
    assert rng.minimum <= rng.typical <= rng.maximum
    assert 0.0 <= rng.confidence <= 100.0

  @pytest.mark.parametrize('sector', SECTORS)
  @pytest.mark.parametrize('key_assets', [(), ('brand', 'software')])
  def test_monotonic_in_revenue(self, sector, key_assets):
    """Typical never falls as revenue rises with margin held fixed."""
    revenues = [1e5, 5e5, 999_999.0, 1e6, 2e6, 4_999_999.0, 5e6, 2e7]
    typicals = [
        calculate(
            BusinessInputs(sector=sector,
                           annual_revenue=revenue,
                           profit_margin=12.0,
                           growth_rate=10.0,
                           key_assets=key_assets)).valuation_range.typical
        for revenue in revenues
    ]
    assert typicals == sorted(typicals)

  @pytest.mark.parametrize('sector', SECTORS)
  @pytest.mark.parametrize('key_assets', [(), ('brand', 'software')])
  @pytest.mark.parametrize('config', [
      EngineConfig.default(),
      EngineConfig.profile_weighted(),
      EngineConfig.quality_adjusted(),
  ], ids=lambda c: c.name)
  def test_monotonic_in_revenue_with_profit_fixed(self, sector, key_assets,
                                                  config):
    """Typical never falls as revenue rises with the profit value fixed."""
    revenues = [2e5, 999_999.0, 1e6, 1.1e6, 1.12e6, 1.5e6, 2e6, 4_999_999.0,
                5e6, 2e7]
    reports = [
        calculate(BusinessInputs(sector=sector,
                                 annual_revenue=revenue,
                                 profit_value=200_000.0,
                                 growth_rate=10.0,
                                 recurring_revenue_pct=50.0,
                                 key_assets=key_assets),
                  config=config) for revenue in revenues
    ]
    typicals = [r.valuation_range.typical for r in reports]
    estimates = [r.method('revenue_multiple').estimate for r in reports]
    assert typicals == sorted(typicals)
    assert estimates == sorted(estimates)

  def test_profit_value_across_margin_edge(self):
    """Revenue rising past the benchmark margin edge does not lower value."""
    below = calculate(
        BusinessInputs(sector='technology', annual_revenue=1.1e6,
                       profit_value=200_000.0))
    above = calculate(
        BusinessInputs(sector='technology', annual_revenue=1.12e6,
                       profit_value=200_000.0))
    assert (above.method('revenue_multiple').estimate >=
            below.method('revenue_multiple').estimate)
    assert (above.method('earnings_multiple').estimate >=
            below.method('earnings_multiple').estimate)
    assert above.valuation_range.typical >= below.valuation_range.typical

  @pytest.mark.parametrize('inputs', VARIED_INPUTS)
  def test_idempotent(self, inputs):
    """Repeated calls give identical reports."""
    first = calculate(inputs)
    second = calculate(inputs)
    assert first.to_dict() == second.to_dict()
    assert first.valuation_range == second.valuation_range

  def test_thread_safe(self):
    """Concurrent calls give the same results as sequential ones."""
    expected = [calculate(i).to_dict() for i in VARIED_INPUTS]
    with ThreadPoolExecutor(max_workers=4) as pool:
      actual = list(pool.map(lambda i: calculate(i).to_dict(),
                             VARIED_INPUTS))
    assert actual == expected


class TestSectorFallback:
  """Unknown sectors degrade confidence instead of failing."""

  @pytest.mark.parametrize('sector', [None, '', 'underwater_basket_weaving'])
  def test_unknown_sector(self, sector, caplog):
    """Unknown sector uses the default profile and lowers confidence."""
    caplog.set_level(logging.INFO)
    known = calculate(
        BusinessInputs(sector='technology', annual_revenue=1e6,
                       profit_value=2e5, growth_rate=10.0))
    unknown = calculate(
        BusinessInputs(sector=sector, annual_revenue=1e6, profit_value=2e5,
                       growth_rate=10.0))

    assert unknown.used_default_sector
    assert unknown.sector_key == 'default'
    assert not known.used_default_sector
    assert (unknown.valuation_range.confidence <=
            known.valuation_range.confidence)
    assert 'not in catalog' in caplog.text

  @pytest.mark.parametrize('sector', [r['key'] for r in SECTOR_RECORDS])
  def test_fallback_never_more_confident(self, sector):
    """No known sector is less trusted than the fallback for equal inputs."""
    kwargs = dict(annual_revenue=2e6, profit_margin=18.0, growth_rate=12.0,
                  key_assets=('brand',))
    known = calculate(BusinessInputs(sector=sector, **kwargs))
    unknown = calculate(BusinessInputs(sector='mystery', **kwargs))
    assert (unknown.valuation_range.confidence <=
            known.valuation_range.confidence)


class TestMissingData:
  """Missing inputs lower confidence without failing."""

  def test_missing_growth_and_margin(self):
    """Dropping growth and margin strictly lowers confidence."""
    complete = calculate(
        BusinessInputs(sector='technology', annual_revenue=1e6,
                       profit_margin=20.0, growth_rate=10.0))
    partial = calculate(
        BusinessInputs(sector='technology', annual_revenue=1e6))
    assert (partial.valuation_range.confidence <
            complete.valuation_range.confidence)
    assert partial.buckets.defaulted == frozenset({'growth', 'profitability'})
    assert partial.method('revenue_multiple').reliability == pytest.approx(0.25)

  def test_no_usable_figures(self):
    """No revenue and a loss raises InsufficientDataError with reasons."""
    inputs = BusinessInputs(sector='technology', profit_value=-50_000.0)
    with pytest.raises(InsufficientDataError) as exc:
      calculate(inputs)
    assert exc.value.reasons() == {
        'revenue_multiple': 'no_revenue',
        'earnings_multiple': 'negative_profit',
        'asset_based': 'no_revenue',
    }


class TestScenarios:
  """End-to-end scenarios."""

  def test_technology_business(self, tech_inputs):
    """£1M revenue, £200k profit in technology.

    Buckets: medium size, moderate growth and average profitability, the
    last two defaulted (no growth rate, no supplied margin).
    Revenue:  1,000,000 x 2.5 = 2,500,000
    Earnings:   200,000 x 12  = 2,400,000
    Both weighted 0.25, typical = 2,450,000
    """
    report = calculate(tech_inputs)
    revenue = report.method('revenue_multiple')
    earnings = report.method('earnings_multiple')

    assert revenue.estimate == pytest.approx(2_500_000.0)
    assert earnings.estimate == pytest.approx(2_400_000.0)
    assert report.valuation_range.typical == pytest.approx(2_450_000.0)
    assert (min(revenue.estimate, earnings.estimate) <=
            report.valuation_range.typical <=
            max(revenue.estimate, earnings.estimate))
    assert 'High Profit Margins' in [f.label for f in report.strength_factors]
    assert [s.method for s in report.skipped_methods] == ['asset_based']

  def test_technology_with_flat_multiples(self, make_record):
    """Same business against a 1.0x revenue / 7.0x EBITDA sector."""
    record = make_record(key='technology',
                         baseMultiple={'revenue': 1.0, 'ebitda': 7.0},
                         benchmarks={
                             'avgProfitMargin': 15.0,
                             'avgGrowthRate': 20.0,
                             'avgCustomerRetention': 85.0,
                         })
    catalog = SectorCatalog.from_records([record])
    report = calculate(
        BusinessInputs(sector='technology', annual_revenue=1e6,
                       profit_value=2e5),
        catalog=catalog)

    revenue = report.method('revenue_multiple').estimate
    earnings = report.method('earnings_multiple').estimate
    assert revenue == pytest.approx(1_000_000.0)
    assert earnings == pytest.approx(1_400_000.0)
    assert revenue < report.valuation_range.typical < earnings
    assert 'High Profit Margins' in [f.label for f in report.strength_factors]

  def test_zero_profit(self):
    """Zero profit skips earnings; typical equals the revenue estimate.

    Profitability is defaulted (no supplied margin), so revenue = 1M x 2.5.
    Confidence = 45 + 30 x 1/3 + 10 x 1/10 = 56.0
    """
    report = calculate(
        BusinessInputs(sector='technology', annual_revenue=1e6,
                       profit_value=0.0))

    assert [r.method for r in report.method_breakdown] == ['revenue_multiple']
    assert report.skipped_methods[0].reason == 'zero_profit'
    assert report.valuation_range.typical == pytest.approx(
        report.method_breakdown[0].estimate)
    assert report.valuation_range.typical == pytest.approx(2_500_000.0)
    assert report.valuation_range.confidence == pytest.approx(56.0)
    assert report.primary_method == 'revenue_multiple'

  def test_loss_making_business_still_valued(self):
    """A loss skips the earnings method but revenue still values it."""
    report = calculate(
        BusinessInputs(sector='saas', annual_revenue=2e6,
                       profit_value=-1e5))
    assert report.method('earnings_multiple') is None
    assert report.skipped_methods[0].reason == 'negative_profit'
    assert report.valuation_range.typical > 0

  def test_asset_method_contributes(self, full_inputs):
    """Declared assets add the asset-based estimate to the blend."""
    report = calculate(full_inputs)
    assert [r.method for r in report.method_breakdown] == [
        'revenue_multiple', 'earnings_multiple', 'asset_based'
    ]
    assert report.primary_method == 'revenue_multiple'
    assert report.method('asset_based').reliability == pytest.approx(0.5)


class TestConfiguration:
  """calculate honours the supplied configuration."""

  def test_quality_adjusted(self, full_inputs):
    """Quality adjustments change the market estimates."""
    plain = calculate(full_inputs)
    adjusted = calculate(full_inputs, config=EngineConfig.quality_adjusted())
    assert (adjusted.method('revenue_multiple').multiplier !=
            plain.method('revenue_multiple').multiplier)

  def test_conservative_wider(self, full_inputs):
    """Conservative preset gives a wider range."""
    default = calculate(full_inputs).valuation_range
    conservative = calculate(full_inputs,
                             config=EngineConfig.conservative()).valuation_range
    assert conservative.spread > default.spread

  def test_market_only(self, full_inputs):
    """market_only preset never runs the asset method."""
    report = calculate(full_inputs, config=EngineConfig.market_only())
    assert report.method('asset_based') is None
    assert report.skipped_methods == ()

  def test_profile_weighted(self, full_inputs):
    """Profile weights become the method reliabilities."""
    report = calculate(full_inputs, config=EngineConfig.profile_weighted())
    reliabilities = {r.method: r.reliability for r in report.method_breakdown}
    assert reliabilities == pytest.approx({
        'revenue_multiple': 0.25,
        'earnings_multiple': 0.5,
        'asset_based': 0.25,
    })
    assert report.primary_method == 'earnings_multiple'

  def test_profile_weights_before_penalty(self):
    """Missing-data penalties still apply on top of profile weights."""
    report = calculate(
        BusinessInputs(sector='manufacturing', annual_revenue=2e6,
                       profit_value=2e5, key_assets=('equipment',)),
        config=EngineConfig.profile_weighted())
    reliabilities = {r.method: r.reliability for r in report.method_breakdown}
    assert reliabilities == pytest.approx({
        'revenue_multiple': 0.2 * 0.25,
        'earnings_multiple': 0.4 * 0.25,
        'asset_based': 0.4 * 0.25,
    })

  def test_profile_weighted_moves_typical(self, full_inputs):
    """Reweighting changes the blend but not the method estimates."""
    plain = calculate(full_inputs)
    weighted = calculate(full_inputs, config=EngineConfig.profile_weighted())
    assert ([r.estimate for r in plain.method_breakdown] == pytest.approx(
        [r.estimate for r in weighted.method_breakdown]))
    assert (weighted.valuation_range.typical !=
            pytest.approx(plain.valuation_range.typical))

  def test_size_thresholds(self, tech_inputs):
    """Size breakpoints come from the config."""
    config = EngineConfig(size_small_below=2e6, size_large_from=8e6)
    assert calculate(tech_inputs, config=config).buckets.size == 'small'

  def test_report_is_immutable(self, tech_inputs):
    """The returned report cannot be modified."""
    report = calculate(tech_inputs)
    with pytest.raises(dataclasses.FrozenInstanceError):
      report.primary_method = 'x'


class TestLoaders:
  """Tests for the CLI helpers."""

  def test_load_inputs_fills_year(self, tmp_path):
    """Reference year is filled when the record has none."""
    path = tmp_path / 'business.json'
    path.write_text(
        json.dumps({
            'sector': 'technology',
            'annualRevenue': 1e6,
            'yearEstablished': 2010,
        }))
    inputs = load_inputs(path, as_of_year=2025)
    assert inputs.years_in_operation == 15

  def test_load_inputs_keeps_record_year(self, tmp_path):
    """A reference year in the record wins."""
    path = tmp_path / 'business.json'
    path.write_text(
        json.dumps({
            'annualRevenue': 1e6,
            'yearEstablished': 2010,
            'asOfYear': 2020,
        }))
    assert load_inputs(path, as_of_year=2025).years_in_operation == 10

  def test_load_inputs_invalid(self, tmp_path):
    """Invalid records raise ValueError."""
    path = tmp_path / 'business.json'
    path.write_text(json.dumps({'annualRevenue': -5}))
    with pytest.raises(ValueError, match='Invalid business inputs'):
      load_inputs(path)

  def test_load_inputs_missing(self, tmp_path):
    """Missing file raises FileNotFoundError."""
    with pytest.raises(FileNotFoundError):
      load_inputs(tmp_path / 'missing.json')

  def test_load_config(self, tmp_path):
    """Presets by name, or a JSON config file."""
    assert load_config('conservative', None).name == 'conservative'
    path = tmp_path / 'config.json'
    path.write_text(EngineConfig(name='custom', base_spread=0.2).to_json())
    assert load_config('default', path).base_spread == 0.2
    with pytest.raises(ValueError, match='Unknown scenario'):
      load_config('reckless', None)


class TestMain:
  """Tests for the CLI entrypoint."""

  def test_writes_report(self, tmp_path, monkeypatch):
    """CLI values the business and writes the report JSON."""
    input_path = tmp_path / 'business.json'
    input_path.write_text(
        json.dumps({
            'sector': 'technology',
            'annualRevenue': 1e6,
            'profitValue': 2e5,
        }))
    output_path = tmp_path / 'out' / 'report.json'
    monkeypatch.setattr(sys, 'argv', [
        'run', '--input',
        str(input_path), '--output',
        str(output_path), '--as-of-year', '2025'
    ])

    main()

    report = json.loads(output_path.read_text())
    assert report['valuationRange']['typical'] == pytest.approx(2_450_000.0)
    assert report['sector']['key'] == 'technology'

  def test_insufficient_data_exits(self, tmp_path, monkeypatch):
    """CLI exits non-zero when nothing can be valued."""
    input_path = tmp_path / 'business.json'
    input_path.write_text(json.dumps({'profitValue': 0}))
    monkeypatch.setattr(sys, 'argv', ['run', '--input', str(input_path)])

    with pytest.raises(SystemExit) as exc:
      main()
    assert exc.value.code == 1
