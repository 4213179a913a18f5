import pytest

from sme_valuation.domain.types import BusinessInputs
from sme_valuation.domain.types import FactorBuckets
from sme_valuation.domain.types import SkippedMethod
from sme_valuation.domain.types import ValuationMethodResult
from sme_valuation.methods.assets import AssetBased
from sme_valuation.methods.base import market_adjustments
from sme_valuation.methods.earnings import EarningsMultiple
from sme_valuation.methods.quality import banded_multiplier
from sme_valuation.methods.quality import CONCENTRATION_BANDS
from sme_valuation.methods.quality import quality_adjustments
from sme_valuation.methods.quality import RECURRING_REVENUE_BANDS
from sme_valuation.methods.quality import RECURRING_REVENUE_FLOOR
from sme_valuation.methods.revenue import RevenueMultiple


@pytest.fixture
def strong_buckets() -> FactorBuckets:
  return FactorBuckets(size='large', growth='high', profitability='high')


class TestMarketAdjustments:
  """Tests for the shared bucket multipliers."""

  def test_three_named_multipliers(self, widget_profile, strong_buckets):
    """Size, growth and profitability multipliers in order."""
    adjustments = market_adjustments(widget_profile, strong_buckets)
    assert [a.name for a in adjustments] == [
        'size:large', 'growth:high', 'profitability:high'
    ]
    assert [a.magnitude for a in adjustments] == [1.2, 1.1, 1.1]


class TestRevenueMultiple:
  """Tests for RevenueMultiple."""

  def test_neutral_buckets(self, widget_profile, neutral_buckets):
    """Neutral buckets apply the base multiple only."""
    inputs = BusinessInputs(annual_revenue=2e6)
    result = RevenueMultiple().compute(inputs, widget_profile, neutral_buckets)

    assert isinstance(result, ValuationMethodResult)
    assert result.method == 'revenue_multiple'
    assert result.estimate == pytest.approx(2e6)
    assert result.multiplier == pytest.approx(1.0)
    assert result.reliability == 1.0
    assert result.diag['figure'] == 2e6

  def test_adjusted_multiple(self, widget_profile, strong_buckets):
    """All three bucket multipliers are applied."""
    inputs = BusinessInputs(annual_revenue=2e6)
    result = RevenueMultiple().compute(inputs, widget_profile, strong_buckets)
    assert result.multiplier == pytest.approx(1.452)
    assert result.estimate == pytest.approx(2_904_000.0)

  @pytest.mark.parametrize('revenue', [None, 0.0])
  def test_skipped_without_revenue(self, widget_profile, neutral_buckets,
                                   revenue):
    """Absent or zero revenue skips the method."""
    inputs = BusinessInputs(annual_revenue=revenue, profit_value=1e5)
    result = RevenueMultiple().compute(inputs, widget_profile, neutral_buckets)
    assert isinstance(result, SkippedMethod)
    assert result.reason == 'no_revenue'

  def test_reliability_halved_per_defaulted_bucket(self, widget_profile):
    """Each defaulted bucket halves the reliability."""
    buckets = FactorBuckets('medium', 'moderate', 'average',
                            frozenset({'growth', 'profitability'}))
    inputs = BusinessInputs(annual_revenue=2e6)
    result = RevenueMultiple().compute(inputs, widget_profile, buckets)
    assert result.reliability == pytest.approx(0.25)
    assert result.diag['defaulted_buckets'] == ['growth', 'profitability']

  def test_quality_adjustments_opt_in(self, widget_profile, neutral_buckets):
    """Quality adjustments only apply when enabled."""
    inputs = BusinessInputs(annual_revenue=1e6,
                            recurring_revenue_pct=85.0,
                            customer_concentration=55.0,
                            year_established=2000,
                            as_of_year=2025,
                            owner_involvement='passive')
    plain = RevenueMultiple().compute(inputs, widget_profile, neutral_buckets)
    adjusted = RevenueMultiple(quality=True).compute(inputs, widget_profile,
                                                     neutral_buckets)
    assert plain.multiplier == pytest.approx(1.0)
    assert adjusted.multiplier == pytest.approx(1.25 * 0.75 * 1.1 * 1.1)
    assert adjusted.diag['quality_adjusted']


class TestEarningsMultiple:
  """Tests for EarningsMultiple."""

  def test_profit_value(self, widget_profile, neutral_buckets):
    """EBITDA times the sector earnings multiple."""
    inputs = BusinessInputs(annual_revenue=2e6, profit_value=3e5)
    result = EarningsMultiple().compute(inputs, widget_profile,
                                        neutral_buckets)
    assert result.estimate == pytest.approx(1.5e6)
    assert result.multiplier == pytest.approx(5.0)

  def test_margin_only(self, widget_profile, neutral_buckets):
    """Profit derived from revenue and margin."""
    inputs = BusinessInputs(annual_revenue=2e6, profit_margin=10.0)
    result = EarningsMultiple().compute(inputs, widget_profile,
                                        neutral_buckets)
    assert result.estimate == pytest.approx(1e6)

  def test_same_adjustments_as_revenue(self, widget_profile, strong_buckets):
    """Both market methods apply identical bucket multipliers."""
    inputs = BusinessInputs(annual_revenue=2e6, profit_value=3e5)
    revenue = RevenueMultiple().compute(inputs, widget_profile,
                                        strong_buckets)
    earnings = EarningsMultiple().compute(inputs, widget_profile,
                                          strong_buckets)
    assert revenue.adjustments == earnings.adjustments

  @pytest.mark.parametrize('profit,reason', [
      (None, 'no_profit'),
      (0.0, 'zero_profit'),
      (-50_000.0, 'negative_profit'),
  ])
  def test_skip_reasons(self, widget_profile, neutral_buckets, profit, reason):
    """Missing, zero and negative profit skip with distinct reasons."""
    inputs = BusinessInputs(annual_revenue=1e6, profit_value=profit)
    result = EarningsMultiple().compute(inputs, widget_profile,
                                        neutral_buckets)
    assert isinstance(result, SkippedMethod)
    assert result.method == 'earnings_multiple'
    assert result.reason == reason


class TestAssetBased:
  """Tests for AssetBased."""

  def test_asset_premiums(self, widget_profile, neutral_buckets):
    """Recognised assets add premiums once each; unknown ones are noted."""
    inputs = BusinessInputs(annual_revenue=1e6,
                            key_assets=('brand', 'software', 'brand',
                                        'spaceship'))
    result = AssetBased().compute(inputs, widget_profile, neutral_buckets)
    assert result.multiplier == pytest.approx(0.45)
    assert result.estimate == pytest.approx(450_000.0)
    assert result.reliability == pytest.approx(0.5)
    assert result.diag['recognised_assets'] == ['brand', 'software']
    assert result.diag['unrecognised_assets'] == ['spaceship']

  @pytest.mark.parametrize('established,factor', [
      (2000, 1.3),
      (2012, 1.15),
      (2018, 1.0),
      (2023, 0.7),
  ])
  def test_maturity(self, widget_profile, neutral_buckets, established,
                    factor):
    """Operating history scales the asset value."""
    inputs = BusinessInputs(annual_revenue=1e6,
                            key_assets=('equipment',),
                            year_established=established,
                            as_of_year=2025)
    result = AssetBased().compute(inputs, widget_profile, neutral_buckets)
    assert result.multiplier == pytest.approx(0.3 * 1.1 * factor)

  def test_skipped_without_assets(self, widget_profile, neutral_buckets):
    """No declared assets skips the method."""
    inputs = BusinessInputs(annual_revenue=1e6)
    result = AssetBased().compute(inputs, widget_profile, neutral_buckets)
    assert result.reason == 'no_key_assets'

  def test_skipped_without_revenue(self, widget_profile, neutral_buckets):
    """Asset value is estimated from revenue, so revenue is required."""
    inputs = BusinessInputs(profit_value=1e5, key_assets=('brand',))
    result = AssetBased().compute(inputs, widget_profile, neutral_buckets)
    assert result.reason == 'no_revenue'


class TestQualityAdjustments:
  """Tests for the qualitative multiplier bands."""

  @pytest.mark.parametrize('value,expected', [
      (85.0, 1.25),
      (70.0, 1.15),
      (45.0, 1.08),
      (30.0, 1.0),
      (10.0, 0.9),
  ])
  def test_recurring_revenue_bands(self, value, expected):
    """Recurring revenue bands, highest first, with a low floor."""
    assert banded_multiplier(value, RECURRING_REVENUE_BANDS,
                             RECURRING_REVENUE_FLOOR) == expected

  def test_concentration_band_edges(self):
    """Bands use exclusive lower bounds."""
    assert banded_multiplier(20.0, CONCENTRATION_BANDS) == 1.0
    assert banded_multiplier(25.0, CONCENTRATION_BANDS) == 0.95

  def test_absent_fields_contribute_nothing(self):
    """Inputs without qualitative fields get no adjustments."""
    assert quality_adjustments(BusinessInputs(annual_revenue=1e6)) == []

  def test_named_adjustments(self, full_inputs):
    """Each present field yields one named adjustment."""
    names = [a.name for a in quality_adjustments(full_inputs)]
    assert names == [
        'recurring_revenue', 'customer_concentration', 'maturity',
        'owner_involvement'
    ]
