import pytest

from sme_valuation.domain.types import AdjustmentFactors
from sme_valuation.domain.types import BaseMultiple
from sme_valuation.domain.types import Benchmarks
from sme_valuation.domain.types import BusinessInputs
from sme_valuation.domain.types import FactorBuckets
from sme_valuation.domain.types import SectorProfile
from sme_valuation.sectors.catalog import SectorCatalog


def _make_record(key: str = 'widgets', **overrides) -> dict:
  """Helper to create a sector table record with simple round numbers."""
  record = {
      'key': key,
      'code': '99',
      'name': 'Widget Makers',
      'category': 'Industrial',
      'baseMultiple': {'revenue': 1.0, 'ebitda': 5.0},
      'adjustmentFactors': {
          'size': {'small': 0.8, 'medium': 1.0, 'large': 1.2},
          'growth': {'low': 0.9, 'moderate': 1.0, 'high': 1.1},
          'profitability': {'low': 0.9, 'average': 1.0, 'high': 1.1},
      },
      'benchmarks': {
          'avgProfitMargin': 10.0,
          'avgGrowthRate': 10.0,
          'avgCustomerRetention': 80.0,
      },
  }
  record.update(overrides)
  return record


@pytest.fixture
def sector_record() -> dict:
  """A valid sector record."""
  return _make_record()


@pytest.fixture
def widget_profile() -> SectorProfile:
  """Simple sector profile with round multipliers."""
  return SectorProfile(
      key='widgets',
      code='99',
      name='Widget Makers',
      category='Industrial',
      base_multiple=BaseMultiple(revenue=1.0, ebitda=5.0),
      adjustment_factors=AdjustmentFactors(
          size={'small': 0.8, 'medium': 1.0, 'large': 1.2},
          growth={'low': 0.9, 'moderate': 1.0, 'high': 1.1},
          profitability={'low': 0.9, 'average': 1.0, 'high': 1.1},
      ),
      benchmarks=Benchmarks(
          avg_profit_margin=10.0,
          avg_growth_rate=10.0,
          avg_customer_retention=80.0,
      ),
  )


@pytest.fixture
def catalog() -> SectorCatalog:
  """Bundled sector catalog."""
  return SectorCatalog.default()


@pytest.fixture
def neutral_buckets() -> FactorBuckets:
  """Middle buckets, all backed by real data."""
  return FactorBuckets(size='medium', growth='moderate', profitability='average')


@pytest.fixture
def tech_inputs() -> BusinessInputs:
  """Technology business with £1M revenue and £200k EBITDA."""
  return BusinessInputs(
      sector='technology',
      annual_revenue=1_000_000.0,
      profit_value=200_000.0,
  )


@pytest.fixture
def full_inputs() -> BusinessInputs:
  """Business with every optional field populated."""
  return BusinessInputs(
      sector='technology',
      annual_revenue=2_000_000.0,
      profit_value=300_000.0,
      profit_margin=15.0,
      profit_type='ebitda',
      year_established=2010,
      as_of_year=2025,
      employee_count=25,
      growth_rate=22.0,
      customer_concentration=10.0,
      recurring_revenue_pct=70.0,
      customer_retention=90.0,
      key_assets=('software', 'brand'),
      exit_reason='retirement',
      owner_involvement='part_time',
  )


@pytest.fixture
def make_record():
  """Factory for sector records with overrides."""
  return _make_record
