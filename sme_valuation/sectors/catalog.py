'''
Sector catalog.

Maps sector keys to SectorProfile benchmark data and resolves unknown or
missing keys to the canonical DEFAULT_SECTOR. Resolution never fails: an
unrecognised sector degrades confidence downstream, it does not abort the
calculation.

Usage:
  catalog = SectorCatalog.default()
  profile = catalog.resolve('technology')

  # Custom table
  catalog = SectorCatalog.from_json(Path('sectors.json'))
'''

import json
import logging
from pathlib import Path
from typing import Any, Dict, Iterable, Iterator, List, Mapping, Optional

import pandas as pd

from sme_valuation.domain.types import AdjustmentFactors
from sme_valuation.domain.types import BaseMultiple
from sme_valuation.domain.types import Benchmarks
from sme_valuation.domain.types import SectorProfile
from sme_valuation.sectors.table import SECTOR_RECORDS

logger = logging.getLogger(__name__)

DEFAULT_SECTOR = SectorProfile(
    key='default',
    code='GENERAL',
    name='General Business',
    category='General',
    base_multiple=BaseMultiple(revenue=1.0, ebitda=7.0),
    adjustment_factors=AdjustmentFactors.neutral(),
    benchmarks=Benchmarks(
        avg_profit_margin=10.0,
        avg_growth_rate=10.0,
        avg_customer_retention=75.0,
    ),
    is_default=True,
)


def _normalize_key(key: str) -> str:
  return key.strip().lower()


def profile_from_record(record: Mapping[str, Any]) -> SectorProfile:
  '''
  Build a SectorProfile from a table record.

  Args:
    record: Mapping with key, code, name, category, baseMultiple,
      adjustmentFactors, benchmarks and optional sizeThresholds

  Returns:
    Validated SectorProfile

  Raises:
    ValueError: If a required field is missing or the tables are invalid
  '''
  key = record.get('key', '<unknown>')
  try:
    base = record['baseMultiple']
    factors = record['adjustmentFactors']
    bench = record['benchmarks']
    thresholds = record.get('sizeThresholds')
    return SectorProfile(
        key=_normalize_key(record['key']),
        code=str(record.get('code', '')),
        name=record['name'],
        category=record.get('category', 'General'),
        base_multiple=BaseMultiple(
            revenue=float(base['revenue']),
            ebitda=float(base['ebitda']),
        ),
        adjustment_factors=AdjustmentFactors(
            size=factors['size'],
            growth=factors['growth'],
            profitability=factors['profitability'],
        ),
        benchmarks=Benchmarks(
            avg_profit_margin=float(bench['avgProfitMargin']),
            avg_growth_rate=float(bench['avgGrowthRate']),
            avg_customer_retention=float(bench['avgCustomerRetention']),
        ),
        size_thresholds=tuple(thresholds) if thresholds else None,
    )
  except KeyError as e:
    raise ValueError(f'Sector record {key!r} is missing field {e}') from e


class SectorCatalog:
  '''
  Immutable lookup of sector key -> SectorProfile.

  Keys are matched case-insensitively after trimming whitespace.
  '''

  def __init__(self,
               profiles: Iterable[SectorProfile],
               default: SectorProfile = DEFAULT_SECTOR):
    '''
    Initialize catalog.

    Args:
      profiles: Sector profiles to register
      default: Profile returned for missing or unknown keys

    Raises:
      ValueError: If two profiles share a key
    '''
    self._profiles: Dict[str, SectorProfile] = {}
    for profile in profiles:
      key = _normalize_key(profile.key)
      if key in self._profiles:
        raise ValueError(f'Duplicate sector key: {key!r}')
      self._profiles[key] = profile
    self._default = default

  @classmethod
  def from_records(cls, records: Iterable[Mapping[str, Any]]) -> 'SectorCatalog':
    '''Create from table records (see sectors/table.py for the format).'''
    return cls(profile_from_record(r) for r in records)

  @classmethod
  def from_json(cls, path: Path) -> 'SectorCatalog':
    '''
    Load a catalog from a JSON file holding a list of sector records.

    Raises:
      FileNotFoundError: If the file does not exist
      ValueError: If the records are invalid
    '''
    if not path.exists():
      raise FileNotFoundError(f'Sector table not found: {path}')
    with path.open(encoding='utf-8') as f:
      records = json.load(f)
    if isinstance(records, dict):
      records = records.get('sectors', [])
    return cls.from_records(records)

  @classmethod
  def default(cls) -> 'SectorCatalog':
    '''Catalog built from the bundled static table.'''
    return cls.from_records(SECTOR_RECORDS)

  @property
  def default_profile(self) -> SectorProfile:
    return self._default

  def get(self, key: Optional[str]) -> Optional[SectorProfile]:
    '''Return the profile for key, or None when absent or unknown.'''
    if not key:
      return None
    return self._profiles.get(_normalize_key(key))

  def resolve(self, key: Optional[str]) -> SectorProfile:
    '''
    Resolve a sector key to its profile, falling back to the default.

    Args:
      key: Sector key (may be None or empty)

    Returns:
      Matching SectorProfile, or the default profile
    '''
    profile = self.get(key)
    if profile is None:
      logger.info('Sector %r not in catalog, using %s profile', key,
                  self._default.key)
      return self._default
    return profile

  def keys(self) -> List[str]:
    return list(self._profiles)

  def categories(self) -> List[str]:
    '''Unique categories in table order.'''
    seen: Dict[str, None] = {}
    for profile in self._profiles.values():
      seen.setdefault(profile.category, None)
    return list(seen)

  def by_category(self, category: str) -> List[SectorProfile]:
    return [p for p in self._profiles.values() if p.category == category]

  def to_frame(self) -> pd.DataFrame:
    '''
    Tabulate the catalog.

    Returns:
      DataFrame indexed by sector key with display fields, base multiples
      and benchmarks
    '''
    rows = []
    for key, p in self._profiles.items():
      rows.append({
          'key': key,
          'code': p.code,
          'name': p.name,
          'category': p.category,
          'revenue_multiple': p.base_multiple.revenue,
          'ebitda_multiple': p.base_multiple.ebitda,
          'avg_profit_margin': p.benchmarks.avg_profit_margin,
          'avg_growth_rate': p.benchmarks.avg_growth_rate,
          'avg_customer_retention': p.benchmarks.avg_customer_retention,
      })
    df = pd.DataFrame(rows)
    if df.empty:
      return df
    return df.set_index('key')

  def __contains__(self, key: object) -> bool:
    return isinstance(key, str) and _normalize_key(key) in self._profiles

  def __len__(self) -> int:
    return len(self._profiles)

  def __iter__(self) -> Iterator[SectorProfile]:
    return iter(self._profiles.values())
