'''
Batch valuation for many businesses.

This module provides tools to:
1. Value a portfolio of businesses in one run
2. Compare valuations across businesses and sectors
3. Export results to CSV for further analysis

Usage (CLI):
  python -m sme_valuation.analysis.batch_valuation \
    --input listings.csv \
    --as-of-year 2025 \
    --scenario conservative \
    --output results/listings_valuation.csv \
    -v

Usage (Python API):
  from sme_valuation.analysis.batch_valuation import batch_valuation
  from sme_valuation.config import EngineConfig

  df = batch_valuation(
    records=[{'id': 'a', 'sector': 'technology', 'annualRevenue': 1e6}],
    config=EngineConfig.default(),
  )
  df.to_csv('results.csv', index=False)
'''

import argparse
import datetime
import logging
import traceback
from pathlib import Path
from typing import Any, Dict, Iterable, Mapping, Optional

import pandas as pd

from sme_valuation.config import EngineConfig
from sme_valuation.config import PRESETS
from sme_valuation.domain.types import BusinessInputs
from sme_valuation.domain.types import ValuationReport
from sme_valuation.domain.validation import ensure_valid
from sme_valuation.run import calculate
from sme_valuation.sectors.catalog import SectorCatalog

logger = logging.getLogger(__name__)


def _report_to_dict(
    business_id: Any,
    scenario_name: str,
    report: ValuationReport,
) -> dict:
  '''Convert ValuationReport to flat dictionary for DataFrame row.'''
  rng = report.valuation_range
  row = {
      'id': business_id,
      'scenario': scenario_name,
      'sector': report.sector_key,
      'used_default_sector': report.used_default_sector,
      'minimum': rng.minimum,
      'typical': rng.typical,
      'maximum': rng.maximum,
      'confidence': rng.confidence,
      'primary_method': report.primary_method,
      'methods_used': len(report.method_breakdown),
      'methods_skipped': ','.join(s.method for s in report.skipped_methods),
      'strengths': len(report.strength_factors),
      'weaknesses': len(report.weakness_factors),
  }

  if report.buckets:
    row.update({f'{k}_bucket': v for k, v in report.buckets.as_dict().items()})

  for result in report.method_breakdown:
    row[f'{result.method}_estimate'] = result.estimate
    row[f'{result.method}_reliability'] = result.reliability

  return row


def batch_valuation(
    records: Iterable[Mapping[str, Any]],
    config: EngineConfig,
    catalog: Optional[SectorCatalog] = None,
    as_of_year: Optional[int] = None,
    verbose: bool = False,
) -> pd.DataFrame:
  '''
  Value many businesses with the same configuration.

  Args:
    records: Business records (camelCase or snake_case keys); an 'id' key
      is carried into the output, otherwise the row position is used
    config: EngineConfig shared by every valuation
    catalog: Sector catalog (default: bundled table)
    as_of_year: Reference year for records that carry none
    verbose: Enable verbose logging

  Returns:
    DataFrame with columns:
    - id: Business identifier
    - scenario: Configuration name
    - sector: Resolved sector key
    - minimum / typical / maximum: Valuation range
    - confidence: Confidence score (0-100)
    - primary_method: Method with the largest blend weight
    - size_bucket / growth_bucket / profitability_bucket
    - <method>_estimate / <method>_reliability per method that ran

  Raises:
    ValueError: If no record could be valued
  '''
  rows = []
  records = list(records)

  for i, record in enumerate(records, 1):
    business_id = record.get('id', i)
    if verbose:
      logger.info('[%d/%d] Processing %s...', i, len(records), business_id)

    try:
      values: Dict[str, Any] = dict(record)
      if as_of_year is not None and BusinessInputs.from_dict(
          values).as_of_year is None:
        values['as_of_year'] = as_of_year
      inputs = ensure_valid(BusinessInputs.from_dict(values))
      report = calculate(inputs, config=config, catalog=catalog)
      rows.append(_report_to_dict(business_id, config.name, report))

      if verbose:
        rng = report.valuation_range
        logger.info('  Typical: %s, Confidence: %.1f',
                    f'{rng.typical:,.0f}', rng.confidence)

    except ValueError as e:
      logger.warning('Failed to value %s: %s', business_id, str(e))
      if verbose:
        logger.debug('%s', traceback.format_exc())

  if not rows:
    raise ValueError(f'No successful valuations for {len(records)} records')

  return pd.DataFrame(rows)


def load_records(file_path: Path) -> list:
  '''
  Load business records from a CSV file.

  Empty cells become absent fields; a keyAssets / key_assets cell may hold a
  comma- or semicolon-separated list.
  '''
  if not file_path.exists():
    raise FileNotFoundError(f'Input file not found: {file_path}')
  df = pd.read_csv(file_path)
  df = df.astype(object).where(df.notna(), None)
  return df.to_dict(orient='records')


def _print_summary(df: pd.DataFrame) -> None:
  '''Print summary statistics for batch valuation results.'''
  logger.info('')
  logger.info('=' * 70)
  logger.info('Summary Statistics')
  logger.info('=' * 70)
  logger.info('Total businesses: %d', len(df))
  logger.info('Default sector used: %d', int(df['used_default_sector'].sum()))
  logger.info('')

  logger.info('Typical Value:')
  logger.info('  Mean:   %s', f'{df["typical"].mean():,.0f}')
  logger.info('  Median: %s', f'{df["typical"].median():,.0f}')
  logger.info('  Min:    %s (%s)', f'{df["typical"].min():,.0f}',
              df.loc[df['typical'].idxmin(), 'id'])
  logger.info('  Max:    %s (%s)', f'{df["typical"].max():,.0f}',
              df.loc[df['typical'].idxmax(), 'id'])
  logger.info('')

  logger.info('Confidence:')
  logger.info('  Mean:   %.1f', df['confidence'].mean())
  logger.info('  Median: %.1f', df['confidence'].median())
  logger.info('')

  by_sector = df.groupby('sector')['typical'].agg(['count', 'median'])
  logger.info('By sector:')
  for sector, row in by_sector.iterrows():
    logger.info('  %s: %d businesses, median %s', sector, int(row['count']),
                f'{row["median"]:,.0f}')

  logger.info('=' * 70)


def main() -> None:
  '''CLI entrypoint for batch valuation.'''
  parser = argparse.ArgumentParser(
      description='Batch valuation for many businesses',
      formatter_class=argparse.RawDescriptionHelpFormatter,
      epilog=__doc__,
  )

  parser.add_argument('--input',
                      type=Path,
                      required=True,
                      help='CSV file with one business per row')

  parser.add_argument('--as-of-year',
                      type=int,
                      default=datetime.date.today().year,
                      help='Reference year for rows without one')

  parser.add_argument('--scenario',
                      type=str,
                      default='default',
                      help='Configuration preset (default: default)')

  parser.add_argument('--sector-table',
                      type=Path,
                      help='Sector table JSON (default: bundled table)')

  parser.add_argument('--output',
                      type=Path,
                      required=True,
                      help='Output CSV file path')

  parser.add_argument('-v',
                      '--verbose',
                      action='store_true',
                      help='Verbose output')

  args = parser.parse_args()

  logging.basicConfig(
      level=logging.DEBUG if args.verbose else logging.INFO,
      format='%(asctime)s [%(levelname)s] %(message)s',
      datefmt='%Y-%m-%d %H:%M:%S',
  )

  if args.scenario not in PRESETS:
    available = ', '.join(PRESETS.keys())
    raise ValueError(
        f'Unknown scenario: {args.scenario}. Available: {available}')

  config = PRESETS[args.scenario]()
  logger.info('Using scenario: %s', config.name)

  catalog = (SectorCatalog.from_json(args.sector_table)
             if args.sector_table else None)

  records = load_records(args.input)
  logger.info('Loaded %d records from %s', len(records), args.input)
  logger.info('')

  results = batch_valuation(
      records=records,
      config=config,
      catalog=catalog,
      as_of_year=args.as_of_year,
      verbose=args.verbose,
  )

  args.output.parent.mkdir(parents=True, exist_ok=True)
  results.to_csv(args.output, index=False)

  logger.info('')
  logger.info('Saved %d results to %s', len(results), args.output)

  _print_summary(results)


if __name__ == '__main__':
  main()
