"""
Sensitivity analysis for SME valuation.

This module provides tools to generate 2D sensitivity tables that show
how the typical sale value varies across annual revenue and growth rate.

CLI Usage:
  python -m sme_valuation.analysis.sensitivity \\
      --input business.json \\
      --revenues 500000,1000000,2000000 \\
      --growth-rates 0,10,20,30
"""

import argparse
import dataclasses
import datetime
import logging
from pathlib import Path
from typing import Optional

import pandas as pd

from sme_valuation.config import EngineConfig
from sme_valuation.config import PRESETS
from sme_valuation.domain.types import BusinessInputs
from sme_valuation.run import calculate
from sme_valuation.run import load_inputs
from sme_valuation.sectors.catalog import SectorCatalog

logger = logging.getLogger(__name__)


class SensitivityTableBuilder:
  """
  Build 2D sensitivity tables for the typical sale value.

  Varies annual revenue and growth rate while keeping every other input
  fixed. The profit margin is held constant, so profit scales with revenue.
  """

  def __init__(
      self,
      inputs: BusinessInputs,
      config: Optional[EngineConfig] = None,
      catalog: Optional[SectorCatalog] = None,
  ):
    """
    Initialize sensitivity table builder.

    Args:
        inputs: Base business inputs
        config: Engine configuration (default: EngineConfig.default())
        catalog: Sector catalog (default: bundled table)
    """
    self.config = config or EngineConfig.default()
    self.catalog = catalog
    self.margin = inputs.effective_margin
    self.base_inputs = dataclasses.replace(inputs,
                                           profit_value=None,
                                           profit_margin=self.margin)

    logger.info('Initialized SensitivityTableBuilder')
    logger.info('  Sector: %s', inputs.sector)
    if self.margin is not None:
      logger.info('  Profit margin: %.1f%%', self.margin)

  def value(self, revenue: float, growth_rate: float) -> float:
    """Typical value for the base inputs at one grid point."""
    inputs = dataclasses.replace(self.base_inputs,
                                 annual_revenue=revenue,
                                 growth_rate=growth_rate)
    report = calculate(inputs, config=self.config, catalog=self.catalog)
    return report.valuation_range.typical

  def build(
      self,
      revenues: list[float],
      growth_rates: list[float],
  ) -> pd.DataFrame:
    """
    Build 2D sensitivity table.

    Args:
        revenues: Annual revenues (e.g., [500_000, 1_000_000])
        growth_rates: Growth rates in percent (e.g., [0, 10, 20])

    Returns:
        DataFrame with revenues as index, growth rates as columns,
        and typical values as cell values
    """
    if not revenues:
      raise ValueError('revenues cannot be empty')
    if not growth_rates:
      raise ValueError('growth_rates cannot be empty')

    logger.info('Building sensitivity table: %d x %d', len(revenues),
                len(growth_rates))

    data_rows = []
    for revenue in revenues:
      data_rows.append([self.value(revenue, g) for g in growth_rates])

    r_labels = [f'{r:,.0f}' for r in revenues]
    g_labels = [f'{g:.1f}%' for g in growth_rates]

    df = pd.DataFrame(data_rows, index=r_labels, columns=g_labels)
    df.index.name = 'Annual Revenue'
    df.columns.name = 'Growth Rate'

    logger.info('Sensitivity table built successfully')
    return df


def _parse_float_list(s: str) -> list[float]:
  """Parse comma-separated float list."""
  return [float(x.strip()) for x in s.split(',')]


def main() -> None:
  """CLI entrypoint for sensitivity analysis."""
  parser = argparse.ArgumentParser(
      description='SME Valuation Sensitivity Analysis',
      formatter_class=argparse.RawDescriptionHelpFormatter,
      epilog="""
Examples:
  python -m sme_valuation.analysis.sensitivity \\
      --input business.json \\
      --revenues 500000,1000000,2000000,5000000 \\
      --growth-rates -5,0,10,20,30

  python -m sme_valuation.analysis.sensitivity \\
      --input business.json --scenario conservative \\
      --revenues 1000000,2000000 --growth-rates 10,20
      """)

  parser.add_argument('--input',
                      type=Path,
                      required=True,
                      help='Business record (JSON)')

  parser.add_argument('--scenario',
                      type=str,
                      default='default',
                      help='Configuration preset')

  parser.add_argument('--as-of-year',
                      type=int,
                      default=datetime.date.today().year,
                      help='Reference year for operating history')

  parser.add_argument('--revenues',
                      type=str,
                      default='500000,1000000,2500000,5000000',
                      help='Comma-separated annual revenues')

  parser.add_argument('--growth-rates',
                      type=str,
                      default='0,10,20,30',
                      help='Comma-separated growth rates in percent')

  parser.add_argument('--output', type=Path, help='Output CSV path (optional)')

  parser.add_argument('--verbose',
                      '-v',
                      action='store_true',
                      help='Verbose output')

  args = parser.parse_args()

  logging.basicConfig(
      level=logging.DEBUG if args.verbose else logging.INFO,
      format='%(asctime)s [%(levelname)s] %(message)s',
      datefmt='%Y-%m-%d %H:%M:%S',
  )

  if args.scenario not in PRESETS:
    raise ValueError(f'Unknown scenario: {args.scenario}. '
                     f'Available: {", ".join(PRESETS.keys())}')
  config = PRESETS[args.scenario]()

  inputs = load_inputs(args.input, as_of_year=args.as_of_year)
  revenues = _parse_float_list(args.revenues)
  growth_rates = _parse_float_list(args.growth_rates)

  builder = SensitivityTableBuilder(inputs, config)
  table = builder.build(revenues=revenues, growth_rates=growth_rates)

  print('\n' + '=' * 80)
  print(f'Sensitivity Analysis: {inputs.sector} ({config.name})')
  print('=' * 80)
  print('Typical Sale Value')
  print('=' * 80)
  print(table.to_string(float_format=lambda x: f'{x:,.0f}'))
  print('=' * 80 + '\n')

  if args.output:
    table.to_csv(args.output)
    logger.info('Saved to: %s', args.output)


if __name__ == '__main__':
  main()
