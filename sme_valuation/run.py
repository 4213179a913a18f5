'''
Single-business valuation entrypoint.

This module provides the main entry point for running valuations. It:
1. Resolves the sector profile (falling back to the default profile)
2. Classifies the business into size, growth and profitability buckets
3. Runs every configured valuation method
4. Blends the method estimates into a range with a confidence score
5. Generates the rule-based narrative

Usage:
  from sme_valuation.domain.types import BusinessInputs
  from sme_valuation.run import calculate

  report = calculate(BusinessInputs(
      sector='technology',
      annual_revenue=1_000_000,
      profit_value=200_000,
  ))
  print(f"Typical: {report.valuation_range.typical:,.0f}")
'''

import argparse
import datetime
import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

from sme_valuation.classify import FactorClassifier
from sme_valuation.config import EngineConfig
from sme_valuation.config import PRESETS
from sme_valuation.domain.errors import InsufficientDataError
from sme_valuation.domain.types import BusinessInputs
from sme_valuation.domain.types import SkippedMethod
from sme_valuation.domain.types import ValuationMethodResult
from sme_valuation.domain.types import ValuationReport
from sme_valuation.domain.validation import ensure_valid
from sme_valuation.engine.aggregate import aggregate
from sme_valuation.engine.aggregate import primary_method
from sme_valuation.methods.registry import create_methods
from sme_valuation.methods.weights import method_weights
from sme_valuation.narrative.generator import NarrativeGenerator
from sme_valuation.sectors.catalog import SectorCatalog

logger = logging.getLogger(__name__)

DIMENSIONS = 3

_DEFAULT_CATALOG = SectorCatalog.default()


def calculate(
    inputs: BusinessInputs,
    config: Optional[EngineConfig] = None,
    catalog: Optional[SectorCatalog] = None,
) -> ValuationReport:
  '''
  Value a single business.

  Args:
    inputs: Business inputs (shape already validated by the caller)
    config: EngineConfig (default: EngineConfig.default())
    catalog: Sector catalog (default: the bundled sector table)

  Returns:
    ValuationReport with range, method breakdown and narrative

  Raises:
    InsufficientDataError: If no method could produce an estimate
    KeyError: If the config names an unknown method
  '''
  if config is None:
    config = EngineConfig.default()
  if catalog is None:
    catalog = _DEFAULT_CATALOG

  profile = catalog.resolve(inputs.sector)

  classifier = FactorClassifier(
      size_thresholds=config.size_thresholds,
      growth_tolerance=config.growth_tolerance,
      margin_tolerance=config.margin_tolerance,
  )
  buckets = classifier.classify(inputs, profile)

  results: List[ValuationMethodResult] = []
  skipped: List[SkippedMethod] = []
  base_weights = None
  if config.method_weighting:
    base_weights = method_weights(inputs, profile)
  for method in create_methods(config, base_weights):
    outcome = method.compute(inputs, profile, buckets)
    if isinstance(outcome, SkippedMethod):
      logger.debug('%s skipped: %s', outcome.method, outcome.reason)
      skipped.append(outcome)
    else:
      logger.debug('%s: estimate=%.2f multiplier=%.4f reliability=%.3f',
                   outcome.method, outcome.estimate, outcome.multiplier,
                   outcome.reliability)
      results.append(outcome)

  if not results:
    reasons = ', '.join(f'{s.method}={s.reason}' for s in skipped)
    raise InsufficientDataError(
        'Cannot value business: no method produced an estimate '
        f'({reasons}). Provide annual revenue or a positive profit figure.',
        skipped=skipped,
    )

  valuation_range = aggregate(
      results,
      real_bucket_fraction=(DIMENSIONS - buckets.penalty_count) / DIMENSIONS,
      optional_fraction=inputs.optional_completeness(),
      used_default_sector=profile.is_default,
      base_spread=config.base_spread,
      cv_weight=config.dispersion_spread_weight,
      min_spread=config.min_spread,
      max_spread=config.max_spread,
      base=config.base_confidence,
      completeness_weight=config.completeness_weight,
      method_weight=config.method_agreement_weight,
      optional_weight=config.optional_fields_weight,
      dispersion_weight=config.dispersion_penalty_weight,
      default_sector_penalty=config.default_sector_penalty,
  )
  logger.debug('Range: min=%.2f typical=%.2f max=%.2f confidence=%.1f',
               valuation_range.minimum, valuation_range.typical,
               valuation_range.maximum, valuation_range.confidence)

  narrative = NarrativeGenerator(margin=config.narrative_margin).generate(
      inputs, profile, buckets)

  return ValuationReport(
      valuation_range=valuation_range,
      method_breakdown=tuple(results),
      skipped_methods=tuple(skipped),
      strength_factors=narrative.strengths,
      weakness_factors=narrative.weaknesses,
      opportunities=narrative.opportunities,
      recommendations=narrative.recommendations,
      sector_key=profile.key,
      sector_name=profile.name,
      used_default_sector=profile.is_default,
      buckets=buckets,
      primary_method=primary_method(results),
  )


def load_inputs(path: Path, as_of_year: Optional[int] = None) -> BusinessInputs:
  '''
  Load and validate a business record from a JSON file.

  Args:
    path: JSON file holding one business record (camelCase or snake_case)
    as_of_year: Reference year used when the record has none

  Returns:
    Validated BusinessInputs

  Raises:
    FileNotFoundError: If the file does not exist
    ValueError: If the record fails validation
  '''
  if not path.exists():
    raise FileNotFoundError(f'Input record not found: {path}')
  with path.open(encoding='utf-8') as f:
    record: Dict[str, Any] = json.load(f)

  if as_of_year is not None and record.get('as_of_year') is None and \
      record.get('asOfYear') is None:
    record['as_of_year'] = as_of_year

  inputs = BusinessInputs.from_dict(record)
  ensure_valid(inputs)
  return inputs


def load_config(scenario: str, config_path: Optional[Path]) -> EngineConfig:
  '''Build the EngineConfig from a JSON file or a named preset.'''
  if config_path is not None:
    return EngineConfig.from_json(config_path.read_text(encoding='utf-8'))
  if scenario not in PRESETS:
    available = ', '.join(PRESETS.keys())
    raise ValueError(f'Unknown scenario: {scenario}. Available: {available}')
  return PRESETS[scenario]()


def main() -> None:
  '''CLI entrypoint.'''
  parser = argparse.ArgumentParser(description='Estimate SME sale value')
  parser.add_argument('--input',
                      type=Path,
                      required=True,
                      help='Business record (JSON)')
  parser.add_argument(
      '--scenario',
      type=str,
      default='default',
      choices=list(PRESETS.keys()),
      help='Configuration preset',
  )
  parser.add_argument('--config',
                      type=Path,
                      help='EngineConfig JSON (overrides --scenario)')
  parser.add_argument('--sector-table',
                      type=Path,
                      help='Sector table JSON (default: bundled table)')
  parser.add_argument('--as-of-year',
                      type=int,
                      default=datetime.date.today().year,
                      help='Reference year for operating history')
  parser.add_argument('--output', type=Path, help='Report JSON output path')
  args = parser.parse_args()

  config = load_config(args.scenario, args.config)
  catalog = (SectorCatalog.from_json(args.sector_table)
             if args.sector_table else None)
  inputs = load_inputs(args.input, as_of_year=args.as_of_year)

  try:
    report = calculate(inputs, config=config, catalog=catalog)
  except InsufficientDataError as e:
    logger.error('Valuation failed: %s', e)
    raise SystemExit(1) from e

  rng = report.valuation_range
  separator = '=' * 70
  logger.info('\n%s', separator)
  logger.info('SME Valuation - %s', report.sector_name)
  logger.info('Scenario: %s', config.name)
  if report.used_default_sector:
    logger.info('Sector %r not recognised, general benchmarks used',
                inputs.sector)
  logger.info(separator)

  logger.info('\nBuckets:')
  for dimension, bucket in report.buckets.as_dict().items():
    flag = ' (defaulted)' if dimension in report.buckets.defaulted else ''
    logger.info('  %s: %s%s', dimension.capitalize(), bucket, flag)

  logger.info('\nMethods:')
  for result in report.method_breakdown:
    logger.info('  %s: %s (x%.2f, weight %.2f)', result.method,
                f'{result.estimate:,.0f}', result.multiplier,
                result.reliability)
  for skip in report.skipped_methods:
    logger.info('  %s: skipped (%s)', skip.method, skip.reason)

  logger.info('\nValuation Range:')
  logger.info('  Minimum: %s', f'{rng.minimum:,.0f}')
  logger.info('  Typical: %s', f'{rng.typical:,.0f}')
  logger.info('  Maximum: %s', f'{rng.maximum:,.0f}')
  logger.info('  Confidence: %.1f%%', rng.confidence)

  if report.strength_factors:
    logger.info('\nStrengths:')
    for factor in report.strength_factors:
      logger.info('  + %s: %s', factor.label, factor.detail)
  if report.weakness_factors:
    logger.info('\nWeaknesses:')
    for factor in report.weakness_factors:
      logger.info('  - %s: %s', factor.label, factor.detail)
  if report.recommendations:
    logger.info('\nRecommendations:')
    for message in report.recommendations:
      logger.info('  * %s', message)

  logger.info('%s\n', separator)

  if args.output:
    args.output.parent.mkdir(parents=True, exist_ok=True)
    args.output.write_text(report.to_json(), encoding='utf-8')
    logger.info('Saved report to %s', args.output)


if __name__ == '__main__':
  logging.basicConfig(
      level=logging.INFO,
      format='%(message)s',
  )
  main()
