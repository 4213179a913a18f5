'''
SME sale-value estimator with method/registry-based architecture.

This package values a small or medium enterprise from self-reported inputs.
Each valuation method (revenue multiple, earnings multiple, asset based) is
an independent class registered by name, so methods can be added, removed or
compared through configuration alone. Estimates are blended into a range with
a confidence score and a rule-based narrative.

Usage:
  from sme_valuation.config import EngineConfig
  from sme_valuation.domain.types import BusinessInputs
  from sme_valuation.run import calculate

  inputs = BusinessInputs(sector='technology', annual_revenue=1_000_000,
                          profit_value=200_000)
  report = calculate(inputs, config=EngineConfig.default())
'''
