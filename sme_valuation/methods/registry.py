"""
Method registry for mapping string names to method factories.

This lets EngineConfig name its methods as plain strings (JSON friendly)
while still instantiating the correct classes.

To add a new method:
1. Implement a ValuationMethod subclass in this package
2. Add a factory here taking the EngineConfig
3. Register it in METHOD_REGISTRY

Example:
  # In methods/dcf.py
  class DiscountedCashFlow(ValuationMethod):
    name = 'dcf'
    def compute(self, inputs, profile, buckets):
      ...

  # In methods/registry.py
  METHOD_REGISTRY['dcf'] = lambda config, **kw: DiscountedCashFlow(**kw)
"""

from collections.abc import Callable
from typing import Any, Mapping, Optional

from sme_valuation.config import EngineConfig
from sme_valuation.methods.assets import AssetBased
from sme_valuation.methods.base import ValuationMethod
from sme_valuation.methods.earnings import EarningsMultiple
from sme_valuation.methods.revenue import RevenueMultiple

MethodFactory = Callable[..., ValuationMethod]

METHOD_REGISTRY: dict[str, MethodFactory] = {
    'revenue_multiple':
        lambda config, **kw: RevenueMultiple(
            missing_data_penalty=config.missing_data_penalty,
            quality=config.quality_adjustments,
            **kw),
    'earnings_multiple':
        lambda config, **kw: EarningsMultiple(
            missing_data_penalty=config.missing_data_penalty,
            quality=config.quality_adjustments,
            **kw),
    'asset_based':
        lambda config, **kw: AssetBased(
            missing_data_penalty=config.missing_data_penalty, **kw),
}


def create_methods(
    config: EngineConfig,
    base_weights: Optional[Mapping[str, float]] = None,
) -> list[ValuationMethod]:
  """
  Create method instances from configuration.

  Per-method keyword arguments can be supplied through
  config.policy_params, keyed by method name. An explicit base_weight there
  takes precedence over base_weights.

  Args:
    config: EngineConfig with method names
    base_weights: Optional base weight per method name (see
      methods/weights.py)

  Returns:
    Method instances in configuration order

  Raises:
    KeyError: If a method name is not found in the registry
  """
  methods = []
  for name in config.methods:
    try:
      factory = METHOD_REGISTRY[name]
    except KeyError as e:
      raise KeyError(f"Unknown valuation method: '{name}'. "
                     f'Available: {list(METHOD_REGISTRY.keys())}') from e
    params: dict[str, Any] = dict(config.policy_params.get(name, {}))
    if base_weights is not None and name in base_weights:
      params.setdefault('base_weight', base_weights[name])
    methods.append(factory(config, **params))
  return methods


def list_methods() -> list[str]:
  """List all registered method names."""
  return list(METHOD_REGISTRY.keys())
