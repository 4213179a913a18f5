'''Aggregation engine with pure math functions.'''

from sme_valuation.engine.aggregate import (
    aggregate,
    compute_confidence,
    compute_spread,
    dispersion,
    primary_method,
    weighted_typical,
)

__all__ = [
    'aggregate',
    'compute_confidence',
    'compute_spread',
    'dispersion',
    'primary_method',
    'weighted_typical',
]
