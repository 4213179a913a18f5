"""Domain types for the SME valuation engine."""

from sme_valuation.domain.errors import InsufficientDataError
from sme_valuation.domain.types import AdjustmentFactor
from sme_valuation.domain.types import AdjustmentFactors
from sme_valuation.domain.types import BaseMultiple
from sme_valuation.domain.types import Benchmarks
from sme_valuation.domain.types import BusinessInputs
from sme_valuation.domain.types import FactorBuckets
from sme_valuation.domain.types import NarrativeFactor
from sme_valuation.domain.types import SectorProfile
from sme_valuation.domain.types import SkippedMethod
from sme_valuation.domain.types import ValuationMethodResult
from sme_valuation.domain.types import ValuationRange
from sme_valuation.domain.types import ValuationReport

__all__ = [
    'AdjustmentFactor',
    'AdjustmentFactors',
    'BaseMultiple',
    'Benchmarks',
    'BusinessInputs',
    'FactorBuckets',
    'InsufficientDataError',
    'NarrativeFactor',
    'SectorProfile',
    'SkippedMethod',
    'ValuationMethodResult',
    'ValuationRange',
    'ValuationReport',
]
