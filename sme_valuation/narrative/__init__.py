"""Rule-based narrative: strengths, weaknesses, opportunities, advice."""

from sme_valuation.narrative.generator import derive_signals
from sme_valuation.narrative.generator import Narrative
from sme_valuation.narrative.generator import NarrativeGenerator

__all__ = [
    'Narrative',
    'NarrativeGenerator',
    'derive_signals',
]
