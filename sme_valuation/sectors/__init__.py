"""Sector benchmark catalog."""

from sme_valuation.sectors.catalog import DEFAULT_SECTOR
from sme_valuation.sectors.catalog import profile_from_record
from sme_valuation.sectors.catalog import SectorCatalog

__all__ = [
    'DEFAULT_SECTOR',
    'SectorCatalog',
    'profile_from_record',
]
