"""
Taxon keys in the NFI standard.

A taxon key is a dotted identifier ``GENUS.SPECIES[.VARIETY]``, for example
``"PINU.CON"`` (lodgepole pine) or ``"PINU.CON.LAT"`` (var. latifolia).
Parameter tables are keyed on the three components separately.
"""
from dataclasses import dataclass
from typing import Optional

from .exceptions import TaxonFormatError

__all__ = ['TaxonKey', 'parse_taxon_key']


@dataclass(frozen=True)
class TaxonKey:
    """Genus, species and optional variety of a tree taxon."""
    genus: str
    species: str
    variety: Optional[str] = None

    @classmethod
    def from_string(cls, key: str) -> "TaxonKey":
        """Create a TaxonKey from a dotted identifier."""
        return parse_taxon_key(key)

    @property
    def has_variety(self) -> bool:
        return self.variety is not None

    def __str__(self) -> str:
        if self.variety is None:
            return f"{self.genus}.{self.species}"
        return f"{self.genus}.{self.species}.{self.variety}"


def parse_taxon_key(key: str) -> TaxonKey:
    """Split a dotted taxon identifier into its components.

    Segments past the third are ignored. An empty variety segment
    (``"PINU.CON."``) is treated as no variety.

    Args:
        key: Identifier such as ``"POPU.TRE"`` or ``"PINU.CON.LAT"``

    Returns:
        Parsed TaxonKey

    Raises:
        TaxonFormatError: If genus or species is missing or empty
    """
    parts = key.split(".")
    if len(parts) < 2 or not parts[0] or not parts[1]:
        raise TaxonFormatError(key)

    variety = parts[2] if len(parts) > 2 and parts[2] else None
    return TaxonKey(genus=parts[0], species=parts[1], variety=variety)
