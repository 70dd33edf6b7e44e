"""
Parameter selection for the volume-to-biomass model.

The resolver picks one row from each parameter table for a taxon,
jurisdiction and ecozone. Every table except the sapling table (t5) must
yield exactly one row. The sapling table is optional: when it does not
yield exactly one row the bundle carries ``None`` and the sapling
adjustment is skipped.

The sapling table is also matched without the variety constraint, so a
variety query can pick up the species-level sapling factor.
"""
from dataclasses import dataclass
from typing import Any, Optional

from .exceptions import ParameterSelectionError, describe_key
from .logging_config import get_logger, log_missing_sapling_model
from .parameter_tables import ParameterDataset, ParameterRow, TableId
from .taxon import TaxonKey

__all__ = ['ParameterBundle', 'ParameterResolver', 'REQUIRED_TABLES']

logger = get_logger(__name__)

REQUIRED_TABLES = (
    TableId.T3,
    TableId.T4,
    TableId.T6_VOL,
    TableId.T6_BIO,
    TableId.T7_VOL,
    TableId.T7_BIO,
)


@dataclass(frozen=True)
class ParameterBundle:
    """Rows selected for one taxon/jurisdiction/ecozone query.

    ``b5`` is None when no sapling model is available.
    """
    taxon: TaxonKey
    jurisdiction: str
    ecozone: Any
    b3: ParameterRow
    b4: ParameterRow
    b5: Optional[ParameterRow]
    b6_vol: ParameterRow
    b6_bio: ParameterRow
    b7_vol: ParameterRow
    b7_bio: ParameterRow

    @property
    def has_sapling_model(self) -> bool:
        return self.b5 is not None

    def describe(self) -> str:
        return describe_key(self.jurisdiction, self.taxon.genus, self.taxon.species,
                            self.taxon.variety, self.ecozone)


class ParameterResolver:
    """Selects parameter rows from a dataset.

    Args:
        dataset: The parameter tables to select from. Shared, never modified.
    """

    def __init__(self, dataset: ParameterDataset):
        self.dataset = dataset

    def _select_one(self, table_id: TableId, taxon: TaxonKey, jurisdiction: str,
                    ecozone: Any) -> ParameterRow:
        table = self.dataset.table(table_id)
        matches = table.lookup(taxon, jurisdiction, ecozone)
        if len(matches) != 1:
            raise ParameterSelectionError(
                table_id.value,
                table.lookup_key(taxon, jurisdiction, ecozone),
                len(matches),
            )
        return matches[0]

    def _select_sapling(self, taxon: TaxonKey, jurisdiction: str,
                        ecozone: Any) -> Optional[ParameterRow]:
        matches = self.dataset.table(TableId.T5).lookup(taxon, jurisdiction, ecozone)
        if len(matches) != 1:
            log_missing_sapling_model(
                logger,
                f"{describe_key(jurisdiction, taxon.genus, taxon.species, taxon.variety, ecozone)}"
                f", {len(matches)} rows in t5",
            )
            return None
        return matches[0]

    def resolve(self, taxon: TaxonKey, jurisdiction: str, ecozone: Any) -> ParameterBundle:
        """Select the parameter rows for a query.

        Args:
            taxon: Genus, species and optional variety
            jurisdiction: Two-letter jurisdiction code, e.g. "BC"
            ecozone: Ecozone number (1-15)

        Returns:
            ParameterBundle with one row per table (t5 possibly None)

        Raises:
            ParameterSelectionError: If a required table yields zero or
                several rows
        """
        rows = {
            table_id: self._select_one(table_id, taxon, jurisdiction, ecozone)
            for table_id in REQUIRED_TABLES
        }
        b5 = self._select_sapling(taxon, jurisdiction, ecozone)

        logger.debug("Resolved parameters for %s (sapling model: %s)",
                     describe_key(jurisdiction, taxon.genus, taxon.species,
                                  taxon.variety, ecozone),
                     b5 is not None)

        return ParameterBundle(
            taxon=taxon,
            jurisdiction=jurisdiction,
            ecozone=ecozone,
            b3=rows[TableId.T3],
            b4=rows[TableId.T4],
            b5=b5,
            b6_vol=rows[TableId.T6_VOL],
            b6_bio=rows[TableId.T6_BIO],
            b7_vol=rows[TableId.T7_VOL],
            b7_bio=rows[TableId.T7_BIO],
        )
