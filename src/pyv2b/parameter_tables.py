"""
Parameter tables of the Boudewyn et al. (2007) volume-to-biomass model.

Seven tables, all keyed on jurisdiction, ecozone and taxon:

- t3: merchantable stem wood biomass, ``b_m = a * volume ** b``
- t4: nonmerchantable factor, ``k + a * b_m ** b`` capped at ``cap``
- t5: sapling factor, ``k + a * b_nm ** b`` capped at ``cap`` (optional)
- t6_vol / t6_bio: multinomial logit coefficients for the biomass
  proportions, driven by volume or by biomass
- t7_vol / t7_bio: bounds and caps on the proportions

Each table builds an exact-match index when it is constructed, so looking up
a key does not scan the rows. Tables and rows are read-only once built.
"""
from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, Iterable, Iterator, List, Mapping, Optional, Tuple

import pandas as pd

from .exceptions import ConfigurationError, InvalidDataError
from .logging_config import get_logger
from .taxon import TaxonKey

__all__ = [
    'TableId',
    'TableSpec',
    'TABLE_SPECS',
    'ParameterRow',
    'ParameterTable',
    'ParameterDataset',
]

logger = get_logger(__name__)

KEY_COLUMNS = ('juris_id', 'ecozone', 'genus', 'species', 'variety')

PROPORTION_COEFFICIENTS = ('a1', 'a2', 'a3', 'b1', 'b2', 'b3', 'c1', 'c2', 'c3')


class TableId(str, Enum):
    """Identifiers of the seven parameter tables."""

    T3 = "t3"
    T4 = "t4"
    T5 = "t5"
    T6_VOL = "t6_vol"
    T6_BIO = "t6_bio"
    T7_VOL = "t7_vol"
    T7_BIO = "t7_bio"

    @classmethod
    def from_string(cls, value: str) -> "TableId":
        try:
            return cls(value.lower())
        except ValueError:
            valid = [t.value for t in cls]
            raise ConfigurationError(
                f"Unknown parameter table '{value}'. Valid tables: {valid}"
            ) from None


@dataclass(frozen=True)
class TableSpec:
    """Column layout and selection rule of a parameter table."""
    coefficients: Tuple[str, ...]
    match_variety: bool = True
    description: str = ""


TABLE_SPECS: Dict[TableId, TableSpec] = {
    TableId.T3: TableSpec(('a', 'b'), description="merchantable stem wood"),
    TableId.T4: TableSpec(('a', 'b', 'k', 'cap'), description="nonmerchantable factor"),
    # Sapling factors are selected without the variety constraint
    TableId.T5: TableSpec(('a', 'b', 'k', 'cap'), match_variety=False,
                          description="sapling factor"),
    TableId.T6_VOL: TableSpec(PROPORTION_COEFFICIENTS,
                              description="volume-based proportions"),
    TableId.T6_BIO: TableSpec(PROPORTION_COEFFICIENTS,
                              description="biomass-based proportions"),
    TableId.T7_VOL: TableSpec((), description="volume-based proportion caps"),
    TableId.T7_BIO: TableSpec((), description="biomass-based proportion caps"),
}


def _clean(value: Any) -> Any:
    """Normalise a raw table cell: strip strings, map blanks and NA to None."""
    if value is None:
        return None
    if isinstance(value, str):
        value = value.strip()
        return value or None
    if pd.isna(value):
        return None
    return value


def _clean_ecozone(value: Any) -> Any:
    value = _clean(value)
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return value


class ParameterRow(Mapping):
    """One read-only row of a parameter table.

    Columns are reachable by item access (``row['a']``) and attribute
    access (``row.a``).
    """

    def __init__(self, table: str, values: Mapping[str, Any]):
        self._table = table
        self._values = MappingProxyType(dict(values))

    @property
    def table(self) -> str:
        return self._table

    def __getitem__(self, key: str) -> Any:
        return self._values[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __getattr__(self, name: str) -> Any:
        if name.startswith('_'):
            raise AttributeError(name)
        try:
            return self._values[name]
        except KeyError:
            raise AttributeError(
                f"Row of table '{self._table}' has no column '{name}'"
            ) from None

    def __repr__(self) -> str:
        return f"ParameterRow(table='{self._table}', {dict(self._values)!r})"


class ParameterTable:
    """An immutable, indexed parameter table.

    Attributes:
        table_id: Which of the seven tables this is
        layout: Column layout and selection rule
        rows: All rows in file order
        has_species: Whether rows carry a species column. A sapling table
            without one is matched at genus level.
    """

    def __init__(self, table_id: TableId, rows: Iterable[Mapping[str, Any]],
                 has_species: bool = True):
        self.table_id = TableId(table_id)
        self.layout = TABLE_SPECS[self.table_id]
        self.has_species = has_species

        cleaned = []
        for raw in rows:
            values = dict(raw)
            for column in KEY_COLUMNS:
                if column == 'ecozone':
                    values[column] = _clean_ecozone(values.get(column))
                else:
                    values[column] = _clean(values.get(column))
            cleaned.append(ParameterRow(self.table_id.value, values))
        self.rows: Tuple[ParameterRow, ...] = tuple(cleaned)

        index: Dict[Tuple, List[ParameterRow]] = {}
        for row in self.rows:
            key = self._key(row['juris_id'], row['genus'], row['species'],
                            row['variety'], row['ecozone'])
            index.setdefault(key, []).append(row)
        self._index: Dict[Tuple, Tuple[ParameterRow, ...]] = {
            key: tuple(matches) for key, matches in index.items()
        }
        logger.debug("Indexed table %s: %d rows, %d keys",
                     self.table_id.value, len(self.rows), len(self._index))

    @classmethod
    def from_frame(cls, table_id: TableId, frame: pd.DataFrame) -> "ParameterTable":
        """Build a table from a DataFrame, checking required columns.

        ``variety`` may be absent (all rows variety-null). ``species`` may
        be absent only from the sapling table.

        Raises:
            InvalidDataError: If a required column is missing
        """
        table_id = TableId(table_id)
        layout = TABLE_SPECS[table_id]
        columns = set(frame.columns)

        has_species = 'species' in columns
        required = ['juris_id', 'ecozone', 'genus']
        if layout.match_variety:
            required.append('species')
        required.extend(layout.coefficients)

        missing = [c for c in required if c not in columns]
        if missing:
            raise InvalidDataError(f"parameter table '{table_id.value}'",
                                   f"missing columns {missing}")

        return cls(table_id, frame.to_dict(orient='records'), has_species=has_species)

    def _key(self, jurisdiction: Any, genus: Any, species: Any,
             variety: Any, ecozone: Any) -> Tuple:
        if self.layout.match_variety:
            return (jurisdiction, genus, species, variety, ecozone)
        if self.has_species:
            return (jurisdiction, genus, species, ecozone)
        return (jurisdiction, genus, ecozone)

    def lookup_key(self, taxon: TaxonKey, jurisdiction: str, ecozone: Any) -> Tuple:
        """The index key this table uses for a query."""
        return self._key(jurisdiction, taxon.genus, taxon.species,
                         taxon.variety, ecozone)

    def lookup(self, taxon: TaxonKey, jurisdiction: str,
               ecozone: Any) -> Tuple[ParameterRow, ...]:
        """Return every row matching the query (possibly none)."""
        try:
            return self._index.get(self.lookup_key(taxon, jurisdiction, ecozone), ())
        except TypeError:
            # Unhashable query values cannot match any row
            return ()

    def __len__(self) -> int:
        return len(self.rows)

    def __iter__(self) -> Iterator[ParameterRow]:
        return iter(self.rows)

    def __repr__(self) -> str:
        return f"ParameterTable('{self.table_id.value}', rows={len(self.rows)})"


class ParameterDataset:
    """The seven parameter tables of one coefficient set.

    Built once and shared read-only by every resolver that uses it.

    Attributes:
        name: Dataset label from the manifest
        reference: Citation of the coefficient source
        published: False for sample or locally modified coefficient sets
    """

    def __init__(self, tables: Mapping[TableId, ParameterTable], name: str = "unnamed",
                 reference: str = "", published: bool = True):
        resolved = {TableId(k): v for k, v in tables.items()}
        missing = [t.value for t in TableId if t not in resolved]
        if missing:
            raise ConfigurationError(f"Parameter dataset is missing tables {missing}")
        self._tables = MappingProxyType(resolved)
        self.name = name
        self.reference = reference
        self.published = published

    @classmethod
    def from_frames(cls, frames: Mapping[Any, pd.DataFrame], **metadata: Any) -> "ParameterDataset":
        """Build a dataset from one DataFrame per table id."""
        tables = {}
        for table_id, frame in frames.items():
            if isinstance(table_id, str) and not isinstance(table_id, TableId):
                table_id = TableId.from_string(table_id)
            tables[table_id] = ParameterTable.from_frame(table_id, frame)
        return cls(tables, **metadata)

    def table(self, table_id: Any) -> ParameterTable:
        if isinstance(table_id, str) and not isinstance(table_id, TableId):
            table_id = TableId.from_string(table_id)
        return self._tables[table_id]

    __getitem__ = table

    @property
    def tables(self) -> Mapping[TableId, ParameterTable]:
        return self._tables

    def available_keys(self) -> List[Tuple[TaxonKey, str, Any]]:
        """Distinct (taxon, jurisdiction, ecozone) keys present in table 3."""
        keys = dict.fromkeys(
            (TaxonKey(row['genus'], row['species'], row['variety']),
             row['juris_id'], row['ecozone'])
            for row in self._tables[TableId.T3]
        )
        return list(keys)

    def summary(self) -> Dict[str, Any]:
        """Row counts and metadata, for reports."""
        return {
            'name': self.name,
            'reference': self.reference,
            'published': self.published,
            'rows': {t.value: len(self._tables[t]) for t in TableId},
        }

    def __repr__(self) -> str:
        return f"ParameterDataset(name='{self.name}', published={self.published})"
