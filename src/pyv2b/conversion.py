"""
Volume-to-biomass conversion entry points.

``convert_volume_to_biomass`` converts one stand; ``convert_volume_table``
converts every row of a DataFrame, resolving parameters once per
taxon/jurisdiction/ecozone group.

Example:
    >>> from pyv2b import convert_volume_to_biomass
    >>> result = convert_volume_to_biomass(350, species="PINU.CON",
    ...                                    jurisdiction="BC", ecozone=4)
    >>> result.b_total
"""
import numbers
from typing import Any, Optional

import numpy as np
import pandas as pd

from .calculator import BIOMASS_COMPONENTS, BiomassCalculator, BiomassResult, validate_volumes
from .config_loader import load_default_dataset
from .exceptions import InputTypeError, InvalidInputError, validate_finite_non_negative
from .parameter_tables import ParameterDataset
from .resolver import ParameterResolver
from .taxon import parse_taxon_key

__all__ = [
    'convert_volume_to_biomass',
    'ConvertVolumeToBiomass',
    'convert_volume_table',
]


def _is_number(value: Any) -> bool:
    return isinstance(value, numbers.Real) and not isinstance(value, bool)


def _check_key_types(species: Any, jurisdiction: Any, ecozone: Any) -> None:
    if not isinstance(species, str):
        raise InputTypeError("species", species, "character")
    if not isinstance(jurisdiction, str):
        raise InputTypeError("jurisdiction", jurisdiction, "character")
    if not _is_number(ecozone):
        raise InputTypeError("ecozone", ecozone, "numeric")


def convert_volume_to_biomass(volume: float, species: str, jurisdiction: str,
                              ecozone: int,
                              dataset: Optional[ParameterDataset] = None) -> BiomassResult:
    """Convert gross merchantable volume to above-ground biomass.

    Note - only scenarios 1 and 2 of Boudewyn et al. (2007) are implemented.

    Args:
        volume: Gross merchantable volume of all live trees (m3/ha)
        species: Taxon key in the NFI standard, e.g. "POPU.TRE" or "PINU.CON.LAT"
        jurisdiction: Two-letter jurisdiction code, e.g. "AB"
        ecozone: Ecozone number (1-15), see ``pyv2b.codes.Ecozone``
        dataset: Parameter tables to use. Defaults to the configured dataset.

    Returns:
        BiomassResult with b_m, b_n, b_nm, b_s, b_total, b_bark, b_branches
        and b_foliage in tonnes/ha

    Raises:
        InputTypeError: If an argument has the wrong type
        TaxonFormatError: If species has fewer than two segments
        InvalidInputError: If volume is negative or not finite
        ParameterSelectionError: If the tables have no unique parameters
            for the key
    """
    if not _is_number(volume):
        raise InputTypeError("volume", volume, "numeric")
    _check_key_types(species, jurisdiction, ecozone)
    validate_finite_non_negative(volume, "volume")

    taxon = parse_taxon_key(species)
    if dataset is None:
        dataset = load_default_dataset()

    bundle = ParameterResolver(dataset).resolve(taxon, jurisdiction, ecozone)
    return BiomassCalculator().compute(bundle, volume)


# Name used by the published model documentation
ConvertVolumeToBiomass = convert_volume_to_biomass


def convert_volume_table(frame: pd.DataFrame,
                         volume_col: str = 'volume',
                         species_col: str = 'species',
                         jurisdiction_col: str = 'jurisdiction',
                         ecozone_col: str = 'ecozone',
                         dataset: Optional[ParameterDataset] = None) -> pd.DataFrame:
    """Convert a table of stands.

    Any invalid row aborts the whole conversion; no partial result is
    returned.

    Args:
        frame: One row per stand
        volume_col: Column with gross merchantable volume (m3/ha)
        species_col: Column with taxon keys
        jurisdiction_col: Column with jurisdiction codes
        ecozone_col: Column with ecozone numbers
        dataset: Parameter tables to use. Defaults to the configured dataset.

    Returns:
        Copy of ``frame`` with the eight biomass columns appended
    """
    columns = [volume_col, species_col, jurisdiction_col, ecozone_col]
    missing = [c for c in columns if c not in frame.columns]
    if missing:
        raise InvalidInputError("frame", missing, "missing columns")

    volume_series = frame[volume_col]
    if (not pd.api.types.is_numeric_dtype(volume_series)
            or pd.api.types.is_bool_dtype(volume_series)):
        raise InputTypeError("volume", volume_series, "numeric")
    volumes = volume_series.to_numpy(dtype=float)
    validate_volumes(volumes)

    result = frame.copy()
    outputs = {name: np.full(len(frame), np.nan) for name in BIOMASS_COMPONENTS}

    if len(frame):
        if dataset is None:
            dataset = load_default_dataset()
        resolver = ParameterResolver(dataset)
        calculator = BiomassCalculator()

        groups = frame.groupby([species_col, jurisdiction_col, ecozone_col],
                               sort=False, dropna=False).indices
        for (species, jurisdiction, ecozone), positions in groups.items():
            _check_key_types(species, jurisdiction, ecozone)
            bundle = resolver.resolve(parse_taxon_key(species), jurisdiction, ecozone)
            arrays = calculator.compute_arrays(bundle, volumes[positions])
            for name in BIOMASS_COMPONENTS:
                outputs[name][positions] = arrays[name]

    for name in BIOMASS_COMPONENTS:
        result[name] = outputs[name]
    return result
