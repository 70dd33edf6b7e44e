"""
PyV2B: Volume-to-biomass conversion for Canadian forests

A Python implementation of the model-based volume-to-biomass conversion
equations of Boudewyn et al. (2007), which turn gross merchantable volume
per hectare into above-ground biomass of stem wood, bark, branches and
foliage for a taxon, jurisdiction and ecozone.

Reference:
    Boudewyn, P.A.; Song, X.; Magnussen, S.; Gillis, M.D. (2007).
    Model-based, volume-to-biomass conversion for forested and vegetated
    land in Canada. Natural Resources Canada, Canadian Forest Service,
    Pacific Forestry Centre, Victoria, BC. Information Report BC-X-411.

Quick Start:
    >>> from pyv2b import convert_volume_to_biomass
    >>> result = convert_volume_to_biomass(350, species='PINU.CON', jurisdiction='BC', ecozone=4)
    >>> print(result.to_dict())
"""
import logging

# =============================================================================
# Package Metadata
# =============================================================================
__version__ = "0.1.0"
__author__ = "PyV2B Development Team"

# =============================================================================
# Conversion - Primary API
# =============================================================================
from .conversion import (
    convert_volume_to_biomass,
    ConvertVolumeToBiomass,
    convert_volume_table,
)

# =============================================================================
# Model Components
# =============================================================================
from .taxon import TaxonKey, parse_taxon_key
from .resolver import ParameterBundle, ParameterResolver
from .calculator import (
    BiomassCalculator,
    BiomassResult,
    ImplementedScenario,
    BIOMASS_COMPONENTS,
    compute,
)

# =============================================================================
# Parameter Tables and Configuration
# =============================================================================
from .parameter_tables import ParameterDataset, ParameterTable, ParameterRow, TableId
from .config_loader import (
    ConfigLoader,
    get_config_loader,
    load_default_dataset,
    clear_dataset_cache,
)

# =============================================================================
# Codes
# =============================================================================
from .codes import Ecozone, Jurisdiction, get_ecozone_name, list_ecozones

# =============================================================================
# Logging
# =============================================================================
from .logging_config import get_logger, setup_logging

# =============================================================================
# Exceptions
# =============================================================================
from .exceptions import (
    V2BError,
    ConfigurationError,
    InputError,
    InputTypeError,
    InvalidInputError,
    TaxonFormatError,
    ParameterSelectionError,
    DataError,
    DatasetNotFoundError,
    InvalidDataError,
)

logging.getLogger(__name__).addHandler(logging.NullHandler())

# =============================================================================
# Public API Definition
# =============================================================================
__all__ = [
    # Package Metadata
    "__version__",
    "__author__",
    # Conversion
    "convert_volume_to_biomass",
    "ConvertVolumeToBiomass",
    "convert_volume_table",
    # Model Components
    "TaxonKey",
    "parse_taxon_key",
    "ParameterBundle",
    "ParameterResolver",
    "BiomassCalculator",
    "BiomassResult",
    "ImplementedScenario",
    "BIOMASS_COMPONENTS",
    "compute",
    # Parameter Tables and Configuration
    "ParameterDataset",
    "ParameterTable",
    "ParameterRow",
    "TableId",
    "ConfigLoader",
    "get_config_loader",
    "load_default_dataset",
    "clear_dataset_cache",
    # Codes
    "Ecozone",
    "Jurisdiction",
    "get_ecozone_name",
    "list_ecozones",
    # Logging
    "get_logger",
    "setup_logging",
    # Exceptions
    "V2BError",
    "ConfigurationError",
    "InputError",
    "InputTypeError",
    "InvalidInputError",
    "TaxonFormatError",
    "ParameterSelectionError",
    "DataError",
    "DatasetNotFoundError",
    "InvalidDataError",
]
