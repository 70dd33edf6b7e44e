"""
Configuration loader for PyV2B.
Locates and loads the volume-to-biomass parameter dataset.

A dataset directory holds a manifest (``v2b_tables.yaml``, ``.toml`` or
``.json``) and one CSV file per parameter table:

    dataset:
      name: boudewyn-2007
      reference: Boudewyn et al. (2007) BC-X-411
      published: true
    tables:
      t3: appendix2_table3.csv
      t4: appendix2_table4.csv
      ...

Lookup order for the dataset directory:
    1. ``cfg_dir`` argument
    2. V2B_DATA_DIR environment variable
    3. ``cfg/`` inside the package (bundled sample coefficients)
"""
import json
import os
import sys
from pathlib import Path
from typing import Any, Dict, Optional, Union

import pandas as pd
import yaml

from .exceptions import (
    ConfigurationError,
    DatasetNotFoundError,
    InvalidDataError,
)
from .logging_config import get_logger
from .parameter_tables import ParameterDataset, ParameterTable, TableId

# Handle TOML imports for different Python versions
if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib

logger = get_logger(__name__)

DATA_DIR_ENV = 'V2B_DATA_DIR'
PACKAGE_CFG_DIR = Path(__file__).parent / 'cfg'


def _read_yaml(path: Path) -> Any:
    with open(path, encoding='utf-8') as f:
        return yaml.safe_load(f)


def _read_toml(path: Path) -> Any:
    with open(path, 'rb') as f:
        return tomllib.load(f)


def _read_json(path: Path) -> Any:
    with open(path, encoding='utf-8') as f:
        return json.load(f)


# Manifest file name -> (reader, parse error, format label), in lookup order
MANIFEST_FORMATS = {
    'v2b_tables.yaml': (_read_yaml, yaml.YAMLError, 'YAML'),
    'v2b_tables.yml': (_read_yaml, yaml.YAMLError, 'YAML'),
    'v2b_tables.toml': (_read_toml, tomllib.TOMLDecodeError, 'TOML'),
    'v2b_tables.json': (_read_json, json.JSONDecodeError, 'JSON'),
}
MANIFEST_NAMES = tuple(MANIFEST_FORMATS)

# Key columns read as text so codes are never coerced to numbers
TEXT_COLUMNS = ('juris_id', 'genus', 'species', 'variety')


class ConfigLoader:
    """Loads a parameter dataset from a configuration directory.

    Attributes:
        cfg_dir: Directory holding the manifest and table files
        manifest_path: Path of the manifest that was found
        manifest: Parsed manifest
    """

    def __init__(self, cfg_dir: Optional[Union[str, Path]] = None):
        """Initialize the configuration loader.

        Args:
            cfg_dir: Dataset directory. Defaults to $V2B_DATA_DIR, then to
                the cfg/ directory inside the package.
        """
        if cfg_dir is None:
            env_dir = os.environ.get(DATA_DIR_ENV)
            cfg_dir = Path(env_dir) if env_dir else PACKAGE_CFG_DIR
        self.cfg_dir = Path(cfg_dir)

        self._dataset: Optional[ParameterDataset] = None

        self.manifest_path = self._find_manifest()
        self.manifest = self._read_manifest()
        self._validate_manifest()

    def _find_manifest(self) -> Path:
        for name in MANIFEST_NAMES:
            candidate = self.cfg_dir / name
            if candidate.exists():
                return candidate
        raise DatasetNotFoundError(
            str(self.cfg_dir / MANIFEST_NAMES[0]), "parameter table manifest"
        )

    def _read_manifest(self) -> Dict[str, Any]:
        """Parse the manifest with the reader for its format.

        Raises:
            InvalidDataError: If parsing fails or the manifest is not a mapping
        """
        name = self.manifest_path.name
        reader, parse_error, label = MANIFEST_FORMATS[name]
        try:
            data = reader(self.manifest_path)
        except parse_error as e:
            raise InvalidDataError(f"{label} manifest {name}", f"parsing error: {e}") from e

        if not data:
            raise InvalidDataError(f"manifest {name}", "file is empty or contains only comments")
        if not isinstance(data, dict):
            raise InvalidDataError(f"manifest {name}",
                                   f"top level must be a mapping, got {type(data).__name__}")
        return data

    def _validate_manifest(self) -> None:
        tables = self.manifest.get('tables')
        if not isinstance(tables, dict):
            raise ConfigurationError(
                f"Manifest {self.manifest_path} must contain a 'tables' mapping"
            )
        declared = {TableId.from_string(name) for name in tables}
        missing = [t.value for t in TableId if t not in declared]
        if missing:
            raise ConfigurationError(
                f"Manifest {self.manifest_path} does not list tables {missing}"
            )

    def table_path(self, table_id: Union[str, TableId]) -> Path:
        """Path of the CSV file for a table, as listed in the manifest."""
        if not isinstance(table_id, TableId):
            table_id = TableId.from_string(table_id)
        for name, filename in self.manifest['tables'].items():
            if TableId.from_string(name) is table_id:
                return self.cfg_dir / filename
        raise ConfigurationError(f"Table '{table_id.value}' is not in the manifest")

    def load_table_frame(self, table_id: Union[str, TableId]) -> pd.DataFrame:
        """Read one parameter table into a DataFrame.

        Raises:
            DatasetNotFoundError: If the CSV file is missing
            InvalidDataError: If the CSV cannot be parsed
        """
        path = self.table_path(table_id)
        if not path.exists():
            raise DatasetNotFoundError(str(path), "parameter table")
        try:
            header = pd.read_csv(path, nrows=0).columns
            dtypes = {c: str for c in TEXT_COLUMNS if c in header}
            return pd.read_csv(path, dtype=dtypes, float_precision='round_trip')
        except (pd.errors.ParserError, pd.errors.EmptyDataError, UnicodeDecodeError) as e:
            raise InvalidDataError(f"parameter table {path.name}", str(e)) from e

    def load_dataset(self) -> ParameterDataset:
        """Load all seven tables. The result is cached on the loader."""
        if self._dataset is None:
            meta = self.manifest.get('dataset', {}) or {}
            tables = {
                table_id: ParameterTable.from_frame(table_id, self.load_table_frame(table_id))
                for table_id in TableId
            }
            self._dataset = ParameterDataset(
                tables,
                name=str(meta.get('name', self.cfg_dir.name)),
                reference=str(meta.get('reference', '')),
                published=bool(meta.get('published', True)),
            )
            logger.debug("Loaded parameter dataset '%s' from %s",
                         self._dataset.name, self.cfg_dir)
            if not self._dataset.published:
                logger.warning(
                    "Parameter dataset '%s' is not the published coefficient set; "
                    "set %s to a directory with the published tables for real estimates",
                    self._dataset.name, DATA_DIR_ENV,
                )
        return self._dataset


# Global configuration loader instances, keyed by resolved directory
_config_loaders: Dict[str, ConfigLoader] = {}


def get_config_loader(cfg_dir: Optional[Union[str, Path]] = None) -> ConfigLoader:
    """Get a cached configuration loader for a dataset directory.

    Args:
        cfg_dir: Dataset directory. If None, uses $V2B_DATA_DIR or the
            bundled cfg/ directory.
    """
    if cfg_dir is None:
        cfg_dir = os.environ.get(DATA_DIR_ENV) or PACKAGE_CFG_DIR
    cache_key = str(Path(cfg_dir).resolve())

    if cache_key not in _config_loaders:
        _config_loaders[cache_key] = ConfigLoader(cfg_dir)

    return _config_loaders[cache_key]


def load_default_dataset(cfg_dir: Optional[Union[str, Path]] = None) -> ParameterDataset:
    """Convenience function returning the cached dataset for a directory."""
    return get_config_loader(cfg_dir).load_dataset()


def clear_dataset_cache() -> None:
    """Forget cached loaders and datasets.

    Useful for testing or when table files may have changed.
    """
    _config_loaders.clear()
