"""
Shared pytest fixtures for PyV2B tests.

Provides the bundled sample dataset and a factory for small in-memory
datasets, so selection edge cases can be tested without touching files.
"""
import copy

import pandas as pd
import pytest

from pyv2b.config_loader import ConfigLoader, DATA_DIR_ENV, PACKAGE_CFG_DIR, clear_dataset_cache
from pyv2b.parameter_tables import ParameterDataset, TableId
from pyv2b.resolver import ParameterResolver


# =============================================================================
# Environment Isolation
# =============================================================================

@pytest.fixture(autouse=True)
def isolated_config(monkeypatch):
    """Ignore any V2B_DATA_DIR of the developer and clear loader caches."""
    monkeypatch.delenv(DATA_DIR_ENV, raising=False)
    clear_dataset_cache()
    yield
    clear_dataset_cache()


# =============================================================================
# Bundled Sample Dataset
# =============================================================================

@pytest.fixture(scope="session")
def sample_dataset():
    """The sample coefficient set shipped in the package cfg/ directory.

    Covers:
    - PINU.CON in BC ecozone 4 (with a sapling model)
    - PINU.CON.LAT in BC ecozone 4 (variety rows; sapling row shared with PINU.CON)
    - POPU.TRE in AB ecozone 9 (no sapling model)
    """
    return ConfigLoader(PACKAGE_CFG_DIR).load_dataset()


@pytest.fixture
def sample_resolver(sample_dataset):
    return ParameterResolver(sample_dataset)


# =============================================================================
# In-memory Dataset Factory
# =============================================================================

KEY = {'juris_id': 'BC', 'ecozone': 4, 'genus': 'PINU', 'species': 'CON', 'variety': None}

BASE_ROWS = {
    TableId.T3: {'a': 0.7142, 'b': 0.9430},
    TableId.T4: {'a': 3.1812, 'b': -0.5128, 'k': 1.0, 'cap': 1.55},
    TableId.T5: {'a': 1.4032, 'b': -0.6215, 'k': 1.0, 'cap': 1.25},
    TableId.T6_VOL: {'a1': -1.8402, 'a2': -0.0007, 'a3': -0.0925,
                     'b1': -0.7321, 'b2': -0.0012, 'b3': -0.2210,
                     'c1': -1.2104, 'c2': -0.0019, 'c3': -0.2803},
    TableId.T6_BIO: {'a1': -1.7905, 'a2': -0.0011, 'a3': -0.1032,
                     'b1': -0.6844, 'b2': -0.0018, 'b3': -0.2397,
                     'c1': -1.1562, 'c2': -0.0027, 'c3': -0.2950},
    TableId.T7_VOL: {'vol_min': 12.5, 'vol_max': 612.0},
    TableId.T7_BIO: {'biom_min': 9.4, 'biom_max': 468.0},
}


def base_rows():
    """One PINU.CON / BC / ecozone 4 row per table, as lists of dicts."""
    return {table_id: [{**KEY, **coefs}] for table_id, coefs in copy.deepcopy(BASE_ROWS).items()}


@pytest.fixture
def make_dataset():
    """Factory building a ParameterDataset from per-table row lists.

    Usage:
        rows = base_rows()
        rows[TableId.T5] = []
        dataset = make_dataset(rows)
    """
    def _make(rows=None, **metadata):
        rows = base_rows() if rows is None else rows
        frames = {}
        for table_id, table_rows in rows.items():
            columns = list(KEY) + list(BASE_ROWS[table_id])
            frames[table_id] = pd.DataFrame(table_rows, columns=columns if not table_rows else None)
        metadata.setdefault('name', 'test')
        return ParameterDataset.from_frames(frames, **metadata)

    return _make


@pytest.fixture
def core_bundle(make_dataset):
    """Resolved bundle for PINU.CON / BC / 4 built from BASE_ROWS."""
    from pyv2b.taxon import TaxonKey
    return ParameterResolver(make_dataset()).resolve(TaxonKey('PINU', 'CON'), 'BC', 4)


@pytest.fixture
def rows():
    """Fresh, mutable copy of the base rows for building edge-case datasets."""
    return base_rows()
