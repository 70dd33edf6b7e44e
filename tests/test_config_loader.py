"""
Tests for ConfigLoader and dataset discovery.
"""
import json
import logging
import shutil

import pytest
import yaml

from pyv2b.config_loader import (
    ConfigLoader,
    DATA_DIR_ENV,
    PACKAGE_CFG_DIR,
    clear_dataset_cache,
    get_config_loader,
    load_default_dataset,
)
from pyv2b.exceptions import (
    ConfigurationError,
    DatasetNotFoundError,
    InvalidDataError,
)
from pyv2b.parameter_tables import TableId


@pytest.fixture
def dataset_dir(tmp_path):
    """A copy of the bundled dataset directory that tests may modify."""
    target = tmp_path / "dataset"
    shutil.copytree(PACKAGE_CFG_DIR, target)
    return target


def _manifest(directory):
    with open(directory / "v2b_tables.yaml", encoding="utf-8") as f:
        return yaml.safe_load(f)


class TestManifest:

    def test_loads_bundled_manifest(self):
        loader = ConfigLoader(PACKAGE_CFG_DIR)
        assert loader.manifest_path.name == "v2b_tables.yaml"
        assert loader.manifest['dataset']['published'] is False

    def test_table_path(self):
        loader = ConfigLoader(PACKAGE_CFG_DIR)
        assert loader.table_path("t3").name == "table3_merch_stemwood.csv"
        assert loader.table_path(TableId.T6_VOL).name == "table6_proportions_volume.csv"

    def test_json_manifest(self, dataset_dir):
        manifest = _manifest(dataset_dir)
        (dataset_dir / "v2b_tables.yaml").unlink()
        (dataset_dir / "v2b_tables.json").write_text(json.dumps(manifest), encoding="utf-8")
        dataset = ConfigLoader(dataset_dir).load_dataset()
        assert dataset.name == "pyv2b-sample"

    def test_toml_manifest(self, dataset_dir):
        (dataset_dir / "v2b_tables.yaml").unlink()
        lines = ['[dataset]', 'name = "toml-copy"', 'published = true', '', '[tables]']
        for table_id in TableId:
            source = ConfigLoader(PACKAGE_CFG_DIR).table_path(table_id)
            lines.append(f'{table_id.value} = "tables/{source.name}"')
        (dataset_dir / "v2b_tables.toml").write_text("\n".join(lines) + "\n", encoding="utf-8")
        dataset = ConfigLoader(dataset_dir).load_dataset()
        assert dataset.name == "toml-copy"
        assert dataset.published is True

    def test_missing_manifest(self, tmp_path):
        with pytest.raises(DatasetNotFoundError, match="manifest"):
            ConfigLoader(tmp_path)

    def test_manifest_without_tables(self, tmp_path):
        (tmp_path / "v2b_tables.yaml").write_text("dataset:\n  name: x\n", encoding="utf-8")
        with pytest.raises(ConfigurationError, match="'tables' mapping"):
            ConfigLoader(tmp_path)

    def test_manifest_missing_a_table(self, dataset_dir):
        manifest = _manifest(dataset_dir)
        del manifest['tables']['t7_bio']
        (dataset_dir / "v2b_tables.yaml").write_text(yaml.safe_dump(manifest), encoding="utf-8")
        with pytest.raises(ConfigurationError, match="t7_bio"):
            ConfigLoader(dataset_dir)

    def test_manifest_unknown_table(self, dataset_dir):
        manifest = _manifest(dataset_dir)
        manifest['tables']['t8'] = "tables/extra.csv"
        (dataset_dir / "v2b_tables.yaml").write_text(yaml.safe_dump(manifest), encoding="utf-8")
        with pytest.raises(ConfigurationError, match="Unknown parameter table"):
            ConfigLoader(dataset_dir)

    def test_invalid_yaml(self, tmp_path):
        (tmp_path / "v2b_tables.yaml").write_text("tables: [unclosed\n", encoding="utf-8")
        with pytest.raises(InvalidDataError, match="YAML"):
            ConfigLoader(tmp_path)

    def test_manifest_not_a_mapping(self, tmp_path):
        (tmp_path / "v2b_tables.json").write_text('["t3", "t4"]', encoding="utf-8")
        with pytest.raises(InvalidDataError, match="must be a mapping"):
            ConfigLoader(tmp_path)

    def test_invalid_json(self, tmp_path):
        (tmp_path / "v2b_tables.json").write_text('{"tables": ', encoding="utf-8")
        with pytest.raises(InvalidDataError, match="JSON"):
            ConfigLoader(tmp_path)

    def test_empty_manifest(self, tmp_path):
        (tmp_path / "v2b_tables.yaml").write_text("# nothing here\n", encoding="utf-8")
        with pytest.raises(InvalidDataError, match="empty"):
            ConfigLoader(tmp_path)


class TestTableFiles:

    def test_missing_table_file(self, dataset_dir):
        (dataset_dir / "tables" / "table5_sapling_factor.csv").unlink()
        loader = ConfigLoader(dataset_dir)
        with pytest.raises(DatasetNotFoundError, match="table5_sapling_factor.csv"):
            loader.load_dataset()

    def test_missing_column_in_file(self, dataset_dir):
        (dataset_dir / "tables" / "table3_merch_stemwood.csv").write_text(
            "juris_id,ecozone,genus,species,variety,a\nBC,4,PINU,CON,,0.7\n", encoding="utf-8"
        )
        with pytest.raises(InvalidDataError, match="missing columns"):
            ConfigLoader(dataset_dir).load_dataset()

    def test_empty_table_file(self, dataset_dir):
        (dataset_dir / "tables" / "table4_nonmerch_factor.csv").write_text("", encoding="utf-8")
        with pytest.raises(InvalidDataError):
            ConfigLoader(dataset_dir).load_dataset()

    def test_key_columns_read_as_text(self):
        frame = ConfigLoader(PACKAGE_CFG_DIR).load_table_frame(TableId.T3)
        assert frame['juris_id'].tolist() == ['BC', 'BC', 'AB']
        assert frame['variety'].isna().tolist() == [True, False, True]

    def test_dataset_cached_on_loader(self):
        loader = ConfigLoader(PACKAGE_CFG_DIR)
        assert loader.load_dataset() is loader.load_dataset()

    def test_sample_dataset_warning(self, caplog):
        with caplog.at_level(logging.WARNING, logger="pyv2b"):
            ConfigLoader(PACKAGE_CFG_DIR).load_dataset()
        assert any("not the published coefficient set" in r.getMessage() for r in caplog.records)

    def test_published_dataset_no_warning(self, dataset_dir, caplog):
        manifest = _manifest(dataset_dir)
        manifest['dataset']['published'] = True
        (dataset_dir / "v2b_tables.yaml").write_text(yaml.safe_dump(manifest), encoding="utf-8")
        with caplog.at_level(logging.WARNING, logger="pyv2b"):
            ConfigLoader(dataset_dir).load_dataset()
        assert not any(r.levelno >= logging.WARNING for r in caplog.records)


class TestDefaultDataset:

    def test_environment_override(self, dataset_dir, monkeypatch):
        manifest = _manifest(dataset_dir)
        manifest['dataset']['name'] = "from-env"
        (dataset_dir / "v2b_tables.yaml").write_text(yaml.safe_dump(manifest), encoding="utf-8")
        monkeypatch.setenv(DATA_DIR_ENV, str(dataset_dir))
        assert ConfigLoader().cfg_dir == dataset_dir
        assert load_default_dataset().name == "from-env"

    def test_loader_cache(self):
        assert get_config_loader() is get_config_loader(PACKAGE_CFG_DIR)
        assert load_default_dataset() is load_default_dataset()

    def test_clear_cache(self):
        first = get_config_loader()
        clear_dataset_cache()
        assert get_config_loader() is not first
