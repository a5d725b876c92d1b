"""Tests for configuration loading and validation."""

import pytest
from pydantic import ValidationError

from ptm_coloc.config import load_config, load_config_with_overrides
from ptm_coloc.config.schema import PipelineConfig


def write_config(tmp_path, body: str):
    config_path = tmp_path / "config.yaml"
    config_path.write_text(body)
    return config_path


def test_load_valid_config():
    """Test loading the shipped default configuration."""
    config = load_config("config/default.yaml")

    assert isinstance(config, PipelineConfig)
    assert config.reference_organism_id == "9606"
    assert config.api.max_retries == 2
    assert config.api.retry_delay_seconds == 1.0
    assert config.batch.page_size == 250
    assert config.batch.default_total_estimate == 20400
    assert config.calibration.ss.window_size == 50
    assert config.calibration.glyco.threshold == 3.0


def test_minimal_config_uses_defaults(tmp_path):
    config = load_config(write_config(tmp_path, f"data_dir: {tmp_path / 'data'}\n"))

    assert config.batch.organism_id == "9606"
    assert config.calibration.ss.smoothing == 5.0
    assert config.api.base_url == "https://rest.uniprot.org"


def test_invalid_config_missing_field(tmp_path):
    """Test that missing required field raises ValidationError."""
    config_path = write_config(tmp_path, """
batch:
  page_size: 100
""")

    with pytest.raises(ValidationError) as exc_info:
        load_config(config_path)

    assert "data_dir" in str(exc_info.value)


def test_invalid_page_size(tmp_path):
    config_path = write_config(tmp_path, f"""
data_dir: {tmp_path / 'data'}
batch:
  page_size: 0
""")

    with pytest.raises(ValidationError):
        load_config(config_path)


def test_invalid_calibration(tmp_path):
    config_path = write_config(tmp_path, f"""
data_dir: {tmp_path / 'data'}
calibration:
  ss:
    threshold: -1
""")

    with pytest.raises(ValidationError):
        load_config(config_path)


def test_missing_config_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_config(tmp_path / "missing.yaml")


def test_data_dir_created(tmp_path):
    data_dir = tmp_path / "nested" / "data"
    assert not data_dir.exists()

    load_config(write_config(tmp_path, f"data_dir: {data_dir}\n"))

    assert data_dir.is_dir()


def test_config_overrides(tmp_path):
    config_path = write_config(tmp_path, f"data_dir: {tmp_path / 'data'}\n")

    config = load_config_with_overrides(config_path, {
        "batch.organism_id": "10090",
        "batch.page_size": 100,
        "calibration.glyco.threshold": 1.5,
        "api.max_retries": None,
    })

    assert config.batch.organism_id == "10090"
    assert config.batch.page_size == 100
    assert config.calibration.glyco.threshold == 1.5
    assert config.api.max_retries == 2


def test_config_hash_deterministic(tmp_path):
    config_path = write_config(tmp_path, f"data_dir: {tmp_path / 'data'}\n")

    first = load_config(config_path).config_hash()
    second = load_config(config_path).config_hash()
    changed = load_config_with_overrides(
        config_path, {"calibration.ss.window_size": 10}
    ).config_hash()

    assert first == second
    assert len(first) == 64
    assert first != changed
