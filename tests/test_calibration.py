"""Tests for calibration parameters and their text transfer format."""

import json

import pytest
from pydantic import ValidationError

from ptm_coloc.analysis.calibration import (
    PARAMETER_KEYS,
    CalibrationParameters,
    DensityParameters,
    export_parameters,
    import_parameters,
    load_parameters,
    save_parameters,
)


@pytest.fixture
def custom_params():
    return CalibrationParameters(
        ss=DensityParameters(window_size=37, threshold=2.25, smoothing=3),
        glyco=DensityParameters(window_size=61, threshold=0.5, smoothing=0),
    )


def test_defaults():
    params = CalibrationParameters()

    assert params.ss.window_size == 50
    assert params.ss.threshold == 3.0
    assert params.ss.smoothing == 5.0
    assert params.glyco == params.ss


def test_phospho_is_alias_of_glyco(custom_params):
    assert custom_params.phospho is custom_params.glyco


def test_parameters_are_immutable(custom_params):
    with pytest.raises(ValidationError):
        custom_params.ss = DensityParameters()

    with pytest.raises(ValidationError):
        custom_params.ss.threshold = 9.0


def test_negative_values_rejected():
    with pytest.raises(ValidationError):
        DensityParameters(window_size=-1)
    with pytest.raises(ValidationError):
        DensityParameters(threshold=-0.1)
    with pytest.raises(ValidationError):
        DensityParameters(smoothing=-2)


def test_export_uses_six_flat_keys(custom_params):
    data = json.loads(export_parameters(custom_params))

    assert set(data) == set(PARAMETER_KEYS)
    assert data["ssWindowSize"] == 37
    assert data["ssThreshold"] == 2.25
    assert data["glycoWindowSize"] == 61
    assert data["glycoSmoothing"] == 0


def test_export_import_round_trip(custom_params):
    """Importing exported text into fresh defaults reproduces all six values."""
    restored = import_parameters(export_parameters(custom_params), CalibrationParameters())

    assert restored == custom_params
    assert restored.to_flat() == custom_params.to_flat()


def test_import_missing_keys_keep_current_values(custom_params):
    restored = import_parameters('{"ssThreshold": 4}', custom_params)

    assert restored.ss.threshold == 4.0
    assert restored.ss.window_size == 37
    assert restored.ss.smoothing == 3
    assert restored.glyco == custom_params.glyco


def test_import_null_and_unknown_keys_ignored(custom_params):
    restored = import_parameters(
        '{"glycoWindowSize": null, "colour": "blue"}',
        custom_params,
    )

    assert restored == custom_params


def test_import_zero_values_applied(custom_params):
    restored = import_parameters('{"ssSmoothing": 0, "glycoThreshold": 0}', custom_params)

    assert restored.ss.smoothing == 0
    assert restored.glyco.threshold == 0


def test_import_without_current_uses_defaults():
    restored = import_parameters('{"glycoWindowSize": 20}')

    assert restored.glyco.window_size == 20
    assert restored.ss == DensityParameters()


def test_import_malformed_text():
    with pytest.raises(ValueError, match="not valid JSON"):
        import_parameters("ssWindowSize=5")

    with pytest.raises(ValueError, match="JSON object"):
        import_parameters("[1, 2, 3]")


def test_import_out_of_range_value():
    with pytest.raises(ValidationError):
        import_parameters('{"ssWindowSize": -5}')


def test_import_does_not_modify_current(custom_params):
    import_parameters('{"ssThreshold": 9}', custom_params)

    assert custom_params.ss.threshold == 2.25


def test_save_and_load_file(tmp_path, custom_params):
    path = save_parameters(custom_params, tmp_path / "params" / "protein_coloc_params.txt")

    assert path.exists()
    assert load_parameters(path) == custom_params


def test_load_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_parameters(tmp_path / "nope.txt")
