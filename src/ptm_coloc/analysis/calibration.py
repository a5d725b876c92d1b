"""Calibration parameters for density smoothing and zone thresholds.

Two independent groups are calibrated: ``ss`` (disulfide positions) and
``glyco`` (N-linked and O-linked glycosylation). Phosphorylation is analyzed
with the glyco group; ``CalibrationParameters.phospho`` names that sharing.

Parameters are transferred as a flat JSON object with six keys. Importing
keeps the current value for any key that is missing.
"""

import json
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field

# Flat transfer keys -> (group, field)
PARAMETER_KEYS = {
    "ssWindowSize": ("ss", "window_size"),
    "ssThreshold": ("ss", "threshold"),
    "ssSmoothing": ("ss", "smoothing"),
    "glycoWindowSize": ("glyco", "window_size"),
    "glycoThreshold": ("glyco", "threshold"),
    "glycoSmoothing": ("glyco", "smoothing"),
}


class DensityParameters(BaseModel):
    """Window, threshold and smoothing radius for one density signal."""

    model_config = ConfigDict(frozen=True)

    window_size: int = Field(
        default=50,
        ge=0,
        description="Sliding window width in residues",
    )
    threshold: float = Field(
        default=3.0,
        ge=0.0,
        description="Minimum density for a residue to count as elevated",
    )
    smoothing: float = Field(
        default=5.0,
        ge=0.0,
        description="Moving-average radius in residues (0 = no smoothing)",
    )


class CalibrationParameters(BaseModel):
    """Immutable calibration passed explicitly into every analysis call."""

    model_config = ConfigDict(frozen=True)

    ss: DensityParameters = Field(
        default_factory=DensityParameters,
        description="Disulfide density parameters",
    )
    glyco: DensityParameters = Field(
        default_factory=DensityParameters,
        description="Glycosylation (and phosphorylation) density parameters",
    )

    @property
    def phospho(self) -> DensityParameters:
        """Phosphorylation shares the glyco group."""
        return self.glyco

    def with_overrides(self, overrides: dict) -> "CalibrationParameters":
        """
        Return a new calibration with flat-key overrides applied.

        Args:
            overrides: Mapping of transfer keys (e.g. ``ssThreshold``) to values.
                       Keys mapped to None are ignored.

        Returns:
            Validated CalibrationParameters
        """
        data = self.model_dump()
        for key, value in overrides.items():
            if key not in PARAMETER_KEYS or value is None:
                continue
            group, field = PARAMETER_KEYS[key]
            data[group][field] = value
        return CalibrationParameters.model_validate(data)

    def to_flat(self) -> dict:
        return {
            key: getattr(getattr(self, group), field)
            for key, (group, field) in PARAMETER_KEYS.items()
        }


def export_parameters(params: CalibrationParameters) -> str:
    """Serialize calibration parameters to the flat JSON transfer format."""
    return json.dumps(params.to_flat(), indent=2)


def import_parameters(
    text: str,
    current: CalibrationParameters | None = None,
) -> CalibrationParameters:
    """
    Parse transfer text on top of the current calibration.

    Args:
        text: JSON object with any subset of the six transfer keys
        current: Values kept for missing keys (defaults if None)

    Returns:
        New CalibrationParameters

    Raises:
        ValueError: If text is not a JSON object
        pydantic.ValidationError: If a value is out of range
    """
    if current is None:
        current = CalibrationParameters()

    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise ValueError(f"Calibration text is not valid JSON: {e}") from e

    if not isinstance(data, dict):
        raise ValueError("Calibration text must be a JSON object")

    return current.with_overrides(data)


def save_parameters(params: CalibrationParameters, path: Path | str) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(export_parameters(params) + "\n")
    return path


def load_parameters(
    path: Path | str,
    current: CalibrationParameters | None = None,
) -> CalibrationParameters:
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Parameter file not found: {path}")
    return import_parameters(path.read_text(), current)
