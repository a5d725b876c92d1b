"""Pydantic models for pipeline configuration."""

import hashlib
import json
from pathlib import Path

from pydantic import BaseModel, Field, field_validator

from ptm_coloc.analysis.calibration import CalibrationParameters


class APIConfig(BaseModel):
    """Configuration for the UniProt REST client."""

    base_url: str = Field(
        default="https://rest.uniprot.org",
        description="UniProt REST API base URL",
    )
    max_retries: int = Field(
        default=2,
        ge=0,
        le=10,
        description="Additional attempts after a transient lookup failure",
    )
    retry_delay_seconds: float = Field(
        default=1.0,
        ge=0.0,
        description="Fixed delay between lookup attempts",
    )
    timeout_seconds: int = Field(
        default=30,
        ge=1,
        description="Request timeout in seconds",
    )


class BatchConfig(BaseModel):
    """Configuration for whole-proteome batch runs."""

    organism_id: str = Field(
        default="9606",
        description="NCBI taxonomy ID of the proteome to analyze",
    )
    page_size: int = Field(
        default=250,
        ge=1,
        le=500,
        description="Proteins requested per page",
    )
    default_total_estimate: int = Field(
        default=20400,
        ge=1,
        description="Expected protein count when the source gives no total",
    )


class PipelineConfig(BaseModel):
    """Main pipeline configuration."""

    data_dir: Path = Field(
        ...,
        description="Directory for report output",
    )
    reference_organism_id: str = Field(
        default="9606",
        description="Organism used for single-gene lookups",
    )
    api: APIConfig = Field(
        default_factory=APIConfig,
        description="API client configuration",
    )
    batch: BatchConfig = Field(
        default_factory=BatchConfig,
        description="Batch ingestion configuration",
    )
    calibration: CalibrationParameters = Field(
        default_factory=CalibrationParameters,
        description="Default density calibration",
    )

    @field_validator("data_dir")
    @classmethod
    def create_directory(cls, v: Path) -> Path:
        """Create directory if it doesn't exist."""
        v.mkdir(parents=True, exist_ok=True)
        return v

    def config_hash(self) -> str:
        """
        Compute SHA-256 hash of the configuration.

        Returns a deterministic hash based on all config values,
        useful for tracking which settings produced a report.
        """
        config_dict = self.model_dump(mode="python")
        config_json = json.dumps(
            config_dict,
            sort_keys=True,
            default=str,
        )
        return hashlib.sha256(config_json.encode()).hexdigest()
