"""Batch ingestion pipeline."""

from ptm_coloc.batch.pipeline import (
    MAX_INTERIM_PROGRESS,
    BatchPipeline,
    BatchProgress,
    BatchResult,
    BatchState,
)

__all__ = [
    "MAX_INTERIM_PROGRESS",
    "BatchPipeline",
    "BatchProgress",
    "BatchResult",
    "BatchState",
]
