"""Whole-proteome batch ingestion with cursor pagination and progress tracking.

The pipeline fetches one page at a time, analyzes every protein on the page
before asking for the next one, and appends the resulting site rows to an
accumulator it owns for the duration of the run. A run either completes and
returns every row, or fails/cancels and returns nothing: partial proteome
coverage is never handed to the report sink.
"""

import threading
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Iterable

import structlog

from ptm_coloc.analysis.analyzer import analyze_protein
from ptm_coloc.analysis.calibration import CalibrationParameters
from ptm_coloc.analysis.models import Protein, SiteAnnotation
from ptm_coloc.api_clients.base import ProteinSource
from ptm_coloc.config.schema import PipelineConfig
from ptm_coloc.exceptions import (
    BatchAborted,
    BatchCancelled,
    InvalidProtein,
    MalformedPage,
    TransientSourceError,
)

logger = structlog.get_logger()

# Progress stays below 100 until the run has actually completed
MAX_INTERIM_PROGRESS = 99.0


class BatchState(str, Enum):
    IDLE = "idle"
    PROCESSING = "processing"
    COMPLETED = "completed"


@dataclass
class BatchProgress:
    """Progress snapshot passed to the on_progress callback.

    Attributes:
        processed: Exact number of proteins handled so far (skipped included)
        skipped: Proteins skipped as structurally invalid
        estimated_total: Source total, or the configured estimate
        percent: Advisory completion percentage in [0, 100]
        pages: Pages fetched so far
        state: Pipeline state at the time of the snapshot
    """
    processed: int
    skipped: int
    estimated_total: int
    percent: float
    pages: int
    state: BatchState


@dataclass
class BatchResult:
    """Outcome of a completed batch run."""
    rows: list[SiteAnnotation] = field(default_factory=list)
    processed: int = 0
    skipped: int = 0
    pages: int = 0
    elapsed_seconds: float = 0.0
    organism_id: str | None = None

    @property
    def analyzed(self) -> int:
        return self.processed - self.skipped


ProgressCallback = Callable[[BatchProgress], None]


class BatchPipeline:
    """
    Drives page-by-page retrieval and analysis of many proteins.

    States: IDLE -> PROCESSING -> COMPLETED, with PROCESSING -> IDLE on
    failure or cancellation.
    """

    def __init__(
        self,
        source: ProteinSource,
        params: CalibrationParameters,
        page_size: int = 250,
        default_total_estimate: int = 20400,
    ):
        """
        Args:
            source: Paginated protein source
            params: Calibration applied to every protein in the run
            page_size: Proteins requested per page
            default_total_estimate: Progress denominator when the source
                                    reports no total
        """
        if page_size < 1:
            raise ValueError(f"page_size must be positive, got {page_size}")

        self.source = source
        self.params = params
        self.page_size = page_size
        self.default_total_estimate = default_total_estimate

        self.state = BatchState.IDLE
        self.progress = 0.0
        self.processed_count = 0
        self.skipped_count = 0
        self.page_count = 0
        self.estimated_total = default_total_estimate
        self.error: str | None = None

    @classmethod
    def from_config(
        cls,
        config: PipelineConfig,
        source: ProteinSource,
        params: CalibrationParameters | None = None,
    ) -> "BatchPipeline":
        return cls(
            source=source,
            params=params if params is not None else config.calibration,
            page_size=config.batch.page_size,
            default_total_estimate=config.batch.default_total_estimate,
        )

    def _start(self) -> None:
        if self.state is BatchState.PROCESSING:
            raise RuntimeError("Batch run already in progress")
        self.state = BatchState.PROCESSING
        self.progress = 0.0
        self.processed_count = 0
        self.skipped_count = 0
        self.page_count = 0
        self.estimated_total = self.default_total_estimate
        self.error = None

    def _snapshot(self) -> BatchProgress:
        return BatchProgress(
            processed=self.processed_count,
            skipped=self.skipped_count,
            estimated_total=self.estimated_total,
            percent=self.progress,
            pages=self.page_count,
            state=self.state,
        )

    def _analyze_chunk(
        self,
        proteins: Iterable[Protein],
        rows: list[SiteAnnotation],
    ) -> None:
        for protein in proteins:
            self.processed_count += 1
            try:
                rows.extend(analyze_protein(protein, self.params))
            except InvalidProtein as e:
                self.skipped_count += 1
                logger.warning(
                    "batch_protein_skipped",
                    accession=e.accession,
                    reason=e.reason,
                )

    def _update_progress(self, total_hint: int | None) -> None:
        if total_hint:
            self.estimated_total = total_hint
        percent = min(100.0, self.processed_count / self.estimated_total * 100)
        # Advisory only: never move backwards when the total estimate changes
        self.progress = max(self.progress, min(MAX_INTERIM_PROGRESS, percent))

    def _fail(self, message: str) -> None:
        self.state = BatchState.IDLE
        self.error = message

    def _complete(self, on_progress: ProgressCallback | None) -> None:
        self.state = BatchState.COMPLETED
        self.progress = 100.0
        if on_progress is not None:
            on_progress(self._snapshot())

    def run(
        self,
        organism_id: str,
        cancel_event: threading.Event | None = None,
        on_progress: ProgressCallback | None = None,
    ) -> BatchResult:
        """
        Analyze every protein of an organism, page by page.

        Pagination ends when a page carries no next cursor or returns fewer
        proteins than the page size.

        Args:
            organism_id: NCBI taxonomy ID
            cancel_event: Checked before every page fetch
            on_progress: Called after every page and on completion

        Returns:
            BatchResult with all rows in page order, then within-page order,
            then N/O/P site order

        Raises:
            BatchCancelled: cancel_event was set; rows discarded
            BatchAborted: Unrecoverable source failure; rows discarded
        """
        self._start()
        rows: list[SiteAnnotation] = []
        cursor: str | None = None
        started = time.monotonic()

        logger.info(
            "batch_start",
            organism=organism_id,
            page_size=self.page_size,
        )

        try:
            while True:
                if cancel_event is not None and cancel_event.is_set():
                    raise BatchCancelled(
                        f"Batch run for organism {organism_id} cancelled after "
                        f"{self.processed_count} proteins"
                    )

                page = self.source.fetch_page(organism_id, self.page_size, cursor)
                self.page_count += 1
                self._analyze_chunk(page.proteins, rows)
                self._update_progress(page.total)

                logger.info(
                    "batch_progress",
                    page=self.page_count,
                    processed=self.processed_count,
                    total=self.estimated_total,
                    percent=round(self.progress, 1),
                    rows=len(rows),
                )
                if on_progress is not None:
                    on_progress(self._snapshot())

                if page.next_cursor is None or len(page.proteins) < self.page_size:
                    break
                cursor = page.next_cursor

        except BatchCancelled as e:
            self._fail(str(e))
            logger.warning("batch_cancelled", processed=self.processed_count)
            raise
        except (TransientSourceError, MalformedPage) as e:
            message = (
                f"Batch run for organism {organism_id} failed on page "
                f"{self.page_count + 1}: {e}"
            )
            self._fail(message)
            logger.error("batch_aborted", error=str(e), processed=self.processed_count)
            raise BatchAborted(message) from e
        except Exception as e:
            self._fail(str(e))
            raise

        self._complete(on_progress)
        elapsed = time.monotonic() - started

        logger.info(
            "batch_complete",
            organism=organism_id,
            processed=self.processed_count,
            skipped=self.skipped_count,
            rows=len(rows),
            pages=self.page_count,
            elapsed_seconds=round(elapsed, 2),
        )

        return BatchResult(
            rows=rows,
            processed=self.processed_count,
            skipped=self.skipped_count,
            pages=self.page_count,
            elapsed_seconds=elapsed,
            organism_id=organism_id,
        )

    def run_proteins(
        self,
        proteins: list[Protein],
        on_progress: ProgressCallback | None = None,
    ) -> BatchResult:
        """Analyze an in-memory protein list (e.g. parsed FASTA) in one step."""
        self._start()
        self.estimated_total = max(1, len(proteins))
        rows: list[SiteAnnotation] = []
        started = time.monotonic()

        try:
            self._analyze_chunk(proteins, rows)
        except Exception as e:
            self._fail(str(e))
            raise

        self._complete(on_progress)
        elapsed = time.monotonic() - started

        logger.info(
            "batch_complete",
            processed=self.processed_count,
            skipped=self.skipped_count,
            rows=len(rows),
        )

        return BatchResult(
            rows=rows,
            processed=self.processed_count,
            skipped=self.skipped_count,
            pages=0,
            elapsed_seconds=elapsed,
        )
