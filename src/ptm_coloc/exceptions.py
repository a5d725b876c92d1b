"""Error taxonomy for lookup, analysis and batch ingestion failures."""


class PtmColocError(Exception):
    """Base class for all ptm-coloc errors."""


class NotFound(PtmColocError):
    """A lookup yielded no match. Terminal: never retried."""

    def __init__(self, query: str, organism_id: str | None = None):
        self.query = query
        self.organism_id = organism_id
        where = f" (organism {organism_id})" if organism_id else ""
        super().__init__(f'No protein found for "{query}"{where}')


class TransientSourceError(PtmColocError):
    """Network or service failure talking to the protein source.

    Retried with a bounded number of attempts, then surfaced.
    """

    def __init__(self, message: str, status_code: int | None = None):
        self.status_code = status_code
        super().__init__(message)


class MalformedPage(PtmColocError):
    """A page body could not be decoded into protein records."""


class InvalidProtein(PtmColocError):
    """Structural inconsistency in a protein record."""

    def __init__(self, accession: str, reason: str):
        self.accession = accession
        self.reason = reason
        super().__init__(f"Invalid protein {accession}: {reason}")


class DimensionMismatch(PtmColocError):
    """Two density curves that must align have different lengths."""


class BatchAborted(PtmColocError):
    """A batch run failed; accumulated rows were discarded."""


class BatchCancelled(PtmColocError):
    """A batch run was cancelled; accumulated rows were discarded."""
