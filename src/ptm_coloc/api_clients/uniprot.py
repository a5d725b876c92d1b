"""UniProt REST client: single-gene lookup and cursor-paginated proteome listing."""

import re
from typing import Any
from urllib.parse import parse_qs, urlparse

import httpx
import structlog
from pydantic import ValidationError
from tenacity import (
    Retrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_fixed,
)

from ptm_coloc.analysis.models import DisulfideRange, Protein, UNKNOWN_SPECIES
from ptm_coloc.api_clients.base import ProteinPage
from ptm_coloc.config.schema import PipelineConfig
from ptm_coloc.exceptions import MalformedPage, NotFound, TransientSourceError

logger = structlog.get_logger()

# UniProt REST API base URL
UNIPROT_API_BASE = "https://rest.uniprot.org"

# Fields needed to rebuild a Protein record
UNIPROT_FIELDS = (
    "accession,gene_names,length,sequence,"
    "ft_disulfid,ft_carbohyd,ft_mod_res,organism_name"
)

_NEXT_LINK_RE = re.compile(r'<([^>]+)>\s*;\s*rel="next"')


def _feature_span(feature: dict[str, Any]) -> tuple[int | None, int | None]:
    location = feature.get("location") or {}
    start = (location.get("start") or {}).get("value")
    end = (location.get("end") or {}).get("value")
    return start, end


def _decode_entry(entry: dict[str, Any], accession: str) -> Protein:
    sequence_info = entry.get("sequence") or {}
    sequence = sequence_info.get("value") or ""
    length = sequence_info.get("length")
    if length is None:
        length = len(sequence)

    organism = entry.get("organism") or {}
    scientific_name = organism.get("scientificName") or UNKNOWN_SPECIES

    gene = accession
    genes = entry.get("genes") or []
    if genes and genes[0].get("geneName"):
        gene = genes[0]["geneName"].get("value") or accession

    ss_bonds = []
    ss_bond_ranges = []
    n_linked = []
    o_linked = []
    phosphorylation = []

    for feature in entry.get("features") or []:
        start, end = _feature_span(feature)
        if start is None:
            continue

        feature_type = feature.get("type")
        description = feature.get("description") or ""

        if feature_type == "Disulfide bond":
            ss_bonds.append(start)
            ss_bond_ranges.append(DisulfideRange(start=start, end=end if end is not None else start))
        elif feature_type == "Glycosylation":
            if "N-linked" in description:
                n_linked.append(start)
            elif "O-linked" in description:
                o_linked.append(start)
        elif feature_type == "Modified residue":
            if "phospho" in description.lower():
                phosphorylation.append(start)

    return Protein(
        accession=accession,
        gene=gene,
        scientific_name=scientific_name,
        length=length,
        sequence=sequence,
        ss_bonds=ss_bonds,
        ss_bond_ranges=ss_bond_ranges,
        n_linked=n_linked,
        o_linked=o_linked,
        phosphorylation=phosphorylation,
    )


def parse_uniprot_entry(entry: Any) -> Protein:
    """Convert a UniProt search result entry into a Protein record.

    Disulfide bond features populate both ss_bonds (start residue) and
    ss_bond_ranges. Glycosylation features are split on their N-linked /
    O-linked description; modified residues mentioning "phospho" become
    phosphorylation sites. Features with unknown positions are skipped.

    Raises:
        MalformedPage: If the entry is not an object, has no primary
                       accession, or has fields of the wrong shape
    """
    if not isinstance(entry, dict):
        raise MalformedPage(f"UniProt entry is not an object: {entry!r:.80}")

    accession = entry.get("primaryAccession")
    if not accession:
        raise MalformedPage("UniProt entry without primaryAccession")

    try:
        return _decode_entry(entry, accession)
    except (ValidationError, TypeError, AttributeError) as e:
        raise MalformedPage(f"UniProt entry {accession} could not be decoded: {e}") from e


def parse_next_cursor(link_header: str | None) -> str | None:
    """Extract the cursor token from a Link header's rel="next" URL."""
    if not link_header:
        return None
    match = _NEXT_LINK_RE.search(link_header)
    if not match:
        return None
    cursors = parse_qs(urlparse(match.group(1)).query).get("cursor")
    return cursors[0] if cursors else None


def _error_details(response: httpx.Response) -> str:
    """Best-effort error description from a UniProt error body."""
    try:
        body = response.json()
    except ValueError:
        return response.reason_phrase or ""
    messages = body.get("messages") if isinstance(body, dict) else None
    if messages:
        return ", ".join(str(m) for m in messages)
    return response.reason_phrase or ""


class UniProtClient:
    """
    UniProtKB search client.

    Every request goes through a fixed-delay retry loop on transient
    failures. A lookup that returns no results raises NotFound immediately
    and is never retried.
    """

    def __init__(
        self,
        base_url: str = UNIPROT_API_BASE,
        reference_organism_id: str = "9606",
        max_retries: int = 2,
        retry_delay: float = 1.0,
        timeout: float = 30.0,
    ):
        """
        Initialize the client.

        Args:
            base_url: UniProt REST API base URL
            reference_organism_id: Organism used by fetch_one
            max_retries: Additional attempts after the first transient failure
            retry_delay: Seconds to wait between attempts
            timeout: Per-request timeout in seconds
        """
        self.base_url = base_url.rstrip("/")
        self.reference_organism_id = reference_organism_id
        self.max_retries = max_retries
        self.retry_delay = retry_delay
        self.timeout = timeout

    @classmethod
    def from_config(cls, config: PipelineConfig) -> "UniProtClient":
        return cls(
            base_url=config.api.base_url,
            reference_organism_id=config.reference_organism_id,
            max_retries=config.api.max_retries,
            retry_delay=config.api.retry_delay_seconds,
            timeout=config.api.timeout_seconds,
        )

    @property
    def search_url(self) -> str:
        return f"{self.base_url}/uniprotkb/search"

    def _log_retry(self, retry_state) -> None:
        logger.warning(
            "uniprot_retry",
            attempt=retry_state.attempt_number,
            max_attempts=self.max_retries + 1,
            delay=self.retry_delay,
            error=str(retry_state.outcome.exception()),
        )

    def _with_retry(self, fn, *args, **kwargs):
        retrying = Retrying(
            stop=stop_after_attempt(self.max_retries + 1),
            wait=wait_fixed(self.retry_delay),
            retry=retry_if_exception_type(TransientSourceError),
            before_sleep=self._log_retry,
            reraise=True,
        )
        return retrying(fn, *args, **kwargs)

    def _search(self, params: dict[str, Any]) -> httpx.Response:
        """Issue one search request, mapping transport and HTTP failures."""
        try:
            with httpx.Client(timeout=self.timeout) as client:
                response = client.get(self.search_url, params=params)
                response.raise_for_status()
                return response
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            raise TransientSourceError(
                f"UniProt API error ({status}): {_error_details(e.response)}",
                status_code=status,
            ) from e
        except httpx.TransportError as e:
            raise TransientSourceError(f"UniProt request failed: {e}") from e

    @staticmethod
    def _results(response: httpx.Response) -> list[dict[str, Any]]:
        try:
            data = response.json()
        except ValueError as e:
            raise MalformedPage(f"UniProt response is not JSON: {e}") from e
        results = data.get("results") if isinstance(data, dict) else None
        if not isinstance(results, list):
            raise MalformedPage("UniProt response has no results list")
        return results

    def _fetch_one_once(self, gene: str) -> Protein:
        query = (
            f'(gene_exact:"{gene}") AND '
            f"(organism_id:{self.reference_organism_id}) AND (reviewed:true)"
        )
        response = self._search({
            "query": query,
            "fields": UNIPROT_FIELDS,
            "format": "json",
            "size": 1,
        })
        results = self._results(response)
        if not results:
            raise NotFound(gene, self.reference_organism_id)
        return parse_uniprot_entry(results[0])

    def fetch_one(self, gene: str) -> Protein:
        """
        Look up the reviewed reference-organism entry for a gene symbol.

        Args:
            gene: Gene symbol (surrounding whitespace ignored)

        Returns:
            Protein record

        Raises:
            NotFound: No matching entry (raised on the first attempt)
            TransientSourceError: All attempts failed
            MalformedPage: Response body could not be decoded
        """
        gene = gene.strip()
        if not gene:
            raise ValueError("Gene symbol must not be empty")

        logger.info("uniprot_fetch_one_start", gene=gene, organism=self.reference_organism_id)
        protein = self._with_retry(self._fetch_one_once, gene)
        logger.info(
            "uniprot_fetch_one_complete",
            gene=gene,
            accession=protein.accession,
            length=protein.length,
        )
        return protein

    def _fetch_page_once(
        self,
        organism_id: str,
        page_size: int,
        cursor: str | None,
    ) -> ProteinPage:
        params = {
            "query": f"(organism_id:{organism_id}) AND (reviewed:true)",
            "fields": UNIPROT_FIELDS,
            "format": "json",
            "size": page_size,
        }
        if cursor:
            params["cursor"] = cursor

        response = self._search(params)
        results = self._results(response)

        total_header = response.headers.get("x-total-results")
        try:
            total = int(total_header) if total_header else None
        except ValueError:
            total = None

        return ProteinPage(
            proteins=[parse_uniprot_entry(entry) for entry in results],
            total=total,
            next_cursor=parse_next_cursor(response.headers.get("link")),
        )

    def fetch_page(
        self,
        organism_id: str,
        page_size: int,
        cursor: str | None = None,
    ) -> ProteinPage:
        """
        Fetch one page of reviewed entries for an organism.

        Args:
            organism_id: NCBI taxonomy ID
            page_size: Entries per page
            cursor: Continuation token from the previous page

        Returns:
            ProteinPage with the total from x-total-results and the
            cursor from the Link header (None on the last page)

        Raises:
            TransientSourceError: All attempts failed
            MalformedPage: Response body could not be decoded
        """
        logger.debug("uniprot_page_start", organism=organism_id, cursor=cursor)
        return self._with_retry(self._fetch_page_once, organism_id, page_size, cursor)
