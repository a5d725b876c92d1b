"""Collaborator contracts for protein sources used by the analysis pipeline."""

from dataclasses import dataclass, field
from typing import Protocol

from ptm_coloc.analysis.models import Protein


@dataclass
class ProteinPage:
    """One page of a cursor-paginated protein listing.

    Attributes:
        proteins: Decoded protein records, in source order
        total: Total result count reported by the source (None if unknown)
        next_cursor: Opaque token for the next page (None at end of results)
    """
    proteins: list[Protein] = field(default_factory=list)
    total: int | None = None
    next_cursor: str | None = None


class ProteinSource(Protocol):
    """Anything that can look up single proteins and page through a proteome."""

    def fetch_one(self, gene: str) -> Protein:
        """Return the reference-organism protein for a gene symbol.

        Raises:
            NotFound: No match (terminal)
            TransientSourceError: Failure persisted through all retries
        """
        ...

    def fetch_page(
        self,
        organism_id: str,
        page_size: int,
        cursor: str | None = None,
    ) -> ProteinPage:
        """Return one page of proteins for an organism.

        Raises:
            TransientSourceError: Failure persisted through all retries
            MalformedPage: Response could not be decoded
        """
        ...
