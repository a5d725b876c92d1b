"""Protein source clients."""

from ptm_coloc.api_clients.base import ProteinPage, ProteinSource
from ptm_coloc.api_clients.uniprot import (
    UNIPROT_API_BASE,
    UNIPROT_FIELDS,
    UniProtClient,
    parse_next_cursor,
    parse_uniprot_entry,
)

__all__ = [
    "ProteinPage",
    "ProteinSource",
    "UNIPROT_API_BASE",
    "UNIPROT_FIELDS",
    "UniProtClient",
    "parse_next_cursor",
    "parse_uniprot_entry",
]
