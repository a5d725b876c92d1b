"""Offline protein sources."""

from ptm_coloc.sources.fasta import (
    FASTA_SPECIES,
    N_GLYCOSYLATION_MOTIF,
    find_cysteines,
    find_sequons,
    parse_fasta,
    read_fasta,
)

__all__ = [
    "FASTA_SPECIES",
    "N_GLYCOSYLATION_MOTIF",
    "find_cysteines",
    "find_sequons",
    "parse_fasta",
    "read_fasta",
]
