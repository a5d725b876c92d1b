"""Motif-derived protein records from FASTA text.

N-linked sites are predicted from the N-X-[S/T] sequon (X and the residue
after the S/T must not be proline); every cysteine is treated as a potential
disulfide site. No disulfide ranges, O-linked or phospho sites are derived.
"""

import io
import re
from pathlib import Path

import structlog
from Bio import SeqIO

from ptm_coloc.analysis.models import Protein

logger = structlog.get_logger()

FASTA_SPECIES = "Custom FASTA"

# Lookahead keeps overlapping sequons (e.g. NNST) distinct
N_GLYCOSYLATION_MOTIF = re.compile(r"N(?=[^P][ST][^P])")


def find_sequons(sequence: str) -> list[int]:
    """1-based positions of asparagines in N-X-[S/T] sequons."""
    return [m.start() + 1 for m in N_GLYCOSYLATION_MOTIF.finditer(sequence)]


def find_cysteines(sequence: str) -> list[int]:
    return [i + 1 for i, residue in enumerate(sequence) if residue == "C"]


def _gene_from_header(header: str) -> str:
    # sp|P02751|FINC_HUMAN Fibronectin ... -> FINC
    parts = header.split("|")
    if len(parts) >= 3:
        return parts[2].split(" ")[0].split("_")[0]
    return header[:14]


def parse_fasta(text: str) -> list[Protein]:
    """
    Parse FASTA text into motif-annotated Protein records.

    Args:
        text: FASTA-formatted text with one or more records

    Returns:
        Proteins in file order; records with empty sequences are dropped
    """
    proteins = []
    for record in SeqIO.parse(io.StringIO(text), "fasta"):
        sequence = str(record.seq).upper()
        if not sequence:
            continue

        header = record.description
        proteins.append(Protein(
            accession=header[:9],
            gene=_gene_from_header(header),
            scientific_name=FASTA_SPECIES,
            length=len(sequence),
            sequence=sequence,
            ss_bonds=find_cysteines(sequence),
            n_linked=find_sequons(sequence),
        ))

    logger.info("fasta_parse_complete", protein_count=len(proteins))
    return proteins


def read_fasta(path: Path | str) -> list[Protein]:
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"FASTA file not found: {path}")
    return parse_fasta(path.read_text())
