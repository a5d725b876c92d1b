"""Data models for proteins, co-localization regions and site annotations."""

from enum import Enum
from typing import NamedTuple

import numpy as np
from pydantic import BaseModel, ConfigDict, Field

# Placeholder organism for records whose source does not carry one
UNKNOWN_SPECIES = "Unknown Species"


class SiteType(str, Enum):
    """Modification type of an annotated site, with its single-letter code."""

    N_LINKED = "N-Linked"
    O_LINKED = "O-Linked"
    PHOSPHO = "Phospho"

    @property
    def code(self) -> str:
        return _SITE_CODES[self]


_SITE_CODES = {
    SiteType.N_LINKED: "N",
    SiteType.O_LINKED: "O",
    SiteType.PHOSPHO: "P",
}


class DisulfideRange(BaseModel):
    """Known disulfide-bonded segment, 1-based inclusive."""

    model_config = ConfigDict(frozen=True)

    start: int
    end: int

    def contains(self, position: int) -> bool:
        return self.start <= position <= self.end


class Protein(BaseModel):
    """Immutable protein record with its modification sites.

    Produced once by a decoder (UniProt entry parser or FASTA motif scanner)
    and never mutated afterwards.

    Attributes:
        accession: UniProt accession (or FASTA header prefix)
        gene: Gene symbol
        scientific_name: Organism scientific name
        length: Sequence length in residues
        sequence: Amino-acid sequence (empty for database-only records)
        ss_bonds: 1-based positions of disulfide-bonded cysteines
        ss_bond_ranges: Known disulfide-bonded segments (empty when unknown)
        n_linked: 1-based N-linked glycosylation positions
        o_linked: 1-based O-linked glycosylation positions
        phosphorylation: 1-based phosphorylation positions

    Structural consistency (length vs. sequence) is checked by the analyzer,
    not here, so a batch can skip a bad record instead of failing to decode.
    """

    model_config = ConfigDict(frozen=True)

    accession: str
    gene: str
    scientific_name: str = UNKNOWN_SPECIES
    length: int
    sequence: str = ""
    ss_bonds: tuple[int, ...] = ()
    ss_bond_ranges: tuple[DisulfideRange, ...] = ()
    n_linked: tuple[int, ...] = ()
    o_linked: tuple[int, ...] = ()
    phosphorylation: tuple[int, ...] = ()

    def sites(self, site_type: SiteType) -> tuple[int, ...]:
        """Return the position list for a modification type."""
        if site_type is SiteType.N_LINKED:
            return self.n_linked
        if site_type is SiteType.O_LINKED:
            return self.o_linked
        return self.phosphorylation


class Region(BaseModel):
    """Maximal contiguous co-localization run, 1-based inclusive."""

    model_config = ConfigDict(frozen=True)

    start: int = Field(..., ge=1)
    end: int = Field(..., ge=1)

    @property
    def length(self) -> int:
        return self.end - self.start + 1


class SiteAnnotation(BaseModel):
    """One report row: a modification site and its structural context."""

    model_config = ConfigDict(frozen=True)

    gene: str
    accession: str
    scientific_name: str
    glycosite: str
    type: SiteType
    in_uniprot_disulfide: bool
    in_high_density_zone: bool


class DensityCurves(NamedTuple):
    """All per-residue curves computed for one protein under one calibration."""

    ss: np.ndarray
    n_linked: np.ndarray
    o_linked: np.ndarray
    phospho: np.ndarray
    zone_mask: np.ndarray


class ProteinSummary(BaseModel):
    """Headline counts for a single analyzed protein."""

    accession: str
    gene: str
    scientific_name: str
    length: int
    ss_bond_count: int
    n_linked_count: int
    o_linked_count: int
    phospho_count: int
    region_count: int
    zone_residues: int

    @property
    def zone_fraction(self) -> float:
        if self.length <= 0:
            return 0.0
        return self.zone_residues / self.length
