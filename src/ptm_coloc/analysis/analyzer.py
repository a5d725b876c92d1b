"""Per-protein co-localization analysis.

Computes the four density curves (SS, N-linked, O-linked, phospho), derives
the high-density zone mask from SS and N-linked only, and annotates every
modification site. Everything is recomputed from the protein and the
calibration passed in; nothing is cached between calls.
"""

import numpy as np
import polars as pl
import structlog

from ptm_coloc.analysis.calibration import CalibrationParameters
from ptm_coloc.analysis.density import density
from ptm_coloc.analysis.models import (
    DensityCurves,
    Protein,
    ProteinSummary,
    Region,
    SiteAnnotation,
    SiteType,
)
from ptm_coloc.analysis.zones import extract_regions, in_disulfide_range, zone_mask
from ptm_coloc.exceptions import InvalidProtein

logger = structlog.get_logger()

# Row order of analyze_protein output; downstream reports rely on it
SITE_TYPE_ORDER = (SiteType.N_LINKED, SiteType.O_LINKED, SiteType.PHOSPHO)

PROFILE_COLUMNS = [
    "Scientific_Name",
    "Position",
    "Amino_Acid",
    "SS_Density",
    "N_Linked_Density",
    "O_Linked_Density",
    "Phospho_Density",
    "Is_HighDensity_Zone",
]


def validate_protein(protein: Protein) -> None:
    """Raise InvalidProtein if the record is structurally inconsistent."""
    if protein.length < 0:
        raise InvalidProtein(protein.accession, f"negative length {protein.length}")
    if protein.sequence and len(protein.sequence) != protein.length:
        raise InvalidProtein(
            protein.accession,
            f"sequence has {len(protein.sequence)} residues but length is {protein.length}",
        )


def compute_densities(protein: Protein, params: CalibrationParameters) -> DensityCurves:
    """Compute SS, N-linked, O-linked and phospho curves plus the zone mask.

    O-linked and phospho curves are reported but never feed the zone mask.
    """
    validate_protein(protein)
    length = protein.length
    ss, glyco, phospho = params.ss, params.glyco, params.phospho

    ss_density = density(protein.ss_bonds, length, ss.window_size, ss.smoothing)
    n_density = density(protein.n_linked, length, glyco.window_size, glyco.smoothing)
    o_density = density(protein.o_linked, length, glyco.window_size, glyco.smoothing)
    p_density = density(
        protein.phosphorylation, length, phospho.window_size, phospho.smoothing
    )

    mask = zone_mask(ss_density, ss.threshold, n_density, glyco.threshold)

    return DensityCurves(
        ss=ss_density,
        n_linked=n_density,
        o_linked=o_density,
        phospho=p_density,
        zone_mask=mask,
    )


def _annotate_sites(
    protein: Protein,
    site_type: SiteType,
    mask: np.ndarray,
) -> list[SiteAnnotation]:
    rows = []
    for pos in protein.sites(site_type):
        # Out-of-range positions are a data-quality issue, not fatal
        in_zone = 1 <= pos <= len(mask) and bool(mask[pos - 1])
        rows.append(SiteAnnotation(
            gene=protein.gene,
            accession=protein.accession,
            scientific_name=protein.scientific_name,
            glycosite=f"{site_type.code}{pos}",
            type=site_type,
            in_uniprot_disulfide=in_disulfide_range(pos, protein.ss_bond_ranges),
            in_high_density_zone=in_zone,
        ))
    return rows


def analyze_protein(
    protein: Protein,
    params: CalibrationParameters,
) -> list[SiteAnnotation]:
    """
    Annotate every modification site of a protein.

    Args:
        protein: Protein record
        params: Calibration to apply

    Returns:
        All N-linked rows, then O-linked, then phospho, each in input order

    Raises:
        InvalidProtein: If length is negative or disagrees with the sequence
    """
    curves = compute_densities(protein, params)

    rows = []
    for site_type in SITE_TYPE_ORDER:
        rows.extend(_annotate_sites(protein, site_type, curves.zone_mask))

    out_of_range = sum(
        1 for site_type in SITE_TYPE_ORDER
        for pos in protein.sites(site_type)
        if not 1 <= pos <= protein.length
    )
    if out_of_range:
        logger.warning(
            "sites_out_of_range",
            accession=protein.accession,
            length=protein.length,
            count=out_of_range,
        )

    return rows


def find_colocalization_regions(
    protein: Protein,
    params: CalibrationParameters,
    curves: DensityCurves | None = None,
) -> list[Region]:
    if curves is None:
        curves = compute_densities(protein, params)
    return extract_regions(curves.zone_mask)


def density_profile(
    protein: Protein,
    params: CalibrationParameters,
    curves: DensityCurves | None = None,
) -> pl.DataFrame:
    """Build the per-residue density table for a single protein.

    Pass precomputed curves to reuse them across summary, regions and
    profile for the same calibration.

    Returns:
        DataFrame with PROFILE_COLUMNS, one row per residue. Amino_Acid is
        "-" where the sequence is unknown.
    """
    if curves is None:
        curves = compute_densities(protein, params)
    length = protein.length

    if protein.sequence:
        residues = list(protein.sequence)
    else:
        residues = ["-"] * length

    return pl.DataFrame(
        {
            "Scientific_Name": [protein.scientific_name] * length,
            "Position": np.arange(1, length + 1, dtype=np.int64),
            "Amino_Acid": residues,
            "SS_Density": curves.ss,
            "N_Linked_Density": curves.n_linked,
            "O_Linked_Density": curves.o_linked,
            "Phospho_Density": curves.phospho,
            "Is_HighDensity_Zone": curves.zone_mask,
        },
        schema={
            "Scientific_Name": pl.String,
            "Position": pl.Int64,
            "Amino_Acid": pl.String,
            "SS_Density": pl.Float64,
            "N_Linked_Density": pl.Float64,
            "O_Linked_Density": pl.Float64,
            "Phospho_Density": pl.Float64,
            "Is_HighDensity_Zone": pl.Boolean,
        },
    )


def summarize_protein(
    protein: Protein,
    params: CalibrationParameters,
    curves: DensityCurves | None = None,
) -> ProteinSummary:
    if curves is None:
        curves = compute_densities(protein, params)
    regions = extract_regions(curves.zone_mask)

    return ProteinSummary(
        accession=protein.accession,
        gene=protein.gene,
        scientific_name=protein.scientific_name,
        length=protein.length,
        ss_bond_count=len(protein.ss_bonds),
        n_linked_count=len(protein.n_linked),
        o_linked_count=len(protein.o_linked),
        phospho_count=len(protein.phosphorylation),
        region_count=len(regions),
        zone_residues=int(curves.zone_mask.sum()),
    )
