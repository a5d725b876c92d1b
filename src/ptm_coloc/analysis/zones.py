"""Co-localization zone detection and contiguous region extraction."""

from typing import Iterable

import numpy as np

from ptm_coloc.analysis.models import DisulfideRange, Region
from ptm_coloc.exceptions import DimensionMismatch


def zone_mask(
    ss_density: np.ndarray,
    ss_threshold: float,
    n_density: np.ndarray,
    glyco_threshold: float,
) -> np.ndarray:
    """Mark residues where both densities clear their own thresholds.

    Raises:
        DimensionMismatch: If the two curves differ in length
    """
    ss_density = np.asarray(ss_density)
    n_density = np.asarray(n_density)
    if ss_density.shape != n_density.shape:
        raise DimensionMismatch(
            f"SS density has {ss_density.shape[0]} residues, "
            f"N-linked density has {n_density.shape[0]}"
        )
    return (ss_density >= ss_threshold) & (n_density >= glyco_threshold)


def in_disulfide_range(position: int, ranges: Iterable[DisulfideRange]) -> bool:
    return any(r.contains(position) for r in ranges)


def extract_regions(mask: np.ndarray) -> list[Region]:
    """
    Convert a per-residue zone mask into contiguous regions.

    Operates on the full-resolution mask. A run covering 0-based indices
    [s, e) is reported as Region(start=s + 1, end=e), i.e. 1-based inclusive.

    Args:
        mask: Boolean array, one entry per residue

    Returns:
        Regions ordered by start, non-overlapping
    """
    mask = np.asarray(mask, dtype=bool)
    if mask.size == 0:
        return []

    # Pad with False on both sides so every run has a rising and falling edge
    padded = np.concatenate(([False], mask, [False])).astype(np.int8)
    edges = np.diff(padded)
    starts = np.flatnonzero(edges == 1)
    ends = np.flatnonzero(edges == -1)

    return [
        Region(start=int(s) + 1, end=int(e))
        for s, e in zip(starts, ends)
    ]


def regions_to_mask(regions: Iterable[Region], length: int) -> np.ndarray:
    """Rebuild a per-residue mask from regions (inverse of extract_regions)."""
    mask = np.zeros(length, dtype=bool)
    for region in regions:
        mask[region.start - 1:region.end] = True
    return mask
