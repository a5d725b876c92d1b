"""Sliding-window site density with optional moving-average smoothing.

Both passes use prefix sums, so the cost is linear in sequence length
regardless of window width. This runs four times per protein in batch mode.
"""

from typing import Iterable

import numpy as np


def _window_bounds(length: int, radius: int) -> tuple[np.ndarray, np.ndarray]:
    """Inclusive [lo, hi] index bounds of a centered window clipped to the sequence."""
    idx = np.arange(length)
    lo = np.maximum(0, idx - radius)
    hi = np.minimum(length - 1, idx + radius)
    return lo, hi


def raw_density(positions: Iterable[int], length: int, window_size: int) -> np.ndarray:
    """Count sites within a clipped window around each residue.

    Args:
        positions: 1-based site positions
        length: Sequence length
        window_size: Window width; each side extends floor(window_size / 2)

    Returns:
        float64 array of counts, one per residue
    """
    if length <= 0:
        return np.zeros(0, dtype=np.float64)

    pos = np.fromiter((int(p) for p in positions), dtype=np.int64)
    # Sites outside the sequence can never fall in a clipped window
    pos = pos[(pos >= 1) & (pos <= length)] - 1

    counts = np.bincount(pos, minlength=length)
    prefix = np.concatenate(([0], np.cumsum(counts)))

    lo, hi = _window_bounds(length, int(window_size) // 2)
    return (prefix[hi + 1] - prefix[lo]).astype(np.float64)


def smooth(values: np.ndarray, smoothing: float) -> np.ndarray:
    """Centered moving average over the valid neighbours of each index.

    Edges average fewer samples rather than being padded with zeros.
    """
    radius = int(np.floor(smoothing))
    length = len(values)
    if radius <= 0 or length == 0:
        return values

    prefix = np.concatenate(([0.0], np.cumsum(values, dtype=np.float64)))
    lo, hi = _window_bounds(length, radius)
    return (prefix[hi + 1] - prefix[lo]) / (hi - lo + 1)


def density(
    positions: Iterable[int],
    length: int,
    window_size: int,
    smoothing: float = 0,
) -> np.ndarray:
    """
    Compute the density curve for a set of site positions.

    Args:
        positions: 1-based site positions
        length: Sequence length (0 yields an empty curve)
        window_size: Raw counting window width
        smoothing: Moving-average radius applied to the raw counts (0 = off)

    Returns:
        Array of length ``length``. With smoothing 0 the values are the
        exact integer counts.
    """
    raw = raw_density(positions, length, window_size)
    if smoothing > 0:
        return smooth(raw, smoothing)
    return raw
