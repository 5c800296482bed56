from __future__ import annotations

from typing import List

import numpy as np

from posedecode.pose2d.datatypes import Peak
from posedecode.pose2d.heatmap import HeatmapBuffer

FLT_MAX = float(np.finfo(np.float32).max)

# Reported for a plane where no pixel beats -FLT_MAX (all NaN / -inf)
NO_PEAK = Peak(-1, -1, -FLT_MAX)


def _masked(scores: np.ndarray) -> np.ndarray:
    # NaN never compares greater than anything, so it can never be the peak
    return np.where(np.isnan(scores), -np.inf, scores)


def find_peak(plane: np.ndarray) -> Peak:
    """
    Locate the max-score pixel of one (H, W) channel plane.

    Ties go to the first pixel in row-major order (lowest row, then lowest
    column), which is what np.argmax returns on the flattened plane.
    """
    plane = np.asarray(plane, dtype=np.float32)
    if plane.ndim != 2 or plane.size == 0:
        raise ValueError(f"Expected a non-empty (H, W) plane, got {plane.shape}")

    W = plane.shape[1]
    flat = _masked(plane.reshape(-1))
    idx = int(np.argmax(flat))
    score = float(flat[idx])
    if not score > -FLT_MAX:
        return NO_PEAK

    row, col = divmod(idx, W)
    return Peak(row, col, score)


def find_peaks(heatmap: HeatmapBuffer) -> List[Peak]:
    """
    One Peak per channel, same result as calling find_peak on every plane.
    """
    C, W = heatmap.channels, heatmap.width
    flat = _masked(heatmap.flat())
    idx = np.argmax(flat, axis=1)
    best = flat[np.arange(C), idx]

    peaks: List[Peak] = []
    for c in range(C):
        score = float(best[c])
        if not score > -FLT_MAX:
            peaks.append(NO_PEAK)
            continue
        row, col = divmod(int(idx[c]), W)
        peaks.append(Peak(row, col, score))
    return peaks
