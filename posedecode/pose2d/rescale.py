from __future__ import annotations

from typing import Tuple

from posedecode.pose2d.datatypes import ImageSize, Peak


def compute_scale_factors(
    image_size: ImageSize,
    heatmap_width: int,
    heatmap_height: int,
) -> Tuple[float, float]:
    """
    Returns (scale_w, scale_h) mapping heatmap pixels to original-image pixels.
    """
    scale_w = float(image_size.width) / heatmap_width
    scale_h = float(image_size.height) / heatmap_height
    return scale_w, scale_h


def needs_scaling(scale_w: float, scale_h: float) -> bool:
    return scale_w != 1.0 or scale_h != 1.0


def rescale_peak(peak: Peak, scale_w: float, scale_h: float) -> Tuple[float, float]:
    """
    (row, col) in heatmap space -> (x, y) in original-image space.
    """
    if not needs_scaling(scale_w, scale_h):
        return float(peak.col), float(peak.row)
    return peak.col * scale_w, peak.row * scale_h
