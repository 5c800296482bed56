from __future__ import annotations

from typing import List, Sequence, Tuple, Union

import numpy as np

from posedecode.errors import ConfigError
from posedecode.pose2d.datatypes import ABSENT_KEYPOINT, ImageSize, Skeleton
from posedecode.pose2d.heatmap import HeatmapBuffer
from posedecode.pose2d.peaks import NO_PEAK, find_peaks
from posedecode.pose2d.rescale import compute_scale_factors, rescale_peak


def is_detected(score: float, min_threshold: float) -> bool:
    # heatmap scores are float32; compare at that precision
    return bool(np.float32(score) >= np.float32(min_threshold))


def assemble_bones(
    topology: Sequence[Tuple[int, int]],
    detected: Sequence[bool],
) -> List[Tuple[int, int]]:
    """
    Keep the topology pairs whose two joints were detected, in topology order.
    """
    return [(a, b) for a, b in topology if detected[a] and detected[b]]


def check_topology(topology: Sequence[Tuple[int, int]], num_joints: int) -> None:
    for a, b in topology:
        if not (0 <= a < num_joints and 0 <= b < num_joints):
            raise ConfigError(
                f"Bone ({a}, {b}) references a joint outside the {num_joints} heatmap channels"
            )


def generate_skeleton(
    heatmap: Union[HeatmapBuffer, np.ndarray],
    image_size: ImageSize,
    min_threshold: float,
    topology: Sequence[Tuple[int, int]],
) -> Skeleton:
    """
    Decode a (C, H, W) heatmap into a Skeleton in original-image pixels.

    Parameters
    ----------
    heatmap : HeatmapBuffer or np.ndarray
        Per-joint score planes at network output resolution.
    image_size : ImageSize
        (width, height) of the image before it was resized for the network.
    min_threshold : float
        A channel counts as detected iff its max score >= min_threshold.
    topology : sequence of (a, b)
        Joint-index pairs; only pairs with both joints detected are emitted.

    Returns
    -------
    Skeleton
        len(keypoints) == len(confidences) == C.
    """
    if not isinstance(heatmap, HeatmapBuffer):
        heatmap = HeatmapBuffer(heatmap)
    image_size = ImageSize(*image_size)
    check_topology(topology, heatmap.channels)

    scale_w, scale_h = compute_scale_factors(image_size, heatmap.width, heatmap.height)

    keypoints: List[Tuple[float, float]] = []
    confidences: List[float] = []
    detected: List[bool] = []
    for peak in find_peaks(heatmap):
        if peak != NO_PEAK and is_detected(peak.score, min_threshold):
            keypoints.append(rescale_peak(peak, scale_w, scale_h))
            detected.append(True)
        else:
            keypoints.append(ABSENT_KEYPOINT)
            detected.append(False)
        confidences.append(peak.score)

    return Skeleton(
        keypoints=keypoints,
        confidences=confidences,
        bones=assemble_bones(topology, detected),
        image_width=int(image_size.width),
        image_height=int(image_size.height),
    )
