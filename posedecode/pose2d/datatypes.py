from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, NamedTuple, Tuple

import numpy as np


# Keypoint emitted for a channel whose peak is below threshold
ABSENT_KEYPOINT: Tuple[float, float] = (-1.0, -1.0)


class ImageSize(NamedTuple):
    width: int
    height: int


class Peak(NamedTuple):
    row: int
    col: int
    score: float


@dataclass(frozen=True)
class Skeleton:
    """
    Single-person skeleton decoded from one heatmap.

    keypoints[c] is (x, y) in original-image pixels, or ABSENT_KEYPOINT.
    confidences[c] is the channel's max score, stored even when absent.
    bones holds the topology pairs whose two endpoints were both detected.
    """
    keypoints: List[Tuple[float, float]]
    confidences: List[float]
    bones: List[Tuple[int, int]] = field(default_factory=list)
    image_width: int = 0
    image_height: int = 0

    @property
    def num_joints(self) -> int:
        return len(self.keypoints)

    @property
    def detected(self) -> List[bool]:
        return [kp != ABSENT_KEYPOINT for kp in self.keypoints]

    @property
    def image_size(self) -> ImageSize:
        return ImageSize(self.image_width, self.image_height)

    def as_arrays(self) -> Tuple[np.ndarray, np.ndarray]:
        """Returns (kpts (C,2) float32, conf (C,) float32)."""
        kpts = np.asarray(self.keypoints, dtype=np.float32).reshape(-1, 2)
        conf = np.asarray(self.confidences, dtype=np.float32).reshape(-1)
        return kpts, conf


@dataclass
class SkeletonSequence:
    """
    Skeletons for a run of frames, stacked for persistence.
    """
    t: np.ndarray          # (T,)
    frame_idx: np.ndarray  # (T,)
    kpts: np.ndarray       # (T, C, 2) in pixel coords, -1 where absent
    conf: np.ndarray       # (T, C) per-channel max score
    detected: np.ndarray   # (T, C) bool
    bones: np.ndarray      # (B, 2) topology
    bone_mask: np.ndarray  # (T, B) bool, bone emitted in that frame
    image_size: tuple[int, int]  # (W,H)
    joint_names: list[str]

    def skeleton_at(self, row: int) -> Skeleton:
        kpts = [(float(x), float(y)) for x, y in self.kpts[row].tolist()]
        bones = [
            (int(a), int(b))
            for (a, b), keep in zip(self.bones.tolist(), self.bone_mask[row].tolist())
            if keep
        ]
        return Skeleton(
            keypoints=kpts,
            confidences=[float(c) for c in self.conf[row].tolist()],
            bones=bones,
            image_width=int(self.image_size[0]),
            image_height=int(self.image_size[1]),
        )
