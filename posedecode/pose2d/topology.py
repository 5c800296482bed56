from __future__ import annotations

from typing import List, Sequence, Tuple


# Channel order of a COCO-17 single-person heatmap network.
# The channel -> joint mapping is a convention of the trained model; check it
# against the model's metadata before relying on the names.
COCO17_JOINT_NAMES = [
    "nose",
    "left_eye", "right_eye",
    "left_ear", "right_ear",
    "left_shoulder", "right_shoulder",
    "left_elbow", "right_elbow",
    "left_wrist", "right_wrist",
    "left_hip", "right_hip",
    "left_knee", "right_knee",
    "left_ankle", "right_ankle",
]

COCO17_BONE_NAMES = [
    ("left_ankle", "left_knee"),
    ("left_knee", "left_hip"),
    ("right_ankle", "right_knee"),
    ("right_knee", "right_hip"),
    ("left_hip", "right_hip"),
    ("left_shoulder", "left_hip"),
    ("right_shoulder", "right_hip"),
    ("left_shoulder", "right_shoulder"),
    ("left_shoulder", "left_elbow"),
    ("right_shoulder", "right_elbow"),
    ("left_elbow", "left_wrist"),
    ("right_elbow", "right_wrist"),
    ("left_eye", "right_eye"),
    ("nose", "left_eye"),
    ("nose", "right_eye"),
    ("left_eye", "left_ear"),
    ("right_eye", "right_ear"),
    ("left_ear", "left_shoulder"),
    ("right_ear", "right_shoulder"),
]


def bones_from_names(
    names: Sequence[str],
    pairs: Sequence[Tuple[str, str]],
) -> List[Tuple[int, int]]:
    """
    Turn named joint pairs into channel-index pairs.
    Pairs naming a joint that is not in `names` are skipped.
    """
    name_to_i = {n: i for i, n in enumerate(names)}

    edges = []
    for a, b in pairs:
        if a in name_to_i and b in name_to_i:
            edges.append((name_to_i[a], name_to_i[b]))
    return edges


COCO17_BONES = tuple(bones_from_names(COCO17_JOINT_NAMES, COCO17_BONE_NAMES))
