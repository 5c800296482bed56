from __future__ import annotations

from pathlib import Path
from typing import Any, Dict

import numpy as np

from posedecode.pose2d.datatypes import SkeletonSequence


def save_npz_compressed(path: str | Path, **arrays: Any) -> None:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    np.savez_compressed(str(path), **arrays)


def load_npz(path: str | Path) -> Dict[str, Any]:
    data = np.load(str(path), allow_pickle=True)
    return {k: data[k] for k in data.files}


def save_skeleton_sequence(path: str | Path, seq: SkeletonSequence, **extra: Any) -> None:
    save_npz_compressed(
        path,
        t=seq.t,
        frame_idx=seq.frame_idx,
        kpts=seq.kpts,
        conf=seq.conf,
        detected=seq.detected,
        bones=seq.bones,
        bone_mask=seq.bone_mask,
        image_size=np.array(seq.image_size, dtype=np.int32),
        joint_names=np.array(seq.joint_names, dtype=object),
        **extra,
    )


def load_skeleton_sequence(path: str | Path) -> SkeletonSequence:
    data = load_npz(path)
    for key in ("kpts", "conf", "detected", "bones", "bone_mask", "image_size"):
        if key not in data:
            raise KeyError(f"{path} is not a skeleton file: missing '{key}'")

    T = data["kpts"].shape[0]
    image_size = data["image_size"].astype(int).tolist()
    return SkeletonSequence(
        t=data.get("t", np.zeros((T,), dtype=np.float32)),
        frame_idx=data.get("frame_idx", np.arange(T, dtype=np.int32)),
        kpts=data["kpts"],
        conf=data["conf"],
        detected=data["detected"].astype(bool),
        bones=data["bones"].astype(np.int32).reshape(-1, 2),
        bone_mask=data["bone_mask"].astype(bool),
        image_size=(int(image_size[0]), int(image_size[1])),
        joint_names=[str(x) for x in data.get("joint_names", np.array([], dtype=object)).tolist()],
    )
