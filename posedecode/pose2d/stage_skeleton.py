from __future__ import annotations

from pathlib import Path
from typing import List, Optional, Sequence

import numpy as np

from posedecode.io.npz_io import load_npz, save_skeleton_sequence
from posedecode.io.video import get_video_info, iter_video_frames
from posedecode.pose2d.datatypes import Skeleton, SkeletonSequence
from posedecode.pose2d.detector import InferFn, SkeletonDetector


def stack_skeletons(
    skeletons: Sequence[Skeleton],
    bones: Sequence[Sequence[int]],
    t: Sequence[float],
    frame_idx: Sequence[int],
    joint_names: Optional[Sequence[str]] = None,
) -> SkeletonSequence:
    """
    Stack per-frame Skeletons into arrays. All skeletons must share one
    image size and joint count.
    """
    if len(skeletons) == 0:
        raise ValueError("No skeletons to stack")

    image_size = skeletons[0].image_size
    J = skeletons[0].num_joints
    bones_arr = np.asarray(bones, dtype=np.int32).reshape(-1, 2)
    topology = [(int(a), int(b)) for a, b in bones_arr.tolist()]

    kpts_list = []
    conf_list = []
    det_list = []
    mask = np.zeros((len(skeletons), bones_arr.shape[0]), dtype=bool)
    for row, sk in enumerate(skeletons):
        if sk.num_joints != J or sk.image_size != image_size:
            raise ValueError(
                f"Skeleton {row} has {sk.num_joints} joints at {tuple(sk.image_size)}, "
                f"expected {J} at {tuple(image_size)}"
            )
        kpts, conf = sk.as_arrays()
        kpts_list.append(kpts)
        conf_list.append(conf)
        det_list.append(np.asarray(sk.detected, dtype=bool))
        # by topology position, so repeated pairs each keep their slot
        emitted = {(int(a), int(b)) for a, b in sk.bones}
        mask[row] = [pair in emitted for pair in topology]

    if joint_names is None:
        joint_names = [f"kpt_{i}" for i in range(J)]

    return SkeletonSequence(
        t=np.asarray(t, dtype=np.float32),
        frame_idx=np.asarray(frame_idx, dtype=np.int32),
        kpts=np.stack(kpts_list, axis=0),      # (T,J,2)
        conf=np.stack(conf_list, axis=0),      # (T,J)
        detected=np.stack(det_list, axis=0),   # (T,J)
        bones=bones_arr,                       # (B,2)
        bone_mask=mask,                        # (T,B)
        image_size=(int(image_size.width), int(image_size.height)),
        joint_names=list(joint_names),
    )


def run_skeleton_on_video(
    video_path: str,
    out_npz_path: str,
    detector: SkeletonDetector,
    infer: InferFn,
    stride: int = 1,
    max_frames: Optional[int] = None,
) -> SkeletonSequence:
    info = get_video_info(video_path)

    t_list: List[float] = []
    idx_list: List[int] = []
    skeletons: List[Skeleton] = []

    for frame_idx, t_sec, frame_bgr in iter_video_frames(video_path, stride=stride, max_frames=max_frames):
        skeletons.append(detector.run(frame_bgr, infer))
        t_list.append(t_sec)
        idx_list.append(frame_idx)
        if len(idx_list) % 20 == 0:
            total = info.frame_count if info.frame_count > 0 else "?"
            n_det = sum(skeletons[-1].detected)
            print(
                f"[Skeleton] {Path(video_path).name}: "
                f"processed {len(idx_list)} frames "
                f"(last frame_idx={frame_idx}, total={total}, joints detected={n_det}/{skeletons[-1].num_joints})"
            )

    if not skeletons:
        raise RuntimeError(f"No frames decoded from {video_path}")

    seq = stack_skeletons(
        skeletons,
        bones=detector.bones,
        t=t_list,
        frame_idx=idx_list,
        joint_names=detector.config.joint_names,
    )
    save_skeleton_sequence(
        out_npz_path,
        seq,
        video_path=np.array([video_path], dtype=object),
        fps=np.array([info.fps], dtype=np.float32),
        min_threshold=np.array([detector.config.min_threshold], dtype=np.float32),
    )
    return seq


def decode_heatmap_file(
    heatmap_npz_path: str,
    out_npz_path: str,
    detector: SkeletonDetector,
) -> SkeletonSequence:
    """
    Decode heatmaps dumped to an .npz file.

    Expected keys:
        heatmaps   (T, C, H, W) or (C, H, W) float32
        image_size (2,) original (W, H), or (T, 2) per frame
        frame_idx  (T,) optional
        t          (T,) optional
    """
    data = load_npz(heatmap_npz_path)
    if "heatmaps" not in data or "image_size" not in data:
        raise KeyError(f"{heatmap_npz_path} must contain 'heatmaps' and 'image_size'")

    heatmaps = np.asarray(data["heatmaps"])
    if heatmaps.ndim == 3:
        heatmaps = heatmaps[None, ...]
    if heatmaps.ndim != 4:
        raise ValueError(f"Expected heatmaps shape (T, C, H, W), got {heatmaps.shape}")
    T = heatmaps.shape[0]

    sizes = np.asarray(data["image_size"]).astype(int).reshape(-1, 2)
    if sizes.shape[0] == 1:
        sizes = np.repeat(sizes, T, axis=0)
    if sizes.shape[0] != T:
        raise ValueError(f"image_size has {sizes.shape[0]} rows for {T} heatmaps")

    skeletons = [
        detector.decode({"heatmap": heatmaps[i]}, (int(sizes[i, 0]), int(sizes[i, 1])))
        for i in range(T)
    ]
    seq = stack_skeletons(
        skeletons,
        bones=detector.bones,
        t=data.get("t", np.zeros((T,), dtype=np.float32)),
        frame_idx=data.get("frame_idx", np.arange(T, dtype=np.int32)),
        joint_names=detector.config.joint_names,
    )
    save_skeleton_sequence(out_npz_path, seq)
    print(f"[Skeleton] decoded {T} heatmaps from {Path(heatmap_npz_path).name}")
    return seq
