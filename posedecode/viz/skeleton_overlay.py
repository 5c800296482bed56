from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Optional

import cv2
import numpy as np

from posedecode.io.npz_io import load_skeleton_sequence
from posedecode.io.video import get_video_info, iter_video_frames, open_video_writer
from posedecode.pose2d.datatypes import Skeleton


@dataclass
class OverlayStyle:
    radius: int = 4
    thickness: int = 2
    draw_labels: bool = False
    draw_info: bool = True
    label_scale: float = 0.5


def _pt(xy) -> tuple:
    return tuple(np.round(np.asarray(xy, dtype=np.float64)).astype(int).tolist())


def draw_skeleton(
    frame: np.ndarray,
    skeleton: Skeleton,
    style: OverlayStyle = OverlayStyle(),
    joint_names: Optional[List[str]] = None,
) -> np.ndarray:
    """
    Draw emitted bones and detected keypoints onto `frame` in place.
    Absent keypoints are skipped.
    """
    for a, b in skeleton.bones:
        cv2.line(frame, _pt(skeleton.keypoints[a]), _pt(skeleton.keypoints[b]),
                 (255, 0, 0), style.thickness)

    for j, (kp, det) in enumerate(zip(skeleton.keypoints, skeleton.detected)):
        if not det:
            continue
        x, y = _pt(kp)
        cv2.circle(frame, (x, y), style.radius, (0, 255, 0), -1)

        if style.draw_labels:
            name = joint_names[j] if joint_names and j < len(joint_names) else str(j)
            cv2.putText(frame, name, (x + 4, y - 4),
                        cv2.FONT_HERSHEY_SIMPLEX, style.label_scale,
                        (255, 255, 255), 1, cv2.LINE_AA)
    return frame


def render_skeleton_overlay(
    video_path: str,
    skeleton_npz_path: str,
    out_video_path: str,
    style: OverlayStyle = OverlayStyle(),
    max_frames: Optional[int] = None,
    stride: int = 1,
    show_preview: bool = False,
) -> int:
    """
    Writes an overlay video and returns the number of frames written.
    """
    seq = load_skeleton_sequence(skeleton_npz_path)
    info = get_video_info(video_path)
    if tuple(seq.image_size) != info.image_size:
        print(f"[Overlay] warning: skeleton image_size={tuple(seq.image_size)} "
              f"but video is {info.image_size}")

    # map source frame index -> skeleton row
    idx_to_row: Dict[int, int] = {int(fi): row for row, fi in enumerate(seq.frame_idx.tolist())}

    writer = open_video_writer(out_video_path, info.fps / stride, info.image_size)
    n_written = 0
    try:
        for frame_idx, t_sec, frame in iter_video_frames(video_path, stride=stride, max_frames=max_frames):
            row = idx_to_row.get(frame_idx)
            if row is not None:
                draw_skeleton(frame, seq.skeleton_at(row), style, seq.joint_names)

            if style.draw_info:
                cv2.putText(frame, f"frame={frame_idx} t={t_sec:.3f}s",
                            (10, 25), cv2.FONT_HERSHEY_SIMPLEX, 0.7,
                            (255, 255, 255), 2, cv2.LINE_AA)

            writer.write(frame)
            n_written += 1

            if show_preview:
                cv2.imshow("Skeleton Overlay", frame)
                if cv2.waitKey(1) == 27:  # ESC
                    break
    finally:
        writer.release()
        if show_preview:
            cv2.destroyAllWindows()

    return n_written
