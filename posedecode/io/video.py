from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, Optional, Tuple

import cv2
import numpy as np


@dataclass
class VideoInfo:
    path: str
    fps: float
    frame_count: int
    width: int
    height: int

    @property
    def image_size(self) -> Tuple[int, int]:
        return self.width, self.height


def _open_capture(video_path: str) -> cv2.VideoCapture:
    cap = cv2.VideoCapture(str(video_path))
    if not cap.isOpened():
        raise RuntimeError(f"Failed to open video: {video_path}")
    return cap


def get_video_info(video_path: str) -> VideoInfo:
    cap = _open_capture(video_path)
    try:
        fps = float(cap.get(cv2.CAP_PROP_FPS)) or 0.0
        frame_count = int(cap.get(cv2.CAP_PROP_FRAME_COUNT)) or 0
        width = int(cap.get(cv2.CAP_PROP_FRAME_WIDTH)) or 0
        height = int(cap.get(cv2.CAP_PROP_FRAME_HEIGHT)) or 0
    finally:
        cap.release()
    return VideoInfo(str(video_path), fps, frame_count, width, height)


def iter_video_frames(
    video_path: str,
    stride: int = 1,
    max_frames: Optional[int] = None,
) -> Iterator[Tuple[int, float, np.ndarray]]:
    """
    Yields (frame_idx, t_sec, frame_bgr) for every `stride`-th frame.
    """
    if stride < 1:
        raise ValueError(f"stride must be >= 1, got {stride}")

    info = get_video_info(video_path)
    if info.fps <= 0:
        raise RuntimeError(f"Could not read FPS from video: {video_path}")

    cap = _open_capture(video_path)
    try:
        frame_idx = 0
        out_count = 0
        while True:
            ok, frame = cap.read()
            if not ok:
                break

            if frame_idx % stride == 0:
                yield frame_idx, frame_idx / info.fps, frame
                out_count += 1
                if max_frames is not None and out_count >= max_frames:
                    break

            frame_idx += 1
    finally:
        cap.release()


def open_video_writer(out_path: str, fps: float, size: Tuple[int, int]) -> cv2.VideoWriter:
    """mp4v writer for frames of size (W, H); creates the parent folder."""
    p = Path(out_path)
    p.parent.mkdir(parents=True, exist_ok=True)
    fourcc = cv2.VideoWriter_fourcc(*"mp4v")
    writer = cv2.VideoWriter(str(p), fourcc, float(fps), (int(size[0]), int(size[1])))
    if not writer.isOpened():
        raise RuntimeError(f"Could not open VideoWriter for {out_path}")
    return writer
