from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

import cv2
import numpy as np

from posedecode.pose2d.datatypes import ImageSize

# Per-channel input normalisation of the trained network: dst = src * scale + bias.
# Slots are R, G, B and a zero pad slot. ImageNet mean/std folded into one affine map.
NORM_SCALE = (0.01712475, 0.017507, 0.01742919, 0.0)
NORM_BIAS = (-2.11790393, -2.03571429, -1.80444444, 0.0)


@dataclass
class PreparedInput:
    tensor: np.ndarray     # (1, 3, H_in, W_in) float32, RGB, normalised
    image_size: ImageSize  # original (W, H) before resizing


def to_rgb(image_bgr: np.ndarray) -> np.ndarray:
    if image_bgr.ndim == 2:
        return cv2.cvtColor(image_bgr, cv2.COLOR_GRAY2RGB)
    if image_bgr.ndim == 3 and image_bgr.shape[2] == 4:
        return cv2.cvtColor(image_bgr, cv2.COLOR_BGRA2RGB)
    if image_bgr.ndim == 3 and image_bgr.shape[2] == 3:
        return cv2.cvtColor(image_bgr, cv2.COLOR_BGR2RGB)
    raise ValueError(f"Expected (H, W), (H, W, 3) or (H, W, 4) image, got {image_bgr.shape}")


def normalize_image(
    rgb: np.ndarray,
    scale: Sequence[float] = NORM_SCALE,
    bias: Sequence[float] = NORM_BIAS,
) -> np.ndarray:
    """
    (H, W, 3) RGB -> (3, H, W) float32 with dst = src * scale + bias per channel.
    """
    if rgb.ndim != 3 or rgb.shape[2] != 3:
        raise ValueError(f"Expected (H, W, 3) RGB image, got {rgb.shape}")
    s = np.asarray(scale, dtype=np.float32)[:3]
    b = np.asarray(bias, dtype=np.float32)[:3]
    out = rgb.astype(np.float32) * s + b
    return np.ascontiguousarray(out.transpose(2, 0, 1))


def prepare_input(
    image_bgr: np.ndarray,
    input_width: int,
    input_height: int,
    scale: Sequence[float] = NORM_SCALE,
    bias: Sequence[float] = NORM_BIAS,
) -> PreparedInput:
    """
    Record the original size, resize to the network input and normalise.
    """
    H, W = image_bgr.shape[:2]
    if H <= 0 or W <= 0:
        raise ValueError(f"Image must be non-empty, got shape {image_bgr.shape}")

    rgb = to_rgb(image_bgr)
    if (W, H) != (input_width, input_height):
        rgb = cv2.resize(rgb, (int(input_width), int(input_height)), interpolation=cv2.INTER_LINEAR)

    chw = normalize_image(rgb, scale, bias)
    return PreparedInput(tensor=chw[None, ...], image_size=ImageSize(int(W), int(H)))
