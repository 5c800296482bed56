from __future__ import annotations

from collections.abc import Mapping
from typing import Callable, Optional, Sequence, Tuple

import numpy as np

from posedecode.config import DetectorConfig
from posedecode.errors import (
    ConfigError,
    DetectorOutputError,
    DetectorStateError,
    MissingOutputError,
)
from posedecode.pose2d.datatypes import ImageSize, Skeleton
from posedecode.pose2d.heatmap import HeatmapBuffer
from posedecode.pose2d.preprocess import PreparedInput, prepare_input
from posedecode.pose2d.skeleton import check_topology, generate_skeleton

HEATMAP_OUTPUT = "heatmap"

AWAITING_INPUT = "awaiting_input"
AWAITING_HEATMAP = "awaiting_heatmap"
DECODED = "decoded"

InferFn = Callable[[np.ndarray], Mapping]


class SkeletonDetector:
    """
    Single-person skeleton decoder for a heatmap pose network.

    Stateless use (safe to share across threads):

        prepared = detector.preprocess(frame_bgr)
        outputs = infer(prepared.tensor)          # {"heatmap": (C,H,W)}
        skeleton = detector.decode(outputs, prepared.image_size)

    Stateful use mirrors a preprocess-then-decode SDK cycle: process_input()
    remembers the original image size and process_output() consumes it. An
    instance used that way must not be shared between concurrent inferences.
    """

    def __init__(self, config: DetectorConfig) -> None:
        if not isinstance(config, DetectorConfig):
            raise ConfigError(f"Expected DetectorConfig, got {type(config).__name__}")
        self.config = config
        self._orig_size: Optional[ImageSize] = None
        self._state = AWAITING_INPUT

    @property
    def bones(self) -> Tuple[Tuple[int, int], ...]:
        return self.config.bones

    @property
    def state(self) -> str:
        return self._state

    def bind_input_shape(self, shape: Sequence[int]) -> None:
        """Take input_width/input_height from the network's declared NCHW input shape."""
        self.config = self.config.with_input_shape(shape)

    # ---------------------------------------------------------------- input

    def preprocess(self, image_bgr: np.ndarray) -> PreparedInput:
        size = self.config.input_size
        if size is None:
            raise ConfigError("input_width/input_height are not set; call bind_input_shape() first")
        return prepare_input(
            image_bgr,
            input_width=size[0],
            input_height=size[1],
            scale=self.config.norm_scale,
            bias=self.config.norm_bias,
        )

    def process_input(self, image_bgr: np.ndarray) -> np.ndarray:
        prepared = self.preprocess(image_bgr)
        self._orig_size = prepared.image_size
        self._state = AWAITING_HEATMAP
        return prepared.tensor

    # --------------------------------------------------------------- output

    def _heatmap_from_outputs(self, outputs) -> HeatmapBuffer:
        if not isinstance(outputs, Mapping):
            raise DetectorOutputError(
                f"Network outputs must be a mapping of named arrays, got {type(outputs).__name__}"
            )
        heatmap = outputs.get(HEATMAP_OUTPUT)
        if heatmap is None:
            raise MissingOutputError(f"'{HEATMAP_OUTPUT}' output is missing")

        buf = HeatmapBuffer(heatmap)
        n = self.config.num_joints
        if n is not None and buf.channels != n:
            raise DetectorOutputError(
                f"Heatmap has {buf.channels} channels but the detector expects {n} joints"
            )
        return buf

    def decode(self, outputs, image_size: Tuple[int, int]) -> Skeleton:
        """
        Decode network outputs into a Skeleton expressed in `image_size` pixels.

        All checks run before any decoding; on failure nothing is returned.
        """
        image_size = ImageSize(*image_size)
        if image_size.width <= 0 or image_size.height <= 0:
            raise ConfigError(f"Original image size must be positive, got {tuple(image_size)}")

        buf = self._heatmap_from_outputs(outputs)
        check_topology(self.config.bones, buf.channels)
        return generate_skeleton(buf, image_size, self.config.min_threshold, self.config.bones)

    def process_output(self, outputs) -> Skeleton:
        if self._orig_size is None:
            raise DetectorStateError(
                "Original image size unknown: process_input() must run before process_output()"
            )
        skeleton = self.decode(outputs, self._orig_size)
        self._state = DECODED
        return skeleton

    def run(self, image_bgr: np.ndarray, infer: InferFn) -> Skeleton:
        """
        One full inference cycle; `infer` maps the input tensor to named outputs.
        """
        prepared = self.preprocess(image_bgr)
        outputs = infer(prepared.tensor)
        return self.decode(outputs, prepared.image_size)
