from __future__ import annotations

from pathlib import Path
from typing import Dict, Optional

import cv2
import numpy as np

from posedecode.pose2d.detector import HEATMAP_OUTPUT


class OpenCVDnnRunner:
    """
    Runs a heatmap pose network with cv2.dnn and returns {"heatmap": (C,H,W)}.

    Plugs into SkeletonDetector.run() as the inference callable. The input
    tensor is expected to be already resized and normalised.
    """

    def __init__(
        self,
        model_path: str,
        config_path: Optional[str] = None,
        output_layer: Optional[str] = None,
        prefer_cuda: bool = False,
    ) -> None:
        if not Path(model_path).exists():
            raise RuntimeError(f"Model file not found: {model_path}")
        try:
            if config_path:
                self.net = cv2.dnn.readNet(model_path, config_path)
            else:
                self.net = cv2.dnn.readNet(model_path)
        except cv2.error as e:
            raise RuntimeError(f"Failed to load network from {model_path}: {e}") from e

        if prefer_cuda:
            self.net.setPreferableBackend(cv2.dnn.DNN_BACKEND_CUDA)
            self.net.setPreferableTarget(cv2.dnn.DNN_TARGET_CUDA)

        self.output_layer = output_layer

    def __call__(self, tensor: np.ndarray) -> Dict[str, np.ndarray]:
        self.net.setInput(np.ascontiguousarray(tensor, dtype=np.float32))
        if self.output_layer:
            out = self.net.forward(self.output_layer)
        else:
            out = self.net.forward()

        out = np.asarray(out, dtype=np.float32)
        # (1, C, H, W) -> (C, H, W)
        if out.ndim == 4 and out.shape[0] == 1:
            out = out[0]
        return {HEATMAP_OUTPUT: out}
