from __future__ import annotations

from typing import Tuple

import numpy as np

from posedecode.errors import HeatmapShapeError


class HeatmapBuffer:
    """
    Read-only (C, H, W) float32 view over a network heatmap output.
    Channel index is joint identity.
    """

    def __init__(self, data) -> None:
        try:
            arr = np.asarray(data)
        except (TypeError, ValueError) as e:
            raise HeatmapShapeError(f"Heatmap is not a numeric array: {e}") from e
        if arr.dtype.kind not in "fiu":
            raise HeatmapShapeError(f"Heatmap must hold numeric scores, got dtype {arr.dtype}")
        if arr.ndim != 3:
            raise HeatmapShapeError(f"Expected heatmap shape (C, H, W), got {arr.shape}")
        if min(arr.shape) <= 0:
            raise HeatmapShapeError(f"Heatmap dimensions must be positive, got {arr.shape}")

        arr = np.ascontiguousarray(arr, dtype=np.float32)
        view = arr.view()
        view.flags.writeable = False
        self._data = view

    @property
    def shape(self) -> Tuple[int, int, int]:
        return self._data.shape

    @property
    def channels(self) -> int:
        return self._data.shape[0]

    @property
    def height(self) -> int:
        return self._data.shape[1]

    @property
    def width(self) -> int:
        return self._data.shape[2]

    @property
    def data(self) -> np.ndarray:
        return self._data

    def plane(self, c: int) -> np.ndarray:
        return self._data[c]

    def flat(self) -> np.ndarray:
        # (C, H*W), row-major within each channel
        return self._data.reshape(self.channels, self.height * self.width)

    def __repr__(self) -> str:
        return f"HeatmapBuffer(shape={self.shape})"
