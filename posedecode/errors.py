from __future__ import annotations

"""
Error types raised by the skeleton detector.

A channel whose peak falls below the threshold is not an error; it is
reported through the absent keypoint sentinel instead.
"""


class SkeletonDetectorError(Exception):
    pass


class ConfigError(SkeletonDetectorError, ValueError):
    """Detector configured with an invalid or incompatible option."""


class DetectorOutputError(SkeletonDetectorError, TypeError):
    """Network output object does not have the expected structure."""


class HeatmapShapeError(DetectorOutputError):
    """Heatmap is not a non-empty (C, H, W) array."""


class MissingOutputError(SkeletonDetectorError, LookupError):
    """Requested output buffer is absent from the network outputs."""


class DetectorStateError(SkeletonDetectorError, RuntimeError):
    """Decode requested before the original image size was recorded."""
