"""Shared fixtures for the skeleton decoder tests."""
import numpy as np
import pytest

from posedecode.config import DetectorConfig
from posedecode.pose2d.detector import SkeletonDetector


@pytest.fixture
def small_heatmap():
    """(C=1, H=2, W=2) heatmap with its peak at row 0, col 1."""
    return np.array([[[0.1, 0.9], [0.2, 0.05]]], dtype=np.float32)


@pytest.fixture
def two_joint_heatmap():
    """Two 3x3 channels: channel 0 peaks at (1, 2) = 0.8, channel 1 at (2, 0) = 0.6."""
    hm = np.zeros((2, 3, 3), dtype=np.float32)
    hm[0, 1, 2] = 0.8
    hm[1, 2, 0] = 0.6
    return hm


@pytest.fixture
def two_joint_config():
    return DetectorConfig(min_threshold=0.5, bones=((0, 1),), input_width=3, input_height=3, num_joints=2)


@pytest.fixture
def two_joint_detector(two_joint_config):
    return SkeletonDetector(two_joint_config)
