"""Tests for the read-only heatmap view."""
import numpy as np
import pytest

from posedecode.errors import DetectorOutputError, HeatmapShapeError
from posedecode.pose2d.heatmap import HeatmapBuffer


def test_dimensions(two_joint_heatmap):
    buf = HeatmapBuffer(two_joint_heatmap)
    assert buf.shape == (2, 3, 3)
    assert (buf.channels, buf.height, buf.width) == (2, 3, 3)
    assert buf.flat().shape == (2, 9)
    assert buf.data.dtype == np.float32


def test_view_is_read_only_and_source_untouched(two_joint_heatmap):
    buf = HeatmapBuffer(two_joint_heatmap)
    with pytest.raises(ValueError):
        buf.plane(0)[0, 0] = 1.0
    assert two_joint_heatmap.flags.writeable


def test_float64_input_converted():
    buf = HeatmapBuffer(np.ones((1, 2, 2), dtype=np.float64))
    assert buf.data.dtype == np.float32


def test_flat_is_row_major(two_joint_heatmap):
    buf = HeatmapBuffer(two_joint_heatmap)
    assert buf.flat()[0, 1 * 3 + 2] == pytest.approx(0.8)


@pytest.mark.parametrize("shape", [(3, 3), (1, 1, 3, 3), (0, 2, 2), (1, 0, 2), (1, 2, 0)])
def test_bad_shapes_rejected(shape):
    with pytest.raises(HeatmapShapeError) as exc:
        HeatmapBuffer(np.zeros(shape, dtype=np.float32))
    assert isinstance(exc.value, DetectorOutputError)


@pytest.mark.parametrize("data", [
    np.full((2, 2, 2), "x"),
    np.full((1, 2, 2), 0.5, dtype=object),
    np.zeros((1, 2, 2), dtype=bool),
    [[[1.0, 2.0], [3.0]]],
])
def test_non_numeric_data_rejected(data):
    with pytest.raises(HeatmapShapeError):
        HeatmapBuffer(data)
