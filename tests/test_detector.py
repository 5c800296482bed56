"""Tests for the decode orchestration and its error taxonomy."""
import numpy as np
import pytest

from posedecode.config import DetectorConfig
from posedecode.errors import (
    ConfigError,
    DetectorOutputError,
    DetectorStateError,
    HeatmapShapeError,
    MissingOutputError,
    SkeletonDetectorError,
)
from posedecode.pose2d.datatypes import ABSENT_KEYPOINT, ImageSize
from posedecode.pose2d.detector import (
    AWAITING_HEATMAP,
    AWAITING_INPUT,
    DECODED,
    SkeletonDetector,
)


class TestDecode:

    def test_scenario_detected(self, small_heatmap):
        det = SkeletonDetector(DetectorConfig(min_threshold=0.5, bones=()))
        sk = det.decode({"heatmap": small_heatmap}, (4, 4))
        assert sk.keypoints == [(2.0, 0.0)]
        assert sk.detected == [True]

    def test_scenario_below_threshold(self, small_heatmap):
        det = SkeletonDetector(DetectorConfig(min_threshold=0.95, bones=()))
        sk = det.decode({"heatmap": small_heatmap}, ImageSize(4, 4))
        assert sk.keypoints == [ABSENT_KEYPOINT]
        assert sk.confidences[0] == pytest.approx(0.9)

    def test_scenario_bones(self, two_joint_detector, two_joint_heatmap):
        sk = two_joint_detector.decode({"heatmap": two_joint_heatmap}, (3, 3))
        assert sk.bones == [(0, 1)]

        two_joint_heatmap[1] = 0.1
        sk = two_joint_detector.decode({"heatmap": two_joint_heatmap}, (3, 3))
        assert sk.bones == []

    def test_extra_outputs_ignored(self, two_joint_detector, two_joint_heatmap):
        outputs = {"heatmap": two_joint_heatmap, "paf": np.zeros((4, 3, 3), dtype=np.float32)}
        assert len(two_joint_detector.decode(outputs, (3, 3)).keypoints) == 2

    def test_batch_of_one_rejected(self, two_joint_detector, two_joint_heatmap):
        with pytest.raises(HeatmapShapeError):
            two_joint_detector.decode({"heatmap": two_joint_heatmap[None]}, (3, 3))

    def test_outputs_must_be_mapping(self, two_joint_detector, two_joint_heatmap):
        with pytest.raises(DetectorOutputError):
            two_joint_detector.decode(two_joint_heatmap, (3, 3))
        with pytest.raises(DetectorOutputError):
            two_joint_detector.decode([("heatmap", two_joint_heatmap)], (3, 3))

    @pytest.mark.parametrize("outputs", [{}, {"heatmap": None}, {"scores": np.zeros((2, 3, 3))}])
    def test_missing_heatmap(self, two_joint_detector, outputs):
        with pytest.raises(MissingOutputError) as exc:
            two_joint_detector.decode(outputs, (3, 3))
        assert isinstance(exc.value, LookupError)
        assert isinstance(exc.value, SkeletonDetectorError)

    def test_channel_count_must_match_num_joints(self, two_joint_detector):
        with pytest.raises(DetectorOutputError):
            two_joint_detector.decode({"heatmap": np.zeros((3, 3, 3), dtype=np.float32)}, (3, 3))

    def test_topology_outside_heatmap(self, small_heatmap):
        det = SkeletonDetector(DetectorConfig(min_threshold=0.5, bones=((0, 4),)))
        with pytest.raises(ConfigError):
            det.decode({"heatmap": small_heatmap}, (4, 4))

    @pytest.mark.parametrize("size", [(0, 4), (4, -1)])
    def test_image_size_must_be_positive(self, two_joint_detector, two_joint_heatmap, size):
        with pytest.raises(ConfigError):
            two_joint_detector.decode({"heatmap": two_joint_heatmap}, size)

    def test_requires_detector_config(self):
        with pytest.raises(ConfigError):
            SkeletonDetector({"min_threshold": 0.5})

    def test_decode_is_idempotent(self, two_joint_detector, two_joint_heatmap):
        outputs = {"heatmap": two_joint_heatmap}
        assert two_joint_detector.decode(outputs, (9, 6)) == two_joint_detector.decode(outputs, (9, 6))


class TestInputCycle:

    def test_preprocess_needs_input_size(self):
        det = SkeletonDetector(DetectorConfig(min_threshold=0.5))
        with pytest.raises(ConfigError):
            det.preprocess(np.zeros((4, 4, 3), dtype=np.uint8))

    def test_bind_input_shape(self):
        det = SkeletonDetector(DetectorConfig(min_threshold=0.5))
        det.bind_input_shape((1, 3, 8, 6))
        prepared = det.preprocess(np.zeros((20, 10, 3), dtype=np.uint8))
        assert prepared.tensor.shape == (1, 3, 8, 6)
        assert prepared.image_size == ImageSize(10, 20)

    def test_state_machine(self, two_joint_detector, two_joint_heatmap):
        assert two_joint_detector.state == AWAITING_INPUT

        tensor = two_joint_detector.process_input(np.zeros((6, 12, 3), dtype=np.uint8))
        assert tensor.shape == (1, 3, 3, 3)
        assert two_joint_detector.state == AWAITING_HEATMAP

        sk = two_joint_detector.process_output({"heatmap": two_joint_heatmap})
        assert two_joint_detector.state == DECODED
        assert (sk.image_width, sk.image_height) == (12, 6)
        assert sk.keypoints[0] == pytest.approx((2 * 4.0, 1 * 2.0))

        two_joint_detector.process_input(np.zeros((3, 3, 3), dtype=np.uint8))
        assert two_joint_detector.state == AWAITING_HEATMAP
        sk = two_joint_detector.process_output({"heatmap": two_joint_heatmap})
        assert sk.keypoints[0] == (2.0, 1.0)

    def test_output_before_input_fails_fast(self, two_joint_detector, two_joint_heatmap):
        with pytest.raises(DetectorStateError) as exc:
            two_joint_detector.process_output({"heatmap": two_joint_heatmap})
        assert isinstance(exc.value, RuntimeError)
        assert two_joint_detector.state == AWAITING_INPUT

    def test_failed_output_keeps_state(self, two_joint_detector):
        two_joint_detector.process_input(np.zeros((3, 3, 3), dtype=np.uint8))
        with pytest.raises(MissingOutputError):
            two_joint_detector.process_output({})
        assert two_joint_detector.state == AWAITING_HEATMAP

    def test_run_with_injected_inference(self, two_joint_detector, two_joint_heatmap):
        seen = []

        def infer(tensor):
            seen.append(tensor.shape)
            return {"heatmap": two_joint_heatmap}

        sk = two_joint_detector.run(np.zeros((30, 60, 3), dtype=np.uint8), infer)
        assert seen == [(1, 3, 3, 3)]
        assert sk.image_size == ImageSize(60, 30)
        assert sk.keypoints[1] == pytest.approx((0.0, 2 * 10.0))
        assert sk.bones == [(0, 1)]
        # run() does not touch the remembered size
        assert two_joint_detector.state == AWAITING_INPUT


def test_threshold_matching_float32_score_detects(small_heatmap):
    det = SkeletonDetector(DetectorConfig(min_threshold=0.9, bones=()))
    sk = det.decode({"heatmap": small_heatmap}, (4, 4))
    assert sk.keypoints == [(2.0, 0.0)]
    assert sk.confidences[0] == pytest.approx(0.9)


@pytest.mark.parametrize("heatmap", [
    np.full((1, 2, 2), "a"),
    np.full((1, 2, 2), None, dtype=object),
    [[[0.1, 0.2], [0.3]]],
])
def test_non_numeric_heatmap_is_contract_error(two_joint_detector, heatmap):
    with pytest.raises(HeatmapShapeError):
        two_joint_detector.decode({"heatmap": heatmap}, (3, 3))
