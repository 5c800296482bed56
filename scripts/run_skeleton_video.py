from __future__ import annotations

import argparse
from dataclasses import replace
from pathlib import Path

from posedecode.config import DetectorConfig, load_detector_config
from posedecode.pose2d.detector import SkeletonDetector
from posedecode.pose2d.providers.opencv_dnn_provider import OpenCVDnnRunner
from posedecode.pose2d.stage_skeleton import run_skeleton_on_video


def main() -> None:
    ap = argparse.ArgumentParser(description="Decode a single-person skeleton for every frame of a video.")
    ap.add_argument("--video", required=True, help="Input video path")
    ap.add_argument("--model", required=True, help="Heatmap pose network (.onnx or any cv2.dnn format)")
    ap.add_argument("--model_config", default=None, help="Optional network config file for cv2.dnn")
    ap.add_argument("--output_layer", default=None, help="Network layer that produces the heatmap")
    ap.add_argument("--config", default=None, help="Detector config JSON")
    ap.add_argument("--min_threshold", type=float, default=None, help="Overrides the config threshold")
    ap.add_argument("--input_size", type=int, nargs=2, default=None, metavar=("W", "H"),
                    help="Network input size; required when the config does not set it")
    ap.add_argument("--out", required=True, help="Output skeleton .npz")
    ap.add_argument("--stride", type=int, default=1)
    ap.add_argument("--max_frames", type=int, default=None)
    ap.add_argument("--cuda", action="store_true")
    args = ap.parse_args()

    cfg = load_detector_config(args.config) if args.config else DetectorConfig(min_threshold=0.3)
    if args.min_threshold is not None:
        print(f"[Skeleton] min_threshold {cfg.min_threshold} -> {args.min_threshold}")
        cfg = replace(cfg, min_threshold=args.min_threshold)

    detector = SkeletonDetector(cfg)
    if args.input_size is not None:
        w, h = args.input_size
        detector.bind_input_shape((1, 3, h, w))

    runner = OpenCVDnnRunner(
        args.model,
        config_path=args.model_config,
        output_layer=args.output_layer,
        prefer_cuda=args.cuda,
    )

    seq = run_skeleton_on_video(
        video_path=args.video,
        out_npz_path=args.out,
        detector=detector,
        infer=runner,
        stride=args.stride,
        max_frames=args.max_frames,
    )
    print(f"Wrote {seq.kpts.shape[0]} skeletons to: {Path(args.out)}")


if __name__ == "__main__":
    main()
