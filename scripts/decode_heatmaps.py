from __future__ import annotations

import argparse

from posedecode.config import DetectorConfig, load_detector_config
from posedecode.pose2d.detector import SkeletonDetector
from posedecode.pose2d.stage_skeleton import decode_heatmap_file


def main() -> None:
    ap = argparse.ArgumentParser(description="Decode heatmaps saved in an .npz file into skeletons.")
    ap.add_argument("--heatmaps", required=True, help=".npz with 'heatmaps' (T,C,H,W) and 'image_size' (W,H)")
    ap.add_argument("--out", required=True, help="Output skeleton .npz")
    ap.add_argument("--config", default=None, help="Detector config JSON")
    ap.add_argument("--min_threshold", type=float, default=0.3, help="Used when --config is not given")
    args = ap.parse_args()

    cfg = load_detector_config(args.config) if args.config else DetectorConfig(min_threshold=args.min_threshold)
    seq = decode_heatmap_file(args.heatmaps, args.out, SkeletonDetector(cfg))

    n_det = int(seq.detected.sum())
    print(f"Wrote {args.out}: {seq.kpts.shape[0]} frames, {n_det} detected keypoints, "
          f"{int(seq.bone_mask.sum())} bones")


if __name__ == "__main__":
    main()
