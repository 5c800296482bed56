from __future__ import annotations

import argparse

from posedecode.viz.skeleton_overlay import OverlayStyle, render_skeleton_overlay


def main() -> None:
    ap = argparse.ArgumentParser()
    ap.add_argument("--video", required=True)
    ap.add_argument("--skeleton_npz", required=True)
    ap.add_argument("--out", required=True)
    ap.add_argument("--stride", type=int, default=1)
    ap.add_argument("--max_frames", type=int, default=None)
    ap.add_argument("--preview", action="store_true")
    ap.add_argument("--labels", action="store_true")
    args = ap.parse_args()

    style = OverlayStyle(draw_labels=args.labels)

    n = render_skeleton_overlay(
        video_path=args.video,
        skeleton_npz_path=args.skeleton_npz,
        out_video_path=args.out,
        style=style,
        stride=args.stride,
        max_frames=args.max_frames,
        show_preview=args.preview,
    )

    print(f"Wrote {n} overlay frames to: {args.out}")


if __name__ == "__main__":
    main()
