from __future__ import annotations

"""
Detector configuration and JSON loading.

A detector config file looks like:

    {
        "min_threshold": 0.3,
        "input_size": [192, 256],
        "num_joints": 17,
        "joint_names": ["nose", ...],
        "bones": [[15, 13], [13, 11], ...],
        "norm_scale": [0.01712475, 0.017507, 0.01742919, 0.0],
        "norm_bias": [-2.11790393, -2.03571429, -1.80444444, 0.0]
    }

Every key is optional except min_threshold. input_size is (width, height).
"""

import json
import math
import numbers
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Dict, Optional, Sequence, Tuple

from posedecode.errors import ConfigError
from posedecode.pose2d.peaks import FLT_MAX
from posedecode.pose2d.preprocess import NORM_BIAS, NORM_SCALE
from posedecode.pose2d.topology import COCO17_BONES


def _as_bones(bones: Sequence[Sequence[int]]) -> Tuple[Tuple[int, int], ...]:
    out = []
    for pair in bones:
        if len(pair) != 2:
            raise ConfigError(f"Bone must be a (joint_a, joint_b) pair, got {pair!r}")
        a, b = pair
        if not all(isinstance(v, numbers.Integral) and not isinstance(v, bool) for v in pair):
            raise ConfigError(f"Bone joint indices must be integers, got {pair!r}")
        if a < 0 or b < 0:
            raise ConfigError(f"Bone joint indices must be non-negative, got {pair!r}")
        out.append((int(a), int(b)))
    return tuple(out)


def _as_quad(values: Sequence[float], what: str) -> Tuple[float, float, float, float]:
    vals = tuple(float(v) for v in values)
    if len(vals) != 4:
        raise ConfigError(f"Expected {what} with 4 elements (R, G, B, pad), got {len(vals)}")
    return vals


@dataclass(frozen=True)
class DetectorConfig:
    min_threshold: float
    bones: Tuple[Tuple[int, int], ...] = COCO17_BONES
    input_width: Optional[int] = None
    input_height: Optional[int] = None
    norm_scale: Tuple[float, float, float, float] = NORM_SCALE
    norm_bias: Tuple[float, float, float, float] = NORM_BIAS
    num_joints: Optional[int] = None
    joint_names: Optional[Tuple[str, ...]] = field(default=None)

    def __post_init__(self) -> None:
        if isinstance(self.min_threshold, bool) or not isinstance(self.min_threshold, numbers.Real):
            raise ConfigError(f"min_threshold must be a number, got {self.min_threshold!r}")
        if not math.isfinite(self.min_threshold) or abs(self.min_threshold) >= FLT_MAX:
            raise ConfigError(
                f"min_threshold must lie strictly inside the float32 range, got {self.min_threshold!r}"
            )

        # frozen: normalise fields through object.__setattr__
        object.__setattr__(self, "min_threshold", float(self.min_threshold))
        object.__setattr__(self, "bones", _as_bones(self.bones))
        object.__setattr__(self, "norm_scale", _as_quad(self.norm_scale, "norm_scale"))
        object.__setattr__(self, "norm_bias", _as_quad(self.norm_bias, "norm_bias"))

        for name in ("input_width", "input_height"):
            v = getattr(self, name)
            if v is not None and int(v) <= 0:
                raise ConfigError(f"{name} must be positive, got {v!r}")

        if self.num_joints is not None:
            if int(self.num_joints) <= 0:
                raise ConfigError(f"num_joints must be positive, got {self.num_joints!r}")
            for a, b in self.bones:
                if a >= self.num_joints or b >= self.num_joints:
                    raise ConfigError(
                        f"Bone ({a}, {b}) out of range for num_joints={self.num_joints}"
                    )

        if self.joint_names is not None:
            names = tuple(str(n) for n in self.joint_names)
            object.__setattr__(self, "joint_names", names)
            if self.num_joints is not None and len(names) != self.num_joints:
                raise ConfigError(
                    f"joint_names has {len(names)} entries but num_joints={self.num_joints}"
                )

    @property
    def input_size(self) -> Optional[Tuple[int, int]]:
        if self.input_width is None or self.input_height is None:
            return None
        return int(self.input_width), int(self.input_height)

    def with_input_shape(self, shape: Sequence[int]) -> "DetectorConfig":
        """
        Copy with input_width/input_height taken from a network's NCHW input shape.
        """
        if len(shape) != 4:
            raise ConfigError(f"Expected NCHW input shape, got {tuple(shape)}")
        return replace(self, input_height=int(shape[2]), input_width=int(shape[3]))


def detector_config_from_dict(d: Dict[str, Any]) -> DetectorConfig:
    if "min_threshold" not in d:
        raise ConfigError("Detector config must define 'min_threshold'")

    kwargs: Dict[str, Any] = {"min_threshold": d["min_threshold"]}
    if "bones" in d:
        kwargs["bones"] = d["bones"]
    if "input_size" in d and d["input_size"] is not None:
        size = d["input_size"]
        if len(size) != 2:
            raise ConfigError(f"Expected input_size with 2 elements, got {size}")
        kwargs["input_width"] = int(size[0])
        kwargs["input_height"] = int(size[1])
    if "norm_scale" in d:
        kwargs["norm_scale"] = d["norm_scale"]
    if "norm_bias" in d:
        kwargs["norm_bias"] = d["norm_bias"]
    if d.get("num_joints") is not None:
        kwargs["num_joints"] = int(d["num_joints"])
    if d.get("joint_names") is not None:
        kwargs["joint_names"] = tuple(d["joint_names"])

    try:
        return DetectorConfig(**kwargs)
    except (TypeError, ValueError) as e:
        if isinstance(e, ConfigError):
            raise
        raise ConfigError(f"Invalid detector config: {e}") from e


def detector_config_to_dict(cfg: DetectorConfig) -> Dict[str, Any]:
    d: Dict[str, Any] = {
        "min_threshold": cfg.min_threshold,
        "bones": [list(b) for b in cfg.bones],
        "norm_scale": list(cfg.norm_scale),
        "norm_bias": list(cfg.norm_bias),
    }
    if cfg.input_size is not None:
        d["input_size"] = list(cfg.input_size)
    if cfg.num_joints is not None:
        d["num_joints"] = cfg.num_joints
    if cfg.joint_names is not None:
        d["joint_names"] = list(cfg.joint_names)
    return d


def load_detector_config(path: str | Path) -> DetectorConfig:
    p = Path(path)
    with p.open("r", encoding="utf-8") as f:
        d = json.load(f)
    if not isinstance(d, dict):
        raise ConfigError(f"Detector config {p} must be a JSON object")
    return detector_config_from_dict(d)


def save_detector_config(path: str | Path, cfg: DetectorConfig) -> None:
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)
    with p.open("w", encoding="utf-8") as f:
        json.dump(detector_config_to_dict(cfg), f, indent=2)
