from __future__ import annotations

import argparse
import statistics
import time
from dataclasses import dataclass
from typing import List, Tuple

import numpy as np

from fire_kit import DecodeConfig, FireDecoder


@dataclass(frozen=True)
class TimingSummary:
    n: int
    mean_ms: float
    p50_ms: float
    p90_ms: float
    p95_ms: float


def _percentile(sorted_values: List[float], q: float) -> float:
    if not sorted_values:
        raise ValueError("No values provided.")
    if q < 0.0 or q > 100.0:
        raise ValueError("q must be in [0, 100].")
    if len(sorted_values) == 1:
        return float(sorted_values[0])
    # Linear interpolation between closest ranks.
    pos = (q / 100.0) * (len(sorted_values) - 1)
    lo = int(np.floor(pos))
    hi = int(np.ceil(pos))
    if lo == hi:
        return float(sorted_values[lo])
    t = pos - lo
    return float(sorted_values[lo] * (1.0 - t) + sorted_values[hi] * t)


def _summarize_ms(values_s: List[float]) -> TimingSummary:
    ms_sorted = sorted(v * 1000.0 for v in values_s)
    return TimingSummary(
        n=len(ms_sorted),
        mean_ms=float(statistics.fmean(ms_sorted)) if ms_sorted else 0.0,
        p50_ms=_percentile(ms_sorted, 50.0) if ms_sorted else 0.0,
        p90_ms=_percentile(ms_sorted, 90.0) if ms_sorted else 0.0,
        p95_ms=_percentile(ms_sorted, 95.0) if ms_sorted else 0.0,
    )


def _format_summary(label: str, s: TimingSummary) -> str:
    return (
        f"{label}: n={s.n} mean={s.mean_ms:.3f}ms p50={s.p50_ms:.3f}ms "
        f"p90={s.p90_ms:.3f}ms p95={s.p95_ms:.3f}ms"
    )


def _synthetic_tensor(layout: str, anchors: int, classes: int, hits: int, side: int, seed: int) -> Tuple[np.ndarray, List[int]]:
    """
    Random low scores everywhere plus `hits` confident candidates with plausible boxes.
    """

    rng = np.random.default_rng(seed)
    if layout == "multi":
        shape = [1, 84, anchors]
        t = rng.uniform(0.0, 0.1, size=(84, anchors)).astype(np.float32)
        t[0:4] = rng.uniform(0.0, side, size=(4, anchors))
        hit_idx = rng.choice(anchors, size=min(hits, anchors), replace=False)
        t[4, hit_idx] = 0.9
        return t.ravel(), shape
    if layout == "single":
        shape = [1, 6, anchors]
        t = rng.uniform(0.0, 0.1, size=(6, anchors)).astype(np.float32)
        t[0:4] = rng.uniform(0.0, side, size=(4, anchors))
        hit_idx = rng.choice(anchors, size=min(hits, anchors), replace=False)
        t[4:6, hit_idx] = 0.9
        return t.ravel(), shape

    shape = [1, 25200, 5 + classes]
    t = rng.uniform(0.0, 0.1, size=(25200, 5 + classes)).astype(np.float32)
    t[:, 0:4] = rng.uniform(0.0, side, size=(25200, 4))
    hit_idx = rng.choice(25200, size=min(hits, 25200), replace=False)
    t[hit_idx, 4] = 0.9
    t[hit_idx, 5] = 0.9
    return t.ravel(), shape


def main() -> int:
    parser = argparse.ArgumentParser(
        description="Benchmark fire_kit decode latency on synthetic output tensors (with and without NMS)."
    )
    parser.add_argument("--layout", choices=("multi", "candidate", "single"), default="multi", help="Output tensor layout.")
    parser.add_argument("--anchors", type=int, default=8400, help="Candidate count for channel-first layouts.")
    parser.add_argument("--classes", type=int, default=2, help="Class count for the candidate-major layout.")
    parser.add_argument("--hits", type=int, default=20, help="Number of confident candidates per tensor.")
    parser.add_argument("--imgsz", type=int, default=640, help="Model input side length.")
    parser.add_argument("--width", type=int, default=1280, help="Original frame width.")
    parser.add_argument("--height", type=int, default=720, help="Original frame height.")
    parser.add_argument("--repeats", type=int, default=200, help="Timed iterations.")
    parser.add_argument("--warmup", type=int, default=10, help="Untimed warmup iterations.")
    parser.add_argument("--seed", type=int, default=0)
    args = parser.parse_args()

    buffer, shape = _synthetic_tensor(args.layout, args.anchors, args.classes, args.hits, args.imgsz, args.seed)
    labels = ("fire", "smoke")
    decoder_plain = FireDecoder(DecodeConfig(labels=labels, input_side=int(args.imgsz)))
    decoder_nms = FireDecoder(DecodeConfig(labels=labels, input_side=int(args.imgsz), apply_nms=True))

    t_plain: List[float] = []
    t_nms: List[float] = []
    n_plain = n_nms = 0
    for it in range(int(args.warmup) + int(args.repeats)):
        t0 = time.perf_counter()
        plain = decoder_plain.decode(buffer, shape, args.width, args.height)
        t1 = time.perf_counter()
        suppressed = decoder_nms.decode(buffer, shape, args.width, args.height)
        t2 = time.perf_counter()
        if it < int(args.warmup):
            continue
        t_plain.append(t1 - t0)
        t_nms.append(t2 - t1)
        n_plain, n_nms = len(plain), len(suppressed)

    if not t_plain:
        raise RuntimeError("No benchmark samples collected (check --repeats).")

    print(_format_summary("decode", _summarize_ms(t_plain)))
    print(_format_summary("decode_with_nms", _summarize_ms(t_nms)))
    print(f"shape={shape} detections={n_plain} detections_after_nms={n_nms}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
