from dataclasses import dataclass
from typing import List, Sequence

import numpy as np

from .types import DetectionResult


@dataclass
class NMSConfig:
    iou_threshold: float = 0.45
    max_detections: int = 300

def nms(boxes: np.ndarray, scores: np.ndarray, cfg: NMSConfig) -> np.ndarray:
    """
    Simple NumPy NMS. Expects boxes shape (N,4) in xyxy and scores shape (N,).
    Returns indices of boxes to keep, highest score first.
    """

    if boxes.size == 0:
        return np.empty((0,), dtype=np.int32)

    x1 = boxes[:, 0]
    y1 = boxes[:, 1]
    x2 = boxes[:, 2]
    y2 = boxes[:, 3]
    areas = (x2 - x1) * (y2 - y1)

    # Stable sort keeps the earlier candidate first among equal scores.
    order = np.argsort(-scores, kind="stable")
    keep = []

    while order.size > 0 and len(keep) < cfg.max_detections:
        i = order[0]
        keep.append(i)

        xx1 = np.maximum(x1[i], x1[order[1:]])
        yy1 = np.maximum(y1[i], y1[order[1:]])
        xx2 = np.minimum(x2[i], x2[order[1:]])
        yy2 = np.minimum(y2[i], y2[order[1:]])

        w = np.maximum(0.0, xx2 - xx1)
        h = np.maximum(0.0, yy2 - yy1)
        inter = w * h
        union = areas[i] + areas[order[1:]] - inter
        iou = inter / np.maximum(union, 1e-6)

        inds = np.where(iou <= cfg.iou_threshold)[0]
        order = order[inds + 1]

    return np.array(keep, dtype=np.int32)


def suppress_overlaps(results: Sequence[DetectionResult], cfg: NMSConfig) -> List[DetectionResult]:
    """
    Optional post-filter: per-class NMS over decoded results.

    Survivors are returned in their original scan order, not by score.
    """

    if not results:
        return []

    boxes = np.array([r.as_xyxy() for r in results], dtype=np.float64)
    scores = np.array([r.confidence for r in results], dtype=np.float64)
    class_ids = np.array([r.class_id for r in results], dtype=np.int64)

    kept: List[int] = []
    for cls in np.unique(class_ids):
        idx = np.where(class_ids == cls)[0]
        keep_local = nms(boxes[idx], scores[idx], cfg)
        kept.extend(idx[keep_local].tolist())

    if len(kept) > cfg.max_detections:
        kept = sorted(kept, key=lambda k: -scores[k])[: cfg.max_detections]
    return [results[k] for k in sorted(kept)]
