from __future__ import annotations

import logging
import math
import warnings
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

import numpy as np

from .layout import TensorLayout, classify_layout
from .nms import NMSConfig, suppress_overlaps
from .types import BoundingBox, Candidate, DecodeWarning, DetectionResult

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DecodeConfig:
    """
    Per-call decoding configuration supplied by the host application.
    """

    objectness_threshold: float = 0.25
    class_threshold: float = 0.25
    labels: Tuple[str, ...] = ("fire",)
    # Side length of the square model input (e.g. 640 for a 640x640 export).
    input_side: int = 640
    # Off by default: overlapping boxes for one object are all reported.
    apply_nms: bool = False
    iou_threshold: float = 0.45
    max_detections: int = 300

    def __post_init__(self) -> None:
        if isinstance(self.labels, str):
            raise ValueError("labels must be a sequence of strings, not a single string")
        object.__setattr__(self, "labels", tuple(self.labels))
        if not self.labels or any(not isinstance(label, str) or not label for label in self.labels):
            raise ValueError("labels must be a non-empty sequence of non-empty strings")
        for name in ("objectness_threshold", "class_threshold", "iou_threshold"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise ValueError(f"{name} must be a number")
            if not math.isfinite(value) or value < 0.0 or value > 1.0:
                raise ValueError(f"{name} must be in [0, 1]")
        if isinstance(self.input_side, bool) or not isinstance(self.input_side, int) or self.input_side <= 0:
            raise ValueError("input_side must be a positive integer")
        if isinstance(self.max_detections, bool) or not isinstance(self.max_detections, int) or self.max_detections <= 0:
            raise ValueError("max_detections must be a positive integer")

    def label_for(self, class_id: int) -> str:
        if 0 <= class_id < len(self.labels):
            return self.labels[class_id]
        return str(class_id)


def _field_table(flat: np.ndarray, layout: TensorLayout) -> np.ndarray:
    """
    View the flat buffer as (record_size, N): one row per field, one column per candidate.

    Elements the buffer does not reach are NaN ("absent"); surplus elements are ignored.
    Candidates with no readable field at all are left out of the table.
    """

    n = layout.num_candidates
    rs = layout.record_size
    if flat.size == layout.expected_size:
        if layout.channel_major:
            return flat.reshape(rs, n)
        return flat.reshape(n, rs).T

    if layout.channel_major:
        reachable = min(n, flat.size)
    else:
        reachable = min(n, -(-flat.size // rs))

    fields = np.arange(rs, dtype=np.int64)[:, None]
    cands = np.arange(reachable, dtype=np.int64)[None, :]
    idx = fields * n + cands if layout.channel_major else cands * rs + fields

    table = np.full(idx.shape, np.nan, dtype=np.float32)
    valid = idx < flat.size
    table[valid] = flat[idx[valid]]
    return table


def decode_candidates(flat: np.ndarray, layout: TensorLayout, cfg: DecodeConfig) -> List[Candidate]:
    """
    Walk every candidate of a recognized layout and keep the ones that pass both gates.

    Per candidate:
    - objectness (or the best class score when objectness is implicit) must be
      strictly above `objectness_threshold`; an absent objectness drops it
    - argmax over class scores, first index wins ties; absent class scores read as 0.0
    - the chosen class score must be strictly above `class_threshold`
    - all four box fields must be present, otherwise the candidate is dropped
    Output keeps increasing candidate index order.
    """

    table = _field_table(flat, layout)
    n = table.shape[1]
    if n == 0:
        return []
    c0 = layout.class_offset

    class_scores = np.nan_to_num(table[c0 : c0 + layout.num_classes, :], nan=0.0)
    if layout.implicit_objectness:
        objectness = class_scores.max(axis=0)
    else:
        objectness = table[layout.objectness_offset, :]

    # NaN compares False, so absent objectness never passes.
    keep = objectness > cfg.objectness_threshold
    if not keep.any():
        return []

    class_ids = np.argmax(class_scores, axis=0)
    class_conf = class_scores[class_ids, np.arange(n)]
    keep &= class_conf > cfg.class_threshold

    boxes = table[0:4, :]
    keep &= np.isfinite(boxes).all(axis=0)

    idx = np.flatnonzero(keep)
    if idx.size == 0:
        return []

    cx, cy, w, h = boxes[:, idx].astype(np.float64)
    if layout.normalizes_boxes:
        side = float(cfg.input_side)
        cx, cy, w, h = cx / side, cy / side, w / side, h / side

    return [
        Candidate(
            index=int(i),
            center_x=float(x),
            center_y=float(y),
            width=float(bw),
            height=float(bh),
            objectness=float(objectness[i]),
            class_id=int(class_ids[i]),
            class_score=float(class_conf[i]),
            normalized=layout.normalizes_boxes,
        )
        for i, x, y, bw, bh in zip(idx, cx, cy, w, h)
    ]


def map_to_image(candidate: Candidate, input_side: int, original_width: float, original_height: float) -> BoundingBox:
    """
    Rescale a candidate box into original frame pixels.

    Normalized candidates use a reference unit of 1.0, model-pixel candidates use
    `input_side`. Boxes are not clamped to the frame.
    """

    reference_unit = 1.0 if candidate.normalized else float(input_side)
    scale_x = float(original_width) / reference_unit
    scale_y = float(original_height) / reference_unit

    half_w = candidate.width / 2
    half_h = candidate.height / 2
    return BoundingBox(
        left=(candidate.center_x - half_w) * scale_x,
        top=(candidate.center_y - half_h) * scale_y,
        right=(candidate.center_x + half_w) * scale_x,
        bottom=(candidate.center_y + half_h) * scale_y,
    )


class FireDecoder:
    """
    Stateless decoder: raw output tensor + declared shape -> detections in frame pixels.

    Supported layouts (per image, batch of one):
    - (1, 84, N)        : [cx, cy, w, h, 80 class scores] channel-major
    - (1, 25200, 5 + C) : [cx, cy, w, h, obj, C class scores] per candidate
    - (1, 6, N)         : [cx, cy, w, h, obj, class score] channel-major

    Holds only the immutable config, so one instance can be shared across worker threads.
    """

    def __init__(self, cfg: Optional[DecodeConfig] = None):
        self.cfg = cfg if cfg is not None else DecodeConfig()

    def decode(
        self,
        raw_output: object,
        shape: Optional[Sequence[int]],
        original_width: float,
        original_height: float,
    ) -> List[DetectionResult]:
        """
        Decode one frame's model output.

        Args:
            raw_output: flat float buffer (any array-like; ndarrays are flattened)
            shape: declared output shape; None takes the shape of `raw_output`
            original_width/original_height: size of the captured frame in pixels

        Never raises for malformed tensors: unrecognized layouts and unreadable
        buffers yield [] and a DecodeWarning.
        """

        return self._decode_frame(raw_output, shape, original_width, original_height)

    def _decode_frame(
        self,
        raw_output: object,
        shape: Optional[Sequence[int]],
        original_width: float,
        original_height: float,
    ) -> List[DetectionResult]:
        # Called directly from each public entry point; `_warn` stacklevel counts on it.
        try:
            arr = np.asarray(raw_output, dtype=np.float32)
        except (TypeError, ValueError) as exc:
            self._warn(f"Could not read output buffer as float32: {exc}")
            return []

        if shape is None:
            shape = arr.shape
        layout = classify_layout(shape)
        if not layout.recognized:
            self._warn(f"Unrecognized output tensor shape {shape!r}; no detections decoded.")
            return []

        flat = arr.ravel()
        missing = layout.expected_size - flat.size
        if missing > 0:
            logger.debug(
                "Output buffer for shape %s is %d elements short; affected candidates are dropped.",
                layout.shape,
                missing,
            )
        elif missing < 0:
            logger.debug("Output buffer for shape %s has %d surplus elements.", layout.shape, -missing)

        try:
            candidates = decode_candidates(flat, layout, self.cfg)
        except (OverflowError, IndexError, ValueError, MemoryError) as exc:
            self._warn(f"Could not decode output tensor with shape {layout.shape}: {exc!r}")
            return []
        results = [
            DetectionResult(
                label=self.cfg.label_for(cand.class_id),
                confidence=cand.class_score,
                bounding_box=map_to_image(cand, self.cfg.input_side, original_width, original_height),
                class_id=cand.class_id,
            )
            for cand in candidates
        ]

        if self.cfg.apply_nms and results:
            results = suppress_overlaps(
                results,
                NMSConfig(iou_threshold=self.cfg.iou_threshold, max_detections=self.cfg.max_detections),
            )
        return results

    @staticmethod
    def _warn(msg: str) -> None:
        logger.warning(msg)
        # _warn <- _decode_frame <- decode <- host call site
        warnings.warn(msg, DecodeWarning, stacklevel=4)


def decode(
    raw_output: object,
    shape: Optional[Sequence[int]],
    original_width: float,
    original_height: float,
    cfg: Optional[DecodeConfig] = None,
) -> List[DetectionResult]:
    return FireDecoder(cfg)._decode_frame(raw_output, shape, original_width, original_height)
