from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Sequence, Tuple


class LayoutKind(str, Enum):
    CHANNELS_FIRST_MULTI_CLASS = "channels_first_multi_class"
    CANDIDATE_MAJOR_WITH_CLASSES = "candidate_major_with_classes"
    CHANNELS_FIRST_SINGLE_CLASS = "channels_first_single_class"
    UNRECOGNIZED = "unrecognized"


# (1, 84, N): 4 box channels + 80 COCO-style class channels.
MULTI_CLASS_CHANNELS = 84
MULTI_CLASS_NUM_CLASSES = 80
# (1, 25200, 5 + C): classic anchor-based export.
CANDIDATE_MAJOR_ANCHORS = 25200
# (1, 6, N): 4 box channels + objectness + one class score.
SINGLE_CLASS_CHANNELS = 6

MAX_FLAT_SIZE = 2**63 - 1


@dataclass(frozen=True)
class TensorLayout:
    """
    Addressing parameters for one recognized output tensor organization.

    Channel-major layouts read field `f` of candidate `i` at `f * N + i`,
    candidate-major layouts at `i * record_size + f`.
    """

    kind: LayoutKind
    shape: Tuple[int, ...] = ()
    num_candidates: int = 0
    num_classes: int = 0
    channel_major: bool = True
    # Field index of the objectness score; None when objectness is implied
    # by the best class score.
    objectness_offset: Optional[int] = None
    class_offset: int = 4
    # Channel-first exports carry model-pixel boxes that are normalized by the
    # input side during decode; the candidate-major export is mapped from
    # model-pixel units directly.
    normalizes_boxes: bool = True

    @property
    def recognized(self) -> bool:
        return self.kind is not LayoutKind.UNRECOGNIZED

    @property
    def implicit_objectness(self) -> bool:
        return self.objectness_offset is None

    @property
    def record_size(self) -> int:
        return self.class_offset + self.num_classes

    @property
    def expected_size(self) -> int:
        return self.num_candidates * self.record_size

    def reference_unit(self, input_side: int) -> float:
        return 1.0 if self.normalizes_boxes else float(input_side)


def _as_dims(shape: Sequence[object]) -> Optional[Tuple[int, ...]]:
    try:
        dims = tuple(int(d) for d in shape)  # type: ignore[arg-type]
    except (TypeError, ValueError, OverflowError):
        return None
    if any(int(d) != d for d in shape):  # type: ignore[operator]
        return None
    return dims


def classify_layout(shape: Sequence[int]) -> TensorLayout:
    """
    Pick the decoding strategy for a declared output shape.

    First match wins:
    - (1, 84, N)        -> channels-first, 80 classes, objectness = best class score
    - (1, 25200, 5 + C) -> candidate-major records [cx, cy, w, h, obj, classes...]
    - (1, 6, N)         -> channels-first, objectness + a single class score
    Everything else (and shapes whose candidate/class counts come out empty) is
    UNRECOGNIZED. Never raises.
    """

    dims = _as_dims(shape) if shape is not None else None
    unrecognized = TensorLayout(kind=LayoutKind.UNRECOGNIZED, shape=dims or ())
    if dims is None or len(dims) != 3:
        return unrecognized

    if dims[1] == MULTI_CLASS_CHANNELS:
        layout = TensorLayout(
            kind=LayoutKind.CHANNELS_FIRST_MULTI_CLASS,
            shape=dims,
            num_candidates=dims[2],
            num_classes=MULTI_CLASS_NUM_CLASSES,
            channel_major=True,
            objectness_offset=None,
            class_offset=4,
            normalizes_boxes=True,
        )
    elif dims[1] == CANDIDATE_MAJOR_ANCHORS:
        layout = TensorLayout(
            kind=LayoutKind.CANDIDATE_MAJOR_WITH_CLASSES,
            shape=dims,
            num_candidates=dims[1],
            num_classes=dims[2] - 5,
            channel_major=False,
            objectness_offset=4,
            class_offset=5,
            normalizes_boxes=False,
        )
    elif dims[1] == SINGLE_CLASS_CHANNELS:
        layout = TensorLayout(
            kind=LayoutKind.CHANNELS_FIRST_SINGLE_CLASS,
            shape=dims,
            num_candidates=dims[2],
            num_classes=1,
            channel_major=True,
            objectness_offset=4,
            class_offset=5,
            normalizes_boxes=True,
        )
    else:
        return unrecognized

    if layout.num_candidates <= 0 or layout.num_classes <= 0:
        return unrecognized
    # Flat indices must fit in int64.
    if layout.expected_size > MAX_FLAT_SIZE:
        return unrecognized
    return layout
