from dataclasses import dataclass
from typing import Tuple


class DecodeWarning(UserWarning):
    """
    Non-fatal decoding diagnostic (unrecognized layout, unreadable buffer).
    """


@dataclass(frozen=True)
class BoundingBox:
    """
    Axis-aligned box in original frame pixel coordinates. Not clamped to the frame.
    """

    left: float
    top: float
    right: float
    bottom: float

    @property
    def width(self) -> float:
        return self.right - self.left

    @property
    def height(self) -> float:
        return self.bottom - self.top

    def as_xyxy(self) -> Tuple[float, float, float, float]:
        return self.left, self.top, self.right, self.bottom


@dataclass(frozen=True)
class Candidate:
    index: int
    center_x: float
    center_y: float
    width: float
    height: float
    objectness: float
    class_id: int
    class_score: float
    # True when box fields were divided by the model input side during decode.
    normalized: bool = False


@dataclass(frozen=True)
class DetectionResult:
    """
    One accepted detection for a single frame.
    """

    label: str
    confidence: float
    bounding_box: BoundingBox
    class_id: int = 0

    def as_xyxy(self) -> Tuple[float, float, float, float]:
        return self.bounding_box.as_xyxy()
