from __future__ import annotations

from typing import Iterable

from .types import DetectionResult

FIRE_LABEL = "fire"
SMOKE_LABEL = "smoke"


def has_label(results: Iterable[DetectionResult], label: str, confidence_floor: float) -> bool:
    """
    True iff any result carries `label` with confidence strictly above `confidence_floor`.
    """

    return any(r.label == label and r.confidence > confidence_floor for r in results)


def has_fire(results: Iterable[DetectionResult], confidence_floor: float) -> bool:
    # Floors in use: 0.25 for the live overlay, 0.7 for notifications.
    return has_label(results, FIRE_LABEL, confidence_floor)


def has_smoke(results: Iterable[DetectionResult], confidence_floor: float) -> bool:
    return has_label(results, SMOKE_LABEL, confidence_floor)


def count_label(results: Iterable[DetectionResult], label: str) -> int:
    return sum(1 for r in results if r.label == label)


def detection_summary(results: Iterable[DetectionResult]) -> str:
    return f"Fire Detections: {count_label(results, FIRE_LABEL)}"
