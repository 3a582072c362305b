"""
Fire/smoke detection decoding helpers.

Turns the raw flat output tensor of a YOLO-style detector into labeled,
confidence-scored boxes in original frame pixels, and answers the alerting
question "is there fire in this frame?". Framework-agnostic: the model runs
elsewhere, only NumPy is needed to decode (OpenCV for frame resizing).
"""

from .types import BoundingBox, Candidate, DecodeWarning, DetectionResult
from .layout import LayoutKind, TensorLayout, classify_layout
from .nms import NMSConfig, nms, suppress_overlaps
from .postprocess import DecodeConfig, FireDecoder, decode, decode_candidates, map_to_image
from .alerts import count_label, detection_summary, has_fire, has_label, has_smoke
from .metadata import load_class_names, load_labels
from .config import load_decode_config
from .runtime import FirePipeline, PreprocessConfig, resize_square

__all__ = [
    "BoundingBox",
    "Candidate",
    "DecodeWarning",
    "DetectionResult",
    "LayoutKind",
    "TensorLayout",
    "classify_layout",
    "NMSConfig",
    "nms",
    "suppress_overlaps",
    "DecodeConfig",
    "FireDecoder",
    "decode",
    "decode_candidates",
    "map_to_image",
    "count_label",
    "detection_summary",
    "has_fire",
    "has_label",
    "has_smoke",
    "load_class_names",
    "load_labels",
    "load_decode_config",
    "FirePipeline",
    "PreprocessConfig",
    "resize_square",
]
