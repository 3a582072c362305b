from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, List

from .metadata import load_labels
from .postprocess import DecodeConfig


def _require_number(payload: Dict[str, Any], key: str) -> float:
    value = payload[key]
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"{key} must be a number")
    return float(value)


def _require_int(payload: Dict[str, Any], key: str) -> int:
    value = payload[key]
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"{key} must be an integer")
    return int(value)


def _require_labels(value: Any) -> List[str]:
    if not isinstance(value, list) or not value:
        raise ValueError("labels must be a non-empty list of strings")
    if not all(isinstance(item, str) and item.strip() for item in value):
        raise ValueError("labels must not contain empty or non-string entries")
    return [item.strip() for item in value]


def load_decode_config(path: Path) -> DecodeConfig:
    """
    Load a DecodeConfig from a JSON object, e.g.

        {"objectness_threshold": 0.3, "labels": ["fire", "smoke"], "input_side": 640}

    `labels_file` (resolved relative to the config file) may replace `labels`.
    Omitted keys keep the DecodeConfig defaults.
    """

    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Decode config not found: {path}")
    raw = path.read_text(encoding="utf-8")
    try:
        payload = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise ValueError(f"Invalid decode config JSON: {path}") from exc
    if not isinstance(payload, dict):
        raise ValueError("Decode config must be a JSON object")

    allowed = {
        "objectness_threshold",
        "class_threshold",
        "labels",
        "labels_file",
        "input_side",
        "apply_nms",
        "iou_threshold",
        "max_detections",
    }
    unknown = sorted(set(payload.keys()) - allowed)
    if unknown:
        raise ValueError(f"Unknown decode config keys: {unknown}")
    if "labels" in payload and "labels_file" in payload:
        raise ValueError("Use either 'labels' or 'labels_file', not both.")

    kwargs: Dict[str, Any] = {}
    for key in ("objectness_threshold", "class_threshold", "iou_threshold"):
        if key in payload:
            kwargs[key] = _require_number(payload, key)
    for key in ("input_side", "max_detections"):
        if key in payload:
            kwargs[key] = _require_int(payload, key)
    if "apply_nms" in payload:
        if not isinstance(payload["apply_nms"], bool):
            raise ValueError("apply_nms must be a boolean")
        kwargs["apply_nms"] = payload["apply_nms"]

    if "labels" in payload:
        kwargs["labels"] = tuple(_require_labels(payload["labels"]))
    elif "labels_file" in payload:
        labels_file = payload["labels_file"]
        if not isinstance(labels_file, str) or not labels_file.strip():
            raise ValueError("labels_file must be a non-empty string")
        labels_path = Path(labels_file)
        if not labels_path.is_absolute():
            labels_path = path.parent / labels_path
        if not labels_path.exists():
            raise FileNotFoundError(f"Labels file not found: {labels_path}")
        kwargs["labels"] = tuple(load_labels(str(labels_path)))

    return DecodeConfig(**kwargs)
