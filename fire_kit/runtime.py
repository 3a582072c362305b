from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence, Tuple, Union

import numpy as np

from .postprocess import DecodeConfig, FireDecoder
from .types import DetectionResult

# Either the output array itself, or (flat buffer, declared shape).
InferOutput = Union[np.ndarray, Tuple[Sequence[float], Sequence[int]]]


@dataclass(frozen=True)
class PreprocessConfig:
    # Frames from OpenCV capture are BGR; the models expect RGB.
    bgr_input: bool = True
    # False -> (1, S, S, 3) as mobile exports take it, True -> (1, 3, S, S).
    channels_first: bool = False


@dataclass(frozen=True)
class PreprocessResult:
    blob: np.ndarray
    orig_size: Tuple[int, int]


def resize_square(image: np.ndarray, side: int) -> np.ndarray:
    """
    Bilinear resize to (side, side). Aspect ratio is not preserved (no letterbox padding),
    which is what the decoder's per-axis rescaling assumes.
    """

    h, w = image.shape[:2]
    if (w, h) == (side, side):
        return image

    try:
        import cv2  # type: ignore
    except Exception as e:  # pragma: no cover
        raise ImportError("OpenCV is required for resize_square(). Install with `pip install opencv-python`.") from e

    return cv2.resize(image, (side, side), interpolation=cv2.INTER_LINEAR)


class FirePipeline:
    """
    Plug-and-play per-frame pipeline: resize -> inference -> decode.

    `infer_fn` is supplied by the host (model loading is not handled here). It receives
    the preprocessed blob and returns the raw output, either as an array whose shape is
    the declared shape or as a `(flat_buffer, shape)` pair.
    """

    def __init__(
        self,
        infer_fn: Callable[[np.ndarray], InferOutput],
        *,
        decode_cfg: Optional[DecodeConfig] = None,
        preprocess_cfg: PreprocessConfig = PreprocessConfig(),
    ):
        self._infer_fn = infer_fn
        self.decoder = FireDecoder(decode_cfg)
        self.preprocess_cfg = preprocess_cfg

    @property
    def decode_cfg(self) -> DecodeConfig:
        return self.decoder.cfg

    def preprocess(self, frame: np.ndarray) -> PreprocessResult:
        if frame is None or not hasattr(frame, "shape"):
            raise TypeError("frame must be a NumPy array.")
        if frame.ndim != 3 or frame.shape[2] != 3:
            raise ValueError(f"Expected frame shape (H, W, 3), got {getattr(frame, 'shape', None)}")

        orig_h, orig_w = frame.shape[:2]
        img = resize_square(frame, self.decode_cfg.input_side)
        if self.preprocess_cfg.bgr_input:
            img = img[:, :, ::-1]

        blob = img.astype(np.float32) / 255.0
        if self.preprocess_cfg.channels_first:
            blob = np.transpose(blob, (2, 0, 1))
        blob = np.ascontiguousarray(blob[None, ...])

        return PreprocessResult(blob=blob, orig_size=(orig_w, orig_h))

    def __call__(self, frame: np.ndarray) -> List[DetectionResult]:
        prep = self.preprocess(frame)
        output = self._infer_fn(prep.blob)
        if isinstance(output, tuple):
            raw, shape = output
        else:
            raw, shape = output, None
        orig_w, orig_h = prep.orig_size
        return self.decoder.decode(raw, shape, orig_w, orig_h)
