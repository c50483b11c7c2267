# echo_insight/services/preprocess.py
from __future__ import annotations
from typing import TYPE_CHECKING, Any
import logging

import numpy as np
from PIL import Image

from echo_insight.core.models import AnalysisError, ErrorKind
from echo_insight.core.regions import REF_W, REF_H

if TYPE_CHECKING:
    from PIL.Image import Image as _PILImageType
    PILImageLike = _PILImageType
else:
    PILImageLike = Any  # type: ignore[assignment]

log = logging.getLogger(__name__)

# Levels tuned to the showcase UI palette; change only together with the regions.
INPUT_MIN = 35
INPUT_MAX = 168
GAMMA = 1.0
OUTPUT_MIN = 0
OUTPUT_MAX = 255

# Rec. 709 luma
_LUMA = np.array([0.2126, 0.7152, 0.0722], dtype=np.float64)


def validate_dimensions(img: PILImageLike) -> None:
    w, h = img.size
    if (w, h) != (REF_W, REF_H):
        raise AnalysisError(
            ErrorKind.invalid_image_dimensions,
            f"Image must be {REF_W}x{REF_H}, got {w}x{h}. Upload the original showcase screenshot.",
            {"width": w, "height": h},
        )


def adjust_levels(
    img: PILImageLike,
    input_min: float = INPUT_MIN,
    input_max: float = INPUT_MAX,
    gamma: float = GAMMA,
    output_min: float = OUTPUT_MIN,
    output_max: float = OUTPUT_MAX,
) -> PILImageLike:
    """
    Grayscale + levels remap. RGB channels all receive the same gray value,
    alpha is passed through. Returns a new RGBA image.
    """
    if input_max <= input_min:
        raise ValueError("input_max must be greater than input_min")
    if gamma <= 0:
        raise ValueError("gamma must be positive")

    arr = np.asarray(img.convert("RGBA"))
    rgb = arr[..., :3].astype(np.float64)
    inv_gamma = 1.0 / gamma

    gray = rgb @ _LUMA
    gray = (gray - input_min) / (input_max - input_min)
    gray = np.clip(gray, 0.0, 1.0)
    gray = np.power(gray, inv_gamma)
    gray = gray * (output_max - output_min) + output_min
    gray = np.clip(gray, 0, 255)

    # canvas pixel storage rounds to nearest, ties to even
    g8 = np.rint(gray).astype(np.uint8)
    out = np.empty_like(arr)
    out[..., 0] = g8
    out[..., 1] = g8
    out[..., 2] = g8
    out[..., 3] = arr[..., 3]
    return Image.fromarray(out)


def prepare_image(
    img: PILImageLike,
    input_min: float = INPUT_MIN,
    input_max: float = INPUT_MAX,
    gamma: float = GAMMA,
) -> PILImageLike:
    """Dimension check first, then the levels pass. Nothing is OCR'd on a rejected image."""
    validate_dimensions(img)
    prepared = adjust_levels(img, input_min=input_min, input_max=input_max, gamma=gamma)
    log.debug("prepared %sx%s image levels=[%s,%s] gamma=%s",
              img.size[0], img.size[1], input_min, input_max, gamma)
    return prepared
