# echo_insight/services/extract.py
from __future__ import annotations
from typing import TYPE_CHECKING, Any, Dict, Optional
from pathlib import Path
import base64
import io
import logging

from PIL import Image, ImageDraw

from echo_insight.core.models import RegionRect
from echo_insight.core.regions import named_regions

if TYPE_CHECKING:
    from PIL.Image import Image as _PILImageType
    PILImageLike = _PILImageType
else:
    PILImageLike = Any  # type: ignore[assignment]

log = logging.getLogger(__name__)

# --------------------------- Cropping ---------------------------

def crop_region(img: PILImageLike, rect: RegionRect) -> PILImageLike:
    """Standalone copy of one rectangle; the source image is left untouched."""
    w, h = img.size
    if not rect.fits(w, h):
        raise ValueError(f"region {rect} outside {w}x{h} image")
    return img.crop(rect.box)

# --------------------------- Encoding ---------------------------

def encode_png(img: PILImageLike) -> bytes:
    buf = io.BytesIO()
    img.save(buf, format="PNG")
    return buf.getvalue()


def to_data_url(img: PILImageLike) -> str:
    return "data:image/png;base64," + base64.b64encode(encode_png(img)).decode("ascii")


def crop_to_data_url(img: PILImageLike, rect: RegionRect) -> str:
    return to_data_url(crop_region(img, rect))


def reencode_jpeg(img: PILImageLike, quality: int = 92) -> PILImageLike:
    """
    Round-trip through JPEG so OCR sees the same compressed buffer every time.
    Alpha is dropped; the prepared image is opaque gray anyway.
    """
    buf = io.BytesIO()
    img.convert("RGB").save(buf, format="JPEG", quality=max(1, min(95, int(quality))))
    buf.seek(0)
    with Image.open(buf) as jpg:
        jpg.load()
        return jpg.copy()

# --------------------------- Debug helpers ---------------------------

def draw_regions(img: PILImageLike, out_path: Path,
                 regions: Optional[Dict[str, RegionRect]] = None) -> Path:
    vis = img.convert("RGB")
    d = ImageDraw.Draw(vis)
    for name, rect in (regions or named_regions()).items():
        lx, ty, rx, by = rect.box
        d.rectangle((lx, ty, rx - 1, by - 1), outline="red", width=2)
        d.text((lx + 2, ty + 2), name, fill="red")
    out_path.parent.mkdir(parents=True, exist_ok=True)
    vis.save(out_path)
    return out_path


def save_debug_crop(img: PILImageLike, rect: RegionRect, debug_dir: Optional[Path], name: str) -> None:
    if debug_dir is None:
        return
    try:
        debug_dir.mkdir(parents=True, exist_ok=True)
        crop_region(img, rect).save(debug_dir / f"{name}.png")
    except OSError:
        log.warning("could not write debug crop %s to %s", name, debug_dir)
