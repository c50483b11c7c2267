# echo_insight/routers/insight_api.py
from __future__ import annotations
from fastapi import APIRouter, Depends, UploadFile, File, HTTPException, Form
from pydantic import BaseModel
from typing import Callable, Dict, Iterable, List, Optional
from pathlib import Path, PurePath
import os
import uuid

from echo_insight.config import Settings, get_settings
from echo_insight.core.regions import catalog
from echo_insight.core.registry import CHARACTER_PROFILES
from echo_insight.services.ocr import OcrSession
from echo_insight.services.pipeline import analyze_image, load_image
from echo_insight.services.preprocess import validate_dimensions

router = APIRouter(prefix="/insight", tags=["insight"])

IMAGE_EXTS = {".png", ".jpg", ".jpeg"}
MIME_TO_EXT = {
    "image/png": ".png",
    "image/jpeg": ".jpg",
    "image/jpg": ".jpg",
}


def ocr_session_factory(settings: Settings = Depends(get_settings)) -> Callable[[], OcrSession]:
    """Builds an unopened session; the handler opens it only once the upload checks out."""
    return lambda: OcrSession.from_settings(settings)


def _safe_ext(upload: UploadFile, allow: Iterable[str]) -> str:
    # 1) Trust content-type → ext if known, else fall back to sanitized filename’s ext
    ext = MIME_TO_EXT.get((upload.content_type or "").lower(), "")
    if not ext:
        name_only = Path(PurePath(upload.filename or "")).name
        ext = Path(name_only).suffix.lower()
    if not ext:
        raise HTTPException(status_code=400, detail="Missing or unsupported file extension.")
    if ext not in allow:
        raise HTTPException(status_code=400, detail=f"Unsupported file type: {ext}")
    return ext


def _safe_save_upload(upload: UploadFile, tmp_dir: Path, max_mb: int,
                      allow_exts: Iterable[str] = IMAGE_EXTS) -> Path:
    """
    Save upload safely inside tmp_dir:
    - generates a UUID filename with validated/derived extension
    - exclusive create with 0600 perms
    - verifies resolved path is within tmp_dir
    - aborts (and removes the partial file) past max_mb
    """
    ext = _safe_ext(upload, allow_exts)
    tmp_dir.mkdir(parents=True, exist_ok=True)
    tmp_root = tmp_dir.resolve()
    dest = (tmp_root / f"{uuid.uuid4().hex}{ext}").resolve()
    if not str(dest).startswith(str(tmp_root) + os.sep):
        raise HTTPException(status_code=400, detail="Invalid upload destination.")

    max_bytes = max_mb * 1024 * 1024
    written = 0
    fd = os.open(str(dest), os.O_WRONLY | os.O_CREAT | os.O_EXCL, 0o600)
    try:
        with os.fdopen(fd, "wb") as f:
            while True:
                chunk = upload.file.read(1024 * 1024)
                if not chunk:
                    break
                written += len(chunk)
                if written > max_bytes:
                    raise HTTPException(status_code=413, detail=f"File too large (> {max_mb} MB)")
                f.write(chunk)
    except HTTPException:
        dest.unlink(missing_ok=True)
        raise
    finally:
        upload.file.close()
    if written == 0:
        dest.unlink(missing_ok=True)
        raise HTTPException(status_code=400, detail="Empty upload.")
    return dest

# ---------- Schemas ----------

class StatResponse(BaseModel):
    label: str
    canonical_key: str
    numeric_value: float
    display_value: str
    tier: int
    percentage_of_cap: float
    is_crit_relevant: bool
    is_weighted: bool
    icon: str


class EchoResponse(BaseModel):
    index: int
    title: str
    stats: List[StatResponse]
    crit_value: float
    weighted_value: float
    weighted_percentage: float
    echo_image: Optional[str] = None
    set_image: Optional[str] = None
    cost_image: Optional[str] = None


class AnalysisResponse(BaseModel):
    character: str
    card_image: str
    name_text: str
    echoes: List[EchoResponse]
    total_crit_value: float
    total_weighted_value: float
    max_crit_value: float
    max_weighted_value: float
    max_crit_per_echo: float
    max_weighted_per_echo: float
    crit_percentage: float
    weighted_percentage: float
    crit_rank: str
    weighted_rank: str
    dropped_lines: int
    debug_dir: Optional[str] = None


class CharacterResponse(BaseModel):
    name: str
    weights: Dict[str, float]

# ---------- Endpoints ----------

@router.post("/analyze", response_model=AnalysisResponse)
def analyze(
    image: UploadFile = File(...),
    debug: bool = Form(False),
    crops: bool = Form(True),
    new_session: Callable[[], OcrSession] = Depends(ocr_session_factory),
    settings: Settings = Depends(get_settings),
):
    dest = _safe_save_upload(image, settings.upload_dir, settings.MAX_UPLOAD_MB)
    debug_dir = settings.debug_dir / dest.stem if debug else None
    try:
        img = load_image(dest)
        # bad uploads are rejected before Tesseract is touched
        validate_dimensions(img)
        with new_session() as session:
            result = analyze_image(
                img,
                session,
                include_crops=crops,
                debug_dir=debug_dir,
                jpeg_quality=settings.OCR_JPEG_QUALITY,
                input_min=settings.LEVELS_INPUT_MIN,
                input_max=settings.LEVELS_INPUT_MAX,
                gamma=settings.LEVELS_GAMMA,
            )
    finally:
        dest.unlink(missing_ok=True)
    return AnalysisResponse(**result.to_dict(), debug_dir=str(debug_dir) if debug_dir else None)


@router.get("/characters", response_model=List[CharacterResponse])
def characters():
    return [CharacterResponse(**p.to_api()) for p in CHARACTER_PROFILES.values()]


@router.get("/regions")
def regions():
    return catalog()
