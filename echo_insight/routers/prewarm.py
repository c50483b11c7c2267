# echo_insight/routers/prewarm.py
from fastapi import APIRouter, Depends
import time

from echo_insight.config import Settings, get_settings
from echo_insight.core.models import AnalysisError
from echo_insight.services.ocr import OcrSession

router = APIRouter()


@router.get("/prewarm")
@router.post("/prewarm")
def prewarm(settings: Settings = Depends(get_settings)):
    """
    Probe the OCR backend so a missing Tesseract shows up before the first upload.
    Opens and closes a session; nothing is recognized.
    """
    out = {"ok": True, "timings_ms": {}, "providers": {}}

    t0 = time.time()
    try:
        with OcrSession.from_settings(settings) as session:
            out["providers"]["ocr"] = {
                "engine": "tesseract",
                "version": session.version,
                "lang": session.lang,
                "loaded": True,
            }
    except AnalysisError as e:
        out["ok"] = False
        out.setdefault("errors", []).append(f"OCR: {e.message}")
        out["providers"]["ocr"] = {"loaded": False, "error": e.message}
    out["timings_ms"]["ocr"] = int((time.time() - t0) * 1000)

    return out
