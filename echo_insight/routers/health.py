# echo_insight/routers/health.py
from fastapi import APIRouter, Depends

from echo_insight.config import Settings, get_settings
from echo_insight.core.registry import CHARACTER_PROFILES

router = APIRouter()


@router.get("/health/env")
def env_preview(settings: Settings = Depends(get_settings)):
    return {
        "status": "ok",
        # server
        "PORT": settings.PORT,
        "DATA_DIR": settings.DATA_DIR,
        "UPLOAD_DIR": str(settings.upload_dir),
        "MAX_UPLOAD_MB": settings.MAX_UPLOAD_MB,
        "ALLOWED_ORIGINS": settings.ALLOWED_ORIGINS,
        # OCR (binary path only, no secrets here)
        "OCR": {
            "tesseract_cmd": settings.TESSERACT_CMD or "tesseract",
            "lang": settings.OCR_LANG,
            "timeout_s": settings.OCR_TIMEOUT_S,
            "run_timeout_s": settings.OCR_RUN_TIMEOUT_S,
            "max_workers": settings.OCR_MAX_WORKERS,
            "jpeg_quality": settings.OCR_JPEG_QUALITY,
        },
        "LEVELS": {
            "input_min": settings.LEVELS_INPUT_MIN,
            "input_max": settings.LEVELS_INPUT_MAX,
            "gamma": settings.LEVELS_GAMMA,
        },
        "characters": len(CHARACTER_PROFILES),
    }
