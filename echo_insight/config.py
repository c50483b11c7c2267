# echo_insight/config.py
from functools import lru_cache
from pathlib import Path
from typing import Optional
import os
from dotenv import load_dotenv

ROOT = Path(__file__).resolve().parents[1]

# Load in ascending precedence; later overrides earlier
load_dotenv(ROOT / ".env")
load_dotenv(ROOT / ".env.local", override=True)
load_dotenv(ROOT / "echo_insight" / ".env", override=True)
load_dotenv(ROOT / "echo_insight" / ".env.local", override=True)


class Settings:
    def __init__(self) -> None:
        # Server
        self.PORT: int = int(os.getenv("PORT", "8000"))
        self.DATA_DIR: str = os.getenv("DATA_DIR", str(ROOT / "data"))
        self.MAX_UPLOAD_MB: int = int(os.getenv("MAX_UPLOAD_MB", "20"))

        # CORS
        self.ALLOWED_ORIGINS: list[str] = [
            s.strip() for s in os.getenv("ALLOWED_ORIGINS", "http://localhost:5173").split(",") if s.strip()
        ]

        # OCR
        self.TESSERACT_CMD: Optional[str] = os.getenv("TESSERACT_CMD") or None
        self.OCR_LANG: str = os.getenv("OCR_LANG", "eng")
        self.OCR_TIMEOUT_S: float = float(os.getenv("OCR_TIMEOUT_S", "15"))
        self.OCR_RUN_TIMEOUT_S: float = float(os.getenv("OCR_RUN_TIMEOUT_S", "120"))
        self.OCR_MAX_WORKERS: int = int(os.getenv("OCR_MAX_WORKERS", "4"))
        self.OCR_JPEG_QUALITY: int = int(os.getenv("OCR_JPEG_QUALITY", "92"))

        # Levels pass (see services/preprocess.py)
        self.LEVELS_INPUT_MIN: float = float(os.getenv("LEVELS_INPUT_MIN", "35"))
        self.LEVELS_INPUT_MAX: float = float(os.getenv("LEVELS_INPUT_MAX", "168"))
        self.LEVELS_GAMMA: float = float(os.getenv("LEVELS_GAMMA", "1"))

    @property
    def upload_dir(self) -> Path:
        return Path(self.DATA_DIR) / "tmp" / "uploads"

    @property
    def debug_dir(self) -> Path:
        return Path(self.DATA_DIR) / "tmp" / "insight_debug"


@lru_cache
def get_settings() -> Settings:
    return Settings()
