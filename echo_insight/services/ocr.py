# echo_insight/services/ocr.py
from __future__ import annotations
from concurrent.futures import ThreadPoolExecutor, wait, FIRST_EXCEPTION
from typing import TYPE_CHECKING, Any, List, Optional, Sequence
import logging
import string
import time

import pytesseract

from echo_insight.core.models import AnalysisError, ErrorKind, RegionRect
from echo_insight.services.extract import crop_region

if TYPE_CHECKING:
    from PIL.Image import Image as _PILImageType
    PILImageLike = _PILImageType
    from echo_insight.config import Settings
else:
    PILImageLike = Any  # type: ignore[assignment]

log = logging.getLogger(__name__)

# [0-9a-zA-Z%,. ]
OCR_WHITELIST = string.digits + string.ascii_lowercase + string.ascii_uppercase + "%,. "


def tesseract_config(whitelist: str = OCR_WHITELIST, psm: int = 7) -> str:
    # psm 7 = single text line; quoted so the trailing space survives shlex
    return f'--oem 1 --psm {psm} -c tessedit_char_whitelist="{whitelist}"'


class OcrSession:
    """
    One Tesseract backend shared by every region of a run.

    open() resolves and probes the binary once, close() releases the worker
    pool. Use as a context manager so release happens on failure too.
    """

    def __init__(
        self,
        lang: str = "eng",
        tesseract_cmd: Optional[str] = None,
        timeout_s: float = 15.0,
        run_timeout_s: float = 120.0,
        max_workers: int = 4,
    ):
        self.lang = lang
        self.tesseract_cmd = tesseract_cmd
        self.timeout_s = timeout_s
        self.run_timeout_s = run_timeout_s
        self.max_workers = max(1, max_workers)
        self.version: Optional[str] = None
        self._pool: Optional[ThreadPoolExecutor] = None

    @classmethod
    def from_settings(cls, settings: "Settings") -> "OcrSession":
        return cls(
            lang=settings.OCR_LANG,
            tesseract_cmd=settings.TESSERACT_CMD,
            timeout_s=settings.OCR_TIMEOUT_S,
            run_timeout_s=settings.OCR_RUN_TIMEOUT_S,
            max_workers=settings.OCR_MAX_WORKERS,
        )

    # ---- lifecycle ----

    def _check_backend(self) -> str:
        if self.tesseract_cmd:
            pytesseract.pytesseract.tesseract_cmd = self.tesseract_cmd
        return str(pytesseract.get_tesseract_version())

    def open(self) -> "OcrSession":
        if self._pool is not None:
            return self
        try:
            self.version = self._check_backend()
        except Exception as e:
            log.error("OCR backend unavailable: %s", e)
            raise AnalysisError(ErrorKind.ocr_backend_failure, f"OCR backend unavailable: {e}") from e
        self._pool = ThreadPoolExecutor(max_workers=self.max_workers, thread_name_prefix="ocr")
        log.info("OCR session open tesseract=%s lang=%s workers=%s", self.version, self.lang, self.max_workers)
        return self

    def close(self) -> None:
        if self._pool is not None:
            self._pool.shutdown(wait=False, cancel_futures=True)
            self._pool = None
            log.debug("OCR session closed")

    @property
    def is_open(self) -> bool:
        return self._pool is not None

    def __enter__(self) -> "OcrSession":
        return self.open()

    def __exit__(self, *exc) -> None:
        self.close()

    # ---- recognition ----

    def _image_to_string(self, img: PILImageLike, config: str) -> str:
        return pytesseract.image_to_string(img, lang=self.lang, config=config, timeout=self.timeout_s)

    def recognize(self, image: PILImageLike, rect: RegionRect, whitelist: str = OCR_WHITELIST) -> str:
        """Raw text for one region. Any backend error is fatal for the run."""
        crop = crop_region(image, rect)
        try:
            text = self._image_to_string(crop, tesseract_config(whitelist))
        except Exception as e:
            log.error("OCR failed for region %s: %s", rect, e)
            raise AnalysisError(
                ErrorKind.ocr_backend_failure, f"OCR failed: {e}", {"region": rect.to_dict()}
            ) from e
        # tesseract terminates each page with a form feed
        return (text or "").rstrip("\x0c")

    def recognize_many(
        self,
        image: PILImageLike,
        rects: Sequence[RegionRect],
        whitelist: str = OCR_WHITELIST,
    ) -> List[str]:
        """
        Concurrent recognize() over disjoint regions; results come back in input order.

        On the first failure or the run timeout, queued calls are cancelled but calls
        already inside Tesseract keep running until their own per-call timeout.
        """
        if self._pool is None:
            raise RuntimeError("OcrSession is not open")
        started = time.perf_counter()
        futures = [self._pool.submit(self.recognize, image, r, whitelist) for r in rects]
        done, pending = wait(futures, timeout=self.run_timeout_s, return_when=FIRST_EXCEPTION)
        for f in pending:
            f.cancel()
        for f in futures:
            exc = f.exception() if f in done else None
            if exc is not None:
                raise exc
        if pending:
            raise AnalysisError(
                ErrorKind.ocr_backend_failure,
                f"OCR timed out after {self.run_timeout_s:.0f}s",
                {"pending": len(pending)},
            )
        log.debug("OCR %d regions in %.1f ms", len(rects), (time.perf_counter() - started) * 1000.0)
        return [f.result() for f in futures]
