from __future__ import annotations
from typing import Dict, List, Optional

import pytest
from PIL import Image

from echo_insight.core.models import AnalysisError, ErrorKind, RegionRect
from echo_insight.core.regions import NAME_REGION, STAT_REGIONS
from echo_insight.core.registry import build_profile
from echo_insight.core.stats import StatKey
from echo_insight.services.ocr import OcrSession


class FakeOcrSession(OcrSession):
    """Answers from a rect -> text table instead of running Tesseract."""

    def __init__(self, texts: Optional[Dict[RegionRect, str]] = None, fail_on: Optional[RegionRect] = None):
        super().__init__(max_workers=4, run_timeout_s=10)
        self.texts = dict(texts or {})
        self.fail_on = fail_on
        self.calls: List[RegionRect] = []

    def _check_backend(self) -> str:
        return "fake-5.3"

    def recognize(self, image, rect, whitelist=None):
        self.calls.append(rect)
        if rect == self.fail_on:
            raise AnalysisError(ErrorKind.ocr_backend_failure, "OCR failed: boom")
        return self.texts.get(rect, "")


def stat_texts(lines: Dict[int, List[str]]) -> Dict[RegionRect, str]:
    """{echo_index: [line texts]} -> region table."""
    out: Dict[RegionRect, str] = {}
    for echo_index, texts in lines.items():
        for line_index, text in enumerate(texts):
            out[STAT_REGIONS[echo_index][line_index]] = text
    return out


@pytest.fixture
def showcase() -> Image.Image:
    return Image.new("RGB", (1920, 1080), (90, 90, 90))


@pytest.fixture
def crit_profiles():
    return {
        "Tester": build_profile("Tester", {
            StatKey.CRIT_RATE: 1, StatKey.CRIT_DMG: 1, StatKey.ATK_PCT: 0.75,
            StatKey.HEAVY_ATTACK: 0.5, StatKey.ATK: 0.25,
        }),
    }


@pytest.fixture
def fake_session_factory():
    opened: List[FakeOcrSession] = []

    def make(name: str = "Tester", lines: Optional[Dict[int, List[str]]] = None, **kwargs) -> FakeOcrSession:
        texts = {NAME_REGION: name}
        texts.update(stat_texts(lines or {}))
        session = FakeOcrSession(texts, **kwargs).open()
        opened.append(session)
        return session

    yield make
    for s in opened:
        s.close()
