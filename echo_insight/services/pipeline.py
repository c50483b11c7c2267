# echo_insight/services/pipeline.py
from __future__ import annotations
from typing import TYPE_CHECKING, Any, List, Mapping, Optional, Tuple
from pathlib import Path
import logging
import os
import time

from PIL import Image, UnidentifiedImageError

from echo_insight.core.models import (
    AnalysisError, AnalysisResult, ClassifiedStat, EchoResult, ErrorKind, RawStatReading,
)
from echo_insight.core.regions import (
    COST_ICON_REGIONS, ECHO_COUNT, ECHO_REGIONS, NAME_REGION, SET_ICON_REGIONS, iter_stat_regions,
)
from echo_insight.core.registry import CHARACTER_PROFILES, CharacterProfile
from echo_insight.services.classifier import classify
from echo_insight.services.extract import crop_to_data_url, draw_regions, reencode_jpeg, save_debug_crop
from echo_insight.services.matcher import match_character
from echo_insight.services.normalize import correct_name, correct_stat
from echo_insight.services.ocr import OcrSession
from echo_insight.services.preprocess import GAMMA, INPUT_MAX, INPUT_MIN, prepare_image
from echo_insight.services import scoring

if TYPE_CHECKING:
    from PIL.Image import Image as _PILImageType
    PILImageLike = _PILImageType
else:
    PILImageLike = Any  # type: ignore[assignment]

log = logging.getLogger(__name__)

ALLOWED_FORMATS = {"PNG", "JPEG"}


def card_image_path(name: str) -> str:
    return f"/insight-cards/{name.replace(' ', '', 1)}.webp"

# --------------------------- Stages ---------------------------

def read_stat_lines(session: OcrSession, ocr_source: PILImageLike,
                    debug_dir: Optional[Path] = None) -> List[RawStatReading]:
    slots = list(iter_stat_regions())
    for echo_index, line_index, rect in slots:
        save_debug_crop(ocr_source, rect, debug_dir, f"stat_{echo_index + 1}_{line_index + 1}")
    texts = session.recognize_many(ocr_source, [rect for _, _, rect in slots])
    return [
        RawStatReading(echo_index=e, region_index=i, raw_text=t)
        for (e, i, _), t in zip(slots, texts)
    ]


def classify_readings(readings: List[RawStatReading],
                      profile: CharacterProfile) -> Tuple[List[List[ClassifiedStat]], int]:
    per_echo: List[List[ClassifiedStat]] = [[] for _ in range(ECHO_COUNT)]
    dropped = 0
    for reading in readings:
        corrected = correct_stat(reading.raw_text)
        if corrected is None:
            dropped += 1
            continue
        per_echo[reading.echo_index].append(classify(corrected, profile))
    return per_echo, dropped


def build_echo(index: int, stats: List[ClassifiedStat], profile: CharacterProfile,
               prepared: Optional[PILImageLike]) -> EchoResult:
    crit, weighted = scoring.score_echo(stats, profile)
    images = {}
    if prepared is not None:
        images = {
            "echo_image": crop_to_data_url(prepared, ECHO_REGIONS[index]),
            "set_image": crop_to_data_url(prepared, SET_ICON_REGIONS[index]),
            "cost_image": crop_to_data_url(prepared, COST_ICON_REGIONS[index]),
        }
    return EchoResult(
        index=index,
        stats=tuple(stats),
        crit_value=crit,
        weighted_value=weighted,
        weighted_percentage=scoring.percent_of(weighted, scoring.max_weighted_per_echo(profile)),
        **images,
    )

# --------------------------- Public API ---------------------------

def analyze_image(
    img: PILImageLike,
    session: OcrSession,
    profiles: Mapping[str, CharacterProfile] = CHARACTER_PROFILES,
    include_crops: bool = True,
    debug_dir: Optional[Path] = None,
    jpeg_quality: int = 92,
    input_min: float = INPUT_MIN,
    input_max: float = INPUT_MAX,
    gamma: float = GAMMA,
) -> AnalysisResult:
    """
    Screenshot -> scored build. Raises AnalysisError on any fatal condition;
    unreadable stat lines are dropped silently.
    """
    started = time.perf_counter()
    prepared = prepare_image(img, input_min=input_min, input_max=input_max, gamma=gamma)
    ocr_source = reencode_jpeg(prepared, quality=jpeg_quality)
    if debug_dir is not None:
        debug_dir.mkdir(parents=True, exist_ok=True)
        ocr_source.save(debug_dir / "prepared.png")
        save_debug_crop(ocr_source, NAME_REGION, debug_dir, "name")

    # Name first: without a profile the 25 stat reads would be wasted.
    name_text = session.recognize(ocr_source, NAME_REGION)
    name = correct_name(name_text)
    profile = match_character(name, profiles)

    readings = read_stat_lines(session, ocr_source, debug_dir)
    per_echo, dropped = classify_readings(readings, profile)

    echoes = tuple(
        build_echo(i, stats, profile, prepared if include_crops else None)
        for i, stats in enumerate(per_echo)
    )
    total_crit = sum(e.crit_value for e in echoes)
    total_weighted = sum(e.weighted_value for e in echoes)
    max_crit = scoring.max_crit_total(profile)
    max_weighted = scoring.max_weighted_total(profile)
    crit_pct = scoring.percent_of(total_crit, max_crit)
    weighted_pct = scoring.percent_of(total_weighted, max_weighted)

    result = AnalysisResult(
        character=profile.name,
        card_image=card_image_path(profile.name),
        echoes=echoes,
        total_crit_value=total_crit,
        total_weighted_value=total_weighted,
        max_crit_value=max_crit,
        max_weighted_value=max_weighted,
        crit_percentage=crit_pct,
        weighted_percentage=weighted_pct,
        crit_rank=scoring.rank_for(crit_pct),
        weighted_rank=scoring.rank_for(weighted_pct),
        name_text=name_text.strip(),
        dropped_lines=dropped,
    )
    log.info(
        "analysis character=%s crit=%.1f/%.0f (%s) weighted=%.1f%% (%s) dropped=%d duration_ms=%.2f",
        result.character, total_crit, max_crit, result.crit_rank,
        weighted_pct, result.weighted_rank, dropped, (time.perf_counter() - started) * 1000.0,
    )
    return result


def load_image(image_path: str | os.PathLike[str]) -> PILImageLike:
    p = Path(image_path)
    if not p.exists():
        raise FileNotFoundError(f"Image not found: {p}")
    try:
        with Image.open(p) as im:
            if im.format not in ALLOWED_FORMATS:
                raise AnalysisError(
                    ErrorKind.unreadable_image,
                    f"Unsupported image format {im.format}; use PNG or JPEG.",
                    {"format": im.format},
                )
            im.load()
            return im.copy()
    except (UnidentifiedImageError, OSError) as e:
        raise AnalysisError(ErrorKind.unreadable_image, f"Could not decode image: {e}") from e


def analyze_file(image_path: str | os.PathLike[str], session: OcrSession, **kwargs: Any) -> AnalysisResult:
    return analyze_image(load_image(image_path), session, **kwargs)

# --------------------------- CLI ---------------------------

if __name__ == "__main__":
    import sys, json
    from echo_insight.config import get_settings
    # Usage:
    #   python -m echo_insight.services.pipeline <image> [--debug] [--viz]
    logging.basicConfig(level=logging.INFO, format="%(asctime)s | %(levelname)s | %(name)s | %(message)s")
    img_path = sys.argv[1] if len(sys.argv) > 1 else "data/tmp/showcase.png"
    flags = set(a for a in sys.argv[2:] if a.startswith("--"))
    settings = get_settings()
    out_dir = Path(settings.DATA_DIR) / "tmp" / "insight_debug"

    try:
        image = load_image(img_path)
        if "--viz" in flags:
            print(f"regions drawn to {draw_regions(image, out_dir / 'regions.png')}", file=sys.stderr)
        with OcrSession.from_settings(settings) as ocr:
            res = analyze_image(
                image, ocr,
                include_crops=False,
                debug_dir=out_dir if "--debug" in flags else None,
                jpeg_quality=settings.OCR_JPEG_QUALITY,
                input_min=settings.LEVELS_INPUT_MIN,
                input_max=settings.LEVELS_INPUT_MAX,
                gamma=settings.LEVELS_GAMMA,
            )
    except AnalysisError as e:
        print(json.dumps(e.to_api(), indent=2))
        sys.exit(1)
    print(json.dumps(res.to_dict(), indent=2))
