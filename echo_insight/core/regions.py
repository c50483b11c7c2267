# echo_insight/core/regions.py
from __future__ import annotations
from typing import Dict, Iterator, List, Tuple

from .models import RegionRect

# --------------------------- Reference layout (pixels) ---------------------------
# Calibrated against the 1920x1080 showcase card; nothing here is scaled.

REF_W, REF_H = 1920, 1080

NAME_REGION = RegionRect(70, 26, 450, 60)

ECHO_REGIONS: Tuple[RegionRect, ...] = (
    RegionRect(22, 651, 190, 180),
    RegionRect(397, 651, 190, 180),
    RegionRect(771, 651, 190, 180),
    RegionRect(1145, 651, 190, 180),
    RegionRect(1518, 651, 190, 180),
)

SET_ICON_REGIONS: Tuple[RegionRect, ...] = (
    RegionRect(268, 663, 48, 48),
    RegionRect(641, 663, 48, 48),
    RegionRect(1015, 663, 48, 48),
    RegionRect(1390, 663, 48, 48),
    RegionRect(1764, 663, 48, 48),
)

COST_ICON_REGIONS: Tuple[RegionRect, ...] = (
    RegionRect(323, 664, 47, 47),
    RegionRect(696, 664, 47, 47),
    RegionRect(1070, 664, 47, 47),
    RegionRect(1445, 664, 47, 47),
    RegionRect(1819, 664, 47, 47),
)

# Sub-stat lines: same five rows under every echo column
_STAT_COLUMNS = (65, 443, 817, 1191, 1565)
_STAT_ROWS = ((885, 36), (918, 35), (953, 35), (987, 34), (1021, 35))
_STAT_WIDTH = 310

STAT_REGIONS: Tuple[Tuple[RegionRect, ...], ...] = tuple(
    tuple(RegionRect(left, top, _STAT_WIDTH, height) for top, height in _STAT_ROWS)
    for left in _STAT_COLUMNS
)

ECHO_COUNT = len(STAT_REGIONS)
STATS_PER_ECHO = len(_STAT_ROWS)


def iter_stat_regions() -> Iterator[Tuple[int, int, RegionRect]]:
    """Yield (echo_index, line_index, rect) for all 25 stat lines, echo-major."""
    for echo_index, lines in enumerate(STAT_REGIONS):
        for line_index, rect in enumerate(lines):
            yield echo_index, line_index, rect


def named_regions() -> Dict[str, RegionRect]:
    """Flat name -> rect map, e.g. for drawing the calibration overlay."""
    out: Dict[str, RegionRect] = {"name": NAME_REGION}
    for i in range(ECHO_COUNT):
        out[f"echo{i + 1}"] = ECHO_REGIONS[i]
        out[f"set{i + 1}"] = SET_ICON_REGIONS[i]
        out[f"cost{i + 1}"] = COST_ICON_REGIONS[i]
    for echo_index, line_index, rect in iter_stat_regions():
        out[f"stat{echo_index + 1}.{line_index + 1}"] = rect
    return out


def catalog() -> Dict[str, object]:
    def _rects(rects: Tuple[RegionRect, ...]) -> List[Dict[str, int]]:
        return [r.to_dict() for r in rects]

    return {
        "width": REF_W,
        "height": REF_H,
        "name": NAME_REGION.to_dict(),
        "echoes": _rects(ECHO_REGIONS),
        "set_icons": _rects(SET_ICON_REGIONS),
        "cost_icons": _rects(COST_ICON_REGIONS),
        "stats": [_rects(lines) for lines in STAT_REGIONS],
    }
