from __future__ import annotations
from dataclasses import dataclass, asdict
from enum import Enum
from typing import Any, Dict, Optional, Tuple

from .stats import StatKey


class ErrorKind(str, Enum):
    invalid_image_dimensions = "invalid_image_dimensions"
    unreadable_image = "unreadable_image"
    unknown_character = "unknown_character"
    ocr_backend_failure = "ocr_backend_failure"


class AnalysisError(Exception):
    """Fatal error for a single analysis run. No partial result exists when this is raised."""

    def __init__(self, kind: ErrorKind, message: str, detail: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.kind = kind
        self.message = message
        self.detail = detail or {}

    def to_api(self) -> dict:
        return {"error": self.message, "kind": self.kind.value, "detail": self.detail}


@dataclass(frozen=True)
class RegionRect:
    left: int
    top: int
    width: int
    height: int

    @property
    def box(self) -> Tuple[int, int, int, int]:
        """(left, upper, right, lower) as Pillow's crop() wants it."""
        return (self.left, self.top, self.left + self.width, self.top + self.height)

    def fits(self, width: int, height: int) -> bool:
        return (
            self.left >= 0 and self.top >= 0
            and self.width > 0 and self.height > 0
            and self.left + self.width <= width
            and self.top + self.height <= height
        )

    def to_dict(self) -> Dict[str, int]:
        return asdict(self)


@dataclass(frozen=True)
class RawStatReading:
    echo_index: int
    region_index: int
    raw_text: str


@dataclass(frozen=True)
class CorrectedStat:
    label: str
    canonical_key: StatKey
    numeric_value: float
    display_value: str   # keeps the "%" when the game shows one


@dataclass(frozen=True)
class ClassifiedStat(CorrectedStat):
    tier: int = 0
    percentage_of_cap: float = 0.0
    is_crit_relevant: bool = False
    is_weighted: bool = False
    icon: str = "none"

    def to_dict(self) -> Dict[str, Any]:
        d = asdict(self)
        d["canonical_key"] = self.canonical_key.value
        return d


@dataclass(frozen=True)
class EchoResult:
    index: int
    stats: Tuple[ClassifiedStat, ...] = ()
    crit_value: float = 0.0
    weighted_value: float = 0.0
    weighted_percentage: float = 0.0
    echo_image: Optional[str] = None
    set_image: Optional[str] = None
    cost_image: Optional[str] = None

    @property
    def title(self) -> str:
        return f"Echo {self.index + 1}"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "index": self.index,
            "title": self.title,
            "stats": [s.to_dict() for s in self.stats],
            "crit_value": self.crit_value,
            "weighted_value": self.weighted_value,
            "weighted_percentage": self.weighted_percentage,
            "echo_image": self.echo_image,
            "set_image": self.set_image,
            "cost_image": self.cost_image,
        }


@dataclass(frozen=True)
class AnalysisResult:
    character: str
    card_image: str
    echoes: Tuple[EchoResult, ...]
    total_crit_value: float
    total_weighted_value: float
    max_crit_value: float
    max_weighted_value: float
    crit_percentage: float
    weighted_percentage: float
    crit_rank: str
    weighted_rank: str
    name_text: str = ""
    dropped_lines: int = 0

    @property
    def max_crit_per_echo(self) -> float:
        return self.max_crit_value / 5

    @property
    def max_weighted_per_echo(self) -> float:
        return self.max_weighted_value / 5

    def to_dict(self) -> Dict[str, Any]:
        return {
            "character": self.character,
            "card_image": self.card_image,
            "name_text": self.name_text,
            "echoes": [e.to_dict() for e in self.echoes],
            "total_crit_value": self.total_crit_value,
            "total_weighted_value": self.total_weighted_value,
            "max_crit_value": self.max_crit_value,
            "max_weighted_value": self.max_weighted_value,
            "max_crit_per_echo": self.max_crit_per_echo,
            "max_weighted_per_echo": self.max_weighted_per_echo,
            "crit_percentage": self.crit_percentage,
            "weighted_percentage": self.weighted_percentage,
            "crit_rank": self.crit_rank,
            "weighted_rank": self.weighted_rank,
            "dropped_lines": self.dropped_lines,
        }
