# echo_insight/services/scoring.py
from __future__ import annotations
from typing import Iterable, Tuple

from echo_insight.core.models import ClassifiedStat
from echo_insight.core.registry import CharacterProfile
from echo_insight.core.stats import StatKey

# 21% Crit. Rate x2, or 42% Crit. DMG
MAX_CRIT_PER_ECHO = 42.0
ECHO_SLOTS = 5

RANK_THRESHOLDS: Tuple[Tuple[float, str], ...] = (
    (75, "Sentinel"),
    (70, "WTF+"),
    (65, "WTF"),
    (60.5, "SSS+"),
    (56.5, "SSS"),
    (53, "SS+"),
    (50, "SS"),
    (47.5, "S+"),
    (45, "S"),
    (42.5, "A+"),
    (40, "A"),
    (37.5, "B+"),
    (35, "B"),
    (32.5, "C+"),
    (30, "C"),
    (27.5, "D+"),
    (25, "D"),
    (22.5, "F+"),
)
LOWEST_RANK = "F"


def crit_contribution(stat: ClassifiedStat, profile: CharacterProfile) -> float:
    key = stat.canonical_key
    if key is StatKey.CRIT_RATE and profile.weight(key) > 0:
        return 2 * stat.numeric_value
    if key is StatKey.CRIT_DMG and profile.weight(key) > 0:
        return stat.numeric_value
    return 0.0


def score_echo(stats: Iterable[ClassifiedStat], profile: CharacterProfile) -> Tuple[float, float]:
    """(crit_value, weighted_value) for one echo. is_weighted is display-only and not consulted."""
    crit = 0.0
    weighted = 0.0
    for s in stats:
        crit += crit_contribution(s, profile)
        weighted += s.percentage_of_cap * profile.weight(s.canonical_key)
    return crit, weighted


def max_crit_total(profile: CharacterProfile) -> float:
    both = profile.weight(StatKey.CRIT_RATE) > 0 and profile.weight(StatKey.CRIT_DMG) > 0
    return MAX_CRIT_PER_ECHO * ECHO_SLOTS * (1 if both else 0.5)


def max_weighted_per_echo(profile: CharacterProfile) -> float:
    top5 = sorted(profile.weights.values(), reverse=True)[:5]
    return sum(top5) * 100


def max_weighted_total(profile: CharacterProfile) -> float:
    return max_weighted_per_echo(profile) * ECHO_SLOTS


def percent_of(score: float, max_score: float) -> float:
    if max_score <= 0:
        return 0.0
    return 100.0 * score / max_score


def rank_for(percentage: float) -> str:
    for minimum, rank in RANK_THRESHOLDS:
        if percentage >= minimum:
            return rank
    return LOWEST_RANK
