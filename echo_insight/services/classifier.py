# echo_insight/services/classifier.py
from __future__ import annotations
from typing import Mapping

from echo_insight.core.models import ClassifiedStat, CorrectedStat
from echo_insight.core.registry import CharacterProfile
from echo_insight.core.stats import CRIT_KEYS, MAX_TIER, STAT_ICONS, STAT_THRESHOLDS, StatKey


def tier_for(key: StatKey, value: float) -> int:
    """Highest populated tier whose minimum the value reaches; 0 below tier 1."""
    tier = 0
    for idx, threshold in STAT_THRESHOLDS.get(key, {}).items():
        if value >= threshold:
            tier = max(tier, idx)
    return tier


def percentage_of_cap(key: StatKey, value: float) -> float:
    cap = STAT_THRESHOLDS.get(key, {}).get(MAX_TIER)
    if not cap:
        return 0.0
    return value / cap * 100.0


def weight_cutoff(weights: Mapping[StatKey, float]) -> float:
    """5th largest weight of the profile (0 if it has fewer than five)."""
    ranked = sorted(weights.values(), reverse=True)
    return ranked[4] if len(ranked) >= 5 else 0.0


def is_crit_relevant(key: StatKey, profile: CharacterProfile) -> bool:
    return key in CRIT_KEYS and profile.weight(key) > 0


def classify(stat: CorrectedStat, profile: CharacterProfile) -> ClassifiedStat:
    key = stat.canonical_key
    return ClassifiedStat(
        label=stat.label,
        canonical_key=key,
        numeric_value=stat.numeric_value,
        display_value=stat.display_value,
        tier=tier_for(key, stat.numeric_value),
        percentage_of_cap=percentage_of_cap(key, stat.numeric_value),
        is_crit_relevant=is_crit_relevant(key, profile),
        # ties at the cutoff count, so more than five stats can be flagged
        is_weighted=profile.weight(key) >= weight_cutoff(profile.weights),
        icon=STAT_ICONS.get(key, "none"),
    )
