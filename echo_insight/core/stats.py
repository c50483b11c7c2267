# echo_insight/core/stats.py
from __future__ import annotations
from enum import Enum
from typing import Dict, Optional


class StatKey(str, Enum):
    ATK = "ATK"
    ATK_PCT = "ATK%"
    HP = "HP"
    HP_PCT = "HP%"
    DEF = "DEF"
    DEF_PCT = "DEF%"
    CRIT_RATE = "CritRate"
    CRIT_DMG = "CritDMG"
    ENERGY_REGEN = "EnergyRegen"
    BASIC_ATTACK = "BasicAttackDMGBonus"
    HEAVY_ATTACK = "HeavyAttackDMGBonus"
    RESONANCE_SKILL = "ResonanceSkillDMGBonus"
    RESONANCE_LIBERATION = "ResonanceLiberationDMGBonus"

    @classmethod
    def parse(cls, key: str) -> Optional["StatKey"]:
        """Canonical key string -> member, None for anything unmodeled (incl. "None")."""
        try:
            return cls(key)
        except ValueError:
            return None


CRIT_KEYS = (StatKey.CRIT_RATE, StatKey.CRIT_DMG)

# In-game display labels
STAT_LABELS: Dict[StatKey, str] = {
    StatKey.ATK: "ATK",
    StatKey.ATK_PCT: "ATK%",
    StatKey.HP: "HP",
    StatKey.HP_PCT: "HP%",
    StatKey.DEF: "DEF",
    StatKey.DEF_PCT: "DEF%",
    StatKey.CRIT_RATE: "Crit. Rate",
    StatKey.CRIT_DMG: "Crit. DMG",
    StatKey.ENERGY_REGEN: "Energy Regen",
    StatKey.BASIC_ATTACK: "Basic Attack",
    StatKey.HEAVY_ATTACK: "Heavy Attack",
    StatKey.RESONANCE_SKILL: "Resonance Skill",
    StatKey.RESONANCE_LIBERATION: "Resonance Liberation",
}

# Icon file stems used by the display layer (/insight-icons/<icon>.webp)
STAT_ICONS: Dict[StatKey, str] = {
    StatKey.ATK: "atk",
    StatKey.ATK_PCT: "atk",
    StatKey.HP: "hp",
    StatKey.HP_PCT: "hp",
    StatKey.DEF: "def",
    StatKey.DEF_PCT: "def",
    StatKey.CRIT_RATE: "crit_r",
    StatKey.CRIT_DMG: "crit_d",
    StatKey.ENERGY_REGEN: "energy",
    StatKey.BASIC_ATTACK: "dmg_basic",
    StatKey.HEAVY_ATTACK: "dmg_heavy",
    StatKey.RESONANCE_SKILL: "dmg_res",
    StatKey.RESONANCE_LIBERATION: "dmg_lib",
}

# ---- Sub-stat roll tiers (tier index -> minimum value) ----
# Flat stats only roll on a few steps, so their tables are sparse.

_PCT_ROLLS = {1: 6.4, 2: 7.1, 3: 7.9, 4: 8.6, 5: 9.4, 6: 10.1, 7: 10.9, 8: 11.6}

STAT_THRESHOLDS: Dict[StatKey, Dict[int, float]] = {
    StatKey.ATK: {1: 30, 3: 40, 6: 50, 8: 60},
    StatKey.ATK_PCT: dict(_PCT_ROLLS),
    StatKey.HP: {1: 320, 2: 360, 3: 390, 4: 430, 5: 470, 6: 510, 7: 540, 8: 580},
    StatKey.HP_PCT: dict(_PCT_ROLLS),
    StatKey.DEF: {1: 40, 3: 50, 6: 60, 8: 70},
    StatKey.DEF_PCT: {1: 8.1, 2: 9, 3: 10, 4: 10.9, 5: 11.9, 6: 12.8, 7: 13.8, 8: 14.7},
    StatKey.CRIT_RATE: {1: 6.3, 2: 6.9, 3: 7.5, 4: 8.1, 5: 8.7, 6: 9.3, 7: 9.9, 8: 10.5},
    StatKey.CRIT_DMG: {1: 12.6, 2: 13.8, 3: 15, 4: 16.2, 5: 17.4, 6: 18.6, 7: 19.8, 8: 21},
    StatKey.ENERGY_REGEN: {1: 6.8, 2: 7.6, 3: 8.4, 4: 9.2, 5: 10, 6: 10.8, 7: 11.6, 8: 12.4},
    StatKey.BASIC_ATTACK: dict(_PCT_ROLLS),
    StatKey.HEAVY_ATTACK: dict(_PCT_ROLLS),
    StatKey.RESONANCE_SKILL: dict(_PCT_ROLLS),
    StatKey.RESONANCE_LIBERATION: dict(_PCT_ROLLS),
}

MAX_TIER = 8
