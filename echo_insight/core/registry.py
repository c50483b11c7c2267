from __future__ import annotations
from dataclasses import dataclass
from types import MappingProxyType
from typing import Dict, Mapping

from .stats import StatKey

S = StatKey


@dataclass(frozen=True)
class CharacterProfile:
    name: str
    weights: Mapping[StatKey, float]

    def weight(self, key: StatKey) -> float:
        return self.weights.get(key, 0.0)

    def to_api(self) -> dict:
        return {"name": self.name, "weights": {k.value: v for k, v in self.weights.items()}}


def build_profile(name: str, weights: Dict[StatKey, float]) -> CharacterProfile:
    # every stat gets an explicit weight; 0 means "irrelevant for this character"
    full = {k: float(weights.get(k, 0.0)) for k in StatKey}
    return CharacterProfile(name=name, weights=MappingProxyType(full))


# Iteration order is match priority; names must not overlap as substrings.
_PROFILES = [
    build_profile("Jinhsi", {S.CRIT_RATE: 1, S.CRIT_DMG: 1, S.ATK_PCT: 0.75, S.RESONANCE_SKILL: 0.7,
        S.ENERGY_REGEN: 0.3, S.ATK: 0.25, S.RESONANCE_LIBERATION: 0.1}),
    build_profile("Changli", {S.CRIT_RATE: 1, S.CRIT_DMG: 1, S.ATK_PCT: 0.75, S.RESONANCE_SKILL: 0.5,
        S.RESONANCE_LIBERATION: 0.5, S.ENERGY_REGEN: 0.3, S.ATK: 0.25}),
    build_profile("Camellya", {S.CRIT_RATE: 1, S.CRIT_DMG: 1, S.ATK_PCT: 0.75, S.BASIC_ATTACK: 0.75,
        S.ATK: 0.25, S.ENERGY_REGEN: 0.1}),
    build_profile("Carlotta", {S.CRIT_RATE: 1, S.CRIT_DMG: 1, S.ATK_PCT: 0.75, S.RESONANCE_SKILL: 0.7,
        S.ATK: 0.25, S.ENERGY_REGEN: 0.2}),
    build_profile("Zani", {S.CRIT_RATE: 1, S.CRIT_DMG: 1, S.ATK_PCT: 0.75, S.HEAVY_ATTACK: 0.7,
        S.ATK: 0.25, S.ENERGY_REGEN: 0.2}),
    build_profile("Iuno", {S.CRIT_RATE: 1, S.CRIT_DMG: 1, S.ATK_PCT: 0.75, S.HEAVY_ATTACK: 0.5,
        S.RESONANCE_LIBERATION: 0.5, S.ENERGY_REGEN: 0.3, S.ATK: 0.25}),
    build_profile("Phoebe", {S.CRIT_RATE: 1, S.CRIT_DMG: 1, S.ATK_PCT: 0.75, S.HEAVY_ATTACK: 0.7,
        S.ENERGY_REGEN: 0.3, S.ATK: 0.25}),
    build_profile("Cartethyia", {S.CRIT_RATE: 1, S.CRIT_DMG: 1, S.HP_PCT: 0.75, S.BASIC_ATTACK: 0.7,
        S.HP: 0.25, S.ENERGY_REGEN: 0.1}),
    build_profile("Jiyan", {S.CRIT_RATE: 1, S.CRIT_DMG: 1, S.ATK_PCT: 0.75, S.HEAVY_ATTACK: 0.7,
        S.ENERGY_REGEN: 0.3, S.ATK: 0.25}),
    build_profile("Calcharo", {S.CRIT_RATE: 1, S.CRIT_DMG: 1, S.ATK_PCT: 0.75, S.RESONANCE_LIBERATION: 0.7,
        S.ENERGY_REGEN: 0.3, S.ATK: 0.25}),
    build_profile("Encore", {S.CRIT_RATE: 1, S.CRIT_DMG: 1, S.ATK_PCT: 0.75, S.BASIC_ATTACK: 0.7,
        S.ENERGY_REGEN: 0.3, S.ATK: 0.25}),
    build_profile("Yinlin", {S.CRIT_RATE: 1, S.CRIT_DMG: 1, S.ATK_PCT: 0.75, S.RESONANCE_LIBERATION: 0.5,
        S.RESONANCE_SKILL: 0.5, S.ENERGY_REGEN: 0.4, S.ATK: 0.25}),
    build_profile("Xiangli Yao", {S.CRIT_RATE: 1, S.CRIT_DMG: 1, S.ATK_PCT: 0.75, S.RESONANCE_LIBERATION: 0.7,
        S.ENERGY_REGEN: 0.3, S.ATK: 0.25}),
    build_profile("Zhezhi", {S.CRIT_RATE: 1, S.CRIT_DMG: 1, S.ATK_PCT: 0.75, S.RESONANCE_SKILL: 0.7,
        S.ENERGY_REGEN: 0.3, S.ATK: 0.25}),
    build_profile("Roccia", {S.CRIT_RATE: 1, S.CRIT_DMG: 1, S.ATK_PCT: 0.75, S.BASIC_ATTACK: 0.5,
        S.ENERGY_REGEN: 0.5, S.ATK: 0.25}),
    build_profile("Cantarella", {S.CRIT_RATE: 1, S.CRIT_DMG: 1, S.ATK_PCT: 0.75, S.RESONANCE_SKILL: 0.5,
        S.ENERGY_REGEN: 0.4, S.ATK: 0.25}),
    build_profile("Verina", {S.ENERGY_REGEN: 1, S.ATK_PCT: 0.8, S.ATK: 0.4, S.CRIT_RATE: 0.1,
        S.HP_PCT: 0.1, S.DEF_PCT: 0.05}),
    build_profile("Shorekeeper", {S.ENERGY_REGEN: 1, S.HP_PCT: 0.8, S.CRIT_DMG: 0.5, S.HP: 0.4,
        S.RESONANCE_LIBERATION: 0.2, S.DEF_PCT: 0.05}),
]

CHARACTER_PROFILES: Mapping[str, CharacterProfile] = MappingProxyType({p.name: p for p in _PROFILES})
