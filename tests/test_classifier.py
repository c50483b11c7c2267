import pytest

from echo_insight.core.models import CorrectedStat
from echo_insight.core.registry import CHARACTER_PROFILES, build_profile
from echo_insight.core.stats import STAT_THRESHOLDS, StatKey
from echo_insight.services.classifier import (
    classify, is_crit_relevant, percentage_of_cap, tier_for, weight_cutoff,
)


@pytest.mark.parametrize("key,value,tier", [
    (StatKey.CRIT_RATE, 6.2, 0),
    (StatKey.CRIT_RATE, 6.3, 1),
    (StatKey.CRIT_RATE, 9.0, 5),
    (StatKey.CRIT_RATE, 10.5, 8),
    (StatKey.ATK, 29, 0),
    (StatKey.ATK, 45, 3),
    (StatKey.ATK, 50, 6),
    (StatKey.ATK, 59, 6),
    (StatKey.ATK, 60, 8),
    (StatKey.HP, 470, 5),
])
def test_tier_for(key, value, tier):
    assert tier_for(key, value) == tier


@pytest.mark.parametrize("key", list(StatKey))
def test_tier_is_monotonic(key):
    cap = STAT_THRESHOLDS[key][8]
    values = [cap * i / 40 for i in range(0, 61)]
    tiers = [tier_for(key, v) for v in values]
    assert tiers == sorted(tiers)
    assert all(0 <= t <= 8 for t in tiers)


def test_percentage_of_cap():
    assert percentage_of_cap(StatKey.CRIT_DMG, 21) == pytest.approx(100.0)
    assert percentage_of_cap(StatKey.HP, 290) == pytest.approx(50.0)


def test_weight_cutoff_is_fifth_largest(crit_profiles):
    assert weight_cutoff(crit_profiles["Tester"].weights) == pytest.approx(0.25)


def test_weighted_flag_includes_ties():
    profile = build_profile("Ties", {
        StatKey.CRIT_RATE: 1, StatKey.CRIT_DMG: 1, StatKey.ATK_PCT: 0.5, StatKey.HEAVY_ATTACK: 0.5,
        StatKey.ENERGY_REGEN: 0.5, StatKey.ATK: 0.5, StatKey.HP: 0.1,
    })
    cutoff = weight_cutoff(profile.weights)
    flagged = {k for k in StatKey if profile.weight(k) >= cutoff}
    assert cutoff == pytest.approx(0.5)
    assert len(flagged) == 6
    assert StatKey.HP not in flagged


@pytest.mark.parametrize("name", list(CHARACTER_PROFILES))
def test_weighted_set_has_at_least_five(name):
    profile = CHARACTER_PROFILES[name]
    cutoff = weight_cutoff(profile.weights)
    flagged = [k for k in StatKey if profile.weight(k) >= cutoff]
    assert len(flagged) >= 5


def test_sparse_profile_flags_everything():
    profile = build_profile("Sparse", {StatKey.CRIT_RATE: 1, StatKey.CRIT_DMG: 1})
    assert weight_cutoff(profile.weights) == 0
    stat = classify(CorrectedStat("HP", StatKey.HP, 470, "470"), profile)
    assert stat.is_weighted


def test_classify(crit_profiles):
    profile = crit_profiles["Tester"]
    stat = classify(CorrectedStat("Crit. Rate", StatKey.CRIT_RATE, 7.5, "7.5%"), profile)
    assert stat.tier == 3
    assert stat.percentage_of_cap == pytest.approx(7.5 / 10.5 * 100)
    assert stat.is_crit_relevant
    assert stat.is_weighted
    assert stat.icon == "crit_r"
    assert stat.display_value == "7.5%"

    hp = classify(CorrectedStat("HP", StatKey.HP, 470, "470"), profile)
    assert not hp.is_crit_relevant
    assert not hp.is_weighted
    assert hp.icon == "hp"


def test_crit_relevance_needs_weight():
    support = CHARACTER_PROFILES["Verina"]
    assert is_crit_relevant(StatKey.CRIT_RATE, support)
    assert not is_crit_relevant(StatKey.CRIT_DMG, support)
    assert not is_crit_relevant(StatKey.ATK, support)
