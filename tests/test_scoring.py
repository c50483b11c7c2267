import pytest

from echo_insight.core.models import CorrectedStat
from echo_insight.core.registry import build_profile
from echo_insight.core.stats import StatKey
from echo_insight.services import scoring
from echo_insight.services.classifier import classify


def _stats(profile, *pairs):
    return [classify(CorrectedStat(k.value, k, v, str(v)), profile) for k, v in pairs]


def test_crit_value_counts_rate_double():
    profile = build_profile("Both", {StatKey.CRIT_RATE: 1, StatKey.CRIT_DMG: 1})
    crit, _ = scoring.score_echo(_stats(profile, (StatKey.CRIT_RATE, 7.5), (StatKey.CRIT_DMG, 15)), profile)
    assert crit == pytest.approx(30)


def test_crit_value_ignores_unweighted_crit_stats():
    profile = build_profile("RateOnly", {StatKey.CRIT_RATE: 1, StatKey.ATK_PCT: 1})
    crit, _ = scoring.score_echo(_stats(profile, (StatKey.CRIT_RATE, 7.5), (StatKey.CRIT_DMG, 15)), profile)
    assert crit == pytest.approx(15)


def test_max_crit_halved_without_both_crit_stats():
    both = build_profile("Both", {StatKey.CRIT_RATE: 1, StatKey.CRIT_DMG: 1, StatKey.ATK_PCT: 1})
    rate_only = build_profile("RateOnly", {StatKey.CRIT_RATE: 1, StatKey.ATK_PCT: 1})
    assert scoring.max_crit_total(both) == pytest.approx(210)
    assert scoring.max_crit_total(rate_only) == pytest.approx(scoring.max_crit_total(both) / 2)


def test_weighted_value_uses_every_stat(crit_profiles):
    profile = crit_profiles["Tester"]
    stats = _stats(profile, (StatKey.ATK_PCT, 11.6), (StatKey.HP, 580), (StatKey.ATK, 30))
    _, weighted = scoring.score_echo(stats, profile)
    # ATK sits exactly on the cutoff; HP has no weight at all
    assert weighted == pytest.approx(100 * 0.75 + 50 * 0.25)


def test_weighted_caps(crit_profiles):
    profile = crit_profiles["Tester"]
    assert scoring.max_weighted_per_echo(profile) == pytest.approx(350)
    assert scoring.max_weighted_total(profile) == pytest.approx(1750)


def test_percent_of_guards_zero_cap():
    assert scoring.percent_of(10, 0) == 0.0
    assert scoring.percent_of(21, 42) == pytest.approx(50)


@pytest.mark.parametrize("pct,rank", [
    (100, "Sentinel"),
    (75, "Sentinel"),
    (74.99, "WTF+"),
    (60.5, "SSS+"),
    (50, "SS"),
    (40, "A"),
    (22.5, "F+"),
    (22.49, "F"),
    (0, "F"),
])
def test_rank_for(pct, rank):
    assert scoring.rank_for(pct) == rank


def test_rank_is_monotonic():
    ladder = [r for _, r in scoring.RANK_THRESHOLDS] + [scoring.LOWEST_RANK]
    positions = [ladder.index(scoring.rank_for(p / 10)) for p in range(0, 1001)]
    # higher percentage never yields a worse (later) rank
    assert positions == sorted(positions, reverse=True)
