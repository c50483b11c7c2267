import pytest

from echo_insight.core.stats import StatKey
from echo_insight.services.normalize import (
    LABEL_RULES, NAME_RULES, NONE_LINE,
    canonical_key, clean_stat_text, collapse_first_space, collapse_seventeen, correct_name,
    correct_stat, drop_first_newline, drop_first_number, drop_noise_tokens, extract_value,
    fix_trailing_j, is_valid_line, mark_percent_variant, repair_leading_digits,
)

# ---- character name ----

@pytest.mark.parametrize("raw,expected", [
    ("Zan", "Zani"),
    ("luno", "Iuno"),
    ("  Jinhsj  ", "Jinhsi"),
    ("Jinhsj Lv.90", "Jinhsi Lv.90"),
    ("Changli\n", "Changli"),
    ("", ""),
])
def test_correct_name(raw, expected):
    assert correct_name(raw) == expected


def test_name_substitution_is_first_occurrence_only():
    # "Zani" already contains "Zan"; the literal rewrite still fires once
    assert correct_name("Zani") == "Zanii"


def test_fix_trailing_j_only_touches_first_word():
    assert fix_trailing_j("Roj Taj") == "Roi Taj"
    assert fix_trailing_j("Jinhsi") == "Jinhsi"


def test_name_rules_trim_before_j_fix():
    # trailing whitespace must be gone before the "ends with j" check runs
    assert NAME_RULES[1] is str.strip
    assert correct_name("Jinhsj \n") == "Jinhsi"

# ---- stat text ----

def test_extract_value_takes_first_number():
    assert extract_value("Crit. Rate 7.5%\n") == "7.5%"
    assert extract_value("HP 470 12") == "470"
    assert extract_value("Crit. Rate") == ""


def test_single_step_rules():
    assert drop_first_newline("a\nb\n") == "ab\n"
    assert drop_first_number("ATK 8.6% 12") == "ATK  12"
    assert collapse_first_space("Crit.   DMG  x") == "Crit. DMG  x"
    assert drop_noise_tokens("Crit. Rate  i 8.7%") == "Crit. Rate 8.7%"


def test_label_rules_order():
    assert LABEL_RULES[1] is drop_first_newline
    assert LABEL_RULES[2] is drop_first_number
    assert LABEL_RULES[3] is collapse_first_space
    assert LABEL_RULES[-1] is str.strip


@pytest.mark.parametrize("raw,expected", [
    ("Crit. Rate 7.5%\n", "Crit. Rate 7.5%"),
    ("Grit. Rate 8.1%\n", "Crit. Rate 8.1%"),
    ("Erk DMG 15.0%", "Crit. DMG 15.0%"),
    ("al 470", "HP 470"),
    ("HE 7.9%", "HP 7.9%"),
    ("Heavy Attack DMG Ronus 9.4%", "Heavy Attack DMG Bonus 9.4%"),
    ("Hesonance Skill DMG Bonus 10.1%", "Resonance Skill DMG Bonus 10.1%"),
    ("Crit. Rate 8.7% i", "Crit. Rate 8.7%"),
])
def test_clean_stat_text(raw, expected):
    assert clean_stat_text(raw) == expected


@pytest.mark.parametrize("raw", ["", "HP", "1.7%", "7.5% x", "Rate 7.5%"])
def test_validity_gate_forces_none(raw):
    assert clean_stat_text(raw) == NONE_LINE
    assert correct_stat(raw) is None


def test_is_valid_line_checks_raw_length_not_cleaned():
    assert not is_valid_line("HP", "HP 470")
    assert is_valid_line("HP 4", "HP 4")

# ---- amount repair ----

@pytest.mark.parametrize("amount,expected", [
    ("1.5%", "7.5%"),
    ("17.4%", "17.4%"),
    ("71%", "7.1%"),
    ("7.1", "7.1"),
    ("10.1%", "10.1%"),
])
def test_repair_leading_digits(amount, expected):
    assert repair_leading_digits(amount) == expected


@pytest.mark.parametrize("amount", ["1.5%", "71%", "7.1", "17.4", "1.1", "711"])
def test_repair_is_idempotent(amount):
    once = repair_leading_digits(amount)
    assert repair_leading_digits(once) == once


def test_collapse_seventeen_spares_crit_dmg():
    assert collapse_seventeen("17.4%", "Crit. DMG") == "17.4%"
    assert collapse_seventeen("17.4%", "Crit. Rate") == "7.4%"
    assert collapse_seventeen("10.1%", "ATK") == "10.1%"

# ---- label ----

@pytest.mark.parametrize("label,amount,expected", [
    ("ATK", "8.6%", "ATK%"),
    ("ATK", "50", "ATK"),
    ("HP", "7.9%", "HP%"),
    ("DEF", "10.9%", "DEF%"),
    ("Crit. Rate", "7.5%", "Crit. Rate"),
    ("Energy Regen", "10.0%", "Energy Regen"),
])
def test_mark_percent_variant(label, amount, expected):
    assert mark_percent_variant(label, amount) == expected


@pytest.mark.parametrize("label,expected", [
    ("Crit. DMG", "CritDMG"),
    ("Crit. Rate", "CritRate"),
    ("Basic Attack DMG", "BasicAttackDMGBonus"),
    ("Resonance Skill DMG Bonus", "ResonanceSkillDMGBonus"),
    ("Energy Regen", "EnergyRegen"),
    ("HP%", "HP%"),
])
def test_canonical_key(label, expected):
    assert canonical_key(label) == expected

# ---- full chain ----

@pytest.mark.parametrize("raw,key,value,display", [
    ("Crit. Rate 7.5%\n", StatKey.CRIT_RATE, 7.5, "7.5%"),
    ("Crit. Rate 1.5%", StatKey.CRIT_RATE, 7.5, "7.5%"),
    ("Crit. DMG 17.4%", StatKey.CRIT_DMG, 17.4, "17.4%"),
    ("al 470", StatKey.HP, 470.0, "470"),
    ("HP 7.9%", StatKey.HP_PCT, 7.9, "7.9%"),
    ("ATK 50", StatKey.ATK, 50.0, "50"),
    ("ATK 11.6%", StatKey.ATK_PCT, 11.6, "11.6%"),
    ("Heavy Attack DMG 9.4%", StatKey.HEAVY_ATTACK, 9.4, "9.4%"),
    ("Resonance Liberation DMG Bonus 10.1%", StatKey.RESONANCE_LIBERATION, 10.1, "10.1%"),
    ("Energy Regen 10.8%", StatKey.ENERGY_REGEN, 10.8, "10.8%"),
])
def test_correct_stat(raw, key, value, display):
    stat = correct_stat(raw)
    assert stat is not None
    assert stat.canonical_key is key
    assert stat.numeric_value == pytest.approx(value)
    assert stat.display_value == display


def test_correct_stat_drops_unknown_label_and_missing_value():
    assert correct_stat("Crit. Rate") is None
    assert correct_stat("Crit. Something 7.5%") is None


def test_correct_stat_reads_leading_number_of_repaired_amount():
    # "71.5%" is repaired to "7.1.5%"; only the leading number counts
    stat = correct_stat("Crit. Rate 71.5%")
    assert stat is not None
    assert stat.canonical_key is StatKey.CRIT_RATE
    assert stat.numeric_value == pytest.approx(7.1)
    assert correct_stat("Crit. Rate %") is None
