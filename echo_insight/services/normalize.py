# echo_insight/services/normalize.py
"""
OCR clean-up for the showcase card.

Every fix is a small string -> string rule and the rule tuples below are
applied in order; later rules assume the earlier ones already ran. All
literal substitutions replace the first occurrence only.
"""
from __future__ import annotations
from typing import Callable, Optional, Sequence, Tuple
import logging
import math
import re

from echo_insight.core.models import CorrectedStat
from echo_insight.core.stats import StatKey

log = logging.getLogger(__name__)

Rule = Callable[[str], str]

_NUMBER_RX = re.compile(r"\d+(?:\.\d+)?%?")
_SPACE_RX = re.compile(r"\s+")
_LEADING_NUMBER_RX = re.compile(r"^\d+(?:\.\d+)?")

NONE_LINE = "None 0"
REQUIRED_MARKERS = ("Crit", "DMG", "HP", "DEF", "ATK", "Energy")
PERCENT_VARIANT_LABELS = "ATK|HP|DEF"


def _apply(rules: Sequence[Rule], text: str) -> str:
    for rule in rules:
        text = rule(text)
    return text


def _substitute(pairs: Sequence[Tuple[str, str]]) -> Rule:
    def rule(text: str) -> str:
        for old, new in pairs:
            text = text.replace(old, new, 1)
        return text
    return rule

# --------------------------- Character name ---------------------------

NAME_TYPOS: Tuple[Tuple[str, str], ...] = (
    ("luno", "Iuno"),
    ("Zan", "Zani"),
)


def fix_trailing_j(text: str) -> str:
    """'...j' as the first word is almost always a misread '...i'."""
    parts = text.split(" ")
    if parts[0].endswith("j"):
        parts[0] = parts[0][:-1] + "i"
    return " ".join(parts)


NAME_RULES: Tuple[Rule, ...] = (
    _substitute(NAME_TYPOS),
    str.strip,
    fix_trailing_j,
)


def correct_name(raw: str) -> str:
    return _apply(NAME_RULES, raw or "")

# --------------------------- Stat line text ---------------------------

LABEL_TYPOS: Tuple[Tuple[str, str], ...] = (
    ("al", "HP"),
    ("Ronus", "Bonus"),
    ("Erk", "Crit."),
    ("Eat", "Crit."),
    ("Grit.", "Crit."),
    ("Hesonance", "Resonance"),
    ("HE", "HP"),
)


def extract_value(text: str) -> str:
    m = _NUMBER_RX.search(text)
    return m.group(0) if m else ""


def drop_first_newline(text: str) -> str:
    return text.replace("\n", "", 1)


def drop_first_number(text: str) -> str:
    return _NUMBER_RX.sub("", text, count=1)


def collapse_first_space(text: str) -> str:
    # first run only; later gaps are handled by drop_noise_tokens
    return _SPACE_RX.sub(" ", text, count=1)


def drop_noise_tokens(text: str) -> str:
    """Single characters are OCR specks, not words."""
    return " ".join(tok for tok in text.split(" ") if len(tok) > 1)


LABEL_RULES: Tuple[Rule, ...] = (
    _substitute(LABEL_TYPOS),
    drop_first_newline,
    drop_first_number,
    collapse_first_space,
    str.strip,
)


def is_valid_line(raw: str, cleaned: str) -> bool:
    if not raw or len(raw) < 4:
        return False
    return any(marker in cleaned for marker in REQUIRED_MARKERS)


def clean_stat_text(raw: str) -> str:
    """Raw OCR line -> '<label> <amount>', or 'None 0' when nothing usable was read."""
    value = extract_value(raw)
    cleaned = drop_noise_tokens(_apply(LABEL_RULES, raw) + " " + value)
    if not is_valid_line(raw, cleaned):
        return NONE_LINE
    return cleaned


def split_label_amount(line: str) -> Tuple[str, str]:
    parts = line.split(" ")
    return " ".join(parts[:-1]), parts[-1]

# --------------------------- Amount / label repair ---------------------------

def repair_leading_digits(amount: str) -> str:
    """The stat font draws 7 so thin that it reads as 1."""
    if amount.startswith("17"):
        return amount
    if amount.startswith("1."):
        return "7" + amount[1:]
    if amount.startswith("71"):
        return "7.1" + amount[2:]
    return amount


def collapse_seventeen(amount: str, label: str) -> str:
    # only Crit. DMG rolls reach 17+
    if label == "Crit. DMG":
        return amount
    return amount.replace("17", "7", 1)


def mark_percent_variant(label: str, amount: str) -> str:
    # containment in the joined string, not equality: "ATK" and "HP" qualify, "ATK Bonus" does not
    if label in PERCENT_VARIANT_LABELS and amount.endswith("%"):
        return label + "%"
    return label


def canonical_key(label: str) -> str:
    key = label.replace(" ", "").replace(".", "")
    if "DMG" in label and "Bonus" not in key and "Crit" not in label:
        key += "Bonus"
    return key


def correct_stat(raw: str) -> Optional[CorrectedStat]:
    """
    Full correction chain for one stat line. Returns None for lines with no
    stat, an unmodeled label or an unparseable number.
    """
    label, amount = split_label_amount(clean_stat_text(raw))
    amount = collapse_seventeen(repair_leading_digits(amount), label)
    label = mark_percent_variant(label, amount)

    key = StatKey.parse(canonical_key(label))
    if key is None:
        if label != "None":
            log.debug("dropping line %r: unknown label %r", raw, label)
        return None
    # leading numeric prefix only: "7.1.5%" (a repaired "71.5%") scores as 7.1
    m = _LEADING_NUMBER_RX.match(amount)
    value = float(m.group(0)) if m else math.nan
    if not math.isfinite(value):
        log.debug("dropping line %r: bad amount %r", raw, amount)
        return None
    return CorrectedStat(label=label, canonical_key=key, numeric_value=value, display_value=amount)
