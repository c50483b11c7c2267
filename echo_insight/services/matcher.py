# echo_insight/services/matcher.py
from __future__ import annotations
from typing import Mapping, Optional
import logging

from echo_insight.core.models import AnalysisError, ErrorKind
from echo_insight.core.registry import CHARACTER_PROFILES, CharacterProfile

log = logging.getLogger(__name__)


def find_character(name: str, profiles: Mapping[str, CharacterProfile] = CHARACTER_PROFILES) -> Optional[CharacterProfile]:
    """Case-insensitive substring match in either direction; first table entry wins."""
    needle = (name or "").strip().lower()
    if not needle:
        # an empty read would substring-match every key; report it as unknown instead
        return None
    for key, profile in profiles.items():
        k = key.lower()
        if k in needle or needle in k:
            return profile
    return None


def match_character(name: str, profiles: Mapping[str, CharacterProfile] = CHARACTER_PROFILES) -> CharacterProfile:
    profile = find_character(name, profiles)
    if profile is None:
        raise AnalysisError(
            ErrorKind.unknown_character,
            f'Character "{name}" not found. Please try again.',
            {"name": name},
        )
    log.info("matched character %r -> %s", name, profile.name)
    return profile
