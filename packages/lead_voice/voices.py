"""Host voice selection for agent profiles.

Voice naming is host specific, so matching is best-effort: English voices
whose names hint at the agent's gender are preferred, and any voice is
used when none match.
"""

import re
from typing import Optional, Sequence

from lead_config import AgentVoiceProfile, Gender

from .events import HostVoice

FEMALE_NAME_HINTS = (
    "female",
    "samantha",
    "zira",
    "victoria",
    "karen",
    "moira",
    "fiona",
    "tessa",
    "susan",
    "allison",
)
MALE_NAME_HINTS = (
    "david",
    "daniel",
    "james",
    "alex",
    "fred",
    "jorge",
    "thomas",
    "oliver",
)
# Generic voices that are usually female when nothing says otherwise.
NEUTRAL_DEFAULT_FEMALE = ("google us", "google uk", "microsoft")

_MALE_WORD = re.compile(r"\bmale\b")


def is_english(voice: HostVoice) -> bool:
    """Whether the voice speaks an English locale."""
    return voice.lang.lower().replace("_", "-").startswith("en")


def matches_gender(voice: HostVoice, gender: Gender) -> bool:
    """Whether the voice name suggests the given gender."""
    name = voice.name.lower()
    is_male_word = bool(_MALE_WORD.search(name))

    if gender == Gender.FEMALE:
        if any(hint in name for hint in FEMALE_NAME_HINTS):
            return True
        return not is_male_word and any(hint in name for hint in NEUTRAL_DEFAULT_FEMALE)

    if "female" in name:
        return False
    return is_male_word or any(hint in name for hint in MALE_NAME_HINTS)


def select_voice(
    profile: AgentVoiceProfile, voices: Sequence[HostVoice]
) -> Optional[HostVoice]:
    """Pick the host voice for an agent.

    Args:
        profile: Agent whose gender and voice index drive the choice
        voices: Voices exposed by the host

    Returns:
        The chosen voice, or None when the host exposes no voices
    """
    if not voices:
        return None

    candidates = [v for v in voices if is_english(v) and matches_gender(v, profile.gender)]
    if candidates:
        return candidates[profile.voice_index % len(candidates)]

    return voices[profile.voice_index % len(voices)]
