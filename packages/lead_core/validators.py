"""Answer validation for conversation steps.

Answers arrive as speech transcripts or typed text. Each validator
normalizes the raw answer and returns the value to store, or None when
the answer does not satisfy the step's field type.
"""

import re
from typing import Callable, Dict, Optional

from lead_config import ConversationStep, FieldType

EMAIL_RE = re.compile(r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$")
PHONE_RE = re.compile(r"^[\d\s\-\(\)\+]+$")

PHONE_MIN_DIGITS = 7
PHONE_MAX_DIGITS = 15

# Recognizers often close an utterance with punctuation.
_TRAILING_PUNCTUATION = ".!?,;"


def _clean(raw: str) -> str:
    return re.sub(r"\s+", " ", raw or "").strip().rstrip(_TRAILING_PUNCTUATION).strip()


def normalize_spoken_email(raw: str) -> str:
    """Turn a spoken email address into its written form.

    "John at Example dot com" becomes "john@example.com".
    """
    value = _clean(raw).lower()
    if "@" not in value:
        value = re.sub(r"\s+(?:at the rate|at)\s+", "@", value)
    value = re.sub(r"\s+dot\s+", ".", value)
    value = re.sub(r"\s+", "", value)
    return value


def validate_text(raw: str) -> Optional[str]:
    """Accept any non-empty free text."""
    value = _clean(raw)
    return value or None


def validate_email(raw: str) -> Optional[str]:
    """Validate email format."""
    value = normalize_spoken_email(raw)
    if EMAIL_RE.match(value):
        return value
    return None


def validate_phone(raw: str) -> Optional[str]:
    """Validate phone number format."""
    value = _clean(raw)
    if not PHONE_RE.match(value):
        return None

    digits_only = re.sub(r"\D", "", value)
    if not PHONE_MIN_DIGITS <= len(digits_only) <= PHONE_MAX_DIGITS:
        return None
    return value


VALIDATORS: Dict[FieldType, Callable[[str], Optional[str]]] = {
    FieldType.TEXT: validate_text,
    FieldType.EMAIL: validate_email,
    FieldType.PHONE: validate_phone,
}


def validate_answer(step: ConversationStep, raw_answer: str) -> Optional[str]:
    """Validate a raw answer against a step's field type.

    Args:
        step: Step being answered
        raw_answer: Transcript or typed text from the user

    Returns:
        Normalized value if valid, None otherwise
    """
    return VALIDATORS[step.field_type](raw_answer)
