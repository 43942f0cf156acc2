"""Content admission filter for submitted confessions.

The filter is purely syntactic and deliberately conservative: it prefers blocking
benign text over letting contact details or real names through. Each content rule is
an independent predicate over the trimmed text, evaluated in order; the first match
rejects the whole submission.
"""

from __future__ import annotations

import re
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from typing import Final

from app.core.exceptions import AdmissionError

MAX_TEXT_LENGTH: Final[int] = 120
MIN_PHONE_DIGITS: Final[int] = 8


class RejectionTag(str, Enum):
    EMPTY_TEXT = "EMPTY_TEXT"
    TEXT_TOO_LONG = "TEXT_TOO_LONG"
    CONTENT_BLOCKED = "CONTENT_BLOCKED"


REJECTION_MESSAGES: Final[dict[RejectionTag, str]] = {
    RejectionTag.EMPTY_TEXT: "Confession text cannot be empty",
    RejectionTag.TEXT_TOO_LONG: f"Confession must be {MAX_TEXT_LENGTH} characters or less",
    RejectionTag.CONTENT_BLOCKED: (
        "Please keep it abstract. This looks like it might identify a real person."
    ),
}


@dataclass(frozen=True)
class Accepted:
    text: str


@dataclass(frozen=True)
class Rejection:
    tag: RejectionTag
    # Name of the rule that fired; safe to log (unlike the text)
    rule: str

    @property
    def message(self) -> str:
        return REJECTION_MESSAGES[self.tag]


AdmissionResult = Accepted | Rejection

_URL_SCHEME_RE = re.compile(r"https?://", re.IGNORECASE)
_WWW_RE = re.compile(r"\bwww\.", re.IGNORECASE)
_TLD_RE = re.compile(r"\.(?:com|net|org|no|io|co|app)\b", re.IGNORECASE)
_NON_DIGIT_RE = re.compile(r"[^0-9]")
_DIAL_PREFIX_RE = re.compile(r"\+\s*[0-9]")
# Two adjacent Capitalized words, e.g. "John Smith"
_FULL_NAME_RE = re.compile(r"\b[A-Z][a-z]+\s+[A-Z][a-z]+\b")


def has_at_sign(text: str) -> bool:
    return "@" in text


def has_url_scheme(text: str) -> bool:
    return _URL_SCHEME_RE.search(text) is not None


def has_www_prefix(text: str) -> bool:
    return _WWW_RE.search(text) is not None


def has_tld_suffix(text: str) -> bool:
    return _TLD_RE.search(text) is not None


def has_phone_digits(text: str) -> bool:
    # Counts every digit in the string, so "555 123-45 67" is caught too
    return len(_NON_DIGIT_RE.sub("", text)) >= MIN_PHONE_DIGITS


def has_dial_prefix(text: str) -> bool:
    return _DIAL_PREFIX_RE.search(text) is not None


def has_full_name(text: str) -> bool:
    return _FULL_NAME_RE.search(text) is not None


ContentRule = tuple[str, Callable[[str], bool]]

CONTENT_RULES: Final[tuple[ContentRule, ...]] = (
    ("at_sign", has_at_sign),
    ("url_scheme", has_url_scheme),
    ("www_prefix", has_www_prefix),
    ("tld_suffix", has_tld_suffix),
    ("phone_digits", has_phone_digits),
    ("dial_prefix", has_dial_prefix),
    ("full_name", has_full_name),
)


def evaluate(raw: str | None) -> AdmissionResult:
    """Run every admission step in order and return the first failure or the clean text."""

    text = (raw or "").strip()
    if not text:
        return Rejection(RejectionTag.EMPTY_TEXT, "empty")
    # len() counts code points, not bytes
    if len(text) > MAX_TEXT_LENGTH:
        return Rejection(RejectionTag.TEXT_TOO_LONG, "max_length")
    for name, predicate in CONTENT_RULES:
        if predicate(text):
            return Rejection(RejectionTag.CONTENT_BLOCKED, name)
    return Accepted(text)


def admit(raw: str | None) -> str:
    """Return the sanitized text or raise :class:`AdmissionError` tagged with the reason."""

    result = evaluate(raw)
    if isinstance(result, Rejection):
        raise AdmissionError(result.message, code=result.tag.value, detail={"rule": result.rule})
    return result.text


__all__ = [
    "CONTENT_RULES",
    "MAX_TEXT_LENGTH",
    "Accepted",
    "AdmissionResult",
    "Rejection",
    "RejectionTag",
    "admit",
    "evaluate",
]
