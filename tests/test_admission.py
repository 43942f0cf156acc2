from __future__ import annotations

import pytest

from app.core.exceptions import AdmissionError
from app.services import admission
from app.services.admission import Accepted, Rejection, RejectionTag


def _tag(text: str | None) -> RejectionTag | None:
    result = admission.evaluate(text)
    return result.tag if isinstance(result, Rejection) else None


def test_accepts_plain_text_and_trims():
    result = admission.evaluate("   meet me at noon  ")
    assert isinstance(result, Accepted)
    assert result.text == "meet me at noon"


@pytest.mark.parametrize("raw", [None, "", "   ", "\n\t "])
def test_empty_text(raw):
    assert _tag(raw) is RejectionTag.EMPTY_TEXT


def test_length_boundary_counts_characters():
    assert isinstance(admission.evaluate("a" * 120), Accepted)
    assert _tag("a" * 121) is RejectionTag.TEXT_TOO_LONG
    # multi-byte characters count once each
    assert isinstance(admission.evaluate("é" * 120), Accepted)


def test_length_is_checked_after_trimming():
    assert isinstance(admission.evaluate("  " + "a" * 120 + "  "), Accepted)


def test_length_wins_over_content_rules():
    assert _tag("@" * 121) is RejectionTag.TEXT_TOO_LONG


@pytest.mark.parametrize(
    "text,rule",
    [
        ("contact@x", "at_sign"),
        ("see http://foo", "url_scheme"),
        ("HTTPS://secure", "url_scheme"),
        ("go to www.something", "www_prefix"),
        ("my site is foo.com", "tld_suffix"),
        ("ends with .org.", "tld_suffix"),
        ("norsk side nettside.no", "tld_suffix"),
        ("Call 55512345", "phone_digits"),
        ("call 555-123-45 now", "phone_digits"),
        ("dial +4 now", "dial_prefix"),
        ("dial + 47 now", "dial_prefix"),
        ("I saw John Smith today", "full_name"),
    ],
)
def test_content_rules(text, rule):
    result = admission.evaluate(text)
    assert isinstance(result, Rejection)
    assert result.tag is RejectionTag.CONTENT_BLOCKED
    assert result.rule == rule


@pytest.mark.parametrize(
    "text",
    [
        "I love my dog",
        "seven digits 1234567",
        "I met JOHN SMITH",
        "Paris is nice",
        "the comet was bright",
        "one plus one",
    ],
)
def test_benign_text_passes(text):
    assert isinstance(admission.evaluate(text), Accepted)


def test_email_scenario_is_blocked():
    assert _tag("contact@x.com") is RejectionTag.CONTENT_BLOCKED


def test_admit_raises_tagged_error():
    with pytest.raises(AdmissionError) as excinfo:
        admission.admit("x" * 200)
    assert excinfo.value.code == "TEXT_TOO_LONG"
    assert str(excinfo.value)


def test_admit_returns_clean_text():
    assert admission.admit("  hello there ") == "hello there"
