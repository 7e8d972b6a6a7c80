from __future__ import annotations

import pytest

from ootmsg.codec import (
    decode_message,
    encode_message,
    from_display,
    normalize_display,
    to_display,
)

SAMPLES = [
    "",
    "Hey\n[break]",
    "Hey[break]you",
    "[break]",
    "[break][break]",
    "[break]\n[break]",
    "line one\n\n[break]\n\nline two",
    "a[breakdelay:10]b",
    "[breakdelay:10][break]",
    "[break][breakdelay:3c]",
    "[breakdelay:05]\n[break]\n",
    "no tags\nat all",
]


def test_to_display_sample() -> None:
    assert to_display("Hey\n[break]") == "Hey\n\n[break]\n"


def test_to_display_breakdelay() -> None:
    assert to_display("a[breakdelay:10]b") == "a\n[breakdelay:10]\nb"


def test_from_display_removes_one_break_per_side() -> None:
    assert from_display("a\n\n[break]\n\nb") == "a\n[break]\nb"
    assert from_display("a\n[breakdelay:10]\nb") == "a[breakdelay:10]b"


def test_other_tags_are_left_inline() -> None:
    text = "[color:red]Hi[waitbutton]"

    assert to_display(text) == text
    assert from_display(text) == text


@pytest.mark.parametrize("text", SAMPLES)
def test_display_roundtrip(text: str) -> None:
    assert from_display(to_display(text)) == text


@pytest.mark.parametrize("text", SAMPLES)
def test_redisplay_does_not_accumulate_blank_lines(text: str) -> None:
    shown = to_display(text)

    assert to_display(from_display(shown)) == shown
    assert normalize_display(shown) == shown
    assert normalize_display(normalize_display(shown)) == shown


def test_normalize_display_moves_typed_tags_onto_their_own_line() -> None:
    edited = "Hello[break]there"

    assert normalize_display(edited) == "Hello\n[break]\nthere"
    assert normalize_display(normalize_display(edited)) == normalize_display(edited)


def test_sample_message_survives_edit_cycle() -> None:
    raw = bytes([0x48, 0x65, 0x79, 0x01, 0x04, 0x02])
    shown = to_display(decode_message(raw, 0, len(raw)))

    assert encode_message(from_display(shown)) == raw + b"\x00\x00"


def test_from_display_strips_again_when_reapplied() -> None:
    shown = to_display("Hey\n[break]")

    assert from_display(shown) == "Hey\n[break]"
    assert from_display(from_display(shown)) == "Hey[break]"
    assert normalize_display(normalize_display(shown)) == normalize_display(shown)
