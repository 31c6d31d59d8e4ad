"""Tests for podcaster/sanitizer.py."""

import pytest

from podcaster.sanitizer import sanitize


def test_strips_speaker_label_and_quotes():
    assert sanitize('Alice: "Hello there"', "Alice") == "Hello there"


def test_strips_generic_label():
    assert sanitize("Me: I think so.", "Bob") == "I think so."


def test_label_match_is_case_insensitive():
    assert sanitize("ALICE: hi", "Alice") == "hi"
    assert sanitize("me: hi", "Alice") == "hi"


def test_only_first_label_removed():
    # The speaker label wins; the following "Me:" stays
    assert sanitize("Alice: Me: hi", "Alice") == "Me: hi"


def test_i_label():
    assert sanitize("I: agree", "Bob") == "agree"


def test_word_starting_with_i_is_kept():
    assert sanitize("Indeed, that works.", "Bob") == "Indeed, that works."


def test_short_quoted_text_kept():
    assert sanitize('""', "Bob") == '""'


def test_single_character_in_quotes_unwrapped():
    assert sanitize('"x"', "Bob") == "x"


def test_unbalanced_quotes_kept():
    assert sanitize('"Hello there', "Bob") == '"Hello there'


def test_surrounding_whitespace_trimmed():
    assert sanitize("   Bob:   hello   \n", "Bob") == "hello"


@pytest.mark.parametrize("text", ["", "   ", "\n\t"])
def test_blank_input_returned_unchanged(text):
    assert sanitize(text, "Bob") == text


def test_is_idempotent_on_clean_text():
    once = sanitize('Bob: "Fine"', "Bob")
    assert sanitize(once, "Bob") == once


@pytest.mark.parametrize("raw, speaker, expected", [
    ("Alex: I think so", "Alex", "I think so"),
    ('"Hello there"', "Alex", "Hello there"),
    ("  Me:  sure  ", "Alex", "sure"),
    ("  No prefix here ", "Alex", "No prefix here"),
])
def test_reference_cases(raw, speaker, expected):
    assert sanitize(raw, speaker) == expected
