"""
Tests for spoken number decoding.
"""

import pytest

from habit_voice.core.numbers import (
    NUMBER_WORD_MAP,
    NUMBER_WORDS,
    ONES_WORDS,
    TENS_WORDS,
    decode_compound,
    extract_any_number,
    extract_number_before_word,
    word_to_number,
)


class TestWordToNumber:
    """Test single number word decoding."""

    def test_known_word(self):
        assert word_to_number("seventeen") == "17"

    def test_case_and_whitespace_insensitive(self):
        assert word_to_number("  Ninety ") == "90"

    def test_unknown_word(self):
        assert word_to_number("hello") is None

    def test_zero(self):
        assert word_to_number("zero") == "0"

    def test_all_words_round_trip(self):
        """Every supported word decodes to the digit string of its value."""
        for word in NUMBER_WORDS:
            value = NUMBER_WORD_MAP[word]
            assert value < 100
            assert word_to_number(word) == str(value)


class TestDecodeCompound:
    """Test tens+ones compound decoding."""

    def test_hyphenated(self):
        assert decode_compound("forty-seven") == "47"

    def test_space_separated(self):
        assert decode_compound("thirty two") == "32"

    def test_teen_compound_rejected(self):
        assert decode_compound("nineteen-five") is None

    def test_single_word_is_not_compound(self):
        assert decode_compound("twenty") is None

    def test_all_compounds_below_one_hundred(self):
        for tens in TENS_WORDS:
            for ones in ONES_WORDS:
                decoded = decode_compound(f"{tens}-{ones}")
                assert decoded is not None
                assert int(decoded) == NUMBER_WORD_MAP[tens] + NUMBER_WORD_MAP[ones]
                assert int(decoded) <= 99


class TestExtractNumberBeforeWord:
    """Test number extraction anchored before a trailing word."""

    def test_digits(self):
        token = extract_number_before_word("I did 20 pushups", "pushups")
        assert token is not None
        assert token.digits == "20"
        assert token.value == 20
        assert token.matched_span == "20 pushups"

    def test_written_word(self):
        token = extract_number_before_word("meditated for ten minutes", "(?:min|minute|mins?)")
        assert token is not None
        assert token.digits == "10"
        assert token.matched_span == "ten min"

    def test_digits_win_over_words(self):
        token = extract_number_before_word("two laps then 5 laps", "laps")
        assert token.digits == "5"

    def test_word_list_order_beats_position(self):
        """The first word in enumeration order wins, not the leftmost occurrence."""
        token = extract_number_before_word("ten laps then two laps", "laps")
        assert token.digits == "2"

    def test_ones_word_shadows_compound(self):
        """The ones part of a compound is found by the single-word stage first."""
        token = extract_number_before_word("thirty-five laps", "laps")
        assert token.digits == "5"

    def test_leading_zeros_dropped(self):
        token = extract_number_before_word("007 squats", "squats")
        assert token.digits == "7"

    def test_no_match(self):
        assert extract_number_before_word("some laps", "laps") is None

    def test_number_must_be_adjacent(self):
        assert extract_number_before_word("20 quick laps", "laps") is None


class TestExtractAnyNumber:
    """Test unanchored number extraction."""

    def test_digits_anywhere(self):
        assert extract_any_number("ran 3 miles") == "3"

    def test_written_word(self):
        assert extract_any_number("ran three miles") == "3"

    def test_word_boundary_required(self):
        assert extract_any_number("someone ran") is None

    def test_list_order_within_compound(self):
        """The word two precedes twenty in enumeration order."""
        assert extract_any_number("walked twenty-two minutes") == "2"

    def test_no_number(self):
        assert extract_any_number("went for a run") is None

    @pytest.mark.parametrize("text,expected", [("0 reps", "0"), ("000 reps", "0"), ("0042", "42")])
    def test_canonical_digits(self, text, expected):
        assert extract_any_number(text) == expected
