"""
Number decoding for spoken transcripts.

Converts digit runs, English number words ("seventeen") and tens+ones
compounds ("forty-seven") into base-10 digit strings. Word decoding never
exceeds 99: only zero..twenty and the tens thirty..ninety are recognized,
and compounds only join a tens word with a ones word.
"""

import re
from typing import Dict, List, Optional

from .types import NumberToken

# Enumeration order matters: single-word searches try words in this order
# and the first word found anywhere in the text wins.
NUMBER_WORDS: List[str] = [
    "zero", "one", "two", "three", "four", "five", "six", "seven", "eight", "nine", "ten",
    "eleven", "twelve", "thirteen", "fourteen", "fifteen", "sixteen", "seventeen", "eighteen", "nineteen",
    "twenty", "thirty", "forty", "fifty", "sixty", "seventy", "eighty", "ninety",
]

NUMBER_WORD_MAP: Dict[str, int] = {
    "zero": 0, "one": 1, "two": 2, "three": 3, "four": 4, "five": 5,
    "six": 6, "seven": 7, "eight": 8, "nine": 9, "ten": 10,
    "eleven": 11, "twelve": 12, "thirteen": 13, "fourteen": 14, "fifteen": 15,
    "sixteen": 16, "seventeen": 17, "eighteen": 18, "nineteen": 19, "twenty": 20,
    "thirty": 30, "forty": 40, "fifty": 50, "sixty": 60, "seventy": 70,
    "eighty": 80, "ninety": 90,
}

TENS_WORDS = ("twenty", "thirty", "forty", "fifty", "sixty", "seventy", "eighty", "ninety")
ONES_WORDS = ("one", "two", "three", "four", "five", "six", "seven", "eight", "nine")

# Regex fragments shared with the cascade tiers
DIGITS = r"[0-9]+"
COMPOUND = rf"({'|'.join(TENS_WORDS)})[-\s]+({'|'.join(ONES_WORDS)})"

COMPOUND_PATTERN = re.compile(rf"^{COMPOUND}$", re.IGNORECASE)
DIGITS_PATTERN = re.compile(rf"({DIGITS})")
COMPOUND_ANYWHERE_PATTERN = re.compile(rf"\b{COMPOUND}\b", re.IGNORECASE)


def canonical_digits(digits: str) -> str:
    """Strip leading zeros from a digit run, keeping a lone "0"."""
    return digits.lstrip("0") or "0"


def word_to_number(word: str) -> Optional[str]:
    """
    Convert a single number word to its digit string.

    Args:
        word: Candidate number word, any case

    Returns:
        Digit string, or None if the word is not a recognized number word
    """
    value = NUMBER_WORD_MAP.get(word.lower().strip())
    return str(value) if value is not None else None


def compound_value(tens: str, ones: str) -> Optional[int]:
    """Sum a tens word and a ones word, or None if either is not in range."""
    tens_value = NUMBER_WORD_MAP.get(tens.lower())
    ones_value = NUMBER_WORD_MAP.get(ones.lower())
    if tens_value is None or ones_value is None:
        return None
    if tens.lower() not in TENS_WORDS or ones.lower() not in ONES_WORDS:
        return None
    return tens_value + ones_value


def decode_compound(phrase: str) -> Optional[str]:
    """
    Decode a two-word compound such as "forty-seven" or "thirty two".

    Teens never compound ("nineteen-five" is not a number) and the total
    never exceeds 99.
    """
    match = COMPOUND_PATTERN.match(phrase.strip())
    if not match:
        return None
    value = compound_value(match.group(1), match.group(2))
    return str(value) if value is not None else None


def extract_number_before_word(text: str, trailing_pattern: str) -> Optional[NumberToken]:
    """
    Find a number immediately followed by whitespace and a trailing word pattern.

    Search order is fixed: a digit run first, then single number words in
    enumeration order (first word matching anywhere wins), then a tens+ones
    compound.

    Args:
        text: Transcript text to search
        trailing_pattern: Regex fragment for the word that must follow the number

    Returns:
        NumberToken with the decoded value and the full matched substring, or None
    """
    digit_match = re.search(rf"({DIGITS})\s+{trailing_pattern}", text, re.IGNORECASE)
    if digit_match:
        return NumberToken(digits=canonical_digits(digit_match.group(1)), matched_span=digit_match.group(0))

    for word in NUMBER_WORDS:
        match = re.search(rf"\b{word}\s+{trailing_pattern}", text, re.IGNORECASE)
        if match:
            return NumberToken(digits=str(NUMBER_WORD_MAP[word]), matched_span=match.group(0))

    compound_match = re.search(rf"\b{COMPOUND}\s+{trailing_pattern}", text, re.IGNORECASE)
    if compound_match:
        value = compound_value(compound_match.group(1), compound_match.group(2))
        if value is not None:
            return NumberToken(digits=str(value), matched_span=compound_match.group(0))

    return None


def extract_any_number(text: str) -> Optional[str]:
    """
    Extract the first number found anywhere in the text.

    Same three-stage search as extract_number_before_word without the
    trailing-word constraint.
    """
    digit_match = DIGITS_PATTERN.search(text)
    if digit_match:
        return canonical_digits(digit_match.group(1))

    for word in NUMBER_WORDS:
        if re.search(rf"\b{word}\b", text, re.IGNORECASE):
            return str(NUMBER_WORD_MAP[word])

    compound_match = COMPOUND_ANYWHERE_PATTERN.search(text)
    if compound_match:
        value = compound_value(compound_match.group(1), compound_match.group(2))
        if value is not None:
            return str(value)

    return None
