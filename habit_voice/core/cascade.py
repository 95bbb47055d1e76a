"""
Rule cascade for detecting activity mentions in transcript text.

Each tier is a self-contained rule that returns the ordered candidates it
finds in a segment. Tiers are listed in priority order in TIERS; the
extraction pipeline walks them and stops at the first admitted candidate.
"""

import re
from typing import Callable, Dict, List, Optional, Tuple

from .numbers import COMPOUND, DIGITS, NUMBER_WORD_MAP, NUMBER_WORDS, canonical_digits, compound_value, extract_any_number, extract_number_before_word
from .types import ActivityCandidate

# Words that follow a number in duration phrases rather than activity counts
TIME_UNITS = {"min", "minute", "minutes", "mins", "hour", "hours", "hr", "hrs", "second", "seconds", "sec", "secs"}

# Longest alternative first so "minute" is not consumed as "min" + "ute"
MINUTE_UNIT = r"(?:minutes|minute|mins|min)\b"

LEAD_IN = r"(?:I\s+(?:just\s+)?did|completed|finished)"

SPECIFIC_ACTIVITIES: List[Dict] = [
    {
        "name": "Pushups",
        "keywords": ["pushup", "push-up", "pushs"],
        "trailing": r"(?:pushup|push-ups?|pushs)",
        "unit": "reps",
        "allow_no_quantity": False,
    },
    {
        "name": "Sit Ups",
        "keywords": ["situp", "sit up"],
        "trailing": r"(?:situp|sit-ups?|sit\s+ups?)",
        "unit": "reps",
        "allow_no_quantity": False,
    },
    {
        "name": "Meditated",
        "keywords": ["meditat"],
        "trailing": r"(?:min|minute|mins?)",
        "unit": "mins",
        "allow_no_quantity": True,
    },
]

# (keyword, default unit, canonical name override)
FALLBACK_KEYWORDS: List[Tuple[str, Optional[str], Optional[str]]] = [
    ("run", "miles", None),
    ("walk", "miles", None),
    ("exercise", None, None),
    ("situp", "reps", "Sit-ups"),
    ("sit up", "reps", "Sit-ups"),
    ("squat", "reps", None),
    ("pushs", "reps", "Pushups"),
]


def normalize_spoken_name(activity: str) -> str:
    """Capitalize a detected word; "push"/"pushs" always become "Pushups"."""
    if activity.lower() in ("push", "pushs"):
        return "Pushups"
    return activity[:1].upper() + activity[1:]


def _is_time_unit(word: str) -> bool:
    return word.lower() in TIME_UNITS


def specific_activity_tier(text: str) -> List[ActivityCandidate]:
    """Tier 1: hard-coded activities with a quantity right before the keyword."""
    lower_text = text.lower()
    candidates = []

    for activity in SPECIFIC_ACTIVITIES:
        if not any(keyword in lower_text for keyword in activity["keywords"]):
            continue

        numeric = re.search(rf"({DIGITS})\s*{activity['trailing']}", text, re.IGNORECASE)
        if numeric:
            candidates.append(ActivityCandidate(name=activity["name"], quantity=canonical_digits(numeric.group(1)), unit=activity["unit"], source_tier=1))

        written = extract_number_before_word(text, activity["trailing"])
        if written:
            candidates.append(ActivityCandidate(name=activity["name"], quantity=written.digits, unit=activity["unit"], source_tier=1))

        if activity["allow_no_quantity"]:
            candidates.append(ActivityCandidate(name=activity["name"], source_tier=1))

    return candidates


def time_based_tier(text: str) -> List[ActivityCandidate]:
    """Tier 2: "(went for a) 20 minute walk" style durations."""
    candidates = []

    numeric = re.search(rf"(?:went\s+for\s+a\s+)?({DIGITS})\s+{MINUTE_UNIT}\s+(\w+)", text, re.IGNORECASE)
    if numeric:
        candidates.append(
            ActivityCandidate(name=normalize_spoken_name(numeric.group(2)), quantity=canonical_digits(numeric.group(1)), unit="mins", source_tier=2)
        )

    written = extract_number_before_word(text, MINUTE_UNIT)
    if written:
        start = text.lower().find(written.matched_span.lower())
        remainder = text[start + len(written.matched_span) :].strip()
        activity = re.match(r"(\w+)", remainder)
        if activity:
            candidates.append(ActivityCandidate(name=normalize_spoken_name(activity.group(1)), quantity=written.digits, unit="mins", source_tier=2))

    return candidates


def general_phrasing_tier(text: str) -> List[ActivityCandidate]:
    """Tier 3: "I (just) did / completed / finished N <activity>"."""
    candidates = []

    numeric = re.search(rf"{LEAD_IN}\s+({DIGITS})\s+(\w+)", text, re.IGNORECASE)
    if numeric:
        candidates.append(ActivityCandidate(name=normalize_spoken_name(numeric.group(2)), quantity=canonical_digits(numeric.group(1)), source_tier=3))

    for word in NUMBER_WORDS:
        match = re.search(rf"{LEAD_IN}\s+{word}\s+(\w+)", text, re.IGNORECASE)
        if match:
            candidates.append(ActivityCandidate(name=normalize_spoken_name(match.group(1)), quantity=str(NUMBER_WORD_MAP[word]), source_tier=3))

    compound = re.search(rf"{LEAD_IN}\s+{COMPOUND}\s+(\w+)", text, re.IGNORECASE)
    if compound:
        total = compound_value(compound.group(1), compound.group(2))
        if total is not None:
            candidates.append(ActivityCandidate(name=normalize_spoken_name(compound.group(3)), quantity=str(total), source_tier=3))

    return candidates


def simple_adjacency_tier(text: str) -> List[ActivityCandidate]:
    """Tier 4: bare "N <word>" anywhere, skipping durations."""
    candidates = []

    numeric = re.search(rf"({DIGITS})\s+(\w+)", text, re.IGNORECASE)
    if numeric:
        activity = numeric.group(2).lower()
        if not _is_time_unit(activity):
            candidates.append(ActivityCandidate(name=normalize_spoken_name(activity), quantity=canonical_digits(numeric.group(1)), source_tier=4))

    for word in NUMBER_WORDS:
        match = re.search(rf"\b{word}\s+(\w+)", text, re.IGNORECASE)
        if match:
            activity = match.group(1).lower()
            if not _is_time_unit(activity):
                candidates.append(ActivityCandidate(name=normalize_spoken_name(activity), quantity=str(NUMBER_WORD_MAP[word]), source_tier=4))

    compound = re.search(rf"\b{COMPOUND}\s+(\w+)", text, re.IGNORECASE)
    if compound:
        total = compound_value(compound.group(1), compound.group(2))
        activity = compound.group(3).lower()
        if total is not None and not _is_time_unit(activity):
            candidates.append(ActivityCandidate(name=normalize_spoken_name(activity), quantity=str(total), source_tier=4))

    return candidates


def fallback_keyword_tier(text: str) -> List[ActivityCandidate]:
    """Tier 5: substring keywords with a default unit; quantity may be absent."""
    lower_text = text.lower()
    candidates = []

    for keyword, unit, name in FALLBACK_KEYWORDS:
        if keyword in lower_text:
            candidates.append(
                ActivityCandidate(name=name or normalize_spoken_name(keyword), quantity=extract_any_number(text), unit=unit, source_tier=5)
            )

    return candidates


# Priority order of the cascade
TIERS: List[Tuple[str, Callable[[str], List[ActivityCandidate]]]] = [
    ("specific", specific_activity_tier),
    ("time_based", time_based_tier),
    ("general", general_phrasing_tier),
    ("simple", simple_adjacency_tier),
    ("fallback", fallback_keyword_tier),
]


def tier_names() -> List[str]:
    """Names of the tiers in evaluation order."""
    return [name for name, _ in TIERS]
