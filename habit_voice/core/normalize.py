"""
Activity name normalization against the tracked-activity registry.

Maps free-form spoken names ("push ups", "walks") onto the canonical name of a
registry entry by exact match or keyword match, with a light singular/plural
fold. Names that match nothing are returned unchanged.
"""

import re
from typing import Optional, Sequence

from .types import TrackedActivity

SEPARATOR_PATTERN = re.compile(r"[\s\-]+")


def collapse(text: str) -> str:
    """Lowercase, trim and collapse runs of whitespace/hyphens to single spaces."""
    return SEPARATOR_PATTERN.sub(" ", text.lower().strip()).strip()


def _strip_plural(text: str) -> str:
    return text[:-1] if text.endswith("s") else text


def keyword_matches(name: str, keyword: str) -> bool:
    """
    Check a collapsed name against a collapsed keyword.

    Matches on containment either way, equality after dropping one trailing
    "s" from each, or one side being the other plus "s".
    """
    if not keyword:
        return False
    return (
        keyword in name
        or name in keyword
        or _strip_plural(name) == _strip_plural(keyword)
        or name == keyword + "s"
        or name + "s" == keyword
    )


def find_exact(name: str, registry: Sequence[TrackedActivity]) -> Optional[TrackedActivity]:
    """Registry entry whose canonical name equals the given name after collapsing."""
    for tracked in registry:
        if tracked.name == name:
            return tracked
    collapsed = collapse(name)
    for tracked in registry:
        if collapse(tracked.name) == collapsed:
            return tracked
    return None


def find_by_keyword(name: str, registry: Sequence[TrackedActivity]) -> Optional[TrackedActivity]:
    """First registry entry, in registry order, with any keyword matching the name."""
    collapsed = collapse(name)
    for tracked in registry:
        if any(keyword_matches(collapsed, collapse(keyword)) for keyword in tracked.keywords):
            return tracked
    return None


def normalize_activity_name(activity_name: str, registry: Sequence[TrackedActivity]) -> str:
    """
    Normalize an activity name to the canonical name from the registry.

    Args:
        activity_name: Detected or user-entered name, possibly a variation
        registry: Tracked activities to match against, in priority order

    Returns:
        The canonical name of the matching entry, or the original name if
        nothing matches (including when the registry is empty)
    """
    if not collapse(activity_name) or not registry:
        return activity_name

    exact = find_exact(activity_name, registry)
    if exact is not None:
        return exact.name

    by_keyword = find_by_keyword(activity_name, registry)
    if by_keyword is not None:
        return by_keyword.name

    return activity_name
