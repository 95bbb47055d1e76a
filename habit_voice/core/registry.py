"""
Tracked-activity registry and admission checks.

This module owns the snapshot of tracked activities the extraction engine reads
on each call. It provides the two independent admission checks:

- activation: keyword/substring based, applied to raw names during extraction
- existence: exact canonical-name based, applied after normalization when persisting

Registries load from builtin package data or a per-project override under
.habit_voice/activities.json.
"""

import json
import logging
import re
from pathlib import Path
from typing import List, Optional, Sequence, Union

from pydantic import ValidationError
from rapidfuzz import fuzz

from .config import PROJECT_DIR_NAME
from .normalize import collapse, normalize_activity_name
from .types import TrackedActivity

logger = logging.getLogger(__name__)

PROJECT_REGISTRY_FILENAME = "activities.json"

# Minimum rapidfuzz ratio for "did you mean" suggestions
SUGGESTION_THRESHOLD = 60


class RegistryError(Exception):
    """Raised when a registry file or registry change is invalid."""

    pass


class ActivityRegistry:
    """
    Read-mostly view over an ordered list of tracked activities.

    Open-vocabulary mode admits every name. By default it is on exactly when
    the registry has nothing to match against; pass open_vocabulary explicitly
    to force it either way.
    """

    def __init__(self, activities: Optional[Sequence[TrackedActivity]] = None, open_vocabulary: Optional[bool] = None):
        self.activities: List[TrackedActivity] = list(activities or [])
        self._open_vocabulary = open_vocabulary

    def __len__(self) -> int:
        return len(self.activities)

    def __iter__(self):
        return iter(self.activities)

    @property
    def active_activities(self) -> List[TrackedActivity]:
        return [activity for activity in self.activities if activity.active]

    @property
    def names(self) -> List[str]:
        return [activity.name for activity in self.activities]

    def is_open_vocabulary(self) -> bool:
        """Whether the existence check is bypassed."""
        if self._open_vocabulary is not None:
            return self._open_vocabulary
        return not self.activities

    def is_activation_open(self) -> bool:
        """Whether the activation check admits every name."""
        if self._open_vocabulary is not None:
            return self._open_vocabulary
        return not self.active_activities

    def is_active(self, activity_name: str) -> bool:
        """
        Activation check used while running the cascade.

        A raw detected name is active when it equals an active entry's canonical
        name (case-insensitive) or contains one of that entry's keywords.
        """
        if self.is_activation_open():
            return True

        lower_name = activity_name.lower()
        for tracked in self.active_activities:
            if tracked.name.lower() == lower_name:
                return True
            if any(keyword.strip().lower() in lower_name for keyword in tracked.keywords if keyword.strip()):
                return True
        return False

    def is_valid_tracked_activity(self, activity_name: str) -> bool:
        """
        Existence check: the name must equal some canonical name, case-insensitively.

        Inactive entries count. An empty registry validates nothing; callers
        decide whether open-vocabulary mode bypasses this check.
        """
        if not activity_name or not self.activities:
            return False
        lower_name = activity_name.lower().strip()
        return any(tracked.name.lower() == lower_name for tracked in self.activities)

    def normalize(self, activity_name: str) -> str:
        return normalize_activity_name(activity_name, self.activities)

    def get(self, activity_name: str) -> Optional[TrackedActivity]:
        collapsed = collapse(activity_name)
        for tracked in self.activities:
            if collapse(tracked.name) == collapsed:
                return tracked
        return None

    def suggest(self, activity_name: str, limit: int = 3) -> List[str]:
        """
        Rank canonical names by fuzzy similarity for diagnostics.

        Suggestions never influence admission.
        """
        query = collapse(activity_name)
        scored = []
        for tracked in self.activities:
            score = fuzz.ratio(query, collapse(tracked.name))
            for keyword in tracked.keywords:
                score = max(score, fuzz.ratio(query, collapse(keyword)))
            if score >= SUGGESTION_THRESHOLD:
                scored.append((score, tracked.name))

        scored.sort(key=lambda item: item[0], reverse=True)
        return [name for _, name in scored[:limit]]

    def add(self, name: str, keywords: Optional[List[str]] = None, active: bool = True) -> TrackedActivity:
        """Append a new tracked activity; names must be unique after collapsing."""
        if not collapse(name):
            raise RegistryError("Activity name must not be empty")
        if self.get(name) is not None:
            raise RegistryError(f"Activity already tracked: {name}")

        activity = TrackedActivity(id=_slugify(name), name=name.strip(), active=active, keywords=list(keywords or []))
        self.activities.append(activity)
        return activity

    def set_active(self, name: str, active: bool) -> TrackedActivity:
        tracked = self._require(name)
        tracked.active = active
        return tracked

    def add_keyword(self, name: str, keyword: str) -> TrackedActivity:
        tracked = self._require(name)
        if not collapse(keyword):
            raise RegistryError("Keyword must not be empty")
        if keyword not in tracked.keywords:
            tracked.keywords.append(keyword)
        return tracked

    def _require(self, name: str) -> TrackedActivity:
        tracked = self.get(name)
        if tracked is None:
            raise RegistryError(f"Unknown activity: {name}")
        return tracked

    def to_data(self) -> List[dict]:
        return [activity.model_dump() for activity in self.activities]


def _slugify(name: str) -> str:
    return re.sub(r"[^a-z0-9]+", "-", name.lower()).strip("-") or "activity"


def parse_registry_data(data: object) -> List[TrackedActivity]:
    """
    Validate raw JSON data into tracked activities.

    Expects a list of objects; entries that fail validation are skipped.
    """
    if not isinstance(data, list):
        return []

    activities = []
    for entry in data:
        if not isinstance(entry, dict):
            continue
        if "id" not in entry and isinstance(entry.get("name"), str):
            entry = {**entry, "id": _slugify(entry["name"])}
        try:
            activities.append(TrackedActivity.model_validate(entry))
        except ValidationError as e:
            logger.warning(f"Skipping invalid tracked activity entry {entry!r}: {e.errors()}")

    return activities


def _read_registry_file(path: Path) -> List[TrackedActivity]:
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, ValueError) as e:
        logger.warning(f"Could not read registry file {path}: {e}")
        return []

    return parse_registry_data(data)


def load_builtin_registry() -> List[TrackedActivity]:
    """
    Load the default tracked activities shipped in data/activities/default.json.

    Returns:
        List of tracked activities, empty if the data file is missing or invalid
    """
    registry_path = Path(__file__).parent.parent / "data" / "activities" / "default.json"
    if not registry_path.exists():
        return []
    return _read_registry_file(registry_path)


def get_project_registry_path(project_root: Union[str, Path]) -> Path:
    return Path(project_root) / PROJECT_DIR_NAME / PROJECT_REGISTRY_FILENAME


def load_project_registry(project_root: Union[str, Path]) -> Optional[List[TrackedActivity]]:
    """
    Load {project_root}/.habit_voice/activities.json if present.

    Returns:
        List of tracked activities, or None when the project has no registry file
    """
    registry_path = get_project_registry_path(project_root)
    if not registry_path.exists():
        return None
    return _read_registry_file(registry_path)


def load_registry(project_root: Union[str, Path] = ".", registry_file: Optional[str] = None) -> ActivityRegistry:
    """
    Resolve the registry to use for a run.

    Load order (first match wins):
    1) Explicit registry file (must exist)
    2) <project_root>/.habit_voice/activities.json
    3) Builtin defaults

    Raises:
        RegistryError: If an explicit registry file does not exist
    """
    if registry_file:
        path = Path(registry_file)
        if not path.is_file():
            raise RegistryError(f"Registry file not found: {registry_file}")
        return ActivityRegistry(_read_registry_file(path))

    project_activities = load_project_registry(project_root)
    if project_activities is not None:
        return ActivityRegistry(project_activities)

    return ActivityRegistry(load_builtin_registry())


def save_registry(registry: ActivityRegistry, project_root: Union[str, Path] = ".", registry_file: Optional[str] = None) -> Path:
    """
    Write the registry to an explicit file or the project registry file.

    Raises:
        RegistryError: If the file cannot be written
    """
    path = Path(registry_file) if registry_file else get_project_registry_path(project_root)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            json.dump(registry.to_data(), f, indent=2, ensure_ascii=False)
    except OSError as e:
        raise RegistryError(f"Failed to write registry file '{path}': {e}")
    return path
