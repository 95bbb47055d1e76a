"""
Configuration management for the habit tracker.

Settings come from environment variables. A project-scoped .env file under
.habit_voice/ can be loaded explicitly with python-dotenv; nothing is loaded
implicitly at import time.
"""

import os
from functools import lru_cache
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

PROJECT_DIR_NAME = ".habit_voice"
DEFAULT_ENV_FILENAME = ".env"
ENV_FILE_ENV_VAR = "HV_ENV_FILE"
PROJECT_ROOT_ENV_VAR = "HV_PROJECT_ROOT"

TRUE_VALUES = ("true", "1", "yes", "on")
FALSE_VALUES = ("false", "0", "no", "off")


class ConfigError(Exception):
    """Raised when configuration is invalid."""

    pass


@lru_cache(maxsize=32)
def load_config(env_path: Optional[str] = None, override: bool = False) -> None:
    """Explicitly load environment variables from the given .env file path."""
    if env_path:
        load_dotenv(dotenv_path=env_path, override=override)


def _parse_bool(name: str, default: str) -> bool:
    value = os.getenv(name, default).strip().lower()
    if value in TRUE_VALUES:
        return True
    if value in FALSE_VALUES:
        return False
    raise ConfigError(f"{name} must be a boolean (true/false), got: {value!r}")


class Config:
    """Configuration settings for the habit tracker."""

    @property
    def registry_file(self) -> Optional[str]:
        """Explicit tracked-activity registry file, if configured."""
        return os.getenv("HV_REGISTRY_FILE") or None

    @property
    def data_dir(self) -> Optional[str]:
        """Override for the day-store directory (default: <project>/.habit_voice/days)."""
        return os.getenv("HV_DATA_DIR") or None

    @property
    def debug(self) -> bool:
        """Whether JSON debug traces are written (HV_DEBUG=1)."""
        return os.getenv("HV_DEBUG", "0") == "1"

    @property
    def max_restarts(self) -> int:
        """Consecutive automatic restarts allowed after aborted recognition (default: 3)."""
        raw = os.getenv("HV_MAX_RESTARTS", "3")
        try:
            value = int(raw)
        except ValueError:
            raise ConfigError(f"HV_MAX_RESTARTS must be an integer, got: {raw!r}")
        if value < 0:
            raise ConfigError(f"HV_MAX_RESTARTS must not be negative, got: {value}")
        return value

    @property
    def infer_reps_unit(self) -> bool:
        """Whether rep-based exercises get a "reps" unit when none was spoken (default: true)."""
        return _parse_bool("HV_DEFAULT_UNIT_REPS", "true")


# Global config instance
config = Config()

# --- Project-scoped helpers ---


def detect_project_root(start_dir: Optional[str] = None) -> Optional[Path]:
    """Detect project root by looking for a .habit_voice directory upwards from start_dir (or CWD)."""
    start = Path(start_dir) if start_dir else Path.cwd()
    for current in [start] + list(start.parents):
        if (current / PROJECT_DIR_NAME).exists():
            return current
    return None


def resolve_project_root(project_root: Optional[str] = None) -> str:
    """
    Resolve the project root to use.

    Order: explicit argument, HV_PROJECT_ROOT, detected .habit_voice parent, CWD.
    """
    if project_root:
        return project_root
    if os.getenv(PROJECT_ROOT_ENV_VAR):
        return os.environ[PROJECT_ROOT_ENV_VAR]
    detected = detect_project_root()
    return str(detected) if detected else "."


def get_project_dir(project_root: Optional[str] = None) -> Path:
    """Return the .habit_voice directory for a given or resolved project root."""
    return Path(resolve_project_root(project_root)) / PROJECT_DIR_NAME


def ensure_project_dir(project_root: Optional[str] = None) -> Path:
    """Ensure the .habit_voice directory exists and return its path."""
    project_dir = get_project_dir(project_root)
    project_dir.mkdir(parents=True, exist_ok=True)
    return project_dir


def get_project_env_path(project_root: Optional[str] = None, filename: str = DEFAULT_ENV_FILENAME) -> Path:
    return get_project_dir(project_root) / filename


def ensure_project_env(project_root: Optional[str] = None, filename: str = DEFAULT_ENV_FILENAME, overwrite: bool = False) -> Path:
    """
    Create a template project env file under .habit_voice if none exists.

    Never loads values; it only places the file.
    """
    target = ensure_project_dir(project_root) / filename
    if target.exists() and not overwrite:
        return target

    template = (
        "# Project-scoped environment for habit-voice\n"
        "# HV_REGISTRY_FILE=/path/to/activities.json\n"
        "# HV_DATA_DIR=/path/to/days\n"
        "HV_DEBUG=0\n"
        "HV_MAX_RESTARTS=3\n"
        "HV_DEFAULT_UNIT_REPS=true\n"
    )
    target.write_text(template, encoding="utf-8")
    return target


def load_project_env(project_root: Optional[str] = None, filename: str = DEFAULT_ENV_FILENAME, override: bool = False) -> Optional[str]:
    """
    Load a project-scoped environment file, if available.

    Load order (first match wins):
    1) Explicit env file path via HV_ENV_FILE
    2) <project_root>/.habit_voice/<filename>

    Returns the path loaded, or None if nothing was loaded.
    """
    explicit = os.getenv(ENV_FILE_ENV_VAR)
    if explicit and Path(explicit).is_file():
        load_config(explicit, override=override)
        return explicit

    env_path = get_project_env_path(project_root, filename)
    if env_path.is_file():
        load_config(str(env_path), override=override)
        return str(env_path)

    return None


def validate_config() -> None:
    """
    Validate that configured values parse.

    Raises:
        ConfigError: If any setting is malformed or points at a missing file
    """
    _ = config.max_restarts
    _ = config.infer_reps_unit
    registry_file = config.registry_file
    if registry_file and not Path(registry_file).is_file():
        raise ConfigError(f"HV_REGISTRY_FILE points to a missing file: {registry_file}")
