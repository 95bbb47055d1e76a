"""
Per-day event storage.

Each calendar day is one JSON document under <project_root>/.habit_voice/days/
named YYYY-MM-DD.json, holding that day's events newest first.
"""

import json
from datetime import date, datetime
from pathlib import Path
from typing import List, Optional, Union

from pydantic import ValidationError

from .config import PROJECT_DIR_NAME
from .types import ActivityEvent, Day


class StoreError(Exception):
    """Raised when a day document cannot be read or written."""

    pass


class EventNotFoundError(StoreError):
    """Raised when an event id is not present in the day document."""

    pass


def date_to_string(day: Union[date, datetime]) -> str:
    """Format a date as the YYYY-MM-DD document id."""
    return day.strftime("%Y-%m-%d")


def today_string() -> str:
    return date_to_string(date.today())


def parse_date_string(value: str) -> date:
    try:
        return datetime.strptime(value, "%Y-%m-%d").date()
    except ValueError:
        raise StoreError(f"Invalid date '{value}', expected YYYY-MM-DD")


class DayStore:
    """JSON-file store of Day documents."""

    def __init__(self, project_root: str = ".", data_dir: Optional[str] = None):
        self.days_dir = Path(data_dir) if data_dir else Path(project_root) / PROJECT_DIR_NAME / "days"

    def _day_path(self, date_string: str) -> Path:
        return self.days_dir / f"{date_string}.json"

    def load_day(self, date_string: str) -> Optional[Day]:
        """Load a day document, or None if nothing has been logged that day."""
        path = self._day_path(date_string)
        if not path.exists():
            return None

        try:
            with open(path, "r", encoding="utf-8") as f:
                return Day.model_validate(json.load(f))
        except (OSError, ValueError, ValidationError) as e:
            raise StoreError(f"Failed to read day document '{path}': {e}")

    def save_day(self, day: Day) -> Path:
        path = self._day_path(day.id)
        day.updated_at = datetime.now()
        if day.created_at is None:
            day.created_at = day.updated_at

        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with open(path, "w", encoding="utf-8") as f:
                f.write(day.model_dump_json(indent=2))
        except OSError as e:
            raise StoreError(f"Failed to write day document '{path}': {e}")
        return path

    def get_events(self, date_string: str) -> List[ActivityEvent]:
        day = self.load_day(date_string)
        return day.events if day else []

    def add_event(self, date_string: str, event: ActivityEvent) -> Day:
        """Prepend an event to the day, creating the day document if needed."""
        day = self.load_day(date_string) or Day(id=date_string, date=parse_date_string(date_string))
        day.events.insert(0, event)
        self.save_day(day)
        return day

    def update_event(self, date_string: str, event: ActivityEvent) -> Day:
        """Replace the event with the same id."""
        day = self.load_day(date_string)
        if day is None:
            raise EventNotFoundError(f"No events recorded on {date_string}")

        for index, existing in enumerate(day.events):
            if existing.id == event.id:
                day.events[index] = event
                self.save_day(day)
                return day

        raise EventNotFoundError(f"Event {event.id} not found on {date_string}")

    def remove_event(self, date_string: str, event_id: str) -> Day:
        day = self.load_day(date_string)
        remaining = [event for event in day.events if event.id != event_id] if day else []
        if day is None or len(remaining) == len(day.events):
            raise EventNotFoundError(f"Event {event_id} not found on {date_string}")

        day.events = remaining
        self.save_day(day)
        return day

    def find_event(self, date_string: str, event_id: str) -> ActivityEvent:
        for event in self.get_events(date_string):
            if event.id == event_id:
                return event
        raise EventNotFoundError(f"Event {event_id} not found on {date_string}")
