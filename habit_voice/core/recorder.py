"""
Persistence-time handling of detected activities.

Normalizes detected names against the registry, applies the existence check,
fills in a "reps" unit for repetition exercises, and writes events to the day
store. Rejections are silent toward the speaker: nothing is stored and only a
warning is logged.
"""

import logging
import uuid
from datetime import datetime
from typing import Optional

from .config import config
from .debug_log import get_debug_logger
from .registry import ActivityRegistry
from .store import DayStore, date_to_string, today_string
from .types import ActivityEvent, ExtractionResult

logger = logging.getLogger(__name__)

REP_ACTIVITIES = [
    "situp", "sit-up", "sit ups", "situps",
    "pushup", "push-up", "push ups", "pushups",
    "squat", "squats",
    "pullup", "pull-up", "pull ups", "pullups",
    "crunch", "crunches",
    "burpee", "burpees",
    "jumping jack", "jumping jacks",
    "lunge", "lunges",
    "dip", "dips",
    "plank", "planks",
]


def should_use_reps(activity_name: str) -> bool:
    """True if the name mentions a repetition-based exercise."""
    lower_name = activity_name.lower()
    return any(activity in lower_name for activity in REP_ACTIVITIES)


def _new_event_id() -> str:
    return uuid.uuid4().hex


class ActivityRecorder:
    """
    Admits normalized activities into the day store.

    Args:
        registry: Tracked activities used for normalization and the existence check
        store: Day store events are written to
        infer_reps: Fill in "reps" for rep exercises with a quantity but no unit;
            defaults to the HV_DEFAULT_UNIT_REPS setting
    """

    def __init__(self, registry: ActivityRegistry, store: DayStore, infer_reps: Optional[bool] = None, project_root: str = "."):
        self.registry = registry
        self.store = store
        self.infer_reps = config.infer_reps_unit if infer_reps is None else infer_reps
        self.project_root = project_root

    def admit(self, name: str) -> Optional[str]:
        """
        Normalize a name and apply the existence check.

        Returns:
            The normalized name, or None if the registry rejects it
        """
        normalized_name = self.registry.normalize(name)
        if self.registry.is_open_vocabulary() or self.registry.is_valid_tracked_activity(normalized_name):
            return normalized_name

        logger.warning(f'Activity "{name}" (normalized to "{normalized_name}") does not match any tracked activity. Rejecting.')
        debug_logger = get_debug_logger(self.project_root)
        if debug_logger.is_enabled():
            debug_logger.log_admission_rejection(name, normalized_name, self.registry.names, self.registry.suggest(normalized_name))
        return None

    def _resolve_unit(self, name: str, quantity: Optional[str], unit: Optional[str]) -> Optional[str]:
        if not unit and quantity and self.infer_reps and should_use_reps(name):
            return "reps"
        return unit

    def add_activity(
        self,
        name: str,
        quantity: Optional[str] = None,
        unit: Optional[str] = None,
        transcribed_phrase: Optional[str] = None,
        when: Optional[datetime] = None,
    ) -> Optional[ActivityEvent]:
        """
        Record an activity for the day it happened.

        Returns:
            The stored event, or None if the name was rejected
        """
        normalized_name = self.admit(name)
        if normalized_name is None:
            return None

        timestamp = when or datetime.now()
        event = ActivityEvent(
            id=_new_event_id(),
            name=normalized_name,
            quantity=quantity,
            unit=self._resolve_unit(normalized_name, quantity, unit),
            timestamp=timestamp,
            transcribed_phrase=transcribed_phrase,
        )
        self.store.add_event(date_to_string(timestamp), event)
        return event

    def update_activity(
        self,
        date_string: str,
        event_id: str,
        name: Optional[str] = None,
        quantity: Optional[str] = None,
        unit: Optional[str] = None,
    ) -> Optional[ActivityEvent]:
        """
        Edit a stored event; unchanged fields keep their values.

        Raises:
            EventNotFoundError: If the event does not exist on that day
        """
        existing = self.store.find_event(date_string, event_id)

        normalized_name = self.admit(name if name is not None else existing.name)
        if normalized_name is None:
            return None

        final_quantity = quantity if quantity is not None else existing.quantity
        final_unit = unit if unit is not None else existing.unit
        updated = existing.model_copy(
            update={
                "name": normalized_name,
                "quantity": final_quantity,
                "unit": self._resolve_unit(normalized_name, final_quantity, final_unit),
            }
        )
        self.store.update_event(date_string, updated)
        return updated

    def remove_activity(self, date_string: str, event_id: str) -> None:
        self.store.remove_event(date_string, event_id)

    def today_events(self):
        return self.store.get_events(today_string())

    def on_activity_detected(self, result: ExtractionResult) -> Optional[ActivityEvent]:
        """Detection callback handed to the extraction pipeline; None if the name was rejected."""
        return self.add_activity(result.name, result.quantity, result.unit, result.transcribed_phrase)
