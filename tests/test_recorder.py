"""
Tests for admitting detected activities and storing them per day.
"""

import logging
from datetime import datetime
from pathlib import Path

import pytest

from habit_voice.core.extract import ExtractionPipeline
from habit_voice.core.recorder import ActivityRecorder, should_use_reps
from habit_voice.core.registry import ActivityRegistry, load_builtin_registry
from habit_voice.core.store import DayStore, EventNotFoundError, StoreError, parse_date_string
from habit_voice.core.types import ExtractionResult

MORNING = datetime(2024, 1, 15, 8, 0)
EVENING = datetime(2024, 1, 15, 19, 30)
DAY = "2024-01-15"


@pytest.fixture(autouse=True)
def no_debug(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.delenv("HV_DEBUG", raising=False)


@pytest.fixture
def store(tmp_path: Path) -> DayStore:
    return DayStore(project_root=str(tmp_path))


@pytest.fixture
def recorder(store: DayStore, tmp_path: Path) -> ActivityRecorder:
    return ActivityRecorder(ActivityRegistry(load_builtin_registry()), store, infer_reps=True, project_root=str(tmp_path))


class TestShouldUseReps:
    def test_rep_exercises(self):
        assert should_use_reps("Pushups")
        assert should_use_reps("Sit-ups")
        assert should_use_reps("jumping jacks")

    def test_other_activities(self):
        assert not should_use_reps("Run")
        assert not should_use_reps("Meditated")


class TestAddActivity:
    """Test normalization, admission and unit inference when storing."""

    def test_normalized_and_stored(self, recorder, store):
        event = recorder.add_activity("push ups", "20", when=MORNING)
        assert event.name == "Pushups"
        assert event.unit == "reps"
        assert store.get_events(DAY) == [event]

    def test_spoken_unit_kept(self, recorder):
        event = recorder.add_activity("Walk", "30", "mins", when=MORNING)
        assert event.unit == "mins"

    def test_no_reps_without_quantity(self, recorder):
        event = recorder.add_activity("Squats", when=MORNING)
        assert event.unit is None

    def test_reps_inference_disabled(self, store, tmp_path):
        recorder = ActivityRecorder(ActivityRegistry(load_builtin_registry()), store, infer_reps=False, project_root=str(tmp_path))
        assert recorder.add_activity("Pushups", "20", when=MORNING).unit is None

    def test_rejected_name_logs_warning(self, recorder, store, caplog):
        with caplog.at_level(logging.WARNING, logger="habit_voice.core.recorder"):
            assert recorder.add_activity("Apples", "5", when=MORNING) is None

        assert 'Activity "Apples" (normalized to "Apples") does not match any tracked activity. Rejecting.' in caplog.text
        assert store.get_events(DAY) == []

    def test_open_vocabulary_stores_anything(self, store, tmp_path):
        recorder = ActivityRecorder(ActivityRegistry([]), store, infer_reps=True, project_root=str(tmp_path))
        event = recorder.add_activity("Apples", "5", when=MORNING)
        assert event.name == "Apples"

    def test_inactive_entry_still_admitted(self, store, tmp_path):
        registry = ActivityRegistry(load_builtin_registry())
        registry.set_active("Walk", False)
        recorder = ActivityRecorder(registry, store, infer_reps=True, project_root=str(tmp_path))
        assert recorder.add_activity("walks", when=MORNING).name == "Walk"

    def test_newest_first(self, recorder, store):
        recorder.add_activity("Run", "3", "miles", when=MORNING)
        recorder.add_activity("Walk", "2", "miles", when=EVENING)
        assert [event.name for event in store.get_events(DAY)] == ["Walk", "Run"]

    def test_detection_callback_reports_rejection(self, recorder):
        assert recorder.on_activity_detected(ExtractionResult(name="Apples", quantity="5", transcribed_phrase="5 apples")) is None
        assert recorder.today_events() == []

    def test_detection_callback(self, recorder, store):
        recorder.on_activity_detected(ExtractionResult(name="Sit Ups", quantity="30", unit="reps", transcribed_phrase="I did 30 sit ups"))
        events = recorder.today_events()
        assert len(events) == 1
        assert events[0].name == "Sit-ups"
        assert events[0].transcribed_phrase == "I did 30 sit ups"


class TestPipelineToStore:
    """Test extraction feeding the recorder end to end."""

    def test_sit_ups(self, recorder):
        pipeline = ExtractionPipeline(recorder.registry, recorder.on_activity_detected)
        pipeline.process("I did 30 sit ups")
        events = recorder.today_events()
        assert [(e.name, e.quantity, e.unit) for e in events] == [("Sit-ups", "30", "reps")]

    def test_substring_activation_normalizes_to_keyword_owner(self, recorder):
        pipeline = ExtractionPipeline(recorder.registry, recorder.on_activity_detected)
        result = pipeline.process("5 oranges")
        assert result.name == "Oranges"
        assert [(e.name, e.quantity) for e in recorder.today_events()] == [("Run", "5")]


class TestUpdateAndRemove:
    def test_update_quantity(self, recorder, store):
        event = recorder.add_activity("Pushups", "20", when=MORNING)
        updated = recorder.update_activity(DAY, event.id, quantity="25")
        assert updated.quantity == "25"
        assert updated.name == "Pushups"
        assert store.find_event(DAY, event.id).quantity == "25"

    def test_update_renames_through_normalizer(self, recorder, store):
        event = recorder.add_activity("Run", "3", "miles", when=MORNING)
        updated = recorder.update_activity(DAY, event.id, name="walking")
        assert updated.name == "Walk"
        assert updated.unit == "miles"

    def test_update_rejected_name_leaves_event(self, recorder, store):
        event = recorder.add_activity("Run", "3", "miles", when=MORNING)
        assert recorder.update_activity(DAY, event.id, name="Apples") is None
        assert store.find_event(DAY, event.id).name == "Run"

    def test_update_missing_event(self, recorder):
        with pytest.raises(EventNotFoundError):
            recorder.update_activity(DAY, "missing", quantity="1")

    def test_remove(self, recorder, store):
        event = recorder.add_activity("Run", "3", "miles", when=MORNING)
        recorder.remove_activity(DAY, event.id)
        assert store.get_events(DAY) == []

    def test_remove_missing(self, recorder):
        with pytest.raises(EventNotFoundError):
            recorder.remove_activity(DAY, "missing")


class TestDayStore:
    """Test the JSON day documents."""

    def test_missing_day(self, store):
        assert store.load_day(DAY) is None
        assert store.get_events(DAY) == []

    def test_document_location_and_timestamps(self, recorder, tmp_path):
        recorder.add_activity("Run", "3", "miles", when=MORNING)
        path = tmp_path / ".habit_voice" / "days" / f"{DAY}.json"
        assert path.is_file()

        day = DayStore(project_root=str(tmp_path)).load_day(DAY)
        assert day.date.isoformat() == DAY
        assert day.created_at is not None
        assert day.updated_at >= day.created_at

    def test_data_dir_override(self, tmp_path):
        store = DayStore(project_root=str(tmp_path), data_dir=str(tmp_path / "elsewhere"))
        recorder = ActivityRecorder(ActivityRegistry([]), store, infer_reps=True, project_root=str(tmp_path))
        recorder.add_activity("Yoga", when=MORNING)
        assert (tmp_path / "elsewhere" / f"{DAY}.json").is_file()

    def test_corrupt_document(self, store):
        store.days_dir.mkdir(parents=True)
        (store.days_dir / f"{DAY}.json").write_text("{broken", encoding="utf-8")
        with pytest.raises(StoreError):
            store.load_day(DAY)

    def test_parse_date_string(self):
        assert parse_date_string(DAY).day == 15
        with pytest.raises(StoreError):
            parse_date_string("15/01/2024")
