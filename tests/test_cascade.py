"""
Tests for the individual cascade tiers.

Each tier is exercised on its own so sub-pattern order is visible.
"""

from habit_voice.core.cascade import (
    TIERS,
    fallback_keyword_tier,
    general_phrasing_tier,
    normalize_spoken_name,
    simple_adjacency_tier,
    specific_activity_tier,
    tier_names,
    time_based_tier,
)


class TestNormalizeSpokenName:
    """Test name casing for words not matched against the registry."""

    def test_capitalizes_first_letter_only(self):
        assert normalize_spoken_name("squats") == "Squats"
        assert normalize_spoken_name("jumpingJacks") == "JumpingJacks"

    def test_push_special_case(self):
        assert normalize_spoken_name("push") == "Pushups"
        assert normalize_spoken_name("Pushs") == "Pushups"


class TestTierOrder:
    """Test that tier priority is an explicit list."""

    def test_tier_names(self):
        assert tier_names() == ["specific", "time_based", "general", "simple", "fallback"]
        assert len(TIERS) == 5


class TestSpecificActivityTier:
    """Test tier 1: pushups, sit ups and meditation."""

    def test_numeric_pushups(self):
        candidates = specific_activity_tier("I did 20 pushups")
        assert candidates[0].name == "Pushups"
        assert candidates[0].quantity == "20"
        assert candidates[0].unit == "reps"
        assert candidates[0].source_tier == 1

    def test_written_sit_ups(self):
        candidates = specific_activity_tier("just did fifteen sit ups")
        assert len(candidates) == 1
        assert candidates[0].name == "Sit Ups"
        assert candidates[0].quantity == "15"

    def test_meditation_written_minutes(self):
        candidates = specific_activity_tier("I meditated for ten minutes")
        assert [(c.name, c.quantity, c.unit) for c in candidates] == [("Meditated", "10", "mins"), ("Meditated", None, None)]

    def test_meditation_without_quantity(self):
        candidates = specific_activity_tier("I meditated this morning")
        assert len(candidates) == 1
        assert candidates[0].quantity is None
        assert candidates[0].unit is None

    def test_keyword_without_quantity_yields_nothing_for_pushups(self):
        assert specific_activity_tier("I love pushups") == []

    def test_no_keyword(self):
        assert specific_activity_tier("went for a 30 minute walk") == []


class TestTimeBasedTier:
    """Test tier 2: durations followed by an activity word."""

    def test_numeric(self):
        candidates = time_based_tier("went for a 30 minute walk")
        assert candidates[0].name == "Walk"
        assert candidates[0].quantity == "30"
        assert candidates[0].unit == "mins"
        assert candidates[0].source_tier == 2

    def test_written(self):
        candidates = time_based_tier("I went for a ten minute walk")
        assert len(candidates) == 1
        assert candidates[0].name == "Walk"
        assert candidates[0].quantity == "10"

    def test_plural_minutes(self):
        candidates = time_based_tier("did 45 minutes yoga")
        assert candidates[0].name == "Yoga"

    def test_no_activity_word(self):
        assert time_based_tier("it took 30 minutes") == []


class TestGeneralPhrasingTier:
    """Test tier 3: "I did / completed / finished N <activity>"."""

    def test_numeric(self):
        candidates = general_phrasing_tier("I just finished 12 laps")
        assert candidates[0].name == "Laps"
        assert candidates[0].quantity == "12"
        assert candidates[0].unit is None
        assert candidates[0].source_tier == 3

    def test_written_word(self):
        candidates = general_phrasing_tier("I did eight burpees")
        assert [(c.name, c.quantity) for c in candidates] == [("Burpees", "8")]

    def test_compound(self):
        candidates = general_phrasing_tier("I did twenty-five squats")
        assert [(c.name, c.quantity) for c in candidates] == [("Squats", "25")]

    def test_requires_lead_in(self):
        assert general_phrasing_tier("25 squats") == []


class TestSimpleAdjacencyTier:
    """Test tier 4: bare "N <word>" with time units excluded."""

    def test_arbitrary_noun(self):
        candidates = simple_adjacency_tier("5 apples")
        assert [(c.name, c.quantity, c.source_tier) for c in candidates] == [("Apples", "5", 4)]

    def test_word_is_lowercased_before_capitalizing(self):
        candidates = simple_adjacency_tier("5 APPLES")
        assert candidates[0].name == "Apples"

    def test_time_units_excluded(self):
        assert simple_adjacency_tier("10 minutes of stretching") == []
        assert simple_adjacency_tier("two hours") == []

    def test_push_maps_to_pushups(self):
        candidates = simple_adjacency_tier("15 push ups")
        assert candidates[0].name == "Pushups"


class TestFallbackKeywordTier:
    """Test tier 5: keyword table with default units."""

    def test_run_with_quantity(self):
        candidates = fallback_keyword_tier("went on a run for 3 miles")
        assert [(c.name, c.quantity, c.unit) for c in candidates] == [("Run", "3", "miles")]

    def test_quantity_may_be_absent(self):
        candidates = fallback_keyword_tier("I did some exercise")
        assert [(c.name, c.quantity, c.unit) for c in candidates] == [("Exercise", None, None)]

    def test_name_override(self):
        candidates = fallback_keyword_tier("a few situps")
        assert [(c.name, c.unit) for c in candidates] == [("Sit-ups", "reps")]

    def test_table_order(self):
        candidates = fallback_keyword_tier("a run and a walk")
        assert [c.name for c in candidates] == ["Run", "Walk"]
