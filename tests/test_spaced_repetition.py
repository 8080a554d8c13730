"""
Tests for spaced repetition functionality.
"""

from datetime import date

import pytest
from freezegun import freeze_time

from backend.spaced_repetition import (
    Grade,
    SpacedRepetitionConfig,
    calculate_next_review,
    get_due_cards_count,
    grade_from_string,
    is_card_due,
    parse_review_date,
    round_half_up,
)


class TestGradeConversion:
    """Test grade conversion from labels to Grade enum."""

    def test_grade_from_string_labels(self):
        assert grade_from_string("Again") == Grade.AGAIN
        assert grade_from_string("Hard") == Grade.HARD
        assert grade_from_string("Good") == Grade.GOOD
        assert grade_from_string("Easy") == Grade.EASY

    def test_grade_from_string_is_case_insensitive(self):
        assert grade_from_string("good") == Grade.GOOD
        assert grade_from_string(" EASY ") == Grade.EASY

    def test_grade_from_string_unknown_raises(self):
        with pytest.raises(ValueError):
            grade_from_string("Perfect")

    def test_grades_are_ordered_by_recall_quality(self):
        values = [grade.value for grade in (Grade.AGAIN, Grade.HARD, Grade.GOOD, Grade.EASY)]
        assert values == sorted(values)

    def test_grade_label(self):
        assert Grade.AGAIN.label == "Again"


class TestSpacedRepetitionConfig:
    """Test SpacedRepetitionConfig default values."""

    def test_default_config_values(self):
        config = SpacedRepetitionConfig()
        assert config.initial_interval_days == 1
        assert config.initial_ease_factor == 2.5
        assert config.minimum_interval_days == 1
        assert config.ease_factor_minimum == 1.3
        assert config.ease_factor_maximum == 2.5
        assert config.ease_factor_step == 0.15
        assert config.hard_multiplier == 1.2
        assert config.easy_bonus == 1.3


def test_round_half_up():
    assert round_half_up(2.5) == 3
    assert round_half_up(3.25) == 3
    assert round_half_up(12.000000000000002) == 12
    assert round_half_up(0.4) == 0


@freeze_time("2025-01-15 12:00:00")
class TestCalculateNextReview:
    """Test the core spaced repetition algorithm."""

    def test_new_card_good_grade(self):
        result = calculate_next_review(Grade.GOOD, current_ease_factor=2.5, current_interval_days=1)

        # round(1 * 2.5) rounds half up
        assert result.interval_days == 3
        assert result.ease_factor == 2.5
        assert result.next_review_date == date(2025, 1, 18)

    def test_again_resets_interval_and_lowers_ease(self):
        result = calculate_next_review(Grade.AGAIN, current_ease_factor=2.5, current_interval_days=3)

        assert result.interval_days == 1
        assert result.ease_factor == 2.35
        assert result.next_review_date == date(2025, 1, 16)

    def test_hard_grade_at_ease_floor(self):
        result = calculate_next_review(Grade.HARD, current_ease_factor=1.3, current_interval_days=10)

        assert result.interval_days == 12
        assert result.ease_factor == 1.3
        assert result.next_review_date == date(2025, 1, 27)

    def test_hard_grade_lowers_ease(self):
        result = calculate_next_review(Grade.HARD, current_ease_factor=2.0, current_interval_days=5)

        assert result.interval_days == 6
        assert result.ease_factor == 1.85

    def test_easy_grade_applies_bonus(self):
        result = calculate_next_review(Grade.EASY, current_ease_factor=2.0, current_interval_days=4)

        # 4 * 2.0 * 1.3 = 10.4
        assert result.interval_days == 10
        assert result.ease_factor == 2.15

    def test_easy_grade_ease_capped_at_maximum(self):
        result = calculate_next_review(Grade.EASY, current_ease_factor=2.5, current_interval_days=1)

        # 1 * 2.5 * 1.3 = 3.25
        assert result.interval_days == 3
        assert result.ease_factor == 2.5

    def test_good_grade_keeps_ease(self):
        result = calculate_next_review(Grade.GOOD, current_ease_factor=1.7, current_interval_days=6)

        assert result.interval_days == 10
        assert result.ease_factor == 1.7

    def test_interval_floor_of_one_day(self):
        result = calculate_next_review(Grade.HARD, current_ease_factor=2.5, current_interval_days=0)

        assert result.interval_days == 1
        assert result.next_review_date == date(2025, 1, 16)

    def test_algorithm_disabled_keeps_card_due_today(self):
        result = calculate_next_review(
            Grade.EASY,
            current_ease_factor=2.2,
            current_interval_days=8,
            algorithm_enabled=False,
        )

        assert result.interval_days == 0
        assert result.ease_factor == 2.2
        assert result.next_review_date == date(2025, 1, 15)

    def test_custom_configuration_impact(self):
        config = SpacedRepetitionConfig(hard_multiplier=1.5, easy_bonus=2.0, ease_factor_step=0.2)

        hard = calculate_next_review(Grade.HARD, 2.0, 4, config=config)
        assert hard.interval_days == 6
        assert hard.ease_factor == 1.8

        easy = calculate_next_review(Grade.EASY, 2.0, 4, config=config)
        assert easy.interval_days == 16
        assert easy.ease_factor == 2.2

    def test_calculate_next_review_without_config(self):
        result = calculate_next_review(Grade.GOOD, 2.5, 2, config=None)
        assert result.interval_days == 5


@freeze_time("2025-01-15 12:00:00")
class TestEaseBounds:
    """Ease factor stays within [1.3, 2.5] for any grade sequence."""

    @pytest.mark.parametrize(
        "grades",
        [
            [Grade.AGAIN] * 12,
            [Grade.EASY] * 12,
            [Grade.HARD, Grade.EASY, Grade.AGAIN, Grade.GOOD] * 5,
            [Grade.EASY, Grade.EASY, Grade.HARD, Grade.HARD, Grade.HARD, Grade.GOOD] * 3,
        ],
    )
    def test_ease_and_interval_bounds(self, grades):
        ease, interval = 2.5, 1
        for grade in grades:
            result = calculate_next_review(grade, ease, interval)
            ease, interval = result.ease_factor, result.interval_days
            assert 1.3 <= ease <= 2.5
            assert interval >= 1


class TestCardDueChecking:
    """Test card due date checking functions."""

    @freeze_time("2025-01-15 12:00:00")
    def test_is_card_due_past_date(self):
        assert is_card_due(date(2025, 1, 14)) is True

    @freeze_time("2025-01-15 12:00:00")
    def test_is_card_due_today(self):
        assert is_card_due(date(2025, 1, 15)) is True

    @freeze_time("2025-01-15 12:00:00")
    def test_is_card_due_future_date(self):
        assert is_card_due(date(2025, 1, 16)) is False

    @freeze_time("2025-01-15 12:00:00")
    def test_is_card_due_accepts_iso_strings(self):
        assert is_card_due("2025-01-15") is True
        assert is_card_due("2025-01-16") is False

    @freeze_time("2025-01-15 12:00:00")
    def test_future_card_is_due_when_algorithm_disabled(self):
        assert is_card_due(date(2030, 1, 1), algorithm_enabled=False) is True

    def test_is_card_due_with_explicit_today(self):
        assert is_card_due(date(2025, 3, 1), today=date(2025, 3, 1)) is True
        assert is_card_due(date(2025, 3, 2), today=date(2025, 3, 1)) is False

    def test_get_due_cards_count_empty_list(self):
        assert get_due_cards_count([]) == 0

    @freeze_time("2025-01-15 12:00:00")
    def test_get_due_cards_count_mixed(self):
        due_dates = [date(2025, 1, 14), date(2025, 1, 15), date(2025, 1, 16), "2025-02-01"]
        assert get_due_cards_count(due_dates) == 2
        assert get_due_cards_count(due_dates, algorithm_enabled=False) == 4


class TestParseReviewDate:
    def test_parses_iso_date(self):
        assert parse_review_date("2025-01-05") == date(2025, 1, 5)

    def test_passes_dates_through(self):
        assert parse_review_date(date(2025, 1, 5)) == date(2025, 1, 5)

    @pytest.mark.parametrize("value", ["2025-13-01", "15/01/2025", "", "not a date"])
    def test_malformed_dates_fail_fast(self, value):
        with pytest.raises(ValueError):
            parse_review_date(value)
