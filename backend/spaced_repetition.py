"""
SM-2 variant spaced repetition algorithm.

Each graded review picks the next interval from the card's current interval
and ease factor:
- Again: restart at one day, ease factor decreases
- Hard: interval grows slowly (x1.2), ease factor decreases
- Good: interval grows by the ease factor
- Easy: interval grows by the ease factor with a bonus, ease factor increases

When the algorithm is disabled for a review the interval is 0 and the card
stays due, which turns spacing off entirely.
"""

import logging
import math
from collections.abc import Iterable
from datetime import date, datetime, timedelta
from enum import Enum
from typing import NamedTuple

logger = logging.getLogger(__name__)

DATE_FORMAT = "%Y-%m-%d"


class Grade(Enum):
    """Recall quality of a single review, from worst to best."""

    AGAIN = 0  # Forgot, start over
    HARD = 1  # Recalled with difficulty
    GOOD = 2  # Normal progression
    EASY = 3  # Accelerated progression

    @property
    def label(self) -> str:
        return self.name.capitalize()


class SpacedRepetitionConfig(NamedTuple):
    """Constants of the scheduling algorithm."""

    initial_interval_days: int = 1  # Interval of a card that was never reviewed
    initial_ease_factor: float = 2.5  # Ease factor of a card that was never reviewed
    minimum_interval_days: int = 1  # Floor for every enabled review
    ease_factor_minimum: float = 1.3
    ease_factor_maximum: float = 2.5
    ease_factor_step: float = 0.15  # Decrease for Again/Hard, increase for Easy
    hard_multiplier: float = 1.2
    easy_bonus: float = 1.3


class SpacedRepetitionResult(NamedTuple):
    """Result of spaced repetition calculation."""

    next_review_date: date
    ease_factor: float
    interval_days: int


def grade_from_string(value: str) -> Grade:
    """
    Convert a grade label ("Again", "Hard", "Good", "Easy") to a Grade.

    Raises:
        ValueError: If the label is not a known grade
    """
    try:
        return Grade[value.strip().upper()]
    except KeyError as e:
        raise ValueError(f"Unknown grade: {value!r}") from e


def round_half_up(value: float) -> int:
    """Round to the nearest integer with halves going up (2.5 -> 3)."""
    return int(math.floor(value + 0.5))


def clamp_ease_factor(value: float, config: SpacedRepetitionConfig) -> float:
    """Keep an ease factor inside the configured bounds, on a 0.01 grid."""
    value = round(value, 2)
    return min(config.ease_factor_maximum, max(config.ease_factor_minimum, value))


def calculate_next_review(
    grade: Grade,
    current_ease_factor: float = 2.5,
    current_interval_days: int = 1,
    algorithm_enabled: bool = True,
    config: SpacedRepetitionConfig | None = None,
) -> SpacedRepetitionResult:
    """
    Calculate the next interval, ease factor and review date for a card.

    Args:
        grade: The grade received for this review
        current_ease_factor: Current ease factor of the card
        current_interval_days: Current interval of the card in days
        algorithm_enabled: Apply spacing; when False the card is due again today
        config: Spaced repetition configuration

    Returns:
        SpacedRepetitionResult with the updated values
    """
    if config is None:
        config = SpacedRepetitionConfig()

    today = date.today()

    if not algorithm_enabled:
        return SpacedRepetitionResult(
            next_review_date=today,
            ease_factor=current_ease_factor,
            interval_days=0,
        )

    ease_factor = current_ease_factor

    if grade == Grade.AGAIN:
        interval_days = config.initial_interval_days
        ease_factor = clamp_ease_factor(ease_factor - config.ease_factor_step, config)

    elif grade == Grade.HARD:
        interval_days = round_half_up(current_interval_days * config.hard_multiplier)
        ease_factor = clamp_ease_factor(ease_factor - config.ease_factor_step, config)

    elif grade == Grade.GOOD:
        interval_days = round_half_up(current_interval_days * ease_factor)

    elif grade == Grade.EASY:
        interval_days = round_half_up(current_interval_days * ease_factor * config.easy_bonus)
        ease_factor = clamp_ease_factor(ease_factor + config.ease_factor_step, config)

    interval_days = max(config.minimum_interval_days, interval_days)

    logger.debug(
        "Scheduled %s review: interval %d -> %d days, ease %.2f -> %.2f",
        grade.label,
        current_interval_days,
        interval_days,
        current_ease_factor,
        ease_factor,
    )

    return SpacedRepetitionResult(
        next_review_date=today + timedelta(days=interval_days),
        ease_factor=ease_factor,
        interval_days=interval_days,
    )


def parse_review_date(value: str | date) -> date:
    """
    Parse a stored YYYY-MM-DD calendar date.

    Raises:
        ValueError: If the value is not a valid date in that format
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return datetime.strptime(value, DATE_FORMAT).date()


def is_card_due(
    due_date: date | str,
    algorithm_enabled: bool = True,
    today: date | None = None,
) -> bool:
    """
    Check if a card is due for review.

    Args:
        due_date: The card's due date
        algorithm_enabled: When False every card is due
        today: Reference day, defaults to the local calendar date

    Returns:
        True if the card is due on or before today
    """
    if not algorithm_enabled:
        return True

    if today is None:
        today = date.today()

    return parse_review_date(due_date) <= today


def get_due_cards_count(due_dates: Iterable[date | str], algorithm_enabled: bool = True) -> int:
    """Count how many of the given due dates are due today."""
    today = date.today()
    return sum(1 for due_date in due_dates if is_card_due(due_date, algorithm_enabled, today))
