"""
Flashcard domain model: decks of cards with their review history.

A Card carries its live scheduling state (interval, ease factor, due date)
next to the append-only list of reviews that produced it. The state is
always updated together with the review that caused it, and validation
rejects a card whose cached state disagrees with its last review.
"""

import logging
from datetime import date, datetime, timedelta
from typing import Annotated

from pydantic import (
    BaseModel,
    BeforeValidator,
    ConfigDict,
    Field,
    PlainSerializer,
    field_validator,
    model_validator,
)

from backend.spaced_repetition import (
    Grade,
    SpacedRepetitionConfig,
    calculate_next_review,
    grade_from_string,
    is_card_due,
)

logger = logging.getLogger(__name__)

DEFAULT_INTERVAL_DAYS = SpacedRepetitionConfig().initial_interval_days
DEFAULT_EASE_FACTOR = SpacedRepetitionConfig().initial_ease_factor
EASE_FACTOR_MINIMUM = SpacedRepetitionConfig().ease_factor_minimum
EASE_FACTOR_MAXIMUM = SpacedRepetitionConfig().ease_factor_maximum


def _parse_grade(value):
    if isinstance(value, str):
        return grade_from_string(value)
    return value


# Grades travel as their labels ("Again", "Hard", "Good", "Easy")
GradeLabel = Annotated[
    Grade,
    BeforeValidator(_parse_grade),
    PlainSerializer(lambda grade: grade.label, return_type=str),
]


class Review(BaseModel):
    """A single graded review of a card."""

    date: date
    grade: GradeLabel
    interval: int = Field(ge=0)
    ease_factor: float = Field(ge=EASE_FACTOR_MINIMUM, le=EASE_FACTOR_MAXIMUM)
    algorithm_enabled: bool = True

    model_config = ConfigDict(frozen=True, from_attributes=True)


class Card(BaseModel):
    """A flashcard and its scheduling state."""

    id: int = 0  # Set when added to a deck
    front: str
    back: str
    front_image: str | None = None
    back_image: str | None = None
    tags: set[str] = Field(default_factory=set)
    created_at: date = Field(default_factory=lambda: date.today())
    reviews: list[Review] = Field(default_factory=list)
    current_interval: int = Field(DEFAULT_INTERVAL_DAYS, ge=0)
    current_ease_factor: float = Field(
        DEFAULT_EASE_FACTOR, ge=EASE_FACTOR_MINIMUM, le=EASE_FACTOR_MAXIMUM
    )
    due_date: date | None = None
    is_new: bool = True

    model_config = ConfigDict(from_attributes=True)

    @field_validator("tags", mode="before")
    @classmethod
    def _tags_from_list(cls, value):
        if value is None:
            return set()
        return value

    @model_validator(mode="after")
    def _check_scheduling_state(self) -> "Card":
        """Cached scheduling fields must agree with the review history."""
        if self.is_new != (not self.reviews):
            raise ValueError("is_new must be set exactly when the card has no reviews")

        if not self.reviews:
            # A card that was never reviewed is due on the day it was created
            if self.due_date is None:
                self.due_date = self.created_at
            return self

        latest = self.reviews[-1]
        expected_due_date = latest.date + timedelta(days=latest.interval)
        if self.due_date is None:
            self.due_date = expected_due_date

        if self.current_interval != latest.interval:
            raise ValueError("current_interval does not match the latest review")
        if self.current_ease_factor != latest.ease_factor:
            raise ValueError("current_ease_factor does not match the latest review")
        if self.due_date != expected_due_date:
            raise ValueError("due_date does not follow from the latest review")
        return self

    def record_review(
        self,
        grade: Grade,
        algorithm_enabled: bool,
        config: SpacedRepetitionConfig | None = None,
    ) -> Review:
        """
        Grade this card and reschedule it.

        Args:
            grade: How well the card was recalled
            algorithm_enabled: Apply spaced repetition; when False the card stays due today
            config: Optional scheduling constants

        Returns:
            The Review appended to the card's history
        """
        result = calculate_next_review(
            grade,
            current_ease_factor=self.current_ease_factor,
            current_interval_days=self.current_interval,
            algorithm_enabled=algorithm_enabled,
            config=config,
        )
        review = Review(
            # Same day the next review date was counted from
            date=result.next_review_date - timedelta(days=result.interval_days),
            grade=grade,
            interval=result.interval_days,
            ease_factor=result.ease_factor,
            algorithm_enabled=algorithm_enabled,
        )

        self.reviews.append(review)
        self.current_interval = result.interval_days
        self.current_ease_factor = result.ease_factor
        self.due_date = result.next_review_date
        self.is_new = False

        return review

    def current_difficulty(self) -> Grade:
        """Grade of the latest review; cards never reviewed count as Again."""
        if not self.reviews:
            return Grade.AGAIN
        return self.reviews[-1].grade

    def is_due(self, algorithm_enabled: bool = True, today: date | None = None) -> bool:
        return is_card_due(self.due_date, algorithm_enabled, today)


class Deck(BaseModel):
    """A named collection of cards."""

    id: int | None = None  # Set by the database
    name: str
    description: str | None = None
    created_at: datetime = Field(default_factory=lambda: datetime.now())
    cards: list[Card] = Field(default_factory=list)
    next_card_id: int = 1

    model_config = ConfigDict(from_attributes=True)

    @model_validator(mode="after")
    def _check_card_ids(self) -> "Deck":
        card_ids = [card.id for card in self.cards]
        if len(set(card_ids)) != len(card_ids):
            raise ValueError("card ids must be unique within a deck")

        # Never hand out an id that a stored card already uses
        if card_ids:
            self.next_card_id = max(self.next_card_id, max(card_ids) + 1)
        return self

    def add_card(
        self,
        front: str,
        back: str,
        tags: set[str] | None = None,
        front_image: str | None = None,
        back_image: str | None = None,
    ) -> Card:
        """Create a card owned by this deck with the next card id."""
        card = Card(
            id=self.next_card_id,
            front=front,
            back=back,
            tags=set(tags or ()),
            front_image=front_image,
            back_image=back_image,
        )
        self.next_card_id += 1
        self.cards.append(card)
        logger.debug("Added card %d to deck %s", card.id, self.name)
        return card

    def get_card(self, card_id: int) -> Card | None:
        for card in self.cards:
            if card.id == card_id:
                return card
        return None

    def due_cards(self, algorithm_enabled: bool) -> list[Card]:
        """
        Cards to present in a review.

        With the algorithm enabled these are the cards due on or before today;
        otherwise every card in the deck.
        """
        if not algorithm_enabled:
            return list(self.cards)

        today = date.today()
        return [card for card in self.cards if card.is_due(True, today)]

    def cards_by_difficulty(self, grade: Grade, algorithm_enabled: bool) -> list[Card]:
        """Due cards whose latest review had the given grade."""
        return [
            card
            for card in self.due_cards(algorithm_enabled)
            if card.current_difficulty() == grade
        ]
