"""
Review queues for study sessions.

A session over the whole deck shows every due card several times, difficult
cards (latest grade Again or Hard) twice as often as easy ones, in random
order. A session focused on one difficulty shows each matching due card once.
"""

import logging
import random
import uuid
from dataclasses import dataclass, field
from datetime import datetime

from backend.flashcards import Deck
from backend.spaced_repetition import Grade

logger = logging.getLogger(__name__)

DIFFICULTY_WEIGHTS = {
    Grade.AGAIN: 4,
    Grade.HARD: 4,
    Grade.GOOD: 2,
    Grade.EASY: 2,
}


def build_weighted_queue(
    deck: Deck, algorithm_enabled: bool, rng: random.Random | None = None
) -> list[int]:
    """
    Build a shuffled queue of card ids weighted by difficulty.

    Args:
        deck: Deck to study
        algorithm_enabled: Whether only cards due today are included
        rng: Optional random generator, for reproducible order

    Returns:
        Card ids, each repeated according to its difficulty weight
    """
    queue = []
    for card in deck.due_cards(algorithm_enabled):
        queue.extend([card.id] * DIFFICULTY_WEIGHTS[card.current_difficulty()])

    (rng or random).shuffle(queue)
    return queue


def build_difficulty_queue(deck: Deck, grade: Grade, algorithm_enabled: bool) -> list[int]:
    """Card ids of the due cards whose latest grade is `grade`, in deck order."""
    return [card.id for card in deck.cards_by_difficulty(grade, algorithm_enabled)]


@dataclass
class StudySession:
    """Progress through a review queue of one deck."""

    deck_id: int
    queue: list[int]
    difficulty: Grade | None = None
    algorithm_enabled: bool = False
    current_index: int = 0
    session_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    started_at: datetime = field(default_factory=lambda: datetime.now())

    @property
    def total_cards(self) -> int:
        return len(self.queue)

    @property
    def complete(self) -> bool:
        return self.current_index >= len(self.queue)

    def next_card_id(self) -> int | None:
        """Return the next card id to present, or None once the queue is exhausted."""
        if self.complete:
            return None
        card_id = self.queue[self.current_index]
        self.current_index += 1
        return card_id


def start_session(
    deck: Deck,
    algorithm_enabled: bool,
    difficulty: Grade | None = None,
    card_limit: int | None = None,
    rng: random.Random | None = None,
) -> StudySession:
    """Create a session over the deck's due cards."""
    if difficulty is None:
        queue = build_weighted_queue(deck, algorithm_enabled, rng)
    else:
        queue = build_difficulty_queue(deck, difficulty, algorithm_enabled)

    if card_limit:
        queue = queue[:card_limit]

    session = StudySession(
        deck_id=deck.id,
        queue=queue,
        difficulty=difficulty,
        algorithm_enabled=algorithm_enabled,
    )
    logger.info(
        "Started session %s on deck %s with %d cards", session.session_id, deck.id, len(queue)
    )
    return session
