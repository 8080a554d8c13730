"""
Pydantic schemas (DTOs) for API request/response validation.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from backend.flashcards import Card, GradeLabel, Review


# Card schemas
class CardCreate(BaseModel):
    """Schema for creating a card."""

    front: str = Field(..., min_length=1, description="Text shown first")
    back: str = Field(..., min_length=1, description="Text revealed on demand")
    tags: list[str] = Field(default_factory=list)
    front_image: str | None = Field(None, description="Image path or URL for the front")
    back_image: str | None = Field(None, description="Image path or URL for the back")


# Deck schemas
class DeckBase(BaseModel):
    """Base deck schema."""

    name: str = Field(..., min_length=1, description="Deck name")
    description: str | None = None


class DeckCreate(DeckBase):
    """Schema for creating a deck."""

    pass


class DeckUpdate(BaseModel):
    """Schema for updating a deck."""

    name: str | None = Field(None, min_length=1, description="Updated deck name")
    description: str | None = Field(None, description="Updated description")


class DeckSummary(DeckBase):
    """Deck without its cards."""

    id: int
    created_at: datetime
    total_cards: int = 0
    due_cards: int = 0

    model_config = ConfigDict(from_attributes=True)


class DeckImportRequest(BaseModel):
    """Request to import a deck from a local markdown file."""

    file_path: str = Field(..., description="Path to markdown file")
    deck_name: str | None = Field(None, description="Optional deck name (defaults to filename)")
    description: str | None = None


class DeckBulkDeleteRequest(BaseModel):
    """Request to bulk delete multiple decks."""

    deck_ids: list[int] = Field(..., min_length=1, description="List of deck IDs to delete")


# Review schemas
class ReviewRequest(BaseModel):
    """Grade given to a card after revealing its back."""

    grade: GradeLabel = Field(..., description="Again/Hard/Good/Easy")
    algorithm_enabled: bool | None = Field(
        None, description="Apply spaced repetition; defaults to the configured setting"
    )


class ReviewResponse(BaseModel):
    """Card state after a review."""

    card: Card
    review: Review


# Statistics schemas
class DeckStats(BaseModel):
    """Statistics for a deck."""

    total_cards: int
    new_cards: int
    reviewed_cards: int
    total_reviews: int
    due_cards: int = 0
    again_count: int = 0
    hard_count: int = 0
    good_count: int = 0
    easy_count: int = 0


class DueCountResponse(BaseModel):
    """Cards due across all decks."""

    due_cards: int
    algorithm_enabled: bool


# Config schemas
class ConfigUpdate(BaseModel):
    """Update configuration."""

    algorithm_enabled: bool | None = None
    hard_multiplier: float | None = Field(
        None, ge=1.0, le=3.0, description="Interval multiplier for Hard grade"
    )
    easy_bonus: float | None = Field(
        None, ge=1.0, le=3.0, description="Extra multiplier for Easy grade"
    )
    ease_factor_step: float | None = Field(
        None, gt=0.0, le=0.5, description="Ease factor change for Again/Hard/Easy"
    )


class ConfigResponse(BaseModel):
    """Configuration response."""

    algorithm_enabled: bool = False
    hard_multiplier: float = 1.2
    easy_bonus: float = 1.3
    ease_factor_step: float = 0.15


# Study session schemas
class StudySessionStart(BaseModel):
    """Start a study session."""

    deck_id: int
    card_limit: int | None = Field(None, ge=1, description="Max number of cards to study")
    difficulty: GradeLabel | None = Field(
        None, description="Only study cards whose latest grade matches"
    )
    algorithm_enabled: bool | None = None


class StudySessionCard(BaseModel):
    """A card in a study session."""

    card: Card
    card_number: int
    total_cards: int
