"""
FastAPI main application for the flashcard study app.
"""

import logging
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import Depends, FastAPI, File, Form, HTTPException, UploadFile
from fastapi.middleware.cors import CORSMiddleware
from pydantic import ValidationError

from backend.config import ConfigManager, Settings, configure_logging
from backend.database import ConfigDAO, Database, DeckDAO
from backend.flashcards import Card, Deck
from backend.parser import parse_flashcard_content, parse_flashcard_file, validate_flashcard_file
from backend.schemas import (
    CardCreate,
    ConfigResponse,
    ConfigUpdate,
    DeckBulkDeleteRequest,
    DeckCreate,
    DeckImportRequest,
    DeckStats,
    DeckSummary,
    DeckUpdate,
    DueCountResponse,
    ReviewRequest,
    ReviewResponse,
    StudySessionCard,
    StudySessionStart,
)
from backend.spaced_repetition import Grade, get_due_cards_count, grade_from_string
from backend.study_session import StudySession, start_session

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging(Settings().log_level)
    yield


# Initialize FastAPI app
app = FastAPI(
    title="Study Cards",
    description="Flashcard decks with spaced repetition scheduling",
    version="1.0.0",
    lifespan=lifespan,
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # In production, specify exact origins
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Global instances
_db_instance: Database | None = None
_config_manager_instance: ConfigManager | None = None

# Study sessions storage (in-memory)
study_sessions: dict[str, StudySession] = {}


def get_db() -> Database:
    """Dependency to get database instance."""
    global _db_instance
    if _db_instance is None:
        _db_instance = Database(Settings().database_url)
    return _db_instance


def get_config_manager() -> ConfigManager:
    """Dependency to get config manager instance."""
    global _config_manager_instance
    if _config_manager_instance is None:
        db = get_db()
        config_dao = ConfigDAO(db)
        _config_manager_instance = ConfigManager(config_dao=config_dao)
    return _config_manager_instance


def _get_deck_or_404(deck_dao: DeckDAO, deck_id: int) -> Deck:
    deck = deck_dao.get_by_id(deck_id)
    if not deck:
        raise HTTPException(status_code=404, detail="Deck not found")
    return deck


def _get_card_or_404(deck: Deck, card_id: int) -> Card:
    card = deck.get_card(card_id)
    if not card:
        raise HTTPException(status_code=404, detail="Card not found")
    return card


def _resolve_algorithm(requested: bool | None, config_manager: ConfigManager) -> bool:
    if requested is None:
        return config_manager.get_algorithm_enabled()
    return requested


def _summarize(deck: Deck, algorithm_enabled: bool) -> DeckSummary:
    return DeckSummary(
        id=deck.id,
        name=deck.name,
        description=deck.description,
        created_at=deck.created_at,
        total_cards=len(deck.cards),
        due_cards=len(deck.due_cards(algorithm_enabled)),
    )


# Health check
@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy"}


# Deck endpoints
@app.post("/api/decks", response_model=Deck)
async def create_deck(deck_data: DeckCreate, db: Database = Depends(get_db)):
    """Create a new empty deck."""
    deck_dao = DeckDAO(db)
    return deck_dao.create(deck_data)


@app.get("/api/decks", response_model=list[DeckSummary])
async def get_all_decks(
    db: Database = Depends(get_db),
    config_manager: ConfigManager = Depends(get_config_manager),
):
    """Get all decks with card and due counts."""
    deck_dao = DeckDAO(db)
    algorithm_enabled = config_manager.get_algorithm_enabled()
    return [_summarize(deck, algorithm_enabled) for deck in deck_dao.get_all()]


@app.get("/api/decks/{deck_id}", response_model=Deck)
async def get_deck(deck_id: int, db: Database = Depends(get_db)):
    """Get a deck with its cards."""
    return _get_deck_or_404(DeckDAO(db), deck_id)


@app.put("/api/decks/{deck_id}", response_model=Deck)
async def update_deck(deck_id: int, deck_data: DeckUpdate, db: Database = Depends(get_db)):
    """Update a deck's name or description."""
    deck_dao = DeckDAO(db)
    deck = deck_dao.update(deck_id, deck_data)
    if not deck:
        raise HTTPException(status_code=404, detail="Deck not found")
    return deck


@app.delete("/api/decks/{deck_id}")
async def delete_deck(deck_id: int, db: Database = Depends(get_db)):
    """Delete a deck and all its cards."""
    deck_dao = DeckDAO(db)
    success = deck_dao.delete(deck_id)
    if not success:
        raise HTTPException(status_code=404, detail="Deck not found")
    return {"message": "Deck deleted successfully"}


@app.post("/api/decks/bulk-delete")
async def bulk_delete_decks(request: DeckBulkDeleteRequest, db: Database = Depends(get_db)):
    """Delete multiple decks and all their cards."""
    deck_dao = DeckDAO(db)
    result = deck_dao.bulk_delete(request.deck_ids)

    if result["deleted_count"] == 0:
        raise HTTPException(status_code=404, detail="No decks found to delete")

    message = f"Successfully deleted {result['deleted_count']} deck(s)"
    if result["deleted_count"] < result["requested_count"]:
        message += f" ({result['requested_count'] - result['deleted_count']} deck(s) not found)"

    return {
        "message": message,
        "deleted_count": result["deleted_count"],
        "requested_count": result["requested_count"],
    }


def _import_flashcards(
    deck_dao: DeckDAO,
    deck_data: DeckCreate,
    flashcards: list[dict],
    algorithm_enabled: bool,
) -> dict:
    deck = deck_dao.create(deck_data)
    for card_data in flashcards:
        deck.add_card(card_data["front"], card_data["back"], tags=set(card_data["tags"]))
    deck_dao.save(deck)

    logger.info("Imported %d cards into deck %d", len(flashcards), deck.id)
    return {
        "deck": _summarize(deck, algorithm_enabled),
        "flashcards_count": len(flashcards),
        "message": f"Successfully imported {len(flashcards)} flashcards",
    }


@app.post("/api/decks/import")
async def import_deck(
    file: UploadFile = File(...),
    deck_name: str | None = Form(None),
    description: str | None = Form(None),
    db: Database = Depends(get_db),
    config_manager: ConfigManager = Depends(get_config_manager),
):
    """Import a deck from an uploaded markdown file."""
    # Validate file type
    if not file.filename or not file.filename.endswith(".md"):
        raise HTTPException(status_code=400, detail="File must be a markdown (.md) file")

    try:
        content = await file.read()
        content_str = content.decode("utf-8")
    except UnicodeDecodeError as e:
        raise HTTPException(status_code=400, detail=f"Failed to read file: {e!s}") from e

    flashcards = parse_flashcard_content(content_str)
    if not flashcards:
        raise HTTPException(status_code=400, detail="No valid flashcards found in file")

    final_deck_name = deck_name or file.filename.removesuffix(".md")
    return _import_flashcards(
        DeckDAO(db),
        DeckCreate(name=final_deck_name, description=description),
        flashcards,
        config_manager.get_algorithm_enabled(),
    )


@app.post("/api/decks/import-from-path")
async def import_deck_from_path(
    import_request: DeckImportRequest,
    db: Database = Depends(get_db),
    config_manager: ConfigManager = Depends(get_config_manager),
):
    """Import a deck from a markdown file path (for local files)."""
    is_valid, message = validate_flashcard_file(import_request.file_path)
    if not is_valid:
        raise HTTPException(status_code=400, detail=message)

    flashcards = parse_flashcard_file(import_request.file_path)

    final_deck_name = import_request.deck_name or Path(import_request.file_path).stem
    return _import_flashcards(
        DeckDAO(db),
        DeckCreate(name=final_deck_name, description=import_request.description),
        flashcards,
        config_manager.get_algorithm_enabled(),
    )


@app.get("/api/decks/{deck_id}/export", response_model=Deck)
async def export_deck(deck_id: int, db: Database = Depends(get_db)):
    """Export a deck with its full review history as JSON."""
    return _get_deck_or_404(DeckDAO(db), deck_id)


@app.post("/api/decks/import-json", response_model=Deck)
async def import_deck_json(file: UploadFile = File(...), db: Database = Depends(get_db)):
    """Import a deck previously exported as JSON, review history included."""
    content = await file.read()
    try:
        imported = Deck.model_validate_json(content)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=f"Invalid deck file: {e!s}") from e

    deck_dao = DeckDAO(db)
    deck = deck_dao.create(DeckCreate(name=imported.name, description=imported.description))
    deck.cards = imported.cards
    deck.next_card_id = imported.next_card_id
    deck_dao.save(deck)

    logger.info("Imported deck %d with %d cards from JSON", deck.id, len(deck.cards))
    return deck


# Card endpoints
@app.get("/api/decks/{deck_id}/cards", response_model=list[Card])
async def get_cards(deck_id: int, db: Database = Depends(get_db)):
    """Get all cards of a deck in insertion order."""
    return _get_deck_or_404(DeckDAO(db), deck_id).cards


@app.post("/api/decks/{deck_id}/cards", response_model=Card)
async def create_card(deck_id: int, card_data: CardCreate, db: Database = Depends(get_db)):
    """Add a card to a deck."""
    deck_dao = DeckDAO(db)
    deck = _get_deck_or_404(deck_dao, deck_id)

    card = deck.add_card(
        card_data.front,
        card_data.back,
        tags=set(card_data.tags),
        front_image=card_data.front_image,
        back_image=card_data.back_image,
    )
    deck_dao.save(deck)
    return card


@app.get("/api/decks/{deck_id}/cards/{card_id}", response_model=Card)
async def get_card(deck_id: int, card_id: int, db: Database = Depends(get_db)):
    """Get a single card with its review history."""
    deck = _get_deck_or_404(DeckDAO(db), deck_id)
    return _get_card_or_404(deck, card_id)


@app.post("/api/decks/{deck_id}/cards/{card_id}/review", response_model=ReviewResponse)
async def review_card(
    deck_id: int,
    card_id: int,
    review_request: ReviewRequest,
    db: Database = Depends(get_db),
    config_manager: ConfigManager = Depends(get_config_manager),
):
    """Grade a card and reschedule it."""
    deck_dao = DeckDAO(db)
    deck = _get_deck_or_404(deck_dao, deck_id)
    card = _get_card_or_404(deck, card_id)

    algorithm_enabled = _resolve_algorithm(review_request.algorithm_enabled, config_manager)
    review = card.record_review(
        review_request.grade,
        algorithm_enabled,
        config=config_manager.get_spaced_repetition_config(),
    )
    deck_dao.save(deck)

    logger.info(
        "Card %d in deck %d graded %s, due %s",
        card.id,
        deck_id,
        review.grade.label,
        card.due_date,
    )
    return ReviewResponse(card=card, review=review)


# Due cards endpoints
@app.get("/api/decks/{deck_id}/due-cards", response_model=list[Card])
async def get_due_cards(
    deck_id: int,
    algorithm_enabled: bool | None = None,
    grade: str | None = None,
    db: Database = Depends(get_db),
    config_manager: ConfigManager = Depends(get_config_manager),
):
    """Get the cards due for review, optionally only those last graded `grade`."""
    deck = _get_deck_or_404(DeckDAO(db), deck_id)
    algorithm_enabled = _resolve_algorithm(algorithm_enabled, config_manager)

    if grade is None:
        return deck.due_cards(algorithm_enabled)

    try:
        difficulty = grade_from_string(grade)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    return deck.cards_by_difficulty(difficulty, algorithm_enabled)


# Statistics endpoints
@app.get("/api/decks/{deck_id}/stats", response_model=DeckStats)
async def get_deck_stats(
    deck_id: int,
    db: Database = Depends(get_db),
    config_manager: ConfigManager = Depends(get_config_manager),
):
    """Get statistics for a deck."""
    deck = _get_deck_or_404(DeckDAO(db), deck_id)
    algorithm_enabled = config_manager.get_algorithm_enabled()

    reviewed = [card for card in deck.cards if not card.is_new]
    difficulty_counts = {grade: 0 for grade in Grade}
    for card in reviewed:
        difficulty_counts[card.current_difficulty()] += 1

    return DeckStats(
        total_cards=len(deck.cards),
        new_cards=len(deck.cards) - len(reviewed),
        reviewed_cards=len(reviewed),
        total_reviews=sum(len(card.reviews) for card in deck.cards),
        due_cards=len(deck.due_cards(algorithm_enabled)),
        again_count=difficulty_counts[Grade.AGAIN],
        hard_count=difficulty_counts[Grade.HARD],
        good_count=difficulty_counts[Grade.GOOD],
        easy_count=difficulty_counts[Grade.EASY],
    )


@app.get("/api/stats/due", response_model=DueCountResponse)
async def get_total_due_cards(
    db: Database = Depends(get_db),
    config_manager: ConfigManager = Depends(get_config_manager),
):
    """Count the cards due across all decks."""
    algorithm_enabled = config_manager.get_algorithm_enabled()
    due_cards = get_due_cards_count(
        (card.due_date for deck in DeckDAO(db).get_all() for card in deck.cards),
        algorithm_enabled,
    )
    return DueCountResponse(due_cards=due_cards, algorithm_enabled=algorithm_enabled)


# Configuration endpoints
@app.get("/api/config", response_model=ConfigResponse)
async def get_config(config_manager: ConfigManager = Depends(get_config_manager)):
    """Get configuration."""
    return config_manager.get_config_response()


@app.put("/api/config", response_model=ConfigResponse)
async def update_config(
    config_update: ConfigUpdate, config_manager: ConfigManager = Depends(get_config_manager)
):
    """Update configuration."""
    return config_manager.update_config(config_update)


# Study session endpoints
@app.post("/api/sessions/start")
async def start_study_session(
    session_request: StudySessionStart,
    db: Database = Depends(get_db),
    config_manager: ConfigManager = Depends(get_config_manager),
):
    """Start a study session over the deck's due cards."""
    deck = _get_deck_or_404(DeckDAO(db), session_request.deck_id)
    algorithm_enabled = _resolve_algorithm(session_request.algorithm_enabled, config_manager)

    session = start_session(
        deck,
        algorithm_enabled,
        difficulty=session_request.difficulty,
        card_limit=session_request.card_limit,
    )
    if not session.queue:
        raise HTTPException(status_code=404, detail="No cards are due for review in this deck")

    study_sessions[session.session_id] = session

    return {
        "session_id": session.session_id,
        "deck_id": deck.id,
        "total_cards": session.total_cards,
        "algorithm_enabled": algorithm_enabled,
    }


@app.get("/api/sessions/{session_id}/next")
async def get_next_card(session_id: str, db: Database = Depends(get_db)):
    """Get the next card in a study session."""
    if session_id not in study_sessions:
        raise HTTPException(status_code=404, detail="Session not found")

    session = study_sessions[session_id]
    card_number = session.current_index + 1
    card_id = session.next_card_id()
    if card_id is None:
        return {"complete": True}

    deck = _get_deck_or_404(DeckDAO(db), session.deck_id)
    card = _get_card_or_404(deck, card_id)

    return {
        "complete": False,
        **StudySessionCard(
            card=card, card_number=card_number, total_cards=session.total_cards
        ).model_dump(mode="json"),
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="127.0.0.1", port=8000)
