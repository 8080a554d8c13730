"""
Database DAOs (Data Access Objects) for managing database operations.
"""

import logging
from urllib.parse import urlparse

from sqlalchemy import create_engine, select, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, selectinload, sessionmaker
from sqlalchemy.pool import QueuePool

from backend.flashcards import Card, Deck, Review
from backend.models import Base, CardModel, ConfigModel, DeckModel, ReviewModel
from backend.schemas import DeckCreate, DeckUpdate
from backend.spaced_repetition import grade_from_string

logger = logging.getLogger(__name__)


class Database:
    """Database connection manager."""

    def __init__(self, database_url: str = "sqlite:///./study_cards.db"):
        self.database_url = database_url
        self.engine = self._create_engine(database_url)
        self.SessionLocal = sessionmaker(
            autocommit=False, autoflush=False, expire_on_commit=False, bind=self.engine
        )
        self.create_tables()

    def _create_engine(self, database_url: str) -> Engine:
        """Create the database engine, pooled for PostgreSQL."""
        if database_url.startswith("sqlite"):
            return create_engine(
                database_url, echo=False, connect_args={"check_same_thread": False}
            )

        # PostgreSQL configuration with connection pooling
        engine_kwargs = {
            "echo": False,
            "poolclass": QueuePool,
            "pool_size": 10,  # Number of connections to maintain
            "max_overflow": 20,  # Additional connections beyond pool_size
            "pool_timeout": 30,  # Timeout when getting connection from pool
            "pool_recycle": 3600,  # Recycle connections after 1 hour
            "pool_pre_ping": True,  # Validate connections before use
            "connect_args": {
                "connect_timeout": 10,
                "application_name": "study-cards",
            },
        }

        return create_engine(database_url, **engine_kwargs)

    def create_tables(self):
        """Create all tables."""
        Base.metadata.create_all(self.engine)

    def get_session(self) -> Session:
        """Get a new database session."""
        return self.SessionLocal()

    def test_connection(self) -> bool:
        """Test database connection."""
        try:
            with self.engine.connect() as conn:
                conn.execute(text("SELECT 1"))
                return True
        except Exception:
            logger.exception("Database connection check failed")
            return False

    def get_db_info(self) -> dict:
        """Get database information."""
        parsed_url = urlparse(self.database_url)
        return {
            "database_type": parsed_url.scheme,
            "host": parsed_url.hostname or "local",
            "database": parsed_url.path.lstrip("/") or "study_cards",
            "connection_status": "connected" if self.test_connection() else "disconnected",
        }


def _review_from_model(review_model: ReviewModel) -> Review:
    return Review(
        date=review_model.review_date,
        grade=grade_from_string(review_model.grade),
        interval=review_model.interval,
        ease_factor=review_model.ease_factor,
        algorithm_enabled=review_model.algorithm_enabled,
    )


def _card_from_model(card_model: CardModel) -> Card:
    return Card(
        id=card_model.card_id,
        front=card_model.front,
        back=card_model.back,
        front_image=card_model.front_image,
        back_image=card_model.back_image,
        tags=set(card_model.tags or ()),
        created_at=card_model.created_at,
        reviews=[_review_from_model(r) for r in card_model.reviews],
        current_interval=card_model.current_interval,
        current_ease_factor=card_model.current_ease_factor,
        due_date=card_model.due_date,
        is_new=card_model.is_new,
    )


def _deck_from_model(deck_model: DeckModel) -> Deck:
    return Deck(
        id=deck_model.id,
        name=deck_model.name,
        description=deck_model.description,
        created_at=deck_model.created_at,
        cards=[_card_from_model(c) for c in deck_model.cards],
        next_card_id=deck_model.next_card_id,
    )


def _review_to_model(review: Review, position: int) -> ReviewModel:
    return ReviewModel(
        position=position,
        review_date=review.date,
        grade=review.grade.label,
        interval=review.interval,
        ease_factor=review.ease_factor,
        algorithm_enabled=review.algorithm_enabled,
    )


def _apply_card(card_model: CardModel, card: Card) -> None:
    card_model.front = card.front
    card_model.back = card.back
    card_model.front_image = card.front_image
    card_model.back_image = card.back_image
    card_model.tags = sorted(card.tags)
    card_model.created_at = card.created_at
    card_model.current_interval = card.current_interval
    card_model.current_ease_factor = card.current_ease_factor
    card_model.due_date = card.due_date
    card_model.is_new = card.is_new

    # Reviews are append-only: only the ones not stored yet are inserted
    for position in range(len(card_model.reviews), len(card.reviews)):
        card_model.reviews.append(_review_to_model(card.reviews[position], position))


class DeckDAO:
    """Data Access Object for Deck operations."""

    def __init__(self, db: Database):
        self.db = db

    def _query(self):
        return select(DeckModel).options(
            selectinload(DeckModel.cards).selectinload(CardModel.reviews)
        )

    def create(self, deck_data: DeckCreate) -> Deck:
        """Create a new empty deck."""
        with self.db.get_session() as session:
            deck_model = DeckModel(name=deck_data.name, description=deck_data.description)
            session.add(deck_model)
            session.commit()
            session.refresh(deck_model)
            logger.info("Created deck %d (%s)", deck_model.id, deck_model.name)
            return _deck_from_model(deck_model)

    def get_by_id(self, deck_id: int) -> Deck | None:
        """Get a deck with all its cards and reviews."""
        with self.db.get_session() as session:
            deck_model = session.scalars(
                self._query().where(DeckModel.id == deck_id)
            ).first()
            if deck_model:
                return _deck_from_model(deck_model)
            return None

    def get_all(self) -> list[Deck]:
        """Get all decks."""
        with self.db.get_session() as session:
            deck_models = session.scalars(self._query().order_by(DeckModel.id)).all()
            return [_deck_from_model(deck) for deck in deck_models]

    def save(self, deck: Deck) -> Deck:
        """
        Persist a deck after it was mutated in memory.

        New cards are inserted, existing cards get their scheduling state
        updated and reviews missing from the database are appended.

        Raises:
            ValueError: If the deck has no id, does not exist or repeats a card id
        """
        if deck.id is None:
            raise ValueError("Deck must be created before it can be saved")
        card_ids = [card.id for card in deck.cards]
        if len(set(card_ids)) != len(card_ids):
            raise ValueError(f"Deck {deck.id} has duplicate card ids")

        with self.db.get_session() as session:
            deck_model = session.scalars(
                self._query().where(DeckModel.id == deck.id)
            ).first()
            if deck_model is None:
                raise ValueError(f"Deck {deck.id} not found")

            deck_model.name = deck.name
            deck_model.description = deck.description
            deck_model.next_card_id = deck.next_card_id

            stored = {card_model.card_id: card_model for card_model in deck_model.cards}
            for card in deck.cards:
                card_model = stored.get(card.id)
                if card_model is None:
                    card_model = CardModel(card_id=card.id)
                    deck_model.cards.append(card_model)
                _apply_card(card_model, card)

            session.commit()
            return deck

    def update(self, deck_id: int, deck_data: DeckUpdate) -> Deck | None:
        """Update a deck's properties."""
        with self.db.get_session() as session:
            deck_model = session.get(DeckModel, deck_id)
            if not deck_model:
                return None

            # Update fields if provided in deck_data
            if deck_data.name is not None:
                deck_model.name = deck_data.name
            if deck_data.description is not None:
                deck_model.description = deck_data.description or None

            session.commit()

        return self.get_by_id(deck_id)

    def delete(self, deck_id: int) -> bool:
        """Delete a deck and all its cards."""
        with self.db.get_session() as session:
            deck_model = session.get(DeckModel, deck_id)
            if deck_model:
                session.delete(deck_model)
                session.commit()
                logger.info("Deleted deck %d", deck_id)
                return True
            return False

    def bulk_delete(self, deck_ids: list[int]) -> dict[str, int]:
        """Delete multiple decks and all their cards."""
        with self.db.get_session() as session:
            deck_models = session.scalars(
                select(DeckModel).where(DeckModel.id.in_(deck_ids))
            ).all()

            deleted_count = len(deck_models)

            for deck_model in deck_models:
                session.delete(deck_model)

            session.commit()
            logger.info("Deleted %d of %d requested decks", deleted_count, len(deck_ids))

            return {"deleted_count": deleted_count, "requested_count": len(deck_ids)}


class ConfigDAO:
    """Data Access Object for Config operations."""

    def __init__(self, db: Database):
        self.db = db

    def set(self, key: str, value: str) -> None:
        """Set a configuration value."""
        with self.db.get_session() as session:
            config_model = session.get(ConfigModel, key)
            if config_model:
                config_model.value = value
            else:
                config_model = ConfigModel(key=key, value=value)
                session.add(config_model)
            session.commit()

    def get(self, key: str, default: str | None = None) -> str | None:
        """Get a configuration value."""
        with self.db.get_session() as session:
            config_model = session.get(ConfigModel, key)
            return config_model.value if config_model else default

    def get_all(self) -> dict:
        """Get all configuration values."""
        with self.db.get_session() as session:
            configs = session.scalars(select(ConfigModel)).all()
            return {config.key: config.value for config in configs}
