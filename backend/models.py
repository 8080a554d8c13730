"""
SQLAlchemy ORM models for database tables.
"""

from datetime import date, datetime

from sqlalchemy import JSON, Boolean, Date, DateTime, Float, ForeignKey, Integer, String, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


class Base(DeclarativeBase):
    pass


class DeckModel(Base):
    """SQLAlchemy model for decks table."""

    __tablename__ = "decks"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String, nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=lambda: datetime.now())
    next_card_id: Mapped[int] = mapped_column(Integer, nullable=False, default=1)

    # Relationships
    cards: Mapped[list["CardModel"]] = relationship(
        "CardModel",
        back_populates="deck",
        cascade="all, delete-orphan",
        order_by="CardModel.card_id",
    )


class CardModel(Base):
    """SQLAlchemy model for cards table."""

    __tablename__ = "cards"

    pk: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    deck_id: Mapped[int] = mapped_column(Integer, ForeignKey("decks.id"), nullable=False)
    card_id: Mapped[int] = mapped_column(Integer, nullable=False)  # Unique within the deck
    front: Mapped[str] = mapped_column(Text, nullable=False)
    back: Mapped[str] = mapped_column(Text, nullable=False)
    front_image: Mapped[str | None] = mapped_column(String, nullable=True)
    back_image: Mapped[str | None] = mapped_column(String, nullable=True)
    tags: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    created_at: Mapped[date] = mapped_column(Date, nullable=False)

    # Scheduling state, mirrors the latest review
    current_interval: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    current_ease_factor: Mapped[float] = mapped_column(Float, nullable=False, default=2.5)
    due_date: Mapped[date] = mapped_column(Date, nullable=False)
    is_new: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    # Relationships
    deck: Mapped["DeckModel"] = relationship("DeckModel", back_populates="cards")
    reviews: Mapped[list["ReviewModel"]] = relationship(
        "ReviewModel",
        back_populates="card",
        cascade="all, delete-orphan",
        order_by="ReviewModel.position",
    )


class ReviewModel(Base):
    """SQLAlchemy model for reviews table."""

    __tablename__ = "reviews"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    card_pk: Mapped[int] = mapped_column(Integer, ForeignKey("cards.pk"), nullable=False)
    position: Mapped[int] = mapped_column(Integer, nullable=False)  # Order within the card
    review_date: Mapped[date] = mapped_column(Date, nullable=False)
    grade: Mapped[str] = mapped_column(String, nullable=False)  # Again/Hard/Good/Easy
    interval: Mapped[int] = mapped_column(Integer, nullable=False)
    ease_factor: Mapped[float] = mapped_column(Float, nullable=False)
    algorithm_enabled: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    # Relationships
    card: Mapped["CardModel"] = relationship("CardModel", back_populates="reviews")


class ConfigModel(Base):
    """SQLAlchemy model for config table."""

    __tablename__ = "config"

    key: Mapped[str] = mapped_column(String, primary_key=True)
    value: Mapped[str] = mapped_column(Text, nullable=False)
