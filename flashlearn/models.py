from typing import Optional, List
from datetime import datetime, timezone
from sqlmodel import SQLModel, Field, Relationship

def utcnow() -> datetime:
    return datetime.now(timezone.utc)

class User(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    email: str = Field(index=True, unique=True)
    name: str
    created_at: datetime = Field(default_factory=utcnow)

    # Relationships
    owned_decks: List["Deck"] = Relationship(back_populates="owner")

class Deck(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    owner_id: int = Field(foreign_key="user.id", index=True)

    title: str
    description: Optional[str] = None

    # Cached counters. Kept in sync by deck_service whenever the card set
    # or mastery flags change; StatsAggregator only ever sums these.
    card_count: int = Field(default=0)
    mastered_count: int = Field(default=0)
    last_studied: Optional[datetime] = None

    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    # Relationships
    owner: User = Relationship(back_populates="owned_decks")
    cards: List["Card"] = Relationship(
        back_populates="deck",
        sa_relationship_kwargs={"cascade": "all, delete-orphan", "order_by": "Card.id"},
    )

class Card(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    deck_id: int = Field(foreign_key="deck.id", index=True)

    front: str
    back: str
    mastered: bool = Field(default=False)

    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    # Relationships
    deck: Deck = Relationship(back_populates="cards")

class UserProgress(SQLModel, table=True):
    """
    One row per user, created lazily on first access.
    total_cards / mastered_cards are a cache of the per-deck counters.
    """
    user_id: int = Field(foreign_key="user.id", primary_key=True)

    total_cards: int = Field(default=0)
    mastered_cards: int = Field(default=0)
    current_streak: int = Field(default=0)
    longest_streak: int = Field(default=0)
    last_study_date: Optional[datetime] = None

    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)
