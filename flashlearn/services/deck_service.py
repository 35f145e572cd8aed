# flashlearn/services/deck_service.py
from datetime import datetime, timezone
from typing import Dict, Iterable, List, Optional, Sequence
from sqlmodel import Session, select, col
from flashlearn.core.log_manager import logger
from flashlearn.database import create_session
from flashlearn.models import Card, Deck, utcnow
from flashlearn.schemas import DeckDetail, DeckSummary, StudyCard

class DeckNotFoundError(ValueError):
    """Deck is missing or belongs to another user."""
    pass

# --- HELPERS ---

def _owned_deck(session: Session, user_id: int, deck_id: int) -> Optional[Deck]:
    statement = select(Deck).where(Deck.id == deck_id, Deck.owner_id == user_id)
    return session.exec(statement).first()

def require_owned_deck(session: Session, user_id: int, deck_id: int) -> Deck:
    deck = _owned_deck(session, user_id, deck_id)
    if not deck:
        logger.warning(f"Deck {deck_id} not found for user {user_id}.")
        raise DeckNotFoundError(f"Deck {deck_id} not found.")
    return deck

def _owned_cards(session: Session, user_id: int, card_ids: Iterable[int]) -> List[Card]:
    statement = (
        select(Card)
        .join(Deck, Card.deck_id == Deck.id)
        .where(Deck.owner_id == user_id)
        .where(col(Card.id).in_(list(card_ids)))
    )
    return list(session.exec(statement).all())

def refresh_deck_counts(session: Session, deck: Deck) -> None:
    """
    Re-derives the cached card/mastered counters from the deck's card rows.
    Every write that changes the card set or a mastery flag goes through here.
    Does not commit.
    """
    session.flush()
    cards = session.exec(select(Card).where(Card.deck_id == deck.id)).all()
    deck.card_count = len(cards)
    deck.mastered_count = sum(1 for c in cards if c.mastered)
    deck.updated_at = utcnow()
    session.add(deck)

def apply_deck_stats(deck: Deck, card_count: int, mastered_count: int, studied_at: Optional[datetime] = None) -> None:
    if card_count < 0 or mastered_count < 0:
        raise ValueError("Deck counters must not be negative.")
    deck.card_count = card_count
    deck.mastered_count = mastered_count
    deck.last_studied = studied_at or datetime.now(timezone.utc)
    deck.updated_at = utcnow()

def _to_detail(session: Session, deck: Deck) -> DeckDetail:
    cards = session.exec(
        select(Card).where(Card.deck_id == deck.id).order_by(Card.id)
    ).all()
    return DeckDetail(
        id=deck.id,
        title=deck.title,
        description=deck.description,
        card_count=deck.card_count,
        mastered_count=deck.mastered_count,
        last_studied=deck.last_studied,
        cards=[StudyCard.model_validate(c) for c in cards],
    )

# --- READS ---

def get_decks(user_id: int) -> List[DeckSummary]:
    """
    All decks of a user, newest first, with their cached counters.
    """
    with create_session() as session:
        statement = (
            select(Deck)
            .where(Deck.owner_id == user_id)
            .order_by(col(Deck.created_at).desc(), col(Deck.id).desc())
        )
        return [DeckSummary.model_validate(d) for d in session.exec(statement).all()]

def get_deck(user_id: int, deck_id: int) -> Optional[DeckDetail]:
    """
    A single deck with its cards in creation order.
    Returns None if it doesn't exist or isn't owned by the user.
    """
    with create_session() as session:
        deck = _owned_deck(session, user_id, deck_id)
        if not deck:
            return None
        return _to_detail(session, deck)

# --- DECK WRITES ---

def create_deck(
    user_id: int,
    title: str,
    description: Optional[str] = None,
    cards: Optional[Sequence[Dict[str, str]]] = None,
) -> DeckDetail:
    """
    Creates a deck with optional initial cards ({"front": ..., "back": ...}).
    """
    if not title or not title.strip():
        raise ValueError("Deck title must not be empty.")

    with create_session() as session:
        deck = Deck(owner_id=user_id, title=title.strip(), description=description or None)
        session.add(deck)
        session.flush()

        for card in cards or []:
            session.add(Card(deck_id=deck.id, front=card["front"], back=card["back"], mastered=False))

        refresh_deck_counts(session, deck)
        session.commit()
        session.refresh(deck)
        logger.info(f"Created deck '{deck.title}' (ID: {deck.id}) with {deck.card_count} cards for user {user_id}")
        return _to_detail(session, deck)

def update_deck(
    user_id: int,
    deck_id: int,
    title: Optional[str] = None,
    description: Optional[str] = None,
    cards: Optional[Sequence[StudyCard]] = None,
) -> DeckDetail:
    """
    Updates title/description and, if `cards` is given, makes the deck's card
    set match it: listed cards are updated in place (front, back, mastered),
    cards missing from the list are deleted. Unknown card ids are rejected.
    """
    with create_session() as session:
        deck = require_owned_deck(session, user_id, deck_id)

        if title is not None:
            if not title.strip():
                raise ValueError("Deck title must not be empty.")
            deck.title = title.strip()
        if description is not None:
            deck.description = description or None

        if cards is not None:
            existing = {c.id: c for c in session.exec(select(Card).where(Card.deck_id == deck.id)).all()}
            wanted = {c.id: c for c in cards}
            unknown = set(wanted) - set(existing)
            if unknown:
                raise ValueError(f"Cards {sorted(unknown)} do not belong to deck {deck_id}.")

            now = utcnow()
            for card_id, row in existing.items():
                update = wanted.get(card_id)
                if update is None:
                    session.delete(row)
                    continue
                row.front = update.front
                row.back = update.back
                row.mastered = update.mastered
                row.updated_at = now
                session.add(row)

        refresh_deck_counts(session, deck)
        session.commit()
        session.refresh(deck)
        logger.info(f"Updated deck {deck.id}: {deck.mastered_count}/{deck.card_count} mastered")
        return _to_detail(session, deck)

def update_deck_stats(
    user_id: int,
    deck_id: int,
    card_count: int,
    mastered_count: int,
    studied_at: Optional[datetime] = None,
) -> None:
    """
    Overwrites the cached counters and stamps last_studied.
    """
    with create_session() as session:
        deck = require_owned_deck(session, user_id, deck_id)
        apply_deck_stats(deck, card_count, mastered_count, studied_at)
        session.add(deck)
        session.commit()

def delete_deck(user_id: int, deck_id: int) -> bool:
    with create_session() as session:
        deck = _owned_deck(session, user_id, deck_id)
        if not deck:
            return False
        # Cards go with it (cascade)
        session.delete(deck)
        session.commit()
        logger.info(f"Deleted deck {deck_id} of user {user_id}")
        return True

def reset_deck_progress(user_id: int, deck_id: int) -> DeckDetail:
    """Clears the mastered flag on every card of the deck."""
    with create_session() as session:
        deck = require_owned_deck(session, user_id, deck_id)
        for card in session.exec(select(Card).where(Card.deck_id == deck.id)).all():
            if card.mastered:
                card.mastered = False
                card.updated_at = utcnow()
                session.add(card)
        refresh_deck_counts(session, deck)
        session.commit()
        session.refresh(deck)
        logger.info(f"Reset progress of deck {deck.id}")
        return _to_detail(session, deck)

# --- CARD WRITES ---

def add_card(user_id: int, deck_id: int, front: str, back: str) -> StudyCard:
    with create_session() as session:
        deck = require_owned_deck(session, user_id, deck_id)
        card = Card(deck_id=deck.id, front=front, back=back, mastered=False)
        session.add(card)
        refresh_deck_counts(session, deck)
        session.commit()
        session.refresh(card)
        return StudyCard.model_validate(card)

def update_card(
    user_id: int,
    card_id: int,
    front: Optional[str] = None,
    back: Optional[str] = None,
    mastered: Optional[bool] = None,
) -> Optional[StudyCard]:
    with create_session() as session:
        found = _owned_cards(session, user_id, [card_id])
        if not found:
            return None
        card = found[0]
        if front is not None:
            card.front = front
        if back is not None:
            card.back = back
        if mastered is not None:
            card.mastered = mastered
        card.updated_at = utcnow()
        session.add(card)
        refresh_deck_counts(session, session.get(Deck, card.deck_id))
        session.commit()
        session.refresh(card)
        return StudyCard.model_validate(card)

def delete_card(user_id: int, card_id: int) -> bool:
    with create_session() as session:
        found = _owned_cards(session, user_id, [card_id])
        if not found:
            return False
        card = found[0]
        deck = session.get(Deck, card.deck_id)
        session.delete(card)
        refresh_deck_counts(session, deck)
        session.commit()
        return True

def mark_cards_mastered(user_id: int, card_ids: Sequence[int], mastered: bool = True) -> int:
    """
    Sets the mastered flag on several cards at once.
    Returns the number of cards touched; ids the user doesn't own are skipped.
    """
    if not card_ids:
        return 0

    with create_session() as session:
        cards = _owned_cards(session, user_id, card_ids)
        touched_decks = set()
        for card in cards:
            card.mastered = mastered
            card.updated_at = utcnow()
            session.add(card)
            touched_decks.add(card.deck_id)

        for deck_id in touched_decks:
            refresh_deck_counts(session, session.get(Deck, deck_id))

        session.commit()
        return len(cards)
