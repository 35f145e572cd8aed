# flashlearn/services/import_service.py
import json
import bleach
from pydantic import ValidationError
from flashlearn.schemas import DeckImportDTO
from flashlearn.services.deck_service import create_deck
from flashlearn.core.log_manager import logger

ALLOWED_TAGS = ['b', 'i', 'strong', 'em', 'p', 'br', 'ul', 'ol', 'li', 'code', 'pre', 'h1', 'h2', 'h3', 'blockquote', 'span']

def sanitize_html(content: str) -> str:
    if not content: return ""
    return bleach.clean(content, tags=ALLOWED_TAGS, strip=True)

def parse_and_preview_deck(file_content: str) -> dict:
    """
    1. Parses JSON.
    2. Validates Schema.
    3. Sanitizes HTML immediately (so preview shows what will be saved).
    4. Calculates Stats.
    Returns: A dict containing the 'dto' and 'stats'.
    """
    try:
        data = json.loads(file_content)
    except json.JSONDecodeError:
        raise ValueError("Invalid JSON file format.")

    if not isinstance(data, dict):
        raise ValueError("Schema Error: top level must be an object.")

    try:
        deck_dto = DeckImportDTO(**data)
    except ValidationError as e:
        raise ValueError(f"Schema Error: {e}")

    # Sanitize content in-memory for the DTO
    for card in deck_dto.cards:
        card.front = sanitize_html(card.front)
        card.back = sanitize_html(card.back)

    # Scripts and the like can strip a side down to nothing
    empty = [i for i, c in enumerate(deck_dto.cards, 1) if not c.front.strip() or not c.back.strip()]
    if empty:
        raise ValueError(f"Cards {empty} are empty after sanitizing.")

    stats = {
        "card_count": len(deck_dto.cards),
        "longest_front": max(len(c.front) for c in deck_dto.cards),
    }

    return {"dto": deck_dto, "stats": stats}

def save_dto_to_db(user_id: int, deck_dto: DeckImportDTO) -> str:
    """
    Takes the already validated DTO and commits it to SQL.
    """
    deck = create_deck(
        user_id,
        title=deck_dto.title,
        description=deck_dto.description,
        cards=[{"front": c.front, "back": c.back} for c in deck_dto.cards],
    )
    logger.info(f"Import Success: Deck '{deck.title}' (ID: {deck.id})")
    return deck.title
