# flashlearn/schemas.py
from datetime import datetime
from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import List, Optional
from flashlearn.config import MAX_IMPORT_CARDS

# --- STUDY / PROGRESS VALUES ---

class StudyCard(BaseModel):
    """
    A card as the study engine sees it.
    Frozen: the engine hands out updated copies instead of mutating the caller's list.
    """
    model_config = ConfigDict(frozen=True, from_attributes=True)

    id: int
    front: str
    back: str
    mastered: bool = False

class DeckSummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    description: Optional[str] = None
    card_count: int = 0
    mastered_count: int = 0
    last_studied: Optional[datetime] = None

class DeckDetail(DeckSummary):
    cards: List[StudyCard] = Field(default_factory=list)

class ProgressState(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    user_id: int
    total_cards: int = 0
    mastered_cards: int = 0
    current_streak: int = 0
    longest_streak: int = 0
    last_study_date: Optional[datetime] = None

# --- IMPORT DTOs ---

class CardImportDTO(BaseModel):
    front: str
    back: str

    @field_validator('front', 'back')
    def validate_not_blank(cls, v):
        if not v or not v.strip():
            raise ValueError("Card sides must not be empty.")
        return v

class DeckImportDTO(BaseModel):
    title: str
    description: Optional[str] = ""
    cards: List[CardImportDTO]

    @field_validator('cards')
    def validate_card_count(cls, v):
        if not v:
            raise ValueError("Deck must contain at least one card.")
        if len(v) > MAX_IMPORT_CARDS:
            raise ValueError(f"Max {MAX_IMPORT_CARDS} cards per import allowed.")
        return v
