from pydantic import BaseModel, validator
from typing import Optional, List

from .card import CardCreate

class DeckBase(BaseModel):
    title: str

    @validator('title')
    def validate_title(cls, v):
        if not v or not v.strip():
            raise ValueError("Title is required")
        return v.strip()

class DeckCreate(DeckBase):
    pass

class Deck(DeckBase):
    id: int
    created_at: Optional[str] = None

    class Config:
        from_attributes = True

class CardsAdd(BaseModel):
    cards: List[CardCreate]
