from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime

class CardBase(BaseModel):
    question: str
    answer: str

class CardCreate(CardBase):
    pass

class CardStudyData(BaseModel):
    ease_factor: float = 2.5
    repetitions: int = Field(0, ge=0)
    interval_days: int = Field(0, ge=0)
    due_date: datetime

class Card(CardBase):
    id: int
    deck_id: int
    ease_factor: float = 2.5
    repetitions: int = 0
    interval_days: int = 0
    due_date: datetime
    created_at: Optional[str] = None

    class Config:
        from_attributes = True

    def study_data(self) -> CardStudyData:
        return CardStudyData(
            ease_factor=self.ease_factor,
            repetitions=self.repetitions,
            interval_days=self.interval_days,
            due_date=self.due_date,
        )
