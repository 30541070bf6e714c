from fastapi import APIRouter, Depends, HTTPException

from config import load_config
from db.database import get_db
from models.review import ReviewCreate
from utils.due_dates import time_until_due, utc_now
from utils.errors import CardNotFoundError, InvalidQualityError
from utils.review import apply_review
from utils.sm2 import QUALITY_RATINGS, map_rating_to_quality, quality_description

router = APIRouter()

@router.get("/ratings")
async def ratings():
    """Rating buttons and the quality each maps to."""
    return [
        {"label": label.capitalize(), "quality": quality, "description": quality_description(quality)}
        for label, quality in QUALITY_RATINGS.items()
    ]

@router.post("/{card_id}")
async def submit_review(card_id: int, payload: ReviewCreate, conn = Depends(get_db)):
    """Apply one review to a card and return its new schedule."""
    config = load_config()
    now = utc_now()
    try:
        if payload.rating is not None:
            quality = map_rating_to_quality(payload.rating)
        else:
            quality = payload.quality
        card = apply_review(conn, card_id, quality, config, now=now)
    except CardNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc))
    except InvalidQualityError as exc:
        raise HTTPException(status_code=422, detail=str(exc))
    return {
        "card": card,
        "quality": quality,
        "next_review_in": time_until_due(card.due_date, now),
    }
