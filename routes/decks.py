from dataclasses import asdict
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from db import store
from db.database import get_db
from models.deck import CardsAdd, DeckCreate
from utils.deck_summary import deck_stats
from utils.due_dates import time_until_due, utc_now
from utils.errors import DeckNotFoundError

router = APIRouter()

def _stats_payload(cards, now) -> dict:
    stats = asdict(deck_stats(cards, now))
    next_due = stats["next_due"]
    stats["time_until_next_due"] = time_until_due(next_due, now) if next_due else None
    return stats

def _deck_or_404(conn, deck_id: int):
    try:
        return store.get_deck(conn, deck_id)
    except DeckNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc))

@router.post("", status_code=status.HTTP_201_CREATED)
async def create_deck(payload: DeckCreate, conn = Depends(get_db)):
    """Create a new, empty deck."""
    return store.create_deck(conn, payload.title)

@router.get("")
async def list_decks(conn = Depends(get_db)):
    """List all decks with card counts and due state."""
    now = utc_now()
    decks = []
    for deck in store.list_decks(conn):
        entry = deck.model_dump()
        entry["stats"] = _stats_payload(store.get_deck_cards(conn, deck.id), now)
        decks.append(entry)
    return decks

@router.get("/{deck_id}")
async def deck_detail(deck_id: int, conn = Depends(get_db)):
    deck = _deck_or_404(conn, deck_id)
    entry = deck.model_dump()
    entry["stats"] = _stats_payload(store.get_deck_cards(conn, deck_id), utc_now())
    return entry

@router.delete("/{deck_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_deck(deck_id: int, conn = Depends(get_db)):
    """Delete deck with its cards and study data."""
    try:
        store.delete_deck(conn, deck_id)
    except DeckNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc))

@router.get("/{deck_id}/cards")
async def list_cards(deck_id: int, conn = Depends(get_db)):
    _deck_or_404(conn, deck_id)
    return store.get_deck_cards(conn, deck_id)

@router.post("/{deck_id}/cards", status_code=status.HTTP_201_CREATED)
async def add_cards(deck_id: int, payload: CardsAdd, conn = Depends(get_db)):
    """Add question/answer pairs; new cards are due immediately."""
    if not payload.cards:
        raise HTTPException(status_code=400, detail="At least one card is required")
    try:
        return store.add_cards_to_deck(conn, deck_id, payload.cards)
    except DeckNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc))

@router.get("/{deck_id}/due")
async def due_cards(deck_id: int, limit: Optional[int] = Query(None, ge=1), conn = Depends(get_db)):
    """Cards due for review, earliest due first."""
    _deck_or_404(conn, deck_id)
    cards = store.get_due_cards(conn, deck_id)
    return cards[:limit] if limit is not None else cards

@router.post("/{deck_id}/reset")
async def reset_deck(deck_id: int, conn = Depends(get_db)):
    """Make every card in the deck due now for an out-of-schedule pass."""
    try:
        count = store.reset_deck_for_study(conn, deck_id)
    except DeckNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc))
    return {"deck_id": deck_id, "reset": count}
