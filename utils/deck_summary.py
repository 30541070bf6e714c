from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, List, Optional

from models.card import Card
from utils.due_dates import is_card_due


@dataclass(frozen=True)
class DueSummary:
    due_count: int
    next_due: Optional[datetime] = None


@dataclass(frozen=True)
class DeckStats:
    total_cards: int
    due_cards: int
    new_cards: int
    review_cards: int
    average_ease_factor: Optional[float] = None
    average_interval_days: Optional[float] = None
    next_due: Optional[datetime] = None


def due_summary(cards: Iterable[Card], now: datetime) -> DueSummary:
    """Count due cards and find the earliest upcoming due instant."""
    due_count = 0
    next_due: Optional[datetime] = None
    for card in cards:
        if is_card_due(card.due_date, now):
            due_count += 1
        elif next_due is None or card.due_date < next_due:
            next_due = card.due_date
    return DueSummary(due_count=due_count, next_due=next_due)


def reset_for_study(cards: Iterable[Card], now: datetime) -> List[Card]:
    """Return copies of every card made due at ``now``.

    Ease factor, repetitions and interval are left untouched; only the due
    date moves. The inputs are not modified.
    """
    return [card.model_copy(update={"due_date": now}) for card in cards]


def deck_stats(cards: Iterable[Card], now: datetime) -> DeckStats:
    cards = list(cards)
    summary = due_summary(cards, now)
    total = len(cards)
    new_cards = sum(1 for card in cards if card.repetitions == 0)
    if not total:
        return DeckStats(total_cards=0, due_cards=0, new_cards=0, review_cards=0)
    return DeckStats(
        total_cards=total,
        due_cards=summary.due_count,
        new_cards=new_cards,
        review_cards=total - new_cards,
        average_ease_factor=round(sum(card.ease_factor for card in cards) / total, 2),
        average_interval_days=round(sum(card.interval_days for card in cards) / total, 1),
        next_due=summary.next_due,
    )
