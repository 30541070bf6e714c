from __future__ import annotations

import logging
import sqlite3
from datetime import datetime
from typing import Any, Dict, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from db.store import get_card, update_card_study_data, write_transaction
from models.card import Card, CardStudyData
from utils.due_dates import due_date_from_interval, utc_now
from utils.errors import InvalidStateError
from utils.sm2 import Sm2Settings, calculate, settings_from_config, validate_quality

logger = logging.getLogger(__name__)


def scheduler_zone(config: Dict[str, Any]) -> ZoneInfo:
    name = config.get("scheduler", {}).get("timezone", "UTC")
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        raise InvalidStateError(f"Unknown scheduler timezone: {name!r}") from None


def schedule_review(
    card: Card,
    quality: int,
    now: datetime,
    settings: Optional[Sm2Settings] = None,
) -> CardStudyData:
    """Compute the study data a card gets after a review at ``now``.

    ``now`` should carry the zone whose calendar days the interval counts.
    """
    settings = settings or Sm2Settings()
    if card.ease_factor < settings.min_ease_factor:
        logger.warning(
            "Card %s has ease factor %.3f below the %.1f floor; normalizing",
            card.id, card.ease_factor, settings.min_ease_factor,
        )
    result = calculate(
        quality,
        card.repetitions,
        card.ease_factor,
        card.interval_days,
        settings=settings,
    )
    return CardStudyData(
        ease_factor=result.ease_factor,
        repetitions=result.repetitions,
        interval_days=result.interval_days,
        due_date=due_date_from_interval(result.interval_days, now),
    )


def apply_review(
    conn: sqlite3.Connection,
    card_id: int,
    quality: int,
    config: Dict[str, Any],
    now: Optional[datetime] = None,
) -> Card:
    """Validate, schedule and persist one review; returns the updated card.

    The read and the write share one write transaction, so a concurrent
    review of the same card cannot lose an update. On any error nothing is
    written.
    """
    validate_quality(quality)
    now = (now or utc_now()).astimezone(scheduler_zone(config))
    settings = settings_from_config(config)
    with write_transaction(conn):
        card = get_card(conn, card_id)
        data = schedule_review(card, quality, now, settings)
        update_card_study_data(conn, card_id, data)
    logger.info(
        "Reviewed card %s with quality %d: interval %d day(s), repetitions %d, ease %.2f",
        card_id, quality, data.interval_days, data.repetitions, data.ease_factor,
    )
    return get_card(conn, card_id)
