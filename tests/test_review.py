from datetime import datetime, timedelta, timezone
from zoneinfo import ZoneInfo

import pytest

from db import store
from models.card import CardCreate
from utils.errors import CardNotFoundError, InvalidQualityError, InvalidStateError
from utils.review import apply_review, scheduler_zone

NOW = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)
UTC_CONFIG = {"scheduler": {"timezone": "UTC"}}


@pytest.fixture
def card(db_conn):
    deck = store.create_deck(db_conn, "Spanish")
    return store.add_cards_to_deck(db_conn, deck.id, [CardCreate(question="perro", answer="dog")], now=NOW)[0]


def test_first_review_schedules_tomorrow(db_conn, card):
    updated = apply_review(db_conn, card.id, 5, UTC_CONFIG, now=NOW)
    assert updated.repetitions == 1
    assert updated.interval_days == 1
    assert updated.ease_factor == pytest.approx(2.6)
    assert updated.due_date == NOW + timedelta(days=1)
    assert store.get_card(db_conn, card.id) == updated


def test_review_sequence_grows_interval(db_conn, card):
    when = NOW
    for _ in range(3):
        updated = apply_review(db_conn, card.id, 4, UTC_CONFIG, now=when)
        when = updated.due_date
    assert updated.repetitions == 3
    assert updated.interval_days == 15
    assert store.get_due_cards(db_conn, card.deck_id, now=when - timedelta(days=1)) == []


def test_lapse_resets_card(db_conn, card):
    apply_review(db_conn, card.id, 5, UTC_CONFIG, now=NOW)
    updated = apply_review(db_conn, card.id, 1, UTC_CONFIG, now=NOW + timedelta(days=1))
    assert updated.repetitions == 0
    assert updated.interval_days == 1
    assert updated.due_date == NOW + timedelta(days=2)


def test_due_date_uses_scheduler_timezone(db_conn, card):
    config = {"scheduler": {"timezone": "America/New_York"}}
    reviewed_at = datetime(2024, 3, 9, 14, 30, tzinfo=timezone.utc)  # 09:30 local
    updated = apply_review(db_conn, card.id, 5, config, now=reviewed_at)
    local_due = updated.due_date.astimezone(ZoneInfo("America/New_York"))
    assert (local_due.day, local_due.hour, local_due.minute) == (10, 9, 30)


def test_invalid_quality_writes_nothing(db_conn, card):
    with pytest.raises(InvalidQualityError):
        apply_review(db_conn, card.id, 7, UTC_CONFIG, now=NOW)
    assert store.get_card(db_conn, card.id) == card


def test_unknown_card(db_conn):
    with pytest.raises(CardNotFoundError):
        apply_review(db_conn, 999, 3, UTC_CONFIG, now=NOW)
    assert not db_conn.in_transaction


def test_corrupt_ease_factor_is_normalized(db_conn, card, caplog):
    db_conn.execute("UPDATE card_study_data SET ease_factor = 1.1 WHERE card_id = ?", (card.id,))
    db_conn.commit()
    with caplog.at_level("WARNING", logger="utils.review"):
        updated = apply_review(db_conn, card.id, 3, UTC_CONFIG, now=NOW)
    assert updated.ease_factor == 1.3
    assert "below the 1.3 floor" in caplog.text


def test_unknown_timezone_rejected(db_conn, card):
    with pytest.raises(InvalidStateError):
        apply_review(db_conn, card.id, 3, {"scheduler": {"timezone": "Mars/Olympus"}}, now=NOW)
    assert scheduler_zone({}).key == "UTC"


def test_long_run_of_perfect_reviews_caps_interval(db_conn, card):
    intervals = []
    for _ in range(20):
        updated = apply_review(db_conn, card.id, 5, UTC_CONFIG, now=NOW)
        intervals.append(updated.interval_days)
    assert intervals[:3] == [1, 6, 17]
    assert intervals == sorted(intervals)
    assert intervals[-1] == 36500
    assert updated.repetitions == 20
    assert updated.due_date == NOW + timedelta(days=36500)


def test_configured_maximum_interval(db_conn, card):
    config = {"scheduler": {"timezone": "UTC", "maximum_interval": 10}}
    for _ in range(4):
        updated = apply_review(db_conn, card.id, 4, config, now=NOW)
    assert updated.interval_days == 10
