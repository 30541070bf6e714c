from datetime import datetime, timedelta, timezone

import pytest

from db import store
from models.card import CardCreate, CardStudyData
from utils.errors import CardNotFoundError, DeckNotFoundError

NOW = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


def _deck_with_cards(conn, count=3, now=NOW):
    deck = store.create_deck(conn, "Biology")
    pairs = [CardCreate(question=f"Q{i}", answer=f"A{i}") for i in range(count)]
    cards = store.add_cards_to_deck(conn, deck.id, pairs, now=now)
    return deck, cards


def _study(due_date, ease_factor=2.5, repetitions=1, interval_days=1):
    return CardStudyData(
        ease_factor=ease_factor, repetitions=repetitions, interval_days=interval_days, due_date=due_date
    )


def test_new_cards_start_with_initial_study_data_and_are_due(db_conn):
    deck, cards = _deck_with_cards(db_conn)
    assert len(cards) == 3
    for card in cards:
        assert card.deck_id == deck.id
        assert (card.ease_factor, card.repetitions, card.interval_days) == (2.5, 0, 0)
        assert card.due_date == NOW
    assert len(store.get_due_cards(db_conn, deck.id, now=NOW)) == 3


def test_add_cards_to_unknown_deck(db_conn):
    with pytest.raises(DeckNotFoundError):
        store.add_cards_to_deck(db_conn, 999, [CardCreate(question="q", answer="a")])


def test_due_cards_ordered_by_due_date_then_id(db_conn):
    deck, cards = _deck_with_cards(db_conn, count=4)
    first, second, third, fourth = cards
    store.update_card_study_data(db_conn, first.id, _study(NOW - timedelta(hours=1)))
    store.update_card_study_data(db_conn, second.id, _study(NOW - timedelta(days=2)))
    store.update_card_study_data(db_conn, fourth.id, _study(NOW - timedelta(hours=1)))
    store.update_card_study_data(db_conn, third.id, _study(NOW + timedelta(days=1)))

    due = store.get_due_cards(db_conn, deck.id, now=NOW)
    assert [card.id for card in due] == [second.id, first.id, fourth.id]


def test_due_cards_scoped_to_deck(db_conn):
    deck, _ = _deck_with_cards(db_conn, count=2)
    other, _ = _deck_with_cards(db_conn, count=1)
    assert len(store.get_due_cards(db_conn, deck.id, now=NOW)) == 2
    assert len(store.get_due_cards(db_conn, other.id, now=NOW)) == 1


def test_update_replaces_study_fields(db_conn):
    _, cards = _deck_with_cards(db_conn, count=1)
    due = NOW + timedelta(days=6)
    store.update_card_study_data(db_conn, cards[0].id, _study(due, 2.6, 2, 6))
    card = store.get_card(db_conn, cards[0].id)
    assert (card.ease_factor, card.repetitions, card.interval_days, card.due_date) == (2.6, 2, 6, due)
    assert card.question == "Q0"


def test_update_unknown_card_fails(db_conn):
    with pytest.raises(CardNotFoundError):
        store.update_card_study_data(db_conn, 12345, _study(NOW))
    assert not db_conn.in_transaction


def test_reset_deck_for_study_keeps_scheduling_fields(db_conn):
    deck, cards = _deck_with_cards(db_conn, count=2)
    store.update_card_study_data(db_conn, cards[0].id, _study(NOW + timedelta(days=15), 2.7, 3, 15))
    store.update_card_study_data(db_conn, cards[1].id, _study(NOW + timedelta(days=1)))

    later = NOW + timedelta(minutes=5)
    assert store.reset_deck_for_study(db_conn, deck.id, now=later) == 2
    due = store.get_due_cards(db_conn, deck.id, now=later)
    assert [card.id for card in due] == [cards[0].id, cards[1].id]
    assert (due[0].ease_factor, due[0].repetitions, due[0].interval_days) == (2.7, 3, 15)


def test_reset_deck_is_all_or_nothing(db_conn, monkeypatch):
    deck, cards = _deck_with_cards(db_conn, count=3)
    for card in cards:
        store.update_card_study_data(db_conn, card.id, _study(NOW + timedelta(days=6)))

    original = store.update_card_study_data
    calls = []

    def flaky_update(conn, card_id, data):
        calls.append(card_id)
        if len(calls) == 2:
            raise RuntimeError("disk full")
        original(conn, card_id, data)

    monkeypatch.setattr(store, "update_card_study_data", flaky_update)
    with pytest.raises(RuntimeError):
        store.reset_deck_for_study(db_conn, deck.id, now=NOW)

    assert store.get_due_cards(db_conn, deck.id, now=NOW) == []
    assert store.get_card(db_conn, cards[0].id).due_date == NOW + timedelta(days=6)


def test_reset_unknown_deck(db_conn):
    with pytest.raises(DeckNotFoundError):
        store.reset_deck_for_study(db_conn, 404)


def test_list_and_delete_decks(db_conn):
    deck, cards = _deck_with_cards(db_conn, count=2)
    assert [d.id for d in store.list_decks(db_conn)] == [deck.id]
    store.delete_deck(db_conn, deck.id)
    assert store.list_decks(db_conn) == []
    with pytest.raises(CardNotFoundError):
        store.get_card(db_conn, cards[0].id)
    count = db_conn.execute("SELECT COUNT(*) FROM card_study_data").fetchone()[0]
    assert count == 0
    with pytest.raises(DeckNotFoundError):
        store.delete_deck(db_conn, deck.id)
