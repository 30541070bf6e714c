"""SQLite card store: decks, cards and their SM-2 study data.

Functions take an open connection (see ``db.database.get_conn``). Writes go
through ``write_transaction``, which joins a transaction the caller already
holds or opens its own ``BEGIN IMMEDIATE`` one, so a card has at most one
writer at a time.
"""
import logging
import sqlite3
from contextlib import contextmanager
from datetime import datetime
from typing import Iterable, List, Optional

from models.card import Card, CardCreate, CardStudyData
from models.deck import Deck
from utils.deck_summary import reset_for_study
from utils.due_dates import from_storage, to_storage, utc_now
from utils.errors import CardNotFoundError, DeckNotFoundError
from utils.sm2 import INITIAL_EASE_FACTOR

logger = logging.getLogger(__name__)

CARD_COLUMNS = """
    c.id, c.deck_id, c.question, c.answer, c.created_at,
    csd.ease_factor, csd.repetitions, csd.interval_days, csd.due_date
"""


@contextmanager
def write_transaction(conn: sqlite3.Connection):
    """Run the block in a write transaction, rolling back on any error."""
    if conn.in_transaction:
        yield conn
        return
    conn.execute("BEGIN IMMEDIATE")
    try:
        yield conn
    except BaseException:
        conn.rollback()
        raise
    conn.commit()


def _row_to_card(row: sqlite3.Row) -> Card:
    card = dict(row)
    card["due_date"] = from_storage(card["due_date"])
    return Card(**card)


def create_deck(conn: sqlite3.Connection, title: str) -> Deck:
    with write_transaction(conn):
        cursor = conn.execute("INSERT INTO decks (title) VALUES (?)", (title,))
        deck_id = cursor.lastrowid
    logger.info("Created deck %s (%r)", deck_id, title)
    return get_deck(conn, deck_id)


def get_deck(conn: sqlite3.Connection, deck_id: int) -> Deck:
    row = conn.execute(
        "SELECT id, title, created_at FROM decks WHERE id = ?", (deck_id,)
    ).fetchone()
    if not row:
        raise DeckNotFoundError(deck_id)
    return Deck(**dict(row))


def list_decks(conn: sqlite3.Connection) -> List[Deck]:
    rows = conn.execute(
        "SELECT id, title, created_at FROM decks ORDER BY created_at DESC, id DESC"
    ).fetchall()
    return [Deck(**dict(row)) for row in rows]


def delete_deck(conn: sqlite3.Connection, deck_id: int) -> None:
    """Delete a deck with its cards and study data."""
    with write_transaction(conn):
        get_deck(conn, deck_id)
        conn.execute(
            "DELETE FROM card_study_data WHERE card_id IN (SELECT id FROM cards WHERE deck_id = ?)",
            (deck_id,),
        )
        conn.execute("DELETE FROM cards WHERE deck_id = ?", (deck_id,))
        conn.execute("DELETE FROM decks WHERE id = ?", (deck_id,))
    logger.info("Deleted deck %s", deck_id)


def add_cards_to_deck(
    conn: sqlite3.Connection,
    deck_id: int,
    cards: Iterable[CardCreate],
    now: Optional[datetime] = None,
) -> List[Card]:
    """Insert question/answer pairs; new cards are due immediately."""
    due = to_storage(now or utc_now())
    card_ids = []
    with write_transaction(conn):
        get_deck(conn, deck_id)
        for card in cards:
            cursor = conn.execute(
                "INSERT INTO cards (deck_id, question, answer) VALUES (?, ?, ?)",
                (deck_id, card.question, card.answer),
            )
            card_ids.append(cursor.lastrowid)
            conn.execute(
                """
                INSERT INTO card_study_data (card_id, ease_factor, repetitions, interval_days, due_date)
                VALUES (?, ?, 0, 0, ?)
                """,
                (cursor.lastrowid, INITIAL_EASE_FACTOR, due),
            )
    logger.info("Added %d cards to deck %s, all due immediately", len(card_ids), deck_id)
    return [get_card(conn, card_id) for card_id in card_ids]


def get_card(conn: sqlite3.Connection, card_id: int) -> Card:
    row = conn.execute(
        f"""
        SELECT {CARD_COLUMNS}
        FROM cards c
        JOIN card_study_data csd ON csd.card_id = c.id
        WHERE c.id = ?
        """,
        (card_id,),
    ).fetchone()
    if not row:
        raise CardNotFoundError(card_id)
    return _row_to_card(row)


def get_deck_cards(conn: sqlite3.Connection, deck_id: int) -> List[Card]:
    rows = conn.execute(
        f"""
        SELECT {CARD_COLUMNS}
        FROM cards c
        JOIN card_study_data csd ON csd.card_id = c.id
        WHERE c.deck_id = ?
        ORDER BY c.id ASC
        """,
        (deck_id,),
    ).fetchall()
    return [_row_to_card(row) for row in rows]


def get_due_cards(
    conn: sqlite3.Connection, deck_id: int, now: Optional[datetime] = None
) -> List[Card]:
    """Cards of the deck with due_date <= now, earliest first, ties by id."""
    rows = conn.execute(
        f"""
        SELECT {CARD_COLUMNS}
        FROM cards c
        JOIN card_study_data csd ON csd.card_id = c.id
        WHERE c.deck_id = ? AND csd.due_date <= ?
        ORDER BY csd.due_date ASC, c.id ASC
        """,
        (deck_id, to_storage(now or utc_now())),
    ).fetchall()
    logger.debug("Found %d due cards in deck %s", len(rows), deck_id)
    return [_row_to_card(row) for row in rows]


def update_card_study_data(conn: sqlite3.Connection, card_id: int, data: CardStudyData) -> None:
    """Replace the four scheduling fields of a card.

    Raises CardNotFoundError when the card does not exist; nothing is written.
    """
    with write_transaction(conn):
        cursor = conn.execute(
            """
            UPDATE card_study_data
            SET ease_factor = ?, repetitions = ?, interval_days = ?, due_date = ?
            WHERE card_id = ?
            """,
            (
                data.ease_factor,
                data.repetitions,
                data.interval_days,
                to_storage(data.due_date),
                card_id,
            ),
        )
        if cursor.rowcount == 0:
            raise CardNotFoundError(card_id)
    logger.debug("Updated study data for card %s: %s", card_id, data)


def reset_deck_for_study(
    conn: sqlite3.Connection, deck_id: int, now: Optional[datetime] = None
) -> int:
    """Make every card in the deck due now; all cards are updated or none are."""
    now = now or utc_now()
    with write_transaction(conn):
        get_deck(conn, deck_id)
        cards = reset_for_study(get_deck_cards(conn, deck_id), now)
        for card in cards:
            update_card_study_data(conn, card.id, card.study_data())
    logger.info("Reset %d cards in deck %s to be due for study", len(cards), deck_id)
    return len(cards)
