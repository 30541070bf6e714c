class SchedulingError(ValueError):
    """Base class for rejected scheduling input."""


class InvalidQualityError(SchedulingError):
    """Quality is not an integer in 0..5 (or the rating label is unknown)."""


class InvalidStateError(SchedulingError):
    """Prior scheduling state is corrupt, e.g. negative repetitions."""


class StoreError(Exception):
    """Base class for card store failures."""


class CardNotFoundError(StoreError, LookupError):
    def __init__(self, card_id: int):
        super().__init__(f"Card {card_id} not found")
        self.card_id = card_id


class DeckNotFoundError(StoreError, LookupError):
    def __init__(self, deck_id: int):
        super().__init__(f"Deck {deck_id} not found")
        self.deck_id = deck_id
