from .deck import Deck, DeckCreate, CardsAdd
from .card import Card, CardCreate, CardStudyData
from .review import ReviewCreate

__all__ = ['Deck', 'DeckCreate', 'CardsAdd', 'Card', 'CardCreate', 'CardStudyData', 'ReviewCreate']
