# Routes package __init__.py - re-exports routers for main.py convenience
from .decks import router as decks_router
from .review import router as review_router

__all__ = ['decks_router', 'review_router']
