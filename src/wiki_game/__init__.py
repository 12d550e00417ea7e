"""
Wiki Game - distributed path finding

Finds a chain of same-site hyperlinks between two wiki articles using
independent workers that coordinate only through a work queue and a memo
store.
"""

from .events import EventBus, SearchEvent
from .models import Document, FoundEvent, Outcome, ProcessResult, Route, WorkMessage
from .worker import Worker

__all__ = [
    'EventBus',
    'SearchEvent',
    'Document',
    'FoundEvent',
    'Outcome',
    'ProcessResult',
    'Route',
    'WorkMessage',
    'Worker',
]
