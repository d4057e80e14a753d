"""Storage module for command history and database operations."""

from .history import HistoryEntry, HistoryStore
from .models import Base, CommandHistory

__all__ = [
    "Base",
    "CommandHistory",
    "HistoryEntry",
    "HistoryStore",
]
