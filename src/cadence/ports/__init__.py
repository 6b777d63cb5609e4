"""Ports - interfaces/protocols for external dependencies."""

from .row_store import RowStore, StoreError, RowNotFoundError, DuplicateRowError
from .messenger import Messenger
from .conflicts import ConflictChecker, ConflictError
from .clock import Clock

__all__ = [
    "RowStore",
    "StoreError",
    "RowNotFoundError",
    "DuplicateRowError",
    "Messenger",
    "ConflictChecker",
    "ConflictError",
    "Clock",
]
