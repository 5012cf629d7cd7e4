"""Exhaustive shuffle state, kept per rotation key for the process lifetime."""

from .deck import ShuffledDeck
from .table import RotationTable

__all__ = ["RotationTable", "ShuffledDeck"]
