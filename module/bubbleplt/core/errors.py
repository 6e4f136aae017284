"""Exceptions raised by the bubble chart pipeline."""

from __future__ import annotations


class BubblepltError(Exception):
    """Base class for all bubbleplt errors."""


class LoadError(BubblepltError):
    """One of the three data sources could not be loaded (fatal)."""

    def __init__(self, source: str, message: str) -> None:
        super().__init__(f"Couldn't load {source}: {message}")
        self.source = source


class CriteriaError(BubblepltError, ValueError):
    """A filter request carries values that cannot be interpreted."""
