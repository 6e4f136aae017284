"""Authoritative-view register.

Every filter change derives a fresh result; the register records which
one the renderer should be showing. It has a single writer (the
explorer) and latest-wins semantics: claiming a new generation makes
any older in-flight result stale, and a stale result can no longer be
published.
"""

from __future__ import annotations

from typing import Generic, Optional, TypeVar

T = TypeVar("T")


class ViewRegister(Generic[T]):
    """Latest-wins holder for the result currently on screen."""

    def __init__(self) -> None:
        self._generation = 0
        self._current: Optional[T] = None

    # Public API -----------------------------------------------------
    @property
    def generation(self) -> int:
        return self._generation

    @property
    def current(self) -> Optional[T]:
        return self._current

    def claim(self) -> int:
        """Start a new generation; anything older becomes stale."""
        self._generation += 1
        return self._generation

    def is_current(self, generation: int) -> bool:
        return generation == self._generation

    def publish(self, generation: int, value: T) -> bool:
        """Store *value* if *generation* is still the latest claim."""
        if not self.is_current(generation):
            return False
        self._current = value
        return True
