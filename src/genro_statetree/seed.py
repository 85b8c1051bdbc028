# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""Identity tokens for values living in a StateTree.

Every raw value planted in a tree receives a Seed. Two raw values sharing a
seed are the same logical entity across tree regenerations, even when the
wrapping nodes differ.

Raw dicts and lists cannot be weakly referenced, so the registry keys its
entries by ``id(value)`` and keeps the value alive until it is released.
The tree releases values when it detaches them.

Example:
    >>> registry = SeedRegistry()
    >>> todo = {'text': 'Do the dishes'}
    >>> seed = registry.plant(todo)
    >>> registry.seed_for(todo) is seed
    True
    >>> registry.plant(todo) is seed  # planting is idempotent
    True
"""

from __future__ import annotations

from itertools import count
from typing import Any, Iterator


class Seed:
    """Opaque identity token. Seeds compare by identity."""

    __slots__ = ('value', '__weakref__')

    def __init__(self, value: int) -> None:
        self.value = value

    def __repr__(self) -> str:
        return f"Seed({self.value})"


class SeedRegistry:
    """Assigns and looks up the seeds of raw values entering a tree."""

    __slots__ = ('_counter', '_entries')

    def __init__(self) -> None:
        self._counter: Iterator[int] = count()
        self._entries: dict[int, tuple[Any, Seed]] = {}

    def plant(self, value: Any, seed: Seed | None = None) -> Seed:
        """Assign a seed to value unless it already carries one.

        Args:
            value: The raw value entering the tree.
            seed: Seed to reuse. A fresh seed is created when omitted.

        Returns:
            The seed carried by value, existing or newly planted.
        """
        entry = self._entries.get(id(value))
        if entry is not None:
            return entry[1]
        if seed is None:
            seed = Seed(next(self._counter))
        self._entries[id(value)] = (value, seed)
        return seed

    def seed_for(self, value: Any) -> Seed | None:
        """Return the seed carried by value, or None."""
        if isinstance(value, Seed):
            return value
        entry = self._entries.get(id(value))
        return entry[1] if entry is not None else None

    def release(self, value: Any) -> Seed | None:
        """Forget value, returning the seed it carried."""
        entry = self._entries.pop(id(value), None)
        return entry[1] if entry is not None else None

    def clear(self) -> None:
        """Forget every planted value. Numbering keeps increasing."""
        self._entries.clear()

    def __contains__(self, value: Any) -> bool:
        return id(value) in self._entries

    def __len__(self) -> int:
        return len(self._entries)
