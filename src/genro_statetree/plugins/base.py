# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""Plugin contracts for StateTree.

A plugin hooks into a tree through ``StateTree.use(plugin)``, which awaits
nothing by itself and returns the awaitable produced by ``configure``.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, TYPE_CHECKING

from ..subscription import MutationEvent, Unsubscribe

if TYPE_CHECKING:
    from ..store import StateTree


class Plugin(ABC):
    """Base class for StateTree plugins."""

    @abstractmethod
    async def configure(self, store: StateTree) -> Unsubscribe:
        """Hook into store, returning a function undoing the subscription."""


class Storage(Plugin):
    """Persistence boundary: load a tree from a storage and keep it in sync.

    Subclasses implement ``load`` and ``update``. On configuration the
    storage is loaded once; any dict, list or @proxiable object it returns
    replaces the tree state. Every subsequent mutation is handed to
    ``update``.

    Example:
        >>> class MemoryStorage(Storage):
        ...     def __init__(self, data):
        ...         self.data = data
        ...
        ...     async def load(self):
        ...         return self.data
        ...
        ...     def update(self, event):
        ...         self.data = unwrap(event.state)
        >>> unsubscribe = await tree.use(MemoryStorage({'count': 1}))
    """

    async def configure(self, store: StateTree) -> Unsubscribe:
        data = await self.load()
        if data is not None and store.is_proxiable(data):
            store.set_state(data)
        return store.subscribe(self.update)

    @abstractmethod
    async def load(self) -> Any:
        """Return the persisted state, or None if there is nothing stored."""

    @abstractmethod
    def update(self, event: MutationEvent) -> None:
        """Persist the mutation described by event."""
