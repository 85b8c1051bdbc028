# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""Scope - dependency tracking for state tree subscribers.

A Scope wraps nodes in tracking views and records, per seed, the links read
through them. ``affected(event)`` then tells whether a mutation touches any
of the recorded links, turning "notify on every mutation along the path"
into "notify when something that was read changed".

Missing a notification is a bug, notifying too much is not: every mutation
other than a plain 'set' of known links is reported as affecting the scope.

Example:
    >>> scope = Scope()
    >>> todos = scope.wrap(tree.state['todos'])
    >>> todos[0]['active']          # records (seed of todos[0], 'active')
    >>> tree.state['todos'][0]['text'] = 'Walk the dog'
    >>> scope.affected(last_event)
    False
"""

from __future__ import annotations

from typing import Any
from weakref import WeakKeyDictionary, WeakValueDictionary

from ..nodes import DictNode, ListNode, TreeNode, as_node
from ..seed import Seed
from ..subscription import MutationEvent
from .views import ScopedDict, ScopedList, ScopedNode


class Scope:
    """Records the links read through its tracking views."""

    __slots__ = ('_cache', '_tracking')

    def __init__(self) -> None:
        # keyed by id(node): a view keeps its node alive while cached
        self._cache: WeakValueDictionary[int, ScopedNode] = WeakValueDictionary()
        self._tracking: WeakKeyDictionary[Seed, set[Any]] = WeakKeyDictionary()

    def get_or_cache(self, node: Any) -> ScopedNode:
        """Return the tracking view of node, one per node per scope."""
        node = as_node(node)
        view = self._cache.get(id(node))
        if view is None:
            view = self._view_class(node)(node, self)
            self._cache[id(node)] = view
        return view

    def wrap(self, value: Any) -> Any:
        """Return value as a tracking view if it is a node, else as-is."""
        if isinstance(as_node(value), TreeNode):
            return self.get_or_cache(value)
        return value

    def track(self, node: Any, link: Any = None) -> None:
        """Record that link of node was read.

        Without link, node is registered with no links: mutations setting
        existing links of node will not affect the scope.
        """
        node = as_node(node)
        seed = node._tree.seed_for(node)
        if seed is None:
            return
        links = self._tracking.get(seed)
        if links is None:
            links = self._tracking[seed] = set()
        if link is not None:
            links.add(link)

    def is_tracking(self, node: Any, link: Any) -> bool:
        """True if link of node was read through this scope."""
        node = as_node(node)
        seed = node._tree.seed_for(node)
        links = self._tracking.get(seed) if seed is not None else None
        return links is not None and link in links

    def reset(self) -> None:
        """Forget every recorded read."""
        self._tracking = WeakKeyDictionary()

    def affected(self, event: MutationEvent) -> bool:
        """True if subscribers of this scope must be notified of event."""
        metadata = event.metadata
        if metadata.operation != 'set':
            return True

        if not metadata.props or metadata.previously_undefined:
            return True

        path = event.mutation_path
        if path.is_root():
            seed = event.state._tree.seed_for(event.state)
        else:
            seed = path.seeds[-1]
        links = self._tracking.get(seed) if seed is not None else None
        if links is None:
            return False
        return any(prop in links for prop in metadata.props)

    @staticmethod
    def _view_class(node: TreeNode) -> type[ScopedNode]:
        if isinstance(node, ListNode):
            return ScopedList
        if isinstance(node, DictNode):
            return ScopedDict
        return ScopedNode
