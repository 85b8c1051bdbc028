# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""ScopedStore - a StateTree seen through a dependency-tracking Scope."""

from __future__ import annotations

from typing import Any

from ..exceptions import StateTreeError
from ..nodes import TreeNode, as_node
from ..store import StateTree
from ..subscription import MutationEvent, Subscriber, Unsubscribe
from ..utilities import path_for
from .scope import Scope


class ScopedStore:
    """Store facade notifying subscribers only about what they read.

    The scoped store targets either a whole StateTree or one of its nodes.
    A store targeting the root follows it across StateTree.set_state.
    ``state`` returns the tracking view of the current target node; reads
    through it are recorded in ``scope``, and subscribers registered via the
    scoped store only receive events the scope is affected by.

    Example:
        >>> scoped = ScopedStore(tree)
        >>> scoped.subscribe(render)
        >>> scoped.state['todos'][0]['active']
        >>> tree.state['todos'][0]['text'] = 'changed'     # render not called
        >>> tree.state['todos'][0]['active'] = False       # render called
    """

    __slots__ = ('_store', '_target', 'scope')

    def __init__(self, store_or_node: Any) -> None:
        """Initialize a ScopedStore.

        Args:
            store_or_node: A StateTree, or a node (or tracking view) of one.

        Raises:
            StateTreeError: If store_or_node is neither.
        """
        node = as_node(store_or_node)
        if isinstance(node, TreeNode):
            self._store: StateTree = node._tree
            path = self._store.get_path_for(node)
            self._target: TreeNode | None = (
                None if path is not None and path.is_root() else node
            )
        elif isinstance(store_or_node, StateTree):
            self._store = store_or_node
            self._target = None
        else:
            raise StateTreeError(
                "ScopedStore takes either a StateTree or one of its nodes"
            )

        self.scope = Scope()
        self.scope.track(self._resolve())

    def _resolve(self) -> TreeNode:
        """Return the current node for the target, the root when targeting it."""
        if self._target is None:
            return self._store.state
        return self._store.get_node_at(path_for(self._target))

    @property
    def state(self) -> Any:
        """Tracking view of the current target node."""
        return self.scope.get_or_cache(self._resolve())

    def set_state(self, value: Any) -> Any:
        """Replace the target node's value, returning the new view."""
        node = self._store.set_node(self._resolve(), value)
        if self._target is not None:
            self._target = node
        return self.state

    def subscribe(self, subscriber: Subscriber) -> Unsubscribe:
        """Subscribe to mutations of the target node affecting the scope."""
        return self.subscribe_to(self._resolve(), subscriber)

    def subscribe_to(self, node: Any, subscriber: Subscriber) -> Unsubscribe:
        """Subscribe to mutations through node affecting the scope."""
        def scoped_subscriber(event: MutationEvent) -> None:
            if self.scope.affected(event):
                subscriber(event)

        return self._store.subscribe_to(node, scoped_subscriber)
