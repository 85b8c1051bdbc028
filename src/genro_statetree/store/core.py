# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""StateTree - an observable, structurally shared state tree.

This module provides the StateTree class, the facade owning the identity
registry, the node registries and the mutation engine.

Key Features:
    - **Lazy nodes**: Nodes are created the first time their parent is read
    - **Structural sharing**: A mutation regenerates only the nodes on its path
    - **Stable identity**: Seeds identify logical entities across regenerations
    - **Path healing**: List children are re-linked when positions shift
    - **Reactive subscriptions**: Every node on a mutation path is notified

Registries:
    The tree maps each seed to its current node, to the link connecting it to
    its parent and to its path from the root. Only one node per seed is
    current at a time; older nodes for the same seed are stale but keep
    resolving through the registries until their seed is detached.

Example:
    Basic usage::

        tree = StateTree({'todos': [{'text': 'Do the dishes', 'done': False}]})
        todo = tree.state['todos'][0]

        tree.subscribe(lambda event: print(event.metadata))
        todo['done'] = True

        tree.state['todos'][0] is todo        # False, regenerated
        tree.state['todos'][0]['done']        # True

    Custom strategies::

        class MyTree(StateTree):
            extensions = (TodoListNode,)
"""

from __future__ import annotations

from typing import Any, Awaitable, TYPE_CHECKING

from ..engine import Mutation, MutationEngine
from ..exceptions import DetachedNodeError, NotANodeError
from ..nodes import DEFAULT_HANDLERS, TreeNode, as_node, is_proxiable, unwrap_value
from ..path import Path
from ..seed import Seed, SeedRegistry
from ..subscription import (
    MutationEvent,
    MutationMetadata,
    Subscriber,
    Subscriptions,
    Unsubscribe,
    notify,
)

if TYPE_CHECKING:
    from ..plugins import Plugin


class StateTree:
    """An observable state tree with copy-on-write node regeneration.

    StateTree provides:
    - state / set_state(value): Read and replace the whole tree
    - mutate(node, fn): Commit a custom mutation against a node
    - subscribe(fn) / subscribe_to(node, fn): Listen to mutations
    - get_node_at / get_node_for / get_path_for / get_link_for: Addressing

    Attributes:
        extensions: Node strategies tried before the default ones
            (ListNode, DictNode, ObjectNode). Subclasses override it to
            customize how values are wrapped.

    Example:
        >>> tree = StateTree({'count': 0})
        >>> tree.state['count'] += 1
        >>> tree.state['count']
        1
    """

    extensions: tuple[type[TreeNode], ...] = ()

    __slots__ = ('_handlers', '_engine', '_seeds', '_nodes', '_links', '_paths', '_root')

    def __init__(self, initial_state: Any) -> None:
        """Initialize a StateTree.

        Args:
            initial_state: The root value: a dict, a list or an instance of
                a @proxiable class. Nodes are unwrapped to their raw value.

        Raises:
            TypeError: If initial_state cannot be wrapped as a node.
        """
        self._handlers: tuple[type[TreeNode], ...] = (*self.extensions, *DEFAULT_HANDLERS)
        self._engine = MutationEngine(self)
        self._seeds = SeedRegistry()
        self._nodes: dict[Seed, TreeNode] = {}
        self._links: dict[Seed, Any] = {}
        self._paths: dict[Seed, Path] = {}
        self._root: TreeNode | None = None
        self.set_state(initial_state)

    # ==================== Special Methods ====================

    def __repr__(self) -> str:
        return f"StateTree({self._root._value!r})"

    # ==================== State ====================

    @property
    def state(self) -> Any:
        """The current root node."""
        return self._root

    def set_state(self, value: Any) -> TreeNode:
        """Replace the whole tree with value.

        Every node of the previous tree becomes detached, unless value is
        the current root value. Root subscribers are kept and notified with
        a 'set' mutation carrying no props.

        Returns:
            The new root node.
        """
        value = unwrap_value(value)
        if not self.is_proxiable(value):
            raise TypeError(
                "state must be a dict, a list or a @proxiable object, "
                f"not {type(value).__name__}"
            )

        previous = self._root
        subscriptions = previous._subscriptions if previous is not None else None
        if previous is not None and previous._value is not value:
            self._forget_all(keep=subscriptions)

        self._seeds.plant(value)
        self._root = self.create_node(Path.root(), value, None, subscriptions)

        notify(MutationEvent(self._root, Path.root(), MutationMetadata('set')))
        return self._root

    def set_node(self, node: Any, value: Any) -> TreeNode:
        """Replace the value held by node within its parent.

        Args:
            node: The node to replace. Replacing the root calls set_state.
            value: The new value.

        Returns:
            The node now found at the same link.

        Raises:
            NotANodeError: If node does not belong to this tree.
            DetachedNodeError: If node is no longer reachable.
        """
        node = self._own_node(node)
        path = self._paths[self.seed_for(node)]
        if path.is_root():
            return self.set_state(value)

        link = self.get_link_for(node)
        self.get_node_at(path.parent)._set_child(link, value)
        return self.get_node_at(path.parent)._get_child_node(link)

    def mutate(self, node: Any, mutation: Mutation) -> None:
        """Commit a mutation against node by structural sharing.

        The root and every node on the path to node are regenerated, the
        mutation is applied to node's raw value, the new root is installed
        and the subscribers of every node on the path are notified.

        Args:
            node: The node to mutate. Stale nodes resolve to the current one.
            mutation: Callable receiving the raw value and the regenerated
                node, editing the raw value in place and returning the
                MutationMetadata describing the change.

        Raises:
            NotANodeError: If node does not belong to this tree.
            DetachedNodeError: If node is no longer reachable.

        A mutation raising an exception is logged and discarded, leaving
        the tree unchanged.

        Example:
            >>> def add_user(users, node):
            ...     users.append({'name': 'Alice'})
            ...     return MutationMetadata('push')
            >>> tree.mutate(tree.state['users'], add_user)
        """
        node = self._own_node(node)
        path = self._paths[self.seed_for(node)]

        result = self._engine.mutate(path, self._root, mutation)
        if result is None:
            return

        self._root = result.root
        notify(MutationEvent(self._root, path, result.metadata))

    # ==================== Subscriptions ====================

    def subscribe(self, subscriber: Subscriber) -> Unsubscribe:
        """Subscribe to every mutation of the tree."""
        return self.subscribe_to(self._root, subscriber)

    def subscribe_to(self, node: Any, subscriber: Subscriber) -> Unsubscribe:
        """Subscribe to the mutations whose path goes through node.

        Raises:
            NotANodeError: If node is not a tree node.
        """
        node = as_node(node)
        if not isinstance(node, TreeNode):
            raise NotANodeError()
        return node._subscriptions.subscribe(subscriber)

    def use(self, plugin: Plugin) -> Awaitable[Unsubscribe]:
        """Configure plugin against this tree.

        Returns:
            The awaitable returned by ``plugin.configure``.
        """
        return plugin.configure(self)

    # ==================== Addressing ====================

    def seed_for(self, value: Any) -> Seed | None:
        """Return the seed of a node or raw value, or None."""
        return self._seeds.seed_for(unwrap_value(value))

    def get_node_for(self, value: Any) -> TreeNode | None:
        """Return the current node for a node, raw value or seed."""
        seed = self.seed_for(value)
        return self._nodes.get(seed) if seed is not None else None

    def get_link_for(self, value: Any) -> Any:
        """Return the link connecting a node to its parent (None for root)."""
        seed = self.seed_for(value)
        return self._links.get(seed) if seed is not None else None

    def get_path_for(self, value: Any) -> Path | None:
        """Return the path of a node or raw value, or None if unknown."""
        seed = self.seed_for(value)
        return self._paths.get(seed) if seed is not None else None

    def get_node_at(self, path: Path) -> TreeNode | None:
        """Return the current node at path, or None if unreachable."""
        return path.walk(self._root)

    def is_proxiable(self, value: Any) -> bool:
        """True if value is wrapped as a node when read from the tree."""
        if is_proxiable(value):
            return True
        return any(handler.accepts(value) for handler in self.extensions)

    def is_attached(self, node: TreeNode) -> bool:
        """True if node is still reachable from the current root.

        Every hop of the node's path must still hold the next node's raw
        value at its link, and the node must wrap the raw value currently
        registered for its seed.
        """
        path = self.get_path_for(node)
        if path is None or self._root is None:
            return False

        current = self._root
        for seed in path.seeds:
            child = self._nodes.get(seed)
            if child is None or not current._holds(self._links.get(seed), child._value):
                return False
            current = child
        return current._value is node._value

    # ==================== Node registry ====================

    def create_node(
        self,
        path: Path,
        value: Any,
        link: Any = None,
        subscriptions: Subscriptions | None = None,
    ) -> TreeNode:
        """Wrap value with the first strategy accepting it and register it.

        Args:
            path: Path of the new node.
            value: Raw value to wrap, already planted.
            link: Link connecting the node to its parent.
            subscriptions: Broadcast channel to reuse.

        Returns:
            The new node, now current for its seed.
        """
        handler = self._handler_for(value)
        node = handler(self, value, subscriptions)
        self.attach_node(node, link, path)
        return node

    def attach_node(self, node: TreeNode, link: Any = None, path: Path | None = None) -> None:
        """Make node current for its seed, updating its link and path."""
        seed = self._seeds.seed_for(node._value)
        if seed is None:
            return
        self._nodes[seed] = node
        self._links[seed] = link
        if path is not None:
            self._paths[seed] = path

    def detach_node_for(self, value: Any) -> None:
        """Detach the node of value and the descendants reached through it.

        The seeds are released, the registries forget them and their
        broadcast channels are reset. Nodes wrapping them become permanently
        detached.
        """
        value = unwrap_value(value)
        seed = self._seeds.release(value)
        if seed is None:
            return
        self._forget_seed(seed)
        self._detach_descendants(value, seed)

    def traverse(self, parent: TreeNode, link: Any, child: Any) -> Any:
        """Return the node of child, creating it under parent if needed.

        Children are cached by seed, so the same node is returned until a
        mutation regenerates it, even if its link changes meanwhile.
        Reading through a detached parent returns the raw child.
        """
        node = self.get_node_for(child)
        if node is not None:
            return node

        parent_path = self.get_path_for(parent)
        if parent_path is None:
            return child
        path = parent_path.child(self._seeds.plant(child))
        return self.create_node(path, child, link)

    def reattach(self, parent: TreeNode, link: Any, value: Any, incoming: TreeNode) -> None:
        """Re-attach the node being assigned at parent[link].

        The node keeps its seed and broadcast channel; its path and the
        paths of its materialized descendants are moved under parent.
        """
        existing = self.get_node_for(value)
        if existing is not None:
            subscriptions = existing._subscriptions
        elif incoming._tree is self:
            subscriptions = incoming._subscriptions
        else:
            subscriptions = None

        old_path = self.get_path_for(value)
        new_path = self.get_path_for(parent).child(self._seeds.plant(value))
        self.create_node(new_path, value, link, subscriptions)

        if old_path is not None and old_path != new_path:
            self._rebase_paths(old_path, new_path)

    # ==================== Internals ====================

    def _own_node(self, node: Any) -> TreeNode:
        node = as_node(node)
        if not isinstance(node, TreeNode):
            raise NotANodeError()
        if node._tree is not self:
            raise NotANodeError("Node belongs to a different state tree")
        if not self.is_attached(node):
            raise DetachedNodeError()
        return node

    def _handler_for(self, value: Any) -> type[TreeNode]:
        for handler in self._handlers:
            if handler.accepts(value):
                return handler
        raise TypeError(f"no node strategy accepts {type(value).__name__}")

    def _forget_seed(self, seed: Seed) -> None:
        node = self._nodes.pop(seed, None)
        if node is not None:
            node._subscriptions.reset()
        self._links.pop(seed, None)
        self._paths.pop(seed, None)

    def _forget_all(self, keep: Subscriptions | None = None) -> None:
        for node in self._nodes.values():
            if node._subscriptions is not keep:
                node._subscriptions.reset()
        self._nodes.clear()
        self._links.clear()
        self._paths.clear()
        self._seeds.clear()

    def _detach_descendants(self, value: Any, ancestor: Seed) -> None:
        handler = self._handler_for(value)
        for child in list(handler._child_values(value)):
            seed = self._seeds.seed_for(child)
            if seed is None:
                continue
            path = self._paths.get(seed)
            if path is None or ancestor not in path.seeds:
                continue
            self._seeds.release(child)
            self._forget_seed(seed)
            self._detach_descendants(child, ancestor)

    def _rebase_paths(self, old: Path, new: Path) -> None:
        depth = len(old)
        for seed, path in list(self._paths.items()):
            if len(path) > depth and path.seeds[:depth] == old.seeds:
                self._paths[seed] = Path(*new.seeds, *path.seeds[depth:])
