# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""Path - addressing of nodes within a StateTree.

A Path is the ordered sequence of seeds leading from the root of a tree
(exclusive) down to a node. Paths address nodes; they never store them.
The root path is empty.

Example:
    >>> path = Path.root().child(todos_seed).child(todo_seed)
    >>> path.parent == Path.root().child(todos_seed)
    True
    >>> tree.get_node_at(path)  # current node for todo_seed
"""

from __future__ import annotations

from typing import Any, Callable, Iterator, TYPE_CHECKING

from .exceptions import InvalidArgumentError

if TYPE_CHECKING:
    from .nodes import TreeNode
    from .seed import Seed


class Path:
    """Immutable sequence of seeds from the root to a node."""

    __slots__ = ('seeds',)

    def __init__(self, *seeds: Seed) -> None:
        self.seeds: tuple[Seed, ...] = seeds

    @classmethod
    def root(cls) -> Path:
        """Return the path of the root node."""
        return cls()

    def child(self, seed: Seed) -> Path:
        """Return a new path extending this one by seed."""
        return Path(*self.seeds, seed)

    @property
    def parent(self) -> Path | None:
        """The path one hop up, or None for the root path."""
        if self.is_root():
            return None
        return Path(*self.seeds[:-1])

    def is_root(self) -> bool:
        """True if the path points to the root of a tree."""
        return not self.seeds

    def walk(
        self,
        node: Any,
        visit: Callable[[TreeNode, Any], Any] | None = None,
    ) -> Any:
        """Walk the path starting at node, visiting every hop.

        The start node is visited first, then each node identified by the
        path seeds, looked up in the start node's tree. ``visit`` receives
        the current node and the result of the previous visit (None for the
        start node) and its result is carried to the next hop.

        Args:
            node: Node to start from, usually the root of a tree.
            visit: Optional visitor. Defaults to returning the node itself.

        Returns:
            The result of visiting the last hop, or None if node is not a
            tree node or any hop can no longer be found.
        """
        from .nodes import TreeNode

        if not isinstance(node, TreeNode):
            return None

        tree = node._tree
        result = visit(node, None) if visit else node
        for seed in self.seeds:
            current = tree.get_node_for(seed)
            if current is None:
                return None
            result = visit(current, result) if visit else current
        return result

    def targets(self, path_or_node: Any) -> bool:
        """True if this path addresses the same node as path_or_node.

        Raises:
            InvalidArgumentError: If path_or_node is neither a Path nor a node.
        """
        return self == self._coerce(path_or_node)

    def affects(self, path_or_node: Any) -> bool:
        """True if a mutation at this path affects path_or_node.

        Mutations affect every node along their path, so this is a prefix
        test: the given node must sit on this path.

        Raises:
            InvalidArgumentError: If path_or_node is neither a Path nor a node.
        """
        other = self._coerce(path_or_node)
        return self.seeds[:len(other.seeds)] == other.seeds

    def _coerce(self, path_or_node: Any) -> Path:
        from .nodes import as_node, TreeNode

        if isinstance(path_or_node, Path):
            return path_or_node
        node = as_node(path_or_node)
        if isinstance(node, TreeNode):
            path = node._tree.get_path_for(node)
            if path is not None:
                return path
        raise InvalidArgumentError(
            "Argument must be either an instance of Path or a state tree node"
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Path):
            return NotImplemented
        return self.seeds == other.seeds

    def __hash__(self) -> int:
        return hash(self.seeds)

    def __len__(self) -> int:
        return len(self.seeds)

    def __iter__(self) -> Iterator[Seed]:
        return iter(self.seeds)

    def __repr__(self) -> str:
        return "Path(/" + "/".join(str(seed.value) for seed in self.seeds) + ")"
