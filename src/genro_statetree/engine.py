# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""MutationEngine - copy-on-write commits for StateTree.

A mutation at path P regenerates the root node and every node along P down
to the target. Regenerating a node means wrapping the same raw value in a
new node carrying the same seed and the same broadcast channel: raw data is
edited in place and never copied. Nodes off P keep their references, which
is what lets consumers detect changes by identity.

The regenerated nodes become current only once the mutation callback has
returned. A callback raising an exception is logged and leaves the tree
untouched: no root swap, no notification.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, TYPE_CHECKING

from .subscription import MutationMetadata

if TYPE_CHECKING:
    from .nodes import TreeNode
    from .path import Path
    from .store import StateTree

logger = logging.getLogger(__name__)

Mutation = Callable[[Any, 'TreeNode'], 'MutationMetadata | None']


@dataclass(frozen=True)
class MutationResult:
    """Outcome of a committed mutation."""

    root: TreeNode
    metadata: MutationMetadata


class MutationEngine:
    """Applies mutations to a StateTree by structural sharing."""

    __slots__ = ('tree',)

    def __init__(self, tree: StateTree) -> None:
        self.tree = tree

    def mutate(
        self,
        path: Path,
        root: TreeNode,
        mutation: Mutation,
    ) -> MutationResult | None:
        """Regenerate the nodes along path and apply mutation to the target.

        Args:
            path: Path of the node to mutate.
            root: Current root node of the tree.
            mutation: Callable receiving the target's raw value and its
                regenerated node. It edits the raw value in place and
                returns the MutationMetadata describing the change.

        Returns:
            The new root and the mutation metadata, or None if path can no
            longer be walked from root or the mutation raised.
        """
        clones: list[tuple[TreeNode, TreeNode]] = []

        def clone(node: TreeNode, _: Any) -> TreeNode:
            copy = node._clone()
            clones.append((node, copy))
            return copy

        try:
            target = path.walk(root, clone)
            if target is None:
                logger.debug("Mutation path %r is no longer reachable", path)
                return None
            metadata = mutation(target._value, target)
        except Exception:
            logger.exception("Mutation at %r failed", path)
            return None

        if metadata is None:
            metadata = MutationMetadata('mutate')

        tree = self.tree
        for node, copy in clones:
            tree.attach_node(copy, tree.get_link_for(node), tree.get_path_for(node))

        return MutationResult(root=clones[0][1], metadata=metadata)
