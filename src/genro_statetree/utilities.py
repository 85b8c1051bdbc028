# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""Helpers operating on state tree nodes.

These functions accept nodes and tracking views alike and raise
NotANodeError for anything else.

Example:
    >>> tree = StateTree({'todos': [{'text': 'a'}, {'text': 'b'}]})
    >>> first = tree.state['todos'][0]
    >>> detach(first)
    {'text': 'a'}
    >>> is_detached(first)
    True
    >>> merge(tree.state['todos'][0], {'text': 'B', 'done': True})
    DictNode({'text': 'B', 'done': True})
"""

from __future__ import annotations

from typing import Any, Mapping

from .exceptions import DetachedNodeError, NotANodeError, StateTreeError
from .nodes import TreeNode, as_node
from .path import Path


def is_node(value: Any) -> bool:
    """True if value is a tree node or a tracking view of one."""
    return isinstance(as_node(value), TreeNode)


def unwrap(node: Any) -> Any:
    """Return the raw value wrapped by node.

    Raises:
        NotANodeError: If node is not a tree node.
    """
    node = _node(node)
    return node._value


def is_detached(value: Any) -> bool:
    """True if value is not a node still reachable from its tree's root.

    Non nodes are always detached. A node is detached when its seed was
    released, or when any hop of its path no longer holds the next raw
    value at the registered link.
    """
    node = as_node(value)
    if not isinstance(node, TreeNode):
        return True
    return not node._tree.is_attached(node)


def path_for(node: Any) -> Path:
    """Return the path of node within its tree.

    Raises:
        NotANodeError: If node is not a tree node.
        DetachedNodeError: If node is detached.
    """
    node = _attached_node(node)
    return node._tree.get_path_for(node)


def detach(node: Any) -> Any:
    """Remove node from its parent, returning its raw value.

    The removal is a regular 'delete' mutation of the parent, so siblings
    of list items are re-linked and subscribers are notified.

    Raises:
        NotANodeError: If node is not a tree node.
        DetachedNodeError: If node is already detached.
        StateTreeError: If node is the root of its tree.
    """
    node = _attached_node(node)
    tree = node._tree
    path = tree.get_path_for(node)
    if path.is_root():
        raise StateTreeError("Cannot detach the root node of a state tree")

    value = node._value
    parent = tree.get_node_at(path.parent)
    parent._delete_child(tree.get_link_for(node))
    return value


def merge(node: Any, data: Mapping[Any, Any]) -> TreeNode:
    """Assign every item of data to node with a single 'merge' mutation.

    Returns:
        The current node after the merge.

    Raises:
        NotANodeError: If node is not a tree node.
        DetachedNodeError: If node is detached.
    """
    node = _attached_node(node)
    path = node._tree.get_path_for(node)
    node._merge(dict(data))
    return node._tree.get_node_at(path)


def _node(value: Any) -> TreeNode:
    node = as_node(value)
    if not isinstance(node, TreeNode):
        raise NotANodeError()
    return node


def _attached_node(value: Any) -> TreeNode:
    node = _node(value)
    if is_detached(node):
        raise DetachedNodeError()
    return node
