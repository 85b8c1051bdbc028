# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""Node strategies for StateTree - base class and container implementations."""

from .base import NodeView, ObjectNode, TreeNode, as_node, unwrap_value
from .decorators import is_proxiable, is_untracked, proxiable, untracked
from .mapping import DictNode
from .sequence import ListNode

# Tried in order; ObjectNode accepts anything and must stay last.
DEFAULT_HANDLERS: tuple[type[TreeNode], ...] = (ListNode, DictNode, ObjectNode)

__all__ = [
    'TreeNode',
    'ObjectNode',
    'ListNode',
    'DictNode',
    'NodeView',
    'DEFAULT_HANDLERS',
    'as_node',
    'unwrap_value',
    'proxiable',
    'untracked',
    'is_proxiable',
    'is_untracked',
]
