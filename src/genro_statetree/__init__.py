# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""Genro-StateTree - Observable state trees with structural sharing.

A lightweight, zero-dependency library providing an observable state
container for the Genro ecosystem (Genro Kyō): mutations regenerate only
the nodes along their path, node identity survives regenerations and
subscribers can be scoped to the data they actually read.
"""

__version__ = "0.1.0"

from .engine import MutationEngine, MutationResult
from .exceptions import (
    DetachedNodeError,
    InvalidArgumentError,
    NotANodeError,
    StateTreeError,
    ValueAlreadyBoundError,
)
from .nodes import (
    DictNode,
    ListNode,
    ObjectNode,
    TreeNode,
    is_proxiable,
    proxiable,
    untracked,
)
from .path import Path
from .plugins import LoggerPlugin, Plugin, Storage
from .scoping import Scope, ScopedStore
from .seed import Seed, SeedRegistry
from .store import StateTree
from .subscription import MutationEvent, MutationMetadata, Subscriptions
from .utilities import detach, is_detached, is_node, merge, path_for, unwrap

__all__ = [
    # Core classes
    "StateTree",
    "TreeNode",
    "ObjectNode",
    "ListNode",
    "DictNode",
    "Path",
    "Seed",
    "SeedRegistry",
    "MutationEngine",
    "MutationResult",
    # Subscriptions
    "Subscriptions",
    "MutationEvent",
    "MutationMetadata",
    # Scoping
    "Scope",
    "ScopedStore",
    # Plugins
    "Plugin",
    "Storage",
    "LoggerPlugin",
    # Decorators
    "proxiable",
    "untracked",
    "is_proxiable",
    # Utilities
    "detach",
    "is_detached",
    "is_node",
    "merge",
    "path_for",
    "unwrap",
    # Exceptions
    "StateTreeError",
    "NotANodeError",
    "DetachedNodeError",
    "InvalidArgumentError",
    "ValueAlreadyBoundError",
]
