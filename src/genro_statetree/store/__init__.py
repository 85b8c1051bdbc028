# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""StateTree package - Observable state container.

This package provides the StateTree class, an observable state tree with
structural sharing, stable node identity and path-scoped subscriptions.

The package is organized into:
- core: Main StateTree class with registries, mutation and subscriptions

Example:
    >>> from genro_statetree import StateTree
    >>> tree = StateTree({'config': {'name': 'MyApp'}})
    >>> tree.state['config']['name'] = 'Other'
    >>> tree.state['config']['name']
    'Other'
"""

from .core import StateTree

__all__ = ["StateTree"]
