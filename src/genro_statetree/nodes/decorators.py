# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""Decorators opting classes and attributes in and out of a StateTree."""

from __future__ import annotations

from typing import Any, Callable


def proxiable(cls: type) -> type:
    """Mark a class so that its instances become nodes of a StateTree.

    Plain dicts and lists are always proxiable. Instances of any other
    class are stored in the tree as opaque values unless the class is
    decorated.

    Example:
        >>> @proxiable
        ... class Todo:
        ...     def __init__(self, text):
        ...         self.text = text
        ...         self.done = False
        ...
        ...     def toggle(self):
        ...         self.done = not self.done
    """
    cls.__proxiable__ = True
    return cls


def untracked(*names: str) -> Callable[[type], type]:
    """Declare attributes that live outside the tree's change tracking.

    Writes to untracked attributes happen in place: they do not generate a
    new tree, they notify nobody and tracking scopes never record them.
    Names accumulate along the class hierarchy.

    Example:
        >>> @proxiable
        ... @untracked('cache')
        ... class Todo:
        ...     ...
    """
    def decorator(cls: type) -> type:
        inherited = getattr(cls, '__untracked__', frozenset())
        cls.__untracked__ = frozenset(inherited) | frozenset(names)
        return cls

    return decorator


def is_proxiable(value: Any) -> bool:
    """True if value can be wrapped as a node by the default strategies."""
    if isinstance(value, (dict, list)):
        return True
    return getattr(type(value), '__proxiable__', False) is True


def is_untracked(value: Any, name: Any) -> bool:
    """True if attribute name of value was declared with @untracked."""
    return name in getattr(type(value), '__untracked__', ())
