# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""Tracking views - nodes seen through a dependency-tracking Scope.

A view forwards every read and write to the node it wraps. Reads of data
links are recorded in the scope, child nodes are returned as views of the
same scope, and methods of @proxiable classes are bound to the view so the
reads they perform are recorded too.

Not recorded:
    - methods and properties (the reads they perform are recorded instead)
    - attributes declared with @untracked
    - the node API itself (append, keys, splice, ...)
"""

from __future__ import annotations

from types import FunctionType, MethodType
from typing import Any, Iterator, TYPE_CHECKING

from ..nodes import NodeView, TreeNode, is_untracked, unwrap_value
from ..nodes.base import _NODE_ATTRIBUTES, class_attribute

if TYPE_CHECKING:
    from .scope import Scope


class ScopedNode(NodeView):
    """Tracking view of a node, recording attribute reads."""

    __slots__ = ('_node', '_scope', '_bindings', '__weakref__')

    def __init__(self, node: TreeNode, scope: Scope) -> None:
        object.__setattr__(self, '_node', node)
        object.__setattr__(self, '_scope', scope)
        object.__setattr__(self, '_bindings', {})

    def _bind(self, name: str, function: FunctionType) -> MethodType:
        bound = self._bindings.get(name)
        if bound is None or bound.__func__ is not function:
            bound = MethodType(function, self)
            self._bindings[name] = bound
        return bound

    def _read(self, link: Any, child: Any) -> Any:
        node = self._node
        if not is_untracked(node._value, link):
            self._scope.track(node, link)
        return self._scope.wrap(child)

    def _read_contents(self) -> None:
        """Record every link of the node and of its descendants.

        Used by reads that compare whole values (equality, membership,
        index, count) without going through item access.
        """
        scope = self._scope
        pending = [self._node]
        seen: set[int] = set()
        while pending:
            node = pending.pop()
            if id(node._value) in seen:
                continue
            seen.add(id(node._value))
            for link in node._links(node._value):
                if is_untracked(node._value, link):
                    continue
                scope.track(node, link)
                child = node._get_child_node(link)
                if child is not None:
                    pending.append(child)

    def __getattr__(self, name: str) -> Any:
        if name.startswith('__') or name in _NODE_ATTRIBUTES:
            raise AttributeError(
                f"'{type(self).__name__}' object has no attribute '{name}'"
            )

        node = self._node
        target = node._value
        if hasattr(type(node), name):
            return getattr(node, name)

        attribute = class_attribute(type(target), name)
        if isinstance(attribute, property):
            return attribute.__get__(self, type(target))

        instance_dict = getattr(target, '__dict__', None)
        if isinstance(attribute, FunctionType) and (
            instance_dict is None or name not in instance_dict
        ):
            return self._bind(name, attribute)

        return self._read(name, getattr(node, name))

    def __setattr__(self, name: str, value: Any) -> None:
        if name in _NODE_ATTRIBUTES:
            object.__setattr__(self, name, value)
            return
        if not is_untracked(self._node._value, name):
            self._scope.track(self._node, name)
        setattr(self._node, name, value)

    def __delattr__(self, name: str) -> None:
        delattr(self._node, name)

    def __dir__(self) -> list[str]:
        return dir(self._node)

    def __eq__(self, other: object) -> bool:
        self._read_contents()
        return self._node == other

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._node._value!r})"


class ScopedList(ScopedNode):
    """Tracking view of a ListNode, recording index reads."""

    __slots__ = ()

    def __getitem__(self, index: Any) -> Any:
        if isinstance(index, slice):
            return [self[i] for i in range(*index.indices(len(self._node)))]
        index = self._node._index(index)
        return self._read(index, self._node[index])

    def __setitem__(self, index: Any, value: Any) -> None:
        node = self._node
        if not isinstance(index, slice):
            self._scope.track(node, node._index(index))
        node[index] = value

    def __delitem__(self, index: Any) -> None:
        del self._node[index]

    def __len__(self) -> int:
        return len(self._node)

    def __iter__(self) -> Iterator[Any]:
        for position in range(len(self._node)):
            yield self[position]

    def __reversed__(self) -> Iterator[Any]:
        for position in reversed(range(len(self._node))):
            yield self[position]

    def __contains__(self, value: Any) -> bool:
        self._read_contents()
        return unwrap_value(value) in self._node._value

    def index(self, value: Any, *args: Any) -> int:
        """Return the first index of value, recording every item."""
        self._read_contents()
        return self._node.index(value, *args)

    def count(self, value: Any) -> int:
        """Return the number of occurrences of value, recording every item."""
        self._read_contents()
        return self._node.count(value)


class ScopedDict(ScopedNode):
    """Tracking view of a DictNode, recording key reads."""

    __slots__ = ()

    def __getitem__(self, key: Any) -> Any:
        return self._read(key, self._node[key])

    def get(self, key: Any, default: Any = None) -> Any:
        """Return the child at key, or default if key is missing."""
        if key in self._node:
            return self[key]
        return default

    def __setitem__(self, key: Any, value: Any) -> None:
        self._scope.track(self._node, key)
        self._node[key] = value

    def __delitem__(self, key: Any) -> None:
        del self._node[key]

    def __iter__(self) -> Iterator[Any]:
        return iter(self._node)

    def __len__(self) -> int:
        return len(self._node)

    def __contains__(self, key: Any) -> bool:
        return key in self._node

    def values(self) -> list[Any]:
        """Return the children as views, recording every key."""
        return [self[key] for key in list(self._node)]

    def items(self) -> list[tuple[Any, Any]]:
        """Return (key, child) pairs, children as views, recording every key."""
        return [(key, self[key]) for key in list(self._node)]
