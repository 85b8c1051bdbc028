# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""DictNode - interception strategy for dicts (associative containers)."""

from __future__ import annotations

from typing import Any, Iterable, Iterator, KeysView

from ..exceptions import ValueAlreadyBoundError
from ..subscription import MutationMetadata
from .base import TreeNode, _MISSING, unwrap_value


class DictNode(TreeNode):
    """Node wrapping a dict.

    Links of dict children are their keys. Reading a key holding a dict,
    a list or a @proxiable object returns its node; writing a key commits a
    'set' mutation flagged ``previously_undefined`` when the key is new.

    A raw container may be bound to one key of a given dict only; binding
    it to a second key raises ValueAlreadyBoundError.

    Example:
        >>> tree = StateTree({'count': 0})
        >>> root = tree.state
        >>> tree.state['count'] += 1
        >>> tree.state['count']
        1
        >>> root is tree.state
        False
    """

    __slots__ = ()

    @classmethod
    def accepts(cls, value: Any) -> bool:
        return isinstance(value, dict)

    def _get_link(self, target: Any, link: Any, default: Any = _MISSING) -> Any:
        return target.get(link, default)

    def _assign(self, target: Any, link: Any, value: Any) -> None:
        target[link] = value

    def _remove(self, target: Any, link: Any) -> None:
        del target[link]

    def _missing(self, link: Any) -> Exception:
        return KeyError(link)

    @classmethod
    def _links(cls, value: Any) -> list[Any]:
        return list(value)

    @classmethod
    def _child_values(cls, value: Any) -> Iterable[Any]:
        return value.values()

    # ==================== Item access ====================

    def __getitem__(self, key: Any) -> Any:
        return self._wrap(key, self._value[key])

    def get(self, key: Any, default: Any = None) -> Any:
        """Return the child at key, or default if key is missing."""
        if key in self._value:
            return self[key]
        return default

    def __setitem__(self, key: Any, value: Any) -> None:
        raw = unwrap_value(value)
        if self._tree.is_proxiable(raw):
            for bound_key, bound in self._value.items():
                if bound is raw and bound_key != key:
                    raise ValueAlreadyBoundError(
                        f"Cannot set value at key {key!r}. "
                        f"Value is already bound to key {bound_key!r}."
                    )
        self._set_child(key, value)

    def __delitem__(self, key: Any) -> None:
        self._delete_child(key)

    def __iter__(self) -> Iterator[Any]:
        return iter(self._value)

    def __len__(self) -> int:
        return len(self._value)

    def __contains__(self, key: Any) -> bool:
        return key in self._value

    def keys(self) -> KeysView[Any]:
        """Return a view of the keys."""
        return self._value.keys()

    def values(self) -> list[Any]:
        """Return the children, containers wrapped as nodes."""
        return [self._wrap(key, value) for key, value in self._value.items()]

    def items(self) -> list[tuple[Any, Any]]:
        """Return (key, child) pairs, containers wrapped as nodes."""
        return [(key, self._wrap(key, value)) for key, value in self._value.items()]

    # ==================== Mutations ====================

    def pop(self, key: Any, default: Any = _MISSING) -> Any:
        """Remove key and return its raw value.

        Raises:
            KeyError: If key is missing and no default is given.
        """
        if key not in self._value:
            if default is _MISSING:
                raise KeyError(key)
            return default
        child = self._value[key]
        self._delete_child(key)
        return child

    def popitem(self) -> tuple[Any, Any]:
        """Remove and return the last inserted (key, raw value) pair."""
        if not self._value:
            raise KeyError('popitem(): dictionary is empty')
        key = next(reversed(self._value))
        return key, self.pop(key)

    def setdefault(self, key: Any, default: Any = None) -> Any:
        """Set key to default if missing, then return the child at key."""
        if key not in self._value:
            self[key] = default
        return self[key]

    def update(self, other: Any = (), /, **kwargs: Any) -> None:
        """Assign every pair of other and kwargs in a single 'merge' mutation."""
        data = dict(other, **kwargs)
        if data:
            self._merge(data)

    def clear(self) -> None:
        """Remove every key, detaching the children from the tree."""
        children = list(self._value.values())

        def mutation(target: dict, node: TreeNode) -> MutationMetadata:
            target.clear()
            for child in children:
                node._forget(child)
            return MutationMetadata('clear')

        self._tree.mutate(self, mutation)
