# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""ListNode - interception strategy for lists.

Links of list children are their int indices. Operations that shift
positions (delete, pop, insert, reverse, sort, splice, ...) re-link every
materialized child from the first shifted index, so that lookups through
stale nodes keep resolving to the right position.

Operation tags committed by each method:

    ==================  ===========  =====================
    method              operation    props
    ==================  ===========  =====================
    node[i] = x         set          (i,)
    del node[i]         delete       (i,)
    remove(x)           delete       (i,)
    append / extend     push         ()
    pop()               pop          (last,)
    pop(0) / shift()    shift        (0,)
    pop(i)              splice       (i,)
    insert(0, x)        unshift      ()
    unshift(*x)         unshift      ()
    insert(i, x)        splice       ()
    splice(i, n, *x)    splice       (i, ..., i + n - 1)
    reverse()           reverse      ()
    sort()              sort         ()
    clear()             clear        ()
    ==================  ===========  =====================
"""

from __future__ import annotations

from operator import index as as_index
from typing import Any, Callable, Iterable, Iterator

from ..subscription import MutationMetadata
from .base import TreeNode, _MISSING, unwrap_value


class ListNode(TreeNode):
    """Node wrapping a list.

    Example:
        >>> tree = StateTree([{'text': 'a'}, {'text': 'b'}])
        >>> first = tree.state[0]
        >>> tree.state.reverse()
        >>> tree.state[1] is first
        True
        >>> tree.get_link_for(first)
        1
    """

    __slots__ = ()

    @classmethod
    def accepts(cls, value: Any) -> bool:
        return isinstance(value, list)

    def _get_link(self, target: Any, link: Any, default: Any = _MISSING) -> Any:
        if isinstance(link, int) and 0 <= link < len(target):
            return target[link]
        return default

    def _assign(self, target: Any, link: Any, value: Any) -> None:
        target[link] = value

    def _remove(self, target: Any, link: Any) -> None:
        del target[link]

    def _missing(self, link: Any) -> Exception:
        return IndexError("list index out of range")

    @classmethod
    def _links(cls, value: Any) -> list[Any]:
        return list(range(len(value)))

    @classmethod
    def _child_values(cls, value: Any) -> Iterable[Any]:
        return value

    def _index(self, index: Any, message: str = "list index out of range") -> int:
        """Normalize index to a non negative position within the list."""
        index = as_index(index)
        size = len(self._value)
        if index < 0:
            index += size
        if not 0 <= index < size:
            raise IndexError(message)
        return index

    def _relink(self, start: int = 0) -> None:
        """Re-link materialized children from position start onwards."""
        tree = self._tree
        target = self._value
        for position in range(start, len(target)):
            child = tree.get_node_for(target[position])
            if child is not None:
                tree.attach_node(child, position)

    def _commit(self, operation: str, edit: Callable[[list], Any]) -> None:
        """Commit a structural edit affecting the whole list."""
        def mutation(target: list, node: TreeNode) -> MutationMetadata:
            edit(target)
            node._relink()
            return MutationMetadata(operation)

        self._tree.mutate(self, mutation)

    # ==================== Item access ====================

    def __getitem__(self, index: Any) -> Any:
        if isinstance(index, slice):
            return [self[i] for i in range(*index.indices(len(self._value)))]
        index = self._index(index)
        return self._wrap(index, self._value[index])

    def __setitem__(self, index: Any, value: Any) -> None:
        if isinstance(index, slice):
            raise TypeError("list nodes do not support slice assignment, use splice()")
        self._set_child(self._index(index), value)

    def __delitem__(self, index: Any) -> None:
        if isinstance(index, slice):
            start, stop, step = index.indices(len(self._value))
            if step != 1:
                raise TypeError("list nodes only support contiguous slice deletion")
            self.splice(start, max(0, stop - start))
            return
        self._delete_child(index)

    def _delete_child(self, link: Any) -> None:
        self._remove_at(self._index(link), 'delete')

    def _remove_at(self, index: int, operation: str) -> Any:
        child = self._value[index]

        def mutation(target: list, node: TreeNode) -> MutationMetadata:
            del target[index]
            node._forget(child)
            node._relink(index)
            return MutationMetadata(operation, (index,))

        self._tree.mutate(self, mutation)
        return child

    def __len__(self) -> int:
        return len(self._value)

    def __iter__(self) -> Iterator[Any]:
        for position in range(len(self._value)):
            yield self[position]

    def __reversed__(self) -> Iterator[Any]:
        for position in reversed(range(len(self._value))):
            yield self[position]

    def __contains__(self, value: Any) -> bool:
        return unwrap_value(value) in self._value

    def index(self, value: Any, *args: Any) -> int:
        """Return the first index of value."""
        return self._value.index(unwrap_value(value), *args)

    def count(self, value: Any) -> int:
        """Return the number of occurrences of value."""
        return self._value.count(unwrap_value(value))

    # ==================== Structural operations ====================

    def append(self, item: Any) -> None:
        """Append item to the end of the list."""
        self.extend((item,))

    def extend(self, items: Iterable[Any]) -> None:
        """Append every item of items to the end of the list."""
        values = [unwrap_value(item) for item in items]

        def mutation(target: list, node: TreeNode) -> MutationMetadata:
            target.extend(values)
            return MutationMetadata('push')

        self._tree.mutate(self, mutation)

    def pop(self, index: int = -1) -> Any:
        """Remove and return the raw item at index (default last).

        Raises:
            IndexError: If the list is empty or index is out of range.
        """
        if not self._value:
            raise IndexError("pop from empty list")
        index = self._index(index, "pop index out of range")
        if index == len(self._value) - 1:
            operation = 'pop'
        elif index == 0:
            operation = 'shift'
        else:
            operation = 'splice'
        return self._remove_at(index, operation)

    def shift(self) -> Any:
        """Remove and return the first raw item."""
        return self.pop(0)

    def unshift(self, *items: Any) -> int:
        """Insert items at the front of the list, returning the new length."""
        values = [unwrap_value(item) for item in items]

        def edit(target: list) -> None:
            target[0:0] = values

        self._commit('unshift', edit)
        return len(self._value)

    def insert(self, index: int, item: Any) -> None:
        """Insert item before index, following list.insert bounds."""
        size = len(self._value)
        index = as_index(index)
        if index < 0:
            index = max(0, index + size)
        index = min(index, size)

        if index == 0:
            self.unshift(item)
        elif index == size:
            self.append(item)
        else:
            self.splice(index, 0, item)

    def remove(self, value: Any) -> None:
        """Remove the first occurrence of value.

        Raises:
            ValueError: If value is not present.
        """
        self._remove_at(self.index(value), 'delete')

    def reverse(self) -> None:
        """Reverse the list in place."""
        self._commit('reverse', lambda target: target.reverse())

    def sort(self, *, key: Callable[[Any], Any] | None = None, reverse: bool = False) -> None:
        """Sort the list in place. key receives raw items."""
        self._commit('sort', lambda target: target.sort(key=key, reverse=reverse))

    def splice(self, start: int, delete_count: int | None = None, *items: Any) -> list[Any]:
        """Remove delete_count items from start and insert items there.

        Args:
            start: Position to start at. Negative values count from the end.
            delete_count: Number of items to remove. Defaults to every item
                from start to the end of the list.
            *items: Items to insert at start.

        Returns:
            The list of removed raw items.
        """
        size = len(self._value)
        start = as_index(start)
        start = max(0, start + size) if start < 0 else min(start, size)
        if delete_count is None:
            delete_count = size - start
        delete_count = max(0, min(delete_count, size - start))
        values = [unwrap_value(item) for item in items]
        removed: list[Any] = []

        def mutation(target: list, node: TreeNode) -> MutationMetadata:
            removed.extend(target[start:start + delete_count])
            target[start:start + delete_count] = values
            for child in removed:
                node._forget(child)
            node._relink(start)
            return MutationMetadata('splice', tuple(range(start, start + delete_count)))

        self._tree.mutate(self, mutation)
        return removed

    def clear(self) -> None:
        """Remove every item, detaching them from the tree."""
        children = list(self._value)

        def mutation(target: list, node: TreeNode) -> MutationMetadata:
            target.clear()
            for child in children:
                node._forget(child)
            return MutationMetadata('clear')

        self._tree.mutate(self, mutation)
