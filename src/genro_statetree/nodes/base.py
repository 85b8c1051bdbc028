# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""TreeNode - base interception strategy for StateTree nodes.

A node wraps a raw value living in the tree. Reads go through the node and
return child nodes for nested containers; writes are turned into mutations
committed by the owning tree, which regenerates every node from the root
down to the mutated one and notifies their subscribers.

Each strategy overrides a handful of raw-level hooks (_get_link, _assign,
_remove, _links, _child_values, _missing) describing how its container shape stores
children. Everything else (lazy child materialization, copy-on-write
commits, detaching replaced children) is shared here.

ObjectNode is the fallback strategy: it accepts any value and exposes the
attributes of instances of @proxiable classes.
"""

from __future__ import annotations

from types import FunctionType, MethodType
from typing import Any, Iterable, TYPE_CHECKING

from ..subscription import MutationMetadata, Subscriptions
from .decorators import is_untracked

if TYPE_CHECKING:
    from ..store import StateTree

_MISSING = object()

_NODE_ATTRIBUTES = frozenset(
    ('_tree', '_value', '_subscriptions', '_bindings', '_node', '_scope')
)


class NodeView:
    """Base class for wrappers exposing a node through another layer.

    Subclasses keep the wrapped node in a ``_node`` slot. Values wrapped by
    a view are unwrapped whenever they are written into a tree.
    """

    __slots__ = ()


def as_node(value: Any) -> Any:
    """Return the node behind a NodeView, or value unchanged."""
    if isinstance(value, NodeView):
        return value._node
    return value


def unwrap_value(value: Any) -> Any:
    """Return the raw value behind a node or view, or value unchanged."""
    value = as_node(value)
    if isinstance(value, TreeNode):
        return value._value
    return value


def class_attribute(cls: type, name: str) -> Any:
    """Look name up along the MRO of cls without triggering descriptors."""
    for klass in cls.__mro__:
        if name in klass.__dict__:
            return klass.__dict__[name]
    return _MISSING


def attribute_names(value: Any) -> list[str]:
    """Return the instance attributes of value, from __dict__ and __slots__.

    Slots declared along the MRO are included only when they hold a value.
    """
    names = list(getattr(value, '__dict__', {}))
    for klass in type(value).__mro__:
        slots = klass.__dict__.get('__slots__', ())
        if isinstance(slots, str):
            slots = (slots,)
        for name in slots:
            if name in ('__dict__', '__weakref__'):
                continue
            if name.startswith('__') and not name.endswith('__'):
                name = f"_{klass.__name__.lstrip('_')}{name}"
            if name in names:
                continue
            if hasattr(value, name):
                names.append(name)
    return names


class TreeNode:
    """A node in a StateTree.

    Each node has:
    - _tree: The StateTree owning the node
    - _value: The raw value wrapped by the node
    - _subscriptions: Broadcast channel shared by every node generated
      for the same seed

    Functions defined on the raw value's class are returned bound to the
    node, so that ``self`` inside them reads and writes through the tree.
    Bound methods are cached per node. Properties are evaluated with the
    node as ``self``.
    """

    __slots__ = ('_tree', '_value', '_subscriptions', '_bindings', '__weakref__')

    def __init__(
        self,
        tree: StateTree,
        value: Any,
        subscriptions: Subscriptions | None = None,
    ) -> None:
        """Initialize a TreeNode.

        Args:
            tree: The StateTree owning the node.
            value: The raw value to wrap.
            subscriptions: Broadcast channel to reuse. Clones of a node
                share the channel of the node they regenerate.
        """
        object.__setattr__(self, '_tree', tree)
        object.__setattr__(self, '_value', value)
        object.__setattr__(
            self, '_subscriptions',
            subscriptions if subscriptions is not None else Subscriptions(),
        )
        object.__setattr__(self, '_bindings', {})

    @classmethod
    def accepts(cls, value: Any) -> bool:
        """True if this strategy can wrap value."""
        return True

    # ==================== Raw-level hooks ====================

    def _get_link(self, target: Any, link: Any, default: Any = _MISSING) -> Any:
        return getattr(target, link, default)

    def _assign(self, target: Any, link: Any, value: Any) -> None:
        setattr(target, link, value)

    def _remove(self, target: Any, link: Any) -> None:
        delattr(target, link)

    def _missing(self, link: Any) -> Exception:
        return AttributeError(
            f"'{type(self._value).__name__}' object has no attribute '{link}'"
        )

    @classmethod
    def _links(cls, value: Any) -> list[Any]:
        """Return the links of value, instance attributes and set slots."""
        return attribute_names(value)

    @classmethod
    def _child_values(cls, value: Any) -> Iterable[Any]:
        return [getattr(value, name, None) for name in cls._links(value)]

    # ==================== Tree surface ====================

    def _clone(self) -> TreeNode:
        """Return a new node wrapping the same value and channel."""
        return type(self)(self._tree, self._value, self._subscriptions)

    def _holds(self, link: Any, value: Any) -> bool:
        """True if value is the raw child currently found at link."""
        return self._get_link(self._value, link, _MISSING) is value

    def _wrap(self, link: Any, child: Any) -> Any:
        """Return child as a node if it is a container, else as-is."""
        child = unwrap_value(child)
        if not self._tree.is_proxiable(child):
            return child
        return self._tree.traverse(self, link, child)

    def _get_child_node(self, link: Any) -> TreeNode | None:
        child = self._wrap(link, self._get_link(self._value, link, None))
        return child if isinstance(child, TreeNode) else None

    def _forget(self, child: Any) -> None:
        """Detach child from the tree unless it was re-attached elsewhere."""
        tree = self._tree
        if not tree.is_proxiable(child):
            return
        path = tree.get_path_for(child)
        if path is not None and path.parent != tree.get_path_for(self):
            return
        tree.detach_node_for(child)

    def _bind(self, name: str, function: FunctionType) -> MethodType:
        bound = self._bindings.get(name)
        if bound is None or bound.__func__ is not function:
            bound = MethodType(function, self)
            self._bindings[name] = bound
        return bound

    def _set_child(self, link: Any, new_value: Any) -> None:
        """Commit the assignment of new_value at link.

        Incoming nodes are unwrapped. Assigning the current value is a
        no-op. A replaced container is detached; an incoming node is
        re-attached under link so its stale references keep working.
        """
        value = unwrap_value(new_value)
        target = self._value
        current = self._get_link(target, link, _MISSING)

        if current is value:
            return

        if is_untracked(target, link):
            self._assign(target, link, value)
            return

        incoming = as_node(new_value)
        previously_undefined = current is _MISSING

        def mutation(target: Any, node: TreeNode) -> MutationMetadata:
            node._assign(target, link, value)
            if not previously_undefined:
                node._forget(current)
            if isinstance(incoming, TreeNode):
                node._tree.reattach(node, link, value, incoming)
            return MutationMetadata('set', (link,), previously_undefined)

        self._tree.mutate(self, mutation)

    def _delete_child(self, link: Any) -> None:
        """Commit the removal of the child at link."""
        target = self._value
        child = self._get_link(target, link, _MISSING)
        if child is _MISSING:
            raise self._missing(link)

        if is_untracked(target, link):
            self._remove(target, link)
            return

        def mutation(target: Any, node: TreeNode) -> MutationMetadata:
            node._remove(target, link)
            node._forget(child)
            return MutationMetadata('delete', (link,))

        self._tree.mutate(self, mutation)

    def _merge(self, data: dict[Any, Any]) -> None:
        """Assign every item of data in a single 'merge' mutation."""
        values = {link: unwrap_value(value) for link, value in data.items()}
        target = self._value
        previously_undefined = False
        replaced = []
        for link, value in values.items():
            current = self._get_link(target, link, _MISSING)
            if current is _MISSING:
                previously_undefined = True
            elif current is not value:
                replaced.append(current)

        def mutation(target: Any, node: TreeNode) -> MutationMetadata:
            for link, value in values.items():
                node._assign(target, link, value)
            for child in replaced:
                node._forget(child)
            return MutationMetadata('merge', tuple(values), previously_undefined)

        self._tree.mutate(self, mutation)

    # ==================== Special Methods ====================

    def __getattr__(self, name: str) -> Any:
        """Expose attributes of the raw value through the tree.

        Called only when normal lookup fails, i.e. for names that are not
        part of the node API itself.
        """
        if name.startswith('__') or name in _NODE_ATTRIBUTES:
            raise AttributeError(
                f"'{type(self).__name__}' object has no attribute '{name}'"
            )

        target = self._value
        attribute = class_attribute(type(target), name)
        if isinstance(attribute, property):
            return attribute.__get__(self, type(target))

        instance_dict = getattr(target, '__dict__', None)
        if isinstance(attribute, FunctionType) and (
            instance_dict is None or name not in instance_dict
        ):
            return self._bind(name, attribute)

        child = getattr(target, name, _MISSING)
        if child is _MISSING:
            raise AttributeError(
                f"'{type(target).__name__}' object has no attribute '{name}'"
            )
        if is_untracked(target, name):
            return child
        return self._wrap(name, child)

    def __eq__(self, other: object) -> bool:
        return self._value == unwrap_value(other)

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._value!r})"


class ObjectNode(TreeNode):
    """Fallback strategy: attribute access on instances of @proxiable classes.

    Example:
        >>> tree = StateTree({'todo': Todo('Do the dishes')})
        >>> todo = tree.state['todo']
        >>> todo.done = True   # mutation, todo is now stale
        >>> tree.state['todo'].done
        True
        >>> tree.state['todo'].toggle()   # self.done = ... goes through the tree
    """

    __slots__ = ()

    def __setattr__(self, name: str, value: Any) -> None:
        if name in _NODE_ATTRIBUTES:
            object.__setattr__(self, name, value)
            return

        attribute = class_attribute(type(self._value), name)
        if isinstance(attribute, property):
            if attribute.fset is None:
                raise AttributeError(
                    f"property '{name}' of '{type(self._value).__name__}' "
                    "object has no setter"
                )
            attribute.fset(self, value)
            return

        self._set_child(name, value)

    def __delattr__(self, name: str) -> None:
        if name in _NODE_ATTRIBUTES:
            raise AttributeError(f"cannot delete node attribute '{name}'")

        attribute = class_attribute(type(self._value), name)
        if isinstance(attribute, property):
            if attribute.fdel is None:
                raise AttributeError(
                    f"property '{name}' of '{type(self._value).__name__}' "
                    "object has no deleter"
                )
            attribute.fdel(self)
            return

        self._delete_child(name)

    def __dir__(self) -> list[str]:
        return dir(self._value)
