# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""Subscription and notification system for StateTree.

Every node owns a broadcast channel (Subscriptions) shared by all the
wrappers generated for the same seed. When a mutation is committed, every
node on the mutation path, root included, is notified with a MutationEvent.

Subscribers are plain callables receiving the event. They run synchronously,
in subscription order, after the new root is installed. A failing subscriber
is logged and does not prevent the others from running.

Example:
    >>> def on_change(event):
    ...     print(event.metadata.operation, event.metadata.props)
    >>> unsubscribe = tree.subscribe(on_change)
    >>> tree.state['count'] = 1
    set ('count',)
    >>> unsubscribe()
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from itertools import count
from typing import Any, Callable, Iterator, TYPE_CHECKING

if TYPE_CHECKING:
    from .path import Path

logger = logging.getLogger(__name__)

Unsubscribe = Callable[[], None]


@dataclass(frozen=True)
class MutationMetadata:
    """Describes what changed at the node targeted by a mutation.

    Attributes:
        operation: Operation tag, e.g. 'set', 'delete', 'push', 'splice'.
        props: Links of the target node affected by the mutation. An empty
            tuple means the whole node is affected.
        previously_undefined: True when a 'set' introduced a new link.
    """

    operation: str
    props: tuple[Any, ...] = ()
    previously_undefined: bool = False


@dataclass(frozen=True)
class MutationEvent:
    """Event delivered to subscribers after a mutation is committed."""

    state: Any
    mutation_path: Path
    metadata: MutationMetadata


Subscriber = Callable[[MutationEvent], Any]


class Subscriptions:
    """Broadcast channel of a node."""

    __slots__ = ('_subscribers', '_ids')

    def __init__(self) -> None:
        self._subscribers: dict[int, Subscriber] = {}
        self._ids: Iterator[int] = count()

    def subscribe(self, subscriber: Subscriber) -> Unsubscribe:
        """Register subscriber, returning an idempotent unsubscribe function."""
        subscriber_id = next(self._ids)
        self._subscribers[subscriber_id] = subscriber

        def unsubscribe() -> None:
            self._subscribers.pop(subscriber_id, None)

        return unsubscribe

    def notify(self, event: MutationEvent) -> None:
        """Deliver event to every subscriber in subscription order."""
        for subscriber in list(self._subscribers.values()):
            try:
                subscriber(event)
            except Exception:
                logger.exception(
                    "Subscriber %r failed handling '%s' at %r",
                    subscriber, event.metadata.operation, event.mutation_path,
                )

    def reset(self) -> None:
        """Drop every subscriber."""
        self._subscribers.clear()

    def __len__(self) -> int:
        return len(self._subscribers)


def notify(event: MutationEvent) -> None:
    """Notify every node on the mutation path, from the root down.

    Args:
        event: The committed mutation. ``event.state`` is the new root.
    """
    def _notify_node(node: Any, _: Any) -> Any:
        node._subscriptions.notify(event)
        return node

    event.mutation_path.walk(event.state, _notify_node)
