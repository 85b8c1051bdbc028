# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""LoggerPlugin - log every mutation of a StateTree."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from ..subscription import MutationEvent, Unsubscribe
from .base import Plugin

if TYPE_CHECKING:
    from ..store import StateTree

logger = logging.getLogger(__name__)


class LoggerPlugin(Plugin):
    """Log mutations at INFO level, tagged with the tree they come from.

    The current value of every mutated prop is logged at DEBUG level.

    Example:
        >>> logging.basicConfig(level=logging.INFO)
        >>> await tree.use(LoggerPlugin('todos'))
        >>> tree.state['todos'].append({'text': 'Walk the dog'})
        INFO:genro_statetree.plugins.logger:todos PUSH Path(/1) props=()
    """

    def __init__(self, tag: str) -> None:
        self.tag = tag

    async def configure(self, store: StateTree) -> Unsubscribe:
        return store.subscribe(self.log)

    def log(self, event: MutationEvent) -> None:
        """Log a single mutation event."""
        metadata = event.metadata
        logger.info(
            "%s %s %r props=%r",
            self.tag, metadata.operation.upper(), event.mutation_path, metadata.props,
        )
        if not logger.isEnabledFor(logging.DEBUG):
            return

        node = event.mutation_path.walk(event.state)
        if node is None:
            return
        for prop in metadata.props:
            value = node._get_link(node._value, prop, None)
            logger.debug("%s   %r = %r", self.tag, prop, value)
