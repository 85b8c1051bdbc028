# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""StateTree exceptions."""

from __future__ import annotations


class StateTreeError(Exception):
    """Base exception for StateTree errors."""

    pass


class NotANodeError(StateTreeError):
    """Raised when an operation targets a value not bound to a state tree."""

    def __init__(self, message: str = "Object not bound to a state tree") -> None:
        super().__init__(message)


class DetachedNodeError(StateTreeError):
    """Raised when a mutation is attempted through a detached node."""

    def __init__(self, message: str = "Mutation attempt on a detached node") -> None:
        super().__init__(message)


class InvalidArgumentError(StateTreeError, TypeError):
    """Raised when a path comparison receives neither a Path nor a node."""

    pass


class ValueAlreadyBoundError(StateTreeError):
    """Raised when a value is bound twice within the same dict node."""

    pass
