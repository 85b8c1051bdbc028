# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""Dependency tracking for StateTree subscribers."""

from .scope import Scope
from .store import ScopedStore
from .views import ScopedDict, ScopedList, ScopedNode

__all__ = ["Scope", "ScopedStore", "ScopedNode", "ScopedList", "ScopedDict"]
