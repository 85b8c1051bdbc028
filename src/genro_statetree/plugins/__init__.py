# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""Plugins hooking into a StateTree via ``StateTree.use``."""

from .base import Plugin, Storage
from .logger import LoggerPlugin

__all__ = ["Plugin", "Storage", "LoggerPlugin"]
