# Pattern Similarity Engine - Find duplicated code patterns across projects
# Copyright (C) 2025  Jonathan Louis
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU General Public License for more details.
#
# You should have received a copy of the GNU General Public License
# along with this program.  If not, see <https://www.gnu.org/licenses/>.

"""
Error types that abort a whole analysis call.

Per-file and per-pair problems never raise; they are logged and the
item is skipped.
"""

from typing import Any, Dict, Optional


class PatternEngineError(Exception):
    """Base exception for pattern-similarity-engine."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class CacheKeyError(PatternEngineError):
    """Raised when the project-set cache key cannot be derived."""


class AggregationError(PatternEngineError):
    """Raised when batch results cannot be merged into one result."""
