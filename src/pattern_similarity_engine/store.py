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
Result stores - where finished analyses are handed off.

The orchestrator calls save() on a background worker and never waits
for it. JsonResultStore keeps one JSON file per owner under
.pse_cache/results/ for easy inspection.
"""

import json
import re
import threading
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, Optional

from .cache import CACHE_DIR
from .models import AnalysisResult


RESULTS_DIR = "results"

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]")


class ResultStore(ABC):
    """Receives (owner_id, result) after each computed analysis."""

    @abstractmethod
    def save(self, owner_id: str, result: AnalysisResult) -> None:
        """Persist the latest result for an owner."""
        pass


class InMemoryResultStore(ResultStore):
    """Keeps the latest result per owner in a dict."""

    def __init__(self):
        self._results: Dict[str, AnalysisResult] = {}
        self._lock = threading.Lock()

    def save(self, owner_id: str, result: AnalysisResult) -> None:
        with self._lock:
            self._results[owner_id] = result

    def get(self, owner_id: str) -> Optional[AnalysisResult]:
        with self._lock:
            return self._results.get(owner_id)

    def __len__(self) -> int:
        with self._lock:
            return len(self._results)


class JsonResultStore(ResultStore):
    """
    Writes each owner's latest result as JSON.

    Args:
        root: Directory holding the cache folder (default: cwd)
    """

    def __init__(self, root: Optional[Path] = None):
        self.directory = (root or Path.cwd()) / CACHE_DIR / RESULTS_DIR

    def path_for(self, owner_id: str) -> Path:
        """Get path to an owner's result file."""
        return self.directory / f"{_UNSAFE_CHARS.sub('_', owner_id)}.json"

    def save(self, owner_id: str, result: AnalysisResult) -> None:
        """
        Save result to disk atomically.

        Writes to a temp file then renames for crash safety.
        """
        self.directory.mkdir(parents=True, exist_ok=True)
        result_path = self.path_for(owner_id)
        temp_path = result_path.with_suffix(".tmp")

        data = {"ownerId": owner_id, **result.to_dict()}

        with open(temp_path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2)

        temp_path.replace(result_path)

    def load(self, owner_id: str) -> Optional[Dict[str, Any]]:
        """
        Load an owner's saved result as plain JSON data.

        Returns None if nothing was saved or the file is invalid.
        """
        result_path = self.path_for(owner_id)
        if not result_path.exists():
            return None

        try:
            with open(result_path, "r", encoding="utf-8") as f:
                return json.load(f)
        except (OSError, json.JSONDecodeError):
            # Invalid result file - treat as missing
            return None
