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
Language detection from file extensions.

Used for the per-language distribution in analysis metrics and to pick
which files a local scan loads.
"""

from pathlib import PurePosixPath
from typing import Optional, Set

UNKNOWN_LANGUAGE = "other"

# Extension to language mapping
EXTENSION_MAP = {
    ".js": "javascript",
    ".mjs": "javascript",
    ".cjs": "javascript",
    ".jsx": "javascript",
    ".ts": "typescript",
    ".tsx": "typescript",
    ".mts": "typescript",
    ".cts": "typescript",
    ".vue": "vue",
    ".svelte": "svelte",
    ".py": "python",
    ".pyw": "python",
    ".go": "go",
    ".java": "java",
    ".kt": "kotlin",
    ".kts": "kotlin",
    ".swift": "swift",
    ".rs": "rust",
    ".c": "c",
    ".h": "c",
    ".cpp": "cpp",
    ".cc": "cpp",
    ".cxx": "cpp",
    ".hpp": "cpp",
    ".cs": "csharp",
    ".php": "php",
    ".rb": "ruby",
    ".scala": "scala",
    ".dart": "dart",
    ".html": "html",
    ".css": "css",
    ".scss": "scss",
    ".json": "json",
    ".md": "markdown",
}


def file_extension(file_path: str) -> str:
    """Lowercased extension without the dot ("" if none)."""
    return PurePosixPath(file_path.replace("\\", "/")).suffix.lower().lstrip(".")


def detect_language(file_path: str) -> Optional[str]:
    """Detect language from file extension."""
    ext = PurePosixPath(file_path.replace("\\", "/")).suffix.lower()
    return EXTENSION_MAP.get(ext)


def language_or_unknown(file_path: str) -> str:
    return detect_language(file_path) or UNKNOWN_LANGUAGE


def supported_extensions() -> Set[str]:
    """All file extensions a local scan picks up."""
    return set(EXTENSION_MAP)
