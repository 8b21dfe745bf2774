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
File screening and local project loading.

Decides which supplied files are worth extracting (not empty, not too
large, not binary, not a build artifact) and turns a directory on disk
into a Project snapshot for local runs.
"""

import fnmatch
import logging
from datetime import datetime, timezone
from pathlib import Path, PurePosixPath
from typing import List, Optional, Tuple

from .languages import supported_extensions
from .models import Project, SourceFile

logger = logging.getLogger(__name__)

# Directories whose contents are generated or vendored
ARTIFACT_DIRS = frozenset({
    ".git",
    "node_modules",
    "__pycache__",
    "dist",
    "build",
    "out",
    ".next",
    ".nuxt",
    ".cache",
    "coverage",
    "vendor",
    "venv",
    ".venv",
    ".tox",
    "target",
    ".pse_cache",
})

# File names that are generated even outside artifact directories
ARTIFACT_FILES = [
    "*.min.js",
    "*.min.css",
    "*.map",
    "*.bundle.js",
    "*.chunk.js",
    "*.pyc",
    "package-lock.json",
    "yarn.lock",
    "pnpm-lock.yaml",
]

BINARY_SAMPLE_CHARS = 8192
MAX_NON_PRINTABLE_RATIO = 0.3
_ALLOWED_CONTROL = frozenset("\n\r\t\f\v")


def is_build_artifact(file_path: str) -> bool:
    """True for paths inside artifact directories or matching artifact names."""
    path = PurePosixPath(file_path.replace("\\", "/"))
    if any(part in ARTIFACT_DIRS for part in path.parts[:-1]):
        return True
    return any(fnmatch.fnmatch(path.name, pat) for pat in ARTIFACT_FILES)


def is_binary_content(content: str) -> bool:
    """
    Heuristic binary check on the first few KB.

    Binary if the sample holds a NUL character or more than 30% of it
    is non-printable.
    """
    sample = content[:BINARY_SAMPLE_CHARS]
    if not sample:
        return False
    if "\x00" in sample:
        return True

    non_printable = sum(
        1 for ch in sample if not ch.isprintable() and ch not in _ALLOWED_CONTROL
    )
    return non_printable / len(sample) > MAX_NON_PRINTABLE_RATIO


def skip_reason(source: SourceFile, max_file_size: int) -> Optional[str]:
    """
    Why a file should not be extracted, or None to keep it.

    Returns one of "empty", "too_large", "build_artifact", "binary".
    """
    content = source.content or ""
    if not content.strip():
        return "empty"
    if len(content) > max_file_size:
        return "too_large"
    if is_build_artifact(source.path):
        return "build_artifact"
    if is_binary_content(content):
        return "binary"
    return None


def load_project(
    root_path: Path,
    project_id: Optional[str] = None,
    exclude_patterns: Optional[List[str]] = None,
) -> Project:
    """
    Read a directory into a Project snapshot.

    Args:
        root_path: Directory to scan
        project_id: Identifier (defaults to the directory name)
        exclude_patterns: Extra glob patterns to leave out

    Returns:
        Project whose last_updated is the newest file mtime (ISO 8601)
    """
    root_path = root_path.resolve()
    files, newest = _read_source_files(root_path, exclude_patterns or [])

    last_updated = datetime.fromtimestamp(newest, tz=timezone.utc).isoformat()
    return Project(
        project_id=project_id or root_path.name,
        last_updated=last_updated,
        files=tuple(files),
    )


def _read_source_files(
    root_path: Path,
    exclude_patterns: List[str],
) -> Tuple[List[SourceFile], float]:
    """Find and read all source files matching criteria."""
    extensions = supported_extensions()
    files: List[SourceFile] = []
    newest = 0.0

    for file_path in sorted(root_path.rglob("*")):
        if not file_path.is_file():
            continue
        if file_path.suffix.lower() not in extensions:
            continue

        rel_path = file_path.relative_to(root_path).as_posix()
        if is_build_artifact(rel_path):
            continue
        if any(fnmatch.fnmatch(rel_path, pat) for pat in exclude_patterns):
            continue

        try:
            content = file_path.read_text(encoding="utf-8", errors="replace")
            newest = max(newest, file_path.stat().st_mtime)
        except OSError as e:
            logger.warning("Could not read %s: %s", file_path, e)
            continue

        files.append(SourceFile(path=rel_path, content=content))

    return files, newest
