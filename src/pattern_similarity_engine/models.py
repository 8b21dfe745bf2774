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
Data models for pattern-similarity-engine.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Tuple


class PatternType(str, Enum):
    FUNCTION = "function"
    CLASS = "class"
    IMPORT = "import"
    COMPONENT = "component"
    HOOK = "hook"
    METHOD = "method"
    STRUCTURE = "structure"


class SignalType(str, Enum):
    STRUCTURAL = "structural"
    SEMANTIC = "semantic"
    SYNTACTIC = "syntactic"


@dataclass(frozen=True)
class Pattern:
    """A typed, hashed structural unit extracted from source text."""

    type: PatternType
    name: str
    signature: str           # Matched text, at most 500 chars
    content_hash: str        # SHA-256 of normalized signature ("" if empty)
    complexity: int
    line_count: int
    file_path: str
    start_line: int = 1      # 1-indexed
    snippet: str = ""        # Full matched region used for fuzzy comparison
    project_id: Optional[str] = None

    @property
    def location(self) -> str:
        """Human-readable location string."""
        return f"{self.file_path}:{self.start_line}"

    def preview(self, max_chars: int = 60) -> str:
        """Short preview of the signature."""
        first_line = self.signature.split("\n")[0].strip()
        if len(first_line) > max_chars:
            return first_line[:max_chars - 3] + "..."
        return first_line

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.type.value,
            "name": self.name,
            "signature": self.signature,
            "contentHash": self.content_hash,
            "complexity": self.complexity,
            "lineCount": self.line_count,
            "filePath": self.file_path,
            "startLine": self.start_line,
            "projectId": self.project_id,
        }


@dataclass(frozen=True)
class SimilarityResult:
    """Outcome of comparing two text blobs."""

    score: float
    signal_type: SignalType
    contributing_patterns: Tuple[str, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "score": self.score,
            "signalType": self.signal_type.value,
            "contributingPatterns": list(self.contributing_patterns),
        }


@dataclass(frozen=True)
class DuplicateGroup:
    """A cluster of two or more patterns of the same type."""

    id: str
    pattern_type: PatternType
    patterns: Tuple[Pattern, ...]
    similarity_score: float
    description: str
    similarity: Optional[SimilarityResult] = None

    def __post_init__(self):
        if len(self.patterns) < 2:
            raise ValueError(f"Duplicate group {self.id} needs at least 2 patterns")
        if any(p.type != self.pattern_type for p in self.patterns):
            raise ValueError(f"Duplicate group {self.id} mixes pattern types")

    @property
    def size(self) -> int:
        """Number of patterns in this group."""
        return len(self.patterns)

    @property
    def is_exact(self) -> bool:
        return self.similarity_score >= 1.0

    @property
    def files(self) -> Tuple[str, ...]:
        """Unique files in this group, in first-seen order."""
        return tuple(dict.fromkeys(p.file_path for p in self.patterns))

    @property
    def file_count(self) -> int:
        return len(self.files)

    @property
    def representative(self) -> Pattern:
        return self.patterns[0]

    def total_lines(self) -> int:
        """Total lines of duplicated code."""
        return sum(p.line_count for p in self.patterns)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "patternType": self.pattern_type.value,
            "patterns": [p.to_dict() for p in self.patterns],
            "similarityScore": self.similarity_score,
            "description": self.description,
            "similarity": self.similarity.to_dict() if self.similarity else None,
        }


@dataclass(frozen=True)
class AnalysisMetrics:
    """Aggregate counters for one analysis run."""

    files_analyzed: int = 0
    files_skipped: int = 0
    patterns_found: int = 0
    duplicates_detected: int = 0
    languages: Mapping[str, int] = field(default_factory=dict)
    pattern_types: Mapping[str, int] = field(default_factory=dict)
    batches_processed: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "filesAnalyzed": self.files_analyzed,
            "filesSkipped": self.files_skipped,
            "patternsFound": self.patterns_found,
            "duplicatesDetected": self.duplicates_detected,
            "languages": dict(self.languages),
            "patternTypes": dict(self.pattern_types),
            "batchesProcessed": self.batches_processed,
        }


@dataclass(frozen=True)
class AnalysisResult:
    """Terminal artifact of analyze_projects; immutable after return."""

    duplicate_groups: Tuple[DuplicateGroup, ...]
    metrics: AnalysisMetrics
    processing_time_ms: float
    cache_key: str = ""

    @property
    def files_analyzed(self) -> int:
        return self.metrics.files_analyzed

    @property
    def patterns_found(self) -> int:
        return self.metrics.patterns_found

    @property
    def duplicates_detected(self) -> int:
        return self.metrics.duplicates_detected

    @property
    def languages(self) -> Mapping[str, int]:
        return self.metrics.languages

    def to_dict(self) -> Dict[str, Any]:
        return {
            "duplicateGroups": [g.to_dict() for g in self.duplicate_groups],
            "metrics": self.metrics.to_dict(),
            "processingTimeMs": self.processing_time_ms,
            "cacheKey": self.cache_key,
        }


@dataclass(frozen=True)
class SourceFile:
    """One file supplied by the project provider."""

    path: str
    content: str = ""


@dataclass(frozen=True)
class Project:
    """A project snapshot: id, last update marker and its files."""

    project_id: str
    last_updated: str
    files: Tuple[SourceFile, ...] = ()
