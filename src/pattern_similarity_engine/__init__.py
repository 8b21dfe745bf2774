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
Pattern Similarity Engine - Find duplicated code patterns across projects.

Extracts lexical patterns (functions, components, imports, hooks, classes,
methods) from source files, groups exact and near-duplicates, and caches
whole analyses per owner and project set.

No network access. Everything runs in-process.
"""

__version__ = "0.1.0"

from .cache import AnalysisCache, LRUCache
from .config import EngineConfig, find_config_file, load_config
from .errors import AggregationError, CacheKeyError, PatternEngineError
from .extractor import PatternExtractor, extract_patterns
from .grouper import DuplicateGrouper, find_duplicates
from .hashing import generate_pattern_hash, normalize_content
from .models import (
    AnalysisMetrics,
    AnalysisResult,
    DuplicateGroup,
    Pattern,
    PatternType,
    Project,
    SignalType,
    SimilarityResult,
    SourceFile,
)
from .orchestrator import AnalysisOrchestrator, generate_cache_key
from .similarity import SimilarityScorer, calculate_similarity
from .store import InMemoryResultStore, JsonResultStore, ResultStore

__all__ = [
    "__version__",
    "AnalysisCache",
    "LRUCache",
    "EngineConfig",
    "find_config_file",
    "load_config",
    "AggregationError",
    "CacheKeyError",
    "PatternEngineError",
    "PatternExtractor",
    "extract_patterns",
    "DuplicateGrouper",
    "find_duplicates",
    "generate_pattern_hash",
    "normalize_content",
    "AnalysisMetrics",
    "AnalysisResult",
    "DuplicateGroup",
    "Pattern",
    "PatternType",
    "Project",
    "SignalType",
    "SimilarityResult",
    "SourceFile",
    "AnalysisOrchestrator",
    "generate_cache_key",
    "SimilarityScorer",
    "calculate_similarity",
    "InMemoryResultStore",
    "JsonResultStore",
    "ResultStore",
]
