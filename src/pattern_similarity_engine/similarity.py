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
Similarity scorer - compares two text blobs.

Signals are computed cheapest first with early exits:

1. Length ratio guard (wildly different sizes score 0)
2. Structural: normalized hash equality (1.0, short-circuits)
3. Semantic: line-level diff ratio over the first 5000 chars
4. Syntactic: Jaccard overlap of token sets

The composite is 0.5 * structural + 0.3 * semantic + 0.2 * syntactic.
All functions here are pure and safe to call from many threads.
"""

import difflib
import logging
import re
from typing import List, Set

from .hashing import generate_pattern_hash, normalize_content
from .models import SignalType, SimilarityResult

logger = logging.getLogger(__name__)

_PUNCTUATION = re.compile(r"[^\w\s]")
_FUNCTION_NAMES = re.compile(r"function\s+\w+")
_IMPORT_SOURCES = re.compile(r"from\s+['\"][^'\"]+['\"]")


class SimilarityScorer:
    """
    Composite similarity scorer.

    Args:
        structural_weight: Weight of the hash-equality signal
        semantic_weight: Weight of the line-diff signal
        syntactic_weight: Weight of the token-overlap signal
        min_length_ratio: Shorter/longer length ratio below which the score is 0
        min_semantic: Semantic score below which the syntactic signal is skipped
        signal_threshold: A signal above this names the result's signal type
        max_diff_chars: Characters of each text fed to the line diff
        max_tokens: Tokens kept per text for the Jaccard signal
        max_edit_chars: Characters of each text fed to the edit distance
        max_common_patterns: Cap on reported contributing patterns
    """

    def __init__(
        self,
        structural_weight: float = 0.5,
        semantic_weight: float = 0.3,
        syntactic_weight: float = 0.2,
        min_length_ratio: float = 0.3,
        min_semantic: float = 0.3,
        signal_threshold: float = 0.8,
        max_diff_chars: int = 5000,
        max_tokens: int = 1000,
        max_edit_chars: int = 2000,
        max_common_patterns: int = 10,
    ):
        self.structural_weight = structural_weight
        self.semantic_weight = semantic_weight
        self.syntactic_weight = syntactic_weight
        self.min_length_ratio = min_length_ratio
        self.min_semantic = min_semantic
        self.signal_threshold = signal_threshold
        self.max_diff_chars = max_diff_chars
        self.max_tokens = max_tokens
        self.max_edit_chars = max_edit_chars
        self.max_common_patterns = max_common_patterns

    def calculate_similarity(self, text_a: str, text_b: str) -> SimilarityResult:
        """Score two texts; never raises."""
        if not text_a or not text_b:
            return SimilarityResult(0.0, SignalType.STRUCTURAL)

        # Quick length-based filter
        length_ratio = min(len(text_a), len(text_b)) / max(len(text_a), len(text_b))
        if length_ratio < self.min_length_ratio:
            return SimilarityResult(0.0, SignalType.STRUCTURAL)

        hash_a = generate_pattern_hash(text_a, max_length=None)
        hash_b = generate_pattern_hash(text_b, max_length=None)
        if hash_a == hash_b:
            return SimilarityResult(1.0, SignalType.STRUCTURAL, ("identical_hash",))
        structural = 0.0

        semantic = self._semantic_similarity(text_a, text_b)
        if semantic < self.min_semantic:
            return SimilarityResult(round(semantic, 3), SignalType.SEMANTIC)

        syntactic = self._syntactic_similarity(text_a, text_b)

        score = (
            structural * self.structural_weight
            + semantic * self.semantic_weight
            + syntactic * self.syntactic_weight
        )

        if structural > self.signal_threshold:
            signal_type = SignalType.STRUCTURAL
        elif semantic > self.signal_threshold:
            signal_type = SignalType.SEMANTIC
        else:
            signal_type = SignalType.SYNTACTIC

        return SimilarityResult(
            score=round(score, 3),
            signal_type=signal_type,
            contributing_patterns=tuple(self._common_patterns(text_a, text_b)),
        )

    def edit_similarity(self, text_a: str, text_b: str) -> float:
        """
        Levenshtein ratio of the normalized texts.

        Returns (len(longer) - distance) / len(longer); 1.0 when both
        normalize to nothing.
        """
        a = normalize_content(text_a)[:self.max_edit_chars]
        b = normalize_content(text_b)[:self.max_edit_chars]
        longest = max(len(a), len(b))
        if longest == 0:
            return 1.0
        return (longest - levenshtein_distance(a, b)) / longest

    def _semantic_similarity(self, text_a: str, text_b: str) -> float:
        try:
            chunk_a = text_a[:self.max_diff_chars]
            chunk_b = text_b[:self.max_diff_chars]
            # Fixed operand order keeps the score symmetric
            if chunk_b < chunk_a:
                chunk_a, chunk_b = chunk_b, chunk_a

            lines_a = chunk_a.split("\n")
            lines_b = chunk_b.split("\n")
            total_lines = max(len(lines_a), len(lines_b))
            if total_lines == 0:
                return 0.0

            matcher = difflib.SequenceMatcher(None, lines_a, lines_b, autojunk=False)
            matched = sum(block.size for block in matcher.get_matching_blocks())
            changed_lines = total_lines - matched
            return max(0.0, 1 - changed_lines / total_lines)
        except Exception as e:
            logger.warning("Error in semantic similarity calculation: %s", e)
            return 0.0

    def _syntactic_similarity(self, text_a: str, text_b: str) -> float:
        try:
            return jaccard_similarity(
                self._tokenize(text_a), self._tokenize(text_b)
            )
        except Exception as e:
            logger.warning("Error in syntactic similarity calculation: %s", e)
            return 0.0

    def _tokenize(self, content: str) -> Set[str]:
        words = [
            token.lower()
            for token in _PUNCTUATION.sub(" ", content).split()
            if 2 < len(token) < 50
        ]
        return set(words[:self.max_tokens])

    def _common_patterns(self, text_a: str, text_b: str) -> List[str]:
        try:
            common: List[str] = []
            for regex in (_FUNCTION_NAMES, _IMPORT_SOURCES):
                found_a = regex.findall(text_a)[:20]
                found_b = set(regex.findall(text_b)[:20])
                common.extend(item for item in found_a if item in found_b)
            return list(dict.fromkeys(common))[:self.max_common_patterns]
        except Exception as e:
            logger.warning("Error finding common patterns: %s", e)
            return []


def jaccard_similarity(set_a: Set[str], set_b: Set[str]) -> float:
    """|A ∩ B| / |A ∪ B|; two empty sets are identical."""
    if not set_a and not set_b:
        return 1.0
    if not set_a or not set_b:
        return 0.0
    return len(set_a & set_b) / len(set_a | set_b)


def levenshtein_distance(a: str, b: str) -> int:
    """Edit distance with a two-row dynamic programming table."""
    if len(a) < len(b):
        a, b = b, a
    if not b:
        return len(a)

    previous = list(range(len(b) + 1))
    for i, char_a in enumerate(a, start=1):
        current = [i]
        for j, char_b in enumerate(b, start=1):
            current.append(min(
                previous[j] + 1,
                current[j - 1] + 1,
                previous[j - 1] + (char_a != char_b),
            ))
        previous = current
    return previous[-1]


_default_scorer = SimilarityScorer()


def calculate_similarity(text_a: str, text_b: str) -> SimilarityResult:
    """Score two texts with the default weights and limits."""
    return _default_scorer.calculate_similarity(text_a, text_b)


def edit_similarity(text_a: str, text_b: str) -> float:
    """Levenshtein ratio with the default limits."""
    return _default_scorer.edit_similarity(text_a, text_b)
