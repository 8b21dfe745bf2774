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
Duplicate grouper - clusters extracted patterns.

Exact duplicates come from hash buckets. Near-duplicates come from a
bounded pairwise comparison of function snippets: all pairs for small
candidate sets, a strided sample of pairs for large ones.
"""

import logging
from collections import defaultdict
from itertools import combinations
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from .models import DuplicateGroup, Pattern, PatternType, SignalType, SimilarityResult
from .similarity import SimilarityScorer

logger = logging.getLogger(__name__)

DEFAULT_THRESHOLD = 0.7


class DuplicateGrouper:
    """
    Groups patterns into exact and fuzzy duplicate groups.

    Args:
        threshold: Minimum fuzzy pair score (exclusive of exact 1.0)
        scorer: Similarity scorer used for pair comparison
        fuzzy_types: Pattern types eligible for fuzzy comparison
        min_snippet_length: Shortest snippet compared fuzzily
        max_snippet_length: Longest snippet compared fuzzily
        exhaustive_limit: Candidate count up to which every pair is compared
        max_sampled_pairs: Pair budget once candidates exceed exhaustive_limit
        max_size_difference: Skip pairs whose lengths differ by more than
            this fraction of the longer snippet
    """

    def __init__(
        self,
        threshold: float = DEFAULT_THRESHOLD,
        scorer: Optional[SimilarityScorer] = None,
        fuzzy_types: Iterable[PatternType] = (PatternType.FUNCTION,),
        min_snippet_length: int = 50,
        max_snippet_length: int = 1000,
        exhaustive_limit: int = 10,
        max_sampled_pairs: int = 20,
        max_size_difference: float = 0.5,
    ):
        self.threshold = threshold
        self.scorer = scorer or SimilarityScorer()
        self.fuzzy_types = frozenset(fuzzy_types)
        self.min_snippet_length = min_snippet_length
        self.max_snippet_length = max_snippet_length
        self.exhaustive_limit = exhaustive_limit
        self.max_sampled_pairs = max_sampled_pairs
        self.max_size_difference = max_size_difference

    def find_duplicates(self, patterns: Sequence[Pattern]) -> List[DuplicateGroup]:
        """
        Find exact and fuzzy duplicate groups.

        Args:
            patterns: Extracted patterns (not modified)

        Returns:
            List of DuplicateGroup objects, most similar first
        """
        groups = self._exact_groups(patterns) + self._fuzzy_groups(patterns)
        groups.sort(key=lambda g: (-g.similarity_score, g.id))
        return groups

    def _exact_groups(self, patterns: Sequence[Pattern]) -> List[DuplicateGroup]:
        buckets: Dict[Tuple[PatternType, str], List[Pattern]] = defaultdict(list)
        for pattern in patterns:
            # Empty content hashes to "" and never counts as a duplicate
            if not pattern.content_hash:
                continue
            buckets[(pattern.type, pattern.content_hash)].append(pattern)

        groups = []
        for (pattern_type, content_hash), members in buckets.items():
            if len(members) < 2:
                continue
            groups.append(DuplicateGroup(
                id=f"exact-{pattern_type.value}-{content_hash[:12]}",
                pattern_type=pattern_type,
                patterns=tuple(members),
                similarity_score=1.0,
                description=f"{len(members)} identical {pattern_type.value} patterns found",
                similarity=SimilarityResult(1.0, SignalType.STRUCTURAL, ("identical_hash",)),
            ))
        return groups

    def _fuzzy_groups(self, patterns: Sequence[Pattern]) -> List[DuplicateGroup]:
        # One representative per distinct hash; exact copies are already grouped
        candidates: Dict[PatternType, Dict[str, Pattern]] = defaultdict(dict)
        for pattern in patterns:
            if pattern.type not in self.fuzzy_types or not pattern.content_hash:
                continue
            if not self.min_snippet_length <= len(pattern.snippet) <= self.max_snippet_length:
                continue
            candidates[pattern.type].setdefault(pattern.content_hash, pattern)

        groups = []
        for pattern_type, by_hash in candidates.items():
            members = list(by_hash.values())
            pairs = strided_pairs(len(members), self.exhaustive_limit, self.max_sampled_pairs)
            logger.debug(
                "Comparing %d %s pairs among %d candidates",
                len(pairs), pattern_type.value, len(members),
            )
            for i, j in pairs:
                group = self._compare_pair(pattern_type, members[i], members[j])
                if group is not None:
                    groups.append(group)
        return groups

    def _compare_pair(
        self,
        pattern_type: PatternType,
        first: Pattern,
        second: Pattern,
    ) -> Optional[DuplicateGroup]:
        longer = max(len(first.snippet), len(second.snippet))
        if abs(len(first.snippet) - len(second.snippet)) > longer * self.max_size_difference:
            return None

        try:
            score = round(self.scorer.edit_similarity(first.snippet, second.snippet), 3)
        except Exception as e:
            logger.warning(
                "Similarity failed for %s vs %s: %s", first.location, second.location, e
            )
            return None

        if not self.threshold <= score < 1.0:
            return None

        percent = round(score * 100)
        return DuplicateGroup(
            id=f"fuzzy-{first.content_hash[:8]}-{second.content_hash[:8]}",
            pattern_type=pattern_type,
            patterns=(first, second),
            similarity_score=score,
            description=f"Similar {pattern_type.value} patterns with {percent}% similarity",
            similarity=self.scorer.calculate_similarity(first.snippet, second.snippet),
        )


def strided_pairs(
    count: int,
    exhaustive_limit: int = 10,
    max_pairs: int = 20,
) -> List[Tuple[int, int]]:
    """
    Index pairs (i < j) to compare among `count` candidates.

    Every pair when count <= exhaustive_limit; otherwise every k-th pair
    in row-major order, with k chosen so at most max_pairs come back.
    """
    if count < 2:
        return []
    if count <= exhaustive_limit:
        return list(combinations(range(count), 2))

    total = count * (count - 1) // 2
    stride = -(-total // max_pairs)
    wanted = iter(range(0, total, stride))
    k = next(wanted, None)

    pairs = []
    row_start = 0
    for i in range(count - 1):
        row_length = count - 1 - i
        while k is not None and k < row_start + row_length:
            pairs.append((i, i + 1 + (k - row_start)))
            k = next(wanted, None)
        if k is None:
            break
        row_start += row_length
    return pairs


def find_duplicates(
    patterns: Sequence[Pattern],
    threshold: float = DEFAULT_THRESHOLD,
) -> List[DuplicateGroup]:
    """Group patterns with default limits."""
    return DuplicateGrouper(threshold=threshold).find_duplicates(patterns)
