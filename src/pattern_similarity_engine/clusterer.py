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
Group validation - keeps duplicate groups that hold together.

Exact groups share a truncated hash. Members whose full normalized
snippets also match stay grouped at 1.0; a bucket that mixes several
full-length variants is re-scored pairwise with the composite scorer and
survives whole only if the average pairwise similarity reaches the
threshold. Otherwise each run of fully identical members is kept on its own.
"""

import logging
from collections import Counter, defaultdict
from dataclasses import replace
from typing import Dict, List, Optional, Sequence

import numpy as np

from .grouper import strided_pairs
from .hashing import generate_pattern_hash
from .models import DuplicateGroup, Pattern
from .similarity import SimilarityScorer

logger = logging.getLogger(__name__)


def filter_groups(
    groups: Sequence[DuplicateGroup],
    threshold: float = 0.7,
    scorer: Optional[SimilarityScorer] = None,
    exhaustive_limit: int = 10,
    max_sampled_pairs: int = 20,
) -> List[DuplicateGroup]:
    """
    Drop groups whose average pairwise similarity is below threshold.

    Args:
        groups: Candidate groups from the grouper
        threshold: Minimum average similarity (inclusive)
        scorer: Composite scorer for exact groups
        exhaustive_limit: Distinct texts up to which every pair is scored
        max_sampled_pairs: Pair budget once distinct texts exceed exhaustive_limit

    Returns:
        Surviving groups, input order preserved
    """
    scorer = scorer or SimilarityScorer()
    kept = []
    for group in groups:
        if not group.is_exact:
            if group.similarity_score >= threshold:
                kept.append(group)
            else:
                _log_drop(group, group.similarity_score, threshold)
            continue

        variants = split_by_full_hash(group)
        if len(variants) == 1:
            kept.append(group)
            continue

        texts = [_comparable_text(p) for p in group.patterns]
        score = average_pairwise_similarity(
            texts, scorer, exhaustive_limit, max_sampled_pairs
        )
        if score >= threshold:
            kept.append(group)
            continue

        _log_drop(group, score, threshold)
        for full_hash, members in variants.items():
            if len(members) >= 2:
                kept.append(_identical_subgroup(group, full_hash, members))
    return kept


def split_by_full_hash(group: DuplicateGroup) -> Dict[str, List[Pattern]]:
    """Partition group members by the hash of their untruncated normalized text."""
    variants: Dict[str, List[Pattern]] = defaultdict(list)
    for pattern in group.patterns:
        full_hash = generate_pattern_hash(_comparable_text(pattern), max_length=None)
        variants[full_hash].append(pattern)
    return variants


def average_pairwise_similarity(
    texts: Sequence[str],
    scorer: SimilarityScorer,
    exhaustive_limit: int = 10,
    max_sampled_pairs: int = 20,
) -> float:
    """
    Calculate average pairwise composite similarity within a group.

    Only distinct texts are scored, each weighted by how many members
    share it. Pairs of equal texts count as 1.0. Once there are more than
    exhaustive_limit distinct texts, a strided sample of at most
    max_sampled_pairs cross pairs stands in for the rest.
    """
    n = len(texts)
    if n < 2:
        return 1.0

    counts = Counter(texts)
    distinct = list(counts)
    weights = np.array([counts[t] for t in distinct], dtype=float)

    # Ordered pairs of equal texts
    same_weight = float(np.sum(weights * (weights - 1)))

    pairs = strided_pairs(len(distinct), exhaustive_limit, max_sampled_pairs)
    if not pairs:
        return 1.0

    rows = np.array([i for i, _ in pairs])
    cols = np.array([j for _, j in pairs])
    scores = np.array([
        scorer.calculate_similarity(distinct[i], distinct[j]).score for i, j in pairs
    ])
    cross_weights = 2 * weights[rows] * weights[cols]

    total = same_weight + float(np.sum(cross_weights * scores))
    return total / (same_weight + float(np.sum(cross_weights)))


def _identical_subgroup(
    group: DuplicateGroup,
    full_hash: str,
    members: List[Pattern],
) -> DuplicateGroup:
    pattern_type = group.pattern_type.value
    return replace(
        group,
        id=f"{group.id}-{full_hash[:8]}",
        patterns=tuple(members),
        description=f"{len(members)} identical {pattern_type} patterns found",
    )


def _log_drop(group: DuplicateGroup, score: float, threshold: float) -> None:
    logger.debug(
        "Dropping group %s: average similarity %.3f < %.2f",
        group.id, score, threshold,
    )


def _comparable_text(pattern: Pattern) -> str:
    # Structure patterns carry no snippet
    return pattern.snippet or pattern.signature
