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
Analysis orchestrator - runs a whole duplicate analysis for one owner.

Pipeline:
1. Derive the cache key from (owner, [project_id, last_updated]...)
2. Serve a cached result, or join an identical analysis in flight
3. Screen files (empty, oversized, binary, build artifacts)
4. Extract patterns in batches on a bounded thread pool,
   reusing per-file pattern lists from the pattern cache
5. Group duplicates and keep groups that hold together
6. Cache the result and hand it to the result store in the background
"""

import hashlib
import json
import logging
import threading
import time
from collections import Counter
from concurrent.futures import Future, ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field, replace
from typing import Dict, List, Optional, Sequence, Tuple

from .cache import AnalysisCache, pattern_cache_key
from .clusterer import filter_groups
from .config import EngineConfig
from .errors import AggregationError, CacheKeyError, PatternEngineError
from .extractor import PatternExtractor
from .grouper import DuplicateGrouper
from .indexer import skip_reason
from .languages import file_extension, language_or_unknown
from .models import AnalysisMetrics, AnalysisResult, Pattern, Project, SourceFile
from .similarity import SimilarityScorer
from .store import ResultStore

logger = logging.getLogger(__name__)

# (project_id, file) pairs handed to one batch
WorkItem = Tuple[str, SourceFile]


@dataclass
class BatchAggregate:
    """Partial result of one batch; merge() is associative."""

    patterns: List[Pattern] = field(default_factory=list)
    languages: Counter = field(default_factory=Counter)
    files_analyzed: int = 0

    def merge(self, other: "BatchAggregate") -> "BatchAggregate":
        return BatchAggregate(
            patterns=self.patterns + other.patterns,
            languages=self.languages + other.languages,
            files_analyzed=self.files_analyzed + other.files_analyzed,
        )


def generate_cache_key(owner_id: str, projects: Sequence[Project]) -> str:
    """
    Derive the analysis cache key for an owner's project set.

    The digest covers the owner and every (project_id, last_updated)
    pair, so any project update yields a new key.

    Raises:
        CacheKeyError: If the owner is missing or a project is not serializable
    """
    if not owner_id:
        raise CacheKeyError("Owner id is required for an analysis cache key")

    try:
        pairs = sorted(
            ([p.project_id, p.last_updated] for p in projects),
            key=lambda pair: json.dumps(pair, sort_keys=True),
        )
        payload = json.dumps(
            {"owner": owner_id, "projects": pairs},
            sort_keys=True,
            separators=(",", ":"),
        )
    except (AttributeError, TypeError, ValueError) as e:
        raise CacheKeyError(
            "Could not derive analysis cache key",
            {"owner_id": str(owner_id), "error": str(e)},
        ) from e

    digest = hashlib.sha256(payload.encode("utf-8")).hexdigest()
    return f"analysis_{owner_id}_{digest}"


class AnalysisOrchestrator:
    """
    Runs cached, batched duplicate analyses.

    Args:
        config: Engine tunables (default: EngineConfig())
        cache: Result and pattern caches (default: built from config)
        store: Optional result store fed after each computed analysis
        extractor: Pattern extractor (default: built from config)
        grouper: Duplicate grouper (default: built from config)
    """

    def __init__(
        self,
        config: Optional[EngineConfig] = None,
        cache: Optional[AnalysisCache] = None,
        store: Optional[ResultStore] = None,
        extractor: Optional[PatternExtractor] = None,
        grouper: Optional[DuplicateGrouper] = None,
    ):
        self.config = config or EngineConfig()
        self.cache = cache or AnalysisCache.from_config(self.config)
        self.store = store
        self.scorer = SimilarityScorer()
        self.extractor = extractor or PatternExtractor(
            max_file_size=self.config.max_file_size,
            max_matches=self.config.max_matches,
        )
        self.grouper = grouper or DuplicateGrouper(
            threshold=self.config.similarity_threshold,
            scorer=self.scorer,
            min_snippet_length=self.config.min_fuzzy_length,
            max_snippet_length=self.config.max_fuzzy_length,
            exhaustive_limit=self.config.exhaustive_pair_limit,
            max_sampled_pairs=self.config.max_sampled_pairs,
        )

        self._executor = ThreadPoolExecutor(
            max_workers=self.config.max_concurrency,
            thread_name_prefix="pse-batch",
        )
        self._persist_executor = ThreadPoolExecutor(
            max_workers=1,
            thread_name_prefix="pse-persist",
        )
        self._flights: Dict[str, Future] = {}
        self._flight_lock = threading.Lock()
        self._counter_lock = threading.Lock()

        # Statistics
        self.batches_processed = 0
        self.persist_failures = 0

    def analyze_projects(
        self,
        owner_id: str,
        projects: Sequence[Project],
    ) -> AnalysisResult:
        """
        Analyze an owner's projects for duplicated patterns.

        Args:
            owner_id: Owner of the project set
            projects: Project snapshots (not modified)

        Returns:
            AnalysisResult, possibly served from cache

        Raises:
            CacheKeyError: If the cache key cannot be derived
            AggregationError: If batch results cannot be aggregated
        """
        cache_key = generate_cache_key(owner_id, projects)

        cached = self.cache.results.get(cache_key)
        if cached is not None:
            logger.debug("Analysis cache hit for %s", cache_key)
            return cached

        with self._flight_lock:
            # Re-check: a leader may have finished since the first lookup
            cached = self.cache.results.get(cache_key)
            if cached is not None:
                return cached
            flight = self._flights.get(cache_key)
            is_leader = flight is None
            if is_leader:
                flight = Future()
                self._flights[cache_key] = flight

        if not is_leader:
            logger.debug("Joining in-flight analysis %s", cache_key)
            return flight.result()

        try:
            result = self._run_analysis(projects, cache_key)
            self.cache.results.set(cache_key, result)
            flight.set_result(result)
        except Exception as e:
            flight.set_exception(e)
            raise
        finally:
            with self._flight_lock:
                self._flights.pop(cache_key, None)

        self._persist(owner_id, result)
        return result

    def _run_analysis(
        self,
        projects: Sequence[Project],
        cache_key: str,
    ) -> AnalysisResult:
        start = time.perf_counter()

        work, files_skipped = self._screen_files(projects)
        batch_size = self.config.batch_size
        batches = [work[i:i + batch_size] for i in range(0, len(work), batch_size)]
        logger.info(
            "Analyzing %d files in %d batches (%d skipped)",
            len(work), len(batches), files_skipped,
        )

        partials: List[Optional[BatchAggregate]] = [None] * len(batches)
        futures = {
            self._executor.submit(self._process_batch, batch): idx
            for idx, batch in enumerate(batches)
        }
        for future in as_completed(futures):
            partials[futures[future]] = future.result()

        # Merge in batch order so pattern order is deterministic
        merged = BatchAggregate()
        for partial in partials:
            merged = merged.merge(partial)

        return self._aggregate(merged, files_skipped, start, cache_key)

    def _screen_files(
        self,
        projects: Sequence[Project],
    ) -> Tuple[List[WorkItem], int]:
        work: List[WorkItem] = []
        skipped = 0
        for project in projects:
            for source in project.files:
                reason = skip_reason(source, self.config.max_file_size)
                if reason is None:
                    work.append((project.project_id, source))
                    continue

                skipped += 1
                if reason == "too_large":
                    logger.warning(
                        "Skipping large file: %s (%d characters)",
                        source.path, len(source.content),
                    )
                else:
                    logger.debug("Skipping %s: %s", source.path, reason)
        return work, skipped

    def _process_batch(self, batch: Sequence[WorkItem]) -> BatchAggregate:
        aggregate = BatchAggregate()
        for project_id, source in batch:
            aggregate.patterns.extend(self._file_patterns(project_id, source))
            aggregate.languages[language_or_unknown(source.path)] += 1
            aggregate.files_analyzed += 1

        with self._counter_lock:
            self.batches_processed += 1
        return aggregate

    def _file_patterns(self, project_id: str, source: SourceFile) -> Tuple[Pattern, ...]:
        key = pattern_cache_key(source.content, file_extension(source.path))
        cached = self.cache.patterns.get(key)
        if cached is not None:
            logger.debug("Pattern cache hit for %s", source.path)
            # Same content elsewhere: re-stamp provenance
            return tuple(
                replace(p, file_path=source.path, project_id=project_id)
                for p in cached
            )

        patterns = tuple(
            self.extractor.extract_patterns(source.content, source.path, project_id)
        )
        self.cache.patterns.set(key, patterns)
        return patterns

    def _aggregate(
        self,
        merged: BatchAggregate,
        files_skipped: int,
        start: float,
        cache_key: str,
    ) -> AnalysisResult:
        try:
            groups = self.grouper.find_duplicates(merged.patterns)
            groups = filter_groups(
                groups,
                self.config.similarity_threshold,
                self.scorer,
                exhaustive_limit=self.config.exhaustive_pair_limit,
                max_sampled_pairs=self.config.max_sampled_pairs,
            )

            metrics = AnalysisMetrics(
                files_analyzed=merged.files_analyzed,
                files_skipped=files_skipped,
                patterns_found=len(merged.patterns),
                duplicates_detected=sum(g.size - 1 for g in groups),
                languages=dict(merged.languages),
                pattern_types=dict(Counter(p.type.value for p in merged.patterns)),
                batches_processed=-(-merged.files_analyzed // self.config.batch_size),
            )
        except PatternEngineError:
            raise
        except Exception as e:
            raise AggregationError(
                "Failed to aggregate batch results",
                {"patterns": len(merged.patterns), "error": str(e)},
            ) from e

        elapsed_ms = (time.perf_counter() - start) * 1000
        logger.info(
            "Found %d duplicate groups among %d patterns in %.0f ms",
            len(groups), metrics.patterns_found, elapsed_ms,
        )
        return AnalysisResult(
            duplicate_groups=tuple(groups),
            metrics=metrics,
            processing_time_ms=round(elapsed_ms, 2),
            cache_key=cache_key,
        )

    def _persist(self, owner_id: str, result: AnalysisResult) -> None:
        if self.store is None:
            return
        try:
            future = self._persist_executor.submit(self.store.save, owner_id, result)
        except RuntimeError as e:
            self._record_persist_failure(e)
            return
        future.add_done_callback(self._on_persisted)

    def _on_persisted(self, future: Future) -> None:
        error = future.exception()
        if error is not None:
            self._record_persist_failure(error)

    def _record_persist_failure(self, error: BaseException) -> None:
        with self._counter_lock:
            self.persist_failures += 1
        logger.warning("Failed to persist analysis result: %s", error)

    def cache_stats(self) -> Dict[str, Dict[str, object]]:
        """Read-only statistics of both cache tiers."""
        return self.cache.stats()

    def close(self) -> None:
        """Wait for pending work and shut the worker pools down."""
        self._executor.shutdown(wait=True)
        self._persist_executor.shutdown(wait=True)

    def __enter__(self) -> "AnalysisOrchestrator":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
