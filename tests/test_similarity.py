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
Tests for the composite similarity scorer.
"""

import pytest

from pattern_similarity_engine.models import SignalType
from pattern_similarity_engine.similarity import (
    SimilarityScorer,
    calculate_similarity,
    edit_similarity,
    jaccard_similarity,
    levenshtein_distance,
)


BLOCK_A = """\
import { api } from './api';
function loadUsers(page) {
  const res = api.get('/users', { page });
  return res.data;
}"""

BLOCK_B = """\
import { api } from './api';
function loadUsers(page) {
  const res = api.get('/accounts', { page });
  return res.data;
}"""


class TestCalculateSimilarity:
    """Tests for calculate_similarity."""

    def test_identical(self):
        code = "function test() { return 42; }"
        result = calculate_similarity(code, code)

        assert result.score == 1.0
        assert result.signal_type == SignalType.STRUCTURAL
        assert result.contributing_patterns == ("identical_hash",)

    def test_formatting_only_difference_is_identical(self):
        result = calculate_similarity(
            "function test() { return 42; }",
            "function test(){\nreturn 42;\n}",
        )
        assert result.score == 1.0

    def test_nearly_identical_one_liners(self):
        result = calculate_similarity(
            "function test() { return 42; }",
            "function test() { return 43; }",
        )
        assert 0.0 <= result.score <= 1.0
        assert result.signal_type == SignalType.SEMANTIC

    def test_different_code(self):
        result = calculate_similarity(
            "function test() { return 42; }",
            'class MyClass { constructor() { this.value = "hello"; } }',
        )
        assert result.score < 0.5

    def test_empty(self):
        result = calculate_similarity("", "")
        assert result.score == 0.0
        assert result.signal_type == SignalType.STRUCTURAL

    def test_size_guard(self):
        result = calculate_similarity("a" * 100, "a" * 10)
        assert result.score == 0.0
        assert result.signal_type == SignalType.STRUCTURAL

    def test_composite(self):
        result = calculate_similarity(BLOCK_A, BLOCK_B)

        # 4 of 5 lines match (semantic 0.8); 11 of 13 tokens shared
        assert result.score == pytest.approx(0.3 * 0.8 + 0.2 * (11 / 13), abs=1e-3)
        assert result.signal_type == SignalType.SYNTACTIC
        assert "function loadUsers" in result.contributing_patterns
        assert "from './api'" in result.contributing_patterns

    def test_symmetric(self):
        forward = calculate_similarity(BLOCK_A, BLOCK_B)
        backward = calculate_similarity(BLOCK_B, BLOCK_A)
        assert forward == backward

    def test_score_in_range(self):
        for a, b in [(BLOCK_A, BLOCK_B), ("x = 1", "y = 2"), (BLOCK_A, "a\nb\nc")]:
            assert 0.0 <= calculate_similarity(a, b).score <= 1.0

    def test_custom_weights(self):
        scorer = SimilarityScorer(semantic_weight=1.0, syntactic_weight=0.0)
        assert scorer.calculate_similarity(BLOCK_A, BLOCK_B).score == pytest.approx(0.8)

    def test_failing_signal_is_zero(self, monkeypatch):
        scorer = SimilarityScorer()

        def boom(content):
            raise RuntimeError("tokenizer broke")

        monkeypatch.setattr(scorer, "_tokenize", boom)
        result = scorer.calculate_similarity(BLOCK_A, BLOCK_B)
        assert result.score == pytest.approx(0.3 * 0.8, abs=1e-3)


class TestEditSimilarity:
    """Tests for the Levenshtein ratio."""

    def test_identical(self):
        assert edit_similarity("function f() {}", "function f() {}") == 1.0

    def test_both_empty(self):
        assert edit_similarity("", "") == 1.0

    def test_one_empty(self):
        assert edit_similarity("abc", "") == 0.0

    def test_ratio(self):
        assert edit_similarity("abcd", "abcf") == pytest.approx(0.75)

    def test_ignores_formatting(self):
        assert edit_similarity("f ( a ) { }", "f(a){}") == 1.0

    def test_symmetric(self):
        assert edit_similarity(BLOCK_A, BLOCK_B) == edit_similarity(BLOCK_B, BLOCK_A)

    def test_near_duplicate_above_threshold(self):
        assert edit_similarity(BLOCK_A, BLOCK_B) > 0.9


class TestHelpers:
    """Tests for jaccard_similarity and levenshtein_distance."""

    def test_jaccard(self):
        assert jaccard_similarity({"a", "b"}, {"b", "c"}) == pytest.approx(1 / 3)
        assert jaccard_similarity(set(), set()) == 1.0
        assert jaccard_similarity({"a"}, set()) == 0.0

    def test_levenshtein(self):
        assert levenshtein_distance("kitten", "sitting") == 3
        assert levenshtein_distance("", "abc") == 3
        assert levenshtein_distance("same", "same") == 0
