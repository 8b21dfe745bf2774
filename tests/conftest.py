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
Shared fixtures for pattern-similarity-engine tests.
"""

import pytest

from pattern_similarity_engine.config import EngineConfig
from pattern_similarity_engine.models import Pattern, PatternType, Project, SourceFile
from pattern_similarity_engine.orchestrator import AnalysisOrchestrator


CALCULATE_TOTAL = """\
function calculateTotal(items) {
  return items.reduce((sum, item) => sum + item.price, 0);
}
"""


def make_pattern(
    content_hash="a" * 64,
    type=PatternType.FUNCTION,
    name="fn",
    file_path="src/a.js",
    snippet="",
    line_count=1,
):
    """Build a Pattern with sensible defaults for grouping tests."""
    return Pattern(
        type=type,
        name=name,
        signature=snippet[:500],
        content_hash=content_hash,
        complexity=1,
        line_count=line_count,
        file_path=file_path,
        snippet=snippet,
    )


@pytest.fixture
def calculate_total_projects():
    """Two projects that both define the same calculateTotal function."""
    return [
        Project(
            project_id="shop",
            last_updated="2025-01-01T00:00:00+00:00",
            files=(SourceFile("src/cart.js", CALCULATE_TOTAL),),
        ),
        Project(
            project_id="admin",
            last_updated="2025-01-02T00:00:00+00:00",
            files=(SourceFile("lib/totals.js", CALCULATE_TOTAL),),
        ),
    ]


@pytest.fixture
def orchestrator():
    """Orchestrator with default config, shut down after the test."""
    with AnalysisOrchestrator(config=EngineConfig()) as orch:
        yield orch
