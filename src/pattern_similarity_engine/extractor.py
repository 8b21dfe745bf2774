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
Pattern extractor - turns one file's text into Pattern records.

Runs each registered family over the content once, then appends a
single whole-file structure pattern. Extraction is lexical: it never
fails on syntax errors, and any unexpected error yields no patterns
for that file instead of aborting the batch.
"""

import logging
import math
import re
from typing import List, Optional, Sequence

from .families import PatternFamily, get_families
from .families.base import DEFAULT_MAX_MATCHES, FamilyMatch
from .hashing import MAX_SIGNATURE_LENGTH, generate_pattern_hash, truncate_signature
from .languages import file_extension
from .models import Pattern, PatternType

logger = logging.getLogger(__name__)

MAX_FILE_SIZE = 500_000  # characters
MAX_COMPLEXITY = 50

_COMPLEXITY_TOKENS = re.compile(
    r"\b(?:if|else|for|while|switch|case|try|catch|finally|async|await)\b"
    r"|&&|\|\||\?\?|\?(?!\.)"
)


def calculate_complexity(code: str) -> int:
    """Crude cyclomatic proxy: 1 + branch keywords and logical operators, capped."""
    complexity = 1 + len(_COMPLEXITY_TOKENS.findall(code))
    return min(complexity, MAX_COMPLEXITY)


class PatternExtractor:
    """
    Extracts typed patterns from source text.

    Args:
        families: Pattern families to apply (default: registered lexical set)
        max_file_size: Files longer than this many characters are skipped
        max_matches: Per-family match cap for one file
    """

    def __init__(
        self,
        families: Optional[Sequence[PatternFamily]] = None,
        max_file_size: int = MAX_FILE_SIZE,
        max_matches: int = DEFAULT_MAX_MATCHES,
    ):
        self.families = list(families) if families is not None else get_families()
        self.max_file_size = max_file_size
        self.max_matches = max_matches

    def extract_patterns(
        self,
        content: str,
        file_path: str,
        project_id: Optional[str] = None,
    ) -> List[Pattern]:
        """
        Extract patterns from one file.

        Args:
            content: Full file content
            file_path: Path used for provenance and the structure pattern
            project_id: Optional owning project

        Returns:
            Patterns in family order followed by one structure pattern;
            empty for empty, oversized, or unprocessable content
        """
        if not content:
            return []

        if len(content) > self.max_file_size:
            logger.warning(
                "Skipping large file: %s (%d characters)", file_path, len(content)
            )
            return []

        try:
            patterns: List[Pattern] = []
            for family in self.families:
                for match in family.find(content, max_matches=self.max_matches):
                    patterns.append(self._build_pattern(
                        family, match, content, file_path, project_id
                    ))

            patterns.append(self._structure_pattern(content, file_path, project_id))
            return patterns

        except Exception as e:
            logger.warning("Error extracting patterns from %s: %s", file_path, e)
            logger.debug("Extraction failure details", exc_info=True)
            return []

    def _build_pattern(
        self,
        family: PatternFamily,
        match: FamilyMatch,
        content: str,
        file_path: str,
        project_id: Optional[str],
    ) -> Pattern:
        snippet = content[match.start:match.end]
        signature = truncate_signature(snippet, MAX_SIGNATURE_LENGTH)

        if match.fixed_complexity is not None:
            complexity = match.fixed_complexity
        else:
            complexity = calculate_complexity(snippet)

        return Pattern(
            type=family.pattern_type,
            name=match.name,
            signature=signature,
            content_hash=generate_pattern_hash(snippet),
            complexity=complexity,
            line_count=snippet.count("\n") + 1,
            file_path=file_path,
            start_line=content.count("\n", 0, match.start) + 1,
            snippet=snippet,
            project_id=project_id,
        )

    def _structure_pattern(
        self,
        content: str,
        file_path: str,
        project_id: Optional[str],
    ) -> Pattern:
        """Whole-file summary of (extension, line count, char count)."""
        extension = file_extension(file_path)
        line_count = content.count("\n") + 1
        char_count = len(content)

        return Pattern(
            type=PatternType.STRUCTURE,
            name=f"{extension}_structure",
            signature=f"File structure: {line_count} lines, {char_count} chars",
            content_hash=generate_pattern_hash(
                f"structure_{extension}_{line_count}_{char_count}"
            ),
            complexity=max(1, math.ceil(line_count / 100)),
            line_count=line_count,
            file_path=file_path,
            start_line=1,
            project_id=project_id,
        )


_default_extractor = PatternExtractor()


def extract_patterns(content: str, file_path: str) -> List[Pattern]:
    """Extract patterns with the default family set and limits."""
    return _default_extractor.extract_patterns(content, file_path)
