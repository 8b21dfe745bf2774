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
Base pattern family interface.

A family finds one kind of pattern in a file. The lexical families in
this package use a single precompiled regex each; anything that yields
FamilyMatch objects (a parser-backed finder, for instance) can be
registered in their place.
"""

import logging
import re
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import List, Optional

from ..models import PatternType

logger = logging.getLogger(__name__)

DEFAULT_MAX_MATCHES = 1000
MAX_BODY_CHARS = 2000


@dataclass(frozen=True)
class FamilyMatch:
    """A span of source text recognised by a family."""

    name: str
    start: int               # Offset of the first character
    end: int                 # Offset one past the last character
    fixed_complexity: Optional[int] = None


class PatternFamily(ABC):
    """Abstract base class for pattern finders."""

    family_name: str = ""
    pattern_type: PatternType = PatternType.FUNCTION

    @abstractmethod
    def find(
        self,
        content: str,
        max_matches: int = DEFAULT_MAX_MATCHES,
    ) -> List[FamilyMatch]:
        """
        Find pattern spans in file content.

        Args:
            content: Full file content
            max_matches: Stop after this many matches

        Returns:
            List of FamilyMatch objects in source order
        """
        pass


class RegexFamily(PatternFamily):
    """
    Family driven by one precompiled regex.

    Subclasses set `regex` and may override `match_name` to pull the
    pattern name out of a match (returning None drops the match).
    """

    regex: "re.Pattern[str]"
    captures_body: bool = False
    fixed_complexity: Optional[int] = None

    def match_name(self, match: "re.Match[str]") -> Optional[str]:
        return match.group("name")

    def find(
        self,
        content: str,
        max_matches: int = DEFAULT_MAX_MATCHES,
    ) -> List[FamilyMatch]:
        """Scan content, one non-overlapping match at a time."""
        matches: List[FamilyMatch] = []
        pos = 0
        length = len(content)

        while pos <= length:
            match = self.regex.search(content, pos)
            if match is None:
                break

            # Zero-width matches must still move the scan forward
            if match.end() == match.start():
                pos = match.end() + 1
            else:
                pos = match.end()

            name = self.match_name(match)
            if not name:
                continue

            start = match.start()
            end = match.end()
            # Leading whitespace belongs to the indentation, not the pattern
            while start < end and content[start].isspace():
                start += 1
            if self.captures_body:
                end = extend_to_body(content, end)

            matches.append(FamilyMatch(
                name=name,
                start=start,
                end=end,
                fixed_complexity=self.fixed_complexity,
            ))

            if len(matches) >= max_matches:
                logger.warning(
                    "Too many %s matches, truncating at %d", self.family_name, max_matches
                )
                break

        return matches


def extend_to_body(content: str, end: int, limit: int = MAX_BODY_CHARS) -> int:
    """
    Extend a header match to the end of its `{...}` body.

    Braces inside string literals and comments are ignored. When no
    opening brace follows the header (a concise arrow body), the span runs
    to the end of the statement instead. Never scans more than `limit`
    characters.
    """
    stop = min(len(content), end + limit)
    i = end

    # Find the opening brace, allowing only whitespace before it
    while i < stop and content[i] in " \t\r\n":
        i += 1
    if i >= stop or content[i] != "{":
        return _statement_end(content, end, stop)

    depth = 0
    quote = None
    while i < stop:
        ch = content[i]
        if quote:
            if ch == "\\":
                i += 2
                continue
            if ch == quote:
                quote = None
        elif ch == "/" and content.startswith("//", i):
            newline = content.find("\n", i, stop)
            i = stop if newline == -1 else newline
            continue
        elif ch == "/" and content.startswith("/*", i):
            close = content.find("*/", i + 2, stop)
            i = stop if close == -1 else close + 2
            continue
        elif ch in "'\"`":
            quote = ch
        elif ch == "{":
            depth += 1
        elif ch == "}":
            depth -= 1
            if depth == 0:
                return i + 1
        i += 1

    return stop


def _statement_end(content: str, start: int, stop: int) -> int:
    """End of a concise statement: the next `;` or newline."""
    for i in range(start, stop):
        if content[i] in ";\n":
            return i + 1 if content[i] == ";" else i
    return stop
