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
Lexical JavaScript/TypeScript pattern families.

Extracts functions, arrow functions, components, imports, state hooks,
classes, and methods. Every quantifier is bounded so hostile input
cannot trigger runaway backtracking.
"""

import re
from typing import Optional

from .base import RegexFamily
from ..models import PatternType

_IDENT = r"[A-Za-z_$][\w$]*"

# Words that look like `name(...) {` but are control flow
_NOT_METHOD_NAMES = frozenset({
    "if", "for", "while", "switch", "catch", "function", "return",
    "with", "else", "do", "try", "new", "typeof", "await", "yield",
})


class FunctionFamily(RegexFamily):
    """`function name(...)` declarations and `const name = function(...)` expressions."""

    family_name = "function"
    pattern_type = PatternType.FUNCTION
    captures_body = True
    regex = re.compile(
        r"\b(?:"
        rf"(?:async\s+)?function\s*\*?\s*(?P<decl>{_IDENT})\s*\("
        r"|"
        rf"(?:const|let|var)\s+(?P<expr>{_IDENT})\s*=\s*(?:async\s+)?function\b[^(\n]{{0,100}}\("
        r")[^)]{0,500}\)(?:\s*:\s*[^{;\n]{1,100})?"
    )

    def match_name(self, match: "re.Match[str]") -> Optional[str]:
        return match.group("decl") or match.group("expr")


class ArrowFunctionFamily(RegexFamily):
    """`const name = (...) =>` arrow functions."""

    family_name = "arrow_function"
    pattern_type = PatternType.FUNCTION
    captures_body = True
    regex = re.compile(
        rf"\b(?:const|let|var)\s+(?P<name>{_IDENT})\s*(?::[^=\n]{{1,100}})?=\s*(?:async\s+)?"
        rf"(?:\([^)]{{0,500}}\)|{_IDENT})\s*(?::\s*[^=\n]{{1,100}})?=>"
    )


class ComponentFamily(RegexFamily):
    """Capitalised declarations that return markup or an arrow body."""

    family_name = "component"
    pattern_type = PatternType.COMPONENT
    regex = re.compile(
        rf"\b(?:export\s+)?(?:default\s+)?(?:function|const|let)\s+(?P<name>[A-Z][\w$]*)\b"
        r"[^;]{0,300}?(?:return\s*[(<]|=>)"
    )


class ImportFamily(RegexFamily):
    """`import ... from 'module'` statements, named after the module."""

    family_name = "import"
    pattern_type = PatternType.IMPORT
    fixed_complexity = 1
    regex = re.compile(
        r"\bimport\s+[^;'\"]{0,300}?\bfrom\s+['\"](?P<name>[^'\"\n]{1,300})['\"]"
    )


class HookFamily(RegexFamily):
    """State-hook destructuring such as `const [value, setValue] = useState(`."""

    family_name = "hook"
    pattern_type = PatternType.HOOK
    fixed_complexity = 2
    regex = re.compile(
        r"\bconst\s+\[(?P<vars>[^\]\n]{1,200})\]\s*=\s*use(?P<hook>\w{1,100})"
    )

    def match_name(self, match: "re.Match[str]") -> Optional[str]:
        return f"use{match.group('hook')}"


class ClassFamily(RegexFamily):
    """Class declarations up to the opening brace."""

    family_name = "class"
    pattern_type = PatternType.CLASS
    regex = re.compile(
        rf"\bclass\s+(?P<name>{_IDENT})(?:\s*<[^>{{\n]{{0,100}}>)?"
        r"(?:\s+extends\s+[\w$.]{1,200}(?:<[^>{\n]{0,100}>)?)?"
        r"(?:\s+implements\s+[\w$.,\s]{1,200}?)?\s*\{"
    )


class MethodFamily(RegexFamily):
    """Method signatures at the start of a line, e.g. `  private load(id): User {`."""

    family_name = "method"
    pattern_type = PatternType.METHOD
    regex = re.compile(
        r"^[ \t]*(?:(?:public|private|protected|static|async|override|readonly|get|set)\s+){0,4}"
        rf"(?P<name>{_IDENT})\s*\([^)\n]{{0,300}}\)\s*(?::\s*[^{{;\n]{{1,100}})?\s*\{{",
        re.MULTILINE,
    )

    def match_name(self, match: "re.Match[str]") -> Optional[str]:
        name = match.group("name")
        if name in _NOT_METHOD_NAMES:
            return None
        return name
