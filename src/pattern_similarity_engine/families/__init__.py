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
Pattern family registry.

Families are looked up by name; the default set is the lexical
JavaScript/TypeScript signatures, applied in a fixed order.
"""

from typing import Dict, List, Optional, Sequence

from .base import FamilyMatch, PatternFamily, RegexFamily
from .javascript import (
    ArrowFunctionFamily,
    ClassFamily,
    ComponentFamily,
    FunctionFamily,
    HookFamily,
    ImportFamily,
    MethodFamily,
)


# Family registry - maps family name to family class
_FAMILY_REGISTRY: Dict[str, type] = {}

DEFAULT_FAMILY_NAMES = (
    "function",
    "arrow_function",
    "component",
    "import",
    "hook",
    "class",
    "method",
)


def register_family(name: str, family_class: type) -> None:
    """Register a family class under a name (replaces any existing one)."""
    _FAMILY_REGISTRY[name.lower()] = family_class


def get_family(name: str) -> PatternFamily:
    """
    Get a family instance by name.

    Raises:
        KeyError: If no family is registered under that name
    """
    return _FAMILY_REGISTRY[name.lower()]()


def get_families(names: Optional[Sequence[str]] = None) -> List[PatternFamily]:
    """Instantiate the named families, or the default set."""
    return [get_family(name) for name in (names or DEFAULT_FAMILY_NAMES)]


for _family in (
    FunctionFamily,
    ArrowFunctionFamily,
    ComponentFamily,
    ImportFamily,
    HookFamily,
    ClassFamily,
    MethodFamily,
):
    register_family(_family.family_name, _family)


__all__ = [
    "FamilyMatch",
    "PatternFamily",
    "RegexFamily",
    "DEFAULT_FAMILY_NAMES",
    "register_family",
    "get_family",
    "get_families",
]
