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
Normalization and hashing primitives.

Two snippets that differ only in comments or formatting normalize to
the same text and therefore hash identically.
"""

import hashlib
import re
from typing import Optional

MAX_SIGNATURE_LENGTH = 500

_LINE_COMMENT = re.compile(r"//[^\n]*")
_BLOCK_COMMENT = re.compile(r"/\*.*?\*/", re.DOTALL)
_WHITESPACE = re.compile(r"\s+")
# Whitespace next to punctuation carries no meaning for hashing
_PUNCT_SPACING = re.compile(r"\s*([^\w\s])\s*")


def normalize_content(content: str) -> str:
    """
    Strip comments and collapse whitespace.

    Block comments are removed before line comments. Spacing around
    punctuation is dropped too: `f ( ) {` and `f(){` normalize alike.
    """
    text = _BLOCK_COMMENT.sub(" ", content)
    text = _LINE_COMMENT.sub("", text)
    text = _WHITESPACE.sub(" ", text)
    text = _PUNCT_SPACING.sub(r"\1", text)
    return text.strip()


def generate_pattern_hash(
    content: str,
    max_length: Optional[int] = MAX_SIGNATURE_LENGTH,
) -> str:
    """
    Hash content for pattern identity using SHA-256.

    Args:
        content: Raw text of the pattern
        max_length: Truncate the normalized text to this many chars before
            hashing; None hashes the whole normalized text

    Returns:
        Hexadecimal SHA-256 digest, or "" for empty content
    """
    if not content:
        return ""

    normalized = normalize_content(content)
    if max_length is not None and len(normalized) > max_length:
        normalized = normalized[:max_length]

    return hashlib.sha256(normalized.encode("utf-8")).hexdigest()


def truncate_signature(signature: str, max_length: int = MAX_SIGNATURE_LENGTH) -> str:
    """Clip a signature to max_length characters."""
    if len(signature) <= max_length:
        return signature
    return signature[:max_length]
