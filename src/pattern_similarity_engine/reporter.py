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
Report generator - formats analysis results for output.

Supports text, markdown, and json output formats.
"""

import json
from datetime import datetime
from enum import Enum
from typing import List

from .models import AnalysisResult, DuplicateGroup


class OutputFormat(Enum):
    TEXT = "text"
    MARKDOWN = "markdown"
    JSON = "json"


def report_analysis(
    result: AnalysisResult,
    source_label: str,
    threshold: float,
    output_format: OutputFormat = OutputFormat.TEXT,
) -> str:
    """
    Generate a report of duplicate groups.

    Args:
        result: Finished analysis
        source_label: What was analyzed (for display)
        threshold: Similarity threshold used
        output_format: Desired output format

    Returns:
        Formatted report string
    """
    if output_format == OutputFormat.TEXT:
        return _format_text(result, source_label, threshold)
    elif output_format == OutputFormat.MARKDOWN:
        return _format_markdown(result, source_label, threshold)
    elif output_format == OutputFormat.JSON:
        return _format_json(result, source_label, threshold)
    else:
        raise ValueError(f"Unknown format: {output_format}")


def _summary_line(result: AnalysisResult) -> str:
    metrics = result.metrics
    languages = ", ".join(
        f"{lang} {count}" for lang, count in sorted(metrics.languages.items())
    )
    return (
        f"Files: {metrics.files_analyzed} analyzed, {metrics.files_skipped} skipped"
        f" | Patterns: {metrics.patterns_found}"
        f" | Languages: {languages or '-'}"
    )


def _format_text(result: AnalysisResult, source_label: str, threshold: float) -> str:
    """Plain text format with unicode decorations."""
    groups = result.duplicate_groups
    lines = []

    # Header
    lines.append(f"🔍 Found {len(groups)} duplicate groups in {source_label}")
    lines.append(
        f"   Threshold: {threshold:.0%} | Duplicates: {result.duplicates_detected}"
        f" | Time: {result.processing_time_ms:.0f} ms"
    )
    lines.append(f"   {_summary_line(result)}")
    lines.append("")

    for group in groups:
        lines.append("━" * 70)
        lines.append(f"{group.id}: {group.description}")
        lines.append(
            f"Type: {group.pattern_type.value} | Similarity {group.similarity_score:.0%}"
            f" | Files: {group.file_count} | Lines: ~{group.total_lines()}"
        )
        lines.append("━" * 70)
        lines.append("")

        lines.append("📍 Locations:")
        for pattern in group.patterns:
            lines.append(f"   • {pattern.location}")
            lines.append(f"     └─ {pattern.name}: {pattern.preview(50)}")
        lines.append("")

    return "\n".join(lines)


def _format_markdown(result: AnalysisResult, source_label: str, threshold: float) -> str:
    """Markdown format for documentation."""
    groups = result.duplicate_groups
    lines = []

    lines.append("# Duplicate Pattern Report")
    lines.append("")
    lines.append(f"**Source:** `{source_label}`  ")
    lines.append(f"**Threshold:** {threshold:.0%}  ")
    lines.append(f"**Groups Found:** {len(groups)}  ")
    lines.append(f"**Duplicates Detected:** {result.duplicates_detected}  ")
    lines.append(f"**{_summary_line(result)}**")
    lines.append("")

    if groups:
        lines.append("## Table of Contents")
        lines.append("")
        for group in groups:
            lines.append(
                f"- [{group.representative.name}](#{group.id}) - "
                f"{group.size} {group.pattern_type.value} patterns, "
                f"{group.similarity_score:.0%}"
            )
        lines.append("")
        lines.append("---")
        lines.append("")

    for group in groups:
        lines.extend(_markdown_group(group))

    return "\n".join(lines)


def _markdown_group(group: DuplicateGroup) -> List[str]:
    lines = [
        f"<a id=\"{group.id}\"></a>",
        "",
        f"## {group.description}",
        "",
        f"**{group.size} patterns** across **{group.file_count} files**"
        f" (~{group.total_lines()} lines)",
        "",
        "| File | Line | Name | Complexity |",
        "|------|------|------|------------|",
    ]
    for pattern in group.patterns:
        lines.append(
            f"| `{pattern.file_path}` | {pattern.start_line} | {pattern.name}"
            f" | {pattern.complexity} |"
        )
    lines.append("")

    rep = group.representative
    lines.append(f"From `{rep.location}`:")
    lines.append("")
    lines.append("```")
    sample = rep.signature.split("\n")
    lines.append("\n".join(sample[:20]))
    if len(sample) > 20:
        lines.append("// ... (truncated)")
    lines.append("```")
    lines.append("")
    lines.append("---")
    lines.append("")
    return lines


def _format_json(result: AnalysisResult, source_label: str, threshold: float) -> str:
    """JSON format for programmatic use."""
    data = {
        "meta": {
            "source": source_label,
            "threshold": threshold,
            "groupCount": len(result.duplicate_groups),
            "timestamp": datetime.now().isoformat(),
        },
        **result.to_dict(),
    }
    return json.dumps(data, indent=2)
