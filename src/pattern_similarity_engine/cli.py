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
CLI entry point for pattern-similarity-engine.

Usage:
    pse <path>... [options]
    pse --help
"""

import logging
import sys
from pathlib import Path
from typing import Optional

import click

from . import __version__
from .config import EngineConfig, load_config
from .errors import PatternEngineError
from .indexer import load_project
from .orchestrator import AnalysisOrchestrator
from .reporter import OutputFormat, report_analysis
from .store import JsonResultStore


# Extension to output format mapping for -o FILE.EXT
EXTENSION_FORMAT_MAP = {
    '.md': 'markdown',
    '.json': 'json',
    '.txt': 'text',
}

DEFAULT_THRESHOLD = 0.7
DEFAULT_BATCH_SIZE = 50
DEFAULT_OWNER = "local"


def merge_config_with_cli(
    config: dict,
    cli_value,
    config_key: str,
    default_value,
):
    """
    Merge config file value with CLI value.

    If CLI value differs from default, use CLI (user explicitly set it).
    Otherwise, use config value if present, else use default.
    """
    if cli_value != default_value:
        return cli_value

    return config.get(config_key, default_value)


def configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


@click.command()
@click.argument(
    "paths",
    nargs=-1,
    required=True,
    type=click.Path(exists=True, file_okay=False, dir_okay=True),
)
@click.option(
    "-t", "--threshold",
    type=float,
    default=DEFAULT_THRESHOLD,
    help="Similarity threshold 0.0-1.0 (default: 0.70)"
)
@click.option(
    "-o", "--output",
    type=str,
    default=None,
    help="Output file path (e.g., report.md, data.json, report.txt)"
)
@click.option(
    "--owner",
    type=str,
    default=DEFAULT_OWNER,
    help="Owner id the analysis is cached and saved under (default: local)"
)
@click.option(
    "--save",
    type=click.Path(file_okay=False, dir_okay=True),
    default=None,
    help="Save the result as JSON under DIR/.pse_cache/results/"
)
@click.option(
    "-e", "--exclude",
    multiple=True,
    help="Glob patterns to exclude (repeatable)"
)
@click.option(
    "--batch-size",
    type=int,
    default=DEFAULT_BATCH_SIZE,
    help="Files per extraction batch (default: 50)"
)
@click.option(
    "-v", "--verbose",
    is_flag=True,
    help="Show debug logging"
)
@click.version_option(version=__version__)
def main(
    paths: tuple,
    threshold: float,
    output: Optional[str],
    owner: str,
    save: Optional[str],
    exclude: tuple,
    batch_size: int,
    verbose: bool,
):
    """
    Find duplicated code patterns across one or more projects.

    Each PATH directory is loaded as one project; all of them are
    analyzed together.

    Examples:

      # Print duplicate groups found across two apps
      pse ./web ./admin

      # Write a markdown report with a stricter threshold
      pse ./src -t 0.85 -o duplicates.md

      # Keep the JSON result for owner "team-a"
      pse ./src --owner team-a --save .
    """
    # Load config file and merge with CLI args
    config = load_config(Path(paths[0]))

    # Config values override defaults, but explicit CLI args override config
    threshold = merge_config_with_cli(config, threshold, "similarity_threshold", DEFAULT_THRESHOLD)
    batch_size = merge_config_with_cli(config, batch_size, "batch_size", DEFAULT_BATCH_SIZE)
    owner = merge_config_with_cli(config, owner, "owner", DEFAULT_OWNER)
    verbose = merge_config_with_cli(config, verbose, "verbose", False)

    # Lists in config, tuples from CLI
    if not exclude and "exclude" in config:
        exclude = tuple(config["exclude"]) if isinstance(config["exclude"], list) else ()

    configure_logging(verbose)

    try:
        engine_config = EngineConfig.from_mapping({
            **config,
            "similarity_threshold": threshold,
            "batch_size": batch_size,
        })
    except (TypeError, ValueError) as e:
        click.echo(f"❌ Invalid configuration: {e}", err=True)
        sys.exit(1)

    # Validate output extension before doing any work
    output_format = OutputFormat.TEXT
    output_path = None
    if output:
        output_path = Path(output)
        ext = output_path.suffix.lower()
        if ext not in EXTENSION_FORMAT_MAP:
            valid_exts = ', '.join(EXTENSION_FORMAT_MAP.keys())
            click.echo(f"❌ Invalid output extension '{ext}'. Valid: {valid_exts}", err=True)
            sys.exit(1)
        output_format = OutputFormat(EXTENSION_FORMAT_MAP[ext])

    projects = [load_project(Path(p), exclude_patterns=list(exclude)) for p in paths]
    if verbose:
        for project in projects:
            click.echo(f"📂 {project.project_id}: {len(project.files)} files")

    store = JsonResultStore(Path(save)) if save else None

    try:
        with AnalysisOrchestrator(config=engine_config, store=store) as orchestrator:
            result = orchestrator.analyze_projects(owner, projects)
        persist_failures = orchestrator.persist_failures
    except PatternEngineError as e:
        click.echo(f"❌ Analysis failed: {e.message}", err=True)
        sys.exit(1)

    source_label = ", ".join(str(Path(p)) for p in paths)
    report = report_analysis(
        result,
        source_label=source_label,
        threshold=engine_config.similarity_threshold,
        output_format=output_format,
    )

    if output_path is not None:
        output_path.write_text(report, encoding="utf-8")
        click.echo(f"✅ Report written to: {output_path}")
    else:
        click.echo(report)

    if store is not None:
        if persist_failures:
            click.echo("⚠️  Could not save the analysis result", err=True)
        else:
            click.echo(f"💾 Result saved to: {store.path_for(owner)}")


# Entry point alias for pyproject.toml
cli = main


if __name__ == "__main__":
    main()
