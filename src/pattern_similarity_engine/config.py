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
Configuration for PSE.

Engine tunables live in EngineConfig. Values can come from a .pserc or
.pse.toml file in the current directory or any parent.
"""

import logging
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

try:
    import tomllib  # Python 3.11+
except ImportError:
    try:
        import tomli as tomllib  # type: ignore
    except ImportError:
        tomllib = None  # type: ignore

logger = logging.getLogger(__name__)

CONFIG_NAMES = [".pserc", ".pse.toml"]


@dataclass(frozen=True)
class EngineConfig:
    """Tunable thresholds, sizes and lifetimes for one engine instance."""

    similarity_threshold: float = 0.7
    batch_size: int = 50
    max_concurrency: int = 3
    max_file_size: int = 500_000
    max_matches: int = 1000
    result_cache_size: int = 100
    result_cache_ttl: float = 30 * 60
    pattern_cache_size: int = 1000
    pattern_cache_ttl: float = 60 * 60
    min_fuzzy_length: int = 50
    max_fuzzy_length: int = 1000
    exhaustive_pair_limit: int = 10
    max_sampled_pairs: int = 20

    def __post_init__(self):
        if not 0.0 <= self.similarity_threshold <= 1.0:
            raise ValueError("similarity_threshold must be between 0 and 1")
        if self.batch_size < 1:
            raise ValueError("batch_size must be at least 1")
        if self.max_concurrency < 1:
            raise ValueError("max_concurrency must be at least 1")

    @classmethod
    def from_mapping(cls, values: Mapping[str, Any]) -> "EngineConfig":
        """Build from a config-file table, ignoring keys that are not tunables."""
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(values) - known)
        if unknown:
            logger.debug("Ignoring unknown config keys: %s", ", ".join(unknown))
        return cls(**{k: v for k, v in values.items() if k in known})


def find_config_file(start_path: Path) -> Optional[Path]:
    """
    Search for .pserc or .pse.toml in start_path and parent directories.

    Searches up to the root directory or until a config file is found.

    Args:
        start_path: Directory to start searching from

    Returns:
        Path to config file if found, None otherwise
    """
    current = start_path.resolve()

    while True:
        for name in CONFIG_NAMES:
            config_path = current / name
            if config_path.is_file():
                return config_path

        parent = current.parent
        if parent == current:
            break
        current = parent

    return None


def load_config(path: Path) -> Dict[str, Any]:
    """
    Load PSE configuration from a .pserc or .pse.toml file.

    Searches for a config file starting from the given path and walking
    up parent directories. Returns an empty dict if none is found.

    Args:
        path: Directory to start searching from

    Returns:
        Dictionary of values from the [pse] section, or empty dict

    Example config file (.pserc or .pse.toml):
        [pse]
        similarity_threshold = 0.75
        batch_size = 50
        max_concurrency = 3
        result_cache_ttl = 3600
        exclude = ["**/fixtures/**"]
        owner = "me"
    """
    if tomllib is None:
        logger.debug("No TOML parser available, skipping config file")
        return {}

    config_path = find_config_file(path)
    if config_path is None:
        return {}

    try:
        with open(config_path, "rb") as f:
            data = tomllib.load(f)
        return data.get("pse", {})

    except (OSError, tomllib.TOMLDecodeError) as e:
        logger.warning("Ignoring unreadable config file %s: %s", config_path, e)
        return {}
