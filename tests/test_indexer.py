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
Tests for file screening and local project loading.
"""

from datetime import datetime

from pattern_similarity_engine.indexer import (
    is_binary_content,
    is_build_artifact,
    load_project,
    skip_reason,
)
from pattern_similarity_engine.languages import detect_language, file_extension
from pattern_similarity_engine.models import SourceFile


class TestScreening:
    """Tests for the skip heuristics."""

    def test_build_artifacts(self):
        assert is_build_artifact("node_modules/react/index.js")
        assert is_build_artifact("web/dist/app.js")
        assert is_build_artifact(".git/hooks/pre-commit.js")
        assert is_build_artifact("public/vendor.min.js")
        assert is_build_artifact("package-lock.json")
        assert is_build_artifact("src\\build\\out.js")

    def test_regular_sources(self):
        assert not is_build_artifact("src/rebuild/index.js")
        assert not is_build_artifact("src/distance.ts")
        assert not is_build_artifact("build.js")

    def test_binary_detection(self):
        assert is_binary_content("abc\x00def")
        assert is_binary_content("\x01\x02\x03\x04abc")
        assert not is_binary_content("function f() {\n\treturn 1;\r\n}")
        assert not is_binary_content("")

    def test_only_sample_inspected(self):
        assert not is_binary_content("a" * 9000 + "\x00")

    def test_skip_reason(self):
        assert skip_reason(SourceFile("a.js", ""), 100) == "empty"
        assert skip_reason(SourceFile("a.js", " \n\t"), 100) == "empty"
        assert skip_reason(SourceFile("a.js", "x" * 101), 100) == "too_large"
        assert skip_reason(SourceFile("dist/a.js", "let a;"), 100) == "build_artifact"
        assert skip_reason(SourceFile("a.js", "\x00let"), 100) == "binary"
        assert skip_reason(SourceFile("a.js", "let a;"), 100) is None


class TestLanguages:
    """Tests for extension helpers."""

    def test_detect_language(self):
        assert detect_language("src/App.tsx") == "typescript"
        assert detect_language("main.JS") == "javascript"
        assert detect_language("README") is None

    def test_file_extension(self):
        assert file_extension("a/b/c.Vue") == "vue"
        assert file_extension("Makefile") == ""


class TestLoadProject:
    """Tests for load_project."""

    def test_loads_sources(self, tmp_path):
        (tmp_path / "src").mkdir()
        (tmp_path / "src" / "app.js").write_text("function f() {}")
        (tmp_path / "src" / "notes.bin").write_text("ignored")
        (tmp_path / "node_modules" / "lib").mkdir(parents=True)
        (tmp_path / "node_modules" / "lib" / "index.js").write_text("ignored")

        project = load_project(tmp_path, project_id="demo")

        assert project.project_id == "demo"
        assert [f.path for f in project.files] == ["src/app.js"]
        assert project.files[0].content == "function f() {}"
        assert datetime.fromisoformat(project.last_updated).year >= 2000

    def test_default_id_is_directory_name(self, tmp_path):
        root = tmp_path / "my-app"
        root.mkdir()
        (root / "a.ts").write_text("let a;")

        assert load_project(root).project_id == "my-app"

    def test_exclude_patterns(self, tmp_path):
        (tmp_path / "a.js").write_text("let a;")
        (tmp_path / "gen").mkdir()
        (tmp_path / "gen" / "b.js").write_text("let b;")

        project = load_project(tmp_path, exclude_patterns=["gen/*"])
        assert [f.path for f in project.files] == ["a.js"]
