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
Tests for pattern extraction and the lexical families.
"""

import re
import time

import pytest

from pattern_similarity_engine.extractor import (
    MAX_COMPLEXITY,
    PatternExtractor,
    calculate_complexity,
    extract_patterns,
)
from pattern_similarity_engine.families import get_families, get_family
from pattern_similarity_engine.families.base import (
    FamilyMatch,
    PatternFamily,
    RegexFamily,
    extend_to_body,
)
from pattern_similarity_engine.models import PatternType


def of_type(patterns, pattern_type):
    return [p for p in patterns if p.type == pattern_type]


class TestFamilies:
    """Tests for individual pattern families."""

    def test_function_declaration_and_arrow(self):
        code = """
        function testFunction() {
          return 'hello';
        }
        const arrowFunc = () => {
          console.log('test');
        };
        """
        functions = of_type(extract_patterns(code, "test.js"), PatternType.FUNCTION)

        assert len(functions) >= 2
        names = {p.name for p in functions}
        assert "testFunction" in names
        assert "arrowFunc" in names

    def test_function_expression(self):
        code = "const handler = async function (event) {\n  return event;\n};"
        functions = of_type(extract_patterns(code, "a.js"), PatternType.FUNCTION)
        assert [p.name for p in functions] == ["handler"]

    def test_components(self):
        code = """
        export default function MyComponent() {
          return <div>Hello</div>;
        }
        const Button = () => {
          return <button>Click</button>;
        };
        """
        components = of_type(extract_patterns(code, "test.tsx"), PatternType.COMPONENT)
        assert {p.name for p in components} == {"MyComponent", "Button"}

    def test_lowercase_is_not_component(self):
        code = "const helper = () => {\n  return <div/>;\n};"
        assert of_type(extract_patterns(code, "a.jsx"), PatternType.COMPONENT) == []

    def test_imports(self):
        code = """
        import React from 'react';
        import { useState, useEffect } from 'react';
        import axios from 'axios';
        """
        imports = of_type(extract_patterns(code, "test.js"), PatternType.IMPORT)

        assert [p.name for p in imports] == ["react", "react", "axios"]
        assert all(p.complexity == 1 for p in imports)

    def test_hooks(self):
        code = "const [count, setCount] = useState(0);\nconst [a, b] = useReducer(r, 0);"
        hooks = of_type(extract_patterns(code, "a.jsx"), PatternType.HOOK)

        assert [p.name for p in hooks] == ["useState", "useReducer"]
        assert all(p.complexity == 2 for p in hooks)

    def test_classes(self):
        code = """
        class MyClass {
          constructor() {}
        }
        class ExtendedClass extends BaseClass {
          method() {}
        }
        """
        classes = of_type(extract_patterns(code, "test.js"), PatternType.CLASS)

        assert len(classes) == 2
        assert {p.name for p in classes} == {"MyClass", "ExtendedClass"}

    def test_methods(self):
        code = """
        class Store {
          private load(id: string): User {
            if (id) {
              return cache[id];
            }
          }
        }
        """
        methods = of_type(extract_patterns(code, "store.ts"), PatternType.METHOD)
        assert [p.name for p in methods] == ["load"]

    def test_registry(self):
        names = [f.family_name for f in get_families()]
        assert names == [
            "function", "arrow_function", "component", "import",
            "hook", "class", "method",
        ]
        assert get_family("IMPORT").pattern_type == PatternType.IMPORT

    def test_unknown_family(self):
        with pytest.raises(KeyError):
            get_family("nope")


class TestExtendToBody:
    """Tests for the lexical brace scan."""

    def test_balanced_body(self):
        code = "function f() { if (a) { b(); } } trailing"
        header_end = code.index(")") + 1
        assert code[:extend_to_body(code, header_end)] == "function f() { if (a) { b(); } }"

    def test_braces_in_strings_ignored(self):
        code = "function f() { return '}'; } x"
        header_end = code.index(")") + 1
        assert code[:extend_to_body(code, header_end)].endswith("'}'; }")

    def test_concise_arrow_runs_to_statement_end(self):
        code = "const double = x => x * 2;\nnext();"
        header_end = code.index("=>") + 2
        assert code[:extend_to_body(code, header_end)] == "const double = x => x * 2;"

    def test_apostrophe_in_line_comment(self):
        code = "function f() {\n  // don't stop here\n  return 1;\n}\nnext();"
        header_end = code.index(")") + 1
        assert code[:extend_to_body(code, header_end)].endswith("return 1;\n}")

    def test_braces_in_block_comment_ignored(self):
        code = "function f() { /* } it's { */ return 1; } x"
        header_end = code.index(")") + 1
        assert code[:extend_to_body(code, header_end)].endswith("return 1; }")

    def test_bounded(self):
        code = "function f() {" + "a" * 5000
        header_end = code.index(")") + 1
        assert extend_to_body(code, header_end, limit=100) == header_end + 100


class LookaheadFamily(RegexFamily):
    family_name = "lookahead"
    regex = re.compile(r"(?=(?P<name>ab))")


class TestRegexScan:
    """Tests for the RegexFamily scan loop."""

    def test_zero_width_matches_advance(self):
        matches = LookaheadFamily().find("abab xab")

        assert [m.start for m in matches] == [0, 2, 6]
        assert all(m.start == m.end for m in matches)
        assert all(m.name == "ab" for m in matches)

    def test_zero_width_matches_capped(self):
        assert len(LookaheadFamily().find("ab" * 50, max_matches=5)) == 5


class TestExtractPatterns:
    """Tests for PatternExtractor.extract_patterns."""

    def test_empty_content(self):
        assert extract_patterns("", "empty.js") == []

    def test_whitespace_only_gives_structure(self):
        patterns = extract_patterns("   \n\n   \t\t   ", "whitespace.js")
        assert [p.type for p in patterns] == [PatternType.STRUCTURE]

    def test_rejects_files_over_limit(self):
        assert extract_patterns("x" * 600000, "large.js") == []

    def test_configurable_limit(self):
        extractor = PatternExtractor(max_file_size=10)
        assert extractor.extract_patterns("function f() {}", "a.js") == []

    def test_one_structure_pattern(self):
        code = "function test() { return 42; }"
        structures = of_type(extract_patterns(code, "src/app.js"), PatternType.STRUCTURE)

        assert len(structures) == 1
        structure = structures[0]
        assert structure.name == "js_structure"
        assert structure.signature == f"File structure: 1 lines, {len(code)} chars"
        assert structure.complexity == 1

    def test_structure_hash_covers_extension(self):
        code = "let a = 1;"
        js = of_type(extract_patterns(code, "a.js"), PatternType.STRUCTURE)[0]
        ts = of_type(extract_patterns(code, "a.ts"), PatternType.STRUCTURE)[0]
        assert js.content_hash != ts.content_hash

    def test_repeated_extraction_is_identical(self):
        code = """
        import React from 'react';
        function total(items) { return items.reduce((s, i) => s + i.price, 0); }
        const Card = () => { return <div />; };
        class Store { load(id) { return id; } }
        """
        first = extract_patterns(code, "src/app.jsx")
        second = extract_patterns(code, "src/app.jsx")

        assert first == second
        assert len(first) > 1

    def test_non_code_content(self):
        patterns = extract_patterns(
            "This is just plain text without any code patterns at all.", "text.txt"
        )
        assert any(p.type == PatternType.STRUCTURE for p in patterns)

    def test_file_path_and_project(self):
        extractor = PatternExtractor()
        patterns = extractor.extract_patterns(
            "function test() { return 42; }", "path/to/test.js", project_id="p1"
        )
        assert all(p.file_path == "path/to/test.js" for p in patterns)
        assert all(p.project_id == "p1" for p in patterns)

    def test_start_line(self):
        code = "\nline 1\nfunction test() {\n  return 42;\n}\nline 5\n"
        function = of_type(extract_patterns(code, "test.js"), PatternType.FUNCTION)[0]

        assert function.start_line == 3
        assert function.line_count == 3

    def test_snippet_and_signature(self):
        code = f"function veryLongFunction() {{ {'x' * 1000} }}"
        function = of_type(extract_patterns(code, "test.js"), PatternType.FUNCTION)[0]

        assert function.snippet == code
        assert len(function.signature) == 500
        assert function.signature == code[:500]

    def test_equal_code_hashes_equal(self):
        code = "function add(a, b) {\n  return a + b;\n}"
        first = of_type(extract_patterns(code, "a.js"), PatternType.FUNCTION)[0]
        second = of_type(extract_patterns(code, "b/c.js"), PatternType.FUNCTION)[0]
        assert first.content_hash == second.content_hash

    def test_malformed_code(self):
        patterns = extract_patterns("function { { { } } }", "malformed.js")
        assert isinstance(patterns, list)

    def test_unicode(self):
        patterns = extract_patterns('function тест() { return "мир"; }', "unicode.js")
        assert isinstance(patterns, list)

    def test_redos_input_completes(self):
        start = time.monotonic()
        patterns = extract_patterns("import " * 10000, "malicious.js")

        assert time.monotonic() - start < 5
        assert isinstance(patterns, list)

    def test_match_cap(self):
        functions = "\n".join(f"function func{i}() {{ return {i}; }}" for i in range(2000))
        patterns = extract_patterns(functions, "many-functions.js")

        assert len(of_type(patterns, PatternType.FUNCTION)) == 1000
        assert len(patterns) < 3000

    def test_failing_family_yields_nothing(self):
        class BrokenFamily(PatternFamily):
            family_name = "broken"

            def find(self, content, max_matches=1000):
                raise RuntimeError("boom")

        extractor = PatternExtractor(families=[BrokenFamily()])
        assert extractor.extract_patterns("function f() {}", "a.js") == []

    def test_custom_family(self):
        class TodoFamily(PatternFamily):
            family_name = "todo"
            pattern_type = PatternType.STRUCTURE

            def find(self, content, max_matches=1000):
                idx = content.find("TODO")
                return [FamilyMatch("todo", idx, idx + 4)] if idx >= 0 else []

        extractor = PatternExtractor(families=[TodoFamily()])
        patterns = extractor.extract_patterns("// TODO later", "a.js")
        assert [p.name for p in patterns] == ["todo", "js_structure"]


class TestComplexity:
    """Tests for calculate_complexity."""

    def test_basic(self):
        function = of_type(
            extract_patterns("function simple() { return 42; }", "test.js"),
            PatternType.FUNCTION,
        )[0]
        assert function.complexity == 1

    def test_control_structures(self):
        code = """
        function complex() {
          if (x > 0) {
            for (let i = 0; i < 10; i++) {
              if (i % 2 === 0) {
                try {
                  doSomething();
                } catch (error) {
                  handleError();
                }
              }
            }
          }
          return x;
        }
        """
        function = of_type(extract_patterns(code, "complex.js"), PatternType.FUNCTION)[0]
        assert function.complexity == 6

    def test_operators(self):
        assert calculate_complexity("a && b || c ?? d") == 4
        assert calculate_complexity("ok ? yes : no") == 2
        assert calculate_complexity("user?.name") == 1

    def test_keywords_need_word_boundaries(self):
        assert calculate_complexity("const iffy = forEach(elsewhere);") == 1

    def test_capped(self):
        body = "\n".join(f"if (x{i}) {{ y{i}(); }}" for i in range(100))
        assert calculate_complexity(body) == MAX_COMPLEXITY
