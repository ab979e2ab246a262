"""Tests for the file driver."""

from __future__ import annotations

from pathlib import Path

from peephole.config import GeneratorConfig
from peephole.generator import (
    PatternFileGenerator,
    expand_paths,
    file_stem,
    output_path,
    translate_tree,
)
from peephole.parser import parse_patterns

GOOD_SOURCE = "rule drop_dup_pop { dup; pop; } --> { }\n"
BAD_SOURCE = """
int_oper = { iadd | imul };
rule S { op: int_oper; } --> { switch op { case iadd: isub; } }
"""


def _write(directory: Path, name: str, text: str) -> Path:
    path = directory / name
    path.write_text(text, encoding="utf-8")
    return path


class TestNaming:
    def test_stem_stops_at_first_dot(self):
        assert file_stem("dir/arith.v2.patterns") == "arith"

    def test_stem_is_made_identifier_safe(self):
        assert file_stem("my-rules.peep") == "my_rules"

    def test_output_path_replaces_extension(self):
        assert output_path("dir/arith.patterns") == Path("dir/arith.gen.h")
        assert output_path("dir/arith.peephole") == Path("dir/arith.gen.h")

    def test_output_path_for_unknown_extension(self):
        assert output_path("arith.txt") == Path("arith.txt.gen.h")


class TestExpandPaths:
    def test_directory_is_searched_recursively(self, tmp_path):
        _write(tmp_path, "b.patterns", GOOD_SOURCE)
        (tmp_path / "sub").mkdir()
        _write(tmp_path / "sub", "a.peep", GOOD_SOURCE)
        _write(tmp_path, "notes.txt", "ignored")
        found = expand_paths([str(tmp_path)])
        assert found == sorted([tmp_path / "b.patterns", tmp_path / "sub" / "a.peep"])

    def test_files_are_kept_as_given(self, tmp_path):
        path = _write(tmp_path, "rules.txt", GOOD_SOURCE)
        assert expand_paths([str(path)]) == [path]


class TestTranslateTree:
    def test_functions_then_init(self):
        result = translate_tree(parse_patterns(GOOD_SOURCE), "peep")
        assert result.function_names == ["drop_dup_pop"]
        assert result.code.index("int drop_dup_pop(CODE **c)") < result.code.index(
            "int init_patterns_peep()"
        )

    def test_rules_share_declarations(self):
        tree = parse_patterns(
            "ops = { iadd | isub }; rule a { ops; } --> { } rule b { ops; } --> { }"
        )
        result = translate_tree(tree, "x")
        assert result.function_names == ["a_iadd", "a_isub", "b_iadd", "b_isub"]


class TestPatternFileGenerator:
    def test_writes_header_next_to_input(self, tmp_path):
        path = _write(tmp_path, "peep.patterns", GOOD_SOURCE)
        (outcome,) = PatternFileGenerator().generate([path])
        assert outcome.ok
        assert outcome.output == tmp_path / "peep.gen.h"
        assert outcome.function_count == 1
        text = outcome.output.read_text(encoding="utf-8")
        assert "int drop_dup_pop(CODE **c) {" in text
        assert "int init_patterns_peep() {" in text

    def test_failing_file_does_not_stop_batch(self, tmp_path, caplog):
        bad = _write(tmp_path, "bad.patterns", BAD_SOURCE)
        good = _write(tmp_path, "good.patterns", GOOD_SOURCE)
        outcomes = PatternFileGenerator().generate([bad, good])
        assert [o.ok for o in outcomes] == [False, True]
        assert "rule 'S'" in outcomes[0].error
        assert not (tmp_path / "bad.gen.h").exists()
        assert (tmp_path / "good.gen.h").exists()
        assert "1 of 2 pattern file(s) failed" in caplog.text

    def test_undecodable_file_does_not_stop_batch(self, tmp_path):
        bad = tmp_path / "bad.patterns"
        bad.write_bytes(b"rule r { \xff\xfe; } --> { }\n")
        good = _write(tmp_path, "good.patterns", GOOD_SOURCE)
        outcomes = PatternFileGenerator().generate([bad, good])
        assert [o.ok for o in outcomes] == [False, True]
        assert "utf-8" in outcomes[0].error
        assert not (tmp_path / "bad.gen.h").exists()
        assert (tmp_path / "good.gen.h").exists()

    def test_missing_file_is_reported(self, tmp_path):
        (outcome,) = PatternFileGenerator().generate([tmp_path / "absent.patterns"])
        assert not outcome.ok
        assert outcome.output is None

    def test_stdout_mode_writes_no_file(self, tmp_path, capsys):
        path = _write(tmp_path, "peep.patterns", GOOD_SOURCE)
        config = GeneratorConfig(use_stdout=True)
        (outcome,) = PatternFileGenerator(config).generate([path])
        assert outcome.ok
        assert "int drop_dup_pop(CODE **c) {" in capsys.readouterr().out
        assert not (tmp_path / "peep.gen.h").exists()

    def test_custom_helpers(self, tmp_path):
        helpers = _write(tmp_path, "helpers.h", "/* mine */\n")
        path = _write(tmp_path, "peep.patterns", GOOD_SOURCE)
        config = GeneratorConfig(helpers_path=helpers)
        (outcome,) = PatternFileGenerator(config).generate([path])
        text = outcome.output.read_text(encoding="utf-8")
        assert text.startswith("/* mine */\n\nint drop_dup_pop(CODE **c) {\n")
