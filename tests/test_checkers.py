# tests/test_checkers.py
"""
Tests for the sniff framework: diagnostics, suppressions, registry,
runner and the command-line entry point.
"""

import io
import json

import pytest

from phpsniffs.checkers import (
    Diagnostic,
    DiagnosticSeverity,
    Sniff,
    SniffFile,
    SniffRegistry,
    SniffRunner,
    SniffRunResults,
    SourceLocation,
    SuppressionManager,
    default_registry,
    main,
    run_files,
)
from phpsniffs.errors import SniffError
from phpsniffs.sniffs import FunctionCallArgumentSpacingSniff
from phpsniffs.tokenizer import tokenize
from phpsniffs.tokens import TokenKind

SPACING = "Functions.FunctionCallArgumentSpacing"


class ExplodingSniff(Sniff):
    """Reports once, then fails."""

    name = "Test.Exploding"
    codes = frozenset({"Boom"})

    def register(self):
        return frozenset({TokenKind.STRING})

    def process(self, phpcs_file, stack_ptr):
        phpcs_file.add_error("boom", stack_ptr, "Boom")
        raise RuntimeError("kaboom")


class WarningSniff(Sniff):
    name = "Test.Warning"
    codes = frozenset({"Semicolon"})

    def register(self):
        return frozenset({TokenKind.SEMICOLON})

    def process(self, phpcs_file, stack_ptr):
        phpcs_file.add_warning("Found %s semicolon", stack_ptr, "Semicolon", ["a"])


def make_diag(code=f"{SPACING}.NoSpaceAfterComma", file="a.php", line=3):
    return Diagnostic(
        code=code,
        message="msg",
        severity=DiagnosticSeverity.ERROR,
        location=SourceLocation(file=file, line=line, column=1),
    )


class TestDiagnostic:

    def test_to_json(self):
        diag = make_diag()
        data = diag.to_json()
        assert data["file"] == "a.php"
        assert data["line"] == 3
        assert data["severity"] == "error"
        assert data["code"] == f"{SPACING}.NoSpaceAfterComma"
        assert "data" not in data
        assert json.loads(diag.to_json_str()) == data

    def test_to_gcc_format(self):
        assert make_diag().to_gcc_format() == (
            f"a.php:3:1: error: msg [{SPACING}.NoSpaceAfterComma]"
        )

    def test_rule_code(self):
        assert make_diag().rule_code == "NoSpaceAfterComma"


class TestSniffFile:

    def test_add_error_qualifies_code(self):
        phpcs_file = SniffFile(tokenize("<?php foo();", filename="x.php"))
        phpcs_file.active_sniff = FunctionCallArgumentSpacingSniff()
        phpcs_file.add_error("bad", 1, "Code")
        diag = phpcs_file.diagnostics[0]
        assert diag.code == f"{SPACING}.Code"
        assert diag.severity is DiagnosticSeverity.ERROR
        assert diag.location == SourceLocation("x.php", 1, 7)

    def test_add_warning_formats_data(self):
        phpcs_file = SniffFile(tokenize("<?php foo();"))
        phpcs_file.add_warning("%s and %s", 1, "Pair", ["a", 2])
        diag = phpcs_file.diagnostics[0]
        assert diag.message == "a and 2"
        assert diag.data == ("a", 2)
        assert diag.code == "Pair"
        assert diag.severity is DiagnosticSeverity.WARNING

    def test_literal_percent_kept(self):
        phpcs_file = SniffFile(tokenize("<?php foo();"))
        phpcs_file.add_error("100% bad", 1, "Percent", [1])
        diag = phpcs_file.diagnostics[0]
        assert diag.message == "100% bad"
        assert diag.data == (1,)

    def test_delegates_to_stream(self):
        stream = tokenize("<?php\r\nfoo();")
        phpcs_file = SniffFile(stream)
        assert phpcs_file.tokens is stream
        assert phpcs_file.eol_char == "\r\n"
        assert phpcs_file.find_next(TokenKind.OPEN_PARENTHESIS, 0) == 2
        assert phpcs_file.find_previous(TokenKind.STRING, 3) == 1


class TestSuppressionManager:

    def test_global_prefix(self):
        sm = SuppressionManager()
        sm.add_global_suppression(SPACING)
        assert sm.is_suppressed(make_diag())
        assert not sm.is_suppressed(make_diag(code="Other.Sniff.Code"))

    def test_global_does_not_match_partial_component(self):
        sm = SuppressionManager()
        sm.add_global_suppression("Functions.FunctionCall")
        assert not sm.is_suppressed(make_diag())

    def test_file_level(self):
        sm = SuppressionManager()
        sm.add_file_suppression(SPACING, "legacy/*.php")
        assert sm.is_suppressed(make_diag(file="legacy/old.php"))
        assert not sm.is_suppressed(make_diag(file="src/new.php"))

    def test_filter(self):
        sm = SuppressionManager()
        sm.add_global_suppression(f"{SPACING}.SpaceBeforeComma")
        kept = sm.filter_diagnostics([
            make_diag(),
            make_diag(code=f"{SPACING}.SpaceBeforeComma"),
        ])
        assert [d.rule_code for d in kept] == ["NoSpaceAfterComma"]


class TestInlineSuppressions:

    def run(self, source):
        return SniffRunner().run_source(source, filename="s.php")

    def test_ignore_previous_line(self):
        results = self.run("<?php\n// phpcs:ignore\nfoo($a);\n")
        assert results.diagnostics == []

    def test_ignore_same_line_with_code(self):
        source = (
            "<?php\n"
            f"foo( $a,$b ); // phpcs:ignore {SPACING}.NoSpaceAfterComma\n"
        )
        assert self.run(source).diagnostics == []

    def test_ignore_other_code(self):
        source = (
            "<?php\n"
            f"foo( $a,$b ); // phpcs:ignore {SPACING}.SpaceBeforeComma -- why\n"
        )
        codes = [d.rule_code for d in self.run(source).diagnostics]
        assert codes == ["NoSpaceAfterComma"]

    def test_disable_enable_region(self):
        source = (
            "<?php\n"
            f"// phpcs:disable {SPACING}\n"
            "foo($a);\n"
            "// phpcs:enable\n"
            "bar($b);\n"
        )
        diags = self.run(source).diagnostics
        assert {d.location.line for d in diags} == {5}
        assert len(diags) == 2

    def test_ignore_does_not_leak_between_runs(self):
        runner = SniffRunner()
        first = runner.run_source("<?php\n// phpcs:ignore\nfoo($a);\n")
        assert first.diagnostics == []
        second = runner.run_source("<?php\n$x = 1;\nfoo($a);\n")
        assert [d.rule_code for d in second.diagnostics] == [
            "SpaceBeforeCloseParens",
            "SpaceAfterOpenParens",
        ]

    def test_disable_to_end_of_file(self):
        source = "<?php\n/* phpcs:disable */\nfoo($a);\n\nbar($b);\n"
        assert self.run(source).diagnostics == []


class TestSniffRegistry:

    def test_default_registry(self):
        registry = default_registry()
        assert registry.names == [SPACING]
        assert registry.get_by_name(SPACING) is FunctionCallArgumentSpacingSniff

    def test_enable_disable(self):
        registry = SniffRegistry()
        registry.register(FunctionCallArgumentSpacingSniff)
        registry.register(WarningSniff)
        registry.disable(SPACING)
        assert registry.get_enabled() == [WarningSniff]
        registry.enable(SPACING)
        assert len(registry.get_enabled()) == 2
        registry.unregister("Test.Warning")
        assert registry.names == [SPACING]

    def test_filter_by_code(self):
        registry = default_registry()
        assert registry.filter_by_code("SpaceBeforeComma") == [
            FunctionCallArgumentSpacingSniff
        ]
        assert registry.filter_by_code("Nope") == []


class TestSniffRunner:

    def test_run_source(self):
        results = SniffRunner().run_source("<?php foo($a,$b);", filename="r.php")
        assert [d.rule_code for d in results.diagnostics] == [
            "SpaceBeforeCloseParens",
            "SpaceAfterOpenParens",
            "NoSpaceAfterComma",
        ]
        assert results.error_count == 3
        assert results.files == ["r.php"]
        assert len(results.diagnostics_by_sniff[SPACING]) == 3
        assert f"{SPACING}_elapsed_ms" in results.stats

    def test_select_unknown_sniff(self):
        with pytest.raises(SniffError):
            SniffRunner().run(tokenize("<?php"), sniffs=["Nope"])

    def test_severity_option(self):
        runner = SniffRunner(options={"*": {"severity": "warning"}})
        results = runner.run_source("<?php foo($a);")
        assert results.error_count == 0
        assert results.warning_count == 2

    def test_invalid_severity(self):
        runner = SniffRunner(options={SPACING: {"severity": "fatal"}})
        with pytest.raises(SniffError):
            runner.run_source("<?php foo($a);")

    def test_tokenizer_failure_is_reported(self):
        results = SniffRunner().run_source("<?php foo(;", filename="bad.php")
        assert len(results.diagnostics) == 1
        diag = results.diagnostics[0]
        assert diag.code == "internal.Tokenizer"
        assert diag.location.file == "bad.php"

    def test_inline_html_is_not_sniffed(self):
        source = (
            "<title>My Page (beta, v2)</title>\n"
            "<?php foo( $a ); ?>\n"
            "<p>Call(x,y)</p>\n"
        )
        assert SniffRunner().run_source(source).diagnostics == []

    def test_code_between_html_is_sniffed(self):
        source = "<ul>\n<?php foo( $a,$b ); ?>\n</ul>\n"
        diags = SniffRunner().run_source(source).diagnostics
        assert [(d.rule_code, d.location.line) for d in diags] == [
            ("NoSpaceAfterComma", 2),
        ]

    def test_failing_sniff_is_replaced_by_internal_error(self):
        registry = default_registry()
        registry.register(ExplodingSniff)
        results = SniffRunner(registry=registry).run_source(
            "<?php foo($a); bar($b);"
        )
        codes = [d.code for d in results.diagnostics]
        assert codes.count("internal.Exception") == 1
        assert "Test.Exploding.Boom" not in codes
        assert len(results.by_code(SPACING)) == 4

    def test_warning_sniff(self):
        registry = SniffRegistry()
        registry.register(WarningSniff)
        results = SniffRunner(registry=registry).run_source("<?php foo();")
        assert results.warning_count == 1
        assert results.diagnostics[0].message == "Found a semicolon"

    def test_run_paths(self, tmp_path):
        (tmp_path / "a.php").write_text("<?php foo($a);\n")
        (tmp_path / "sub").mkdir()
        (tmp_path / "sub" / "b.php").write_text("<?php bar( $b );\n")
        (tmp_path / "notes.txt").write_text("foo($a)")
        results = SniffRunner().run_paths([tmp_path])
        assert len(results.files) == 2
        assert results.total_count == 2
        assert results.by_file(str(tmp_path / "a.php")) == results.diagnostics


class TestSniffRunResults:

    def test_merge_and_summary(self):
        first = SniffRunResults(files=["a.php"], sniff_names=[SPACING])
        first.diagnostics.append(make_diag())
        first.diagnostics_by_sniff[SPACING].append(make_diag())
        first.stats[f"{SPACING}_elapsed_ms"] = 1.0
        second = SniffRunResults(files=["b.php"], sniff_names=[SPACING])
        second.stats[f"{SPACING}_elapsed_ms"] = 2.0

        first.merge(second)
        assert first.files == ["a.php", "b.php"]
        assert first.sniff_names == [SPACING]
        assert first.stats[f"{SPACING}_elapsed_ms"] == 3.0
        summary = first.summary()
        assert "1 diagnostics (1 errors, 0 warnings) in 2 files" in summary
        assert f"{SPACING}: 1 findings" in summary

    def test_renderers(self):
        results = SniffRunResults(diagnostics=[make_diag(), make_diag(line=4)])
        assert len(results.to_json_lines().splitlines()) == 2
        assert results.to_gcc_format().splitlines()[1].startswith("a.php:4:1:")


class TestMain:

    def test_json_output_and_exit_code(self, tmp_path, capsys):
        path = tmp_path / "a.php"
        path.write_text("<?php\nfoo( $a,$b );\n")
        assert main([str(path), "--output", "json"]) == 1
        lines = capsys.readouterr().out.splitlines()
        assert len(lines) == 1
        record = json.loads(lines[0])
        assert record["code"] == f"{SPACING}.NoSpaceAfterComma"
        assert record["line"] == 2

    def test_clean_file(self, tmp_path, capsys):
        path = tmp_path / "a.php"
        path.write_text("<?php\nfoo( $a, $b );\n")
        assert main([str(path)]) == 0
        assert capsys.readouterr().out == ""

    def test_exclude(self, tmp_path):
        path = tmp_path / "a.php"
        path.write_text("<?php\nfoo( $a,$b );\n")
        assert main([str(path), "--exclude", SPACING]) == 0

    def test_severity_warning(self, tmp_path, capsys):
        path = tmp_path / "a.php"
        path.write_text("<?php\nfoo( $a,$b );\n")
        assert main([str(path), "--severity", "warning"]) == 0
        assert ": warning: " in capsys.readouterr().out

    def test_run_files_defaults_to_gcc(self, tmp_path):
        path = tmp_path / "a.php"
        path.write_text("<?php\nfoo( $a,$b );\n")
        out = io.StringIO()
        assert run_files([str(path)], stream=out) == 1
        assert out.getvalue() == (
            f"{path}:2:1: error: No space found after comma in function call "
            f"[{SPACING}.NoSpaceAfterComma]\n"
        )

    def test_missing_path(self, tmp_path):
        assert main([str(tmp_path / "missing.php")]) == 2

    def test_list_sniffs(self, capsys):
        assert main(["--list-sniffs"]) == 0
        assert SPACING in capsys.readouterr().out
