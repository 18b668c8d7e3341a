"""End-to-end tests for the grammar build step using the in-process fake tool."""

from functools import partial
from pathlib import Path
from unittest.mock import patch

import pytest

from antlrgen import output
from antlrgen.build import build_grammars, compile_grammars
from antlrgen.build.antlr_tool import AntlrTool
from antlrgen.build.toolchain import AntlrToolchain
from antlrgen.config import ProjectConfig
from antlrgen.errors import GrammarCompilationError, ToolchainError, UnknownConfigurationOption


def _generated(out: Path) -> list:
    return sorted(p.relative_to(out).as_posix() for p in out.rglob("*") if p.is_file())


def test_output_mirrors_grammar_directories(grammar_tree, fake_tool_factory, fake_tool_class):
    root, out = grammar_tree["root"], grammar_tree["out"]

    result = compile_grammars(root, out, tool_factory=fake_tool_factory)

    assert _generated(out) == [
        "a/AParser.java",
        "b/sub/BParser.java",
        "c/LexerParser.java",
        "c/ParserParser.java",
    ]
    assert fake_tool_class.invocations == [["A.g"], ["B.g3"], ["Lexer.g", "Parser.g"]]
    assert [u.output_dir for u in result.units] == [
        (out / "a").absolute(),
        (out / "b" / "sub").absolute(),
        (out / "c").absolute(),
    ]
    assert result.grammar_count == 4
    assert not result.is_empty


def test_intermediate_and_root_dirs_get_no_output(grammar_tree, fake_tool_factory):
    root, out = grammar_tree["root"], grammar_tree["out"]

    compile_grammars(root, out, tool_factory=fake_tool_factory)

    assert [p.name for p in (out / "b").iterdir()] == ["sub"]
    assert sorted(p.name for p in out.iterdir()) == ["a", "b", "c"]


def test_grammar_at_source_root_compiles_into_output_root(tmp_path, fake_tool_factory):
    root = tmp_path / "grammars"
    root.mkdir()
    (root / "Top.g").write_text("grammar Top;")
    out = tmp_path / "out"

    compile_grammars(root, out, tool_factory=fake_tool_factory)

    assert _generated(out) == ["TopParser.java"]


def test_empty_source_tree_is_a_noop(tmp_path, fake_tool_factory, fake_tool_class):
    root = tmp_path / "grammars"
    (root / "docs").mkdir(parents=True)
    (root / "docs" / "notes.txt").write_text("nothing to see")
    out = tmp_path / "out"

    result = compile_grammars(root, out, tool_factory=fake_tool_factory)

    assert result.is_empty
    assert fake_tool_class.invocations == []
    assert not out.exists()


def test_missing_source_root_is_a_noop(tmp_path, fake_tool_factory):
    result = compile_grammars(tmp_path / "missing", tmp_path / "out", tool_factory=fake_tool_factory)
    assert result.is_empty


def test_rerun_regenerates_everything(grammar_tree, fake_tool_factory, fake_tool_class):
    root, out = grammar_tree["root"], grammar_tree["out"]

    compile_grammars(root, out, tool_factory=fake_tool_factory)
    compile_grammars(root, out, tool_factory=fake_tool_factory)

    assert len(fake_tool_class.invocations) == 6


def test_first_failure_stops_the_run(grammar_tree, fake_tool_factory, fake_tool_class):
    root, out = grammar_tree["root"], grammar_tree["out"]
    (root / "b" / "sub" / "B.g3").write_text("grammar B;\nSYNTAX_ERROR\n")

    with pytest.raises(GrammarCompilationError) as exc_info:
        compile_grammars(root, out, tool_factory=fake_tool_factory)

    assert exc_info.value.input_dir == root / "b" / "sub"
    assert exc_info.value.error_count == 1
    assert fake_tool_class.invocations == [["A.g"], ["B.g3"]]
    # earlier output stays, later units never run
    assert (out / "a" / "AParser.java").is_file()
    assert not (out / "c").exists()


def test_keep_going_compiles_everything_and_aggregates(grammar_tree, fake_tool_factory, fake_tool_class):
    root, out = grammar_tree["root"], grammar_tree["out"]
    (root / "a" / "A.g").write_text("grammar A;\nSYNTAX_ERROR\n")
    (root / "c" / "Lexer.g").write_text("lexer grammar Lexer;\nSYNTAX_ERROR\n")
    (root / "c" / "Parser.g").write_text("parser grammar Parser;\nSYNTAX_ERROR\n")

    with pytest.raises(GrammarCompilationError) as exc_info:
        compile_grammars(root, out, tool_factory=fake_tool_factory, keep_going=True)

    assert len(fake_tool_class.invocations) == 3
    assert exc_info.value.failures == [(root / "a", 1), (root / "c", 2)]
    assert exc_info.value.error_count == 3
    assert (out / "b" / "sub" / "BParser.java").is_file()


def test_unknown_option_fails_before_any_work(grammar_tree, fake_tool_factory, fake_tool_class):
    root, out = grammar_tree["root"], grammar_tree["out"]

    with pytest.raises(UnknownConfigurationOption):
        compile_grammars(root, out, {"debug": True, "make": True}, tool_factory=fake_tool_factory)

    assert fake_tool_class.invocations == []
    assert not out.exists()


def test_options_reach_every_unit(grammar_tree, fake_tool_class):
    root, out = grammar_tree["root"], grammar_tree["out"]
    commands = []

    class RecordingTool(fake_tool_class):
        def _run(self, cmd):
            commands.append(cmd)
            return super()._run(cmd)

    compile_grammars(root, out, {"trace": True}, tool_factory=RecordingTool)

    assert len(commands) == 3
    assert all("-trace" in cmd for cmd in commands)


def test_build_grammars_uses_project_settings(grammar_tree, fake_tool_factory):
    root, out = grammar_tree["root"], grammar_tree["out"]
    project = ProjectConfig(
        project_dir=root.parent,
        source_dir=root,
        output_dir=out,
        compiler_options={"report": True},
    )

    result = build_grammars(project, tool_factory=fake_tool_factory)

    assert result.source_dir == root
    assert len(result.units) == 3


def test_build_grammars_default_tool_uses_project_toolchain(grammar_tree):
    root, out = grammar_tree["root"], grammar_tree["out"]
    project = ProjectConfig(project_dir=root.parent, source_dir=root, output_dir=out, antlr_version="3.4")

    with patch("antlrgen.build.orchestrator.compile_grammars") as mock_compile:
        build_grammars(project)

    factory = mock_compile.call_args[1]["tool_factory"]
    assert factory.args[0].version == "3.4"


def test_missing_java_fails_before_any_output(grammar_tree, monkeypatch, capsys):
    root, out = grammar_tree["root"], grammar_tree["out"]
    monkeypatch.delenv("JAVA_HOME", raising=False)
    toolchain = AntlrToolchain(cache_root=root.parent / "cache")

    with patch("antlrgen.build.toolchain.shutil.which", return_value=None):
        with pytest.raises(ToolchainError):
            compile_grammars(root, out, tool_factory=partial(AntlrTool, toolchain))

    assert not out.exists()
    assert "Compiling ANTLR grammars" not in capsys.readouterr().out


def test_verbose_run_lists_non_default_options(grammar_tree, fake_tool_factory, capsys):
    root, out = grammar_tree["root"], grammar_tree["out"]
    output.set_verbose(True)

    compile_grammars(root, out, {"trace": True, "max-switch-case-labels": 50}, tool_factory=fake_tool_factory)

    assert "Options: max-switch-case-labels=50, trace=True" in capsys.readouterr().out
