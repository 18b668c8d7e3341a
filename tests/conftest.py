"""Pytest configuration and fixtures for antlrgen tests.

No test runs java or touches the network: the ANTLR tool is replaced by
FakeAntlrTool, which writes a placeholder parser per grammar and reports an
ANTLR-style error for any grammar whose text contains "SYNTAX_ERROR".
"""

import subprocess
from pathlib import Path
from typing import Callable, List

import pytest

from antlrgen import output
from antlrgen.build.antlr_tool import AntlrTool, ErrorManager
from antlrgen.build.toolchain import AntlrToolchain

FAKE_PREFIX = ["java", "-cp", "antlr-complete.jar", "org.antlr.Tool"]


class FakeToolchain(AntlrToolchain):
    """Toolchain that never looks for java or downloads a jar."""

    def command_prefix(self) -> List[str]:
        return list(FAKE_PREFIX)


class FakeAntlrTool(AntlrTool):
    """AntlrTool whose subprocess is simulated in-process."""

    invocations: List[List[str]] = []

    def __init__(self) -> None:
        super().__init__(FakeToolchain())

    def _run(self, cmd: List[str]) -> subprocess.CompletedProcess:
        FakeAntlrTool.invocations.append(list(self.grammar_files))
        assert self.input_directory is not None
        assert self.output_directory is not None

        lines = []
        for name in self.grammar_files:
            text = (self.input_directory / name).read_text()
            if "SYNTAX_ERROR" in text:
                lines.append(f"error(100): {name}:1:1: syntax error...")
            else:
                stem = name.rsplit(".", 1)[0]
                (self.output_directory / f"{stem}Parser.java").write_text(f"// generated from {name}\n")
        returncode = 1 if lines else 0
        return subprocess.CompletedProcess(cmd, returncode, stdout="\n".join(lines) + "\n", stderr=None)


@pytest.fixture(autouse=True)
def _reset_global_state():
    """Reset process-wide tool and output state around each test."""
    ErrorManager.reset_error_state()
    FakeAntlrTool.invocations = []
    output.set_verbose(False)
    output.init_timer()
    yield
    ErrorManager.reset_error_state()
    output.set_verbose(False)


@pytest.fixture
def fake_tool_factory() -> Callable[[], AntlrTool]:
    return FakeAntlrTool


@pytest.fixture
def fake_tool_class() -> type:
    return FakeAntlrTool


@pytest.fixture
def fake_toolchain() -> AntlrToolchain:
    return FakeToolchain()


@pytest.fixture
def grammar_tree(tmp_path: Path) -> dict:
    """Create the tree used by most scenario tests.

    grammars/
        README.txt
        a/A.g
        b/notes.txt
        b/sub/B.g3
        c/Lexer.g
        c/Parser.g
    """
    root = tmp_path / "grammars"
    (root / "a").mkdir(parents=True)
    (root / "b" / "sub").mkdir(parents=True)
    (root / "c").mkdir(parents=True)

    (root / "README.txt").write_text("not a grammar")
    (root / "a" / "A.g").write_text("grammar A;\nr : 'a' ;\n")
    (root / "b" / "notes.txt").write_text("notes")
    (root / "b" / "sub" / "B.g3").write_text("grammar B;\nr : 'b' ;\n")
    (root / "c" / "Lexer.g").write_text("lexer grammar Lexer;\nID : 'x' ;\n")
    (root / "c" / "Parser.g").write_text("parser grammar Parser;\nr : ID ;\n")

    return {"root": root, "out": tmp_path / "out"}
