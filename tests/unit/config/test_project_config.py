"""Tests for pyproject.toml configuration loading."""

import textwrap

import pytest

from antlrgen.build.toolchain import DEFAULT_ANTLR_VERSION
from antlrgen.config import ProjectConfig, load_project_config
from antlrgen.errors import ConfigurationError


def _write(tmp_path, body: str):
    (tmp_path / "pyproject.toml").write_text(textwrap.dedent(body))


def test_defaults_without_pyproject(tmp_path):
    config = load_project_config(tmp_path)

    assert config.source_dir == tmp_path / "src" / "antlr"
    assert config.output_dir == tmp_path / "gen-src"
    assert dict(config.compiler_options) == {}
    assert config.antlr_version == DEFAULT_ANTLR_VERSION
    assert config.antlr_jar is None
    assert config.clean_targets == ()


def test_defaults_without_tool_table(tmp_path):
    _write(tmp_path, '[project]\nname = "demo"\n')
    assert load_project_config(tmp_path) == ProjectConfig.defaults(tmp_path)


def test_full_table(tmp_path):
    _write(
        tmp_path,
        """
        [tool.antlrgen]
        source-directory = "grammars"
        output-directory = "build/generated"
        antlr-version = "3.5.2"
        antlr-jar = "lib/antlr.jar"
        java = "/opt/jdk/bin/java"
        clean-targets = ["build"]

        [tool.antlrgen.compiler-options]
        debug = true
        max-switch-case-labels = 100
        """,
    )

    config = load_project_config(tmp_path)

    assert config.source_dir == tmp_path / "grammars"
    assert config.output_dir == tmp_path / "build" / "generated"
    assert dict(config.compiler_options) == {"debug": True, "max-switch-case-labels": 100}
    assert config.antlr_version == "3.5.2"
    assert config.antlr_jar == tmp_path / "lib" / "antlr.jar"
    assert config.java == "/opt/jdk/bin/java"
    assert config.clean_targets == (tmp_path / "build",)


def test_unknown_compiler_option_is_kept_for_the_build_to_reject(tmp_path):
    _write(tmp_path, "[tool.antlrgen.compiler-options]\nlanguage = 'Python'\n")
    assert dict(load_project_config(tmp_path).compiler_options) == {"language": "Python"}


def test_unknown_table_key(tmp_path):
    _write(tmp_path, "[tool.antlrgen]\nsource-dir = 'x'\n")
    with pytest.raises(ConfigurationError, match="source-dir"):
        load_project_config(tmp_path)


@pytest.mark.parametrize(
    "line",
    [
        "source-directory = 3",
        "compiler-options = 'debug'",
        "clean-targets = 'build'",
        "clean-targets = [1, 2]",
    ],
)
def test_wrong_types(tmp_path, line):
    _write(tmp_path, f"[tool.antlrgen]\n{line}\n")
    with pytest.raises(ConfigurationError):
        load_project_config(tmp_path)


def test_invalid_toml(tmp_path):
    _write(tmp_path, "[tool.antlrgen\n")
    with pytest.raises(ConfigurationError, match="Invalid TOML"):
        load_project_config(tmp_path)


def test_with_overrides(tmp_path):
    _write(tmp_path, "[tool.antlrgen.compiler-options]\ndebug = true\nreport = true\n")
    config = load_project_config(tmp_path).with_overrides(
        source_dir="other",
        compiler_options={"report": False, "trace": True},
    )

    assert config.source_dir == tmp_path / "other"
    assert config.output_dir == tmp_path / "gen-src"
    assert dict(config.compiler_options) == {"debug": True, "report": False, "trace": True}


def test_with_no_overrides_is_unchanged(tmp_path):
    config = ProjectConfig.defaults(tmp_path)
    assert config.with_overrides() == config
