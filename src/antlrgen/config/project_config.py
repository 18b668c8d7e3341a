"""Project configuration for antlrgen.

Settings live in the [tool.antlrgen] table of the project's pyproject.toml:

    [tool.antlrgen]
    source-directory = "src/antlr"
    output-directory = "gen-src"
    clean-targets = ["build"]

    [tool.antlrgen.compiler-options]
    debug = true
    max-switch-case-labels = 100

Every key is optional. Relative paths are resolved against the project
directory.
"""

import dataclasses
import logging
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional

from antlrgen.build.toolchain import DEFAULT_ANTLR_VERSION
from antlrgen.errors import ConfigurationError

logger = logging.getLogger(__name__)

PYPROJECT_FILE = "pyproject.toml"
TOOL_TABLE = "antlrgen"

DEFAULT_SOURCE_DIR = "src/antlr"
DEFAULT_OUTPUT_DIR = "gen-src"

_KNOWN_KEYS = frozenset(
    {
        "source-directory",
        "output-directory",
        "compiler-options",
        "antlr-version",
        "antlr-jar",
        "java",
        "clean-targets",
    }
)


@dataclass(frozen=True)
class ProjectConfig:
    """Resolved antlrgen settings for one project.

    Attributes:
        project_dir: Project root directory
        source_dir: Root scanned for grammar files
        output_dir: Root of the mirrored generated-source tree
        compiler_options: Raw compiler option overrides (merged and validated later)
        antlr_version: ANTLR version to provision when no jar is configured
        antlr_jar: Explicit ANTLR jar, if configured
        java: Explicit java executable, if configured
        clean_targets: Extra paths removed by the base clean step
    """

    project_dir: Path
    source_dir: Path
    output_dir: Path
    compiler_options: Mapping[str, Any] = field(default_factory=lambda: MappingProxyType({}))
    antlr_version: str = DEFAULT_ANTLR_VERSION
    antlr_jar: Optional[Path] = None
    java: Optional[str] = None
    clean_targets: tuple[Path, ...] = ()

    @classmethod
    def defaults(cls, project_dir: Path) -> "ProjectConfig":
        project_dir = Path(project_dir).absolute()
        return cls(
            project_dir=project_dir,
            source_dir=project_dir / DEFAULT_SOURCE_DIR,
            output_dir=project_dir / DEFAULT_OUTPUT_DIR,
        )

    def with_overrides(
        self,
        source_dir: Optional[Path] = None,
        output_dir: Optional[Path] = None,
        compiler_options: Optional[Mapping[str, Any]] = None,
    ) -> "ProjectConfig":
        """Return a copy with command-line overrides applied.

        compiler_options are layered over the configured overrides.
        """
        changes: Dict[str, Any] = {}
        if source_dir is not None:
            changes["source_dir"] = self.project_dir / source_dir
        if output_dir is not None:
            changes["output_dir"] = self.project_dir / output_dir
        if compiler_options:
            changes["compiler_options"] = MappingProxyType({**self.compiler_options, **compiler_options})
        return dataclasses.replace(self, **changes)


def _read_tool_table(pyproject: Path) -> Dict[str, Any]:
    try:
        with open(pyproject, "rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigurationError(f"Invalid TOML in {pyproject}: {e}") from e

    table = data.get("tool", {}).get(TOOL_TABLE, {})
    if not isinstance(table, dict):
        raise ConfigurationError(f"[tool.{TOOL_TABLE}] in {pyproject} must be a table")
    return table


def _expect(table: Mapping[str, Any], key: str, kind: type, pyproject: Path) -> Any:
    value = table.get(key)
    if value is not None and not isinstance(value, kind):
        raise ConfigurationError(f"'{key}' in {pyproject} must be a {kind.__name__}, got {type(value).__name__}")
    return value


def load_project_config(project_dir: Path, pyproject: Optional[Path] = None) -> ProjectConfig:
    """Load antlrgen settings for a project.

    Args:
        project_dir: Project root directory
        pyproject: Configuration file (defaults to project_dir/pyproject.toml)

    Returns:
        ProjectConfig; all defaults if the file or table is absent

    Raises:
        ConfigurationError: If the file is malformed, a key is unknown, or a
            value has the wrong type
    """
    config = ProjectConfig.defaults(project_dir)
    project_dir = config.project_dir
    pyproject = pyproject if pyproject is not None else project_dir / PYPROJECT_FILE

    if not pyproject.is_file():
        logger.debug(f"No {pyproject}, using default antlrgen settings")
        return config

    table = _read_tool_table(pyproject)
    unknown = set(table) - _KNOWN_KEYS
    if unknown:
        raise ConfigurationError(f"Unknown key(s) in [tool.{TOOL_TABLE}]: {', '.join(sorted(unknown))}")

    source_dir = _expect(table, "source-directory", str, pyproject)
    output_dir = _expect(table, "output-directory", str, pyproject)
    compiler_options = _expect(table, "compiler-options", dict, pyproject)
    antlr_version = _expect(table, "antlr-version", str, pyproject)
    antlr_jar = _expect(table, "antlr-jar", str, pyproject)
    java = _expect(table, "java", str, pyproject)
    clean_targets = _expect(table, "clean-targets", list, pyproject)

    if clean_targets is not None and not all(isinstance(t, str) for t in clean_targets):
        raise ConfigurationError(f"'clean-targets' in {pyproject} must be a list of strings")

    return dataclasses.replace(
        config,
        source_dir=project_dir / source_dir if source_dir else config.source_dir,
        output_dir=project_dir / output_dir if output_dir else config.output_dir,
        compiler_options=MappingProxyType(dict(compiler_options or {})),
        antlr_version=antlr_version or config.antlr_version,
        antlr_jar=project_dir / antlr_jar if antlr_jar else None,
        java=java,
        clean_targets=tuple(project_dir / t for t in clean_targets or ()),
    )
