"""
Grammar build orchestration.

Ties the scanner, path mapper and unit compiler together:

    1. Merge compile options (unknown keys fail before anything runs)
    2. Discover grammar directories under the source root
    3. Mirror each directory's location under the output root
    4. Compile each directory in discovery order

Every run recompiles every grammar directory. By default the run stops at
the first failing directory; output already generated for earlier
directories is left in place.
"""

import logging
import time
from dataclasses import dataclass, field
from functools import partial
from pathlib import Path
from typing import TYPE_CHECKING, Any, List, Mapping, Optional

from antlrgen.build.antlr_tool import AntlrTool
from antlrgen.build.compile_options import merge_options
from antlrgen.build.paths import relativize, resolve
from antlrgen.build.source_scanner import discover_units
from antlrgen.build.toolchain import AntlrToolchain
from antlrgen.build.unit_compiler import CompileResult, ToolFactory, compile_unit
from antlrgen.errors import GrammarCompilationError
from antlrgen.output import log, log_detail, log_error, log_phase

if TYPE_CHECKING:
    from antlrgen.config.project_config import ProjectConfig

logger = logging.getLogger(__name__)


@dataclass
class BuildResult:
    """Result of a successful grammar build step.

    Attributes:
        source_dir: Root that was scanned
        output_dir: Root the generated sources were mirrored into
        units: One result per compiled directory, in discovery order
        build_time: Wall-clock duration in seconds
    """

    source_dir: Path
    output_dir: Path
    units: List[CompileResult] = field(default_factory=list)
    build_time: float = 0.0

    @property
    def is_empty(self) -> bool:
        return not self.units

    @property
    def grammar_count(self) -> int:
        return sum(len(u.grammar_files) for u in self.units)


def compile_grammars(
    src_dir: Path,
    dest_dir: Path,
    options: Optional[Mapping[str, Any]] = None,
    *,
    tool_factory: Optional[ToolFactory] = None,
    keep_going: bool = False,
) -> BuildResult:
    """Compile every grammar directory under src_dir into a mirror under dest_dir.

    Args:
        src_dir: Grammar source root
        dest_dir: Generated source root
        options: Compile option overrides
        tool_factory: Returns a fresh AntlrTool (defaults to a tool using the
            default AntlrToolchain)
        keep_going: Compile every directory and report all failures together
            instead of stopping at the first failing directory

    Returns:
        BuildResult; empty (and successful) when no grammar files exist

    Raises:
        UnknownConfigurationOption: If options contains an unknown key
        InvalidOptionValue: If an option value is invalid
        GrammarCompilationError: If ANTLR reported errors
    """
    start_time = time.time()
    compile_options = merge_options(options)
    src_dir = Path(src_dir)
    dest_dir = Path(dest_dir)

    log_phase(1, 2, f"Scanning {src_dir}...", verbose_only=True)
    units = discover_units(src_dir)
    if not units:
        log(f"ANTLR source directory {src_dir} is empty.")
        return BuildResult(src_dir, dest_dir, [], time.time() - start_time)

    output_dirs = resolve(dest_dir, relativize(src_dir, [u.input_dir for u in units]))

    if tool_factory is None:
        tool_factory = partial(AntlrTool, AntlrToolchain())

    log_phase(2, 2, f"Compiling {len(units)} grammar directories into {dest_dir}...", verbose_only=True)
    overridden = compile_options.overrides()
    if overridden:
        log_detail(
            "Options: " + ", ".join(f"{k}={v}" for k, v in sorted(overridden.items())),
            verbose_only=True,
        )
    results: List[CompileResult] = []
    failures: List[tuple[Path, int]] = []
    for unit, output_dir in zip(units, output_dirs):
        logger.debug(f"Unit {unit.input_dir} -> {output_dir}")
        try:
            results.append(compile_unit(unit.input_dir, output_dir, compile_options, tool_factory))
        except GrammarCompilationError as e:
            if not keep_going:
                raise
            log_error(f"{e.input_dir}: {e.error_count} grammar errors")
            failures.append((e.input_dir, e.error_count))

    if failures:
        raise GrammarCompilationError(failures[0][0], sum(count for _, count in failures), failures)

    return BuildResult(src_dir, dest_dir, results, time.time() - start_time)


def build_grammars(
    project: "ProjectConfig",
    *,
    tool_factory: Optional[ToolFactory] = None,
    keep_going: bool = False,
) -> BuildResult:
    """Run the grammar build step for a project.

    Args:
        project: Loaded project configuration
        tool_factory: Override for the tool (defaults to one built from the
            project's toolchain settings)
        keep_going: See compile_grammars()

    Returns:
        BuildResult of the run

    Raises:
        AntlrGenError: On configuration, toolchain or grammar errors
    """
    if tool_factory is None:
        tool_factory = partial(AntlrTool, AntlrToolchain.from_project(project))
    return compile_grammars(
        project.source_dir,
        project.output_dir,
        project.compiler_options,
        tool_factory=tool_factory,
        keep_going=keep_going,
    )
