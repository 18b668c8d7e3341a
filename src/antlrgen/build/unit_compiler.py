"""Unit Compiler - run ANTLR once for one grammar directory.

All grammars directly inside the input directory are passed to a single tool
invocation, so grammars that import each other's vocabularies compile
together. Generated sources land directly in the output directory.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Callable

from antlrgen.build.antlr_tool import TOOL_LOCK, AntlrTool, ErrorManager
from antlrgen.build.compile_options import CompileOptions
from antlrgen.build.source_scanner import GRAMMAR_EXTENSIONS, files_of_type
from antlrgen.errors import GrammarCompilationError
from antlrgen.output import log, log_detail

logger = logging.getLogger(__name__)

ToolFactory = Callable[[], AntlrTool]


@dataclass(frozen=True)
class CompileResult:
    """Outcome of compiling one unit.

    Attributes:
        input_dir: Grammar directory that was compiled
        output_dir: Directory the generated sources were written to
        grammar_files: Grammar files passed to the tool
        error_count: Errors the tool reported for this unit only
    """

    input_dir: Path
    output_dir: Path
    grammar_files: tuple[Path, ...]
    error_count: int

    @property
    def success(self) -> bool:
        return self.error_count == 0

    @property
    def skipped(self) -> bool:
        return not self.grammar_files


def compile_unit(input_dir: Path, output_dir: Path, options: CompileOptions, tool_factory: ToolFactory) -> CompileResult:
    """Compile every grammar directly inside input_dir into output_dir.

    The tool's error state is process-wide, so it is reset under TOOL_LOCK
    before the unit runs; the error count therefore belongs to this unit only.

    Args:
        input_dir: Directory holding the grammar files
        output_dir: Destination for generated sources (created if missing)
        options: Merged compile options
        tool_factory: Returns a fresh AntlrTool

    Returns:
        CompileResult with a zero error count. A directory without grammar
        files is skipped without invoking the tool.

    Raises:
        GrammarCompilationError: If the tool reported one or more errors
        ToolchainError: If java or the ANTLR jar cannot be resolved
    """
    grammar_files = tuple(files_of_type(input_dir, GRAMMAR_EXTENSIONS))
    if not grammar_files:
        log_detail(f"No grammar files in {input_dir}, skipping", verbose_only=True)
        return CompileResult(input_dir, output_dir, grammar_files, 0)

    with TOOL_LOCK:
        ErrorManager.reset_error_state()

        tool = tool_factory()
        tool.configure(options)
        # Resolve java and the jar before any output directory exists
        tool.toolchain.command_prefix()

        log(f"Compiling ANTLR grammars: {' '.join(f.name for f in grammar_files)} ...")
        output_dir.mkdir(parents=True, exist_ok=True)

        tool.set_output_directory(output_dir)
        tool.set_force_all_files_to_output_dir(True)
        tool.set_input_directory(input_dir)
        for grammar_file in grammar_files:
            tool.add_grammar_file(grammar_file.name)

        tool.process()
        error_count = tool.num_errors
        warning_count = ErrorManager.get_num_warnings()

    logger.debug(f"{input_dir}: {error_count} error(s), {warning_count} warning(s)")

    if error_count > 0:
        raise GrammarCompilationError(input_dir, error_count)

    return CompileResult(input_dir, output_dir, grammar_files, error_count)
