"""ANTLR 3 tool adapter.

AntlrTool mirrors the setter API of org.antlr.Tool and runs the real tool in
a java subprocess. Diagnostics printed by the tool are parsed back into the
process-wide ErrorManager, which plays the role of ANTLR's static
ErrorManager: counts accumulate across tool instances until
ErrorManager.reset_error_state() is called.

Callers that compile several units must hold TOOL_LOCK and reset the error
state before each unit (see antlrgen.build.unit_compiler).
"""

import logging
import re
import subprocess
import threading
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, List, Optional

from antlrgen.build.compile_options import DEFAULT_OPTIONS, OPTION_NAMES, CompileOptions
from antlrgen.build.toolchain import AntlrToolchain
from antlrgen.output import log_detail
from antlrgen.subprocess_utils import format_command, safe_run

logger = logging.getLogger(__name__)

# Serializes every use of the tool; ErrorManager state is not per-call
TOOL_LOCK = threading.RLock()

# Diagnostic line patterns for each -message-format
_ERROR_PATTERNS = {
    "antlr": re.compile(r"^error\(\d+\):"),
    "gnu": re.compile(r":\s*error:"),
    "vs2005": re.compile(r"\)\s*:\s*error\b"),
}
_WARNING_PATTERNS = {
    "antlr": re.compile(r"^warning\(\d+\):"),
    "gnu": re.compile(r":\s*warning:"),
    "vs2005": re.compile(r"\)\s*:\s*warning\b"),
}


@dataclass
class _ErrorState:
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)


class ErrorManager:
    """Process-wide record of ANTLR errors and warnings."""

    _lock = threading.Lock()
    _state = _ErrorState()

    @classmethod
    def reset_error_state(cls) -> None:
        with cls._lock:
            cls._state = _ErrorState()

    @classmethod
    def error(cls, message: str) -> None:
        with cls._lock:
            cls._state.errors.append(message)

    @classmethod
    def warning(cls, message: str) -> None:
        with cls._lock:
            cls._state.warnings.append(message)

    @classmethod
    def get_num_errors(cls) -> int:
        with cls._lock:
            return len(cls._state.errors)

    @classmethod
    def get_num_warnings(cls) -> int:
        with cls._lock:
            return len(cls._state.warnings)


class AntlrTool:
    """One configured invocation of the ANTLR tool.

    Usage:
        tool = AntlrTool(toolchain)
        tool.configure(options)
        tool.set_input_directory(input_dir)
        tool.set_output_directory(output_dir)
        tool.add_grammar_file("Expr.g")
        tool.process()
        if tool.num_errors: ...
    """

    def __init__(self, toolchain: AntlrToolchain):
        self.toolchain = toolchain
        self.debug: bool = DEFAULT_OPTIONS["debug"]
        self.trace: bool = DEFAULT_OPTIONS["trace"]
        self.generate_dfa_dot: bool = DEFAULT_OPTIONS["dfa-dot-output"]
        self.generate_nfa_dot: bool = DEFAULT_OPTIONS["nfa-dot-output"]
        self.message_format: str = DEFAULT_OPTIONS["message-format"]
        self.verbose: bool = DEFAULT_OPTIONS["verbose"]
        self.max_switch_case_labels: int = DEFAULT_OPTIONS["max-switch-case-labels"]
        self.print_grammar: bool = DEFAULT_OPTIONS["print-grammar"]
        self.report: bool = DEFAULT_OPTIONS["report"]
        self.profile: bool = DEFAULT_OPTIONS["profile"]
        self.input_directory: Optional[Path] = None
        self.output_directory: Optional[Path] = None
        self.force_all_files_to_output_dir: bool = False
        self.grammar_files: List[str] = []
        self.last_output: str = ""

    # Option setters, one per entry in OPTION_SETTERS

    def set_debug(self, value: bool) -> None:
        self.debug = value

    def set_trace(self, value: bool) -> None:
        self.trace = value

    def set_generate_dfa_dot(self, value: bool) -> None:
        self.generate_dfa_dot = value

    def set_generate_nfa_dot(self, value: bool) -> None:
        self.generate_nfa_dot = value

    def set_message_format(self, value: str) -> None:
        self.message_format = value

    def set_verbose(self, value: bool) -> None:
        self.verbose = value

    def set_max_switch_case_labels(self, value: int) -> None:
        self.max_switch_case_labels = value

    def set_print_grammar(self, value: bool) -> None:
        self.print_grammar = value

    def set_report(self, value: bool) -> None:
        self.report = value

    def set_profile(self, value: bool) -> None:
        self.profile = value

    # Unit setup

    def set_input_directory(self, path: Path) -> None:
        self.input_directory = Path(path).absolute()

    def set_output_directory(self, path: Path) -> None:
        self.output_directory = Path(path).absolute()

    def set_force_all_files_to_output_dir(self, value: bool) -> None:
        self.force_all_files_to_output_dir = value

    def add_grammar_file(self, name: str) -> None:
        self.grammar_files.append(name)

    def configure(self, options: CompileOptions) -> None:
        """Apply every compile option through its setter."""
        for key, setter in OPTION_SETTERS.items():
            setter(self, options[key])

    def build_command(self) -> List[str]:
        """Build the full java command line for this invocation."""
        cmd = self.toolchain.command_prefix()
        if self.output_directory is not None:
            # -fo takes the directory itself and replaces -o
            flag = "-fo" if self.force_all_files_to_output_dir else "-o"
            cmd += [flag, str(self.output_directory)]
        if self.input_directory is not None:
            cmd += ["-lib", str(self.input_directory)]
        if self.debug:
            cmd.append("-debug")
        if self.trace:
            cmd.append("-trace")
        if self.generate_dfa_dot:
            cmd.append("-dfa")
        if self.generate_nfa_dot:
            cmd.append("-nfa")
        if self.verbose:
            cmd.append("-verbose")
        if self.print_grammar:
            cmd.append("-print")
        if self.report:
            cmd.append("-report")
        if self.profile:
            cmd.append("-profile")
        cmd += ["-message-format", self.message_format]
        cmd += ["-Xmaxswitchcaselabels", str(self.max_switch_case_labels)]
        cmd += self.grammar_files
        return cmd

    def process(self) -> None:
        """Run the tool over the added grammar files.

        Errors and warnings are recorded in ErrorManager. Does nothing when no
        grammar file has been added.
        """
        if not self.grammar_files:
            logger.debug("No grammar files added, skipping ANTLR invocation")
            return

        cmd = self.build_command()
        logger.debug(f"Running: {format_command(cmd)}")
        result = self._run(cmd)
        self.last_output = result.stdout or ""
        self._record_diagnostics(self.last_output, result.returncode)

    def _run(self, cmd: List[str]) -> subprocess.CompletedProcess:
        return safe_run(
            cmd,
            cwd=str(self.input_directory) if self.input_directory is not None else None,
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            text=True,
            check=False,
        )

    def _record_diagnostics(self, output: str, returncode: int) -> None:
        error_re = _ERROR_PATTERNS[self.message_format]
        warning_re = _WARNING_PATTERNS[self.message_format]
        errors_before = ErrorManager.get_num_errors()

        for line in output.splitlines():
            if not line.strip():
                continue
            if error_re.search(line):
                ErrorManager.error(line)
                log_detail(line, indent=2)
            elif warning_re.search(line):
                ErrorManager.warning(line)
                log_detail(line, indent=2)
            else:
                log_detail(line, indent=2, verbose_only=True)

        if returncode != 0 and ErrorManager.get_num_errors() == errors_before:
            # The tool failed without a diagnostic we recognise (e.g. JVM crash)
            ErrorManager.error(f"ANTLR exited with status {returncode}")
            log_detail(f"ANTLR exited with status {returncode}", indent=2)

    @property
    def num_errors(self) -> int:
        return ErrorManager.get_num_errors()


OPTION_SETTERS: dict[str, Callable[[AntlrTool, Any], None]] = {
    "debug": AntlrTool.set_debug,
    "trace": AntlrTool.set_trace,
    "dfa-dot-output": AntlrTool.set_generate_dfa_dot,
    "nfa-dot-output": AntlrTool.set_generate_nfa_dot,
    "message-format": AntlrTool.set_message_format,
    "verbose": AntlrTool.set_verbose,
    "max-switch-case-labels": AntlrTool.set_max_switch_case_labels,
    "print-grammar": AntlrTool.set_print_grammar,
    "report": AntlrTool.set_report,
    "profile": AntlrTool.set_profile,
}

if set(OPTION_SETTERS) != OPTION_NAMES:
    raise RuntimeError(f"OPTION_SETTERS does not cover the option set: {sorted(OPTION_NAMES ^ set(OPTION_SETTERS))}")
