"""
Console output for antlrgen.

Every line is prefixed with the time elapsed since the step started, in
MM:SS.cc format, so a slow grammar shows up immediately in build logs.

Example output:
    00:00.01 antlrgen v0.1.0
    00:00.02 [1/3] Scanning src/antlr...
    00:00.03       Found 2 grammar directories
    00:00.04 Compiling ANTLR grammars: Expr.g ...
    00:01.87 Compiling ANTLR grammars: Query.g3 Lexer.g3 ...

Usage:
    from antlrgen.output import log, log_phase, log_detail

    log_phase(1, 3, "Scanning src/antlr...")
    log_detail("Found 2 grammar directories")
"""

import sys
import time
from types import TracebackType
from typing import Optional, TextIO

_start_time: Optional[float] = None
_output_stream: Optional[TextIO] = None
_verbose: bool = False


def init_timer(output_stream: Optional[TextIO] = None) -> None:
    """
    Start the elapsed-time clock.

    Called automatically on the first log line if not called explicitly.

    Args:
        output_stream: Stream to write to (defaults to the current sys.stdout)
    """
    global _start_time, _output_stream
    _start_time = time.time()
    _output_stream = output_stream


def set_verbose(verbose: bool) -> None:
    """Enable or disable verbose-only lines."""
    global _verbose
    _verbose = verbose


def format_timestamp() -> str:
    """
    Format the elapsed time as MM:SS.cc.

    Returns:
        Formatted timestamp string
    """
    if _start_time is None:
        init_timer(_output_stream)
    elapsed = time.time() - _start_time  # type: ignore[operator]
    minutes = int(elapsed // 60)
    seconds = elapsed % 60
    return f"{minutes:02d}:{seconds:05.2f}"


def _print(message: str) -> None:
    # Resolve sys.stdout lazily so pytest's capture sees the output
    stream = _output_stream if _output_stream is not None else sys.stdout
    stream.write(f"{format_timestamp()} {message}\n")
    stream.flush()


def log(message: str, verbose_only: bool = False) -> None:
    """
    Log a message with timestamp.

    Args:
        message: Message to log
        verbose_only: If True, only print when verbose mode is enabled
    """
    if verbose_only and not _verbose:
        return
    _print(message)


def log_phase(phase: int, total: int, message: str, verbose_only: bool = False) -> None:
    """
    Log a step phase as "[N/M] message".

    Args:
        phase: Current phase number
        total: Total number of phases
        message: Phase description
        verbose_only: If True, only print when verbose mode is enabled
    """
    if verbose_only and not _verbose:
        return
    _print(f"[{phase}/{total}] {message}")


def log_detail(message: str, indent: int = 6, verbose_only: bool = False) -> None:
    """Log an indented detail line."""
    if verbose_only and not _verbose:
        return
    _print(f"{' ' * indent}{message}")


def log_header(title: str, version: str) -> None:
    _print(f"{title} v{version}")


def log_error(message: str) -> None:
    _print(f"ERROR: {message}")


def log_warning(message: str) -> None:
    _print(f"WARNING: {message}")


class TimedLogger:
    """
    Context manager that logs an operation and how long it took.

    Usage:
        with TimedLogger("Downloading ANTLR 3.5.3"):
            download()
        # logs "Done (1.42s)" on success, nothing on failure
    """

    def __init__(self, operation: str, verbose_only: bool = False):
        self.operation = operation
        self.verbose_only = verbose_only
        self.start_time = 0.0

    def __enter__(self) -> "TimedLogger":
        self.start_time = time.time()
        log(f"{self.operation}...", self.verbose_only)
        return self

    def __exit__(
        self,
        exc_type: Optional[type[BaseException]],
        exc_val: Optional[BaseException],
        exc_tb: Optional[TracebackType],
    ) -> None:
        del exc_val, exc_tb  # Unused
        if exc_type is None:
            elapsed = time.time() - self.start_time
            log_detail(f"Done ({elapsed:.2f}s)", verbose_only=self.verbose_only)
        return None
