"""Subprocess helpers for running the ANTLR tool.

Wraps subprocess.run with the platform flags needed to keep java from
flashing a console window on Windows or stealing terminal input.
"""

import shlex
import subprocess
import sys
from typing import Any, Sequence


def get_subprocess_creation_flags() -> int:
    """Return CREATE_NO_WINDOW on Windows, 0 elsewhere."""
    if sys.platform == "win32":
        return subprocess.CREATE_NO_WINDOW
    return 0


def format_command(cmd: Sequence[str]) -> str:
    """Render a command line for log output, quoting arguments with spaces."""
    if sys.platform == "win32":
        return subprocess.list2cmdline(list(cmd))
    return shlex.join(cmd)


def safe_run(cmd: Sequence[str], **kwargs: Any) -> subprocess.CompletedProcess:
    """Execute subprocess.run with platform-specific flags.

    stdin is redirected to DEVNULL unless the caller passes it explicitly,
    and an explicit creationflags value is OR'd with the platform default.

    Args:
        cmd: Command and arguments
        **kwargs: Additional arguments passed to subprocess.run

    Returns:
        CompletedProcess result from subprocess.run
    """
    default_flags = get_subprocess_creation_flags()

    if "creationflags" in kwargs:
        kwargs["creationflags"] = kwargs["creationflags"] | default_flags
    elif default_flags:
        kwargs["creationflags"] = default_flags

    kwargs.setdefault("stdin", subprocess.DEVNULL)

    return subprocess.run(list(cmd), **kwargs)
