"""Exception hierarchy for antlrgen.

Every user-facing failure derives from AntlrGenError so the CLI can turn it
into a single non-zero exit. Internal invariant violations (see
antlrgen.build.paths.InvalidPathRelation) derive from AssertionError instead.
"""

from pathlib import Path
from typing import List, Optional, Sequence


class AntlrGenError(Exception):
    """Base class for errors raised by antlrgen."""

    pass


class ConfigurationError(AntlrGenError):
    """Raised when project or compiler configuration is invalid."""

    pass


class UnknownConfigurationOption(ConfigurationError):
    """Raised when a compiler option key is outside the supported set."""

    def __init__(self, keys: Sequence[str]):
        self.keys = sorted(keys)
        super().__init__(f"Unknown ANTLR option(s): {', '.join(self.keys)}")


class InvalidOptionValue(ConfigurationError):
    """Raised when a compiler option has a value of the wrong type or range."""

    def __init__(self, key: str, value: object, expected: str):
        self.key = key
        self.value = value
        super().__init__(f"Invalid value for ANTLR option '{key}': {value!r} (expected {expected})")


class ToolchainError(AntlrGenError):
    """Raised when java or the ANTLR jar cannot be located or installed."""

    pass


class GrammarCompilationError(AntlrGenError):
    """Raised when ANTLR reports errors for one or more compile units.

    Attributes:
        input_dir: Input directory of the (first) failing unit
        error_count: Total number of grammar errors reported
        failures: Every failing unit, as (input_dir, error_count) pairs
    """

    def __init__(self, input_dir: Path, error_count: int, failures: Optional[List[tuple[Path, int]]] = None):
        self.input_dir = input_dir
        self.error_count = error_count
        self.failures = failures if failures is not None else [(input_dir, error_count)]
        super().__init__(f"ANTLR detected {error_count} grammar errors.")
