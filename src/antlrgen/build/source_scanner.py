"""Tree Scanner - discover ANTLR grammar directories.

A directory is a compile unit when it directly contains at least one file
whose extension is in GRAMMAR_EXTENSIONS. Grammars in a unit are compiled
together so they can import each other's token vocabularies.

Discovery order is depth-first pre-order with siblings sorted by name, so
the same tree always yields the same unit order on every platform.
"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import AbstractSet, List, Optional, Set

logger = logging.getLogger(__name__)

# File extensions the ANTLR 3 tool accepts (no leading dot, case-sensitive)
GRAMMAR_EXTENSIONS: frozenset[str] = frozenset({"g", "g3"})


@dataclass(frozen=True)
class CompileUnit:
    """A directory and the grammar files directly inside it.

    Attributes:
        input_dir: Directory containing the grammars
        grammar_files: Grammar files, sorted by name
    """

    input_dir: Path
    grammar_files: tuple[Path, ...]

    @property
    def grammar_names(self) -> List[str]:
        return [f.name for f in self.grammar_files]


def _sorted_children(directory: Path) -> List[Path]:
    return sorted(directory.iterdir(), key=lambda p: p.name)


def list_subdirectories(root: Path) -> List[Path]:
    """Recursively list root and every directory below it.

    Symbolic links to directories are followed, but each real directory is
    visited at most once so link cycles cannot recurse forever.

    Args:
        root: Directory to walk

    Returns:
        Directories in depth-first pre-order, root first. Empty if root
        is not a directory.
    """
    result: List[Path] = []
    visited: Set[str] = set()

    def _walk(directory: Path) -> None:
        real = os.path.realpath(directory)
        if real in visited:
            logger.debug(f"Skipping already visited directory {directory} -> {real}")
            return
        visited.add(real)
        result.append(directory)
        for child in _sorted_children(directory):
            if child.is_dir():
                _walk(child)

    root = Path(root)
    if root.is_dir():
        _walk(root)
    return result


def has_suffix(path: Path, suffixes: AbstractSet[str]) -> bool:
    """Check whether the text after the last '.' in path's name is in suffixes.

    Names without a '.' never match.
    """
    _, dot, suffix = path.name.rpartition(".")
    return bool(dot) and suffix in suffixes


def files_of_type(directory: Path, suffixes: AbstractSet[str]) -> List[Path]:
    """List the files directly inside directory whose extension is in suffixes.

    Args:
        directory: Directory to list (not recursed)
        suffixes: Accepted extensions without the leading '.'

    Returns:
        Matching files sorted by name
    """
    return [child for child in _sorted_children(directory) if child.is_file() and has_suffix(child, suffixes)]


def has_qualifying_file(directory: Path, suffixes: AbstractSet[str]) -> bool:
    """Check whether directory directly contains a file with one of suffixes."""
    return any(child.is_file() and has_suffix(child, suffixes) for child in directory.iterdir())


def qualifying_directories(root: Path, suffixes: AbstractSet[str]) -> List[Path]:
    """Find every directory under root (root included) that directly holds a matching file."""
    return [d for d in list_subdirectories(root) if has_qualifying_file(d, suffixes)]


def discover_units(root: Path, suffixes: Optional[AbstractSet[str]] = None) -> List[CompileUnit]:
    """Scan root for compile units.

    Args:
        root: Grammar source root
        suffixes: Accepted extensions (defaults to GRAMMAR_EXTENSIONS)

    Returns:
        One CompileUnit per qualifying directory, in discovery order
    """
    if suffixes is None:
        suffixes = GRAMMAR_EXTENSIONS
    units = [
        CompileUnit(input_dir=d, grammar_files=tuple(files_of_type(d, suffixes)))
        for d in qualifying_directories(root, suffixes)
    ]
    logger.debug(f"Discovered {len(units)} grammar directories under {root}")
    return units
