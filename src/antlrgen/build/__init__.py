"""
Build step components for antlrgen.

- Grammar directory discovery (source_scanner)
- Output tree mapping (paths)
- Per-directory ANTLR compilation (unit_compiler, antlr_tool, toolchain)
- Step orchestration (orchestrator)
"""

from .orchestrator import BuildResult, build_grammars, compile_grammars

__all__ = [
    "BuildResult",
    "build_grammars",
    "compile_grammars",
]
