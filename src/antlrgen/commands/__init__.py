"""Command implementations for the antlrgen CLI.

This package contains implementations of antlrgen commands that are too
complex to fit in the main cli.py file.
"""

from antlrgen.commands.clean import clean_project, with_output_cleanup

__all__ = ["clean_project", "with_output_cleanup"]
