"""
Command-line interface for antlrgen.

This module provides the `antlrgen` CLI:

    antlrgen build [PROJECT_DIR]    Generate sources from ANTLR grammars
    antlrgen clean [PROJECT_DIR]    Remove generated sources and clean-targets
"""

import argparse
import sys
import traceback
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Sequence

from rich.console import Console
from rich.table import Table

from antlrgen import __version__
from antlrgen.build.compile_options import parse_option_assignment
from antlrgen.build.orchestrator import BuildResult, build_grammars
from antlrgen.commands.clean import clean_project
from antlrgen.config.project_config import load_project_config
from antlrgen.errors import AntlrGenError, GrammarCompilationError
from antlrgen.output import init_timer, log, log_header, set_verbose

console = Console()


@dataclass
class BuildArgs:
    """Arguments for the build command."""

    project_dir: Path
    source_dir: Optional[Path] = None
    output_dir: Optional[Path] = None
    options: List[str] = field(default_factory=list)
    keep_going: bool = False
    verbose: bool = False


@dataclass
class CleanArgs:
    """Arguments for the clean command."""

    project_dir: Path
    verbose: bool = False


def _relative(path: Path, base: Path) -> str:
    try:
        return str(path.relative_to(base))
    except ValueError:
        return str(path)


def print_summary(result: BuildResult, project_dir: Path) -> None:
    """Print a table of the compiled grammar directories."""
    table = Table(title=f"Generated {result.grammar_count} grammar(s) in {result.build_time:.2f}s")
    table.add_column("Grammar directory")
    table.add_column("Output directory")
    table.add_column("Grammars")
    for unit in result.units:
        table.add_row(
            _relative(unit.input_dir, project_dir),
            _relative(unit.output_dir, project_dir),
            " ".join(f.name for f in unit.grammar_files),
        )
    console.print(table)


def _report_unexpected(e: Exception, verbose: bool) -> None:
    console.print()
    console.print("[bold red]✗ Unexpected error[/bold red]")
    console.print(f"{type(e).__name__}: {e}", markup=False)
    if verbose:
        console.print()
        console.print(traceback.format_exc(), markup=False)


def build_command(args: BuildArgs) -> None:
    """Generate sources from every grammar directory of a project.

    Examples:
        antlrgen build                          # Build project in current directory
        antlrgen build path/to/project         # Build specific project
        antlrgen build -O debug=true           # Override a compiler option
        antlrgen build --keep-going            # Report errors from every directory
    """
    init_timer()
    set_verbose(args.verbose)
    log_header("antlrgen", __version__)

    try:
        overrides = dict(parse_option_assignment(o) for o in args.options)
        project = load_project_config(args.project_dir).with_overrides(
            source_dir=args.source_dir,
            output_dir=args.output_dir,
            compiler_options=overrides,
        )
        result = build_grammars(project, keep_going=args.keep_going)

        if not result.is_empty:
            console.print()
            print_summary(result, project.project_dir)
        console.print("[bold green]✓ Grammar generation successful![/bold green]")
        sys.exit(0)

    except GrammarCompilationError as e:
        console.print()
        console.print("[bold red]✗ Grammar generation failed![/bold red]")
        console.print(str(e), markup=False)
        for input_dir, count in e.failures:
            console.print(f"  {input_dir}: {count} error(s)", markup=False)
        sys.exit(1)

    except (AntlrGenError, OSError) as e:
        console.print()
        console.print("[bold red]✗ Error[/bold red]")
        console.print(str(e), markup=False)
        sys.exit(1)

    except KeyboardInterrupt:
        console.print()
        console.print("[bold yellow]✗ Build interrupted[/bold yellow]")
        sys.exit(130)

    except Exception as e:
        _report_unexpected(e, args.verbose)
        sys.exit(1)


def clean_command(args: CleanArgs) -> None:
    """Remove generated grammar sources and the project's clean-targets.

    Examples:
        antlrgen clean                          # Clean project in current directory
    """
    init_timer()
    set_verbose(args.verbose)

    try:
        project = load_project_config(args.project_dir)
        removed = clean_project(project)
        log(f"Cleaned {project.output_dir} and {len(removed)} other target(s)")
        sys.exit(0)

    except (AntlrGenError, OSError) as e:
        console.print("[bold red]✗ Clean failed[/bold red]")
        console.print(str(e), markup=False)
        sys.exit(1)

    except Exception as e:
        _report_unexpected(e, args.verbose)
        sys.exit(1)


def _add_project_dir(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "project_dir",
        nargs="?",
        type=Path,
        default=Path.cwd(),
        help="Project directory containing pyproject.toml (default: current directory)",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Show verbose output",
    )


def main(argv: Optional[Sequence[str]] = None) -> None:
    """antlrgen - generate sources from ANTLR 3 grammars."""
    parser = argparse.ArgumentParser(
        prog="antlrgen",
        description="Generate sources from ANTLR 3 grammars",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"antlrgen {__version__}",
    )

    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    build_parser = subparsers.add_parser(
        "build",
        help="Generate sources from ANTLR grammars",
    )
    _add_project_dir(build_parser)
    build_parser.add_argument(
        "--source-dir",
        type=Path,
        default=None,
        help="Grammar source root, relative to the project (default: src/antlr)",
    )
    build_parser.add_argument(
        "--output-dir",
        type=Path,
        default=None,
        help="Generated source root, relative to the project (default: gen-src)",
    )
    build_parser.add_argument(
        "-O",
        "--option",
        dest="options",
        action="append",
        default=[],
        metavar="KEY=VALUE",
        help="Override an ANTLR compiler option (repeatable)",
    )
    build_parser.add_argument(
        "-k",
        "--keep-going",
        action="store_true",
        help="Compile every grammar directory before reporting errors",
    )

    clean_parser = subparsers.add_parser(
        "clean",
        help="Remove generated sources and configured clean-targets",
    )
    _add_project_dir(clean_parser)

    parsed_args = parser.parse_args(argv)

    if not parsed_args.command:
        parser.print_help()
        sys.exit(0)

    if not parsed_args.project_dir.is_dir():
        console.print(f"[bold red]✗ Error: Not a directory: {parsed_args.project_dir}[/bold red]")
        sys.exit(2)

    if parsed_args.command == "build":
        build_command(
            BuildArgs(
                project_dir=parsed_args.project_dir,
                source_dir=parsed_args.source_dir,
                output_dir=parsed_args.output_dir,
                options=parsed_args.options,
                keep_going=parsed_args.keep_going,
                verbose=parsed_args.verbose,
            )
        )
    elif parsed_args.command == "clean":
        clean_command(CleanArgs(project_dir=parsed_args.project_dir, verbose=parsed_args.verbose))


if __name__ == "__main__":
    main()
