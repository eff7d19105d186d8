"""Options and helpers shared by the analysis commands."""

from __future__ import annotations

import functools
import logging
import sys
from dataclasses import replace
from pathlib import Path

import click
from rich.logging import RichHandler
from rich.markup import escape

from diaglens.collector.compiler import JsonDiagnosticSource
from diaglens.core.config import load_config, parse_subsystem_option
from diaglens.core.errors import CompilerError, ConfigurationError
from diaglens.core.output import error_console
from diaglens.pipeline import AnalysisPipeline

EXIT_CONFIG_ERROR = 2


def configure_logging(verbose: bool) -> None:
    """Route library logging through rich. WARNING by default, INFO with --verbose."""
    logging.basicConfig(
        level=logging.INFO if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=error_console, show_path=False)],
        force=True,
    )


def analysis_options(func):
    """Project root plus the options every analysis command accepts."""

    @click.argument("root", default=".", type=click.Path(exists=True, file_okay=False, path_type=Path))
    @click.option("--max-diagnostics", type=click.IntRange(min=0), default=None, help="Cap on collected diagnostics")
    @click.option("--include-dependencies", is_flag=True, default=False, help="Keep diagnostics reported inside node_modules")
    @click.option("--subsystem", "subsystems", multiple=True, metavar="NAME=kw1,kw2", help="Designate a subsystem (repeatable)")
    @click.option(
        "--diagnostics-file",
        type=click.Path(dir_okay=False, path_type=Path),
        default=None,
        help="Read diagnostics from a JSON file instead of running the compiler",
    )
    @click.option("--verbose", "-v", is_flag=True, help="Log progress at INFO level")
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        configure_logging(kwargs["verbose"])
        return func(*args, **kwargs)

    return wrapper


def build_pipeline(
    root: Path,
    max_diagnostics: int | None,
    include_dependencies: bool,
    subsystems: tuple[str, ...],
    diagnostics_file: Path | None,
) -> AnalysisPipeline:
    """Load diaglens.toml from ROOT and apply command-line overrides."""
    config = load_config(root)
    options = config.analysis

    if max_diagnostics is not None:
        options = replace(options, max_diagnostics=max_diagnostics)
    if include_dependencies:
        options = replace(options, include_dependencies=True)
    if subsystems:
        extra = [parse_subsystem_option(s) for s in subsystems]
        options = replace(options, designated_subsystems=[*options.designated_subsystems, *extra])

    source = JsonDiagnosticSource(diagnostics_file) if diagnostics_file else None
    return AnalysisPipeline(root, config=config, source=source, options=options)


def fail(message: str) -> None:
    error_console.print(f"  [red]Error:[/red] {escape(message)}")
    sys.exit(EXIT_CONFIG_ERROR)


def run_guarded(func):
    """Turn fatal analysis errors into exit code 2 with a readable message."""

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except (ConfigurationError, CompilerError) as exc:
            fail(str(exc))

    return wrapper
