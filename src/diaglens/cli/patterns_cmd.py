"""diaglens patterns command."""

from __future__ import annotations

from pathlib import Path

import click

from diaglens.cli.common import analysis_options, build_pipeline, run_guarded
from diaglens.core.output import console, print_pattern_report
from diaglens.patterns.engine import PatternRecognizer


@click.command()
@analysis_options
@click.option("--export", "export_path", type=click.Path(dir_okay=False, path_type=Path), default=None, help="Write the pattern report as JSON")
@run_guarded
def patterns(
    root: Path,
    max_diagnostics: int | None,
    include_dependencies: bool,
    subsystems: tuple[str, ...],
    diagnostics_file: Path | None,
    verbose: bool,
    export_path: Path | None,
):
    """Show diagnostics that recur across the codebase."""
    pipeline = build_pipeline(root, max_diagnostics, include_dependencies, subsystems, diagnostics_file)
    collection = pipeline.collect()
    report = PatternRecognizer(pipeline.subsystems).analyze(collection.diagnostics)

    print_pattern_report(report)
    if export_path is not None:
        report.export(export_path)
        console.print(f"  [dim]Report saved to {export_path}[/dim]")
