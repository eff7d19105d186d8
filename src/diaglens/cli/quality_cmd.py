"""diaglens quality command."""

from __future__ import annotations

import sys
from pathlib import Path

import click

from diaglens.cli.common import analysis_options, build_pipeline, run_guarded
from diaglens.core.output import console, print_quality_report
from diaglens.patterns.engine import PatternRecognizer


@click.command()
@analysis_options
@click.option("--export", "export_path", type=click.Path(dir_okay=False, path_type=Path), default=None, help="Write the quality report as JSON")
@click.option("--fail-under", type=click.FloatRange(0, 100), default=0, help="Exit 1 if the overall score is below threshold (for CI)")
@run_guarded
def quality(
    root: Path,
    max_diagnostics: int | None,
    include_dependencies: bool,
    subsystems: tuple[str, ...],
    diagnostics_file: Path | None,
    verbose: bool,
    export_path: Path | None,
    fail_under: float,
):
    """Score code, designated subsystem and security health."""
    pipeline = build_pipeline(root, max_diagnostics, include_dependencies, subsystems, diagnostics_file)
    collection = pipeline.collect()
    found = PatternRecognizer(pipeline.subsystems).find_patterns(collection.diagnostics)
    report = pipeline.quality_monitor().analyze(collection.diagnostics, found)

    print_quality_report(report.metrics, collection)
    if export_path is not None:
        report.export(export_path)
        console.print(f"  [dim]Report saved to {export_path}[/dim]")

    score = report.metrics.overall.score
    if fail_under and score < fail_under:
        console.print(f"\n  [red]Score {score:.0f} is below threshold {fail_under:g}.[/red]")
        sys.exit(1)
