"""diaglens analyze command."""

from __future__ import annotations

import sys
from pathlib import Path

import click

from diaglens.cli.common import analysis_options, build_pipeline, run_guarded
from diaglens.core.output import console, get_progress, print_quality_report


@click.command()
@analysis_options
@click.option("--export", "export_dir", type=click.Path(file_okay=False, path_type=Path), default=None, help="Write JSON reports for every stage to DIR")
@click.option("--fail-under", type=click.FloatRange(0, 100), default=0, help="Exit 1 if the overall score is below threshold (for CI)")
@run_guarded
def analyze(
    root: Path,
    max_diagnostics: int | None,
    include_dependencies: bool,
    subsystems: tuple[str, ...],
    diagnostics_file: Path | None,
    verbose: bool,
    export_dir: Path | None,
    fail_under: float,
):
    """Run the full analysis pipeline and print the report card.

    Nothing in ROOT is modified; fixes are suggestions only.
    """
    pipeline = build_pipeline(root, max_diagnostics, include_dependencies, subsystems, diagnostics_file)

    with get_progress() as progress:
        task = progress.add_task(f"Analyzing {pipeline.project_path}...", total=None)
        result = pipeline.run()
        progress.update(task, completed=True)

    print_quality_report(result.quality.metrics, result.collection)
    console.print(
        f"  {len(result.patterns.patterns)} recurring patterns | "
        f"{len(result.fixes.suggestions)} suggested fixes | "
        f"{len(result.fixes.plans)} batch plans"
    )
    console.print("  Details: [bold]diaglens patterns[/bold], [bold]diaglens fixes[/bold]")

    if export_dir is not None:
        for path in result.export(export_dir):
            console.print(f"  [dim]Report saved to {path}[/dim]")

    score = result.quality.metrics.overall.score
    if fail_under and score < fail_under:
        console.print(f"\n  [red]Score {score:.0f} is below threshold {fail_under:g}.[/red]")
        sys.exit(1)
