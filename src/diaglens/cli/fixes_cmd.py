"""diaglens fixes command."""

from __future__ import annotations

from pathlib import Path

import click

from diaglens.cli.common import analysis_options, build_pipeline, run_guarded
from diaglens.core.output import console, print_fix_report
from diaglens.fix.engine import FixRecommender


@click.command()
@analysis_options
@click.option("--limit", type=click.IntRange(min=1), default=20, help="Suggestions to print")
@click.option("--export", "export_path", type=click.Path(dir_okay=False, path_type=Path), default=None, help="Write all suggestions and batch plans as JSON")
@run_guarded
def fixes(
    root: Path,
    max_diagnostics: int | None,
    include_dependencies: bool,
    subsystems: tuple[str, ...],
    diagnostics_file: Path | None,
    verbose: bool,
    limit: int,
    export_path: Path | None,
):
    """Suggest fixes for each diagnostic. Nothing is applied."""
    pipeline = build_pipeline(root, max_diagnostics, include_dependencies, subsystems, diagnostics_file)
    collection = pipeline.collect()
    report = FixRecommender(pipeline.config.compiler, pipeline.subsystems).recommend(
        collection.diagnostics
    )

    print_fix_report(report, limit=limit)
    if export_path is not None:
        report.export(export_path)
        console.print(f"  [dim]Report saved to {export_path}[/dim]")
