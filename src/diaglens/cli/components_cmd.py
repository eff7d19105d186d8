"""diaglens components command."""

from __future__ import annotations

from pathlib import Path

import click

from diaglens.cli.common import configure_logging, fail
from diaglens.core.config import load_config, parse_subsystem_option
from diaglens.core.errors import ConfigurationError
from diaglens.core.output import console, print_component_health
from diaglens.core.report import export_report
from diaglens.core.sources import SourceTree
from diaglens.quality.monitor import ENGINE_NAME
from diaglens.quality.components import ComponentScanner


@click.command()
@click.argument("root", default=".", type=click.Path(exists=True, file_okay=False, path_type=Path))
@click.option("--subsystem", "subsystems", multiple=True, metavar="NAME=kw1,kw2", help="Designate a subsystem (repeatable)")
@click.option("--export", "export_path", type=click.Path(dir_okay=False, path_type=Path), default=None, help="Write component health as JSON")
@click.option("--verbose", "-v", is_flag=True, help="Log progress at INFO level")
def components(root: Path, subsystems: tuple[str, ...], export_path: Path | None, verbose: bool):
    """Advisory health scan of designated subsystem files.

    Reads source files only; the compiler is not run.
    """
    configure_logging(verbose)
    try:
        config = load_config(root)
        designated = [
            *config.analysis.designated_subsystems,
            *(parse_subsystem_option(s) for s in subsystems),
        ]
    except ConfigurationError as exc:
        fail(str(exc))
        return

    if not designated:
        console.print("  [yellow]No designated subsystems configured.[/yellow] Use --subsystem or diaglens.toml.")
        return

    tree = SourceTree(root, config.quality.source_extensions, config.exclude)
    scan = ComponentScanner(tree, designated, config.compiler).scan()
    print_component_health(scan.components, scan.unreadable)

    if export_path is not None:
        body = {
            "component_health": [c.to_dict() for c in scan.components],
            "unreadable_components": list(scan.unreadable),
        }
        export_report(body, ENGINE_NAME, export_path)
        console.print(f"  [dim]Report saved to {export_path}[/dim]")
