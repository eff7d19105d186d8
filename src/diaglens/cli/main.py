"""Click CLI entry point for diaglens."""

from __future__ import annotations

import click

from diaglens._version import __version__


@click.group()
@click.version_option(version=__version__, prog_name="diaglens")
def cli():
    """diaglens - compiler diagnostic analysis.

    Collect type-checker diagnostics, find recurring patterns, suggest fixes
    and score quality. Analysis only: source files are never modified.
    """
    pass


# Import and register subcommands
from diaglens.cli.analyze_cmd import analyze  # noqa: E402
from diaglens.cli.patterns_cmd import patterns  # noqa: E402
from diaglens.cli.fixes_cmd import fixes  # noqa: E402
from diaglens.cli.quality_cmd import quality  # noqa: E402
from diaglens.cli.components_cmd import components  # noqa: E402

cli.add_command(analyze)
cli.add_command(patterns)
cli.add_command(fixes)
cli.add_command(quality)
cli.add_command(components)


if __name__ == "__main__":
    cli()
