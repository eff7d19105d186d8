"""Rich terminal formatting for diaglens output."""

from __future__ import annotations

from rich.console import Console
from rich.panel import Panel
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table

from diaglens.collector.engine import CollectionReport
from diaglens.core.models import ComponentHealth, FixSuggestion, Level, QualityMetrics
from diaglens.fix.engine import FixReport
from diaglens.patterns.engine import PatternReport

console = Console()
error_console = Console(stderr=True)


LEVEL_ICONS = {
    Level.HIGH: "[red]●[/red]",
    Level.MEDIUM: "[yellow]●[/yellow]",
    Level.LOW: "[blue]●[/blue]",
}


def score_color(score: float) -> str:
    """Return color name based on score."""
    if score >= 80:
        return "green"
    elif score >= 60:
        return "yellow"
    return "red"


def progress_bar(score: float, width: int = 10) -> str:
    """Create a text-based progress bar."""
    filled = round(max(0.0, min(100.0, score)) / 100 * width)
    empty = width - filled
    color = score_color(score)
    return f"[{color}]{'█' * filled}{'░' * empty}[/{color}]"


def _score_line(label: str, score: float) -> str:
    return f"  {label:<22} {progress_bar(score)}  {score:.0f}/100"


def print_collection_summary(report: CollectionReport) -> None:
    """One-line audit of what the collector kept and dropped."""
    parts = [
        f"{len(report.diagnostics)} diagnostics",
        f"{report.source_file_count} source files",
    ]
    if report.truncated_count:
        parts.append(f"[yellow]{report.truncated_count} truncated[/yellow]")
    if report.skipped_count:
        parts.append(f"[yellow]{report.skipped_count} malformed skipped[/yellow]")
    if report.excluded_dependency_count:
        parts.append(f"{report.excluded_dependency_count} in dependencies excluded")
    if report.unreadable_files:
        parts.append(f"[yellow]{len(report.unreadable_files)} unreadable[/yellow]")
    console.print("  " + " | ".join(parts))


def print_quality_report(
    metrics: QualityMetrics,
    collection: CollectionReport | None = None,
    title: str = "diaglens Quality Report",
) -> None:
    """Print the quality report card to terminal."""
    overall = metrics.overall
    color = score_color(overall.score)

    lines = []
    lines.append("")
    lines.append(
        f"  Overall Score:  [{color}]{overall.score:.0f}/100  ({overall.grade})[/{color}]"
        f"  [dim]trend: {overall.trend.value}[/dim]"
    )
    lines.append("")
    lines.append(_score_line("Type Safety", metrics.code_health.type_safety))
    lines.append(_score_line("Maintainability", metrics.code_health.maintainability_index))
    lines.append(_score_line("Complexity", metrics.code_health.complexity_score))
    lines.append(
        f"  {'Error Density':<22} {metrics.code_health.error_density:.1f}% of files"
    )
    lines.append(_score_line("Security", metrics.security_assessment.type_security_score))
    lines.append(_score_line("Designated Subsystems", metrics.domain_health.aggregate))

    for name, score in metrics.domain_health.subsystems.items():
        extra = ""
        if name in metrics.domain_health.unmatched:
            extra = "  [dim](no files matched)[/dim]"
        lines.append(f"    {name:<20} {progress_bar(score)}  {score:.0f}/100{extra}")

    if metrics.security_assessment.critical_issues:
        lines.append("")
        for issue in metrics.security_assessment.critical_issues:
            lines.append(f"  [red]●[/red] {issue}")

    if metrics.recommendations:
        lines.append("")
        for rec in metrics.recommendations:
            icon = LEVEL_ICONS.get(rec.priority, "●")
            lines.append(f"  {icon} [{rec.category}] {rec.description}")

    lines.append("")

    console.print(Panel(
        "\n".join(lines),
        title=f"[bold]{title}[/bold]",
        border_style=color,
        padding=(0, 1),
    ))
    if collection is not None:
        print_collection_summary(collection)


def print_pattern_report(report: PatternReport) -> None:
    """Print discovered patterns as a table."""
    if not report.patterns:
        console.print("  [green]No recurring diagnostic patterns.[/green]")
        return

    table = Table(title="Recurring Diagnostic Patterns", show_lines=False)
    table.add_column("Severity")
    table.add_column("Count", justify="right")
    table.add_column("Category")
    table.add_column("Pattern")
    table.add_column("Files", justify="right")
    for pattern in report.patterns:
        table.add_row(
            f"{LEVEL_ICONS[pattern.severity]} {pattern.severity.value}",
            str(pattern.frequency),
            pattern.category.value,
            pattern.matcher,
            str(len(pattern.affected_files)),
        )
    console.print(table)

    for issue in report.subsystem_pattern_health.critical_issues:
        console.print(f"  [red]●[/red] {issue}")
    for rec in report.recommendations:
        console.print(f"  [cyan]-> {rec}[/cyan]")


def format_suggestion(suggestion: FixSuggestion) -> str:
    """Format a single suggestion for terminal output."""
    icon = LEVEL_ICONS.get(suggestion.priority, "●")
    risk = suggestion.safety_analysis.risk_level.value
    lines = [
        f"  {icon} {suggestion.title}  [dim]{suggestion.diagnostic_id} | risk {risk}[/dim]"
    ]
    for step in suggestion.steps:
        lines.append(f"     - {step}")
    return "\n".join(lines)


def print_fix_report(report: FixReport, limit: int = 20) -> None:
    """Print suggestions and batch plans. Nothing is applied."""
    lines = [""]
    for suggestion in report.suggestions[:limit]:
        lines.append(format_suggestion(suggestion))
        lines.append("")
    remaining = len(report.suggestions) - limit
    if remaining > 0:
        lines.append(f"  [dim]... {remaining} more (use --export for the full list)[/dim]")
        lines.append("")

    for plan in report.plans:
        color = "red" if plan.overall_risk is Level.HIGH else "yellow" if plan.overall_risk is Level.MEDIUM else "green"
        lines.append(
            f"  [bold]{plan.title}[/bold]  {len(plan.fixes)} fixes, "
            f"~{plan.estimated_time_minutes} min, risk [{color}]{plan.overall_risk.value}[/{color}]"
        )
    if report.plans:
        lines.append("")

    counts = report.by_priority()
    lines.append(
        f"  {counts['high']} high | {counts['medium']} medium | {counts['low']} low"
    )
    lines.append("  [yellow]All suggestions require manual review and approval.[/yellow]")
    lines.append("")

    console.print(Panel(
        "\n".join(lines),
        title="[bold]diaglens Fix Recommendations[/bold]",
        border_style="cyan",
        padding=(0, 1),
    ))


def print_component_health(components: list[ComponentHealth], unreadable: list[str]) -> None:
    """Print the advisory component health table."""
    if not components and not unreadable:
        console.print("  [dim]No designated subsystem files found.[/dim]")
        return

    table = Table(title="Component Health (advisory)")
    table.add_column("Component")
    table.add_column("Health", justify="right")
    table.add_column("Alignment", justify="right")
    table.add_column("Issues")
    for component in components:
        color = score_color(component.health_score)
        table.add_row(
            component.path,
            f"[{color}]{component.health_score}[/{color}]",
            str(component.domain_alignment),
            "; ".join(component.issues) or "-",
        )
    console.print(table)
    for path in unreadable:
        console.print(f"  [yellow]Excluded unreadable file:[/yellow] {path}")


def get_progress() -> Progress:
    """Create a progress instance for analysis."""
    return Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        console=console,
    )
