"""Display functions for CLI commands - pure functions for Rich output."""

from __future__ import annotations

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from job_alert_reels.extraction import JobFields
from job_alert_reels.instagram import PublishOutcome
from job_alert_reels.video import CompatibilityReport


def show_job_fields(console: Console, fields: JobFields, title: str = "Extracted Job") -> None:
    """Display job fields as a two-column table."""
    table = Table(title=title, show_header=False)
    table.add_column("Field", style="cyan")
    table.add_column("Value")

    for name, value in fields.to_record().items():
        style = "" if fields.is_specified(name) else "dim"
        table.add_row(name.replace("_", " ").title(), f"[{style}]{value}[/{style}]" if style else value)

    console.print(table)


def show_render_config(console: Console, fields: JobFields, output: str, audio: str | None) -> None:
    console.print(Panel(
        f"Rendering reel for [cyan]{fields.company_name}[/cyan]\n"
        f"Designation: [yellow]{fields.designation}[/yellow]\n"
        f"Output: [yellow]{output}[/yellow]\n"
        f"Audio: [yellow]{audio or 'none'}[/yellow]",
        title="Job Alert Reel",
    ))


def show_publish_outcome(console: Console, outcome: PublishOutcome) -> None:
    """Display the result of a publish attempt."""
    if outcome.success:
        console.print(Panel(
            f"[bold green]Reel published![/bold green]\n\n"
            f"Media ID: [cyan]{outcome.publication_id}[/cyan]\n"
            f"Container: [dim]{outcome.container_id}[/dim]\n"
            f"Permalink: [cyan]{outcome.permalink or '-'}[/cyan]",
            title="Instagram",
        ))
        return

    reason = outcome.reason.value if outcome.reason else "UNKNOWN"
    body = (
        f"[bold red]Publish failed ({reason})[/bold red]\n\n"
        f"{outcome.error_message or ''}"
    )
    if outcome.container_id:
        body += f"\nContainer: [dim]{outcome.container_id}[/dim]"
    for key, value in outcome.diagnostics.items():
        body += f"\n[dim]{key}:[/dim] {value}"
    console.print(Panel(body, title="Instagram", border_style="red"))


def show_compatibility_report(console: Console, report: CompatibilityReport) -> None:
    """Display a video compatibility report with recommendations."""
    table = Table(title="Video Info", show_header=False)
    table.add_column("Property", style="cyan")
    table.add_column("Value")
    for key, value in report.details.items():
        table.add_row(key, str(value))
    console.print(table)

    if report.issues:
        console.print("\n[bold red]Issues:[/bold red]")
        for issue in report.issues:
            console.print(f"  [red]x[/red] {issue}")
    else:
        console.print("\n[bold green]Video meets Instagram Reels requirements[/bold green]")

    if report.recommendations:
        console.print("\n[bold yellow]Recommendations:[/bold yellow]")
        for rec in report.recommendations:
            console.print(f"  [yellow]-[/yellow] {rec}")
