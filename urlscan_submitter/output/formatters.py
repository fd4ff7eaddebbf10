"""Output formatters for scan results and quotas."""

import json

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from ..api.models import ScanResult
from ..config import QUOTA_ACTIONS, QUOTA_WINDOWS


STATUS_COLORS = {
    "critical": "red",
    "warning": "yellow",
    "low": "green",
    "disabled": "dim",
}


def format_scan_result(result: ScanResult, console: Console) -> None:
    """Print a single scan result as a panel."""
    table = Table(show_header=False, box=None, padding=(0, 2))
    table.add_column("Key", style="dim")
    table.add_column("Value")

    table.add_row("URL", result.url)
    table.add_row("Status", "[green]Success[/green]" if result.success else "[red]Failed[/red]")
    table.add_row("Job ID", result.job_id or "N/A")
    table.add_row("Tags", ", ".join(result.tags) or "-")
    table.add_row("Visibility", result.visibility.value)

    if result.success:
        table.add_row("Report", f"[link={result.report_url}]{result.report_url}[/link]")
        page = (result.raw_payload or {}).get("page", {})
        if page.get("title"):
            table.add_row("Page Title", str(page["title"]))
        if page.get("ip"):
            table.add_row("IP", f"{page['ip']} ({page.get('country') or '?'})")
        verdicts = (result.raw_payload or {}).get("verdicts", {}).get("overall", {})
        if verdicts:
            malicious = verdicts.get("malicious")
            table.add_row(
                "Verdict",
                "[red]Malicious[/red]" if malicious else "[green]No classification[/green]",
            )
    else:
        table.add_row("Error", f"[red]{escape(result.error or '')}[/red]")

    border = "green" if result.success else "red"
    console.print(Panel(table, title="[bold]Scan Result[/bold]", border_style=border))


def format_batch_plan(total: int, tags: tuple[str, ...], visibility: str, max_attempts: int,
                      console: Console) -> None:
    """Print what a batch run is about to do."""
    text = Text()
    text.append(f"URLs: {total}\n")
    text.append(f"Tags: {', '.join(tags) or '-'}\n")
    text.append(f"Visibility: {visibility}\n")
    text.append(f"Max polling attempts per URL: {max_attempts}")
    console.print(Panel(text, title="[bold]Batch Analysis[/bold]", border_style="cyan"))


def format_batch_summary(results: list[ScanResult], visibility: str, console: Console) -> None:
    """Print the outcome of a batch run."""
    succeeded = sum(1 for r in results if r.success)
    failed = len(results) - succeeded

    header = Text()
    header.append(f"Total: {len(results)}  |  ")
    header.append(f"Succeeded: {succeeded}", style="green")
    header.append("  |  ")
    header.append(f"Failed: {failed}", style="red" if failed else "dim")
    header.append(f"  |  Visibility: {visibility}")
    console.print(Panel(header, title="[bold]Batch Results[/bold]", border_style="cyan"))

    table = Table(show_header=True, header_style="bold")
    table.add_column("URL", style="cyan", overflow="fold")
    table.add_column("Status", width=8)
    table.add_column("Report / Error", overflow="fold")

    for result in results:
        if result.success:
            table.add_row(result.url, "[green]OK[/green]", result.report_url)
        else:
            table.add_row(result.url, "[red]FAILED[/red]", f"[red]{escape(result.error or '')}[/red]")

    console.print(table)


def format_quota_report(report: dict, console: Console) -> None:
    """Print usage per action and window as a table."""
    title = f"[bold]Quotas: {report.get('plan', 'Unknown plan')}[/bold]"
    if report.get("is_default"):
        title += " [yellow](defaults, quota endpoint unavailable)[/yellow]"

    table = Table(title=title, show_header=True, header_style="bold")
    table.add_column("Action", style="cyan")
    for window in QUOTA_WINDOWS:
        table.add_column(f"Per {window}", justify="right")

    for action, name in QUOTA_ACTIONS.items():
        usage = report.get("usage", {}).get(action, {})
        cells = [_usage_display(usage.get(window)) for window in QUOTA_WINDOWS]
        table.add_row(name, *cells)

    console.print(table)

    totals = report.get("totals", {})
    console.print(
        f"[dim]Used this minute: {totals.get('minute', 0)}  |  "
        f"this hour: {totals.get('hour', 0)}  |  today: {totals.get('day', 0)}[/dim]"
    )

    next_reset = report.get("next_reset", {}).get("day")
    if next_reset:
        console.print(f"[dim]Next daily reset: {next_reset['time']}[/dim]")


def format_rate_limit_status(report: dict, visibility: str, console: Console) -> None:
    """Print a one-line daily usage bar for the scan action in use."""
    usage = report.get("usage", {}).get(visibility, {}).get("day")
    if not usage or usage["status"] == "disabled":
        return

    bar_length = 20
    filled = min(bar_length, round(usage["used"] / usage["limit"] * bar_length))
    color = STATUS_COLORS.get(usage["status"], "white")
    bar = "█" * filled + "░" * (bar_length - filled)

    console.print(
        f"[dim]{QUOTA_ACTIONS[visibility]} today:[/dim] "
        f"[{color}]{bar} {usage['used']}/{usage['limit']} ({usage['percentage']}%)[/{color}]"
    )


def format_bytes(size: float) -> str:
    """Human-readable size, e.g. ``1.5 KB``."""
    units = ["Bytes", "KB", "MB", "GB"]
    index = 0
    while size >= 1024 and index < len(units) - 1:
        size /= 1024
        index += 1
    return f"{round(size, 2):g} {units[index]}"


def format_log_stats(stats: dict, console: Console) -> None:
    """Print file counts and sizes of the results archive."""
    table = Table(title="[bold]Stored Results[/bold]", show_header=True, header_style="bold")
    table.add_column("Category", style="cyan")
    table.add_column("Files", justify="right")
    table.add_column("Size", justify="right")

    for category, count in stats["files"].items():
        table.add_row(category, str(count), format_bytes(stats["sizes"].get(category, 0)))

    console.print(table)
    console.print(f"Total: {sum(stats['files'].values())} file(s), {format_bytes(stats['total_size_bytes'])}")
    console.print(f"[dim]{stats['logs_dir']}[/dim]")

    if stats["recent_files"]:
        console.print("\n[bold]Recent files:[/bold]")
        for entry in stats["recent_files"]:
            console.print(f"  {entry['category']}/{entry['name']}")


def format_option_files(files: dict[str, dict], console: Console) -> None:
    """Print the option files with their entry counts."""
    table = Table(title="[bold]Option Files[/bold]", show_header=True, header_style="bold")
    table.add_column("File", style="cyan")
    table.add_column("Entries", justify="right")
    table.add_column("Size", justify="right")

    for name, info in files.items():
        table.add_row(name, str(info["entries"]), format_bytes(info["size"]))

    console.print(table)


def format_json(data, console: Console) -> None:
    """Format and print data as JSON."""
    console.print_json(json.dumps(data, indent=2, default=str))


def _usage_display(usage: dict | None) -> str:
    """Colored ``used/limit (pct%)`` cell."""
    if not usage or usage["status"] == "disabled":
        return "[dim]-[/dim]"
    color = STATUS_COLORS.get(usage["status"], "white")
    return f"[{color}]{usage['used']}/{usage['limit']} ({usage['percentage']}%)[/{color}]"
