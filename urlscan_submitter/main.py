"""CLI entry point for urlscan-submitter."""

import logging
from pathlib import Path
from typing import Optional
from urllib.parse import urlparse

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
import tldextract

from .analyzer import Analyzer
from .api import (
    ResultPoller,
    ScanRequest,
    ScanResult,
    UrlscanClient,
    Visibility,
    get_quota_report,
    seed_tracker,
)
from .config import (
    API_KEY_ENV,
    INTER_REQUEST_DELAY,
    LOGS_DIR,
    MAX_POLLING_ATTEMPTS,
    OPTIONS_DIR,
    POLLING_INTERVAL,
    STATUS_EVERY,
    USER_AGENT_TYPES,
    get_app_dir,
)
from .output import (
    export_to_csv,
    format_batch_plan,
    format_batch_summary,
    format_json,
    format_log_stats,
    format_option_files,
    format_quota_report,
    format_rate_limit_status,
    format_scan_result,
)
from .storage import CredentialStore, OptionsStore, ResultStore

app = typer.Typer(
    name="urlscan-submit",
    help="Submit URLs to urlscan.io, wait for the results and keep them on disk.",
    add_completion=False,
)
key_app = typer.Typer(help="Manage the urlscan.io API key.", add_completion=False)
options_app = typer.Typer(help="Manage URLs, tags, visibility and user agent.", add_completion=False)
app.add_typer(key_app, name="key")
app.add_typer(options_app, name="options")

console = Console()


def validate_url(url: str) -> str | None:
    """
    Validate and normalize a URL. Returns the URL or None if invalid.

    Input without a scheme (``example.com``, ``//example.com``,
    ``localhost:8080``) is treated as an https URL.
    """
    url = url.strip()
    if not url or any(c.isspace() for c in url):
        return None
    if "://" not in url:
        url = "https://" + (url[2:] if url.startswith("//") else url)

    try:
        parsed = urlparse(url)
        hostname = parsed.hostname
    except ValueError:
        return None

    if parsed.scheme not in ("http", "https") or not hostname:
        return None
    if hostname == "localhost":
        return url

    extracted = tldextract.extract(hostname)
    if extracted.ipv4 or (extracted.domain and extracted.suffix):
        return url
    return None


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show progress logs"),
    debug: bool = typer.Option(False, "--debug", help="Show debug logs"),
) -> None:
    """Submit URLs to urlscan.io and collect the results."""
    _configure_logging(verbose, debug)


def _configure_logging(verbose: bool, debug: bool) -> None:
    level = logging.DEBUG if debug else (logging.INFO if verbose else logging.WARNING)
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=debug, show_path=False)],
        force=True,
    )
    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(logging.DEBUG if debug else logging.WARNING)


def _credentials() -> CredentialStore:
    return CredentialStore(get_app_dir())


def _options() -> OptionsStore:
    return OptionsStore(get_app_dir() / OPTIONS_DIR)


def _results() -> ResultStore:
    return ResultStore(get_app_dir() / LOGS_DIR)


def _require_key() -> str:
    api_key = _credentials().get_key()
    if not api_key:
        console.print("[red]API key is not configured.[/red]")
        console.print(f"Run 'urlscan-submit key set <KEY>' or set {API_KEY_ENV}.")
        raise typer.Exit(1)
    return api_key


def _parse_visibility(value: Optional[str], options: OptionsStore) -> Visibility:
    if value is None:
        return options.get_visibility()
    try:
        return Visibility(value.strip().lower())
    except ValueError:
        console.print(f"[red]Invalid visibility: {value}[/red]")
        console.print(f"Available: {', '.join(v.value for v in Visibility)}")
        raise typer.Exit(1)


def _save_results(results: list[ScanResult], visibility: Visibility) -> None:
    paths = _results().save(results, visibility.value)
    if paths:
        console.print(f"[green]Results saved to {paths['json']}[/green]")
        console.print(f"[dim]CSV: {paths['csv']}[/dim]")


@app.command()
def scan(
    url: str = typer.Argument(..., help="URL to scan (e.g., https://example.com)"),
    tags: Optional[list[str]] = typer.Option(
        None,
        "--tag",
        "-t",
        help="Tag to apply (repeatable). Defaults to the tags in options/tags.txt",
    ),
    visibility: Optional[str] = typer.Option(
        None,
        "--visibility",
        "-V",
        help="public, unlisted or private. Defaults to options/scan-visibility.txt",
    ),
    interval: float = typer.Option(POLLING_INTERVAL, "--interval", help="Seconds between result checks"),
    max_attempts: int = typer.Option(MAX_POLLING_ATTEMPTS, "--max-attempts", help="Result checks before giving up"),
    output_format: str = typer.Option("table", "--format", "-f", help="Output format: table or json"),
    save: bool = typer.Option(True, "--save/--no-save", help="Store the result under logs/"),
) -> None:
    """Scan a single URL and wait for the result."""
    normalized = validate_url(url)
    if not normalized:
        console.print(f"[red]Invalid URL: {url}[/red]")
        raise typer.Exit(1)

    api_key = _require_key()
    options = _options()
    scan_visibility = _parse_visibility(visibility, options)
    scan_tags = options.combine_tags(tags) if tags else options.load_tags()

    with UrlscanClient(user_agent=options.get_user_agent()) as client:
        seed_tracker(client.tracker, get_quota_report(client, api_key), scan_visibility.value)
        analyzer = Analyzer(client, ResultPoller(client, interval=interval, max_attempts=max_attempts))

        request = ScanRequest(normalized, scan_tags, scan_visibility)
        with console.status(f"[cyan]Scanning {normalized}...[/cyan]"):
            result = analyzer.analyze(request, api_key)

    if output_format == "json":
        format_json(result.to_dict(), console)
    else:
        format_scan_result(result, console)

    if save:
        _save_results([result], scan_visibility)

    if not result.success:
        raise typer.Exit(1)


@app.command("scan-batch")
def scan_batch(
    input_file: Optional[str] = typer.Argument(
        None, help="File with URLs, one per line. Defaults to options/links.txt"
    ),
    yes: bool = typer.Option(False, "--yes", "-y", help="Start without asking for confirmation"),
    delay: float = typer.Option(INTER_REQUEST_DELAY, "--delay", help="Seconds between URLs"),
    interval: float = typer.Option(POLLING_INTERVAL, "--interval", help="Seconds between result checks"),
    max_attempts: int = typer.Option(MAX_POLLING_ATTEMPTS, "--max-attempts", help="Result checks per URL"),
    output: Optional[str] = typer.Option(None, "--output", "-o", help="Also write results to this CSV file"),
    save: bool = typer.Option(True, "--save/--no-save", help="Store the results under logs/"),
) -> None:
    """Scan every URL from a file, one after another."""
    options = _options()

    if input_file:
        input_path = Path(input_file)
        if not input_path.exists():
            console.print(f"[red]File not found: {input_file}[/red]")
            raise typer.Exit(1)
        raw_urls = _read_urls(input_path)
    else:
        raw_urls = options.load_urls()

    urls = []
    for raw in raw_urls:
        normalized = validate_url(raw)
        if normalized:
            urls.append(normalized)
        else:
            console.print(f"[yellow]Skipping invalid URL: {raw}[/yellow]")

    if not urls:
        console.print("[red]No valid URLs found[/red]")
        raise typer.Exit(1)

    tags = options.load_tags()
    visibility = options.get_visibility()
    api_key = _require_key()

    format_batch_plan(len(urls), tags, visibility.value, max_attempts, console)
    if not yes and not typer.confirm(f"Start analysis of {len(urls)} URL(s) with {len(tags)} tag(s)?"):
        console.print("[dim]Analysis cancelled.[/dim]")
        return

    completed: list[ScanResult] = []

    with UrlscanClient(user_agent=options.get_user_agent()) as client:
        analyzer = Analyzer(
            client,
            ResultPoller(client, interval=interval, max_attempts=max_attempts),
            inter_request_delay=delay,
        )

        def on_start(index: int, url: str) -> None:
            if index == 0 or (index + 1) % STATUS_EVERY == 0:
                report = get_quota_report(client, api_key)
                seed_tracker(client.tracker, report, visibility.value)
                format_rate_limit_status(report, visibility.value, console)
            console.print(f"\n[bold]{escape(f'[{index + 1}/{len(urls)}]')}[/bold] [cyan]{url}[/cyan]")

        def on_progress(index: int, url: str, result: ScanResult) -> None:
            completed.append(result)
            if result.success:
                console.print(f"  [green]Done[/green] {result.report_url}")
            else:
                console.print(f"  [red]Failed:[/red] {escape(result.error or '')}")

        try:
            summary = analyzer.analyze_batch(
                urls, tags, visibility, api_key, on_start=on_start, on_progress=on_progress,
            )
        except KeyboardInterrupt:
            console.print("\n[yellow]Interrupted, the pending URL was not recorded.[/yellow]")
            if save and completed:
                _save_results(completed, visibility)
            raise typer.Exit(130)

    console.print()
    format_batch_summary(summary.results, visibility.value, console)

    if save:
        _save_results(summary.results, visibility)
    if output:
        export_to_csv(summary.results, output)
        console.print(f"[green]Results saved to {output}[/green]")


def _read_urls(path: Path) -> list[str]:
    """Read URLs from a text file, one per line. Comments and blanks are skipped."""
    urls = []
    with path.open("r", encoding="utf-8") as f:
        for line in f:
            line = line.strip()
            if line and not line.startswith("#"):
                urls.append(line)
    return urls


@app.command()
def quota(
    output_format: str = typer.Option("table", "--format", "-f", help="Output format: table or json"),
) -> None:
    """Show API usage and limits."""
    api_key = _require_key()
    options = _options()

    with UrlscanClient(user_agent=options.get_user_agent()) as client:
        report = get_quota_report(client, api_key)

    if output_format == "json":
        format_json(report, console)
    else:
        format_quota_report(report, console)


@key_app.command("set")
def key_set(api_key: str = typer.Argument(..., help="urlscan.io API key (UUID)")) -> None:
    """Store the API key."""
    try:
        path = _credentials().save_key(api_key)
    except ValueError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)
    console.print(f"[green]API key saved to {path}[/green]")


@key_app.command("show")
def key_show() -> None:
    """Show the configured API key, masked."""
    store = _credentials()
    if not store.has_key():
        console.print("[yellow]API key is not configured.[/yellow]")
        raise typer.Exit(1)

    masked = store.masked()
    if not masked:
        console.print("[red]API key is invalid or corrupted. Set it again.[/red]")
        raise typer.Exit(1)
    console.print(f"API key: [cyan]{masked}[/cyan]")


@key_app.command("remove")
def key_remove() -> None:
    """Delete the stored API key."""
    if _credentials().remove_key():
        console.print("[green]API key removed.[/green]")
    else:
        console.print("[yellow]No stored API key.[/yellow]")


@options_app.command("show")
def options_show() -> None:
    """Show the current options."""
    options = _options()
    urls = options.load_urls()
    tags = options.load_tags()

    console.print(f"[bold]Options directory:[/bold] {options.options_dir}")
    console.print(f"Visibility: [cyan]{options.get_visibility().value}[/cyan]")
    console.print(f"User agent: [cyan]{options.get_user_agent_type()}[/cyan] [dim]{options.get_user_agent()}[/dim]")
    console.print(f"Tags ({len(tags)}): {', '.join(tags) or '-'}")
    console.print(f"URLs ({len(urls)}):")
    for url in urls[:10]:
        console.print(f"  {url}")
    if len(urls) > 10:
        console.print(f"  ... and {len(urls) - 10} more")


@options_app.command("add-url")
def options_add_url(url: str = typer.Argument(..., help="URL to append to links.txt")) -> None:
    """Append a URL to links.txt."""
    normalized = validate_url(url)
    if not normalized:
        console.print(f"[red]Invalid URL: {url}[/red]")
        raise typer.Exit(1)
    _options().add_url(normalized)
    console.print(f"[green]Added {normalized}[/green]")


@options_app.command("add-tag")
def options_add_tag(tag: str = typer.Argument(..., help="Tag to append to tags.txt")) -> None:
    """Append a tag to tags.txt."""
    if not tag.strip():
        console.print("[red]Tag cannot be empty[/red]")
        raise typer.Exit(1)
    _options().add_tag(tag)
    console.print(f"[green]Added tag {tag.strip()}[/green]")


@options_app.command("visibility")
def options_visibility(value: str = typer.Argument(..., help="public, unlisted or private")) -> None:
    """Set the default scan visibility."""
    try:
        visibility = _options().set_visibility(value)
    except ValueError:
        console.print(f"[red]Invalid visibility: {value}[/red]")
        raise typer.Exit(1)
    console.print(f"[green]Visibility set to {visibility.value}[/green]")


@options_app.command("user-agent")
def options_user_agent(
    agent_type: str = typer.Argument(..., help=f"One of: {', '.join(USER_AGENT_TYPES)}"),
    custom: Optional[str] = typer.Option(None, "--custom", help="User-Agent string for the 'custom' type"),
) -> None:
    """Choose the User-Agent sent with submissions."""
    options = _options()
    try:
        agent_type = options.set_user_agent_type(agent_type)
    except ValueError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)

    if custom:
        options.set_custom_user_agent(custom)
    console.print(f"[green]User agent set to {agent_type}[/green] [dim]{options.get_user_agent()}[/dim]")


@options_app.command("files")
def options_files() -> None:
    """List the option files."""
    options = _options()
    format_option_files(options.list_files(), console)
    console.print(f"[dim]{options.options_dir}[/dim]")


@app.command()
def logs(
    output_format: str = typer.Option("table", "--format", "-f", help="Output format: table or json"),
) -> None:
    """Show statistics of the stored results."""
    stats = _results().stats()
    if output_format == "json":
        format_json(stats, console)
    else:
        format_log_stats(stats, console)


@app.command()
def clean(
    yes: bool = typer.Option(False, "--yes", "-y", help="Do not ask for confirmation"),
) -> None:
    """Delete stored results and the API key. Options are kept."""
    if not yes and not typer.confirm("Delete all stored results and the API key?"):
        console.print("[dim]Nothing was removed.[/dim]")
        return

    removed = _results().clear()
    key_removed = _credentials().remove_key()

    console.print(f"[green]Removed {removed} result file(s).[/green]")
    if key_removed:
        console.print("[green]API key removed.[/green]")
    else:
        console.print("[yellow]No stored API key.[/yellow]")


@app.command()
def version() -> None:
    """Show version information."""
    from . import __version__
    console.print(f"urlscan-submit version {__version__}")


if __name__ == "__main__":
    app()
