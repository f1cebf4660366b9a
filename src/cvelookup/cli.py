"""cvelookup CLI - Command Line Interface.

A Typer CLI for looking up simulated vulnerabilities of container images.
"""

import asyncio
import json
import sys
from typing import Annotated

import typer
from loguru import logger
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table

from cvelookup import __version__
from cvelookup.config import get_settings
from cvelookup.models import Severity, SeveritySummary, VulnerabilityRecord, sort_by_severity
from cvelookup.services import (
    POPULAR_EXAMPLES,
    DatasetError,
    RecentSearchStore,
    VulnerabilityCatalog,
)

# Create Typer app
app = typer.Typer(
    name="cvelookup",
    help="cvelookup - Simulated container image vulnerability lookup",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

console = Console()

SEVERITY_STYLES = {
    Severity.CRITICAL: "bold red",
    Severity.HIGH: "red",
    Severity.MEDIUM: "yellow",
    Severity.LOW: "green",
    Severity.NONE: "dim",
}


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"[bold blue]cvelookup[/] version [green]{__version__}[/]")
        raise typer.Exit()


def setup_logging(verbose: bool = False) -> None:
    """Configure logging based on verbosity."""
    logger.remove()
    level = "DEBUG" if verbose else get_settings().log_level
    log_format = (
        "<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | <level>{message}</level>"
    )
    logger.add(sys.stderr, level=level, format=log_format)


@app.callback()
def main(
    version: Annotated[
        bool | None,
        typer.Option(
            "--version",
            "-V",
            callback=version_callback,
            is_eager=True,
            help="Show version and exit.",
        ),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose",
            "-v",
            help="Enable verbose output.",
        ),
    ] = False,
) -> None:
    """cvelookup - Look up known vulnerabilities for container images."""
    setup_logging(verbose)


def _load_catalog() -> VulnerabilityCatalog:
    try:
        return VulnerabilityCatalog.from_settings(get_settings())
    except DatasetError as e:
        console.print(f"[red]✗[/] {escape(str(e))}")
        raise typer.Exit(1) from None


def _severity_label(severity: Severity) -> str:
    style = SEVERITY_STYLES[severity]
    return f"[{style}]{severity.value.upper()}[/]"


def _format_score(record: VulnerabilityRecord) -> str:
    return f"{record.cvss_score:.1f}" if record.cvss_score is not None else "N/A"


def _summary_table(summary: SeveritySummary, title: str) -> Table:
    table = Table(title=title, border_style="blue")
    table.add_column("Severity", style="cyan")
    table.add_column("Count", style="green", justify="right")

    for severity in Severity:
        table.add_row(_severity_label(severity), str(summary.count(severity)))
    table.add_row("[bold]Total[/]", f"[bold]{summary.total}[/]")
    return table


@app.command()
def search(
    image: Annotated[
        str,
        typer.Argument(help="Container image name, e.g. nginx:latest"),
    ],
    registry: Annotated[
        str | None,
        typer.Option("--registry", "-r", help="Registry the image comes from."),
    ] = None,
    sort_severity: Annotated[
        bool,
        typer.Option("--sort-severity", "-s", help="Show most severe results first."),
    ] = False,
    as_json: Annotated[
        bool,
        typer.Option("--json", help="Print results as JSON."),
    ] = False,
    save: Annotated[
        bool,
        typer.Option("--save/--no-save", help="Remember this search in recent searches."),
    ] = True,
) -> None:
    """Search for vulnerabilities affecting a container image."""
    settings = get_settings()
    catalog = _load_catalog()

    if save:
        RecentSearchStore.from_settings(settings).record(image)

    if as_json:
        results = asyncio.run(catalog.search(image, registry))
    else:
        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            console=console,
            transient=True,
        ) as progress:
            progress.add_task(f"Scanning {escape(image)}...", total=None)
            results = asyncio.run(catalog.search(image, registry))

    if sort_severity:
        results = sort_by_severity(results)

    if as_json:
        payload = [record.model_dump(mode="json", by_alias=True) for record in results]
        typer.echo(json.dumps(payload, indent=2))
        return

    if not results:
        console.print(f"[yellow]No known vulnerabilities for '{escape(image)}'[/]")
        raise typer.Exit(0)

    table = Table(title=f"Vulnerabilities in '{escape(image)}'", border_style="blue")
    table.add_column("CVE ID", style="cyan", no_wrap=True)
    table.add_column("Severity")
    table.add_column("Score", style="yellow")
    table.add_column("Published", style="magenta")
    table.add_column("Title", max_width=50)

    for record in results:
        table.add_row(
            record.id,
            _severity_label(record.severity),
            _format_score(record),
            record.published_date.isoformat(),
            escape(record.title),
        )

    console.print(table)
    console.print(_summary_table(catalog.summarize(results), "Summary"))


@app.command()
def show(
    cve_id: Annotated[
        str,
        typer.Argument(help="CVE identifier, e.g. CVE-2023-4278"),
    ],
    as_json: Annotated[
        bool,
        typer.Option("--json", help="Print the record as JSON."),
    ] = False,
) -> None:
    """Show full details of a single vulnerability."""
    catalog = _load_catalog()
    record = asyncio.run(catalog.get_by_id(cve_id))

    if record is None:
        console.print(f"[red]✗[/] {escape(cve_id)} not found")
        raise typer.Exit(1)

    if as_json:
        typer.echo(json.dumps(record.model_dump(mode="json", by_alias=True), indent=2))
        return

    lines = [
        f"[bold]{escape(record.title)}[/]",
        "",
        escape(record.description),
        "",
        f"Severity:  {_severity_label(record.severity)}",
        f"CVSS:      {_format_score(record)}",
        f"Published: {record.published_date.isoformat()}",
        f"Packages:  {escape(', '.join(record.affected_packages))}",
    ]
    if record.has_references:
        lines += ["", "References:"] + [f"  {escape(url)}" for url in record.references]

    console.print(Panel("\n".join(lines), title=record.id, border_style="blue"))


@app.command()
def recent(
    clear: Annotated[
        bool,
        typer.Option("--clear", help="Forget all recent searches."),
    ] = False,
) -> None:
    """List (or clear) recent searches."""
    store = RecentSearchStore.from_settings(get_settings())

    if clear:
        store.clear()
        console.print("[green]✓[/] Recent searches cleared")
        return

    searches = store.list_searches()
    if not searches:
        console.print("[yellow]No recent searches[/]")
        return

    for index, query in enumerate(searches, start=1):
        console.print(f"{index}. {escape(query)}")


@app.command()
def examples() -> None:
    """Show example image names to search for."""
    for image in POPULAR_EXAMPLES:
        console.print(f"  [cyan]{image}[/]")


@app.command()
def stats() -> None:
    """Show a severity breakdown of the whole catalog."""
    catalog = _load_catalog()
    console.print(_summary_table(catalog.summarize(), "Catalog Statistics"))


@app.command()
def config() -> None:
    """Show current configuration."""
    settings = get_settings()

    table = Table(title="cvelookup Configuration", border_style="blue")
    table.add_column("Setting", style="cyan")
    table.add_column("Value", style="green")

    table.add_row("Log Level", settings.log_level)
    table.add_row("Data Directory", escape(str(settings.data_dir)))
    table.add_row("", "")
    table.add_row("[bold]Catalog[/]", "")
    table.add_row("  Dataset", escape(str(settings.catalog.dataset_path or "bundled")))
    table.add_row("  Search Delay", f"{settings.catalog.search_delay:g}s")
    table.add_row("  Detail Delay", f"{settings.catalog.detail_delay:g}s")
    table.add_row("", "")
    table.add_row("[bold]Recent Searches[/]", "")
    table.add_row("  Enabled", "Yes" if settings.recent_searches.enabled else "No")
    table.add_row("  Storage", escape(str(settings.recent_searches.storage_path)))
    table.add_row("  Key", settings.recent_searches.key)
    table.add_row("  Max Entries", str(settings.recent_searches.max_entries))

    console.print(table)


if __name__ == "__main__":
    app()
