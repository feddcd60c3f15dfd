import sys

from pydantic import validate_call
from rich import print
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from stationmap.models.stations import Metric, StationDataset, StationFilter

console = Console()


@validate_call
def handle_error(message: str, exit: bool = False):
    """Print an error message, optionally exiting."""
    print(f"• [bold red]:x: {message}[/bold red]")
    if exit:
        sys.exit(1)


@validate_call
def rich_print_checked_statement(statement: str, mode: str, exit: bool = False):
    """
    Print a statement with a check mark or cross.
    """
    if mode not in ["loading", "success", "error", "info", "warning"]:
        handle_error(f"Invalid mode: {mode}", exit=exit)
    if mode == "loading":
        print(f"• [bold yellow]:hourglass: {statement}[/bold yellow]")
    elif mode == "success":
        print(f"• [bold green]:white_check_mark: {statement}[/bold green]")
    elif mode == "error":
        print(f"• [bold red]:x: {statement}[/bold red]")
        if exit:
            sys.exit(1)
    elif mode == "info":
        print(f"• [bold blue]:blue_book: {statement}[/bold blue]")
    elif mode == "warning":
        print(f"• [bold orange1]:warning: {statement}[/bold orange1]")


def rich_print_station_summary(dataset: StationDataset) -> None:
    """Metric ranges and category membership of a station dataset."""
    metrics = Table(title="Metrics", show_header=True, header_style="bold magenta")
    metrics.add_column("Metric", style="cyan")
    metrics.add_column("Column")
    metrics.add_column("Min", justify="right")
    metrics.add_column("Max", justify="right")
    for metric in Metric:
        low, high = dataset.extent(metric.column)
        metrics.add_row(metric.value, metric.column, f"{low:g}", f"{high:g}")
    console.print(metrics)

    categories = Table(title="Filters", show_header=True, header_style="bold magenta")
    categories.add_column("Filter", style="cyan")
    categories.add_column("Category")
    categories.add_column("Stations shown", justify="right")
    for station_filter in StationFilter:
        label = station_filter.category_label
        shown = len(dataset) if label is None else dataset.member_count(label)
        categories.add_row(station_filter.value, label or "-", str(shown))
    console.print(categories)


def rich_print_section_separator(title: str):
    """
    Print a section separator.
    """
    console.print(
        Panel.fit(
            f"[bold magenta]{title}[/]",
            border_style="bright_blue",
            title_align="center",
        )
    )
