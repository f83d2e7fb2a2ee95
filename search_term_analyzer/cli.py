"""CLI entry point for search term analysis."""

import argparse
import asyncio
import logging
import sys
from collections import Counter
from pathlib import Path

from dotenv import load_dotenv
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.status import Status

from .export import write_csv
from .main import AnalysisRun, analyze_search_terms, read_csv_file
from .models import CATEGORIES, AnalysisRecord

CATEGORY_STYLES = {
    "Positive": "green",
    "Negative": "red",
    "Competitor": "magenta",
    "Generic": "yellow",
}


def main(argv: list[str] | None = None):
    load_dotenv()

    parser = argparse.ArgumentParser(
        prog="search-terms",
        description="Classify Google Ads search terms for a business.",
    )
    parser.add_argument(
        "--csv",
        type=Path,
        required=True,
        help="Search terms CSV, one term per line",
    )
    parser.add_argument(
        "--url",
        default="",
        help="Business website URL (used to infer location, competitors and services)",
    )
    parser.add_argument(
        "--location",
        default="",
        help="Targeting location; overrides the location found from --url",
    )
    parser.add_argument(
        "--output",
        type=Path,
        default=Path("search_terms_analysis.csv"),
        help="Output CSV path (default: search_terms_analysis.csv)",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Show debug logging",
    )
    args = parser.parse_args(argv)

    console = Console()
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
    )

    status = Status("", console=console)

    def on_progress(msg: str):
        status.update(f"[bold cyan]{msg}[/]")

    def on_record(record: AnalysisRecord):
        style = CATEGORY_STYLES.get(record.category, "white")
        detail = record.positive_phrase or record.negative_phrase or record.competitor_brand
        line = f"[{style}]{escape(record.category):<10}[/] {escape(record.term)}  [dim]{escape(record.ad_group)}[/]"
        if detail:
            line += f"  [dim]({escape(detail)})[/]"
        if record.location_exclusion:
            line += f"  [dim]exclude: {escape(record.location_exclusion)}[/]"
        console.print(line)

    run = None
    try:
        run = AnalysisRun(
            csv_text=read_csv_file(args.csv),
            website_url=args.url,
            manual_location=args.location,
        )
        status.start()
        records = asyncio.run(
            analyze_search_terms(run, on_progress=on_progress, on_record=on_record)
        )
        status.stop()
        write_csv(records, args.output)
        _print_summary(console, records)
        console.print(f"\n[bold green]Done![/] Results saved to [bold]{args.output}[/]\n")
    except KeyboardInterrupt:
        status.stop()
        console.print("\n[yellow]Cancelled.[/]")
        sys.exit(1)
    except Exception as e:
        status.stop()
        # Records already shown stay on screen; keep them on disk too
        if run is not None and run.records:
            write_csv(run.records, args.output)
            console.print(f"Partial results saved to [bold]{args.output}[/]")
        console.print(f"\n[bold red]Error:[/] {escape(str(e))}\n")
        sys.exit(1)


def _print_summary(console: Console, records: list[AnalysisRecord]):
    counts = Counter(record.category for record in records)
    order = [c for c in CATEGORIES if c in counts] + [c for c in counts if c not in CATEGORIES]
    parts = [
        f"[{CATEGORY_STYLES.get(category, 'white')}]{escape(category)}: {counts[category]}[/]"
        for category in order
    ]
    console.print(f"\n{len(records)} terms  " + "  ".join(parts))


if __name__ == "__main__":
    main()
