"""Orchestration: CSV + URL/location -> context -> prompt -> streamed records."""

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path

import anthropic

from .classifier import classify
from .context import resolve_business_context
from .errors import AnalysisCancelled, ConfigError, FileReadError
from .models import AnalysisRecord, BusinessContext
from .prompts import build_analysis_prompt
from .scraper import fetch_homepage

logger = logging.getLogger(__name__)


@dataclass
class AnalysisRun:
    """State owned by one analysis run, discarded when the run finishes."""

    csv_text: str
    website_url: str = ""
    manual_location: str = ""
    context: BusinessContext | None = None
    records: list[AnalysisRecord] = field(default_factory=list)
    started: bool = False
    cancelled: asyncio.Event = field(default_factory=asyncio.Event)

    def __post_init__(self):
        self.website_url = self.website_url.strip()
        self.manual_location = self.manual_location.strip()

    def cancel(self) -> None:
        self.cancelled.set()


def read_csv_file(path: Path) -> str:
    """Read the search terms file as text (UTF-8, BOM tolerated)."""
    try:
        return Path(path).read_text(encoding="utf-8-sig")
    except (OSError, UnicodeDecodeError) as e:
        raise FileReadError(f"Failed to read the selected file: {e}") from e


async def analyze_search_terms(
    run: AnalysisRun,
    on_progress: Callable[[str], None] | None = None,
    on_record: Callable[[AnalysisRecord], None] | None = None,
    on_context: Callable[[BusinessContext], None] | None = None,
    client: anthropic.Anthropic | None = None,
    async_client: anthropic.AsyncAnthropic | None = None,
    fetch_snapshot: bool = True,
) -> list[AnalysisRecord]:
    """
    Classify every search term in the run's CSV.

    Steps:
        1. Validate inputs (URL or manual location)
        2. Resolve business context from the website (skipped without a URL)
        3. Apply the manual location override
        4. Build the prompt and stream records to on_record

    Args:
        run: Single-use run state; records are appended to run.records
        on_progress: Optional callback(step: str) for progress updates
        on_record: Optional callback(record) called as each record arrives
        on_context: Optional callback(context) once the context is final
        client: Anthropic client for the context call
        async_client: AsyncAnthropic client for the stream
        fetch_snapshot: Fetch the homepage as extra grounding

    Returns:
        All records received, in arrival order
    """
    if run.started:
        raise RuntimeError("This analysis run has already been started.")
    run.started = True

    def _progress(msg: str):
        logger.info(msg)
        if on_progress:
            on_progress(msg)

    if not run.website_url and not run.manual_location:
        raise ConfigError("Please provide a Website URL or a manual Targeting Location.")

    # Step 1: Context
    context = BusinessContext()
    if run.website_url:
        snapshot = None
        if fetch_snapshot:
            _progress("Fetching website...")
            snapshot = await fetch_homepage(run.website_url)
        _progress("Researching business location, competitors and services...")
        context = await asyncio.to_thread(
            resolve_business_context, run.website_url, snapshot, client
        )

    # Manual location wins over the inferred one
    if run.manual_location:
        context = context.with_location(run.manual_location)

    if not context.location:
        raise ConfigError("Could not determine a location. Please enter one manually.")
    run.context = context
    if on_context:
        on_context(context)

    if run.cancelled.is_set():
        raise AnalysisCancelled("Analysis cancelled.")

    # Step 2: Stream the analysis
    _progress(f"Analyzing search terms for {context.location}...")
    prompt = build_analysis_prompt(
        run.csv_text, context.location, context.competitors, context.services
    )
    async for record in classify(prompt, client=async_client, cancel=run.cancelled):
        run.records.append(record)
        if on_record:
            on_record(record)

    _progress(f"Done: {len(run.records)} search terms analyzed.")
    return run.records

