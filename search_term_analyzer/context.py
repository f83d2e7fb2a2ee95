"""Business context inference via a web-search grounded Claude call."""

import json
import logging
import re
from typing import Any

import anthropic

from .config import make_client, model_name
from .errors import UpstreamError
from .models import BusinessContext
from .prompts import build_context_prompt
from .scraper import PageSnapshot

logger = logging.getLogger(__name__)

WEB_SEARCH_TOOL = {"type": "web_search_20250305", "name": "web_search", "max_uses": 5}

_FENCE_RE = re.compile(r"```(?:json)?[ \t]*\n?", re.IGNORECASE)


def resolve_business_context(
    website_url: str,
    snapshot: PageSnapshot | None = None,
    client: anthropic.Anthropic | None = None,
) -> BusinessContext:
    """
    Infer location, competitors and services for a business website.

    Args:
        website_url: The business website
        snapshot: Optional homepage snapshot appended to the prompt
        client: Anthropic client (built from the environment when omitted)

    Returns:
        BusinessContext; missing or mistyped keys fall back to empty values

    Raises:
        UpstreamError: the call failed or the answer is not a JSON object
    """
    client = client or make_client()
    prompt = build_context_prompt(
        website_url, snapshot.as_prompt_text() if snapshot else ""
    )

    try:
        response = client.messages.create(
            model=model_name(),
            max_tokens=1024,
            tools=[WEB_SEARCH_TOOL],
            messages=[{"role": "user", "content": prompt}],
        )
    except anthropic.APIError as e:
        raise UpstreamError(f"Business context lookup failed: {e}") from e

    text = "".join(
        block.text for block in response.content if getattr(block, "type", None) == "text"
    )
    result = parse_context_json(text)
    sources = _search_sources(response.content)

    context = BusinessContext(
        location=_as_text(result.get("location")),
        competitors=_as_text_list(result.get("competitors")),
        services=_as_text_list(result.get("services")),
        sources=sources,
    )
    logger.info(
        "Resolved context for %s: location=%r, %d competitors, %d services",
        website_url,
        context.location,
        len(context.competitors),
        len(context.services),
    )
    return context


def parse_context_json(text: str) -> dict[str, Any]:
    """Strip markdown fences and decode the JSON object in the answer."""
    cleaned = _FENCE_RE.sub("", text or "").strip()
    if not cleaned:
        raise UpstreamError("Business context lookup returned no text.")

    # Search answers sometimes wrap the JSON in a sentence
    json_match = re.search(r"\{.*\}", cleaned, re.DOTALL)
    if json_match:
        cleaned = json_match.group()

    try:
        result = json.loads(cleaned)
    except json.JSONDecodeError as e:
        raise UpstreamError(f"Business context response was not valid JSON: {e}") from e

    if not isinstance(result, dict):
        raise UpstreamError("Business context response was not a JSON object.")
    return result


def _as_text(value: Any) -> str:
    return value.strip() if isinstance(value, str) else ""


def _as_text_list(value: Any) -> tuple[str, ...]:
    if not isinstance(value, list):
        return ()
    return tuple(item.strip() for item in value if isinstance(item, str) and item.strip())


def _search_sources(blocks: list[Any]) -> tuple[str, ...]:
    """Collect result URLs from web search tool blocks, in order, deduplicated."""
    urls: list[str] = []
    for block in blocks:
        if getattr(block, "type", None) != "web_search_tool_result":
            continue
        results = getattr(block, "content", None)
        if not isinstance(results, list):
            # WebSearchToolResultError
            continue
        for result in results:
            url = getattr(result, "url", None)
            if url and url not in urls:
                urls.append(url)
    return tuple(urls)
