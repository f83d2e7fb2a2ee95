"""Homepage snapshot used as extra grounding for the business context call.

Single page only:
- httpx GET, no browser
- title, meta description, first h1 and visible text
- failures are logged and return None, the web-search call still runs
"""

import logging
from dataclasses import dataclass
from urllib.parse import urlparse

import httpx
from bs4 import BeautifulSoup

logger = logging.getLogger(__name__)

USER_AGENT = "Mozilla/5.0 (Macintosh; Intel Mac OS X 10.15; rv:121.0) Gecko/20100101 Firefox/121.0"
MAX_TEXT_CHARS = 3000
BOILERPLATE_TAGS = ["script", "style", "noscript", "header", "footer", "nav"]


@dataclass
class PageSnapshot:
    url: str
    title: str | None = None
    meta_description: str | None = None
    h1: str | None = None
    text_content: str = ""

    @classmethod
    def from_html(cls, url: str, html: str) -> "PageSnapshot":
        soup = BeautifulSoup(html, "html.parser")
        meta = soup.select_one('meta[name="description"]')
        title, h1 = _tag_text(soup.title), _tag_text(soup.h1)

        # Boilerplate goes before the visible text is collected
        for tag in soup(BOILERPLATE_TAGS):
            tag.decompose()
        visible = "\n".join(soup.stripped_strings)

        return cls(
            url=url,
            title=title,
            meta_description=meta.get("content", "") if meta else None,
            h1=h1,
            text_content=visible[:MAX_TEXT_CHARS],
        )

    def as_prompt_text(self) -> str:
        parts = [f"URL: {self.url}"]
        if self.title:
            parts.append(f"Title: {self.title}")
        if self.h1:
            parts.append(f"H1: {self.h1}")
        if self.meta_description:
            parts.append(f"Meta Description: {self.meta_description}")
        if self.text_content:
            parts.append(f"Content:\n{self.text_content}")
        return "\n".join(parts)


def normalize_url(url: str) -> str:
    """Add a scheme to bare domains and drop fragments.

    >>> normalize_url("example.com/about#team")
    'https://example.com/about'
    """
    url = url.strip()
    if not url.startswith(("http://", "https://")):
        url = f"https://{url}"
    parsed = urlparse(url)
    normalized = f"{parsed.scheme}://{parsed.netloc}{parsed.path}"
    if parsed.query:
        normalized += f"?{parsed.query}"
    return normalized


async def fetch_homepage(url: str, timeout: float = 15.0) -> PageSnapshot | None:
    """
    Fetch and parse a single page.

    Args:
        url: Website URL (bare domains get https://)
        timeout: Request timeout in seconds

    Returns:
        PageSnapshot, or None when the page could not be fetched
    """
    url = normalize_url(url)
    try:
        async with httpx.AsyncClient(
            timeout=timeout,
            follow_redirects=True,
            headers={"User-Agent": USER_AGENT},
        ) as client:
            response = await client.get(url)
            response.raise_for_status()
            html = response.text
    except httpx.HTTPError as e:
        logger.warning("Could not fetch %s for context grounding: %s", url, e)
        return None

    return PageSnapshot.from_html(url, html)


def _tag_text(tag) -> str | None:
    return tag.get_text(strip=True) if tag else None
