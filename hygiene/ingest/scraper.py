"""Article content extraction using trafilatura."""

from __future__ import annotations

import logging

import httpx
import trafilatura

from hygiene.retry import retry_async

logger = logging.getLogger(__name__)

USER_AGENT = "info-hygiene/0.1"


async def extract_content(url: str) -> str | None:
    """Extract main article text from a URL. Returns None on any failure."""
    try:
        html = await retry_async(_fetch_html, url, max_retries=2, base_delay=0.5)
    except (httpx.HTTPError, ConnectionError, TimeoutError) as exc:
        logger.debug("Fetch failed for %s: %s", url, exc)
        return None
    if not html:
        return None
    return trafilatura.extract(html, include_comments=False, include_tables=False)


async def _fetch_html(url: str) -> str | None:
    async with httpx.AsyncClient(
        timeout=15, follow_redirects=True, headers={"User-Agent": USER_AGENT},
    ) as client:
        resp = await client.get(url)
        resp.raise_for_status()
        return resp.text
