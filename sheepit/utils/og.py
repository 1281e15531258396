"""Social preview (``og:image``) lookup for deployed sites."""

import re
from urllib.parse import urlsplit

import httpx

from sheepit.config import settings
from sheepit.utils.logging import get_logger

logger = get_logger(__name__)

_OG_PATTERNS = (
    re.compile(r"<meta[^>]*property=[\"']og:image[\"'][^>]*content=[\"']([^\"']+)[\"']", re.I),
    re.compile(r"<meta[^>]*content=[\"']([^\"']+)[\"'][^>]*property=[\"']og:image[\"']", re.I),
)


def extract_og_image(html: str, page_url: str) -> str | None:
    """Find the ``og:image`` URL in a page and make it absolute."""
    for pattern in _OG_PATTERNS:
        match = pattern.search(html)
        if match:
            break
    else:
        return None

    image_url = match.group(1)
    if image_url.startswith("http"):
        return image_url
    if image_url.startswith("//"):
        return f"https:{image_url}"
    if image_url.startswith("/"):
        parts = urlsplit(page_url)
        return f"{parts.scheme}://{parts.netloc}{image_url}"
    return image_url


async def fetch_og_image(
    page_url: str,
    timeout: float | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> str | None:
    """Fetch a page and return its ``og:image``; ``None`` on any failure."""
    try:
        async with httpx.AsyncClient(
            timeout=timeout if timeout is not None else settings.og_fetch_timeout_seconds,
            follow_redirects=True,
            transport=transport,
        ) as client:
            response = await client.get(page_url, headers={"User-Agent": "SheepIt-Bot/1.0"})
    except httpx.HTTPError as e:
        logger.info("og.fetch_failed", url=page_url, error=str(e))
        return None

    if not response.is_success:
        return None
    return extract_og_image(response.text, page_url)
