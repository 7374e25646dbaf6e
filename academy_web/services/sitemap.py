"""Sitemap assembly."""
import asyncio
import logging
from datetime import datetime
from typing import List, Optional, Tuple
from xml.etree import ElementTree

import pytz
from pydantic import ValidationError

from academy_web.core.config import settings
from academy_web.schemas.content import SitemapUrl
from academy_web.services.backend_client import BackendClient

logger = logging.getLogger(__name__)

SITEMAP_NAMESPACE = "http://www.sitemaps.org/schemas/sitemap/0.9"

STATIC_PATHS = [
    "",
    "/about",
    "/contact",
    "/book-now",
    "/terms-of-service",
    "/privacy-policy",
    "/gallery",
    "/summer-camp",
    "/winter-camp",
    "/tennis-phoenix",
    "/tennis-gilbert",
    "/sports/pickleball",
    "/sports/tennis",
    "/phoenix-junior-tennis",
    "/gilbert-adult-tennis-clinics",
    "/pickleball-gilbert",
    "/private-tennis-coaching-in-phoenix-and-gilbert",
    "/blog",
    "/camps",
]

# (backend endpoint, public path prefix)
DYNAMIC_SOURCES: List[Tuple[str, str]] = [
    ("/api/public/blog/sitemap-urls", "/blog/"),
    ("/api/public_api/courses/sitemap-urls", "/book-now/courses/"),
    ("/api/public/packages/sitemap-urls", "/packages/"),
    ("/api/public/camps/sitemap-urls", "/camps/"),
]


def normalize_lastmod(value: str, tz_name: Optional[str] = None) -> Optional[str]:
    """
    Convert a backend timestamp to an ISO 8601 UTC timestamp.

    Naive timestamps are taken to be in the academy's timezone.

    Args:
        value: Timestamp or date string
        tz_name: Timezone of naive timestamps, defaults to the academy's

    Returns:
        ISO timestamp, or None if the value cannot be parsed
    """
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except (AttributeError, ValueError):
        return None

    if parsed.tzinfo is None:
        parsed = pytz.timezone(tz_name or settings.ACADEMY_TIMEZONE).localize(parsed)
    return parsed.astimezone(pytz.UTC).isoformat()


async def _fetch_source(client: BackendClient, endpoint: str, prefix: str) -> List[Tuple[str, Optional[str]]]:
    try:
        raw_items = await client.list_sitemap_urls(endpoint)
    except Exception as e:
        logger.error(f"Failed to fetch sitemap URLs from {endpoint}: {e}")
        return []

    entries = []
    for raw in raw_items:
        try:
            item = SitemapUrl.model_validate(raw)
        except ValidationError:
            logger.warning(f"Skipping malformed sitemap entry from {endpoint}: {raw}")
            continue
        entries.append((f"{settings.SITE_URL}{prefix}{item.loc}", normalize_lastmod(item.lastmod)))
    return entries


async def collect_urls(client: BackendClient) -> List[Tuple[str, Optional[str]]]:
    """
    Collect every public URL of the site.

    Args:
        client: Backend client

    Returns:
        ``(url, lastmod)`` pairs, static pages first
    """
    now = datetime.now(pytz.UTC).isoformat()
    urls = [(f"{settings.SITE_URL}{path}", now) for path in STATIC_PATHS]

    dynamic = await asyncio.gather(
        *(_fetch_source(client, endpoint, prefix) for endpoint, prefix in DYNAMIC_SOURCES)
    )
    for entries in dynamic:
        urls.extend(entries)
    return urls


def render_sitemap(urls: List[Tuple[str, Optional[str]]]) -> str:
    """Render ``(url, lastmod)`` pairs as a sitemap XML document."""
    urlset = ElementTree.Element("urlset", xmlns=SITEMAP_NAMESPACE)
    for loc, lastmod in urls:
        url = ElementTree.SubElement(urlset, "url")
        ElementTree.SubElement(url, "loc").text = loc
        if lastmod:
            ElementTree.SubElement(url, "lastmod").text = lastmod

    body = ElementTree.tostring(urlset, encoding="unicode")
    return f'<?xml version="1.0" encoding="UTF-8"?>\n{body}'
