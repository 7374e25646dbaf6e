"""Tests for sitemap assembly."""
from xml.etree import ElementTree

from academy_web.core.config import settings
from academy_web.services.sitemap import (
    SITEMAP_NAMESPACE,
    STATIC_PATHS,
    collect_urls,
    normalize_lastmod,
    render_sitemap,
)


def test_normalize_lastmod():
    # Phoenix does not observe DST, UTC-7 all year
    assert normalize_lastmod("2025-07-01T10:00:00", "America/Phoenix") == "2025-07-01T17:00:00+00:00"
    assert normalize_lastmod("2025-01-15T10:00:00Z") == "2025-01-15T10:00:00+00:00"
    assert normalize_lastmod("2025-01-15", "UTC") == "2025-01-15T00:00:00+00:00"
    assert normalize_lastmod("yesterday") is None


async def test_collect_urls(backend, backend_client):
    backend.on("GET", "/api/public/blog/sitemap-urls", json=[
        {"loc": "serve-tips", "lastmod": "2025-03-05T12:00:00Z"},
        {"loc": "missing-lastmod"},
    ])
    backend.on("GET", "/api/public/camps/sitemap-urls", json=[
        {"loc": "summer-2025", "lastmod": "2025-04-01T00:00:00Z"},
    ])
    backend.on("GET", "/api/public/packages/sitemap-urls", status=500)

    urls = await collect_urls(backend_client)
    locs = [loc for loc, _ in urls]

    assert locs[: len(STATIC_PATHS)] == [f"{settings.SITE_URL}{path}" for path in STATIC_PATHS]
    assert f"{settings.SITE_URL}/blog/serve-tips" in locs
    assert f"{settings.SITE_URL}/camps/summer-2025" in locs
    assert f"{settings.SITE_URL}/blog/missing-lastmod" not in locs
    assert len(urls) == len(STATIC_PATHS) + 2


def test_render_sitemap():
    xml = render_sitemap([
        ("https://teamhippa.com", "2025-01-01T00:00:00+00:00"),
        ("https://teamhippa.com/blog/a&b", None),
    ])

    assert xml.startswith('<?xml version="1.0" encoding="UTF-8"?>')
    root = ElementTree.fromstring(xml.split("\n", 1)[1])
    ns = {"s": SITEMAP_NAMESPACE}
    urls = root.findall("s:url", ns)
    assert len(urls) == 2
    assert urls[1].find("s:loc", ns).text == "https://teamhippa.com/blog/a&b"
    assert urls[1].find("s:lastmod", ns) is None
