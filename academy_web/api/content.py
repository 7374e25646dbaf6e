"""Public content endpoints: camps, tournaments, blog, site content."""
import logging
from datetime import datetime
from typing import List, Optional

import pytz
from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import Response

from academy_web.api.errors import raise_for_action, raise_for_detail
from academy_web.core.config import settings
from academy_web.core.dependencies import get_backend_client
from academy_web.schemas.catalog import parse_rows
from academy_web.schemas.content import (
    BlogPost,
    BlogPostPage,
    BlogPostSummary,
    Camp,
    Inquiry,
    SiteContent,
    Tournament,
    TournamentPage,
    WaitlistEntry,
)
from academy_web.services.backend_client import BackendClient
from academy_web.services.editorjs import render_content
from academy_web.services.sitemap import collect_urls, render_sitemap

logger = logging.getLogger(__name__)

router = APIRouter(tags=["content"])

SITE_CONTENT_KINDS = ("banner", "ticker", "hero-slides", "modal")


def format_published_date(value: Optional[str]) -> Optional[str]:
    """Format a publication timestamp as e.g. ``March 5, 2025`` in academy time."""
    if not value:
        return None

    try:
        published = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None
    if published.tzinfo is not None:
        published = published.astimezone(pytz.timezone(settings.ACADEMY_TIMEZONE))
    return f"{published:%B} {published.day}, {published.year}"


@router.get("/camps", response_model=List[Camp])
async def list_camps(client: BackendClient = Depends(get_backend_client)):
    """List active camps, empty if the backend is unavailable."""
    try:
        rows = await client.list_camps()
    except Exception as e:
        logger.error(f"Failed to fetch camps: {e}")
        return []
    return [camp for camp in parse_rows(Camp, rows) if camp.active]


@router.get("/camps/{slug}", response_model=Camp)
async def get_camp(slug: str, client: BackendClient = Depends(get_backend_client)):
    """Get a camp with its sessions."""
    try:
        data = await client.get_camp(slug)
        return Camp.model_validate(data)
    except Exception as e:
        raise_for_detail(e, "Camp")


@router.get("/tournaments", response_model=TournamentPage)
async def list_tournaments(
    page: int = Query(0, ge=0),
    location: Optional[str] = None,
    level: Optional[str] = None,
    status: Optional[str] = None,
    client: BackendClient = Depends(get_backend_client),
):
    """
    List tournaments, optionally filtered by location, level and status.

    The backend answers with either a page object or a bare list.
    """
    try:
        data = await client.list_tournaments(page=page, location=location, level=level, status=status)
    except Exception as e:
        logger.error(f"Failed to fetch tournaments: {e}")
        return TournamentPage(page=page)

    if isinstance(data, dict):
        items = parse_rows(Tournament, data.get("content"))
        total_pages = data.get("totalPages") or 1
    else:
        items = parse_rows(Tournament, data)
        total_pages = 1
    return TournamentPage(items=items, page=page, total_pages=total_pages)


@router.get("/tournaments/{slug}", response_model=Tournament)
async def get_tournament(slug: str, client: BackendClient = Depends(get_backend_client)):
    """Get a tournament by slug."""
    try:
        data = await client.get_tournament(slug)
        return Tournament.model_validate(data)
    except Exception as e:
        raise_for_detail(e, "Tournament")


@router.get("/blog", response_model=BlogPostPage)
async def list_blog_posts(
    page: int = Query(0, ge=0),
    client: BackendClient = Depends(get_backend_client),
):
    """List published blog posts, nine per page."""
    try:
        data = await client.list_blog_posts(page=page, size=9) or {}
    except Exception as e:
        logger.error(f"Failed to fetch blog posts: {e}")
        return BlogPostPage(page=page)

    return BlogPostPage(
        items=parse_rows(BlogPostSummary, data.get("content")),
        page=page,
        total_pages=data.get("totalPages") or 0,
    )


@router.get("/blog/{slug}", response_model=BlogPost)
async def get_blog_post(slug: str, client: BackendClient = Depends(get_backend_client)):
    """
    Get a blog post with its block content rendered to HTML.

    Args:
        slug: Post slug

    Returns:
        The post, with ``contentHtml`` ready to embed
    """
    try:
        data = await client.get_blog_post(slug)
        post = BlogPost.model_validate(data)
    except Exception as e:
        raise_for_detail(e, "Post")

    post.content_html = render_content(post.content)
    post.published_on = format_published_date(post.published_at)
    return post


@router.get("/content/{kind}", response_model=SiteContent)
async def get_site_content(kind: str, client: BackendClient = Depends(get_backend_client)):
    """Get announcement banner, news ticker, hero slides or modal content."""
    if kind not in SITE_CONTENT_KINDS:
        raise HTTPException(status_code=404, detail="Content not found")

    try:
        data = await client.get_site_content(kind)
    except Exception as e:
        logger.error(f"Failed to fetch {kind} content: {e}")
        return SiteContent(kind=kind)

    if data is None:
        items = []
    elif isinstance(data, list):
        items = [item for item in data if isinstance(item, dict)]
    else:
        items = [data] if isinstance(data, dict) else []
    return SiteContent(kind=kind, items=items)


@router.get("/sitemap.xml", include_in_schema=False)
async def sitemap(client: BackendClient = Depends(get_backend_client)):
    """Sitemap of the public site."""
    urls = await collect_urls(client)
    return Response(content=render_sitemap(urls), media_type="application/xml")


@router.post("/waitlist", status_code=201)
async def join_waitlist(entry: WaitlistEntry, client: BackendClient = Depends(get_backend_client)):
    """Add a visitor to a course waitlist."""
    try:
        await client.join_waitlist(entry.model_dump(by_alias=True, exclude_none=True))
    except Exception as e:
        raise_for_action(e, "Failed to join the waitlist")
    return {"message": "You have been added to the waitlist."}


@router.post("/inquiries", status_code=201)
async def submit_inquiry(inquiry: Inquiry, client: BackendClient = Depends(get_backend_client)):
    """Send the public inquiry form."""
    try:
        await client.submit_inquiry(inquiry.model_dump(by_alias=True, exclude_none=True))
    except Exception as e:
        raise_for_action(e, "Failed to send your inquiry")
    return {"message": "Thank you! We will get back to you shortly."}
