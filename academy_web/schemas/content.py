"""Public content schemas: camps, tournaments, blog and site content."""
from pydantic import Field
from typing import Optional, List, Dict, Any

from academy_web.schemas.catalog import BackendModel


class MediaItem(BackendModel):
    """Schema for an image attached to content."""

    id: Optional[int] = None
    url: str
    alt_text: Optional[str] = None
    file_name: Optional[str] = None


class CampSession(BackendModel):
    """Schema for a bookable camp session."""

    session_id: int
    session_name: str
    start_date: str
    end_date: str
    base_price: float
    discount_price: Optional[float] = None
    max_capacity: int = 0
    booked_slots: int = 0
    status: Optional[str] = None

    @property
    def spots_left(self) -> int:
        return max(self.max_capacity - self.booked_slots, 0)


class Camp(BackendModel):
    """Schema for a camp."""

    camp_id: int
    title: str
    slug: str
    description: Optional[str] = None
    location: Optional[str] = None
    category: Optional[str] = None
    status: Optional[str] = None
    active: bool = True
    featured_image: Optional[MediaItem] = None
    media_gallery: List[MediaItem] = Field(default_factory=list)
    sessions: List[CampSession] = Field(default_factory=list)


class Tournament(BackendModel):
    """Schema for a tournament listing."""

    tournament_id: int
    title: str
    slug: str
    location_name: Optional[str] = None
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    level_category: Optional[str] = None
    status: Optional[str] = None
    description: Optional[str] = None
    featured_image: Optional[MediaItem] = None


class TournamentPage(BackendModel):
    """One page of tournaments."""

    items: List[Tournament] = Field(default_factory=list)
    page: int = 0
    total_pages: int = 1


class BlogPostSummary(BackendModel):
    """Schema for a blog post in the listing."""

    id: int
    title: str
    slug: str
    excerpt: Optional[str] = None
    featured_image_url: Optional[str] = None
    author_name: Optional[str] = None
    published_at: Optional[str] = None


class BlogPostPage(BackendModel):
    """One page of blog posts."""

    items: List[BlogPostSummary] = Field(default_factory=list)
    page: int = 0
    total_pages: int = 0


class Taxonomy(BackendModel):
    """Blog category or tag."""

    name: str
    slug: str


class BlogPost(BackendModel):
    """Schema for a full blog post, with its block content rendered to HTML."""

    id: int
    title: str
    slug: str
    excerpt: Optional[str] = None
    featured_image_url: Optional[str] = None
    author_name: Optional[str] = None
    published_at: Optional[str] = None
    published_on: Optional[str] = None
    categories: List[Taxonomy] = Field(default_factory=list)
    tags: List[Taxonomy] = Field(default_factory=list)
    content: Any = None
    content_html: str = ""


class SitemapUrl(BackendModel):
    """Dynamic sitemap entry as returned by the backend."""

    loc: str
    lastmod: str


class WaitlistEntry(BackendModel):
    """Schema for joining a course waitlist."""

    course_id: Optional[int] = None
    full_name: str = Field(min_length=1)
    email: str = Field(min_length=3)
    phone: Optional[str] = None
    message: Optional[str] = None


class Inquiry(BackendModel):
    """Schema for the public inquiry form."""

    name: str = Field(min_length=1)
    email: str = Field(min_length=3)
    phone: Optional[str] = None
    subject: Optional[str] = None
    message: str = Field(min_length=1)
    recaptcha_token: Optional[str] = None


class SiteContent(BackendModel):
    """Announcement banner, ticker, hero slides or modal content."""

    kind: str
    items: List[Dict[str, Any]] = Field(default_factory=list)
