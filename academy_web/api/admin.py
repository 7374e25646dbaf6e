"""Admin dashboard endpoints: media library, blog editor, booking calendar, camps.

Every call is forwarded to the backend with the admin's bearer token. A 401
from the backend ends the session.
"""
import logging
from datetime import date, datetime, timezone
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, File, HTTPException, Query, Response, UploadFile
from pydantic import Field

from academy_web.api.errors import raise_for_action
from academy_web.core.dependencies import (
    get_backend_client,
    get_session_provider,
    require_token,
)
from academy_web.core.session import SessionProvider
from academy_web.schemas.catalog import BackendModel
from academy_web.services.backend_client import BackendClient
from academy_web.services.editorjs import render_content

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin", tags=["admin"])

POST_STATUSES = ("DRAFT", "PUBLISHED", "ARCHIVED")


class MediaUpdate(BackendModel):
    """Schema for editing media details."""

    alt_text: Optional[str] = None
    title: Optional[str] = None


class PostStatusUpdate(BackendModel):
    """Schema for changing a post's status."""

    status: str


class CampActiveUpdate(BackendModel):
    """Schema for showing or hiding a camp."""

    is_active: bool


class BookingCancellation(BackendModel):
    """Schema for cancelling a booking from the calendar."""

    reason: str = Field(min_length=1)


class BookingReschedule(BackendModel):
    """Schema for moving a booking to another date."""

    new_date: Optional[date] = None


class AdminContext:
    """Token, client and session store of an admin request."""

    def __init__(
        self,
        token: str = Depends(require_token),
        client: BackendClient = Depends(get_backend_client),
        sessions: SessionProvider = Depends(get_session_provider),
    ):
        self.token = token
        self.client = client
        self.sessions = sessions

    def fail(self, error: Exception, message: str):
        raise_for_action(error, message, self.sessions, self.token)


def _created_at(item: Dict[str, Any]) -> datetime:
    try:
        created = datetime.fromisoformat(str(item.get("createdAt")).replace("Z", "+00:00"))
    except ValueError:
        return datetime.min
    # Compare offset timestamps in UTC, naive ones as they are
    if created.tzinfo is not None:
        created = created.astimezone(timezone.utc)
    return created.replace(tzinfo=None)


# Media library


@router.get("/media")
async def list_media(ctx: AdminContext = Depends()) -> List[Dict[str, Any]]:
    """
    List the media library, newest first.

    Returns:
        Media items as returned by the backend
    """
    try:
        items = await ctx.client.list_media(ctx.token)
    except Exception as e:
        ctx.fail(e, "Failed to load media library.")
    return sorted(items, key=_created_at, reverse=True)


@router.post("/media", status_code=201)
async def upload_media(file: UploadFile = File(...), ctx: AdminContext = Depends()):
    """Upload a file to the media library."""
    content = await file.read()
    if not content:
        raise HTTPException(status_code=422, detail="The uploaded file is empty.")

    try:
        item = await ctx.client.upload_media(
            ctx.token,
            file.filename or "upload",
            content,
            file.content_type or "application/octet-stream",
        )
    except Exception as e:
        ctx.fail(e, "File upload failed.")

    logger.info(f"Uploaded media file {file.filename} ({len(content)} bytes)")
    return item


@router.put("/media/{media_id}")
async def update_media(media_id: int, update: MediaUpdate, ctx: AdminContext = Depends()):
    """Update the details of a media item."""
    try:
        return await ctx.client.update_media(ctx.token, media_id, update.model_dump(by_alias=True, exclude_none=True))
    except Exception as e:
        ctx.fail(e, "Failed to update details.")


@router.delete("/media/{media_id}", status_code=204)
async def delete_media(media_id: int, ctx: AdminContext = Depends()):
    """Permanently delete a media item."""
    try:
        await ctx.client.delete_media(ctx.token, media_id)
    except Exception as e:
        ctx.fail(e, "Failed to delete media.")
    return Response(status_code=204)


# Blog editor


@router.get("/blog/posts")
async def list_posts(
    page: int = Query(0, ge=0),
    size: int = Query(20, ge=1, le=100),
    ctx: AdminContext = Depends(),
):
    """List blog posts in every status."""
    try:
        return await ctx.client.list_admin_posts(ctx.token, page=page, size=size)
    except Exception as e:
        ctx.fail(e, "Failed to load posts.")


@router.post("/blog/posts", status_code=201)
async def create_post(post: Dict[str, Any], ctx: AdminContext = Depends()):
    """Create a blog post from the editor payload."""
    if not post.get("title"):
        raise HTTPException(status_code=422, detail="A title is required.")

    try:
        return await ctx.client.create_post(ctx.token, post)
    except Exception as e:
        ctx.fail(e, "Failed to save post.")


@router.put("/blog/posts/{post_id}")
async def update_post(post_id: int, post: Dict[str, Any], ctx: AdminContext = Depends()):
    """Replace a blog post."""
    if not post.get("title"):
        raise HTTPException(status_code=422, detail="A title is required.")

    try:
        return await ctx.client.update_post(ctx.token, post_id, post)
    except Exception as e:
        ctx.fail(e, "Failed to save post.")


@router.delete("/blog/posts/{post_id}", status_code=204)
async def delete_post(post_id: int, ctx: AdminContext = Depends()):
    """Delete a blog post."""
    try:
        await ctx.client.delete_post(ctx.token, post_id)
    except Exception as e:
        ctx.fail(e, "Failed to delete post.")
    return Response(status_code=204)


@router.put("/blog/posts/{post_id}/status")
async def set_post_status(post_id: int, update: PostStatusUpdate, ctx: AdminContext = Depends()):
    """Publish, unpublish or archive a blog post."""
    status = update.status.upper()
    if status not in POST_STATUSES:
        raise HTTPException(status_code=422, detail=f"Status must be one of {', '.join(POST_STATUSES)}")

    try:
        return await ctx.client.set_post_status(ctx.token, post_id, status)
    except Exception as e:
        ctx.fail(e, "Failed to update status.")


@router.post("/blog/preview")
async def preview_post(content: Dict[str, Any], ctx: AdminContext = Depends()):
    """Render editor content the way the public blog page will."""
    return {"html": render_content(content)}


# Booking calendar


@router.get("/bookings/calendar")
async def booking_calendar(
    start: date,
    end: date,
    ctx: AdminContext = Depends(),
) -> List[Dict[str, Any]]:
    """
    Get calendar events between two dates.

    Args:
        start: First day shown
        end: Last day shown

    Returns:
        Events with ``id``, ``title``, ``start``, ``end`` and the raw booking
    """
    if end < start:
        raise HTTPException(status_code=422, detail="end must not be before start")

    try:
        bookings = await ctx.client.get_schedule_calendar(ctx.token, start, end)
    except Exception as e:
        ctx.fail(e, "Failed to load bookings.")

    events = []
    for booking in bookings:
        events.append({
            "id": booking.get("id"),
            "title": booking.get("title") or booking.get("courseName") or "Booking",
            "start": booking.get("start") or booking.get("startTime"),
            "end": booking.get("end") or booking.get("endTime"),
            "resource": booking,
        })
    return events


@router.post("/bookings/{booking_id}/cancel")
async def cancel_booking(
    booking_id: int,
    cancellation: BookingCancellation,
    ctx: AdminContext = Depends(),
):
    """Cancel a booking from the calendar."""
    try:
        result = await ctx.client.cancel_scheduled_booking(ctx.token, booking_id, cancellation.reason)
    except Exception as e:
        ctx.fail(e, "Failed to cancel booking.")

    logger.info(f"Cancelled booking {booking_id}")
    return result or {"message": "Booking cancelled."}


@router.get("/bookings/slots/{slot_id}")
async def slot_details(slot_id: str, ctx: AdminContext = Depends()) -> List[Dict[str, Any]]:
    """List the bookings of one calendar slot."""
    try:
        return await ctx.client.get_slot_details(ctx.token, slot_id)
    except Exception as e:
        ctx.fail(e, "Failed to load booking details.")


@router.post("/bookings/{booking_id}/reschedule")
async def reschedule_booking(
    booking_id: int,
    reschedule: BookingReschedule,
    ctx: AdminContext = Depends(),
):
    """Move a booking to another date and let the backend notify the users."""
    if reschedule.new_date is None:
        raise HTTPException(status_code=422, detail="Please select a new date.")

    try:
        await ctx.client.reschedule_booking(ctx.token, booking_id, reschedule.new_date)
    except Exception as e:
        ctx.fail(e, "Failed to reschedule booking.")

    logger.info(f"Rescheduled booking {booking_id} to {reschedule.new_date}")
    return {"message": "Booking has been rescheduled and users notified."}


# Camps


@router.get("/camps")
async def list_camps(ctx: AdminContext = Depends()) -> List[Dict[str, Any]]:
    """List camps, active or not."""
    try:
        return await ctx.client.list_admin_camps(ctx.token)
    except Exception as e:
        ctx.fail(e, "Failed to load camps.")


@router.post("/camps", status_code=201)
async def create_camp(camp: Dict[str, Any], ctx: AdminContext = Depends()):
    """Create a camp."""
    if not camp.get("title"):
        raise HTTPException(status_code=422, detail="A title is required.")

    try:
        return await ctx.client.create_camp(ctx.token, camp)
    except Exception as e:
        ctx.fail(e, "Failed to save camp.")


@router.put("/camps/{camp_id}")
async def update_camp(camp_id: int, camp: Dict[str, Any], ctx: AdminContext = Depends()):
    """Replace a camp."""
    try:
        return await ctx.client.update_camp(ctx.token, camp_id, camp)
    except Exception as e:
        ctx.fail(e, "Failed to save camp.")


@router.delete("/camps/{camp_id}", status_code=204)
async def delete_camp(camp_id: int, ctx: AdminContext = Depends()):
    """Delete a camp."""
    try:
        await ctx.client.delete_camp(ctx.token, camp_id)
    except Exception as e:
        ctx.fail(e, "Failed to delete camp.")
    return Response(status_code=204)


@router.put("/camps/{camp_id}/active")
async def set_camp_active(camp_id: int, update: CampActiveUpdate, ctx: AdminContext = Depends()):
    """Show or hide a camp on the public site."""
    try:
        return await ctx.client.set_camp_active(ctx.token, camp_id, update.is_active)
    except Exception as e:
        ctx.fail(e, "Failed to update camp status.")
