"""Academy backend API client.

This module handles every interaction with the academy's backend REST API.
The backend owns availability, pricing, payment intents, booking state and
authentication; this side only reads and forwards.

Public endpoints live under ``/api/public`` and ``/api/public_api``, admin
endpoints under ``/api/admin`` and require a bearer token.
"""
import asyncio
import logging
from typing import List, Dict, Any, Optional
from datetime import date
import httpx
from academy_web.core.config import settings

logger = logging.getLogger(__name__)


def _clean_params(params: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    """Drop unset query parameters so they are not sent as empty strings."""
    if params is None:
        return None
    return {key: value for key, value in params.items() if value is not None and value != ""}


def unwrap_envelope(payload: Any) -> Any:
    """
    Return the ``data`` member of a ``{success, message, data}`` envelope.

    Some backend endpoints wrap their result, others return it bare.

    Raises:
        ValueError: If the envelope reports ``success: false``
    """
    if isinstance(payload, dict) and "success" in payload:
        if not payload.get("success"):
            raise ValueError(payload.get("message") or "Request was not successful")
        return payload.get("data")
    return payload


class BackendClient:
    """Client for the academy backend API."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize the backend client.

        Args:
            base_url: Backend origin, defaults to the configured API URL
            transport: Optional httpx transport, used to stub the backend
        """
        self.base_url = (base_url or settings.BACKEND_API_URL).rstrip("/")
        self.timeout = settings.REQUEST_TIMEOUT_SECONDS
        self.max_retries = settings.MAX_RETRIES
        self._transport = transport

        self.endpoints = {
            "courses": "/api/public_api/courses",
            "course": "/api/public_api/courses/{course_id}",
            "sports": "/api/public_api/sports",
            "categories": "/api/public/categories",
            "mappings": "/api/public/course-category-mappings",
            "confirmation": "/api/public/booking-data/confirmation/{booking_id}",
            "package_confirmation": "/api/public/booking-data/confirmation-package/{booking_id}",
            "booking_details": "/api/public/booking-data/details/{booking_id}",
            "initiate_booking": "/api/public/booking-data/initiate-booking",
            "validate_coupon": "/api/public/booking-data/validate-coupon",
            "create_payment_intent": "/api/public/payments/create-payment-intent",
            "cancel_payment_intent": "/api/public/payments/cancel-payment-intent",
            "schedule_availability": "/api/public/booking-data/availability/schedule/{schedule_id}",
            "package_initiate": "/api/public/package-bookings/initiate",
            "package_initiate_checkout": "/api/public/package-bookings/initiate-checkout",
            "package_validate_coupon": "/api/public/package-bookings/validate-coupon",
            "camp_initiate_booking": "/api/public/booking-data/camp/initiate-booking",
            "camps": "/api/public/camps",
            "camp": "/api/public/camps/{slug}",
            "tournaments": "/api/public_api/tournaments",
            "tournament": "/api/public_api/tournaments/{slug}",
            "blog_posts": "/api/public/blog/posts",
            "blog_post": "/api/public/blog/posts/{slug}",
            "site_content": "/api/public/content/{kind}",
            "waitlist": "/api/public/waitlist/join",
            "inquiries": "/api/public_api/inquiries",
            "login": "/api/auth/login",
            "me": "/api/auth/me",
            "admin_media": "/api/admin/media",
            "admin_media_upload": "/api/admin/media/upload",
            "admin_media_item": "/api/admin/media/{media_id}",
            "admin_posts": "/api/admin/blog/posts",
            "admin_post": "/api/admin/blog/posts/{post_id}",
            "admin_post_status": "/api/admin/blog/posts/{post_id}/status",
            "admin_calendar": "/api/admin/schedule/calendar",
            "admin_cancel_booking": "/api/admin/schedule/bookings/{booking_id}/cancel",
            "admin_slot_details": "/api/admin/schedule/slot-details/{slot_id}",
            "admin_reschedule_booking": "/api/admin/schedule/bookings/{booking_id}/reschedule",
            "admin_camps": "/api/admin/camps",
            "admin_camp": "/api/admin/camps/{camp_id}",
            "admin_camp_active": "/api/admin/camps/{camp_id}/active",
        }

    async def _make_request(
        self,
        method: str,
        path: str,
        params: Optional[Dict[str, Any]] = None,
        json_data: Optional[Any] = None,
        token: Optional[str] = None,
        headers: Optional[Dict[str, str]] = None,
        files: Optional[Dict[str, Any]] = None,
    ) -> Any:
        """
        Make an HTTP request to the backend, retrying connection failures.

        HTTP error statuses are not retried here: callers such as the
        confirmation poller need to see each status as it happens.

        Args:
            method: HTTP method (GET, POST, etc.)
            path: Path relative to the backend origin
            params: Query parameters
            json_data: JSON body data
            token: Bearer token for authorized calls
            headers: Extra request headers
            files: Multipart files

        Returns:
            Response JSON data, or None for an empty body

        Raises:
            httpx.HTTPStatusError: If the backend answers with an error status
            httpx.TransportError: If the backend is unreachable after retries
        """
        request_headers = dict(headers or {})
        if token:
            request_headers["Authorization"] = f"Bearer {token}"

        async with httpx.AsyncClient(
            base_url=self.base_url,
            transport=self._transport,
            timeout=self.timeout,
        ) as client:
            for attempt in range(self.max_retries):
                try:
                    logger.info(f"Making {method} request to {path} (attempt {attempt + 1}/{self.max_retries})")

                    response = await client.request(
                        method=method,
                        url=path,
                        params=_clean_params(params),
                        json=json_data,
                        headers=request_headers,
                        files=files,
                    )
                    response.raise_for_status()

                    if not response.content:
                        return None
                    return response.json()

                except httpx.TransportError as e:
                    logger.warning(f"Request failed (attempt {attempt + 1}/{self.max_retries}): {e}")

                    if attempt == self.max_retries - 1:
                        raise

                    # Exponential backoff
                    await asyncio.sleep(2 ** attempt)

            raise httpx.TransportError("Max retries exceeded")

    # Catalog

    async def list_courses(self) -> List[Dict[str, Any]]:
        """List all published courses."""
        return await self._make_request("GET", self.endpoints["courses"]) or []

    async def get_course(self, course_id: int) -> Dict[str, Any]:
        """Get a single course by ID."""
        url = self.endpoints["course"].format(course_id=course_id)
        return await self._make_request("GET", url)

    async def list_sports(self) -> List[Dict[str, Any]]:
        """List the sports offered by the academy."""
        return await self._make_request("GET", self.endpoints["sports"]) or []

    async def list_categories(self) -> List[Dict[str, Any]]:
        """List course categories, visible or not."""
        return await self._make_request("GET", self.endpoints["categories"]) or []

    async def list_course_category_mappings(self) -> List[Dict[str, Any]]:
        """List course to category join rows."""
        return await self._make_request("GET", self.endpoints["mappings"]) or []

    # Booking

    async def get_booking_confirmation(self, booking_id: str) -> Dict[str, Any]:
        """
        Get the confirmation record of a course booking.

        The backend answers 403 until the payment webhook has been applied.

        Args:
            booking_id: Booking ID carried by the payment redirect

        Returns:
            Confirmation payload
        """
        url = self.endpoints["confirmation"].format(booking_id=booking_id)
        return await self._make_request("GET", url)

    async def get_package_confirmation(self, booking_id: str, token: str) -> Dict[str, Any]:
        """
        Get the confirmation record of a package booking or renewal.

        Args:
            booking_id: Package or renewal booking ID
            token: Secure access token from the redirect URL

        Returns:
            Confirmation payload
        """
        url = self.endpoints["package_confirmation"].format(booking_id=booking_id)
        return await self._make_request("GET", url, params={"token": token})

    async def get_booking_details(self, booking_id: int) -> Dict[str, Any]:
        """Get a pending booking before payment."""
        url = self.endpoints["booking_details"].format(booking_id=booking_id)
        return await self._make_request("GET", url)

    async def initiate_booking(self, payload: Dict[str, Any], token: Optional[str] = None) -> Dict[str, Any]:
        """
        Create a pending booking.

        Args:
            payload: Booking form data in backend field names
            token: Bearer token when the visitor is signed in

        Returns:
            The ``data`` member of the backend envelope, holding ``bookingId``
        """
        data = await self._make_request(
            "POST", self.endpoints["initiate_booking"], json_data=payload, token=token
        )
        return unwrap_envelope(data)

    async def validate_coupon(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        """Check a coupon code."""
        return await self._make_request("POST", self.endpoints["validate_coupon"], json_data=payload)

    async def get_schedule_availability(self, schedule_id: int, year: int, month: int) -> List[Dict[str, Any]]:
        """Get the bookable dates of a course schedule for one month."""
        url = self.endpoints["schedule_availability"].format(schedule_id=schedule_id)
        return await self._make_request("GET", url, params={"year": year, "month": month}) or []

    async def initiate_package_booking(
        self, payload: Dict[str, Any], token: Optional[str] = None
    ) -> Dict[str, Any]:
        """
        Create a pending package booking.

        Returns:
            The ``data`` member of the backend envelope, holding ``bookingToken``
        """
        data = await self._make_request(
            "POST", self.endpoints["package_initiate"], json_data=payload, token=token
        )
        return unwrap_envelope(data)

    async def initiate_package_checkout(self, package_id: int, token: Optional[str] = None) -> Dict[str, Any]:
        """Ask for the payment intent of a package purchase."""
        data = await self._make_request(
            "POST",
            self.endpoints["package_initiate_checkout"],
            json_data={"packageId": package_id},
            token=token,
        )
        return unwrap_envelope(data)

    async def validate_package_coupon(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        """Check a coupon code against a package."""
        return await self._make_request(
            "POST", self.endpoints["package_validate_coupon"], json_data=payload
        )

    async def initiate_camp_booking(
        self, payload: Dict[str, Any], token: Optional[str] = None
    ) -> Dict[str, Any]:
        """
        Create a pending camp booking.

        Returns:
            The ``data`` member of the backend envelope, holding ``secureAccessToken``
        """
        data = await self._make_request(
            "POST", self.endpoints["camp_initiate_booking"], json_data=payload, token=token
        )
        return unwrap_envelope(data)

    async def create_payment_intent(
        self,
        booking_id: int,
        amount: float,
        currency: str,
        idempotency_key: str,
        location: str = "Gilbert, AZ",
    ) -> Dict[str, Any]:
        """
        Ask the backend to create a payment intent for a pending booking.

        Args:
            booking_id: Pending booking ID
            amount: Amount in major currency units
            currency: ISO currency code
            idempotency_key: Key deduplicating repeated submissions
            location: Academy location reported in the metadata

        Returns:
            Payment intent payload holding ``clientSecret``
        """
        body = {
            "amount": int(round(amount * 100)),
            "bookingId": booking_id,
            "currency": currency,
            "description": f"Booking #{booking_id}",
            "metadata": {"booking_id": booking_id, "location": location},
            "payment_method_types": ["card"],
            "capture_method": "automatic",
        }
        return await self._make_request(
            "POST",
            self.endpoints["create_payment_intent"],
            json_data=body,
            headers={"Idempotency-Key": idempotency_key},
        )

    async def cancel_payment_intent(self, booking_id: int) -> Any:
        """Release the payment intent of an abandoned checkout."""
        return await self._make_request(
            "POST", self.endpoints["cancel_payment_intent"], json_data={"bookingId": booking_id}
        )

    # Content

    async def list_camps(self) -> List[Dict[str, Any]]:
        """List published camps."""
        return await self._make_request("GET", self.endpoints["camps"]) or []

    async def get_camp(self, slug: str) -> Dict[str, Any]:
        """Get a camp with its sessions."""
        return await self._make_request("GET", self.endpoints["camp"].format(slug=slug))

    async def list_tournaments(
        self,
        page: int = 0,
        location: Optional[str] = None,
        level: Optional[str] = None,
        status: Optional[str] = None,
    ) -> Any:
        """
        List tournaments, optionally filtered.

        Returns:
            Either a page object (``content``/``totalPages``) or a bare list
        """
        params = {"page": page, "location": location, "level": level, "status": status}
        return await self._make_request("GET", self.endpoints["tournaments"], params=params)

    async def get_tournament(self, slug: str) -> Dict[str, Any]:
        """Get a tournament by slug."""
        return await self._make_request("GET", self.endpoints["tournament"].format(slug=slug))

    async def list_blog_posts(self, page: int = 0, size: int = 9) -> Dict[str, Any]:
        """List published blog posts, one page at a time."""
        return await self._make_request(
            "GET", self.endpoints["blog_posts"], params={"page": page, "size": size}
        )

    async def get_blog_post(self, slug: str) -> Dict[str, Any]:
        """Get a published blog post by slug."""
        return await self._make_request("GET", self.endpoints["blog_post"].format(slug=slug))

    async def get_site_content(self, kind: str) -> Any:
        """Get banner, ticker, hero slides or modal content."""
        return await self._make_request("GET", self.endpoints["site_content"].format(kind=kind))

    async def list_sitemap_urls(self, path: str) -> List[Dict[str, Any]]:
        """List ``{loc, lastmod}`` entries from a sitemap endpoint."""
        return await self._make_request("GET", path) or []

    async def join_waitlist(self, payload: Dict[str, Any]) -> Any:
        """Add a visitor to a course waitlist."""
        return await self._make_request("POST", self.endpoints["waitlist"], json_data=payload)

    async def submit_inquiry(self, payload: Dict[str, Any]) -> Any:
        """Send the public inquiry form."""
        return await self._make_request("POST", self.endpoints["inquiries"], json_data=payload)

    # Auth

    async def login(self, username_or_email: str, password: str) -> Dict[str, Any]:
        """
        Sign in against the backend.

        Returns:
            The ``data`` member of the backend envelope, holding ``token``
            and ``user``
        """
        data = await self._make_request(
            "POST",
            self.endpoints["login"],
            json_data={"usernameOrEmail": username_or_email, "password": password},
        )
        return unwrap_envelope(data)

    async def get_current_user(self, token: str) -> Dict[str, Any]:
        """Get the user owning a token."""
        return await self._make_request("GET", self.endpoints["me"], token=token)

    # Admin: media library

    async def list_media(self, token: str) -> List[Dict[str, Any]]:
        """List media library items."""
        return await self._make_request("GET", self.endpoints["admin_media"], token=token) or []

    async def upload_media(
        self, token: str, filename: str, content: bytes, content_type: str
    ) -> Dict[str, Any]:
        """Upload a file to the media library."""
        return await self._make_request(
            "POST",
            self.endpoints["admin_media_upload"],
            token=token,
            files={"file": (filename, content, content_type)},
        )

    async def update_media(self, token: str, media_id: int, payload: Dict[str, Any]) -> Dict[str, Any]:
        """Update alt text and title of a media item."""
        url = self.endpoints["admin_media_item"].format(media_id=media_id)
        return await self._make_request("PUT", url, json_data=payload, token=token)

    async def delete_media(self, token: str, media_id: int) -> None:
        """Delete a media item."""
        url = self.endpoints["admin_media_item"].format(media_id=media_id)
        await self._make_request("DELETE", url, token=token)

    # Admin: blog editor

    async def list_admin_posts(self, token: str, page: int = 0, size: int = 20) -> Any:
        """List blog posts in every status."""
        return await self._make_request(
            "GET", self.endpoints["admin_posts"], params={"page": page, "size": size}, token=token
        )

    async def create_post(self, token: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        """Create a blog post."""
        return await self._make_request("POST", self.endpoints["admin_posts"], json_data=payload, token=token)

    async def update_post(self, token: str, post_id: int, payload: Dict[str, Any]) -> Dict[str, Any]:
        """Replace a blog post."""
        url = self.endpoints["admin_post"].format(post_id=post_id)
        return await self._make_request("PUT", url, json_data=payload, token=token)

    async def delete_post(self, token: str, post_id: int) -> None:
        """Delete a blog post."""
        url = self.endpoints["admin_post"].format(post_id=post_id)
        await self._make_request("DELETE", url, token=token)

    async def set_post_status(self, token: str, post_id: int, status: str) -> Dict[str, Any]:
        """Publish, unpublish or archive a blog post."""
        url = self.endpoints["admin_post_status"].format(post_id=post_id)
        return await self._make_request("PUT", url, json_data={"status": status}, token=token)

    # Admin: booking calendar

    async def get_schedule_calendar(self, token: str, start: date, end: date) -> List[Dict[str, Any]]:
        """Get scheduled slots and their bookings between two dates."""
        params = {"start": start.isoformat(), "end": end.isoformat()}
        return await self._make_request(
            "GET", self.endpoints["admin_calendar"], params=params, token=token
        ) or []

    async def cancel_scheduled_booking(self, token: str, booking_id: int, reason: str) -> Any:
        """Cancel a booking from the calendar."""
        url = self.endpoints["admin_cancel_booking"].format(booking_id=booking_id)
        return await self._make_request("POST", url, json_data={"reason": reason}, token=token)

    async def get_slot_details(self, token: str, slot_id: str) -> List[Dict[str, Any]]:
        """Get the bookings of one calendar slot."""
        url = self.endpoints["admin_slot_details"].format(slot_id=slot_id)
        return await self._make_request("GET", url, token=token) or []

    async def reschedule_booking(self, token: str, booking_id: int, new_date: date) -> Any:
        """Move a booking to another date; the backend notifies the participants."""
        url = self.endpoints["admin_reschedule_booking"].format(booking_id=booking_id)
        return await self._make_request(
            "POST", url, json_data={"newDate": new_date.isoformat()}, token=token
        )

    # Admin: camps

    async def list_admin_camps(self, token: str) -> List[Dict[str, Any]]:
        """List camps, active or not."""
        return await self._make_request("GET", self.endpoints["admin_camps"], token=token) or []

    async def create_camp(self, token: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        """Create a camp."""
        return await self._make_request("POST", self.endpoints["admin_camps"], json_data=payload, token=token)

    async def update_camp(self, token: str, camp_id: int, payload: Dict[str, Any]) -> Dict[str, Any]:
        """Replace a camp."""
        url = self.endpoints["admin_camp"].format(camp_id=camp_id)
        return await self._make_request("PUT", url, json_data=payload, token=token)

    async def delete_camp(self, token: str, camp_id: int) -> None:
        """Delete a camp."""
        url = self.endpoints["admin_camp"].format(camp_id=camp_id)
        await self._make_request("DELETE", url, token=token)

    async def set_camp_active(self, token: str, camp_id: int, active: bool) -> Dict[str, Any]:
        """Show or hide a camp on the public site."""
        url = self.endpoints["admin_camp_active"].format(camp_id=camp_id)
        return await self._make_request("PUT", url, json_data={"isActive": active}, token=token)


# Singleton instance
backend_client = BackendClient()
