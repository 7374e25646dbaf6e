"""Shared fixtures: a scripted backend behind httpx.MockTransport and an in-process API client."""
from collections import defaultdict
from typing import Any, Dict, List, Optional, Tuple

import httpx
import pytest

from academy_web.core.dependencies import (
    get_backend_client,
    get_confirmation_tracker,
    get_session_provider,
)
from academy_web.core.session import SessionProvider
from academy_web.main import app
from academy_web.services.backend_client import BackendClient
from academy_web.services.confirmation import ConfirmationTracker

BACKEND_URL = "http://backend"


class FakeBackend:
    """
    Scripted academy backend.

    Responses are queued per (method, path). Each request takes the next
    queued response; the last one keeps being served. Unscripted paths
    answer 404.
    """

    def __init__(self):
        self.routes: Dict[Tuple[str, str], List[Tuple[int, Any]]] = defaultdict(list)
        self.requests: List[httpx.Request] = []

    def on(self, method: str, path: str, status: int = 200, json: Optional[Any] = None):
        self.routes[(method, path)].append((status, json))
        return self

    def calls(self, method: str, path: str) -> List[httpx.Request]:
        return [r for r in self.requests if r.method == method and r.url.path == path]

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        queue = self.routes.get((request.method, request.url.path))
        if not queue:
            return httpx.Response(404, json={"message": "Not found"})

        status, body = queue.pop(0) if len(queue) > 1 else queue[0]
        if body is None:
            return httpx.Response(status)
        return httpx.Response(status, json=body)


@pytest.fixture
def backend():
    return FakeBackend()


@pytest.fixture
def backend_client(backend):
    client = BackendClient(base_url=BACKEND_URL, transport=httpx.MockTransport(backend))
    client.max_retries = 1
    return client


@pytest.fixture
def sessions():
    return SessionProvider()


@pytest.fixture
def tracker():
    return ConfirmationTracker()


@pytest.fixture
async def api(backend_client, sessions, tracker):
    app.dependency_overrides[get_backend_client] = lambda: backend_client
    app.dependency_overrides[get_session_provider] = lambda: sessions
    app.dependency_overrides[get_confirmation_tracker] = lambda: tracker

    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()


def course(course_id, name=None, sport="Tennis", active=True):
    return {
        "id": course_id,
        "name": name or f"Course {course_id}",
        "sportName": sport,
        "isActive": active,
    }


def category(category_id, name, order=0, visible=True):
    return {
        "categoryId": category_id,
        "categoryName": name,
        "isPubliclyVisible": visible,
        "displayOrder": order,
    }


def mapping(course_id, category_id):
    return {"courseId": course_id, "categoryId": category_id}


def confirmation_payload(booking_id=42):
    return {
        "bookingId": booking_id,
        "bookingReference": f"HIPPA-{booking_id}",
        "bookingType": "COURSE",
        "participantCount": 2,
        "finalAmount": 250.0,
        "currency": "usd",
        "courseName": "Junior Tennis",
        "bookedDates": ["2025-06-02", "2025-06-09"],
    }


def package_confirmation_payload(booking_id=7, booking_type="PACKAGE_RENEWAL"):
    # Course-only fields come back as null for package bookings
    return {
        "bookingId": booking_id,
        "bookingReference": f"HIPPA-P{booking_id}",
        "bookingType": booking_type,
        "participantCount": None,
        "finalAmount": 480.0,
        "currency": "usd",
        "courseName": None,
        "bookedDates": None,
        "packageName": "10 Lessons",
        "includedCourses": ["Junior Tennis", "Pickleball Basics"],
    }
