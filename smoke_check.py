#!/usr/bin/env python3
"""Smoke check against a running gateway to verify the service is working."""

import os

import requests

BASE_URL = os.environ.get("ACADEMY_WEB_URL", "http://localhost:8000")


def check_health():
    """Check health endpoint."""
    print("Checking health endpoint...")
    response = requests.get(f"{BASE_URL}/health")
    print(f"  Status: {response.status_code}")
    print(f"  Response: {response.json()}")
    assert response.status_code == 200
    print("  ✓ Health check passed\n")


def check_api_docs():
    """Check that API docs are accessible."""
    print("Checking API documentation...")
    response = requests.get(f"{BASE_URL}/docs")
    print(f"  Status: {response.status_code}")
    assert response.status_code == 200
    print("  ✓ API docs accessible at /docs\n")


def check_programs():
    """Check the grouped catalog of each sport."""
    for sport in ("tennis", "pickleball"):
        print(f"Checking {sport} program page...")
        response = requests.get(f"{BASE_URL}/programs/{sport}")
        print(f"  Status: {response.status_code}")
        assert response.status_code == 200

        groups = response.json()["groups"]
        courses = sum(len(group["courses"]) for group in groups)
        print(f"  Found {courses} course(s) in {len(groups)} categories")
        for group in groups:
            print(f"    {group['order']:>3}  {group['categoryName']}")
        print(f"  ✓ {sport.capitalize()} program passed\n")


def check_blog():
    """Check the blog listing and the first post."""
    print("Checking blog...")
    response = requests.get(f"{BASE_URL}/blog")
    print(f"  Status: {response.status_code}")
    assert response.status_code == 200

    posts = response.json()["items"]
    print(f"  Found {len(posts)} post(s)")
    if posts:
        slug = posts[0]["slug"]
        response = requests.get(f"{BASE_URL}/blog/{slug}")
        assert response.status_code == 200
        print(f"  First post: {response.json()['title']} ({len(response.json()['contentHtml'])} chars of HTML)")
    print("  ✓ Blog passed\n")


def check_sitemap():
    """Check that the sitemap renders."""
    print("Checking sitemap...")
    response = requests.get(f"{BASE_URL}/sitemap.xml")
    print(f"  Status: {response.status_code}")
    assert response.status_code == 200
    print(f"  {response.text.count('<url>')} URL(s) listed")
    print("  ✓ Sitemap passed\n")


def check_confirmation(booking_id):
    """Poll a booking confirmation in the background."""
    print(f"Checking confirmation lookup for booking {booking_id}...")
    response = requests.post(f"{BASE_URL}/booking/confirmations", json={"bookingId": booking_id})
    print(f"  Status: {response.status_code}")
    assert response.status_code == 202

    lookup = response.json()
    response = requests.get(f"{BASE_URL}/booking/confirmations/{lookup['lookupId']}")
    print(f"  State: {response.json()['state']} after {response.json()['attempts']} attempt(s)")
    requests.delete(f"{BASE_URL}/booking/confirmations/{lookup['lookupId']}")
    print("  ✓ Confirmation lookup passed\n")


def main():
    """Run all checks."""
    print("=" * 60)
    print("ACADEMY WEB GATEWAY - SMOKE CHECK")
    print("=" * 60)
    print()

    try:
        check_health()
        check_api_docs()

        # Backend-dependent checks
        check_programs()
        check_blog()
        check_sitemap()

        booking_id = os.environ.get("ACADEMY_BOOKING_ID")
        if booking_id:
            check_confirmation(booking_id)

        print("=" * 60)
        print("ALL CHECKS PASSED! ✓")
        print("=" * 60)
        print()

    except requests.exceptions.ConnectionError:
        print("\n❌ ERROR: Could not connect to the API")
        print("   Make sure the server is running:")
        print("   uvicorn academy_web.main:app --reload")
        print()
    except AssertionError as e:
        print(f"\n❌ CHECK FAILED: {e}")
        print()
    except Exception as e:
        print(f"\n❌ ERROR: {e}")
        print()


if __name__ == "__main__":
    main()
