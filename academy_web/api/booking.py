"""Booking, checkout and confirmation endpoints."""
import logging
import time
from functools import partial
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response

from academy_web.api.errors import raise_for_action, raise_for_detail
from academy_web.core.config import settings
from academy_web.core.dependencies import (
    get_backend_client,
    get_confirmation_tracker,
    get_optional_token,
)
from academy_web.schemas.booking import (
    AvailabilitySlot,
    BookingDetails,
    CheckoutSession,
    ConfirmationKind,
    ConfirmationLookup,
    ConfirmationLookupRequest,
    ConfirmationResult,
    CouponValidationRequest,
    InitiateBookingRequest,
    InitiateCampBookingRequest,
    InitiatePackageBookingRequest,
    PackageCouponValidationRequest,
)
from academy_web.schemas.catalog import parse_rows
from academy_web.services.backend_client import BackendClient
from academy_web.services.confirmation import (
    ConfirmationOutcome,
    ConfirmationPoller,
    ConfirmationTracker,
    FetchConfirmation,
    Lookup,
    RetryPolicy,
)

logger = logging.getLogger(__name__)

router = APIRouter(tags=["booking"])


def policy_for(kind: ConfirmationKind) -> RetryPolicy:
    """Retry policy configured for a confirmation flow."""
    if kind == ConfirmationKind.PACKAGE:
        return RetryPolicy(
            settings.PACKAGE_CONFIRMATION_MAX_ATTEMPTS,
            settings.PACKAGE_CONFIRMATION_DELAY_SECONDS,
        )
    if kind == ConfirmationKind.CHECKOUT:
        return RetryPolicy(
            settings.CHECKOUT_CONFIRMATION_MAX_ATTEMPTS,
            settings.CHECKOUT_CONFIRMATION_DELAY_SECONDS,
        )
    return RetryPolicy(
        settings.COURSE_CONFIRMATION_MAX_ATTEMPTS,
        settings.COURSE_CONFIRMATION_DELAY_SECONDS,
    )


def confirmation_fetcher(
    client: BackendClient,
    kind: ConfirmationKind,
    booking_id: str,
    token: Optional[str] = None,
) -> FetchConfirmation:
    """
    Build the single-read function polled for a booking.

    Package bookings and renewals are read with the access token carried by
    the redirect URL; course bookings need none.

    Raises:
        HTTPException: If a package confirmation is requested without a token
    """
    if kind == ConfirmationKind.PACKAGE:
        if not token:
            raise HTTPException(status_code=422, detail="Invalid confirmation link.")
        return partial(client.get_package_confirmation, booking_id, token)
    return partial(client.get_booking_confirmation, booking_id)


def _result(outcome: ConfirmationOutcome) -> dict:
    return {
        "state": outcome.state.value,
        "attempts": outcome.attempts,
        "failure": outcome.failure.value if outcome.failure else None,
        "message": outcome.message,
        "confirmation": outcome.confirmation,
    }


def _lookup_schema(lookup: Lookup, booking_id: str, kind: ConfirmationKind) -> ConfirmationLookup:
    return ConfirmationLookup(
        lookup_id=lookup.lookup_id,
        booking_id=booking_id,
        kind=kind,
        created_at=lookup.created_at,
        finished_at=lookup.finished_at,
        **_result(lookup.outcome),
    )


def _split_key(key: str):
    kind, _, booking_id = key.partition(":")
    return ConfirmationKind(kind), booking_id


@router.post("/booking/initiate", status_code=201)
async def initiate_booking(
    booking: InitiateBookingRequest,
    client: BackendClient = Depends(get_backend_client),
    token: Optional[str] = Depends(get_optional_token),
):
    """
    Save a pending course booking before payment.

    Args:
        booking: Booking form

    Returns:
        The new booking ID and the checkout page to continue on
    """
    try:
        data = await client.initiate_booking(
            booking.model_dump(by_alias=True, exclude_none=True), token=token
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        raise_for_action(e, "There was an error saving your booking.")

    booking_id = (data or {}).get("bookingId")
    if booking_id is None:
        raise HTTPException(status_code=502, detail="There was an error saving your booking.")

    logger.info(f"Initiated booking {booking_id} for course {booking.course_id}")
    return {"bookingId": booking_id, "checkoutUrl": f"/checkout/{booking_id}"}


@router.post("/booking/validate-coupon")
async def validate_coupon(
    request: CouponValidationRequest,
    client: BackendClient = Depends(get_backend_client),
):
    """Check a coupon code against a course."""
    try:
        return await client.validate_coupon(request.model_dump(by_alias=True, exclude_none=True))
    except Exception as e:
        raise_for_action(e, "Invalid coupon code.")


@router.get("/booking/availability/{schedule_id}", response_model=List[AvailabilitySlot])
async def get_schedule_availability(
    schedule_id: int,
    year: int = Query(..., ge=2000),
    month: int = Query(..., ge=1, le=12),
    client: BackendClient = Depends(get_backend_client),
):
    """
    Get the bookable dates of a course schedule for one month.

    A month that fails to load shows no bookable dates.
    """
    try:
        slots = await client.get_schedule_availability(schedule_id, year, month)
    except Exception as e:
        logger.error(f"Failed to load availability for schedule {schedule_id}: {e}")
        return []
    return parse_rows(AvailabilitySlot, slots)


@router.post("/booking/packages/initiate", status_code=201)
async def initiate_package_booking(
    booking: InitiatePackageBookingRequest,
    client: BackendClient = Depends(get_backend_client),
    token: Optional[str] = Depends(get_optional_token),
):
    """
    Save a pending package booking before payment.

    Returns:
        The booking token and the checkout page to continue on
    """
    try:
        data = await client.initiate_package_booking(
            booking.model_dump(by_alias=True, exclude_none=True), token=token
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        raise_for_action(e, "There was an error saving your booking.")

    booking_token = (data or {}).get("bookingToken")
    if not booking_token:
        raise HTTPException(status_code=502, detail="There was an error saving your booking.")

    logger.info(f"Initiated booking for package {booking.package_id}")
    return {"bookingToken": booking_token, "checkoutUrl": f"/checkout/{booking_token}"}


@router.post("/booking/packages/validate-coupon")
async def validate_package_coupon(
    request: PackageCouponValidationRequest,
    client: BackendClient = Depends(get_backend_client),
):
    """Check a coupon code against a package."""
    try:
        return await client.validate_package_coupon(request.model_dump(by_alias=True))
    except Exception as e:
        raise_for_action(e, "Invalid coupon code.")


@router.post("/booking/packages/{package_id}/checkout")
async def initiate_package_checkout(
    package_id: int,
    client: BackendClient = Depends(get_backend_client),
    token: Optional[str] = Depends(get_optional_token),
):
    """
    Prepare the payment of a package purchase.

    Returns:
        The backend's checkout details, including the client secret, plus
        the publishable key of the payment SDK
    """
    try:
        details = await client.initiate_package_checkout(package_id, token=token)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        raise_for_action(e, "Failed to initiate checkout.")

    if not (details or {}).get("clientSecret"):
        logger.error(f"No client secret returned for package {package_id}")
        raise HTTPException(status_code=502, detail="Failed to get client secret")

    return {**details, "publishableKey": settings.STRIPE_PUBLISHABLE_KEY}


@router.post("/booking/camps/initiate", status_code=201)
async def initiate_camp_booking(
    booking: InitiateCampBookingRequest,
    client: BackendClient = Depends(get_backend_client),
    token: Optional[str] = Depends(get_optional_token),
):
    """
    Save a pending camp booking before payment.

    Returns:
        The secure access token and the checkout page to continue on
    """
    try:
        data = await client.initiate_camp_booking(
            booking.model_dump(by_alias=True, exclude_none=True), token=token
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        raise_for_action(e, "There was an error saving your booking.")

    access_token = (data or {}).get("secureAccessToken")
    if not access_token:
        raise HTTPException(status_code=502, detail="There was an error saving your booking.")

    logger.info(f"Initiated booking for camp session {booking.session_id}")
    return {"secureAccessToken": access_token, "checkoutUrl": f"/checkout/{access_token}"}


@router.post("/checkout/{booking_id}", response_model=CheckoutSession)
async def create_checkout(
    booking_id: int,
    client: BackendClient = Depends(get_backend_client),
):
    """
    Prepare the payment of a pending booking.

    Reads the booking, asks the backend for a payment intent and returns the
    client secret the payment SDK confirms in the browser. The SDK then
    redirects to the booking-success page carrying the booking ID.

    Args:
        booking_id: Pending booking ID

    Returns:
        Client secret, publishable key and return URL
    """
    try:
        details = BookingDetails.model_validate(await client.get_booking_details(booking_id))
    except Exception as e:
        raise_for_detail(e, "Booking")

    if not details.final_amount:
        raise HTTPException(status_code=400, detail="Invalid booking details")

    idempotency_key = f"booking-{details.booking_id}-{int(time.time() * 1000)}"
    try:
        intent = await client.create_payment_intent(
            booking_id=details.booking_id,
            amount=details.final_amount,
            currency=details.currency or "usd",
            idempotency_key=idempotency_key,
        )
    except Exception as e:
        raise_for_action(e, "Payment setup failed")

    client_secret = (intent or {}).get("clientSecret")
    if not client_secret:
        logger.error(f"No client secret returned for booking {details.booking_id}")
        raise HTTPException(status_code=502, detail="Failed to get client secret")

    return CheckoutSession(
        booking_id=details.booking_id,
        client_secret=client_secret,
        publishable_key=settings.STRIPE_PUBLISHABLE_KEY,
        amount=details.final_amount,
        currency=details.currency or "usd",
        return_url=f"{settings.SITE_URL}/booking-success?booking_id={details.booking_id}",
    )


@router.post("/checkout/{booking_id}/cancel", status_code=204)
async def cancel_checkout(
    booking_id: int,
    client: BackendClient = Depends(get_backend_client),
):
    """Release the payment intent of an abandoned checkout."""
    try:
        await client.cancel_payment_intent(booking_id)
    except Exception as e:
        raise_for_action(e, "Failed to cancel the payment")
    return Response(status_code=204)


@router.get("/booking/confirmation/{booking_id}", response_model=ConfirmationResult)
async def get_confirmation(
    booking_id: str,
    kind: ConfirmationKind = ConfirmationKind.COURSE,
    token: Optional[str] = Query(None),
    client: BackendClient = Depends(get_backend_client),
):
    """
    Wait for a booking confirmation and return it.

    Polls the backend with the flow's retry policy until the payment
    webhook has been applied.

    Args:
        booking_id: Booking ID from the payment redirect
        kind: Confirmation flow
        token: Access token, required for package confirmations

    Returns:
        SUCCEEDED with the confirmation, or FAILED with a message
    """
    fetch = confirmation_fetcher(client, kind, booking_id, token)
    outcome = await ConfirmationPoller(fetch, policy_for(kind)).run()
    return ConfirmationResult(**_result(outcome))


@router.post("/booking/confirmations", response_model=ConfirmationLookup, status_code=202)
async def start_confirmation_lookup(
    request: ConfirmationLookupRequest,
    client: BackendClient = Depends(get_backend_client),
    tracker: ConfirmationTracker = Depends(get_confirmation_tracker),
):
    """
    Start polling for a booking confirmation in the background.

    Starting twice for the same booking and token returns the lookup
    already running.

    Returns:
        The lookup, PENDING until polling ends
    """
    fetch = confirmation_fetcher(client, request.kind, request.booking_id, request.token)
    key = f"{request.kind.value}:{request.booking_id}"
    token = request.token if request.kind == ConfirmationKind.PACKAGE else None
    lookup = tracker.start(key, fetch, policy_for(request.kind), token=token)
    return _lookup_schema(lookup, request.booking_id, request.kind)


@router.get("/booking/confirmations/{lookup_id}", response_model=ConfirmationLookup)
async def get_confirmation_lookup(
    lookup_id: str,
    tracker: ConfirmationTracker = Depends(get_confirmation_tracker),
):
    """Get the state of a confirmation lookup."""
    lookup = tracker.get(lookup_id)
    if lookup is None:
        raise HTTPException(status_code=404, detail="Lookup not found")

    kind, booking_id = _split_key(lookup.key)
    return _lookup_schema(lookup, booking_id, kind)


@router.delete("/booking/confirmations/{lookup_id}", status_code=204)
async def cancel_confirmation_lookup(
    lookup_id: str,
    tracker: ConfirmationTracker = Depends(get_confirmation_tracker),
):
    """Stop polling, e.g. because the visitor left the confirmation page."""
    if not tracker.cancel(lookup_id):
        raise HTTPException(status_code=404, detail="Lookup not found")
    return Response(status_code=204)
