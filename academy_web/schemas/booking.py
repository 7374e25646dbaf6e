"""Booking and checkout schemas."""
from datetime import datetime
from enum import Enum
from pydantic import Field, field_validator
from typing import Dict, List, Optional, Union

from academy_web.schemas.catalog import BackendModel


class BookingType(str, Enum):
    """Kinds of booking the backend confirms."""

    COURSE = "COURSE"
    PACKAGE = "PACKAGE"
    PACKAGE_RENEWAL = "PACKAGE_RENEWAL"


class BookingConfirmation(BackendModel):
    """Schema for a finalized booking as returned by the confirmation endpoints."""

    booking_id: int
    booking_reference: str
    booking_type: BookingType = BookingType.COURSE
    participant_count: Optional[int] = 1
    final_amount: float
    currency: str

    # Course bookings
    course_name: Optional[str] = None
    booked_dates: Optional[List[str]] = Field(default_factory=list)

    # Package bookings and renewals
    package_name: Optional[str] = None
    included_courses: Optional[List[str]] = Field(default_factory=list)

    @field_validator("booked_dates", "included_courses", mode="before")
    @classmethod
    def _null_list(cls, value):
        # Fields that do not apply to the booking type come back as null
        return [] if value is None else value

    @field_validator("participant_count", mode="before")
    @classmethod
    def _null_count(cls, value):
        return 1 if value is None else value


class BookingDetails(BackendModel):
    """Schema for a pending booking, read before payment."""

    booking_id: int
    final_amount: float
    currency: str = "usd"
    course_name: Optional[str] = None
    participant_count: Optional[int] = None


class Participant(BackendModel):
    """Schema for a participant of a booking."""

    first_name: str = Field(min_length=1)
    last_name: Optional[str] = None
    date_of_birth: Optional[str] = None
    gender: Optional[str] = None
    medical_conditions: Optional[str] = None
    allergies: Optional[str] = None
    emergency_contact_name: Optional[str] = None
    emergency_contact_phone: Optional[str] = None


class InitiateBookingRequest(BackendModel):
    """Schema for starting a course booking."""

    user_id: Optional[int] = None
    guest_name: str = Field(min_length=1)
    guest_email: str = Field(min_length=3)
    guest_phone: Optional[str] = None
    course_id: int
    schedule_id: Optional[int] = None
    participants: List[Participant] = Field(min_length=1)
    booked_dates: List[str] = Field(min_length=1)
    coupon_code: Optional[str] = None
    original_amount: float = Field(ge=0)
    discount_amount: float = Field(default=0, ge=0)
    final_amount: float = Field(ge=0)


class InitiatePackageBookingRequest(BackendModel):
    """Schema for starting a package booking."""

    user_id: Optional[int] = None
    guest_name: str = Field(min_length=1)
    guest_email: str = Field(min_length=3)
    guest_phone: Optional[str] = None
    package_id: int
    schedule_id: Optional[int] = None
    participants: List[Participant] = Field(min_length=1)
    coupon_code: Optional[str] = None
    original_amount: float = Field(ge=0)
    discount_amount: float = Field(default=0, ge=0)
    final_amount: float = Field(ge=0)


class InitiateCampBookingRequest(BackendModel):
    """Schema for starting a camp booking."""

    user_id: Optional[int] = None
    guest_name: str = Field(min_length=1)
    guest_email: str = Field(min_length=3)
    guest_phone: str = Field(min_length=1)
    camp_id: int
    session_id: int
    participants: List[Participant] = Field(min_length=1)
    # Add-on group ID to the picked option, or options for multi-select groups
    add_ons: Dict[int, Union[int, List[int]]] = Field(default_factory=dict)
    coupon_code: Optional[str] = None
    original_amount: float = Field(ge=0)
    discount_amount: float = Field(default=0, ge=0)
    final_amount: float = Field(ge=0)


class CheckoutSession(BackendModel):
    """What the browser needs to hand over to the payment SDK."""

    booking_id: int
    client_secret: str
    publishable_key: str
    amount: float
    currency: str
    return_url: str


class CouponValidationRequest(BackendModel):
    """Schema for checking a coupon against a course."""

    coupon_code: str = Field(min_length=1)
    course_id: Optional[int] = None


class PackageCouponValidationRequest(BackendModel):
    """Schema for checking a coupon against a package."""

    coupon_code: str = Field(min_length=1)
    package_id: int


class AvailabilitySlot(BackendModel):
    """Schema for a bookable date of a course schedule."""

    date: str
    available_slots: int = 0
    price: Optional[float] = None
    is_booking_open: bool = False


class ConfirmationKind(str, Enum):
    """Confirmation flows, each polled with its own retry policy."""

    COURSE = "course"
    PACKAGE = "package"
    CHECKOUT = "checkout"


class ConfirmationLookupRequest(BackendModel):
    """Schema for scheduling a confirmation lookup."""

    booking_id: str = Field(min_length=1)
    kind: ConfirmationKind = ConfirmationKind.COURSE
    token: Optional[str] = None


class ConfirmationResult(BackendModel):
    """Outcome of confirmation polling as exposed to the browser."""

    state: str
    attempts: int = 0
    failure: Optional[str] = None
    message: Optional[str] = None
    confirmation: Optional[BookingConfirmation] = None


class ConfirmationLookup(ConfirmationResult):
    """A confirmation lookup running in the background."""

    lookup_id: str
    booking_id: str
    kind: ConfirmationKind
    created_at: datetime
    finished_at: Optional[datetime] = None
