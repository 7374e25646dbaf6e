"""API schemas."""
from academy_web.schemas.catalog import (
    Course,
    Category,
    CourseCategoryMapping,
    CategoryGroup,
    ProgramPage,
    Sport,
)
from academy_web.schemas.booking import (
    BookingType,
    BookingConfirmation,
    BookingDetails,
    InitiateBookingRequest,
    CheckoutSession,
    CouponValidationRequest,
    ConfirmationKind,
    ConfirmationLookupRequest,
    ConfirmationResult,
    ConfirmationLookup,
)
from academy_web.schemas.content import (
    Camp,
    CampSession,
    Tournament,
    TournamentPage,
    BlogPostSummary,
    BlogPostPage,
    BlogPost,
    SitemapUrl,
    WaitlistEntry,
    Inquiry,
    SiteContent,
)
from academy_web.schemas.auth import (
    LoginRequest,
    LoginResponse,
    SessionUser,
)

__all__ = [
    "Course",
    "Category",
    "CourseCategoryMapping",
    "CategoryGroup",
    "ProgramPage",
    "Sport",
    "BookingType",
    "BookingConfirmation",
    "BookingDetails",
    "InitiateBookingRequest",
    "CheckoutSession",
    "CouponValidationRequest",
    "ConfirmationKind",
    "ConfirmationLookupRequest",
    "ConfirmationResult",
    "ConfirmationLookup",
    "Camp",
    "CampSession",
    "Tournament",
    "TournamentPage",
    "BlogPostSummary",
    "BlogPostPage",
    "BlogPost",
    "SitemapUrl",
    "WaitlistEntry",
    "Inquiry",
    "SiteContent",
    "LoginRequest",
    "LoginResponse",
    "SessionUser",
]
