"""Booking confirmation polling.

After the payment provider redirects the visitor back, the backend may not
have applied the payment webhook yet. Until it has, the confirmation
endpoints answer 403. The poller keeps reading the record with a fixed delay
until it shows up, the retry budget runs out, or a real error comes back.
"""
import asyncio
import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, Optional, Tuple

import httpx
from pydantic import ValidationError

from academy_web.schemas.booking import BookingConfirmation

logger = logging.getLogger(__name__)

# Status the backend uses while the booking record is not readable yet
NOT_READY_STATUS = 403

RECEIPT_MESSAGE = (
    "Failed to retrieve booking confirmation details. "
    "Please check your email for a receipt."
)


class ConfirmationState(str, Enum):
    PENDING = "PENDING"
    SUCCEEDED = "SUCCEEDED"
    FAILED = "FAILED"


class FailureKind(str, Enum):
    NOT_YET_READY = "NOT_YET_READY"
    EXHAUSTED = "EXHAUSTED"
    PERMANENT = "PERMANENT"


@dataclass(frozen=True)
class RetryPolicy:
    """
    Fixed-delay retry policy.

    Attributes:
        max_attempts: Reads allowed in total, the first one included
        delay_seconds: Wait between two reads
    """

    max_attempts: int
    delay_seconds: float

    def __post_init__(self):
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        if self.delay_seconds < 0:
            raise ValueError("delay_seconds must not be negative")

    @property
    def max_wait_seconds(self) -> float:
        return self.max_attempts * self.delay_seconds


@dataclass
class ConfirmationOutcome:
    """Where a confirmation lookup stands."""

    state: ConfirmationState = ConfirmationState.PENDING
    attempts: int = 0
    confirmation: Optional[BookingConfirmation] = None
    failure: Optional[FailureKind] = None
    message: Optional[str] = None

    @property
    def retries(self) -> int:
        return max(self.attempts - 1, 0)


FetchConfirmation = Callable[[], Awaitable[Dict[str, Any]]]


class ConfirmationPoller:
    """Polls one booking confirmation until it is readable."""

    def __init__(
        self,
        fetch: FetchConfirmation,
        policy: RetryPolicy,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ):
        """
        Initialize the poller.

        Args:
            fetch: Coroutine function reading the confirmation record once
            policy: Retry budget and delay for this call site
            sleep: Awaitable delay, replaced in tests
        """
        self.fetch = fetch
        self.policy = policy
        self._sleep = sleep
        self.outcome = ConfirmationOutcome()

    async def run(self) -> ConfirmationOutcome:
        """
        Read the confirmation record, retrying while the backend is not ready.

        Reads are strictly sequential. Cancelling the task running this
        coroutine interrupts the pending delay and stops further reads.

        Returns:
            The final outcome, SUCCEEDED or FAILED
        """
        outcome = self.outcome

        while True:
            outcome.attempts += 1
            try:
                payload = await self.fetch()
                outcome.confirmation = BookingConfirmation.model_validate(payload)
            except httpx.HTTPStatusError as e:
                status = e.response.status_code
                if status != NOT_READY_STATUS:
                    logger.warning(f"Confirmation lookup failed with status {status}")
                    return self._fail(FailureKind.PERMANENT)
                if outcome.attempts >= self.policy.max_attempts:
                    logger.warning(
                        f"Booking still not confirmed after {outcome.attempts} attempts"
                    )
                    return self._fail(FailureKind.EXHAUSTED)

                logger.info(
                    f"Booking not confirmed yet, retrying in {self.policy.delay_seconds}s "
                    f"({self.policy.max_attempts - outcome.attempts} attempts left)"
                )
                await self._sleep(self.policy.delay_seconds)
                continue
            except (httpx.HTTPError, ValidationError, ValueError) as e:
                logger.warning(f"Confirmation lookup failed: {e}")
                return self._fail(FailureKind.PERMANENT)

            outcome.state = ConfirmationState.SUCCEEDED
            logger.info(
                f"Booking {outcome.confirmation.booking_reference} confirmed "
                f"after {outcome.attempts} attempt(s)"
            )
            return outcome

    def _fail(self, kind: FailureKind) -> ConfirmationOutcome:
        self.outcome.state = ConfirmationState.FAILED
        self.outcome.failure = kind
        self.outcome.message = RECEIPT_MESSAGE
        return self.outcome


@dataclass
class Lookup:
    """A scheduled confirmation lookup."""

    lookup_id: str
    key: str
    poller: ConfirmationPoller
    token: Optional[str] = None
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    finished_at: Optional[datetime] = None
    task: Optional[asyncio.Task] = None

    @property
    def outcome(self) -> ConfirmationOutcome:
        return self.poller.outcome

    @property
    def done(self) -> bool:
        return self.outcome.state != ConfirmationState.PENDING


class ConfirmationTracker:
    """
    Runs confirmation lookups in the background.

    The browser starts a lookup, shows a spinner while polling this
    tracker, and cancels the lookup when the visitor leaves the page.
    """

    def __init__(self):
        self._lookups: Dict[str, Lookup] = {}
        self._active: Dict[Tuple[str, Optional[str]], str] = {}

    def start(
        self,
        key: str,
        fetch: FetchConfirmation,
        policy: RetryPolicy,
        token: Optional[str] = None,
    ) -> Lookup:
        """
        Schedule a lookup, or return the one already running for the key.

        A running lookup is only shared with callers presenting the same
        access token, so a different token always gets its own lookup.

        Args:
            key: Identifies the booking being confirmed, e.g. ``course:42``
            fetch: Coroutine function reading the confirmation once
            policy: Retry policy of the calling flow
            token: Access token the fetch was built with, if any

        Returns:
            The lookup handle, still PENDING
        """
        active_id = self._active.get((key, token))
        if active_id is not None:
            lookup = self._lookups[active_id]
            if not lookup.done:
                return lookup

        lookup = Lookup(
            lookup_id=uuid.uuid4().hex,
            key=key,
            poller=ConfirmationPoller(fetch, policy),
            token=token,
        )
        self._lookups[lookup.lookup_id] = lookup
        self._active[(key, token)] = lookup.lookup_id
        lookup.task = asyncio.create_task(self._run(lookup))

        logger.info(f"Scheduled confirmation lookup {lookup.lookup_id} for {key}")
        return lookup

    async def _run(self, lookup: Lookup):
        try:
            await lookup.poller.run()
        except Exception as e:
            logger.error(f"Confirmation lookup {lookup.lookup_id} crashed: {e}", exc_info=True)
            if not lookup.done:
                lookup.poller._fail(FailureKind.PERMANENT)
        finally:
            lookup.finished_at = datetime.now(timezone.utc)
            self._release(lookup)

    def _release(self, lookup: Lookup):
        active_key = (lookup.key, lookup.token)
        if self._active.get(active_key) == lookup.lookup_id:
            del self._active[active_key]

    def get(self, lookup_id: str) -> Optional[Lookup]:
        """Get a lookup by ID."""
        return self._lookups.get(lookup_id)

    def cancel(self, lookup_id: str) -> bool:
        """
        Cancel a lookup and forget it.

        Args:
            lookup_id: Lookup ID

        Returns:
            True if the lookup existed
        """
        lookup = self._lookups.pop(lookup_id, None)
        if lookup is None:
            return False

        if lookup.task is not None and not lookup.task.done():
            lookup.task.cancel()
            logger.info(f"Cancelled confirmation lookup {lookup_id}")
        self._release(lookup)
        return True

    def purge_finished(self, older_than: timedelta) -> int:
        """
        Forget finished lookups.

        Args:
            older_than: Minimum age since the lookup finished

        Returns:
            Number of lookups removed
        """
        cutoff = datetime.now(timezone.utc) - older_than
        expired = [
            lookup_id
            for lookup_id, lookup in self._lookups.items()
            if lookup.finished_at is not None and lookup.finished_at <= cutoff
        ]
        for lookup_id in expired:
            del self._lookups[lookup_id]
        return len(expired)

    def __len__(self) -> int:
        return len(self._lookups)


# Singleton instance
confirmation_tracker = ConfirmationTracker()
