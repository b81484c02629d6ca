"""
RSVP service: guest lookup and response reconciliation
"""

import logging
from typing import List, Optional, Union

from app.core.config import settings
from app.core.exceptions import (
    AlreadyRespondedError,
    ConflictError,
    NotFoundError,
    ValidationError,
)
from app.schemas.guest import (
    Guest,
    RsvpAnsweredPhase,
    RsvpRespondPhase,
    RsvpSubmission,
    RsvpUpdate,
    RESPONDED_STATUSES,
)
from app.services.events import GUEST_RSVP, GuestEvent, GuestEventBus, guest_events
from app.services.name_matching import find_match
from app.services.repositories import GuestDirectory
from app.services.roster import missing_companion_names, sync_companions

logger = logging.getLogger(__name__)

NOT_FOUND_MESSAGE = "We couldn't find your name. Please check the spelling or contact us."


def can_respond(guest: Guest) -> bool:
    """A guest answers once, and only while the invitation is pending."""
    return guest.status == "pending"


class RsvpService:
    """Guest self-service RSVP flow"""

    def __init__(
        self,
        directory: GuestDirectory,
        events: GuestEventBus = guest_events,
        threshold: Optional[float] = None,
        min_query_length: Optional[int] = None,
    ):
        self.directory = directory
        self.events = events
        self.threshold = settings.MATCH_THRESHOLD if threshold is None else threshold
        self.min_query_length = settings.MIN_QUERY_LENGTH if min_query_length is None else min_query_length

    @staticmethod
    def can_respond(guest: Guest) -> bool:
        return can_respond(guest)

    def invited_guests(self) -> List[Guest]:
        """Guests admitted to the list; pending join requests are not."""
        return [g for g in self.directory.list_guests() if g.status != "request"]

    def lookup(self, query: str) -> Union[RsvpRespondPhase, RsvpAnsweredPhase]:
        """Resolve a typed name and open the form, or show the existing answer."""
        query = (query or "").strip()
        if not query:
            raise ValidationError("Please enter your name")
        if len(query) < self.min_query_length:
            raise ValidationError("Please enter your full name")

        guest = find_match(query, self.invited_guests(), self.threshold)
        if guest is None:
            logger.info("RSVP lookup found no match")
            raise NotFoundError(NOT_FOUND_MESSAGE)

        if not can_respond(guest):
            logger.info(f"RSVP lookup matched {guest.id}, already {guest.status}")
            return RsvpAnsweredPhase(guest=guest)

        logger.info(f"RSVP lookup matched {guest.id}")
        return RsvpRespondPhase(
            guest=guest,
            companions=sync_companions(guest.companions, guest.allowed_guests),
        )

    def validate(self, guest: Guest, submission: RsvpSubmission) -> RsvpUpdate:
        """
        Check a submission against the stored guest and build the update.

        Rules run in order and stop at the first failure: a status must be
        chosen; when confirming a party, every companion needs a name; when
        declining, companions are dropped. The headcount always comes from
        the stored guest.
        """
        status = (submission.status or "").strip().lower()
        if status not in RESPONDED_STATUSES:
            raise ValidationError("status required")

        companions = []
        if status == "confirmed":
            companions = sync_companions(submission.companions, guest.allowed_guests)
            if guest.allowed_guests > 1:
                missing = missing_companion_names(companions)
                if missing:
                    raise ValidationError(
                        f"missing companion name: please fill in all companion names ({len(companions)} required)",
                        required=len(companions),
                        missing=missing,
                    )

        return RsvpUpdate.for_guest(guest, submission, status, companions)

    def submit(self, guest_id: str, submission: RsvpSubmission) -> Guest:
        """Record a guest's one RSVP and notify listeners."""
        guest = self.directory.get(guest_id)
        if guest is None:
            raise NotFoundError("Guest not found")

        if not can_respond(guest):
            raise AlreadyRespondedError(
                f"You have already responded ({guest.status})",
                context={"status": guest.status},
            )

        if submission.updated_at and guest.updated_at and submission.updated_at != guest.updated_at:
            raise ConflictError("Your invitation changed since you opened it. Please search again.")

        update = self.validate(guest, submission)
        saved = self.directory.update(update.id, update.fields())
        logger.info(f"RSVP recorded for {saved.id}: {saved.status}")

        self.events.publish(GuestEvent(GUEST_RSVP, saved.id, saved.status))
        return saved
