"""
Guest list administration for the couple's dashboard
"""

import logging
from typing import Any, Dict, Iterable, List, Optional

from pydantic import ValidationError as SchemaValidationError

from app.core.exceptions import (
    ConflictError,
    DuplicateGuestError,
    NotFoundError,
    StoreError,
    ValidationError,
)
from app.schemas.common import BulkImportResult, ImportRowError
from app.schemas.guest import Guest, GuestCreate, GuestRequestCreate, GuestUpdate
from app.services.events import (
    GUEST_CREATED,
    GUEST_DELETED,
    GUEST_UPDATED,
    GuestEvent,
    GuestEventBus,
    guest_events,
)
from app.services.name_matching import normalize_name
from app.services.repositories import GuestDirectory
from app.services.roster import sync_companions

logger = logging.getLogger(__name__)

REQUEST_ADDED_BY = "Guest Request"


class GuestAdminService:
    """Create, edit and remove guests; admin edits are not bound by RSVP rules"""

    def __init__(self, directory: GuestDirectory, events: GuestEventBus = guest_events):
        self.directory = directory
        self.events = events

    # -------- lookups --------

    def resolve(self, key: str) -> Guest:
        """Find a guest by id, or by name for callers that only know the name."""
        key = str(key or "").strip()
        if not key:
            raise ValidationError("Guest id or name is required")

        guest = self.directory.get(key)
        if guest:
            return guest

        normalized = normalize_name(key)
        for candidate in self.directory.list_guests():
            if normalize_name(candidate.name) == normalized:
                return candidate

        raise NotFoundError(f"Guest not found: {key}")

    def find_duplicate(self, name: str) -> Optional[Guest]:
        """Best-effort check for a guest already listed under ``name``."""
        normalized = normalize_name(name)
        try:
            guests = self.directory.list_guests()
        except StoreError as e:
            logger.warning(f"Duplicate check skipped: {e}")
            return None
        return next((g for g in guests if normalize_name(g.name) == normalized), None)

    def list_guests(
        self,
        search: Optional[str] = None,
        status: Optional[str] = None,
        vip: Optional[bool] = None,
    ) -> List[Guest]:
        """Dashboard listing. Join requests only show when asked for by status."""
        term = (search or "").strip().lower()
        results = []
        for guest in self.directory.list_guests():
            if status:
                if guest.status != status:
                    continue
            elif guest.status == "request":
                continue
            if vip is not None and guest.is_vip != vip:
                continue
            if term and not (
                term in guest.name.lower()
                or term in guest.role.lower()
                or any(term in c.name.lower() for c in guest.companions)
            ):
                continue
            results.append(guest)
        return results

    def messages(self, search: Optional[str] = None) -> List[Guest]:
        """Guests who left a message for the couple."""
        term = (search or "").strip().lower()
        with_messages = [g for g in self.directory.list_guests() if g.message.strip()]
        if not term:
            return with_messages
        return [
            g for g in with_messages
            if term in g.name.lower() or term in g.message.lower() or term in g.email.lower()
        ]

    def statistics(self) -> Dict[str, Any]:
        stats = {
            "total": 0,
            "confirmed": 0,
            "pending": 0,
            "declined": 0,
            "request": 0,
            "vip": 0,
            "totalPax": 0,
            "byAddedBy": {},
        }
        for guest in self.directory.list_guests():
            stats["total"] += 1
            stats[guest.status] += 1
            if guest.is_vip:
                stats["vip"] += 1
            stats["totalPax"] += guest.allowed_guests
            added_by = guest.added_by or "Unknown"
            stats["byAddedBy"][added_by] = stats["byAddedBy"].get(added_by, 0) + 1
        return stats

    # -------- writes --------

    def create(self, data: GuestCreate, allow_duplicate: bool = False) -> Guest:
        if not allow_duplicate:
            existing = self.find_duplicate(data.name)
            if existing:
                raise DuplicateGuestError(
                    f"A guest named '{existing.name}' is already on the list",
                    context={"id": existing.id},
                )

        fields = data.model_dump()
        fields["companions"] = sync_companions(data.companions, data.allowed_guests)
        guest = self.directory.create(fields)
        logger.info(f"Guest {guest.id} created")

        self.events.publish(GuestEvent(GUEST_CREATED, guest.id, guest.status))
        return guest

    def update(self, key: str, patch: GuestUpdate) -> Guest:
        guest = self.resolve(key)

        if patch.expected_updated_at and patch.expected_updated_at != guest.updated_at:
            raise ConflictError(
                "Guest was changed by someone else; reload and try again",
                context={"updatedAt": guest.updated_at},
            )

        fields = patch.patch_fields()
        if "name" in fields and not (fields["name"] or "").strip():
            raise ValidationError("name is required")
        if "allowed_guests" in fields or "companions" in fields:
            fields["companions"] = sync_companions(
                fields.get("companions", guest.companions),
                fields.get("allowed_guests", guest.allowed_guests),
            )
        if not fields:
            return guest

        saved = self.directory.update(guest.id, fields)
        logger.info(f"Guest {saved.id} updated: {', '.join(sorted(fields))}")

        self.events.publish(GuestEvent(GUEST_UPDATED, saved.id, saved.status))
        return saved

    def delete(self, key: str) -> Guest:
        guest = self.resolve(key)
        self.directory.delete(guest.id)
        logger.info(f"Guest {guest.id} deleted")

        self.events.publish(GuestEvent(GUEST_DELETED, guest.id))
        return guest

    def request_invitation(self, data: GuestRequestCreate) -> Guest:
        """Record a visitor asking to join the guest list."""
        guest = self.directory.create({
            **data.model_dump(),
            "status": "request",
            "added_by": REQUEST_ADDED_BY,
        })
        logger.info(f"Join request {guest.id} received")

        self.events.publish(GuestEvent(GUEST_CREATED, guest.id, guest.status))
        return guest

    def approve_request(self, key: str) -> Guest:
        """Admit a join request as a regular, pending invitation."""
        guest = self.resolve(key)
        if guest.status != "request":
            raise ConflictError(f"Guest is not a pending request ({guest.status})")

        saved = self.directory.update(guest.id, {
            "status": "pending",
            "companions": sync_companions(guest.companions, guest.allowed_guests),
        })
        logger.info(f"Join request {saved.id} approved")

        self.events.publish(GuestEvent(GUEST_UPDATED, saved.id, saved.status))
        return saved

    def bulk_import(self, rows: Iterable[Dict[str, Any]]) -> BulkImportResult:
        """Create each row on its own; one bad row does not stop the rest."""
        results = BulkImportResult()
        for index, row in enumerate(rows):
            try:
                self.create(GuestCreate.model_validate(row), allow_duplicate=True)
                results.success += 1
            except (SchemaValidationError, ValidationError, StoreError) as e:
                results.failed += 1
                results.errors.append(ImportRowError(
                    index=index,
                    guest=str(row.get("name") or "").strip() or "Unknown",
                    error=str(e),
                ))
        logger.info(f"Bulk import: {results.success} created, {results.failed} failed")
        return results
