"""
Guest-facing API routes: name lookup, RSVP and join requests
"""

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from app.core.db import get_db
from app.schemas.guest import GuestRequestCreate, RsvpLookupRequest, RsvpRespondPhase, RsvpSubmission
from app.services.guest_admin_service import GuestAdminService
from app.services.repositories import get_guest_directory
from app.services.rsvp_service import RsvpService
from app.utils.security import rate_limit_check, get_client_ip
from app.utils.responses import success_response, rate_limit_error

router = APIRouter()

def get_rsvp_service(db: Session = Depends(get_db)) -> RsvpService:
    return RsvpService(get_guest_directory(db))

def get_admin_service(db: Session = Depends(get_db)) -> GuestAdminService:
    return GuestAdminService(get_guest_directory(db))

def rate_limited(scope: str):
    """Dependency throttling one group of public endpoints per client"""
    def check(request: Request):
        if not rate_limit_check(get_client_ip(request), scope=scope):
            rate_limit_error()
    return check

@router.post("/lookup", dependencies=[Depends(rate_limited("lookup"))])
async def lookup_guest(
    lookup_data: RsvpLookupRequest,
    service: RsvpService = Depends(get_rsvp_service)
):
    """Find the invitation for a typed name"""
    phase = service.lookup(lookup_data.name)

    if isinstance(phase, RsvpRespondPhase):
        message = "Invitation found"
    else:
        message = "You have already responded"

    return success_response(
        message=message,
        data=phase.model_dump(mode="json", by_alias=True)
    )

@router.post("/requests", status_code=201, dependencies=[Depends(rate_limited("rsvp"))])
async def request_invitation(
    request_data: GuestRequestCreate,
    service: GuestAdminService = Depends(get_admin_service)
):
    """Ask the couple to be added to the guest list"""
    guest = service.request_invitation(request_data)

    return success_response(
        message="Your request has been sent to the couple",
        data={"id": guest.id, "status": guest.status},
        status_code=201
    )

@router.post("/{guest_id}", dependencies=[Depends(rate_limited("rsvp"))])
async def submit_rsvp(
    guest_id: str,
    submission: RsvpSubmission,
    service: RsvpService = Depends(get_rsvp_service)
):
    """Record a guest's RSVP"""
    guest = service.submit(guest_id, submission)

    return success_response(
        message="Thank you for your response!",
        data=guest.model_dump(mode="json", by_alias=True)
    )
