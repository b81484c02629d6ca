"""
Pydantic schemas package
"""

from .common import *
from .guest import *

__all__ = [
    "StandardResponse",
    "ErrorResponse",
    "ImportRowError",
    "BulkImportResult",
    "Companion",
    "Guest",
    "GuestCreate",
    "GuestUpdate",
    "GuestRequestCreate",
    "RsvpLookupRequest",
    "RsvpSubmission",
    "RsvpRespondPhase",
    "RsvpAnsweredPhase",
    "RsvpPhase",
    "RsvpUpdate",
]
