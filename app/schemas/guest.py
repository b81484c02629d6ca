"""
Guest-related Pydantic schemas

Wire format is camelCase (``allowedGuests``, ``isVip``...) to match the
guest spreadsheet and the web client; attributes are snake_case.
"""

import json
from datetime import datetime
from typing import Annotated, Any, List, Literal, Optional, Union

from pydantic import BaseModel, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

GuestStatus = Literal["pending", "confirmed", "declined", "request"]
RsvpStatus = Literal["confirmed", "declined"]

RESPONDED_STATUSES = ("confirmed", "declined")


class CamelModel(BaseModel):
    """Base model reading and writing camelCase keys"""

    class Config:
        alias_generator = to_camel
        populate_by_name = True


class Companion(CamelModel):
    """Named additional attendee under one invitation"""
    name: str = ""
    relationship: str = ""

    @field_validator("name", "relationship", mode="before")
    @classmethod
    def _text(cls, value: Any) -> str:
        return "" if value is None else str(value)


def _parse_allowed_guests(value: Any) -> int:
    try:
        count = int(value)
    except (TypeError, ValueError):
        return 1
    return max(1, count)


def _parse_companions(value: Any) -> list:
    if value is None or value == "":
        return []
    if isinstance(value, str):
        # Spreadsheet cells hold companions as a JSON string
        try:
            value = json.loads(value)
        except ValueError:
            return []
    if not isinstance(value, list):
        return []
    return value


class Guest(CamelModel):
    """A guest record as held by the guest directory"""
    id: str
    name: str
    role: str = ""
    email: str = ""
    contact: str = ""
    message: str = ""
    allowed_guests: int = 1
    companions: List[Companion] = Field(default_factory=list)
    table_number: str = ""
    is_vip: bool = False
    status: GuestStatus = "pending"
    added_by: str = ""
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    @field_validator("id", "name", "role", "email", "contact", "message", "table_number", "added_by", mode="before")
    @classmethod
    def _text(cls, value: Any) -> str:
        return "" if value is None else str(value)

    @field_validator("allowed_guests", mode="before")
    @classmethod
    def _allowed_guests(cls, value: Any) -> int:
        return _parse_allowed_guests(value)

    @field_validator("companions", mode="before")
    @classmethod
    def _companions(cls, value: Any) -> list:
        return _parse_companions(value)

    @field_validator("is_vip", mode="before")
    @classmethod
    def _is_vip(cls, value: Any) -> bool:
        return value is True or value == "TRUE"

    @field_validator("status", mode="before")
    @classmethod
    def _status(cls, value: Any) -> str:
        return value or "pending"

    @field_validator("created_at", "updated_at", mode="before")
    @classmethod
    def _timestamp(cls, value: Any) -> Optional[str]:
        if isinstance(value, datetime):
            return value.isoformat()
        return value or None

    @property
    def has_responded(self) -> bool:
        return self.status in RESPONDED_STATUSES


class GuestCreate(CamelModel):
    """Schema for creating a guest"""
    name: str
    role: str = ""
    email: str = ""
    contact: str = ""
    message: str = ""
    allowed_guests: int = Field(1, ge=1)
    companions: List[Companion] = Field(default_factory=list)
    table_number: str = ""
    is_vip: bool = False
    status: GuestStatus = "pending"
    added_by: str = ""

    @field_validator("name")
    @classmethod
    def _name_required(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("name is required")
        return value


class GuestUpdate(CamelModel):
    """
    Merge-patch for a guest.

    Only fields present in the request are applied; use
    ``model_dump(exclude_unset=True)`` to get them. ``expected_updated_at``
    is an optional concurrency token and is never written. Sending
    ``null`` for a field is rejected; leave the field out to keep it.
    """
    name: Optional[str] = None
    role: Optional[str] = None
    email: Optional[str] = None
    contact: Optional[str] = None
    message: Optional[str] = None
    allowed_guests: Optional[int] = Field(None, ge=1)
    companions: Optional[List[Companion]] = None
    table_number: Optional[str] = None
    is_vip: Optional[bool] = None
    status: Optional[GuestStatus] = None
    added_by: Optional[str] = None
    expected_updated_at: Optional[str] = None

    @field_validator(
        "name", "role", "email", "contact", "message", "allowed_guests", "companions",
        "table_number", "is_vip", "status", "added_by",
        mode="before",
    )
    @classmethod
    def _not_null(cls, value: Any) -> Any:
        if value is None:
            raise ValueError("may be omitted but not null")
        return value

    def patch_fields(self) -> dict:
        return self.model_dump(exclude_unset=True, exclude={"expected_updated_at"})


class GuestRequestCreate(CamelModel):
    """A guest asking to be added to the list"""
    name: str
    email: str = ""
    contact: str = ""
    message: str = ""
    allowed_guests: int = Field(1, ge=1)

    @field_validator("name")
    @classmethod
    def _name_required(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("name is required")
        return value


class RsvpLookupRequest(BaseModel):
    """Search phase of the RSVP flow: the name a visitor typed"""
    name: str


class RsvpSubmission(CamelModel):
    """
    What a guest sends back from the RSVP form.

    There is no ``allowed_guests`` field: a headcount sent by
    the client is dropped on parsing.
    """
    status: Optional[str] = None
    name: Optional[str] = None
    role: Optional[str] = None
    email: Optional[str] = None
    contact: Optional[str] = None
    message: Optional[str] = None
    companions: List[Companion] = Field(default_factory=list)
    updated_at: Optional[str] = None


class RsvpRespondPhase(CamelModel):
    """Pending guest: the form is editable with ``companions`` pre-sized"""
    phase: Literal["respond"] = "respond"
    guest: Guest
    companions: List[Companion]


class RsvpAnsweredPhase(CamelModel):
    """Guest already confirmed or declined: show the response read-only"""
    phase: Literal["answered"] = "answered"
    guest: Guest


RsvpPhase = Annotated[
    Union[RsvpRespondPhase, RsvpAnsweredPhase],
    Field(discriminator="phase"),
]


class RsvpUpdate(CamelModel):
    """The single update an RSVP submission writes to the directory"""
    id: str
    name: str
    role: str
    email: str
    contact: str
    message: str
    allowed_guests: int
    companions: List[Companion]
    status: RsvpStatus

    @model_validator(mode="after")
    def _declined_has_no_companions(self):
        if self.status == "declined" and self.companions:
            raise ValueError("declined responses carry no companions")
        return self

    @classmethod
    def for_guest(
        cls,
        guest: Guest,
        submission: RsvpSubmission,
        status: str,
        companions: List[Companion],
    ) -> "RsvpUpdate":
        def pick(value: Optional[str], stored: str) -> str:
            return (value if value is not None else stored).strip()

        return cls(
            id=guest.id,
            name=pick(submission.name, guest.name) or guest.name,
            role=pick(submission.role, guest.role) or "Guest",
            email=pick(submission.email, guest.email),
            contact=pick(submission.contact, guest.contact),
            message=pick(submission.message, guest.message),
            allowed_guests=guest.allowed_guests,
            companions=companions if status == "confirmed" else [],
            status=status,
        )

    def fields(self) -> dict:
        """Directory fields to write, keyed by attribute name"""
        return self.model_dump(exclude={"id"})
