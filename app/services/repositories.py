"""
Guest directory: the record store behind the guest list.

``GuestDirectory`` is the contract the RSVP and admin services use. Three
backends implement it:

* ``SheetsGuestDirectory``: the Google Sheets web app (Apps Script) the
  wedding site was built on, reached over HTTP/JSON.
* ``FirestoreGuestDirectory``: a Firestore collection, one document per guest.
* ``SqlGuestDirectory``: a SQL table through SQLAlchemy.

Fields passed to ``create``/``update`` are keyed by attribute name
(``allowed_guests``, ``is_vip``...). The directory owns ``id``,
``created_at`` and ``updated_at``.
"""

from __future__ import annotations

import logging
import uuid
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, Dict, List, Optional

import requests
from google.api_core import exceptions as google_exceptions
from pydantic.alias_generators import to_camel
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.exceptions import NotFoundError, StoreError, ValidationError
from app.models import Guest as GuestRecord
from app.schemas.guest import Companion, Guest

logger = logging.getLogger(__name__)

GUEST_DEFAULTS: Dict[str, Any] = {
    "role": "",
    "email": "",
    "contact": "",
    "message": "",
    "allowed_guests": 1,
    "companions": [],
    "table_number": "",
    "is_vip": False,
    "status": "pending",
    "added_by": "",
}

WRITABLE_FIELDS = {"name", *GUEST_DEFAULTS}


def _storable(fields: Dict[str, Any]) -> Dict[str, Any]:
    """Drop unknown keys and turn companions into plain dicts"""
    data = {key: value for key, value in fields.items() if key in WRITABLE_FIELDS}
    if "companions" in data:
        data["companions"] = [
            c.model_dump() if isinstance(c, Companion) else dict(c)
            for c in (data["companions"] or [])
        ]
    for key in ("name", "role", "email", "contact", "message", "table_number", "added_by"):
        if isinstance(data.get(key), str):
            data[key] = data[key].strip()
    return data


def _with_defaults(fields: Dict[str, Any]) -> Dict[str, Any]:
    data = dict(GUEST_DEFAULTS)
    data["companions"] = []
    data.update(_storable(fields))
    if not data.get("name"):
        raise ValidationError("name is required")
    return data


def _camel(fields: Dict[str, Any]) -> Dict[str, Any]:
    return {to_camel(key): value for key, value in fields.items()}


class GuestDirectory(ABC):
    """Read/write access to the guest list"""

    @abstractmethod
    def list_guests(self) -> List[Guest]:
        """All guests, in the store's natural (creation) order"""

    @abstractmethod
    def get(self, guest_id: str) -> Optional[Guest]:
        ...

    @abstractmethod
    def create(self, fields: Dict[str, Any]) -> Guest:
        ...

    @abstractmethod
    def update(self, guest_id: str, fields: Dict[str, Any]) -> Guest:
        """Apply only the given fields and refresh ``updated_at``"""

    @abstractmethod
    def delete(self, guest_id: str) -> None:
        ...


# -------- SQL --------

class SqlGuestDirectory(GuestDirectory):
    def __init__(self, db: Session):
        self.db = db

    @staticmethod
    def _to_guest(record: GuestRecord) -> Guest:
        return Guest(
            id=record.id,
            name=record.name,
            role=record.role,
            email=record.email,
            contact=record.contact,
            message=record.message,
            allowed_guests=record.allowed_guests,
            companions=record.companions,
            table_number=record.table_number,
            is_vip=bool(record.is_vip),
            status=record.status,
            added_by=record.added_by,
            created_at=record.created_at,
            updated_at=record.updated_at,
        )

    def _record(self, guest_id: str) -> Optional[GuestRecord]:
        return self.db.query(GuestRecord).filter(GuestRecord.id == str(guest_id)).first()

    def _commit(self) -> None:
        try:
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Guest store commit failed: {e}")
            raise StoreError("Failed to save guest data") from e

    def list_guests(self) -> List[Guest]:
        records = self.db.query(GuestRecord).order_by(GuestRecord.created_at, GuestRecord.id).all()
        return [self._to_guest(r) for r in records]

    def get(self, guest_id: str) -> Optional[Guest]:
        record = self._record(guest_id)
        return self._to_guest(record) if record else None

    def create(self, fields: Dict[str, Any]) -> Guest:
        now = datetime.utcnow()
        record = GuestRecord(**_with_defaults(fields), created_at=now, updated_at=now)
        self.db.add(record)
        self._commit()
        self.db.refresh(record)
        return self._to_guest(record)

    def update(self, guest_id: str, fields: Dict[str, Any]) -> Guest:
        record = self._record(guest_id)
        if not record:
            raise NotFoundError(f"Guest not found with ID: {guest_id}")
        for key, value in _storable(fields).items():
            setattr(record, key, value)
        record.updated_at = datetime.utcnow()
        self._commit()
        self.db.refresh(record)
        return self._to_guest(record)

    def delete(self, guest_id: str) -> None:
        record = self._record(guest_id)
        if not record:
            raise NotFoundError(f"Guest not found with ID: {guest_id}")
        self.db.delete(record)
        self._commit()


# -------- Google Sheets web app --------

class SheetsGuestDirectory(GuestDirectory):
    """
    Guest sheet exposed by the Apps Script web app.

    ``GET`` returns every row as a JSON array; ``POST`` takes
    ``{"action": "create" | "update" | "delete", ...}``. Failures come back
    as ``{"error": "..."}`` with HTTP 200, so the body is always checked.
    """

    def __init__(self, url: str, timeout: float = 15, session: Optional[requests.Session] = None):
        if not url:
            raise RuntimeError("GUEST_API_URL is not configured")
        self.url = url
        self.timeout = timeout
        self.session = session or requests.Session()

    def _request(self, method: str, payload: Optional[dict] = None) -> Any:
        try:
            if method == "GET":
                response = self.session.get(self.url, timeout=self.timeout)
            else:
                response = self.session.post(self.url, json=payload, timeout=self.timeout)
            response.raise_for_status()
            data = response.json()
        except (requests.RequestException, ValueError) as e:
            logger.error(f"Guest sheet {method} failed: {e}")
            raise StoreError("Guest list service is unavailable") from e

        if isinstance(data, dict) and data.get("error"):
            error = str(data["error"])
            if "not found" in error.lower() and "sheet" not in error.lower():
                raise NotFoundError(error)
            logger.error(f"Guest sheet rejected {method}: {error}")
            raise StoreError(error)
        return data

    def list_guests(self) -> List[Guest]:
        rows = self._request("GET")
        if not isinstance(rows, list):
            raise StoreError("Unexpected guest list payload")
        return [Guest.model_validate(row) for row in rows if isinstance(row, dict) and row.get("id")]

    def get(self, guest_id: str) -> Optional[Guest]:
        return next((g for g in self.list_guests() if g.id == str(guest_id)), None)

    def create(self, fields: Dict[str, Any]) -> Guest:
        data = _with_defaults(fields)
        # The sheet script rejects rows without a role
        data["role"] = data["role"] or "Guest"
        result = self._request("POST", {"action": "create", **_camel(data)})
        return Guest.model_validate(result["guest"])

    def update(self, guest_id: str, fields: Dict[str, Any]) -> Guest:
        payload = {"action": "update", "id": str(guest_id), **_camel(_storable(fields))}
        self._request("POST", payload)
        guest = self.get(guest_id)
        if guest is None:
            raise NotFoundError(f"Guest not found with ID: {guest_id}")
        return guest

    def delete(self, guest_id: str) -> None:
        self._request("POST", {"action": "delete", "id": str(guest_id)})


# -------- Firestore --------

class FirestoreGuestDirectory(GuestDirectory):
    """Guests as documents of one Firestore collection, camelCase fields"""

    def __init__(self, client=None, collection: Optional[str] = None):
        if client is None:
            from app.services.firebase_client import get_firestore_client
            client = get_firestore_client()
        self.client = client
        self.collection_name = collection or settings.FIRESTORE_COLLECTION

    def _collection(self):
        return self.client.collection(self.collection_name)

    @staticmethod
    def _to_guest(doc) -> Guest:
        data = doc.to_dict()
        data["id"] = doc.id
        return Guest.model_validate(data)

    def list_guests(self) -> List[Guest]:
        try:
            docs = self._collection().order_by("createdAt").get()
        except google_exceptions.GoogleAPIError as e:
            logger.error(f"Firestore guest list failed: {e}")
            raise StoreError("Guest list service is unavailable") from e
        return [self._to_guest(d) for d in docs]

    def get(self, guest_id: str) -> Optional[Guest]:
        try:
            doc = self._collection().document(str(guest_id)).get()
        except google_exceptions.GoogleAPIError as e:
            raise StoreError("Guest list service is unavailable") from e
        return self._to_guest(doc) if doc.exists else None

    def create(self, fields: Dict[str, Any]) -> Guest:
        now = datetime.utcnow().isoformat()
        guest_id = uuid.uuid4().hex
        data = {**_camel(_with_defaults(fields)), "createdAt": now, "updatedAt": now}
        try:
            self._collection().document(guest_id).set(data)
        except google_exceptions.GoogleAPIError as e:
            raise StoreError("Failed to save guest data") from e
        return Guest.model_validate({**data, "id": guest_id})

    def update(self, guest_id: str, fields: Dict[str, Any]) -> Guest:
        ref = self._collection().document(str(guest_id))
        try:
            if not ref.get().exists:
                raise NotFoundError(f"Guest not found with ID: {guest_id}")
            data = {**_camel(_storable(fields)), "updatedAt": datetime.utcnow().isoformat()}
            ref.set(data, merge=True)
            return self._to_guest(ref.get())
        except google_exceptions.GoogleAPIError as e:
            raise StoreError("Failed to save guest data") from e

    def delete(self, guest_id: str) -> None:
        ref = self._collection().document(str(guest_id))
        try:
            if not ref.get().exists:
                raise NotFoundError(f"Guest not found with ID: {guest_id}")
            ref.delete()
        except google_exceptions.GoogleAPIError as e:
            raise StoreError("Failed to delete guest") from e


def use_firestore() -> bool:
    return settings.GUEST_STORE == "firestore"


def get_guest_directory(db: Optional[Session] = None) -> GuestDirectory:
    """Build the directory selected by ``settings.GUEST_STORE``"""
    if settings.GUEST_STORE == "sheets":
        return SheetsGuestDirectory(settings.GUEST_API_URL, timeout=settings.GUEST_API_TIMEOUT)
    if use_firestore():
        return FirestoreGuestDirectory()
    if db is None:
        raise RuntimeError("SQL guest store needs a database session")
    return SqlGuestDirectory(db)
