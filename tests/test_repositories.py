"""
Tests for the guest directory backends
"""

from unittest.mock import MagicMock, Mock

import pytest
import requests
from google.api_core import exceptions as google_exceptions

from app.core.exceptions import NotFoundError, StoreError, ValidationError
from app.core.config import settings
from app.services.repositories import (
    FirestoreGuestDirectory,
    SheetsGuestDirectory,
    SqlGuestDirectory,
    get_guest_directory,
)

SHEET_URL = "https://script.google.com/macros/s/test/exec"

def sheet_response(payload):
    response = Mock()
    response.json.return_value = payload
    response.raise_for_status.return_value = None
    return response

SHEET_ROWS = [
    {
        "id": "g1",
        "name": "John Smith",
        "role": "Friend",
        "allowedGuests": "3",
        "companions": '[{"name": "Jane Smith", "relationship": "Spouse"}]',
        "isVip": "TRUE",
        "status": "pending",
        "tableNumber": None,
    },
    {"id": "", "name": "Blank Row"},
    {"id": "g2", "name": "Mary Johnson", "allowedGuests": "", "status": ""},
]

# -------- SQL --------

class TestSqlGuestDirectory:

    def test_create_get_list(self, directory):
        created = directory.create({"name": " John Smith ", "allowed_guests": 2})

        assert created.name == "John Smith"
        assert created.status == "pending"
        assert directory.get(created.id) == created
        assert [g.id for g in directory.list_guests()] == [created.id]

    def test_create_requires_name(self, directory):
        with pytest.raises(ValidationError):
            directory.create({"name": "  "})

    def test_create_ignores_unknown_fields(self, directory):
        created = directory.create({"name": "John Smith", "favouriteColour": "blue", "id": "mine"})
        assert created.id != "mine"

    def test_update_only_given_fields(self, directory):
        created = directory.create({"name": "John Smith", "role": "Friend", "email": "john@example.com"})

        saved = directory.update(created.id, {"role": "Best Man"})

        assert saved.role == "Best Man"
        assert saved.email == "john@example.com"
        assert saved.created_at == created.created_at

    def test_update_and_delete_missing(self, directory):
        with pytest.raises(NotFoundError):
            directory.update("nope", {"role": "Friend"})
        with pytest.raises(NotFoundError):
            directory.delete("nope")

    def test_delete(self, directory):
        created = directory.create({"name": "John Smith"})
        directory.delete(created.id)
        assert directory.get(created.id) is None

# -------- Google Sheets --------

class TestSheetsGuestDirectory:

    @pytest.fixture
    def session(self):
        return Mock()

    @pytest.fixture
    def sheet(self, session):
        return SheetsGuestDirectory(SHEET_URL, timeout=5, session=session)

    def test_requires_url(self):
        with pytest.raises(RuntimeError):
            SheetsGuestDirectory("")

    def test_list_parses_legacy_rows(self, sheet, session):
        session.get.return_value = sheet_response(SHEET_ROWS)

        guests = sheet.list_guests()

        assert [g.id for g in guests] == ["g1", "g2"]
        john, mary = guests
        assert john.allowed_guests == 3
        assert john.companions[0].name == "Jane Smith"
        assert john.is_vip is True
        assert john.table_number == ""
        assert mary.allowed_guests == 1
        assert mary.status == "pending"
        session.get.assert_called_once_with(SHEET_URL, timeout=5)

    def test_list_skips_malformed_rows(self, sheet, session):
        session.get.return_value = sheet_response(["oops", None, 42, *SHEET_ROWS])

        assert [g.id for g in sheet.list_guests()] == ["g1", "g2"]

    def test_get(self, sheet, session):
        session.get.return_value = sheet_response(SHEET_ROWS)
        assert sheet.get("g2").name == "Mary Johnson"
        assert sheet.get("missing") is None

    def test_create_posts_camel_case(self, sheet, session):
        session.post.return_value = sheet_response({
            "success": True,
            "guest": {"id": "g9", "name": "Ana Reyes", "role": "Guest", "allowedGuests": 2},
        })

        guest = sheet.create({"name": "Ana Reyes", "allowed_guests": 2, "is_vip": True})

        payload = session.post.call_args.kwargs["json"]
        assert payload["action"] == "create"
        assert payload["name"] == "Ana Reyes"
        assert payload["allowedGuests"] == 2
        assert payload["isVip"] is True
        assert payload["role"] == "Guest"
        assert guest.id == "g9"

    def test_update_posts_then_reloads(self, sheet, session):
        session.post.return_value = sheet_response({"success": True})
        session.get.return_value = sheet_response(SHEET_ROWS)

        guest = sheet.update("g1", {"status": "confirmed", "companions": []})

        payload = session.post.call_args.kwargs["json"]
        assert payload == {"action": "update", "id": "g1", "status": "confirmed", "companions": []}
        assert guest.id == "g1"

    def test_delete(self, sheet, session):
        session.post.return_value = sheet_response({"success": True})
        sheet.delete("g1")
        assert session.post.call_args.kwargs["json"] == {"action": "delete", "id": "g1"}

    def test_error_body_not_found(self, sheet, session):
        session.post.return_value = sheet_response({"error": "Guest not found"})
        with pytest.raises(NotFoundError):
            sheet.delete("g1")

    def test_error_body_other(self, sheet, session):
        session.get.return_value = sheet_response({"error": "Sheet not found"})
        with pytest.raises(StoreError):
            sheet.list_guests()

    def test_transport_error(self, sheet, session):
        session.get.side_effect = requests.ConnectionError("offline")
        with pytest.raises(StoreError) as exc:
            sheet.list_guests()
        assert exc.value.retryable is True

    def test_invalid_json(self, sheet, session):
        response = Mock()
        response.raise_for_status.return_value = None
        response.json.side_effect = ValueError("not json")
        session.get.return_value = response
        with pytest.raises(StoreError):
            sheet.list_guests()

# -------- Firestore --------

def firestore_doc(doc_id, data, exists=True):
    doc = MagicMock()
    doc.id = doc_id
    doc.exists = exists
    doc.to_dict.return_value = dict(data)
    return doc

class TestFirestoreGuestDirectory:

    @pytest.fixture
    def client(self):
        return MagicMock()

    @pytest.fixture
    def store(self, client):
        return FirestoreGuestDirectory(client=client, collection="guests")

    def test_list(self, store, client):
        query = client.collection.return_value.order_by.return_value
        query.get.return_value = [
            firestore_doc("a", {"name": "John Smith", "allowedGuests": 2, "isVip": True}),
        ]

        guests = store.list_guests()

        client.collection.assert_called_with("guests")
        client.collection.return_value.order_by.assert_called_with("createdAt")
        assert guests[0].id == "a"
        assert guests[0].allowed_guests == 2
        assert guests[0].is_vip is True

    def test_get_missing(self, store, client):
        client.collection.return_value.document.return_value.get.return_value = firestore_doc("x", {}, exists=False)
        assert store.get("x") is None

    def test_create_writes_camel_case(self, store, client):
        guest = store.create({"name": "Ana Reyes", "table_number": "T4"})

        ref = client.collection.return_value.document.return_value
        data = ref.set.call_args.args[0]
        assert data["name"] == "Ana Reyes"
        assert data["tableNumber"] == "T4"
        assert data["createdAt"] == data["updatedAt"]
        assert guest.table_number == "T4"

    def test_update_merges(self, store, client):
        ref = client.collection.return_value.document.return_value
        ref.get.return_value = firestore_doc("a", {"name": "John Smith", "status": "confirmed"})

        guest = store.update("a", {"status": "confirmed"})

        data = ref.set.call_args.args[0]
        assert data["status"] == "confirmed"
        assert "updatedAt" in data
        assert ref.set.call_args.kwargs == {"merge": True}
        assert guest.status == "confirmed"

    def test_update_missing(self, store, client):
        ref = client.collection.return_value.document.return_value
        ref.get.return_value = firestore_doc("a", {}, exists=False)
        with pytest.raises(NotFoundError):
            store.update("a", {"status": "confirmed"})
        ref.set.assert_not_called()

    def test_api_error(self, store, client):
        client.collection.return_value.order_by.return_value.get.side_effect = (
            google_exceptions.ServiceUnavailable("down")
        )
        with pytest.raises(StoreError):
            store.list_guests()

# -------- backend selection --------

def test_get_guest_directory_sql(db_session):
    assert isinstance(get_guest_directory(db_session), SqlGuestDirectory)

def test_get_guest_directory_sql_needs_session():
    with pytest.raises(RuntimeError):
        get_guest_directory()

def test_get_guest_directory_sheets(monkeypatch):
    monkeypatch.setattr(settings, "GUEST_STORE", "sheets")
    monkeypatch.setattr(settings, "GUEST_API_URL", SHEET_URL)

    directory = get_guest_directory()

    assert isinstance(directory, SheetsGuestDirectory)
    assert directory.url == SHEET_URL

def test_get_guest_directory_firestore(monkeypatch):
    client = MagicMock()
    monkeypatch.setattr(settings, "GUEST_STORE", "firestore")
    monkeypatch.setattr("app.services.firebase_client.get_firestore_client", lambda: client)

    directory = get_guest_directory()

    assert isinstance(directory, FirestoreGuestDirectory)
    assert directory.client is client
    assert directory.collection_name == settings.FIRESTORE_COLLECTION
