"""
Firestore client for the guest directory
"""

from __future__ import annotations

import base64
import json
import logging
import os
from functools import lru_cache
from typing import Any

import firebase_admin
from firebase_admin import credentials, firestore

from app.core.config import settings

logger = logging.getLogger(__name__)


def load_service_account(
    raw_json: str | None = None,
    b64: str | None = None,
    path: str | None = None,
) -> dict[str, Any] | None:
    """Service account info from the first source that is set: JSON, base64 JSON, then file."""
    if raw_json:
        return json.loads(raw_json)
    if b64:
        return json.loads(base64.b64decode(b64).decode("utf-8"))
    if path:
        if not os.path.exists(path):
            logger.warning(f"Firebase credentials file not found: {path}")
            return None
        with open(path, "r", encoding="utf-8") as f:
            return json.load(f)
    return None


@lru_cache(maxsize=1)
def get_firestore_client():
    """Initialize the default Firebase app once and return its Firestore client."""
    if not firebase_admin._apps:
        info = load_service_account(
            settings.FIREBASE_CREDENTIALS_JSON,
            settings.FIREBASE_CREDENTIALS_B64,
            settings.FIREBASE_CREDENTIALS_FILE,
        )
        if not info:
            raise RuntimeError(
                "GUEST_STORE=firestore needs FIREBASE_CREDENTIALS_JSON, "
                "FIREBASE_CREDENTIALS_B64 or FIREBASE_CREDENTIALS_FILE"
            )

        firebase_admin.initialize_app(credentials.Certificate(info))
        logger.info(f"Firebase initialized for project {info.get('project_id', 'unknown')}")

    return firestore.client()
