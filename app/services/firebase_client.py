"""
Firebase initialization and ID token verification
"""

from __future__ import annotations

import json
from functools import lru_cache
from typing import Any
import base64
import os

import firebase_admin
from firebase_admin import auth, credentials

from app.core.config import settings


@lru_cache(maxsize=1)
def get_firebase_app():
    """Initialize and return the Firebase app if Firebase is enabled.

    Expects credentials via one of: FIREBASE_CREDENTIALS_JSON, FIREBASE_CREDENTIALS_B64, FIREBASE_CREDENTIALS_FILE.
    """
    if not settings.USE_FIREBASE:
        return None

    if not firebase_admin._apps:
        info: dict[str, Any] | None = None
        if settings.FIREBASE_CREDENTIALS_JSON:
            info = json.loads(settings.FIREBASE_CREDENTIALS_JSON)
        elif getattr(settings, "FIREBASE_CREDENTIALS_B64", None):
            decoded = base64.b64decode(settings.FIREBASE_CREDENTIALS_B64).decode("utf-8")
            info = json.loads(decoded)
        elif getattr(settings, "FIREBASE_CREDENTIALS_FILE", None) and os.path.exists(settings.FIREBASE_CREDENTIALS_FILE):
            with open(settings.FIREBASE_CREDENTIALS_FILE, "r", encoding="utf-8") as f:
                info = json.load(f)

        if not info:
            raise RuntimeError("Firebase credentials not provided. Set FIREBASE_CREDENTIALS_FILE, FIREBASE_CREDENTIALS_JSON, or FIREBASE_CREDENTIALS_B64")

        cred = credentials.Certificate(info)
        firebase_admin.initialize_app(cred)

    return firebase_admin.get_app()


def verify_id_token(token: str) -> dict[str, Any]:
    """Verify a Firebase ID token and return its claims (uid, email, custom ``role``).

    Raises ``ValueError`` for any token the provider does not accept.
    """
    app = get_firebase_app()
    if app is None:
        raise RuntimeError("Firebase is not enabled")

    try:
        return auth.verify_id_token(token, app=app)
    except (auth.InvalidIdTokenError, auth.ExpiredIdTokenError, auth.RevokedIdTokenError) as e:
        raise ValueError(str(e)) from e
