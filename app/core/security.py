"""Caller identification and webhook signature helpers."""
from __future__ import annotations

import hashlib
import hmac

from fastapi import Depends, Header, HTTPException, status

from app.models.user import UserRecord
from app.services.user_store import UserStore, get_user_store

SIGNATURE_HEADER = "X-Signature"


def compute_webhook_signature(raw_body: bytes, secret: str) -> str:
    """Hex HMAC-SHA256 of the raw request body."""
    return hmac.new(secret.encode("utf-8"), raw_body, hashlib.sha256).hexdigest()


def verify_webhook_signature(raw_body: bytes, signature: str | None, secret: str) -> bool:
    """Check ``signature`` against the body digest in constant time.

    The digest must be computed over the exact bytes received; re-serialized
    JSON will not match.
    """
    if not signature:
        return False
    expected = compute_webhook_signature(raw_body, secret).encode("utf-8")
    provided = signature.encode("utf-8")
    if len(expected) != len(provided):
        return False
    return hmac.compare_digest(expected, provided)


def get_current_user(
    x_user_id: str | None = Header(default=None, alias="x-user-id"),
    store: UserStore = Depends(get_user_store),
) -> UserRecord:
    if not x_user_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorized",
        )
    return store.get_user(x_user_id)
