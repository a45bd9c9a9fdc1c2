"""HMAC-signed browser session cookies with TTL.

Cookie format: ``{session_id}:{expires_unix}:{hex_hmac}``

The cookie only names a server-side session; tokens never leave the server.
Rotating ``session_secret`` invalidates every outstanding cookie.
"""

import hashlib
import hmac
import secrets
import time

__all__ = ["COOKIE_NAME", "new_session_id", "sign_session", "verify_session"]

COOKIE_NAME = "clinicdesk_session"


def new_session_id() -> str:
    return secrets.token_urlsafe(24)


def sign_session(secret: str, session_id: str, ttl_hours: int = 24) -> str:
    """Issue a cookie value for *session_id* that expires after *ttl_hours*."""
    expires = int(time.time()) + ttl_hours * 3600
    sig = _sign(secret, f"{session_id}:{expires}")
    return f"{session_id}:{expires}:{sig}"


def verify_session(cookie: str, secret: str) -> str | None:
    """Return the session id if *cookie* is authentic and unexpired."""
    parts = cookie.split(":")
    if len(parts) != 3:
        return None

    session_id, expires_str, sig = parts
    try:
        expires = int(expires_str)
    except ValueError:
        return None

    if time.time() > expires:
        return None

    expected = _sign(secret, f"{session_id}:{expires_str}")
    if not hmac.compare_digest(sig, expected):
        return None
    return session_id


def _sign(key: str, message: str) -> str:
    return hmac.new(key.encode(), message.encode(), hashlib.sha256).hexdigest()
