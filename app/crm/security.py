import secrets
from flask import session, Request


def ensure_csrf_token() -> str:
    """Ensure a CSRF token exists in the session and return it."""
    token = session.get("csrf_token")
    if not token:
        token = secrets.token_urlsafe(32)
        session["csrf_token"] = token
    return token


def validate_csrf(req: Request) -> bool:
    """Validate the CSRF token posted by a CRM form (hidden field or header)."""
    token = req.headers.get("X-CSRF-Token") or req.form.get("csrf_token")
    return bool(token and secrets.compare_digest(token, session.get("csrf_token") or ""))


def is_confirmed(req: Request) -> bool:
    """
    Destructive row actions carry confirmed=1 only when the staff member
    accepted the browser confirmation prompt.
    """
    return (req.form.get("confirmed") or "").strip() == "1"
