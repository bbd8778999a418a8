"""
Common dependencies for route handlers.
"""
from typing import Optional
from urllib.parse import quote

from fastapi import Request
from fastapi.responses import RedirectResponse

from bizdash.auth import validate_session, deserialize_session
from bizdash.config import SESSION_COOKIE_NAME, AUTH_ENABLED
from bizdash.sources import get_transaction_source, TransactionSource

# Used for every request when AUTH_ENABLED is off (local SQLite development)
LOCAL_USER = {"id": "local", "email": "local@localhost", "name": "Local User", "access_token": None}


def get_current_user(request: Request) -> Optional[dict]:
    """
    Get the current signed-in user from the session cookie.
    Returns user dict or None if not authenticated.
    """
    if not AUTH_ENABLED:
        return LOCAL_USER

    token = request.cookies.get(SESSION_COOKIE_NAME)
    if not token:
        return None

    access_token = deserialize_session(token)
    if not access_token:
        return None

    return validate_session(access_token)


def auth_redirect(request: Request):
    """
    Check auth and redirect to login if not authenticated.
    Use this in route handlers for page redirects.
    """
    user = get_current_user(request)
    if not user:
        next_url = request.url.path
        if request.url.query:
            next_url += "?" + request.url.query
        return RedirectResponse(url=f"/login?next={quote(next_url, safe='/')}", status_code=302)
    return user


def source_for_user(user: dict) -> TransactionSource:
    """Transaction source acting with the user's access token."""
    return get_transaction_source(user.get("access_token"))
