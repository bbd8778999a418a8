"""
Authentication helpers. Credentials and sessions live in Supabase Auth; this
module only signs in through it, keeps the access token in a signed cookie and
asks Supabase who the token belongs to.
"""
import logging
from typing import Optional

from itsdangerous import URLSafeTimedSerializer

from bizdash.config import SECRET_KEY, SESSION_MAX_AGE
from bizdash.errors import BackendConfigError
from bizdash.supabase_client import get_supabase

logger = logging.getLogger(__name__)


def _user_dict(user) -> dict:
    metadata = getattr(user, "user_metadata", None) or {}
    return {
        "id": str(user.id),
        "email": user.email,
        "name": metadata.get("full_name") or metadata.get("name") or user.email,
    }


def sign_in(email: str, password: str) -> Optional[dict]:
    """
    Sign in with Supabase Auth.
    Returns {"access_token", "user"} or None if the credentials are rejected.
    """
    try:
        client = get_supabase()
    except BackendConfigError as exc:
        logger.error("Sign-in unavailable: %s", exc)
        return None

    try:
        response = client.auth.sign_in_with_password({
            "email": email.lower().strip(),
            "password": password,
        })
    except Exception as exc:
        logger.info("Sign-in rejected for %s: %s", email, exc)
        return None

    if not response.session or not response.user:
        return None
    return {
        "access_token": response.session.access_token,
        "user": _user_dict(response.user),
    }


def validate_session(access_token: str) -> Optional[dict]:
    """
    Validate an access token with Supabase Auth and return the user.
    Returns None if the token is invalid or expired.
    """
    if not access_token:
        return None

    try:
        client = get_supabase()
    except BackendConfigError as exc:
        logger.error("Cannot validate session: %s", exc)
        return None

    try:
        response = client.auth.get_user(access_token)
    except Exception as exc:
        logger.info("Session validation failed: %s", exc)
        return None

    if not response or not response.user:
        return None
    user = _user_dict(response.user)
    user["access_token"] = access_token
    return user


def get_serializer():
    """Get the URL-safe serializer for session cookies."""
    return URLSafeTimedSerializer(SECRET_KEY)


def serialize_session(access_token: str) -> str:
    """Serialize an access token for cookie storage."""
    serializer = get_serializer()
    return serializer.dumps(access_token)


def deserialize_session(token: str) -> Optional[str]:
    """Deserialize an access token from the cookie."""
    try:
        serializer = get_serializer()
        return serializer.loads(token, max_age=SESSION_MAX_AGE)
    except Exception:
        return None
