"""
Supabase client construction shared by the data source and authentication.
"""
from typing import Optional
from urllib.parse import urlparse

from supabase import Client, create_client

from bizdash.config import SUPABASE_URL, SUPABASE_ANON_KEY
from bizdash.errors import BackendConfigError


def get_supabase(access_token: Optional[str] = None) -> Client:
    """Return a Supabase client, scoped to a user's access token when given."""
    url = SUPABASE_URL
    key = SUPABASE_ANON_KEY

    if not url or not key:
        raise BackendConfigError(
            "Missing Supabase config. Set SUPABASE_URL and SUPABASE_ANON_KEY in .env"
        )

    # Catch common copy/paste placeholders early.
    if "YOUR_PROJECT_REF" in url or "YOUR_SUPABASE_ANON_KEY" in key:
        raise BackendConfigError(
            "Supabase config looks like placeholders. Replace SUPABASE_URL and "
            "SUPABASE_ANON_KEY with the values from your Supabase project settings."
        )

    parsed = urlparse(url)
    if not parsed.scheme or not parsed.netloc:
        raise BackendConfigError(
            "Invalid SUPABASE_URL. It should look like https://<project-ref>.supabase.co"
        )

    sb = create_client(url, key)

    # Row level security on the views evaluates auth.uid() from this token.
    if access_token:
        sb.postgrest.auth(access_token)

    return sb
