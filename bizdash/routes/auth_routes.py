"""
Authentication routes: login, logout.
Credentials are checked by Supabase Auth.
"""
from fastapi import APIRouter, Request, Form
from fastapi.responses import RedirectResponse, HTMLResponse

from bizdash.auth import sign_in, serialize_session
from bizdash.config import SESSION_COOKIE_NAME, SESSION_MAX_AGE
from bizdash.dependencies import get_current_user
from bizdash.templates_config import templates

router = APIRouter()

DEFAULT_LANDING = "/profit"


def _safe_next(next_url: str) -> str:
    # Only same-site paths, never //host or absolute URLs
    if next_url and next_url.startswith("/") and not next_url.startswith("//"):
        return next_url
    return DEFAULT_LANDING


@router.get("/login", response_class=HTMLResponse)
async def login_page(request: Request, next: str = DEFAULT_LANDING):
    """Display login page."""
    # If already logged in, go straight to the dashboard
    user = get_current_user(request)
    if user:
        return RedirectResponse(url=_safe_next(next), status_code=302)

    return templates.TemplateResponse(
        request, "login.html", {"error": None, "next": _safe_next(next)}
    )


@router.post("/login", response_class=HTMLResponse)
async def login_submit(request: Request, email: str = Form(...), password: str = Form(...),
                       next: str = Form(DEFAULT_LANDING)):
    """Handle login form submission."""
    result = sign_in(email, password)

    if not result:
        return templates.TemplateResponse(
            request, "login.html",
            {"error": "Invalid email or password", "next": _safe_next(next)},
            status_code=401
        )

    response = RedirectResponse(url=_safe_next(next), status_code=302)
    response.set_cookie(
        key=SESSION_COOKIE_NAME,
        value=serialize_session(result["access_token"]),
        httponly=True,
        samesite="lax",
        max_age=SESSION_MAX_AGE
    )
    return response


@router.get("/logout")
async def logout(request: Request):
    """Log out the current user."""
    response = RedirectResponse(url="/login", status_code=302)
    response.delete_cookie(SESSION_COOKIE_NAME)
    return response
