"""Sign-in routes: email/password, Discord OAuth, sign-out.

The session token lives in an HTTP-only cookie. Discord's `state` parameter
is checked against a short-lived cookie set when the flow starts.
"""

import logging
import secrets

from fastapi import APIRouter, Depends, Form, Request
from fastapi.responses import RedirectResponse

from storefront.auth.gateway import AuthGateway, AuthResult, Identity
from storefront.config import Settings
from storefront.web.deps import get_auth, get_current_user, get_settings, session_token
from storefront.web.rendering import redirect_with_notice, render

logger = logging.getLogger(__name__)

router = APIRouter()

STATE_COOKIE = "oauth_state"
NEXT_COOKIE = "oauth_next"
STATE_TTL_SECONDS = 600


def safe_next(target: str | None, default: str = "/") -> str:
    """Only same-site absolute paths are followed after sign-in."""
    if target and target.startswith("/") and not target.startswith("//"):
        return target
    return default


def _signed_in(result: AuthResult, target: str, settings: Settings) -> RedirectResponse:
    response = RedirectResponse(target, status_code=303)
    response.set_cookie(
        settings.session_cookie_name,
        result.token,
        max_age=settings.session_ttl_hours * 3600,
        httponly=True,
        samesite="lax",
        secure=settings.app_env == "production",
    )
    return response


@router.get("/login")
async def login_page(
    request: Request,
    next: str = "/admin",
    user: Identity | None = Depends(get_current_user),
):
    return render(request, "login.html", user=user, next=safe_next(next, "/admin"))


@router.post("/login")
async def login(
    email: str = Form(""),
    password: str = Form(""),
    next: str = Form("/admin"),
    auth: AuthGateway = Depends(get_auth),
    settings: Settings = Depends(get_settings),
):
    target = safe_next(next, "/admin")
    result = await auth.sign_in(email, password)
    if not result.ok:
        return redirect_with_notice("/auth/login", result.error, level="error", next=target)
    return _signed_in(result, target, settings)


@router.post("/signup")
async def signup(
    email: str = Form(""),
    password: str = Form(""),
    next: str = Form("/admin"),
    auth: AuthGateway = Depends(get_auth),
    settings: Settings = Depends(get_settings),
):
    target = safe_next(next, "/admin")
    result = await auth.sign_up(email, password)
    if not result.ok:
        return redirect_with_notice("/auth/login", result.error, level="error", next=target)
    return _signed_in(result, target, settings)


@router.post("/logout")
async def logout(
    request: Request,
    next: str = Form("/"),
    auth: AuthGateway = Depends(get_auth),
    settings: Settings = Depends(get_settings),
):
    await auth.sign_out(session_token(request))
    response = redirect_with_notice(safe_next(next), "Signed out", level="info")
    response.delete_cookie(settings.session_cookie_name)
    return response


# --- Discord ---


@router.get("/discord")
async def discord_login(
    next: str = "/reviews",
    auth: AuthGateway = Depends(get_auth),
):
    target = safe_next(next, "/reviews")
    state = secrets.token_urlsafe(16)
    url = auth.external_sign_in_url(state)
    if url is None:
        return redirect_with_notice(target, "Discord login is not configured", level="error")

    response = RedirectResponse(url, status_code=303)
    response.set_cookie(STATE_COOKIE, state, max_age=STATE_TTL_SECONDS, httponly=True, samesite="lax")
    response.set_cookie(NEXT_COOKIE, target, max_age=STATE_TTL_SECONDS, httponly=True, samesite="lax")
    return response


@router.get("/discord/callback")
async def discord_callback(
    request: Request,
    code: str = "",
    state: str = "",
    auth: AuthGateway = Depends(get_auth),
    settings: Settings = Depends(get_settings),
):
    target = safe_next(request.cookies.get(NEXT_COOKIE), "/reviews")
    expected_state = request.cookies.get(STATE_COOKIE)

    if not code or not expected_state or not secrets.compare_digest(state, expected_state):
        logger.warning("Discord callback rejected: missing code or state mismatch")
        response = redirect_with_notice(target, "Discord sign-in failed", level="error")
    else:
        result = await auth.complete_external_sign_in(code)
        if result.ok:
            response = _signed_in(result, target, settings)
        else:
            response = redirect_with_notice(target, result.error, level="error")

    response.delete_cookie(STATE_COOKIE)
    response.delete_cookie(NEXT_COOKIE)
    return response
