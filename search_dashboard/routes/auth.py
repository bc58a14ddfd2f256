import logging
from typing import Optional

from fastapi import APIRouter, Form, Request, status
from fastapi.responses import HTMLResponse, RedirectResponse

from search_dashboard.auth import (
    LOGIN_PATH,
    end_session,
    get_authenticator,
    is_authenticated,
    load_session,
    start_session,
)
from search_dashboard.config import settings
from search_dashboard.middleware.rate_limit import limiter
from search_dashboard.templating import templates

# Initialize logger
logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin", tags=["Auth"])

DEFAULT_LANDING = "/dashboard"
INVALID_CREDENTIALS = "Invalid email or password"


def safe_next(next_path: Optional[str]) -> str:
    """Only local absolute paths are followed after login."""
    if not next_path or not next_path.startswith("/") or next_path.startswith("//") or "\\" in next_path:
        return DEFAULT_LANDING
    if next_path.startswith(LOGIN_PATH):
        return DEFAULT_LANDING
    return next_path


@router.get("/login", response_class=HTMLResponse)
async def get_login(request: Request, next: Optional[str] = None):
    if is_authenticated(await load_session(request)):
        return RedirectResponse(safe_next(next), status_code=status.HTTP_303_SEE_OTHER)
    return templates.TemplateResponse(request, "login.html", {"next": safe_next(next)})


@router.post("/login")
@limiter.limit(settings.rate_limit_login)
async def post_login(
    request: Request,
    email: str = Form(""),
    password: str = Form(""),
    next: str = Form(DEFAULT_LANDING),
):
    """
    Verify the submitted credentials and start an authenticated session.

    Wrong email and wrong password produce the same response.
    """
    authenticator = get_authenticator(request)
    principal = None
    if authenticator is None:
        logger.error("Login attempted before the admin identity was initialized")
    else:
        principal = await authenticator.authenticate(email, password)

    if principal is None:
        return templates.TemplateResponse(
            request,
            "login.html",
            {"error": INVALID_CREDENTIALS, "email": email, "next": safe_next(next)},
            status_code=status.HTTP_401_UNAUTHORIZED,
        )

    await start_session(request, principal)
    logger.info(f"Admin logged in: {principal.email}")
    return RedirectResponse(safe_next(next), status_code=status.HTTP_303_SEE_OTHER)


@router.get("/logout")
async def logout(request: Request):
    await end_session(request)
    return RedirectResponse(LOGIN_PATH, status_code=status.HTTP_303_SEE_OTHER)
