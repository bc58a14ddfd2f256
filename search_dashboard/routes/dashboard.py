"""Dashboard page routes."""

from fastapi import APIRouter, Depends, Request, Response, status
from fastapi.responses import HTMLResponse, RedirectResponse

from search_dashboard.auth import require_auth_web
from search_dashboard.templating import templates

router = APIRouter(tags=["Dashboard"])


@router.get("/", include_in_schema=False)
async def root():
    return RedirectResponse("/dashboard", status_code=status.HTTP_302_FOUND)


@router.get("/favicon.ico", include_in_schema=False)
async def favicon():
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/dashboard", response_class=HTMLResponse, dependencies=[Depends(require_auth_web)])
async def dashboard(request: Request):
    """Analytics dashboard; charts are filled from /api/stats in the browser."""
    return templates.TemplateResponse(
        request,
        "dashboard.html",
        {"user": getattr(request.state, "user", None)},
    )
