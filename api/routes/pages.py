"""
Page Routes

HTML pages of the PIVTOOLS site: the home page (four design variants), the
design switch endpoints and the manual viewer.

Example usage:
    GET /                      - Home page in the stored or default design
    GET /?design=C             - Preview design C without storing it
    GET /design/B              - Store design B and return home
    GET /design/B/next         - Store the design after B (C) and return home
    GET /manual                - Manual overview
    GET /manual/piv-processing - Manual page
"""

from typing import Optional

from fastapi import APIRouter, HTTPException, Request
from fastapi.responses import HTMLResponse, RedirectResponse

from core.config import settings_from_request
from core.content import load_home, load_manual_index, load_manual_page, load_site
from core.design import (
    DESIGN_STORAGE_KEY,
    CycleDirection,
    DesignSelector,
    cycle_design,
    parse_design,
    resolve_design,
)
from core.errors import ContentNotFoundError
from core.logging import get_logger, log_with_context
from core.manual import ManualNavigationState
from web.templating import templates

logger = get_logger(__name__)

router = APIRouter(tags=["pages"])

# One year, matching the browser-side localStorage persistence
DESIGN_COOKIE_MAX_AGE = 365 * 24 * 3600


def _design_redirect(design, request: Request) -> RedirectResponse:
    response = RedirectResponse(url="/", status_code=303)
    response.set_cookie(
        DESIGN_STORAGE_KEY,
        design.value,
        max_age=DESIGN_COOKIE_MAX_AGE,
        samesite="lax",
        secure=settings_from_request(request).is_production,
        httponly=False,
    )
    log_with_context(logger, "info", "Design selected", request=request, design=design.value)
    return response


def _manual_navigation(request: Request) -> ManualNavigationState:
    index = load_manual_index()
    nav = ManualNavigationState(index.sections)
    nav.expand_for(request.url.path)
    return nav


@router.api_route("/", methods=["GET", "HEAD"], response_class=HTMLResponse)
async def home_page(request: Request, design: Optional[str] = None) -> HTMLResponse:
    """
    Home page rendered in the selected design variant.

    The ``design`` query parameter previews a variant; otherwise the
    ``pivtools-design`` cookie decides, falling back to design A.
    """
    current = resolve_design(design, request.cookies.get(DESIGN_STORAGE_KEY))
    selector = DesignSelector(current=current)
    home = load_home()

    return templates.TemplateResponse(
        request,
        "home.html",
        {
            "site": load_site(),
            "home": home,
            "design": current,
            "hero": home.heroes[current],
            "keymap": selector.keymap(),
            "active_nav": "/",
        },
    )


@router.get("/design/{variant}", response_class=RedirectResponse)
async def select_design(request: Request, variant: str) -> RedirectResponse:
    """Store a design choice in the cookie and return to the home page."""
    design = parse_design(variant)
    if design is None:
        raise HTTPException(status_code=404, detail=f"Unknown design '{variant}'")
    return _design_redirect(design, request)


@router.get("/design/{variant}/{direction}", response_class=RedirectResponse)
async def cycle_design_page(request: Request, variant: str, direction: str) -> RedirectResponse:
    """Cycle from ``variant`` in the given direction (next/prev), wrapping around."""
    design = parse_design(variant)
    if design is None:
        raise HTTPException(status_code=404, detail=f"Unknown design '{variant}'")
    try:
        step = CycleDirection(direction.lower())
    except ValueError:
        raise HTTPException(status_code=404, detail=f"Unknown direction '{direction}'")
    return _design_redirect(cycle_design(design, step), request)


@router.api_route("/manual", methods=["GET", "HEAD"], response_class=HTMLResponse)
async def manual_index_page(request: Request) -> HTMLResponse:
    """Manual overview with section cards."""
    return templates.TemplateResponse(
        request,
        "manual/index.html",
        {
            "site": load_site(),
            "index": load_manual_index(),
            "manual_nav": _manual_navigation(request),
            "active_nav": "/manual",
        },
    )


@router.api_route("/manual/{slug}", methods=["GET", "HEAD"], response_class=HTMLResponse)
async def manual_page(request: Request, slug: str) -> HTMLResponse:
    """
    Render one manual page.

    Raises:
        HTTPException: 404 when the slug is not in the manual index
    """
    try:
        page = load_manual_page(slug)
    except ContentNotFoundError as e:
        log_with_context(logger, "warning", "Manual page not found", request=request, slug=slug)
        raise HTTPException(status_code=404, detail=str(e))

    return templates.TemplateResponse(
        request,
        "manual/page.html",
        {
            "site": load_site(),
            "page": page,
            "manual_nav": _manual_navigation(request),
            "active_nav": "/manual",
        },
    )
