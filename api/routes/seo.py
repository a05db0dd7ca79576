"""
SEO Routes

Crawler-facing endpoints generated from the content registry and settings.

Example usage:
    GET /sitemap.xml
    GET /robots.txt
    GET /.well-known/security.txt
"""

from fastapi import APIRouter, Request
from fastapi.responses import PlainTextResponse, RedirectResponse, Response

from core.config import settings_from_request
from core.content import load_manual_index
from core.sitemap import build_robots_txt, build_security_txt, build_sitemap

router = APIRouter(tags=["seo"])


@router.get("/sitemap.xml")
async def sitemap(request: Request) -> Response:
    """Sitemap listing the home page and every manual section."""
    xml = build_sitemap(settings_from_request(request).base_url, load_manual_index())
    return Response(content=xml, media_type="application/xml")


@router.get("/robots.txt", response_class=PlainTextResponse)
async def robots_txt(request: Request) -> PlainTextResponse:
    return PlainTextResponse(build_robots_txt(settings_from_request(request).base_url))


@router.get("/.well-known/security.txt", response_class=PlainTextResponse)
async def security_txt(request: Request) -> PlainTextResponse:
    """Serve security.txt for responsible security disclosure (RFC 9116)."""
    settings = settings_from_request(request)
    return PlainTextResponse(build_security_txt(settings.security_contact, settings.base_url))


@router.get("/favicon.ico", include_in_schema=False)
async def favicon_ico_redirect() -> RedirectResponse:
    """Redirect legacy favicon path to the SVG in static assets."""
    return RedirectResponse(url="/static/favicon.svg", status_code=307)
