"""
PIVTOOLS Site FastAPI Application

Marketing and documentation website for PIVTOOLS, the open-source Particle
Image Velocimetry platform. Serves the animated home page (four design
variants), the manual viewer and crawler files, with a strict security
header policy on every response.

Example usage:
    # Start the server
    uvicorn app:app --host 0.0.0.0 --port 8000 --reload

    # Health check
    curl http://localhost:8000/health
"""

from typing import Any, Dict, Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, Response
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.httpsredirect import HTTPSRedirectMiddleware

from api.routes.pages import router as pages_router
from api.routes.seo import router as seo_router
from core.config import SiteSettings, get_settings
from core.content import load_site, set_content_dir
from core.errors import ERROR_TITLES, error_response, wants_json
from core.logging import RequestLoggingMiddleware, get_logger, log_with_context, setup_logging
from middleware.security_headers import SecurityHeadersMiddleware, build_security_headers
from web.templating import STATIC_DIR, templates

SERVICE_NAME = "pivtools-site"
VERSION = "0.2.0"

logger = get_logger(__name__)


def _render_error(request: Request, status_code: int, detail: str) -> Response:
    """HTML error page, or JSON for clients that prefer it."""
    if wants_json(request.headers.get("accept")):
        return error_response(status_code, detail)

    try:
        site = load_site()
    except Exception:
        # Error pages must render even when content is broken
        logger.exception("Site content unavailable while rendering error page")
        site = None

    return templates.TemplateResponse(
        request,
        "error.html",
        {
            "site": site,
            "status_code": status_code,
            "title": ERROR_TITLES.get(status_code, "Error"),
            "detail": detail if status_code < 500 else "",
            "active_nav": None,
            "noindex": True,
        },
        status_code=status_code,
    )


def create_app(settings: Optional[SiteSettings] = None) -> FastAPI:
    """
    Create and configure the FastAPI application instance.

    Args:
        settings: Explicit settings (tests); defaults to the environment

    Returns:
        FastAPI: Configured application

    Example:
        >>> app = create_app(SiteSettings(environment="development", force_https=False))
    """
    settings = settings or get_settings()

    setup_logging(level=settings.log_level, format_type=settings.log_format)
    set_content_dir(settings.content_dir)

    app = FastAPI(
        title="PIVTOOLS",
        description="Website and manual for the PIVTOOLS PIV processing platform",
        version=VERSION,
        docs_url=None,
        redoc_url=None,
        openapi_tags=[
            {"name": "pages", "description": "Home page, design variants and manual"},
            {"name": "seo", "description": "Sitemap, robots.txt and security.txt"},
            {"name": "health", "description": "System health and status endpoints"},
        ],
    )
    app.state.settings = settings

    # Enforce HTTPS redirects outside development
    if settings.force_https and settings.is_production:
        app.add_middleware(HTTPSRedirectMiddleware)

    app.add_middleware(SecurityHeadersMiddleware, production=settings.is_production)
    app.add_middleware(RequestLoggingMiddleware)

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> Response:
        if exc.status_code == 404:
            log_with_context(logger, "info", "Not found", request=request, detail=str(exc.detail))
        response = _render_error(request, exc.status_code, str(exc.detail))
        for name, value in (exc.headers or {}).items():
            response.headers[name] = value
        return response

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception) -> Response:
        log_with_context(logger, "error", f"Unhandled error: {exc}", request=request, error_type=type(exc).__name__)
        logger.error("Traceback for unhandled error", exc_info=exc)
        response = _render_error(request, 500, "")
        # Runs outside the middleware stack, so headers are applied here
        nonce = getattr(request.state, "nonce", "") or None
        for name, value in build_security_headers(nonce, settings.is_production).items():
            response.headers[name] = value
        return response

    @app.get("/health", tags=["health"])
    async def health_check() -> JSONResponse:
        """
        Health check endpoint for monitoring and load balancer readiness.

        Example:
            >>> # GET /health
            >>> {"status": "healthy", "service": "pivtools-site", "version": "0.2.0", "environment": "production"}
        """
        health_data: Dict[str, Any] = {
            "status": "healthy",
            "service": SERVICE_NAME,
            "version": VERSION,
            "environment": settings.environment,
        }
        return JSONResponse(content=health_data, status_code=200)

    app.include_router(pages_router)
    app.include_router(seo_router)

    app.mount("/static", StaticFiles(directory=str(STATIC_DIR)), name="static")

    logger.info(
        "Application configured",
        extra={"environment": settings.environment, "content_dir": str(settings.content_dir)},
    )
    return app


# Create the main app instance
app = create_app()
