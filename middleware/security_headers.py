"""
Security Headers Middleware

Attaches the site's fixed security header policy to every HTTP response and
generates a fresh CSP nonce per document request. Templates read the nonce
via ``get_nonce(request)`` and stamp it on inline ``<script>`` tags.

The policy has a single branch: production adds HSTS and
``upgrade-insecure-requests``; development relaxes script-src with
``'unsafe-eval'`` and allows localhost websockets for live reload.

Example usage:
    app.add_middleware(SecurityHeadersMiddleware, production=True)
"""

import re
import secrets
from typing import Dict, List, Optional

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

PERMISSIONS_POLICY = ", ".join([
    "camera=()",
    "microphone=()",
    "geolocation=()",
    "payment=()",
    "usb=()",
    "magnetometer=()",
    "gyroscope=()",
    "accelerometer=()",
])

HSTS_VALUE = "max-age=31536000; includeSubDomains"

# Requests for assets skip nonce generation; they never carry inline scripts
ASSET_PATH_RE = re.compile(r"^/(static/|favicon\.ico$)|\.(?:svg|png|jpe?g|gif|webp|ico|css|js|woff2?)$", re.IGNORECASE)

NONCE_BYTES = 16


def generate_nonce() -> str:
    """Return a URL-safe random token for one response."""
    return secrets.token_urlsafe(NONCE_BYTES)


def build_csp(nonce: Optional[str] = None, production: bool = True) -> str:
    """
    Build the Content-Security-Policy value.

    Args:
        nonce: Per-request nonce allowed for inline scripts, if any
        production: Selects the production or development directive set

    Returns:
        Directives joined with "; "

    Example:
        >>> "script-src 'self' 'nonce-abc'" in build_csp("abc")
        True
    """
    script_src = ["'self'"]
    if nonce:
        script_src.append(f"'nonce-{nonce}'")
    if not production:
        script_src.append("'unsafe-eval'")

    connect_src = "'self'" if production else "'self' ws://localhost:* wss://localhost:*"

    directives: List[str] = [
        "default-src 'self'",
        f"script-src {' '.join(script_src)}",
        "style-src 'self' 'unsafe-inline'",
        "img-src 'self' data: blob:",
        "font-src 'self'",
        f"connect-src {connect_src}",
        "frame-ancestors 'none'",
        "base-uri 'self'",
        "form-action 'self'",
        "object-src 'none'",
        "worker-src 'self' blob:",
        "child-src 'self'",
        "frame-src 'none'",
        "manifest-src 'self'",
    ]
    if production:
        directives.append("upgrade-insecure-requests")

    return "; ".join(directives)


def build_security_headers(nonce: Optional[str] = None, production: bool = True) -> Dict[str, str]:
    """
    Full header set for one response.

    Example:
        >>> headers = build_security_headers(production=False)
        >>> "Strict-Transport-Security" in headers
        False
    """
    headers = {
        "Content-Security-Policy": build_csp(nonce, production),
        "X-Frame-Options": "DENY",
        "X-Content-Type-Options": "nosniff",
        "Referrer-Policy": "strict-origin-when-cross-origin",
        "Permissions-Policy": PERMISSIONS_POLICY,
        "X-DNS-Prefetch-Control": "on",
        "X-XSS-Protection": "0",
    }
    if production:
        headers["Strict-Transport-Security"] = HSTS_VALUE
    return headers


def is_asset_request(path: str) -> bool:
    return bool(ASSET_PATH_RE.search(path))


def is_prefetch_request(request: Request) -> bool:
    """Speculative prefetches are not rendered, so they get no nonce."""
    purpose = request.headers.get("purpose", "") or request.headers.get("sec-purpose", "")
    return "prefetch" in purpose.lower()


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """
    Middleware to add security headers to all HTTP responses.

    Implements:
    - Content Security Policy with a per-request script nonce
    - Clickjacking protection (X-Frame-Options, frame-ancestors)
    - MIME sniffing protection
    - Referrer and permissions policies
    - Strict Transport Security (production only)

    Example:
        app.add_middleware(SecurityHeadersMiddleware, production=settings.is_production)
    """

    def __init__(self, app, production: bool = True):
        super().__init__(app)
        self.production = production

    async def dispatch(self, request: Request, call_next):
        if is_asset_request(request.url.path) or is_prefetch_request(request):
            nonce = None
        else:
            nonce = generate_nonce()
        request.state.nonce = nonce or ''

        response = await call_next(request)

        for name, value in build_security_headers(nonce, self.production).items():
            response.headers[name] = value

        return response
