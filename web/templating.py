"""
Jinja2 template environment shared by all page routers.

Registers the filters and globals the templates rely on:
- ``get_nonce(request)``: CSP nonce for inline scripts
- ``should_index(request)``: robots meta decision
- ``now()``: current UTC time at render
- ``strftime``: date formatting ("now" means the current UTC time)
- ``truncate_meta`` / ``truncate_title``: SEO-friendly lengths
"""

import json
from datetime import datetime, timezone
from pathlib import Path

from fastapi import Request
from fastapi.templating import Jinja2Templates
from markupsafe import Markup

WEB_DIR = Path(__file__).resolve().parent
TEMPLATES_DIR = WEB_DIR / "templates"
STATIC_DIR = WEB_DIR / "static"

templates = Jinja2Templates(directory=str(TEMPLATES_DIR))


def strftime_filter(value, format_str="%Y"):
    """Format datetime or 'now' string with strftime."""
    if value == "now":
        value = datetime.now(timezone.utc)
    elif isinstance(value, str):
        value = datetime.fromisoformat(value)
    return value.strftime(format_str)


def now_utc() -> datetime:
    """Current UTC time, evaluated on every render."""
    return datetime.now(timezone.utc)


def get_nonce(request):
    """Get CSP nonce from request state."""
    return getattr(request.state, 'nonce', '')


def should_index(request: Request) -> bool:
    """
    Return False for design previews search engines should skip.

    Error pages pass ``noindex`` to the template instead.
    """
    try:
        path = request.url.path if request else ""
        query = request.url.query if request else ""
    except AttributeError:
        return True
    if path.startswith("/design/"):
        return False
    return "design=" not in query


def truncate_meta_filter(value: str, max_chars: int = 155) -> str:
    text = str(value or "").strip()
    if len(text) <= max_chars:
        return text
    # Avoid cutting in the middle of a word
    truncated = text[:max_chars]
    last_space = truncated.rfind(" ")
    if last_space > 0:
        truncated = truncated[:last_space]
    return truncated.rstrip(" .,") + "…"


def truncate_title_filter(value: str, max_chars: int = 60) -> str:
    text = str(value or "").strip()
    if len(text) <= max_chars:
        return text
    return text[: max_chars - 1].rstrip() + "…"


def json_script_filter(value) -> Markup:
    """Serialize data for a <script type="application/json"> block."""
    payload = json.dumps(value, separators=(",", ":"))
    payload = payload.replace("<", "\\u003c").replace(">", "\\u003e").replace("&", "\\u0026")
    return Markup(payload)


templates.env.filters["strftime"] = strftime_filter
templates.env.filters["truncate_meta"] = truncate_meta_filter
templates.env.filters["truncate_title"] = truncate_title_filter
templates.env.filters["json_script"] = json_script_filter
templates.env.globals["get_nonce"] = get_nonce
templates.env.globals["now"] = now_utc
templates.env.globals["should_index"] = should_index
