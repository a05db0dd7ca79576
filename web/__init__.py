"""
PIVTOOLS Site Web Module

Jinja2 templates, static assets (CSS, the design selector script, favicon)
and the shared template environment used by the page routers.

Example usage:
    from web.templating import templates, STATIC_DIR
"""

__version__ = "0.2.0"
__all__ = ["templating"]
