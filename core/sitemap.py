"""
Sitemap and crawler files.

The sitemap is generated from the manual index rather than kept as a static
file, so new manual pages are listed as soon as they are added to
``content/manual/index.yaml``.

Example usage:
    from core.sitemap import build_sitemap
    xml = build_sitemap("https://pivtools.soton.ac.uk", load_manual_index())
"""

import re
from datetime import date, datetime, timedelta, timezone
from typing import List, Optional, Tuple
from xml.sax.saxutils import escape

from core.models import ManualIndex

SITEMAP_NS = "http://www.sitemaps.org/schemas/sitemap/0.9"


def sitemap_entries(index: ManualIndex) -> List[Tuple[str, str, str]]:
    """(path, changefreq, priority) for every indexable page."""
    entries = [("/", "weekly", "1.0")]
    for section in index.sections:
        priority = "0.8" if section.slug == "" else "0.6"
        entries.append((section.href, "monthly", priority))
    return entries


def build_sitemap(base_url: str, index: ManualIndex, lastmod: Optional[date] = None) -> str:
    """
    Render sitemap.xml.

    Args:
        base_url: Absolute site URL without trailing slash
        index: Manual index providing the page list
        lastmod: Date stamped on every entry (defaults to today, UTC)

    Returns:
        XML document as a string
    """
    day = (lastmod or datetime.now(timezone.utc).date()).isoformat()
    base = base_url.rstrip("/")
    lines = [
        '<?xml version="1.0" encoding="UTF-8"?>',
        f'<urlset xmlns="{SITEMAP_NS}">',
    ]
    for path, changefreq, priority in sitemap_entries(index):
        lines.extend([
            "  <url>",
            f"    <loc>{escape(base + path)}</loc>",
            f"    <lastmod>{day}</lastmod>",
            f"    <changefreq>{changefreq}</changefreq>",
            f"    <priority>{priority}</priority>",
            "  </url>",
        ])
    lines.append("</urlset>")
    return "\n".join(lines) + "\n"


def validate_sitemap_xml(content: str) -> List[str]:
    """
    Basic structural checks on a sitemap document.

    Returns:
        Names of failed checks; empty when valid
    """
    checks = [
        ('<?xml version="1.0"' in content, "XML declaration"),
        ('<urlset' in content, "URL set element"),
        ('</urlset>' in content, "Closing URL set"),
        (content.count('<url>') == content.count('</url>'), "Matching URL tags"),
        (content.count('<loc>') == content.count('</loc>'), "Matching loc tags"),
        (len(re.findall(r'<lastmod>\d{4}-\d{2}-\d{2}</lastmod>', content)) == content.count('<url>'), "Lastmod dates"),
    ]
    return [name for ok, name in checks if not ok]


def build_robots_txt(base_url: str) -> str:
    return "\n".join([
        "User-agent: *",
        "Allow: /",
        "Disallow: /design/",
        "",
        f"Sitemap: {base_url.rstrip('/')}/sitemap.xml",
        "",
    ])


def build_security_txt(contact: str, base_url: str, now: Optional[datetime] = None) -> str:
    """security.txt (RFC 9116) with an Expires field one year ahead."""
    now = now or datetime.now(timezone.utc)
    expires = (now + timedelta(days=365)).replace(microsecond=0)
    return "\n".join([
        f"Contact: {contact}",
        f"Expires: {expires.strftime('%Y-%m-%dT%H:%M:%SZ')}",
        "Preferred-Languages: en",
        f"Canonical: {base_url.rstrip('/')}/.well-known/security.txt",
        "",
    ])
