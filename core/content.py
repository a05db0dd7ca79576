"""
Content registry for the PIVTOOLS site.

Description tables (navigation, footer, home sections, authors, manual index)
live as YAML under ``content/`` and manual pages as Markdown under
``content/manual/``. Everything is validated into ``core.models`` and cached
for the life of the process; ``reload_content()`` clears the caches.

Example usage:
    from core.content import load_site, load_manual_page

    site = load_site()
    page = load_manual_page("quick-start")
    print(page.title, page.anchors)
"""

from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml
from pydantic import ValidationError

from core.config import get_settings
from core.errors import ContentNotFoundError, ContentValidationError
from core.logging import get_logger
from core.manual import neighbours
from core.markdown import render_markdown, split_front_matter
from core.models import HomeContent, ManualIndex, ManualPage, SiteContent

logger = get_logger(__name__)

SLUG_CHARS = set("abcdefghijklmnopqrstuvwxyz0123456789-")

_content_dir: Optional[Path] = None


def set_content_dir(path: Optional[Path]) -> None:
    """Point the registry at another content root (None restores the configured one)."""
    global _content_dir
    _content_dir = Path(path) if path is not None else None
    reload_content()


def content_dir() -> Path:
    return _content_dir or get_settings().content_dir


def _read_yaml(relative: str) -> Dict[str, Any]:
    path = content_dir() / relative
    if not path.exists():
        raise ContentNotFoundError(relative, kind="content file")
    with open(path, 'r', encoding='utf-8') as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ContentValidationError(relative, [{"loc": (), "msg": "top level must be a mapping"}])
    return data


def _validate(model, data: Dict[str, Any], source: str):
    try:
        return model.model_validate(data)
    except ValidationError as e:
        raise ContentValidationError(source, e.errors(include_url=False)) from e


@lru_cache(maxsize=1)
def load_site() -> SiteContent:
    """Site metadata, navigation, footer and design picker options."""
    site = _validate(SiteContent, _read_yaml("site.yaml"), "site.yaml")
    logger.debug("Loaded site content", extra={"nav_items": len(site.navigation)})
    return site


@lru_cache(maxsize=1)
def load_home() -> HomeContent:
    """Copy and tables for the home page designs."""
    return _validate(HomeContent, _read_yaml("home.yaml"), "home.yaml")


@lru_cache(maxsize=1)
def load_manual_index() -> ManualIndex:
    """Manual sections, subsections and overview cards."""
    index = _validate(ManualIndex, _read_yaml("manual/index.yaml"), "manual/index.yaml")
    logger.debug("Loaded manual index", extra={"sections": len(index.sections)})
    return index


def is_valid_slug(slug: str) -> bool:
    return bool(slug) and set(slug) <= SLUG_CHARS and not slug.startswith('-')


@lru_cache(maxsize=64)
def load_manual_page(slug: str) -> ManualPage:
    """
    Render one manual page.

    Args:
        slug: Page slug, e.g. "piv-processing"

    Returns:
        ManualPage with rendered HTML, heading anchors and neighbour links

    Raises:
        ContentNotFoundError: Slug is not in the manual index or has no file
    """
    index = load_manual_index()
    section = next((s for s in index.pages if s.slug == slug), None) if is_valid_slug(slug) else None
    if section is None:
        raise ContentNotFoundError(slug, kind="manual page")

    relative = f"manual/{slug}.md"
    path = content_dir() / relative
    if not path.exists():
        raise ContentNotFoundError(relative, kind="content file")

    with open(path, 'r', encoding='utf-8') as f:
        front, body = split_front_matter(f.read())

    meta = yaml.safe_load(front) if front else {}
    if not isinstance(meta, dict):
        raise ContentValidationError(relative, [{"loc": ("front_matter",), "msg": "must be a mapping"}])

    rendered = render_markdown(body)
    prev_link, next_link = neighbours(index.sections, slug)

    page = _validate(
        ManualPage,
        {
            "slug": slug,
            "title": meta.get("title") or rendered.title or section.title,
            "summary": meta.get("summary", ""),
            "html": rendered.html,
            "anchors": rendered.anchors,
            "prev": prev_link,
            "next": next_link,
        },
        relative,
    )
    logger.debug("Rendered manual page", extra={"slug": slug, "anchors": len(page.anchors)})
    return page


def check_content() -> List[str]:
    """
    Load every content file and cross-check the manual index.

    Returns:
        Human-readable problems; empty when all content is consistent
    """
    problems: List[str] = []
    loaders = (("site.yaml", load_site), ("home.yaml", load_home), ("manual/index.yaml", load_manual_index))
    for name, loader in loaders:
        try:
            loader()
        except (ContentNotFoundError, ContentValidationError) as e:
            problems.append(f"{name}: {e}")

    if problems:
        return problems

    for section in load_manual_index().pages:
        try:
            page = load_manual_page(section.slug)
        except (ContentNotFoundError, ContentValidationError) as e:
            problems.append(f"{section.href}: {e}")
            continue
        for sub in section.subsections:
            if sub.anchor not in page.anchors:
                problems.append(f"{sub.href}: anchor '{sub.anchor}' not found in page")

    return problems


def reload_content() -> None:
    """Drop cached content so the next request re-reads the files."""
    load_site.cache_clear()
    load_home.cache_clear()
    load_manual_index.cache_clear()
    load_manual_page.cache_clear()
