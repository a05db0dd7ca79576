"""
Manual navigation helpers.

The manual pages share a sticky "Manual Contents" dropdown listing every
section with collapsible subsections. These helpers decide which section is
highlighted, which sections start expanded and which pages are linked as
previous/next.

Example usage:
    from core.content import load_manual_index
    from core.manual import ManualNavigationState

    index = load_manual_index()
    nav = ManualNavigationState(index.sections)
    nav.expand_for("/manual/masking")
"""

from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple

from core.models import MANUAL_ROOT, ManualSection, PageLink


def is_active_section(href: str, pathname: str) -> bool:
    """
    Whether a section link should be highlighted for the current path.

    The overview only matches itself; other sections also match sub-paths.
    """
    pathname = pathname.rstrip('/') or '/'
    if href == MANUAL_ROOT:
        return pathname == MANUAL_ROOT
    return pathname == href or pathname.startswith(href + '/')


def find_section(
    sections: Sequence[ManualSection],
    pathname: str,
    fragment: Optional[str] = None
) -> Optional[ManualSection]:
    """
    Locate the section for a path, or for a ``path#fragment`` subsection link.

    Returns:
        The first matching section, or None
    """
    pathname = pathname.rstrip('/') or '/'
    target = f"{pathname}#{fragment}" if fragment else None
    for section in sections:
        if section.href == pathname:
            return section
        if target and any(sub.href == target for sub in section.subsections):
            return section
    return None


def neighbours(sections: Sequence[ManualSection], slug: str) -> Tuple[Optional[PageLink], Optional[PageLink]]:
    """
    Previous and next pages around ``slug`` in index order.

    The overview is the "previous" page of the first real page.
    """
    hrefs = [section.href for section in sections]
    href = f"{MANUAL_ROOT}/{slug}" if slug else MANUAL_ROOT
    if href not in hrefs:
        return None, None

    position = hrefs.index(href)
    prev_link = None
    next_link = None
    if position > 0:
        prev_section = sections[position - 1]
        prev_link = PageLink(title=prev_section.title, href=prev_section.href)
    if position < len(sections) - 1:
        next_section = sections[position + 1]
        next_link = PageLink(title=next_section.title, href=next_section.href)
    return prev_link, next_link


@dataclass
class ManualNavigationState:
    """Dropdown open flag plus the titles of expanded sections, in expansion order."""
    sections: Sequence[ManualSection]
    is_open: bool = False
    expanded: List[str] = field(default_factory=list)

    def toggle_dropdown(self) -> bool:
        self.is_open = not self.is_open
        return self.is_open

    def close(self) -> None:
        """Close the dropdown (outside click or link followed)."""
        self.is_open = False

    def toggle(self, title: str) -> bool:
        """Expand or collapse a section; returns True when now expanded."""
        if title in self.expanded:
            self.expanded.remove(title)
            return False
        self.expanded.append(title)
        return True

    def is_expanded(self, title: str) -> bool:
        return title in self.expanded

    def expand_for(self, pathname: str, fragment: Optional[str] = None) -> Optional[ManualSection]:
        """Expand the section containing the current page. Repeated calls are no-ops."""
        section = find_section(self.sections, pathname, fragment)
        if section is not None and section.title not in self.expanded:
            self.expanded.append(section.title)
        return section

    def entries(self, pathname: str) -> List[dict]:
        """Template-ready rows: section, active flag, expanded flag."""
        return [
            {
                "section": section,
                "active": is_active_section(section.href, pathname),
                "expanded": self.is_expanded(section.title),
            }
            for section in self.sections
        ]
