"""
Minimal Markdown renderer for manual pages.

Supports the subset the manual uses: headings with optional explicit anchors
(``## Installation {#installation}``), paragraphs, bullet and numbered lists,
fenced code blocks, tables, ``>`` callouts and inline code, bold, italic and
links. Text is HTML-escaped before inline markup is applied, so content files
cannot inject markup.

Example usage:
    >>> from core.markdown import render_markdown
    >>> result = render_markdown("## Install {#installation}\\n\\nRun `pip install pivtools`.")
    >>> result.anchors
    ['installation']
"""

import html
import re
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

HEADING_RE = re.compile(r'^(#{1,4})\s+(.*?)(?:\s+\{#([a-z0-9-]+)\})?\s*$')
ORDERED_RE = re.compile(r'^\d+[.)]\s+')
FENCE_RE = re.compile(r'^```\s*([\w+-]*)\s*$')
TABLE_SEPARATOR_RE = re.compile(r'^\|?\s*:?-{3,}:?\s*(\|\s*:?-{3,}:?\s*)*\|?$')

BOLD_RE = re.compile(r'\*\*(.+?)\*\*')
ITALIC_RE = re.compile(r'(?<![\*\w])\*(?!\s)(.+?)(?<!\s)\*(?![\*\w])')
LINK_RE = re.compile(r'\[([^\]]+)\]\(([^)\s]+)\)')

SAFE_LINK_PREFIXES = ('http://', 'https://', '/', '#', 'mailto:')


@dataclass
class Heading:
    level: int
    text: str
    anchor: str


@dataclass
class RenderedMarkdown:
    html: str
    title: Optional[str] = None
    headings: List[Heading] = field(default_factory=list)

    @property
    def anchors(self) -> List[str]:
        return [heading.anchor for heading in self.headings]


def slugify(text: str) -> str:
    """Lowercase, hyphen-separated anchor id for a heading."""
    slug = re.sub(r'[^a-z0-9]+', '-', text.lower())
    return slug.strip('-') or 'section'


def _render_link(match: re.Match) -> str:
    label, href = match.group(1), match.group(2)
    if not href.startswith(SAFE_LINK_PREFIXES):
        return label
    if href.startswith('http'):
        return f'<a href="{href}" target="_blank" rel="noopener noreferrer">{label}</a>'
    return f'<a href="{href}">{label}</a>'


def render_inline(text: str) -> str:
    """Escape text and apply inline code, bold, italic and links."""
    parts = text.split('`')
    rendered = []
    for i, part in enumerate(parts):
        # Odd segments sit between backticks; an unmatched trailing backtick is literal text
        if i % 2 == 1 and i < len(parts) - 1:
            rendered.append(f'<code>{html.escape(part)}</code>')
            continue
        if i % 2 == 1:
            part = '`' + part
        content = html.escape(part)
        content = BOLD_RE.sub(r'<strong>\1</strong>', content)
        content = ITALIC_RE.sub(r'<em>\1</em>', content)
        content = LINK_RE.sub(_render_link, content)
        rendered.append(content)
    return ''.join(rendered)


def _split_row(line: str) -> List[str]:
    row = line.strip()
    if row.startswith('|'):
        row = row[1:]
    if row.endswith('|'):
        row = row[:-1]

    # Pipes inside inline code belong to the cell
    cells = []
    current = []
    in_code = False
    for char in row:
        if char == '`':
            in_code = not in_code
        if char == '|' and not in_code:
            cells.append(''.join(current).strip())
            current = []
            continue
        current.append(char)
    cells.append(''.join(current).strip())
    return cells


def _render_table(rows: List[str]) -> List[str]:
    header = _split_row(rows[0])
    out = ['<div class="table-wrap"><table>', '<thead><tr>']
    out.extend(f'<th>{render_inline(cell)}</th>' for cell in header)
    out.append('</tr></thead>')
    out.append('<tbody>')
    for row in rows[2:]:
        cells = _split_row(row)
        out.append('<tr>' + ''.join(f'<td>{render_inline(cell)}</td>' for cell in cells) + '</tr>')
    out.append('</tbody></table></div>')
    return out


def render_markdown(md_text: str) -> RenderedMarkdown:
    """
    Convert manual Markdown to HTML.

    The first level-1 heading becomes the page title and is not emitted;
    templates render it in the page header.

    Args:
        md_text: Markdown source

    Returns:
        RenderedMarkdown with the HTML body, title and heading anchors
    """
    lines = md_text.replace('\r\n', '\n').split('\n')
    out: List[str] = []
    headings: List[Heading] = []
    used_anchors = set()
    # Explicit {#anchor} ids are reserved so generated ids never take them
    reserved = {m.group(3) for m in map(HEADING_RE.match, (line.strip() for line in lines)) if m and m.group(3)}
    title = None

    paragraph: List[str] = []
    list_tag: Optional[str] = None
    quote: List[str] = []

    def flush_paragraph():
        if paragraph:
            out.append(f"<p>{render_inline(' '.join(paragraph))}</p>")
            paragraph.clear()

    def close_list():
        nonlocal list_tag
        if list_tag:
            out.append(f'</{list_tag}>')
            list_tag = None

    def flush_quote():
        if quote:
            out.append(f"<aside class=\"callout\"><p>{render_inline(' '.join(quote))}</p></aside>")
            quote.clear()

    def flush_all():
        flush_paragraph()
        close_list()
        flush_quote()

    i = 0
    while i < len(lines):
        s = lines[i].strip()

        fence = FENCE_RE.match(s)
        if fence:
            flush_all()
            language = fence.group(1)
            code_lines = []
            i += 1
            while i < len(lines) and not lines[i].strip().startswith('```'):
                code_lines.append(lines[i])
                i += 1
            css = f' class="language-{language}"' if language else ''
            code = html.escape('\n'.join(code_lines))
            out.append(f'<pre><code{css}>{code}</code></pre>')
            i += 1
            continue

        heading = HEADING_RE.match(s)
        if heading:
            flush_all()
            level = len(heading.group(1))
            text = heading.group(2)
            if level == 1 and title is None:
                title = text
                i += 1
                continue
            explicit = heading.group(3)
            anchor = explicit or slugify(text)
            base, n = anchor, 2
            while anchor in used_anchors or (not explicit and anchor in reserved):
                anchor = f"{base}-{n}"
                n += 1
            used_anchors.add(anchor)
            headings.append(Heading(level=level, text=text, anchor=anchor))
            out.append(f'<h{level} id="{anchor}">{render_inline(text)}</h{level}>')
            i += 1
            continue

        if s.startswith('|') and i + 1 < len(lines) and TABLE_SEPARATOR_RE.match(lines[i + 1].strip()):
            flush_all()
            rows = []
            while i < len(lines) and lines[i].strip().startswith('|'):
                rows.append(lines[i])
                i += 1
            out.extend(_render_table(rows))
            continue

        if s.startswith('> ') or s == '>':
            flush_paragraph()
            close_list()
            quote.append(s[1:].strip())
            i += 1
            continue

        if s.startswith(('- ', '* ')) or ORDERED_RE.match(s):
            flush_paragraph()
            flush_quote()
            tag = 'ul' if s.startswith(('- ', '* ')) else 'ol'
            if list_tag != tag:
                close_list()
                out.append(f'<{tag}>')
                list_tag = tag
            item = s[2:] if tag == 'ul' else ORDERED_RE.sub('', s, count=1)
            out.append(f'<li>{render_inline(item)}</li>')
            i += 1
            continue

        if s == '':
            flush_all()
            i += 1
            continue

        if list_tag and lines[i].startswith(('  ', '\t')) and out and out[-1].endswith('</li>'):
            # Continuation line of the previous list item
            out[-1] = out[-1][:-len('</li>')] + ' ' + render_inline(s) + '</li>'
            i += 1
            continue

        close_list()
        flush_quote()
        paragraph.append(s)
        i += 1

    flush_all()
    return RenderedMarkdown(html='\n'.join(out), title=title, headings=headings)


def split_front_matter(md_text: str) -> Tuple[str, str]:
    """
    Separate a leading ``---`` YAML block from the Markdown body.

    Returns:
        (front_matter, body); front_matter is empty when absent
    """
    if not md_text.startswith('---'):
        return '', md_text
    parts = md_text.split('\n---', 1)
    if len(parts) != 2:
        return '', md_text
    front = parts[0][3:].strip('\n')
    body = parts[1]
    if body.startswith('\n'):
        body = body[1:]
    return front, body
