"""Content renderers for Inkpress.

Key pieces:
- MarkdownRenderer: Renders a post's Markdown body to HTML with mistune.
- link_citations: Turns bracketed citation numbers into reference links.
"""

from __future__ import annotations

import re
from collections.abc import Mapping

import mistune

from .html_utils import escape_html

CITATION_RE = re.compile(r"\[(\d+)\]")

CITATION_CLASS = "citation-link"


def link_citations(html: str, references: Mapping[str, str]) -> str:
    """Link citation tokens in rendered HTML to their references.

    Every ``[n]`` whose number is a key of ``references`` is wrapped in an
    anchor opening the reference in a new browsing context. Numbers without
    a reference stay as literal text. One non-overlapping pass, so the
    ``[n]`` inside an inserted anchor is never matched again.

    Args:
        html: HTML produced by the Markdown renderer.
        references: Citation number (as a string) to URL.

    Returns:
        HTML with citation links.

    Examples:
        >>> link_citations("<p>See [1] and [5]</p>", {"1": "https://example.com/a"})
        '<p>See <a href="https://example.com/a" target="_blank" rel="noopener noreferrer" class="citation-link">[1]</a> and [5]</p>'
    """
    if not references:
        return html

    def repl(match: re.Match) -> str:
        url = references.get(match.group(1))
        if not url:
            return match.group(0)
        return (
            f'<a href="{escape_html(url)}" target="_blank" '
            f'rel="noopener noreferrer" class="{CITATION_CLASS}">{match.group(0)}</a>'
        )

    return CITATION_RE.sub(repl, html)


class MarkdownRenderer:
    """Renders Markdown post bodies to HTML.

    Raw HTML in the body is kept as written; posts are trusted local files.
    """

    plugins = ["strikethrough", "footnotes", "table", "url"]

    def render(self, content: str) -> str:
        """Render Markdown content to HTML.

        Args:
            content: Markdown source content.

        Returns:
            Rendered HTML.
        """
        markdown = mistune.create_markdown(escape=False, plugins=self.plugins)
        return markdown(content)

    def render_post(self, content: str, references: Mapping[str, str]) -> str:
        """Render a post body and link its citations.

        Citation linking runs once, after HTML generation.
        """
        return link_citations(self.render(content), references)


# Default renderer instance
default_renderer = MarkdownRenderer()
