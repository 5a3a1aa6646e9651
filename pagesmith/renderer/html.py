"""Render page bodies to HTML with Python-Markdown and Pygments.

Fenced code is highlighted by the ``codehilite`` extension. Before conversion
every fence is pulled back to the left margin and its info string reduced to
a bare language (``rust,ignore`` becomes ``rust``), so fences nested in list
items highlight the same way as top-level ones. Each highlighted block is then
tagged with a ``data-language`` attribute taken from the block scanner.
"""

from __future__ import annotations

import re
import typing as typ
from html import escape

from markdown import Markdown
from pygments.formatters.html import HtmlFormatter

from .aside import AsideExtension
from .link_rewriter import InternalLinkExtension
from .parser import (
    FENCE_OPEN_PATTERN,
    BlockSequence,
    code_languages,
    fence_language,
    render_blocks,
)

if typ.TYPE_CHECKING:
    from markdown.extensions import Extension
else:  # pragma: no cover - type-checking fallback
    Extension = typ.Any

HIGHLIGHT_CLASS = "codehilite"
HIGHLIGHT_OPEN_TAG = re.compile(rf'<div class="{HIGHLIGHT_CLASS}">')
MARKDOWN_EXTENSIONS = (
    "fenced_code",
    "codehilite",
    "tables",
    "footnotes",
    "sane_lists",
    "toc",
    "md_in_html",
)


class HtmlContentRenderer:
    """Default :class:`~pagesmith.renderer.base.BodyRenderer`.

    Typed blocks come from :func:`~pagesmith.renderer.parser.render_blocks`;
    display HTML comes from Python-Markdown with highlighting, tables,
    footnotes, heading anchors, asides, and internal links enabled.
    """

    def __init__(self, pygments_style: str = "monokai") -> None:
        """Create a renderer highlighting code with ``pygments_style``.

        Parameters
        ----------
        pygments_style : str, optional
            Pygments style name shared by highlighted blocks and
            :attr:`stylesheet`.
        """
        self.pygments_style = pygments_style
        self._formatter = HtmlFormatter(style=pygments_style, cssclass=HIGHLIGHT_CLASS)

    @property
    def stylesheet(self) -> str:
        """CSS rules for the configured Pygments style."""
        return self._formatter.get_style_defs(f".{HIGHLIGHT_CLASS}")

    def blocks(self, body: str, *, location: str = "<body>") -> BlockSequence:
        return render_blocks(body, location=location)

    def render(
        self,
        body: str,
        *,
        location: str = "<body>",
        link_map: typ.Mapping[str, str] | None = None,
    ) -> str:
        """Render ``body`` to HTML, resolving ``@/`` links through ``link_map``.

        Raises
        ------
        UnresolvedLink
            If an ``@/`` link names a source path missing from ``link_map``.
        """
        return self.markdown(
            body, link_extension=InternalLinkExtension(link_map or {}, location)
        )

    def markdown(self, text: str, *, link_extension: Extension | None = None) -> str:
        """Convert ``text`` with the standard extension set."""
        source = _straighten_fences(text)
        if not source.strip():
            return ""
        extensions: list[Extension | str] = [*MARKDOWN_EXTENSIONS, AsideExtension()]
        if link_extension is not None:
            extensions.append(link_extension)
        converter = Markdown(
            extensions=extensions,
            extension_configs={
                "codehilite": {
                    "linenums": False,
                    "guess_lang": False,
                    "css_class": HIGHLIGHT_CLASS,
                    "pygments_style": self.pygments_style,
                },
            },
        )
        return _tag_languages(converter.convert(source), code_languages(source))


def _straighten_fences(text: str) -> str:
    """Left-align fenced blocks and strip extra info-string labels."""
    output: list[str] = []
    fence: str | None = None
    indent = ""
    for line in text.split("\n"):
        if fence is None:
            opened = FENCE_OPEN_PATTERN.match(line)
            if opened:
                fence = opened.group("fence")
                indent = opened.group("indent")
                line = f"{fence}{fence_language(opened.group('info')) or ''}"
        elif line.strip().startswith(fence) and not line.strip().strip(fence[0]):
            line = line.strip()
            fence = None
        elif line.startswith(indent):
            line = line[len(indent) :]
        output.append(line)
    return "\n".join(output)


def _tag_languages(html: str, languages: list[str]) -> str:
    """Add ``data-language`` to highlighted blocks, in document order."""
    remaining = iter(languages)

    def _tag(_match: re.Match[str]) -> str:
        language = escape(next(remaining, "text"), quote=True)
        return f'<div class="{HIGHLIGHT_CLASS}" data-language="{language}">'

    return HIGHLIGHT_OPEN_TAG.sub(_tag, html)


__all__ = ["HtmlContentRenderer"]
