"""Markdown extension turning ``{% aside() %}`` blocks into ``<aside>`` elements."""

from __future__ import annotations

import re
import typing as typ

from markdown.extensions import Extension
from markdown.preprocessors import Preprocessor

if typ.TYPE_CHECKING:
    from markdown import Markdown
else:  # pragma: no cover - type-checking fallback
    Markdown = typ.Any

ASIDE_OPEN_PATTERN = re.compile(r"^[ \t]*\{%-?\s*aside\(\s*\)\s*-?%\}[ \t]*$")
ASIDE_CLOSE_PATTERN = re.compile(r"^[ \t]*\{%-?\s*end\s*-?%\}[ \t]*$")
ASIDE_OPEN_TAG = '<aside class="aside" markdown="1">'


class AsideExtension(Extension):
    """Render raised aside blocks as Markdown-enabled ``<aside>`` HTML.

    The marker lines are rewritten after fenced code has been stashed, so
    markers quoted inside code samples are left untouched. The ``md_in_html``
    extension must be enabled for the aside body to be parsed as Markdown.
    """

    def extendMarkdown(self, md: Markdown) -> None:  # type: ignore[override]  # noqa: N802
        """Register the aside preprocessor between fenced code and raw HTML."""
        md.preprocessors.register(AsidePreprocessor(md), "pagesmith_aside", 22)


class AsidePreprocessor(Preprocessor):
    """Swap aside marker lines for the opening and closing HTML tags."""

    def run(self, lines: list[str]) -> list[str]:
        output: list[str] = []
        for line in lines:
            if ASIDE_OPEN_PATTERN.match(line):
                output.extend(["", ASIDE_OPEN_TAG, ""])
            elif ASIDE_CLOSE_PATTERN.match(line):
                output.extend(["", "</aside>", ""])
            else:
                output.append(line)
        return output


__all__ = [
    "ASIDE_CLOSE_PATTERN",
    "ASIDE_OPEN_PATTERN",
    "AsideExtension",
    "AsidePreprocessor",
]
