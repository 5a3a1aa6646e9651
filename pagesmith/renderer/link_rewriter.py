"""Rewrite internal ``@/path.md`` links to the URL of the target page."""

from __future__ import annotations

import typing as typ
from urllib.parse import urlsplit

from markdown.extensions import Extension
from markdown.treeprocessors import Treeprocessor

from pagesmith._constants import INTERNAL_LINK_PREFIX
from pagesmith.errors import UnresolvedLink

if typ.TYPE_CHECKING:
    from xml.etree.ElementTree import Element

    from markdown import Markdown
else:  # pragma: no cover - type-checking fallback
    Markdown = typ.Any
    Element = typ.Any


class InternalLinkExtension(Extension):
    """Resolve content-relative links against the assembled site.

    ``link_map`` maps a source path relative to the content root (for example
    ``blog/bitfields.md``) to the public URL of the page built from it. Any
    ``@/`` link whose path is missing from the map raises
    :class:`~pagesmith.errors.UnresolvedLink` naming ``location``.
    """

    def __init__(self, link_map: typ.Mapping[str, str], location: str) -> None:
        self.link_map = link_map
        self.location = location
        super().__init__()

    def extendMarkdown(self, md: Markdown) -> None:  # type: ignore[override]  # noqa: N802
        """Register the internal-link treeprocessor on the Markdown instance."""
        processor = InternalLinkTreeprocessor(md, self.link_map, self.location)
        md.treeprocessors.register(processor, "pagesmith_internal_links", 15)


class InternalLinkTreeprocessor(Treeprocessor):
    """Swap ``@/`` anchors and image sources for resolved page URLs."""

    def __init__(
        self, md: Markdown, link_map: typ.Mapping[str, str], location: str
    ) -> None:
        super().__init__(md)
        self.link_map = link_map
        self.location = location

    def run(self, root: Element) -> Element:
        for element in root.iter():
            attribute = {"a": "href", "img": "src"}.get(element.tag)
            if attribute is None:
                continue
            target = element.get(attribute)
            rewritten = self._rewrite(target)
            if rewritten is not None:
                element.set(attribute, rewritten)
        return root

    def _rewrite(self, target: str | None) -> str | None:
        """Return the resolved URL for an internal link, or None to keep it."""
        if not target or not target.startswith(INTERNAL_LINK_PREFIX):
            return None
        parsed = urlsplit(target.removeprefix(INTERNAL_LINK_PREFIX))
        path = parsed.path.strip("/")
        url = self.link_map.get(path)
        if url is None:
            raise UnresolvedLink(self.location, f"no page for '{target}'")
        if parsed.fragment:
            url = f"{url}#{parsed.fragment}"
        return url


__all__ = ["InternalLinkExtension", "InternalLinkTreeprocessor"]
