"""Error taxonomy raised while loading, rendering, and assembling content.

Every error carries the page ``location`` (slug or source path) so the CLI can
report which record broke the build and which kind of failure occurred.

Examples
--------
>>> err = UnresolvedFootnote("blog/bitfields", "no definition for [^1]")
>>> err.kind
'UnresolvedFootnote'
>>> str(err)
'UnresolvedFootnote in blog/bitfields: no definition for [^1]'
"""

from __future__ import annotations


class ContentError(Exception):
    """Base class for failures that abort a site build."""

    def __init__(self, location: str, detail: str) -> None:
        self.location = location
        self.detail = detail
        super().__init__(f"{self.kind} in {location}: {detail}")

    @property
    def kind(self) -> str:
        """Return the error kind shown to users."""
        return type(self).__name__


class MalformedFrontMatter(ContentError):
    """Raised when a front-matter block is unterminated or cannot be parsed."""


class MalformedBody(ContentError):
    """Raised when a body block opened by a marker is never closed."""


class FootnoteError(ContentError):
    """Base class for footnote reference/definition mismatches."""


class UnresolvedFootnote(FootnoteError):
    """Raised when a footnote reference has no matching definition."""


class DuplicateFootnote(FootnoteError):
    """Raised when a footnote identifier is defined more than once."""


class UnresolvedLink(ContentError):
    """Raised when an internal ``@/`` link names a page that does not exist."""


class DuplicateSlug(ContentError):
    """Raised when two pages resolve to the same slug."""


class IOFailure(ContentError):
    """Raised when a source record cannot be read or an output cannot be written."""


__all__ = [
    "ContentError",
    "DuplicateFootnote",
    "DuplicateSlug",
    "FootnoteError",
    "IOFailure",
    "MalformedBody",
    "MalformedFrontMatter",
    "UnresolvedFootnote",
    "UnresolvedLink",
]
