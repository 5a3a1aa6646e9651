"""Load Markdown source records from a content directory into pages.

Each ``*.md`` file under the content root becomes a :class:`Page` keyed by a
slug derived from its path: ``blog/bitfields.md`` maps to ``blog/bitfields``,
``blog/_index.md`` to the ``blog`` section, and the root ``_index.md`` to the
empty slug. Front matter may override the final segment (``slug``) or the
whole identifier (``path``).

Example
-------
>>> from pathlib import Path
>>> from pagesmith.content.store import derive_slug
>>> derive_slug(Path("blog/My Post.md"))
'blog/my-post'
>>> derive_slug(Path("_index.md"))
''
"""

from __future__ import annotations

import logging
import re
import typing as typ
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path, PurePosixPath

from pagesmith._constants import CONTENT_SUFFIX, DATE_KEYS, SECTION_INDEX
from pagesmith.config.helpers import _parse_timestamp
from pagesmith.errors import DuplicateSlug, IOFailure, MalformedFrontMatter

from .front_matter import parse_front_matter
from .models import Page, PageKind

logger = logging.getLogger(__name__)


def _slugify(value: str) -> str:
    """Convert a string into a lowercase hyphen-separated slug."""
    return re.sub(r"[^a-z0-9]+", "-", value.lower()).strip("-")


def derive_slug(relative: Path) -> str:
    """Return the slug for a content file given its path under the root."""
    parts = list(PurePosixPath(relative.as_posix()).parts)
    name = parts.pop()
    stem = name.removesuffix(CONTENT_SUFFIX)
    if name not in (SECTION_INDEX, "index.md"):
        parts.append(stem)
    return "/".join(filter(None, (_slugify(part) for part in parts)))


class ContentStore:
    """Hold loaded pages keyed by slug, rejecting duplicates."""

    def __init__(self, pages: typ.Iterable[Page] = ()) -> None:
        self._pages: dict[str, Page] = {}
        for page in pages:
            self.add(page)

    @classmethod
    def from_directory(
        cls,
        content_dir: Path,
        *,
        blog_section: str = "blog",
        include_drafts: bool = False,
        jobs: int = 1,
    ) -> ContentStore:
        """Load every Markdown record under ``content_dir``.

        Parameters
        ----------
        content_dir : Path
            Root of the content tree.
        blog_section : str, optional
            Section whose pages are treated as blog posts.
        include_drafts : bool, optional
            Keep pages whose front matter sets ``draft = true``.
        jobs : int, optional
            Number of worker threads used to read and parse files.

        Raises
        ------
        IOFailure
            If the directory is missing or a file cannot be read.
        MalformedFrontMatter
            If a record's front matter is invalid or it has no title.
        DuplicateSlug
            If two records resolve to the same slug.
        """
        if not content_dir.is_dir():
            raise IOFailure(str(content_dir), "content directory does not exist")
        paths = sorted(content_dir.rglob(f"*{CONTENT_SUFFIX}"))

        def _load(path: Path) -> Page:
            return load_page(path, content_dir, blog_section=blog_section)

        if jobs > 1:
            with ThreadPoolExecutor(max_workers=jobs) as pool:
                loaded = list(pool.map(_load, paths))
        else:
            loaded = [_load(path) for path in paths]

        store = cls()
        for page in loaded:
            if page.flag("draft") and not include_drafts:
                logger.debug("skipping draft %s", page.slug or "/")
                continue
            store.add(page)
        logger.info("loaded %d pages from %s", len(store), content_dir)
        return store

    def add(self, page: Page) -> None:
        """Add ``page``; raise ``DuplicateSlug`` if its slug is taken."""
        existing = self._pages.get(page.slug)
        if existing is not None:
            raise DuplicateSlug(page.slug or "/", _duplicate_detail(existing, page))
        self._pages[page.slug] = page

    def get(self, slug: str) -> Page:
        try:
            return self._pages[slug]
        except KeyError as exc:
            available = ", ".join(sorted(self._pages))
            msg = f"Unknown page '{slug}'. Known pages: {available}"
            raise KeyError(msg) from exc

    def __contains__(self, slug: object) -> bool:
        return slug in self._pages

    def __iter__(self) -> typ.Iterator[Page]:
        return iter(self._pages.values())

    def __len__(self) -> int:
        return len(self._pages)


def load_page(path: Path, content_dir: Path, *, blog_section: str = "blog") -> Page:
    """Read and parse a single content file into a :class:`Page`."""
    relative = path.relative_to(content_dir)
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise IOFailure(relative.as_posix(), f"cannot read source: {exc}") from exc

    parsed = parse_front_matter(text, source=relative.as_posix())
    metadata = parsed.metadata
    for key in DATE_KEYS:
        value = metadata.get(key)
        if value is not None and _parse_timestamp(typ.cast("str", value)) is None:
            msg = f"'{key}' is not an ISO-8601 date or datetime: {value!r}"
            raise MalformedFrontMatter(relative.as_posix(), msg)
    slug = _resolve_slug(relative, metadata)
    kind = _page_kind(relative, slug, blog_section)
    title = metadata.get("title")
    if title is None and kind == "section":
        title = slug.rsplit("/", 1)[-1].replace("-", " ").title()
    if not isinstance(title, str) or (kind != "section" and not title.strip()):
        msg = "front matter requires a non-empty string 'title'"
        raise MalformedFrontMatter(relative.as_posix(), msg)
    logger.debug("loaded %s as %s '%s'", relative.as_posix(), kind, slug)
    return Page(
        slug=slug,
        title=title,
        metadata=metadata,
        body=parsed.body,
        source=path,
        kind=kind,
    )


def _resolve_slug(relative: Path, metadata: typ.Mapping[str, object]) -> str:
    """Apply ``path`` and ``slug`` front-matter overrides to the derived slug."""
    override_path = metadata.get("path")
    if isinstance(override_path, str) and override_path.strip("/"):
        return _normalize_path(override_path, relative)
    slug = derive_slug(relative)
    override_slug = metadata.get("slug")
    if isinstance(override_slug, str) and _slugify(override_slug):
        parent, _, _ = slug.rpartition("/")
        leaf = _slugify(override_slug)
        return f"{parent}/{leaf}" if parent else leaf
    return slug


def _normalize_path(override: str, relative: Path) -> str:
    """Slugify each segment of a ``path`` override, rejecting traversal."""
    segments = override.strip().strip("/").split("/")
    for segment in segments:
        if segment.strip() in ("", ".", "..") or not _slugify(segment):
            msg = f"path override {override!r} has an invalid segment {segment!r}"
            raise MalformedFrontMatter(relative.as_posix(), msg)
    return "/".join(_slugify(segment) for segment in segments)


def _page_kind(relative: Path, slug: str, blog_section: str) -> PageKind:
    if relative.name == SECTION_INDEX:
        return "section"
    if slug.startswith(f"{blog_section}/"):
        return "post"
    return "page"


def _duplicate_detail(first: Page, second: Page) -> str:
    sources = [
        str(page.source) if page.source else "<generated>" for page in (first, second)
    ]
    return f"defined by both {sources[0]} and {sources[1]}"


__all__ = ["ContentStore", "derive_slug", "load_page"]
