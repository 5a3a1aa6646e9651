"""Order loaded pages and wire the navigation between them.

The assembler is the single synchronization point of a build: it needs every
page before it can detect duplicate slugs, order blog posts, and assign
previous/next links. Its output is a :class:`SiteMap` whose page order is a
pure function of the input set.

Ordering rules
--------------
- Section pages come first (sorted by slug, so the root index leads), then
  standalone pages sorted by slug, then blog posts.
- Blog posts are sorted by ``date`` (falling back to ``updated``) newest
  first; ties and undated posts are ordered by slug, and undated posts sort
  after dated ones.
- ``previous`` points at the post before a post in that order (the newer
  one) and ``next`` at the post after it (the older one).

Example
-------
>>> from pagesmith.assembler import assemble_site
>>> from pagesmith.content import Page
>>> site = assemble_site([Page(slug="about", title="about me", metadata={}, body="")])
>>> [entry.slug for entry in site]
['', 'about']
"""

from __future__ import annotations

import dataclasses as dc
import logging
import typing as typ

from pagesmith.content.models import Page
from pagesmith.errors import DuplicateSlug

if typ.TYPE_CHECKING:
    import datetime as dt

logger = logging.getLogger(__name__)


def default_page_url(slug: str) -> str:
    """Return the root-relative URL of the page with ``slug``."""
    return f"/{slug}/" if slug else "/"


@dc.dataclass(frozen=True, slots=True)
class NavLink:
    """Link to another page, as shown in navigation and listings."""

    slug: str
    title: str
    url: str
    published: dt.datetime | None = None


@dc.dataclass(frozen=True, slots=True)
class OutputPage:
    """A page placed in the site with its URL and neighbours.

    Attributes
    ----------
    page : Page
        The loaded content record.
    url : str
        Public URL of the page.
    previous : NavLink or None
        Newer neighbour for blog posts.
    next : NavLink or None
        Older neighbour for blog posts.
    posts : tuple[NavLink, ...]
        Ordered blog listing, set on the root and blog index pages.
    """

    page: Page
    url: str
    previous: NavLink | None = None
    next: NavLink | None = None
    posts: tuple[NavLink, ...] = ()

    @property
    def slug(self) -> str:
        return self.page.slug

    def nav_link(self) -> NavLink:
        return NavLink(
            slug=self.page.slug,
            title=self.page.title,
            url=self.url,
            published=self.page.published,
        )


@dc.dataclass(frozen=True, slots=True)
class SiteMap:
    """Deterministically ordered output pages plus shared navigation."""

    pages: tuple[OutputPage, ...]
    posts: tuple[OutputPage, ...]
    header_links: tuple[NavLink, ...]
    blog_section: str = "blog"

    def get(self, slug: str) -> OutputPage:
        for entry in self.pages:
            if entry.slug == slug:
                return entry
        msg = f"Unknown page '{slug}'."
        raise KeyError(msg)

    def __iter__(self) -> typ.Iterator[OutputPage]:
        return iter(self.pages)

    def __len__(self) -> int:
        return len(self.pages)


def assemble_site(
    pages: typ.Iterable[Page],
    *,
    blog_section: str = "blog",
    site_title: str = "",
    url_for: typ.Callable[[str], str] = default_page_url,
) -> SiteMap:
    """Order ``pages``, assign previous/next links, and build navigation.

    Parameters
    ----------
    pages : Iterable[Page]
        Every page of the site, in any order.
    blog_section : str, optional
        Slug of the section whose pages are blog posts.
    site_title : str, optional
        Title used when the root index page has to be generated.
    url_for : Callable[[str], str], optional
        Maps a slug to its public URL.

    Returns
    -------
    SiteMap
        The ordered output pages; identical input sets give identical maps.

    Raises
    ------
    DuplicateSlug
        If two pages share a slug.
    """
    by_slug: dict[str, Page] = {}
    for page in pages:
        existing = by_slug.get(page.slug)
        if existing is not None:
            detail = f"'{existing.title}' and '{page.title}' share this slug"
            raise DuplicateSlug(page.slug or "/", detail)
        by_slug[page.slug] = page

    posts = sorted(
        (page for page in by_slug.values() if page.kind == "post"),
        key=_post_sort_key,
    )
    if "" not in by_slug:
        by_slug[""] = Page(
            slug="", title=site_title or "Home", metadata={}, body="", kind="section"
        )
    if posts and blog_section not in by_slug:
        title = blog_section.rsplit("/", 1)[-1].replace("-", " ").title()
        by_slug[blog_section] = Page(
            slug=blog_section, title=title, metadata={}, body="", kind="section"
        )

    post_links = tuple(
        NavLink(
            slug=post.slug,
            title=post.title,
            url=url_for(post.slug),
            published=post.published,
        )
        for post in posts
    )
    placed_posts: list[OutputPage] = []
    for index, post in enumerate(posts):
        placed_posts.append(
            OutputPage(
                page=post,
                url=post_links[index].url,
                previous=post_links[index - 1] if index > 0 else None,
                next=post_links[index + 1] if index + 1 < len(posts) else None,
            )
        )

    sections = sorted(
        (page for page in by_slug.values() if page.kind == "section"),
        key=lambda page: page.slug,
    )
    standalone = sorted(
        (page for page in by_slug.values() if page.kind == "page"),
        key=lambda page: page.slug,
    )
    listing_slugs = {"", blog_section}
    placed: list[OutputPage] = [
        OutputPage(
            page=page,
            url=url_for(page.slug),
            posts=post_links if page.slug in listing_slugs else (),
        )
        for page in [*sections, *standalone]
    ]
    placed.extend(placed_posts)

    header_links = tuple(
        NavLink(slug=page.slug, title=page.title, url=url_for(page.slug))
        for page in sorted(
            (page for page in by_slug.values() if page.flag("extra.in_header")),
            key=lambda page: (page.weight, page.slug),
        )
    )
    logger.debug(
        "assembled %d pages (%d posts, %d header links)",
        len(placed),
        len(placed_posts),
        len(header_links),
    )
    return SiteMap(
        pages=tuple(placed),
        posts=tuple(placed_posts),
        header_links=header_links,
        blog_section=blog_section,
    )


def _post_sort_key(page: Page) -> tuple[bool, float, str]:
    stamp = page.published
    return (stamp is None, -stamp.timestamp() if stamp else 0.0, page.slug)


__all__ = [
    "NavLink",
    "OutputPage",
    "SiteMap",
    "assemble_site",
    "default_page_url",
]
