"""High-level orchestration for static site generation.

This module coordinates loading Markdown records from the content directory,
validating their bodies, assembling the ordered site, rendering each page with
shared Jinja templates, and writing the HTML bundle. It exposes
:class:`SiteBuilder`, which consumes a :class:`~pagesmith.config.SiteConfig`.

The build is fail-fast: every page is rendered into memory before the first
file is written, so a content error leaves the output directory untouched.

Example
-------
>>> from pathlib import Path
>>> from pagesmith.config import load_site_config
>>> from pagesmith.builder import SiteBuilder
>>> config = load_site_config(Path("site.yaml"))  # doctest: +SKIP
>>> SiteBuilder(config).run()  # doctest: +SKIP
[PosixPath('public/index.html'), ...]
"""

from __future__ import annotations

import dataclasses as dc
import datetime as dt
import json
import logging
import typing as typ
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

from jinja2 import Environment, FileSystemLoader, select_autoescape

from pagesmith._constants import FEED_FILENAME, MANIFEST_FILENAME
from pagesmith.assembler import OutputPage, SiteMap, assemble_site
from pagesmith.content import ContentStore
from pagesmith.errors import IOFailure
from pagesmith.renderer import HtmlContentRenderer

if typ.TYPE_CHECKING:
    from pagesmith.config import SiteConfig
    from pagesmith.content import Page
    from pagesmith.renderer import BodyRenderer

logger = logging.getLogger(__name__)

T = typ.TypeVar("T")
R = typ.TypeVar("R")


@dc.dataclass(frozen=True, slots=True)
class CheckedPage:
    """Page whose body passed block validation."""

    page: Page
    footnotes: frozenset[str]


class SiteBuilder:
    """Load content and emit themed HTML for every page."""

    def __init__(
        self,
        config: SiteConfig,
        *,
        renderer: BodyRenderer | None = None,
        templates_dir: Path | None = None,
        include_drafts: bool = False,
        jobs: int = 1,
    ) -> None:
        """Initialize the builder with configuration and template context.

        Parameters
        ----------
        config : SiteConfig
            Site configuration describing directories, blog section and theme.
        renderer : BodyRenderer, optional
            Body rendering strategy; defaults to :class:`HtmlContentRenderer`.
        templates_dir : Path, optional
            Directory containing Jinja templates; defaults to the package templates.
        include_drafts : bool, optional
            Build pages marked ``draft = true``.
        jobs : int, optional
            Worker threads used for loading and rendering pages.
        """
        self.config = config
        self.renderer = renderer or HtmlContentRenderer(config.pygments_style)
        self.templates_dir = templates_dir or Path(__file__).parent / "templates"
        self.include_drafts = include_drafts
        self.jobs = max(1, jobs)
        self.env = Environment(
            loader=FileSystemLoader(str(self.templates_dir)),
            autoescape=select_autoescape(["html", "xml", "jinja"]),
            trim_blocks=True,
            lstrip_blocks=True,
        )

    def load(self) -> ContentStore:
        """Load every page from the configured content directory."""
        return ContentStore.from_directory(
            self.config.content_dir,
            blog_section=self.config.blog_section,
            include_drafts=self.include_drafts,
            jobs=self.jobs,
        )

    def check(self) -> SiteMap:
        """Load, validate, and assemble the site without writing anything.

        Raises
        ------
        ContentError
            The first content failure found (front matter, footnotes, asides,
            duplicate slugs, internal links, or unreadable files).
        """
        checked = self._validate(self.load())
        site = self._assemble(entry.page for entry in checked)
        self._render_all(site)
        return site

    def run(self) -> list[Path]:
        """Render every page into themed HTML files on disk.

        Returns
        -------
        list[Path]
            Paths to the written files: pages in site order, then the feed and
            the build manifest.

        Raises
        ------
        ContentError
            If any page fails to load, validate, or render; nothing is
            written in that case.
        IOFailure
            If an output file cannot be written.
        """
        checked = self._validate(self.load())
        site = self._assemble(entry.page for entry in checked)
        rendered = self._render_all(site)
        if self.config.feed and site.posts:
            feed_path = self.config.output_dir / site.blog_section / FEED_FILENAME
            rendered[feed_path] = self._render_feed(site)

        written = self._map(lambda item: self._write(*item), list(rendered.items()))
        generated_at = dt.datetime.now(dt.UTC)
        manifest_path = self._write_manifest(site, written, generated_at)
        logger.info("wrote %d pages to %s", len(site), self.config.output_dir)
        return [*written, manifest_path]

    def output_path(self, entry: OutputPage) -> Path:
        """Return the file written for ``entry``."""
        if not entry.slug:
            return self.config.output_dir / "index.html"
        return self.config.output_dir / entry.slug / "index.html"

    def _validate(self, store: ContentStore) -> list[CheckedPage]:
        """Consume every page's block sequence so footnotes are checked."""

        def _check(page: Page) -> CheckedPage:
            blocks = self.renderer.blocks(page.body, location=page.slug or "/")
            return CheckedPage(page=page, footnotes=blocks.footnotes)

        return self._map(_check, list(store))

    def _assemble(self, pages: typ.Iterable[Page]) -> SiteMap:
        return assemble_site(
            pages,
            blog_section=self.config.blog_section,
            site_title=self.config.title,
            url_for=self.config.page_url,
        )

    def _render_all(self, site: SiteMap) -> dict[Path, str]:
        """Render all pages into memory, keyed by their output path."""
        link_map = self._link_map(site)
        template_names = {"section": "section.jinja", "post": "post.jinja"}

        def _render(entry: OutputPage) -> tuple[Path, str]:
            body_html = self.renderer.render(
                entry.page.body, location=entry.slug or "/", link_map=link_map
            )
            template = self.env.get_template(
                template_names.get(entry.page.kind, "page.jinja")
            )
            html = template.render(
                site=self.config,
                theme=self.config.theme,
                entry=entry,
                page=entry.page,
                body_html=body_html,
                header_links=site.header_links,
                pygments_css=self.renderer.stylesheet,
                feed_url=self._feed_url(site),
            )
            if not html.endswith("\n"):
                html += "\n"
            logger.debug("rendered %s", entry.slug or "/")
            return self.output_path(entry), html

        return dict(self._map(_render, list(site)))

    def _render_feed(self, site: SiteMap) -> str:
        """Render the Atom feed for the newest blog posts."""
        entries = site.posts[: self.config.feed_limit]
        updated = next(
            (entry.page.published for entry in entries if entry.page.published),
            None,
        )
        template = self.env.get_template("atom.xml.jinja")
        return template.render(
            site=self.config,
            entries=entries,
            updated=updated or dt.datetime.now(dt.UTC),
            feed_url=self._feed_url(site),
            blog_url=self.config.page_url(site.blog_section),
        )

    def _feed_url(self, site: SiteMap) -> str | None:
        if not (self.config.feed and site.posts):
            return None
        return f"{self.config.page_url(site.blog_section)}{FEED_FILENAME}"

    def _link_map(self, site: SiteMap) -> dict[str, str]:
        """Map content-relative source paths to the URLs of their pages."""
        links: dict[str, str] = {}
        for entry in site:
            source = entry.page.source
            if source is None:
                continue
            try:
                relative = source.relative_to(self.config.content_dir)
            except ValueError:
                continue
            links[relative.as_posix()] = entry.url
        return links

    def _write(self, path: Path, html: str) -> Path:
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(html, encoding="utf-8")
        except OSError as exc:
            raise IOFailure(str(path), f"cannot write output: {exc}") from exc
        return path

    def _write_manifest(
        self, site: SiteMap, written: list[Path], generated_at: dt.datetime
    ) -> Path:
        """Persist a JSON manifest listing every page and written file."""
        output_dir = self.config.output_dir
        manifest = {
            "generated_at": generated_at.isoformat(),
            "pages": [
                {
                    "slug": entry.slug,
                    "title": entry.page.title,
                    "kind": entry.page.kind,
                    "url": entry.url,
                    "path": self.output_path(entry).relative_to(output_dir).as_posix(),
                }
                for entry in site
            ],
            "files": [path.relative_to(output_dir).as_posix() for path in written],
        }
        path = output_dir / MANIFEST_FILENAME
        return self._write(path, json.dumps(manifest, indent=2) + "\n")

    def _map(self, func: typ.Callable[[T], R], items: list[T]) -> list[R]:
        """Apply ``func`` to ``items`` in order, on a thread pool when jobs > 1."""
        if self.jobs == 1 or len(items) < 2:
            return [func(item) for item in items]
        with ThreadPoolExecutor(max_workers=self.jobs) as pool:
            return list(pool.map(func, items))


__all__ = ["CheckedPage", "SiteBuilder"]
