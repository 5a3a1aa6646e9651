"""End-to-end tests for :class:`pagesmith.builder.SiteBuilder`.

Each test writes a small content tree into ``tmp_path``, builds it with a
``SiteConfig`` pointing at that tree, and inspects the written bundle:

* ``index.html`` files land at ``<output>/<slug>/index.html`` with the root
  index at ``<output>/index.html``.
* Blog posts link to their neighbours in date order and the blog index lists
  them newest first.
* The Atom feed and the ``.pagesmith-manifest.json`` manifest describe the
  same pages that were written.
* A content error aborts the build before any file is written.

Usage
-----
Run ``pytest tests/test_site_builder.py -v``. No network access is needed.
"""

from __future__ import annotations

from pathlib import Path

import msgspec.json as msgspec_json
import pytest
from bs4 import BeautifulSoup

from pagesmith._constants import MANIFEST_FILENAME
from pagesmith.builder import SiteBuilder
from pagesmith.config import SiteConfig, ThemeConfig
from pagesmith.errors import MalformedFrontMatter, UnresolvedFootnote

CONTENT = {
    "_index.md": '+++\ntitle = "Home"\n+++\nWelcome.\n',
    "about.md": (
        '+++\ntitle = "about me"\nweight = 1\n[extra]\nin_header = true\n+++\n'
        "I write about [bitfields](@/blog/bitfields.md).\n"
    ),
    "blog/_index.md": '+++\ntitle = "Blog"\n+++\n',
    "blog/bitfields.md": (
        '+++\ntitle = "Designing bitfields"\nupdated = 2023-05-16\n'
        'description = "How the API grew."\n+++\n'
        "A claim[^1].\n\n```rust\nstruct Flags;\n```\n\n[^1]: The source.\n"
    ),
    "blog/older.md": '+++\ntitle = "Older post"\ndate = 2022-01-10\n+++\nOld.\n',
    "blog/newer.md": '+++\ntitle = "Newer post"\ndate = 2024-03-01\n+++\nNew.\n',
}


def _write_tree(root: Path, files: dict[str, str]) -> None:
    for relative, text in files.items():
        path = root / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8")


def _soup(path: Path) -> BeautifulSoup:
    return BeautifulSoup(path.read_text(encoding="utf-8"), "html.parser")


@pytest.fixture
def site_config(tmp_path: Path) -> SiteConfig:
    """Write the sample content tree and return a config pointing at it."""
    content_dir = tmp_path / "content"
    _write_tree(content_dir, CONTENT)
    return SiteConfig(
        title="Field notes",
        base_url="https://example.com",
        author="Sam",
        content_dir=content_dir,
        output_dir=tmp_path / "public",
        theme=ThemeConfig(site_name="notes", tagline="Bits and pieces"),
    )


def test_build_writes_every_page(site_config: SiteConfig) -> None:
    written = SiteBuilder(site_config).run()
    output = site_config.output_dir
    relative = sorted(path.relative_to(output).as_posix() for path in written)
    assert relative == [
        MANIFEST_FILENAME,
        "about/index.html",
        "blog/atom.xml",
        "blog/bitfields/index.html",
        "blog/index.html",
        "blog/newer/index.html",
        "blog/older/index.html",
        "index.html",
    ]


def test_about_page_renders_title_and_internal_link(site_config: SiteConfig) -> None:
    SiteBuilder(site_config).run()
    soup = _soup(site_config.output_dir / "about" / "index.html")
    assert soup.select_one("h1.page-title").get_text() == "about me"
    link = soup.select_one("article.page a")
    assert link["href"] == "https://example.com/blog/bitfields/"
    nav_links = soup.select("nav.site-nav a")
    assert [a.get_text() for a in nav_links] == ["about me"]
    assert nav_links[0].get("aria-current") == "page"


def test_posts_link_to_neighbours(site_config: SiteConfig) -> None:
    SiteBuilder(site_config).run()
    soup = _soup(site_config.output_dir / "blog" / "bitfields" / "index.html")
    assert soup.select_one("time.post-date")["datetime"] == "2023-05-16"
    previous = soup.select_one("a.post-nav-previous")
    following = soup.select_one("a.post-nav-next")
    assert previous["href"] == "https://example.com/blog/newer/"
    assert following["href"] == "https://example.com/blog/older/"
    assert soup.select_one("div.codehilite")["data-language"] == "rust"
    assert soup.select("div.footnote li"), "expected rendered footnotes"

    newest = _soup(site_config.output_dir / "blog" / "newer" / "index.html")
    assert newest.select_one("a.post-nav-previous") is None


def test_blog_index_lists_posts_newest_first(site_config: SiteConfig) -> None:
    SiteBuilder(site_config).run()
    soup = _soup(site_config.output_dir / "blog" / "index.html")
    titles = [a.get_text() for a in soup.select("ol.post-list li.post-list-item a")]
    assert titles == ["Newer post", "Designing bitfields", "Older post"]
    home = _soup(site_config.output_dir / "index.html")
    assert home.title.get_text() == "Field notes"


def test_feed_lists_posts(site_config: SiteConfig) -> None:
    site_config.feed_limit = 2
    SiteBuilder(site_config).run()
    feed = BeautifulSoup(
        (site_config.output_dir / "blog" / "atom.xml").read_text(encoding="utf-8"),
        "html.parser",
    )
    titles = [entry.find("title").get_text() for entry in feed.find_all("entry")]
    assert titles == ["Newer post", "Designing bitfields"]


def test_feed_can_be_disabled(site_config: SiteConfig) -> None:
    site_config.feed = False
    SiteBuilder(site_config).run()
    assert not (site_config.output_dir / "blog" / "atom.xml").exists()


def test_manifest_describes_pages(site_config: SiteConfig) -> None:
    SiteBuilder(site_config).run()
    manifest = msgspec_json.decode(
        (site_config.output_dir / MANIFEST_FILENAME).read_bytes()
    )
    slugs = [page["slug"] for page in manifest["pages"]]
    assert slugs == [
        "",
        "blog",
        "about",
        "blog/newer",
        "blog/bitfields",
        "blog/older",
    ]
    assert manifest["pages"][0]["path"] == "index.html"
    assert "blog/atom.xml" in manifest["files"]


def test_unresolved_footnote_aborts_without_output(site_config: SiteConfig) -> None:
    broken = site_config.content_dir / "blog" / "broken.md"
    broken.write_text('+++\ntitle = "Broken"\n+++\nA claim[^9].\n', encoding="utf-8")
    with pytest.raises(UnresolvedFootnote) as excinfo:
        SiteBuilder(site_config).run()
    assert excinfo.value.location == "blog/broken"
    assert not site_config.output_dir.exists()


def test_malformed_front_matter_aborts(site_config: SiteConfig) -> None:
    broken = site_config.content_dir / "broken.md"
    broken.write_text('+++\ntitle = "never closed"\n', encoding="utf-8")
    with pytest.raises(MalformedFrontMatter):
        SiteBuilder(site_config).check()
    assert not site_config.output_dir.exists()


def test_drafts_are_built_on_request(site_config: SiteConfig) -> None:
    draft = site_config.content_dir / "blog" / "wip.md"
    draft.write_text('+++\ntitle = "WIP"\ndraft = true\n+++\n', encoding="utf-8")
    assert len(SiteBuilder(site_config).check()) == 6
    assert len(SiteBuilder(site_config, include_drafts=True).check()) == 7


def test_threaded_build_matches_serial(site_config: SiteConfig, tmp_path: Path) -> None:
    SiteBuilder(site_config).run()
    serial = {
        path.relative_to(site_config.output_dir): path.read_text(encoding="utf-8")
        for path in site_config.output_dir.rglob("*.html")
    }
    site_config.output_dir = tmp_path / "threaded"
    SiteBuilder(site_config, jobs=4).run()
    threaded = {
        path.relative_to(site_config.output_dir): path.read_text(encoding="utf-8")
        for path in site_config.output_dir.rglob("*.html")
    }
    assert threaded == serial


def test_path_override_cannot_write_outside_output(site_config: SiteConfig) -> None:
    escape = site_config.content_dir / "escape.md"
    escape.write_text(
        '+++\ntitle = "Out"\npath = "../../pwned"\n+++\n', encoding="utf-8"
    )
    with pytest.raises(MalformedFrontMatter):
        SiteBuilder(site_config).run()
    assert not site_config.output_dir.exists()
    assert not (site_config.output_dir.parent.parent / "pwned").exists()
