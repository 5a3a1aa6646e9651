"""Tests for ordering pages and wiring site navigation."""

from __future__ import annotations

import datetime as dt
import random

import pytest

from pagesmith.assembler import assemble_site
from pagesmith.content import Page
from pagesmith.errors import DuplicateSlug


def _post(slug: str, **metadata: object) -> Page:
    return Page(
        slug=f"blog/{slug}",
        title=slug.replace("-", " ").title(),
        metadata=metadata,
        body="",
        kind="post",
    )


def _page(slug: str, **metadata: object) -> Page:
    return Page(slug=slug, title=slug.title(), metadata=metadata, body="")


def test_posts_sorted_by_date_descending() -> None:
    pages = [
        _post("older", date=dt.date(2021, 1, 1)),
        _post("bitfields", updated=dt.date(2023, 5, 16)),
        _post("newest", date=dt.datetime(2024, 2, 1, 9, 30, tzinfo=dt.UTC)),
    ]
    site = assemble_site(pages)
    assert [entry.slug for entry in site.posts] == [
        "blog/newest",
        "blog/bitfields",
        "blog/older",
    ]


def test_ties_break_by_slug_and_undated_posts_sort_last() -> None:
    same_day = dt.date(2023, 5, 16)
    pages = [
        _post("zeta", date=same_day),
        _post("undated"),
        _post("alpha", date=same_day),
    ]
    site = assemble_site(pages)
    assert [entry.slug for entry in site.posts] == [
        "blog/alpha",
        "blog/zeta",
        "blog/undated",
    ]


def test_date_takes_precedence_over_updated() -> None:
    pages = [
        _post("a", date=dt.date(2020, 1, 1), updated=dt.date(2025, 1, 1)),
        _post("b", date=dt.date(2022, 1, 1)),
    ]
    assert [entry.slug for entry in assemble_site(pages).posts] == ["blog/b", "blog/a"]


def test_previous_and_next_links() -> None:
    pages = [
        _post("one", date=dt.date(2023, 1, 1)),
        _post("two", date=dt.date(2023, 2, 1)),
        _post("three", date=dt.date(2023, 3, 1)),
    ]
    site = assemble_site(pages)
    newest, middle, oldest = site.posts
    assert newest.previous is None
    assert newest.next.slug == "blog/two"
    assert middle.previous.slug == "blog/three"
    assert middle.next.slug == "blog/one"
    assert oldest.next is None


def test_order_is_independent_of_input_order() -> None:
    pages = [
        _page("about"),
        _post("a", date=dt.date(2023, 1, 1)),
        _post("b", date=dt.date(2023, 1, 1)),
        _post("c"),
        Page(slug="blog", title="Blog", metadata={}, body="", kind="section"),
    ]
    expected = [entry.slug for entry in assemble_site(pages)]
    shuffled = pages[:]
    random.Random(7).shuffle(shuffled)
    assert [entry.slug for entry in assemble_site(shuffled)] == expected
    assert expected == ["", "blog", "about", "blog/a", "blog/b", "blog/c"]


def test_duplicate_slug_fails() -> None:
    with pytest.raises(DuplicateSlug) as excinfo:
        assemble_site([_page("about"), _page("about")])
    assert excinfo.value.location == "about"


def test_generated_indexes() -> None:
    site = assemble_site([_post("only", date=dt.date(2023, 5, 16))], site_title="My site")
    root = site.get("")
    assert root.page.title == "My site"
    assert [link.slug for link in root.posts] == ["blog/only"]
    blog = site.get("blog")
    assert blog.page.kind == "section"
    assert [link.url for link in blog.posts] == ["/blog/only/"]


def test_header_links_follow_weight_then_slug() -> None:
    pages = [
        _page("projects", **{"extra.in_header": True, "weight": 2}),
        _page("about", **{"extra.in_header": True, "weight": 1}),
        _page("colophon", **{"extra.in_header": True, "weight": 1}),
        _page("hidden", **{"extra.in_header": False}),
    ]
    site = assemble_site(pages, url_for=lambda slug: f"https://example.com/{slug}/")
    assert [(link.slug, link.url) for link in site.header_links] == [
        ("about", "https://example.com/about/"),
        ("colophon", "https://example.com/colophon/"),
        ("projects", "https://example.com/projects/"),
    ]
