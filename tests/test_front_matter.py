"""Unit tests for front-matter parsing and serialization.

These tests cover ``parse_front_matter`` and ``dump_front_matter``: splitting
TOML (``+++``) and YAML (``---``) blocks from the body, flattening nested
tables into dotted keys, rejecting malformed blocks, and re-serializing a
mapping so it parses back unchanged.

Usage
-----
Run ``pytest tests/test_front_matter.py -v``. No fixtures are required.
"""

from __future__ import annotations

import datetime as dt

import pytest

from pagesmith.content import dump_front_matter, parse_front_matter
from pagesmith.errors import MalformedFrontMatter

POST_SOURCE = """+++
title = "Designing a bitfield macro"
description = "How the API grew."
updated = 2023-05-16
draft = false
weight = 3
tags = ["rust", "macros"]

[extra]
in_header = true
+++
Body starts here.
"""


def test_toml_front_matter_is_flattened() -> None:
    parsed = parse_front_matter(POST_SOURCE)
    assert parsed.style == "toml"
    assert parsed.metadata == {
        "title": "Designing a bitfield macro",
        "description": "How the API grew.",
        "updated": dt.date(2023, 5, 16),
        "draft": False,
        "weight": 3,
        "tags": ("rust", "macros"),
        "extra.in_header": True,
    }, f"unexpected metadata: {dict(parsed.metadata)!r}"
    assert parsed.body == "Body starts here.\n"


def test_about_page_title() -> None:
    parsed = parse_front_matter('+++\ntitle = "about me"\n+++\n')
    assert parsed.metadata == {"title": "about me"}
    assert parsed.body == ""


def test_yaml_front_matter() -> None:
    parsed = parse_front_matter("---\ntitle: Hello\nextra:\n  in_header: true\n---\nBody\n")
    assert parsed.style == "yaml"
    assert parsed.metadata["title"] == "Hello"
    assert parsed.metadata["extra.in_header"] is True
    assert parsed.body == "Body\n"


def test_missing_front_matter_returns_whole_body() -> None:
    parsed = parse_front_matter("# Heading\n\nText\n")
    assert parsed.metadata == {}
    assert parsed.style is None
    assert parsed.body == "# Heading\n\nText\n"


def test_byte_order_mark_is_ignored() -> None:
    parsed = parse_front_matter('\ufeff+++\ntitle = "x"\n+++\n')
    assert parsed.metadata == {"title": "x"}


@pytest.mark.parametrize(
    ("source", "fragment"),
    [
        ('+++\ntitle = "never closed"\n', "never closed"),
        ("+++\ntitle = \n+++\n", "invalid TOML"),
        ("+++\ntitle \"x\"\n+++\n", "invalid TOML"),
        ("---\n- a\n- b\n---\n", "must be a mapping"),
        ("---\ntitle: [unclosed\n---\n", "invalid YAML"),
        ("---\ndescription:\n---\n", "has no value"),
        ('+++\n[[authors]]\nname = "x"\n+++\n', "list of scalars"),
    ],
)
def test_malformed_front_matter(source: str, fragment: str) -> None:
    with pytest.raises(MalformedFrontMatter) as excinfo:
        parse_front_matter(source, source="blog/broken.md")
    assert excinfo.value.location == "blog/broken.md"
    assert fragment in str(excinfo.value), str(excinfo.value)


def test_dotted_key_collision_is_rejected() -> None:
    source = '+++\n"extra.in_header" = true\n[extra]\nin_header = false\n+++\n'
    with pytest.raises(MalformedFrontMatter, match="more than once"):
        parse_front_matter(source)


@pytest.mark.parametrize("style", ["toml", "yaml"])
def test_parse_dump_parse_is_idempotent(style: str) -> None:
    first = parse_front_matter(POST_SOURCE).metadata
    dumped = dump_front_matter(first, style=style)  # type: ignore[arg-type]
    second = parse_front_matter(dumped).metadata
    assert second == first, f"round trip changed metadata:\n{dumped}"


def test_dump_places_scalars_before_tables() -> None:
    dumped = dump_front_matter({"extra.in_header": True, "title": "about me"})
    assert dumped.startswith('+++\ntitle = "about me"\n'), dumped
    assert "[extra]" in dumped
    assert dumped.endswith("+++\n")


def test_dump_empty_mapping() -> None:
    assert parse_front_matter(dump_front_matter({})).metadata == {}
