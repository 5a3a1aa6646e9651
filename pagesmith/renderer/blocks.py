"""Typed body blocks yielded by the block parser."""

from __future__ import annotations

import dataclasses as dc


@dc.dataclass(frozen=True, slots=True)
class Link:
    """Inline hyperlink found inside a paragraph."""

    text: str
    target: str


@dc.dataclass(frozen=True, slots=True)
class Paragraph:
    """Run of prose lines, including list items and quotes.

    Attributes
    ----------
    text : str
        Raw markup of the paragraph.
    links : tuple[Link, ...]
        Inline and autolinks in source order.
    footnote_refs : tuple[str, ...]
        Footnote identifiers referenced outside inline code.
    """

    text: str
    links: tuple[Link, ...] = ()
    footnote_refs: tuple[str, ...] = ()


@dc.dataclass(frozen=True, slots=True)
class Heading:
    level: int
    text: str
    anchor: str
    footnote_refs: tuple[str, ...] = ()


@dc.dataclass(frozen=True, slots=True)
class CodeBlock:
    """Fenced code kept exactly as written."""

    language: str | None
    code: str


@dc.dataclass(frozen=True, slots=True)
class LinkReference:
    """Reference-style link definition (``[label]: target``)."""

    label: str
    target: str


@dc.dataclass(frozen=True, slots=True)
class Table:
    header: tuple[str, ...]
    rows: tuple[tuple[str, ...], ...]
    footnote_refs: tuple[str, ...] = ()


@dc.dataclass(frozen=True, slots=True)
class FootnoteDefinition:
    identifier: str
    text: str
    footnote_refs: tuple[str, ...] = ()


@dc.dataclass(frozen=True, slots=True)
class Aside:
    """Raised note delimited by ``{% aside() %}`` and ``{% end %}``."""

    text: str
    blocks: tuple[Block, ...] = ()


Block = (
    Paragraph | Heading | CodeBlock | LinkReference | Table | FootnoteDefinition | Aside
)

__all__ = [
    "Aside",
    "Block",
    "CodeBlock",
    "FootnoteDefinition",
    "Heading",
    "Link",
    "LinkReference",
    "Paragraph",
    "Table",
]
