"""Utilities for turning page bodies into typed blocks and display HTML."""

from .aside import AsideExtension
from .base import BodyRenderer
from .blocks import (
    Aside,
    Block,
    CodeBlock,
    FootnoteDefinition,
    Heading,
    Link,
    LinkReference,
    Paragraph,
    Table,
)
from .html import HtmlContentRenderer
from .link_rewriter import InternalLinkExtension
from .parser import BlockSequence, render_blocks

__all__ = [
    "Aside",
    "AsideExtension",
    "Block",
    "BlockSequence",
    "BodyRenderer",
    "CodeBlock",
    "FootnoteDefinition",
    "Heading",
    "HtmlContentRenderer",
    "InternalLinkExtension",
    "Link",
    "LinkReference",
    "Paragraph",
    "Table",
    "render_blocks",
]
