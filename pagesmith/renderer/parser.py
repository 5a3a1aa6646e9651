r"""Scan Markdown body text into a lazy sequence of typed blocks.

The scanner is line based and deliberately small: it recognizes the block
shapes that matter for validating and indexing a page (headings, fenced and
indented code, pipe tables, footnotes, reference links, asides) and folds
everything else into paragraphs. HTML output is produced separately by
:class:`~pagesmith.renderer.html.HtmlContentRenderer`.

Example
-------
>>> from pagesmith.renderer.parser import render_blocks
>>> blocks = list(render_blocks("# Title\n\nBody[^1]\n\n[^1]: Note\n"))
>>> [type(block).__name__ for block in blocks]
['Heading', 'Paragraph', 'FootnoteDefinition']
"""

from __future__ import annotations

import logging
import re
import typing as typ

from pagesmith.errors import DuplicateFootnote, MalformedBody, UnresolvedFootnote

from .aside import ASIDE_CLOSE_PATTERN, ASIDE_OPEN_PATTERN
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

logger = logging.getLogger(__name__)

FENCE_OPEN_PATTERN = re.compile(
    r"^(?P<indent>[ \t]*)(?P<fence>`{3,}|~{3,})(?P<info>[^`]*)$"
)
HEADING_PATTERN = re.compile(r"^[ ]{0,3}(#{1,6})(?:[ \t]+(.*?))?(?:[ \t]+#+)?[ \t]*$")
FOOTNOTE_DEF_PATTERN = re.compile(r"^[ ]{0,3}\[\^([^\]\s]+)\]:[ \t]?(.*)$")
LINK_REF_PATTERN = re.compile(
    r"^[ ]{0,3}\[(?!\^)([^\]]+)\]:[ \t]*<?([^\s>]+)>?(?:[ \t]+.*)?$"
)
TABLE_SEPARATOR_PATTERN = re.compile(r"^\s*\|?\s*:?-+:?\s*(?:\|\s*:?-+:?\s*)*\|?\s*$")
FOOTNOTE_REF_PATTERN = re.compile(r"\[\^([^\]\s]+)\]")
INLINE_CODE_PATTERN = re.compile(r"(`+)(?:(?!\1).)+?\1", re.DOTALL)
INLINE_LINK_PATTERN = re.compile(
    r"(?<!!)\[([^\]]+)\]\(\s*<?([^\s)>]+)>?(?:\s+[\"'(][^)]*[\"')])?\s*\)"
)
AUTOLINK_PATTERN = re.compile(r"<((?:https?|mailto):[^>\s]+)>")
CELL_SPLIT_PATTERN = re.compile(r"(?<!\\)\|")
INDENTED_CODE_PATTERN = re.compile(r"^(?: {4}|\t)")
LIST_ITEM_PATTERN = re.compile(r"^[ ]{0,3}(?:[-*+]|\d+[.)])[ \t]+")


class BlockSequence:
    """Restartable view over the typed blocks of a body.

    Every iteration rescans the source, so the sequence can be consumed any
    number of times with identical results. Consuming it to the end raises
    :class:`UnresolvedFootnote` when a reference has no definition and
    :class:`DuplicateFootnote` as soon as an identifier is defined twice.
    """

    def __init__(self, body: str, *, location: str = "<body>") -> None:
        self.body = body
        self.location = location

    def __iter__(self) -> typ.Iterator[Block]:
        lines = self.body.splitlines()
        referenced: dict[str, None] = {}
        defined: dict[str, None] = {}
        for block in _scan(lines, self.location, set()):
            for nested in _walk(block):
                for ident in getattr(nested, "footnote_refs", ()):
                    referenced.setdefault(ident)
                if isinstance(nested, FootnoteDefinition):
                    if nested.identifier in defined:
                        dup = nested.identifier
                        msg = f"footnote [^{dup}] is defined more than once"
                        raise DuplicateFootnote(self.location, msg)
                    defined[nested.identifier] = None
            yield block

        missing = [ident for ident in referenced if ident not in defined]
        if missing:
            names = ", ".join(f"[^{ident}]" for ident in missing)
            raise UnresolvedFootnote(self.location, f"no definition for {names}")
        unused = [ident for ident in defined if ident not in referenced]
        if unused:
            logger.debug("%s: unreferenced footnotes %s", self.location, unused)

    @property
    def footnotes(self) -> frozenset[str]:
        """Return the defined footnote identifiers, validating references."""
        return frozenset(
            nested.identifier
            for block in self
            for nested in _walk(block)
            if isinstance(nested, FootnoteDefinition)
        )


def render_blocks(body: str, *, location: str = "<body>") -> BlockSequence:
    """Return the lazy block sequence for ``body``."""
    return BlockSequence(body, location=location)


def code_languages(body: str) -> list[str]:
    """Return the language of every code block in document order.

    Blocks nested in asides are included; indented blocks and unlabelled
    fences report ``"text"``. Footnotes are not validated here.
    """
    return [
        nested.language or "text"
        for block in _scan(body.splitlines(), "<body>", set())
        for nested in _walk(block)
        if isinstance(nested, CodeBlock)
    ]


def fence_language(info: str) -> str | None:
    """Return the language named by a fence info string such as ``rust,ignore``."""
    return re.split(r"[\s,{]", info.strip(), maxsplit=1)[0] or None


def _walk(block: Block) -> typ.Iterator[Block]:
    yield block
    if isinstance(block, Aside):
        for child in block.blocks:
            yield from _walk(child)


def _scan(
    lines: list[str], location: str, used_anchors: set[str]
) -> typ.Iterator[Block]:
    """Yield blocks for ``lines``; ``used_anchors`` keeps heading ids unique."""
    paragraph: list[str] = []
    in_list = False
    idx = 0
    total = len(lines)

    def _flush() -> typ.Iterator[Block]:
        if paragraph:
            yield _build_paragraph("\n".join(paragraph))
            paragraph.clear()

    while idx < total:
        line = lines[idx]
        stripped = line.strip()

        if not stripped:
            yield from _flush()
            idx += 1
            continue

        if not line[:1].isspace() and not LIST_ITEM_PATTERN.match(line):
            in_list = False

        fence = FENCE_OPEN_PATTERN.match(line)
        if fence:
            yield from _flush()
            block, idx = _collect_code(lines, idx, fence)
            yield block
            continue

        if not paragraph and not in_list and INDENTED_CODE_PATTERN.match(line):
            block, idx = _collect_indented_code(lines, idx)
            yield block
            continue

        if ASIDE_OPEN_PATTERN.match(line):
            yield from _flush()
            inner, idx = _collect_aside(lines, idx + 1, location)
            children = tuple(_scan(inner, location, used_anchors))
            yield Aside(text="\n".join(inner).strip("\n"), blocks=children)
            continue

        if ASIDE_CLOSE_PATTERN.match(line):
            msg = f"line {idx + 1}: '{stripped}' has no matching aside"
            raise MalformedBody(location, msg)

        heading = HEADING_PATTERN.match(line)
        if heading:
            yield from _flush()
            yield _build_heading(heading, used_anchors)
            idx += 1
            continue

        footnote = FOOTNOTE_DEF_PATTERN.match(line)
        if footnote:
            yield from _flush()
            block, idx = _collect_footnote(lines, idx, footnote)
            yield block
            continue

        reference = LINK_REF_PATTERN.match(line)
        if reference and not paragraph:
            yield LinkReference(
                label=reference.group(1).strip(), target=reference.group(2)
            )
            idx += 1
            continue

        if not paragraph and _starts_table(lines, idx):
            block, idx = _collect_table(lines, idx)
            yield block
            continue

        if LIST_ITEM_PATTERN.match(line):
            in_list = True
        paragraph.append(line)
        idx += 1

    yield from _flush()


def _collect_code(
    lines: list[str], start: int, match: re.Match[str]
) -> tuple[CodeBlock, int]:
    """Collect a fenced block verbatim; an unclosed fence runs to the end."""
    indent = match.group("indent")
    fence = match.group("fence")
    language = fence_language(match.group("info"))
    close = re.compile(rf"^[ \t]*{re.escape(fence[0])}{{{len(fence)},}}[ \t]*$")
    body: list[str] = []
    idx = start + 1
    while idx < len(lines):
        line = lines[idx]
        if close.match(line):
            idx += 1
            break
        body.append(line[len(indent) :] if line.startswith(indent) else line.lstrip())
        idx += 1
    return CodeBlock(language=language, code="\n".join(body)), idx


def _collect_indented_code(lines: list[str], start: int) -> tuple[CodeBlock, int]:
    """Collect an indented code block; blank lines inside it are kept."""
    body: list[str] = []
    idx = start
    while idx < len(lines):
        line = lines[idx]
        if line.strip():
            if not INDENTED_CODE_PATTERN.match(line):
                break
            body.append(line[1:] if line.startswith("\t") else line[4:])
        else:
            body.append("")
        idx += 1
    while body and not body[-1]:
        body.pop()
    return CodeBlock(language=None, code="\n".join(body)), idx


def _collect_aside(
    lines: list[str], start: int, location: str
) -> tuple[list[str], int]:
    """Return the lines inside an aside and the index after its end marker."""
    depth = 1
    fence: str | None = None
    idx = start
    while idx < len(lines):
        line = lines[idx]
        if fence is not None:
            if line.strip().startswith(fence) and not line.strip().strip(fence[0]):
                fence = None
        elif opened := FENCE_OPEN_PATTERN.match(line):
            fence = opened.group("fence")
        elif ASIDE_OPEN_PATTERN.match(line):
            depth += 1
        elif ASIDE_CLOSE_PATTERN.match(line):
            depth -= 1
            if depth == 0:
                return lines[start:idx], idx + 1
        idx += 1
    msg = f"line {start}: aside is never closed with '{{% end %}}'"
    raise MalformedBody(location, msg)


def _collect_footnote(
    lines: list[str], start: int, match: re.Match[str]
) -> tuple[FootnoteDefinition, int]:
    """Collect a footnote definition plus its indented continuation lines."""
    body = [match.group(2)]
    idx = start + 1
    while idx < len(lines):
        line = lines[idx]
        if not line.strip():
            ahead = idx
            while ahead < len(lines) and not lines[ahead].strip():
                ahead += 1
            if ahead < len(lines) and lines[ahead][:1] in (" ", "\t"):
                body.extend("" for _ in range(ahead - idx))
                idx = ahead
                continue
            break
        if line[:1] not in (" ", "\t"):
            break
        body.append(line.strip())
        idx += 1
    text = "\n".join(body).strip()
    return (
        FootnoteDefinition(
            identifier=match.group(1), text=text, footnote_refs=_footnote_refs(text)
        ),
        idx,
    )


def _starts_table(lines: list[str], idx: int) -> bool:
    if idx + 1 >= len(lines) or "|" not in lines[idx]:
        return False
    separator = lines[idx + 1]
    return "|" in separator and bool(TABLE_SEPARATOR_PATTERN.match(separator))


def _collect_table(lines: list[str], start: int) -> tuple[Table, int]:
    header = _split_row(lines[start])
    rows: list[tuple[str, ...]] = []
    idx = start + 2
    while idx < len(lines) and lines[idx].strip() and "|" in lines[idx]:
        rows.append(_split_row(lines[idx]))
        idx += 1
    cells = " ".join([*header, *(cell for row in rows for cell in row)])
    table = Table(header=header, rows=tuple(rows), footnote_refs=_footnote_refs(cells))
    return table, idx


def _split_row(line: str) -> tuple[str, ...]:
    text = line.strip()
    if text.startswith("|"):
        text = text[1:]
    if text.endswith("|") and not text.endswith("\\|"):
        text = text[:-1]
    return tuple(cell.strip() for cell in CELL_SPLIT_PATTERN.split(text))


def _build_heading(match: re.Match[str], used: set[str]) -> Heading:
    text = (match.group(2) or "").strip()
    plain = FOOTNOTE_REF_PATTERN.sub("", INLINE_CODE_PATTERN.sub(_code_text, text))
    base = re.sub(r"[^a-z0-9]+", "-", plain.lower()).strip("-") or "section"
    anchor = base
    suffix = 2
    while anchor in used:
        anchor = f"{base}-{suffix}"
        suffix += 1
    used.add(anchor)
    return Heading(
        level=len(match.group(1)),
        text=text,
        anchor=anchor,
        footnote_refs=_footnote_refs(text),
    )


def _build_paragraph(text: str) -> Paragraph:
    prose = INLINE_CODE_PATTERN.sub(" ", text)
    found: list[tuple[int, Link]] = [
        (m.start(), Link(text=m.group(1), target=m.group(2)))
        for m in INLINE_LINK_PATTERN.finditer(prose)
    ]
    found.extend(
        (m.start(), Link(text=m.group(1), target=m.group(1)))
        for m in AUTOLINK_PATTERN.finditer(prose)
    )
    links = tuple(link for _, link in sorted(found, key=lambda item: item[0]))
    return Paragraph(text=text, links=links, footnote_refs=_footnote_refs(text))


def _footnote_refs(text: str) -> tuple[str, ...]:
    """Return footnote ids referenced in ``text``, ignoring inline code."""
    prose = INLINE_CODE_PATTERN.sub(" ", text)
    return tuple(dict.fromkeys(FOOTNOTE_REF_PATTERN.findall(prose)))


def _code_text(match: re.Match[str]) -> str:
    return match.group(0).strip("`")


__all__ = [
    "FENCE_OPEN_PATTERN",
    "BlockSequence",
    "code_languages",
    "fence_language",
    "render_blocks",
]
