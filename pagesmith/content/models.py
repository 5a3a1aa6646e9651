"""Immutable records produced by the content loader."""

from __future__ import annotations

import dataclasses as dc
import datetime as dt
import typing as typ
from types import MappingProxyType

from pagesmith._constants import DATE_KEYS
from pagesmith.config.helpers import _parse_timestamp

if typ.TYPE_CHECKING:
    from pathlib import Path

Scalar = str | int | float | bool | dt.date | dt.datetime | dt.time
MetadataValue = Scalar | tuple[Scalar, ...]
PageKind = typ.Literal["page", "post", "section"]
FrontMatterStyle = typ.Literal["toml", "yaml"]


@dc.dataclass(frozen=True, slots=True)
class FrontMatter:
    """Result of splitting a source record into metadata and body.

    Attributes
    ----------
    metadata : Mapping[str, MetadataValue]
        Flat mapping of front-matter keys; nested tables use dotted keys such
        as ``extra.in_header``.
    body : str
        Source text following the closing delimiter.
    style : {"toml", "yaml"} or None
        Delimiter style of the block, or ``None`` when the record has none.
    """

    metadata: typ.Mapping[str, MetadataValue]
    body: str
    style: FrontMatterStyle | None = None


@dc.dataclass(frozen=True, slots=True)
class Page:
    """A loaded content record keyed by its slug."""

    slug: str
    title: str
    metadata: typ.Mapping[str, MetadataValue]
    body: str
    source: Path | None = None
    kind: PageKind = "page"

    def __post_init__(self) -> None:
        if not isinstance(self.metadata, MappingProxyType):
            object.__setattr__(self, "metadata", MappingProxyType(dict(self.metadata)))

    @property
    def published(self) -> dt.datetime | None:
        """Return the first of ``date``/``updated`` as a UTC datetime."""
        for key in DATE_KEYS:
            stamp = _parse_timestamp(self.metadata.get(key))  # type: ignore[arg-type]
            if stamp is not None:
                return stamp
        return None

    @property
    def description(self) -> str:
        value = self.metadata.get("description")
        return value if isinstance(value, str) else ""

    @property
    def weight(self) -> int:
        value = self.metadata.get("weight")
        if isinstance(value, int) and not isinstance(value, bool):
            return value
        return 0

    def flag(self, key: str) -> bool:
        """Return ``True`` only when ``key`` is set to the boolean ``true``."""
        return self.metadata.get(key) is True


__all__ = [
    "FrontMatter",
    "FrontMatterStyle",
    "MetadataValue",
    "Page",
    "PageKind",
    "Scalar",
]
