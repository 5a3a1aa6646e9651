"""Contract shared by body rendering strategies."""

from __future__ import annotations

import typing as typ

if typ.TYPE_CHECKING:
    from .parser import BlockSequence


class BodyRenderer(typ.Protocol):
    """Turn page bodies into typed blocks and display HTML.

    ``blocks`` must be free of side effects so a body can be re-rendered from
    the same source any number of times. ``render`` receives ``link_map`` so
    internal links can be resolved once every page is known.
    """

    @property
    def stylesheet(self) -> str: ...

    def blocks(self, body: str, *, location: str = "<body>") -> BlockSequence: ...

    def render(
        self,
        body: str,
        *,
        location: str = "<body>",
        link_map: typ.Mapping[str, str] | None = None,
    ) -> str: ...


__all__ = ["BodyRenderer"]
