"""Typed dataclasses describing pagesmith site configuration structures."""

from __future__ import annotations

import dataclasses as dc
from pathlib import Path


class SiteConfigError(ValueError):
    """Raised when the site configuration is invalid or incomplete."""


@dc.dataclass(slots=True)
class ThemeConfig:
    """Visual theming applied to generated pages."""

    site_name: str = "pagesmith"
    tagline: str = ""
    footer_note: str = ""


@dc.dataclass(slots=True)
class SiteConfig:
    """A fully resolved site definition sourced from YAML config."""

    title: str = "pagesmith"
    base_url: str = "/"
    description: str = ""
    author: str | None = None
    content_dir: Path = Path("content")
    output_dir: Path = Path("public")
    blog_section: str = "blog"
    pygments_style: str = "monokai"
    feed: bool = True
    feed_limit: int = 20
    theme: ThemeConfig = dc.field(default_factory=ThemeConfig)

    def page_url(self, slug: str) -> str:
        """Return the public URL for ``slug`` under the configured base URL."""
        base = self.base_url.rstrip("/")
        if not slug:
            return f"{base}/"
        return f"{base}/{slug}/"


__all__ = ["SiteConfig", "SiteConfigError", "ThemeConfig"]
