"""Load site configuration YAML into typed dataclasses."""

from __future__ import annotations

import typing as typ
from pathlib import Path

from ruamel.yaml import YAML

from .helpers import (
    _build_theme_config,
    _coerce_bool,
    _coerce_positive_int,
    _coerce_pygments_style,
    _optional_str,
)
from .models import SiteConfig, SiteConfigError

DEFAULT_CONFIG = Path("site.yaml")


def load_site_config(path: Path) -> SiteConfig:
    """Load the YAML configuration describing the site and its content layout.

    Parameters
    ----------
    path : Path
        Filesystem path to the YAML configuration file (for example,
        ``site.yaml``). Relative ``content_dir`` and ``output_dir`` values are
        resolved against the directory holding this file.

    Returns
    -------
    SiteConfig
        Parsed site configuration with defaults applied for omitted keys.

    Raises
    ------
    FileNotFoundError
        If the configuration file does not exist at ``path``.
    TypeError
        If the top-level YAML structure is not a mapping.
    SiteConfigError
        If a setting has the wrong type (for example, a non-boolean ``feed``).
    YAMLError
        If the YAML content cannot be parsed by the underlying loader.

    Examples
    --------
    >>> from pathlib import Path
    >>> from pagesmith.config import load_site_config
    >>> config = load_site_config(Path("site.yaml"))  # doctest: +SKIP
    >>> config.blog_section  # doctest: +SKIP
    'blog'
    """
    if not path.exists():
        msg = f"Configuration file '{path}' not found."
        raise FileNotFoundError(msg)

    loader = YAML(typ="safe")
    loader.version = (1, 2)
    with path.open("r", encoding="utf-8") as handle:
        loaded = loader.load(handle) or {}
    if not isinstance(loaded, dict):
        msg = "Top-level YAML structure must be a mapping."
        raise TypeError(msg)
    return _build_site_config(dict(loaded), root=path.parent)


def default_site_config(root: Path | None = None) -> SiteConfig:
    """Return the configuration used when no ``site.yaml`` is present."""
    return _build_site_config({}, root=root or Path.cwd())


def _build_site_config(raw: typ.Mapping[str, typ.Any], *, root: Path) -> SiteConfig:
    """Build a SiteConfig from a raw mapping, resolving paths against ``root``."""
    base = SiteConfig()
    title = _optional_str(raw.get("title")) or base.title
    blog_section = str(raw.get("blog_section", base.blog_section)).strip("/")
    if not blog_section:
        msg = "Setting 'blog_section' must name a content directory."
        raise SiteConfigError(msg)

    return SiteConfig(
        title=title,
        base_url=_optional_str(raw.get("base_url")) or base.base_url,
        description=_optional_str(raw.get("description")) or base.description,
        author=_optional_str(raw.get("author")),
        content_dir=_resolve_path(root, raw.get("content_dir"), base.content_dir),
        output_dir=_resolve_path(root, raw.get("output_dir"), base.output_dir),
        blog_section=blog_section,
        pygments_style=_coerce_pygments_style(
            raw.get("pygments_style", base.pygments_style)
        ),
        feed=_coerce_bool("feed", raw.get("feed", base.feed)),
        feed_limit=_coerce_positive_int(
            "feed_limit", raw.get("feed_limit", base.feed_limit)
        ),
        theme=_build_theme_config(raw.get("theme")),
    )


def _resolve_path(root: Path, value: object | None, default: Path) -> Path:
    """Return ``value`` (or ``default``) as a path anchored at ``root``."""
    candidate = Path(str(value)) if value else default
    if candidate.is_absolute():
        return candidate
    return root / candidate


__all__ = ["DEFAULT_CONFIG", "default_site_config", "load_site_config"]
