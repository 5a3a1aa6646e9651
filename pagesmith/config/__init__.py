"""Load and validate site configuration YAML for pagesmith builds.

This subpackage parses the project's ``site.yaml`` file, applies defaults for
omitted settings, resolves content and output directories, and produces typed
dataclasses (:class:`SiteConfig`, :class:`ThemeConfig`) that the builder
consumes. The primary entry point is :func:`load_site_config`.

Examples
--------
>>> from pathlib import Path
>>> from pagesmith.config import load_site_config
>>> site = load_site_config(Path("site.yaml"))  # doctest: +SKIP
>>> site.page_url("about")  # doctest: +SKIP
'https://example.com/about/'
"""

from .loader import DEFAULT_CONFIG, default_site_config, load_site_config
from .models import SiteConfig, SiteConfigError, ThemeConfig

__all__ = [
    "DEFAULT_CONFIG",
    "SiteConfig",
    "SiteConfigError",
    "ThemeConfig",
    "default_site_config",
    "load_site_config",
]
