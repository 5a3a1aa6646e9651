"""Build a personal static site from Markdown records with front matter.

This package exposes the CLI entry points used by ``pages build`` and
``pages check`` together with the builder they drive.

Exports
-------
- ``app``: Cyclopts application entry for subcommands.
- ``main``: Convenience function that invokes the Cyclopts app.
- ``SiteBuilder``: Loads, validates, assembles, and writes a site.

Examples
--------
>>> from pagesmith import main
>>> main()  # doctest: +SKIP
"""

from __future__ import annotations

from .builder import SiteBuilder
from .cli import app, main

__all__ = ["SiteBuilder", "app", "main"]
