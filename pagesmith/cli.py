"""Cyclopts CLI entrypoint for building and checking the static site.

The ``pages`` console script defined here renders every Markdown record in
the content directory to static HTML (``pages build``) or validates the
content without writing anything (``pages check``). Content errors abort the
command with a message naming the failing page and the error kind, and a
non-zero exit status.

Examples
--------
Build the site described by ``site.yaml`` in the current directory:

>>> from pagesmith.cli import main
>>> main()  # doctest: +SKIP

Build drafts into a scratch directory with four worker threads:

>>> from pagesmith.cli import app
>>> app(
...     ["build", "--drafts", "--jobs", "4", "--output-dir", "preview"]
... )  # doctest: +SKIP
"""

from __future__ import annotations

import logging
import sys
import typing as typ
from pathlib import Path

import cyclopts
from cyclopts import App, Parameter

from .builder import SiteBuilder
from .config import (
    DEFAULT_CONFIG,
    SiteConfig,
    SiteConfigError,
    default_site_config,
    load_site_config,
)
from .errors import ContentError

app = App(name="pages", config=cyclopts.config.Env("PAGESMITH_", command=False))  # type: ignore[unknown-argument]


def _format_path(path: Path) -> str:
    """Return a cwd-relative path when possible, otherwise the absolute path."""
    if path.is_absolute():
        try:
            return str(path.relative_to(Path.cwd()))
        except ValueError:
            return str(path)
    return str(path)


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


def _resolve_config(
    config: Path, content_dir: Path | None, output_dir: Path | None
) -> SiteConfig:
    """Load ``config`` (or defaults if the default file is absent) with overrides."""
    if config == DEFAULT_CONFIG and not config.exists():
        site_config = default_site_config()
    else:
        site_config = load_site_config(config)
    if content_dir is not None:
        site_config.content_dir = content_dir
    if output_dir is not None:
        site_config.output_dir = output_dir
    return site_config


def _fail(exc: Exception) -> typ.NoReturn:
    print(f"error: {exc}", file=sys.stderr)
    raise SystemExit(1) from exc


@app.command(help="Render every content page into static HTML.")
def build(
    *,
    config: typ.Annotated[
        Path, Parameter(help="Path to site config", env_var="PAGESMITH_CONFIG")
    ] = DEFAULT_CONFIG,
    content_dir: typ.Annotated[
        Path | None,
        Parameter(help="Override the content folder", env_var="PAGESMITH_CONTENT_DIR"),
    ] = None,
    output_dir: typ.Annotated[
        Path | None,
        Parameter(help="Override the output folder", env_var="PAGESMITH_OUTPUT_DIR"),
    ] = None,
    drafts: typ.Annotated[bool, Parameter(help="Include draft pages")] = False,
    jobs: typ.Annotated[
        int, Parameter(help="Worker threads for rendering pages")
    ] = 1,
    verbose: typ.Annotated[bool, Parameter(help="Log per-page progress")] = False,
) -> None:
    """Build the static site for the requested configuration.

    Parameters
    ----------
    config : Path, optional
        Path to the ``site.yaml`` configuration file (overridable via
        ``PAGESMITH_CONFIG``). When the default file is missing, built-in
        defaults are used.
    content_dir : Path or None, optional
        Override the directory holding Markdown records.
    output_dir : Path or None, optional
        Override the directory receiving the HTML bundle.
    drafts : bool, optional
        Render pages whose front matter sets ``draft = true``.
    jobs : int, optional
        Number of worker threads used to load and render pages.
    verbose : bool, optional
        Emit debug logging for every page.

    Returns
    -------
    None
        Writes rendered artifacts and prints the generated paths.

    Raises
    ------
    SystemExit
        With status 1 when the configuration or any page is invalid.
    """
    _configure_logging(verbose)
    try:
        site_config = _resolve_config(config, content_dir, output_dir)
        written = SiteBuilder(site_config, include_drafts=drafts, jobs=jobs).run()
    except (ContentError, SiteConfigError, FileNotFoundError) as exc:
        _fail(exc)
    for path in written:
        print(f"wrote {_format_path(path)}")


@app.command(help="Validate content without writing any output.")
def check(
    *,
    config: typ.Annotated[
        Path, Parameter(help="Path to site config", env_var="PAGESMITH_CONFIG")
    ] = DEFAULT_CONFIG,
    content_dir: typ.Annotated[
        Path | None,
        Parameter(help="Override the content folder", env_var="PAGESMITH_CONTENT_DIR"),
    ] = None,
    drafts: typ.Annotated[bool, Parameter(help="Include draft pages")] = False,
    verbose: typ.Annotated[bool, Parameter(help="Log per-page progress")] = False,
) -> None:
    """Load, validate, and assemble the site, reporting the page count."""
    _configure_logging(verbose)
    try:
        site_config = _resolve_config(config, content_dir, None)
        site = SiteBuilder(site_config, include_drafts=drafts).check()
    except (ContentError, SiteConfigError, FileNotFoundError) as exc:
        _fail(exc)
    print(f"ok: {len(site)} pages, {len(site.posts)} posts")


def main() -> None:
    """Invoke the Cyclopts application that powers the `pages` console command.

    Examples
    --------
    >>> main()  # doctest: +SKIP
    """
    app()


if __name__ == "__main__":  # pragma: no cover - manual invocation helper
    main()
