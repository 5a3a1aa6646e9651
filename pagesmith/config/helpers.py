"""Utility helpers shared by the pagesmith configuration loader."""

from __future__ import annotations

import datetime as dt
import typing as typ

from pygments.styles import get_style_by_name
from pygments.util import ClassNotFound

from .models import SiteConfigError, ThemeConfig


def _optional_str(value: object | None) -> str | None:
    """Return a stripped string value or None when empty."""
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _coerce_bool(key: str, value: object) -> bool:
    """Return ``value`` as a bool, rejecting anything that is not one."""
    if isinstance(value, bool):
        return value
    msg = f"Setting '{key}' must be true or false, got {value!r}."
    raise SiteConfigError(msg)


def _coerce_positive_int(key: str, value: object) -> int:
    """Return ``value`` as a positive int or raise ``SiteConfigError``."""
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        msg = f"Setting '{key}' must be a positive integer, got {value!r}."
        raise SiteConfigError(msg)
    return value


def _coerce_pygments_style(value: object) -> str:
    """Return ``value`` if it names an installed Pygments style."""
    msg = f"Setting 'pygments_style' must name a Pygments style, got {value!r}."
    style = value.strip() if isinstance(value, str) else ""
    if not style:
        raise SiteConfigError(msg)
    try:
        get_style_by_name(style)
    except ClassNotFound as exc:
        raise SiteConfigError(msg) from exc
    return style


def _build_theme_config(payload: typ.Mapping[str, typ.Any] | None) -> ThemeConfig:
    """Build a ThemeConfig instance from the provided mapping payload."""
    base = ThemeConfig()
    if not payload:
        return base
    if not isinstance(payload, dict):
        msg = "Theme configuration must be a mapping."
        raise SiteConfigError(msg)
    return ThemeConfig(
        site_name=payload.get("site_name", base.site_name),
        tagline=payload.get("tagline", base.tagline),
        footer_note=payload.get("footer_note", base.footer_note),
    )


def _parse_timestamp(
    value: dt.datetime | dt.date | str | None,
) -> dt.datetime | None:
    """Return a timezone-aware UTC datetime parsed from ``value``, or None.

    Plain dates are placed at midnight UTC so they share a timeline with
    datetimes when pages are ordered.
    """
    match value:
        case dt.datetime():
            parsed = value
        case dt.date():
            parsed = dt.datetime.combine(value, dt.time())
        case str() as text:
            sanitized = text.strip()
            if not sanitized:
                return None
            if sanitized.endswith("Z"):
                sanitized = sanitized[:-1] + "+00:00"
            try:
                parsed = dt.datetime.fromisoformat(sanitized)
            except ValueError:
                return None
        case _:
            return None
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=dt.UTC)
    return parsed.astimezone(dt.UTC)


__all__ = [
    "_build_theme_config",
    "_coerce_bool",
    "_coerce_positive_int",
    "_coerce_pygments_style",
    "_optional_str",
    "_parse_timestamp",
]
