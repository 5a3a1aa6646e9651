r"""Split front matter from source records and convert it to a flat mapping.

Two delimiter styles are recognized at the very start of a record: ``+++``
wraps TOML (``key = value`` pairs, ISO-8601 dates, ``true``/``false``) and
``---`` wraps YAML. Nested tables are flattened into dotted keys so
``[extra]\nin_header = true`` becomes ``{"extra.in_header": True}``.

Example
-------
>>> from pagesmith.content.front_matter import parse_front_matter
>>> parsed = parse_front_matter('+++\ntitle = "about me"\n+++\nHello\n')
>>> dict(parsed.metadata), parsed.body
({'title': 'about me'}, 'Hello\n')
"""

from __future__ import annotations

import datetime as dt
import io
import tomllib
import typing as typ

import tomlkit
from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

from pagesmith._constants import TOML_DELIMITER, YAML_DELIMITER
from pagesmith.errors import MalformedFrontMatter

from .models import FrontMatter, FrontMatterStyle, MetadataValue

SCALAR_TYPES = (str, int, float, bool, dt.date, dt.datetime, dt.time)
DELIMITER_STYLES: dict[str, FrontMatterStyle] = {
    TOML_DELIMITER: "toml",
    YAML_DELIMITER: "yaml",
}


def parse_front_matter(text: str, *, source: str = "<string>") -> FrontMatter:
    """Split ``text`` into a flat metadata mapping and the remaining body.

    Parameters
    ----------
    text : str
        Raw source record.
    source : str, optional
        Slug or path reported in errors.

    Returns
    -------
    FrontMatter
        Parsed metadata, body text, and delimiter style. Records without a
        leading delimiter yield an empty mapping and the whole text as body.

    Raises
    ------
    MalformedFrontMatter
        If the block is unterminated, its syntax is invalid, or it holds
        values that are neither scalars nor lists of scalars.
    """
    clean = text.lstrip("\ufeff")
    lines = clean.splitlines(keepends=True)
    if not lines:
        return FrontMatter(metadata={}, body="")
    delimiter = lines[0].strip()
    style = DELIMITER_STYLES.get(delimiter)
    if style is None:
        return FrontMatter(metadata={}, body=clean)

    end = next(
        (idx for idx in range(1, len(lines)) if lines[idx].strip() == delimiter),
        None,
    )
    if end is None:
        msg = f"front matter opened with '{delimiter}' is never closed"
        raise MalformedFrontMatter(source, msg)

    block = "".join(lines[1:end])
    raw = _load_toml(block, source) if style == "toml" else _load_yaml(block, source)
    metadata = _flatten(raw, source=source)
    return FrontMatter(metadata=metadata, body="".join(lines[end + 1 :]), style=style)


def dump_front_matter(
    metadata: typ.Mapping[str, MetadataValue], style: FrontMatterStyle = "toml"
) -> str:
    """Serialize a flat mapping back into a delimited front-matter block.

    Dotted keys are expanded into nested tables so the output parses back
    into the same flat mapping.
    """
    nested = _unflatten(metadata)
    if style == "toml":
        document = tomlkit.document()
        _fill_toml_container(document, nested)
        payload = tomlkit.dumps(document)
        delimiter = TOML_DELIMITER
    else:
        dumper = YAML(typ="safe")
        dumper.default_flow_style = False
        stream = io.StringIO()
        dumper.dump(nested, stream)
        payload = stream.getvalue()
        delimiter = YAML_DELIMITER
    if payload and not payload.endswith("\n"):
        payload += "\n"
    return f"{delimiter}\n{payload}{delimiter}\n"


def _load_toml(block: str, source: str) -> dict[str, typ.Any]:
    try:
        return tomllib.loads(block)
    except tomllib.TOMLDecodeError as exc:
        raise MalformedFrontMatter(source, f"invalid TOML: {exc}") from exc


def _load_yaml(block: str, source: str) -> dict[str, typ.Any]:
    loader = YAML(typ="safe")
    loader.version = (1, 2)
    try:
        loaded = loader.load(block)
    except (YAMLError, ValueError) as exc:
        raise MalformedFrontMatter(source, f"invalid YAML: {exc}") from exc
    if loaded is None:
        return {}
    if not isinstance(loaded, dict):
        msg = "YAML front matter must be a mapping"
        raise MalformedFrontMatter(source, msg)
    return loaded


def _flatten(
    payload: typ.Mapping[typ.Any, typ.Any], *, source: str, prefix: str = ""
) -> dict[str, MetadataValue]:
    """Flatten nested tables into dotted keys, validating leaf values."""
    flat: dict[str, MetadataValue] = {}
    for key, value in payload.items():
        if not isinstance(key, str) or not key:
            msg = f"key {key!r} is not a non-empty string"
            raise MalformedFrontMatter(source, msg)
        dotted = f"{prefix}{key}"
        if isinstance(value, dict):
            nested = _flatten(value, source=source, prefix=f"{dotted}.")
            items = nested.items()
        else:
            items = [(dotted, _check_value(dotted, value, source))]
        for flat_key, flat_value in items:
            if flat_key in flat:
                msg = f"key '{flat_key}' is defined more than once"
                raise MalformedFrontMatter(source, msg)
            flat[flat_key] = flat_value
    return flat


def _check_value(key: str, value: object, source: str) -> MetadataValue:
    if isinstance(value, SCALAR_TYPES):
        return value  # type: ignore[return-value]
    if isinstance(value, list) and all(isinstance(v, SCALAR_TYPES) for v in value):
        return tuple(value)
    if value is None:
        msg = f"key '{key}' has no value"
    else:
        msg = f"key '{key}' must be a scalar or a list of scalars"
    raise MalformedFrontMatter(source, msg)


def _unflatten(metadata: typ.Mapping[str, MetadataValue]) -> dict[str, typ.Any]:
    nested: dict[str, typ.Any] = {}
    for key, value in metadata.items():
        *parents, leaf = key.split(".")
        target = nested
        for part in parents:
            target = target.setdefault(part, {})
        target[leaf] = list(value) if isinstance(value, tuple) else value
    return nested


def _fill_toml_container(container: typ.Any, payload: dict[str, typ.Any]) -> None:
    """Add scalars before tables so no scalar lands under a table header."""
    for key, value in payload.items():
        if not isinstance(value, dict):
            container.add(key, value)
    for key, value in payload.items():
        if isinstance(value, dict):
            table = tomlkit.table()
            _fill_toml_container(table, value)
            container.add(key, table)


__all__ = ["dump_front_matter", "parse_front_matter"]
