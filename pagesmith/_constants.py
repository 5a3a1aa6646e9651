"""Common literal values used across pagesmith.

These constants keep delimiters, filenames, and metadata keys centralized so
the loader, renderer, builder, and tests can import the same values without
drifting. Intended for internal use within the pagesmith package.

Examples
--------
>>> from pagesmith import _constants
>>> _constants.TOML_DELIMITER
'+++'
>>> _constants.MANIFEST_FILENAME.endswith('-manifest.json')
True
"""

TOML_DELIMITER = "+++"
YAML_DELIMITER = "---"
SECTION_INDEX = "_index.md"
CONTENT_SUFFIX = ".md"
MANIFEST_FILENAME = ".pagesmith-manifest.json"
FEED_FILENAME = "atom.xml"
INTERNAL_LINK_PREFIX = "@/"
DATE_KEYS = ("date", "updated")
