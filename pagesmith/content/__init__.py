"""Load source records and their front matter into immutable pages."""

from .front_matter import dump_front_matter, parse_front_matter
from .models import FrontMatter, Page
from .store import ContentStore, derive_slug, load_page

__all__ = [
    "ContentStore",
    "FrontMatter",
    "Page",
    "derive_slug",
    "dump_front_matter",
    "load_page",
    "parse_front_matter",
]
